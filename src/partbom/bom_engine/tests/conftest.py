import pytest

from partbom.config import get_settings
from partbom.database import create_db_engine, create_session_factory
from partbom.models import Base


@pytest.fixture()
def engine():
    engine = create_db_engine(get_settings().TEST_DATABASE_URL)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture()
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
