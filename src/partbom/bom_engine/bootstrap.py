from __future__ import annotations

"""
BOM engine bootstrap helpers.

SQLAlchemy only creates tables for models that have been imported (registered) in the
metadata. `create_all()` and the Alembic environment both call `import_all_models()`
so the CLI, tests and migrations see the same table set.
"""


def import_all_models() -> None:
    from partbom.models import audit as _audit  # noqa: F401
    from partbom.models import part as _part  # noqa: F401
    from partbom.models import sequence as _sequence  # noqa: F401
