from __future__ import annotations

import os

import pytest

# partbom.database builds its engine at import time; never point it at the dev file.
os.environ.setdefault("PARTBOM_DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("PARTBOM_ENVIRONMENT", "test")


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "cli: exercises the typer command line against an in-memory database",
    )
