"""
Pytest fixtures for the HR payroll test suite.

Provides:
- Structured logging configuration and a JSON log capture fixture
- A deterministic clock
- An in-memory SQLite database with the payroll tables
- Employee builders shared by engine and module tests
"""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from hr_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from hr_kernel.domain.clock import DeterministicClock
from hr_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from hr_modules.payroll.models import Employee

CALCULATION_DATE = datetime(2024, 5, 31, 18, 0, tzinfo=timezone.utc)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture hr_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            calculate_gosi(...)
            logs = captured_logs()
            assert any(r["message"] == "HR_ENGINE_TRACE" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("hr_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Time
# =============================================================================


@pytest.fixture
def calculation_date() -> datetime:
    return CALCULATION_DATE


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(CALCULATION_DATE)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite database with all payroll tables."""
    engine = init_engine_from_url("sqlite://")
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine):
    session = get_session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def actor_id():
    return uuid4()


# =============================================================================
# Builders
# =============================================================================


def make_employee(**overrides) -> Employee:
    """Saudi employee on 10,000 basic / 3,000 housing / 500 transport."""
    fields = {
        "id": str(uuid4()),
        "first_name": "Faisal",
        "last_name": "Al-Harbi",
        "basic_salary": Decimal("10000"),
        "housing_allowance": Decimal("3000"),
        "transport_allowance": Decimal("500"),
        "nationality": "Saudi",
        "gosi_applicable": True,
    }
    fields.update(overrides)
    return Employee(**fields)


@pytest.fixture
def employee_factory():
    return make_employee


@pytest.fixture
def saudi_employee() -> Employee:
    return make_employee()


@pytest.fixture
def expat_employee() -> Employee:
    return make_employee(first_name="Ravi", last_name="Menon", nationality="Indian")
