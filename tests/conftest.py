"""
Pytest fixtures for the compliance gate test suite.

Provides:
- An in-memory SQLite database per test (schema created from the models)
- A DeterministicClock shared by every service under test
- Kernel services bound to one session, and a RegulatoryCheck facade
- Captured structured logs

Nothing here needs an external database: SQLite runs in-process, and the
StaticPool in build_engine makes every session see the same database.
"""

import json
import logging
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session, sessionmaker

from compliance_kernel.db.engine import build_engine, create_tables
from compliance_kernel.domain.clock import DeterministicClock
from compliance_kernel.logging_config import LogContext, StructuredFormatter, configure_logging
from compliance_kernel.services.approval_service import ApprovalService
from compliance_kernel.services.jurisdiction_service import JurisdictionService
from compliance_kernel.services.rule_service import RuleService
from compliance_kernel.services.settings_service import SettingsService
from compliance_services.regulatory_check import RegulatoryCheck

ADMIN = "GADMIN"
GOVERNANCE = "GGOVERNANCE"
CARBON_ASSET_CONTRACT = "CCARBONASSET"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    configure_logging(level=logging.DEBUG, force=True)


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture compliance_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, gate):
            gate.initialize(...)
            logs = captured_logs()
            assert any(r["message"] == "engine_initialized" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("compliance_kernel")
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
# Database fixtures
# =============================================================================


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database with all tables."""
    eng = build_engine("sqlite://")
    create_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def session(session_factory) -> Generator[Session, None, None]:
    """A single session; services flush into it, the test never commits."""
    sess = session_factory()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock()


# =============================================================================
# Kernel service fixtures
# =============================================================================


@pytest.fixture
def settings_service(session, clock) -> SettingsService:
    """SettingsService with principals already initialized."""
    service = SettingsService(session, clock)
    service.initialize(ADMIN, GOVERNANCE, CARBON_ASSET_CONTRACT)
    return service


@pytest.fixture
def rule_service(session, settings_service) -> RuleService:
    return RuleService(session, settings_service)


@pytest.fixture
def jurisdiction_service(session, settings_service) -> JurisdictionService:
    return JurisdictionService(session, settings_service)


@pytest.fixture
def approval_service(session, clock) -> ApprovalService:
    return ApprovalService(session, clock)


# =============================================================================
# Facade fixtures
# =============================================================================


@pytest.fixture
def gate(session_factory, clock) -> RegulatoryCheck:
    """Uninitialized gate."""
    return RegulatoryCheck(session_factory, clock)


@pytest.fixture
def initialized_gate(gate) -> RegulatoryCheck:
    gate.initialize(ADMIN, GOVERNANCE, CARBON_ASSET_CONTRACT)
    return gate
