"""
RegulatoryCheck -- the compliance gate's public surface.

Contract:
    Composes the kernel services and the pure validation engine behind one
    object.  Every public method runs in its own ``session_scope``: the
    whole operation commits, or nothing does.

Architecture: compliance_services (top-level).  May import from
    compliance_kernel and compliance_engines.

Invariants enforced:
    RC-1 -- Clock injection: every service receives the gate's Clock.
    RC-2 -- Atomicity: one transaction per public call; a raised error
            leaves the store exactly as it was.
    RC-3 -- validate_transaction is read-only and never raises for a
            valid operation kind.

Caller identity:
    ``caller`` and ``authority`` arguments are principals that the host
    application has already authenticated.  The gate only checks that
    the authenticated principal holds the required role.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from uuid import uuid4

from sqlalchemy.orm import Session, sessionmaker

from compliance_engines.validation import validate_transaction as evaluate_transaction
from compliance_kernel.db.engine import (
    build_engine,
    create_tables,
    database_url_from_env,
    session_scope,
)
from compliance_kernel.domain.approval import ApprovalState, PendingApproval
from compliance_kernel.domain.clock import Clock, SystemClock
from compliance_kernel.domain.rules import (
    JurisdictionRule,
    OperationType,
    ValidationResult,
)
from compliance_kernel.logging_config import LogContext, get_logger
from compliance_kernel.selectors.approval_selector import ApprovalSelector
from compliance_kernel.selectors.jurisdiction_selector import JurisdictionSelector
from compliance_kernel.selectors.rule_selector import RuleSelector
from compliance_kernel.selectors.settings_selector import EngineSettings, SettingsSelector
from compliance_kernel.services.approval_service import ApprovalKey, ApprovalService
from compliance_kernel.services.jurisdiction_service import JurisdictionService
from compliance_kernel.services.rule_service import RuleService
from compliance_kernel.services.settings_service import SettingsService

logger = get_logger("services.regulatory_check")


@dataclass
class UnitOfWork:
    """Services bound to one session."""

    session: Session
    settings: SettingsService
    rules: RuleService
    jurisdictions: JurisdictionService
    approvals: ApprovalService
    approval_reader: ApprovalSelector
    rule_reader: RuleSelector
    jurisdiction_reader: JurisdictionSelector
    settings_reader: SettingsSelector


class RegulatoryCheck:
    """Jurisdiction-aware compliance gate for asset transfers and retirements.

    Contract:
        - ``from_url()`` / ``from_env()`` build a gate with its own engine
          and create the schema.
        - The constructor accepts an existing session factory, so tests and
          host applications can share a database.

    Non-goals:
        - Does NOT authenticate callers.
        - Does NOT move or retire assets; it only rules on them.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        clock: Clock | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock or SystemClock()

    @classmethod
    def from_url(
        cls,
        database_url: str,
        clock: Clock | None = None,
        create_schema: bool = True,
    ) -> RegulatoryCheck:
        engine = build_engine(database_url)
        if create_schema:
            create_tables(engine)
        return cls(sessionmaker(bind=engine, expire_on_commit=False), clock)

    @classmethod
    def from_env(cls, clock: Clock | None = None) -> RegulatoryCheck:
        """Gate backed by COMPLIANCE_DATABASE_URL (in-memory SQLite if unset)."""
        return cls.from_url(database_url_from_env(), clock)

    @property
    def clock(self) -> Clock:
        return self._clock

    @contextmanager
    def unit_of_work(self) -> Iterator[UnitOfWork]:
        """Kernel services sharing one transaction.

        Multi-step callers (rulebook bootstrap) use this directly so the
        whole sequence commits or rolls back together.
        """
        with LogContext.bind(correlation_id=uuid4().hex):
            with session_scope(self._session_factory) as session:
                settings = SettingsService(session, self._clock)
                yield UnitOfWork(
                    session=session,
                    settings=settings,
                    rules=RuleService(session, settings),
                    jurisdictions=JurisdictionService(session, settings),
                    approvals=ApprovalService(session, self._clock),
                    approval_reader=ApprovalSelector(session),
                    rule_reader=RuleSelector(session),
                    jurisdiction_reader=JurisdictionSelector(session),
                    settings_reader=SettingsSelector(session),
                )

    # -- Lifecycle ---------------------------------------------------------

    def initialize(
        self,
        admin: str,
        governance: str,
        carbon_asset_contract: str,
    ) -> EngineSettings:
        """Record the principals.  Succeeds once per store."""
        with self.unit_of_work() as unit:
            return unit.settings.initialize(admin, governance, carbon_asset_contract)

    def get_admin(self) -> str:
        with self.unit_of_work() as unit:
            return unit.settings_reader.get().admin

    def get_governance(self) -> str:
        with self.unit_of_work() as unit:
            return unit.settings_reader.get().governance

    def get_carbon_asset_contract(self) -> str:
        with self.unit_of_work() as unit:
            return unit.settings_reader.get().carbon_asset_contract

    # -- Rule store (governance) -------------------------------------------

    def add_rule(self, caller: str, rule: JurisdictionRule) -> JurisdictionRule:
        with self.unit_of_work() as unit:
            return unit.rules.add_rule(caller, rule)

    def update_rule(self, caller: str, rule: JurisdictionRule) -> JurisdictionRule:
        with self.unit_of_work() as unit:
            return unit.rules.update_rule(caller, rule)

    def deactivate_rule(self, caller: str, rule_id: str) -> None:
        with self.unit_of_work() as unit:
            unit.rules.deactivate_rule(caller, rule_id)

    def get_rule(self, rule_id: str) -> JurisdictionRule | None:
        with self.unit_of_work() as unit:
            return unit.rule_reader.get_rule(rule_id)

    def get_active_rules(self) -> list[str]:
        """Active rule ids in match priority order."""
        with self.unit_of_work() as unit:
            return unit.rule_reader.get_active_rule_ids()

    def get_active_rule_records(self) -> list[JurisdictionRule]:
        with self.unit_of_work() as unit:
            return unit.rule_reader.get_active_rules()

    # -- Jurisdiction directory (admin) ------------------------------------

    def set_address_jurisdiction(self, caller: str, account: str, jurisdiction: str) -> None:
        with self.unit_of_work() as unit:
            unit.jurisdictions.set_address_jurisdiction(caller, account, jurisdiction)

    def get_address_jurisdiction(self, account: str) -> str | None:
        with self.unit_of_work() as unit:
            return unit.jurisdiction_reader.get_address_jurisdiction(account)

    def get_jurisdiction_directory(self) -> dict[str, str]:
        """Every labelled account, ordered by account."""
        with self.unit_of_work() as unit:
            return unit.jurisdiction_reader.get_directory()

    # -- Validation --------------------------------------------------------

    def validate_transaction(
        self,
        source: str,
        destination: str,
        operation: OperationType | str,
        host_jurisdiction: str,
    ) -> ValidationResult:
        """Rule on a transaction between two accounts.

        Looks up both parties in the directory and evaluates the active
        rules in priority order.  Never mutates state.
        """
        operation = OperationType(operation)
        with self.unit_of_work() as unit:
            source_jur = unit.jurisdiction_reader.get_address_jurisdiction(source)
            dest_jur = unit.jurisdiction_reader.get_address_jurisdiction(destination)
            active_rules = unit.rule_reader.get_active_rules()

            result = evaluate_transaction(
                source_jurisdiction=source_jur,
                destination_jurisdiction=dest_jur,
                operation=operation,
                host_jurisdiction=host_jurisdiction,
                active_rules=active_rules,
            )

            logger.info(
                "transaction_validated",
                extra={
                    "source": source,
                    "destination": destination,
                    "source_jurisdiction": source_jur,
                    "destination_jurisdiction": dest_jur,
                    "host_jurisdiction": host_jurisdiction,
                    "operation": operation.value,
                    "is_compliant": result.is_compliant,
                    "matched_rule_id": result.rule_id,
                    "requires_authorization": result.requires_authorization,
                    "error_code": result.error_code.value if result.error_code else None,
                },
            )
        return result

    # -- Approval ledger ---------------------------------------------------

    def create_pending_approval(
        self,
        approval_key: ApprovalKey,
        token_id: int,
        source: str,
        destination: str,
        operation: OperationType | str,
        required_authority: str | None = None,
    ) -> PendingApproval:
        with self.unit_of_work() as unit:
            return unit.approvals.create_pending_approval(
                approval_key,
                token_id,
                source,
                destination,
                operation,
                required_authority=required_authority,
            )

    def record_authorization(self, authority: str, approval_key: ApprovalKey) -> PendingApproval:
        with self.unit_of_work() as unit:
            return unit.approvals.record_authorization(authority, approval_key)

    def check_approval(self, approval_key: ApprovalKey) -> bool:
        with self.unit_of_work() as unit:
            return unit.approvals.check_approval(approval_key)

    def get_pending_approval(self, approval_key: ApprovalKey) -> PendingApproval | None:
        with self.unit_of_work() as unit:
            return unit.approvals.get_pending_approval(approval_key)

    def get_approval_state(self, approval_key: ApprovalKey) -> ApprovalState | None:
        with self.unit_of_work() as unit:
            return unit.approvals.get_approval_state(approval_key)

    def list_approvals_for_token(self, token_id: int) -> list[PendingApproval]:
        """Ledger entries opened for ``token_id``, oldest first."""
        with self.unit_of_work() as unit:
            return unit.approval_reader.list_for_token(token_id)
