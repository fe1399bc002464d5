"""
compliance_kernel.services.rule_service -- Governance-managed rule store.

Responsibility:
    Adds, replaces and deactivates jurisdiction rules.  Every mutation is
    gated on the governance principal.

Architecture position:
    Kernel > Services.  May import from domain/, models/, selectors/, db/.

Invariants enforced:
    RS-1 -- Rule storage and active order live in one table; deactivation
            deletes the row, so the rule disappears from both read paths in
            the same flush.
    RS-2 -- add_rule rejects an id that is currently stored.
    RS-3 -- New rules take the next sequence (lowest priority); update_rule
            keeps the existing sequence.

Failure modes:
    - NotAuthorizedError if caller is not governance.
    - RuleAlreadyExistsError on add of a stored id.
    - RuleNotFoundError on update/deactivate of an unknown id.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from compliance_kernel.domain.rules import JurisdictionRule
from compliance_kernel.exceptions import RuleAlreadyExistsError, RuleNotFoundError
from compliance_kernel.logging_config import LogContext, get_logger
from compliance_kernel.models.rule import JurisdictionRuleModel
from compliance_kernel.services.base import BaseService
from compliance_kernel.services.settings_service import SettingsService

logger = get_logger("services.rules")


class RuleService(BaseService):
    """Write side of the rule store."""

    def __init__(self, session: Session, settings: SettingsService):
        super().__init__(session)
        self._settings = settings

    def add_rule(self, caller: str, rule: JurisdictionRule) -> JurisdictionRule:
        """Store ``rule`` at the end of the active list."""
        self._settings.require_governance(caller)

        if self._load(rule.rule_id) is not None:
            raise RuleAlreadyExistsError(rule.rule_id)

        model = JurisdictionRuleModel.from_dto(
            rule,
            sequence=self._next_sequence(),
            created_by=caller,
        )
        self.session.add(model)
        self.session.flush()

        with LogContext.bind(rule_id=rule.rule_id, actor=caller):
            logger.info(
                "rule_added",
                extra={
                    "sequence": model.sequence,
                    "operation": rule.operation.value,
                    "source_jur": rule.source_jur.token,
                    "dest_jur": rule.dest_jur.token,
                    "host_jur": rule.host_jur.token,
                    "is_allowed": rule.is_allowed,
                    "requires_authority": rule.required_authority is not None,
                },
            )
        return model.to_dto()

    def update_rule(self, caller: str, rule: JurisdictionRule) -> JurisdictionRule:
        """Replace a stored rule in place, keeping its priority."""
        self._settings.require_governance(caller)

        model = self._load(rule.rule_id)
        if model is None:
            raise RuleNotFoundError(rule.rule_id)

        model.apply(rule)
        model.updated_by = caller
        self.session.flush()

        with LogContext.bind(rule_id=rule.rule_id, actor=caller):
            logger.info(
                "rule_updated",
                extra={"sequence": model.sequence, "is_allowed": rule.is_allowed},
            )
        return model.to_dto()

    def deactivate_rule(self, caller: str, rule_id: str) -> None:
        """Remove a rule from storage and from the active order."""
        self._settings.require_governance(caller)

        model = self._load(rule_id)
        if model is None:
            raise RuleNotFoundError(rule_id)

        self.session.delete(model)
        self.session.flush()

        with LogContext.bind(rule_id=rule_id, actor=caller):
            logger.info("rule_deactivated")

    def _load(self, rule_id: str) -> JurisdictionRuleModel | None:
        return self.session.execute(
            select(JurisdictionRuleModel).where(
                JurisdictionRuleModel.rule_id == rule_id,
            )
        ).scalar_one_or_none()

    def _next_sequence(self) -> int:
        current = self.session.execute(
            select(func.max(JurisdictionRuleModel.sequence))
        ).scalar_one()
        return 0 if current is None else current + 1
