"""
Module: compliance_kernel.selectors.rule_selector
Responsibility: Read access to the rule store -- single rules by id and the
    active rules in priority order.

Invariants enforced:
    RS-1 -- The active list is the rule table ordered by ``sequence``; every
            id returned by get_active_rule_ids() resolves via get_rule().
"""

from __future__ import annotations

from sqlalchemy import select

from compliance_kernel.domain.rules import JurisdictionRule
from compliance_kernel.models.rule import JurisdictionRuleModel
from compliance_kernel.selectors.base import BaseSelector


class RuleSelector(BaseSelector):
    """Read-only queries over stored rules."""

    def get_rule(self, rule_id: str) -> JurisdictionRule | None:
        """Return the stored rule, or None if it was never added or was deactivated."""
        model = self.session.execute(
            select(JurisdictionRuleModel).where(
                JurisdictionRuleModel.rule_id == rule_id,
            )
        ).scalar_one_or_none()
        return model.to_dto() if model is not None else None

    def get_active_rule_ids(self) -> list[str]:
        """Rule ids in match priority order (first listed, first tried)."""
        return list(
            self.session.execute(
                select(JurisdictionRuleModel.rule_id).order_by(
                    JurisdictionRuleModel.sequence,
                )
            ).scalars()
        )

    def get_active_rules(self) -> list[JurisdictionRule]:
        """Full rule records in match priority order."""
        models = self.session.execute(
            select(JurisdictionRuleModel).order_by(JurisdictionRuleModel.sequence)
        ).scalars().all()
        return [m.to_dto() for m in models]
