"""Selectors for the compliance kernel (read side)."""

from compliance_kernel.selectors.approval_selector import ApprovalSelector
from compliance_kernel.selectors.jurisdiction_selector import JurisdictionSelector
from compliance_kernel.selectors.rule_selector import RuleSelector
from compliance_kernel.selectors.settings_selector import EngineSettings, SettingsSelector

__all__ = [
    "ApprovalSelector",
    "EngineSettings",
    "JurisdictionSelector",
    "RuleSelector",
    "SettingsSelector",
]
