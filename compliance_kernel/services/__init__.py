"""Services for the compliance kernel (write side)."""

from compliance_kernel.services.approval_service import ApprovalService
from compliance_kernel.services.jurisdiction_service import JurisdictionService
from compliance_kernel.services.rule_service import RuleService
from compliance_kernel.services.settings_service import (
    ADMIN_ROLE,
    GOVERNANCE_ROLE,
    SettingsService,
)

__all__ = [
    "ADMIN_ROLE",
    "ApprovalService",
    "GOVERNANCE_ROLE",
    "JurisdictionService",
    "RuleService",
    "SettingsService",
]
