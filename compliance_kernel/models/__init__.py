"""ORM models for the compliance kernel."""

from compliance_kernel.models.approval import PendingApprovalModel
from compliance_kernel.models.jurisdiction import AddressJurisdictionModel
from compliance_kernel.models.rule import JurisdictionRuleModel
from compliance_kernel.models.settings import EngineSettingsModel

__all__ = [
    "AddressJurisdictionModel",
    "EngineSettingsModel",
    "JurisdictionRuleModel",
    "PendingApprovalModel",
]
