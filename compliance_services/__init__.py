"""
Module: compliance_services
Responsibility:
    Top-level surface of the compliance gate.  ``RegulatoryCheck`` runs
    each operation in its own transaction; ``TransferAuthorizationFlow``
    binds verdicts to authority sign-off; ``bootstrap_from_rulebook``
    applies a YAML rulebook.
"""

from compliance_services.authorization_flow import TransferAuthorizationFlow, TransferDecision
from compliance_services.bootstrap import BootstrapResult, bootstrap_from_rulebook
from compliance_services.regulatory_check import RegulatoryCheck, UnitOfWork

__all__ = [
    "BootstrapResult",
    "RegulatoryCheck",
    "TransferAuthorizationFlow",
    "TransferDecision",
    "UnitOfWork",
    "bootstrap_from_rulebook",
]
