"""
Pure domain layer.

This module contains pure value objects and domain logic with NO
dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.  The only time
source is the injectable ``Clock``.
"""

from compliance_kernel.domain.approval import (
    APPROVAL_KEY_LENGTH,
    APPROVAL_WINDOW_SECONDS,
    ApprovalState,
    PendingApproval,
    approval_state,
    normalize_approval_key,
)
from compliance_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from compliance_kernel.domain.jurisdiction import (
    WILDCARD_TOKEN,
    JurisdictionMatch,
    validate_account,
    validate_jurisdiction_label,
)
from compliance_kernel.domain.rules import (
    JurisdictionRule,
    OperationType,
    ValidationErrorCode,
    ValidationResult,
)

__all__ = [
    # Approvals
    "APPROVAL_KEY_LENGTH",
    "APPROVAL_WINDOW_SECONDS",
    "ApprovalState",
    "PendingApproval",
    "approval_state",
    "normalize_approval_key",
    # Time
    "Clock",
    "DeterministicClock",
    "SystemClock",
    # Jurisdictions
    "WILDCARD_TOKEN",
    "JurisdictionMatch",
    "validate_account",
    "validate_jurisdiction_label",
    # Rules
    "JurisdictionRule",
    "OperationType",
    "ValidationErrorCode",
    "ValidationResult",
]
