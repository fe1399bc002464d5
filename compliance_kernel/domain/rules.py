"""
Rule and verdict domain types (``compliance_kernel.domain.rules``).

Responsibility
--------------
Pure value objects for the jurisdiction rule store and the validation
engine: operation kinds, the rule record, and the transient verdict.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``db/``, ``services/``, ``selectors/``, or outer layers.

Invariants enforced
-------------------
* ``rule_id`` is a non-empty string.
* ``ValidationResult.authority_address`` is present iff
  ``requires_authorization`` is true.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from compliance_kernel.domain.jurisdiction import MAX_ACCOUNT_LENGTH, JurisdictionMatch
from compliance_kernel.exceptions import InvalidRuleError

MAX_RULE_ID_LENGTH = 128


class OperationType(str, Enum):
    """Kinds of asset operation the gate rules on."""

    TRANSFER = "TRANSFER"
    RETIREMENT = "RETIREMENT"


@dataclass(frozen=True)
class JurisdictionRule:
    """A single allow/deny rule.

    The three jurisdiction fields are matched independently and
    conjunctively with ``operation``.  Rules are evaluated in store order;
    the first match decides.
    """

    rule_id: str
    description: str
    source_jur: JurisdictionMatch
    dest_jur: JurisdictionMatch
    host_jur: JurisdictionMatch
    operation: OperationType
    is_allowed: bool
    required_authority: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.rule_id, str) or not self.rule_id.strip():
            raise InvalidRuleError(str(self.rule_id), "rule_id must be a non-empty string")
        if len(self.rule_id) > MAX_RULE_ID_LENGTH:
            raise InvalidRuleError(
                self.rule_id, f"rule_id longer than {MAX_RULE_ID_LENGTH} characters"
            )
        # Accept tokens/strings at construction time and normalize them.
        for name in ("source_jur", "dest_jur", "host_jur"):
            value = getattr(self, name)
            if not isinstance(value, JurisdictionMatch):
                object.__setattr__(self, name, JurisdictionMatch.parse(value))
        if not isinstance(self.operation, OperationType):
            try:
                object.__setattr__(self, "operation", OperationType(self.operation))
            except ValueError:
                raise InvalidRuleError(
                    self.rule_id, f"unknown operation {self.operation!r}"
                ) from None
        if self.required_authority is not None and not self.required_authority:
            raise InvalidRuleError(self.rule_id, "required_authority must not be empty")
        if self.required_authority is not None and len(self.required_authority) > MAX_ACCOUNT_LENGTH:
            raise InvalidRuleError(
                self.rule_id, f"required_authority longer than {MAX_ACCOUNT_LENGTH} characters"
            )


class ValidationErrorCode(str, Enum):
    """Machine-readable reason attached to a non-compliant verdict."""

    JURISDICTION_NOT_SET = "JURISDICTION_NOT_SET"
    TRANSACTION_PROHIBITED = "TRANSACTION_PROHIBITED"
    NO_MATCHING_RULE = "NO_MATCHING_RULE"


JURISDICTION_NOT_SET_MESSAGE = "jurisdiction not set for address"
TRANSACTION_PROHIBITED_MESSAGE = "transaction prohibited by rule"
NO_MATCHING_RULE_MESSAGE = "no matching rule found"


@dataclass(frozen=True)
class ValidationResult:
    """Verdict for one transaction.  Transient, never persisted."""

    is_compliant: bool
    rule_id: str | None = None
    requires_authorization: bool = False
    authority_address: str | None = None
    error_message: str | None = None
    error_code: ValidationErrorCode | None = None

    @classmethod
    def jurisdiction_not_set(cls) -> ValidationResult:
        return cls(
            is_compliant=False,
            error_message=JURISDICTION_NOT_SET_MESSAGE,
            error_code=ValidationErrorCode.JURISDICTION_NOT_SET,
        )

    @classmethod
    def no_matching_rule(cls) -> ValidationResult:
        return cls(
            is_compliant=False,
            error_message=NO_MATCHING_RULE_MESSAGE,
            error_code=ValidationErrorCode.NO_MATCHING_RULE,
        )

    @classmethod
    def prohibited(cls, rule_id: str) -> ValidationResult:
        return cls(
            is_compliant=False,
            rule_id=rule_id,
            error_message=TRANSACTION_PROHIBITED_MESSAGE,
            error_code=ValidationErrorCode.TRANSACTION_PROHIBITED,
        )

    @classmethod
    def allowed(cls, rule_id: str, authority: str | None = None) -> ValidationResult:
        return cls(
            is_compliant=True,
            rule_id=rule_id,
            requires_authorization=authority is not None,
            authority_address=authority,
        )
