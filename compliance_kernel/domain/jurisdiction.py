"""
Jurisdiction labels and rule match fields (``compliance_kernel.domain.jurisdiction``).

Responsibility
--------------
Models the three jurisdiction fields of a rule as a tagged variant:
either *any* jurisdiction, or one *specific* label.  The wildcard is a
case of the type rather than a magic string, so a rule field can never
be confused with an account's real jurisdiction.

Persistence and configuration still speak the ``"ANY"`` token;
``JurisdictionMatch.parse`` / ``JurisdictionMatch.token`` are the only
places that translate between the two.

Invariants enforced
-------------------
* A real jurisdiction label is a non-empty string of at most 64
  characters that is not the wildcard token (``ReservedJurisdictionError``
  otherwise).
* Account identifiers are non-empty and at most 128 characters.
* ``JurisdictionMatch.specific(label).matches(x)`` is plain equality;
  ``JurisdictionMatch.any().matches(x)`` is always true.
"""

from __future__ import annotations

from dataclasses import dataclass

from compliance_kernel.exceptions import (
    InvalidAccountError,
    InvalidJurisdictionError,
    ReservedJurisdictionError,
)

WILDCARD_TOKEN = "ANY"
MAX_LABEL_LENGTH = 64
MAX_ACCOUNT_LENGTH = 128


def validate_jurisdiction_label(label: str) -> str:
    """Return ``label`` if it can name a real jurisdiction.

    Raises:
        InvalidJurisdictionError: if ``label`` is not a non-empty string of
            at most MAX_LABEL_LENGTH characters.
        ReservedJurisdictionError: if ``label`` is the wildcard token.
    """
    if not isinstance(label, str):
        raise InvalidJurisdictionError(label, "label must be a string")
    if not label.strip():
        raise InvalidJurisdictionError(label, "label must not be empty")
    if len(label) > MAX_LABEL_LENGTH:
        raise InvalidJurisdictionError(label, f"label longer than {MAX_LABEL_LENGTH} characters")
    if label == WILDCARD_TOKEN:
        raise ReservedJurisdictionError(label)
    return label


def validate_account(account: str) -> str:
    """Return ``account`` if it fits the directory and ledger columns."""
    if not isinstance(account, str) or not account.strip():
        raise InvalidAccountError(account, "account must be a non-empty string")
    if len(account) > MAX_ACCOUNT_LENGTH:
        raise InvalidAccountError(account, f"account longer than {MAX_ACCOUNT_LENGTH} characters")
    return account


@dataclass(frozen=True)
class JurisdictionMatch:
    """A rule's jurisdiction field: wildcard (``label is None``) or one label."""

    label: str | None = None

    def __post_init__(self) -> None:
        if self.label is not None:
            validate_jurisdiction_label(self.label)

    @classmethod
    def any(cls) -> JurisdictionMatch:
        return cls(None)

    @classmethod
    def specific(cls, label: str) -> JurisdictionMatch:
        return cls(validate_jurisdiction_label(label))

    @classmethod
    def parse(cls, value: str | JurisdictionMatch) -> JurisdictionMatch:
        """Build a match from its persisted/config token."""
        if isinstance(value, JurisdictionMatch):
            return value
        if value == WILDCARD_TOKEN:
            return cls.any()
        return cls.specific(value)

    @property
    def is_wildcard(self) -> bool:
        return self.label is None

    @property
    def token(self) -> str:
        """Persisted form: the wildcard token or the label itself."""
        return WILDCARD_TOKEN if self.label is None else self.label

    def matches(self, jurisdiction: str) -> bool:
        if self.label is None:
            return True
        return self.label == jurisdiction

    def __str__(self) -> str:
        return self.token
