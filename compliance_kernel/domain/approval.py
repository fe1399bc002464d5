"""
Approval domain types (``compliance_kernel.domain.approval``).

Responsibility
--------------
Pure value objects for the authority approval ledger: the pending
approval record, its derived lifecycle state, the fixed expiry window,
and approval key normalization.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  The current
time is always passed in; nothing here reads a clock.

Invariants enforced
-------------------
* AP-1: Lifecycle -- ``PENDING -> APPROVED`` only inside the window;
  ``EXPIRED`` is terminal and overrides the stored ``approved`` flag.
* AP-2: Expiry is derived at read time (``now > timestamp + window``),
  never written back to the record.
* AP-3: Approval keys are exactly 32 bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from compliance_kernel.domain.rules import OperationType
from compliance_kernel.exceptions import MalformedApprovalKeyError

# 7 days
APPROVAL_WINDOW_SECONDS = 604800

APPROVAL_KEY_LENGTH = 32

TOKEN_ID_MAX = 2**32 - 1


class ApprovalState(str, Enum):
    """Derived lifecycle state of a pending approval."""

    PENDING = "pending"
    APPROVED = "approved"
    EXPIRED = "expired"


def normalize_approval_key(approval_key: bytes | bytearray | str) -> bytes:
    """Return the 32 raw key bytes.

    Accepts raw bytes or their 64-character hex rendering.

    Raises:
        MalformedApprovalKeyError: if the key is not exactly 32 bytes.
    """
    if isinstance(approval_key, str):
        try:
            approval_key = bytes.fromhex(approval_key)
        except ValueError:
            raise MalformedApprovalKeyError(None, "not a hex string") from None
    if not isinstance(approval_key, (bytes, bytearray)):
        raise MalformedApprovalKeyError(None, "expected bytes or hex string")
    if len(approval_key) != APPROVAL_KEY_LENGTH:
        raise MalformedApprovalKeyError(len(approval_key))
    return bytes(approval_key)


@dataclass(frozen=True)
class PendingApproval:
    """Immutable snapshot of a pending approval record.

    ``timestamp`` is the creation time in epoch seconds.
    ``required_authority`` is only populated when the request was opened
    through the transfer authorization flow, which binds it to the
    matched rule's authority.
    """

    approval_key: bytes
    token_id: int
    source: str
    destination: str
    operation: OperationType
    timestamp: int
    approved: bool = False
    required_authority: str | None = None

    @property
    def expires_at(self) -> int:
        return self.timestamp + APPROVAL_WINDOW_SECONDS

    def is_expired(self, now: int) -> bool:
        return now > self.expires_at

    def state(self, now: int) -> ApprovalState:
        return approval_state(self.timestamp, self.approved, now)

    def is_valid(self, now: int) -> bool:
        """True iff approved and still inside the window."""
        return self.approved and not self.is_expired(now)


def approval_state(timestamp: int, approved: bool, now: int) -> ApprovalState:
    """Derive the lifecycle state (AP-1, AP-2)."""
    if now > timestamp + APPROVAL_WINDOW_SECONDS:
        return ApprovalState.EXPIRED
    if approved:
        return ApprovalState.APPROVED
    return ApprovalState.PENDING
