"""
compliance_kernel.services.approval_service -- Authority approval ledger.

Responsibility:
    Opens pending approvals, records the designated authority's sign-off,
    and answers whether an approval is currently valid.  All time checks
    read the injected clock once per call.

Architecture position:
    Kernel > Services.  May import from domain/, models/, selectors/, db/.

Invariants enforced:
    AP-1 -- PENDING -> APPROVED only inside the window; EXPIRED is terminal.
    AP-2 -- Expiry is derived from the creation timestamp at read time.
    AP-3 -- Approval keys are exactly 32 bytes.
    AP-4 -- A live record is never overwritten.  An expired record may be
            replaced by a fresh request under the same key.

Failure modes:
    - MalformedApprovalKeyError if a key is not 32 bytes.
    - DuplicateApprovalKeyError on create over a live record.
    - InvalidApprovalKeyError on authorize of an unknown key.
    - ApprovalExpiredError on authorize after the window.
    - ValueError if token_id is outside the unsigned 32-bit range.
    - InvalidAccountError if a party or the authority is empty or too long.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from compliance_kernel.domain.approval import (
    TOKEN_ID_MAX,
    ApprovalState,
    PendingApproval,
    normalize_approval_key,
)
from compliance_kernel.domain.jurisdiction import validate_account
from compliance_kernel.domain.clock import Clock, SystemClock
from compliance_kernel.domain.rules import OperationType
from compliance_kernel.exceptions import (
    ApprovalExpiredError,
    DuplicateApprovalKeyError,
    InvalidApprovalKeyError,
)
from compliance_kernel.logging_config import LogContext, get_logger
from compliance_kernel.models.approval import PendingApprovalModel
from compliance_kernel.selectors.approval_selector import ApprovalSelector
from compliance_kernel.services.base import BaseService

logger = get_logger("services.approvals")

ApprovalKey = bytes | bytearray | str


class ApprovalService(BaseService):
    """Manages the pending approval lifecycle."""

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._selector = ApprovalSelector(session)

    def create_pending_approval(
        self,
        approval_key: ApprovalKey,
        token_id: int,
        source: str,
        destination: str,
        operation: OperationType | str,
        required_authority: str | None = None,
    ) -> PendingApproval:
        """Open a request under ``approval_key``, timestamped now, not approved.

        Unauthenticated: anyone may open a request.  Only the authority's
        sign-off is meaningful.
        """
        key = normalize_approval_key(approval_key)
        if isinstance(token_id, bool) or not 0 <= token_id <= TOKEN_ID_MAX:
            raise ValueError(f"token_id must be an unsigned 32-bit integer, got {token_id!r}")
        for account in (source, destination):
            validate_account(account)
        if required_authority is not None:
            validate_account(required_authority)
        operation = OperationType(operation)
        now = self._clock.timestamp()

        existing = self._load(key)
        if existing is not None:
            if not existing.to_dto().is_expired(now):
                raise DuplicateApprovalKeyError(key.hex())
            logger.info(
                "expired_approval_replaced",
                extra={
                    "approval_key": key.hex(),
                    "previous_token_id": existing.token_id,
                    "previous_timestamp": existing.timestamp,
                },
            )
            self.session.delete(existing)
            self.session.flush()

        model = PendingApprovalModel(
            approval_key=key.hex(),
            token_id=token_id,
            source=source,
            destination=destination,
            operation=operation.value,
            timestamp=now,
            approved=False,
            required_authority=required_authority,
        )
        self.session.add(model)
        self.session.flush()

        with LogContext.bind(approval_key=key.hex()):
            logger.info(
                "approval_created",
                extra={
                    "token_id": token_id,
                    "source": source,
                    "destination": destination,
                    "operation": operation.value,
                    "timestamp": now,
                },
            )
        return model.to_dto()

    def record_authorization(self, authority: str, approval_key: ApprovalKey) -> PendingApproval:
        """Mark the request approved.

        ``authority`` is the already-authenticated signer.  Binding it to
        the rule's designated authority is the caller's concern; see
        TransferAuthorizationFlow.  Re-approving a live record is a no-op.
        """
        key = normalize_approval_key(approval_key)
        now = self._clock.timestamp()

        model = self._load(key)
        if model is None:
            logger.warning("authorization_unknown_key", extra={"approval_key": key.hex()})
            raise InvalidApprovalKeyError(key.hex())

        pending = model.to_dto()
        if pending.is_expired(now):
            logger.warning(
                "authorization_after_expiry",
                extra={
                    "approval_key": key.hex(),
                    "expires_at": pending.expires_at,
                    "now": now,
                },
            )
            raise ApprovalExpiredError(key.hex(), pending.timestamp, pending.expires_at, now)

        if not model.approved:
            model.approved = True
            model.approved_by = authority
            model.approved_at = now
            self.session.flush()

        with LogContext.bind(approval_key=key.hex(), actor=authority):
            logger.info(
                "authorization_recorded",
                extra={"token_id": model.token_id, "approved_at": model.approved_at},
            )
        return model.to_dto()

    def check_approval(self, approval_key: ApprovalKey) -> bool:
        """True iff a record exists, is approved, and has not expired."""
        pending = self._selector.find(normalize_approval_key(approval_key))
        if pending is None:
            return False
        return pending.is_valid(self._clock.timestamp())

    def get_pending_approval(self, approval_key: ApprovalKey) -> PendingApproval | None:
        return self._selector.find(normalize_approval_key(approval_key))

    def get_approval_state(self, approval_key: ApprovalKey) -> ApprovalState | None:
        """Derived lifecycle state, or None when no record exists."""
        pending = self._selector.find(normalize_approval_key(approval_key))
        if pending is None:
            return None
        return pending.state(self._clock.timestamp())

    def _load(self, approval_key: bytes) -> PendingApprovalModel | None:
        return self.session.execute(
            select(PendingApprovalModel).where(
                PendingApprovalModel.approval_key == approval_key.hex(),
            )
        ).scalar_one_or_none()
