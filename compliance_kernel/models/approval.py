"""
Module: compliance_kernel.models.approval
Responsibility: ORM persistence for pending authority approvals.

Architecture position: Kernel > Models.  May import from db/base.py only
    (plus the domain DTO it converts to).

Invariants enforced:
    AP-2 -- No status column: expiry is derived from ``timestamp`` at read
            time, so the table only ever stores ``approved``.
    AP-3 -- approval_key is the 64-char hex form of the 32-byte key, UNIQUE.

Failure modes:
    - IntegrityError on duplicate approval_key (service checks first).
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from compliance_kernel.db.base import Base
from compliance_kernel.domain.approval import PendingApproval
from compliance_kernel.domain.rules import OperationType


class PendingApprovalModel(Base):
    """Persistent approval request keyed by its caller-chosen approval key."""

    __tablename__ = "pending_approvals"

    __table_args__ = (
        CheckConstraint(
            "operation IN ('TRANSFER', 'RETIREMENT')",
            name="ck_pending_approvals_operation",
        ),
        CheckConstraint(
            "token_id >= 0 AND token_id <= 4294967295",
            name="ck_pending_approvals_token_id_u32",
        ),
    )

    approval_key: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    token_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    source: Mapped[str] = mapped_column(String(128), nullable=False)
    destination: Mapped[str] = mapped_column(String(128), nullable=False)
    operation: Mapped[str] = mapped_column(String(20), nullable=False)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    approved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    required_authority: Mapped[str | None] = mapped_column(String(128), nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    approved_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<PendingApproval {self.approval_key[:12]}... "
            f"token={self.token_id} approved={self.approved}>"
        )

    def to_dto(self) -> PendingApproval:
        """Convert ORM model to frozen domain DTO."""
        return PendingApproval(
            approval_key=bytes.fromhex(self.approval_key),
            token_id=self.token_id,
            source=self.source,
            destination=self.destination,
            operation=OperationType(self.operation),
            timestamp=self.timestamp,
            approved=self.approved,
            required_authority=self.required_authority,
        )
