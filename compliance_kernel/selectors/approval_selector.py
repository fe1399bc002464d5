"""
Module: compliance_kernel.selectors.approval_selector
Responsibility: Raw reads of the approval ledger.  Time-dependent views
    (state, validity) live in ApprovalService, which owns the clock.
"""

from __future__ import annotations

from sqlalchemy import select

from compliance_kernel.domain.approval import PendingApproval
from compliance_kernel.models.approval import PendingApprovalModel
from compliance_kernel.selectors.base import BaseSelector


class ApprovalSelector(BaseSelector):

    def find(self, approval_key: bytes) -> PendingApproval | None:
        model = self.session.execute(
            select(PendingApprovalModel).where(
                PendingApprovalModel.approval_key == approval_key.hex(),
            )
        ).scalar_one_or_none()
        return model.to_dto() if model is not None else None

    def list_for_token(self, token_id: int) -> list[PendingApproval]:
        """All ledger entries opened for ``token_id``, oldest first."""
        models = self.session.execute(
            select(PendingApprovalModel)
            .where(PendingApprovalModel.token_id == token_id)
            .order_by(PendingApprovalModel.timestamp)
        ).scalars().all()
        return [m.to_dto() for m in models]
