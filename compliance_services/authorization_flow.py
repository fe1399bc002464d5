"""
TransferAuthorizationFlow -- binds validation verdicts to the approval ledger.

Contract:
    ``RegulatoryCheck.record_authorization`` accepts any authenticated
    signer; it does not know which rule asked for the approval.  This flow
    closes that gap for callers that go through it:

    1. ``request()`` validates the transaction.  When the matched rule
       names an authority, it opens a pending approval that records that
       authority.
    2. ``approve()`` refuses any signer other than the recorded authority.
    3. ``is_cleared()`` tells downstream settlement whether to proceed.

Invariants enforced:
    TF-1 -- A pending approval opened here always carries the matched
            rule's required_authority.
    TF-2 -- approve() only records an authorization from that authority.

Failure modes:
    - AuthorityMismatchError when the signer is not the bound authority.
    - InvalidApprovalKeyError / ApprovalExpiredError from the ledger.
"""

from __future__ import annotations

from dataclasses import dataclass

from compliance_kernel.domain.approval import PendingApproval, normalize_approval_key
from compliance_kernel.domain.rules import OperationType, ValidationResult
from compliance_kernel.exceptions import AuthorityMismatchError, InvalidApprovalKeyError
from compliance_kernel.logging_config import LogContext, get_logger
from compliance_kernel.services.approval_service import ApprovalKey
from compliance_services.regulatory_check import RegulatoryCheck

logger = get_logger("services.authorization_flow")


@dataclass(frozen=True)
class TransferDecision:
    """Outcome of ``TransferAuthorizationFlow.request``.

    ``approval_key`` is set only when the verdict is compliant and the
    matched rule requires an authority's sign-off.
    """

    token_id: int
    verdict: ValidationResult
    approval_key: bytes | None = None

    @property
    def awaiting_authorization(self) -> bool:
        return self.approval_key is not None


class TransferAuthorizationFlow:
    """Orchestrates validate -> open approval -> authority sign-off."""

    def __init__(self, gate: RegulatoryCheck):
        self._gate = gate

    def request(
        self,
        token_id: int,
        source: str,
        destination: str,
        operation: OperationType | str,
        host_jurisdiction: str,
        approval_key: ApprovalKey,
    ) -> TransferDecision:
        """Validate the transaction and, if required, open its approval.

        ``approval_key`` is only consumed when an approval is opened.
        """
        verdict = self._gate.validate_transaction(
            source, destination, operation, host_jurisdiction,
        )
        if not (verdict.is_compliant and verdict.requires_authorization):
            return TransferDecision(token_id=token_id, verdict=verdict)

        pending = self._gate.create_pending_approval(
            approval_key,
            token_id,
            source,
            destination,
            operation,
            required_authority=verdict.authority_address,
        )
        with LogContext.bind(rule_id=verdict.rule_id, approval_key=pending.approval_key.hex()):
            logger.info(
                "transfer_awaiting_authorization",
                extra={
                    "token_id": token_id,
                    "required_authority": verdict.authority_address,
                },
            )
        return TransferDecision(
            token_id=token_id,
            verdict=verdict,
            approval_key=pending.approval_key,
        )

    def approve(self, authority: str, approval_key: ApprovalKey) -> PendingApproval:
        """Record ``authority``'s sign-off if it is the bound authority.

        The authority check and the write share one transaction.
        """
        key = normalize_approval_key(approval_key)
        with self._gate.unit_of_work() as unit:
            pending = unit.approvals.get_pending_approval(key)
            if pending is None:
                raise InvalidApprovalKeyError(key.hex())
            if pending.required_authority is not None and pending.required_authority != authority:
                logger.warning(
                    "authority_mismatch",
                    extra={
                        "approval_key": key.hex(),
                        "expected_authority": pending.required_authority,
                        "signer": authority,
                    },
                )
                raise AuthorityMismatchError(key.hex(), pending.required_authority, authority)
            return unit.approvals.record_authorization(authority, key)

    def is_cleared(self, decision: TransferDecision) -> bool:
        """True when settlement may proceed for ``decision``."""
        if not decision.verdict.is_compliant:
            return False
        if decision.approval_key is None:
            return not decision.verdict.requires_authorization
        return self._gate.check_approval(decision.approval_key)
