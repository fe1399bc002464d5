"""
Module: compliance_kernel.models.rule
Responsibility: ORM persistence for jurisdiction rules and their priority order.

Architecture position: Kernel > Models.  May import from db/base.py and the
    domain value objects it converts to/from.

Invariants enforced:
    RS-1 -- One table is both the rule map and the active list: a row exists
            iff the rule is active, and ``sequence`` is its list position.
            The list can never name a rule that is not stored.
    RS-2 -- rule_id is UNIQUE among stored rules.
    RS-3 -- sequence is UNIQUE; update_rule never touches it, so in-place
            replacement preserves priority.

Failure modes:
    - IntegrityError on duplicate rule_id or sequence (service checks first).
"""

from __future__ import annotations

from sqlalchemy import Boolean, CheckConstraint, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from compliance_kernel.db.base import TrackedBase
from compliance_kernel.domain.jurisdiction import JurisdictionMatch
from compliance_kernel.domain.rules import JurisdictionRule, OperationType


class JurisdictionRuleModel(TrackedBase):
    """Persistent, active jurisdiction rule.

    Jurisdiction fields are stored as their token form ("ANY" or a label).
    """

    __tablename__ = "jurisdiction_rules"

    __table_args__ = (
        CheckConstraint(
            "operation IN ('TRANSFER', 'RETIREMENT')",
            name="ck_jurisdiction_rules_operation",
        ),
        Index("ix_jurisdiction_rules_sequence", "sequence", unique=True),
    )

    rule_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    sequence: Mapped[int] = mapped_column(nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    source_jur: Mapped[str] = mapped_column(String(64), nullable=False)
    dest_jur: Mapped[str] = mapped_column(String(64), nullable=False)
    host_jur: Mapped[str] = mapped_column(String(64), nullable=False)
    operation: Mapped[str] = mapped_column(String(20), nullable=False)
    is_allowed: Mapped[bool] = mapped_column(Boolean, nullable=False)
    required_authority: Mapped[str | None] = mapped_column(String(128), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<JurisdictionRule {self.rule_id} #{self.sequence} "
            f"{self.operation} {self.source_jur}->{self.dest_jur}@{self.host_jur} "
            f"allowed={self.is_allowed}>"
        )

    def to_dto(self) -> JurisdictionRule:
        """Convert ORM model to frozen domain DTO."""
        return JurisdictionRule(
            rule_id=self.rule_id,
            description=self.description,
            source_jur=JurisdictionMatch.parse(self.source_jur),
            dest_jur=JurisdictionMatch.parse(self.dest_jur),
            host_jur=JurisdictionMatch.parse(self.host_jur),
            operation=OperationType(self.operation),
            is_allowed=self.is_allowed,
            required_authority=self.required_authority,
        )

    @classmethod
    def from_dto(
        cls,
        dto: JurisdictionRule,
        sequence: int,
        created_by: str,
    ) -> JurisdictionRuleModel:
        """Create ORM model from domain DTO at the given list position."""
        model = cls(rule_id=dto.rule_id, sequence=sequence, created_by=created_by)
        model.apply(dto)
        return model

    def apply(self, dto: JurisdictionRule) -> None:
        """Overwrite every rule field except rule_id and sequence."""
        self.description = dto.description
        self.source_jur = dto.source_jur.token
        self.dest_jur = dto.dest_jur.token
        self.host_jur = dto.host_jur.token
        self.operation = dto.operation.value
        self.is_allowed = dto.is_allowed
        self.required_authority = dto.required_authority
