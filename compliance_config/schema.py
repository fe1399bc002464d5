"""
Rulebook Schema (``compliance_config.schema``).

Responsibility
--------------
Frozen dataclasses describing a rulebook as it is authored in YAML:
the engine principals, the initial jurisdiction directory, and the
ordered rule list.

Architecture position
---------------------
**Config layer** -- pure data.  The only kernel dependency is the rule
DTO that ``RuleDefinition.to_rule`` builds.

Invariants enforced
-------------------
* All objects are frozen; collections are tuples.
* ``rules`` order is the match priority order of the resulting store.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from compliance_kernel.domain.rules import JurisdictionRule, OperationType


@dataclass(frozen=True)
class RulebookPrincipals:
    admin: str
    governance: str
    carbon_asset_contract: str


@dataclass(frozen=True)
class RuleDefinition:
    """One rule as written in the rulebook.

    ``source`` / ``destination`` / ``host`` use the ``ANY`` token for the
    wildcard.
    """

    rule_id: str
    description: str
    operation: OperationType
    source: str
    destination: str
    host: str
    allowed: bool
    required_authority: str | None = None

    def to_rule(self) -> JurisdictionRule:
        return JurisdictionRule(
            rule_id=self.rule_id,
            description=self.description,
            source_jur=self.source,
            dest_jur=self.destination,
            host_jur=self.host,
            operation=self.operation,
            is_allowed=self.allowed,
            required_authority=self.required_authority,
        )


@dataclass(frozen=True)
class Rulebook:
    """A validated rulebook plus its content checksum."""

    rulebook_id: str
    version: int
    principals: RulebookPrincipals
    jurisdictions: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    rules: tuple[RuleDefinition, ...] = field(default_factory=tuple)
    checksum: str = ""

    @property
    def directory(self) -> dict[str, str]:
        """Account -> jurisdiction label."""
        return dict(self.jurisdictions)

    def to_rules(self) -> list[JurisdictionRule]:
        return [definition.to_rule() for definition in self.rules]
