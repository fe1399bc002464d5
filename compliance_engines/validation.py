"""
compliance_engines.validation -- Pure transaction validation engine.

Responsibility:
    Decide whether a transaction between two jurisdictions, hosted in a
    third, is compliant under an ordered list of rules.

Architecture position:
    Engines -- pure decision layer, zero I/O.
    May only import compliance_kernel/domain/ types.

Invariants enforced:
    - First match wins: rules are tried in the order given; the earliest
      matching rule alone decides the verdict.
    - Matching is conjunctive: operation AND source AND destination AND
      host must all match; each jurisdiction field is wildcard-or-equal.
    - Default deny: no matching rule yields a non-compliant verdict.
    - An unset source or destination jurisdiction short-circuits before
      any rule is consulted.
    - Purity: no clock, no database, never raises on well-typed input.
"""

from __future__ import annotations

from collections.abc import Iterable

from compliance_engines.tracer import traced_engine
from compliance_kernel.domain.rules import (
    JurisdictionRule,
    OperationType,
    ValidationResult,
)


def rule_matches(
    rule: JurisdictionRule,
    source_jurisdiction: str,
    destination_jurisdiction: str,
    host_jurisdiction: str,
    operation: OperationType,
) -> bool:
    return (
        rule.operation == operation
        and rule.source_jur.matches(source_jurisdiction)
        and rule.dest_jur.matches(destination_jurisdiction)
        and rule.host_jur.matches(host_jurisdiction)
    )


def select_matching_rule(
    rules: Iterable[JurisdictionRule],
    source_jurisdiction: str,
    destination_jurisdiction: str,
    host_jurisdiction: str,
    operation: OperationType,
) -> JurisdictionRule | None:
    """Return the first rule in ``rules`` that matches, or None.

    ``rules`` must already be in priority order; this function does not
    sort.
    """
    for rule in rules:
        if rule_matches(
            rule,
            source_jurisdiction,
            destination_jurisdiction,
            host_jurisdiction,
            operation,
        ):
            return rule
    return None


@traced_engine(
    "validation",
    "1.0",
    fingerprint_fields=(
        "source_jurisdiction",
        "destination_jurisdiction",
        "operation",
        "host_jurisdiction",
    ),
)
def validate_transaction(
    *,
    source_jurisdiction: str | None,
    destination_jurisdiction: str | None,
    operation: OperationType,
    host_jurisdiction: str,
    active_rules: Iterable[JurisdictionRule],
) -> ValidationResult:
    """Produce the verdict for one transaction.

    Args:
        source_jurisdiction: Directory label of the sender, None if unset.
        destination_jurisdiction: Directory label of the receiver, None if unset.
        operation: Kind of operation being attempted.
        host_jurisdiction: Jurisdiction of the invoking host context.
        active_rules: Rules in priority order.

    Returns:
        ValidationResult.  Errors are reported in the verdict, never raised.
    """
    if source_jurisdiction is None or destination_jurisdiction is None:
        return ValidationResult.jurisdiction_not_set()

    rule = select_matching_rule(
        active_rules,
        source_jurisdiction,
        destination_jurisdiction,
        host_jurisdiction,
        OperationType(operation),
    )
    if rule is None:
        return ValidationResult.no_matching_rule()
    if not rule.is_allowed:
        return ValidationResult.prohibited(rule.rule_id)
    return ValidationResult.allowed(rule.rule_id, rule.required_authority)
