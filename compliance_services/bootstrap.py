"""
Rulebook bootstrap -- applies a validated rulebook to an empty gate.

Contract:
    ``bootstrap_from_rulebook`` initializes the principals, fills the
    jurisdiction directory, and adds the rules in rulebook order, all in
    one transaction.  Any failure leaves the store untouched.

Failure modes:
    - EngineAlreadyInitializedError if the gate was already initialized.
    - Kernel validation errors (ReservedJurisdictionError, InvalidRuleError)
      for content the config validator let through.
"""

from __future__ import annotations

from dataclasses import dataclass

from compliance_config.schema import Rulebook
from compliance_kernel.logging_config import get_logger
from compliance_services.regulatory_check import RegulatoryCheck

logger = get_logger("services.bootstrap")


@dataclass(frozen=True)
class BootstrapResult:
    rulebook_id: str
    version: int
    checksum: str
    accounts_labelled: int
    rules_added: tuple[str, ...]


def bootstrap_from_rulebook(gate: RegulatoryCheck, rulebook: Rulebook) -> BootstrapResult:
    principals = rulebook.principals
    rules = rulebook.to_rules()

    with gate.unit_of_work() as unit:
        unit.settings.initialize(
            principals.admin,
            principals.governance,
            principals.carbon_asset_contract,
        )
        for account, label in rulebook.jurisdictions:
            unit.jurisdictions.set_address_jurisdiction(principals.admin, account, label)
        for rule in rules:
            unit.rules.add_rule(principals.governance, rule)

    result = BootstrapResult(
        rulebook_id=rulebook.rulebook_id,
        version=rulebook.version,
        checksum=rulebook.checksum,
        accounts_labelled=len(rulebook.jurisdictions),
        rules_added=tuple(rule.rule_id for rule in rules),
    )

    logger.info(
        "COMPLIANCE_RULEBOOK_TRACE",
        extra={
            "trace_type": "COMPLIANCE_RULEBOOK_TRACE",
            "rulebook_id": result.rulebook_id,
            "rulebook_version": result.version,
            "checksum": result.checksum,
            "accounts_labelled": result.accounts_labelled,
            "rule_count": len(result.rules_added),
        },
    )
    return result
