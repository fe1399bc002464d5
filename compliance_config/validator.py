"""
Rulebook Validator (``compliance_config.validator``).

Responsibility
--------------
Checks a raw rulebook mapping (as returned by ``yaml.safe_load``) before
it is parsed, collecting every problem instead of stopping at the first.

Invariants enforced
-------------------
* Required top-level keys and principals are present and non-empty.
* Rule ids are non-empty and unique within the rulebook.
* Operations are known ``OperationType`` values.
* ``allowed`` is a real boolean, not a truthy string.
* Directory labels are real jurisdictions: never empty, never ``ANY``.
* Rule jurisdiction fields are non-empty strings (``ANY`` allowed).

Failure modes
-------------
* ``RulebookValidationResult.errors`` non-empty -> the loader raises
  ``RulebookValidationError`` and nothing is applied.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from compliance_kernel.domain.jurisdiction import MAX_ACCOUNT_LENGTH, MAX_LABEL_LENGTH, WILDCARD_TOKEN
from compliance_kernel.domain.rules import MAX_RULE_ID_LENGTH, OperationType
from compliance_kernel.exceptions import ComplianceKernelError

REQUIRED_KEYS = ("rulebook_id", "version", "principals", "rules")
PRINCIPAL_KEYS = ("admin", "governance", "carbon_asset_contract")
RULE_JURISDICTION_KEYS = ("source", "destination", "host")


class RulebookValidationError(ComplianceKernelError):
    """Rulebook failed validation; ``errors`` lists every problem found."""

    code: str = "RULEBOOK_INVALID"

    def __init__(self, source: str, errors: list[str]):
        self.source = source
        self.errors = errors
        summary = "; ".join(errors[:5])
        if len(errors) > 5:
            summary += f"; ... {len(errors) - 5} more"
        super().__init__(f"Invalid rulebook {source}: {summary}")


@dataclass
class RulebookValidationResult:
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_rulebook_data(data: Any) -> RulebookValidationResult:
    """Validate a raw rulebook mapping."""
    result = RulebookValidationResult()

    if not isinstance(data, dict):
        result.add_error("rulebook must be a mapping")
        return result

    for key in REQUIRED_KEYS:
        if key not in data:
            result.add_error(f"missing required key '{key}'")

    version = data.get("version")
    if "version" in data and (isinstance(version, bool) or not isinstance(version, int)):
        result.add_error(f"version must be an integer, got {version!r}")

    _validate_principals(data.get("principals"), result)
    _validate_directory(data.get("jurisdictions") or {}, result)
    _validate_rules(data.get("rules"), result)
    return result


def _validate_principals(principals: Any, result: RulebookValidationResult) -> None:
    if principals is None:
        return
    if not isinstance(principals, dict):
        result.add_error("principals must be a mapping")
        return
    for key in PRINCIPAL_KEYS:
        if not _is_non_empty_str(principals.get(key)):
            result.add_error(f"principals.{key} must be a non-empty string")


def _validate_directory(directory: Any, result: RulebookValidationResult) -> None:
    if not isinstance(directory, dict):
        result.add_error("jurisdictions must be a mapping of account to label")
        return
    for account, label in directory.items():
        if not _is_non_empty_str(account):
            result.add_error(f"jurisdictions: account {account!r} must be a non-empty string")
        elif len(account) > MAX_ACCOUNT_LENGTH:
            result.add_error(
                f"jurisdictions: account {account!r} exceeds {MAX_ACCOUNT_LENGTH} characters"
            )
        if not _is_non_empty_str(label):
            result.add_error(f"jurisdictions.{account}: label must be a non-empty string")
        elif label == WILDCARD_TOKEN:
            result.add_error(
                f"jurisdictions.{account}: '{WILDCARD_TOKEN}' is reserved for wildcard rules"
            )
        elif len(label) > MAX_LABEL_LENGTH:
            result.add_error(f"jurisdictions.{account}: label exceeds {MAX_LABEL_LENGTH} characters")


def _validate_rules(rules: Any, result: RulebookValidationResult) -> None:
    if rules is None:
        return
    if not isinstance(rules, list):
        result.add_error("rules must be a list")
        return

    known_operations = {op.value for op in OperationType}
    seen: set[str] = set()
    for index, rule in enumerate(rules):
        where = f"rules[{index}]"
        if not isinstance(rule, dict):
            result.add_error(f"{where} must be a mapping")
            continue

        rule_id = rule.get("rule_id")
        if not _is_non_empty_str(rule_id):
            result.add_error(f"{where}.rule_id must be a non-empty string")
        elif len(rule_id) > MAX_RULE_ID_LENGTH:
            result.add_error(f"{where}.rule_id exceeds {MAX_RULE_ID_LENGTH} characters")
        elif rule_id in seen:
            result.add_error(f"{where}: duplicate rule_id '{rule_id}'")
        else:
            seen.add(rule_id)
            where = f"rules[{index}] ({rule_id})"

        operation = rule.get("operation")
        if operation not in known_operations:
            result.add_error(
                f"{where}.operation must be one of {sorted(known_operations)}, got {operation!r}"
            )

        for key in RULE_JURISDICTION_KEYS:
            if not _is_non_empty_str(rule.get(key)):
                result.add_error(f"{where}.{key} must be a jurisdiction label or '{WILDCARD_TOKEN}'")
            elif len(rule[key]) > MAX_LABEL_LENGTH:
                result.add_error(f"{where}.{key} exceeds {MAX_LABEL_LENGTH} characters")

        if not isinstance(rule.get("allowed"), bool):
            result.add_error(f"{where}.allowed must be true or false")

        authority = rule.get("required_authority")
        if authority is not None and not _is_non_empty_str(authority):
            result.add_error(f"{where}.required_authority must be omitted or a non-empty string")
