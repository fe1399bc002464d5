"""
Rulebook Loader (``compliance_config.loader``).

Responsibility
--------------
Loads a YAML rulebook, validates it, and parses it into the frozen
``compliance_config.schema`` dataclasses.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Consumed by
``compliance_services.bootstrap``.  No dependency on services or engines.

Invariants enforced
-------------------
* Nothing is parsed from a rulebook that fails validation.
* ``compute_checksum`` is a deterministic SHA-256 over canonical JSON,
  so two files with the same content produce the same checksum.

Failure modes
-------------
* Missing file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid content  -> ``RulebookValidationError`` listing every problem.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from compliance_config.schema import Rulebook, RuleDefinition, RulebookPrincipals
from compliance_config.validator import RulebookValidationError, validate_rulebook_data
from compliance_kernel.domain.rules import OperationType


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_rule(data: dict[str, Any]) -> RuleDefinition:
    return RuleDefinition(
        rule_id=data["rule_id"],
        description=data.get("description", ""),
        operation=OperationType(data["operation"]),
        source=data["source"],
        destination=data["destination"],
        host=data["host"],
        allowed=data["allowed"],
        required_authority=data.get("required_authority"),
    )


def parse_rulebook(data: dict[str, Any], source: str = "<memory>") -> Rulebook:
    """
    Validate and parse a raw rulebook mapping.

    Raises:
        RulebookValidationError: if validation finds any problem.
    """
    result = validate_rulebook_data(data)
    if not result.is_valid:
        raise RulebookValidationError(source, result.errors)

    principals = data["principals"]
    directory = data.get("jurisdictions") or {}
    return Rulebook(
        rulebook_id=data["rulebook_id"],
        version=data["version"],
        principals=RulebookPrincipals(
            admin=principals["admin"],
            governance=principals["governance"],
            carbon_asset_contract=principals["carbon_asset_contract"],
        ),
        jurisdictions=tuple(sorted(directory.items())),
        rules=tuple(parse_rule(r) for r in data["rules"]),
        checksum=compute_checksum(data),
    )


def load_rulebook(path: Path | str) -> Rulebook:
    """Load, validate and parse the rulebook at ``path``."""
    path = Path(path)
    return parse_rulebook(load_yaml_file(path), source=str(path))
