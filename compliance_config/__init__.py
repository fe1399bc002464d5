"""
Rulebook configuration for the compliance gate.

A rulebook is a YAML file naming the engine principals, an initial
jurisdiction directory, and the ordered rule list.  ``load_rulebook``
validates and parses it; ``compliance_services.bootstrap_from_rulebook``
applies it to a gate.
"""

from pathlib import Path

from compliance_config.loader import (
    compute_checksum,
    load_rulebook,
    load_yaml_file,
    parse_rule,
    parse_rulebook,
)
from compliance_config.schema import Rulebook, RuleDefinition, RulebookPrincipals
from compliance_config.validator import (
    RulebookValidationError,
    RulebookValidationResult,
    validate_rulebook_data,
)

RULEBOOKS_DIR = Path(__file__).parent / "rulebooks"

__all__ = [
    "RULEBOOKS_DIR",
    "Rulebook",
    "RuleDefinition",
    "RulebookPrincipals",
    "RulebookValidationError",
    "RulebookValidationResult",
    "compute_checksum",
    "load_rulebook",
    "load_yaml_file",
    "parse_rule",
    "parse_rulebook",
    "validate_rulebook_data",
]
