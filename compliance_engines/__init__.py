"""
Module: compliance_engines
Responsibility:
    Pure decision engines for the compliance gate.  Canonical import
    surface for compliance_services.

Architecture position:
    Engines -- pure layer, zero I/O.  May only import
    compliance_kernel/domain/ types.  MUST NOT import compliance_services.

Usage:
    from compliance_engines import validate_transaction
"""

from compliance_engines.tracer import compute_input_fingerprint, traced_engine
from compliance_engines.validation import (
    rule_matches,
    select_matching_rule,
    validate_transaction,
)

__all__ = [
    "compute_input_fingerprint",
    "rule_matches",
    "select_matching_rule",
    "traced_engine",
    "validate_transaction",
]
