"""
Tests for the pure transaction validation engine.

Tests cover:
- rule_matches: conjunctive operation/source/destination/host matching
- select_matching_rule: first match in list order wins
- validate_transaction: unset jurisdictions, prohibited, allowed,
  authorization required, default deny
- COMPLIANCE_ENGINE_TRACE emission
"""

import pytest

from compliance_engines.tracer import compute_input_fingerprint
from compliance_engines.validation import (
    rule_matches,
    select_matching_rule,
    validate_transaction,
)
from compliance_kernel.domain.rules import (
    JurisdictionRule,
    OperationType,
    ValidationErrorCode,
)


# =========================================================================
# Factory helpers
# =========================================================================


def make_rule(
    rule_id: str = "rule",
    source: str = "ANY",
    destination: str = "ANY",
    host: str = "ANY",
    operation: OperationType = OperationType.TRANSFER,
    allowed: bool = True,
    authority: str | None = None,
) -> JurisdictionRule:
    return JurisdictionRule(
        rule_id=rule_id,
        description=f"test rule {rule_id}",
        source_jur=source,
        dest_jur=destination,
        host_jur=host,
        operation=operation,
        is_allowed=allowed,
        required_authority=authority,
    )


def validate(rules, source="US", destination="US", host="US", operation=OperationType.TRANSFER):
    return validate_transaction(
        source_jurisdiction=source,
        destination_jurisdiction=destination,
        operation=operation,
        host_jurisdiction=host,
        active_rules=rules,
    )


# =========================================================================
# 1. rule_matches
# =========================================================================


class TestRuleMatches:

    def test_all_wildcards_match(self):
        assert rule_matches(make_rule(), "US", "EU", "SG", OperationType.TRANSFER)

    def test_operation_must_match(self):
        rule = make_rule(operation=OperationType.RETIREMENT)
        assert not rule_matches(rule, "US", "US", "US", OperationType.TRANSFER)

    @pytest.mark.parametrize(
        "source, destination, host, expected",
        [
            ("US", "EU", "SG", True),
            ("CA", "EU", "SG", False),
            ("US", "CA", "SG", False),
            ("US", "EU", "CA", False),
        ],
    )
    def test_each_field_checked_independently(self, source, destination, host, expected):
        rule = make_rule(source="US", destination="EU", host="SG")
        assert rule_matches(rule, source, destination, host, OperationType.TRANSFER) is expected

    def test_mixed_wildcard_and_specific(self):
        rule = make_rule(source="ANY", destination="EU", host="ANY")
        assert rule_matches(rule, "CA", "EU", "JP", OperationType.TRANSFER)
        assert not rule_matches(rule, "CA", "US", "JP", OperationType.TRANSFER)


# =========================================================================
# 2. select_matching_rule
# =========================================================================


class TestSelectMatchingRule:

    def test_empty_list_returns_none(self):
        assert select_matching_rule([], "US", "US", "US", OperationType.TRANSFER) is None

    def test_first_listed_wins(self):
        first = make_rule("first", allowed=False)
        second = make_rule("second", allowed=True)
        selected = select_matching_rule(
            [first, second], "US", "US", "US", OperationType.TRANSFER,
        )
        assert selected is first

    def test_skips_non_matching_rules(self):
        specific = make_rule("eu-only", source="EU")
        fallback = make_rule("fallback")
        selected = select_matching_rule(
            [specific, fallback], "US", "US", "US", OperationType.TRANSFER,
        )
        assert selected is fallback

    def test_list_order_not_resorted(self):
        rules = [make_rule("z"), make_rule("a")]
        selected = select_matching_rule(rules, "US", "US", "US", OperationType.TRANSFER)
        assert selected.rule_id == "z"


# =========================================================================
# 3. validate_transaction
# =========================================================================


class TestValidateTransaction:

    def test_source_unset(self):
        result = validate([make_rule()], source=None)
        assert not result.is_compliant
        assert result.error_code is ValidationErrorCode.JURISDICTION_NOT_SET
        assert result.error_message == "jurisdiction not set for address"
        assert result.rule_id is None
        assert not result.requires_authorization

    def test_destination_unset_regardless_of_rules(self):
        result = validate([make_rule()], destination=None)
        assert result.error_code is ValidationErrorCode.JURISDICTION_NOT_SET

    def test_default_deny_with_no_rules(self):
        result = validate([])
        assert not result.is_compliant
        assert result.rule_id is None
        assert result.error_message == "no matching rule found"
        assert result.error_code is ValidationErrorCode.NO_MATCHING_RULE

    def test_default_deny_when_nothing_matches(self):
        result = validate([make_rule(source="EU")])
        assert result.error_code is ValidationErrorCode.NO_MATCHING_RULE

    def test_prohibited(self):
        result = validate([make_rule("deny", allowed=False)])
        assert not result.is_compliant
        assert result.rule_id == "deny"
        assert result.error_message == "transaction prohibited by rule"
        assert not result.requires_authorization

    def test_allowed_without_authority(self):
        result = validate([make_rule("ok")])
        assert result.is_compliant
        assert result.rule_id == "ok"
        assert not result.requires_authorization
        assert result.authority_address is None
        assert result.error_message is None

    def test_allowed_with_authority(self):
        result = validate([make_rule("needs-auth", authority="GAUTH")])
        assert result.is_compliant
        assert result.requires_authorization
        assert result.authority_address == "GAUTH"

    def test_prohibited_rule_ignores_authority(self):
        result = validate([make_rule("deny", allowed=False, authority="GAUTH")])
        assert not result.is_compliant
        assert not result.requires_authorization
        assert result.authority_address is None

    def test_operation_accepts_string_value(self):
        result = validate([make_rule(operation=OperationType.RETIREMENT)], operation="RETIREMENT")
        assert result.is_compliant

    def test_host_jurisdiction_is_matched(self):
        rules = [make_rule("us-hosted", host="US", allowed=True), make_rule("other", allowed=False)]
        assert validate(rules, host="US").rule_id == "us-hosted"
        assert validate(rules, host="EU").rule_id == "other"


# =========================================================================
# 4. Tracing
# =========================================================================


class TestEngineTrace:

    def test_trace_emitted(self, captured_logs):
        validate([make_rule()])
        traces = [r for r in captured_logs() if r["message"] == "COMPLIANCE_ENGINE_TRACE"]
        assert len(traces) == 1
        assert traces[0]["engine_name"] == "validation"
        assert len(traces[0]["input_fingerprint"]) == 16

    def test_fingerprint_is_deterministic(self):
        fields = ("source_jurisdiction", "operation")
        kwargs = {"source_jurisdiction": "US", "operation": OperationType.TRANSFER}
        assert compute_input_fingerprint(fields, kwargs) == compute_input_fingerprint(
            fields, dict(kwargs),
        )

    def test_fingerprint_changes_with_input(self):
        fields = ("source_jurisdiction",)
        assert compute_input_fingerprint(fields, {"source_jurisdiction": "US"}) != (
            compute_input_fingerprint(fields, {"source_jurisdiction": "EU"})
        )

    def test_missing_field_recorded_as_null(self):
        fields = ("destination_jurisdiction",)
        assert compute_input_fingerprint(fields, {}) == compute_input_fingerprint(
            fields, {"destination_jurisdiction": None},
        )
