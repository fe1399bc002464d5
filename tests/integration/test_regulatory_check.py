"""
End-to-end tests through the RegulatoryCheck facade.

Each facade call is its own transaction, so these tests also show that
state is committed between calls and that failed calls leave nothing
behind.
"""

import pytest

from compliance_kernel.domain.approval import ApprovalState
from compliance_kernel.domain.rules import (
    JurisdictionRule,
    OperationType,
    ValidationErrorCode,
)
from compliance_kernel.exceptions import (
    ApprovalExpiredError,
    EngineAlreadyInitializedError,
    EngineNotInitializedError,
    InvalidAccountError,
    InvalidApprovalKeyError,
    NotAuthorizedError,
    RuleAlreadyExistsError,
)
from compliance_services.regulatory_check import RegulatoryCheck

ADMIN = "GADMIN"
GOVERNANCE = "GGOVERNANCE"
KEY = bytes(range(32))


def make_rule(
    rule_id: str,
    source: str = "ANY",
    destination: str = "ANY",
    host: str = "ANY",
    operation: OperationType = OperationType.TRANSFER,
    allowed: bool = True,
    authority: str | None = None,
) -> JurisdictionRule:
    return JurisdictionRule(
        rule_id=rule_id,
        description=rule_id,
        source_jur=source,
        dest_jur=destination,
        host_jur=host,
        operation=operation,
        is_allowed=allowed,
        required_authority=authority,
    )


class TestLifecycle:

    def test_getters_before_initialize(self, gate):
        with pytest.raises(EngineNotInitializedError):
            gate.get_admin()
        with pytest.raises(EngineNotInitializedError):
            gate.get_carbon_asset_contract()

    def test_gated_call_before_initialize(self, gate):
        with pytest.raises(EngineNotInitializedError):
            gate.add_rule(GOVERNANCE, make_rule("r1"))

    def test_principals_readable(self, initialized_gate):
        assert initialized_gate.get_admin() == ADMIN
        assert initialized_gate.get_governance() == GOVERNANCE
        assert initialized_gate.get_carbon_asset_contract() == "CCARBONASSET"

    def test_initialize_once(self, initialized_gate):
        with pytest.raises(EngineAlreadyInitializedError):
            initialized_gate.initialize("GX", "GY", "CZ")
        assert initialized_gate.get_admin() == ADMIN

    def test_from_url_creates_schema(self, clock):
        gate = RegulatoryCheck.from_url("sqlite://", clock=clock)
        gate.initialize(ADMIN, GOVERNANCE, "CC")
        assert gate.get_active_rules() == []

    def test_from_env_defaults_to_memory(self, monkeypatch, clock):
        monkeypatch.delenv("COMPLIANCE_DATABASE_URL", raising=False)
        gate = RegulatoryCheck.from_env(clock)
        gate.initialize(ADMIN, GOVERNANCE, "CC")
        assert gate.get_governance() == GOVERNANCE


class TestValidationScenarios:

    def test_us_to_us_with_allow_all(self, initialized_gate):
        gate = initialized_gate
        gate.set_address_jurisdiction(ADMIN, "GALICE", "US")
        gate.set_address_jurisdiction(ADMIN, "GBOB", "US")
        gate.add_rule(GOVERNANCE, make_rule("allow-all"))

        result = gate.validate_transaction("GALICE", "GBOB", OperationType.TRANSFER, "US")
        assert result.is_compliant
        assert not result.requires_authorization
        assert result.rule_id == "allow-all"

    def test_destination_without_jurisdiction(self, initialized_gate):
        gate = initialized_gate
        gate.set_address_jurisdiction(ADMIN, "GALICE", "US")
        gate.add_rule(GOVERNANCE, make_rule("allow-all"))

        result = gate.validate_transaction("GALICE", "GUNKNOWN", OperationType.TRANSFER, "US")
        assert not result.is_compliant
        assert result.error_message == "jurisdiction not set for address"
        assert result.error_code is ValidationErrorCode.JURISDICTION_NOT_SET

    def test_default_deny_with_no_rules(self, initialized_gate):
        gate = initialized_gate
        gate.set_address_jurisdiction(ADMIN, "GALICE", "US")
        gate.set_address_jurisdiction(ADMIN, "GBOB", "EU")
        result = gate.validate_transaction("GALICE", "GBOB", "TRANSFER", "US")
        assert not result.is_compliant
        assert result.error_message == "no matching rule found"

    def test_first_match_priority_follows_insertion(self, initialized_gate):
        gate = initialized_gate
        gate.set_address_jurisdiction(ADMIN, "GALICE", "US")
        gate.set_address_jurisdiction(ADMIN, "GBOB", "EU")
        gate.add_rule(GOVERNANCE, make_rule("deny-us-eu", "US", "EU", allowed=False))
        gate.add_rule(GOVERNANCE, make_rule("allow-all"))

        result = gate.validate_transaction("GALICE", "GBOB", "TRANSFER", "US")
        assert result.rule_id == "deny-us-eu"
        assert result.error_message == "transaction prohibited by rule"

        gate.deactivate_rule(GOVERNANCE, "deny-us-eu")
        assert gate.validate_transaction("GALICE", "GBOB", "TRANSFER", "US").is_compliant

    def test_directory_change_changes_verdict(self, initialized_gate):
        gate = initialized_gate
        gate.set_address_jurisdiction(ADMIN, "GALICE", "US")
        gate.set_address_jurisdiction(ADMIN, "GBOB", "US")
        gate.add_rule(GOVERNANCE, make_rule("us-only", "US", "US"))
        assert gate.validate_transaction("GALICE", "GBOB", "TRANSFER", "US").is_compliant

        gate.set_address_jurisdiction(ADMIN, "GBOB", "EU")
        assert not gate.validate_transaction("GALICE", "GBOB", "TRANSFER", "US").is_compliant

    def test_validation_is_logged(self, initialized_gate, captured_logs):
        gate = initialized_gate
        gate.set_address_jurisdiction(ADMIN, "GALICE", "US")
        gate.set_address_jurisdiction(ADMIN, "GBOB", "US")
        gate.validate_transaction("GALICE", "GBOB", "TRANSFER", "US")
        (record,) = [r for r in captured_logs() if r["message"] == "transaction_validated"]
        assert record["is_compliant"] is False
        assert record["error_code"] == "NO_MATCHING_RULE"
        assert record["source_jurisdiction"] == "US"


class TestRuleStoreThroughFacade:

    def test_deactivation_removes_both_read_paths(self, initialized_gate):
        gate = initialized_gate
        gate.add_rule(GOVERNANCE, make_rule("r1"))
        gate.add_rule(GOVERNANCE, make_rule("r2"))
        gate.deactivate_rule(GOVERNANCE, "r1")
        assert gate.get_rule("r1") is None
        assert gate.get_active_rules() == ["r2"]
        assert [r.rule_id for r in gate.get_active_rule_records()] == ["r2"]

    def test_failed_add_commits_nothing(self, initialized_gate):
        gate = initialized_gate
        gate.add_rule(GOVERNANCE, make_rule("r1"))
        with pytest.raises(RuleAlreadyExistsError):
            gate.add_rule(GOVERNANCE, make_rule("r1", allowed=False))
        assert gate.get_active_rules() == ["r1"]
        assert gate.get_rule("r1").is_allowed

    def test_unauthorized_set_commits_nothing(self, initialized_gate):
        with pytest.raises(NotAuthorizedError):
            initialized_gate.set_address_jurisdiction(GOVERNANCE, "GALICE", "US")
        assert initialized_gate.get_address_jurisdiction("GALICE") is None

    def test_update_rule(self, initialized_gate):
        gate = initialized_gate
        gate.add_rule(GOVERNANCE, make_rule("r1"))
        gate.update_rule(GOVERNANCE, make_rule("r1", authority="GAUTH"))
        assert gate.get_rule("r1").required_authority == "GAUTH"


class TestApprovalRoundTrip:

    def test_approve_at_t_plus_100(self, initialized_gate, clock):
        gate = initialized_gate
        gate.create_pending_approval(KEY, 7, "GALICE", "GBOB", OperationType.TRANSFER)
        clock.advance(100)
        gate.record_authorization("GREGULATOR", KEY)
        assert gate.check_approval(KEY) is True
        assert gate.get_approval_state(KEY) is ApprovalState.APPROVED

    def test_approve_at_t_plus_604801(self, initialized_gate, clock):
        gate = initialized_gate
        gate.create_pending_approval(KEY, 7, "GALICE", "GBOB", OperationType.TRANSFER)
        clock.advance(604801)
        with pytest.raises(ApprovalExpiredError):
            gate.record_authorization("GREGULATOR", KEY)
        assert gate.check_approval(KEY) is False
        assert gate.get_approval_state(KEY) is ApprovalState.EXPIRED

    def test_approval_does_not_need_initialize(self, gate):
        gate.create_pending_approval(KEY, 1, "GA", "GB", "RETIREMENT")
        assert gate.get_pending_approval(KEY).operation is OperationType.RETIREMENT

    def test_unknown_key(self, initialized_gate):
        with pytest.raises(InvalidApprovalKeyError):
            initialized_gate.record_authorization("GREGULATOR", KEY)
        assert initialized_gate.check_approval(KEY) is False


class TestReadModelsThroughFacade:

    def test_jurisdiction_directory(self, initialized_gate):
        initialized_gate.set_address_jurisdiction(ADMIN, "GZED", "EU")
        initialized_gate.set_address_jurisdiction(ADMIN, "GAMY", "US")
        assert initialized_gate.get_jurisdiction_directory() == {"GAMY": "US", "GZED": "EU"}
        assert list(initialized_gate.get_jurisdiction_directory()) == ["GAMY", "GZED"]

    def test_empty_directory(self, initialized_gate):
        assert initialized_gate.get_jurisdiction_directory() == {}

    def test_approvals_for_token_oldest_first(self, initialized_gate, clock):
        gate = initialized_gate
        first, second = bytes.fromhex("01" * 32), bytes.fromhex("02" * 32)
        gate.create_pending_approval(first, 9, "GALICE", "GBOB", OperationType.TRANSFER)
        clock.advance(10)
        gate.create_pending_approval(second, 9, "GBOB", "GCAROL", OperationType.TRANSFER)
        gate.create_pending_approval(KEY, 10, "GALICE", "GBOB", OperationType.TRANSFER)

        listed = gate.list_approvals_for_token(9)
        assert [p.approval_key for p in listed] == [first, second]
        assert gate.list_approvals_for_token(11) == []

    def test_oversized_account_leaves_directory_empty(self, initialized_gate):
        with pytest.raises(InvalidAccountError):
            initialized_gate.set_address_jurisdiction(ADMIN, "G" * 129, "US")
        assert initialized_gate.get_jurisdiction_directory() == {}
