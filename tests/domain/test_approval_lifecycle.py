"""
Tests for the pending approval value object and derived lifecycle state.

The window is inclusive: a record created at T is still live at
T + 604800 and expired from T + 604801 on.
"""

import pytest

from compliance_kernel.domain.approval import (
    APPROVAL_WINDOW_SECONDS,
    ApprovalState,
    PendingApproval,
    approval_state,
    normalize_approval_key,
)
from compliance_kernel.domain.rules import OperationType
from compliance_kernel.exceptions import MalformedApprovalKeyError

T = 1_700_000_000


def make_pending(approved: bool = False, timestamp: int = T) -> PendingApproval:
    return PendingApproval(
        approval_key=bytes(32),
        token_id=7,
        source="GSRC",
        destination="GDST",
        operation=OperationType.TRANSFER,
        timestamp=timestamp,
        approved=approved,
    )


class TestApprovalWindow:

    def test_window_is_seven_days(self):
        assert APPROVAL_WINDOW_SECONDS == 7 * 24 * 60 * 60

    def test_expires_at(self):
        assert make_pending().expires_at == T + 604800

    def test_live_on_last_second(self):
        assert not make_pending().is_expired(T + 604800)

    def test_expired_one_second_later(self):
        assert make_pending().is_expired(T + 604801)


class TestApprovalState:

    def test_new_record_is_pending(self):
        assert make_pending().state(T) is ApprovalState.PENDING

    def test_approved_inside_window(self):
        assert make_pending(approved=True).state(T + 100) is ApprovalState.APPROVED

    def test_expiry_overrides_approved_flag(self):
        assert make_pending(approved=True).state(T + 604801) is ApprovalState.EXPIRED

    def test_unapproved_expires(self):
        assert approval_state(T, False, T + 10**7) is ApprovalState.EXPIRED

    @pytest.mark.parametrize(
        "approved, now, expected",
        [
            (False, T, False),
            (True, T, True),
            (True, T + 604800, True),
            (True, T + 604801, False),
        ],
    )
    def test_is_valid(self, approved, now, expected):
        assert make_pending(approved=approved).is_valid(now) is expected


class TestApprovalKeys:

    def test_raw_bytes_accepted(self):
        key = bytes(range(32))
        assert normalize_approval_key(key) == key

    def test_bytearray_accepted(self):
        key = bytearray(range(32))
        assert normalize_approval_key(key) == bytes(key)

    def test_hex_string_accepted(self):
        key = bytes(range(32))
        assert normalize_approval_key(key.hex()) == key

    @pytest.mark.parametrize("length", [0, 31, 33, 64])
    def test_wrong_length_rejected(self, length):
        with pytest.raises(MalformedApprovalKeyError) as exc_info:
            normalize_approval_key(bytes(length))
        assert exc_info.value.length == length

    def test_non_hex_string_rejected(self):
        with pytest.raises(MalformedApprovalKeyError):
            normalize_approval_key("zz" * 32)

    def test_wrong_type_rejected(self):
        with pytest.raises(MalformedApprovalKeyError):
            normalize_approval_key(12345)
