"""Tests for promo.core.errors module."""

from __future__ import annotations

from promo.core.errors import ErrorCode


class TestErrorCode:
    def test_values_are_stable(self) -> None:
        """The CI host depends on these numbers."""
        assert ErrorCode.OK == 0
        assert ErrorCode.USER_ERROR == 1
        assert ErrorCode.ENV_ERROR == 2
        assert ErrorCode.PROMOTION_FAILED == 3
        assert ErrorCode.NETWORK_ERROR == 4

    def test_str(self) -> None:
        assert str(ErrorCode.PROMOTION_FAILED) == "promotion failed"

    def test_success_flags(self) -> None:
        assert ErrorCode.OK.is_success is True
        assert ErrorCode.OK.is_error is False
        for code in ErrorCode:
            if code is not ErrorCode.OK:
                assert code.is_error is True
                assert code.is_success is False

    def test_usable_as_exit_status(self) -> None:
        assert int(ErrorCode.NETWORK_ERROR) == 4
