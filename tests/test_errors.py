"""
Tests for the error taxonomy and Result type
"""

import pytest

from account_service.errors import ErrorCode, Result, AccountServiceError


class TestErrorCode:

    def test_codes_are_unique_and_stable(self):
        codes = [error.code for error in ErrorCode]
        assert len(codes) == len(set(codes))
        assert ErrorCode.CANCEL_AMOUNT_MISMATCH.code == "CANCEL_AMOUNT_MISMATCH"

    def test_every_code_has_a_message(self):
        assert all(error.message for error in ErrorCode)

    def test_not_found_codes(self):
        not_found = {error for error in ErrorCode if error.is_not_found}
        assert not_found == {
            ErrorCode.USER_NOT_FOUND,
            ErrorCode.ACCOUNT_NOT_FOUND,
            ErrorCode.TRANSACTION_NOT_FOUND,
        }


class TestResult:

    def test_success(self):
        result = Result.success(42)
        assert result.is_success
        assert result.unwrap() == 42

    def test_success_without_value(self):
        assert Result.success().is_success

    def test_failure_unwrap_raises(self):
        result = Result.failure(ErrorCode.TRANSACTION_NOT_FOUND)

        assert not result.is_success
        with pytest.raises(AccountServiceError) as exc_info:
            result.unwrap()
        assert exc_info.value.error_code == ErrorCode.TRANSACTION_NOT_FOUND
        assert str(exc_info.value) == ErrorCode.TRANSACTION_NOT_FOUND.message

    def test_value_and_error_are_exclusive(self):
        with pytest.raises(ValueError):
            Result(value=1, error=ErrorCode.INVALID_REQUEST)
