"""
Error Taxonomy Module

Closed set of failure kinds for account and transaction operations, and the
tagged Result type every core operation returns instead of raising.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar


T = TypeVar("T")


class ErrorCode(Enum):
    """Failure kinds with stable codes and user-facing messages"""
    USER_NOT_FOUND = ("USER_NOT_FOUND", "User not found")
    ACCOUNT_NOT_FOUND = ("ACCOUNT_NOT_FOUND", "Account not found")
    ACCOUNT_ALREADY_UNREGISTERED = (
        "ACCOUNT_ALREADY_UNREGISTERED", "Account is already unregistered"
    )
    USER_ACCOUNT_MISMATCH = (
        "USER_ACCOUNT_MISMATCH", "Account does not belong to the requesting user"
    )
    AMOUNT_EXCEEDS_BALANCE = (
        "AMOUNT_EXCEEDS_BALANCE", "Transaction amount exceeds account balance"
    )
    INVALID_REQUEST = ("INVALID_REQUEST", "Invalid request")
    TRANSACTION_NOT_FOUND = ("TRANSACTION_NOT_FOUND", "Transaction not found")
    TRANSACTION_ACCOUNT_MISMATCH = (
        "TRANSACTION_ACCOUNT_MISMATCH", "Transaction does not belong to this account"
    )
    CANCEL_AMOUNT_MISMATCH = (
        "CANCEL_AMOUNT_MISMATCH",
        "Partial cancellation is not allowed; amount must equal the original transaction"
    )
    TRANSACTION_TOO_OLD_TO_CANCEL = (
        "TRANSACTION_TOO_OLD_TO_CANCEL",
        "Transactions older than one year cannot be cancelled"
    )
    MAX_ACCOUNT_PER_USER = (
        "MAX_ACCOUNT_PER_USER", "User already holds the maximum number of accounts"
    )
    BALANCE_NOT_EMPTY = (
        "BALANCE_NOT_EMPTY", "Account with remaining balance cannot be unregistered"
    )

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message

    @property
    def is_not_found(self) -> bool:
        return self.code.endswith("_NOT_FOUND")


class AccountServiceError(Exception):
    """Raised at boundaries that convert a failed Result into an exception"""

    def __init__(self, error_code: ErrorCode):
        super().__init__(error_code.message)
        self.error_code = error_code


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a core operation: a success value XOR an ErrorCode.

    Callers check ``is_success`` and short-circuit on failure.
    """
    value: Optional[T] = None
    error: Optional[ErrorCode] = None

    def __post_init__(self):
        if self.value is not None and self.error is not None:
            raise ValueError("Result cannot carry both a value and an error")

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorCode) -> "Result[T]":
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, raising AccountServiceError on failure"""
        if self.error is not None:
            raise AccountServiceError(self.error)
        return self.value
