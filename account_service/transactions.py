"""
Transaction Processing Module

Debits ("use balance"), full reversals ("cancel balance") and lookups of
transactions against accounts. Every attempted mutation leaves an immutable
transaction record: successful ones together with the balance change, failed
ones (storage errors while persisting) through the failed-transaction path.
Precondition rejections write nothing.
"""

from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Any, Dict, Optional
from enum import Enum
import uuid

from .accounts import Account, AccountRepository
from .dto import TransactionDto
from .errors import ErrorCode, Result
from .storage import StorageInterface, StorageError, RecordMetadata
from .users import AccountUserRepository
from .logging_config import get_logger, log_action


class TransactionType(Enum):
    USE = "USE"
    CANCEL = "CANCEL"


class TransactionResultType(Enum):
    SUCCESS = "SUCCESS"
    FAIL = "FAIL"


@dataclass(frozen=True)
class Transaction:
    """
    Append-only record of one attempted debit or reversal.

    ``balance_snapshot`` is the account balance right after the attempt, or
    the untouched balance when the attempt failed.
    """
    id: str
    transaction_id: str
    transaction_type: TransactionType
    transaction_result_type: TransactionResultType
    account_id: str
    account_number: str
    amount: int
    balance_snapshot: int
    transacted_at: datetime
    meta: RecordMetadata

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "transaction_id": self.transaction_id,
            "transaction_type": self.transaction_type.value,
            "transaction_result_type": self.transaction_result_type.value,
            "account_id": self.account_id,
            "account_number": self.account_number,
            "amount": self.amount,
            "balance_snapshot": self.balance_snapshot,
            "transacted_at": self.transacted_at.isoformat(),
        }
        result.update(self.meta.to_dict())
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        return cls(
            id=data["id"],
            transaction_id=data["transaction_id"],
            transaction_type=TransactionType(data["transaction_type"]),
            transaction_result_type=TransactionResultType(data["transaction_result_type"]),
            account_id=data["account_id"],
            account_number=data["account_number"],
            amount=int(data["amount"]),
            balance_snapshot=int(data["balance_snapshot"]),
            transacted_at=datetime.fromisoformat(data["transacted_at"]),
            meta=RecordMetadata.from_dict(data),
        )


class TransactionRepository:
    """Append-only access to transaction records"""

    def __init__(self, storage: StorageInterface, table_name: str = "transactions"):
        self.storage = storage
        self.table_name = table_name

    def find_by_transaction_id(self, transaction_id: str) -> Optional[Transaction]:
        found = self.storage.find(self.table_name, {"transaction_id": transaction_id})
        if found:
            return Transaction.from_dict(found[0])
        return None

    def save(self, transaction: Transaction) -> Transaction:
        if self.storage.load(self.table_name, transaction.id):
            raise StorageError(f"Transaction {transaction.transaction_id} already recorded")
        self.storage.save(self.table_name, transaction.id, transaction.to_dict())
        return transaction

    def count(self) -> int:
        return self.storage.count(self.table_name)


def one_year_before(moment: datetime) -> datetime:
    """Same calendar date one year earlier; Feb 29 maps to Feb 28"""
    try:
        return moment.replace(year=moment.year - 1)
    except ValueError:
        return moment.replace(year=moment.year - 1, day=28)


class TransactionEngine:
    """
    Orchestrates debits, reversals, failure recording and queries.

    Holds no per-request state; every call reloads what it needs through the
    repositories.
    """

    def __init__(
        self,
        storage: StorageInterface,
        user_repository: AccountUserRepository,
        account_repository: AccountRepository,
        transaction_repository: TransactionRepository,
        optimistic_locking: bool = False
    ):
        self.storage = storage
        self.users = user_repository
        self.accounts = account_repository
        self.transactions = transaction_repository
        self.optimistic_locking = optimistic_locking
        self.logger = get_logger("account_service.transactions")

    def use_balance(self, user_id: int, account_number: str, amount: int) -> Result[TransactionDto]:
        """
        Debit an account owned by the requesting user.

        Args:
            user_id: Requesting user
            account_number: Account to debit
            amount: Positive amount in the smallest currency unit

        Returns:
            Result with the SUCCESS transaction, or the first failing
            precondition: USER_NOT_FOUND, ACCOUNT_NOT_FOUND,
            USER_ACCOUNT_MISMATCH, ACCOUNT_ALREADY_UNREGISTERED,
            AMOUNT_EXCEEDS_BALANCE

        Raises:
            StorageError: persisting the debit failed; a FAIL transaction has
                been recorded before re-raising
        """
        user = self.users.find_by_id(user_id)
        if not user:
            return self._reject("use_balance", ErrorCode.USER_NOT_FOUND, account_number, amount)

        account = self.accounts.find_by_account_number(account_number)
        if not account:
            return self._reject("use_balance", ErrorCode.ACCOUNT_NOT_FOUND, account_number, amount)

        if account.account_user_id != user.id:
            return self._reject("use_balance", ErrorCode.USER_ACCOUNT_MISMATCH, account_number, amount)

        if not account.is_in_use:
            return self._reject("use_balance", ErrorCode.ACCOUNT_ALREADY_UNREGISTERED, account_number, amount)

        loaded_version = account.version
        debit = account.use_balance(amount)
        if not debit.is_success:
            return self._reject("use_balance", debit.error, account_number, amount)

        try:
            transaction = self._commit(account, loaded_version, TransactionType.USE, amount)
        except StorageError:
            log_action(
                self.logger, "error", "Debit could not be persisted",
                action="use_balance", resource=f"account:{account_number}",
                extra={"amount": amount}, exc_info=True
            )
            self.save_failed_use_transaction(account_number, amount)
            raise

        log_action(
            self.logger, "info", "Balance used",
            action="use_balance", resource=f"transaction:{transaction.transaction_id}",
            extra={
                "account_number": account_number,
                "amount": amount,
                "balance_snapshot": transaction.balance_snapshot
            }
        )
        return Result.success(TransactionDto.from_transaction(transaction))

    def save_failed_use_transaction(self, account_number: str, amount: int) -> Result[TransactionDto]:
        """Record a debit attempt that failed after its preconditions passed"""
        return self._save_failed_transaction(TransactionType.USE, account_number, amount)

    def cancel_balance(self, transaction_id: str, account_number: str, amount: int) -> Result[TransactionDto]:
        """
        Fully reverse an earlier debit.

        Returns:
            Result with the new CANCEL/SUCCESS transaction, or the first
            failing precondition: TRANSACTION_NOT_FOUND, ACCOUNT_NOT_FOUND,
            TRANSACTION_ACCOUNT_MISMATCH, CANCEL_AMOUNT_MISMATCH,
            TRANSACTION_TOO_OLD_TO_CANCEL

        Raises:
            StorageError: persisting the reversal failed; a FAIL transaction
                has been recorded before re-raising
        """
        original = self.transactions.find_by_transaction_id(transaction_id)
        if not original:
            return self._reject("cancel_balance", ErrorCode.TRANSACTION_NOT_FOUND, account_number, amount)

        account = self.accounts.find_by_account_number(account_number)
        if not account:
            return self._reject("cancel_balance", ErrorCode.ACCOUNT_NOT_FOUND, account_number, amount)

        if original.account_id != account.id:
            return self._reject("cancel_balance", ErrorCode.TRANSACTION_ACCOUNT_MISMATCH, account_number, amount)

        if original.amount != amount:
            return self._reject("cancel_balance", ErrorCode.CANCEL_AMOUNT_MISMATCH, account_number, amount)

        if original.transacted_at < one_year_before(datetime.now(timezone.utc)):
            return self._reject("cancel_balance", ErrorCode.TRANSACTION_TOO_OLD_TO_CANCEL, account_number, amount)

        loaded_version = account.version
        credit = account.cancel_balance(amount)
        if not credit.is_success:
            return self._reject("cancel_balance", credit.error, account_number, amount)

        try:
            transaction = self._commit(account, loaded_version, TransactionType.CANCEL, amount)
        except StorageError:
            log_action(
                self.logger, "error", "Cancellation could not be persisted",
                action="cancel_balance", resource=f"transaction:{transaction_id}",
                extra={"account_number": account_number, "amount": amount}, exc_info=True
            )
            self.save_failed_cancel_transaction(account_number, amount)
            raise

        log_action(
            self.logger, "info", "Balance use cancelled",
            action="cancel_balance", resource=f"transaction:{transaction.transaction_id}",
            extra={
                "original_transaction_id": transaction_id,
                "account_number": account_number,
                "amount": amount,
                "balance_snapshot": transaction.balance_snapshot
            }
        )
        return Result.success(TransactionDto.from_transaction(transaction))

    def save_failed_cancel_transaction(self, account_number: str, amount: int) -> Result[TransactionDto]:
        """Record a reversal attempt that failed after its preconditions passed"""
        return self._save_failed_transaction(TransactionType.CANCEL, account_number, amount)

    def query_transaction(self, transaction_id: str) -> Result[TransactionDto]:
        transaction = self.transactions.find_by_transaction_id(transaction_id)
        if not transaction:
            return Result.failure(ErrorCode.TRANSACTION_NOT_FOUND)
        return Result.success(TransactionDto.from_transaction(transaction))

    def _commit(self, account: Account, loaded_version: int,
                transaction_type: TransactionType, amount: int) -> Transaction:
        """Save the mutated account and its SUCCESS record as one unit"""
        expected_version = loaded_version if self.optimistic_locking else None
        with self.storage.atomic():
            self.accounts.save(account, expected_version=expected_version)
            return self.transactions.save(self._build_transaction(
                account, transaction_type, TransactionResultType.SUCCESS, amount
            ))

    def _save_failed_transaction(self, transaction_type: TransactionType,
                                 account_number: str, amount: int) -> Result[TransactionDto]:
        account = self.accounts.find_by_account_number(account_number)
        if not account:
            return Result.failure(ErrorCode.ACCOUNT_NOT_FOUND)

        transaction = self.transactions.save(self._build_transaction(
            account, transaction_type, TransactionResultType.FAIL, amount
        ))

        log_action(
            self.logger, "warning", "Failed transaction recorded",
            action=f"save_failed_{transaction_type.value.lower()}_transaction",
            resource=f"transaction:{transaction.transaction_id}",
            extra={"account_number": account_number, "amount": amount}
        )
        return Result.success(TransactionDto.from_transaction(transaction))

    def _build_transaction(self, account: Account, transaction_type: TransactionType,
                           result_type: TransactionResultType, amount: int) -> Transaction:
        now = datetime.now(timezone.utc)
        return Transaction(
            id=str(uuid.uuid4()),
            transaction_id=uuid.uuid4().hex,
            transaction_type=transaction_type,
            transaction_result_type=result_type,
            account_id=account.id,
            account_number=account.account_number,
            amount=amount,
            balance_snapshot=account.balance,
            transacted_at=now,
            meta=RecordMetadata(created_at=now, updated_at=now),
        )

    def _reject(self, action: str, error: ErrorCode, account_number: str, amount: int) -> Result[TransactionDto]:
        log_action(
            self.logger, "warning", f"Request rejected: {error.code}",
            action=action, resource=f"account:{account_number}",
            extra={"amount": amount, "error_code": error.code}
        )
        return Result.failure(error)
