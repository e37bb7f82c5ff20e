"""
Account Management Module

Balance-bearing accounts owned by an AccountUser, the repository that loads
and saves them, and the lifecycle operations (register, unregister, list).
Balances are integers in the smallest currency unit and never go negative.
"""

from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from enum import Enum
import uuid

from .dto import AccountDto
from .errors import ErrorCode, Result
from .storage import StorageInterface, RecordMetadata, ConcurrentModificationError
from .users import AccountUserRepository
from .logging_config import get_logger, log_action


FIRST_ACCOUNT_NUMBER = "1000000000"


class AccountStatus(Enum):
    """Account lifecycle states"""
    IN_USE = "IN_USE"              # Accepts debits and reversals
    UNREGISTERED = "UNREGISTERED"  # Terminal for debits


@dataclass
class Account:
    """
    Account with its current balance.

    ``version`` is incremented on every save; repositories may compare it to
    detect a concurrent update (see AccountRepository.save).
    """
    id: str
    account_user_id: int
    account_number: str
    account_status: AccountStatus
    balance: int
    registered_at: datetime
    meta: RecordMetadata
    unregistered_at: Optional[datetime] = None
    version: int = 0

    def __post_init__(self):
        if self.balance < 0:
            raise ValueError("Account balance cannot be negative")

    @property
    def is_in_use(self) -> bool:
        return self.account_status == AccountStatus.IN_USE

    def use_balance(self, amount: int) -> Result[None]:
        """Debit the balance; amount positivity is validated upstream"""
        if amount > self.balance:
            return Result.failure(ErrorCode.AMOUNT_EXCEEDS_BALANCE)

        self.balance -= amount
        self.meta.touch()
        return Result.success()

    def cancel_balance(self, amount: int) -> Result[None]:
        """Credit back a previously debited amount"""
        if amount < 0:
            return Result.failure(ErrorCode.INVALID_REQUEST)

        self.balance += amount
        self.meta.touch()
        return Result.success()

    def unregister(self, now: Optional[datetime] = None) -> None:
        self.account_status = AccountStatus.UNREGISTERED
        self.unregistered_at = now or datetime.now(timezone.utc)
        self.meta.touch()

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "account_user_id": self.account_user_id,
            "account_number": self.account_number,
            "account_status": self.account_status.value,
            "balance": self.balance,
            "registered_at": self.registered_at.isoformat(),
            "unregistered_at": self.unregistered_at.isoformat() if self.unregistered_at else None,
            "version": self.version,
        }
        result.update(self.meta.to_dict())
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Account':
        unregistered_at = None
        if data.get("unregistered_at"):
            unregistered_at = datetime.fromisoformat(data["unregistered_at"])

        return cls(
            id=data["id"],
            account_user_id=int(data["account_user_id"]),
            account_number=data["account_number"],
            account_status=AccountStatus(data["account_status"]),
            balance=int(data["balance"]),
            registered_at=datetime.fromisoformat(data["registered_at"]),
            unregistered_at=unregistered_at,
            version=int(data.get("version", 0)),
            meta=RecordMetadata.from_dict(data),
        )


class AccountRepository:
    """Loads and saves accounts; every load returns an independent copy"""

    def __init__(self, storage: StorageInterface, table_name: str = "accounts"):
        self.storage = storage
        self.table_name = table_name

    def find_by_id(self, account_id: str) -> Optional[Account]:
        data = self.storage.load(self.table_name, account_id)
        if data:
            return Account.from_dict(data)
        return None

    def find_by_account_number(self, account_number: str) -> Optional[Account]:
        found = self.storage.find(self.table_name, {"account_number": account_number})
        if found:
            return Account.from_dict(found[0])
        return None

    def find_by_user_id(self, user_id: int) -> List[Account]:
        found = self.storage.find(self.table_name, {"account_user_id": user_id})
        return [Account.from_dict(data) for data in found]

    def count_by_user_id(self, user_id: int) -> int:
        return len(self.storage.find(self.table_name, {"account_user_id": user_id}))

    def latest_account_number(self) -> Optional[str]:
        numbers = [data["account_number"] for data in self.storage.load_all(self.table_name)]
        if not numbers:
            return None
        return max(numbers, key=int)

    def save(self, account: Account, expected_version: Optional[int] = None) -> Account:
        """
        Persist the account and bump its version.

        When ``expected_version`` is given the save is rejected with
        ConcurrentModificationError unless the stored record still carries
        that version.
        """
        if expected_version is not None:
            stored = self.storage.load(self.table_name, account.id)
            stored_version = int(stored.get("version", 0)) if stored else 0
            if stored_version != expected_version:
                raise ConcurrentModificationError(
                    f"Account {account.account_number} was modified concurrently "
                    f"(expected version {expected_version}, found {stored_version})"
                )

        account.version += 1
        self.storage.save(self.table_name, account.id, account.to_dict())
        return account


class AccountManager:
    """
    Account lifecycle: registering new accounts, unregistering empty ones and
    listing a user's accounts.
    """

    def __init__(
        self,
        storage: StorageInterface,
        user_repository: AccountUserRepository,
        account_repository: AccountRepository,
        max_accounts_per_user: int = 10
    ):
        self.storage = storage
        self.users = user_repository
        self.accounts = account_repository
        self.max_accounts_per_user = max_accounts_per_user
        self.logger = get_logger("account_service.accounts")

    def create_account(self, user_id: int, initial_balance: int) -> Result[AccountDto]:
        """
        Register a new IN_USE account for a user.

        Args:
            user_id: Owner of the new account
            initial_balance: Opening balance in the smallest currency unit

        Returns:
            Result carrying the new account, or USER_NOT_FOUND,
            MAX_ACCOUNT_PER_USER or INVALID_REQUEST
        """
        user = self.users.find_by_id(user_id)
        if not user:
            return Result.failure(ErrorCode.USER_NOT_FOUND)

        if initial_balance < 0:
            return Result.failure(ErrorCode.INVALID_REQUEST)

        if self.accounts.count_by_user_id(user.id) >= self.max_accounts_per_user:
            return Result.failure(ErrorCode.MAX_ACCOUNT_PER_USER)

        now = datetime.now(timezone.utc)
        with self.storage.atomic():
            latest = self.accounts.latest_account_number()
            account_number = str(int(latest) + 1) if latest else FIRST_ACCOUNT_NUMBER

            account = self.accounts.save(Account(
                id=str(uuid.uuid4()),
                account_user_id=user.id,
                account_number=account_number,
                account_status=AccountStatus.IN_USE,
                balance=initial_balance,
                registered_at=now,
                meta=RecordMetadata(created_at=now, updated_at=now),
            ))

        log_action(
            self.logger, "info", "Account registered",
            action="create_account", resource=f"account:{account.account_number}",
            extra={"user_id": user.id, "initial_balance": initial_balance}
        )
        return Result.success(AccountDto.from_account(account))

    def unregister_account(self, user_id: int, account_number: str) -> Result[AccountDto]:
        """Unregister an empty account owned by the user"""
        user = self.users.find_by_id(user_id)
        if not user:
            return Result.failure(ErrorCode.USER_NOT_FOUND)

        account = self.accounts.find_by_account_number(account_number)
        if not account:
            return Result.failure(ErrorCode.ACCOUNT_NOT_FOUND)

        if account.account_user_id != user.id:
            return Result.failure(ErrorCode.USER_ACCOUNT_MISMATCH)

        if not account.is_in_use:
            return Result.failure(ErrorCode.ACCOUNT_ALREADY_UNREGISTERED)

        if account.balance > 0:
            return Result.failure(ErrorCode.BALANCE_NOT_EMPTY)

        account.unregister()
        self.accounts.save(account)

        log_action(
            self.logger, "info", "Account unregistered",
            action="unregister_account", resource=f"account:{account_number}",
            extra={"user_id": user.id}
        )
        return Result.success(AccountDto.from_account(account))

    def get_accounts_by_user(self, user_id: int) -> Result[List[AccountDto]]:
        user = self.users.find_by_id(user_id)
        if not user:
            return Result.failure(ErrorCode.USER_NOT_FOUND)

        accounts = sorted(self.accounts.find_by_user_id(user.id), key=lambda a: int(a.account_number))
        return Result.success([AccountDto.from_account(account) for account in accounts])
