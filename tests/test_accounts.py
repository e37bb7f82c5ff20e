"""
Test suite for accounts module

Tests the Account entity invariants, the repository and the account
lifecycle operations.
"""

import pytest
from datetime import datetime, timezone

from account_service.errors import ErrorCode
from account_service.storage import InMemoryStorage, RecordMetadata, ConcurrentModificationError
from account_service.users import AccountUserRepository
from account_service.accounts import (
    Account, AccountStatus, AccountRepository, AccountManager, FIRST_ACCOUNT_NUMBER
)


def make_account(balance=10000, status=AccountStatus.IN_USE):
    now = datetime.now(timezone.utc)
    return Account(
        id="account-1",
        account_user_id=12,
        account_number="1000000000",
        account_status=status,
        balance=balance,
        registered_at=now,
        meta=RecordMetadata(created_at=now, updated_at=now),
    )


class TestAccount:
    """Test Account entity"""

    def test_use_balance(self):
        account = make_account(10000)

        result = account.use_balance(1010)

        assert result.is_success
        assert account.balance == 8990

    def test_use_balance_exceeding(self):
        account = make_account(100)

        result = account.use_balance(1000)

        assert result.error == ErrorCode.AMOUNT_EXCEEDS_BALANCE
        assert account.balance == 100

    def test_cancel_balance(self):
        account = make_account(10000)

        assert account.cancel_balance(1000).is_success
        assert account.balance == 11000

    def test_cancel_negative_amount(self):
        account = make_account(10000)

        result = account.cancel_balance(-1)

        assert result.error == ErrorCode.INVALID_REQUEST
        assert account.balance == 10000

    def test_negative_balance_rejected(self):
        with pytest.raises(ValueError):
            make_account(-1)

    def test_unregister(self):
        account = make_account(0)

        account.unregister()

        assert account.account_status == AccountStatus.UNREGISTERED
        assert not account.is_in_use
        assert account.unregistered_at is not None

    def test_dict_round_trip_keeps_unregistered_at(self):
        account = make_account(0)
        account.unregister()

        restored = Account.from_dict(account.to_dict())

        assert restored == account


class TestAccountRepository:

    def setup_method(self):
        self.storage = InMemoryStorage()
        self.repository = AccountRepository(self.storage)

    def test_find_by_account_number_returns_copy(self):
        self.repository.save(make_account(500))

        first = self.repository.find_by_account_number("1000000000")
        first.use_balance(100)
        second = self.repository.find_by_account_number("1000000000")

        assert second.balance == 500

    def test_save_increments_version(self):
        account = self.repository.save(make_account())
        assert account.version == 1

        self.repository.save(account)
        assert self.repository.find_by_id("account-1").version == 2

    def test_expected_version_mismatch(self):
        self.repository.save(make_account())
        stale = self.repository.find_by_id("account-1")
        fresh = self.repository.find_by_id("account-1")
        self.repository.save(fresh, expected_version=1)

        with pytest.raises(ConcurrentModificationError):
            self.repository.save(stale, expected_version=1)

    def test_unknown_account(self):
        assert self.repository.find_by_account_number("0000000000") is None
        assert self.repository.find_by_id("nope") is None


class TestAccountManager:
    """Test account lifecycle"""

    def setup_method(self):
        self.storage = InMemoryStorage()
        self.users = AccountUserRepository(self.storage)
        self.accounts = AccountRepository(self.storage)
        self.manager = AccountManager(self.storage, self.users, self.accounts, max_accounts_per_user=3)
        self.pobi = self.users.create("Pobi")
        self.harry = self.users.create("Harry")

    def test_create_first_account(self):
        result = self.manager.create_account(self.pobi.id, 1000)

        assert result.is_success
        assert result.value.account_number == FIRST_ACCOUNT_NUMBER
        assert result.value.balance == 1000
        assert result.value.user_id == self.pobi.id
        stored = self.accounts.find_by_account_number(FIRST_ACCOUNT_NUMBER)
        assert stored.account_status == AccountStatus.IN_USE

    def test_account_numbers_increase(self):
        self.manager.create_account(self.pobi.id, 0)
        result = self.manager.create_account(self.harry.id, 0)

        assert result.value.account_number == "1000000001"

    def test_create_account_user_not_found(self):
        assert self.manager.create_account(99, 0).error == ErrorCode.USER_NOT_FOUND

    def test_create_account_negative_balance(self):
        assert self.manager.create_account(self.pobi.id, -5).error == ErrorCode.INVALID_REQUEST

    def test_max_accounts_per_user(self):
        for _ in range(3):
            assert self.manager.create_account(self.pobi.id, 0).is_success

        result = self.manager.create_account(self.pobi.id, 0)

        assert result.error == ErrorCode.MAX_ACCOUNT_PER_USER
        # Other users are unaffected
        assert self.manager.create_account(self.harry.id, 0).is_success

    def test_unregister_account(self):
        account_number = self.manager.create_account(self.pobi.id, 0).value.account_number

        result = self.manager.unregister_account(self.pobi.id, account_number)

        assert result.is_success
        assert result.value.unregistered_at is not None
        stored = self.accounts.find_by_account_number(account_number)
        assert stored.account_status == AccountStatus.UNREGISTERED

    def test_unregister_failures(self):
        account_number = self.manager.create_account(self.pobi.id, 100).value.account_number

        assert self.manager.unregister_account(99, account_number).error == ErrorCode.USER_NOT_FOUND
        assert self.manager.unregister_account(self.pobi.id, "9999999999").error == ErrorCode.ACCOUNT_NOT_FOUND
        assert self.manager.unregister_account(self.harry.id, account_number).error == ErrorCode.USER_ACCOUNT_MISMATCH
        assert self.manager.unregister_account(self.pobi.id, account_number).error == ErrorCode.BALANCE_NOT_EMPTY

    def test_unregister_twice(self):
        account_number = self.manager.create_account(self.pobi.id, 0).value.account_number
        self.manager.unregister_account(self.pobi.id, account_number)

        result = self.manager.unregister_account(self.pobi.id, account_number)

        assert result.error == ErrorCode.ACCOUNT_ALREADY_UNREGISTERED

    def test_get_accounts_by_user(self):
        self.manager.create_account(self.pobi.id, 10)
        self.manager.create_account(self.harry.id, 20)
        self.manager.create_account(self.pobi.id, 30)

        result = self.manager.get_accounts_by_user(self.pobi.id)

        assert [dto.balance for dto in result.value] == [10, 30]
        assert self.manager.get_accounts_by_user(99).error == ErrorCode.USER_NOT_FOUND

    def test_get_accounts_for_user_without_accounts(self):
        result = self.manager.get_accounts_by_user(self.harry.id)

        assert result.is_success
        assert result.value == []
