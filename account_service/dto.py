"""
Data transfer objects handed from the core to the presentation layer
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .accounts import Account
    from .transactions import Transaction, TransactionType, TransactionResultType


@dataclass(frozen=True)
class TransactionDto:
    """Outcome of a debit, reversal or query"""
    account_number: str
    transaction_type: 'TransactionType'
    transaction_result_type: 'TransactionResultType'
    amount: int
    balance_snapshot: int
    transaction_id: str
    transacted_at: datetime

    @classmethod
    def from_transaction(cls, transaction: 'Transaction') -> 'TransactionDto':
        return cls(
            account_number=transaction.account_number,
            transaction_type=transaction.transaction_type,
            transaction_result_type=transaction.transaction_result_type,
            amount=transaction.amount,
            balance_snapshot=transaction.balance_snapshot,
            transaction_id=transaction.transaction_id,
            transacted_at=transaction.transacted_at,
        )


@dataclass(frozen=True)
class AccountDto:
    user_id: int
    account_number: str
    balance: int
    registered_at: datetime
    unregistered_at: Optional[datetime] = None

    @classmethod
    def from_account(cls, account: 'Account') -> 'AccountDto':
        return cls(
            user_id=account.account_user_id,
            account_number=account.account_number,
            balance=account.balance,
            registered_at=account.registered_at,
            unregistered_at=account.unregistered_at,
        )
