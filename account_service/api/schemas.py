"""
Pydantic schemas for API requests and responses

Wire names are camelCase; Python attributes stay snake_case.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from ..dto import AccountDto, TransactionDto


MIN_TRANSACTION_AMOUNT = 10
MAX_TRANSACTION_AMOUNT = 1_000_000_000


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# Transaction schemas
class UseBalanceRequest(CamelModel):
    user_id: int = Field(..., alias="userId", gt=0)
    account_number: str = Field(..., alias="accountNumber", min_length=10, max_length=10)
    amount: int = Field(..., ge=MIN_TRANSACTION_AMOUNT, le=MAX_TRANSACTION_AMOUNT)


class CancelBalanceRequest(CamelModel):
    transaction_id: str = Field(..., alias="transactionId", min_length=1)
    account_number: str = Field(..., alias="accountNumber", min_length=10, max_length=10)
    amount: int = Field(..., ge=MIN_TRANSACTION_AMOUNT, le=MAX_TRANSACTION_AMOUNT)


class TransactionResponse(CamelModel):
    """Response for debit and reversal requests"""
    account_number: str = Field(..., alias="accountNumber")
    transaction_result: str = Field(..., alias="transactionResult", description="SUCCESS or FAIL")
    transaction_id: str = Field(..., alias="transactionId")
    amount: int
    transacted_at: datetime = Field(..., alias="transactedAt")

    @classmethod
    def from_dto(cls, dto: TransactionDto) -> 'TransactionResponse':
        return cls(
            account_number=dto.account_number,
            transaction_result=dto.transaction_result_type.value,
            transaction_id=dto.transaction_id,
            amount=dto.amount,
            transacted_at=dto.transacted_at,
        )


class QueryTransactionResponse(TransactionResponse):
    transaction_type: str = Field(..., alias="transactionType", description="USE or CANCEL")

    @classmethod
    def from_dto(cls, dto: TransactionDto) -> 'QueryTransactionResponse':
        return cls(
            account_number=dto.account_number,
            transaction_type=dto.transaction_type.value,
            transaction_result=dto.transaction_result_type.value,
            transaction_id=dto.transaction_id,
            amount=dto.amount,
            transacted_at=dto.transacted_at,
        )


# Account schemas
class CreateAccountRequest(CamelModel):
    user_id: int = Field(..., alias="userId", gt=0)
    initial_balance: int = Field(0, alias="initialBalance", ge=0)


class DeleteAccountRequest(CamelModel):
    user_id: int = Field(..., alias="userId", gt=0)
    account_number: str = Field(..., alias="accountNumber", min_length=10, max_length=10)


class AccountResponse(CamelModel):
    user_id: int = Field(..., alias="userId")
    account_number: str = Field(..., alias="accountNumber")
    balance: int
    registered_at: datetime = Field(..., alias="registeredAt")
    unregistered_at: Optional[datetime] = Field(None, alias="unregisteredAt")

    @classmethod
    def from_dto(cls, dto: AccountDto) -> 'AccountResponse':
        return cls(
            user_id=dto.user_id,
            account_number=dto.account_number,
            balance=dto.balance,
            registered_at=dto.registered_at,
            unregistered_at=dto.unregistered_at,
        )


class AccountListResponse(CamelModel):
    accounts: List[AccountResponse]


class ErrorResponse(CamelModel):
    error_code: str = Field(..., alias="errorCode")
    error_message: str = Field(..., alias="errorMessage")
