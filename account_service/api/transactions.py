"""
Transaction endpoints
"""

from fastapi import APIRouter, Depends

from .system import AccountSystem, get_account_system
from .schemas import (
    UseBalanceRequest, CancelBalanceRequest,
    TransactionResponse, QueryTransactionResponse
)


router = APIRouter()


@router.post("/use", response_model=TransactionResponse)
async def use_balance(
    request: UseBalanceRequest,
    system: AccountSystem = Depends(get_account_system)
):
    """Use account balance"""
    result = system.transaction_engine.use_balance(
        request.user_id, request.account_number, request.amount
    )
    return TransactionResponse.from_dto(result.unwrap())


@router.post("/cancel", response_model=TransactionResponse)
async def cancel_balance(
    request: CancelBalanceRequest,
    system: AccountSystem = Depends(get_account_system)
):
    """Cancel a balance use in full"""
    result = system.transaction_engine.cancel_balance(
        request.transaction_id, request.account_number, request.amount
    )
    return TransactionResponse.from_dto(result.unwrap())


@router.get("/{transaction_id}", response_model=QueryTransactionResponse)
async def query_transaction(
    transaction_id: str,
    system: AccountSystem = Depends(get_account_system)
):
    """Get transaction outcome"""
    result = system.transaction_engine.query_transaction(transaction_id)
    return QueryTransactionResponse.from_dto(result.unwrap())
