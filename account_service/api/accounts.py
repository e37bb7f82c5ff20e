"""
Account lifecycle endpoints
"""

from fastapi import APIRouter, Depends, Query

from .system import AccountSystem, get_account_system
from .schemas import (
    CreateAccountRequest, DeleteAccountRequest,
    AccountResponse, AccountListResponse
)


router = APIRouter()


@router.post("", response_model=AccountResponse)
async def create_account(
    request: CreateAccountRequest,
    system: AccountSystem = Depends(get_account_system)
):
    """Register a new account"""
    result = system.account_manager.create_account(request.user_id, request.initial_balance)
    return AccountResponse.from_dto(result.unwrap())


@router.delete("", response_model=AccountResponse)
async def delete_account(
    request: DeleteAccountRequest,
    system: AccountSystem = Depends(get_account_system)
):
    """Unregister an empty account"""
    result = system.account_manager.unregister_account(request.user_id, request.account_number)
    return AccountResponse.from_dto(result.unwrap())


@router.get("", response_model=AccountListResponse)
async def get_accounts(
    user_id: int = Query(..., gt=0),
    system: AccountSystem = Depends(get_account_system)
):
    """List a user's accounts"""
    result = system.account_manager.get_accounts_by_user(user_id)
    return AccountListResponse(accounts=[AccountResponse.from_dto(dto) for dto in result.unwrap()])
