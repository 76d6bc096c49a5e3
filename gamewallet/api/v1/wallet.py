"""
Wallet API endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from gamewallet.api.deps import get_gaming_service
from gamewallet.core.auth import get_current_user_id
from gamewallet.schemas.requests import FundsRequest
from gamewallet.services.gaming import GamingService

router = APIRouter()


@router.post("/wallet", status_code=201)
async def open_wallet(
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    """
    Open the caller's wallet; opening twice returns the same wallet.
    """
    wallet = await service.open_wallet(user_id)
    return wallet.to_dict()


@router.get("/wallet")
async def get_wallet(
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    wallet = await service.get_wallet(user_id)
    return wallet.to_dict()


@router.get("/wallet/summary")
async def wallet_summary(
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    """
    Balances with USD values, totals, pending bets and open positions.
    """
    return await service.wallet_summary(user_id)


@router.post("/wallet/deposit")
async def deposit(
    request: FundsRequest,
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    wallet = await service.deposit(user_id, request.currency, request.amount)
    return wallet.to_dict()


@router.post("/wallet/withdraw")
async def withdraw(
    request: FundsRequest,
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    wallet = await service.withdraw(user_id, request.currency, request.amount)
    return wallet.to_dict()


@router.get("/wallet/transactions")
async def list_transactions(
    tx_type: Optional[str] = None,
    currency: Optional[str] = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    transactions = await service.list_transactions(
        user_id, tx_type=tx_type, currency=currency, limit=limit, offset=offset
    )
    return {"transactions": [t.to_dict() for t in transactions]}
