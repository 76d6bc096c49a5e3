"""
Staking and vesting endpoints
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from gamewallet.api.deps import get_gaming_service
from gamewallet.core.auth import get_current_user_id
from gamewallet.core.exceptions import NotFound
from gamewallet.models.enums import PositionKind, PositionStatus
from gamewallet.schemas.filters import PositionFilter
from gamewallet.schemas.requests import StakeRequest, VestRequest
from gamewallet.services.accrual import projected_return
from gamewallet.services.gaming import GamingService

router = APIRouter()


@router.get("/staking/pools")
async def list_pools(service: GamingService = Depends(get_gaming_service)):
    pools = await service.list_pools()
    return {"pools": [p.to_dict() for p in pools]}


@router.get("/vesting/plans")
async def list_plans(service: GamingService = Depends(get_gaming_service)):
    plans = await service.list_plans()
    return {"plans": [p.to_dict() for p in plans]}


@router.get("/vesting/projection")
async def projection(
    amount: str,
    apy: str,
    lock_days: int = Query(..., ge=0),
):
    """
    Projected value at the end of a lock: amount * (1 + apy/100) ** (days/365).
    """
    compounded, profit = projected_return(amount, apy, lock_days)
    return {"compounded_amount": str(compounded), "profit": str(profit)}


@router.post("/staking/positions", status_code=201)
async def stake(
    request: StakeRequest,
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    position = await service.create_staking_position(
        user_id, request.pool_id, request.amount, auto_compound=request.auto_compound
    )
    return position.to_dict()


@router.post("/vesting/positions", status_code=201)
async def vest(
    request: VestRequest,
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    position = await service.create_vesting_position(
        user_id, request.plan_id, request.asset, request.amount, auto_reinvest=request.auto_reinvest
    )
    return position.to_dict()


@router.get("/positions")
async def list_positions(
    kind: Optional[PositionKind] = None,
    status: Optional[PositionStatus] = None,
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    position_filter = PositionFilter(
        kind=kind, status=status, since=since, until=until, limit=limit, offset=offset
    )
    positions = await service.list_positions(user_id, position_filter)
    return {"positions": [p.to_dict() for p in positions]}


async def _owned_position(service: GamingService, position_id: str, user_id: str):
    position = await service.get_position(position_id)
    if position.user_id != user_id:
        raise NotFound("Position", position_id)
    return position


@router.get("/positions/{position_id}")
async def get_position(
    position_id: str,
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    position = await _owned_position(service, position_id, user_id)
    return position.to_dict()


@router.post("/positions/{position_id}/complete")
async def complete_position(
    position_id: str,
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    await _owned_position(service, position_id, user_id)
    position = await service.complete_position(position_id)
    return position.to_dict()


@router.post("/positions/{position_id}/early-withdraw")
async def early_withdraw(
    position_id: str,
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    await _owned_position(service, position_id, user_id)
    position = await service.early_withdraw(position_id)
    return position.to_dict()
