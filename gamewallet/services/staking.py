"""
Staking and vesting positions.

Opening a position debits the principal; closing it releases the principal
(less any early-exit penalty) and pays the rewards accrued so far.
"""

import logging
import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from gamewallet.core.clock import as_utc, utcnow
from gamewallet.core.exceptions import (
    AboveMaximum,
    AlreadySettled,
    BelowMinimum,
    InvalidSelection,
    PositionLocked,
    PositionMatured,
)
from gamewallet.core.metrics import POSITIONS_CLOSED, POSITIONS_OPENED
from gamewallet.core.money import quantize, validate_amount, validate_currency
from gamewallet.models.enums import LedgerPurpose, PositionKind, PositionStatus, TxType
from gamewallet.models.staking import StakingPosition, VestingPosition
from gamewallet.repos import staking_repo
from gamewallet.repos.transaction_repo import create_transaction
from gamewallet.repos.wallet_repo import credit, debit, get_wallet
from gamewallet.services.accrual import accrual_window, accrue_rewards

# Configure logging
logger = logging.getLogger(__name__)

Position = Union[StakingPosition, VestingPosition]

EARLY_EXIT_STATUS = {
    PositionKind.STAKING.value: PositionStatus.UNSTAKING,
    PositionKind.VESTING.value: PositionStatus.EARLY_WITHDRAWAL,
}


async def create_staking_position(
    session: AsyncSession,
    user_id: str,
    pool_id: str,
    amount: Any,
    auto_compound: bool = True,
    now: Optional[datetime] = None,
) -> StakingPosition:
    """
    Stake ``amount`` of the pool's asset.

    Raises:
        NotFound: unknown pool
        BelowMinimum: amount below the pool's minimum stake
        InvalidSelection: pool asset is not a wallet currency
        InsufficientFunds: wallet cannot cover the stake
    """
    now = now or utcnow()
    pool = await staking_repo.get_pool_by_id(session, pool_id)
    amount = validate_amount(amount)
    asset = validate_currency(pool.asset)
    if amount < pool.min_stake:
        raise BelowMinimum(f"Minimum stake is {pool.min_stake} {pool.asset}")

    lock_days = pool.lock_period_days or 0
    position = StakingPosition(
        user_id=user_id,
        pool_id=pool.id,
        asset=asset,
        amount=amount,
        apy=pool.apy,
        compounding_frequency=pool.reward_frequency,
        penalty_pct=pool.early_unstake_penalty or Decimal("0"),
        auto_compound=auto_compound,
        start_date=now,
        end_date=now + timedelta(days=lock_days) if lock_days > 0 else None,
        status=PositionStatus.ACTIVE.value,
        earned_rewards=Decimal("0"),
        last_reward_date=now,
    )
    await _open(session, position, now)
    pool.total_staked = (pool.total_staked or Decimal("0")) + amount
    return position


async def create_vesting_position(
    session: AsyncSession,
    user_id: str,
    plan_id: str,
    asset: str,
    amount: Any,
    auto_reinvest: bool = False,
    now: Optional[datetime] = None,
) -> VestingPosition:
    """
    Lock ``amount`` of ``asset`` into a vesting plan for its full duration.

    Raises:
        NotFound: unknown plan
        InvalidSelection: asset not supported by the plan or not a wallet currency
        BelowMinimum / AboveMaximum: amount outside the plan's investment range
        InsufficientFunds: wallet cannot cover the amount
    """
    now = now or utcnow()
    plan = await staking_repo.get_plan_by_id(session, plan_id)
    amount = validate_amount(amount)
    code = (asset or "").upper()
    if code not in (plan.supported_assets or []):
        raise InvalidSelection(f"{plan.name} does not support {asset}")
    code = validate_currency(code)
    if amount < plan.min_investment:
        raise BelowMinimum(f"Minimum investment for {plan.name} is {plan.min_investment}")
    if amount > plan.max_investment:
        raise AboveMaximum(f"Maximum investment for {plan.name} is {plan.max_investment}")

    position = VestingPosition(
        user_id=user_id,
        plan_id=plan.id,
        asset=code,
        amount=amount,
        apy=plan.apy,
        compounding_frequency=plan.compounding_frequency,
        penalty_pct=plan.early_withdrawal_penalty or Decimal("0"),
        auto_reinvest=auto_reinvest,
        start_date=now,
        end_date=now + timedelta(days=plan.duration_days),
        status=PositionStatus.ACTIVE.value,
        earned_rewards=Decimal("0"),
        last_reward_date=now,
    )
    await _open(session, position, now)
    return position


async def _open(session: AsyncSession, position: Position, now: datetime) -> None:
    position.id = position.id or uuid.uuid4().hex
    await debit(
        session,
        position.user_id,
        position.asset,
        position.amount,
        purpose=LedgerPurpose.STAKE,
        now=now,
        related_entity=f"{position.kind}_position",
        related_id=position.id,
        description=f"Opened {position.kind} position",
    )
    session.add(position)
    await session.flush()
    POSITIONS_OPENED.labels(kind=position.kind).inc()
    logger.info(f"Opened {position.kind} position {position.id} for user {position.user_id}: {position.amount} {position.asset}")


def refresh_position(position: Position, now: Optional[datetime] = None) -> Position:
    """
    Bring ``earned_rewards`` up to ``now`` (capped at the end date).

    Rewards never go down while the position is active; closed positions are
    left untouched.
    """
    if position.status != PositionStatus.ACTIVE.value:
        return position

    now = now or utcnow()
    days = accrual_window(position.start_date, position.end_date, now)
    earned = accrue_rewards(
        position.amount,
        position.apy,
        days,
        frequency=position.compounding_frequency,
        compound=position.compound,
    )
    if earned > (position.earned_rewards or Decimal("0")):
        position.earned_rewards = earned
    stop = as_utc(now)
    if position.end_date is not None and as_utc(position.end_date) < stop:
        stop = as_utc(position.end_date)
    position.last_reward_date = stop
    return position


def is_matured(position: Position, now: datetime) -> bool:
    return position.end_date is not None and as_utc(now) >= as_utc(position.end_date)


async def _release(
    session: AsyncSession,
    position: Position,
    principal: Decimal,
    rewards: Decimal,
    now: datetime,
) -> None:
    related_entity = f"{position.kind}_position"
    if principal > 0:
        await credit(
            session, position.user_id, position.asset, principal,
            purpose=LedgerPurpose.RELEASE, now=now,
            related_entity=related_entity, related_id=position.id,
            description=f"Released {position.kind} principal",
        )
    if rewards > 0:
        await credit(
            session, position.user_id, position.asset, rewards,
            purpose=LedgerPurpose.REWARD, now=now,
            related_entity=related_entity, related_id=position.id,
            description=f"{position.kind.capitalize()} rewards",
        )


async def complete(session: AsyncSession, position: Position, now: Optional[datetime] = None) -> Position:
    """
    Close a matured position: principal plus rewards go back to the wallet.

    Open-ended positions (no end date) can be completed at any time.

    Raises:
        AlreadySettled: position is no longer active
        PositionLocked: end date not reached yet
    """
    now = now or utcnow()
    if position.status != PositionStatus.ACTIVE.value:
        raise AlreadySettled(f"Position {position.id} is already {position.status}")
    if position.end_date is not None and not is_matured(position, now):
        raise PositionLocked(f"Position {position.id} is locked until {as_utc(position.end_date).isoformat()}")

    refresh_position(position, now)
    rewards = position.earned_rewards or Decimal("0")
    await _release(session, position, position.amount, rewards, now)

    position.status = PositionStatus.COMPLETED.value
    position.payout = position.amount + rewards
    position.penalty = Decimal("0")
    position.closed_at = now
    await _shrink_pool(session, position)
    await session.flush()

    POSITIONS_CLOSED.labels(kind=position.kind, status=position.status).inc()
    logger.info(f"Completed {position.kind} position {position.id}: paid {position.payout} {position.asset}")
    return position


async def complete_position(session: AsyncSession, position_id: str, now: Optional[datetime] = None) -> Position:
    position = await staking_repo.find_position(session, position_id, for_update=True)
    return await complete(session, position, now=now)


async def early_withdraw(session: AsyncSession, position_id: str, now: Optional[datetime] = None) -> Position:
    """
    Exit a position before its end date.

    The penalty percentage is taken off the principal; rewards accrued so far
    are paid in full.

    Raises:
        AlreadySettled: position is no longer active
        PositionMatured: end date already reached, complete it instead
    """
    now = now or utcnow()
    position = await staking_repo.find_position(session, position_id, for_update=True)
    if position.status != PositionStatus.ACTIVE.value:
        raise AlreadySettled(f"Position {position.id} is already {position.status}")
    if is_matured(position, now):
        raise PositionMatured(f"Position {position.id} has matured; complete it instead")

    refresh_position(position, now)
    rewards = position.earned_rewards or Decimal("0")
    penalty = quantize(position.amount * Decimal(position.penalty_pct or 0) / Decimal("100"))
    principal = position.amount - penalty

    await _release(session, position, principal, rewards, now)
    if penalty > 0:
        wallet = await get_wallet(session, position.user_id)
        await create_transaction(
            session,
            user_id=position.user_id,
            tx_type=TxType.PENALTY.value,
            amount=penalty,
            currency=position.asset,
            balance_after=wallet.balance_of(position.asset),
            related_entity=f"{position.kind}_position",
            related_id=position.id,
            description=f"Early exit penalty ({position.penalty_pct}%)",
            created_at=now,
        )

    position.status = EARLY_EXIT_STATUS[position.kind].value
    position.payout = principal + rewards
    position.penalty = penalty
    position.closed_at = now
    await _shrink_pool(session, position)
    await session.flush()

    POSITIONS_CLOSED.labels(kind=position.kind, status=position.status).inc()
    logger.info(f"Early exit of {position.kind} position {position.id}: penalty {penalty}, paid {position.payout} {position.asset}")
    return position


async def _shrink_pool(session: AsyncSession, position: Position) -> None:
    if position.kind != PositionKind.STAKING.value:
        return
    pool = await staking_repo.get_pool_by_id(session, position.pool_id)
    pool.total_staked = max((pool.total_staked or Decimal("0")) - position.amount, Decimal("0"))
