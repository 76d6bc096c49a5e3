"""
Integration tests for staking and vesting positions
"""

from decimal import Decimal

import pytest

from gamewallet.core.exceptions import (
    AboveMaximum,
    AlreadySettled,
    BelowMinimum,
    InsufficientFunds,
    InvalidSelection,
    NotFound,
    PositionLocked,
    PositionMatured,
)
from gamewallet.models.enums import PositionStatus
from gamewallet.schemas.filters import PositionFilter
from tests.fixtures.database import (
    assert_wallet_balance,
    create_test_plan,
    create_test_pool,
    create_test_wallet,
    get_journal,
)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_staking_runs_to_maturity(service, session_factory, clock):
    """1000 at 10% for 365 days without compounding earns 100."""
    pool = await create_test_pool(session_factory)
    await create_test_wallet(service, "alice", BTC="1000")

    position = await service.create_staking_position("alice", pool.id, "1000", auto_compound=False)

    assert position.status == PositionStatus.ACTIVE.value
    assert position.apy == Decimal("10")
    await assert_wallet_balance(service, "alice", BTC="0")
    assert (await service.list_pools())[0].total_staked == Decimal("1000")

    clock.advance(days=365)
    completed = await service.complete_position(position.id)

    assert completed.status == PositionStatus.COMPLETED.value
    assert completed.earned_rewards == Decimal("100")
    assert completed.payout == Decimal("1100")
    await assert_wallet_balance(service, "alice", BTC="1100")
    assert (await service.list_pools())[0].total_staked == Decimal("0")

    journal = await get_journal(session_factory, "alice")
    assert sorted(t.tx_type for t in journal) == ["deposit", "reward", "stake", "unstake"]

    with pytest.raises(AlreadySettled):
        await service.complete_position(position.id)
    await assert_wallet_balance(service, "alice", BTC="1100")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_locked_position_cannot_complete(service, session_factory, clock):
    pool = await create_test_pool(session_factory)
    await create_test_wallet(service, "alice", BTC="10")
    position = await service.create_staking_position("alice", pool.id, "5")

    clock.advance(days=364)
    with pytest.raises(PositionLocked):
        await service.complete_position(position.id)

    assert (await service.get_position(position.id)).status == PositionStatus.ACTIVE.value


@pytest.mark.integration
@pytest.mark.asyncio
async def test_vesting_early_withdrawal(service, session_factory, clock):
    """Two percent of the principal is kept; 30 days of rewards are paid."""
    plan = await create_test_plan(session_factory)
    await create_test_wallet(service, "alice", VEST="1000")

    position = await service.create_vesting_position("alice", plan.id, "vest", "1000")
    assert position.asset == "VEST"
    assert position.end_date is not None

    clock.advance(days=30)
    closed = await service.early_withdraw(position.id)

    assert closed.status == PositionStatus.EARLY_WITHDRAWAL.value
    assert closed.penalty == Decimal("20")
    assert closed.earned_rewards == Decimal("6.98630136")
    assert closed.payout == Decimal("986.98630136")
    await assert_wallet_balance(service, "alice", VEST="986.98630136")

    penalties = [t for t in await get_journal(session_factory, "alice") if t.tx_type == "penalty"]
    assert len(penalties) == 1
    assert penalties[0].amount == Decimal("20")

    with pytest.raises(AlreadySettled):
        await service.early_withdraw(position.id)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_staking_early_unstake_status(service, session_factory, clock):
    pool = await create_test_pool(session_factory, early_unstake_penalty="10")
    await create_test_wallet(service, "alice", BTC="2")
    position = await service.create_staking_position("alice", pool.id, "1", auto_compound=False)

    closed = await service.early_withdraw(position.id)

    assert closed.status == PositionStatus.UNSTAKING.value
    assert closed.penalty == Decimal("0.1")
    await assert_wallet_balance(service, "alice", BTC="1.9")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_matured_position_cannot_exit_early(service, session_factory, clock):
    plan = await create_test_plan(session_factory)
    await create_test_wallet(service, "alice", ETH="500")
    position = await service.create_vesting_position("alice", plan.id, "ETH", "500")

    clock.advance(days=90)
    with pytest.raises(PositionMatured):
        await service.early_withdraw(position.id)

    completed = await service.complete_position(position.id)
    assert completed.status == PositionStatus.COMPLETED.value
    assert completed.penalty == Decimal("0")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_opening_bounds(service, session_factory):
    pool = await create_test_pool(session_factory, min_stake="0.5")
    plan = await create_test_plan(session_factory)
    await create_test_wallet(service, "alice", BTC="10000", ETH="1")

    with pytest.raises(BelowMinimum):
        await service.create_staking_position("alice", pool.id, "0.1")
    with pytest.raises(BelowMinimum):
        await service.create_vesting_position("alice", plan.id, "BTC", "50")
    with pytest.raises(AboveMaximum):
        await service.create_vesting_position("alice", plan.id, "BTC", "6000")
    with pytest.raises(InvalidSelection):
        await service.create_vesting_position("alice", plan.id, "DOGE", "500")
    with pytest.raises(InsufficientFunds):
        await service.create_vesting_position("alice", plan.id, "ETH", "500")
    with pytest.raises(NotFound):
        await service.create_staking_position("alice", "no-such-pool", "1")

    await assert_wallet_balance(service, "alice", BTC="10000", ETH="1")
    assert await service.list_positions("alice") == []


@pytest.mark.integration
@pytest.mark.asyncio
async def test_open_ended_pool(service, session_factory, clock):
    pool = await create_test_pool(session_factory, lock_period_days=0)
    await create_test_wallet(service, "alice", BTC="100")
    position = await service.create_staking_position("alice", pool.id, "100")

    assert position.end_date is None

    clock.advance(days=10)
    completed = await service.complete_position(position.id)

    assert completed.status == PositionStatus.COMPLETED.value
    assert completed.earned_rewards > 0
    await assert_wallet_balance(service, "alice", BTC=str(Decimal("100") + completed.earned_rewards))


@pytest.mark.integration
@pytest.mark.asyncio
async def test_rewards_never_decrease(service, session_factory, clock):
    pool = await create_test_pool(session_factory)
    await create_test_wallet(service, "alice", BTC="10")
    position = await service.create_staking_position("alice", pool.id, "10")

    readings = []
    for _ in range(3):
        clock.advance(days=40)
        readings.append((await service.get_position(position.id)).earned_rewards)

    assert readings[0] > 0
    assert readings == sorted(readings)
    assert len(set(readings)) == 3

    # past the end date accrual stops at the end date
    clock.advance(days=400)
    capped = (await service.get_position(position.id)).earned_rewards
    clock.advance(days=30)
    assert (await service.get_position(position.id)).earned_rewards == capped


@pytest.mark.integration
@pytest.mark.asyncio
async def test_maturity_sweep_completes_each_position_once(service, session_factory, clock):
    short_pool = await create_test_pool(session_factory, lock_period_days=30)
    long_pool = await create_test_pool(session_factory, asset="ETH", lock_period_days=365)
    plan = await create_test_plan(session_factory, duration_days=30)
    await create_test_wallet(service, "alice", BTC="1", ETH="1", VEST="200")
    await create_test_wallet(service, "bob", VEST="200")

    staked = await service.create_staking_position("alice", short_pool.id, "1")
    long_position = await service.create_staking_position("alice", long_pool.id, "1")
    vested = await service.create_vesting_position("bob", plan.id, "VEST", "200")

    clock.advance(days=31)
    sweep = await service.mature_due_positions()

    assert sweep["due"] == 2
    assert sorted(sweep["completed"]) == sorted([staked.id, vested.id])
    assert (await service.get_position(long_position.id)).status == PositionStatus.ACTIVE.value

    again = await service.mature_due_positions()
    assert again == {"due": 0, "completed": []}

    bob = await service.get_wallet("bob")
    assert bob.balance_of("VEST") > Decimal("200")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_list_positions_filters(service, session_factory, clock):
    pool = await create_test_pool(session_factory)
    plan = await create_test_plan(session_factory)
    await create_test_wallet(service, "alice", BTC="10", VEST="1000")

    staked = await service.create_staking_position("alice", pool.id, "1")
    clock.advance(hours=1)
    vested = await service.create_vesting_position("alice", plan.id, "VEST", "500")
    clock.advance(hours=1)
    closed = await service.create_staking_position("alice", pool.id, "2")
    await service.early_withdraw(closed.id)

    everything = await service.list_positions("alice")
    assert [p.id for p in everything] == [closed.id, vested.id, staked.id]

    vesting_only = await service.list_positions("alice", PositionFilter(kind="vesting"))
    assert [p.id for p in vesting_only] == [vested.id]

    active = await service.list_positions("alice", PositionFilter(status="active"))
    assert {p.id for p in active} == {staked.id, vested.id}
    assert all(p.earned_rewards > 0 for p in active)

    paged = await service.list_positions("alice", PositionFilter(limit=1, offset=1))
    assert [p.id for p in paged] == [vested.id]

    summary = await service.wallet_summary("alice")
    assert summary["active_positions"] == 2
    assert set(summary["staked"]) == {"BTC", "VEST"}


@pytest.mark.integration
@pytest.mark.asyncio
async def test_full_lock_pays_exact_apy(service, session_factory, clock):
    pool = await create_test_pool(session_factory, apy="3.9")
    await create_test_wallet(service, "alice", BTC="1000")
    position = await service.create_staking_position("alice", pool.id, "1000", auto_compound=False)

    clock.advance(days=365)
    completed = await service.complete_position(position.id)

    assert completed.earned_rewards == Decimal("39")
    await assert_wallet_balance(service, "alice", BTC="1039")
