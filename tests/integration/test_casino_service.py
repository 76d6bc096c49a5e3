"""
Integration tests for casino rounds through the wallet
"""

from decimal import Decimal

import pytest

from gamewallet.core.exceptions import AboveMaximum, BelowMinimum, InvalidSelection, NotFound
from gamewallet.models.enums import BetStatus
from tests.fixtures.database import (
    assert_wallet_balance,
    create_test_casino_games,
    create_test_wallet,
    get_journal,
)


@pytest.fixture
async def games(session_factory):
    return await create_test_casino_games(session_factory, inactive=("slots",))


@pytest.mark.integration
@pytest.mark.asyncio
async def test_roulette_win_pays_range_over_count(service, games, randomizer):
    await create_test_wallet(service, "alice", BTC="2")
    randomizer.push_ints(7)

    bet = await service.play_casino_round("alice", "roulette", "1", "BTC", {"numbers": [14, 7]})

    assert bet.status == BetStatus.WON.value
    assert bet.odds == Decimal("18")
    assert bet.payout == Decimal("18")
    assert bet.details["result"] == {"number": 7}
    assert bet.details["selection"] == {"numbers": [7, 14]}
    await assert_wallet_balance(service, "alice", BTC="19")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_roulette_miss(service, games, randomizer):
    await create_test_wallet(service, "alice", BTC="2")
    randomizer.push_ints(20)

    bet = await service.play_casino_round("alice", "roulette", "1", "BTC", {"numbers": [7, 14]})

    assert bet.status == BetStatus.LOST.value
    assert bet.payout == Decimal("0")
    await assert_wallet_balance(service, "alice", BTC="1")
    wallet = await service.get_wallet("alice")
    assert wallet.total_lost == Decimal("1")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_dice_round(service, games, randomizer):
    await create_test_wallet(service, "alice", ETH="1")
    randomizer.push_ints(3, 2)

    bet = await service.play_casino_round("alice", "dice", "0.1", "ETH", {"target": 4})

    assert bet.details["result"] == {"dice": [3, 2], "total": 5}
    assert Decimal(bet.details["multiplier"]) == Decimal("2")
    assert bet.payout == Decimal("0.2")
    await assert_wallet_balance(service, "alice", ETH="1.1")


@pytest.mark.integration
@pytest.mark.asyncio
@pytest.mark.parametrize("selection", [{"target": 7}, {"target": 12}, {"target": 1}, {}])
async def test_dice_refuses_unfair_targets(service, session_factory, games, selection):
    await create_test_wallet(service, "alice", ETH="1")

    with pytest.raises(InvalidSelection):
        await service.play_casino_round("alice", "dice", "0.1", "ETH", selection)

    await assert_wallet_balance(service, "alice", ETH="1")
    assert len(await get_journal(session_factory, "alice")) == 1


@pytest.mark.integration
@pytest.mark.asyncio
async def test_spin_wheel_carries_angle(service, games, randomizer):
    await create_test_wallet(service, "alice", VEST="10")
    # three turns and a stop at 0 degrees: first segment
    randomizer.push_ints(3).push_random(0.0)

    bet = await service.play_casino_round("alice", "spin_wheel", "1", "VEST", {"pick": "Alice"})

    assert bet.details["result"]["segment"] == "Alice"
    assert bet.payout == Decimal("4")
    await assert_wallet_balance(service, "alice", VEST="13")

    # the next spin starts at 0 again (1080 % 360) and stops a quarter turn on
    randomizer.push_ints(4).push_random(0.25)
    second = await service.play_casino_round("alice", "spin_wheel", "1", "VEST", {"pick": "Alice"})
    assert second.details["result"]["segment"] == "Bob"
    assert second.status == BetStatus.LOST.value
    assert service.table.wheel_angle == pytest.approx(90.0)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_stake_limits(service, games):
    await create_test_wallet(service, "alice", BTC="20")

    with pytest.raises(BelowMinimum):
        await service.play_casino_round("alice", "roulette", "0.00001", "BTC", {"numbers": [1]})
    with pytest.raises(AboveMaximum):
        await service.play_casino_round("alice", "roulette", "11", "BTC", {"numbers": [1]})

    await assert_wallet_balance(service, "alice", BTC="20")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_unknown_and_inactive_games(service, games):
    await create_test_wallet(service, "alice", BTC="1")

    with pytest.raises(NotFound):
        await service.play_casino_round("alice", "slots", "0.01", "BTC")
    with pytest.raises(InvalidSelection):
        await service.play_casino_round("alice", "blackjack", "0.01", "BTC")

    listed = await service.list_casino_games()
    assert [g.code for g in listed] == ["dice", "roulette", "spin_wheel"]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_rolled_back_spin_leaves_wheel_in_place(service, games, randomizer, monkeypatch):
    from gamewallet.services import bet_engine

    await create_test_wallet(service, "alice", VEST="10")
    randomizer.push_ints(4).push_random(0.25)

    async def failing_settle(*args, **kwargs):
        raise RuntimeError("ledger unavailable")

    monkeypatch.setattr(bet_engine, "settle", failing_settle)

    with pytest.raises(RuntimeError):
        await service.play_casino_round("alice", "spin_wheel", "1", "VEST", {"pick": "Alice"})

    assert service.table.wheel_angle == 0.0
    await assert_wallet_balance(service, "alice", VEST="10")
    assert await service.list_bets("alice") == []
