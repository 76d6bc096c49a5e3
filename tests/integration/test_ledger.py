"""
Integration tests for the wallet ledger

These tests verify balance movements, running totals and the journal through
the GamingService against a real (SQLite) database.
"""

from decimal import Decimal

import pytest

from gamewallet.core.exceptions import InsufficientFunds, InvalidAmount, InvalidSelection, NotFound
from gamewallet.models.enums import LedgerPurpose
from gamewallet.repos import wallet_repo
from tests.fixtures.database import assert_wallet_balance, create_test_wallet, get_journal


@pytest.mark.integration
@pytest.mark.asyncio
async def test_open_wallet_is_idempotent(service):
    """Opening twice returns the same zero-balance wallet."""
    first = await service.open_wallet("alice")
    second = await service.open_wallet("alice")

    assert first.id == second.id
    assert first.balances == {"BTC": Decimal("0"), "ETH": Decimal("0"), "VEST": Decimal("0")}


@pytest.mark.integration
@pytest.mark.asyncio
async def test_get_missing_wallet(service):
    with pytest.raises(NotFound):
        await service.get_wallet("nobody")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_deposit_and_withdraw(service, session_factory):
    await create_test_wallet(service, "alice", BTC="0.5", VEST="100")
    await service.withdraw("alice", "BTC", "0.2")

    await assert_wallet_balance(service, "alice", BTC="0.3", ETH="0", VEST="100")

    journal = await get_journal(session_factory, "alice")
    assert sorted((t.tx_type, t.currency) for t in journal) == [
        ("deposit", "BTC"),
        ("deposit", "VEST"),
        ("withdrawal", "BTC"),
    ]
    withdrawal = next(t for t in journal if t.tx_type == "withdrawal")
    assert withdrawal.amount == Decimal("0.2")
    assert withdrawal.balance_after == Decimal("0.3")

    # funding movements do not count as wagering
    wallet = await service.get_wallet("alice")
    assert wallet.total_wagered == Decimal("0")
    assert wallet.total_won == Decimal("0")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_overdraw_rejected_and_wallet_unchanged(service, session_factory):
    await create_test_wallet(service, "alice", BTC="0.01")

    with pytest.raises(InsufficientFunds) as exc_info:
        await service.withdraw("alice", "BTC", "0.02")

    assert exc_info.value.message == "Insufficient BTC balance"
    await assert_wallet_balance(service, "alice", BTC="0.01")
    assert len(await get_journal(session_factory, "alice")) == 1


@pytest.mark.integration
@pytest.mark.asyncio
@pytest.mark.parametrize("amount", ["0", "-0.5", "abc", "0.000000001"])
async def test_invalid_amounts_rejected(service, amount):
    await create_test_wallet(service, "alice", BTC="1")

    with pytest.raises(InvalidAmount):
        await service.deposit("alice", "BTC", amount)
    with pytest.raises(InvalidAmount):
        await service.withdraw("alice", "BTC", amount)

    await assert_wallet_balance(service, "alice", BTC="1")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_unsupported_currency(service):
    await service.open_wallet("alice")
    with pytest.raises(InvalidSelection):
        await service.deposit("alice", "DOGE", "1")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_credit_and_debit_purposes_drive_totals(service, async_session):
    """Wins raise total_won, wagers raise total_wagered, losses only total_lost."""
    await create_test_wallet(service, "alice", ETH="2")

    await wallet_repo.debit(async_session, "alice", "ETH", "0.5", purpose=LedgerPurpose.WAGER)
    await wallet_repo.credit(async_session, "alice", "ETH", "1.5", purpose=LedgerPurpose.WIN)
    wallet = await wallet_repo.record_loss(async_session, "alice", Decimal("0.25"))

    assert wallet.balance_of("ETH") == Decimal("3")
    assert wallet.total_wagered == Decimal("0.5")
    assert wallet.total_won == Decimal("1.5")
    assert wallet.total_lost == Decimal("0.25")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_transactions_listing(service):
    await create_test_wallet(service, "alice", BTC="1", ETH="1")
    await service.withdraw("alice", "ETH", "0.5")

    eth_only = await service.list_transactions("alice", currency="ETH")
    assert {t.tx_type for t in eth_only} == {"deposit", "withdrawal"}

    withdrawals = await service.list_transactions("alice", tx_type="withdrawal")
    assert len(withdrawals) == 1
    assert withdrawals[0].amount == Decimal("0.5")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_wallet_summary(service):
    await create_test_wallet(service, "alice", BTC="0.5", ETH="1", VEST="10")

    summary = await service.wallet_summary("alice")

    assert Decimal(summary["balances"]["BTC"]) == Decimal("0.5")
    assert Decimal(summary["usd_values"]["BTC"]) == Decimal("20000")
    assert Decimal(summary["usd_values"]["ETH"]) == Decimal("2000")
    assert Decimal(summary["total_usd"]) == Decimal("22010")
    assert summary["pending_bets"] == 0
    assert summary["active_positions"] == 0
    assert summary["staked"] == {}
