"""
GamingService: the single entry point for wallet, wagering and staking operations.

Each public method runs under the per-user lock of every user it touches and
inside one database transaction. The transaction commits when the method
returns and rolls back on any error, so a rejected wager or a failed
settlement never leaves a partial balance movement behind.
"""

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from decimal import Decimal
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gamewallet.core.clock import Clock, utcnow
from gamewallet.core.config import settings
from gamewallet.core.exceptions import GamingError
from gamewallet.core.locks import UserLockRegistry
from gamewallet.core.metrics import REJECTED_ACTIONS
from gamewallet.core.randomizer import Randomizer, default_randomizer
from gamewallet.db.session import AsyncSessionLocal
from gamewallet.models.enums import BetOutcome, GameType, LedgerPurpose, PositionStatus
from gamewallet.repos import (
    bet_repo,
    catalog_repo,
    lottery_repo,
    match_repo,
    staking_repo,
    transaction_repo,
    wallet_repo,
)
from gamewallet.schemas.filters import BetFilter, PositionFilter
from gamewallet.services import bet_engine, casino, lottery, prediction, sports, staking, stats
from gamewallet.services.rates import RatesProvider, StaticRates

# Configure logging
logger = logging.getLogger(__name__)


class GamingService:
    """
    Facade over the ledger, the bet engine and the game modules.

    Args:
        session_factory: Produces ``AsyncSession`` objects, one per operation
        randomizer: Source of every game outcome
        clock: Returns the current UTC time
        locks: Per-user lock registry, shared by every service instance of a process
        rates: USD price provider for wallet summaries
        spin_rule: Payout rule for the spin wheel
    """

    def __init__(
        self,
        session_factory: async_sessionmaker = AsyncSessionLocal,
        randomizer: Optional[Randomizer] = None,
        clock: Clock = utcnow,
        locks: Optional[UserLockRegistry] = None,
        rates: Optional[RatesProvider] = None,
        spin_rule: Optional[casino.SpinRule] = None,
    ):
        self.session_factory = session_factory
        self.randomizer = randomizer or default_randomizer(
            settings.randomizer_seed,
            server_seed=settings.fair_server_seed,
            client_seed=settings.fair_client_seed,
        )
        self.clock = clock
        self.locks = locks or UserLockRegistry()
        self.rates = rates or StaticRates()
        self.table = casino.CasinoTable(self.randomizer, spin_rule=spin_rule)

    @asynccontextmanager
    async def _transaction(self, *user_ids: str) -> AsyncIterator[AsyncSession]:
        """Lock the users (sorted, so two multi-user settlements never deadlock) and open one transaction."""
        async with AsyncExitStack() as stack:
            for user_id in sorted(set(user_ids)):
                await stack.enter_async_context(self.locks.lock(user_id))
            async with self.session_factory() as session:
                try:
                    yield session
                    await session.commit()
                except GamingError as e:
                    await session.rollback()
                    REJECTED_ACTIONS.labels(code=e.code).inc()
                    logger.warning(f"Rejected operation for {', '.join(user_ids) or 'system'}: {e.code} - {e.message}")
                    raise
                except Exception:
                    await session.rollback()
                    logger.exception("Operation failed, rolled back")
                    raise

    @asynccontextmanager
    async def _read(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            yield session

    async def _settle(
        self,
        scan: Callable[[AsyncSession], Awaitable[List[str]]],
        action: Callable[[AsyncSession], Awaitable[Any]],
    ) -> Any:
        """
        Run a settlement under the locks of every user it pays.

        The users are scanned once without locks, then again inside the locked
        transaction. A user who wagered in between widens the set and the
        settlement retries with their lock held too.
        """
        async with self._read() as session:
            users = set(await scan(session))
        while True:
            async with self._transaction(*users) as session:
                current = set(await scan(session))
                if current <= users:
                    return await action(session)
            logger.info(f"Settlement picked up new users {sorted(current - users)}, retrying")
            users |= current

    # Ledger

    async def open_wallet(self, user_id: str):
        async with self._transaction(user_id) as session:
            return await wallet_repo.create_wallet_for_user(session, user_id, now=self.clock())

    async def get_wallet(self, user_id: str):
        async with self._read() as session:
            return await wallet_repo.get_wallet(session, user_id)

    async def deposit(self, user_id: str, currency: str, amount: Any):
        """Simulated funding; no payment processing happens here."""
        async with self._transaction(user_id) as session:
            return await wallet_repo.credit(
                session, user_id, currency, amount,
                purpose=LedgerPurpose.DEPOSIT, now=self.clock(),
                description="Deposit",
            )

    async def withdraw(self, user_id: str, currency: str, amount: Any):
        async with self._transaction(user_id) as session:
            return await wallet_repo.debit(
                session, user_id, currency, amount,
                purpose=LedgerPurpose.WITHDRAWAL, now=self.clock(),
                description="Withdrawal",
            )

    # Bet engine

    async def place_bet(
        self,
        user_id: str,
        game_type: GameType,
        game_id: str,
        amount: Any,
        currency: str,
        odds: Any,
        details=None,
    ):
        async with self._transaction(user_id) as session:
            return await bet_engine.place_bet(
                session, user_id, game_type, game_id, amount, currency, odds,
                details=details, now=self.clock(),
            )

    async def settle_bet(self, bet_id, outcome: BetOutcome, payout_odds: Any = None):
        owner = await self._bet_owner(bet_id)
        async with self._transaction(owner) as session:
            return await bet_engine.settle_bet(session, bet_id, outcome, payout_odds=payout_odds, now=self.clock())

    async def cancel_bet(self, bet_id):
        owner = await self._bet_owner(bet_id)
        async with self._transaction(owner) as session:
            return await bet_engine.cancel_bet(session, bet_id, now=self.clock())

    async def get_bet(self, bet_id):
        async with self._read() as session:
            return await bet_repo.get_bet_by_id(session, bet_id)

    async def _bet_owner(self, bet_id) -> str:
        async with self._read() as session:
            return await bet_repo.get_bet_owner(session, bet_id)

    # Lottery

    async def purchase_lottery_ticket(
        self,
        user_id: str,
        draw_id: str,
        numbers: Iterable[int],
        quantity: int = 1,
        currency: Optional[str] = None,
    ):
        async with self._transaction(user_id) as session:
            return await lottery.purchase_ticket(
                session, self.randomizer, user_id, draw_id, numbers,
                quantity=quantity, currency=currency, now=self.clock(),
            )

    async def close_draw(self, draw_id: str):
        async with self._transaction() as session:
            return await lottery.close_draw(session, draw_id)

    async def run_draw(self, draw_id: str, winning_numbers: Optional[Iterable[int]] = None) -> Dict[str, Any]:
        return await self._settle(
            lambda session: lottery.pending_ticket_owners(session, draw_id),
            lambda session: lottery.run_draw(
                session, self.randomizer, draw_id, winning_numbers=winning_numbers, now=self.clock()
            ),
        )

    async def close_due_draws(self) -> List[Dict[str, Any]]:
        """Close and draw every scheduled draw whose draw date has passed."""
        async with self._read() as session:
            due = [draw.id for draw in await lottery_repo.get_due_draws(session, self.clock())]
        results = []
        for draw_id in due:
            await self.close_draw(draw_id)
            results.append(await self.run_draw(draw_id))
        return results

    async def list_draws(self, status: Optional[str] = None, draw_type: Optional[str] = None):
        async with self._read() as session:
            return await lottery_repo.get_draws(session, status=status, draw_type=draw_type)

    async def list_tickets(self, user_id: str, draw_id: Optional[str] = None, limit: int = 50, offset: int = 0):
        async with self._read() as session:
            return await lottery_repo.get_tickets_by_user(session, user_id, draw_id=draw_id, limit=limit, offset=offset)

    # Sports

    async def place_sports_bet(self, user_id: str, match_id: str, selection: str, amount: Any, currency: str):
        async with self._transaction(user_id) as session:
            return await sports.place_single_bet(
                session, user_id, match_id, selection, amount, currency, now=self.clock()
            )

    async def place_combo_bet(self, user_id: str, legs: Iterable[Any], amount: Any, currency: str):
        async with self._transaction(user_id) as session:
            return await sports.place_combo_bet(session, user_id, legs, amount, currency, now=self.clock())

    async def finish_match(
        self,
        match_id: str,
        result: str,
        home_score: Optional[int] = None,
        away_score: Optional[int] = None,
    ) -> Dict[str, Any]:
        return await self._settle(
            lambda session: sports.affected_users(session, match_id),
            lambda session: sports.finish_match(
                session, match_id, result, home_score=home_score, away_score=away_score, now=self.clock()
            ),
        )

    async def cancel_match(self, match_id: str) -> Dict[str, Any]:
        return await self._settle(
            lambda session: sports.affected_users(session, match_id),
            lambda session: sports.cancel_match(session, match_id, now=self.clock()),
        )

    async def list_matches(self, status: Optional[str] = None, sport: Optional[str] = None, limit: int = 50, offset: int = 0):
        async with self._read() as session:
            return await match_repo.get_matches(session, limit=limit, offset=offset, status=status, sport=sport)

    # Casino

    async def play_casino_round(
        self,
        user_id: str,
        game: str,
        amount: Any,
        currency: str,
        selection: Optional[Dict[str, Any]] = None,
    ):
        async with self._transaction(user_id) as session:
            bet, outcome = await casino.play_round(
                session, self.table, user_id, game, amount, currency,
                selection=selection, now=self.clock(),
            )
        self.table.rest(outcome)
        return bet

    async def list_casino_games(self):
        async with self._read() as session:
            return await catalog_repo.get_casino_games(session)

    # Prediction markets

    async def place_prediction_bet(self, user_id: str, market_id: str, option_id: str, amount: Any, currency: str):
        async with self._transaction(user_id) as session:
            return await prediction.place_prediction_bet(
                session, user_id, market_id, option_id, amount, currency, now=self.clock()
            )

    async def resolve_market(self, market_id: str, winning_option_id: str) -> Dict[str, Any]:
        return await self._settle(
            lambda session: prediction.affected_users(session, market_id),
            lambda session: prediction.resolve_market(session, market_id, winning_option_id, now=self.clock()),
        )

    async def list_markets(self, status: Optional[str] = None, category: Optional[str] = None):
        async with self._read() as session:
            return await catalog_repo.get_markets(session, status=status, category=category)

    # Staking and vesting

    async def create_staking_position(self, user_id: str, pool_id: str, amount: Any, auto_compound: bool = True):
        async with self._transaction(user_id) as session:
            return await staking.create_staking_position(
                session, user_id, pool_id, amount, auto_compound=auto_compound, now=self.clock()
            )

    async def create_vesting_position(
        self,
        user_id: str,
        plan_id: str,
        asset: str,
        amount: Any,
        auto_reinvest: bool = False,
    ):
        async with self._transaction(user_id) as session:
            return await staking.create_vesting_position(
                session, user_id, plan_id, asset, amount, auto_reinvest=auto_reinvest, now=self.clock()
            )

    async def complete_position(self, position_id: str):
        owner = await self._position_owner(position_id)
        async with self._transaction(owner) as session:
            return await staking.complete_position(session, position_id, now=self.clock())

    async def early_withdraw(self, position_id: str):
        owner = await self._position_owner(position_id)
        async with self._transaction(owner) as session:
            return await staking.early_withdraw(session, position_id, now=self.clock())

    async def get_position(self, position_id: str):
        """Position with rewards brought up to date."""
        owner = await self._position_owner(position_id)
        async with self._transaction(owner) as session:
            position = await staking_repo.find_position(session, position_id, for_update=True)
            return staking.refresh_position(position, self.clock())

    async def _position_owner(self, position_id: str) -> str:
        async with self._read() as session:
            position = await staking_repo.find_position(session, position_id)
            return position.user_id

    async def mature_due_positions(self) -> Dict[str, Any]:
        """Complete every active position whose end date has passed; each exactly once."""
        now = self.clock()
        async with self._read() as session:
            due = [(p.id, p.user_id) for p in await staking_repo.get_due_positions(session, now)]

        completed = []
        for position_id, user_id in due:
            async with self._transaction(user_id) as session:
                position = await staking_repo.find_position(session, position_id, for_update=True)
                # another worker may have closed it between the scan and the lock
                if position.status != PositionStatus.ACTIVE.value:
                    continue
                await staking.complete(session, position, now=now)
                completed.append(position_id)

        logger.info(f"Maturity sweep completed {len(completed)} of {len(due)} due positions")
        return {"due": len(due), "completed": completed}

    async def list_pools(self):
        async with self._read() as session:
            return await staking_repo.get_pools(session)

    async def list_plans(self):
        async with self._read() as session:
            return await staking_repo.get_plans(session)

    # Read side

    async def list_bets(self, user_id: str, bet_filter: Optional[BetFilter] = None):
        async with self._read() as session:
            return await bet_repo.list_bets(session, user_id, bet_filter)

    async def gaming_stats(self, user_id: str) -> Dict[str, Any]:
        """Games played, win rate, profit per currency and win streaks. Display only."""
        async with self._read() as session:
            totals = await bet_repo.get_bet_totals(session, user_id)
            statuses = await bet_repo.get_settled_statuses(session, user_id)
        return stats.build_stats(user_id, totals, statuses)

    async def list_positions(self, user_id: str, position_filter: Optional[PositionFilter] = None):
        """Positions newest first; active ones carry rewards accrued up to now."""
        async with self._transaction(user_id) as session:
            positions = await staking_repo.list_positions(session, user_id, position_filter)
            now = self.clock()
            for position in positions:
                staking.refresh_position(position, now)
            return positions

    async def list_transactions(
        self,
        user_id: str,
        tx_type: Optional[str] = None,
        currency: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ):
        async with self._read() as session:
            return await transaction_repo.get_transactions_by_user(
                session, user_id, tx_type=tx_type, currency=currency, limit=limit, offset=offset
            )

    async def wallet_summary(self, user_id: str) -> Dict[str, Any]:
        """Balances with USD values, running totals and open exposure. Display only."""
        async with self._transaction(user_id) as session:
            wallet = await wallet_repo.get_wallet(session, user_id)
            pending = await bet_repo.list_bets(session, user_id, BetFilter(status="pending", limit=500))
            positions = await staking_repo.get_active_positions(session, user_id)
            now = self.clock()
            for position in positions:
                staking.refresh_position(position, now)

        balances = wallet.balances
        rates = await self.rates.get_rates(balances.keys())
        usd = {
            currency: (amount * rates[currency]).quantize(Decimal("0.01"))
            for currency, amount in balances.items()
            if currency in rates
        }

        staked: Dict[str, Decimal] = {}
        for position in positions:
            staked[position.asset] = (
                staked.get(position.asset, Decimal("0")) + position.amount + (position.earned_rewards or Decimal("0"))
            )

        return {
            "user_id": user_id,
            "balances": {c: str(v) for c, v in balances.items()},
            "usd_values": {c: str(v) for c, v in usd.items()},
            "total_usd": str(sum(usd.values(), Decimal("0.00"))),
            "total_wagered": str(wallet.total_wagered or 0),
            "total_won": str(wallet.total_won or 0),
            "total_lost": str(wallet.total_lost or 0),
            "pending_bets": len(pending),
            "active_positions": len(positions),
            "staked": {c: str(v) for c, v in staked.items()},
            "last_activity": wallet.last_activity.isoformat() if wallet.last_activity else None,
        }
