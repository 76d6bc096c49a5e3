"""
Per-user gaming statistics built from the bet ledger
"""

from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from gamewallet.core.money import to_decimal
from gamewallet.models.enums import BetStatus

ZERO = Decimal("0")


def win_streaks(statuses: Iterable[str]) -> Tuple[int, int]:
    """(current, longest) run of consecutive wins over settled bets, oldest first."""
    current = longest = 0
    for status in statuses:
        current = current + 1 if status == BetStatus.WON.value else 0
        longest = max(longest, current)
    return current, longest


def favorite_game(breakdown: Dict[str, int]) -> Optional[str]:
    if not breakdown:
        return None
    # most played; ties go to the alphabetically first game
    return sorted(breakdown.items(), key=lambda item: (-item[1], item[0]))[0][0]


def build_stats(user_id: str, totals: List[Any], statuses: List[str]) -> Dict[str, Any]:
    """
    Fold grouped bet totals into a stats payload.

    Cancelled bets are left out entirely. Win rate and net profit count
    settled bets only; pending stakes show up in ``wagered`` and ``pending``.

    Args:
        user_id: Owner of the bets
        totals: Rows from ``bet_repo.get_bet_totals``
        statuses: Settled statuses from ``bet_repo.get_settled_statuses``
    """
    breakdown: Dict[str, int] = {}
    by_currency: Dict[str, Dict[str, Decimal]] = {}
    won = lost = pending = 0

    for row in totals:
        if row.status == BetStatus.CANCELLED.value:
            continue
        staked = to_decimal(row.staked or ZERO)
        breakdown[row.game_type] = breakdown.get(row.game_type, 0) + row.bets
        money = by_currency.setdefault(row.currency, {
            "wagered": ZERO, "won": ZERO, "lost": ZERO, "net_profit": ZERO, "biggest_win": ZERO,
        })
        money["wagered"] += staked

        if row.status == BetStatus.WON.value:
            paid = to_decimal(row.paid or ZERO)
            won += row.bets
            money["won"] += paid
            money["net_profit"] += paid - staked
            money["biggest_win"] = max(money["biggest_win"], to_decimal(row.biggest_payout or ZERO))
        elif row.status == BetStatus.LOST.value:
            lost += row.bets
            money["lost"] += staked
            money["net_profit"] -= staked
        else:
            pending += row.bets

    settled = won + lost
    win_rate = (Decimal(won) * 100 / settled).quantize(Decimal("0.01")) if settled else ZERO
    current_streak, longest_streak = win_streaks(statuses)

    return {
        "user_id": user_id,
        "total_games": won + lost + pending,
        "won": won,
        "lost": lost,
        "pending": pending,
        "win_rate": str(win_rate),
        "favorite_game": favorite_game(breakdown),
        "games_breakdown": breakdown,
        "by_currency": {
            currency: {key: str(value) for key, value in money.items()}
            for currency, money in by_currency.items()
        },
        "current_streak": current_streak,
        "longest_streak": longest_streak,
    }
