"""
Enumerations stored as plain strings in the schema
"""

import enum


class Currency(str, enum.Enum):
    """Wallet currencies"""
    BTC = "BTC"
    ETH = "ETH"
    VEST = "VEST"


class GameType(str, enum.Enum):
    LOTTERY = "lottery"
    SPORTS = "sports"
    CASINO = "casino"
    PREDICTION = "prediction"


class BetStatus(str, enum.Enum):
    PENDING = "pending"
    WON = "won"
    LOST = "lost"
    CANCELLED = "cancelled"


class BetOutcome(str, enum.Enum):
    """Outcome handed to the bet engine at settlement"""
    WON = "won"
    LOST = "lost"


class TxType(str, enum.Enum):
    """Journal entry types"""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    BET = "bet"
    WIN = "win"
    REFUND = "refund"
    STAKE = "stake"
    UNSTAKE = "unstake"
    REWARD = "reward"
    PENALTY = "penalty"


class LedgerPurpose(str, enum.Enum):
    """Why a credit or debit happens; drives the wallet's running totals"""
    WAGER = "wager"
    WIN = "win"
    REFUND = "refund"
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    STAKE = "stake"
    RELEASE = "release"
    REWARD = "reward"


class MatchStatus(str, enum.Enum):
    UPCOMING = "upcoming"
    LIVE = "live"
    FINISHED = "finished"
    CANCELLED = "cancelled"


class MatchSelection(str, enum.Enum):
    HOME_WIN = "home_win"
    AWAY_WIN = "away_win"
    DRAW = "draw"


class LegResult(str, enum.Enum):
    PENDING = "pending"
    WON = "won"
    LOST = "lost"
    VOID = "void"


class DrawType(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    SPECIAL = "special"
    INSTANT = "instant"


class DrawStatus(str, enum.Enum):
    ACTIVE = "active"
    CLOSED = "closed"
    DRAWN = "drawn"


class TicketStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CasinoGameCode(str, enum.Enum):
    DICE = "dice"
    SLOTS = "slots"
    ROULETTE = "roulette"
    SPIN_WHEEL = "spin_wheel"


class MarketStatus(str, enum.Enum):
    ACTIVE = "active"
    CLOSED = "closed"
    RESOLVED = "resolved"


class CompoundingFrequency(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class PositionKind(str, enum.Enum):
    STAKING = "staking"
    VESTING = "vesting"


class PositionStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    # staking positions closed early
    UNSTAKING = "unstaking"
    # vesting positions closed early
    EARLY_WITHDRAWAL = "early_withdrawal"
