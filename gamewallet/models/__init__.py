# Models Package
from .wallet import Wallet
from .transaction import GameTransaction
from .bet import Bet, BetLeg
from .match import SportsMatch
from .lottery import LotteryDraw, LotteryTicket
from .casino import CasinoGame
from .prediction import PredictionMarket, PredictionOption
from .staking import StakingPool, StakingPosition, VestingPlan, VestingPosition

__all__ = [
    "Wallet",
    "GameTransaction",
    "Bet",
    "BetLeg",
    "SportsMatch",
    "LotteryDraw",
    "LotteryTicket",
    "CasinoGame",
    "PredictionMarket",
    "PredictionOption",
    "StakingPool",
    "StakingPosition",
    "VestingPlan",
    "VestingPosition",
]
