"""
Request bodies for the HTTP API.

Amounts travel as strings so no precision is lost on the way to Decimal.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from gamewallet.models.enums import BetOutcome


class FundsRequest(BaseModel):
    """Deposit or withdrawal"""
    currency: str = Field(..., description="BTC, ETH or VEST")
    amount: str = Field(..., description="Amount as a decimal string")


class TicketRequest(BaseModel):
    numbers: List[int]
    quantity: int = Field(default=1)
    currency: Optional[str] = None


class SingleBetRequest(BaseModel):
    match_id: str
    selection: str = Field(..., description="home_win, away_win or draw")
    amount: str
    currency: str


class ComboLeg(BaseModel):
    match_id: str
    selection: str


class ComboBetRequest(BaseModel):
    legs: List[ComboLeg]
    amount: str
    currency: str


class CasinoRoundRequest(BaseModel):
    amount: str
    currency: str
    selection: Dict[str, Any] = Field(default_factory=dict)


class PredictionBetRequest(BaseModel):
    option_id: str
    amount: str
    currency: str


class StakeRequest(BaseModel):
    pool_id: str
    amount: str
    auto_compound: bool = True


class VestRequest(BaseModel):
    plan_id: str
    asset: str
    amount: str
    auto_reinvest: bool = False


class SettleRequest(BaseModel):
    outcome: BetOutcome
    payout_odds: Optional[str] = None


class MatchResultRequest(BaseModel):
    result: str = Field(..., description="home_win, away_win or draw")
    home_score: Optional[int] = None
    away_score: Optional[int] = None


class DrawRequest(BaseModel):
    winning_numbers: Optional[List[int]] = None


class ResolveRequest(BaseModel):
    winning_option_id: str
