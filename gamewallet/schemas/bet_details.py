"""
Game-specific bet payloads.

A bet's ``details`` column holds exactly one of these variants, discriminated
by ``kind`` which always equals the bet's game type.
"""

from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter
from typing_extensions import Annotated


class LotteryDetails(BaseModel):
    kind: Literal["lottery"] = "lottery"
    draw_id: str
    ticket_id: str
    draw_type: str
    numbers: List[int]
    quantity: int
    matched_count: Optional[int] = None


class SportsLeg(BaseModel):
    match_id: str
    selection: str
    odds: Decimal


class SportsDetails(BaseModel):
    kind: Literal["sports"] = "sports"
    mode: Literal["single", "combo"]
    legs: List[SportsLeg]


class CasinoDetails(BaseModel):
    kind: Literal["casino"] = "casino"
    game: str
    selection: Dict[str, Any] = Field(default_factory=dict)
    result: Dict[str, Any] = Field(default_factory=dict)
    multiplier: Decimal = Decimal("0")


class PredictionDetails(BaseModel):
    kind: Literal["prediction"] = "prediction"
    market_id: str
    option_id: str
    option_text: str


BetDetails = Annotated[
    Union[LotteryDetails, SportsDetails, CasinoDetails, PredictionDetails],
    Field(discriminator="kind"),
]

_adapter = TypeAdapter(BetDetails)


def parse_details(raw: Optional[Dict[str, Any]]):
    if raw is None:
        return None
    return _adapter.validate_python(raw)


def dump_details(details) -> Dict[str, Any]:
    return details.model_dump(mode="json")
