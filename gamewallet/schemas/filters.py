"""
Read-side filters for bet and position listings
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from gamewallet.models.enums import BetStatus, GameType, PositionKind, PositionStatus


class BetFilter(BaseModel):
    status: Optional[BetStatus] = None
    game_type: Optional[GameType] = None
    game_id: Optional[str] = None
    since: Optional[datetime] = None
    until: Optional[datetime] = None
    limit: int = Field(default=50, ge=1, le=500)
    offset: int = Field(default=0, ge=0)


class PositionFilter(BaseModel):
    kind: Optional[PositionKind] = None
    status: Optional[PositionStatus] = None
    since: Optional[datetime] = None
    until: Optional[datetime] = None
    limit: int = Field(default=50, ge=1, le=500)
    offset: int = Field(default=0, ge=0)
