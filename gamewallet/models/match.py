"""
Sports match with its published odds table
"""

import uuid
from decimal import Decimal
from typing import Optional

from sqlalchemy import Column, DateTime, Integer, Numeric, String

from gamewallet.db.base import Base
from gamewallet.models.enums import MatchSelection


class SportsMatch(Base):
    """Match model - odds are published by the external odds collaborator"""
    __tablename__ = "sports_matches"

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    sport = Column(String(32), nullable=False)
    league = Column(String(128), nullable=True)
    home_team = Column(String(128), nullable=False)
    away_team = Column(String(128), nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(16), nullable=False, default="upcoming")
    odds_home_win = Column(Numeric(20, 8), nullable=False)
    odds_away_win = Column(Numeric(20, 8), nullable=False)
    odds_draw = Column(Numeric(20, 8), nullable=True)
    result = Column(String(16), nullable=True)
    home_score = Column(Integer, nullable=True)
    away_score = Column(Integer, nullable=True)
    total_bets = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<SportsMatch(id={self.id}, {self.home_team} vs {self.away_team}, status={self.status})>"

    @property
    def title(self) -> str:
        return f"{self.home_team} vs {self.away_team}"

    def odds_for(self, selection: str) -> Optional[Decimal]:
        """Odds published for a selection, None when the market is not offered"""
        if selection == MatchSelection.HOME_WIN:
            return self.odds_home_win
        if selection == MatchSelection.AWAY_WIN:
            return self.odds_away_win
        if selection == MatchSelection.DRAW:
            return self.odds_draw
        return None

    def to_dict(self):
        """Convert match to dictionary for API responses"""
        return {
            "id": self.id,
            "sport": self.sport,
            "league": self.league,
            "home_team": self.home_team,
            "away_team": self.away_team,
            "title": self.title,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "status": self.status,
            "odds": {
                "home_win": str(self.odds_home_win),
                "away_win": str(self.odds_away_win),
                "draw": str(self.odds_draw) if self.odds_draw is not None else None,
            },
            "result": self.result,
            "score": (
                {"home": self.home_score, "away": self.away_score}
                if self.home_score is not None else None
            ),
            "total_bets": self.total_bets,
        }
