"""
Bet and bet-leg models shared by every game type
"""

import uuid

from sqlalchemy import JSON, CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from gamewallet.db.base import Base
from gamewallet.schemas.bet_details import parse_details


class Bet(Base):
    """A wager held pending until its game resolves it"""
    __tablename__ = "bets"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False, index=True)
    game_type = Column(String(16), nullable=False)
    game_id = Column(String(64), nullable=False, index=True)
    amount = Column(Numeric(30, 8), nullable=False)
    currency = Column(String(16), nullable=False)
    odds = Column(Numeric(20, 8), nullable=False)
    status = Column(String(16), nullable=False, default="pending")
    payout = Column(Numeric(30, 8), nullable=True)
    details = Column(JSON, nullable=True)
    placed_at = Column(DateTime(timezone=True), nullable=False)
    settled_at = Column(DateTime(timezone=True), nullable=True)

    legs = relationship("BetLeg", back_populates="bet", lazy="selectin", order_by="BetLeg.position")

    __table_args__ = (
        CheckConstraint('amount > 0', name='chk_bet_amount_pos'),
        CheckConstraint('odds >= 1', name='chk_bet_odds_min'),
    )

    def __repr__(self):
        return f"<Bet(id={self.id}, game={self.game_type}:{self.game_id}, amount={self.amount} {self.currency}, status={self.status})>"

    @property
    def typed_details(self):
        return parse_details(self.details)

    @property
    def potential_payout(self):
        return self.amount * self.odds

    def to_dict(self):
        """Convert bet to dictionary for API responses"""
        return {
            "id": str(self.id),
            "user_id": self.user_id,
            "game_type": self.game_type,
            "game_id": self.game_id,
            "amount": str(self.amount),
            "currency": self.currency,
            "odds": str(self.odds),
            "status": self.status,
            "payout": str(self.payout) if self.payout is not None else None,
            "details": self.details,
            "placed_at": self.placed_at.isoformat() if self.placed_at else None,
            "settled_at": self.settled_at.isoformat() if self.settled_at else None,
        }


class BetLeg(Base):
    """One (match, selection, odds) pair of a sports bet"""
    __tablename__ = "bet_legs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    bet_id = Column(UUID(as_uuid=True), ForeignKey("bets.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    match_id = Column(String(64), nullable=False, index=True)
    selection = Column(String(16), nullable=False)
    odds = Column(Numeric(20, 8), nullable=False)
    result = Column(String(16), nullable=False, default="pending")

    bet = relationship("Bet", back_populates="legs", lazy="joined")

    def __repr__(self):
        return f"<BetLeg(match_id={self.match_id}, selection={self.selection}, result={self.result})>"
