"""
Lottery draw configuration and purchased tickets
"""

import uuid
from decimal import Decimal
from typing import Dict

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import UUID

from gamewallet.db.base import Base


class LotteryDraw(Base):
    """A draw and its rules: how many numbers, from which range, at what price"""
    __tablename__ = "lottery_draws"

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    name = Column(String(128), nullable=False)
    draw_type = Column(String(16), nullable=False)
    ticket_price = Column(Numeric(30, 8), nullable=False)
    currency = Column(String(16), nullable=False)
    max_numbers = Column(Integer, nullable=False)
    number_range = Column(Integer, nullable=False)
    max_tickets = Column(Integer, nullable=True)
    sold_tickets = Column(Integer, nullable=False, default=0)
    prize_pool = Column(Numeric(30, 8), nullable=True)
    draw_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(16), nullable=False, default="active")
    winning_numbers = Column(JSON, nullable=True)
    # {"<matched count>": "<multiplier of ticket cost>"}
    prize_table = Column(JSON, nullable=True)

    def __repr__(self):
        return f"<LotteryDraw(id={self.id}, type={self.draw_type}, status={self.status})>"

    @property
    def prize_multipliers(self) -> Dict[int, Decimal]:
        return {int(k): Decimal(str(v)) for k, v in (self.prize_table or {}).items()}

    @property
    def top_multiplier(self) -> Decimal:
        return max(self.prize_multipliers.values(), default=Decimal("0"))

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "draw_type": self.draw_type,
            "ticket_price": str(self.ticket_price),
            "currency": self.currency,
            "max_numbers": self.max_numbers,
            "number_range": self.number_range,
            "max_tickets": self.max_tickets,
            "sold_tickets": self.sold_tickets,
            "prize_pool": str(self.prize_pool) if self.prize_pool is not None else None,
            "draw_date": self.draw_date.isoformat() if self.draw_date else None,
            "status": self.status,
            "winning_numbers": self.winning_numbers,
            "prize_table": self.prize_table,
        }


class LotteryTicket(Base):
    """Ticket numbers are fixed at purchase and never rewritten"""
    __tablename__ = "lottery_tickets"

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    user_id = Column(String(64), nullable=False, index=True)
    draw_id = Column(String(64), ForeignKey("lottery_draws.id"), nullable=False, index=True)
    bet_id = Column(UUID(as_uuid=True), ForeignKey("bets.id"), nullable=False)
    numbers = Column(JSON, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    total_cost = Column(Numeric(30, 8), nullable=False)
    currency = Column(String(16), nullable=False)
    status = Column(String(16), nullable=False, default="pending")
    is_winner = Column(Boolean, nullable=False, default=False)
    matched_count = Column(Integer, nullable=True)
    prize_amount = Column(Numeric(30, 8), nullable=True)
    purchased_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<LotteryTicket(id={self.id}, draw_id={self.draw_id}, numbers={self.numbers})>"

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "draw_id": self.draw_id,
            "bet_id": str(self.bet_id),
            "numbers": self.numbers,
            "quantity": self.quantity,
            "total_cost": str(self.total_cost),
            "currency": self.currency,
            "status": self.status,
            "is_winner": self.is_winner,
            "matched_count": self.matched_count,
            "prize_amount": str(self.prize_amount) if self.prize_amount is not None else None,
            "purchased_at": self.purchased_at.isoformat() if self.purchased_at else None,
        }
