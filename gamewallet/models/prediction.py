"""
Prediction markets and their options
"""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from gamewallet.db.base import Base


class PredictionMarket(Base):
    __tablename__ = "prediction_markets"

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    title = Column(String(255), nullable=False)
    description = Column(String(1024), nullable=True)
    category = Column(String(32), nullable=False, default="crypto")
    end_date = Column(DateTime(timezone=True), nullable=False)
    resolve_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(16), nullable=False, default="active")
    winning_option_id = Column(String(64), nullable=True)
    total_pool = Column(Numeric(30, 8), nullable=False, default=0)

    options = relationship(
        "PredictionOption", back_populates="market", lazy="selectin", order_by="PredictionOption.id"
    )

    def __repr__(self):
        return f"<PredictionMarket(id={self.id}, title={self.title}, status={self.status})>"

    def option(self, option_id: str):
        for option in self.options:
            if option.id == option_id:
                return option
        return None

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "resolve_date": self.resolve_date.isoformat() if self.resolve_date else None,
            "status": self.status,
            "winning_option_id": self.winning_option_id,
            "total_pool": str(self.total_pool or 0),
            "options": [o.to_dict() for o in self.options],
        }


class PredictionOption(Base):
    __tablename__ = "prediction_options"

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    market_id = Column(String(64), ForeignKey("prediction_markets.id"), nullable=False, index=True)
    text = Column(String(255), nullable=False)
    odds = Column(Numeric(20, 8), nullable=False)
    total_bets = Column(Numeric(30, 8), nullable=False, default=0)
    backers = Column(Integer, nullable=False, default=0)

    market = relationship("PredictionMarket", back_populates="options")

    def to_dict(self):
        return {
            "id": self.id,
            "text": self.text,
            "odds": str(self.odds),
            "total_bets": str(self.total_bets or 0),
            "backers": self.backers or 0,
        }
