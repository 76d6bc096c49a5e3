"""
Journal of every balance movement
"""

import uuid

from sqlalchemy import JSON, Column, DateTime, Numeric, String
from sqlalchemy.dialects.postgresql import UUID

from gamewallet.db.base import Base


class GameTransaction(Base):
    """One ledger movement (deposit, bet debit, win credit, refund, ...)"""
    __tablename__ = "game_transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False, index=True)
    tx_type = Column(String(32), nullable=False)
    amount = Column(Numeric(30, 8), nullable=False)
    currency = Column(String(16), nullable=False)
    balance_after = Column(Numeric(30, 8), nullable=False)
    related_entity = Column(String(64), nullable=True)
    related_id = Column(String(64), nullable=True)
    description = Column(String(255), nullable=True)
    tx_metadata = Column('metadata', JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self):
        return f"<GameTransaction(user_id={self.user_id}, type={self.tx_type}, amount={self.amount} {self.currency})>"

    def to_dict(self):
        return {
            "id": str(self.id),
            "user_id": self.user_id,
            "tx_type": self.tx_type,
            "amount": str(self.amount),
            "currency": self.currency,
            "balance_after": str(self.balance_after),
            "related_entity": self.related_entity,
            "related_id": self.related_id,
            "description": self.description,
            "tx_metadata": self.tx_metadata,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
