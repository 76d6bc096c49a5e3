"""
Wallet model: one row per user, one balance column per currency
"""

import uuid
from decimal import Decimal

from sqlalchemy import CheckConstraint, Column, DateTime, Numeric, String
from sqlalchemy.dialects.postgresql import UUID

from gamewallet.db.base import Base

BALANCE_COLUMNS = {
    "BTC": "btc_balance",
    "ETH": "eth_balance",
    "VEST": "vest_balance",
}


class Wallet(Base):
    """Multi-currency gaming wallet"""
    __tablename__ = "wallets"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False, unique=True)
    btc_balance = Column(Numeric(30, 8), nullable=False, default=0)
    eth_balance = Column(Numeric(30, 8), nullable=False, default=0)
    vest_balance = Column(Numeric(30, 8), nullable=False, default=0)
    total_wagered = Column(Numeric(30, 8), nullable=False, default=0)
    total_won = Column(Numeric(30, 8), nullable=False, default=0)
    total_lost = Column(Numeric(30, 8), nullable=False, default=0)
    last_activity = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint('btc_balance >= 0', name='chk_btc_nonneg'),
        CheckConstraint('eth_balance >= 0', name='chk_eth_nonneg'),
        CheckConstraint('vest_balance >= 0', name='chk_vest_nonneg'),
    )

    def __repr__(self):
        return f"<Wallet(user_id={self.user_id}, BTC={self.btc_balance}, ETH={self.eth_balance}, VEST={self.vest_balance})>"

    def balance_of(self, currency: str) -> Decimal:
        return Decimal(getattr(self, BALANCE_COLUMNS[currency]) or 0)

    def set_balance(self, currency: str, value: Decimal) -> None:
        setattr(self, BALANCE_COLUMNS[currency], value)

    @property
    def balances(self) -> dict:
        return {currency: self.balance_of(currency) for currency in BALANCE_COLUMNS}

    def to_dict(self):
        """Convert wallet to dictionary for API responses"""
        return {
            "user_id": self.user_id,
            "balances": {k: str(v) for k, v in self.balances.items()},
            "total_wagered": str(self.total_wagered or 0),
            "total_won": str(self.total_won or 0),
            "total_lost": str(self.total_lost or 0),
            "last_activity": self.last_activity.isoformat() if self.last_activity else None,
        }
