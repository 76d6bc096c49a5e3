"""
Casino game table with house limits
"""

from sqlalchemy import Boolean, Column, Numeric, String

from gamewallet.db.base import Base


class CasinoGame(Base):
    """House limits for one round-based game"""
    __tablename__ = "casino_games"

    code = Column(String(32), primary_key=True)
    name = Column(String(128), nullable=False)
    description = Column(String(255), nullable=True)
    min_bet = Column(Numeric(30, 8), nullable=False)
    max_bet = Column(Numeric(30, 8), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<CasinoGame(code={self.code}, min={self.min_bet}, max={self.max_bet})>"

    def to_dict(self):
        return {
            "code": self.code,
            "name": self.name,
            "description": self.description,
            "min_bet": str(self.min_bet),
            "max_bet": str(self.max_bet),
            "is_active": self.is_active,
        }
