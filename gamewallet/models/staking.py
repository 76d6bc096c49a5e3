"""
Staking pools, vesting plans and the positions opened against them
"""

import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, Numeric, String

from gamewallet.db.base import Base


class StakingPool(Base):
    __tablename__ = "staking_pools"

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    name = Column(String(128), nullable=False)
    asset = Column(String(16), nullable=False)
    apy = Column(Numeric(10, 4), nullable=False)
    min_stake = Column(Numeric(30, 8), nullable=False)
    lock_period_days = Column(Integer, nullable=False, default=0)
    reward_frequency = Column(String(16), nullable=False, default="daily")
    early_unstake_penalty = Column(Numeric(10, 4), nullable=False, default=0)
    total_staked = Column(Numeric(30, 8), nullable=False, default=0)
    risk_level = Column(String(16), nullable=False, default="low")
    description = Column(String(255), nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "asset": self.asset,
            "apy": str(self.apy),
            "min_stake": str(self.min_stake),
            "lock_period_days": self.lock_period_days,
            "reward_frequency": self.reward_frequency,
            "early_unstake_penalty": str(self.early_unstake_penalty),
            "total_staked": str(self.total_staked or 0),
            "risk_level": self.risk_level,
            "description": self.description,
        }


class VestingPlan(Base):
    __tablename__ = "vesting_plans"

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    name = Column(String(128), nullable=False)
    description = Column(String(255), nullable=True)
    min_investment = Column(Numeric(30, 8), nullable=False)
    max_investment = Column(Numeric(30, 8), nullable=False)
    duration_days = Column(Integer, nullable=False)
    apy = Column(Numeric(10, 4), nullable=False)
    compounding_frequency = Column(String(16), nullable=False, default="monthly")
    early_withdrawal_penalty = Column(Numeric(10, 4), nullable=False, default=0)
    supported_assets = Column(JSON, nullable=False, default=list)
    risk_level = Column(String(16), nullable=False, default="low")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "min_investment": str(self.min_investment),
            "max_investment": str(self.max_investment),
            "duration_days": self.duration_days,
            "apy": str(self.apy),
            "compounding_frequency": self.compounding_frequency,
            "early_withdrawal_penalty": str(self.early_withdrawal_penalty),
            "supported_assets": self.supported_assets,
            "risk_level": self.risk_level,
        }


class PositionMixin:
    """
    Columns shared by staking and vesting positions.

    The plan terms (apy, frequency, penalty) are copied onto the position when
    it is opened so later plan edits never change an open position's accrual.
    """

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    user_id = Column(String(64), nullable=False, index=True)
    asset = Column(String(16), nullable=False)
    amount = Column(Numeric(30, 8), nullable=False)
    apy = Column(Numeric(10, 4), nullable=False)
    compounding_frequency = Column(String(16), nullable=False)
    penalty_pct = Column(Numeric(10, 4), nullable=False, default=0)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(24), nullable=False, default="active")
    earned_rewards = Column(Numeric(30, 8), nullable=False, default=0)
    last_reward_date = Column(DateTime(timezone=True), nullable=False)
    payout = Column(Numeric(30, 8), nullable=True)
    penalty = Column(Numeric(30, 8), nullable=True)
    closed_at = Column(DateTime(timezone=True), nullable=True)

    kind = None

    def to_dict(self):
        return {
            "id": self.id,
            "kind": self.kind,
            "user_id": self.user_id,
            "asset": self.asset,
            "amount": str(self.amount),
            "apy": str(self.apy),
            "compounding_frequency": self.compounding_frequency,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "status": self.status,
            "earned_rewards": str(self.earned_rewards or 0),
            "last_reward_date": self.last_reward_date.isoformat() if self.last_reward_date else None,
            "auto_compound": bool(self.compound),
            "payout": str(self.payout) if self.payout is not None else None,
            "penalty": str(self.penalty) if self.penalty is not None else None,
        }


class StakingPosition(PositionMixin, Base):
    __tablename__ = "staking_positions"

    pool_id = Column(String(64), nullable=False, index=True)
    auto_compound = Column(Boolean, nullable=False, default=True)

    kind = "staking"

    @property
    def compound(self) -> bool:
        return bool(self.auto_compound)

    @property
    def plan_ref(self) -> str:
        return self.pool_id

    def to_dict(self):
        data = super().to_dict()
        data["pool_id"] = self.pool_id
        return data


class VestingPosition(PositionMixin, Base):
    __tablename__ = "vesting_positions"

    plan_id = Column(String(64), nullable=False, index=True)
    auto_reinvest = Column(Boolean, nullable=False, default=False)

    kind = "vesting"

    @property
    def compound(self) -> bool:
        return bool(self.auto_reinvest)

    @property
    def plan_ref(self) -> str:
        return self.plan_id

    def to_dict(self):
        data = super().to_dict()
        data["plan_id"] = self.plan_id
        return data
