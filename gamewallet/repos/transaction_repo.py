"""
Transaction repository for the wallet journal
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from gamewallet.core.clock import utcnow
from gamewallet.models.transaction import GameTransaction


async def create_transaction(
    session: AsyncSession,
    user_id: str,
    tx_type: str,
    amount: Decimal,
    currency: str,
    balance_after: Decimal,
    related_entity: Optional[str] = None,
    related_id: Optional[str] = None,
    description: Optional[str] = None,
    tx_metadata: Optional[dict] = None,
    created_at: Optional[datetime] = None,
) -> GameTransaction:
    """
    Create a new journal entry.

    Args:
        session: Database session
        user_id: Owner of the wallet
        tx_type: Transaction type (e.g., 'deposit', 'bet', 'win')
        amount: Transaction amount
        currency: Currency code
        balance_after: Wallet balance in ``currency`` after the movement
        related_entity: Related entity type (optional)
        related_id: Related entity ID (optional)
        description: Human readable description (optional)
        tx_metadata: Additional metadata (optional)

    Returns:
        Created GameTransaction instance
    """
    transaction = GameTransaction(
        user_id=user_id,
        tx_type=tx_type,
        amount=amount,
        currency=currency,
        balance_after=balance_after,
        related_entity=related_entity,
        related_id=str(related_id) if related_id is not None else None,
        description=description,
        tx_metadata=tx_metadata,
        created_at=created_at or utcnow(),
    )
    session.add(transaction)
    await session.flush()
    return transaction


async def get_transactions_by_user(
    session: AsyncSession,
    user_id: str,
    tx_type: Optional[str] = None,
    currency: Optional[str] = None,
    limit: int = 100,
    offset: int = 0
) -> List[GameTransaction]:
    """
    Get journal entries for a specific user, newest first.
    """
    query = select(GameTransaction).where(GameTransaction.user_id == user_id)
    if tx_type:
        query = query.where(GameTransaction.tx_type == tx_type)
    if currency:
        query = query.where(GameTransaction.currency == currency)
    query = query.order_by(desc(GameTransaction.created_at)).limit(limit).offset(offset)

    result = await session.execute(query)
    return list(result.scalars().all())
