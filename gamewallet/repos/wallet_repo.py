"""
Wallet repository with atomic balance operations.

Nothing here commits: callers run each logical action inside one transaction
so a failed step leaves no partial movement behind.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gamewallet.core.clock import utcnow
from gamewallet.core.exceptions import InsufficientFunds, NotFound
from gamewallet.core.money import validate_amount, validate_currency
from gamewallet.models.enums import LedgerPurpose, TxType
from gamewallet.models.wallet import Wallet
from gamewallet.repos.transaction_repo import create_transaction

# Configure logging
logger = logging.getLogger(__name__)

CREDIT_TX_TYPES = {
    LedgerPurpose.WIN: TxType.WIN,
    LedgerPurpose.REFUND: TxType.REFUND,
    LedgerPurpose.DEPOSIT: TxType.DEPOSIT,
    LedgerPurpose.RELEASE: TxType.UNSTAKE,
    LedgerPurpose.REWARD: TxType.REWARD,
}

DEBIT_TX_TYPES = {
    LedgerPurpose.WAGER: TxType.BET,
    LedgerPurpose.WITHDRAWAL: TxType.WITHDRAWAL,
    LedgerPurpose.STAKE: TxType.STAKE,
}


async def get_wallet_for_user(session: AsyncSession, user_id: str) -> Optional[Wallet]:
    """
    Get wallet for a specific user.

    Args:
        session: Database session
        user_id: External user id

    Returns:
        Wallet instance or None if not found
    """
    result = await session.execute(
        select(Wallet).where(Wallet.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def get_wallet(session: AsyncSession, user_id: str) -> Wallet:
    wallet = await get_wallet_for_user(session, user_id)
    if not wallet:
        raise NotFound("Wallet", user_id)
    return wallet


async def lock_wallet(session: AsyncSession, user_id: str) -> Wallet:
    """Load the wallet row with SELECT FOR UPDATE."""
    result = await session.execute(
        select(Wallet)
        .where(Wallet.user_id == user_id)
        .with_for_update()
    )
    wallet = result.scalar_one_or_none()
    if not wallet:
        raise NotFound("Wallet", user_id)
    return wallet


async def create_wallet_for_user(
    session: AsyncSession,
    user_id: str,
    now: Optional[datetime] = None
) -> Wallet:
    """
    Create a new wallet for a user.

    Returns the existing wallet if one already exists.
    """
    existing_wallet = await get_wallet_for_user(session, user_id)
    if existing_wallet:
        return existing_wallet

    wallet = Wallet(
        user_id=user_id,
        btc_balance=Decimal('0'),
        eth_balance=Decimal('0'),
        vest_balance=Decimal('0'),
        total_wagered=Decimal('0'),
        total_won=Decimal('0'),
        total_lost=Decimal('0'),
        created_at=now or utcnow(),
    )
    session.add(wallet)
    await session.flush()
    logger.info(f"Opened wallet for user {user_id}")
    return wallet


async def credit(
    session: AsyncSession,
    user_id: str,
    currency: str,
    amount: Any,
    purpose: LedgerPurpose = LedgerPurpose.WIN,
    now: Optional[datetime] = None,
    related_entity: Optional[str] = None,
    related_id: Optional[str] = None,
    description: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None,
) -> Wallet:
    """
    Atomically credit a wallet balance.

    A ``win`` credit also raises the wallet's ``total_won``.

    Raises:
        InvalidAmount: amount is not strictly positive
        NotFound: the user has no wallet
    """
    amount = validate_amount(amount)
    currency = validate_currency(currency)
    now = now or utcnow()

    wallet = await lock_wallet(session, user_id)
    new_balance = wallet.balance_of(currency) + amount
    wallet.set_balance(currency, new_balance)
    if purpose == LedgerPurpose.WIN:
        wallet.total_won = (wallet.total_won or Decimal('0')) + amount
    wallet.last_activity = now

    await create_transaction(
        session,
        user_id=user_id,
        tx_type=CREDIT_TX_TYPES.get(purpose, TxType.DEPOSIT).value,
        amount=amount,
        currency=currency,
        balance_after=new_balance,
        related_entity=related_entity,
        related_id=related_id,
        description=description,
        tx_metadata=meta,
        created_at=now,
    )

    logger.info(f"Credited {amount} {currency} to user {user_id} ({purpose.value}). New balance: {new_balance}")
    return wallet


async def debit(
    session: AsyncSession,
    user_id: str,
    currency: str,
    amount: Any,
    purpose: LedgerPurpose = LedgerPurpose.WAGER,
    now: Optional[datetime] = None,
    related_entity: Optional[str] = None,
    related_id: Optional[str] = None,
    description: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None,
) -> Wallet:
    """
    Atomically debit a wallet balance.

    A ``wager`` debit also raises the wallet's ``total_wagered``.

    Raises:
        InvalidAmount: amount is not strictly positive
        InsufficientFunds: balance is lower than the amount
        NotFound: the user has no wallet
    """
    amount = validate_amount(amount)
    currency = validate_currency(currency)
    now = now or utcnow()

    wallet = await lock_wallet(session, user_id)
    available = wallet.balance_of(currency)
    if available < amount:
        logger.warning(f"Rejected debit of {amount} {currency} for user {user_id}: balance {available}")
        raise InsufficientFunds(currency, requested=str(amount), available=str(available))

    new_balance = available - amount
    wallet.set_balance(currency, new_balance)
    if purpose == LedgerPurpose.WAGER:
        wallet.total_wagered = (wallet.total_wagered or Decimal('0')) + amount
    wallet.last_activity = now

    await create_transaction(
        session,
        user_id=user_id,
        tx_type=DEBIT_TX_TYPES.get(purpose, TxType.WITHDRAWAL).value,
        amount=amount,
        currency=currency,
        balance_after=new_balance,
        related_entity=related_entity,
        related_id=related_id,
        description=description,
        tx_metadata=meta,
        created_at=now,
    )

    logger.info(f"Debited {amount} {currency} from user {user_id} ({purpose.value}). New balance: {new_balance}")
    return wallet


async def record_loss(
    session: AsyncSession,
    user_id: str,
    amount: Decimal,
    now: Optional[datetime] = None
) -> Wallet:
    """Add a settled losing stake to ``total_lost``; balances are untouched."""
    wallet = await lock_wallet(session, user_id)
    wallet.total_lost = (wallet.total_lost or Decimal('0')) + amount
    wallet.last_activity = now or utcnow()
    return wallet
