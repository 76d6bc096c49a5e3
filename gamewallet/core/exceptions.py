"""
Domain errors raised by the ledger, the bet engine and the game modules.

Every error is recoverable: the operation that raised it is rolled back and the
wallet is left exactly as it was. ``code`` is stable and safe to show to
clients; ``status_code`` is used by the HTTP layer.
"""

from typing import Any, Dict, Optional


class GamingError(Exception):
    """Base class for all wallet and wagering errors"""

    code = "gaming_error"
    status_code = 400

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "detail": self.message}


class InsufficientFunds(GamingError):
    code = "insufficient_funds"
    status_code = 409

    def __init__(self, currency: str, requested: Any = None, available: Any = None):
        super().__init__(
            f"Insufficient {currency} balance",
            currency=currency,
            requested=requested,
            available=available,
        )
        self.currency = currency


class InvalidAmount(GamingError):
    code = "invalid_amount"
    status_code = 422


class InvalidSelection(GamingError):
    code = "invalid_selection"
    status_code = 422


class AlreadySettled(GamingError):
    code = "already_settled"
    status_code = 409


class NotFound(GamingError):
    code = "not_found"
    status_code = 404

    def __init__(self, entity: str, entity_id: Optional[Any] = None):
        message = f"{entity} not found" if entity_id is None else f"{entity} {entity_id} not found"
        super().__init__(message, entity=entity, entity_id=entity_id)


class GameClosed(GamingError):
    """The game or market is no longer accepting wagers"""

    code = "game_closed"
    status_code = 409


class MatchClosed(GameClosed):
    code = "match_closed"


class DrawClosed(GameClosed):
    code = "draw_closed"


class MarketClosed(GameClosed):
    code = "market_closed"


class BelowMinimum(GamingError):
    code = "below_minimum"
    status_code = 422


class AboveMaximum(GamingError):
    code = "above_maximum"
    status_code = 422


class PositionLocked(GamingError):
    code = "position_locked"
    status_code = 409


class PositionMatured(GamingError):
    code = "position_matured"
    status_code = 409
