"""
Shared FastAPI dependencies
"""

from typing import Optional

from gamewallet.services.gaming import GamingService

_service: Optional[GamingService] = None


def get_gaming_service() -> GamingService:
    """Process-wide GamingService; one lock registry per process."""
    global _service
    if _service is None:
        _service = GamingService()
    return _service
