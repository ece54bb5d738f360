"""Rate limiting middleware using slowapi."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from notes_service.config import Settings


def create_limiter(settings: Settings) -> Limiter:
    """One limiter per application so apps never share counters."""
    return Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)
