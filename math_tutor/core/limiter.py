"""Rate limiter (separate module to avoid circular imports)."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from math_tutor.core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
