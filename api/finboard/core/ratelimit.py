from slowapi import Limiter
from slowapi.util import get_remote_address

from finboard.core.config import settings

# Shared by main.py and the auth router
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.redis_url,
    enabled=settings.ratelimit_enabled,
)
