"""Redis-backed auth state: revoked refresh tokens and login lockout counters."""
import redis.asyncio as aioredis

from finboard.core.config import settings

_redis: aioredis.Redis | None = None

_KEY_PREFIX = "finboard:"
_REVOKED = f"{_KEY_PREFIX}revoked_jti:"
_LOGIN_FAILS = f"{_KEY_PREFIX}login_fails:"


def get_redis() -> aioredis.Redis:
    global _redis
    if _redis is None:
        _redis = aioredis.from_url(settings.redis_url, decode_responses=True)
    return _redis


# ─── Refresh token revocation ─────────────────────────────────────────────────

async def revoke_jti(jti: str, ttl_seconds: int) -> None:
    """Remember a refresh token id until the token would have expired anyway."""
    if ttl_seconds > 0:
        await get_redis().setex(f"{_REVOKED}{jti}", ttl_seconds, "1")


async def is_revoked(jti: str) -> bool:
    return bool(await get_redis().exists(f"{_REVOKED}{jti}"))


# ─── Login lockout ────────────────────────────────────────────────────────────

async def record_login_failure(email: str) -> int:
    """Count a failed login; the window starts at the first failure."""
    key = f"{_LOGIN_FAILS}{email.lower()}"
    async with get_redis().pipeline(transaction=True) as pipe:
        pipe.incr(key)
        pipe.expire(key, settings.login_lockout_minutes * 60, nx=True)
        count, _ = await pipe.execute()
    return int(count)


async def is_locked_out(email: str) -> bool:
    count = await get_redis().get(f"{_LOGIN_FAILS}{email.lower()}")
    return count is not None and int(count) >= settings.login_max_attempts


async def clear_login_failures(email: str) -> None:
    await get_redis().delete(f"{_LOGIN_FAILS}{email.lower()}")
