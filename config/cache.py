# config/cache.py
from redis.asyncio import Redis, from_url


async def open_redis(url: str) -> Redis:
    """
    Build a fresh Redis client for the app lifespan.
    The caller owns the handle and passes it to whatever needs it.
    """
    client = from_url(
        url,
        encoding="utf-8",
        decode_responses=False,  # token store decodes raw bytes itself
        socket_keepalive=True,
        health_check_interval=30,
    )
    # Fail fast on startup if Redis is unreachable.
    await client.ping()
    return client


async def close_redis(client: Redis | None) -> None:
    if client is not None:
        await client.aclose()
