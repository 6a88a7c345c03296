# repository/token_store.py
import asyncio
import time
from enum import Enum
from typing import Callable, Dict, Optional, Protocol, Tuple
from redis.asyncio import Redis
from redis.exceptions import RedisError
from config.settings import settings
from util.errors import InfrastructureError

# KEYS[1]=key ARGV[1]=expected ARGV[2]=new value ARGV[3]=ttl seconds
_COMPARE_AND_SET = """
local current = redis.call('GET', KEYS[1])
if current == ARGV[1] then
  redis.call('SET', KEYS[1], ARGV[2], 'EX', ARGV[3])
  return 1
end
return 0
"""

# KEYS[1]=key ARGV[1]=expected. 1 deleted, 0 mismatch, -1 missing.
_COMPARE_AND_DELETE = """
local current = redis.call('GET', KEYS[1])
if not current then
  return -1
end
if current == ARGV[1] then
  redis.call('DEL', KEYS[1])
  return 1
end
return 0
"""


class CasOutcome(str, Enum):
    OK = "ok"
    MISMATCH = "mismatch"
    NOT_FOUND = "not_found"


class TokenStore(Protocol):
    """
    Namespaced key-value store with per-key TTL.

    The conditional primitives are what make handshake transitions
    linearizable; a get followed by a separate set is never enough.
    """

    async def get(self, key: str) -> Optional[str]: ...

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def compare_and_set(
        self, key: str, expected: str, new_value: str, ttl_seconds: int
    ) -> CasOutcome: ...

    async def compare_and_delete(self, key: str, expected: str) -> CasOutcome: ...


class RedisTokenStore:
    """
    Redis-backed TokenStore. Conditional writes run as Lua scripts so each
    check-and-write is a single atomic server-side step.

    Any RedisError surfaces as InfrastructureError.
    """

    def __init__(self, client: Redis, prefix: str = settings.REDIS_PREFIX) -> None:
        self._r = client
        self._prefix = prefix
        self._cas = client.register_script(_COMPARE_AND_SET)
        self._cad = client.register_script(_COMPARE_AND_DELETE)

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    async def get(self, key: str) -> Optional[str]:
        try:
            raw = await self._r.get(self._key(key))
        except RedisError as e:
            raise InfrastructureError(f"get failed: {type(e).__name__}") from e
        if raw is None:
            return None
        return raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else str(raw)

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._r.set(self._key(key), value, ex=int(ttl_seconds))
        except RedisError as e:
            raise InfrastructureError(f"set failed: {type(e).__name__}") from e

    async def delete(self, key: str) -> None:
        try:
            await self._r.delete(self._key(key))
        except RedisError as e:
            raise InfrastructureError(f"delete failed: {type(e).__name__}") from e

    async def compare_and_set(
        self, key: str, expected: str, new_value: str, ttl_seconds: int
    ) -> CasOutcome:
        try:
            res = await self._cas(
                keys=[self._key(key)], args=[expected, new_value, int(ttl_seconds)]
            )
        except RedisError as e:
            raise InfrastructureError(
                f"compare_and_set failed: {type(e).__name__}"
            ) from e
        return CasOutcome.OK if int(res) == 1 else CasOutcome.MISMATCH

    async def compare_and_delete(self, key: str, expected: str) -> CasOutcome:
        try:
            res = int(await self._cad(keys=[self._key(key)], args=[expected]))
        except RedisError as e:
            raise InfrastructureError(
                f"compare_and_delete failed: {type(e).__name__}"
            ) from e
        if res == 1:
            return CasOutcome.OK
        if res == -1:
            return CasOutcome.NOT_FOUND
        return CasOutcome.MISMATCH


class MemoryTokenStore:
    """
    Single-process TokenStore for local runs and tests.

    Every operation first yields to the event loop, the way a network
    round-trip would, then runs to completion without another await, so
    each call is atomic with respect to other coroutines.
    `clock` returns seconds and can be swapped for a fake to drive expiry.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._data: Dict[str, Tuple[str, float]] = {}

    def _live(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._data[key]
            return None
        return value

    async def get(self, key: str) -> Optional[str]:
        await asyncio.sleep(0)
        return self._live(key)

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        await asyncio.sleep(0)
        self._data[key] = (value, self._clock() + ttl_seconds)

    async def delete(self, key: str) -> None:
        await asyncio.sleep(0)
        self._data.pop(key, None)

    async def compare_and_set(
        self, key: str, expected: str, new_value: str, ttl_seconds: int
    ) -> CasOutcome:
        await asyncio.sleep(0)
        if self._live(key) != expected:
            return CasOutcome.MISMATCH
        self._data[key] = (new_value, self._clock() + ttl_seconds)
        return CasOutcome.OK

    async def compare_and_delete(self, key: str, expected: str) -> CasOutcome:
        await asyncio.sleep(0)
        current = self._live(key)
        if current is None:
            return CasOutcome.NOT_FOUND
        if current != expected:
            return CasOutcome.MISMATCH
        del self._data[key]
        return CasOutcome.OK
