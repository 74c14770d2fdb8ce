from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Dict, Optional
import redis.asyncio as redis
from menu_store.obs.logging_setup import get_logger
from menu_store.utils.circuit_breaker import CircuitBreaker

logger = get_logger(__name__)

class PointerStore(ABC):
    """Key-value cell store holding the location of the current index."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        ...

    async def ping(self) -> None:
        """Raise if the store is unreachable."""

    async def close(self) -> None:
        pass

class InMemoryPointerStore(PointerStore):
    def __init__(self):
        self.values: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    async def set(self, key: str, value: str) -> None:
        self.values[key] = value

class NullPointerStore(PointerStore):
    """Stand-in when Redis is not configured: nothing is ever found and writes are dropped."""

    async def get(self, key: str) -> Optional[str]:
        return None

    async def set(self, key: str, value: str) -> None:
        logger.warning("Pointer store not configured, dropping write", key=key)

class RedisPointerStore(PointerStore):
    """Redis-backed pointer store."""

    def __init__(
        self,
        redis_url: Optional[str] = None,
        client: Optional[redis.Redis] = None,
        circuit_breaker: Optional[CircuitBreaker] = None
    ):
        if redis_url is None and client is None:
            raise ValueError("RedisPointerStore needs a redis_url or a client")
        self.redis_url = redis_url
        self._redis: Optional[redis.Redis] = client
        self._circuit_breaker = circuit_breaker or CircuitBreaker(
            "redis",
            failure_threshold=3,
            recovery_timeout=30
        )

    async def _get_redis(self) -> redis.Redis:
        """Create the connection on first use, guarded by the circuit breaker."""
        if self._redis is None:
            async def _create_connection() -> redis.Redis:
                client = redis.from_url(
                    self.redis_url,
                    decode_responses=True,
                    socket_connect_timeout=5,
                    socket_timeout=5
                )
                await client.ping()
                return client

            try:
                self._redis = await self._circuit_breaker.call(_create_connection)
                logger.info("Redis connection established")
            except Exception as e:
                logger.error("Redis connection failed", error=str(e))
                raise

        return self._redis

    async def get(self, key: str) -> Optional[str]:
        client = await self._get_redis()
        value = await client.get(key)
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value or None

    async def set(self, key: str, value: str) -> None:
        client = await self._get_redis()
        await client.set(key, value)

    async def ping(self) -> None:
        client = await self._get_redis()
        await client.ping()

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

def create_pointer_store(redis_url: Optional[str]) -> PointerStore:
    if redis_url:
        return RedisPointerStore(redis_url)

    logger.error("Missing REDIS_URL, falling back to a pointer store that stores nothing")
    return NullPointerStore()
