"""Advisory Redis cache for assembled evidence.

The cache never fails a request: a missing backend or any backend error
turns reads into misses and writes into no-ops.
"""

import logging
from typing import Any, NamedTuple, TypeVar

from pydantic import BaseModel, ValidationError
from redis.asyncio import Redis

from dispute_evidence.core.config import Settings, get_settings
from dispute_evidence.core.exceptions import CacheUnavailable

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_TTL_SECONDS = 3600


class CacheKey(NamedTuple):
    """(transaction hash, contract address, target address-or-absent)."""

    tx_hash: str
    contract_address: str
    target_address: str | None = None
    namespace: str = "evidence"

    def render(self) -> str:
        target = self.target_address.lower() if self.target_address else "null"
        return (
            f"{self.namespace}:{self.tx_hash.lower()}:"
            f"{self.contract_address.lower()}:{target}"
        )


class EvidenceCache:
    """Stores serialized models under TTL.

    ``redis_client`` is any client exposing async ``get`` and ``setex``
    (``redis.asyncio.Redis``). Passing None disables caching.
    """

    def __init__(
        self,
        redis_client: Any = None,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ):
        self.redis_client = redis_client
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "EvidenceCache":
        """Build a Redis-backed cache, or a disabled one when caching is off."""
        settings = settings or get_settings()
        if not settings.cache_enabled:
            return cls(None, settings.cache_ttl_seconds)

        client = Redis.from_url(settings.redis_url)
        return cls(client, settings.cache_ttl_seconds)

    @property
    def enabled(self) -> bool:
        return self.redis_client is not None

    def _require_client(self) -> Any:
        if self.redis_client is None:
            raise CacheUnavailable("no cache backend configured")
        return self.redis_client

    async def get(self, key: CacheKey, model: type[ModelT]) -> ModelT | None:
        """Read a cached model, None on miss or when the cache is unavailable."""
        try:
            data = await self._require_client().get(key.render())
        except CacheUnavailable:
            return None
        except Exception as e:
            logger.error(f"Redis get error for {key.render()}: {e}")
            return None

        if data is None:
            return None

        try:
            return model.model_validate_json(data)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable cache entry {key.render()}: {e}")
            return None

    async def put(
        self, key: CacheKey, value: BaseModel, ttl_seconds: int | None = None
    ) -> bool:
        """Write a model with TTL. Returns False when the write was skipped."""
        ttl = ttl_seconds if ttl_seconds is not None else self.ttl_seconds
        try:
            await self._require_client().setex(
                key.render(), ttl, value.model_dump_json(by_alias=True)
            )
            return True
        except CacheUnavailable:
            return False
        except Exception as e:
            logger.error(f"Redis cache error for {key.render()}: {e}")
            return False

    async def close(self) -> None:
        if self.redis_client is not None:
            await self.redis_client.aclose()
