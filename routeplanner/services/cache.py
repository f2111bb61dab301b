import hashlib
import json
import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class LookupCache:
    """Best-effort Redis cache for place and geocode lookups.

    Without a Redis URL every call is a no-op, so the lookup path never
    depends on the cache being reachable.
    """

    def __init__(self, redis_url: Optional[str] = None, prefix: str = "maps") -> None:
        self.redis_url = redis_url
        self.prefix = prefix
        self.redis_client: Optional[redis.Redis] = None

    @property
    def enabled(self) -> bool:
        return self.redis_client is not None

    async def connect(self) -> None:
        if self.redis_client or not self.redis_url:
            return
        client = redis.from_url(
            self.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        await client.ping()
        self.redis_client = client
        logger.info("Lookup cache: Redis connected")

    async def close(self) -> None:
        if self.redis_client is not None:
            await self.redis_client.aclose()
            self.redis_client = None

    def key(self, kind: str, params: Dict[str, Any]) -> str:
        key_str = json.dumps(params, sort_keys=True)
        hash_val = hashlib.sha256(key_str.encode()).hexdigest()
        return f"{self.prefix}:{kind}:{hash_val}"

    async def get(self, key: str) -> Optional[Any]:
        if not self.redis_client:
            return None
        try:
            cached = await self.redis_client.get(key)
        except redis.RedisError as exc:
            logger.warning("Lookup cache read failed for %s: %s", key, exc)
            return None
        if cached:
            return json.loads(cached)
        return None

    async def set(self, key: str, data: Any, ttl: int = 3600) -> None:
        if not self.redis_client:
            return
        try:
            await self.redis_client.set(key, json.dumps(data), ex=ttl)
        except redis.RedisError as exc:
            logger.warning("Lookup cache write failed for %s: %s", key, exc)
