# services/cache/cache_service.py
"""
Short-lived response cache on Redis.

Keys are derived from the fetch parameters (organisation id plus the
source mode), values are the JSON envelopes returned to clients.  Every
Redis problem degrades to a cache miss: the listing request then simply
goes upstream.
"""

import hashlib
import json
from datetime import timedelta
from typing import Any, Dict, Optional

import redis.asyncio as redis
from loguru import logger


class CacheService:
    def __init__(self, redis_url: str, prefix: str = "listings"):
        self.redis_url = redis_url
        self.prefix = prefix
        self._client: Optional[redis.Redis] = None

    async def connect(self) -> None:
        if self._client is not None:
            return
        try:
            self._client = redis.from_url(self.redis_url, encoding="utf-8", decode_responses=True)
            await self._client.ping()
            logger.info(f"Redis cache connected: {self.redis_url.split('@')[-1]}")
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning(f"Redis unavailable, caching disabled: {exc}")
            self._client = None

    async def disconnect(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _key(self, key: str, options: Dict[str, Any]) -> str:
        digest = hashlib.sha256(
            json.dumps({"key": key, "options": options}, sort_keys=True).encode("utf-8")
        ).hexdigest()[:32]
        return f"{self.prefix}:{digest}"

    async def get_cached_result(self, key: str, options: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if self._client is None:
            return None
        try:
            raw = await self._client.get(self._key(key, options))
            if raw is None:
                return None
            cached = json.loads(raw)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning(f"Cache read failed for {key}: {exc}")
            return None
        logger.debug(f"Cache hit for {key} {options}")
        return cached if isinstance(cached, dict) else None

    async def cache_result(
        self,
        key: str,
        options: Dict[str, Any],
        data: Dict[str, Any],
        ttl: timedelta = timedelta(minutes=5),
    ) -> None:
        if self._client is None:
            return
        try:
            await self._client.set(self._key(key, options), json.dumps(data), ex=ttl)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning(f"Cache write failed for {key}: {exc}")
