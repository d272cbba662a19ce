import json
import zlib
from typing import Optional, Any
import redis
from .config import get_settings


class CacheService:
    """Redis JSON cache for catalog responses (zlib-compressed by default)"""

    def __init__(self, url: Optional[str] = None, compress: bool = True, client=None):
        if client is None:
            settings = get_settings()
            client = redis.Redis.from_url(
                url or settings.REDIS_URL,
                decode_responses=False,
                socket_timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
                socket_connect_timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
            )
        self.redis = client
        self.compress = compress

    def get_json(self, key: str) -> Optional[Any]:
        try:
            data = self.redis.get(key)
        except redis.RedisError:
            return None
        if data is None:
            return None
        if self.compress:
            try:
                data = zlib.decompress(data)
            except zlib.error:
                pass
        try:
            if isinstance(data, bytes):
                data = data.decode("utf-8")
            return json.loads(data)
        except (UnicodeDecodeError, ValueError):
            return None

    def set_json(self, key: str, value: Any, ttl_seconds: int) -> bool:
        try:
            raw = json.dumps(value, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError):
            return False
        payload = zlib.compress(raw) if self.compress else raw
        try:
            self.redis.setex(key, ttl_seconds, payload)
        except redis.RedisError:
            return False
        return True

    def delete(self, key: str) -> int:
        try:
            return int(self.redis.delete(key))
        except redis.RedisError:
            return 0
