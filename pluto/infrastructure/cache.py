import json
import redis
from typing import Optional, Any
from ..config import settings

_redis_client: Optional[redis.Redis] = None

def get_redis() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
    return _redis_client

def outline_key(course_id: str) -> str:
    return f"course:{course_id}:outline"

def get_cache(key: str) -> Optional[Any]:
    """Cached JSON value. A miss, a corrupt entry and an unreachable Redis all read as None"""
    try:
        raw = get_redis().get(key)
    except redis.RedisError:
        return None
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None

def set_cache(key: str, value: Any, ttl: int = None) -> bool:
    payload = json.dumps(value, ensure_ascii=False)
    try:
        get_redis().setex(key, ttl or settings.CACHE_TTL, payload)
    except redis.RedisError:
        return False
    return True

def delete_cache(key: str) -> bool:
    try:
        get_redis().delete(key)
    except redis.RedisError:
        return False
    return True
