"""Redis connection pool and pub/sub helpers.

BitBridge uses Redis for two things only: the per-IP rate limit counters
and broadcasting gamification events (project completions, level-ups) to
whoever subscribes. Neither is required for the API to serve requests.
"""

import json
from typing import Any

import redis.asyncio as redis

PROJECT_COMPLETED_CHANNEL = "pubsub:project_completed"
LEVEL_UP_CHANNEL = "pubsub:level_up"

_pool: redis.Redis | None = None


async def init_redis(url: str, max_connections: int = 20) -> None:
    """Open the shared Redis pool."""
    global _pool  # noqa: PLW0603
    _pool = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=max_connections,
    )


async def close_redis() -> None:
    global _pool  # noqa: PLW0603
    if _pool:
        await _pool.aclose()
        _pool = None


def get_redis() -> redis.Redis:
    """Return the shared pool; RuntimeError if ``init_redis`` has not run."""
    if _pool is None:
        msg = "Redis not initialized. Call init_redis() first."
        raise RuntimeError(msg)
    return _pool


async def publish_event(client: Any, channel: str, payload: dict[str, Any]) -> None:  # noqa: ANN401
    """Publish ``payload`` as JSON on ``channel``."""
    await client.publish(channel, json.dumps(payload))
