"""
Shared client instances — Redis.

Initialized from create_app() so importing this module is always safe
(even when REDIS_URL is missing during tests). redis.from_url() does not
connect until the first command, so a down Redis only shows up at call time.
"""
import logging
import redis

logger = logging.getLogger('webhook_service.extensions')

redis_client = None


def init_redis(url):
    """Create the shared Redis client for `url`."""
    global redis_client
    redis_client = redis.from_url(url, decode_responses=True)
    logger.info("Redis client configured for %s", url.rsplit('@', 1)[-1])
    return redis_client
