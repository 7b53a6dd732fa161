"""
Request-count throttle — fixed window per client key, counted in Redis.

Keys: throttle:{key}:{window_start} with a TTL of one window. Redis errors
let the request through.
"""
import logging
import time

logger = logging.getLogger('services.throttle')


class RequestThrottle:

    PREFIX = 'throttle'

    def __init__(self, redis_client, max_requests=100, window_seconds=900):
        self.redis = redis_client
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    def hit(self, key, now=None):
        """
        Count one request for `key`.

        Returns (allowed, retry_after_seconds). retry_after is 0 when allowed.
        """
        now = time.time() if now is None else now
        window_start = int(now // self.window_seconds) * self.window_seconds
        redis_key = f'{self.PREFIX}:{key}:{window_start}'

        try:
            count = self.redis.incr(redis_key)
            if count == 1:
                self.redis.expire(redis_key, self.window_seconds)
        except Exception as e:
            logger.warning("Throttle unavailable, allowing request: %s", e)
            return True, 0

        if count > self.max_requests:
            retry_after = int(window_start + self.window_seconds - now) + 1
            return False, retry_after
        return True, 0
