"""
Circuit breaker with Redis-backed state and health tracking.

One Redis hash per service (cb:{name}) holds state, consecutive failures,
opened_at and lifetime counters. States:
  - CLOSED    → normal operation, calls pass through
  - OPEN      → too many consecutive failures, calls raise CircuitOpenError
  - HALF_OPEN → reset_timeout elapsed, the next call is a probe

If Redis itself is unreachable the breaker stays out of the way (fail-open).
"""
import logging
import time

logger = logging.getLogger('services.circuit_breaker')

CLOSED = 'closed'
OPEN = 'open'
HALF_OPEN = 'half_open'


class CircuitOpenError(Exception):
    """Raised when calling through an open circuit breaker."""
    def __init__(self, name, retry_after=None):
        self.name = name
        self.retry_after = retry_after
        super().__init__(f"Circuit breaker '{name}' is OPEN — service unavailable")


class CircuitBreaker:
    """
    Usage:
        cb = CircuitBreaker('remote_rpc', redis_client, failure_threshold=3, reset_timeout=120)
        result = cb.call(requests.post, url, json=body, timeout=10)
    """

    PREFIX = 'cb'

    def __init__(self, name, redis_client, failure_threshold=3, reset_timeout=120):
        self.name = name
        self.redis = redis_client
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout

    @property
    def key(self):
        return f'{self.PREFIX}:{self.name}'

    def _read(self):
        try:
            return self.redis.hgetall(self.key) or {}
        except Exception as e:
            logger.debug("Circuit '%s' state unavailable: %s", self.name, e)
            return None

    @property
    def state(self):
        data = self._read()
        if not data:
            return CLOSED
        current = data.get('state', CLOSED)
        if current == OPEN and self._elapsed(data) > self.reset_timeout:
            return HALF_OPEN
        return current

    @property
    def failure_count(self):
        data = self._read() or {}
        return int(data.get('failures', 0) or 0)

    @staticmethod
    def _elapsed(data):
        opened_at = data.get('opened_at')
        return time.time() - float(opened_at) if opened_at else float('inf')

    # ── Core call logic ───────────────────────────────────────────────

    def call(self, func, *args, **kwargs):
        """Execute func through the circuit breaker."""
        data = self._read()
        if data and data.get('state') == OPEN:
            elapsed = self._elapsed(data)
            if elapsed <= self.reset_timeout:
                raise CircuitOpenError(self.name, retry_after=max(0.0, self.reset_timeout - elapsed))
            logger.info("Circuit '%s' half-open, probing", self.name)

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            self._on_failure(e)
            raise
        self._on_success()
        return result

    def _on_success(self):
        try:
            pipe = self.redis.pipeline()
            pipe.hset(self.key, mapping={'state': CLOSED, 'failures': 0, 'last_success': str(time.time())})
            pipe.hincrby(self.key, 'total_success', 1)
            pipe.execute()
        except Exception as e:
            logger.debug("Circuit '%s' could not record success: %s", self.name, e)

    def _on_failure(self, error):
        try:
            failures = self.redis.hincrby(self.key, 'failures', 1)
            pipe = self.redis.pipeline()
            pipe.hincrby(self.key, 'total_failure', 1)
            pipe.hset(self.key, mapping={'last_failure': str(time.time()), 'last_error': str(error)[:200]})
            if failures >= self.failure_threshold:
                pipe.hset(self.key, mapping={'state': OPEN, 'opened_at': str(time.time())})
            pipe.execute()
        except Exception as e:
            logger.debug("Circuit '%s' could not record failure: %s", self.name, e)
            return

        if failures >= self.failure_threshold:
            logger.warning("Circuit '%s' OPENED after %d failures: %s", self.name, failures, error)
        else:
            logger.info("Circuit '%s' failure %d/%d: %s", self.name, failures, self.failure_threshold, error)

    def reset(self):
        """Manually reset the circuit breaker to closed state."""
        try:
            self.redis.hset(self.key, mapping={'state': CLOSED, 'failures': 0, 'opened_at': ''})
            logger.info("Circuit '%s' manually reset to CLOSED", self.name)
        except Exception as e:
            logger.error("Failed to reset circuit '%s': %s", self.name, e)

    def get_health(self):
        """Return health metrics dict for this service."""
        data = self._read()
        if data is None:
            state = 'unknown'
            data = {}
        else:
            state = self.state
        return {
            'name': self.name,
            'state': state,
            'failure_count': int(data.get('failures', 0) or 0),
            'failure_threshold': self.failure_threshold,
            'reset_timeout': self.reset_timeout,
            'total_success': int(data.get('total_success', 0) or 0),
            'total_failure': int(data.get('total_failure', 0) or 0),
            'last_error': data.get('last_error', ''),
        }


# ── Global registry ───────────────────────────────────────────────────────

_registry = {}


def get_breaker(name):
    """Return a registered breaker; KeyError if init_breakers() hasn't created it."""
    return _registry[name]


def get_all_breakers():
    return dict(_registry)


def init_breakers(redis_client):
    """Create the breakers for every external service this app calls."""
    breakers = {
        'remote_rpc': CircuitBreaker('remote_rpc', redis_client, failure_threshold=3, reset_timeout=120),
    }
    _registry.update(breakers)
    return breakers
