"""
Centralized configuration — env vars, defaults, and the Settings object.

Settings is built once in create_app() and handed to everything that needs it;
nothing below the app factory reads the environment directly.
"""
import os
from dataclasses import dataclass
from typing import Optional


SERVICE_NAME = 'Lead Webhook Service'
SERVICE_VERSION = '1.0.0'

# ── Endpoint modes ────────────────────────────────────────────────────────────
MODE_MAPPING = 'mapping'
MODE_ACTIVE = 'active'

# ── Lead defaults when an endpoint leaves them blank ─────────────────────────
DEFAULT_LEAD_STATUS = 'new'
DEFAULT_LEAD_PRIORITY = 'medium'
DEFAULT_LEAD_SOURCE = 'webhook'
CONTACT_SOURCE = 'webhook'


def _int_env(name, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _float_env(name, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Runtime configuration, constructed once at startup."""
    environment: str = 'production'
    log_level: str = 'INFO'
    log_format: str = 'text'
    database_url: str = 'sqlite:///local.db'
    redis_url: str = 'redis://localhost:6379/0'
    remote_rpc_url: Optional[str] = None
    remote_rpc_key: Optional[str] = None
    remote_rpc_timeout: float = 10.0
    rate_limit_max: int = 100
    rate_limit_window_seconds: int = 900
    max_payload_bytes: int = 10 * 1024 * 1024
    port: int = 3000

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == 'development'

    @property
    def remote_enabled(self) -> bool:
        return bool(self.remote_rpc_url)

    @property
    def throttle_enabled(self) -> bool:
        return self.rate_limit_max > 0

    @classmethod
    def from_env(cls) -> 'Settings':
        """Read every setting from the environment."""
        # Heroku/Railway inject postgres:// but SQLAlchemy 2.x requires postgresql://
        database_url = os.getenv('DATABASE_URL', 'sqlite:///local.db')
        database_url = database_url.replace('postgres://', 'postgresql://', 1)

        return cls(
            # ── Runtime ─────────────────────────────────────────────────────
            environment=os.getenv('ENVIRONMENT', 'production'),
            port=_int_env('PORT', 3000),

            # ── Logging ─────────────────────────────────────────────────────
            log_level=os.getenv('LOG_LEVEL', 'INFO'),
            log_format=os.getenv('LOG_FORMAT', 'text'),

            # ── PostgreSQL / Redis ──────────────────────────────────────────
            database_url=database_url,
            redis_url=os.getenv('REDIS_URL', 'redis://localhost:6379/0'),

            # ── Remote processing procedure ─────────────────────────────────
            remote_rpc_url=os.getenv('REMOTE_RPC_URL') or None,
            remote_rpc_key=os.getenv('REMOTE_RPC_KEY') or None,
            remote_rpc_timeout=_float_env('REMOTE_RPC_TIMEOUT', 10.0),

            # ── Throttle / limits ───────────────────────────────────────────
            rate_limit_max=_int_env('RATE_LIMIT_MAX', 100),
            rate_limit_window_seconds=_int_env('RATE_LIMIT_WINDOW_SECONDS', 900),
            max_payload_bytes=_int_env('MAX_PAYLOAD_BYTES', 10 * 1024 * 1024),
        )
