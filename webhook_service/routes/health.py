"""
Health routes — service info, dependency checks, circuit breaker states.
"""
import logging
import time
from datetime import datetime, timezone
from flask import Blueprint, current_app, jsonify

from webhook_service.config import SERVICE_NAME, SERVICE_VERSION
from webhook_service.services.circuit_breaker import get_all_breakers

logger = logging.getLogger('routes.health')

bp = Blueprint('health', __name__)

_STARTED_AT = time.time()


def _now():
    return datetime.now(timezone.utc).isoformat()


@bp.route('/')
def index():
    return jsonify({
        'service': SERVICE_NAME,
        'version': SERVICE_VERSION,
        'status': 'healthy',
        'timestamp': _now(),
        'uptime': round(time.time() - _STARTED_AT, 1),
    })


@bp.route('/health')
def health_check():
    """Database ping + remote procedure configuration."""
    settings = current_app.extensions['webhook_settings']
    store = current_app.extensions['webhook_store']

    try:
        store.ping()
        database = 'ok'
    except Exception as e:
        logger.error("Health check database ping failed: %s", e)
        database = 'error'

    ok = database == 'ok'
    return jsonify({
        'status': 'OK' if ok else 'DEGRADED',
        'timestamp': _now(),
        'checks': {
            'database': database,
            'remote_rpc': 'configured' if settings.remote_enabled else 'disabled',
            'uptime': round(time.time() - _STARTED_AT, 1),
        },
    }), (200 if ok else 503)


@bp.route('/api/health')
def api_health():
    """Circuit breaker state for each external service."""
    return jsonify({
        'services': {name: cb.get_health() for name, cb in get_all_breakers().items()},
    })


@bp.route('/api/health/<service>/reset', methods=['POST'])
def reset_circuit(service):
    cb = get_all_breakers().get(service)
    if cb is None:
        return jsonify({'ok': False, 'error': f'Unknown service: {service}'}), 404
    cb.reset()
    return jsonify({'ok': True, 'service': service, 'state': cb.state})
