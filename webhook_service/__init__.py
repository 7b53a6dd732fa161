"""
Flask application factory.

Builds the Settings object once, wires the store, remote client, throttle and
orchestrator into app.extensions, and registers the blueprints.
"""
import importlib
import logging
from flask import Flask, jsonify

logger = logging.getLogger('webhook_service')

AVAILABLE_ENDPOINTS = [
    'GET /',
    'GET /health',
    'POST /webhook/<token>',
    'GET /webhook/<token>/test',
]

_MODEL_MODULES = [
    'webhook_service.models.user',
    'webhook_service.models.pipeline',
    'webhook_service.models.contact',
    'webhook_service.models.lead',
    'webhook_service.models.endpoint',
    'webhook_service.models.field_mapping',
    'webhook_service.models.sample_data',
    'webhook_service.models.webhook_request',
]


def import_models():
    """Import models so Base.metadata knows about every table."""
    for name in _MODEL_MODULES:
        importlib.import_module(name)


def create_app(settings=None):
    """Create and configure the Flask application."""
    from webhook_service.config import Settings
    from webhook_service.logging_config import configure_logging

    settings = settings or Settings.from_env()
    configure_logging(settings)

    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = settings.max_payload_bytes

    # Schema is managed by Alembic, no create_all() here
    from webhook_service.database import configure_database
    configure_database(settings.database_url)
    import_models()

    from webhook_service import extensions
    from webhook_service.services.circuit_breaker import init_breakers
    redis_client = extensions.init_redis(settings.redis_url)
    breakers = init_breakers(redis_client)

    from webhook_service.services.store import SqlStore
    from webhook_service.services.remote import RemoteProcedureClient
    from webhook_service.services.throttle import RequestThrottle
    from webhook_service.processing.orchestrator import LeadOrchestrator

    store = SqlStore()
    remote = RemoteProcedureClient.from_settings(settings, breaker=breakers['remote_rpc'])
    if remote is None:
        logger.info("REMOTE_RPC_URL not set, active deliveries use local processing only")

    app.extensions['webhook_settings'] = settings
    app.extensions['webhook_store'] = store
    app.extensions['lead_orchestrator'] = LeadOrchestrator(settings, store, remote)
    if settings.throttle_enabled:
        app.extensions['request_throttle'] = RequestThrottle(
            redis_client, settings.rate_limit_max, settings.rate_limit_window_seconds,
        )

    from webhook_service.routes.health import bp as health_bp
    from webhook_service.routes.webhook import bp as webhook_bp
    app.register_blueprint(health_bp)
    app.register_blueprint(webhook_bp)

    _register_error_handlers(app, settings)
    return app


def _register_error_handlers(app, settings):

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'success': False,
            'error': 'Endpoint not found',
            'code': 'NOT_FOUND',
            'available_endpoints': AVAILABLE_ENDPOINTS,
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'success': False,
            'error': 'Method not allowed',
            'code': 'METHOD_NOT_ALLOWED',
        }), 405

    @app.errorhandler(413)
    def payload_too_large(error):
        return jsonify({
            'success': False,
            'error': 'Payload too large',
            'code': 'PAYLOAD_TOO_LARGE',
        }), 413

    @app.errorhandler(500)
    def internal_error(error):
        original = getattr(error, 'original_exception', None) or error
        logger.error("Unhandled error: %s", original, exc_info=original)
        return jsonify({
            'success': False,
            'error': 'Internal server error',
            'code': 'INTERNAL_ERROR',
            'message': str(original) if settings.is_development else 'Internal error',
        }), 500
