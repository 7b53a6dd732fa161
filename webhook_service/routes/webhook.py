"""
Webhook routes — inbound deliveries and the side-effect-free test probe.
"""
import logging
from flask import Blueprint, current_app, request, jsonify

from webhook_service.config import MODE_MAPPING
from webhook_service.processing.base import RequestMeta
from webhook_service.processing.errors import WebhookNotFound, WebhookInactive

logger = logging.getLogger('routes.webhook')

bp = Blueprint('webhook', __name__)

TEST_PAYLOAD_EXAMPLE = {
    'customer': {
        'name': 'João Silva',
        'email': 'joao@exemplo.com',
        'phone': '+5511999999999',
        'company': 'Empresa Exemplo',
    },
    'deal': {
        'title': 'Negócio de Teste',
        'value': 5000,
        'source': 'Website',
    },
}


def client_ip():
    """First X-Forwarded-For hop, else X-Real-IP, else the socket address."""
    forwarded = request.headers.get('X-Forwarded-For', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.headers.get('X-Real-IP') or request.remote_addr


def _error(message, code, status):
    return jsonify({'success': False, 'error': message, 'code': code}), status


@bp.before_request
def throttle_webhooks():
    throttle = current_app.extensions.get('request_throttle')
    if throttle is None:
        return None
    allowed, retry_after = throttle.hit(client_ip())
    if allowed:
        return None
    resp = jsonify({
        'success': False,
        'error': 'Too many requests. Try again later.',
        'code': 'RATE_LIMIT_EXCEEDED',
    })
    resp.status_code = 429
    resp.headers['Retry-After'] = str(retry_after)
    return resp


@bp.route('/webhook/<token>', methods=['POST'])
def receive_webhook(token):
    """Process one third-party delivery for the endpoint behind `token`."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, (dict, list)) or not payload:
        return _error('A non-empty JSON object or array payload is required', 'INVALID_PAYLOAD', 400)

    orchestrator = current_app.extensions['lead_orchestrator']
    meta = RequestMeta(
        headers={k: v for k, v in request.headers.items()},
        source_ip=client_ip(),
        method=request.method,
    )
    result = orchestrator.process_webhook(token, payload, meta)

    if result.error_code in (WebhookNotFound.code, WebhookInactive.code):
        return _error(result.error, result.error_code, result.http_status)

    if result.mode == MODE_MAPPING and result.success:
        return jsonify({
            'success': True,
            'mode': MODE_MAPPING,
            'message': result.meta.get('message', 'Sample data saved for mapping'),
            'webhook_name': result.endpoint_name,
            'tenant_id': result.tenant_id,
        }), 200

    body = {
        'success': result.success,
        'message': 'Lead processed successfully' if result.success else result.error,
        'data': {
            'lead_id': result.lead_id,
            'contact_id': result.contact_id,
            'pipeline_id': result.pipeline_id,
            'column_id': result.column_id,
            'webhook_name': result.endpoint_name,
        } if result.success else None,
        'error_code': None if result.success else result.error_code,
    }
    return jsonify(body), (200 if result.success else result.http_status)


@bp.route('/webhook/<token>/test')
def test_webhook(token):
    """Endpoint metadata + latest captured sample. No side effects."""
    store = current_app.extensions['webhook_store']
    endpoint = store.lookup_endpoint_by_token(token)
    if endpoint is None:
        return _error(WebhookNotFound.default_message, WebhookNotFound.code, 404)

    return jsonify({
        'success': True,
        'webhook': {
            'name': endpoint.name,
            'is_active': endpoint.is_active,
            'mode': endpoint.mode,
            'tenant_id': endpoint.tenant_id,
        },
        'sample': store.get_sample_data(endpoint.id),
        'test_payload_example': TEST_PAYLOAD_EXAMPLE,
    })
