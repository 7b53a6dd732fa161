"""
Lead orchestrator — one webhook delivery from token to audited result.

Sequence:
  1. Resolve endpoint by token (not found / inactive are terminal)
  2. Open the audit record
  3. Mapping mode: store the sample payload and stop
     Active mode:  map payload → remote procedure, else local fallback
  4. Close the audit record and bump endpoint stats

Audit and stats writes never change the result returned to the caller.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from webhook_service.config import MODE_MAPPING, MODE_ACTIVE
from webhook_service.processing.base import Endpoint, ProcessingResult, RequestMeta
from webhook_service.processing.errors import (
    WebhookError,
    WebhookNotFound,
    WebhookInactive,
    UnsupportedMode,
    RemoteProcessingError,
    InternalError,
)
from webhook_service.processing.execution import (
    ExecutionContext,
    LocalExecution,
    RemoteExecution,
)
from webhook_service.processing.mapping import apply_mappings
from webhook_service.processing.paths import detect_fields

logger = logging.getLogger('processing.orchestrator')


def _payload_preview(payload: Any) -> str:
    return str(payload)[:200]


class LeadOrchestrator:
    """
    Usage:
        orchestrator = LeadOrchestrator(settings, store, remote_client)
        result = orchestrator.process_webhook(token, payload, RequestMeta(...))

    remote_client may be None, in which case active-mode deliveries go straight
    to the local execution path.
    """

    def __init__(self, settings, store, remote_client=None):
        self.settings = settings
        self.store = store
        self.primary = RemoteExecution(remote_client) if remote_client is not None else None
        self.fallback = LocalExecution(store)

    # ── Entry point ───────────────────────────────────────────────────

    def process_webhook(self, token: str, payload: Any, meta: Optional[RequestMeta] = None) -> ProcessingResult:
        meta = meta or RequestMeta()

        endpoint = self.store.lookup_endpoint_by_token(token)
        if endpoint is None:
            logger.info("Unknown webhook token from %s", meta.source_ip)
            return ProcessingResult.failure(WebhookNotFound())

        logger.info("Webhook %s received from %s: %s", endpoint.id, meta.source_ip, _payload_preview(payload))
        request_id = self._open_audit(endpoint, payload, meta)

        try:
            result = self._dispatch(endpoint, payload, meta)
        except WebhookError as e:
            result = ProcessingResult.failure(e)
        except Exception as e:
            logger.error("Unexpected error processing webhook %s", endpoint.id, exc_info=True)
            detail = (str(e) or e.__class__.__name__) if self.settings.is_development else None
            result = ProcessingResult.failure(InternalError(detail))

        result.endpoint_name = endpoint.name
        result.tenant_id = endpoint.tenant_id
        if result.mode is None:
            result.mode = endpoint.mode

        if result.success:
            logger.info("Webhook %s processed (mode=%s, path=%s, lead=%s)",
                        endpoint.id, result.mode, result.execution_path, result.lead_id)
        else:
            logger.warning("Webhook %s failed: [%s] %s", endpoint.id, result.error_code, result.error)

        self._close_audit(request_id, result)
        if result.error_code != WebhookInactive.code:
            self._record_stats(endpoint.id, result.success)
        return result

    def _dispatch(self, endpoint: Endpoint, payload: Any, meta: RequestMeta) -> ProcessingResult:
        if not endpoint.is_active:
            raise WebhookInactive()
        if endpoint.mode == MODE_MAPPING:
            return self.capture_sample(endpoint, payload)
        if endpoint.mode == MODE_ACTIVE:
            return self.process_active(endpoint, payload, meta)
        raise UnsupportedMode(endpoint.mode)

    # ── Modes ─────────────────────────────────────────────────────────

    def capture_sample(self, endpoint: Endpoint, payload: Any) -> ProcessingResult:
        """Mapping mode: keep the latest payload so the tenant can configure mappings."""
        self.store.upsert_sample_data(endpoint.id, payload, detect_fields(payload))
        return ProcessingResult(
            success=True,
            mode=MODE_MAPPING,
            execution_path='local',
            meta={'message': 'Sample data saved for mapping'},
        )

    def process_active(self, endpoint: Endpoint, payload: Any, meta: RequestMeta) -> ProcessingResult:
        """Active mode: map once, then primary remote path with a single local fallback."""
        detail = self.store.get_endpoint_with_pipeline(endpoint.id) or endpoint
        mappings = self.store.list_active_field_mappings(endpoint.id)
        lead_data = apply_mappings(payload, mappings, detail.lead_defaults)

        context = ExecutionContext(endpoint=detail, payload=payload, meta=meta, lead_data=lead_data)

        if self.primary is not None:
            try:
                result = self.primary.execute(context)
                result.mode = MODE_ACTIVE
                return result
            except RemoteProcessingError as e:
                logger.warning("Remote processing failed for endpoint %s, using local fallback: %s",
                               endpoint.id, e.message)

        result = self.fallback.execute(context)
        result.mode = MODE_ACTIVE
        return result

    # ── Bookkeeping ───────────────────────────────────────────────────

    def _open_audit(self, endpoint: Endpoint, payload: Any, meta: RequestMeta) -> Optional[int]:
        try:
            return self.store.insert_webhook_request(
                endpoint.id, payload, meta.headers, meta.source_ip, meta.method,
            )
        except Exception:
            logger.error("Failed to record webhook request for endpoint %s", endpoint.id, exc_info=True)
            return None

    def _close_audit(self, request_id: Optional[int], result: ProcessingResult):
        if request_id is None:
            return

        patch = {'processed_at': datetime.now(timezone.utc)}
        if not result.success:
            patch.update(status='failed', error_message=result.error)
        elif result.mode == MODE_MAPPING:
            patch.update(status='completed')
        else:
            patch.update(
                status='success',
                created_lead_id=result.lead_id,
                processing_result={
                    'lead_id': result.lead_id,
                    'contact_id': result.contact_id,
                    'pipeline_id': result.pipeline_id,
                    'column_id': result.column_id,
                    'execution_path': result.execution_path,
                },
            )

        try:
            self.store.update_webhook_request(request_id, **patch)
        except Exception:
            logger.error("Failed to update webhook request %s", request_id, exc_info=True)

    def _record_stats(self, endpoint_id: int, success: bool):
        try:
            self.store.increment_endpoint_stats(endpoint_id, success)
        except Exception:
            logger.error("Failed to update stats for endpoint %s", endpoint_id, exc_info=True)
