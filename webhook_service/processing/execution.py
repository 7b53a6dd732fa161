"""
Active-mode execution paths.

The orchestrator maps the payload once, then hands the resulting LeadData to a
primary adapter (the remote procedure) and, if that fails, to the local
fallback adapter. Both return a ProcessingResult; neither re-validates.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from webhook_service.processing.base import (
    Endpoint,
    ProcessingResult,
    RequestMeta,
)
from webhook_service.processing.contacts import resolve_contact
from webhook_service.processing.errors import DownstreamWriteError, RemoteProcessingError

logger = logging.getLogger('processing.execution')


@dataclass
class ExecutionContext:
    """Everything an execution path needs for one active-mode delivery."""
    endpoint: Endpoint
    payload: Any
    meta: RequestMeta
    lead_data: Dict[str, Any]


class ExecutionStrategy(ABC):
    """Base class for the primary and fallback execution adapters."""
    name: str = ''

    @abstractmethod
    def execute(self, context: ExecutionContext) -> ProcessingResult:
        ...


def choose_column(endpoint: Endpoint) -> Optional[int]:
    """
    Column a new lead should land in, or None.

    The endpoint's default column wins. Otherwise the pipeline column with the
    lowest position; equal positions fall back to the lowest column id.
    """
    if endpoint.default_column_id:
        return endpoint.default_column_id
    if not endpoint.pipeline_id or not endpoint.columns:
        return None
    first = min(endpoint.columns, key=lambda col: (col.position, col.id))
    return first.id


class RemoteExecution(ExecutionStrategy):
    """Delegate the whole active sequence to the remote procedure in one call."""
    name = 'remote'

    def __init__(self, client):
        self.client = client

    def execute(self, context: ExecutionContext) -> ProcessingResult:
        try:
            data = self.client.process_webhook(
                context.endpoint.id,
                context.payload,
                context.meta.headers,
                context.meta.source_ip,
            )
        except Exception as e:
            raise RemoteProcessingError(str(e)) from e

        return ProcessingResult.from_remote(data)


class LocalExecution(ExecutionStrategy):
    """Run contact resolution, lead creation and placement against the store."""
    name = 'local'

    def __init__(self, store):
        self.store = store

    def execute(self, context: ExecutionContext) -> ProcessingResult:
        endpoint = context.endpoint
        tenant_id = endpoint.tenant_id

        user_id = self.store.find_admin_user(tenant_id)
        if user_id is None:
            raise DownstreamWriteError(f"No admin user found for tenant {tenant_id} to own the lead")

        contact_id = resolve_contact(self.store, tenant_id, context.lead_data)
        lead_id, contact_id = self.store.create_lead(
            context.lead_data, user_id, tenant_id, contact_id,
        )
        logger.info("Lead %s created for endpoint %s (contact=%s)", lead_id, endpoint.id, contact_id)

        pipeline_id, column_id = self._place(lead_id, endpoint)

        return ProcessingResult(
            success=True,
            lead_id=lead_id,
            contact_id=contact_id,
            pipeline_id=pipeline_id,
            column_id=column_id,
            execution_path=self.name,
        )

    def _place(self, lead_id: int, endpoint: Endpoint) -> Tuple[Optional[int], Optional[int]]:
        """(pipeline_id, column_id) the lead ended up in; (None, None) when unplaced."""
        column_id = choose_column(endpoint)
        if column_id is None:
            return None, None
        try:
            pipeline_id = self.store.move_lead_to_column(lead_id, column_id)
            return pipeline_id, column_id
        except Exception as e:
            # The lead exists either way; it just stays out of the board
            logger.warning("Could not move lead %s to column %s: %s", lead_id, column_id, e)
            return None, None
