"""
Processing contracts.

The store hands the core plain dataclasses (never ORM rows), and every
execution path returns a ProcessingResult, so the routes only ever see one
shape no matter which path ran.
"""
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Any, Optional

from webhook_service.config import (
    DEFAULT_LEAD_STATUS,
    DEFAULT_LEAD_PRIORITY,
    DEFAULT_LEAD_SOURCE,
)
from webhook_service.processing.errors import WebhookError, RemoteProcessingError


@dataclass
class ColumnInfo:
    """A pipeline column as seen by pipeline placement."""
    id: int
    position: int = 0
    name: str = ''


@dataclass
class Endpoint:
    """Read-only view of a webhook endpoint."""
    id: int
    token: str
    tenant_id: str
    name: str = ''
    is_active: bool = True
    mode: str = 'mapping'
    default_lead_status: Optional[str] = None
    default_lead_priority: Optional[str] = None
    default_lead_source: Optional[str] = None
    pipeline_id: Optional[int] = None
    default_column_id: Optional[int] = None
    columns: List[ColumnInfo] = field(default_factory=list)

    @property
    def lead_defaults(self) -> Dict[str, str]:
        return {
            'status': self.default_lead_status or DEFAULT_LEAD_STATUS,
            'priority': self.default_lead_priority or DEFAULT_LEAD_PRIORITY,
            'source': self.default_lead_source or DEFAULT_LEAD_SOURCE,
        }


@dataclass
class FieldMapping:
    source_field: str
    target_field: str
    is_required: bool = False
    default_value: Optional[Any] = None
    is_active: bool = True


@dataclass
class RequestMeta:
    """Transport details recorded with each delivery."""
    headers: Dict[str, str] = field(default_factory=dict)
    source_ip: Optional[str] = None
    method: str = 'POST'


@dataclass
class ProcessingResult:
    """Uniform outcome of one webhook delivery."""
    success: bool
    mode: Optional[str] = None
    lead_id: Optional[int] = None
    contact_id: Optional[int] = None
    pipeline_id: Optional[int] = None
    column_id: Optional[int] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    http_status: int = 200
    execution_path: Optional[str] = None
    endpoint_name: Optional[str] = None
    tenant_id: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def failure(cls, error: WebhookError, **kwargs) -> 'ProcessingResult':
        return cls(
            success=False,
            error=error.message,
            error_code=error.code,
            http_status=error.http_status,
            **kwargs,
        )

    @classmethod
    def from_remote(cls, data: Any) -> 'ProcessingResult':
        """
        Build a result from the remote procedure's JSON answer.

        Anything that isn't an object with a boolean `success` is treated as a
        remote failure so the caller falls back.
        """
        if isinstance(data, list) and len(data) == 1:
            data = data[0]
        if not isinstance(data, dict) or not isinstance(data.get('success'), bool):
            raise RemoteProcessingError(f"Malformed remote response: {str(data)[:200]}")

        if not data['success']:
            return cls(
                success=False,
                error=data.get('error') or 'Remote processing rejected the payload',
                error_code=data.get('error_code') or 'REMOTE_REJECTED',
                http_status=422,
                execution_path='remote',
            )
        return cls(
            success=True,
            mode=data.get('mode'),
            lead_id=data.get('lead_id'),
            contact_id=data.get('contact_id'),
            pipeline_id=data.get('pipeline_id'),
            column_id=data.get('column_id'),
            execution_path='remote',
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
