"""
SQL persistence for the webhook pipeline.

Every method opens its own session and closes it before returning; nothing
spans the whole delivery. Reads hand back plain dataclasses from
processing.base so callers never touch detached ORM rows.

Contact and lead writes raise DownstreamWriteError on failure. Audit/stat
writes raise the raw SQLAlchemy error; the orchestrator logs and swallows those.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError

from webhook_service import database
from webhook_service.models.contact import Contact
from webhook_service.models.endpoint import WebhookEndpoint
from webhook_service.models.field_mapping import WebhookFieldMapping
from webhook_service.models.lead import Lead
from webhook_service.models.pipeline import PipelineColumn
from webhook_service.models.sample_data import WebhookSampleData
from webhook_service.models.user import User
from webhook_service.models.webhook_request import WebhookRequest
from webhook_service.processing.base import ColumnInfo, Endpoint, FieldMapping
from webhook_service.processing.errors import DownstreamWriteError

logger = logging.getLogger('services.store')

# LeadData keys that map straight onto Lead columns; everything else → extra_data
LEAD_COLUMNS = ('title', 'name', 'email', 'phone', 'company', 'status', 'priority', 'source', 'notes')

_AUDIT_FIELDS = {'status', 'error_message', 'processing_result', 'created_lead_id', 'processed_at'}


def _to_endpoint(row: WebhookEndpoint, columns: Optional[List[ColumnInfo]] = None) -> Endpoint:
    return Endpoint(
        id=row.id,
        token=row.token,
        tenant_id=row.tenant_id,
        name=row.name or '',
        is_active=bool(row.is_active),
        mode=row.mode,
        default_lead_status=row.default_lead_status,
        default_lead_priority=row.default_lead_priority,
        default_lead_source=row.default_lead_source,
        pipeline_id=row.pipeline_id,
        default_column_id=row.default_column_id,
        columns=columns or [],
    )


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


class SqlStore:
    """
    Usage:
        store = SqlStore()                      # sessions from database.get_session
        store = SqlStore(session_factory=Sess)  # explicit factory (tests, scripts)
    """

    def __init__(self, session_factory=None):
        self._session_factory = session_factory

    def _session(self):
        if self._session_factory is not None:
            return self._session_factory()
        return database.get_session()

    # ── Health ────────────────────────────────────────────────────────

    def ping(self) -> bool:
        session = self._session()
        try:
            session.execute(text('SELECT 1'))
            return True
        finally:
            session.close()

    # ── Endpoints ─────────────────────────────────────────────────────

    def lookup_endpoint_by_token(self, token: str) -> Optional[Endpoint]:
        if not token:
            return None
        session = self._session()
        try:
            row = session.execute(
                select(WebhookEndpoint).where(WebhookEndpoint.token == token)
            ).scalar_one_or_none()
            return _to_endpoint(row) if row else None
        finally:
            session.close()

    def get_endpoint_with_pipeline(self, endpoint_id: int) -> Optional[Endpoint]:
        """Endpoint plus its pipeline's columns, in (position, id) order."""
        session = self._session()
        try:
            row = session.get(WebhookEndpoint, endpoint_id)
            if row is None:
                return None
            columns = []
            if row.pipeline_id:
                col_rows = session.execute(
                    select(PipelineColumn)
                    .where(PipelineColumn.pipeline_id == row.pipeline_id)
                    .order_by(PipelineColumn.position, PipelineColumn.id)
                ).scalars().all()
                columns = [ColumnInfo(id=c.id, position=c.position or 0, name=c.name or '') for c in col_rows]
            return _to_endpoint(row, columns)
        finally:
            session.close()

    def list_active_field_mappings(self, endpoint_id: int) -> List[FieldMapping]:
        session = self._session()
        try:
            rows = session.execute(
                select(WebhookFieldMapping)
                .where(
                    WebhookFieldMapping.endpoint_id == endpoint_id,
                    WebhookFieldMapping.is_active.is_(True),
                )
                .order_by(WebhookFieldMapping.position, WebhookFieldMapping.id)
            ).scalars().all()
            return [
                FieldMapping(
                    source_field=m.source_field,
                    target_field=m.target_field,
                    is_required=bool(m.is_required),
                    default_value=m.default_value,
                    is_active=True,
                )
                for m in rows
            ]
        finally:
            session.close()

    def increment_endpoint_stats(self, endpoint_id: int, success: bool):
        session = self._session()
        try:
            row = session.get(WebhookEndpoint, endpoint_id)
            if row is None:
                return
            row.total_requests = (row.total_requests or 0) + 1
            if success:
                row.successful_requests = (row.successful_requests or 0) + 1
            else:
                row.failed_requests = (row.failed_requests or 0) + 1
            row.last_request_at = datetime.now(timezone.utc)
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ── Audit ─────────────────────────────────────────────────────────

    def insert_webhook_request(self, endpoint_id: int, payload: Any, headers: Dict[str, str],
                               source_ip: Optional[str], method: str = 'POST') -> int:
        session = self._session()
        try:
            req = WebhookRequest(
                endpoint_id=endpoint_id,
                method=method,
                payload=payload,
                headers=dict(headers or {}),
                source_ip=source_ip,
                status='processing',
            )
            session.add(req)
            session.commit()
            return req.id
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def update_webhook_request(self, request_id: int, **patch):
        unknown = set(patch) - _AUDIT_FIELDS
        if unknown:
            raise ValueError(f"Unknown webhook request fields: {sorted(unknown)}")

        session = self._session()
        try:
            req = session.get(WebhookRequest, request_id)
            if req is None:
                logger.warning("Webhook request %s not found for update", request_id)
                return
            for key, value in patch.items():
                setattr(req, key, value)
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def upsert_sample_data(self, endpoint_id: int, payload: Any, detected_fields: List[str]):
        """Latest sample replaces the previous one for this endpoint."""
        session = self._session()
        try:
            sample = session.get(WebhookSampleData, endpoint_id)
            if sample is None:
                sample = WebhookSampleData(endpoint_id=endpoint_id)
                session.add(sample)
            sample.sample_payload = payload
            sample.detected_fields = list(detected_fields)
            sample.updated_at = datetime.now(timezone.utc)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise DownstreamWriteError(f"Failed to save sample data: {e}") from e
        finally:
            session.close()

    def get_sample_data(self, endpoint_id: int) -> Optional[Dict[str, Any]]:
        session = self._session()
        try:
            sample = session.get(WebhookSampleData, endpoint_id)
            if sample is None:
                return None
            return {
                'sample_payload': sample.sample_payload,
                'detected_fields': sample.detected_fields or [],
                'updated_at': sample.updated_at.isoformat() if sample.updated_at else None,
            }
        finally:
            session.close()

    # ── Users / contacts ──────────────────────────────────────────────

    def find_admin_user(self, tenant_id: str) -> Optional[int]:
        session = self._session()
        try:
            return session.execute(
                select(User.id)
                .where(User.tenant_id == tenant_id, User.is_admin.is_(True))
                .order_by(User.id)
                .limit(1)
            ).scalar_one_or_none()
        finally:
            session.close()

    def _find_contact(self, tenant_id: str, column, value: str) -> Optional[int]:
        session = self._session()
        try:
            return session.execute(
                select(Contact.id)
                .where(Contact.tenant_id == tenant_id, column == value)
                .order_by(Contact.id)
                .limit(1)
            ).scalar_one_or_none()
        finally:
            session.close()

    def find_contact_by_phone(self, tenant_id: str, phone: str) -> Optional[int]:
        return self._find_contact(tenant_id, Contact.phone, phone)

    def find_contact_by_email(self, tenant_id: str, email: str) -> Optional[int]:
        return self._find_contact(tenant_id, Contact.email, email)

    def create_contact(self, tenant_id: str, name: Optional[str] = None, email: Optional[str] = None,
                       phone: Optional[str] = None, source: Optional[str] = None) -> int:
        session = self._session()
        try:
            contact = Contact(tenant_id=tenant_id, name=name, email=email, phone=phone, source=source)
            session.add(contact)
            session.commit()
            return contact.id
        except SQLAlchemyError as e:
            session.rollback()
            raise DownstreamWriteError(f"Failed to create contact: {e}") from e
        finally:
            session.close()

    # ── Leads ─────────────────────────────────────────────────────────

    def create_lead(self, lead_data: Dict[str, Any], user_id: Optional[int], tenant_id: str,
                    contact_id: Optional[int] = None) -> Tuple[int, Optional[int]]:
        """Insert a lead from LeadData. Returns (lead_id, contact_id)."""
        columns = {key: _text(lead_data.get(key)) for key in LEAD_COLUMNS if lead_data.get(key) is not None}
        extra = {k: v for k, v in lead_data.items() if k not in LEAD_COLUMNS and k != 'value'}

        value = lead_data.get('value')
        numeric_value = _to_float(value) if value is not None else None
        if value is not None and numeric_value is None:
            extra['value'] = value

        if not columns.get('title'):
            columns['title'] = columns.get('name') or columns.get('company') or 'Webhook lead'

        session = self._session()
        try:
            lead = Lead(
                tenant_id=tenant_id,
                user_id=user_id,
                contact_id=contact_id,
                value=numeric_value,
                extra_data=extra or None,
                **columns,
            )
            session.add(lead)
            session.commit()
            return lead.id, contact_id
        except SQLAlchemyError as e:
            session.rollback()
            raise DownstreamWriteError(f"Failed to create lead: {e}") from e
        finally:
            session.close()

    def move_lead_to_column(self, lead_id: int, column_id: int) -> int:
        """Place a lead in `column_id`. Returns the pipeline that column belongs to."""
        session = self._session()
        try:
            lead = session.get(Lead, lead_id)
            column = session.get(PipelineColumn, column_id)
            if lead is None or column is None:
                raise DownstreamWriteError(f"Cannot move lead {lead_id} to column {column_id}")
            pipeline_id = column.pipeline_id
            lead.pipeline_id = pipeline_id
            lead.column_id = column.id
            session.commit()
            return pipeline_id
        except SQLAlchemyError as e:
            session.rollback()
            raise DownstreamWriteError(f"Failed to move lead: {e}") from e
        finally:
            session.close()
