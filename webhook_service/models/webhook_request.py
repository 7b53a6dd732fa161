"""
WebhookRequest model — audit trail, one row per delivery that resolved an endpoint.

Status flow: processing → success / failed / completed (mapping mode).
"""
from sqlalchemy import Column, Integer, Text, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func

from webhook_service.database import Base


class WebhookRequest(Base):
    __tablename__ = 'webhook_requests'

    id = Column(Integer, primary_key=True, autoincrement=True)
    endpoint_id = Column(Integer, ForeignKey('webhook_endpoints.id'), nullable=False, index=True)
    method = Column(Text, nullable=False, default='POST')
    payload = Column(JSON, nullable=True)
    headers = Column(JSON, nullable=True)
    source_ip = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default='processing')
    error_message = Column(Text, nullable=True)
    processing_result = Column(JSON, nullable=True)
    created_lead_id = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    processed_at = Column(DateTime(timezone=True), nullable=True)
