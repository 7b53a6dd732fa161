"""
WebhookEndpoint model — one row per tenant webhook receiver, keyed by token.
"""
from sqlalchemy import Column, Integer, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func

from webhook_service.database import Base


class WebhookEndpoint(Base):
    __tablename__ = 'webhook_endpoints'

    id = Column(Integer, primary_key=True, autoincrement=True)
    token = Column(Text, nullable=False, unique=True)
    tenant_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False, default='')
    is_active = Column(Boolean, nullable=False, default=True)
    mode = Column(Text, nullable=False, default='mapping')  # mapping / active
    default_lead_status = Column(Text, nullable=True)
    default_lead_priority = Column(Text, nullable=True)
    default_lead_source = Column(Text, nullable=True)
    pipeline_id = Column(Integer, ForeignKey('pipelines.id'), nullable=True)
    default_column_id = Column(Integer, ForeignKey('pipeline_columns.id'), nullable=True)
    total_requests = Column(Integer, nullable=False, default=0)
    successful_requests = Column(Integer, nullable=False, default=0)
    failed_requests = Column(Integer, nullable=False, default=0)
    last_request_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
