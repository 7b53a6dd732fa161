"""
WebhookSampleData model — latest payload captured in mapping mode (one per endpoint).
"""
from sqlalchemy import Column, Integer, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func

from webhook_service.database import Base


class WebhookSampleData(Base):
    __tablename__ = 'webhook_sample_data'

    endpoint_id = Column(Integer, ForeignKey('webhook_endpoints.id'), primary_key=True)
    sample_payload = Column(JSON, nullable=False)
    detected_fields = Column(JSON, default=list)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
