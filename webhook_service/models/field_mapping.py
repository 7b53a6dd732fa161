"""
WebhookFieldMapping model — payload path → lead field, ordered per endpoint.
"""
from sqlalchemy import Column, Integer, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func

from webhook_service.database import Base


class WebhookFieldMapping(Base):
    __tablename__ = 'webhook_field_mappings'

    id = Column(Integer, primary_key=True, autoincrement=True)
    endpoint_id = Column(Integer, ForeignKey('webhook_endpoints.id'), nullable=False, index=True)
    source_field = Column(Text, nullable=False)  # dotted path, e.g. lead.contact.email
    target_field = Column(Text, nullable=False)
    is_required = Column(Boolean, nullable=False, default=False)
    default_value = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
