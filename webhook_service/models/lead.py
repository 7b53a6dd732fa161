"""
Lead model — one sales lead per processed delivery.

Well-known mapped fields get their own column; any other target field lands
in extra_data.
"""
from sqlalchemy import Column, Integer, Float, Text, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func

from webhook_service.database import Base


class Lead(Base):
    __tablename__ = 'leads'

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Text, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=True)
    contact_id = Column(Integer, ForeignKey('contacts.id'), nullable=True, index=True)
    title = Column(Text, default='')
    name = Column(Text, nullable=True)
    email = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)
    company = Column(Text, nullable=True)
    value = Column(Float, nullable=True)
    status = Column(Text, nullable=False, default='new')
    priority = Column(Text, nullable=False, default='medium')  # low / medium / high
    source = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    pipeline_id = Column(Integer, ForeignKey('pipelines.id'), nullable=True)
    column_id = Column(Integer, ForeignKey('pipeline_columns.id'), nullable=True)
    extra_data = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
