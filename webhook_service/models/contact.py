"""
Contact model — tenant-scoped person, soft-deduplicated by phone then email.

No unique constraint: two concurrent deliveries can still create duplicates.
"""
from sqlalchemy import Column, Integer, Text, DateTime, Index
from sqlalchemy.sql import func

from webhook_service.database import Base


class Contact(Base):
    __tablename__ = 'contacts'

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Text, nullable=False)
    name = Column(Text, nullable=True)
    email = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)
    source = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index('ix_contacts_tenant_phone', 'tenant_id', 'phone'),
        Index('ix_contacts_tenant_email', 'tenant_id', 'email'),
    )
