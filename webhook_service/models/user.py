"""
User model — tenant members; the first admin owns webhook-created leads.
"""
from sqlalchemy import Column, Integer, Text, Boolean, DateTime
from sqlalchemy.sql import func

from webhook_service.database import Base


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Text, nullable=False, index=True)
    email = Column(Text, nullable=False)
    name = Column(Text, default='')
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
