"""
Pipeline + PipelineColumn models — tenant sales pipelines and their ordered stages.
"""
from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey
from sqlalchemy.sql import func

from webhook_service.database import Base


class Pipeline(Base):
    __tablename__ = 'pipelines'

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class PipelineColumn(Base):
    __tablename__ = 'pipeline_columns'

    id = Column(Integer, primary_key=True, autoincrement=True)
    pipeline_id = Column(Integer, ForeignKey('pipelines.id'), nullable=False, index=True)
    name = Column(Text, nullable=False, default='')
    position = Column(Integer, nullable=False, default=0)
