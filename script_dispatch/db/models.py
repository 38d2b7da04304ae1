"""SQLAlchemy ORM models."""
import uuid

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from script_dispatch.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


class DispatchJournalEntry(Base):
    __tablename__ = "dispatch_journal"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    operation_id = Column(Integer, nullable=False, index=True)
    script_guid = Column(String(64), nullable=False)
    script_name = Column(String(255), nullable=False, index=True)
    script_version = Column(String(50))
    collection_id = Column(String(50))
    resource_ids = Column(Text)
    parameter_hash = Column(String(64))
    operator = Column(String(100))
    dispatched_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
