# File: glamping/models/kv_store.py
from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from glamping.db.database import Base


class StoredBlob(Base):
    """One JSON document per key; the local mirror of the remote basket."""

    __tablename__ = "kv_store"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(100), nullable=False, unique=True, index=True)
    value = Column(Text, nullable=False)  # JSON string
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
