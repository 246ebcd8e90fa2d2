# ABOUTME: SQLAlchemy database models
# ABOUTME: Defines tables for durable properties and the versioned aggregate cache

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Property(Base):
    """Durable key/value property in either the user or the document scope."""
    __tablename__ = "properties"
    __table_args__ = (UniqueConstraint("scope", "key", name="uq_properties_scope_key"),)

    id = Column(Integer, primary_key=True)
    scope = Column(String(20), nullable=False, index=True)  # user | document
    key = Column(Text, nullable=False)
    value = Column(Text)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class CacheEntry(Base):
    """Serialized aggregate snapshot keyed by prefix, document, parameter and version."""
    __tablename__ = "cache_entries"

    id = Column(Integer, primary_key=True)
    cache_key = Column(Text, unique=True, nullable=False, index=True)
    doc_id = Column(String(64), index=True)
    payload_json = Column(Text, nullable=False)
    expires_at = Column(DateTime, nullable=False)
