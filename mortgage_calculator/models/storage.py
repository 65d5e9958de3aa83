"""
Storage Entry Model

This module defines the key/value table that backs saved property persistence.
The whole saved-property collection lives under a single key as a JSON array,
so the table normally holds exactly one row.
"""

from sqlalchemy import Column, String, Text, DateTime
from datetime import datetime

from mortgage_calculator.models import Base


class StorageEntry(Base):
    """
    A single keyed entry of local application storage.

    Attributes:
        key: Storage key (primary key)
        value: Serialized value, JSON text for the saved property collection
        updated_at: When the entry was last written
    """
    __tablename__ = "storage_entries"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
