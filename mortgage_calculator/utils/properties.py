"""
Saved property persistence for the Mortgage Calculator.

Users can keep up to MAX_PROPERTIES named calculation snapshots. The whole
collection is stored as one JSON array under a single storage key, in
insertion order. Storage is injected so the same store runs against an
in-memory dict in tests and a database-backed key/value table in production.
Writes hold a process-wide lock, so concurrent requests never lose each
other's changes.

Persistence failures never propagate: every operation logs the error and
degrades to None / False / [] so the UI simply shows that nothing happened.
"""

import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from sqlalchemy.orm import Session

from mortgage_calculator.config import MAX_PROPERTIES, STORAGE_KEY
from mortgage_calculator.logging_config import get_logger
from mortgage_calculator.models.storage import StorageEntry

logger = get_logger(__name__)


class NewProperty(BaseModel):
    """Fields supplied by the caller when saving a property."""
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    name: str
    home_price: float = Field(alias="homePrice")
    interest_rate: float = Field(alias="interestRate")
    down_payment_percent: float = Field(alias="downPaymentPercent")
    annual_tax_amount: float = Field(alias="annualTaxAmount")
    annual_insurance_amount: float = Field(alias="annualInsuranceAmount")
    monthly_payment: float = Field(alias="monthlyPayment")


class SavedProperty(NewProperty):
    """A stored property: the caller's fields plus a generated id and timestamp."""
    id: str
    created_at: datetime = Field(alias="createdAt")


# Fields a caller may change after saving; id and created_at are fixed
MUTABLE_FIELDS = set(NewProperty.model_fields)

_properties_adapter = TypeAdapter(List[SavedProperty])

# Serializes read-modify-write cycles across requests sharing the same storage
_write_lock = threading.Lock()


class StorageBackend(Protocol):
    """Minimal key/value storage the property store persists through."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...


class MemoryStorage:
    """Dict-backed storage, used by tests and as a throwaway store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.items = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value


class DatabaseStorage:
    """
    Storage backed by the storage_entries table.

    Each write commits immediately. On a failed commit the session is rolled
    back and the error re-raised for the store to handle.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_item(self, key: str) -> Optional[str]:
        entry = self.db.query(StorageEntry).filter(StorageEntry.key == key).first()
        return entry.value if entry else None

    def set_item(self, key: str, value: str) -> None:
        try:
            entry = self.db.query(StorageEntry).filter(StorageEntry.key == key).first()
            if entry:
                entry.value = value
            else:
                self.db.add(StorageEntry(key=key, value=value))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise


def generate_id() -> str:
    return uuid.uuid4().hex


class PropertyStore:
    """
    Bounded collection of saved properties.

    Args:
        storage: Backend implementing get_item / set_item
        key: Storage key the JSON array lives under
        max_properties: Hard cap on the number of saved properties
    """

    def __init__(self, storage: StorageBackend, key: str = STORAGE_KEY, max_properties: int = MAX_PROPERTIES):
        self.storage = storage
        self.key = key
        self.max_properties = max_properties

    def _load(self) -> List[SavedProperty]:
        stored = self.storage.get_item(self.key)
        if not stored:
            return []
        return _properties_adapter.validate_json(stored)

    def _persist(self, properties: List[SavedProperty]) -> None:
        payload = _properties_adapter.dump_json(properties, by_alias=True).decode("utf-8")
        self.storage.set_item(self.key, payload)

    def list(self) -> List[SavedProperty]:
        """Return all saved properties in insertion order, or [] if storage fails."""
        try:
            return self._load()
        except Exception as e:
            logger.error(f"Failed to load properties: {e}")
            return []

    def get(self, property_id: str) -> Optional[SavedProperty]:
        for prop in self.list():
            if prop.id == property_id:
                return prop
        return None

    def save(self, new_property: NewProperty) -> Optional[SavedProperty]:
        """
        Save a new property.

        Returns:
            The stored property with its generated id and timestamp, or None
            when the collection is full or storage fails. Nothing is written
            in either failure case.
        """
        try:
            with _write_lock:
                properties = self._load()

                if len(properties) >= self.max_properties:
                    logger.warning(f"Property limit reached ({self.max_properties}), not saving '{new_property.name}'")
                    return None

                saved = SavedProperty(
                    **new_property.model_dump(),
                    id=generate_id(),
                    created_at=datetime.now(timezone.utc),
                )
                self._persist(properties + [saved])
            logger.info(f"Property saved: {saved.name} (ID: {saved.id})")
            return saved
        except Exception as e:
            logger.error(f"Failed to save property: {e}")
            return None

    def update(self, property_id: str, updates: Mapping[str, Any]) -> bool:
        """
        Merge field updates into an existing property.

        Keys may be field names or their camelCase aliases. id and created_at
        cannot be changed and are ignored.

        Returns:
            False if the property does not exist or storage fails
        """
        try:
            with _write_lock:
                properties = self._load()
                index = next((i for i, p in enumerate(properties) if p.id == property_id), None)

                if index is None:
                    logger.warning(f"Property {property_id} not found for update")
                    return False

                merged = properties[index].model_dump()
                merged.update(_normalize_updates(updates))
                properties[index] = SavedProperty.model_validate(merged)

                self._persist(properties)
            logger.info(f"Property updated: {properties[index].name} (ID: {property_id})")
            return True
        except Exception as e:
            logger.error(f"Failed to update property: {e}")
            return False

    def delete(self, property_id: str) -> bool:
        """Remove a property. Deleting an unknown id is not an error."""
        try:
            with _write_lock:
                properties = self._load()
                remaining = [p for p in properties if p.id != property_id]
                self._persist(remaining)
            if len(remaining) < len(properties):
                logger.info(f"Property deleted: {property_id}")
            return True
        except Exception as e:
            logger.error(f"Failed to delete property: {e}")
            return False

    def can_save_more(self) -> bool:
        return len(self.list()) < self.max_properties


def _normalize_updates(updates: Mapping[str, Any]) -> dict:
    """Map alias keys to field names and drop anything that is not mutable."""
    aliases = {
        field.alias: name
        for name, field in NewProperty.model_fields.items()
        if field.alias
    }
    normalized = {}
    for key, value in updates.items():
        name = aliases.get(key, key)
        if name in MUTABLE_FIELDS:
            normalized[name] = value
    return normalized
