"""
Core type definitions for collection schemas.

This module defines the records persisted in each collection's config file:
- Property: One field definition within a collection, with a display order
- CollectionSchema: The type and ordered property set of one collection

Invariants:
    - Property.id always equals Property.name (the id is derived, never stored separately)
    - Property.order is a non-negative integer, unique within its collection
    - Collection names match [A-Za-z0-9][A-Za-z0-9_-]* so they map to a single directory
    - The persisted record never carries an "id"; it is attached in listing views only

Example:
    >>> schema = CollectionSchema.from_dict({
    ...     "type": "Collection",
    ...     "properties": {
    ...         "city": {"name": "city", "type": "string", "typeLabel": "string",
    ...                  "required": False, "id": "city", "order": 0},
    ...     },
    ... })
    >>> schema.properties["city"].to_dict()["id"]
    'city'
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from dataclasses import field as dataclass_field
from typing import Any

from ..errors import ContractViolationError, InvalidNameError

DEFAULT_COLLECTION_TYPE = "Collection"

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")


def validate_collection_name(name: str) -> str:
    """Return ``name`` unchanged if it is usable as a collection key.

    Raises:
        InvalidNameError: If the name is empty or could escape the resources root
    """
    if not is_valid_collection_name(name):
        raise InvalidNameError(str(name))
    return name


def is_valid_collection_name(name: Any) -> bool:
    """Whether ``name`` is usable as a collection key."""
    return isinstance(name, str) and _NAME_PATTERN.match(name) is not None


def is_valid_order(value: Any) -> bool:
    """Whether ``value`` is a usable order (non-negative int, bools excluded)."""
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


@dataclass(frozen=True)
class Property:
    """Definition of a single property within a collection.

    Attributes:
        name: Property name, also its key in the owning collection
        type: Storage type understood by the peer (e.g. "string", "number")
        type_label: Display label for the type, defaults to ``type``
        required: Whether documents must carry the property
        order: Display position among the collection's properties
    """

    name: str
    type: str
    type_label: str
    required: bool = False
    order: int = 0

    @property
    def id(self) -> str:
        return self.name

    def renamed(self, new_name: str) -> Property:
        """Copy of this property under ``new_name``; type, label, required and order are kept."""
        return replace(self, name=new_name)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk representation."""
        return {
            "name": self.name,
            "type": self.type,
            "typeLabel": self.type_label,
            "required": self.required,
            "id": self.id,
            "order": self.order,
        }

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> Property:
        """Build a property from its mapping entry.

        ``name`` is the mapping key; any ``name``/``id`` inside ``data`` is
        ignored so the two can never disagree.

        Raises:
            ContractViolationError: If ``type`` or ``order`` is missing or malformed
        """
        if not isinstance(data, dict):
            raise ContractViolationError(f"Property '{name}' must be an object")

        kind = data.get("type")
        if not isinstance(kind, str) or not kind:
            raise ContractViolationError(f"Property '{name}' has no type")

        order = data.get("order")
        if not is_valid_order(order):
            raise ContractViolationError(
                f"Property '{name}' has invalid order {order!r}",
                details={"property": name, "order": order},
            )

        required = data.get("required", False)
        if not isinstance(required, bool):
            raise ContractViolationError(
                f"Property '{name}' has non-boolean required {required!r}",
                details={"property": name, "required": required},
            )

        return cls(
            name=name,
            type=kind,
            type_label=data.get("typeLabel") or kind,
            required=required,
            order=order,
        )


@dataclass
class CollectionSchema:
    """Schema record of one collection.

    Attributes:
        type: Resource type reported to the peer, normally "Collection"
        properties: Property name -> Property, in insertion order
    """

    type: str = DEFAULT_COLLECTION_TYPE
    properties: dict[str, Property] = dataclass_field(default_factory=dict)

    def max_order(self) -> int | None:
        """Highest order in use, or None when there are no properties."""
        if not self.properties:
            return None
        return max(prop.order for prop in self.properties.values())

    def to_dict(self, collection_id: str | None = None) -> dict[str, Any]:
        """Convert to dictionary representation.

        Args:
            collection_id: When given, attached as ``id`` (listing/export views)
        """
        data: dict[str, Any] = {
            "type": self.type,
            "properties": {name: prop.to_dict() for name, prop in self.properties.items()},
        }
        if collection_id is not None:
            data["id"] = collection_id
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CollectionSchema:
        """Create from dictionary representation (an ``id`` key is ignored)."""
        raw_properties = data.get("properties") or {}
        return cls(
            type=data.get("type") or DEFAULT_COLLECTION_TYPE,
            properties={
                name: Property.from_dict(name, value) for name, value in raw_properties.items()
            },
        )
