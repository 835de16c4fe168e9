"""
Schema module for the Resource Proxy.

This module provides the local mirror of collection schemas:
- Type definitions (Property, CollectionSchema)
- Property order allocation
- File-backed schema store and the collection index over it

Invariants:
    - Property ids equal their names
    - Property orders are unique non-negative integers within a collection
    - Each collection is one directory holding one config.json
"""

from .index import CollectionIndex
from .ordering import allocate_orders, next_append_order
from .store import CONFIG_FILE, SchemaStore
from .types import (
    DEFAULT_COLLECTION_TYPE,
    CollectionSchema,
    Property,
    validate_collection_name,
)

__all__ = [
    # Types
    "Property",
    "CollectionSchema",
    "DEFAULT_COLLECTION_TYPE",
    "validate_collection_name",
    # Ordering
    "allocate_orders",
    "next_append_order",
    # Storage
    "SchemaStore",
    "CollectionIndex",
    "CONFIG_FILE",
]
