"""
Collection directory index.

Thin view over SchemaStore.list(). Nothing is cached: every call reflects
the store as it is at call time.
"""

from __future__ import annotations

from .store import SchemaStore


class CollectionIndex:
    """Lists existing collections by scanning the store."""

    def __init__(self, store: SchemaStore) -> None:
        self._store = store

    def names(self) -> list[str]:
        """Names of all collections currently in the store."""
        return self._store.list()

    def __contains__(self, name: str) -> bool:
        return self._store.exists(name)

    def __len__(self) -> int:
        return len(self._store.list())
