"""
Schema synchronizer.

Orchestrates every operation that touches a collection schema: creation,
property addition, property and collection renames, and config reads. Renames
are mirrored on the peer first; the local record only changes once the peer
has acknowledged, so a failed peer call leaves nothing to roll back.

Invariants:
    - Local writes that need peer coordination happen strictly after the peer ack
    - Mutations of one collection are serialized by a per-collection lock
    - Created collection names are <requested_id>_<epoch millis>
    - Orders of added properties are appended (max + 1), gaps are never reused

How to change safely:
    - Keep peer calls ahead of local writes in every rename path
    - Acquire multiple collection locks in sorted order only
    - Retries belong to the caller; do not add retry loops here
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Mapping
from contextlib import AsyncExitStack
from typing import Any

from ..errors import (
    AlreadyExistsError,
    ContractViolationError,
    FolderConflictError,
    NotFoundError,
    StorageError,
)
from ..schema import (
    DEFAULT_COLLECTION_TYPE,
    CollectionIndex,
    CollectionSchema,
    Property,
    SchemaStore,
    allocate_orders,
    next_append_order,
    validate_collection_name,
)
from .peer_client import PeerClient

logger = logging.getLogger(__name__)


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class SchemaSynchronizer:
    """Keeps the local schema mirror and the peer store in step.

    Attributes:
        store: Local schema store
        peer: Client for the peer document store
        index: Collection index over ``store``

    Example:
        >>> sync = SchemaSynchronizer(SchemaStore("resources"), PeerClient("http://localhost:2403"))
        >>> name = await sync.create_collection("companies", "Collection", {
        ...     "name": {"type": "string"},
        ...     "city": {"type": "string"},
        ... })
        >>> await sync.add_property(name, "founded", {"type": "number"})
        >>> await sync.rename_properties(name, {"city": "town"})
    """

    def __init__(
        self,
        store: SchemaStore,
        peer: PeerClient,
        clock: Callable[[], int] | None = None,
    ) -> None:
        """Initialize the synchronizer.

        Args:
            store: Local schema store
            peer: Peer document store client
            clock: Returns epoch milliseconds; used for collection name suffixes
        """
        self.store = store
        self.peer = peer
        self.index = CollectionIndex(store)
        self._clock = clock or _epoch_millis
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock(self, name: str) -> asyncio.Lock:
        lock = self._locks.get(name)
        if lock is None:
            lock = self._locks[name] = asyncio.Lock()
        return lock

    # -------------------------------------------------------------------------
    # Creation and property addition
    # -------------------------------------------------------------------------

    async def create_collection(
        self,
        requested_id: str,
        collection_type: str | None = None,
        properties: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> str:
        """Create a collection and persist its initial schema.

        Args:
            requested_id: Base name chosen by the caller
            collection_type: Resource type, defaults to "Collection"
            properties: Property name -> partial property; ``order`` optional

        Returns:
            The derived collection name

        Raises:
            InvalidNameError: If ``requested_id`` is not a valid name
            ContractViolationError: If a property is malformed or orders collide
            FolderConflictError: If the derived name already exists
        """
        validate_collection_name(requested_id)
        name = f"{requested_id}_{self._clock()}"

        # Validate before allocating storage so a bad request leaves no folder behind
        ordered = allocate_orders(properties or {})
        schema = CollectionSchema(
            type=collection_type or DEFAULT_COLLECTION_TYPE,
            properties={key: Property.from_dict(key, value) for key, value in ordered.items()},
        )

        async with self._lock(name):
            try:
                self.store.create(name)
            except AlreadyExistsError as e:
                raise FolderConflictError(
                    "The folder could not be created because the unique identifier "
                    "conflicted with the existing folders",
                    resource_id=name,
                ) from e
            try:
                self.store.write(name, schema)
            except StorageError:
                self.store.discard(name)
                raise

        logger.info(f"Created collection {name} with {len(schema.properties)} properties")
        return name

    async def add_property(
        self,
        collection: str,
        property_name: str,
        partial: Mapping[str, Any],
    ) -> Property:
        """Append one property to a collection.

        The new property's order is one past the current maximum, or 0 if
        the collection has no properties. Any ``order`` in ``partial`` is
        ignored.

        Returns:
            The stored property
        """
        added = await self.add_properties(collection, {property_name: partial})
        return added[0]

    async def add_properties(
        self,
        collection: str,
        properties: Mapping[str, Mapping[str, Any]],
    ) -> list[Property]:
        """Append several properties, in iteration order, with successive orders.

        Adding a name that already exists replaces that property and moves it
        to the end.

        Raises:
            NotFoundError: If the collection does not exist
            ContractViolationError: If ``properties`` is empty or malformed
        """
        if not properties:
            raise ContractViolationError("At least one property is required")

        async with self._lock(collection):
            schema = self.store.read(collection)
            added: list[Property] = []
            for name, partial in properties.items():
                if not isinstance(partial, Mapping):
                    raise ContractViolationError(f"Property '{name}' must be an object")
                order = next_append_order(prop.order for prop in schema.properties.values())
                prop = Property.from_dict(name, {**partial, "order": order})
                schema.properties.pop(name, None)
                schema.properties[name] = prop
                added.append(prop)
            self.store.write(collection, schema)

        logger.info(
            f"Added {', '.join(p.name for p in added)} to {collection} "
            f"(orders {', '.join(str(p.order) for p in added)})"
        )
        return added

    # -------------------------------------------------------------------------
    # Renames (peer first)
    # -------------------------------------------------------------------------

    async def rename_properties(self, collection: str, rename_map: Mapping[str, str]) -> Any:
        """Rename properties on the peer, then in the local schema.

        Each renamed property keeps its type, label, required flag and order;
        its name and id become the new name.

        Returns:
            The peer's acknowledgment payload

        Raises:
            NotFoundError: If the collection or a source property does not exist
            AlreadyExistsError: If a target name is taken by a property not being renamed
            ContractViolationError: If ``rename_map`` is empty or malformed
            RemoteCallError: If the peer fails; the local schema is left untouched
        """
        if not rename_map:
            raise ContractViolationError("At least one property rename is required")

        async with self._lock(collection):
            schema = self.store.read(collection)
            self._check_property_renames(collection, schema, rename_map)

            ack = await self.peer.rename_properties(collection, dict(rename_map))

            renamed = {
                new_name: schema.properties[old_name].renamed(new_name)
                for old_name, new_name in rename_map.items()
            }
            for old_name in rename_map:
                del schema.properties[old_name]
            schema.properties.update(renamed)
            self.store.write(collection, schema)

        logger.info(f"Renamed properties of {collection}: {dict(rename_map)}")
        return ack

    @staticmethod
    def _check_property_renames(
        collection: str,
        schema: CollectionSchema,
        rename_map: Mapping[str, str],
    ) -> None:
        targets = list(rename_map.values())
        if len(set(targets)) != len(targets):
            raise ContractViolationError("Two properties cannot be renamed to the same name")

        for old_name, new_name in rename_map.items():
            if not isinstance(new_name, str) or not new_name:
                raise ContractViolationError(f"Invalid new name for property '{old_name}'")
            if old_name not in schema.properties:
                raise NotFoundError(
                    f"Property '{old_name}' not found in collection '{collection}'",
                    resource_type="property",
                    resource_id=old_name,
                )
            if new_name in schema.properties and new_name not in rename_map:
                raise AlreadyExistsError(
                    f"Property '{new_name}' already exists in collection '{collection}'",
                    resource_id=new_name,
                )

    async def rename_collections(self, rename_map: Mapping[str, str]) -> dict[str, Any]:
        """Rename collections on the peer, then move their local records.

        Pairs are processed in order; a failure stops the loop, leaving
        earlier pairs renamed.

        Returns:
            Old collection name -> peer acknowledgment payload

        Raises:
            NotFoundError: If a source collection does not exist
            AlreadyExistsError: If a target collection already exists
            RemoteCallError: If the peer fails; the pair's local record stays put
        """
        if not rename_map:
            raise ContractViolationError("At least one collection rename is required")

        results: dict[str, Any] = {}
        for old_name, new_name in rename_map.items():
            validate_collection_name(new_name)
            async with AsyncExitStack() as stack:
                for name in sorted({old_name, new_name}):
                    await stack.enter_async_context(self._lock(name))

                schema = self.store.read(old_name)
                if self.store.exists(new_name):
                    raise AlreadyExistsError(
                        f"Collection '{new_name}' already exists", resource_id=new_name
                    )

                ack = await self.peer.rename_resource(old_name, schema.to_dict(collection_id=new_name))
                self.store.rename(old_name, new_name)

            self._locks.pop(old_name, None)
            results[old_name] = ack
            logger.info(f"Renamed collection {old_name} to {new_name}")

        return results

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_collection_config(self, collection: str) -> dict[str, Any]:
        """Schema of one collection with ``id`` attached."""
        return self.store.read(collection).to_dict(collection_id=collection)

    async def list_collection_configs(self) -> list[dict[str, Any]]:
        """Schemas of all collections, each with ``id`` attached."""
        return [self.store.read(name).to_dict(collection_id=name) for name in self.index.names()]

    async def list_collections(self) -> list[str]:
        """Names of all collections."""
        return self.index.names()
