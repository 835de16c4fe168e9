"""
File-backed schema store.

Each collection owns one directory under the resources root, holding a
single ``config.json`` record:

    resources/
    ├── people_1700000000000/
    │   └── config.json
    └── companies_1700000000123/
        └── config.json

Invariants:
    - A collection exists iff its directory exists
    - Only directories with a valid name and a config.json are listed
    - Records are overwritten whole, never patched field by field
    - Collection names are validated before touching the filesystem

Persistence contract:
    Writes go to a temp file in the collection directory followed by
    os.replace(). That narrows, but does not remove, the window in which a
    crash can lose a record; this is not a transactional log.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path

from ..errors import AlreadyExistsError, ContractViolationError, NotFoundError, StorageError
from .types import CollectionSchema, is_valid_collection_name, validate_collection_name

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.json"


class SchemaStore:
    """One schema record per collection, stored as a directory on disk.

    Thread safety:
        None. Callers serialize writers per collection (see SchemaSynchronizer).

    Example:
        >>> store = SchemaStore("/var/lib/proxy/resources")
        >>> store.create("companies_1700000000000")
        >>> store.write("companies_1700000000000", CollectionSchema())
        >>> store.list()
        ['companies_1700000000000']
    """

    def __init__(self, root: str | os.PathLike[str]) -> None:
        """Initialize the store, creating the resources root if missing.

        Args:
            root: Resources directory
        """
        self.root = Path(root)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create resources directory: {e}", path=str(self.root)) from e

    def _collection_dir(self, name: str) -> Path:
        return self.root / validate_collection_name(name)

    def _config_path(self, name: str) -> Path:
        return self._collection_dir(name) / CONFIG_FILE

    def exists(self, name: str) -> bool:
        """Whether a collection directory exists for ``name``."""
        return self._collection_dir(name).is_dir()

    def create(self, name: str) -> None:
        """Allocate storage for a new collection.

        Raises:
            AlreadyExistsError: If the collection directory already exists
            StorageError: If the directory cannot be created
        """
        path = self._collection_dir(name)
        try:
            path.mkdir()
        except FileExistsError as e:
            raise AlreadyExistsError(f"Collection '{name}' already exists", resource_id=name) from e
        except OSError as e:
            raise StorageError(f"Cannot create collection '{name}': {e}", path=str(path)) from e

    def read(self, name: str) -> CollectionSchema:
        """Load the schema record of a collection.

        Raises:
            NotFoundError: If the collection has no record
            StorageError: If the record cannot be read or decoded
        """
        path = self._config_path(name)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise NotFoundError(
                f"Collection '{name}' not found", resource_type="collection", resource_id=name
            ) from e
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot read config of '{name}': {e}", path=str(path)) from e

        if not isinstance(data, dict):
            raise StorageError(f"Config of '{name}' is not an object", path=str(path))
        try:
            return CollectionSchema.from_dict(data)
        except (ContractViolationError, AttributeError, TypeError) as e:
            raise StorageError(f"Malformed config of '{name}': {e}", path=str(path)) from e

    def write(self, name: str, schema: CollectionSchema) -> None:
        """Overwrite the full record of a collection.

        Raises:
            StorageError: On any filesystem failure
        """
        path = self._config_path(name)
        payload = json.dumps(schema.to_dict(), indent=4)
        try:
            fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".config-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StorageError(f"Cannot write config of '{name}': {e}", path=str(path)) from e

        logger.debug(f"Wrote config for {name} ({len(schema.properties)} properties)")

    def rename(self, old_name: str, new_name: str) -> None:
        """Move a collection's record to a new key.

        Raises:
            NotFoundError: If ``old_name`` does not exist
            AlreadyExistsError: If ``new_name`` already exists
            StorageError: On any other filesystem failure
        """
        source = self._collection_dir(old_name)
        target = self._collection_dir(new_name)
        if not source.is_dir():
            raise NotFoundError(
                f"Collection '{old_name}' not found", resource_type="collection", resource_id=old_name
            )
        if target.exists():
            raise AlreadyExistsError(
                f"Collection '{new_name}' already exists", resource_id=new_name
            )
        try:
            source.rename(target)
        except OSError as e:
            raise StorageError(
                f"Cannot rename collection '{old_name}' to '{new_name}': {e}", path=str(source)
            ) from e

    def discard(self, name: str) -> None:
        """Remove a collection directory left behind by a failed creation."""
        path = self._collection_dir(name)
        try:
            shutil.rmtree(path)
        except FileNotFoundError:
            return
        except OSError as e:
            logger.warning(f"Could not remove partial collection {name}: {e}")

    def list(self) -> list[str]:
        """Names of all readable collections (sorted for stable output).

        Directories with an invalid name or without a record are skipped.
        """
        try:
            return sorted(
                entry.name
                for entry in self.root.iterdir()
                if entry.is_dir()
                and is_valid_collection_name(entry.name)
                and (entry / CONFIG_FILE).is_file()
            )
        except OSError as e:
            raise StorageError(f"Cannot list collections: {e}", path=str(self.root)) from e
