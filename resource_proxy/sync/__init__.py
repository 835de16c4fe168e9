"""
Synchronization between the local schema mirror and the peer store.

- PeerClient: HTTP calls to the peer (renames and document relay)
- SchemaSynchronizer: Schema operations, peer-first for renames
"""

from .peer_client import PeerClient
from .synchronizer import SchemaSynchronizer

__all__ = ["PeerClient", "SchemaSynchronizer"]
