"""
Resource Proxy - admin layer in front of a schema-based document store.

The proxy keeps one config file per collection on disk and mirrors schema
changes to the peer store that holds the documents:

    ┌─────────┐     ┌──────────────────┐     ┌────────────────┐
    │ Client  │────▶│  Resource Proxy  │────▶│  Peer store    │
    └─────────┘     │  (FastAPI)       │     │  (documents)   │
                    └────────┬─────────┘     └────────────────┘
                             │
                             ▼
                    resources/<collection>/config.json

Invariants:
    - Renames reach the peer before the local config changes
    - Property orders are unique within a collection
    - Collection names are <requested id>_<epoch millis>
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
