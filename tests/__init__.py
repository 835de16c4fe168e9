"""
Resource Proxy Test Suite.

This package contains:
- unit/: Unit tests (allocator, types, store, CLI, config; no network)
- integration/: Synchronizer and HTTP API against a simulated peer
"""
