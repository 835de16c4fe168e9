"""
Operational tools for the Resource Proxy.

- collections_cli: Inspect and export the local schema mirror
"""
