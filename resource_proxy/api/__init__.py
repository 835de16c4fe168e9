"""
HTTP API for the Resource Proxy.

- create_app: Application factory taking explicit Settings
- router: Collection and document routes
"""

from .app import create_app
from .routes import router

__all__ = ["create_app", "router"]
