"""
HTTP client for the peer document store.

The peer is the database process that actually holds documents. Renames
must be mirrored there before the local schema mirror changes, and document
writes are relayed to it unchanged.

Invariants:
    - Every call is bounded by the configured timeout
    - Rename calls raise RemoteCallError on transport failure or status >= 400
    - Relay calls never raise on peer status codes; the status is handed back
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..errors import RemoteCallError

logger = logging.getLogger(__name__)

RENAME_RESOURCE = "RENAME_RESOURCE"
RENAME_PROPERTIES = "RENAME_PROPERTIES"
RELAY = "RELAY"


def _decode(response: httpx.Response) -> Any:
    """Decode a peer response body: JSON when possible, text otherwise."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class PeerClient:
    """Async client for the peer document store.

    Example:
        >>> peer = PeerClient("http://localhost:2403", timeout=5.0)
        >>> ack = await peer.rename_properties("companies_1700000000000", {"city": "town"})
        >>> await peer.close()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        ssh_key: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Peer base URL, e.g. http://localhost:2403
            timeout: Per-request timeout in seconds
            ssh_key: Value of the dpd-ssh-key header on resource calls
            transport: Optional transport override (used by tests)
        """
        self.base_url = base_url
        self._ssh_key = ssh_key
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    async def _send(
        self,
        operation: str,
        method: str,
        path: str,
        payload: Any,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            return await self._client.request(method, path, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            logger.warning(f"Peer {operation} {method} {path} timed out")
            raise RemoteCallError(
                f"Peer did not respond to {operation} in time", operation=operation
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"Peer {operation} {method} {path} failed: {e}")
            raise RemoteCallError(
                f"Peer request {operation} failed: {e}", operation=operation
            ) from e

    async def _acknowledged(
        self,
        operation: str,
        method: str,
        path: str,
        payload: Any,
        headers: dict[str, str] | None = None,
    ) -> Any:
        response = await self._send(operation, method, path, payload, headers)
        body = _decode(response)
        if response.status_code >= 400:
            logger.warning(f"Peer rejected {operation} {path}: {response.status_code} {body!r}")
            raise RemoteCallError(
                f"Peer rejected {operation} with status {response.status_code}",
                operation=operation,
                peer_status=response.status_code,
                peer_body=body,
            )
        logger.debug(f"Peer acknowledged {operation} {path}: {body!r}")
        return body

    async def rename_resource(self, old_name: str, schema: dict[str, Any]) -> Any:
        """Ask the peer to rename a collection resource.

        Args:
            old_name: Current collection name
            schema: Collection config carrying the new name as ``id``

        Returns:
            The peer's acknowledgment payload

        Raises:
            RemoteCallError: If the peer is unreachable, times out or rejects the call
        """
        headers = {"dpd-ssh-key": self._ssh_key} if self._ssh_key else None
        return await self._acknowledged(
            RENAME_RESOURCE, "PUT", f"/__resources/{old_name}", schema, headers
        )

    async def rename_properties(self, collection: str, rename_map: dict[str, str]) -> Any:
        """Ask the peer to rename properties on every document of a collection.

        Args:
            collection: Collection name
            rename_map: Old property name -> new property name

        Returns:
            The peer's acknowledgment payload

        Raises:
            RemoteCallError: If the peer is unreachable, times out or rejects the call
        """
        return await self._acknowledged(
            RENAME_PROPERTIES, "POST", f"/{collection}/rename", {"properties": rename_map}
        )

    async def forward(self, method: str, path: str, payload: Any = None) -> tuple[int, Any]:
        """Relay a document request to the peer unchanged.

        Returns:
            Tuple of (peer status code, decoded peer body)

        Raises:
            RemoteCallError: Only when the peer cannot be reached
        """
        response = await self._send(RELAY, method, path, payload)
        return response.status_code, _decode(response)
