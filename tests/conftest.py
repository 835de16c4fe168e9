"""
Shared fixtures for the Resource Proxy tests.

The peer document store is simulated with httpx.MockTransport, so no test
needs a network.
"""

import json
import tempfile
from typing import Any

import httpx
import pytest

from resource_proxy.schema import SchemaStore
from resource_proxy.sync import PeerClient, SchemaSynchronizer


class FakePeer:
    """In-process stand-in for the peer document store.

    Attributes:
        requests: Every request received, in order
        fail_status: When set, every request is answered with this status
        unreachable: When set, every request fails at the transport level
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.fail_status: int | None = None
        self.unreachable = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        if self.fail_status is not None:
            return httpx.Response(self.fail_status, json={"message": "peer failure"})

        body = json.loads(request.content) if request.content else None
        if request.url.path.endswith("/rename") or request.url.path.startswith("/__resources/"):
            return httpx.Response(200, json={"status": "renamed", "received": body})
        if request.method == "POST":
            return httpx.Response(200, json={"id": "a1b2c3", **(body or {})})
        return httpx.Response(200, json=body)

    def json_bodies(self) -> list[Any]:
        return [json.loads(r.content) for r in self.requests]

    def client(self) -> PeerClient:
        return PeerClient(
            "http://peer.test",
            timeout=1.0,
            ssh_key="secret-key",
            transport=httpx.MockTransport(self.handler),
        )


class StepClock:
    """Deterministic epoch-millis clock advancing by one per call."""

    def __init__(self, start: int = 1700000000000) -> None:
        self.now = start

    def __call__(self) -> int:
        value = self.now
        self.now += 1
        return value


@pytest.fixture
def resources_dir():
    """Create temporary resources directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def store(resources_dir):
    """Schema store over the temporary directory."""
    return SchemaStore(resources_dir)


@pytest.fixture
def fake_peer():
    """Simulated peer document store."""
    return FakePeer()


@pytest.fixture
def clock():
    """Deterministic clock for collection name suffixes."""
    return StepClock()


@pytest.fixture
def synchronizer(store, fake_peer, clock):
    """Synchronizer wired to the temp store and the fake peer."""
    return SchemaSynchronizer(store, fake_peer.client(), clock=clock)
