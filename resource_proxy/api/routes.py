"""
API routes for the Resource Proxy.

Collection management endpoints (under /resources) go through the
SchemaSynchronizer; document endpoints are relayed to the peer unchanged.

Routes are matched in registration order, so the fixed /resources paths
must stay ahead of the /{collection} patterns.

Every response uses the envelope ``{"apiVersion": 0.1, ...}``; errors carry
``{"error": {"code", "domain", "message", "reason"}}`` (see app.py).
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Path, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from ..config import API_VERSION
from ..schema import DEFAULT_COLLECTION_TYPE
from ..sync import PeerClient, SchemaSynchronizer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Resource Proxy"])


# --- Request Models ---


class CreateCollectionRequest(BaseModel):
    """Request to create a collection."""

    id: str = Field(..., description="Requested collection name; a timestamp suffix is appended")
    type: str = Field(default=DEFAULT_COLLECTION_TYPE, description="Resource type")
    properties: dict[str, dict[str, Any]] = Field(
        default_factory=dict, description="Property name -> property definition"
    )


class RenameCollectionsRequest(BaseModel):
    """Request to rename collections."""

    collections: dict[str, str] = Field(..., description="Old collection name -> new name")


class RenamePropertiesRequest(BaseModel):
    """Request to rename properties of one collection."""

    properties: dict[str, str] = Field(..., description="Old property name -> new name")


# --- Dependencies ---


def get_synchronizer(request: Request) -> SchemaSynchronizer:
    """Get synchronizer from app state."""
    return request.app.state.synchronizer


def get_peer(request: Request) -> PeerClient:
    """Get peer client from app state."""
    return request.app.state.peer


def envelope(**fields: Any) -> dict[str, Any]:
    return {"apiVersion": API_VERSION, **fields}


def relayed(status: int, body: Any) -> Response:
    """Response carrying the peer's status; statuses that forbid a body get none."""
    if status < 200 or status in (204, 304):
        return Response(status_code=status)
    return JSONResponse(status_code=status, content=envelope(data=body))


# --- Collection Routes ---


@router.post("/resources", status_code=201)
async def create_collection(
    request: CreateCollectionRequest,
    sync: SchemaSynchronizer = Depends(get_synchronizer),
):
    """
    Create a collection folder and its config file.

    Properties without an ``order`` get the lowest free positions.
    Returns the derived collection name.
    """
    name = await sync.create_collection(request.id, request.type, request.properties)
    return envelope(data={"collectionId": name}, status="Ok")


@router.put("/resources", status_code=201)
async def rename_collections(
    request: RenameCollectionsRequest,
    sync: SchemaSynchronizer = Depends(get_synchronizer),
):
    """
    Rename collections.

    Each rename is sent to the peer first; the local folder moves once the
    peer acknowledges. Returns each peer acknowledgment keyed by old name.
    """
    results = await sync.rename_collections(request.collections)
    return envelope(data=results)


@router.get("/resources")
async def list_collections(sync: SchemaSynchronizer = Depends(get_synchronizer)):
    """List the names of all collections."""
    return envelope(data=await sync.list_collections())


@router.get("/resources/config")
async def list_collection_configs(sync: SchemaSynchronizer = Depends(get_synchronizer)):
    """
    Get the config of every collection.

    Each config carries an ``id`` holding its collection name.
    """
    return envelope(data=await sync.list_collection_configs())


@router.put("/resources/{collection}")
async def add_properties(
    collection: str,
    properties: dict[str, dict[str, Any]] = Body(..., description="Property name -> definition"),
    sync: SchemaSynchronizer = Depends(get_synchronizer),
):
    """
    Add properties to a collection.

    Orders are computed here (appended after the current maximum); any
    ``order`` in the body is ignored. Several entries are added in body order.
    """
    await sync.add_properties(collection, properties)
    return envelope(status="Ok")


@router.get("/{collection}/config")
async def get_collection_config(
    collection: str,
    sync: SchemaSynchronizer = Depends(get_synchronizer),
):
    """Get the config of one collection."""
    return envelope(data=await sync.get_collection_config(collection))


@router.put("/{collection}/rename")
async def rename_properties(
    collection: str,
    request: RenamePropertiesRequest,
    sync: SchemaSynchronizer = Depends(get_synchronizer),
):
    """
    Rename properties of a collection.

    The peer renames the properties on stored documents first; the config
    file is updated only after it acknowledges.
    """
    await sync.rename_properties(collection, request.properties)
    return envelope(status="Ok")


# --- Document Relay Routes ---


@router.post("/{collection}")
async def create_document(
    collection: str,
    document: dict[str, Any] = Body(...),
    peer: PeerClient = Depends(get_peer),
):
    """Relay a new document to the peer; the peer's status code is passed through."""
    status, body = await peer.forward("POST", f"/{collection}", document)
    return relayed(status, body)


@router.put("/{collection}/{document_id}")
async def update_document(
    collection: str,
    document_id: str = Path(..., pattern="^[a-zA-Z0-9]+$"),
    document: dict[str, Any] = Body(...),
    peer: PeerClient = Depends(get_peer),
):
    """
    Relay a document update to the peer.

    New properties must already be registered on the collection.
    """
    status, body = await peer.forward("PUT", f"/{collection}/{document_id}", document)
    return relayed(status, body)
