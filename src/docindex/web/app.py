"""FastAPI application serving a loaded document index."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel

from docindex.config import AppConfig
from docindex.index.loader import ArtifactError, load_artifact
from docindex.index.writer import dump_artifact
from docindex.models import Snapshot

LOGGER = logging.getLogger(__name__)


class DocumentOut(BaseModel):
    id: int
    title: str
    link: str


class DocumentsResponse(BaseModel):
    documents: List[DocumentOut]
    count: int


class ArtifactInfo(BaseModel):
    path: str | None = None
    sha256: str | None = None
    size: int | None = None
    count: int
    stale: bool


def _snapshot(request: Request) -> Snapshot:
    return request.app.state.snapshot


def _artifact_info(snapshot: Snapshot) -> ArtifactInfo:
    metadata = snapshot.metadata
    return ArtifactInfo(
        path=str(metadata.path) if metadata else None,
        sha256=metadata.sha256 if metadata else None,
        size=metadata.size if metadata else None,
        count=len(snapshot.index),
        stale=snapshot.is_stale(),
    )


def create_app(snapshot: Snapshot, config: AppConfig | None = None) -> FastAPI:
    """Build the web app around an already loaded snapshot.

    The snapshot is injected once here and only replaced as a whole by
    ``POST /artifact/reload``.
    """
    config = config or AppConfig()

    app = FastAPI(title="DocIndex Web", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.state.snapshot = snapshot
    app.state.config = config

    @app.on_event("startup")
    async def startup_event() -> None:
        logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    @app.get("/documents", response_model=DocumentsResponse)
    async def list_documents(request: Request) -> DocumentsResponse:
        """List all records in artifact order."""
        index = _snapshot(request).index
        return DocumentsResponse(
            documents=[DocumentOut(**record.to_dict()) for record in index],
            count=len(index),
        )

    @app.get("/documents/{doc_id}", response_model=DocumentOut)
    async def get_document(doc_id: int, request: Request) -> DocumentOut:
        record = _snapshot(request).index.get(doc_id)
        if record is None:
            raise HTTPException(status_code=404, detail=f"Document with ID {doc_id} not found")
        return DocumentOut(**record.to_dict())

    @app.get("/lunr-data.js")
    async def lunr_data(request: Request) -> Response:
        """Serve the index in the script form the search widget expects."""
        content = dump_artifact(_snapshot(request).index, binding=request.app.state.config.binding)
        return Response(content=content, media_type="application/javascript")

    @app.get("/artifact", response_model=ArtifactInfo)
    async def artifact_info(request: Request) -> ArtifactInfo:
        return _artifact_info(_snapshot(request))

    @app.post("/artifact/reload", response_model=ArtifactInfo)
    async def reload_artifact(request: Request) -> ArtifactInfo:
        """Swap in a freshly loaded snapshot of the configured artifact file."""
        app_config: AppConfig = request.app.state.config
        path = app_config.resolve_artifact_path(Path.cwd())
        if path is None:
            raise HTTPException(status_code=409, detail="No artifact file configured")

        try:
            fresh = load_artifact(path, strict=app_config.strict)
        except ArtifactError as exc:
            LOGGER.error("Reload of %s failed: %s", path, exc)
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        request.app.state.snapshot = fresh
        LOGGER.info("Reloaded %d documents from %s", len(fresh.index), path)
        return _artifact_info(fresh)

    return app
