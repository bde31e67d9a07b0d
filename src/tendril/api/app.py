"""FastAPI application serving the tendril edit endpoint."""

import logging
import secrets
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from .. import __version__
from ..adapters.yaml_codec import format_metadata, format_tags
from ..core.model import DocumentSnapshot
from ..format.markup import encode_to_presentation

log = logging.getLogger(__name__)


class EditPayload(BaseModel):
    body: str = ""
    title: str
    old_title: str = ""
    tags: str = ""
    metadata: str = ""


def create_app(runtime: Any, token: str | None = None, enable_cors: bool = False) -> FastAPI:
    """
    Create FastAPI application with runtime injected.

    Args:
        runtime: Runtime instance with store and recent list
        token: Bearer token for authentication (None to disable auth)
        enable_cors: Enable CORS middleware

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Tendril API",
        description="Document persistence for the tendril editor",
        version=__version__,
        docs_url="/docs" if token is None else None,
        redoc_url="/redoc" if token is None else None,
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Security setup
    if token:
        security_scheme = HTTPBearer(auto_error=False)

        async def verify_token(
            credentials: HTTPAuthorizationCredentials | None = Security(security_scheme),  # noqa: B008
        ) -> None:
            """Verify bearer token."""
            if credentials is None or credentials.credentials != token:
                raise HTTPException(status_code=401, detail="Invalid or missing token")
    else:

        async def verify_token() -> None:
            """No-op when auth is disabled."""
            return None

    @app.get("/health")
    async def health(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "version": __version__}

    @app.post("/edit")
    async def edit(payload: EditPayload, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Persist a document snapshot, renaming when old_title differs."""
        snapshot = DocumentSnapshot.from_dict(payload.model_dump())
        try:
            doc = runtime.store.write(snapshot)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        runtime.recent.touch(doc.title, snapshot.old_title.strip())
        log.info("Stored %r", doc.title)
        return {"status": "ok", "title": doc.title}

    @app.get("/notes/{title}")
    async def get_note(title: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Get a stored document with its presentation form."""
        try:
            doc = runtime.store.read(title)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        if doc is None:
            raise HTTPException(status_code=404, detail=f"Document {title} not found")

        return {
            "title": doc.title,
            "body": doc.body,
            "tags": format_tags(doc.tags),
            "metadata": format_metadata(doc.metadata),
            "html": encode_to_presentation(doc.body),
        }

    @app.delete("/notes/{title}")
    async def delete_note(title: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Delete a stored document and drop it from the recent list."""
        try:
            if not runtime.store.exists(title):
                raise HTTPException(status_code=404, detail=f"Document {title} not found")
            runtime.store.delete(title)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        runtime.recent.discard(title.strip())
        log.info("Deleted %r", title)
        return {"status": "ok", "title": title.strip()}

    @app.get("/recent")
    async def recent(auth: None = Depends(verify_token)) -> list[str]:
        """Most recently saved titles, newest first."""
        return runtime.recent.titles()

    return app


def generate_token() -> str:
    """Generate a random bearer token."""
    return secrets.token_urlsafe(32)
