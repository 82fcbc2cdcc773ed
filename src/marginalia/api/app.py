"""FastAPI application for the marginalia local JSON API."""

import secrets
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Query, Response, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from .. import __version__
from ..markdown.renderer import NO_CURSOR, parse_markdown, wiki_link_base
from ..markdown.tags import extract_tags_from_title
from ..markdown.wikilinks import extract_entry_ids_from_content


class RenderRequest(BaseModel):
    text: str
    cursor: int = NO_CURSOR
    titles: dict[str, str] | None = None
    wiki: str | None = None


class TitleRequest(BaseModel):
    title: str


class CreateRequest(BaseModel):
    title: str
    content: str = ""


class UpdateRequest(BaseModel):
    title: str | None = None
    content: str | None = None


def create_app(runtime: Any, token: str | None = None, enable_cors: bool = False) -> FastAPI:
    """
    Create FastAPI application with runtime injected.

    Args:
        runtime: Runtime instance with store, index and renderer
        token: Bearer token for authentication (None to disable auth)
        enable_cors: Enable CORS middleware

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Marginalia API",
        description="Local JSON API for a marginalia entry store",
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

    if token:
        security_scheme = HTTPBearer(auto_error=False)

        async def verify_token(
            credentials: HTTPAuthorizationCredentials | None = Security(security_scheme),  # noqa: B008
        ) -> None:
            """Verify bearer token."""
            if credentials is None or not secrets.compare_digest(credentials.credentials, token):
                raise HTTPException(status_code=401, detail="Invalid or missing token")
    else:

        async def verify_token() -> None:
            """No-op when auth is disabled."""
            return None

    def load_entry(entry_id: str) -> Any:
        entry = runtime.store.get(entry_id)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"Entry {entry_id} not found")
        return entry

    @app.get("/health")
    async def health(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "version": __version__}

    def entry_json(entry: Any) -> dict[str, Any]:
        return {
            "id": entry.id,
            "title": entry.title,
            "tags": entry.tags,
            "content": entry.content,
            "links": sorted(extract_entry_ids_from_content(entry.content)),
        }

    @app.get("/entries")
    async def list_entries(
        q: str = Query("", description="Case-insensitive title substring"),
        auth: None = Depends(verify_token),
    ) -> list[dict[str, Any]]:
        """Entries newest first, optionally filtered by title."""
        return [
            {
                "id": e.id,
                "title": e.title,
                "tags": e.tags,
                "created": e.created.isoformat() if e.created else None,
            }
            for e in runtime.store.search(q)
        ]

    @app.get("/entries/{entry_id}")
    async def get_entry(entry_id: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Entry title, tags and raw body."""
        return entry_json(load_entry(entry_id))

    @app.post("/entries", status_code=201)
    async def create_entry(req: CreateRequest, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Create an entry; tags are lifted from the title."""
        try:
            entry = runtime.store.create(req.title, req.content)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        return entry_json(entry)

    @app.put("/entries/{entry_id}")
    async def update_entry(
        entry_id: str, req: UpdateRequest, auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        """Replace an entry's title and/or text; a new title re-extracts tags."""
        try:
            entry = runtime.store.update(entry_id, title=req.title, content=req.content)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        if entry is None:
            raise HTTPException(status_code=404, detail=f"Entry {entry_id} not found")
        return entry_json(entry)

    @app.delete("/entries/{entry_id}", status_code=204)
    async def delete_entry(entry_id: str, auth: None = Depends(verify_token)) -> Response:
        load_entry(entry_id)
        runtime.store.delete(entry_id)
        return Response(status_code=204)

    @app.get("/entries/{entry_id}/html")
    async def entry_html(
        entry_id: str,
        cursor: int = Query(NO_CURSOR, description="Caret offset; -1 for none"),
        wiki: str | None = Query(None, description="Published wiki slug for link hrefs"),
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        """Rendered HTML for an entry."""
        entry = load_entry(entry_id)
        link_base = wiki_link_base(wiki) if wiki else None
        html = runtime.renderer.render_html(entry, cursor, link_base)
        return {"id": entry.id, "title": entry.title, "html": html}

    @app.get("/entries/{entry_id}/backlinks")
    async def backlinks(entry_id: str, auth: None = Depends(verify_token)) -> list[dict[str, Any]]:
        """Entries whose text links to ``entry_id``."""
        sources = runtime.index.backlinks(entry_id)
        titles = runtime.index.titles(sources)
        return [{"id": src, "title": titles.get(src, "")} for src in sources]

    @app.get("/tags/{tag}")
    async def tagged(tag: str, auth: None = Depends(verify_token)) -> list[str]:
        """Entry ids carrying ``tag``."""
        return runtime.index.entries_with_tag(tag)

    @app.post("/render")
    async def render(req: RenderRequest, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Render arbitrary text; titles default to a store lookup."""
        link_base = wiki_link_base(req.wiki) if req.wiki else runtime.renderer.link_base
        if req.titles is None:
            result = runtime.renderer.render_text(req.text, req.cursor, link_base)
        else:
            result = parse_markdown(req.text, req.cursor, req.titles, link_base)
        return {
            "tokens": [t.to_dict() for t in result.tokens],
            "html": result.html,
        }

    @app.post("/tags")
    async def tags(req: TitleRequest, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Split a title into its tags and cleaned text."""
        result = extract_tags_from_title(req.title)
        return {"tags": result.tags, "cleaned_title": result.cleaned_title}

    @app.get("/graph")
    async def graph(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Link graph from the index."""
        if not hasattr(runtime.index, "graph_data"):
            raise HTTPException(status_code=500, detail="Graph requires SQLiteIndex")
        return runtime.index.graph_data()

    return app


def generate_token() -> str:
    """Generate a random bearer token."""
    return secrets.token_urlsafe(32)
