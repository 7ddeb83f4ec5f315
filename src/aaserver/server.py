"""HTTP API: bearer-token authenticated task submission and status snapshot."""

from __future__ import annotations

import secrets
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from aaserver import log
from aaserver.config import DEFAULT_HOSTNAME, SERVER_NAME
from aaserver.processor import QueueProcessor
from aaserver.store import TaskStore

# The only method/path pairs served; the middleware answers 404 for the rest.
_ROUTES = {("GET", "/"), ("POST", "/")}


class TaskSubmission(BaseModel):
    id: str
    prompt: str
    dependencies: list[str] | None = None


def host_matches(host_header: str | None, hostname: str) -> bool:
    """``True`` when the Host header names *hostname*, ignoring any ``:port``."""
    if not host_header:
        return False
    return host_header.split(":")[0] == hostname


def token_matches(auth_header: str | None, token: str) -> bool:
    if not auth_header:
        return False
    return secrets.compare_digest(auth_header.encode("utf-8"), f"Bearer {token}".encode("utf-8"))


def create_app(
    store: TaskStore,
    processor: QueueProcessor,
    *,
    bearer_token: str,
    hostname: str = DEFAULT_HOSTNAME,
) -> FastAPI:
    """Build the FastAPI app around an already-loaded store and its processor."""

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        # Pick up tasks queued before the last shutdown or crash.
        processor.wake()
        yield
        if processor.is_processing:
            log.warn("Shutting down while a task is still running")

    app = FastAPI(
        title=SERVER_NAME,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.store = store
    app.state.processor = processor

    @app.middleware("http")
    async def authenticate(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if not host_matches(request.headers.get("host"), hostname):
            return PlainTextResponse("Invalid hostname", status_code=400)
        if not token_matches(request.headers.get("authorization"), bearer_token):
            return PlainTextResponse("Unauthorized", status_code=401)
        if (request.method, request.url.path) not in _ROUTES:
            return PlainTextResponse("Not found", status_code=404)
        return await call_next(request)

    @app.get("/")
    def status() -> JSONResponse:
        return JSONResponse({"serverName": SERVER_NAME, "tasks": store.snapshot()})

    @app.post("/")
    def submit(submission: TaskSubmission) -> PlainTextResponse:
        task = store.submit(submission.id, submission.prompt, submission.dependencies or [])
        log.task(task.id, "Queued")
        processor.wake()
        return PlainTextResponse("Task accepted", status_code=202)

    return app
