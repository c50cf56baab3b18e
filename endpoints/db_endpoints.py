from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Mapping, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from json_store import InvalidJSON, parse_json
from persistence.interfaces import BlobStore, BlobStoreError
from persistence.netlify_blobs import open_blob_store
from persistence.repositories import AsyncBlobDocumentRepository, AsyncDocumentRepository
from settings import Settings

from .auth import is_authorized
from .errors import (
    AuthError,
    ClientError,
    ConfigError,
    DocumentEndpointError,
    RoutingError,
    StoreFault,
)

logger = logging.getLogger(__name__)

DB_PATHS = ("/api/db", "/.netlify/functions/db")
WRITE_METHODS = ("POST", "PUT")

BASE_HEADERS = {"Cache-Control": "no-store"}

StoreOpener = Callable[[], Optional[BlobStore]]


class DbEnvelope(BaseModel):
    ok: bool
    db: dict[str, Any] | None = None


@dataclass(frozen=True)
class EndpointResponse:
    status_code: int
    body: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)


def unwrap_document(payload: Any) -> Any:
    """`{"db": {...}}` and the bare object are both accepted."""
    if isinstance(payload, dict) and "db" in payload:
        return payload["db"]
    return payload


class DocumentEndpoint:
    """
    Reads and overwrites the single stored document.

    Per request: authenticate -> open a fresh store handle -> dispatch on
    method -> (de)serialize -> respond. Every failure is turned into a JSON
    error response here; nothing escapes to the host.
    """

    def __init__(self, settings: Settings, store_opener: StoreOpener | None = None) -> None:
        self._settings = settings
        self._open_store: StoreOpener = store_opener or partial(open_blob_store, settings)

    async def handle(self, method: str, headers: Mapping[str, str], body: bytes | None) -> EndpointResponse:
        try:
            return await self._dispatch(method.upper(), headers, body)
        except DocumentEndpointError as e:
            return EndpointResponse(e.status_code, e.to_body(), e.headers)
        except Exception:
            logger.exception("DB %s: unexpected failure", method)
            return EndpointResponse(500, DocumentEndpointError().to_body())

    def _acquire_store(self) -> BlobStore | None:
        try:
            return self._open_store()
        except Exception as e:
            logger.warning("DB: store opener failed: %r", e)
            return None

    async def _dispatch(self, method: str, headers: Mapping[str, str], body: bytes | None) -> EndpointResponse:
        if not is_authorized(headers, self._settings.auth_secret):
            raise AuthError()

        store = self._acquire_store()
        if store is None:
            raise ConfigError()

        try:
            repo = AsyncBlobDocumentRepository(store, self._settings.document_key)
            if method == "GET":
                return await self._read(repo)
            if method in WRITE_METHODS:
                return await self._write(repo, body)
            raise RoutingError()
        finally:
            store.close()

    async def _read(self, repo: AsyncDocumentRepository) -> EndpointResponse:
        try:
            result = await repo.read_document()
        except BlobStoreError as e:
            logger.warning("DB GET: store read failed: %r", e)
            raise StoreFault() from e
        # Missing and corrupt both read back as null.
        return EndpointResponse(200, DbEnvelope(ok=True, db=result.document).model_dump())

    async def _write(self, repo: AsyncDocumentRepository, body: bytes | None) -> EndpointResponse:
        if not body:
            raise ClientError("missing_body")
        try:
            payload = parse_json(body)
        except InvalidJSON as e:
            raise ClientError("invalid_json") from e

        doc = unwrap_document(payload)
        if not isinstance(doc, dict):
            raise ClientError("invalid_db")

        try:
            await repo.write_document(doc)
        except BlobStoreError as e:
            logger.warning("DB WRITE: store write failed: %r", e)
            raise StoreFault() from e
        return EndpointResponse(200, DbEnvelope(ok=True).model_dump(exclude_unset=True))


def json_response(resp: EndpointResponse) -> JSONResponse:
    return JSONResponse(resp.body, status_code=resp.status_code, headers={**BASE_HEADERS, **resp.headers})


def create_db_router(endpoint: DocumentEndpoint, *, debug_log_requests: bool = False) -> APIRouter:
    router = APIRouter(tags=["db"])

    async def db(request: Request) -> JSONResponse:
        body = await request.body()
        resp = await endpoint.handle(request.method, request.headers, body)
        if debug_log_requests:
            logger.info(
                "DB REQUEST: method=%s path=%s body_len=%s status=%s error=%s",
                request.method,
                request.url.path,
                len(body),
                resp.status_code,
                resp.body.get("error"),
            )
        return json_response(resp)

    for path in DB_PATHS:
        # No method filter: unknown verbs must reach the handler for the 405 body.
        router.add_route(path, db, include_in_schema=False)

    return router
