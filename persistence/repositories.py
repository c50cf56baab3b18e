from __future__ import annotations

import asyncio
from typing import Any, Protocol

from .document_store import BlobDocumentStore, DocumentRead
from .interfaces import BlobStore


class AsyncDocumentRepository(Protocol):
    async def read_document(self) -> DocumentRead: ...
    async def write_document(self, doc: dict[str, Any]) -> None: ...


class AsyncBlobDocumentRepository(AsyncDocumentRepository):
    """
    Async wrapper around the blob-backed document store.
    Uses asyncio.to_thread to avoid blocking the event loop on blob I/O.
    """

    def __init__(self, store: BlobStore, key: str) -> None:
        self._doc_store = BlobDocumentStore(store, key)

    async def read_document(self) -> DocumentRead:
        return await asyncio.to_thread(self._doc_store.load)

    async def write_document(self, doc: dict[str, Any]) -> None:
        await asyncio.to_thread(self._doc_store.save, doc)
