from __future__ import annotations

from .document_store import BlobDocumentStore, DocumentRead
from .interfaces import BlobStore, BlobStoreError
from .netlify_blobs import BlobsContext, NetlifyBlobStore, open_blob_store, resolve_blobs_context
from .repositories import AsyncBlobDocumentRepository, AsyncDocumentRepository

__all__ = [
    "BlobStore",
    "BlobStoreError",
    "BlobDocumentStore",
    "DocumentRead",
    "BlobsContext",
    "NetlifyBlobStore",
    "open_blob_store",
    "resolve_blobs_context",
    "AsyncDocumentRepository",
    "AsyncBlobDocumentRepository",
]
