from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal

from json_store import InvalidJSON, dump_json_document, parse_json

from .interfaces import BlobStore

logger = logging.getLogger(__name__)

DocumentStatus = Literal["found", "missing", "corrupt"]


@dataclass(frozen=True)
class DocumentRead:
    """
    Outcome of reading the stored document.

    - found:   `document` holds the parsed JSON object
    - missing: nothing stored yet
    - corrupt: something is stored but it is not a JSON object
    """

    status: DocumentStatus
    document: dict[str, Any] | None = None

    @classmethod
    def found(cls, document: dict[str, Any]) -> "DocumentRead":
        return cls(status="found", document=document)

    @classmethod
    def missing(cls) -> "DocumentRead":
        return cls(status="missing")

    @classmethod
    def corrupt(cls) -> "DocumentRead":
        return cls(status="corrupt")


class BlobDocumentStore:
    """
    Stores a single JSON document under a fixed key of a BlobStore.

    - Reads never raise for bad data; see DocumentRead.
    - Writes replace the whole value; there is no merge or version check.
    - Store failures (BlobStoreError) propagate to the caller.
    """

    def __init__(self, store: BlobStore, key: str):
        self._store = store
        self._key = key

    def load(self) -> DocumentRead:
        raw = self._store.get(self._key)
        if not raw:
            return DocumentRead.missing()
        try:
            doc = parse_json(raw)
        except InvalidJSON:
            logger.warning("DOCUMENT LOAD: stored value under %r is not valid JSON", self._key)
            return DocumentRead.corrupt()
        if not isinstance(doc, dict):
            logger.warning("DOCUMENT LOAD: stored value under %r is %s, not an object", self._key, type(doc).__name__)
            return DocumentRead.corrupt()
        return DocumentRead.found(doc)

    def save(self, doc: dict[str, Any]) -> None:
        self._store.set(self._key, dump_json_document(doc))
