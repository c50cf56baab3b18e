from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from typing import Any, Literal, Optional
from urllib.parse import quote

import httpx

from settings import Settings

from .interfaces import BlobStoreError

logger = logging.getLogger(__name__)

# Site-wide stores are namespaced with this prefix on the wire.
SITE_STORE_PREFIX = "site:"
SIGNED_URL_ACCEPT = "application/json;type=signed-url"

BlobsMode = Literal["edge", "api"]


@dataclass(frozen=True)
class BlobsContext:
    mode: BlobsMode
    base_url: str
    site_id: str
    token: str
    store_name: str


def _mask_token(token: str, *, head: int = 4, tail: int = 4) -> str:
    if not token:
        return ""
    if len(token) <= head + tail + 3:
        return "***"
    return f"{token[:head]}...{token[-tail:]}"


def decode_blobs_context(raw: str) -> dict[str, Any]:
    """
    Decode the platform-injected context: base64-encoded JSON of the shape
      { "edgeURL": "...", "token": "...", "siteID": "...", ... }

    Raises ValueError if the value cannot be decoded.
    """
    try:
        data = json.loads(base64.b64decode(raw).decode("utf-8"))
    except ValueError as e:
        raise ValueError("blobs context is not base64-encoded JSON") from e
    if not isinstance(data, dict):
        raise ValueError("blobs context must be a JSON object")
    return data


def resolve_blobs_context(settings: Settings) -> BlobsContext | None:
    """
    Pick the store connection to use.

    - Platform-injected context wins when present.
    - Otherwise explicit site id + token talk to the public API.
    - Otherwise None (unconfigured).

    Raises ValueError if the injected context is present but unusable.
    """
    if settings.blobs_context:
        data = decode_blobs_context(settings.blobs_context)
        edge_url = data.get("edgeURL")
        token = data.get("token")
        site_id = data.get("siteID") or settings.site_id
        if not (isinstance(edge_url, str) and edge_url and isinstance(token, str) and token and site_id):
            raise ValueError("blobs context is missing edgeURL, token or siteID")
        return BlobsContext(
            mode="edge",
            base_url=edge_url.rstrip("/"),
            site_id=str(site_id),
            token=token,
            store_name=settings.store_name,
        )

    if settings.site_id and settings.blobs_token:
        return BlobsContext(
            mode="api",
            base_url=settings.api_url.rstrip("/"),
            site_id=settings.site_id,
            token=settings.blobs_token,
            store_name=settings.store_name,
        )

    return None


class NetlifyBlobStore:
    """
    Netlify Blobs client for a single store.

    Notes
    - Edge mode talks straight to the blobs edge with the injected bearer token.
    - API mode asks the Netlify API for a signed URL, then reads/writes that URL.
    - A 404 on read means the key does not exist.
    - Any other failure (HTTP or transport) surfaces as BlobStoreError; no retries.
    """

    def __init__(
        self,
        context: BlobsContext,
        *,
        timeout: float = 15.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._ctx = context
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    @property
    def context(self) -> BlobsContext:
        return self._ctx

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "NetlifyBlobStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --------------- Public API ---------------
    def get(self, key: str) -> bytes | None:
        resp = self._send("GET", key)
        if resp is None:
            return None
        # Raw bytes; BlobDocumentStore decodes strictly.
        return resp.content

    def set(self, key: str, value: str) -> None:
        self._send("PUT", key, content=value.encode("utf-8"))

    # --------------- Internals ---------------
    def _blob_url(self, key: str) -> str:
        store = quote(f"{SITE_STORE_PREFIX}{self._ctx.store_name}", safe="")
        site = quote(self._ctx.site_id, safe="")
        blob_key = quote(key, safe="")
        if self._ctx.mode == "edge":
            return f"{self._ctx.base_url}/{site}/{store}/{blob_key}"
        return f"{self._ctx.base_url}/api/v1/blobs/{site}/{store}/{blob_key}"

    def _auth_headers(self) -> dict[str, str]:
        return {"authorization": f"Bearer {self._ctx.token}"}

    def _send(self, method: str, key: str, *, content: bytes | None = None) -> httpx.Response | None:
        url = self._blob_url(key)
        try:
            if self._ctx.mode == "edge":
                resp = self._client.request(method, url, headers=self._auth_headers(), content=content)
            else:
                headers = {**self._auth_headers(), "accept": SIGNED_URL_ACCEPT}
                signed = self._client.request(method, url, headers=headers)
                if signed.status_code == 404 and method == "GET":
                    return None
                self._check(signed, method, key)
                signed_url = self._signed_url(signed, method, key)
                resp = self._client.request(method, signed_url, content=content)
        except httpx.HTTPError as e:
            raise BlobStoreError(f"blobs {method} {key!r} failed: {e!r}") from e

        if resp.status_code == 404 and method == "GET":
            return None
        self._check(resp, method, key)
        return resp

    def _check(self, resp: httpx.Response, method: str, key: str) -> None:
        if 200 <= resp.status_code < 300:
            return
        logger.warning(
            "BLOBS %s %s: status=%s site=%s token=%s",
            method,
            key,
            resp.status_code,
            self._ctx.site_id,
            _mask_token(self._ctx.token),
        )
        raise BlobStoreError(f"blobs {method} {key!r} returned HTTP {resp.status_code}")

    def _signed_url(self, resp: httpx.Response, method: str, key: str) -> str:
        try:
            data = resp.json()
        except ValueError as e:
            raise BlobStoreError(f"blobs {method} {key!r}: signed URL response is not JSON") from e
        url = data.get("url") if isinstance(data, dict) else None
        if not isinstance(url, str) or not url:
            raise BlobStoreError(f"blobs {method} {key!r}: signed URL missing from response")
        return url


def open_blob_store(settings: Settings, *, client: Optional[httpx.Client] = None) -> NetlifyBlobStore | None:
    """
    Open a fresh store handle for one request, or None if no usable
    configuration exists. Failures while opening are logged and reported as None.
    """
    try:
        ctx = resolve_blobs_context(settings)
        if ctx is None:
            return None
        return NetlifyBlobStore(ctx, timeout=settings.blobs_timeout, client=client)
    except Exception as e:
        logger.warning("BLOBS OPEN: failed to open store %r: %r", settings.store_name, e)
        return None
