from __future__ import annotations

from typing import Any

ALLOWED_METHODS = ("GET", "POST", "PUT")


class DocumentEndpointError(Exception):
    """
    Base for every failure the document endpoint reports to callers.

    Each error knows its HTTP status, the `error` code placed in the JSON body,
    and any extra body fields / headers.
    """

    status_code = 500
    error = "internal_error"

    def __init__(self, error: str | None = None, *, headers: dict[str, str] | None = None, **fields: Any) -> None:
        if error is not None:
            self.error = error
        self.headers = dict(headers or {})
        self.fields = fields
        super().__init__(self.error)

    def to_body(self) -> dict[str, Any]:
        return {"ok": False, "error": self.error, **self.fields}


class AuthError(DocumentEndpointError):
    status_code = 401
    error = "unauthorized"


class ConfigError(DocumentEndpointError):
    status_code = 503
    error = "blobs_not_configured"

    def __init__(self) -> None:
        super().__init__(
            hint=(
                "Run inside Netlify with Blobs enabled, or set NETLIFY_SITE_ID "
                "and NETLIFY_BLOBS_TOKEN."
            )
        )


class ClientError(DocumentEndpointError):
    status_code = 400
    error = "bad_request"


class StoreFault(DocumentEndpointError):
    status_code = 503
    error = "blobs_unavailable"


class RoutingError(DocumentEndpointError):
    status_code = 405
    error = "method_not_allowed"

    def __init__(self) -> None:
        super().__init__(headers={"Allow": ", ".join(ALLOWED_METHODS)})
