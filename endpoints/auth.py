from __future__ import annotations

import base64
import binascii
import hmac
from typing import Mapping

AUTH_HEADER = "authorization"
CUSTOM_AUTH_HEADER = "x-panera-auth"
BASIC_SCHEME = "basic "


def _header(headers: Mapping[str, str], name: str) -> str | None:
    # Starlette Headers are already case-insensitive; plain dicts are not.
    value = headers.get(name)
    if value is None:
        for k, v in headers.items():
            if k.lower() == name:
                value = v
                break
    return value


def extract_credential(headers: Mapping[str, str]) -> str | None:
    """
    Pull the candidate credential from request headers.

    Prefers `Authorization: Basic <token>`, then the raw `X-Panera-Auth` header.
    """
    auth = (_header(headers, AUTH_HEADER) or "").strip()
    if auth.lower().startswith(BASIC_SCHEME):
        token = auth[len(BASIC_SCHEME):].strip()
        if token:
            return token

    custom = (_header(headers, CUSTOM_AUTH_HEADER) or "").strip()
    return custom or None


def _same(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def credential_matches(candidate: str, expected: str) -> bool:
    """
    True if candidate is the expected secret, or the base64 encoding of it.
    Undecodable candidates simply do not match.
    """
    if _same(candidate, expected):
        return True
    try:
        decoded = base64.b64decode(candidate).decode("utf-8")
    except (binascii.Error, ValueError):
        return False
    return _same(decoded, expected)


def is_authorized(headers: Mapping[str, str], expected: str | None) -> bool:
    if not expected:
        return True
    try:
        candidate = extract_credential(headers)
        if not candidate:
            return False
        return credential_matches(candidate, expected)
    except Exception:
        return False
