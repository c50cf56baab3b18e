from __future__ import annotations

from typing import Protocol


class BlobStoreError(RuntimeError):
    """The backing store failed to complete a read or write."""


class BlobStore(Protocol):
    """
    Minimal key-value blob interface: text values persisted under string keys.
    Reads may hand back undecoded bytes; callers decode.
    """

    def get(self, key: str) -> str | bytes | None:
        """Return the stored value (text or raw bytes), or None if the key does not exist."""
        ...

    def set(self, key: str, value: str) -> None:
        """Overwrite the value stored under key."""
        ...

    def close(self) -> None:
        """Release any resources held by the handle."""
        ...
