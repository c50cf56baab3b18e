from __future__ import annotations

from .db_endpoints import DocumentEndpoint, create_db_router

__all__ = ["DocumentEndpoint", "create_db_router"]
