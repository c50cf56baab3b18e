from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def create_app(settings=None, store_opener=None) -> FastAPI:
    """
    Build the app. Settings are read from the environment (and local.env) once
    here unless passed in; `store_opener` replaces the Netlify Blobs opener.
    """
    from endpoints.auth import CUSTOM_AUTH_HEADER
    from endpoints.db_endpoints import DocumentEndpoint, create_db_router
    from endpoints.errors import ALLOWED_METHODS
    from settings import get_settings

    if settings is None:
        load_dotenv("local.env")
        settings = get_settings()

    if not settings.auth_secret:
        logger.warning("PANERA_AUTH is not set: the document endpoint is open to everyone")

    app = FastAPI(title="panera-db")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_credentials=False,
        allow_methods=list(ALLOWED_METHODS),
        allow_headers=["Authorization", "Content-Type", CUSTOM_AUTH_HEADER],
    )

    endpoint = DocumentEndpoint(settings, store_opener=store_opener)
    app.include_router(create_db_router(endpoint, debug_log_requests=settings.debug_log_requests))

    return app


app = create_app()
