"""
FastAPI application factory for the vault backend.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vault_backend.config import Settings
from vault_backend.errors import VaultBackendError
from vault_backend.github import GitHubClient
from vault_backend.routes import router

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "X-DNS-Prefetch-Control": "off",
    "Cross-Origin-Opener-Policy": "same-origin",
}


async def handle_backend_error(request: Request, exc: VaultBackendError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": str(exc)},
        headers=SECURITY_HEADERS,
    )


def create_app(
    settings: Settings, github_client: Optional[GitHubClient] = None
) -> FastAPI:
    app = FastAPI(title="Vault Backend", version="0.1.0")
    app.state.settings = settings
    app.state.github_client = github_client or GitHubClient(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url] if settings.frontend_url else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    app.add_exception_handler(VaultBackendError, handle_backend_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.include_router(router)
    return app
