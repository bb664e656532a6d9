"""
Dependency wiring for the FastAPI app.

The GitHub client is built once in create_app() and hung off app.state, so
every request of an app shares its settings and connection pool.
"""

from __future__ import annotations

from fastapi import Request

from vault_backend.github import GitHubClient


def get_github_client(request: Request) -> GitHubClient:
    return request.app.state.github_client
