"""
HTTP routes for the vault backend API.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends, Query

from vault_backend import services
from vault_backend.dependencies import get_github_client
from vault_backend.errors import InvalidRequestError
from vault_backend.github import GitHubClient
from vault_backend.schemas import (
    AccessTokenResponse,
    AddFileResponse,
    ErrorResponse,
    FilesResponse,
    MessageResponse,
    VaultRepositoryResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

AUTH_CODE_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def is_valid_auth_code(code: Optional[str]) -> bool:
    return isinstance(code, str) and bool(AUTH_CODE_PATTERN.fullmatch(code))


@router.get(
    "/getAccessToken",
    response_model=AccessTokenResponse,
    responses=ERROR_RESPONSES,
)
def get_access_token(
    code: Optional[str] = Query(None),
    client: GitHubClient = Depends(get_github_client),
):
    if not is_valid_auth_code(code):
        raise InvalidRequestError("Invalid authorization code")
    return AccessTokenResponse(token=client.exchange_code(code))


@router.get(
    "/getVaultRepository",
    response_model=VaultRepositoryResponse,
    responses={**ERROR_RESPONSES, 404: {"model": MessageResponse}},
)
def get_vault_repository(
    token: Optional[str] = Query(None),
    create: bool = Query(True, description="Create the vault when it is missing"),
    client: GitHubClient = Depends(get_github_client),
):
    if not token:
        raise InvalidRequestError("Token is required.")

    lookup = services.resolve_vault(client, token, create=create)
    message = (
        "Repository created successfully"
        if lookup.created
        else "Repository already exists"
    )
    return VaultRepositoryResponse(message=message, repo=lookup.repo)


@router.get(
    "/getAllFiles", response_model=FilesResponse, responses=ERROR_RESPONSES
)
def get_all_files(
    owner: Optional[str] = Query(None),
    repo: Optional[str] = Query(None),
    token: Optional[str] = Query(None),
    client: GitHubClient = Depends(get_github_client),
):
    if not token:
        raise InvalidRequestError("Token is required.")
    if not owner or not repo:
        raise InvalidRequestError("Owner and repo parameters are required.")

    files = services.walk_markdown_files(client, owner, repo, token)
    return FilesResponse(message="Files fetched successfully", files=files)


@router.put(
    "/addNewFileToVault",
    response_model=AddFileResponse,
    status_code=201,
    responses=ERROR_RESPONSES,
)
def add_new_file_to_vault(
    owner: Optional[str] = Query(None),
    repo: Optional[str] = Query(None),
    path: Optional[str] = Query(None),
    file_content: Optional[str] = Query(None, alias="fileContent"),
    token: Optional[str] = Query(None),
    sha: Optional[str] = Query(None, description="Blob sha when overwriting"),
    client: GitHubClient = Depends(get_github_client),
):
    if not token:
        raise InvalidRequestError("Token is required.")
    if not owner or not repo or not path or not file_content:
        raise InvalidRequestError(
            "Owner, repo, file path, and file content are required."
        )

    created = services.add_file_to_vault(
        client, owner, repo, path, file_content, token, sha=sha
    )
    logger.info("Added %s to %s/%s", created.path, owner, repo)
    return AddFileResponse(message="File added successfully", file=created)
