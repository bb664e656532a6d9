"""
Vault resolution, markdown tree walking and file creation on top of GitHubClient.
"""

from __future__ import annotations

import base64
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Iterator, Optional

import requests

from vault_backend.errors import (
    GitHubAPIError,
    RepositoryWalkError,
    VaultCreationError,
    VaultNotFoundError,
)
from vault_backend.github import GitHubClient
from vault_backend.schemas import CreatedFile, FileEntry

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSION = ".md"


@dataclass
class VaultLookup:
    repo: dict[str, Any]
    created: bool = False


def find_vault(repos: list[dict[str, Any]], name: str) -> Optional[dict[str, Any]]:
    for repo in repos:
        if repo.get("name") == name:
            return repo
    return None


def resolve_vault(client: GitHubClient, token: str, *, create: bool = True) -> VaultLookup:
    """
    Find the account's vault repository, creating it when it is missing.

    With `create=False` a missing vault raises VaultNotFoundError instead.
    """
    name = client.settings.vault_repo_name
    existing = find_vault(client.list_repositories(token), name)
    if existing is not None:
        return VaultLookup(repo=existing)
    if not create:
        raise VaultNotFoundError()

    logger.info("Vault repository %s not found, creating it", name)
    try:
        repo = client.create_repository(token, name, private=True, auto_init=True)
    except GitHubAPIError as exc:
        logger.error("Creating vault repository %s failed: %s", name, exc.message)
        raise VaultCreationError(exc.message) from exc
    return VaultLookup(repo=repo, created=True)


def _walk(
    client: GitHubClient,
    owner: str,
    repo: str,
    token: str,
    path: str,
    ids: Iterator[int],
) -> list[FileEntry]:
    contents = client.list_contents(owner, repo, path, token)
    if not isinstance(contents, list):
        raise RepositoryWalkError(f"Error fetching contents: {path or '/'} is not a directory")

    files: list[FileEntry] = []
    for item in contents:
        if item.get("type") == "file" and item.get("name", "").endswith(MARKDOWN_EXTENSION):
            content = client.download_text(item["download_url"], token)
            files.append(
                FileEntry(id=next(ids), name=item["name"], path=item["path"], content=content)
            )
        elif item.get("type") == "dir":
            files.extend(_walk(client, owner, repo, token, item["path"], ids))
    return files


def walk_markdown_files(client: GitHubClient, owner: str, repo: str, token: str) -> list[FileEntry]:
    """
    Collect every markdown file of a repository, depth first from the root.

    Ids run from 0 in visitation order. Any failed listing or download aborts
    the whole walk with RepositoryWalkError.
    """
    try:
        return _walk(client, owner, repo, token, "", itertools.count())
    except RepositoryWalkError:
        raise
    except (GitHubAPIError, requests.RequestException, ValueError) as exc:
        logger.error("Error fetching contents of %s/%s: %s", owner, repo, exc)
        raise RepositoryWalkError(f"Error fetching contents: {exc}") from exc


def encode_content(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def add_file_to_vault(
    client: GitHubClient,
    owner: str,
    repo: str,
    path: str,
    file_content: str,
    token: str,
    *,
    sha: Optional[str] = None,
) -> CreatedFile:
    data = client.put_file(
        owner,
        repo,
        path,
        encode_content(file_content),
        token,
        message=client.settings.commit_message,
        branch=client.settings.vault_branch,
        sha=sha,
    )
    content = data["content"]
    return CreatedFile(name=content["name"], path=content["path"], sha=content["sha"])
