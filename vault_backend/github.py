"""
Thin client for the GitHub REST API and OAuth token endpoint.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import requests

from vault_backend.config import Settings
from vault_backend.errors import (
    DEFAULT_GITHUB_ERROR_MESSAGE,
    GitHubAPIError,
    OAuthExchangeError,
)

logger = logging.getLogger(__name__)

GITHUB_MEDIA_TYPE = "application/vnd.github+json"


def _error_message(response: requests.Response) -> str:
    """Pull GitHub's `message` out of an error response, if there is one."""
    try:
        payload = response.json()
    except ValueError:
        return response.reason or DEFAULT_GITHUB_ERROR_MESSAGE
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return DEFAULT_GITHUB_ERROR_MESSAGE


class GitHubClient:
    """
    Performs the outbound calls the routes need.

    One instance is shared by all requests of an app; it holds no per-user
    state, every call takes the caller's token explicitly.
    """

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()

    def _headers(self, token: Optional[str]) -> dict[str, str]:
        headers = {"Accept": GITHUB_MEDIA_TYPE}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _api_url(self, path: str) -> str:
        return f"{self.settings.github_api_url}/{path.lstrip('/')}"

    def _contents_path(self, owner: str, repo: str, path: str) -> str:
        return f"repos/{quote(owner, safe='')}/{quote(repo, safe='')}/contents/{quote(path)}"

    def _send(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> requests.Response:
        logger.debug("GitHub request %s %s", method, url)
        return self.session.request(
            method,
            url,
            headers=headers,
            params=params,
            json=json,
            timeout=self.settings.request_timeout,
        )

    def request_json(
        self,
        method: str,
        path: str,
        token: Optional[str],
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Call an API path and return the decoded body, raising on non-2xx."""
        response = self._send(
            method,
            self._api_url(path),
            headers=self._headers(token),
            params=params,
            json=json,
        )
        if not response.ok:
            raise GitHubAPIError(_error_message(response), response.status_code)
        return response.json()

    def exchange_code(self, code: str) -> str:
        """Trade an OAuth authorization code for an access token."""
        response = self._send(
            "POST",
            self.settings.github_oauth_url,
            headers={"Accept": "application/json"},
            params={
                "client_id": self.settings.client_id,
                "client_secret": self.settings.client_secret,
                "code": code,
            },
        )
        if not response.ok:
            raise GitHubAPIError(_error_message(response), response.status_code)

        data = response.json()
        if not isinstance(data, dict):
            raise GitHubAPIError("GitHub returned an unexpected token response.")
        # The token endpoint reports bad codes with a 200 and an `error` field.
        if data.get("error"):
            raise OAuthExchangeError(data["error"])
        if not data.get("access_token"):
            raise GitHubAPIError("GitHub did not return an access token.")
        return data["access_token"]

    def list_repositories(self, token: str) -> list[dict[str, Any]]:
        """
        Return every repository visible to the token, following pagination.

        A failed page ends the walk early and the repositories collected so
        far are returned instead of raising.
        """
        repos: list[dict[str, Any]] = []
        page = 1
        while True:
            response = self._send(
                "GET",
                self._api_url("user/repos"),
                headers=self._headers(token),
                params={
                    "visibility": "all",
                    "page": page,
                    "per_page": self.settings.repos_per_page,
                },
            )
            if not response.ok:
                logger.error(
                    "GitHub API error while listing repositories (page %d, status %d): %s",
                    page,
                    response.status_code,
                    _error_message(response),
                )
                break

            repos.extend(response.json())
            if "next" not in response.links:
                break
            page += 1
        return repos

    def create_repository(
        self, token: str, name: str, *, private: bool = True, auto_init: bool = True
    ) -> dict[str, Any]:
        return self.request_json(
            "POST",
            "user/repos",
            token,
            json={"name": name, "private": private, "auto_init": auto_init},
        )

    def list_contents(self, owner: str, repo: str, path: str, token: str) -> Any:
        """List a directory through the contents API (root when path is empty)."""
        return self.request_json("GET", self._contents_path(owner, repo, path), token)

    def download_text(self, url: str, token: str) -> str:
        response = self._send("GET", url, headers=self._headers(token))
        if not response.ok:
            raise GitHubAPIError(_error_message(response), response.status_code)
        return response.text

    def put_file(
        self,
        owner: str,
        repo: str,
        path: str,
        encoded_content: str,
        token: str,
        *,
        message: str,
        branch: str,
        sha: Optional[str] = None,
    ) -> dict[str, Any]:
        """Create or update one file; `encoded_content` is already base64."""
        body: dict[str, Any] = {
            "message": message,
            "content": encoded_content,
            "branch": branch,
        }
        if sha:
            body["sha"] = sha
        return self.request_json(
            "PUT", self._contents_path(owner, repo, path), token, json=body
        )
