"""
Exceptions raised by the vault backend and their HTTP rendering.
"""

from __future__ import annotations

from typing import Any, Optional

DEFAULT_GITHUB_ERROR_MESSAGE = "GitHub API error"


class VaultBackendError(Exception):
    """Base error carrying the HTTP status it should be reported with."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message}


class InvalidRequestError(VaultBackendError):
    """A required query parameter is missing or malformed."""

    status_code = 400


class GitHubAPIError(VaultBackendError):
    """GitHub answered with a non-success status."""

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.upstream_status = status_code
        # Only forward statuses that are errors on the caller's side too.
        if status_code is None or not 400 <= status_code <= 599:
            status_code = 500
        super().__init__(message or DEFAULT_GITHUB_ERROR_MESSAGE, status_code)


class OAuthExchangeError(GitHubAPIError):
    """The token endpoint reported an error inside a successful response."""

    def __init__(self, error: str):
        super().__init__(error, 400)


class VaultCreationError(GitHubAPIError):
    """Creating the vault repository failed; always reported as a server error."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, 500)


class RepositoryWalkError(GitHubAPIError):
    """Listing or downloading part of a repository tree failed."""

    def __init__(self, details: str):
        super().__init__(details, 500)
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        return {"error": "Failed to fetch files.", "details": self.details}


class VaultNotFoundError(VaultBackendError):
    """The account has no vault repository and creation was not requested."""

    status_code = 404

    def __init__(self, message: str = "Vault repository does not exist."):
        super().__init__(message)

    def to_payload(self) -> dict[str, Any]:
        return {"message": self.message}
