"""
Pydantic schemas for the vault backend responses.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


class AccessTokenResponse(BaseModel):
    token: str


class VaultRepositoryResponse(BaseModel):
    message: str
    repo: dict[str, Any]


class FileEntry(BaseModel):
    id: int
    name: str
    path: str
    content: str


class FilesResponse(BaseModel):
    message: str
    files: list[FileEntry]


class CreatedFile(BaseModel):
    name: str
    path: str
    sha: str


class AddFileResponse(BaseModel):
    message: str
    file: CreatedFile


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
