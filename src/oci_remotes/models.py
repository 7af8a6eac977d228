"""
Data models for OCI Distribution API payloads.

Registries report failures as ``{"errors": [{"code", "message", "detail"}]}``.
These Pydantic models decode that payload loosely: unknown fields are
ignored and every entry field is optional.
"""
from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ErrorInfo(BaseModel):
    """Single entry of a distribution-spec error response."""
    model_config = ConfigDict(extra="ignore")

    code: Optional[str] = Field(default=None, description="Error code, e.g. MANIFEST_UNKNOWN")
    message: Optional[str] = Field(default=None, description="Human-readable message")
    detail: Any = Field(default=None, description="Unstructured, code-specific detail")


class ErrorResponse(BaseModel):
    """Distribution-spec error response body."""
    model_config = ConfigDict(extra="ignore")

    errors: List[ErrorInfo] = Field(default_factory=list, description="Ordered error entries")

    @field_validator("errors", mode="before")
    @classmethod
    def null_errors_as_empty(cls, v):
        return [] if v is None else v

    def last_message(self) -> str:
        """
        Message of the last entry that has a non-empty one.

        Entries are scanned in order and each non-empty message replaces
        the previous one, so a later entry always wins.
        """
        message = ""
        for entry in self.errors:
            if entry.message:
                message = entry.message
        return message


class TagList(BaseModel):
    """Response of the tag listing endpoint."""
    model_config = ConfigDict(extra="ignore")

    name: str = Field(default="", description="Repository name")
    tags: List[str] = Field(default_factory=list, description="Tags in registry order")

    @field_validator("tags", mode="before")
    @classmethod
    def null_tags_as_empty(cls, v):
        return [] if v is None else v


__all__ = ["ErrorInfo", "ErrorResponse", "TagList"]
