"""
Error hierarchy for the article API.

Every failure a caller can observe is an ``ArticleError`` subclass with a
stable ``code`` and an HTTP status.  "Not found" is deliberately absent:
lookups return ``None`` and delete returns ``False`` instead of raising, so
callers can tell "duplicate slug" apart from "nothing to update".
"""
from __future__ import annotations

from typing import Any


class ArticleError(Exception):
    """Base exception for all article API errors."""

    code: str = "ARTICLE_ERROR"
    http_status: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def details(self) -> dict[str, Any]:
        return {}

    def to_response(self) -> dict:
        """Convert to the standard REST error envelope."""
        body: dict[str, Any] = {"code": self.code, "message": self.message}
        body.update(self.details())
        return {"error": body}


class ValidationError(ArticleError):
    """Malformed or out-of-range input, rejected before any store access."""

    code = "VALIDATION_ERROR"
    http_status = 422

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    def details(self) -> dict[str, Any]:
        return {"details": self.errors}

    @classmethod
    def from_pydantic(cls, exc) -> "ValidationError":
        """Build from a ``pydantic.ValidationError`` (or FastAPI's request variant)."""
        errors = [
            {
                "field": ".".join(str(loc) for loc in e["loc"]),
                "message": e["msg"],
                "type": e["type"],
            }
            for e in exc.errors()
        ]
        return cls("Invalid request data", errors)


class ConflictError(ArticleError):
    """The slug is already held by another article."""

    code = "SLUG_CONFLICT"
    http_status = 409

    def __init__(self, slug: str) -> None:
        super().__init__(f"Article with slug '{slug}' already exists")
        self.slug = slug

    def details(self) -> dict[str, Any]:
        return {"slug": self.slug}


class StorageFailure(ArticleError):
    """The database is unavailable or rejected the statement."""

    code = "STORAGE_FAILURE"
    http_status = 503

    def __init__(self, operation: str) -> None:
        super().__init__(f"Storage {operation} failed")
        self.operation = operation

    def details(self) -> dict[str, Any]:
        return {"operation": self.operation}
