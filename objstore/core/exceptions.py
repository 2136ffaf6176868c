"""Custom exception classes for objstore."""

from __future__ import annotations

from typing import Any


class AppException(Exception):
    """Base objstore exception.

    All custom exceptions inherit from this class. The fields follow
    RFC 7807 Problem Details so errors can be rendered by HTTP services
    that embed the client.

    Attributes:
        status_code: HTTP status code equivalent for the error.
        detail: Human-readable error message.
        type: Error type identifier (used in RFC 7807 problem details).
        title: Short, human-readable summary of the problem type.
        instance: URI reference that identifies the specific occurrence of the problem.
        extra: Additional context-specific information about the error.

    Example:
            raise AppException(
            status_code=404,
            detail="Object not found",
            type="object-not-found",
            extra={"key": "reports/q1.pdf"}
        )
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize objstore exception.

        Args:
            status_code: HTTP status code equivalent.
            detail: Human-readable error message.
            type: Error type identifier.
            title: Short summary of the problem type.
            instance: URI reference identifying this specific occurrence.
            extra: Additional context about the error.
        """
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or self._default_title(status_code)
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)

    @staticmethod
    def _default_title(status_code: int) -> str:
        """Get default title for a status code."""
        titles = {
            400: "Bad Request",
            403: "Forbidden",
            404: "Not Found",
            500: "Internal Server Error",
            502: "Bad Gateway",
            503: "Service Unavailable",
            504: "Gateway Timeout",
        }
        return titles.get(status_code, "Error")

    def to_dict(self) -> dict[str, Any]:
        """Render the error as an RFC 7807 problem details mapping."""
        problem: dict[str, Any] = {
            "type": self.type,
            "title": self.title,
            "status": self.status_code,
            "detail": self.detail,
        }
        if self.instance:
            problem["instance"] = self.instance
        if self.extra:
            problem.update(self.extra)
        return problem


__all__ = ["AppException"]
