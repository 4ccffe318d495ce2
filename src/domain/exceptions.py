"""Base exception classes for the parliament session domain layer."""

from __future__ import annotations

from typing import Any


class ParliamentError(Exception):
    """Base exception for all domain errors.

    All domain-specific exceptions MUST inherit from this class. Each
    subclass declares the HTTP status it maps to and a problem type slug
    so the API layer can render RFC 7807 responses without knowing the
    concrete error.

    Attributes:
        status_code: HTTP status the error maps to.
        problem_type: Slug appended to the problem type URN.
        title: Short human-readable summary of the error class.
    """

    status_code: int = 500
    problem_type: str = "internal-error"
    title: str = "Internal Error"

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
        self.message = message

    def problem_extensions(self) -> dict[str, Any]:
        """Extra fields merged into the problem document."""
        return {}

    def to_rfc7807_dict(self) -> dict[str, Any]:
        """Serialize to RFC 7807 problem details format.

        Returns:
            Dictionary with type, title, status and detail keys.
        """
        result: dict[str, Any] = {
            "type": f"urn:parliament:{self.problem_type}",
            "title": self.title,
            "status": self.status_code,
            "detail": self.message,
        }
        result.update(self.problem_extensions())
        return result
