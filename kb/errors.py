"""Domain errors raised by the services and rendered by the API layer.

"Not found" and "owned by someone else" are both reported as ``NotFound`` so a
caller cannot probe for the existence of another user's rows.
"""
from typing import Any, Dict, Optional


class KnowledgeBaseError(Exception):
    """Base class for every error a caller may see.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    code = "ERROR"
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(KnowledgeBaseError):
    code = "VALIDATION_ERROR"
    status_code = 422


class Unauthenticated(KnowledgeBaseError):
    code = "UNAUTHENTICATED"
    status_code = 401

    def __init__(self, message: str = "Not authenticated", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class Conflict(KnowledgeBaseError):
    code = "CONFLICT"
    status_code = 409


class NotFound(KnowledgeBaseError):
    code = "NOT_FOUND"
    status_code = 404
