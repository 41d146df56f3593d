"""Error taxonomy shared by the services and the HTTP layer.

Services raise these; ``qaboard.main`` maps them onto JSON responses using
``status_code``. Ownership failures answer 401 and role failures 403, so each
operation keeps one consistent status.
"""
from __future__ import annotations

from typing import Optional


class QABoardError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(QABoardError):
    status_code = 400
    default_message = "Invalid request"

    def __init__(self, message: Optional[str] = None, fields: Optional[list[str]] = None):
        self.fields = list(fields or [])
        super().__init__(message)


class Unauthenticated(QABoardError):
    status_code = 401
    default_message = "Not authenticated"


class Unauthorized(QABoardError):
    status_code = 401
    default_message = "Not authorized"


class AdminRequired(Unauthorized):
    status_code = 403
    default_message = "Admin access only"


class Blocked(QABoardError):
    status_code = 403
    default_message = "Account blocked. Please contact admin."


class NotFound(QABoardError):
    status_code = 404
    default_message = "Not found"


class ConflictOrInternal(QABoardError):
    status_code = 500
    default_message = "Server error"


__all__ = [
    "QABoardError",
    "ValidationError",
    "Unauthenticated",
    "Unauthorized",
    "AdminRequired",
    "Blocked",
    "NotFound",
    "ConflictOrInternal",
]
