"""
Error taxonomy shared by the service layer and the HTTP surface.

  NOT_FOUND          — user, post or career absent
  ORPHANED_REFERENCE — a stored reference points at a row that no longer exists
  VALIDATION         — malformed input, rejected before any store access
  STORE_UNAVAILABLE  — transport / infrastructure failure from the database

Services raise these only when no degraded result can be produced; list
operations prefer returning fewer rows.
"""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    ORPHANED_REFERENCE = "ORPHANED_REFERENCE"
    VALIDATION = "VALIDATION"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


class CoreError(Exception):
    kind: ErrorKind = ErrorKind.VALIDATION
    code: str = "ERROR"

    def __init__(self, details: str, code: Optional[str] = None) -> None:
        super().__init__(details)
        self.details = details
        if code is not None:
            self.code = code

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, details={self.details!r})"


class NotFoundError(CoreError):
    kind = ErrorKind.NOT_FOUND
    code = "NOT_FOUND"


class ValidationError(CoreError):
    kind = ErrorKind.VALIDATION
    code = "VALIDATION"


class StoreUnavailableError(CoreError):
    kind = ErrorKind.STORE_UNAVAILABLE
    code = "STORE_UNAVAILABLE"


# Codes used across services
USER_NOT_FOUND = "USER_NOT_FOUND"
CAREER_NOT_FOUND = "CAREER_NOT_FOUND"
POST_NOT_FOUND = "POST_NOT_FOUND"
