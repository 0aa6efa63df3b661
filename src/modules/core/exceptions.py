"""Domain error taxonomy shared by every module.

Services raise these for business-rule violations; views catch them and
return the message verbatim to the caller.  Each error carries a stable
``code`` so clients can branch without parsing the message.
"""

from __future__ import annotations

from typing import Any, Dict


class DomainError(Exception):
    """Base class for expected business-rule outcomes."""

    code = "domain_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__doc__ or self.code)

    @property
    def message(self) -> str:
        return str(self)

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code}


class NotFound(DomainError):
    """A referenced book, cart line or order does not exist."""

    code = "not_found"


class StorageFailure(DomainError):
    """The underlying persistence layer failed; the operation was rolled back."""

    code = "storage_failure"
