"""Error taxonomy shared by the stores and the HTTP layer."""

from typing import Any


class UidOpsError(Exception):
    """Base exception for UID Ops errors."""

    default_message = "An error occurred in UID Ops"

    def __init__(self, message: str | None = None, code: str | None = None, details: Any = None):
        self.message = message or self.default_message
        self.code = code
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a response body."""
        error_dict: dict[str, Any] = {"error": self.message}
        if self.code:
            error_dict["code"] = self.code
        if self.details:
            error_dict["details"] = self.details
        return error_dict


class ValidationError(UidOpsError):
    """Missing or invalid input. ``fields`` names the offending field(s)."""

    default_message = "Validation error"

    def __init__(
        self,
        message: str | None = None,
        fields: list[str] | None = None,
        code: str | None = None,
        details: Any = None,
    ):
        self.fields = list(fields or [])
        super().__init__(message, code, details)

    def to_dict(self) -> dict[str, Any]:
        error_dict = super().to_dict()
        if self.fields:
            error_dict["fields"] = self.fields
        return error_dict


class RecordConflictError(UidOpsError):
    """A keyed record was edited onto another record's natural key."""

    default_message = "Natural key already belongs to another record"


class StorageError(UidOpsError):
    """The underlying persistence call failed."""

    default_message = "Storage failure"
