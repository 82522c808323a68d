"""
Error taxonomy for the content backend.

Every error carries a stable ``code`` and maps to one HTTP status in
``firmsite.api.errors``. Cleanup failures are never raised through these
types; the publishing service logs and swallows them.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import ValidationError as PydanticValidationError


@dataclass(frozen=True)
class FieldError:
    """Field-level validation message."""

    code: str
    message: str
    field: str | None = None


class CMSError(Exception):
    """Base class for all domain errors."""

    code = "cms_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(CMSError):
    """Missing or invalid field. User-correctable."""

    code = "validation_error"

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = errors
        messages = [e.message for e in errors]
        super().__init__("; ".join(messages) or "Validation failed")

    @classmethod
    def single(cls, field: str, code: str, message: str) -> ValidationError:
        return cls([FieldError(code=code, message=message, field=field)])


class NotFoundError(CMSError):
    """Raised when an id does not resolve to a record."""

    code = "not_found"

    def __init__(self, kind: str, item_id: object) -> None:
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"{kind} not found: {item_id}")


class AuthError(CMSError):
    """Missing, expired or invalid credential."""

    code = "auth_error"


class UnsupportedMediaError(CMSError):
    """Upload is not an allowed image type."""

    code = "unsupported_media"


class PayloadTooLargeError(CMSError):
    """Upload exceeds the size ceiling."""

    code = "payload_too_large"

    def __init__(self, size_bytes: int, limit_bytes: int) -> None:
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
        super().__init__(
            f"File size {size_bytes} bytes exceeds limit of {limit_bytes} bytes"
        )


class DependencyError(CMSError):
    """Repository or media store unreachable or failing."""

    code = "dependency_error"


def field_errors_from_pydantic(exc: PydanticValidationError) -> list[FieldError]:
    """Flatten a pydantic failure into FieldErrors keyed by the offending field."""
    errors = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or None
        errors.append(FieldError(code="invalid", message=err.get("msg", "Invalid value"), field=loc))
    return errors
