from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError


class DirectoryError(Exception):
    """Base class for failures surfaced by the directory."""


class ValidationError(DirectoryError):
    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> "ValidationError":
        parts = []
        for err in exc.errors():
            loc = ".".join(str(p) for p in err.get("loc", ()) if p != "__root__")
            msg = str(err.get("msg", "invalid value")).removeprefix("Value error, ")
            parts.append(f"{loc}: {msg}" if loc else msg)
        return cls("; ".join(parts) or "invalid input")


class DuplicateKeyError(DirectoryError):
    pass


class NotFoundError(DirectoryError):
    pass


class PermissionDeniedError(DirectoryError):
    pass


class CollaboratorUnavailable(DirectoryError):
    """No credential configured for the routed text-generation provider."""
