from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class Session(BaseModel):
    """Caller identity passed into every Directory operation.

    The email is not verified; this grants no real access control.
    """

    email: str

    model_config = ConfigDict(frozen=True)

    @field_validator("email")
    @classmethod
    def _normalize(cls, value: str) -> str:
        text = (value or "").strip().lower()
        if not text or "@" not in text:
            raise ValueError("a valid e-mail is required")
        return text
