from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


LINKEDIN_PROFILE_RE = re.compile(r"^https://(www\.)?linkedin\.com/in/[a-zA-Z0-9\-_%]+/?$")

# Applies to model-written and caller-supplied bios alike
BIO_MAX_CHARS = 120


def format_location(city: str, state: str) -> str:
    return f"{city} - {state}"


def _strip_required(value: str, field_name: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValueError(f"{field_name} is required")
    return text


class Profile(BaseModel):
    """Stored directory entry. Serialized with camelCase keys."""

    id: str
    name: str
    role: str
    area: str
    city: str
    state: str
    location: str
    linkedin_url: str = Field(alias="linkedinUrl")
    bio: Optional[str] = None
    avatar_url: str = Field(alias="avatarUrl")
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    def to_record(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ProfileCreate(BaseModel):
    """Input accepted by create; role/area may later be replaced by enrichment."""

    name: str
    role: str
    area: str
    city: str
    state: str
    linkedin_url: str = Field(alias="linkedinUrl")
    avatar_url: Optional[str] = Field(default=None, alias="avatarUrl")
    bio: Optional[str] = Field(default=None, max_length=BIO_MAX_CHARS)
    tags: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("name", "role", "area", "city", "state")
    @classmethod
    def _required_text(cls, value: str, info) -> str:
        return _strip_required(value, info.field_name)

    @field_validator("linkedin_url")
    @classmethod
    def _linkedin_format(cls, value: str) -> str:
        text = (value or "").strip()
        if not LINKEDIN_PROFILE_RE.match(text):
            raise ValueError("invalid LinkedIn URL, expected https://linkedin.com/in/<profile>")
        return text


class ProfileUpdate(BaseModel):
    """Partial changes; only explicitly provided keys are merged."""

    name: Optional[str] = None
    role: Optional[str] = None
    area: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    linkedin_url: Optional[str] = Field(default=None, alias="linkedinUrl")
    avatar_url: Optional[str] = Field(default=None, alias="avatarUrl")
    bio: Optional[str] = Field(default=None, max_length=BIO_MAX_CHARS)
    tags: Optional[list[str]] = None

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("name", "role", "area", "city", "state")
    @classmethod
    def _required_text(cls, value: Optional[str], info) -> Optional[str]:
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return _strip_required(value, info.field_name)

    @field_validator("linkedin_url")
    @classmethod
    def _linkedin_format(cls, value: Optional[str]) -> Optional[str]:
        text = (value or "").strip()
        if not LINKEDIN_PROFILE_RE.match(text):
            raise ValueError("invalid LinkedIn URL, expected https://linkedin.com/in/<profile>")
        return text

    @field_validator("tags")
    @classmethod
    def _non_empty_tags(cls, value: Optional[list[str]]) -> list[str]:
        tags = [t.strip() for t in (value or []) if t and t.strip()]
        if not tags:
            raise ValueError("tags must contain at least one non-blank entry")
        return tags

    def changes(self) -> dict:
        """Provided fields only, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


class ProfileFilter(BaseModel):
    search: Optional[str] = None
    area: Optional[str] = None
    city: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class ProfileBrief(BaseModel):
    """The part of a profile an icebreaker needs; accepted from HTTP payloads."""

    name: str
    role: str
    area: str

    model_config = ConfigDict(extra="ignore")

    @field_validator("name", "role", "area")
    @classmethod
    def _required_text(cls, value: str, info) -> str:
        return _strip_required(value, info.field_name)
