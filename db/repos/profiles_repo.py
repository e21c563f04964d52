from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from models.profile import Profile, ProfileFilter, format_location
from ports.repos import KeyValueStorePort
from services.errors import DuplicateKeyError, NotFoundError, ValidationError
from services.linkedin_urls import linkedin_key, placeholder_avatar_url


PROFILES_KEY = "connectai_db_profiles_v2"

# Filter values that mean "no filter" for area/city
ALL_SENTINELS = {"", "all", "todas"}

# Fields the store owns; never overwritten by an update
_IMMUTABLE_FIELDS = {"id", "created_at", "updated_at", "location"}

DUPLICATE_MESSAGE = "This LinkedIn profile is already registered in the directory."

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_bypass(value: Optional[str]) -> bool:
    return value is None or value.strip().lower() in ALL_SENTINELS


def matches_search(profile: Profile, query: str) -> bool:
    q = query.lower()
    return (
        q in profile.name.lower()
        or q in profile.role.lower()
        or q in profile.area.lower()
        or any(q in tag.lower() for tag in profile.tags)
    )


class ProfilesRepo:
    """Profile records kept as one JSON list in the key-value store.

    The stored list is in insertion order, newest at the head.
    """

    def __init__(
        self,
        store: KeyValueStorePort,
        clock: Callable[[], datetime] = _utcnow,
        avatar_base_url: str = "https://ui-avatars.com/api/",
    ):
        self.store = store
        self.clock = clock
        self.avatar_base_url = avatar_base_url

    def _load(self) -> List[Profile]:
        raw = self.store.get_json(PROFILES_KEY, default=[]) or []
        return [Profile.model_validate(item) for item in raw]

    def _save(self, profiles: List[Profile]) -> None:
        self.store.set_json(PROFILES_KEY, [p.to_record() for p in profiles])

    def list(self, filters: Optional[ProfileFilter] = None) -> List[Profile]:
        profiles = self._load()
        if filters:
            if filters.search:
                profiles = [p for p in profiles if matches_search(p, filters.search)]
            if not _is_bypass(filters.area):
                profiles = [p for p in profiles if p.area == filters.area]
            if not _is_bypass(filters.city):
                profiles = [p for p in profiles if p.city == filters.city]
        # Stable sort: equal timestamps keep storage order (latest insert first)
        return sorted(profiles, key=lambda p: p.created_at, reverse=True)

    def get(self, profile_id: str) -> Optional[Profile]:
        for profile in self._load():
            if profile.id == profile_id:
                return profile
        return None

    def find_by_linkedin(self, url: str) -> Optional[Profile]:
        key = linkedin_key(url)
        for profile in self._load():
            if linkedin_key(profile.linkedin_url) == key:
                return profile
        return None

    def create(self, data: Dict[str, Any]) -> Profile:
        """Insert a new profile at the head; data is keyed by attribute name."""
        profiles = self._load()
        key = linkedin_key(data["linkedin_url"])
        if any(linkedin_key(p.linkedin_url) == key for p in profiles):
            raise DuplicateKeyError(DUPLICATE_MESSAGE)

        now = self.clock()
        profile = Profile(
            id=str(uuid.uuid4()),
            name=data["name"],
            role=data["role"],
            area=data["area"],
            city=data["city"],
            state=data["state"],
            location=format_location(data["city"], data["state"]),
            linkedin_url=data["linkedin_url"],
            bio=data.get("bio"),
            avatar_url=data.get("avatar_url") or placeholder_avatar_url(data["name"], self.avatar_base_url),
            tags=list(data.get("tags") or []),
            created_at=now,
            updated_at=now,
        )
        profiles.insert(0, profile)
        self._save(profiles)
        logger.info("profile created id=%s", profile.id, extra={"step": "profiles.create", "status": "ok"})
        return profile

    def update(self, profile_id: str, changes: Dict[str, Any]) -> Profile:
        """Shallow-merge provided keys; location and updated_at are recomputed."""
        profiles = self._load()
        index = next((i for i, p in enumerate(profiles) if p.id == profile_id), None)
        if index is None:
            raise NotFoundError(f"Profile not found: {profile_id}")

        current = profiles[index]
        merged = current.model_dump()
        merged.update({k: v for k, v in changes.items() if k not in _IMMUTABLE_FIELDS})

        key = linkedin_key(merged.get("linkedin_url"))
        if key != linkedin_key(current.linkedin_url):
            if any(linkedin_key(p.linkedin_url) == key for p in profiles if p.id != profile_id):
                raise DuplicateKeyError(DUPLICATE_MESSAGE)

        # A placeholder avatar follows the name; a real photo is left alone
        old_placeholder = placeholder_avatar_url(current.name, self.avatar_base_url)
        if not merged.get("avatar_url") or (
            "avatar_url" not in changes and current.avatar_url == old_placeholder
        ):
            merged["avatar_url"] = placeholder_avatar_url(merged["name"], self.avatar_base_url)
        merged["location"] = format_location(merged["city"], merged["state"])
        merged["updated_at"] = self.clock()
        try:
            updated = Profile.model_validate(merged)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc) from exc
        profiles[index] = updated
        self._save(profiles)
        logger.info("profile updated id=%s", profile_id, extra={"step": "profiles.update", "status": "ok"})
        return updated

    def delete(self, profile_id: str) -> None:
        """Hard delete; a missing id is a no-op."""
        profiles = self._load()
        remaining = [p for p in profiles if p.id != profile_id]
        if len(remaining) == len(profiles):
            return
        self._save(remaining)
        logger.info("profile deleted id=%s", profile_id, extra={"step": "profiles.delete", "status": "ok"})
