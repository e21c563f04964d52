from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Set

from models import ActionType, Profile, ProfileAction, ProfileFilter


class KeyValueStorePort(Protocol):
    def get_json(self, key: str, default: Any = None) -> Any:
        ...

    def set_json(self, key: str, value: Any) -> None:
        ...


class ProfileStorePort(Protocol):
    def list(self, filters: Optional[ProfileFilter] = None) -> List[Profile]:
        ...

    def get(self, profile_id: str) -> Optional[Profile]:
        ...

    def find_by_linkedin(self, url: str) -> Optional[Profile]:
        ...

    def create(self, data: Dict[str, Any]) -> Profile:
        ...

    def update(self, profile_id: str, changes: Dict[str, Any]) -> Profile:
        ...

    def delete(self, profile_id: str) -> None:
        ...


class ActionLogPort(Protocol):
    def record(self, profile_id: str, action_type: ActionType) -> ProfileAction:
        ...

    def followed_set(self) -> Set[str]:
        ...


class SessionsRepoPort(Protocol):
    def profile_id_for(self, email: str) -> Optional[str]:
        ...

    def bind(self, email: str, profile_id: str) -> None:
        ...

    def unbind_profile(self, profile_id: str) -> None:
        ...
