from __future__ import annotations

from typing import Dict, Optional

from ports.repos import KeyValueStorePort


SESSIONS_KEY = "connectai_sessions"


class SessionsRepo:
    """Maps a session e-mail to the profile it registered ("my profile")."""

    def __init__(self, store: KeyValueStorePort):
        self.store = store

    def _load(self) -> Dict[str, str]:
        return dict(self.store.get_json(SESSIONS_KEY, default={}) or {})

    def profile_id_for(self, email: str) -> Optional[str]:
        return self._load().get(email)

    def bind(self, email: str, profile_id: str) -> None:
        bindings = self._load()
        bindings[email] = profile_id
        self.store.set_json(SESSIONS_KEY, bindings)

    def unbind_profile(self, profile_id: str) -> None:
        bindings = self._load()
        remaining = {email: pid for email, pid in bindings.items() if pid != profile_id}
        if len(remaining) != len(bindings):
            self.store.set_json(SESSIONS_KEY, remaining)
