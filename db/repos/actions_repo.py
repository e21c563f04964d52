from __future__ import annotations

import time
import uuid
from typing import Callable, List, Set

from models.profile_action import ActionType, ProfileAction
from ports.repos import KeyValueStorePort


ACTIONS_KEY = "connectai_db_actions_v2"


def _now_ms() -> int:
    return int(time.time() * 1000)


class ActionsRepo:
    """Append-only journal of profile actions."""

    def __init__(self, store: KeyValueStorePort, clock_ms: Callable[[], int] = _now_ms):
        self.store = store
        self.clock_ms = clock_ms

    def _load(self) -> List[ProfileAction]:
        raw = self.store.get_json(ACTIONS_KEY, default=[]) or []
        return [ProfileAction.model_validate(item) for item in raw]

    def record(self, profile_id: str, action_type: ActionType) -> ProfileAction:
        action = ProfileAction(
            id=str(uuid.uuid4()),
            profile_id=profile_id,
            action_type=action_type,
            timestamp=self.clock_ms(),
        )
        raw = self.store.get_json(ACTIONS_KEY, default=[]) or []
        raw.append(action.model_dump(by_alias=True))
        self.store.set_json(ACTIONS_KEY, raw)
        return action

    def all(self) -> List[ProfileAction]:
        return self._load()

    def followed_set(self) -> Set[str]:
        """Profile ids with at least one assumed_follow event; rebuilt on each call."""
        return {a.profile_id for a in self._load() if a.action_type == "assumed_follow"}
