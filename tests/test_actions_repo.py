from __future__ import annotations

import pydantic
import pytest

from db.repos.actions_repo import ActionsRepo


def test_record_appends_duplicates(store):
    repo = ActionsRepo(store, clock_ms=lambda: 1700000000000)
    repo.record("p1", "assumed_follow")
    repo.record("p1", "assumed_follow")
    actions = repo.all()
    assert len(actions) == 2
    assert actions[0].id != actions[1].id
    assert actions[0].timestamp == 1700000000000


def test_followed_set_only_counts_assumed_follow(store):
    repo = ActionsRepo(store)
    repo.record("p1", "assumed_follow")
    repo.record("p1", "assumed_follow")
    repo.record("p2", "open_linkedin")
    repo.record("p3", "assumed_follow")
    assert repo.followed_set() == {"p1", "p3"}


def test_followed_set_empty_store(store):
    assert ActionsRepo(store).followed_set() == set()


def test_unknown_action_type_rejected(store):
    repo = ActionsRepo(store)
    with pytest.raises(pydantic.ValidationError):
        repo.record("p1", "liked")  # type: ignore[arg-type]
    assert repo.all() == []
