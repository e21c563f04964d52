from __future__ import annotations

from db.repos.profiles_repo import DUPLICATE_MESSAGE
from ports.repos import ProfileStorePort
from pipelines.runner import RunContext
from services.errors import DuplicateKeyError


class CheckLinkedinUnique:
    """Reject a LinkedIn URL owned by another profile before enrichment runs."""

    def __init__(self, repo: ProfileStorePort) -> None:
        self.repo = repo

    def run(self, ctx: RunContext) -> RunContext:
        url = ctx.data.get("linkedin_url")
        if not url:
            return ctx
        existing = self.repo.find_by_linkedin(url)
        if existing is not None and existing.id != ctx.profile_id:
            raise DuplicateKeyError(DUPLICATE_MESSAGE)
        return ctx
