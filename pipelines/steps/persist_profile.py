from __future__ import annotations

from ports.repos import ProfileStorePort
from pipelines.runner import RunContext


class PersistProfile:
    def __init__(self, repo: ProfileStorePort) -> None:
        self.repo = repo

    def run(self, ctx: RunContext) -> RunContext:
        if ctx.mode == "create":
            ctx.profile = self.repo.create(ctx.data)
        else:
            ctx.profile = self.repo.update(ctx.profile_id or "", ctx.data)
        ctx.meta["processed_profiles"] = 1
        return ctx
