from __future__ import annotations

import logging

from pipelines.runner import RunContext
from services.ai_enrichment import AIEnrichment


logger = logging.getLogger(__name__)


class EnrichProfile:
    """Replace role/area with normalized values and attach bio and tags.

    Updates only re-enrich when role or area is part of the change.
    """

    def __init__(self, ai: AIEnrichment) -> None:
        self.ai = ai

    def run(self, ctx: RunContext) -> RunContext:
        if ctx.mode == "update" and not ({"role", "area"} & set(ctx.data)):
            ctx.meta["enriched"] = False
            return ctx
        role = ctx.data.get("role") or (ctx.current.role if ctx.current else "")
        area = ctx.data.get("area") or (ctx.current.area if ctx.current else "")
        result = self.ai.enrich(role, area, linkedin_about=ctx.meta.get("linkedin_about"))
        ctx.enrichment = result
        ctx.data.update(
            role=result.normalized_role,
            area=result.normalized_area,
            bio=result.bio,
            tags=list(result.tags),
        )
        ctx.meta["enriched"] = True
        return ctx
