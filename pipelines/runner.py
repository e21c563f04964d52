from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Protocol

from models import EnrichmentResult, Profile
from utils.logging_setup import init_logging


@dataclass
class RunContext:
    mode: Literal["create", "update"] = "create"
    profile_id: Optional[str] = None
    # Caller input (camelCase or attribute keys)
    raw: Dict[str, Any] = field(default_factory=dict)
    # Validated fields keyed by attribute name
    data: Dict[str, Any] = field(default_factory=dict)
    current: Optional[Profile] = None
    enrichment: Optional[EnrichmentResult] = None
    profile: Optional[Profile] = None
    meta: dict = field(default_factory=dict)


class Step(Protocol):
    def run(self, ctx: RunContext) -> RunContext:
        ...


class Pipeline:
    def __init__(self, steps: List[Step]):
        self.steps = steps

    def run(self, ctx: RunContext) -> RunContext:
        # Make logging idempotent for any direct runner use
        init_logging()
        for step in self.steps:
            ctx = step.run(ctx)
        return ctx
