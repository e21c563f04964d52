from __future__ import annotations

import json
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from models import ProfileBrief
from services.ai_enrichment import AIEnrichment
from services.errors import CollaboratorUnavailable, ValidationError


router = APIRouter(tags=["enrichment"])

USE_CASE_BY_KIND = {"enhance": "profile_enrichment", "icebreaker": "icebreaker"}


class EnrichmentRequest(BaseModel):
    kind: str
    payload: Dict[str, Any] = Field(default_factory=dict)


class EnrichmentResponse(BaseModel):
    text: str


def _required_text(payload: Dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Missing {key}")
    return value.strip()


def _brief(payload: Dict[str, Any], key: str) -> ProfileBrief:
    value = payload.get(key)
    if not isinstance(value, dict):
        raise ValidationError(f"Missing {key}")
    try:
        return ProfileBrief.model_validate(value)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc


@router.post("/gemini", response_model=EnrichmentResponse)
def generate(body: EnrichmentRequest, request: Request) -> EnrichmentResponse:
    """Proxy for the UI: icebreaker text or the JSON-encoded enrichment object."""
    use_case = USE_CASE_BY_KIND.get(body.kind)
    if use_case is None:
        raise HTTPException(status_code=400, detail=f"Unknown kind: {body.kind}")

    ai: AIEnrichment = request.app.state.ai
    if body.kind == "enhance":
        role = _required_text(body.payload, "role")
        area = _required_text(body.payload, "area")
        about = body.payload.get("linkedinAbout")
        if not ai.client.is_configured(use_case):
            raise CollaboratorUnavailable("Text-generation credential not configured")
        result = ai.enrich(role, area, linkedin_about=about if isinstance(about, str) else None)
        return EnrichmentResponse(text=json.dumps(result.to_payload(), ensure_ascii=False))

    sender = _brief(body.payload, "myProfile")
    target = _brief(body.payload, "targetProfile")
    if not ai.client.is_configured(use_case):
        raise CollaboratorUnavailable("Text-generation credential not configured")
    return EnrichmentResponse(text=ai.icebreaker(sender, target))
