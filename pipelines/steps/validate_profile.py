from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from models import ProfileCreate, ProfileUpdate
from pipelines.runner import RunContext
from services.errors import ValidationError


class ValidateProfile:
    """Parse caller input into validated fields; nothing is written on failure."""

    def run(self, ctx: RunContext) -> RunContext:
        try:
            if ctx.mode == "create":
                ctx.data = ProfileCreate.model_validate(ctx.raw).model_dump()
            else:
                ctx.data = ProfileUpdate.model_validate(ctx.raw).changes()
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc) from exc
        linkedin_about = ctx.raw.get("linkedinAbout") or ctx.raw.get("linkedin_about")
        if linkedin_about:
            ctx.meta["linkedin_about"] = str(linkedin_about)
        return ctx
