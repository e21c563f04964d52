from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class EnrichmentResult(BaseModel):
    """LLM structured output: strict shape expected from profile enrichment."""

    normalized_role: str = Field(alias="normalizedRole", min_length=1)
    normalized_area: str = Field(alias="normalizedArea", min_length=1)
    bio: str = Field(min_length=1)
    tags: list[str] = Field(min_length=1)

    model_config = ConfigDict(extra="ignore", populate_by_name=True, str_strip_whitespace=True)

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


# Field contract sent to the collaborator: name -> "string" | "string[]"
ENRICHMENT_RESPONSE_SCHEMA: dict[str, str] = {
    "normalizedRole": "string",
    "normalizedArea": "string",
    "bio": "string",
    "tags": "string[]",
}
