from __future__ import annotations

import os


# Central routing for LLM use-cases. Edit here to change per-operation defaults.
# Provider falls back to settings.ai_provider, model to the provider's global model.
#
# Keys are use_case identifiers consumed by services/llm_client.py
ROUTES: dict[str, dict] = {
    # Role/area normalization, bio and tags (structured JSON output)
    "profile_enrichment": {
        "provider": os.getenv("LLM_ENRICHMENT_PROVIDER"),
        "model": os.getenv("LLM_ENRICHMENT_MODEL"),
        "temperature": 0.6,
        # Logical operation name for logging (not a vendor API name)
        "operation": "profile_enrichment",
    },
    # Outreach message between two profiles (plain text)
    "icebreaker": {
        "provider": os.getenv("LLM_ICEBREAKER_PROVIDER"),
        "model": os.getenv("LLM_ICEBREAKER_MODEL"),
        "temperature": 0.7,
        "operation": "icebreaker",
    },
}
