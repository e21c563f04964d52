from __future__ import annotations

from typing import Dict, Optional, Protocol


class TextGenerationPort(Protocol):
    def generate(
        self,
        *,
        use_case: str,
        prompt: str,
        response_schema: Optional[Dict[str, str]] = None,
        prompt_name: Optional[str] = None,
    ) -> str:
        """Return raw model text; JSON conforming to response_schema when given."""
        ...

    def is_configured(self, use_case: Optional[str] = None) -> bool:
        ...
