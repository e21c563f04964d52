from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

from config.llm_routes import ROUTES
from config.settings import Settings, get_settings
from services.errors import CollaboratorUnavailable
from utils.llm_logger import log_call, sha256_text


logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("gemini", "openai")


def _gemini_schema(fields: Dict[str, str]) -> Dict[str, Any]:
    properties: Dict[str, Any] = {}
    for name, kind in fields.items():
        if kind == "string[]":
            properties[name] = {"type": "ARRAY", "items": {"type": "STRING"}}
        else:
            properties[name] = {"type": "STRING"}
    return {"type": "OBJECT", "properties": properties, "required": list(fields)}


def _openai_schema(fields: Dict[str, str]) -> Dict[str, Any]:
    properties: Dict[str, Any] = {}
    for name, kind in fields.items():
        if kind == "string[]":
            properties[name] = {"type": "array", "items": {"type": "string"}}
        else:
            properties[name] = {"type": "string"}
    return {
        "type": "object",
        "properties": properties,
        "required": list(fields),
        "additionalProperties": False,
    }


class LLMClient:
    """Text-generation gateway: per-use-case routing, provider SDKs and call tracing."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self._clients: Dict[str, Any] = {}

    def _route(self, use_case: str) -> Dict[str, Any]:
        route = ROUTES.get(use_case, {})
        provider = (route.get("provider") or self.settings.ai_provider or "gemini").lower()
        if provider == "gemini":
            model = route.get("model") or self.settings.gemini_model
        else:
            model = route.get("model") or self.settings.openai_model
        return {
            "provider": provider,
            "model": model,
            "temperature": route.get("temperature"),
            "operation": route.get("operation", use_case),
        }

    def is_configured(self, use_case: Optional[str] = None) -> bool:
        provider = self._route(use_case or "")["provider"]
        return provider in SUPPORTED_PROVIDERS and bool(self.settings.api_key_for(provider))

    def _client(self, provider: str) -> Any:
        if provider in self._clients:
            return self._clients[provider]
        api_key = self.settings.api_key_for(provider)
        if provider == "gemini":
            from google import genai
            client = genai.Client(api_key=api_key)
        else:
            from openai import OpenAI
            client = OpenAI(api_key=api_key)
        self._clients[provider] = client
        return client

    def _generate_gemini(self, model: str, prompt: str, temperature: Optional[float], schema: Optional[Dict[str, str]]):
        from google.genai import types

        config_kwargs: Dict[str, Any] = {}
        if temperature is not None:
            config_kwargs["temperature"] = temperature
        if schema:
            config_kwargs["response_mime_type"] = "application/json"
            config_kwargs["response_schema"] = _gemini_schema(schema)
        resp = self._client("gemini").models.generate_content(
            model=model,
            contents=prompt,
            config=types.GenerateContentConfig(**config_kwargs) if config_kwargs else None,
        )
        usage = None
        meta = getattr(resp, "usage_metadata", None)
        if meta is not None:
            usage = {
                "prompt_tokens": getattr(meta, "prompt_token_count", None),
                "completion_tokens": getattr(meta, "candidates_token_count", None),
                "total_tokens": getattr(meta, "total_token_count", None),
            }
        return resp.text or "", usage

    def _generate_openai(self, model: str, prompt: str, temperature: Optional[float], schema: Optional[Dict[str, str]], use_case: str):
        kwargs: Dict[str, Any] = {"model": model, "messages": [{"role": "user", "content": prompt}]}
        # Only pass temperature if explicitly provided (some models only accept default)
        if temperature is not None:
            kwargs["temperature"] = temperature
        if schema:
            kwargs["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": use_case, "strict": True, "schema": _openai_schema(schema)},
            }
        resp = self._client("openai").chat.completions.create(**kwargs)
        usage = None
        if getattr(resp, "usage", None):
            usage = {
                "prompt_tokens": resp.usage.prompt_tokens,
                "completion_tokens": resp.usage.completion_tokens,
                "total_tokens": resp.usage.total_tokens,
            }
        content = resp.choices[0].message.content if resp.choices else None
        return content or "", usage

    def generate(
        self,
        *,
        use_case: str,
        prompt: str,
        response_schema: Optional[Dict[str, str]] = None,
        prompt_name: Optional[str] = None,
    ) -> str:
        """Send one prompt to the routed provider and return the raw text.

        Raises CollaboratorUnavailable when the provider is unknown or has no credential;
        SDK errors propagate to the caller.
        """
        route = self._route(use_case)
        provider, model = route["provider"], route["model"]
        caller = f"llm_client.generate:{use_case}"
        if not self.is_configured(use_case):
            log_call(
                caller=caller,
                provider=provider,
                model=model,
                operation=route["operation"],
                prompt_name=prompt_name,
                prompt_hash=sha256_text(prompt),
                status="unconfigured",
                error="missing credential",
            )
            raise CollaboratorUnavailable(f"No credential configured for provider {provider}")

        t0 = time.time()
        try:
            if provider == "gemini":
                text, usage = self._generate_gemini(model, prompt, route["temperature"], response_schema)
            else:
                text, usage = self._generate_openai(model, prompt, route["temperature"], response_schema, use_case)
        except Exception as exc:
            log_call(
                caller=caller,
                provider=provider,
                model=model,
                operation=route["operation"],
                prompt_name=prompt_name,
                prompt_hash=sha256_text(prompt),
                duration_ms=int((time.time() - t0) * 1000),
                status="error",
                error=str(exc),
            )
            raise
        dt_ms = int((time.time() - t0) * 1000)
        log_call(
            caller=caller,
            provider=provider,
            model=model,
            operation=route["operation"],
            prompt_name=prompt_name,
            prompt_hash=sha256_text(prompt),
            duration_ms=dt_ms,
            status="ok",
            usage=usage,
        )
        logger.debug("llm call ok", extra={"step": use_case, "status": "ok", "duration_ms": dt_ms, "provider": provider})
        return text
