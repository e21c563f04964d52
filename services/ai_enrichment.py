from __future__ import annotations

import json
import logging
import re
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from pydantic import ValidationError as PydanticValidationError

from config.settings import Settings, get_settings
from models.enrichment_result import ENRICHMENT_RESPONSE_SCHEMA, EnrichmentResult
from models.profile import BIO_MAX_CHARS
from ports.llm import TextGenerationPort
from services.errors import CollaboratorUnavailable
from utils.llm_logger import log_call


logger = logging.getLogger(__name__)

MAX_TAGS = 5
ICEBREAKER_MAX_CHARS = 300

# Shared pool for collaborator calls; a timed-out call keeps its worker until it returns
_EXECUTOR = ThreadPoolExecutor(max_workers=8, thread_name_prefix="ai-enrichment")


class ProfileLike(Protocol):
    name: str
    role: str
    area: str


def build_enhance_prompt(role: str, area: str, linkedin_about: Optional[str] = None) -> str:
    about = f'- LinkedIn Sobre: "{linkedin_about}"\n' if linkedin_about else ""
    return (
        "Você é um especialista em branding profissional no Brasil (pt-BR).\n\n"
        "Entrada:\n"
        f'- Cargo: "{role}"\n'
        f'- Área: "{area}"\n'
        f"{about}\n"
        "Sua tarefa:\n"
        '1. Normalizar o cargo para a versão profissional por extenso (ex: "Ger Prod" -> "Gerente de Produto").\n'
        '2. Normalizar a área (ex: "Mkt" -> "Marketing", "Cursando T.I" -> "Tecnologia da Informação").\n'
        f"3. Criar uma bio curta (máx {BIO_MAX_CHARS} caracteres), específica e profissional.\n"
        "4. Criar de 3 a 5 tags curtas iniciando com #, técnicas ou estratégicas.\n\n"
        "Regras importantes:\n"
        '- Evitar frases genéricas como "focado em resultados".\n'
        "- Se houver indício de transição de carreira, mencionar isso.\n"
        "- As tags não devem apenas repetir a área.\n\n"
        "Retorne apenas JSON válido com as chaves: normalizedRole, normalizedArea, bio, tags."
    )


def build_icebreaker_prompt(sender: ProfileLike, target: ProfileLike) -> str:
    return (
        "Você é um especialista em networking profissional.\n"
        "Gere uma mensagem de conexão para o LinkedIn: curta, profissional e amigável, "
        f"com no máximo {ICEBREAKER_MAX_CHARS} caracteres.\n\n"
        f"Remetente: {sender.name}, Cargo: {sender.role}, Área: {sender.area}.\n"
        f"Destinatário: {target.name}, Cargo: {target.role}, Área: {target.area}.\n\n"
        "A mensagem deve citar um ponto em comum entre os dois (cargo ou área) "
        f"e o interesse na área de {target.area}, terminando com uma pergunta.\n"
        "Não use hashtags nem emojis. Retorne apenas o texto da mensagem."
    )


def fallback_enrichment(role: str, area: str) -> EnrichmentResult:
    # Built without validation so blank input still yields a value
    return EnrichmentResult.model_construct(
        normalized_role=role,
        normalized_area=area,
        bio=f"{role} atuando na área de {area}.",
        tags=[area, "Networking"],
    )


def sanitize_icebreaker(text: str) -> str:
    cleaned = " ".join(text.replace("#", "").split())
    return cleaned[:ICEBREAKER_MAX_CHARS].rstrip()


def fallback_icebreaker(target: ProfileLike) -> str:
    return sanitize_icebreaker(
        f"Olá {target.name}, vi seu perfil e achei sua experiência em {target.area} muito interessante. "
        "Gostaria de conectar para trocar ideias?"
    )


def _extract_json(text: Optional[str]) -> Optional[Dict[str, Any]]:
    if not text:
        return None
    candidates = [text]
    # Fenced block
    m = re.search(r"```(?:json)?\s*\n([\s\S]*?)\n```", text)
    if m:
        candidates.append(m.group(1))
    # Curly braces slice
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        candidates.append(text[start : end + 1])
    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    return None


def decode_enrichment(text: Optional[str]) -> Optional[EnrichmentResult]:
    """Strict decode of model output; None on any shape mismatch."""
    data = _extract_json(text)
    if data is None:
        return None
    try:
        result = EnrichmentResult.model_validate(data)
    except PydanticValidationError:
        return None
    tags = [t.strip() for t in result.tags if t and t.strip()]
    if not tags:
        return None
    return result.model_copy(update={"bio": result.bio[:BIO_MAX_CHARS].rstrip(), "tags": tags[:MAX_TAGS]})


class AIEnrichment:
    """Normalizes role/area and writes icebreakers via the text-generation collaborator.

    Every call resolves to a value: the model's answer when it arrives in time and
    decodes cleanly, otherwise a deterministic fallback. Nothing raises past here.
    """

    def __init__(
        self,
        client: TextGenerationPort,
        *,
        enabled: bool = True,
        enhance_timeout: float = 6.0,
        icebreaker_timeout: float = 8.0,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        self.client = client
        self.enabled = enabled
        self.enhance_timeout = enhance_timeout
        self.icebreaker_timeout = icebreaker_timeout
        self.executor = executor or _EXECUTOR

    @classmethod
    def from_settings(cls, client: TextGenerationPort, settings: Optional[Settings] = None) -> "AIEnrichment":
        settings = settings or get_settings()
        return cls(
            client,
            enabled=settings.ai_enabled,
            enhance_timeout=settings.enhance_timeout_seconds,
            icebreaker_timeout=settings.icebreaker_timeout_seconds,
        )

    def _request(self, call: Callable[[], str], timeout: float) -> Tuple[str, Optional[str], Optional[str]]:
        """Race one collaborator call against the timer.

        Returns (status, text, error) with status in ok/timeout/error/unconfigured/disabled.
        """
        if not self.enabled:
            return "disabled", None, None
        future: Future = self.executor.submit(call)
        try:
            return "ok", future.result(timeout=timeout), None
        except FutureTimeout:
            # Loser of the race is abandoned, not awaited
            future.cancel()
            return "timeout", None, f"no response within {timeout}s"
        except CollaboratorUnavailable as exc:
            return "unconfigured", None, str(exc)
        except Exception as exc:
            return "error", None, str(exc)

    def _resolve_fallback(self, use_case: str, status: str, error: Optional[str], duration_ms: int) -> None:
        logger.warning(
            "%s resolved to fallback",
            use_case,
            extra={"step": use_case, "status": status, "error": error or "-", "duration_ms": duration_ms},
        )
        if status in ("timeout", "unparseable"):
            # The client traces its own ok/error/unconfigured outcomes
            log_call(
                caller=f"ai_enrichment.{use_case}",
                provider="-",
                model=None,
                operation=use_case,
                duration_ms=duration_ms,
                status=status,
                error=error,
            )

    def enrich(self, role: str, area: str, linkedin_about: Optional[str] = None) -> EnrichmentResult:
        fallback = fallback_enrichment(role, area)
        prompt = build_enhance_prompt(role, area, linkedin_about)
        t0 = time.time()
        status, text, error = self._request(
            lambda: self.client.generate(
                use_case="profile_enrichment",
                prompt=prompt,
                response_schema=ENRICHMENT_RESPONSE_SCHEMA,
                prompt_name="enhance_profile",
            ),
            self.enhance_timeout,
        )
        dt_ms = int((time.time() - t0) * 1000)
        if status == "ok":
            result = decode_enrichment(text)
            if result is not None:
                return result
            status, error = "unparseable", f"unusable output: {(text or '')[:200]!r}"
        self._resolve_fallback("profile_enrichment", status, error, dt_ms)
        return fallback

    def icebreaker(self, sender: ProfileLike, target: ProfileLike) -> str:
        prompt = build_icebreaker_prompt(sender, target)
        t0 = time.time()
        status, text, error = self._request(
            lambda: self.client.generate(use_case="icebreaker", prompt=prompt, prompt_name="icebreaker"),
            self.icebreaker_timeout,
        )
        dt_ms = int((time.time() - t0) * 1000)
        if status == "ok":
            message = sanitize_icebreaker(text or "") if isinstance(text, str) else ""
            if message:
                return message
            status, error = "unparseable", "empty response"
        self._resolve_fallback("icebreaker", status, error, dt_ms)
        return fallback_icebreaker(target)
