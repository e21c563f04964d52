from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from config.settings import get_settings


logger = logging.getLogger(__name__)

# Outcomes a trace record can carry
TRACE_STATUSES = ("ok", "timeout", "error", "unparseable", "unconfigured")


def sha256_text(text: Optional[str]) -> Optional[str]:
    """Prompt fingerprint; prompts themselves are never written to the trace."""
    if not text:
        return None
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def build_record(
    *,
    caller: str,
    provider: str,
    model: Optional[str],
    operation: str,
    status: str,
    **fields: Any,
) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "caller": caller,
        "provider": provider,
        "model": model,
        "operation": operation,
        "status": status if status in TRACE_STATUSES else "error",
        "prompt_name": fields.get("prompt_name"),
        "prompt_hash": fields.get("prompt_hash"),
        "duration_ms": fields.get("duration_ms"),
        "error": fields.get("error"),
        "usage": fields.get("usage") or {},
    }
    if fields.get("extras"):
        record["extras"] = fields["extras"]
    return record


def log_call(
    *,
    caller: str,
    provider: str,
    model: Optional[str],
    operation: str,
    prompt_name: Optional[str] = None,
    prompt_hash: Optional[str] = None,
    duration_ms: Optional[int] = None,
    status: str = "ok",
    error: Optional[str] = None,
    usage: Optional[Dict[str, Any]] = None,
    extras: Optional[Dict[str, Any]] = None,
) -> None:
    """Append one JSON line per collaborator call when LLM_TRACE is on (path: LLM_LOG_PATH)."""
    settings = get_settings()
    if not settings.llm_trace:
        return

    record = build_record(
        caller=caller,
        provider=provider,
        model=model,
        operation=operation,
        status=status,
        prompt_name=prompt_name,
        prompt_hash=prompt_hash,
        duration_ms=duration_ms,
        error=error,
        usage=usage,
        extras=extras,
    )
    path = Path(settings.llm_log_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(record, ensure_ascii=False) + "\n")
    except OSError as exc:
        logger.warning("llm trace write failed", extra={"step": "llm_trace", "error": str(exc)})
