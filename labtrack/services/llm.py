import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from labtrack.config import settings
from labtrack.models.bloodwork import TokenUsageLog

logger = logging.getLogger(__name__)


class LLMCallError(RuntimeError):
    pass


@dataclass
class LLMResult:
    data: Any
    tokens_used: int = 0


def extract_json_obj(raw_text: str) -> dict | None:
    match = re.search(r"\{.*\}", raw_text, flags=re.DOTALL)
    if not match:
        return None
    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return payload if isinstance(payload, dict) else None


def _total_tokens(raw: Any) -> int:
    usage = raw.get("usage") if isinstance(raw, dict) else getattr(raw, "usage", None)
    if usage is None:
        return 0
    total = usage.get("total_tokens") if isinstance(usage, dict) else getattr(usage, "total_tokens", None)
    return int(total or 0)


def record_token_usage(db: Session, user_id: str, feature: str, tokens_used: int) -> None:
    try:
        db.add(TokenUsageLog(user_id=user_id, feature_name=feature, tokens_used=tokens_used))
        db.commit()
    except Exception:
        # Usage accounting must not fail the request that produced the answer.
        db.rollback()
        logger.exception("Failed to log token usage for feature=%s", feature)


def call_llm(
    db: Session,
    prompt: str,
    user_id: str,
    feature: str,
    response_format: str = "json",
    max_tokens: int | None = None,
) -> LLMResult:
    """Send one prompt to the configured model and return its parsed answer."""
    if not settings.llm_enabled or not settings.openai_api_key:
        logger.info("LLM call skipped (no API key) feature=%s user=%s", feature, user_id)
        raise LLMCallError("OPENAI_API_KEY is missing")
    if not prompt:
        raise LLMCallError("No prompt provided")

    try:
        from llama_index.llms.openai import OpenAI
    except ImportError as exc:
        raise LLMCallError("llama_index is not installed") from exc

    additional_kwargs: dict[str, Any] = {}
    if response_format == "json":
        additional_kwargs["response_format"] = {"type": "json_object"}
    llm = OpenAI(
        model=settings.llm_model,
        api_key=settings.openai_api_key,
        temperature=settings.llm_temperature,
        max_tokens=max_tokens,
        additional_kwargs=additional_kwargs,
    )

    logger.info("LLM called feature=%s user=%s prompt_length=%d", feature, user_id, len(prompt))
    try:
        response = llm.complete(prompt)
    except Exception as exc:
        logger.warning("LLM request failed feature=%s: %s", feature, exc)
        raise LLMCallError(f"LLM request failed: {exc}") from exc

    text = getattr(response, "text", None) or ""
    tokens_used = _total_tokens(getattr(response, "raw", None))
    if not text:
        raise LLMCallError("No content received from the language model")

    if response_format == "text":
        data: Any = text
    else:
        data = extract_json_obj(text)
        if data is None:
            raise LLMCallError("Failed to parse JSON response")

    record_token_usage(db, user_id, feature, tokens_used)
    logger.info("LLM success feature=%s user=%s tokens=%d", feature, user_id, tokens_used)
    return LLMResult(data=data, tokens_used=tokens_used)
