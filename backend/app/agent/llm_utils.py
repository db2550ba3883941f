"""Helpers for pulling JSON out of chat model replies."""

import json
import re
from typing import Any

from langchain_core.messages import BaseMessage

from app.core.logging import get_logger

logger = get_logger(__name__)

_FENCED_BLOCK = re.compile(r"```[A-Za-z]*[ \t]*\n(.*?)\n\s*```", re.DOTALL)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_decoder = json.JSONDecoder()


def message_text(message: BaseMessage) -> str:
    """Flatten a message's content, which may be a list of content parts."""
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(str(part.get("text", "")))
    return "".join(parts)


def _strip_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA.sub(r"\1", text)


def _load_container(text: str) -> dict[str, Any] | list[Any] | None:
    try:
        parsed = json.loads(_strip_trailing_commas(text.strip()))
    except ValueError:
        return None
    return parsed if isinstance(parsed, (dict, list)) else None


def _first_embedded(text: str) -> dict[str, Any] | list[Any] | None:
    """Decode the first JSON object or array embedded in prose."""
    text = _strip_trailing_commas(text)
    for index, char in enumerate(text):
        if char not in "{[":
            continue
        try:
            parsed, _ = _decoder.raw_decode(text, index)
        except ValueError:
            continue
        if isinstance(parsed, (dict, list)):
            return parsed
    return None


def parse_llm_json_response(content: str | None) -> dict[str, Any] | list[Any]:
    """Parse a model reply that should contain JSON.

    Tried in order: the whole reply, the first fenced code block, then the
    first object/array embedded in surrounding text. Trailing commas are
    tolerated.

    Raises:
        ValueError: if the reply is empty or holds no JSON object/array.
    """
    if not content:
        raise ValueError("Empty LLM response")

    parsed = _load_container(content)
    if parsed is not None:
        return parsed

    block = _FENCED_BLOCK.search(content)
    if block:
        parsed = _load_container(block.group(1))
        if parsed is not None:
            logger.debug("Parsed JSON from fenced block")
            return parsed

    parsed = _first_embedded(content)
    if parsed is not None:
        logger.debug("Parsed JSON embedded in text")
        return parsed

    logger.error("Failed to parse LLM JSON response", content_preview=content[:200])
    raise ValueError("Failed to parse LLM JSON response: no valid JSON found")
