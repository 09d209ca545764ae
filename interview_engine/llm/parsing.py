"""
Parsing helpers for structured LLM replies.
"""

import json
import re
from typing import Any

from interview_engine.llm.exceptions import LLMParseError

QUOTED_QUESTION_PATTERN = re.compile(r'"([^"\n]{5,}?\?)"')


def extract_json_object(content: str) -> dict[str, Any]:
    """
    Parse a JSON object from an LLM reply.

    Tries the whole reply first, then the slice from the first "{" to the last
    "}" for replies that wrap the JSON in prose or code fences.

    Args:
        content: Raw reply text

    Returns:
        Parsed object

    Raises:
        LLMParseError: No JSON object could be parsed
    """
    if not content or not content.strip():
        raise LLMParseError("Empty LLM response")

    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        start = content.find("{")
        end = content.rfind("}")
        if start == -1 or end <= start:
            raise LLMParseError(f"No JSON object in LLM response: {content[:100]}")
        try:
            data = json.loads(content[start : end + 1])
        except json.JSONDecodeError as e:
            raise LLMParseError(f"Invalid JSON in LLM response: {e}") from e

    if not isinstance(data, dict):
        raise LLMParseError(f"Expected JSON object, got {type(data).__name__}")

    return data


def salvage_questions(content: str) -> list[str]:
    """
    Pull quoted interrogative sentences out of an unparseable reply.

    Args:
        content: Raw reply text

    Returns:
        Unique question strings in order of appearance (may be empty)
    """
    found = []
    for match in QUOTED_QUESTION_PATTERN.finditer(content or ""):
        text = match.group(1).strip()
        if text and text not in found:
            found.append(text)
    return found


def clean_question_text(content: str) -> str:
    """Strip whitespace and wrapping quotes from a free-text question reply."""
    return content.strip().strip('"').strip("'").strip()
