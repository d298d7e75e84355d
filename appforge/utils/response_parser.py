"""
Parsing helpers for model output.

Models wrap code and JSON in markdown fences more often than not; these
helpers recover the payload from either form.
"""

from typing import Any, Dict, Optional
import json
import re

from appforge.core.exceptions import AIResponseParseError
from appforge.core.logging_config import logger


# Opening fence with optional language tag, e.g. ```tsx
_OPENING_FENCE = re.compile(r"^\s*```[\w+.-]*[ \t]*\r?\n?")
_CLOSING_FENCE = re.compile(r"\r?\n?```\s*$")
_FENCED_BLOCK = re.compile(r"```(?:json)?\s*\n?(.*?)```", re.DOTALL)


class ResponseParser:
    """Extract code and JSON payloads from model responses"""

    @staticmethod
    def strip_code_fences(response: str) -> str:
        """
        Remove a surrounding markdown fence from generated file content.

        Content without fences is returned trimmed but otherwise unchanged.
        """
        text = (response or "").strip()
        if not text.startswith("```"):
            return text

        text = _OPENING_FENCE.sub("", text, count=1)
        text = _CLOSING_FENCE.sub("", text, count=1)
        return text.strip()

    @staticmethod
    def _first_json_object(text: str) -> Optional[str]:
        start = text.find("{")
        end = text.rfind("}")
        if start == -1 or end <= start:
            return None
        return text[start:end + 1]

    @staticmethod
    def extract_json(response: str) -> Dict[str, Any]:
        """
        Parse the JSON object in a response, fenced or bare.

        Raises:
            AIResponseParseError: if no JSON object can be decoded
        """
        text = (response or "").strip()
        candidates = [match.group(1).strip() for match in _FENCED_BLOCK.finditer(text)]
        candidates.append(text)

        for candidate in candidates:
            for payload in (candidate, ResponseParser._first_json_object(candidate)):
                if not payload:
                    continue
                try:
                    data = json.loads(payload)
                except json.JSONDecodeError:
                    continue
                if isinstance(data, dict):
                    return data

        logger.warning(f"[ResponseParser] No JSON object found in response ({len(text)} chars)")
        raise AIResponseParseError("No JSON object found in model response")
