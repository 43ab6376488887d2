"""Template substitution and structured-metadata extraction for model text."""

import json
import logging
import re
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

_METADATA_BLOCK = re.compile(r"```json[ \t]*\r?\n(.*?)\r?\n?[ \t]*```", re.DOTALL)
_PLACEHOLDER = re.compile(r"\{\{\s*([A-Za-z0-9_]+)\s*\}\}")


def build(template: str, variables: Mapping[str, Any]) -> str:
    """Replace every `{{key}}` placeholder with its value.

    Placeholders without a matching key are left verbatim.
    """
    prompt = template
    for key, value in variables.items():
        prompt = prompt.replace("{{" + key + "}}", "" if value is None else str(value))
    return prompt


def unresolved_placeholders(prompt: str) -> list[str]:
    """Names of `{{...}}` placeholders still present in a built prompt."""
    return _PLACEHOLDER.findall(prompt)


def extract_metadata(response_text: str) -> Optional[Dict[str, Any]]:
    """Parse the first ```json fenced block in the response, if any.

    Returns None when there is no block, the block is not valid JSON, or the
    JSON is not an object. Parse failures never propagate.
    """
    if not response_text:
        return None

    match = _METADATA_BLOCK.search(response_text)
    if not match:
        return None

    try:
        metadata = json.loads(match.group(1))
    except json.JSONDecodeError as exc:
        logger.warning("Failed to parse metadata block: %s", exc)
        return None

    if not isinstance(metadata, dict):
        logger.warning(
            "Ignoring metadata block of type %s", type(metadata).__name__
        )
        return None
    return metadata


def strip_metadata_block(response_text: str) -> str:
    """Response text with ```json fenced blocks removed, for display."""
    if not response_text:
        return ""
    return _METADATA_BLOCK.sub("", response_text).strip()
