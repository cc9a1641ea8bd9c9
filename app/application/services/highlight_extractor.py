import json
import logging
import re
from typing import Any, List

logger = logging.getLogger(__name__)

JSON_BLOCK_RE = re.compile(r"```json\s*([\s\S]*?)\s*```")


def extract_highlights(ai_result: str) -> List[Any]:
    """Pull the ``highlights`` list out of the first fenced JSON block.

    Highlights are an optional enrichment of the analysis text: a missing
    block, invalid JSON or an unexpected shape all yield an empty list.
    Entries are returned as-is, in order.
    """
    if not ai_result:
        return []

    match = JSON_BLOCK_RE.search(ai_result)
    if not match:
        return []

    try:
        parsed = json.loads(match.group(1))
    except ValueError as e:
        logger.warning(f"Could not parse highlight JSON block: {e}")
        return []

    if not isinstance(parsed, dict):
        logger.warning("Highlight JSON block is not an object, ignoring it")
        return []

    highlights = parsed.get("highlights")
    if not isinstance(highlights, list):
        return []
    return highlights
