from dataclasses import dataclass
from pathlib import Path
import logging

from ...exceptions import ConfigurationError

logger = logging.getLogger(__name__)

USER_INTENT_TOKEN = "{USER_INTENT}"
IMAGE_WIDTH_TOKEN = "{IMAGE_WIDTH}"
IMAGE_HEIGHT_TOKEN = "{IMAGE_HEIGHT}"


def build_prompt(template: str, user_intent: str, width: int, height: int) -> str:
    # Only the first occurrence of each token is substituted.
    return (
        template
        .replace(USER_INTENT_TOKEN, user_intent, 1)
        .replace(IMAGE_WIDTH_TOKEN, str(int(width)), 1)
        .replace(IMAGE_HEIGHT_TOKEN, str(int(height)), 1)
    )


@dataclass(frozen=True)
class PromptBuilder:
    template: str

    @classmethod
    def from_file(cls, path: str) -> "PromptBuilder":
        try:
            template = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Prompt template could not be loaded from {path}: {e}") from e
        logger.info(f"Loaded prompt template from {path} ({len(template)} chars)")
        return cls(template=template)

    def build(self, user_intent: str, width: int, height: int) -> str:
        return build_prompt(self.template, user_intent, width, height)
