import asyncio
import logging
from pathlib import Path
from typing import Optional

import google.generativeai as genai

from ...exceptions import AIProviderError, ConfigurationError
from ...application.ports.ai_provider import AIProvider
from ...media_utils import get_mime_type

logger = logging.getLogger(__name__)


class GeminiProvider(AIProvider):
    """Single multimodal call against Gemini: one prompt, one inline image."""

    def __init__(self, api_key: Optional[str], model_name: str, timeout: float = 120.0) -> None:
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY is not configured")
        genai.configure(api_key=api_key)
        self.model_name = model_name
        self.timeout = timeout
        self.model = genai.GenerativeModel(model_name)

    async def analyze(self, image_path: str, prompt: str) -> str:
        loop = asyncio.get_running_loop()
        try:
            image_bytes = await loop.run_in_executor(None, Path(image_path).read_bytes)
        except OSError as e:
            raise AIProviderError(f"Could not read image {image_path}: {e}") from e

        mime_type = get_mime_type(image_path)
        logger.info(f"Sending {image_path} ({mime_type}, {len(image_bytes)} bytes) to {self.model_name}")

        try:
            result = await self.model.generate_content_async(
                [
                    prompt,
                    {"mime_type": mime_type, "data": image_bytes},
                ],
                request_options={"timeout": self.timeout},
            )
        except Exception as e:
            raise AIProviderError(f"Gemini request failed: {e}") from e

        try:
            text = result.text
        except ValueError:
            # Raised by the SDK when the candidate carries no text parts (e.g. blocked output)
            text = None

        if not text:
            raise AIProviderError("Gemini returned no text content")

        logger.info(f"Gemini analysis finished, {len(text)} chars")
        return text
