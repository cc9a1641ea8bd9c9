from typing import Protocol


class AIProvider(Protocol):
    async def analyze(self, image_path: str, prompt: str) -> str:
        ...
