from typing import Protocol


class StorageRepository(Protocol):
    def save_bytes(self, extension: str, data: bytes) -> str:
        ...

    def delete(self, path: str) -> None:
        ...
