import os
import random
from datetime import datetime, timezone

from ...application.ports.storage_repo import StorageRepository


class LocalStorageRepository(StorageRepository):
    def __init__(self, upload_dir: str) -> None:
        self.upload_dir = upload_dir

    def save_bytes(self, extension: str, data: bytes) -> str:
        os.makedirs(self.upload_dir, exist_ok=True)
        extension = extension if not extension or extension.startswith(".") else f".{extension}"
        unique = f"{int(datetime.now(timezone.utc).timestamp() * 1000)}-{random.randint(0, 999_999_999)}"
        path = os.path.join(self.upload_dir, f"{unique}{extension.lower()}")
        with open(path, "wb") as f:
            f.write(data)
        return path

    def delete(self, path: str) -> None:
        os.remove(path)
