import os
from typing import Tuple
from PIL import Image

# Extension -> MIME type for the image formats accepted by the upload endpoint
IMAGE_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}
DEFAULT_IMAGE_MIME_TYPE = "image/png"


def get_mime_type(file_path: str) -> str:
    """Resolve the MIME type from the file extension, falling back to PNG."""
    ext = os.path.splitext(file_path)[1].lower()
    return IMAGE_MIME_TYPES.get(ext, DEFAULT_IMAGE_MIME_TYPE)


def get_image_size(file_path: str) -> Tuple[int, int]:
    """Return (width, height) in pixels; raises OSError for unreadable images."""
    with Image.open(file_path) as img:
        return img.size
