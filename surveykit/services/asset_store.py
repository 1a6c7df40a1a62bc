"""Binary asset storage for survey banner images.

Only the returned URL matters to the rest of the system; where the bytes
live is up to the implementation.
"""

import re
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from surveykit.services.survey_store import translate_storage_error
from surveykit.logging_config import get_logger

logger = get_logger(__name__)

MAX_ASSET_BYTES = 5 * 1024 * 1024
ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def sniff_image_type(content: bytes) -> Optional[str]:
    """Name the raster format from its leading bytes, or None if unknown."""
    if content.startswith(b"\x89PNG\r\n\x1a\n"):
        return "png"
    if content.startswith(b"\xff\xd8\xff"):
        return "jpeg"
    if content[:6] in (b"GIF87a", b"GIF89a"):
        return "gif"
    if content[:4] == b"RIFF" and content[8:12] == b"WEBP":
        return "webp"
    return None


def extension_type(name: str) -> Optional[str]:
    suffix = Path(name).suffix.lower()
    if suffix not in ALLOWED_EXTENSIONS:
        return None
    return "jpeg" if suffix == ".jpg" else suffix[1:]


class AssetRejectedError(Exception):
    """Raised when an upload is not an acceptable image."""
    pass


def safe_filename(filename: str) -> str:
    """Strip directories and unsafe characters from an uploaded name."""
    name = Path(filename or "").name
    name = _UNSAFE_CHARS.sub("_", name).lstrip(".")
    return name or "upload"


class AssetStore(ABC):
    """Interface for uploading banner images."""

    @abstractmethod
    def upload(self, filename: str, content: bytes) -> str:
        """Store the bytes and return their public URL."""


class LocalAssetStore(AssetStore):
    """Writes assets below a directory served at ``base_url``.

    Files land at ``banners/<epoch millis>_<safe name>``.
    """

    def __init__(self, root_dir: str, base_url: str):
        self.root_dir = Path(root_dir)
        self.base_url = base_url.rstrip("/")

    def upload(self, filename: str, content: bytes) -> str:
        """Store an uploaded banner.

        Raises:
            AssetRejectedError: If the file is empty, too large or not an image
            StoragePermissionError: If the directory is not writable
            StorageError: For any other write failure
        """
        name = safe_filename(filename)
        declared = extension_type(name)
        if declared is None:
            raise AssetRejectedError(f"Unsupported file type: {name}")
        if not content:
            raise AssetRejectedError("Uploaded file is empty")
        if len(content) > MAX_ASSET_BYTES:
            raise AssetRejectedError("Uploaded file is too large")
        if sniff_image_type(content) != declared:
            raise AssetRejectedError(f"File content is not a {declared.upper()} image: {name}")

        relative = f"banners/{int(time.time() * 1000)}_{name}"
        target = self.root_dir / relative
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as e:
            logger.error(f"Error writing asset {relative}: {e}")
            raise translate_storage_error(e, "upload the image")

        logger.info(f"Stored asset {relative} ({len(content)} bytes)")
        return f"{self.base_url}/{relative}"
