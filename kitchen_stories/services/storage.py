import logging
import secrets
import time
from pathlib import Path
from typing import Optional

from ..errors import UploadRejected, UploadTooLarge

logger = logging.getLogger("kitchen_stories.storage")

PUBLIC_PREFIX = "/uploads/"


class LocalImageStorage:
    """Recipe images on local disk, published under ``/uploads``."""

    def __init__(self, root: Path, max_bytes: int, allowed_types: list[str]):
        self.root = Path(root)
        self.max_bytes = max_bytes
        self.allowed_types = [t.lower().lstrip(".") for t in allowed_types]

    def validate(self, filename: str, content_type: Optional[str]) -> str:
        """
        Check the upload's extension and MIME type against the allow-list.
        Returns the lower-cased extension (with dot).
        """
        ext = Path(filename or "").suffix.lower()
        mime = (content_type or "").lower()
        ext_ok = ext.lstrip(".") in self.allowed_types
        mime_ok = mime.startswith("image/") and mime.split("/", 1)[1] in self.allowed_types
        if not (ext_ok and mime_ok):
            logger.warning(f"Rejected upload {filename!r} ({content_type})")
            raise UploadRejected()
        return ext

    def generate_name(self, ext: str) -> str:
        return f"{int(time.time() * 1000)}-{secrets.token_hex(8)}{ext}"

    def put_bytes(self, filename: str, content_type: Optional[str], data: bytes) -> str:
        """
        Save an uploaded image.
        Returns: Public URL path, e.g. /uploads/1700000000000-123456789.png
        """
        ext = self.validate(filename, content_type)
        if len(data) > self.max_bytes:
            raise UploadTooLarge(f"Images are limited to {self.max_bytes} bytes")

        self.root.mkdir(parents=True, exist_ok=True)
        name = self.generate_name(ext)
        file_path = self.root / name
        with open(file_path, "wb") as f:
            f.write(data)

        logger.info(f"Saved {len(data)} bytes to {file_path}")
        return f"{PUBLIC_PREFIX}{name}"

    def path_for(self, image_url: str) -> Optional[Path]:
        """Map a public /uploads URL back to its file; None for anything else."""
        if not image_url or not image_url.startswith(PUBLIC_PREFIX):
            return None
        name = image_url[len(PUBLIC_PREFIX):]
        if not name or "/" in name or "\\" in name or ".." in name:
            return None
        return self.root / name

    def exists(self, image_url: str) -> bool:
        path = self.path_for(image_url)
        return path is not None and path.exists()

    def delete(self, image_url: Optional[str]) -> bool:
        """
        Delete a stored image.
        Returns True if deleted or didn't exist, False on error.
        References outside /uploads (external URLs) are not ours to delete.
        """
        if not image_url:
            return True
        if not image_url.startswith(PUBLIC_PREFIX):
            logger.debug(f"Skipping delete of external image {image_url}")
            return True
        file_path = self.path_for(image_url)
        if file_path is None:
            logger.warning(f"Invalid delete key: {image_url}")
            return False
        try:
            if file_path.exists():
                file_path.unlink()
                logger.info(f"Deleted file {file_path}")
            return True
        except OSError as e:
            logger.error(f"Failed to delete {file_path}: {e}")
            return False
