"""Local-disk blob store for resumes, cover letters and avatars."""

from pathlib import Path
import logging

from ..config import PUBLIC_FILES_URL, UPLOAD_DIR
from ..utils.error_handlers import StoreError, ValidationError
from ..utils.validation import sanitize_filename

logger = logging.getLogger(__name__)


class LocalBlobStore:
    """
    Stores files under ``<root>/<bucket>/<path>``.

    Public URLs are ``<public_url>/<bucket>/<path>``; the app serves ``root``
    at that prefix. Paths are sanitized segment by segment, so a caller can
    never escape its bucket.
    """

    def __init__(self, root: str = UPLOAD_DIR, public_url: str = PUBLIC_FILES_URL):
        self.root = Path(root)
        self.public_url = (public_url or "").rstrip("/")

    def _key(self, bucket: str, path: str) -> str:
        segments = [s for s in (path or "").replace("\\", "/").split("/") if s]
        if not segments:
            raise ValidationError("File path is required")
        return "/".join([sanitize_filename(bucket)] + [sanitize_filename(s) for s in segments])

    def _file(self, bucket: str, path: str) -> Path:
        return self.root / self._key(bucket, path)

    def upload(self, bucket: str, path: str, data: bytes, overwrite: bool = False) -> str:
        """
        Write ``data`` and return the stored key (``bucket/path``).

        Raises StoreError when the file exists and ``overwrite`` is False, or
        when the disk write fails.
        """
        target = self._file(bucket, path)
        if target.exists() and not overwrite:
            raise StoreError("A file already exists at this location", details={"path": self._key(bucket, path)})
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            logger.error("Failed to store %s: %s", target, e)
            raise StoreError("Failed to store file") from e
        logger.info("Stored blob %s (%d bytes)", self._key(bucket, path), len(data))
        return self._key(bucket, path)

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_url}/{self._key(bucket, path)}"

    def path_from_url(self, bucket: str, url: str | None) -> str | None:
        """Inverse of ``get_public_url``; None when ``url`` is not one of ours."""
        prefix = f"{self.public_url}/{sanitize_filename(bucket)}/"
        if not url or not url.startswith(prefix):
            return None
        return url[len(prefix):].split("?", 1)[0] or None

    def exists(self, bucket: str, path: str) -> bool:
        return self._file(bucket, path).is_file()

    def remove(self, bucket: str, path: str) -> bool:
        target = self._file(bucket, path)
        if not target.exists():
            return False
        try:
            target.unlink()
        except OSError as e:
            logger.error("Failed to remove %s: %s", target, e)
            raise StoreError("Failed to remove file") from e
        logger.info("Removed blob %s", self._key(bucket, path))
        return True
