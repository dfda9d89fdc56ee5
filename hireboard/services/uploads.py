import logging

from ..config import MAX_UPLOAD_BYTES
from ..utils.error_handlers import StoreError, ValidationError, get_error_message
from ..utils.validation import file_extension, sanitize_filename
from .blob_store import LocalBlobStore

logger = logging.getLogger(__name__)

DOCUMENT_EXTENSIONS = {".pdf", ".doc", ".docx"}
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}

RESUMES_BUCKET = "resumes"
COVER_LETTERS_BUCKET = "cover_letters"
AVATARS_BUCKET = "avatars"


def check_upload(filename: str, data: bytes, allowed_extensions: set[str], type_error_key: str) -> str:
    """Validate an incoming file and return its sanitized name."""
    safe_name = sanitize_filename(filename)
    if file_extension(safe_name) not in allowed_extensions:
        logger.info("Rejected upload %s: extension not allowed", safe_name)
        raise ValidationError(get_error_message(type_error_key), details={"filename": safe_name})
    if not data:
        logger.info("Rejected upload %s: empty file", safe_name)
        raise ValidationError("File is empty", details={"filename": safe_name})
    if len(data) > MAX_UPLOAD_BYTES:
        logger.info("Rejected upload %s: %d bytes over the limit", safe_name, len(data))
        raise ValidationError(get_error_message("file_too_large"), details={"filename": safe_name})
    return safe_name


def discard_replaced(blobs: LocalBlobStore, bucket: str, old_url: str | None, new_path: str) -> None:
    """Remove the blob behind ``old_url`` after an upload wrote ``new_path`` instead. Failures only log."""
    old_path = blobs.path_from_url(bucket, old_url)
    if old_path is None or old_path == new_path:
        return
    try:
        blobs.remove(bucket, old_path)
    except (StoreError, ValidationError) as e:
        logger.warning("Could not remove replaced blob %s/%s: %s", bucket, old_path, e.message)


def store_cover_letter(blobs: LocalBlobStore, *, candidate_id: str, job_id: str, filename: str, data: bytes) -> str:
    """One cover letter per (candidate, job); re-uploads overwrite. Returns its public URL."""
    safe_name = check_upload(filename, data, DOCUMENT_EXTENSIONS, "invalid_file_type")
    path = f"{candidate_id}_{job_id}{file_extension(safe_name)}"
    blobs.upload(COVER_LETTERS_BUCKET, path, data, overwrite=True)
    return blobs.get_public_url(COVER_LETTERS_BUCKET, path)
