"""
Candidate profiles and their uploaded files.

Identity fields live on ``users``; everything else a candidate edits lives on
``candidates``. The only cross-table write is mirroring ``full_name`` onto
``users.name``, which is best-effort: if it fails the profile save stands.
"""
import logging
from typing import Any

from pydantic import BaseModel

from ..models.candidate import Candidate
from ..utils.error_handlers import AuthorizationError, StoreError, get_error_message
from ..utils.validation import file_extension, validate_email, validate_string_field
from .blob_store import LocalBlobStore
from .document_store import DocumentStore
from .identity import Principal
from .uploads import (
    AVATARS_BUCKET,
    DOCUMENT_EXTENSIONS,
    IMAGE_EXTENSIONS,
    RESUMES_BUCKET,
    check_upload,
    discard_replaced,
)

logger = logging.getLogger(__name__)


class CandidateProfileInput(BaseModel):
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    education: str | None = None
    experience: str | None = None
    skills: str | None = None


_PROFILE_LIMITS = {
    "full_name": 255,
    "phone": 50,
    "education": 5000,
    "experience": 5000,
    "skills": 2000,
}


class CandidateProfileRepository:
    def __init__(self, store: DocumentStore, blobs: LocalBlobStore):
        self.store = store
        self.blobs = blobs

    def _require_self(self, principal: Principal, user_id: str | None) -> str:
        target = user_id or principal.id
        if not principal.is_candidate or target != principal.id:
            raise AuthorizationError(get_error_message("profile_forbidden"))
        return target

    def get(self, user_id: str) -> Candidate | None:
        return self.store.get("candidates", user_id)

    def get_or_create(self, principal: Principal) -> Candidate:
        user_id = self._require_self(principal, None)
        profile = self.get(user_id)
        if profile is not None:
            return profile
        # Older accounts may predate the profile row.
        return self.store.insert(
            "candidates",
            {"user_id": user_id, "email": principal.email, "full_name": principal.email.split("@", 1)[0]},
        )

    def save(self, principal: Principal, data: CandidateProfileInput | dict[str, Any], user_id: str | None = None) -> Candidate:
        """Upsert the profile fields that were provided."""
        user_id = self._require_self(principal, user_id)
        payload = data if isinstance(data, CandidateProfileInput) else CandidateProfileInput.model_validate(data or {})

        patch: dict[str, Any] = {}
        for name in payload.model_fields_set:
            value = getattr(payload, name)
            if name == "email":
                patch["email"] = validate_email(value) if value else None
                continue
            patch[name] = validate_string_field(
                value, name.replace("_", " ").capitalize(), max_length=_PROFILE_LIMITS[name], required=False
            )

        profile = self.get_or_create(principal)
        previous_name = profile.full_name
        if patch:
            profile = self.store.update("candidates", user_id, patch)

        if "full_name" in patch and patch["full_name"] != previous_name:
            self._sync_user_name(user_id, patch["full_name"])
        return profile

    def _sync_user_name(self, user_id: str, name: str | None) -> None:
        try:
            self.store.update("users", user_id, {"name": name})
        except StoreError as e:
            logger.warning("Profile saved but user name sync failed for %s: %s", user_id, e.message)

    def _resume_in_use(self, url: str | None) -> bool:
        # Applications keep pointing at the resume they were sent with.
        return bool(url) and self.store.first("applications", {"resume_url": url}) is not None

    def upload_resume(self, principal: Principal, filename: str, data: bytes) -> Candidate:
        user_id = self._require_self(principal, None)
        safe_name = check_upload(filename, data, DOCUMENT_EXTENSIONS, "invalid_file_type")
        path = f"{user_id}/{safe_name}"
        # If the record write below fails the blob stays behind; orphans are acceptable.
        self.blobs.upload(RESUMES_BUCKET, path, data, overwrite=True)
        previous_url = self.get_or_create(principal).resume_url
        profile = self.store.update(
            "candidates",
            user_id,
            {"resume_url": self.blobs.get_public_url(RESUMES_BUCKET, path), "resume_name": safe_name},
        )
        if not self._resume_in_use(previous_url):
            discard_replaced(self.blobs, RESUMES_BUCKET, previous_url, path)
        return profile

    def remove_resume(self, principal: Principal) -> Candidate:
        """Delete the stored resume and clear it from the profile. No resume is a no-op."""
        profile = self.get_or_create(principal)
        path = self.blobs.path_from_url(RESUMES_BUCKET, profile.resume_url)
        if path is not None and not self._resume_in_use(profile.resume_url):
            self.blobs.remove(RESUMES_BUCKET, path)
        if profile.resume_url is None and profile.resume_name is None:
            return profile
        logger.info("Resume removed for %s", profile.user_id)
        return self.store.update("candidates", profile.user_id, {"resume_url": None, "resume_name": None})

    def upload_avatar(self, principal: Principal, filename: str, data: bytes) -> Candidate:
        user_id = self._require_self(principal, None)
        safe_name = check_upload(filename, data, IMAGE_EXTENSIONS, "invalid_image_type")
        path = f"{user_id}/avatar{file_extension(safe_name)}"
        self.blobs.upload(AVATARS_BUCKET, path, data, overwrite=True)
        previous_url = self.get_or_create(principal).avatar_url
        profile = self.store.update(
            "candidates", user_id, {"avatar_url": self.blobs.get_public_url(AVATARS_BUCKET, path)}
        )
        discard_replaced(self.blobs, AVATARS_BUCKET, previous_url, path)
        return profile

    def remove_avatar(self, principal: Principal) -> Candidate:
        profile = self.get_or_create(principal)
        path = self.blobs.path_from_url(AVATARS_BUCKET, profile.avatar_url)
        if path is not None:
            self.blobs.remove(AVATARS_BUCKET, path)
        if profile.avatar_url is None:
            return profile
        return self.store.update("candidates", profile.user_id, {"avatar_url": None})
