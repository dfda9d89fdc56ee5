"""
Recruiter profiles: contact details, company and position, plus a photo.

A saved profile must name the recruiter, their company and their position;
phone is optional but must look like ``+15551234567``. The login email is not
editable here.
"""
import logging
import re
from typing import Any

from pydantic import BaseModel

from ..config import AVATAR_MAX_BYTES
from ..models.recruiter import Recruiter
from ..utils.error_handlers import AuthorizationError, StoreError, ValidationError, get_error_message
from ..utils.validation import file_extension, validate_string_field
from .blob_store import LocalBlobStore
from .document_store import DocumentStore
from .identity import Principal
from .uploads import AVATARS_BUCKET, IMAGE_EXTENSIONS, check_upload, discard_replaced

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^\+?\d{10,15}$")
REQUIRED_FIELDS = ("full_name", "company_name", "position")

_LIMITS = {"full_name": 255, "company_name": 150, "position": 150}


class RecruiterProfileInput(BaseModel):
    full_name: str | None = None
    phone: str | None = None
    company_name: str | None = None
    position: str | None = None


class RecruiterProfileRepository:
    def __init__(self, store: DocumentStore, blobs: LocalBlobStore):
        self.store = store
        self.blobs = blobs

    def _require_self(self, principal: Principal) -> str:
        if not principal.is_recruiter:
            raise AuthorizationError(get_error_message("profile_forbidden"))
        return principal.id

    def get(self, user_id: str) -> Recruiter | None:
        return self.store.get("recruiters", user_id)

    def get_or_create(self, principal: Principal) -> Recruiter:
        user_id = self._require_self(principal)
        profile = self.get(user_id)
        if profile is not None:
            return profile
        user = self.store.get("users", user_id)
        name = (user.name if user is not None else None) or principal.email.split("@", 1)[0]
        return self.store.insert("recruiters", {"user_id": user_id, "email": principal.email, "full_name": name})

    def save(self, principal: Principal, data: RecruiterProfileInput | dict[str, Any]) -> Recruiter:
        """Apply the provided fields; the merged profile must still be complete."""
        user_id = self._require_self(principal)
        payload = data if isinstance(data, RecruiterProfileInput) else RecruiterProfileInput.model_validate(data or {})

        patch: dict[str, Any] = {}
        for name in payload.model_fields_set:
            value = getattr(payload, name)
            if name == "phone":
                patch["phone"] = _clean_phone(value)
                continue
            patch[name] = validate_string_field(
                value, name.replace("_", " ").capitalize(), max_length=_LIMITS[name], required=False
            )

        profile = self.get_or_create(principal)
        missing = [f for f in REQUIRED_FIELDS if not patch.get(f, getattr(profile, f))]
        if missing:
            raise ValidationError(get_error_message("recruiter_profile_incomplete"), details={"missing": missing})

        previous_name = profile.full_name
        if patch:
            profile = self.store.update("recruiters", user_id, patch)
        if "full_name" in patch and patch["full_name"] != previous_name:
            try:
                self.store.update("users", user_id, {"name": patch["full_name"]})
            except StoreError as e:
                logger.warning("Recruiter profile saved but user name sync failed for %s: %s", user_id, e.message)
        return profile

    def upload_avatar(self, principal: Principal, filename: str, data: bytes) -> Recruiter:
        user_id = self._require_self(principal)
        safe_name = check_upload(filename, data, IMAGE_EXTENSIONS, "invalid_image_type")
        if len(data) > AVATAR_MAX_BYTES:
            raise ValidationError(get_error_message("avatar_too_large"), details={"filename": safe_name})
        path = f"{user_id}/avatar{file_extension(safe_name)}"
        self.blobs.upload(AVATARS_BUCKET, path, data, overwrite=True)
        previous_url = self.get_or_create(principal).avatar_url
        profile = self.store.update(
            "recruiters", user_id, {"avatar_url": self.blobs.get_public_url(AVATARS_BUCKET, path)}
        )
        discard_replaced(self.blobs, AVATARS_BUCKET, previous_url, path)
        return profile

    def remove_avatar(self, principal: Principal) -> Recruiter:
        profile = self.get_or_create(principal)
        path = self.blobs.path_from_url(AVATARS_BUCKET, profile.avatar_url)
        if path is not None:
            self.blobs.remove(AVATARS_BUCKET, path)
        if profile.avatar_url is None:
            return profile
        logger.info("Avatar removed for recruiter %s", profile.user_id)
        return self.store.update("recruiters", profile.user_id, {"avatar_url": None})


def _clean_phone(value: Any) -> str | None:
    phone = validate_string_field(value, "Phone", max_length=20, required=False)
    if phone is None:
        return None
    if not PHONE_PATTERN.match(phone):
        raise ValidationError(get_error_message("invalid_phone"), details={"field": "phone"})
    return phone
