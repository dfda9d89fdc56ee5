from fastapi import APIRouter, Depends, File, UploadFile

from ..config import AVATAR_MAX_BYTES
from ..schemas.recruiter import RecruiterOut
from ..services.identity import Principal
from ..services.recruiters import RecruiterProfileInput, RecruiterProfileRepository
from ..utils.dependencies import get_recruiter_profiles
from ..utils.error_handlers import ValidationError, get_error_message
from ..utils.roles import recruiter_only

router = APIRouter(prefix="/recruiters", tags=["Recruiters"])


def _profile_payload(profile) -> dict:
    return RecruiterOut.model_validate(profile).model_dump(mode="json")


@router.get("/me")
def my_profile(
    principal: Principal = Depends(recruiter_only),
    profiles: RecruiterProfileRepository = Depends(get_recruiter_profiles),
):
    return {"success": True, "profile": _profile_payload(profiles.get_or_create(principal))}


@router.put("/me")
def save_my_profile(
    payload: RecruiterProfileInput,
    principal: Principal = Depends(recruiter_only),
    profiles: RecruiterProfileRepository = Depends(get_recruiter_profiles),
):
    profile = profiles.save(principal, payload)
    return {"success": True, "profile": _profile_payload(profile)}


@router.post("/me/avatar")
async def upload_my_avatar(
    file: UploadFile = File(...),
    principal: Principal = Depends(recruiter_only),
    profiles: RecruiterProfileRepository = Depends(get_recruiter_profiles),
):
    if not file or not file.filename:
        raise ValidationError("Missing file")
    data = await file.read(AVATAR_MAX_BYTES + 1)
    if len(data) > AVATAR_MAX_BYTES:
        raise ValidationError(get_error_message("avatar_too_large"))
    profile = profiles.upload_avatar(principal, file.filename, data)
    return {"success": True, "profile": _profile_payload(profile)}


@router.delete("/me/avatar")
def remove_my_avatar(
    principal: Principal = Depends(recruiter_only),
    profiles: RecruiterProfileRepository = Depends(get_recruiter_profiles),
):
    profile = profiles.remove_avatar(principal)
    return {"success": True, "profile": _profile_payload(profile)}
