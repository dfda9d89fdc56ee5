import logging

from fastapi import APIRouter, Depends, File, UploadFile

from ..config import MAX_UPLOAD_BYTES
from ..schemas.candidate import CandidateOut
from ..services.candidates import CandidateProfileInput, CandidateProfileRepository
from ..services.identity import Principal
from ..utils.dependencies import get_profiles
from ..utils.error_handlers import ValidationError, get_error_message
from ..utils.roles import candidate_only

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/candidates", tags=["Candidates"])


def _profile_payload(profile) -> dict:
    return CandidateOut.model_validate(profile).model_dump(mode="json")


async def _read_file(file: UploadFile) -> tuple[str, bytes]:
    if not file or not file.filename:
        raise ValidationError("Missing file")
    data = await file.read(MAX_UPLOAD_BYTES + 1)
    if len(data) > MAX_UPLOAD_BYTES:
        raise ValidationError(get_error_message("file_too_large"))
    return file.filename, data


@router.get("/me")
def my_profile(
    principal: Principal = Depends(candidate_only),
    profiles: CandidateProfileRepository = Depends(get_profiles),
):
    return {"success": True, "profile": _profile_payload(profiles.get_or_create(principal))}


@router.put("/me")
def save_my_profile(
    payload: CandidateProfileInput,
    principal: Principal = Depends(candidate_only),
    profiles: CandidateProfileRepository = Depends(get_profiles),
):
    profile = profiles.save(principal, payload)
    return {"success": True, "profile": _profile_payload(profile)}


@router.post("/me/resume")
async def upload_my_resume(
    file: UploadFile = File(...),
    principal: Principal = Depends(candidate_only),
    profiles: CandidateProfileRepository = Depends(get_profiles),
):
    filename, data = await _read_file(file)
    profile = profiles.upload_resume(principal, filename, data)
    return {"success": True, "profile": _profile_payload(profile)}


@router.post("/me/avatar")
async def upload_my_avatar(
    file: UploadFile = File(...),
    principal: Principal = Depends(candidate_only),
    profiles: CandidateProfileRepository = Depends(get_profiles),
):
    filename, data = await _read_file(file)
    profile = profiles.upload_avatar(principal, filename, data)
    return {"success": True, "profile": _profile_payload(profile)}


@router.delete("/me/resume")
def remove_my_resume(
    principal: Principal = Depends(candidate_only),
    profiles: CandidateProfileRepository = Depends(get_profiles),
):
    profile = profiles.remove_resume(principal)
    return {"success": True, "profile": _profile_payload(profile)}


@router.delete("/me/avatar")
def remove_my_avatar(
    principal: Principal = Depends(candidate_only),
    profiles: CandidateProfileRepository = Depends(get_profiles),
):
    profile = profiles.remove_avatar(principal)
    return {"success": True, "profile": _profile_payload(profile)}
