import logging

from fastapi import APIRouter, Depends, File, Query, UploadFile

from ..config import JOBS_PAGE_SIZE, MAX_UPLOAD_BYTES
from ..models.status import JobStatus
from ..schemas.application import ApplicationOut
from ..schemas.job import JobOut
from ..services.applications import ApplicationRepository, NewApplicationInput
from ..services.blob_store import LocalBlobStore
from ..services.candidates import CandidateProfileRepository
from ..services.identity import Principal
from ..services.job_catalog import ALL, SORT_NEWEST, JobCatalog, JobQuery
from ..services.jobs import JobInput, JobRepository
from ..services.uploads import store_cover_letter
from ..utils.dependencies import (
    get_applications,
    get_blob_store,
    get_jobs,
    get_optional_principal,
    get_profiles,
)
from ..utils.error_handlers import DuplicateError, NotFoundError, ValidationError, get_error_message
from ..utils.roles import candidate_only, recruiter_only

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["Jobs"])


def _job_payload(job) -> dict:
    return JobOut.model_validate(job).model_dump(mode="json")


async def _read_upload(upload: UploadFile) -> bytes:
    # Read one byte past the limit so oversize files are detected without buffering them fully.
    data = await upload.read(MAX_UPLOAD_BYTES + 1)
    if len(data) > MAX_UPLOAD_BYTES:
        raise ValidationError(get_error_message("file_too_large"))
    return data


@router.get("")
def browse_jobs(
    q: str = Query(default="", description="Search in title, company and location"),
    location: str = Query(default=ALL),
    company: str = Query(default=ALL),
    sort: str = Query(default=SORT_NEWEST, description="Newest | Oldest | HighestSalary | LowestSalary"),
    page: str = Query(default="1"),
    jobs: JobRepository = Depends(get_jobs),
):
    catalog = JobCatalog(jobs.list_open(), page_size=JOBS_PAGE_SIZE)
    result = catalog.result(page, JobQuery(search=q, location=location, company=company, sort=sort))
    return {
        "success": True,
        "jobs": [_job_payload(j) for j in result["items"]],
        "page": result["page"],
        "page_size": result["page_size"],
        "total": result["total"],
        "total_pages": result["total_pages"],
        "locations": catalog.locations(),
        "companies": catalog.companies(),
    }


@router.get("/mine")
def list_my_jobs(
    principal: Principal = Depends(recruiter_only),
    jobs: JobRepository = Depends(get_jobs),
):
    return {"success": True, "jobs": [_job_payload(j) for j in jobs.list_for_recruiter(principal.id)]}


@router.get("/overview")
def recruiter_overview(
    principal: Principal = Depends(recruiter_only),
    jobs: JobRepository = Depends(get_jobs),
):
    return {"success": True, "overview": jobs.overview(principal.id)}


@router.get("/{job_id}")
def get_job(
    job_id: str,
    principal: Principal | None = Depends(get_optional_principal),
    jobs: JobRepository = Depends(get_jobs),
):
    job = jobs.require(job_id)
    is_owner = principal is not None and principal.id == job.recruiter_id
    if job.status != JobStatus.OPEN.value and not is_owner:
        raise NotFoundError(get_error_message("job_not_found"))
    return {"success": True, "job": _job_payload(job)}


@router.post("", status_code=201)
def create_job(
    payload: JobInput,
    principal: Principal = Depends(recruiter_only),
    jobs: JobRepository = Depends(get_jobs),
):
    job = jobs.create(principal, payload)
    return {"success": True, "job": _job_payload(job)}


@router.patch("/{job_id}")
def update_job(
    job_id: str,
    payload: JobInput,
    principal: Principal = Depends(recruiter_only),
    jobs: JobRepository = Depends(get_jobs),
):
    job = jobs.update(job_id, principal, payload)
    return {"success": True, "job": _job_payload(job)}


@router.post("/{job_id}/close")
def close_job(
    job_id: str,
    principal: Principal = Depends(recruiter_only),
    jobs: JobRepository = Depends(get_jobs),
):
    job = jobs.close(job_id, principal)
    return {"success": True, "job": _job_payload(job)}


@router.delete("/{job_id}")
def delete_job(
    job_id: str,
    principal: Principal = Depends(recruiter_only),
    jobs: JobRepository = Depends(get_jobs),
):
    jobs.delete(job_id, principal)
    return {"success": True, "message": "Job deleted"}


@router.post("/{job_id}/apply", status_code=201)
async def apply_to_job(
    job_id: str,
    cover_letter: UploadFile | None = File(default=None),
    principal: Principal = Depends(candidate_only),
    applications: ApplicationRepository = Depends(get_applications),
    profiles: CandidateProfileRepository = Depends(get_profiles),
    jobs: JobRepository = Depends(get_jobs),
    blobs: LocalBlobStore = Depends(get_blob_store),
):
    """
    Apply with the resume already on the candidate's profile, plus an optional cover letter.
    """
    jobs.require(job_id)
    profile = profiles.get_or_create(principal)
    if not profile.resume_url:
        raise ValidationError(get_error_message("no_resume"))

    # Fast-path duplicate check before touching the blob store.
    if applications.find_by_job_and_candidate(job_id, principal.id) is not None:
        raise DuplicateError(get_error_message("already_applied"), details={"job_id": job_id})

    cover_letter_url = None
    if cover_letter is not None and cover_letter.filename:
        data = await _read_upload(cover_letter)
        cover_letter_url = store_cover_letter(
            blobs, candidate_id=principal.id, job_id=job_id, filename=cover_letter.filename, data=data
        )

    application = applications.create(
        NewApplicationInput(
            job_id=job_id,
            candidate_id=principal.id,
            full_name=profile.full_name or principal.email,
            email=profile.email or principal.email,
            resume_url=profile.resume_url,
            resume_name=profile.resume_name,
            cover_letter_url=cover_letter_url,
        )
    )
    return {"success": True, "application": ApplicationOut.model_validate(application).model_dump(mode="json")}
