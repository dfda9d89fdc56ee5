import logging
from typing import Any

from pydantic import BaseModel, Field

from ..models.job import Job
from ..models.status import ApplicationStatus, JobStatus
from ..utils.error_handlers import AuthorizationError, NotFoundError, get_error_message
from ..utils.validation import validate_job_status, validate_string_field
from .document_store import DocumentStore
from .identity import Principal

logger = logging.getLogger(__name__)


class JobInput(BaseModel):
    title: str | None = None
    description: str | None = None
    requirements: str | None = None
    location: str | None = None
    company_name: str | None = None
    salary_range: str | None = None
    status: str | None = Field(default=None)  # Open / Closed


# (field, max_length); title and description are additionally required on create.
_TEXT_FIELDS = (
    ("title", 150),
    ("description", 10000),
    ("requirements", 10000),
    ("location", 100),
    ("company_name", 150),
    ("salary_range", 50),
)
_REQUIRED_ON_CREATE = {"title", "description"}


def _clean_job_fields(payload: JobInput, *, creating: bool) -> dict[str, Any]:
    provided = payload.model_fields_set
    cleaned: dict[str, Any] = {}
    for name, max_length in _TEXT_FIELDS:
        if not creating and name not in provided:
            continue
        required = name in _REQUIRED_ON_CREATE and (creating or name in provided)
        cleaned[name] = validate_string_field(
            getattr(payload, name),
            name.replace("_", " ").capitalize(),
            min_length=2 if name == "title" else 1,
            max_length=max_length,
            required=required,
        )
    if creating or "status" in provided:
        cleaned["status"] = validate_job_status(payload.status)
    return cleaned


class JobRepository:
    def __init__(self, store: DocumentStore):
        self.store = store

    def get(self, job_id: str) -> Job | None:
        return self.store.get("jobs", job_id)

    def require(self, job_id: str) -> Job:
        job = self.get(job_id)
        if job is None:
            raise NotFoundError(get_error_message("job_not_found"), details={"job_id": job_id})
        return job

    def require_owned(self, job_id: str, principal: Principal) -> Job:
        job = self.require(job_id)
        if not principal.is_recruiter or job.recruiter_id != principal.id:
            raise AuthorizationError(get_error_message("job_forbidden"), details={"job_id": job_id})
        return job

    def list_open(self) -> list[Job]:
        return self.store.query("jobs", {"status": JobStatus.OPEN.value}, order_by="created_at", descending=True)

    def list_for_recruiter(self, recruiter_id: str) -> list[Job]:
        return self.store.query("jobs", {"recruiter_id": recruiter_id}, order_by="created_at", descending=True)

    def create(self, principal: Principal, data: JobInput | dict[str, Any]) -> Job:
        if not principal.is_recruiter:
            raise AuthorizationError("Only recruiters can post jobs.")
        payload = data if isinstance(data, JobInput) else JobInput.model_validate(data or {})
        record = _clean_job_fields(payload, creating=True)
        record.update(recruiter_id=principal.id, applicant_count=0)
        job = self.store.insert("jobs", record)
        logger.info("Job %s created by recruiter %s", job.id, principal.id)
        return job

    def update(self, job_id: str, principal: Principal, data: JobInput | dict[str, Any]) -> Job:
        self.require_owned(job_id, principal)
        payload = data if isinstance(data, JobInput) else JobInput.model_validate(data or {})
        patch = _clean_job_fields(payload, creating=False)
        if not patch:
            return self.require(job_id)
        return self.store.update("jobs", job_id, patch)

    def close(self, job_id: str, principal: Principal) -> Job:
        self.require_owned(job_id, principal)
        return self.store.update("jobs", job_id, {"status": JobStatus.CLOSED.value})

    def delete(self, job_id: str, principal: Principal) -> None:
        self.require_owned(job_id, principal)
        # ORM cascade removes the job's applications with it.
        self.store.delete("jobs", job_id)
        logger.info("Job %s deleted by recruiter %s", job_id, principal.id)

    def overview(self, recruiter_id: str) -> dict[str, int]:
        jobs = self.list_for_recruiter(recruiter_id)
        job_ids = [job.id for job in jobs]
        applications = self.store.query("applications", {"job_id": job_ids}) if job_ids else []
        return {
            "total_jobs": len(jobs),
            "open_jobs": sum(1 for job in jobs if job.status == JobStatus.OPEN.value),
            "total_applicants": len(applications),
            "interviews": sum(1 for a in applications if a.status == ApplicationStatus.INTERVIEW.value),
            "hired": sum(1 for a in applications if a.status == ApplicationStatus.HIRED.value),
        }
