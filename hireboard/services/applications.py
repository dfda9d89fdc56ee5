"""
Application repository: the only way the API creates, transitions or lists
applications.

Ownership is enforced here on every mutating call. Duplicate prevention is a
best-effort lookup before insert; the ``uq_applications_job_candidate`` unique
index is what actually guarantees one application per (job, candidate), and a
violation of it is reported as the same ``DuplicateError``.
"""
from collections import Counter
from datetime import datetime
import logging
from typing import Any

from pydantic import BaseModel

from ..models.application import Application
from ..models.status import ApplicationStatus, JobStatus
from ..utils.error_handlers import (
    AppError,
    AuthorizationError,
    DuplicateError,
    NotFoundError,
    ValidationError,
    get_error_message,
)
from ..utils.validation import validate_email, validate_string_field
from .document_store import DocumentStore
from .identity import Principal
from .lifecycle import plan_transition
from .notifications import NotificationService

logger = logging.getLogger(__name__)


class NewApplicationInput(BaseModel):
    # Everything optional at the type level so missing fields surface as our ValidationError.
    job_id: str | None = None
    candidate_id: str | None = None
    full_name: str | None = None
    email: str | None = None
    resume_url: str | None = None
    resume_name: str | None = None
    cover_letter_url: str | None = None


def summarize(applications: list[Application]) -> dict[str, int]:
    """Per-status counts for dashboards."""
    counts = Counter(a.status for a in applications)
    summary = {"total": len(applications)}
    for status in ApplicationStatus:
        summary[status.value] = counts.get(status.value, 0)
    return summary


class ApplicationRepository:
    def __init__(self, store: DocumentStore, notifications: NotificationService | None = None):
        self.store = store
        self.notifications = notifications

    def _notify(self, recipient_id: str | None, message: str, *, level: str = "info", kind: str) -> None:
        if self.notifications is None or not recipient_id:
            return
        self.notifications.publish(recipient_id, message, level=level, kind=kind)

    # ------------------------------------------------------------------ reads

    def get(self, application_id: str) -> Application | None:
        return self.store.get("applications", application_id)

    def require(self, application_id: str) -> Application:
        application = self.get(application_id)
        if application is None:
            raise NotFoundError(get_error_message("application_not_found"), details={"id": application_id})
        return application

    def find_by_job_and_candidate(self, job_id: str, candidate_id: str) -> Application | None:
        return self.store.first("applications", {"job_id": job_id, "candidate_id": candidate_id})

    def get_for_principal(self, application_id: str, principal: Principal) -> Application:
        """Visible to the applicant and to the recruiter who owns the job."""
        application = self.require(application_id)
        if principal.is_candidate and application.candidate_id == principal.id:
            return application
        if principal.is_recruiter:
            job = self.store.get("jobs", application.job_id)
            if job is not None and job.recruiter_id == principal.id:
                return application
        raise AuthorizationError(get_error_message("forbidden"))

    def list_for_candidate(self, candidate_id: str) -> list[Application]:
        return self.store.query(
            "applications", {"candidate_id": candidate_id}, order_by="created_at", descending=True
        )

    def list_for_recruiter_jobs(self, recruiter_id: str) -> list[Application]:
        job_ids = [job.id for job in self.store.query("jobs", {"recruiter_id": recruiter_id})]
        if not job_ids:
            return []
        return self.store.query(
            "applications", {"job_id": job_ids}, order_by="created_at", descending=True
        )

    # ------------------------------------------------------------------ writes

    def _validate_new(self, data: NewApplicationInput | dict[str, Any]) -> dict[str, Any]:
        payload = data if isinstance(data, NewApplicationInput) else NewApplicationInput.model_validate(data or {})
        return {
            "job_id": validate_string_field(payload.job_id, "job_id", max_length=36),
            "candidate_id": validate_string_field(payload.candidate_id, "candidate_id", max_length=36),
            "full_name": validate_string_field(payload.full_name, "full_name", max_length=255),
            "email": validate_email(validate_string_field(payload.email, "email", max_length=255)),
            "resume_url": validate_string_field(payload.resume_url, "resume_url", max_length=500),
            "resume_name": validate_string_field(payload.resume_name, "resume_name", max_length=255, required=False),
            "cover_letter_url": validate_string_field(
                payload.cover_letter_url, "cover_letter_url", max_length=500, required=False
            ),
        }

    def create(self, data: NewApplicationInput | dict[str, Any]) -> Application:
        record = self._validate_new(data)
        job_id, candidate_id = record["job_id"], record["candidate_id"]

        job = self.store.get("jobs", job_id)
        if job is None:
            raise NotFoundError(get_error_message("job_not_found"), details={"job_id": job_id})
        if job.status != JobStatus.OPEN.value:
            raise ValidationError(get_error_message("job_closed"), details={"job_id": job_id})

        if self.find_by_job_and_candidate(job_id, candidate_id) is not None:
            raise DuplicateError(get_error_message("already_applied"), details={"job_id": job_id})

        record.update(status=ApplicationStatus.PENDING.value, scheduled_at=None)
        try:
            with self.store.transaction():
                application = self.store.insert("applications", record)
                self.store.increment("jobs", job_id, "applicant_count")
        except DuplicateError:
            logger.info("Concurrent duplicate application for job=%s candidate=%s", job_id, candidate_id)
            raise DuplicateError(get_error_message("already_applied"), details={"job_id": job_id}) from None

        logger.info("Application %s created for job=%s candidate=%s", application.id, job_id, candidate_id)
        self._notify(
            job.recruiter_id,
            f"New application from {record['full_name']} for {job.title}.",
            kind="application.created",
        )
        return application

    def update_status(
        self,
        application_id: str,
        new_status: ApplicationStatus | str,
        acting_principal: Principal,
        scheduled_at: datetime | str | None = None,
        timezone: str | None = None,
    ) -> Application:
        application = self.require(application_id)
        job = self.store.get("jobs", application.job_id)

        try:
            patch = plan_transition(
                application.status,
                new_status,
                acting_principal,
                candidate_id=application.candidate_id,
                job_recruiter_id=job.recruiter_id if job is not None else None,
                scheduled_at=scheduled_at,
                timezone=timezone,
            )
        except AppError as e:
            logger.info(
                "Rejected status change %s: %s -> %s by %s (%s)",
                application_id, application.status, new_status, acting_principal.id, type(e).__name__,
            )
            raise

        if not patch:
            return application

        previous = application.status
        application = self.store.update("applications", application_id, patch)
        logger.info("Application %s: %s -> %s", application_id, previous, application.status)

        title = job.title if job is not None else "a job"
        if application.status == ApplicationStatus.WITHDRAWN.value:
            self._notify(
                job.recruiter_id if job is not None else None,
                f"{application.full_name} withdrew their application for {title}.",
                kind="application.withdrawn",
            )
        else:
            self._notify(
                application.candidate_id,
                f"Your application for {title} is now {application.status}.",
                level="success" if application.status != ApplicationStatus.REJECTED.value else "info",
                kind="application.status_changed",
            )
        return application

    def withdraw(self, application_id: str, acting_principal: Principal) -> Application:
        return self.update_status(application_id, ApplicationStatus.WITHDRAWN, acting_principal)
