import logging

from fastapi import APIRouter, Depends

from ..schemas.application import ApplicationOut, StatusChangeIn
from ..services.applications import ApplicationRepository, summarize
from ..services.identity import Principal
from ..utils.dependencies import get_applications, get_current_principal
from ..utils.roles import candidate_only, recruiter_only

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["Applications"])


def _application_payload(application) -> dict:
    payload = ApplicationOut.model_validate(application).model_dump(mode="json")
    job = getattr(application, "job", None)
    payload["job"] = (
        {"id": job.id, "title": job.title, "company_name": job.company_name, "location": job.location}
        if job is not None
        else None
    )
    return payload


@router.get("/mine")
def list_my_applications(
    principal: Principal = Depends(candidate_only),
    applications: ApplicationRepository = Depends(get_applications),
):
    items = applications.list_for_candidate(principal.id)
    return {
        "success": True,
        "applications": [_application_payload(a) for a in items],
        "stats": summarize(items),
    }


@router.get("/received")
def list_received_applications(
    principal: Principal = Depends(recruiter_only),
    applications: ApplicationRepository = Depends(get_applications),
):
    items = applications.list_for_recruiter_jobs(principal.id)
    return {
        "success": True,
        "applications": [_application_payload(a) for a in items],
        "stats": summarize(items),
    }


@router.get("/{application_id}")
def application_details(
    application_id: str,
    principal: Principal = Depends(get_current_principal),
    applications: ApplicationRepository = Depends(get_applications),
):
    application = applications.get_for_principal(application_id, principal)
    return {"success": True, "application": _application_payload(application)}


@router.patch("/{application_id}/status")
def change_status(
    application_id: str,
    body: StatusChangeIn,
    principal: Principal = Depends(get_current_principal),
    applications: ApplicationRepository = Depends(get_applications),
):
    """
    Move an application through its lifecycle. Recruiters drive Interview/Hired/Rejected;
    the applicant may only withdraw. Interview needs ``scheduled_at``.
    """
    application = applications.update_status(
        application_id,
        body.status,
        principal,
        scheduled_at=body.scheduled_at,
        timezone=body.timezone,
    )
    return {"success": True, "application": _application_payload(application)}


@router.post("/{application_id}/withdraw")
def withdraw_application(
    application_id: str,
    principal: Principal = Depends(get_current_principal),
    applications: ApplicationRepository = Depends(get_applications),
):
    application = applications.withdraw(application_id, principal)
    return {"success": True, "application": _application_payload(application)}
