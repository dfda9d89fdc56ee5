"""
Application status state machine.

``plan_transition`` is pure: given the current record state, the requested
status and the acting principal, it either raises or returns the patch to
persist. An empty patch means the request is an idempotent no-op.

    Pending   -> Interview (recruiter, scheduled_at required)
    Pending   -> Hired | Rejected (recruiter)
    Interview -> Interview (recruiter, reschedule)
    Interview -> Hired | Rejected (recruiter)
    Pending | Interview -> Withdrawn (owning candidate)
    Hired | Rejected | Withdrawn -> nothing (withdrawing again raises too)

``scheduled_at`` is set only while in Interview and cleared on every other
transition.
"""
from datetime import datetime
from typing import Any

from ..models.status import ApplicationStatus, Role
from ..utils.error_handlers import (
    AuthorizationError,
    InvalidTransitionError,
    ValidationError,
    get_error_message,
)
from ..utils.validation import parse_scheduled_at

S = ApplicationStatus

ALLOWED_TRANSITIONS: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    S.PENDING: frozenset({S.INTERVIEW, S.HIRED, S.REJECTED, S.WITHDRAWN}),
    S.INTERVIEW: frozenset({S.INTERVIEW, S.HIRED, S.REJECTED, S.WITHDRAWN}),
    S.HIRED: frozenset(),
    S.REJECTED: frozenset(),
    S.WITHDRAWN: frozenset(),
}


def parse_status(value: Any) -> ApplicationStatus:
    """Accept enum members or strings in any casing ("hired", "HIRED")."""
    if isinstance(value, ApplicationStatus):
        return value
    raw = str(value or "").strip().lower()
    for status in ApplicationStatus:
        if status.value.lower() == raw:
            return status
    valid = ", ".join(s.value for s in ApplicationStatus)
    raise ValidationError(f"Invalid status. Must be one of: {valid}", details={"status": value})


def can_transition(current: Any, target: Any) -> bool:
    current, target = parse_status(current), parse_status(target)
    if target == S.WITHDRAWN and current.is_terminal:
        return False
    return current == target or target in ALLOWED_TRANSITIONS[current]


def authorize_actor(target: ApplicationStatus, principal, *, candidate_id: str, job_recruiter_id: str | None) -> None:
    """Withdrawn belongs to the owning candidate; every other status to the job's recruiter."""
    if target == S.WITHDRAWN:
        if principal.role != Role.CANDIDATE or str(principal.id) != str(candidate_id):
            raise AuthorizationError(get_error_message("withdraw_recruiter_only_candidate"))
        return
    if (
        principal.role != Role.RECRUITER
        or job_recruiter_id is None
        or str(principal.id) != str(job_recruiter_id)
    ):
        raise AuthorizationError(get_error_message("application_forbidden"))


def plan_transition(
    current: Any,
    target: Any,
    principal,
    *,
    candidate_id: str,
    job_recruiter_id: str | None,
    scheduled_at: datetime | str | None = None,
    timezone: str | None = None,
) -> dict[str, Any]:
    current = parse_status(current)
    target = parse_status(target)

    authorize_actor(target, principal, candidate_id=candidate_id, job_recruiter_id=job_recruiter_id)

    if target == S.INTERVIEW and target in ALLOWED_TRANSITIONS[current]:
        # Entering Interview and rescheduling both need a date.
        when = parse_scheduled_at(scheduled_at, timezone)
        return {"status": S.INTERVIEW.value, "scheduled_at": when}

    if target == S.WITHDRAWN and current.is_terminal:
        # Withdrawing twice is still an error.
        raise InvalidTransitionError(
            get_error_message("terminal_status"),
            details={"from": current.value, "to": target.value},
        )

    if target == current:
        return {}

    if target not in ALLOWED_TRANSITIONS[current]:
        if current.is_terminal:
            raise InvalidTransitionError(
                get_error_message("terminal_status"),
                details={"from": current.value, "to": target.value},
            )
        raise InvalidTransitionError(
            f"Cannot move an application from {current.value} to {target.value}.",
            details={"from": current.value, "to": target.value},
        )

    return {"status": target.value, "scheduled_at": None}
