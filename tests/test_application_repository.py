import pytest

from hireboard.models.status import Role
from hireboard.services.applications import ApplicationRepository, summarize
from hireboard.services.identity import Principal
from hireboard.services.notifications import NotificationService
from hireboard.utils.error_handlers import (
    AuthorizationError,
    DuplicateError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)


def _user(store, email: str, role: str) -> Principal:
    user = store.insert("users", {"email": email, "password": "hashed", "role": role, "name": email.split("@")[0]})
    return Principal(id=user.id, email=user.email, role=Role(role))


def _job(store, recruiter: Principal, **fields):
    record = {"recruiter_id": recruiter.id, "title": "Backend Engineer", "status": "Open", "applicant_count": 0}
    record.update(fields)
    return store.insert("jobs", record)


def _application_input(job, candidate: Principal, **overrides) -> dict:
    data = {
        "job_id": job.id,
        "candidate_id": candidate.id,
        "full_name": "Cand Idate",
        "email": candidate.email,
        "resume_url": "/files/resumes/cv.pdf",
        "resume_name": "cv.pdf",
    }
    data.update(overrides)
    return data


@pytest.fixture()
def notifications():
    return NotificationService(ttl_seconds=60)


@pytest.fixture()
def repo(store, notifications):
    return ApplicationRepository(store, notifications)


@pytest.fixture()
def people(store):
    recruiter = _user(store, "rec@example.com", "recruiter")
    candidate = _user(store, "cand@example.com", "candidate")
    return recruiter, candidate


def test_create_starts_pending_and_counts_applicant(repo, store, people, notifications):
    recruiter, candidate = people
    job = _job(store, recruiter)

    application = repo.create(_application_input(job, candidate))

    assert application.status == "Pending"
    assert application.scheduled_at is None
    assert store.get("jobs", job.id).applicant_count == 1
    assert [n.kind for n in notifications.pending(recruiter.id)] == ["application.created"]


def test_duplicate_application_is_rejected_and_counter_unchanged(repo, store, people):
    recruiter, candidate = people
    job = _job(store, recruiter)
    repo.create(_application_input(job, candidate))

    with pytest.raises(DuplicateError):
        repo.create(_application_input(job, candidate))

    assert store.get("jobs", job.id).applicant_count == 1
    assert len(repo.list_for_candidate(candidate.id)) == 1


def test_unique_index_catches_a_race_past_the_lookup(repo, store, people, monkeypatch):
    recruiter, candidate = people
    job = _job(store, recruiter)
    repo.create(_application_input(job, candidate))

    # Simulate a concurrent request that passed the pre-insert lookup.
    monkeypatch.setattr(repo, "find_by_job_and_candidate", lambda job_id, candidate_id: None)
    with pytest.raises(DuplicateError):
        repo.create(_application_input(job, candidate))

    assert store.get("jobs", job.id).applicant_count == 1
    assert len(store.query("applications", {"job_id": job.id})) == 1


def test_create_requires_resume_and_open_job(repo, store, people):
    recruiter, candidate = people
    job = _job(store, recruiter)
    closed = _job(store, recruiter, status="Closed")

    with pytest.raises(ValidationError):
        repo.create(_application_input(job, candidate, resume_url=""))
    with pytest.raises(ValidationError):
        repo.create(_application_input(closed, candidate))
    with pytest.raises(NotFoundError):
        repo.create(_application_input(job, candidate, job_id="missing"))

    assert store.get("jobs", job.id).applicant_count == 0


def test_happy_path_to_hired(repo, store, people, notifications):
    recruiter, candidate = people
    application = repo.create(_application_input(_job(store, recruiter), candidate))

    application = repo.update_status(application.id, "Interview", recruiter, scheduled_at="2025-01-10T10:00")
    assert application.status == "Interview"
    assert application.scheduled_at is not None

    application = repo.update_status(application.id, "hired", recruiter)
    assert application.status == "Hired"
    assert application.scheduled_at is None

    kinds = [n.kind for n in notifications.pending(candidate.id)]
    assert kinds == ["application.status_changed", "application.status_changed"]


def test_reschedule_updates_interview_date(repo, store, people):
    recruiter, candidate = people
    application = repo.create(_application_input(_job(store, recruiter), candidate))
    repo.update_status(application.id, "Interview", recruiter, scheduled_at="2030-01-10T10:00:00Z")

    application = repo.update_status(application.id, "Interview", recruiter, scheduled_at="2030-01-12T15:00:00Z")
    assert application.status == "Interview"
    assert application.scheduled_at.day == 12


def test_candidate_withdraws_and_recruiter_is_told(repo, store, people, notifications):
    recruiter, candidate = people
    application = repo.create(_application_input(_job(store, recruiter), candidate))
    repo.update_status(application.id, "Interview", recruiter, scheduled_at="2030-01-10T10:00:00Z")

    application = repo.withdraw(application.id, candidate)
    assert application.status == "Withdrawn"
    assert application.scheduled_at is None
    assert "application.withdrawn" in [n.kind for n in notifications.pending(recruiter.id)]

    with pytest.raises(InvalidTransitionError):
        repo.update_status(application.id, "Interview", recruiter, scheduled_at="2030-02-01T10:00:00Z")
    with pytest.raises(InvalidTransitionError):
        repo.update_status(application.id, "Pending", recruiter)


def test_withdrawing_twice_fails(repo, store, people, notifications):
    recruiter, candidate = people
    application = repo.create(_application_input(_job(store, recruiter), candidate))
    repo.withdraw(application.id, candidate)
    before = len(notifications.pending(recruiter.id))

    with pytest.raises(InvalidTransitionError):
        repo.withdraw(application.id, candidate)
    assert repo.require(application.id).status == "Withdrawn"
    assert len(notifications.pending(recruiter.id)) == before


def test_withdraw_after_decision_fails(repo, store, people):
    recruiter, candidate = people
    application = repo.create(_application_input(_job(store, recruiter), candidate))
    repo.update_status(application.id, "Rejected", recruiter)

    with pytest.raises(InvalidTransitionError):
        repo.withdraw(application.id, candidate)
    assert repo.require(application.id).status == "Rejected"


def test_same_status_is_idempotent(repo, store, people, notifications):
    recruiter, candidate = people
    application = repo.create(_application_input(_job(store, recruiter), candidate))
    repo.update_status(application.id, "Hired", recruiter)
    before = len(notifications.pending(candidate.id))

    application = repo.update_status(application.id, "Hired", recruiter)
    assert application.status == "Hired"
    assert len(notifications.pending(candidate.id)) == before


def test_only_owners_can_change_status(repo, store, people):
    recruiter, candidate = people
    stranger = _user(store, "other-rec@example.com", "recruiter")
    other_candidate = _user(store, "other-cand@example.com", "candidate")
    application = repo.create(_application_input(_job(store, recruiter), candidate))

    with pytest.raises(AuthorizationError):
        repo.update_status(application.id, "Hired", stranger)
    with pytest.raises(AuthorizationError):
        repo.update_status(application.id, "Hired", candidate)
    with pytest.raises(AuthorizationError):
        repo.withdraw(application.id, other_candidate)
    with pytest.raises(AuthorizationError):
        repo.withdraw(application.id, recruiter)

    assert repo.require(application.id).status == "Pending"


def test_interview_without_date_is_rejected(repo, store, people):
    recruiter, candidate = people
    application = repo.create(_application_input(_job(store, recruiter), candidate))

    with pytest.raises(ValidationError):
        repo.update_status(application.id, "Interview", recruiter)
    assert repo.require(application.id).status == "Pending"


def test_unknown_application(repo, people):
    recruiter, _ = people
    with pytest.raises(NotFoundError):
        repo.update_status("missing", "Hired", recruiter)


def test_listings_and_visibility(repo, store, people):
    recruiter, candidate = people
    other_recruiter = _user(store, "rec2@example.com", "recruiter")
    first = repo.create(_application_input(_job(store, recruiter, title="First"), candidate))
    second = repo.create(_application_input(_job(store, other_recruiter, title="Second"), candidate))

    assert [a.id for a in repo.list_for_candidate(candidate.id)] == [second.id, first.id]
    assert [a.id for a in repo.list_for_recruiter_jobs(recruiter.id)] == [first.id]
    assert repo.list_for_recruiter_jobs(candidate.id) == []

    assert repo.get_for_principal(first.id, candidate).id == first.id
    assert repo.get_for_principal(first.id, recruiter).id == first.id
    with pytest.raises(AuthorizationError):
        repo.get_for_principal(first.id, other_recruiter)


def test_summarize_counts_by_status(repo, store, people):
    recruiter, candidate = people
    other = _user(store, "cand2@example.com", "candidate")
    job = _job(store, recruiter)
    a = repo.create(_application_input(job, candidate))
    repo.create(_application_input(job, other, email=other.email))
    repo.update_status(a.id, "Hired", recruiter)

    stats = summarize(repo.list_for_recruiter_jobs(recruiter.id))
    assert stats["total"] == 2
    assert stats["Hired"] == 1
    assert stats["Pending"] == 1
    assert stats["Withdrawn"] == 0
