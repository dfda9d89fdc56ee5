import pytest

from hireboard.models.status import Role
from hireboard.services.candidates import CandidateProfileRepository
from hireboard.services.identity import Principal
from hireboard.utils.error_handlers import AuthorizationError, StoreError, ValidationError


@pytest.fixture()
def candidate(store) -> Principal:
    user = store.insert("users", {"email": "jane@example.com", "password": "hashed", "role": "candidate", "name": "jane"})
    return Principal(id=user.id, email=user.email, role=Role.CANDIDATE)


@pytest.fixture()
def profiles(store, blobs):
    return CandidateProfileRepository(store, blobs)


def test_profile_is_created_on_first_read(profiles, candidate):
    profile = profiles.get_or_create(candidate)
    assert profile.user_id == candidate.id
    assert profile.email == "jane@example.com"
    assert profiles.get_or_create(candidate).user_id == candidate.id


def test_save_updates_only_provided_fields_and_syncs_name(profiles, store, candidate):
    profiles.save(candidate, {"phone": "+1 555 0100", "skills": "Python, SQL"})
    profile = profiles.save(candidate, {"full_name": "Jane Doe"})

    assert profile.full_name == "Jane Doe"
    assert profile.phone == "+1 555 0100"
    assert profile.skills == "Python, SQL"
    assert store.get("users", candidate.id).name == "Jane Doe"


def test_name_sync_failure_does_not_fail_the_save(profiles, store, candidate, monkeypatch):
    real_update = store.update

    def flaky_update(table, record_id, patch):
        if table == "users":
            raise StoreError("users table unavailable")
        return real_update(table, record_id, patch)

    monkeypatch.setattr(store, "update", flaky_update)
    profile = profiles.save(candidate, {"full_name": "Jane Doe"})

    assert profile.full_name == "Jane Doe"
    assert store.get("users", candidate.id).name == "jane"


def test_save_validates_fields(profiles, candidate):
    with pytest.raises(ValidationError):
        profiles.save(candidate, {"email": "not-an-email"})
    with pytest.raises(ValidationError):
        profiles.save(candidate, {"skills": "x" * 2001})


def test_only_the_candidate_edits_their_profile(profiles, store, candidate):
    recruiter = Principal(id="rec-1", email="rec@example.com", role=Role.RECRUITER)
    with pytest.raises(AuthorizationError):
        profiles.save(recruiter, {"full_name": "Nope"})
    with pytest.raises(AuthorizationError):
        profiles.save(candidate, {"full_name": "Nope"}, user_id="someone-else")


def test_upload_resume_stores_file_and_url(profiles, blobs, candidate):
    profile = profiles.upload_resume(candidate, "Jane CV.pdf", b"%PDF-1.4 resume")

    assert profile.resume_name == "Jane CV.pdf"
    assert profile.resume_url == f"/files/resumes/{candidate.id}/Jane CV.pdf"
    assert blobs.exists("resumes", f"{candidate.id}/Jane CV.pdf")

    # Re-uploading the same name replaces the file.
    profiles.upload_resume(candidate, "Jane CV.pdf", b"%PDF-1.4 v2")
    assert (blobs.root / "resumes" / candidate.id / "Jane CV.pdf").read_bytes() == b"%PDF-1.4 v2"


def test_upload_resume_rejects_other_types(profiles, candidate):
    with pytest.raises(ValidationError):
        profiles.upload_resume(candidate, "cv.txt", b"plain text")


def test_upload_avatar(profiles, candidate):
    profile = profiles.upload_avatar(candidate, "me.PNG", b"\x89PNG")
    assert profile.avatar_url == f"/files/avatars/{candidate.id}/avatar.png"
    with pytest.raises(ValidationError):
        profiles.upload_avatar(candidate, "me.pdf", b"%PDF")


def test_new_resume_name_replaces_the_old_file(profiles, blobs, candidate):
    profiles.upload_resume(candidate, "old.pdf", b"%PDF old")
    profile = profiles.upload_resume(candidate, "new.pdf", b"%PDF new")

    assert profile.resume_name == "new.pdf"
    assert blobs.exists("resumes", f"{candidate.id}/new.pdf")
    assert not blobs.exists("resumes", f"{candidate.id}/old.pdf")


def test_resume_sent_with_an_application_is_kept(profiles, store, blobs, candidate):
    recruiter = store.insert("users", {"email": "rec@example.com", "password": "hashed", "role": "recruiter"})
    job = store.insert("jobs", {"recruiter_id": recruiter.id, "title": "Engineer"})
    profile = profiles.upload_resume(candidate, "sent.pdf", b"%PDF sent")
    store.insert(
        "applications",
        {
            "job_id": job.id,
            "candidate_id": candidate.id,
            "full_name": "Jane",
            "email": candidate.email,
            "resume_url": profile.resume_url,
        },
    )

    profiles.upload_resume(candidate, "fresh.pdf", b"%PDF fresh")
    assert blobs.exists("resumes", f"{candidate.id}/sent.pdf")

    profile = profiles.remove_resume(candidate)
    assert profile.resume_url is None
    assert not blobs.exists("resumes", f"{candidate.id}/fresh.pdf")


def test_remove_resume_clears_profile_and_file(profiles, blobs, candidate):
    profiles.upload_resume(candidate, "cv.pdf", b"%PDF cv")

    profile = profiles.remove_resume(candidate)
    assert profile.resume_url is None
    assert profile.resume_name is None
    assert not blobs.exists("resumes", f"{candidate.id}/cv.pdf")

    # Nothing left to remove.
    assert profiles.remove_resume(candidate).resume_url is None


def test_avatar_with_new_extension_replaces_the_old_file(profiles, blobs, candidate):
    profiles.upload_avatar(candidate, "me.png", b"\x89PNG")
    profile = profiles.upload_avatar(candidate, "me.jpg", b"\xff\xd8")

    assert profile.avatar_url.endswith("/avatar.jpg")
    assert not blobs.exists("avatars", f"{candidate.id}/avatar.png")

    profile = profiles.remove_avatar(candidate)
    assert profile.avatar_url is None
    assert not blobs.exists("avatars", f"{candidate.id}/avatar.jpg")
