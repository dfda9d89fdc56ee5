import pytest

from hireboard.services.uploads import DOCUMENT_EXTENSIONS, check_upload, store_cover_letter
from hireboard.utils.error_handlers import StoreError, ValidationError


def test_upload_returns_key_and_public_url(blobs):
    key = blobs.upload("resumes", "user-1/cv.pdf", b"%PDF-1.4")
    assert key == "resumes/user-1/cv.pdf"
    assert blobs.exists("resumes", "user-1/cv.pdf")
    assert blobs.get_public_url("resumes", "user-1/cv.pdf") == "/files/resumes/user-1/cv.pdf"


def test_upload_without_overwrite_refuses_existing_file(blobs):
    blobs.upload("resumes", "user-1/cv.pdf", b"first")
    with pytest.raises(StoreError):
        blobs.upload("resumes", "user-1/cv.pdf", b"second")

    blobs.upload("resumes", "user-1/cv.pdf", b"second", overwrite=True)
    assert (blobs.root / "resumes" / "user-1" / "cv.pdf").read_bytes() == b"second"


def test_paths_cannot_escape_the_bucket(blobs):
    with pytest.raises(ValidationError):
        blobs.upload("resumes", "../../etc/passwd", b"x")

    key = blobs.upload("resumes", "user-1/..hidden.pdf", b"x")
    assert key == "resumes/user-1/_hidden.pdf"
    assert blobs.root.joinpath(key).is_file()


def test_remove(blobs):
    blobs.upload("avatars", "user-1/avatar.png", b"png")
    assert blobs.remove("avatars", "user-1/avatar.png") is True
    assert blobs.remove("avatars", "user-1/avatar.png") is False


def test_check_upload_rules():
    assert check_upload("My CV.pdf", b"data", DOCUMENT_EXTENSIONS, "invalid_file_type") == "My CV.pdf"
    with pytest.raises(ValidationError):
        check_upload("cv.exe", b"data", DOCUMENT_EXTENSIONS, "invalid_file_type")
    with pytest.raises(ValidationError):
        check_upload("cv.pdf", b"", DOCUMENT_EXTENSIONS, "invalid_file_type")


def test_cover_letter_is_one_per_candidate_and_job(blobs):
    url = store_cover_letter(blobs, candidate_id="cand", job_id="job", filename="letter.pdf", data=b"v1")
    again = store_cover_letter(blobs, candidate_id="cand", job_id="job", filename="other.pdf", data=b"v2")
    assert url == again == "/files/cover_letters/cand_job.pdf"
    assert (blobs.root / "cover_letters" / "cand_job.pdf").read_bytes() == b"v2"


def test_path_from_url_only_reads_our_urls(blobs):
    url = blobs.get_public_url("avatars", "user-1/avatar.png")
    assert blobs.path_from_url("avatars", url) == "user-1/avatar.png"
    assert blobs.path_from_url("avatars", url + "?v=2") == "user-1/avatar.png"
    assert blobs.path_from_url("resumes", url) is None
    assert blobs.path_from_url("avatars", "https://cdn.example.com/avatars/x.png") is None
    assert blobs.path_from_url("avatars", None) is None


def test_rejected_upload_is_logged(caplog):
    with caplog.at_level("INFO", logger="hireboard.services.uploads"):
        with pytest.raises(ValidationError):
            check_upload("virus.exe", b"MZ", DOCUMENT_EXTENSIONS, "invalid_file_type")
    assert "virus.exe" in caplog.text
