import os
from pathlib import Path
from dotenv import load_dotenv

# Override=True so edits to .env take effect on process reload.
#
# For automated tests (SQLite), we need to prevent .env from overriding the
# test DATABASE_URL. Set DISABLE_DOTENV=1 to skip loading .env.
if os.getenv("DISABLE_DOTENV") != "1":
    load_dotenv(override=True)


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)) or str(default))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)) or str(default))


_raw_database_url = (os.getenv("DATABASE_URL") or "").strip()
# Default to a local SQLite DB for dev so the backend can start out-of-the-box.
# Use an absolute path so it works regardless of current working directory.
_default_sqlite_path = (Path(__file__).resolve().parent.parent / "dev.db").as_posix()
DATABASE_URL = _raw_database_url or f"sqlite:///{_default_sqlite_path}"

# -------------------- Blob storage --------------------
# Absolute path; override with UPLOAD_DIR in env (useful for tests).
UPLOAD_DIR = os.getenv("UPLOAD_DIR") or (Path(__file__).resolve().parent.parent / "uploads").as_posix()
# Prefix used when building public URLs for stored files. The app mounts UPLOAD_DIR here.
PUBLIC_FILES_URL = (os.getenv("PUBLIC_FILES_URL") or "/files").rstrip("/")
MAX_UPLOAD_BYTES = _env_int("MAX_UPLOAD_BYTES", 5 * 1024 * 1024)  # 5MB
AVATAR_MAX_BYTES = _env_int("AVATAR_MAX_BYTES", 2 * 1024 * 1024)  # 2MB, recruiter photos

# -------------------- Auth / JWT --------------------
# NOTE: keep a default for local dev so the server can boot even if SECRET_KEY isn't set.
SECRET_KEY = os.getenv("SECRET_KEY", "dev_secret_change_me")
ACCESS_TOKEN_EXPIRE_MINUTES = _env_int("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7)  # 7 days

# -------------------- Job catalog --------------------
JOBS_PAGE_SIZE = _env_int("JOBS_PAGE_SIZE", 9)

# -------------------- Notifications --------------------
# How long a notice stays visible before it is auto-dismissed.
NOTIFICATION_TTL_SECONDS = _env_float("NOTIFICATION_TTL_SECONDS", 8)
NOTIFICATION_MAX_PER_RECIPIENT = _env_int("NOTIFICATION_MAX_PER_RECIPIENT", 50)

# -------------------- Server --------------------
LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").upper()
FRONTEND_ORIGINS = [
    origin.strip()
    for origin in os.getenv("FRONTEND_ORIGINS", "").split(",")
    if origin.strip()
]
