import os
import sys
import tempfile
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker


# Ensure `import hireboard...` works regardless of where pytest is run from.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# hireboard.config reads these at import time, and test modules import hireboard
# during collection, so they must be set before anything else.
TEST_ROOT = Path(tempfile.mkdtemp(prefix="hireboard-tests-"))
os.environ["DISABLE_DOTENV"] = "1"
os.environ["DATABASE_URL"] = f"sqlite+pysqlite:///{(TEST_ROOT / 'test.sqlite3').as_posix()}"
os.environ["UPLOAD_DIR"] = str(TEST_ROOT / "uploads")


@pytest.fixture()
def app() -> FastAPI:
    """
    Create a FastAPI app wired to a temporary SQLite DB.
    """
    from hireboard import database as db

    engine = create_engine(
        os.environ["DATABASE_URL"],
        connect_args={"check_same_thread": False},
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    # Patch the shared database module so router dependencies use the test DB.
    db.engine = engine
    db.SessionLocal = TestingSessionLocal

    db.register_models()
    db.Base.metadata.drop_all(bind=engine)
    db.Base.metadata.create_all(bind=engine)

    from hireboard.main import create_app

    return create_app()


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def db_session(app: FastAPI):
    """
    Direct SQLAlchemy session bound to the same temporary SQLite DB used by the test app.
    """
    from hireboard import database as db

    session = db.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def store(db_session):
    from hireboard.services.document_store import DocumentStore

    return DocumentStore(db_session)


@pytest.fixture()
def blobs(tmp_path: Path):
    from hireboard.services.blob_store import LocalBlobStore

    return LocalBlobStore(root=str(tmp_path / "blobs"), public_url="/files")
