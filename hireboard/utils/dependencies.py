"""FastAPI dependencies wiring repositories to the request's DB session and the app's shared services."""
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.applications import ApplicationRepository
from ..services.blob_store import LocalBlobStore
from ..services.candidates import CandidateProfileRepository
from ..services.document_store import DocumentStore
from ..services.identity import IdentityProvider, Principal
from ..services.jobs import JobRepository
from ..services.notifications import NotificationService
from ..services.recruiters import RecruiterProfileRepository
from .error_handlers import UnauthorizedError, get_error_message

_bearer = HTTPBearer(auto_error=False)


def get_store(db: Session = Depends(get_db)) -> DocumentStore:
    return DocumentStore(db)


def get_notifications(request: Request) -> NotificationService:
    return request.app.state.notifications


def get_blob_store(request: Request) -> LocalBlobStore:
    return request.app.state.blobs


def get_identity(request: Request, store: DocumentStore = Depends(get_store)) -> IdentityProvider:
    return IdentityProvider(store, listeners=request.app.state.principal_listeners)


def get_optional_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    identity: IdentityProvider = Depends(get_identity),
) -> Principal | None:
    if credentials is None:
        return None
    return identity.get_current_principal(credentials.credentials)


def get_current_principal(principal: Principal | None = Depends(get_optional_principal)) -> Principal:
    if principal is None:
        raise UnauthorizedError(get_error_message("unauthorized"))
    return principal


def get_applications(
    store: DocumentStore = Depends(get_store),
    notifications: NotificationService = Depends(get_notifications),
) -> ApplicationRepository:
    return ApplicationRepository(store, notifications)


def get_jobs(store: DocumentStore = Depends(get_store)) -> JobRepository:
    return JobRepository(store)


def get_profiles(
    store: DocumentStore = Depends(get_store),
    blobs: LocalBlobStore = Depends(get_blob_store),
) -> CandidateProfileRepository:
    return CandidateProfileRepository(store, blobs)


def get_recruiter_profiles(
    store: DocumentStore = Depends(get_store),
    blobs: LocalBlobStore = Depends(get_blob_store),
) -> RecruiterProfileRepository:
    return RecruiterProfileRepository(store, blobs)
