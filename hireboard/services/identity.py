"""
Identity provider: bcrypt-hashed credentials in the ``users`` table and
stateless JWT bearer tokens.
"""
from dataclasses import dataclass
import logging
from typing import Callable

import bcrypt

from ..models.status import Role
from ..utils.error_handlers import (
    AuthorizationError,
    DuplicateError,
    StoreError,
    UnauthorizedError,
    ValidationError,
    get_error_message,
)
from ..utils.jwt import create_access_token, decode_access_token
from ..utils.validation import validate_email, validate_password, validate_role
from .document_store import DocumentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    id: str
    email: str
    role: Role

    @property
    def is_candidate(self) -> bool:
        return self.role == Role.CANDIDATE

    @property
    def is_recruiter(self) -> bool:
        return self.role == Role.RECRUITER

    def public_view(self) -> dict:
        return {"id": self.id, "email": self.email, "role": self.role.value}


PrincipalListener = Callable[["Principal | None"], None]


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt directly.

    bcrypt truncates at 72 *bytes* and recent builds raise past it, so enforce
    the limit explicitly.
    """
    if not password:
        raise ValidationError("Password is required")

    pw_bytes = password.encode("utf-8")
    if len(pw_bytes) > 72:
        raise ValidationError("Password must be 72 bytes or less")

    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    if not password or not hashed:
        return False
    pw_bytes = password.encode("utf-8")
    if len(pw_bytes) > 72:
        return False
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def _principal_for(user) -> Principal:
    return Principal(id=str(user.id), email=user.email, role=Role(user.role))


class IdentityProvider:
    def __init__(self, store: DocumentStore, listeners: list[PrincipalListener] | None = None):
        self.store = store
        # Shared across requests when the app passes its own list.
        self._listeners = listeners if listeners is not None else []

    def on_principal_change(self, callback: PrincipalListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _emit(self, principal: Principal | None) -> None:
        for callback in list(self._listeners):
            try:
                callback(principal)
            except Exception:
                logger.exception("Principal listener %r failed", callback)

    def issue_token(self, principal: Principal) -> str:
        return create_access_token({"sub": principal.id, "role": principal.role.value, "email": principal.email})

    def get_current_principal(self, token: str | None) -> Principal | None:
        """Resolve a bearer token to a principal; None if the token or its user is gone."""
        if not token:
            return None
        claims = decode_access_token(token)
        if not claims or not claims.get("sub"):
            return None
        user = self.store.get("users", str(claims["sub"]))
        if user is None:
            return None
        return _principal_for(user)

    def sign_up(self, *, email: str, password: str, role: str, name: str | None = None) -> tuple[Principal, str]:
        email = validate_email(email)
        validate_password(password)
        role = validate_role(role)

        if self.store.first("users", {"email": email}) is not None:
            raise DuplicateError(get_error_message("email_exists"))

        try:
            user = self.store.insert(
                "users",
                {"email": email, "password": hash_password(password), "role": role, "name": (name or "").strip() or None},
            )
        except DuplicateError:
            # Lost a race with a concurrent signup for the same email.
            raise DuplicateError(get_error_message("email_exists")) from None

        principal = _principal_for(user)

        if principal.is_candidate:
            # The profile row is a convenience; signup still succeeds without it.
            try:
                self.store.insert(
                    "candidates",
                    {"user_id": principal.id, "email": email, "full_name": user.name or email.split("@", 1)[0]},
                )
            except StoreError as e:
                logger.warning("Could not create candidate profile for %s: %s", principal.id, e.message)

        logger.info("New %s signed up: %s", role, principal.id)
        self._emit(principal)
        return principal, self.issue_token(principal)

    def sign_in(self, *, email: str, password: str, role: str | None = None) -> tuple[Principal, str]:
        email = validate_email(email)
        if not password:
            raise ValidationError("Password is required")

        user = self.store.first("users", {"email": email})
        if user is None or not verify_password(password, user.password):
            raise UnauthorizedError(get_error_message("invalid_credentials"))

        if role and user.role != role.strip().lower():
            raise AuthorizationError(get_error_message("role_mismatch"))

        principal = _principal_for(user)
        self._emit(principal)
        return principal, self.issue_token(principal)

    def sign_out(self, principal: Principal | None) -> None:
        # Tokens are stateless; signing out only informs listeners.
        if principal is not None:
            logger.info("Principal signed out: %s", principal.id)
        self._emit(None)
