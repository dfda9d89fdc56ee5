from fastapi import APIRouter, Depends
from pydantic import BaseModel
import logging

from ..services.identity import IdentityProvider, Principal
from ..utils.dependencies import get_current_principal, get_identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


class SignupRequest(BaseModel):
    email: str
    password: str
    role: str  # recruiter / candidate
    name: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str
    role: str | None = None  # optional role gate (frontend-selected role)


def _token_response(principal: Principal, token: str, **extra) -> dict:
    return {
        **extra,
        "success": True,
        "user": principal.public_view(),
        "access_token": token,
        "token_type": "bearer",
    }


@router.post("/signup")
def signup(payload: SignupRequest, identity: IdentityProvider = Depends(get_identity)):
    principal, token = identity.sign_up(
        email=payload.email, password=payload.password, role=payload.role, name=payload.name
    )
    return _token_response(principal, token, message="User created successfully")


@router.post("/login")
def login(payload: LoginRequest, identity: IdentityProvider = Depends(get_identity)):
    principal, token = identity.sign_in(email=payload.email, password=payload.password, role=payload.role)
    return _token_response(principal, token)


@router.get("/me")
def me(principal: Principal = Depends(get_current_principal)):
    return {"success": True, "user": principal.public_view()}


@router.post("/logout")
def logout(
    principal: Principal = Depends(get_current_principal),
    identity: IdentityProvider = Depends(get_identity),
):
    identity.sign_out(principal)
    return {"success": True, "message": "Logged out successfully"}
