from fastapi import Depends

from ..models.status import Role
from ..services.identity import Principal
from .dependencies import get_current_principal
from .error_handlers import AuthorizationError


def _role_required(required_role: Role):
    def check_role(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role != required_role:
            raise AuthorizationError(f"{required_role.value.capitalize()} access only")
        return principal
    return check_role


recruiter_only = _role_required(Role.RECRUITER)
candidate_only = _role_required(Role.CANDIDATE)
