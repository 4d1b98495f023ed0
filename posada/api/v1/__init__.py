"""API v1 routes: public user/token routes and the role-gated groups under /auth."""

from fastapi import APIRouter, Depends

from posada.api.v1 import health, roles, sessions, tokens, users
from posada.api.v1.auth import authenticate, require_role
from posada.models import ROLE_ADMIN, ROLE_CUSTOMER, ROLE_ROOT


def _role_group(name: str, role: str) -> APIRouter:
    # Dependencies run in order: authenticate attaches the payload that require_role reads.
    return APIRouter(
        prefix=f"/auth/{name}",
        dependencies=[Depends(authenticate), Depends(require_role(role))],
    )


customer_group = _role_group("customer", ROLE_CUSTOMER)
customer_group.include_router(users.self_router, tags=["users"])

admin_group = _role_group("admin", ROLE_ADMIN)
admin_group.include_router(users.self_router, tags=["users"])
admin_group.include_router(users.admin_router, tags=["users"])
admin_group.include_router(roles.router, prefix="/role", tags=["roles"])
admin_group.include_router(sessions.router, prefix="/sessions", tags=["sessions"])

su_group = _role_group("su", ROLE_ROOT)
su_group.include_router(users.self_router, tags=["users"])
su_group.include_router(users.admin_router, tags=["users"])
su_group.include_router(users.root_router, tags=["users"])
su_group.include_router(roles.router, prefix="/role", tags=["roles"])
su_group.include_router(sessions.router, prefix="/sessions", tags=["sessions"])

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(tokens.router, prefix="/tokens", tags=["tokens"])
router.include_router(customer_group)
router.include_router(admin_group)
router.include_router(su_group)
