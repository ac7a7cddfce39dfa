"""HTTP routes for administrator user management."""

from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.base import dump, success_response
from auth.security_middleware import get_identity
from auth.service import AuthService
from auth.types import ProvisionUserRequest, SetActiveRequest, SetRoleRequest
from core.models import UserStat
from core.services.report_service import ReportService
from utils.user_context import Identity


def create_admin_router(auth_service: AuthService, report_service: ReportService) -> APIRouter:
    """Create admin router. Every route requires the admin role (403 otherwise)."""
    router = APIRouter(tags=["admin"])

    @router.get("/users")
    def list_users(identity: Identity = Depends(get_identity)):
        users = auth_service.list_users(identity)
        return dump(success_response([u.model_dump(mode="json", by_alias=True) for u in users]))

    @router.post("/users", status_code=201)
    def provision_user(body: ProvisionUserRequest, identity: Identity = Depends(get_identity)):
        """Create an account. A generated password is returned once."""
        result = auth_service.provision_user(
            identity,
            email=body.email,
            display_name=body.display_name,
            role=body.role,
            password=body.password,
        )
        data = {"user": result.user.model_dump(mode="json", by_alias=True)}
        if result.initial_password:
            data["initialPassword"] = result.initial_password
        return JSONResponse(status_code=201, content=dump(success_response(data)))

    @router.put("/users/{user_id}/role")
    def set_role(user_id: UUID, body: SetRoleRequest, identity: Identity = Depends(get_identity)):
        user = auth_service.set_role(identity, user_id, body.role)
        return dump(success_response({"user": user.model_dump(mode="json", by_alias=True)}))

    @router.put("/users/{user_id}/active")
    def set_active(user_id: UUID, body: SetActiveRequest, identity: Identity = Depends(get_identity)):
        user = auth_service.set_active(identity, user_id, body.active)
        return dump(success_response({"user": user.model_dump(mode="json", by_alias=True)}))

    @router.get("/statistics")
    def statistics(identity: Identity = Depends(get_identity)):
        """Dashboard counts. Listing users doubles as the admin check."""
        users = [
            UserStat(id=u.id, name=u.display_name, email=u.email, role=u.role.value, joined_at=u.created_at)
            for u in auth_service.list_users(identity)
        ]
        stats = report_service.statistics(users)
        return dump(success_response(stats.model_dump(mode="json", by_alias=True)))

    return router
