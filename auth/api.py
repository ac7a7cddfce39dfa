"""HTTP routes for authentication."""

import ipaddress

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from api.base import dump, success_response
from auth.config import AuthConfig
from auth.security_middleware import get_identity
from auth.service import AuthService
from auth.types import AuthResult, ChangePasswordRequest, SignInRequest, SignUpRequest
from utils.timezone import now_utc
from utils.user_context import Identity


def _get_client_ip(request: Request) -> str | None:
    """Extract valid IP address from request, or None if invalid."""
    if not request.client:
        return None
    host = request.client.host
    try:
        ipaddress.ip_address(host)
        return host
    except ValueError:
        return None


def _user_json(user) -> dict:
    return user.model_dump(mode="json", by_alias=True)


def create_auth_router(auth_service: AuthService, config: AuthConfig) -> APIRouter:
    """Create auth router with injected service."""
    router = APIRouter(tags=["auth"])

    def _session_response(result: AuthResult, status_code: int) -> JSONResponse:
        """Envelope with user + token, and the token as an httpOnly cookie."""
        response = JSONResponse(
            status_code=status_code,
            content=dump(success_response({
                "user": _user_json(result.user),
                "token": result.token,
                "expiresAt": result.expires_at.isoformat(),
            })),
        )
        response.set_cookie(
            key=config.cookie_name,
            value=result.token,
            httponly=True,
            secure=config.cookie_secure,
            samesite=config.cookie_samesite,
            max_age=max(int((result.expires_at - now_utc()).total_seconds()), 0),
        )
        return response

    @router.post("/signup", status_code=201)
    async def sign_up(request: Request, body: SignUpRequest):
        """Create an account and sign it in."""
        result = await run_in_threadpool(
            auth_service.sign_up,
            email=body.email,
            password=body.password,
            display_name=body.display_name,
            ip_address=_get_client_ip(request),
            user_agent=request.headers.get("User-Agent"),
        )
        return _session_response(result, 201)

    @router.post("/signin")
    async def sign_in(request: Request, body: SignInRequest):
        """Sign in with email and password.

        Sets the auth_token cookie on success. Any previous session of the
        user stops working.
        """
        result = await run_in_threadpool(
            auth_service.sign_in,
            email=body.email,
            password=body.password,
            ip_address=_get_client_ip(request),
            user_agent=request.headers.get("User-Agent"),
        )
        return _session_response(result, 200)

    @router.post("/signout")
    async def sign_out(request: Request, identity: Identity = Depends(get_identity)):
        """Revoke the user's sessions and clear the cookie."""
        await run_in_threadpool(auth_service.sign_out, identity.user_id, _get_client_ip(request))
        response = JSONResponse(content=dump(success_response({"message": "Signed out successfully"})))
        response.delete_cookie(key=config.cookie_name)
        return response

    @router.get("/me")
    async def get_current_user(identity: Identity = Depends(get_identity)):
        """Get current authenticated user."""
        user = await run_in_threadpool(auth_service.get_user, identity.user_id)
        return dump(success_response({"user": _user_json(user)}))

    @router.post("/change-password")
    async def change_password(body: ChangePasswordRequest, identity: Identity = Depends(get_identity)):
        """Change password. All sessions end; the user signs in again."""
        await run_in_threadpool(
            auth_service.change_password,
            identity.user_id,
            body.current_password,
            body.new_password,
        )
        response = JSONResponse(
            content=dump(success_response({"message": "Password changed. Please sign in again."}))
        )
        response.delete_cookie(key=config.cookie_name)
        return response

    return router
