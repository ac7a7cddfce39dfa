"""Security middleware for FastAPI - token validation and identity context."""

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from api.base import ErrorCodes, dump, error_response
from api.errors import exception_response
from auth.exceptions import AuthError, InvalidTokenError
from auth.service import AuthService
from core.exceptions import StorageUnavailableError
from utils.user_context import Identity, clear_current_identity, set_current_identity


def extract_token(request: Request, cookie_name: str = "auth_token") -> str | None:
    """Bearer header first, then the session cookie."""
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(cookie_name) or None


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware that validates the session token and sets identity context.

    For protected routes:
    1. Extracts the token from the Authorization header or 'auth_token' cookie
    2. Validates it via AuthService (signature, expiry, stored session)
    3. Sets request.state.identity and the identity context var
    4. Clears context after request completes

    Public paths bypass authentication entirely.
    """

    PUBLIC_PATHS = [
        "/api/auth/signup",
        "/api/auth/signin",
        "/api/health",
        "/api/ping",
        "/docs",
        "/openapi.json",
    ]

    def __init__(self, app, auth_service: AuthService, cookie_name: str = "auth_token"):
        super().__init__(app)
        self._auth_service = auth_service
        self._cookie_name = cookie_name

    def _is_public_path(self, path: str) -> bool:
        """Exact match, or a sub-path of a public path."""
        path = path.rstrip("/") or "/"
        for public_path in self.PUBLIC_PATHS:
            if path == public_path or path.startswith(public_path + "/"):
                return True
        return False

    async def dispatch(self, request: Request, call_next):
        """Process request through middleware."""
        if request.method == "OPTIONS" or self._is_public_path(request.url.path):
            return await call_next(request)

        token = extract_token(request, self._cookie_name)
        if not token:
            return JSONResponse(
                status_code=401,
                content=dump(error_response(ErrorCodes.NOT_AUTHENTICATED, "Authentication required")),
            )

        try:
            identity = await run_in_threadpool(self._auth_service.identity_for, token)
        except (AuthError, StorageUnavailableError) as e:
            return exception_response(e)

        request.state.identity = identity
        set_current_identity(identity)
        try:
            return await call_next(request)
        finally:
            # Always clear context
            clear_current_identity()


def get_identity(request: Request) -> Identity:
    """FastAPI dependency: the identity AuthMiddleware attached to the request."""
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise InvalidTokenError("Authentication required")
    return identity
