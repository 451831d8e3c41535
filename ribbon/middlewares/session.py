# ribbon/middlewares/session.py
import secrets

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ribbon.platform.config import settings


class SessionMiddleware(BaseHTTPMiddleware):
    """
    Gives every browser an opaque session id cookie and exposes it as
    `request.state.session_id`. The id only keys in-memory flow state.
    """

    def __init__(self, app, cookie_name: str = settings.SESSION_COOKIE_NAME):
        super().__init__(app)
        self.cookie_name = cookie_name

    async def dispatch(self, request: Request, call_next):
        session_id = request.cookies.get(self.cookie_name)
        is_new = not session_id or len(session_id) > 64
        if is_new:
            session_id = secrets.token_urlsafe(24)

        request.state.session_id = session_id
        response = await call_next(request)

        if is_new:
            response.set_cookie(
                self.cookie_name,
                session_id,
                max_age=settings.SESSION_COOKIE_MAX_AGE,
                httponly=True,
                samesite="lax",
                secure=settings.ENVIRONMENT == "production",
            )
        return response
