"""Request dependencies: session-token authentication.

The token is read from the session cookie first, then from an
`Authorization: Bearer <token>` header.
"""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from green_community.services.auth import CurrentUser, resolve_session
from green_community.services.errors import AuthError
from green_community.settings import get_settings

bearer = HTTPBearer(auto_error=False)


def extract_token(request: Request, credentials: HTTPAuthorizationCredentials | None) -> str | None:
    token = request.cookies.get(get_settings().session_cookie_name)
    if not token and credentials:
        token = credentials.credentials
    return token or None


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer)],
) -> CurrentUser:
    token = extract_token(request, credentials)
    if not token:
        raise AuthError("Not authenticated")
    return await resolve_session(token)


async def get_optional_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer)],
) -> CurrentUser | None:
    """Like get_current_user, but anonymous callers (or stale tokens) get None."""
    token = extract_token(request, credentials)
    if not token:
        return None
    try:
        return await resolve_session(token)
    except AuthError:
        return None


AuthUser = Annotated[CurrentUser, Depends(get_current_user)]
OptionalUser = Annotated[CurrentUser | None, Depends(get_optional_user)]
