"""Auth endpoints.

POST /v1/auth/signup  - create account + profile
POST /v1/auth/signin  - issue session token (cookie + body)
POST /v1/auth/signout - drop the session
GET  /v1/auth/me      - current profile
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials

from green_community.routes.deps import AuthUser, bearer, extract_token
from green_community.schemas import MessageResponse, ProfileOut
from green_community.schemas.auth import SessionResponse, SignInRequest, SignUpRequest
from green_community.services import auth as auth_service
from green_community.services.profiles import get_profile
from green_community.settings import get_settings

router = APIRouter()


@router.post("/signup", response_model=ProfileOut, status_code=status.HTTP_201_CREATED)
async def signup(body: SignUpRequest) -> ProfileOut:
    profile = await auth_service.sign_up(
        email=body.email,
        password=body.password,
        eco_name=body.eco_name,
        full_name=body.full_name,
    )
    return ProfileOut.model_validate(profile)


@router.post("/signin", response_model=SessionResponse)
async def signin(body: SignInRequest, response: Response) -> SessionResponse:
    settings = get_settings()
    token, expires_at, profile = await auth_service.sign_in(email=body.email, password=body.password)

    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )
    return SessionResponse(token=token, expires_at=expires_at, profile=ProfileOut.model_validate(profile))


@router.post("/signout", response_model=MessageResponse)
async def signout(
    request: Request,
    response: Response,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer)],
) -> MessageResponse:
    token = extract_token(request, credentials)
    if token:
        await auth_service.sign_out(token)
    response.delete_cookie(get_settings().session_cookie_name, path="/")
    return MessageResponse(message="Signed out")


@router.get("/me", response_model=ProfileOut)
async def me(user: AuthUser) -> ProfileOut:
    return ProfileOut.model_validate(await get_profile(user.user_id))
