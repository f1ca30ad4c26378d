import jwt
from fastapi import APIRouter, Cookie, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from familink.config import settings
from familink.dependencies import (
    DbSession,
    create_access_token,
    create_refresh_token,
)
from familink.models.user import User
from familink.schemas.auth import (
    AccessTokenResponse,
    LoginRequest,
    RegisterRequest,
)

router = APIRouter(prefix="/auth", tags=["auth"])

REFRESH_COOKIE_NAME = "familink_refresh_token"
REFRESH_COOKIE_MAX_AGE = settings.refresh_token_expire_days * 86400
DUPLICATE_EMAIL_DETAIL = "A user with this email already exists."


def set_refresh_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=True,
        samesite="none",
        path="/auth",
        max_age=REFRESH_COOKIE_MAX_AGE,
    )


def delete_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=REFRESH_COOKIE_NAME,
        httponly=True,
        secure=True,
        samesite="none",
        path="/auth",
    )


@router.post("/login", response_model=AccessTokenResponse)
def login(request: LoginRequest, response: Response, db: DbSession):
    user = db.execute(
        select(User).where(User.email == request.email.strip().lower())
    ).scalar_one_or_none()

    if user is None or not user.check_password(request.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)

    set_refresh_cookie(response, create_refresh_token(user))
    return AccessTokenResponse(access_token=create_access_token(user))


@router.post(
    "/register",
    response_model=AccessTokenResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(request: RegisterRequest, response: Response, db: DbSession):
    email = request.email.strip().lower()
    existing = db.execute(
        select(User).where(User.email == email)
    ).scalar_one_or_none()
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_EMAIL_DETAIL
        )

    user = User(email=email, name=request.name, password_hash="")
    user.set_password(request.password)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_EMAIL_DETAIL
        ) from None

    set_refresh_cookie(response, create_refresh_token(user))
    return AccessTokenResponse(access_token=create_access_token(user))


@router.post("/refresh", response_model=AccessTokenResponse)
def refresh(
    response: Response,
    db: DbSession,
    familink_refresh_token: str | None = Cookie(default=None),
):
    if familink_refresh_token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)

    try:
        payload = jwt.decode(
            familink_refresh_token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)

    if payload.get("type") != "refresh":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)

    user = db.get(User, int(payload["sub"]))
    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)

    set_refresh_cookie(response, create_refresh_token(user))
    return AccessTokenResponse(access_token=create_access_token(user))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(response: Response):
    delete_refresh_cookie(response)
