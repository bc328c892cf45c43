import re
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Header, HTTPException, Response, status
from pydantic import Field, field_validator
from sqlalchemy.orm import Session

from gamevault.backend.api.errors import raise_for_result
from gamevault.backend.api.schemas import CamelModel
from gamevault.backend.config import (
    REFRESH_TOKEN_COOKIE_NAME,
    REFRESH_TOKEN_COOKIE_SECURE,
    REFRESH_TOKEN_EXPIRE_DAYS,
)
from gamevault.backend.database import get_db
from gamevault.backend.models import User
from gamevault.backend.services.auth_service import (
    AuthService,
    AuthSession,
    decode_access_token,
)

router = APIRouter()

EMAIL_REGEX = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
REFRESH_TOKEN_MAX_AGE = REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60


def _validate_email_format(value: str) -> str:
    stripped = value.strip()
    if not EMAIL_REGEX.match(stripped):
        raise ValueError("Invalid email format")
    return stripped.lower()


def _validate_username(value: str) -> str:
    stripped = value.strip()
    if not stripped:
        raise ValueError("Username is required")
    return stripped


class RegisterRequest(CamelModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: str
    password: str = Field(..., min_length=1)

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        return _validate_username(value)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _validate_email_format(value)


class LoginRequest(CamelModel):
    email: str
    password: str


class AuthResponse(CamelModel):
    id: str
    username: str
    access_token: str
    image: Optional[str] = None


class ProfileResponse(CamelModel):
    id: str
    username: str
    email: str
    image: Optional[str] = None
    bio: Optional[str] = None
    created_at: datetime


class ProfileUpdateRequest(CamelModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: str
    image: Optional[str] = None

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        return _validate_username(value)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _validate_email_format(value)


class ProfilePatchRequest(CamelModel):
    username: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = None
    image: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=2000)

    @field_validator("username")
    @classmethod
    def strip_username(cls, value: Optional[str]) -> Optional[str]:
        # blank leaves the current username
        return value.strip() if value else value

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return value
        return _validate_email_format(value)


def _set_refresh_cookie(response: Response, refresh_token: str) -> None:
    response.set_cookie(
        key=REFRESH_TOKEN_COOKIE_NAME,
        value=refresh_token,
        max_age=REFRESH_TOKEN_MAX_AGE,
        expires=REFRESH_TOKEN_MAX_AGE,
        path="/",
        httponly=True,
        secure=REFRESH_TOKEN_COOKIE_SECURE,
        samesite="strict",
    )


def _to_auth_response(session: AuthSession) -> AuthResponse:
    return AuthResponse(
        id=session.user.id,
        username=session.user.username,
        access_token=session.access_token,
        image=session.user.image,
    )


def get_current_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> User:
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing authorization"
        )
    try:
        scheme, token = authorization.split(" ", 1)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header",
        )
    if scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid auth scheme"
        )

    decoded = decode_access_token(token.strip())
    raise_for_result(decoded)
    user = AuthService(db).get_user(decoded.value["sub"])
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found"
        )
    return user


@router.post("/register", response_model=AuthResponse)
def register(req: RegisterRequest, response: Response, db: Session = Depends(get_db)):
    result = AuthService(db).register(req.username, req.email, req.password)
    raise_for_result(result)
    _set_refresh_cookie(response, result.value.refresh_token)
    return _to_auth_response(result.value)


@router.post("/login", response_model=AuthResponse)
def login(req: LoginRequest, response: Response, db: Session = Depends(get_db)):
    result = AuthService(db).login(req.email, req.password)
    raise_for_result(result)
    _set_refresh_cookie(response, result.value.refresh_token)
    return _to_auth_response(result.value)


@router.post("/refresh-token", response_model=AuthResponse)
def refresh_token(
    response: Response,
    refresh_cookie: Optional[str] = Cookie(None, alias=REFRESH_TOKEN_COOKIE_NAME),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not refresh_cookie:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token not found.",
        )
    result = AuthService(db).refresh(current_user.id, refresh_cookie)
    raise_for_result(result)
    _set_refresh_cookie(response, result.value.refresh_token)
    return _to_auth_response(result.value)


@router.post("/logout")
def logout(
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    AuthService(db).logout(current_user.id)
    response.delete_cookie(
        key=REFRESH_TOKEN_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=REFRESH_TOKEN_COOKIE_SECURE,
        samesite="strict",
    )
    return {"message": "Successfully logged out"}


@router.get("")
def authenticated_only(current_user: User = Depends(get_current_user)):
    return "You are authenticated"


@router.get("/profile", response_model=ProfileResponse)
def read_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = AuthService(db).get_profile(current_user.id)
    raise_for_result(result)
    return ProfileResponse.model_validate(result.value)


@router.put("/profile", response_model=ProfileResponse)
def update_profile(
    req: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = AuthService(db).update_profile(
        current_user.id,
        username=req.username,
        email=req.email,
        image=req.image,
    )
    raise_for_result(result)
    return ProfileResponse.model_validate(result.value)


@router.patch("/profile", response_model=ProfileResponse)
def patch_profile(
    req: ProfilePatchRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = AuthService(db).patch_profile(
        current_user.id,
        username=req.username,
        email=req.email,
        image=req.image,
        bio=req.bio,
    )
    raise_for_result(result)
    return ProfileResponse.model_validate(result.value)
