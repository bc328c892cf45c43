"""Credentials, access tokens and refresh-token rotation.

Passwords are stored as ``salt$hash`` (PBKDF2-SHA256). Access tokens are
short-lived JWTs carrying the user id and email; refresh tokens are opaque
random values kept on the user row and compared by exact match.
"""

from __future__ import annotations

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gamevault.backend.config import (
    ACCESS_TOKEN_EXPIRE_SECONDS,
    DEFAULT_USER_IMAGE,
    JWT_ALGORITHM,
    JWT_AUDIENCE,
    JWT_ISSUER,
    JWT_SECRET,
    PASSWORD_HASH_ITERATIONS,
    REFRESH_TOKEN_EXPIRE_DAYS,
)
from gamevault.backend.database import utcnow
from gamevault.backend.models import User

from .results import ErrorKind, ServiceResult

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password."
EMAIL_EXISTS = "Email already exists."
EMAIL_IN_USE = "Failed to update profile. Email may already be in use."


def hash_password(password: str, salt: Optional[str] = None) -> str:
    if salt is None:
        salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        PASSWORD_HASH_ITERATIONS,
    ).hex()
    return f"{salt}${digest}"


def verify_password(password: str, stored: str) -> bool:
    try:
        salt, _ = stored.split("$", 1)
    except ValueError:
        return False
    return secrets.compare_digest(hash_password(password, salt), stored)


def normalize_email(value: str) -> str:
    return value.strip().lower()


def generate_refresh_token() -> str:
    # 32 bytes = 256 bits
    return secrets.token_urlsafe(32)


def create_access_token(
    user: User, expires_seconds: int = ACCESS_TOKEN_EXPIRE_SECONDS
) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "iat": now,
        "exp": now + timedelta(seconds=expires_seconds),
        "type": "access",
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> ServiceResult[Dict[str, Any]]:
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
        )
    except jwt.ExpiredSignatureError:
        return ServiceResult.failure(ErrorKind.UNAUTHORIZED, "Token expired")
    except jwt.InvalidTokenError:
        return ServiceResult.failure(ErrorKind.UNAUTHORIZED, "Invalid token")
    if payload.get("type") != "access":
        return ServiceResult.failure(ErrorKind.UNAUTHORIZED, "Invalid token type")
    if not payload.get("sub"):
        return ServiceResult.failure(ErrorKind.UNAUTHORIZED, "Invalid user token.")
    return ServiceResult.success(payload)


@dataclass
class AuthSession:
    user: User
    access_token: str
    refresh_token: str


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        return (
            self.db.query(User).filter(User.email == normalize_email(email)).first()
        )

    def register(
        self, username: str, email: str, password: str
    ) -> ServiceResult[AuthSession]:
        refresh_token = generate_refresh_token()
        user = User(
            username=username.strip(),
            email=normalize_email(email),
            password_hash=hash_password(password),
            image=DEFAULT_USER_IMAGE,
            refresh_token=refresh_token,
            refresh_token_expires_at=utcnow()
            + timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Registration rejected: email already exists")
            return ServiceResult.failure(ErrorKind.VALIDATION, EMAIL_EXISTS)
        self.db.refresh(user)
        logger.info("Registered user %s", user.id)
        return ServiceResult.success(
            AuthSession(
                user=user,
                access_token=create_access_token(user),
                refresh_token=refresh_token,
            )
        )

    def login(self, email: str, password: str) -> ServiceResult[AuthSession]:
        user = self.get_user_by_email(email)
        stored_hash = getattr(user, "password_hash", None) if user else None
        if (
            user is None
            or not isinstance(stored_hash, str)
            or not verify_password(password, stored_hash)
        ):
            logger.warning("Failed login attempt")
            return ServiceResult.failure(ErrorKind.UNAUTHORIZED, INVALID_CREDENTIALS)
        return ServiceResult.success(self._issue_session(user))

    def refresh(self, user_id: str, refresh_token: str) -> ServiceResult[AuthSession]:
        user = self.get_user(user_id)
        if user is None or not self._refresh_token_valid(user, refresh_token):
            logger.warning("Rejected refresh token for user %s", user_id)
            return ServiceResult.failure(
                ErrorKind.UNAUTHORIZED, "Invalid refresh token."
            )
        return ServiceResult.success(self._issue_session(user))

    def logout(self, user_id: str) -> bool:
        user = self.get_user(user_id)
        if user is None:
            return False
        user.refresh_token = None
        user.refresh_token_expires_at = None
        self.db.commit()
        logger.info("Cleared refresh token for user %s", user_id)
        return True

    def get_profile(self, user_id: str) -> ServiceResult[User]:
        user = self.get_user(user_id)
        if user is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, "User not found.")
        return ServiceResult.success(user)

    def update_profile(
        self,
        user_id: str,
        *,
        username: str,
        email: str,
        image: Optional[str] = None,
    ) -> ServiceResult[User]:
        user = self.get_user(user_id)
        if user is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, "User not found.")
        user.username = username
        user.email = normalize_email(email)
        if image:
            user.image = image
        return self._commit_profile(user)

    def patch_profile(
        self,
        user_id: str,
        *,
        username: Optional[str] = None,
        email: Optional[str] = None,
        image: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> ServiceResult[User]:
        user = self.get_user(user_id)
        if user is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, "User not found.")
        if email:
            user.email = normalize_email(email)
        if username:
            user.username = username
        # empty string clears these two
        if image is not None:
            user.image = image
        if bio is not None:
            user.bio = bio
        return self._commit_profile(user)

    def _commit_profile(self, user: User) -> ServiceResult[User]:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Profile update rejected for user %s: email in use", user.id)
            return ServiceResult.failure(ErrorKind.VALIDATION, EMAIL_IN_USE)
        self.db.refresh(user)
        return ServiceResult.success(user)

    def _issue_session(self, user: User) -> AuthSession:
        refresh_token = generate_refresh_token()
        user.refresh_token = refresh_token
        user.refresh_token_expires_at = utcnow() + timedelta(
            days=REFRESH_TOKEN_EXPIRE_DAYS
        )
        self.db.commit()
        self.db.refresh(user)
        return AuthSession(
            user=user,
            access_token=create_access_token(user),
            refresh_token=refresh_token,
        )

    @staticmethod
    def _refresh_token_valid(user: User, refresh_token: str) -> bool:
        stored = user.refresh_token
        expires_at = user.refresh_token_expires_at
        if not stored or not refresh_token or expires_at is None:
            return False
        if expires_at <= utcnow():
            return False
        return secrets.compare_digest(
            stored.encode("utf-8"), refresh_token.encode("utf-8")
        )
