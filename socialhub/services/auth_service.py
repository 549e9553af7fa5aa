"""Authentication, identity resolution and authorization guards.

Every core operation receives the acting user's id explicitly. The FastAPI
dependencies below are the only place a bearer token is turned into that id;
:func:`require_actor` and :func:`ensure_owner_or_role` are the shared guards
applied on each data-access path.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Tuple
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..constants import CONTENT_MODERATOR_ROLES, ROLE_USER
from ..database import get_session, unit_of_work
from ..models import User
from ..schemas import RegisterRequest
from .results import ConflictError, ForbiddenError, UnauthenticatedError

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)
_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

_PLACEHOLDER_SECRETS = frozenset({"changeme", "change-me", "placeholder", "example", "secret"})


def _get_jwt_secret() -> str:
    secret = (get_settings().jwt_secret_key or "").strip()
    if not secret or secret.lower() in _PLACEHOLDER_SECRETS:
        raise RuntimeError("JWT_SECRET_KEY is required and must not use a placeholder value")
    return secret


def hash_password(password: str) -> str:
    """Hash a plain-text password using bcrypt."""

    return _pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """Verify that ``password`` matches ``hashed_password``."""

    try:
        return _pwd_context.verify(password, hashed_password)
    except ValueError:
        logger.warning("Stored password hash could not be parsed")
        return False


def create_access_token(subject: UUID, *, expires_minutes: Optional[int] = None) -> str:
    """Create a signed JWT holding the provided ``subject``."""

    settings = get_settings()
    expire_delta = timedelta(minutes=expires_minutes or settings.jwt_expires_minutes)
    now = datetime.now(timezone.utc)
    payload = {"sub": str(subject), "exp": now + expire_delta, "iat": now}
    return jwt.encode(payload, _get_jwt_secret(), algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> UUID:
    """Decode and validate a JWT, returning the embedded subject UUID."""

    try:
        payload = jwt.decode(token, _get_jwt_secret(), algorithms=[get_settings().jwt_algorithm])
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    subject = payload.get("sub")
    if not subject:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    try:
        return UUID(subject)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload") from exc


def register_user(db: Session, payload: RegisterRequest) -> Tuple[User, str]:
    """Persist a new user and return the user with an access token."""

    email = str(payload.email).lower()
    if db.scalar(select(User.id).where(func.lower(User.username) == payload.username.lower())) is not None:
        raise ConflictError("Username already in use")
    if db.scalar(select(User.id).where(User.email == email)) is not None:
        raise ConflictError("Email already registered")

    user = User(
        name=payload.name.strip(),
        username=payload.username,
        email=email,
        hashed_password=hash_password(payload.password),
        role=ROLE_USER,
    )
    try:
        with unit_of_work(db):
            db.add(user)
    except IntegrityError as exc:
        raise ConflictError("Username or email already in use") from exc

    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user, create_access_token(user.id)


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Authenticate a user against stored credentials."""

    user = db.scalar(select(User).where(User.email == email.lower()))
    if user is None:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def require_actor(actor_id: UUID | None) -> UUID:
    """Refuse the operation when no authenticated actor could be resolved."""

    if actor_id is None:
        raise UnauthenticatedError()
    return actor_id


def load_actor(db: Session, actor_id: UUID | None) -> User:
    """Return the acting user, refusing when unauthenticated or unknown."""

    user = db.get(User, require_actor(actor_id))
    if user is None:
        raise UnauthenticatedError()
    return user


def has_role(user: User, roles: Iterable[str]) -> bool:
    return (user.role or ROLE_USER).upper() in {role.upper() for role in roles}


def ensure_owner_or_role(
    actor: User,
    owner_id: UUID,
    *,
    roles: Iterable[str] = CONTENT_MODERATOR_ROLES,
    message: str = "You are not allowed to do that",
) -> None:
    """Allow the owner of an entity, or a user holding one of ``roles``."""

    if actor.id == owner_id or has_role(actor, roles):
        return
    raise ForbiddenError(message)


def ensure_role(actor: User, *roles: str) -> None:
    if not has_role(actor, roles):
        raise ForbiddenError("Insufficient permissions")


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_security),
    db: Session = Depends(get_session),
) -> User:
    """Resolve the authenticated user from the provided bearer token."""

    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    user = db.get(User, decode_access_token(credentials.credentials))
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return user


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
    db: Session = Depends(get_session),
) -> User | None:
    """Return the authenticated user when a valid bearer token is provided."""

    if not credentials or credentials.scheme.lower() != "bearer":
        return None

    try:
        user_id = decode_access_token(credentials.credentials)
    except HTTPException:
        return None

    return db.get(User, user_id)


async def get_optional_actor_id(user: User | None = Depends(get_optional_user)) -> UUID | None:
    """Resolve the current actor id, or ``None`` for anonymous requests."""

    return user.id if user is not None else None


def require_roles(*allowed_roles: str):
    async def _resolver(user: User = Depends(get_current_user)) -> User:
        if allowed_roles and not has_role(user, allowed_roles):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return user

    return _resolver


__all__ = [
    "register_user",
    "authenticate_user",
    "create_access_token",
    "decode_access_token",
    "hash_password",
    "verify_password",
    "require_actor",
    "load_actor",
    "has_role",
    "ensure_owner_or_role",
    "ensure_role",
    "get_current_user",
    "get_optional_user",
    "get_optional_actor_id",
    "require_roles",
]
