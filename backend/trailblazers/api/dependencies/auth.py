# backend/trailblazers/api/dependencies/auth.py
"""
Authentication and authorization dependencies.

Every request gets its own ``AuthSession`` restored from the bearer ID
token. The SSE endpoint also accepts the token as a ``token`` query
parameter because browsers' EventSource cannot set headers.
"""

import logging
from typing import Callable, Generator, Optional

from fastapi import Depends, Query
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from ...core.enums import RoleName
from ...services.auth_session import AuthSession
from ...services.identity_service import AuthUser, IdentityService
from .database import get_db

logger = logging.getLogger(__name__)

oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def get_identity_service(db: Session = Depends(get_db)) -> IdentityService:
    return IdentityService(db)


def get_auth_session(
    token: Optional[str] = Depends(oauth2_scheme_optional),
    identity: IdentityService = Depends(get_identity_service),
) -> Generator[AuthSession, None, None]:
    """Request-scoped session; an invalid token is rejected with 401."""
    session = AuthSession(identity, id_token=token)
    session.start()
    try:
        yield session
    finally:
        session.close()


def get_current_user(session: AuthSession = Depends(get_auth_session)) -> AuthUser:
    return session.require_user()


def get_stream_user(
    token: Optional[str] = Query(None, description="ID token for EventSource clients"),
    header_token: Optional[str] = Depends(oauth2_scheme_optional),
    identity: IdentityService = Depends(get_identity_service),
) -> AuthUser:
    with AuthSession(identity, id_token=header_token or token) as session:
        return session.require_user()


def require_roles(*roles: RoleName) -> Callable[[AuthSession], AuthUser]:
    """Dependency factory: the caller must hold one of ``roles``."""

    def verify(session: AuthSession = Depends(get_auth_session)) -> AuthUser:
        return session.require_role(*roles)

    return verify


require_admin = require_roles(RoleName.ADMIN)
