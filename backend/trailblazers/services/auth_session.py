# backend/trailblazers/services/auth_session.py
"""
Explicit authentication session.

Holds the current principal for one client. ``start()`` subscribes to the
identity service's auth-state stream (and restores a principal from an ID
token if given); ``close()`` unsubscribes. The session is handed to the
booking wizard and the dashboard services instead of being looked up from
ambient state.
"""

import logging
from typing import Any, Callable, Dict, Optional

from ..core.enums import RoleName
from ..core.exceptions import ForbiddenException, UnauthorizedException
from .identity_service import AuthUser, IdentityService, SignInResult

logger = logging.getLogger(__name__)


class AuthSession:
    def __init__(self, identity: IdentityService, id_token: Optional[str] = None):
        self.identity = identity
        self._id_token = id_token
        self._user: Optional[AuthUser] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    def start(self) -> "AuthSession":
        if self._unsubscribe is not None:
            return self
        self._unsubscribe = self.identity.subscribe(self._on_auth_state_changed)
        if self._id_token:
            self._user = self.identity.verify_id_token(self._id_token)
        return self

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._user = None
        self._id_token = None

    def __enter__(self) -> "AuthSession":
        return self.start()

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _on_auth_state_changed(self, user: Optional[AuthUser]) -> None:
        self._user = user
        if user is None:
            self._id_token = None

    @property
    def is_started(self) -> bool:
        return self._unsubscribe is not None

    @property
    def user(self) -> Optional[AuthUser]:
        return self._user

    @property
    def id_token(self) -> Optional[str]:
        return self._id_token

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def role(self) -> Optional[RoleName]:
        return self._user.role if self._user else None

    @property
    def claims(self) -> Dict[str, Any]:
        return dict(self._user.claims) if self._user else {}

    def sign_in(self, email: str, password: str) -> SignInResult:
        if not self.is_started:
            self.start()
        result = self.identity.sign_in(email, password)
        self._id_token = result.id_token
        return result

    def sign_out(self) -> None:
        self.identity.sign_out()

    def require_user(self) -> AuthUser:
        if self._user is None:
            raise UnauthorizedException("Authentication required", code="NOT_AUTHENTICATED")
        return self._user

    def require_role(self, *roles: RoleName) -> AuthUser:
        user = self.require_user()
        if not user.has_role(*roles):
            logger.warning(
                "User %s with role %s denied; needs one of %s",
                user.uid,
                user.role.value,
                [r.value for r in roles],
            )
            raise ForbiddenException(
                "You do not have permission to perform this action",
                code="FORBIDDEN",
                details={"required_roles": [r.value for r in roles]},
            )
        return user
