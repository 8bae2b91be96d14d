# backend/trailblazers/services/identity_service.py
"""
Identity service.

Email/password accounts with a role and a per-account custom-claim map.
Signing in issues a signed ID token carrying the role and claims; claims
changed later reach the holder on their next sign-in. Listeners registered
with ``subscribe`` receive every auth-state change (user on sign-in, None
on sign-out).
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlencode

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import RoleName
from ..core.exceptions import (
    ConflictException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
)
from ..core.security import (
    PyJWTError,
    create_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..repositories.user_repository import UserRepository
from .base import BaseService

ID_TOKEN_PURPOSE = "id"
PASSWORD_RESET_PURPOSE = "password_reset"


@dataclass(frozen=True)
class AuthUser:
    """The signed-in principal as carried by an ID token."""

    uid: str
    email: str
    name: str
    role: RoleName
    claims: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_user(cls, user: User) -> "AuthUser":
        return cls(
            uid=user.id,
            email=user.email,
            name=user.name,
            role=RoleName(user.role),
            claims=user.claims,
        )

    @property
    def assigned_hikes(self) -> List[str]:
        return list(self.claims.get("assignedHikes", []))

    def has_role(self, *roles: RoleName) -> bool:
        return self.role in roles


@dataclass(frozen=True)
class SignInResult:
    user: AuthUser
    id_token: str
    expires_in: int


AuthStateListener = Callable[[Optional[AuthUser]], None]


def _password_fingerprint(password_hash: str) -> str:
    # Changes whenever the password does, so a used reset link stops working
    return password_hash[-12:]


class IdentityService(BaseService):
    def __init__(self, db: Session, user_repository: Optional[UserRepository] = None):
        super().__init__(db)
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)
        self._listeners: List[AuthStateListener] = []

    # Auth-state stream

    def subscribe(self, listener: AuthStateListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, user: Optional[AuthUser]) -> None:
        for listener in list(self._listeners):
            listener(user)

    # Accounts

    @BaseService.measure_operation("register")
    def register(
        self, name: str, email: str, password: str, role: RoleName = RoleName.GUEST
    ) -> User:
        normalized_email = email.strip().lower()
        if self.user_repository.find_by_email(normalized_email):
            raise ConflictException(
                "An account with this email already exists",
                code="EMAIL_IN_USE",
                details={"email": normalized_email},
            )
        with self.transaction():
            user = self.user_repository.create(
                name=name.strip(),
                email=normalized_email,
                password_hash=get_password_hash(password),
                role=role.value,
                custom_claims={},
            )
        self.log_operation("register", user_id=user.id, role=role.value)
        return user

    @BaseService.measure_operation("sign_in")
    def sign_in(self, email: str, password: str) -> SignInResult:
        user = self.user_repository.find_by_email(email)
        if user is None or not user.is_active or not verify_password(password, user.password_hash):
            raise UnauthorizedException("Invalid email or password", code="INVALID_CREDENTIALS")

        principal = AuthUser.from_user(user)
        expires_in = settings.access_token_expire_minutes * 60
        token = create_token(
            subject=user.id,
            purpose=ID_TOKEN_PURPOSE,
            expires_delta=timedelta(seconds=expires_in),
            claims={
                "email": user.email,
                "name": user.name,
                "role": user.role,
                "claims": principal.claims,
            },
        )
        self.log_operation("sign_in", user_id=user.id)
        self._emit(principal)
        return SignInResult(user=principal, id_token=token, expires_in=expires_in)

    def sign_out(self) -> None:
        self._emit(None)

    def verify_id_token(self, token: str) -> AuthUser:
        try:
            payload = decode_token(token, ID_TOKEN_PURPOSE)
        except PyJWTError as e:
            self.logger.info(f"Rejected ID token: {str(e)}")
            raise UnauthorizedException("Invalid or expired token", code="INVALID_TOKEN")
        try:
            role = RoleName(payload.get("role"))
        except ValueError:
            raise UnauthorizedException("Invalid or expired token", code="INVALID_TOKEN")
        return AuthUser(
            uid=payload["sub"],
            email=payload.get("email", ""),
            name=payload.get("name", ""),
            role=role,
            claims=dict(payload.get("claims") or {}),
        )

    def get_user(self, uid: str) -> User:
        user = self.user_repository.get_by_id(uid)
        if user is None:
            raise NotFoundException("User not found", code="USER_NOT_FOUND", details={"uid": uid})
        return user

    def get_user_by_email(self, email: str) -> User:
        user = self.user_repository.find_by_email(email)
        if user is None:
            raise NotFoundException(
                "User not found", code="USER_NOT_FOUND", details={"email": email}
            )
        return user

    @BaseService.measure_operation("set_custom_claims")
    def set_custom_claims(self, uid: str, claims: Dict[str, Any]) -> User:
        """Replace the account's custom claims."""
        self.get_user(uid)
        with self.transaction():
            user = self.user_repository.set_custom_claims(uid, claims)
        self.log_operation("set_custom_claims", user_id=uid, claim_keys=sorted(claims))
        return user

    # Password reset / setup links

    def generate_password_reset_link(self, email: str, continue_url: Optional[str] = None) -> str:
        """
        Signed, expiring link that lets the account holder set a password.

        ``continue_url`` is where the holder lands after resetting.
        """
        user = self.get_user_by_email(email)
        token = create_token(
            subject=user.id,
            purpose=PASSWORD_RESET_PURPOSE,
            expires_delta=timedelta(minutes=settings.password_reset_expire_minutes),
            claims={
                "email": user.email,
                "pwf": _password_fingerprint(user.password_hash),
                "continue_url": continue_url or settings.app_url,
            },
        )
        query = urlencode({"oobCode": token, "continueUrl": continue_url or settings.app_url})
        return f"{settings.app_url.rstrip('/')}/reset-password?{query}"

    @BaseService.measure_operation("reset_password")
    def reset_password(self, token: str, new_password: str) -> str:
        """
        Set a new password from a reset link token.

        Returns:
            The link's continue URL
        """
        try:
            payload = decode_token(token, PASSWORD_RESET_PURPOSE)
        except PyJWTError:
            raise ValidationException("Reset link is invalid or has expired", code="INVALID_RESET_LINK")

        user = self.get_user(payload["sub"])
        if payload.get("pwf") != _password_fingerprint(user.password_hash):
            raise ValidationException("Reset link has already been used", code="INVALID_RESET_LINK")

        with self.transaction():
            self.user_repository.update(user.id, password_hash=get_password_hash(new_password))
        self.log_operation("reset_password", user_id=user.id)
        return str(payload.get("continue_url") or settings.app_url)
