# backend/trailblazers/services/guide_invitation_service.py
"""
Guide invitations.

An admin invites a guide by name and email; the invitation is an opaque
token kept in a key-value store under one key (``guideTokens``) with a
24-hour expiry. Expired entries are pruned whenever the map is read.
Completing the registration creates the guide account and consumes the
token.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import json
import logging
import secrets
from typing import Any, Callable, Dict, Optional, Protocol

import redis
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import GUIDE_INVITATIONS_KEY
from ..core.enums import RoleName
from ..core.exceptions import ConflictException, ForbiddenException, ValidationException
from ..models.user import User
from .base import BaseService
from .identity_service import AuthUser, IdentityService

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> Any:
        ...

    def delete(self, key: str) -> Any:
        ...


class RedisKeyValueStore:
    """KeyValueStore backed by Redis strings."""

    def __init__(self, client: Optional[redis.Redis] = None):
        self.client = client or redis.Redis.from_url(settings.redis_url, decode_responses=True)

    def get(self, key: str) -> Optional[str]:
        value = self.client.get(key)
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> Any:
        return self.client.set(key, value)

    def delete(self, key: str) -> Any:
        return self.client.delete(key)


@dataclass(frozen=True)
class GuideInvitation:
    token: str
    name: str
    email: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "expiresAt": self.expires_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, token: str, data: Dict[str, Any]) -> "GuideInvitation":
        return cls(
            token=token,
            name=data["name"],
            email=data["email"],
            expires_at=datetime.fromisoformat(data["expiresAt"]),
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GuideInvitationService(BaseService):
    def __init__(
        self,
        db: Session,
        store: KeyValueStore,
        identity: Optional[IdentityService] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        super().__init__(db)
        self.store = store
        self.identity = identity or IdentityService(db)
        self.clock = clock

    def _load(self) -> Dict[str, GuideInvitation]:
        """Read the invitation map, dropping (and persisting the removal of) expired tokens."""
        raw = self.store.get(GUIDE_INVITATIONS_KEY)
        if not raw:
            return {}
        try:
            stored = json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable guide invitation map")
            self.store.delete(GUIDE_INVITATIONS_KEY)
            return {}

        now = self.clock()
        invitations: Dict[str, GuideInvitation] = {}
        pruned = 0
        for token, data in stored.items():
            invitation = GuideInvitation.from_dict(token, data)
            if invitation.is_expired(now):
                pruned += 1
                continue
            invitations[token] = invitation
        if pruned:
            logger.info("Pruned %d expired guide invitation(s)", pruned)
            self._save(invitations)
        return invitations

    def _save(self, invitations: Dict[str, GuideInvitation]) -> None:
        if not invitations:
            self.store.delete(GUIDE_INVITATIONS_KEY)
            return
        self.store.set(
            GUIDE_INVITATIONS_KEY,
            json.dumps({token: inv.to_dict() for token, inv in invitations.items()}),
        )

    def registration_url(self, token: str) -> str:
        return f"{settings.app_url.rstrip('/')}/guide-registration/{token}"

    @BaseService.measure_operation("create_invitation")
    def create_invitation(self, name: str, email: str, actor: AuthUser) -> GuideInvitation:
        if not actor.has_role(RoleName.ADMIN):
            raise ForbiddenException("Only admins can invite guides")
        normalized_email = email.strip().lower()
        if self.identity.user_repository.find_by_email(normalized_email):
            raise ConflictException(
                "A user with this email already exists",
                code="EMAIL_IN_USE",
                details={"email": normalized_email},
            )

        invitations = self._load()
        invitation = GuideInvitation(
            token=secrets.token_urlsafe(32),
            name=name.strip(),
            email=normalized_email,
            expires_at=self.clock() + timedelta(hours=settings.guide_invitation_ttl_hours),
        )
        invitations[invitation.token] = invitation
        self._save(invitations)
        self.log_operation("create_invitation", invited_email=normalized_email)
        return invitation

    def verify(self, token: str) -> Optional[GuideInvitation]:
        """The live invitation for ``token``, or None if unknown or expired."""
        return self._load().get(token)

    @BaseService.measure_operation("complete_registration")
    def complete_registration(self, token: str, password: str) -> User:
        invitations = self._load()
        invitation = invitations.get(token)
        if invitation is None:
            raise ValidationException(
                "Invitation is invalid or has expired", code="INVALID_INVITATION"
            )

        user = self.identity.register(
            invitation.name, invitation.email, password, role=RoleName.GUIDE
        )
        invitations.pop(token, None)
        self._save(invitations)
        self.log_operation("complete_registration", user_id=user.id)
        return user
