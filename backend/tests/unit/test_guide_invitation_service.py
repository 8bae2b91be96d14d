"""Guide invitations over an in-memory key-value store."""

from datetime import datetime, timedelta, timezone
import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from trailblazers.core.enums import RoleName
from trailblazers.core.exceptions import (
    ConflictException,
    ForbiddenException,
    ValidationException,
)
from trailblazers.services.guide_invitation_service import GuideInvitationService
from trailblazers.services.identity_service import AuthUser

ADMIN = AuthUser(uid="admin-1", email="admin@example.com", name="Ada", role=RoleName.ADMIN)
GUEST = AuthUser(uid="guest-1", email="guest@example.com", name="Gus", role=RoleName.GUEST)


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock(datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def identity():
    identity = MagicMock()
    identity.user_repository.find_by_email.return_value = None
    identity.register.side_effect = lambda name, email, password, role: SimpleNamespace(
        id="guide-1", name=name, email=email, role=role.value
    )
    return identity


@pytest.fixture
def service(kv_store, identity, clock):
    return GuideInvitationService(MagicMock(), kv_store, identity, clock=clock)


class TestCreateInvitation:
    def test_stores_token_under_shared_key(self, service, kv_store, clock):
        invitation = service.create_invitation("Gil Guide", " Gil@Example.com ", ADMIN)

        stored = json.loads(kv_store.get("guideTokens"))
        assert list(stored) == [invitation.token]
        assert stored[invitation.token]["email"] == "gil@example.com"
        assert invitation.expires_at == clock.now + timedelta(hours=24)
        assert service.registration_url(invitation.token).endswith(
            f"/guide-registration/{invitation.token}"
        )

    def test_existing_account_is_refused(self, service, identity, kv_store):
        identity.user_repository.find_by_email.return_value = SimpleNamespace(id="u1")

        with pytest.raises(ConflictException):
            service.create_invitation("Gil Guide", "gil@example.com", ADMIN)
        assert kv_store.get("guideTokens") is None

    def test_only_admins_invite(self, service):
        with pytest.raises(ForbiddenException):
            service.create_invitation("Gil Guide", "gil@example.com", GUEST)


class TestVerify:
    def test_live_token(self, service):
        invitation = service.create_invitation("Gil Guide", "gil@example.com", ADMIN)

        found = service.verify(invitation.token)

        assert found.email == "gil@example.com"
        assert found.name == "Gil Guide"

    def test_unknown_token(self, service):
        assert service.verify("nope") is None

    def test_expired_tokens_are_pruned_on_read(self, service, kv_store, clock):
        old = service.create_invitation("Old Guide", "old@example.com", ADMIN)
        clock.now += timedelta(hours=20)
        fresh = service.create_invitation("New Guide", "new@example.com", ADMIN)
        clock.now += timedelta(hours=5)

        assert service.verify(old.token) is None
        assert service.verify(fresh.token) is not None
        assert list(json.loads(kv_store.get("guideTokens"))) == [fresh.token]


class TestCompleteRegistration:
    def test_registers_guide_and_consumes_token(self, service, identity, kv_store):
        invitation = service.create_invitation("Gil Guide", "gil@example.com", ADMIN)

        user = service.complete_registration(invitation.token, "s3cret-pass")

        identity.register.assert_called_once_with(
            "Gil Guide", "gil@example.com", "s3cret-pass", role=RoleName.GUIDE
        )
        assert user.role == "guide"
        assert service.verify(invitation.token) is None
        assert kv_store.get("guideTokens") is None

    def test_expired_token_cannot_register(self, service, identity, clock):
        invitation = service.create_invitation("Gil Guide", "gil@example.com", ADMIN)
        clock.now += timedelta(hours=25)

        with pytest.raises(ValidationException) as exc:
            service.complete_registration(invitation.token, "s3cret-pass")
        assert exc.value.code == "INVALID_INVITATION"
        identity.register.assert_not_called()
