"""IdentityService and guide invitations against SQLite."""

from urllib.parse import parse_qs, urlparse

import pytest

from trailblazers.core.enums import RoleName
from trailblazers.core.exceptions import (
    ConflictException,
    UnauthorizedException,
    ValidationException,
)
from trailblazers.services.guide_invitation_service import GuideInvitationService
from trailblazers.services.identity_service import AuthUser, IdentityService


@pytest.fixture
def identity(db):
    return IdentityService(db)


def _oob_code(link: str) -> str:
    return parse_qs(urlparse(link).query)["oobCode"][0]


class TestAccounts:
    def test_register_normalizes_email(self, identity):
        user = identity.register("  Robin Hood ", "Robin@Example.COM", "sherwood-forest")

        assert user.email == "robin@example.com"
        assert user.name == "Robin Hood"
        assert user.role == RoleName.GUEST.value

    def test_register_existing_email_conflicts(self, identity, guest):
        with pytest.raises(ConflictException) as exc:
            identity.register("Someone", "GUEST@example.com", "password123")

        assert exc.value.code == "EMAIL_IN_USE"

    def test_sign_in_and_verify_token(self, identity, guest):
        result = identity.sign_in("guest@example.com", "trail-secret")

        principal = identity.verify_id_token(result.id_token)
        assert principal.uid == guest.id
        assert principal.role == RoleName.GUEST
        assert result.expires_in > 0

    def test_wrong_password_rejected(self, identity, guest):
        with pytest.raises(UnauthorizedException):
            identity.sign_in("guest@example.com", "wrong-password")

    def test_garbage_token_rejected(self, identity):
        with pytest.raises(UnauthorizedException):
            identity.verify_id_token("not-a-jwt")

    def test_sign_in_notifies_listeners(self, identity, guest):
        seen = []
        unsubscribe = identity.subscribe(seen.append)

        identity.sign_in("guest@example.com", "trail-secret")
        identity.sign_out()
        unsubscribe()
        identity.sign_in("guest@example.com", "trail-secret")

        assert [u.uid if u else None for u in seen] == [guest.id, None]

    def test_custom_claims_carried_in_token(self, identity, guide):
        identity.set_custom_claims(guide.id, {"assignedHikes": ["hike-1"]})

        token = identity.sign_in("guide@example.com", "trail-secret").id_token
        assert identity.verify_id_token(token).assigned_hikes == ["hike-1"]


class TestPasswordReset:
    def test_reset_link_is_single_use(self, identity, guest):
        link = identity.generate_password_reset_link(
            "guest@example.com", "http://localhost:5173/guide-dashboard"
        )
        code = _oob_code(link)

        continue_url = identity.reset_password(code, "new-trail-secret")

        assert continue_url == "http://localhost:5173/guide-dashboard"
        identity.sign_in("guest@example.com", "new-trail-secret")
        with pytest.raises(ValidationException):
            identity.reset_password(code, "another-secret")

    def test_reset_link_targets_reset_page(self, identity, guest):
        link = identity.generate_password_reset_link("guest@example.com")

        parsed = urlparse(link)
        assert parsed.path == "/reset-password"
        assert parse_qs(parsed.query)["continueUrl"] == ["http://localhost:5173"]

    def test_bad_reset_code(self, identity):
        with pytest.raises(ValidationException):
            identity.reset_password("bogus", "whatever-123")


class TestGuideInvitations:
    def test_invited_guide_can_register_once(self, db, identity, admin, kv_store):
        service = GuideInvitationService(db, kv_store, identity=identity)
        invitation = service.create_invitation(
            "Gale Ridge", "gale@example.com", AuthUser.from_user(admin)
        )

        user = service.complete_registration(invitation.token, "summit-pass")

        assert user.role == RoleName.GUIDE.value
        assert user.email == "gale@example.com"
        assert identity.sign_in("gale@example.com", "summit-pass").user.role == RoleName.GUIDE
        assert service.verify(invitation.token) is None
        with pytest.raises(ValidationException):
            service.complete_registration(invitation.token, "summit-pass")

    def test_registration_url(self, db, kv_store):
        service = GuideInvitationService(db, kv_store)

        assert service.registration_url("abc") == "http://localhost:5173/guide-registration/abc"
