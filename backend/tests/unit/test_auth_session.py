"""AuthSession lifecycle against a mocked identity service."""

from unittest.mock import MagicMock

import pytest

from trailblazers.core.enums import RoleName
from trailblazers.core.exceptions import ForbiddenException, UnauthorizedException
from trailblazers.services.auth_session import AuthSession
from trailblazers.services.identity_service import AuthUser, SignInResult

GUIDE = AuthUser(
    uid="01HZZZZZZZZZZZZZZZZZZZZZZZ",
    email="guide@example.com",
    name="Gil Guide",
    role=RoleName.GUIDE,
    claims={"assignedHikes": ["hike-1"]},
)


@pytest.fixture
def identity():
    identity = MagicMock()
    listeners = []

    def subscribe(listener):
        listeners.append(listener)
        return lambda: listeners.remove(listener)

    identity.subscribe.side_effect = subscribe
    identity.listeners = listeners
    return identity


class TestAuthSession:
    def test_start_and_close_manage_subscription(self, identity):
        session = AuthSession(identity).start()
        assert session.is_started
        assert len(identity.listeners) == 1

        session.close()
        assert not session.is_started
        assert identity.listeners == []

    def test_start_is_idempotent(self, identity):
        session = AuthSession(identity)
        session.start()
        session.start()

        assert identity.subscribe.call_count == 1

    def test_restores_user_from_token(self, identity):
        identity.verify_id_token.return_value = GUIDE

        with AuthSession(identity, id_token="token") as session:
            assert session.user == GUIDE
            assert session.role == RoleName.GUIDE
            assert session.claims == {"assignedHikes": ["hike-1"]}

        identity.verify_id_token.assert_called_once_with("token")

    def test_auth_state_changes_reach_the_session(self, identity):
        session = AuthSession(identity).start()
        assert not session.is_authenticated

        for listener in list(identity.listeners):
            listener(GUIDE)
        assert session.user == GUIDE

        for listener in list(identity.listeners):
            listener(None)
        assert session.user is None
        assert session.id_token is None

    def test_sign_in_keeps_the_token(self, identity):
        identity.sign_in.return_value = SignInResult(user=GUIDE, id_token="abc", expires_in=60)
        session = AuthSession(identity)

        session.sign_in("guide@example.com", "pw")

        assert session.is_started
        assert session.id_token == "abc"

    def test_require_user_without_principal(self, identity):
        with pytest.raises(UnauthorizedException) as exc:
            AuthSession(identity).start().require_user()
        assert exc.value.code == "NOT_AUTHENTICATED"

    def test_require_role(self, identity):
        identity.verify_id_token.return_value = GUIDE
        session = AuthSession(identity, id_token="token").start()

        assert session.require_role(RoleName.GUIDE, RoleName.ADMIN) == GUIDE
        with pytest.raises(ForbiddenException):
            session.require_role(RoleName.ADMIN)
