"""AssignmentNotifier with mocked identity, notification and hike collaborators."""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from trailblazers.events.hike_events import HikeAssignmentChanged
from trailblazers.services.assignment_notifier import AssignmentNotifier

HIKE_ID = "01J0HIKE000000000000000000"
GUIDE_ID = "01J0GUIDE00000000000000000"


def _event(previous=None, new=GUIDE_ID):
    return HikeAssignmentChanged(
        hike_id=HIKE_ID,
        previous_guide_id=previous,
        new_guide_id=new,
        changed_at=datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def account():
    return SimpleNamespace(id=GUIDE_ID, email="guide@example.com", claims={})


@pytest.fixture
def collaborators(account):
    identity = MagicMock()
    identity.get_user.return_value = account
    identity.get_user_by_email.return_value = account
    identity.generate_password_reset_link.return_value = "http://app/reset-password?oobCode=x"

    def set_claims(uid, claims):
        account.claims = dict(claims)
        return account

    identity.set_custom_claims.side_effect = set_claims

    notifications = MagicMock()
    notifications.create_notification.return_value = SimpleNamespace(id="notif-1")
    notifications.take_events.return_value = ["event"]

    hikes = MagicMock()
    hikes.get_by_id.return_value = SimpleNamespace(id=HIKE_ID, title="Bruce Trail Loop")

    publish = MagicMock()
    return identity, notifications, hikes, publish


@pytest.fixture
def notifier(collaborators):
    identity, notifications, hikes, publish = collaborators
    return AssignmentNotifier(
        MagicMock(),
        identity=identity,
        notification_service=notifications,
        hike_repository=hikes,
        publish_notifications=publish,
    )


class TestAssignmentNotifier:
    def test_new_assignment_notifies_guide(self, notifier, collaborators, account):
        identity, notifications, _, publish = collaborators

        outcome = notifier.handle(_event())

        assert outcome.guide_id == GUIDE_ID
        assert outcome.notification_id == "notif-1"
        identity.generate_password_reset_link.assert_called_once_with(
            "guide@example.com", "http://localhost:5173/guide-dashboard"
        )
        identity.set_custom_claims.assert_called_once_with(
            GUIDE_ID, {"assignedHikes": [HIKE_ID]}
        )
        notifications.create_notification.assert_called_once_with(
            user_id=GUIDE_ID,
            title="New Hike Assignment",
            message='You have been assigned to guide "Bruce Trail Loop"',
            hike_id=HIKE_ID,
        )
        publish.assert_called_once_with(["event"])

    def test_second_delivery_is_a_no_op(self, notifier, collaborators):
        identity, notifications, _, _ = collaborators

        notifier.handle(_event())
        assert notifier.handle(_event()) is None

        assert identity.set_custom_claims.call_count == 1
        assert notifications.create_notification.call_count == 1
        assert identity.generate_password_reset_link.call_count == 1

    def test_existing_claims_are_kept(self, notifier, collaborators, account):
        identity, _, _, _ = collaborators
        account.claims = {"assignedHikes": ["other-hike"], "team": "north"}

        notifier.handle(_event())

        identity.set_custom_claims.assert_called_once_with(
            GUIDE_ID, {"assignedHikes": ["other-hike", HIKE_ID], "team": "north"}
        )

    @pytest.mark.parametrize(
        "previous,new", [(GUIDE_ID, None), (GUIDE_ID, GUIDE_ID), (None, None)]
    )
    def test_unassignment_and_unchanged_assignment_are_ignored(
        self, notifier, collaborators, previous, new
    ):
        identity, notifications, hikes, _ = collaborators

        assert notifier.handle(_event(previous=previous, new=new)) is None
        hikes.get_by_id.assert_not_called()
        identity.set_custom_claims.assert_not_called()
        notifications.create_notification.assert_not_called()

    def test_failures_are_logged_not_raised(self, notifier, collaborators, caplog):
        identity, notifications, _, _ = collaborators
        identity.generate_password_reset_link.side_effect = RuntimeError("mailer down")

        assert notifier.handle(_event()) is None
        assert "mailer down" in caplog.text
        notifications.create_notification.assert_not_called()

    def test_missing_hike_is_skipped(self, notifier, collaborators):
        identity, _, hikes, _ = collaborators
        hikes.get_by_id.return_value = None

        assert notifier.handle(_event()) is None
        identity.set_custom_claims.assert_not_called()
