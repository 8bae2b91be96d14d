"""HikeAssignmentChanged serialization and EventPublisher dispatch."""

from datetime import datetime, timezone

from trailblazers.events.hike_events import HikeAssignmentChanged
from trailblazers.events.publisher import EventPublisher

CHANGED_AT = datetime(2024, 6, 1, 12, 30, tzinfo=timezone.utc)


def _event(**overrides):
    values = dict(
        hike_id="hike-1", previous_guide_id=None, new_guide_id="guide-1", changed_at=CHANGED_AT
    )
    values.update(overrides)
    return HikeAssignmentChanged(**values)


class TestHikeAssignmentChanged:
    def test_should_notify_only_for_a_new_guide(self):
        assert _event().should_notify
        assert _event(previous_guide_id="guide-0").should_notify
        assert not _event(previous_guide_id="guide-1").should_notify
        assert not _event(previous_guide_id="guide-1", new_guide_id=None).should_notify

    def test_from_dict_parses_iso_timestamp(self):
        payload = {**_event().to_dict(), "changed_at": CHANGED_AT.isoformat()}

        assert HikeAssignmentChanged.from_dict(payload) == _event()


class TestEventPublisher:
    def test_publish_serializes_datetimes(self):
        calls = []
        EventPublisher(lambda kind, payload: calls.append((kind, payload))).publish(_event())

        assert calls == [
            (
                "HikeAssignmentChanged",
                {
                    "hike_id": "hike-1",
                    "previous_guide_id": None,
                    "new_guide_id": "guide-1",
                    "changed_at": CHANGED_AT.isoformat(),
                },
            )
        ]

    def test_dispatch_failure_is_swallowed(self, caplog):
        def broken(kind, payload):
            raise ConnectionError("broker unreachable")

        EventPublisher(broken).publish(_event())

        assert "broker unreachable" in caplog.text
