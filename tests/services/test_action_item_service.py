"""
Tests for services.action_item_service over the in-memory stores.
"""

from datetime import datetime, timedelta, timezone

import pytest

from domain.models import (
    ActionItem,
    ActionItemCreate,
    ActionItemFilters,
    ActionItemPriority,
    ActionItemStats,
    ActionItemStatus,
    ActionItemUpdate,
)
from services.action_item_service import sort_action_items
from shared_utils.constants import Defaults
from shared_utils.error_handler import NotFoundError, ValidationError


def _create(service, meeting_id: str, text: str = "Task", priority: str = "Medium", **extra):
    return service.create(
        ActionItemCreate(meeting_id=meeting_id, text=text, priority=priority, **extra)
    )


class TestSortActionItems:
    def test_priority_then_newest(self) -> None:
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        old_high = ActionItem(meeting_id="m", text="old high", priority="High", created_at=base)
        new_high = ActionItem(
            meeting_id="m", text="new high", priority="High", created_at=base + timedelta(hours=1)
        )
        new_low = ActionItem(
            meeting_id="m", text="new low", priority="Low", created_at=base + timedelta(hours=2)
        )
        medium = ActionItem(meeting_id="m", text="medium", priority="Medium", created_at=base)

        ordered = sort_action_items([new_low, old_high, medium, new_high])

        assert [i.text for i in ordered] == ["new high", "old high", "medium", "new low"]


class TestCreate:
    def test_create_links_to_meeting(self, action_item_service, meeting_store, make_meeting) -> None:
        meeting = make_meeting()

        item = _create(action_item_service, meeting.meeting_id, assignee="Ann")

        assert item.status == ActionItemStatus.PENDING
        assert item.assignee == "Ann"
        assert meeting_store.get_meeting(meeting.meeting_id).action_item_ids == [item.action_item_id]

    def test_create_for_unknown_meeting_raises(self, action_item_service, action_item_store) -> None:
        with pytest.raises(NotFoundError, match="Meeting not found"):
            _create(action_item_service, "missing")
        assert action_item_store.list_items() == []

    def test_bulk_create_does_not_link(self, action_item_service, meeting_store, make_meeting) -> None:
        meeting = make_meeting()

        created = action_item_service.bulk_create(
            [
                ActionItemCreate(meeting_id=meeting.meeting_id, text="a", priority="High"),
                ActionItemCreate(meeting_id=meeting.meeting_id, text="b", priority="Low"),
            ]
        )

        assert len(created) == 2
        assert meeting_store.get_meeting(meeting.meeting_id).action_item_ids == []


class TestRead:
    def test_list_annotates_meeting(self, action_item_service, make_meeting) -> None:
        meeting = make_meeting(title="Planning")
        _create(action_item_service, meeting.meeting_id)

        views = action_item_service.list()

        assert views[0].meeting_title == "Planning"
        assert views[0].meeting_date == meeting.date

    def test_orphan_item_gets_placeholder_title(
        self, action_item_service, action_item_store
    ) -> None:
        action_item_store.put_items([ActionItem(meeting_id="gone", text="x", priority="Low")])

        views = action_item_service.list()

        assert views[0].meeting_title == Defaults.UNKNOWN_MEETING_TITLE
        assert views[0].meeting_date is None

    def test_list_filters(self, action_item_service, make_meeting) -> None:
        meeting = make_meeting()
        other = make_meeting(title="Other")
        _create(action_item_service, meeting.meeting_id, text="high", priority="High")
        _create(action_item_service, meeting.meeting_id, text="low", priority="Low")
        _create(action_item_service, other.meeting_id, text="other", priority="High")

        high = action_item_service.list(ActionItemFilters(priority=ActionItemPriority.HIGH))
        scoped = action_item_service.list(ActionItemFilters(meeting_id=meeting.meeting_id))

        assert sorted(i.text for i in high) == ["high", "other"]
        assert [i.text for i in scoped] == ["high", "low"]

    def test_due_date_bounds_are_inclusive(self, action_item_service, make_meeting) -> None:
        meeting = make_meeting()
        due = datetime(2026, 3, 6, tzinfo=timezone.utc)
        _create(action_item_service, meeting.meeting_id, text="due", due_date=due)
        _create(action_item_service, meeting.meeting_id, text="undated")

        before = action_item_service.list(ActionItemFilters(due_date_before=due))
        after = action_item_service.list(ActionItemFilters(due_date_after=due))

        assert [i.text for i in before] == ["due"]
        assert [i.text for i in after] == ["due"]

    def test_get_missing_raises(self, action_item_service) -> None:
        with pytest.raises(NotFoundError, match="Action item not found"):
            action_item_service.get("nope")

    def test_stats_scoped_and_global(self, action_item_service, make_meeting) -> None:
        meeting = make_meeting()
        other = make_meeting(title="Other")
        _create(action_item_service, meeting.meeting_id, priority="High")
        _create(action_item_service, meeting.meeting_id, priority="Low", status="Completed")
        _create(action_item_service, other.meeting_id, priority="Medium")

        scoped = action_item_service.stats(meeting.meeting_id)
        overall = action_item_service.stats()

        assert (scoped.total, scoped.completed, scoped.high, scoped.low) == (2, 1, 1, 1)
        assert overall.total == 3
        assert action_item_service.stats("unknown") == ActionItemStats()


class TestUpdateDelete:
    def test_update_partial(self, action_item_service, make_meeting) -> None:
        meeting = make_meeting()
        item = _create(action_item_service, meeting.meeting_id, assignee="Ann")

        updated = action_item_service.update(
            item.action_item_id, ActionItemUpdate(status=ActionItemStatus.COMPLETED)
        )

        assert updated.status == ActionItemStatus.COMPLETED
        assert updated.assignee == "Ann"
        assert updated.text == item.text

    def test_update_can_clear_due_date(self, action_item_service, make_meeting) -> None:
        meeting = make_meeting()
        item = _create(
            action_item_service, meeting.meeting_id, due_date=datetime(2026, 4, 1, tzinfo=timezone.utc)
        )

        updated = action_item_service.update(item.action_item_id, ActionItemUpdate(due_date=None))

        assert updated.due_date is None

    def test_update_without_fields_raises(self, action_item_service, make_meeting) -> None:
        item = _create(action_item_service, make_meeting().meeting_id)
        with pytest.raises(ValidationError, match="No updates provided"):
            action_item_service.update(item.action_item_id, ActionItemUpdate())

    def test_update_missing_raises(self, action_item_service) -> None:
        with pytest.raises(NotFoundError):
            action_item_service.update("nope", ActionItemUpdate(text="x"))

    def test_delete_unlinks_from_meeting(
        self, action_item_service, meeting_store, make_meeting
    ) -> None:
        meeting = make_meeting()
        keep = _create(action_item_service, meeting.meeting_id, text="keep")
        drop = _create(action_item_service, meeting.meeting_id, text="drop")

        action_item_service.delete(drop.action_item_id)

        assert meeting_store.get_meeting(meeting.meeting_id).action_item_ids == [keep.action_item_id]
        with pytest.raises(NotFoundError):
            action_item_service.get(drop.action_item_id)

    def test_delete_missing_raises(self, action_item_service) -> None:
        with pytest.raises(NotFoundError):
            action_item_service.delete("nope")
