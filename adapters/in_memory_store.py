"""
In-memory meeting and action item stores for local development and tests.

Implements MeetingStorePort and ActionItemStorePort with plain dicts guarded
by a lock. Selected with ``DATABASE_URI=memory://``.

NOT for production: no persistence across restarts.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Iterable, List, Optional

from domain.models import (
    ActionItem,
    ActionItemFilters,
    ActionItemStats,
    Meeting,
    MeetingFilters,
    MeetingStats,
    MeetingStatus,
    utc_now,
)
from shared_utils.constants import LogScope
from shared_utils.logging_utils import get_scoped_logger


logger = get_scoped_logger(LogScope.ADAPTER)


class InMemoryMeetingStoreAdapter:
    """Dict-backed implementation of MeetingStorePort keyed by meeting_id."""

    def __init__(self) -> None:
        self._store: Dict[str, Meeting] = {}
        self._lock = threading.Lock()

    def put_meeting(self, meeting: Meeting) -> None:
        with self._lock:
            self._store[meeting.meeting_id] = meeting.model_copy(deep=True)
        logger.info("inmemory_put_meeting", meeting_id=meeting.meeting_id, total=len(self._store))

    def get_meeting(self, meeting_id: str) -> Optional[Meeting]:
        with self._lock:
            meeting = self._store.get(meeting_id)
            return meeting.model_copy(deep=True) if meeting else None

    def list_meetings(self, filters: Optional[MeetingFilters] = None) -> List[Meeting]:
        filters = filters or MeetingFilters()
        with self._lock:
            meetings = [m.model_copy(deep=True) for m in self._store.values()]

        if filters.status:
            meetings = [m for m in meetings if m.status == filters.status]
        if filters.date_from:
            meetings = [m for m in meetings if m.date >= filters.date_from]
        if filters.date_to:
            meetings = [m for m in meetings if m.date <= filters.date_to]
        return meetings

    def find_meeting(self, field: str, value: str) -> Optional[Meeting]:
        with self._lock:
            for meeting in self._store.values():
                if getattr(meeting, field, None) == value:
                    return meeting.model_copy(deep=True)
        return None

    def update_meeting(self, meeting_id: str, fields: Dict[str, Any]) -> Optional[Meeting]:
        with self._lock:
            meeting = self._store.get(meeting_id)
            if meeting is None:
                return None
            updated = meeting.model_copy(update={**fields, "updated_at": utc_now()}, deep=True)
            self._store[meeting_id] = updated
            return updated.model_copy(deep=True)

    def transition_status(
        self,
        meeting_id: str,
        to_status: MeetingStatus,
        from_statuses: Iterable[MeetingStatus],
    ) -> Optional[Meeting]:
        allowed = set(from_statuses)
        with self._lock:
            meeting = self._store.get(meeting_id)
            if meeting is None or meeting.status not in allowed:
                return None
            updated = meeting.model_copy(
                update={"status": to_status, "error_message": None, "updated_at": utc_now()},
                deep=True,
            )
            self._store[meeting_id] = updated
        logger.info("inmemory_status_transition", meeting_id=meeting_id, to_status=to_status.value)
        return updated.model_copy(deep=True)

    def append_action_item_ids(self, meeting_id: str, action_item_ids: List[str]) -> None:
        with self._lock:
            meeting = self._store.get(meeting_id)
            if meeting is None:
                return
            meeting.action_item_ids.extend(action_item_ids)
            meeting.updated_at = utc_now()

    def remove_action_item_id(self, meeting_id: str, action_item_id: str) -> None:
        with self._lock:
            meeting = self._store.get(meeting_id)
            if meeting is None or action_item_id not in meeting.action_item_ids:
                return
            meeting.action_item_ids.remove(action_item_id)
            meeting.updated_at = utc_now()

    def delete_meeting(self, meeting_id: str) -> bool:
        with self._lock:
            return self._store.pop(meeting_id, None) is not None

    def count_by_status(self) -> MeetingStats:
        with self._lock:
            return MeetingStats.from_statuses(m.status.value for m in self._store.values())


class InMemoryActionItemStoreAdapter:
    """Dict-backed implementation of ActionItemStorePort keyed by action_item_id."""

    def __init__(self) -> None:
        self._store: Dict[str, ActionItem] = {}
        self._lock = threading.Lock()

    def put_items(self, items: List[ActionItem]) -> None:
        with self._lock:
            for item in items:
                self._store[item.action_item_id] = item.model_copy(deep=True)
        logger.info("inmemory_put_action_items", count=len(items), total=len(self._store))

    def get_item(self, action_item_id: str) -> Optional[ActionItem]:
        with self._lock:
            item = self._store.get(action_item_id)
            return item.model_copy(deep=True) if item else None

    def list_items(self, filters: Optional[ActionItemFilters] = None) -> List[ActionItem]:
        filters = filters or ActionItemFilters()
        with self._lock:
            items = [i.model_copy(deep=True) for i in self._store.values()]

        if filters.priority:
            items = [i for i in items if i.priority == filters.priority]
        if filters.status:
            items = [i for i in items if i.status == filters.status]
        if filters.meeting_id:
            items = [i for i in items if i.meeting_id == filters.meeting_id]
        if filters.due_date_before:
            items = [i for i in items if i.due_date and i.due_date <= filters.due_date_before]
        if filters.due_date_after:
            items = [i for i in items if i.due_date and i.due_date >= filters.due_date_after]
        return items

    def update_item(self, action_item_id: str, fields: Dict[str, Any]) -> Optional[ActionItem]:
        with self._lock:
            item = self._store.get(action_item_id)
            if item is None:
                return None
            updated = item.model_copy(update={**fields, "updated_at": utc_now()}, deep=True)
            self._store[action_item_id] = updated
            return updated.model_copy(deep=True)

    def delete_item(self, action_item_id: str) -> bool:
        with self._lock:
            return self._store.pop(action_item_id, None) is not None

    def delete_by_meeting(self, meeting_id: str) -> int:
        with self._lock:
            doomed = [k for k, i in self._store.items() if i.meeting_id == meeting_id]
            for key in doomed:
                del self._store[key]
        logger.info("inmemory_delete_action_items", meeting_id=meeting_id, count=len(doomed))
        return len(doomed)

    def count(self, meeting_id: Optional[str] = None) -> ActionItemStats:
        return ActionItemStats.from_items(self.list_items(ActionItemFilters(meeting_id=meeting_id)))
