"""
ActionItemService: CRUD, listing and statistics for action items.

Items are fetched from the store unordered and sorted once here by a single
comparator: priority rank (High, Medium, Low), then newest first.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from domain.models import (
    ActionItem,
    ActionItemCreate,
    ActionItemFilters,
    ActionItemStats,
    ActionItemUpdate,
    ActionItemView,
    Meeting,
)
from ports.action_item_store import ActionItemStorePort
from ports.meeting_store import MeetingStorePort
from shared_utils.constants import Defaults, LogScope
from shared_utils.error_handler import NotFoundError, ValidationError
from shared_utils.logging_utils import ContextualLogger


logger = ContextualLogger(scope=LogScope.ACTION_ITEM_SERVICE)


def sort_action_items(items: List[ActionItem]) -> List[ActionItem]:
    """Priority rank ascending, then created_at descending."""
    by_recency = sorted(items, key=lambda i: i.created_at, reverse=True)
    return sorted(by_recency, key=lambda i: i.priority.rank)


class ActionItemService:
    """Action item use cases over the meeting and action item stores."""

    def __init__(
        self,
        *,
        action_item_store: ActionItemStorePort,
        meeting_store: MeetingStorePort,
    ) -> None:
        self._items = action_item_store
        self._meetings = meeting_store

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, data: ActionItemCreate) -> ActionItem:
        """Create one item and link it to its meeting.

        Raises:
            NotFoundError: If the meeting does not exist.
        """
        if self._meetings.get_meeting(data.meeting_id) is None:
            raise NotFoundError("Meeting not found", context={"meeting_id": data.meeting_id})

        item = ActionItem(**data.model_dump())
        self._items.put_items([item])
        self._meetings.append_action_item_ids(item.meeting_id, [item.action_item_id])
        logger.info(
            "action_item_created",
            action_item_id=item.action_item_id,
            meeting_id=item.meeting_id,
            priority=item.priority.value,
        )
        return item

    def bulk_create(self, items: List[ActionItemCreate]) -> List[ActionItem]:
        """Persist several items in a single batch.

        The caller links the ids to their meeting.
        """
        created = [ActionItem(**data.model_dump()) for data in items]
        self._items.put_items(created)
        logger.info(
            "action_items_bulk_created",
            meeting_ids=sorted({item.meeting_id for item in created}),
            count=len(created),
        )
        return created

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list(self, filters: Optional[ActionItemFilters] = None) -> List[ActionItemView]:
        items = sort_action_items(self._items.list_items(filters or ActionItemFilters()))
        return self._annotate(items)

    def list_by_meeting(self, meeting_id: str) -> List[ActionItem]:
        return sort_action_items(self._items.list_items(ActionItemFilters(meeting_id=meeting_id)))

    def get(self, action_item_id: str) -> ActionItemView:
        item = self._items.get_item(action_item_id)
        if item is None:
            raise NotFoundError("Action item not found", context={"action_item_id": action_item_id})
        return self._annotate([item])[0]

    def stats(self, meeting_id: Optional[str] = None) -> ActionItemStats:
        return self._items.count(meeting_id)

    # ------------------------------------------------------------------
    # Update / delete
    # ------------------------------------------------------------------

    def update(self, action_item_id: str, changes: ActionItemUpdate) -> ActionItem:
        """Apply only the fields explicitly set on *changes*.

        Raises:
            ValidationError: If nothing was set.
            NotFoundError: If the item does not exist.
        """
        fields = changes.model_dump(exclude_unset=True)
        if not fields:
            raise ValidationError("No updates provided")

        updated = self._items.update_item(action_item_id, fields)
        if updated is None:
            raise NotFoundError("Action item not found", context={"action_item_id": action_item_id})
        logger.info("action_item_updated", action_item_id=action_item_id, fields=sorted(fields))
        return updated

    def delete(self, action_item_id: str) -> None:
        """Delete an item and unlink it from its meeting.

        Raises:
            NotFoundError: If the item does not exist.
        """
        item = self._items.get_item(action_item_id)
        if item is None or not self._items.delete_item(action_item_id):
            raise NotFoundError("Action item not found", context={"action_item_id": action_item_id})
        self._meetings.remove_action_item_id(item.meeting_id, action_item_id)
        logger.info("action_item_deleted", action_item_id=action_item_id, meeting_id=item.meeting_id)

    def delete_by_meeting(self, meeting_id: str) -> int:
        """Remove every item of a meeting (cascade from meeting deletion)."""
        removed = self._items.delete_by_meeting(meeting_id)
        logger.info("action_items_deleted_for_meeting", meeting_id=meeting_id, count=removed)
        return removed

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _annotate(self, items: List[ActionItem]) -> List[ActionItemView]:
        """Attach parent meeting title/date; one lookup per distinct meeting."""
        meetings: Dict[str, Optional[Meeting]] = {}
        views = []
        for item in items:
            if item.meeting_id not in meetings:
                meetings[item.meeting_id] = self._meetings.get_meeting(item.meeting_id)
            meeting = meetings[item.meeting_id]
            views.append(
                ActionItemView(
                    **item.model_dump(),
                    meeting_title=meeting.title if meeting else Defaults.UNKNOWN_MEETING_TITLE,
                    meeting_date=meeting.date if meeting else None,
                )
            )
        return views
