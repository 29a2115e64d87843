"""
Port interface for action item storage.

Implementations: DynamoActionItemStoreAdapter, InMemoryActionItemStoreAdapter (adapters/)
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from domain.models import ActionItem, ActionItemFilters, ActionItemStats


@runtime_checkable
class ActionItemStorePort(Protocol):
    """Abstract interface for action item CRUD operations."""

    def put_items(self, items: List[ActionItem]) -> None:
        """Create or overwrite action items.

        Raises:
            UpstreamError: If the store is unreachable.
        """
        ...

    def get_item(self, action_item_id: str) -> Optional[ActionItem]:
        """Retrieve one action item by ID, None if absent."""
        ...

    def list_items(self, filters: Optional[ActionItemFilters] = None) -> List[ActionItem]:
        """Return items matching *filters* (unordered).

        ``due_date_before`` and ``due_date_after`` are inclusive bounds; items
        without a due date never match a due-date bound.
        """
        ...

    def update_item(self, action_item_id: str, fields: Dict[str, Any]) -> Optional[ActionItem]:
        """Apply a partial update and bump ``updated_at``.

        Returns:
            The updated item, or None if it does not exist.
        """
        ...

    def delete_item(self, action_item_id: str) -> bool:
        """Delete one item. Returns False if it did not exist."""
        ...

    def delete_by_meeting(self, meeting_id: str) -> int:
        """Delete every item of a meeting. Returns the number removed."""
        ...

    def count(self, meeting_id: Optional[str] = None) -> ActionItemStats:
        """Count items by status and priority, optionally for one meeting."""
        ...
