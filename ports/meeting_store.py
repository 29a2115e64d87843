"""
Port interface for meeting document storage.

Implementations: DynamoMeetingStoreAdapter, InMemoryMeetingStoreAdapter (adapters/)
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from domain.models import Meeting, MeetingFilters, MeetingStats, MeetingStatus


@runtime_checkable
class MeetingStorePort(Protocol):
    """Abstract interface for meeting CRUD and status transitions."""

    def put_meeting(self, meeting: Meeting) -> None:
        """Create or overwrite a meeting document.

        Raises:
            UpstreamError: If the store is unreachable.
        """
        ...

    def get_meeting(self, meeting_id: str) -> Optional[Meeting]:
        """Retrieve a single meeting by ID, None if absent."""
        ...

    def list_meetings(self, filters: Optional[MeetingFilters] = None) -> List[Meeting]:
        """Return meetings matching *filters* (unordered).

        ``date_from`` and ``date_to`` are inclusive bounds on ``date``.
        """
        ...

    def find_meeting(self, field: str, value: str) -> Optional[Meeting]:
        """Return the first meeting whose *field* equals *value*.

        Used for webhook correlation on ``notetaker_id``, ``meeting_url``
        and ``external_meeting_id``.
        """
        ...

    def update_meeting(self, meeting_id: str, fields: Dict[str, Any]) -> Optional[Meeting]:
        """Apply a partial update and bump ``updated_at``.

        A ``None`` value clears the field.

        Returns:
            The updated meeting, or None if it does not exist.
        """
        ...

    def transition_status(
        self,
        meeting_id: str,
        to_status: MeetingStatus,
        from_statuses: Iterable[MeetingStatus],
    ) -> Optional[Meeting]:
        """Atomically move a meeting to *to_status* if its current status is
        one of *from_statuses*. Clears ``error_message``.

        Returns:
            The updated meeting, or None when the meeting is missing or its
            status did not match.
        """
        ...

    def append_action_item_ids(self, meeting_id: str, action_item_ids: List[str]) -> None:
        """Append ids to the end of ``action_item_ids``."""
        ...

    def remove_action_item_id(self, meeting_id: str, action_item_id: str) -> None:
        """Remove one id from ``action_item_ids`` (no-op when absent)."""
        ...

    def delete_meeting(self, meeting_id: str) -> bool:
        """Delete a meeting. Returns False if it did not exist."""
        ...

    def count_by_status(self) -> MeetingStats:
        """Count meetings per processing status."""
        ...
