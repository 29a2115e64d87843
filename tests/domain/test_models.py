"""
Tests for domain.models: validation, wire aliases and stats helpers.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from domain.models import (
    ActionItem,
    ActionItemExtraction,
    ActionItemPriority,
    ActionItemStats,
    ActionItemStatus,
    Meeting,
    MeetingStats,
    MeetingStatus,
    TranscriptionResult,
)


_DATE = datetime(2026, 3, 2, 15, 0, tzinfo=timezone.utc)


class TestMeeting:
    def test_defaults(self) -> None:
        meeting = Meeting(title="Standup", date=_DATE, duration=15)
        assert meeting.status == MeetingStatus.PENDING
        assert meeting.action_item_ids == []
        assert meeting.meeting_id
        assert meeting.created_at.tzinfo is not None

    def test_ids_are_unique(self) -> None:
        a = Meeting(title="A", date=_DATE, duration=1)
        b = Meeting(title="B", date=_DATE, duration=1)
        assert a.meeting_id != b.meeting_id

    def test_title_is_stripped(self) -> None:
        assert Meeting(title="  Retro  ", date=_DATE, duration=30).title == "Retro"

    def test_blank_title_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            Meeting(title="   ", date=_DATE, duration=30)

    def test_negative_duration_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            Meeting(title="Retro", date=_DATE, duration=-1)

    def test_dump_uses_camel_case(self) -> None:
        meeting = Meeting(title="Retro", date=_DATE, duration=30, transcript_text="hi")
        body = meeting.model_dump(mode="json", by_alias=True)
        assert body["meetingId"] == meeting.meeting_id
        assert body["transcriptText"] == "hi"
        assert body["actionItemIds"] == []
        assert body["status"] == "pending"

    def test_accepts_camel_case_input(self) -> None:
        meeting = Meeting.model_validate(
            {"title": "Retro", "date": _DATE, "duration": 30, "transcriptUrl": "https://x/t.txt"}
        )
        assert meeting.transcript_url == "https://x/t.txt"


class TestActionItem:
    def test_text_and_assignee_stripped(self) -> None:
        item = ActionItem(meeting_id="m-1", text=" Do it ", priority="High", assignee=" Bob ")
        assert item.text == "Do it"
        assert item.assignee == "Bob"
        assert item.status == ActionItemStatus.PENDING

    def test_empty_text_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            ActionItem(meeting_id="m-1", text=" ", priority="High")

    def test_unknown_priority_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            ActionItem(meeting_id="m-1", text="Do it", priority="Urgent")

    def test_priority_rank_order(self) -> None:
        ranks = [p.rank for p in (ActionItemPriority.HIGH, ActionItemPriority.MEDIUM, ActionItemPriority.LOW)]
        assert ranks == [1, 2, 3]


class TestStats:
    def test_meeting_stats_from_statuses(self) -> None:
        stats = MeetingStats.from_statuses(["pending", "pending", "completed", "failed"])
        assert stats.total == 4
        assert stats.pending == 2
        assert stats.processing == 0
        assert stats.completed == 1
        assert stats.failed == 1

    def test_meeting_stats_empty(self) -> None:
        assert MeetingStats.from_statuses([]) == MeetingStats()

    def test_action_item_stats_from_items(self) -> None:
        items = [
            ActionItem(meeting_id="m", text="a", priority="High"),
            ActionItem(meeting_id="m", text="b", priority="Low", status="Completed"),
            ActionItem(meeting_id="m", text="c", priority="Medium"),
        ]
        stats = ActionItemStats.from_items(items)
        assert (stats.total, stats.pending, stats.completed) == (3, 2, 1)
        assert (stats.high, stats.medium, stats.low) == (1, 1, 1)


class TestPayloads:
    def test_extraction_parses_camel_case(self) -> None:
        extraction = ActionItemExtraction.model_validate(
            {"items": [{"text": "Call Ann", "priority": "Low", "dueDate": "2026-04-01"}]}
        )
        assert extraction.items[0].due_date == "2026-04-01"

    def test_extraction_rejects_unknown_top_level_keys(self) -> None:
        with pytest.raises(PydanticValidationError):
            ActionItemExtraction.model_validate({"items": [], "notes": "x"})

    def test_transcription_result_is_empty(self) -> None:
        assert TranscriptionResult().is_empty
        assert not TranscriptionResult(summary="s").is_empty
