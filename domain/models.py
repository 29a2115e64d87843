"""
Pure domain models for the meeting notes service.

These models contain NO AWS or HTTP dependencies. They represent the
documents kept in the store and the read models that flow through ports,
services and the API. Field names are snake_case in Python and camelCase on
the wire (``by_alias=True`` when dumping).
"""

from __future__ import annotations

import uuid
from collections import Counter
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class DocumentModel(BaseModel):
    """Base for everything that crosses the API boundary."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class MeetingStatus(str, Enum):
    """Meeting processing lifecycle."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


# Statuses from which processing may (re)start.
PROCESSABLE_STATUSES = frozenset({MeetingStatus.PENDING, MeetingStatus.FAILED})


class CallProvider(str, Enum):
    """Video call platforms the notetaker bot can join."""

    ZOOM = "zoom"
    GOOGLE_MEET = "google_meet"
    MICROSOFT_TEAMS = "microsoft_teams"


class ActionItemPriority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    ActionItemPriority.HIGH: 1,
    ActionItemPriority.MEDIUM: 2,
    ActionItemPriority.LOW: 3,
}


class ActionItemStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class Meeting(DocumentModel):
    """A recorded or scheduled meeting.

    Merges the manually-created meeting and the calendar-join meeting into
    one document: transcript fields, notetaker session and call details all
    live here.
    """

    meeting_id: str = Field(default_factory=new_id)
    title: str
    date: datetime
    duration: float = Field(ge=0)  # minutes
    transcript_url: Optional[str] = None
    transcript_text: Optional[str] = None
    provider_summary: Optional[str] = None
    summary: Optional[str] = None
    action_item_ids: List[str] = Field(default_factory=list)
    meeting_url: Optional[str] = None
    provider: Optional[CallProvider] = None
    external_meeting_id: Optional[str] = None
    notetaker_id: Optional[str] = None
    status: MeetingStatus = MeetingStatus.PENDING
    error_message: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("title")
    @classmethod
    def _strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title cannot be empty")
        return v


class ActionItem(DocumentModel):
    """A task extracted from, or manually attached to, one meeting."""

    action_item_id: str = Field(default_factory=new_id)
    meeting_id: str
    text: str
    priority: ActionItemPriority
    status: ActionItemStatus = ActionItemStatus.PENDING
    due_date: Optional[datetime] = None
    assignee: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("text")
    @classmethod
    def _strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("text cannot be empty")
        return v

    @field_validator("assignee")
    @classmethod
    def _strip_assignee(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else None


class ChatMessage(DocumentModel):
    """Chat history entry for a meeting. Declared only; nothing reads it yet."""

    message_id: str = Field(default_factory=new_id)
    meeting_id: str
    role: ChatRole
    content: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


class MeetingCreate(DocumentModel):
    title: str
    date: datetime
    duration: float = Field(ge=0)
    transcript_url: Optional[str] = None
    transcript_text: Optional[str] = None
    notetaker_id: Optional[str] = None
    meeting_url: Optional[str] = None
    provider: Optional[CallProvider] = None


class MeetingUpdate(DocumentModel):
    """Partial update; only fields explicitly set are written."""

    title: Optional[str] = None
    date: Optional[datetime] = None
    duration: Optional[float] = Field(default=None, ge=0)
    transcript_url: Optional[str] = None
    transcript_text: Optional[str] = None
    summary: Optional[str] = None


class JoinMeetingRequest(DocumentModel):
    """Schedule the notetaker bot for a call and upsert its meeting."""

    title: str
    meeting_url: str
    provider: CallProvider = CallProvider.ZOOM
    starts_at: datetime
    duration: float = Field(default=0, ge=0)
    external_meeting_id: Optional[str] = None


class ActionItemCreate(DocumentModel):
    meeting_id: str
    text: str
    priority: ActionItemPriority
    status: ActionItemStatus = ActionItemStatus.PENDING
    due_date: Optional[datetime] = None
    assignee: Optional[str] = None


class ActionItemUpdate(DocumentModel):
    """Partial update; only fields explicitly set are written."""

    text: Optional[str] = None
    priority: Optional[ActionItemPriority] = None
    status: Optional[ActionItemStatus] = None
    due_date: Optional[datetime] = None
    assignee: Optional[str] = None


class MeetingFilters(DocumentModel):
    status: Optional[MeetingStatus] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None


class ActionItemFilters(DocumentModel):
    priority: Optional[ActionItemPriority] = None
    status: Optional[ActionItemStatus] = None
    meeting_id: Optional[str] = None
    due_date_before: Optional[datetime] = None
    due_date_after: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------


class MeetingWithCount(Meeting):
    action_item_count: int = 0


class MeetingDetail(Meeting):
    action_items: List[ActionItem] = Field(default_factory=list)


class ActionItemView(ActionItem):
    meeting_title: str
    meeting_date: Optional[datetime] = None


class MeetingTranscription(DocumentModel):
    meeting_id: str
    title: str
    provider: Optional[CallProvider] = None
    notetaker_id: Optional[str] = None
    transcript_text: Optional[str] = None
    provider_summary: Optional[str] = None
    updated_at: datetime


class MeetingStats(DocumentModel):
    total: int = 0
    pending: int = 0
    processing: int = 0
    completed: int = 0
    failed: int = 0

    @classmethod
    def from_statuses(cls, statuses: Iterable[str]) -> "MeetingStats":
        counts = Counter(MeetingStatus(s).value for s in statuses)
        return cls(total=sum(counts.values()), **counts)


class ActionItemStats(DocumentModel):
    total: int = 0
    pending: int = 0
    completed: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0

    @classmethod
    def from_items(cls, items: Iterable["ActionItem"]) -> "ActionItemStats":
        stats = cls()
        for item in items:
            stats.total += 1
            if item.status == ActionItemStatus.COMPLETED:
                stats.completed += 1
            else:
                stats.pending += 1
            if item.priority == ActionItemPriority.HIGH:
                stats.high += 1
            elif item.priority == ActionItemPriority.MEDIUM:
                stats.medium += 1
            else:
                stats.low += 1
        return stats


# ---------------------------------------------------------------------------
# External service payloads
# ---------------------------------------------------------------------------


class ExtractedActionItem(DocumentModel):
    """One action item as returned by the extraction prompt."""

    text: str
    priority: ActionItemPriority
    due_date: Optional[str] = None
    assignee: Optional[str] = None


class ActionItemExtraction(DocumentModel):
    """Strict JSON schema the extraction prompt must produce."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    items: List[ExtractedActionItem]


class TranscriptionResult(DocumentModel):
    """Transcript text/summary fetched from the notetaker provider."""

    text: Optional[str] = None
    summary: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.text and not self.summary
