"""
MeetingService: meeting CRUD, notetaker join flow and the processing pipeline.

Processing flow:
    load → claim (pending|failed → processing) → resolve transcript
         → summarize → extract action items → link items → completed

Depends only on ports (protocol interfaces), never on concrete adapters.
Any failure after the claim marks the meeting ``failed`` with the error
message; typed application errors propagate unchanged, anything else is
wrapped in ``ProcessingError``.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from domain.models import (
    PROCESSABLE_STATUSES,
    ActionItemCreate,
    CallProvider,
    ExtractedActionItem,
    JoinMeetingRequest,
    Meeting,
    MeetingCreate,
    MeetingDetail,
    MeetingFilters,
    MeetingStats,
    MeetingStatus,
    MeetingTranscription,
    MeetingUpdate,
    MeetingWithCount,
)
from ports.meeting_store import MeetingStorePort
from ports.notetaker import NotetakerPort
from services.action_item_service import ActionItemService
from services.summarization_service import SummarizationService
from shared_utils.constants import LogScope
from shared_utils.error_handler import (
    AppException,
    ConflictError,
    NoTranscriptError,
    NotFoundError,
    ProcessingError,
    ValidationError,
)
from shared_utils.logging_utils import ContextualLogger
from shared_utils.validation import InputValidator


logger = ContextualLogger(scope=LogScope.MEETING_SERVICE)

_ZOOM_PATH_ID = re.compile(r"/([jw])/([0-9]{8,14})", re.IGNORECASE)
_ZOOM_RAW_ID = re.compile(r"([0-9]{8,14})")


def extract_zoom_meeting_id(link: str) -> Optional[str]:
    """Pull the numeric meeting id out of a Zoom link (``/j/<id>`` or ``/w/<id>``),
    falling back to the first 8-14 digit run."""
    match = _ZOOM_PATH_ID.search(link)
    if match:
        return match.group(2)
    match = _ZOOM_RAW_ID.search(link)
    return match.group(1) if match else None


class MeetingService:
    """Meeting use cases over the stores, the notetaker and the LLM."""

    def __init__(
        self,
        *,
        meeting_store: MeetingStorePort,
        action_item_service: ActionItemService,
        summarization_service: SummarizationService,
        notetaker: NotetakerPort,
    ) -> None:
        self._meetings = meeting_store
        self._action_items = action_item_service
        self._summarizer = summarization_service
        self._notetaker = notetaker

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create_meeting(self, data: MeetingCreate) -> Meeting:
        meeting = Meeting(**data.model_dump())
        self._meetings.put_meeting(meeting)
        logger.info("meeting_created", meeting_id=meeting.meeting_id, title=meeting.title)
        return meeting

    def list_meetings(self, filters: Optional[MeetingFilters] = None) -> List[MeetingWithCount]:
        """Meetings newest first, each with its action item count."""
        meetings = self._meetings.list_meetings(filters or MeetingFilters())
        meetings.sort(key=lambda m: m.date, reverse=True)
        return [
            MeetingWithCount(**m.model_dump(), action_item_count=len(m.action_item_ids))
            for m in meetings
        ]

    def get_meeting(self, meeting_id: str) -> MeetingDetail:
        meeting = self._require(meeting_id)
        return MeetingDetail(
            **meeting.model_dump(),
            action_items=self._action_items.list_by_meeting(meeting_id),
        )

    def update_meeting(self, meeting_id: str, changes: MeetingUpdate) -> Meeting:
        """Apply only the fields explicitly set on *changes*.

        Raises:
            ValidationError: If nothing was set.
            NotFoundError: If the meeting does not exist.
        """
        fields = changes.model_dump(exclude_unset=True)
        if not fields:
            raise ValidationError("No updates provided")

        updated = self._meetings.update_meeting(meeting_id, fields)
        if updated is None:
            raise NotFoundError("Meeting not found", context={"meeting_id": meeting_id})
        logger.info("meeting_updated", meeting_id=meeting_id, fields=sorted(fields))
        return updated

    def delete_meeting(self, meeting_id: str) -> int:
        """Delete a meeting and its action items. Returns the item count removed."""
        self._require(meeting_id)
        removed = self._action_items.delete_by_meeting(meeting_id)
        if not self._meetings.delete_meeting(meeting_id):
            raise NotFoundError("Meeting not found", context={"meeting_id": meeting_id})
        logger.info("meeting_deleted", meeting_id=meeting_id, action_items_removed=removed)
        return removed

    def get_stats(self) -> MeetingStats:
        return self._meetings.count_by_status()

    def get_transcription(self, meeting_id: str) -> MeetingTranscription:
        meeting = self._require(meeting_id)
        return MeetingTranscription(
            meeting_id=meeting.meeting_id,
            title=meeting.title,
            provider=meeting.provider,
            notetaker_id=meeting.notetaker_id,
            transcript_text=meeting.transcript_text,
            provider_summary=meeting.provider_summary,
            updated_at=meeting.updated_at,
        )

    # ------------------------------------------------------------------
    # Notetaker join flow
    # ------------------------------------------------------------------

    def join_meeting(self, request: JoinMeetingRequest) -> Tuple[Meeting, bool]:
        """Invite the notetaker bot and upsert the meeting by external id.

        Returns:
            ``(meeting, created)``.

        Raises:
            ValidationError: If a Zoom link carries no meeting id.
        """
        external_id = request.external_meeting_id
        if not external_id:
            if request.provider == CallProvider.ZOOM:
                external_id = extract_zoom_meeting_id(request.meeting_url)
                if not external_id:
                    raise ValidationError(
                        "Could not parse Zoom meeting ID from link",
                        context={"meeting_url": request.meeting_url},
                    )
            else:
                external_id = request.meeting_url

        notetaker_id = self._notetaker.invite_bot(
            provider=request.provider,
            meeting_url=request.meeting_url,
            title=request.title,
            start_time=request.starts_at,
        )

        existing = self._meetings.find_meeting("external_meeting_id", external_id)
        if existing is not None:
            fields = {
                "title": request.title,
                "provider": request.provider,
                "meeting_url": request.meeting_url,
                "date": request.starts_at,
            }
            if notetaker_id:
                fields["notetaker_id"] = notetaker_id
            meeting = self._meetings.update_meeting(existing.meeting_id, fields) or existing
            logger.info(
                "meeting_join_updated",
                meeting_id=meeting.meeting_id,
                external_meeting_id=external_id,
                notetaker_id=notetaker_id,
            )
            return meeting, False

        meeting = Meeting(
            title=request.title,
            date=request.starts_at,
            duration=request.duration,
            meeting_url=request.meeting_url,
            provider=request.provider,
            external_meeting_id=external_id,
            notetaker_id=notetaker_id,
        )
        self._meetings.put_meeting(meeting)
        logger.info(
            "meeting_join_created",
            meeting_id=meeting.meeting_id,
            external_meeting_id=external_id,
            notetaker_id=notetaker_id,
        )
        return meeting, True

    # ------------------------------------------------------------------
    # Processing pipeline
    # ------------------------------------------------------------------

    def process_meeting(self, meeting_id: str) -> MeetingDetail:
        """Summarize a meeting's transcript and extract its action items.

        Raises:
            NotFoundError: Unknown meeting.
            ConflictError: Meeting is already processing or completed.
            NoTranscriptError: No transcript could be resolved.
            UpstreamError: Transcript download or LLM failure.
            ProcessingError: Any other failure.
        """
        self._require(meeting_id)
        meeting = self._claim(meeting_id)
        log = logger.bind(meeting_id=meeting_id)
        log.info("processing_started")

        try:
            transcript = self._resolve_transcript(meeting)

            summary = self._summarizer.summarize(transcript)
            self._meetings.update_meeting(meeting_id, {"summary": summary})

            extracted = self._summarizer.extract_action_items(transcript)
            items = self._action_items.bulk_create(self._to_create(meeting_id, extracted, log))
            self._meetings.append_action_item_ids(
                meeting_id, [item.action_item_id for item in items]
            )

            self._meetings.update_meeting(meeting_id, {"status": MeetingStatus.COMPLETED})
        except Exception as exc:
            self._mark_failed(meeting_id, exc)
            if isinstance(exc, AppException):
                raise
            raise ProcessingError(
                f"Failed to process meeting: {exc}", meeting_id=meeting_id
            ) from exc

        log.info("processing_completed", action_items=len(items))
        return self.get_meeting(meeting_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require(self, meeting_id: str) -> Meeting:
        meeting = self._meetings.get_meeting(meeting_id)
        if meeting is None:
            raise NotFoundError("Meeting not found", context={"meeting_id": meeting_id})
        return meeting

    def _claim(self, meeting_id: str) -> Meeting:
        """Compare-and-set the meeting into ``processing``."""
        claimed = self._meetings.transition_status(
            meeting_id, MeetingStatus.PROCESSING, PROCESSABLE_STATUSES
        )
        if claimed is not None:
            return claimed

        current = self._require(meeting_id)
        message = (
            "Meeting has already been processed"
            if current.status == MeetingStatus.COMPLETED
            else "Meeting is already being processed"
        )
        logger.warning("processing_rejected", meeting_id=meeting_id, status=current.status.value)
        raise ConflictError(message, context={"meeting_id": meeting_id, "status": current.status.value})

    def _resolve_transcript(self, meeting: Meeting) -> str:
        """Inline text, else the transcript URL, else the notetaker session.
        Fetched text is persisted on the meeting."""
        if meeting.transcript_text and meeting.transcript_text.strip():
            return meeting.transcript_text

        if meeting.transcript_url:
            text = self._notetaker.download_text(meeting.transcript_url)
            if text.strip():
                self._meetings.update_meeting(meeting.meeting_id, {"transcript_text": text})
                logger.info("transcript_downloaded", meeting_id=meeting.meeting_id)
                return text

        if meeting.notetaker_id:
            result = self._notetaker.fetch_transcription(meeting.notetaker_id)
            if result.text and result.text.strip():
                fields = {"transcript_text": result.text}
                if result.summary:
                    fields["provider_summary"] = result.summary
                self._meetings.update_meeting(meeting.meeting_id, fields)
                logger.info("transcript_fetched_from_notetaker", meeting_id=meeting.meeting_id)
                return result.text

        raise NoTranscriptError(meeting_id=meeting.meeting_id)

    @staticmethod
    def _to_create(
        meeting_id: str, extracted: List[ExtractedActionItem], log: ContextualLogger
    ) -> List[ActionItemCreate]:
        """Unparseable due dates are dropped, blank items skipped."""
        items = []
        for entry in extracted:
            if not entry.text.strip():
                log.warning("extracted_action_item_skipped", reason="empty_text")
                continue
            try:
                due_date = InputValidator.parse_optional_datetime(entry.due_date, "dueDate")
            except ValidationError:
                log.warning("extracted_due_date_dropped", due_date=entry.due_date)
                due_date = None
            items.append(
                ActionItemCreate(
                    meeting_id=meeting_id,
                    text=entry.text.strip(),
                    priority=entry.priority,
                    due_date=due_date,
                    assignee=entry.assignee.strip() if entry.assignee else None,
                )
            )
        return items

    def _mark_failed(self, meeting_id: str, exc: Exception) -> None:
        message = exc.message if isinstance(exc, AppException) else str(exc)
        logger.error(
            "processing_failed",
            meeting_id=meeting_id,
            error_type=type(exc).__name__,
            error=message,
        )
        try:
            self._meetings.update_meeting(
                meeting_id, {"status": MeetingStatus.FAILED, "error_message": message}
            )
        except Exception as mark_exc:
            logger.error(
                "processing_failed_status_not_saved",
                meeting_id=meeting_id,
                error=str(mark_exc),
            )
