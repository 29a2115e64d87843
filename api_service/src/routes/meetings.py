"""
Meeting endpoints.

    GET    /api/meetings                      List (status, dateFrom, dateTo)
    GET    /api/meetings/stats                Counts by status
    POST   /api/meetings                      Create
    POST   /api/meetings/join                 Invite notetaker + upsert
    GET    /api/meetings/{id}                 Fetch with action items
    GET    /api/meetings/{id}/transcription   Stored transcript fields
    POST   /api/meetings/{id}/process         Summarize + extract action items
    PATCH  /api/meetings/{id}                 Partial update
    DELETE /api/meetings/{id}                 Delete with action items
"""

from typing import Optional

from fastapi import APIRouter, Query, Request, status
from fastapi.responses import JSONResponse

from api_service.src.rate_limit import limiter, settings
from api_service.src.responses import error_response, success_response
from domain.models import (
    CallProvider,
    JoinMeetingRequest,
    MeetingCreate,
    MeetingFilters,
    MeetingStatus,
    MeetingUpdate,
)
from shared_utils.constants import APIEndpoints, LogScope
from shared_utils.di_container import get_di_container
from shared_utils.error_handler import ValidationError
from shared_utils.logging_utils import ContextualLogger
from shared_utils.validation import InputValidator


logger = ContextualLogger(scope=LogScope.API)

router = APIRouter(prefix=APIEndpoints.MEETINGS, tags=["meetings"])

_STATUS_MESSAGE = "Invalid status. Must be one of: pending, processing, completed, failed"
_PROVIDER_MESSAGE = "Invalid provider. Must be one of: zoom, google_meet, microsoft_teams"
_UPDATABLE_FIELDS = {"title", "date", "duration", "transcript_url", "transcript_text", "summary"}


# ---------------------------------------------------------------------------
# Body parsing
# ---------------------------------------------------------------------------

def _parse_provider(value) -> Optional[CallProvider]:
    if value is None:
        return None
    return CallProvider(
        InputValidator.validate_choice(value, [p.value for p in CallProvider], _PROVIDER_MESSAGE)
    )


def parse_meeting_create(body: dict) -> MeetingCreate:
    data = InputValidator.normalize_keys(body)
    if not data.get("title") or not data.get("date") or data.get("duration") in (None, ""):
        raise ValidationError("Missing required fields: title, date, and duration are required")

    return MeetingCreate(
        title=InputValidator.validate_non_empty_string(data["title"], "title"),
        date=InputValidator.parse_datetime(data["date"], "date"),
        duration=InputValidator.validate_positive_number(
            data["duration"], "Duration must be a positive number"
        ),
        transcript_url=InputValidator.validate_optional_string(data.get("transcript_url"), "transcriptUrl"),
        transcript_text=InputValidator.validate_optional_string(data.get("transcript_text"), "transcriptText"),
        notetaker_id=InputValidator.validate_optional_string(data.get("notetaker_id"), "notetakerId"),
        meeting_url=InputValidator.validate_optional_string(data.get("meeting_url"), "meetingUrl"),
        provider=_parse_provider(data.get("provider")),
    )


def parse_meeting_update(body: dict) -> MeetingUpdate:
    data = InputValidator.normalize_keys(body)
    if not data:
        raise ValidationError("No updates provided")
    InputValidator.reject_unknown_fields(data, _UPDATABLE_FIELDS)

    fields = {}
    if "title" in data:
        fields["title"] = InputValidator.validate_non_empty_string(data["title"], "title")
    if "date" in data:
        fields["date"] = InputValidator.parse_datetime(data["date"], "date")
    if "duration" in data:
        fields["duration"] = InputValidator.validate_positive_number(
            data["duration"], "Duration must be a positive number"
        )
    for name, label in (
        ("transcript_url", "transcriptUrl"),
        ("transcript_text", "transcriptText"),
        ("summary", "summary"),
    ):
        if name in data:
            fields[name] = InputValidator.validate_optional_string(data[name], label)
    return MeetingUpdate(**fields)


def parse_join_request(body: dict) -> JoinMeetingRequest:
    data = InputValidator.normalize_keys(body)
    if not data.get("title") or not data.get("meeting_url") or not data.get("starts_at"):
        raise ValidationError(
            "Missing required fields: title, meetingUrl, and startsAt are required"
        )

    duration = data.get("duration")
    if duration is not None and (
        isinstance(duration, bool) or not isinstance(duration, (int, float)) or duration < 0
    ):
        raise ValidationError("Duration must be a non-negative number")

    fields = {
        "title": InputValidator.validate_non_empty_string(data["title"], "title"),
        "meeting_url": InputValidator.validate_non_empty_string(data["meeting_url"], "meetingUrl"),
        "starts_at": InputValidator.parse_datetime(data["starts_at"], "startsAt"),
        "external_meeting_id": InputValidator.validate_optional_string(
            data.get("external_meeting_id"), "externalMeetingId"
        ),
    }
    provider = _parse_provider(data.get("provider"))
    if provider is not None:
        fields["provider"] = provider
    if duration is not None:
        fields["duration"] = duration
    return JoinMeetingRequest(**fields)


# ---------------------------------------------------------------------------
# Collection endpoints
# ---------------------------------------------------------------------------

@router.get("")
def list_meetings(
    status_filter: Optional[str] = Query(None, alias="status"),
    date_from: Optional[str] = Query(None, alias="dateFrom"),
    date_to: Optional[str] = Query(None, alias="dateTo"),
) -> JSONResponse:
    """List meetings newest first with action item counts."""
    try:
        filters = MeetingFilters(
            status=MeetingStatus(
                InputValidator.validate_choice(
                    status_filter, [s.value for s in MeetingStatus], _STATUS_MESSAGE
                )
            ) if status_filter else None,
            date_from=InputValidator.parse_optional_datetime(date_from, "dateFrom"),
            date_to=InputValidator.parse_optional_datetime(date_to, "dateTo"),
        )
        meetings = get_di_container().get_meeting_service().list_meetings(filters)
        return success_response(meetings, count=len(meetings))
    except Exception as e:
        return error_response(e, "list_meetings_error")


@router.get("/stats")
def get_meeting_stats() -> JSONResponse:
    try:
        stats = get_di_container().get_meeting_service().get_stats()
        return success_response(stats)
    except Exception as e:
        return error_response(e, "meeting_stats_error")


@router.post("")
def create_meeting(body: dict) -> JSONResponse:
    """Create a pending meeting.

    Body JSON:
        title (str), date (ISO 8601), duration (minutes > 0),
        transcriptUrl / transcriptText / notetakerId / meetingUrl / provider (optional).
    """
    try:
        data = parse_meeting_create(body)
        meeting = get_di_container().get_meeting_service().create_meeting(data)
        return success_response(
            meeting,
            status_code=status.HTTP_201_CREATED,
            message="Meeting created successfully",
        )
    except Exception as e:
        return error_response(e, "create_meeting_error")


@router.post("/join")
@limiter.limit(settings.process_rate_limit)
def join_meeting(request: Request, body: dict) -> JSONResponse:
    """Send the notetaker bot to a call and upsert its meeting.

    Body JSON:
        title (str), meetingUrl (str), startsAt (ISO 8601),
        provider (zoom | google_meet | microsoft_teams, default zoom),
        duration (minutes, optional), externalMeetingId (optional).

    201 when the meeting is new, 200 when an existing one was updated.
    """
    try:
        join_request = parse_join_request(body)
        meeting, created = get_di_container().get_meeting_service().join_meeting(join_request)
        return success_response(
            meeting,
            status_code=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
            message="Notetaker scheduled" if meeting.notetaker_id else "Meeting saved; notetaker not scheduled",
        )
    except Exception as e:
        return error_response(e, "join_meeting_error")


# ---------------------------------------------------------------------------
# Item endpoints
# ---------------------------------------------------------------------------

@router.get("/{meeting_id}")
def get_meeting(meeting_id: str) -> JSONResponse:
    try:
        meeting = get_di_container().get_meeting_service().get_meeting(meeting_id)
        return success_response(meeting)
    except Exception as e:
        return error_response(e, "get_meeting_error")


@router.get("/{meeting_id}/transcription")
def get_transcription(meeting_id: str) -> JSONResponse:
    try:
        transcription = get_di_container().get_meeting_service().get_transcription(meeting_id)
        return success_response(transcription)
    except Exception as e:
        return error_response(e, "get_transcription_error")


@router.post("/{meeting_id}/process")
@limiter.limit(settings.process_rate_limit)
def process_meeting(request: Request, meeting_id: str) -> JSONResponse:
    """Run the summarize + extract pipeline synchronously."""
    try:
        logger.info("process_meeting_requested", meeting_id=meeting_id)
        meeting = get_di_container().get_meeting_service().process_meeting(meeting_id)
        return success_response(meeting, message="Meeting processed successfully")
    except Exception as e:
        return error_response(e, "process_meeting_error")


@router.patch("/{meeting_id}")
def update_meeting(meeting_id: str, body: dict) -> JSONResponse:
    try:
        changes = parse_meeting_update(body)
        meeting = get_di_container().get_meeting_service().update_meeting(meeting_id, changes)
        return success_response(meeting, message="Meeting updated successfully")
    except Exception as e:
        return error_response(e, "update_meeting_error")


@router.delete("/{meeting_id}")
def delete_meeting(meeting_id: str) -> JSONResponse:
    try:
        get_di_container().get_meeting_service().delete_meeting(meeting_id)
        return success_response(
            message="Meeting and associated action items deleted successfully"
        )
    except Exception as e:
        return error_response(e, "delete_meeting_error")
