"""
Action item endpoints.

    GET    /api/action-items                       List (priority, status, meetingId, dueDateBefore, dueDateAfter)
    GET    /api/action-items/stats                 Counts (optional meetingId)
    GET    /api/action-items/meeting/{meetingId}   Items of one meeting
    GET    /api/action-items/{id}                  Fetch
    POST   /api/action-items                       Create
    PATCH  /api/action-items/{id}                  Partial update
    DELETE /api/action-items/{id}                  Delete
"""

from typing import Optional

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from api_service.src.responses import error_response, success_response
from domain.models import (
    ActionItemCreate,
    ActionItemFilters,
    ActionItemPriority,
    ActionItemStatus,
    ActionItemUpdate,
)
from shared_utils.constants import APIEndpoints
from shared_utils.di_container import get_di_container
from shared_utils.error_handler import ValidationError
from shared_utils.validation import InputValidator


router = APIRouter(prefix=APIEndpoints.ACTION_ITEMS, tags=["action-items"])

_PRIORITY_MESSAGE = "Invalid priority. Must be High, Medium, or Low"
_STATUS_MESSAGE = "Invalid status. Must be Pending or Completed"
_UPDATABLE_FIELDS = {"text", "priority", "status", "due_date", "assignee"}


def _priority(value) -> ActionItemPriority:
    return ActionItemPriority(
        InputValidator.validate_choice(value, [p.value for p in ActionItemPriority], _PRIORITY_MESSAGE)
    )


def _status(value) -> ActionItemStatus:
    return ActionItemStatus(
        InputValidator.validate_choice(value, [s.value for s in ActionItemStatus], _STATUS_MESSAGE)
    )


def parse_action_item_create(body: dict) -> ActionItemCreate:
    data = InputValidator.normalize_keys(body)
    if not data.get("meeting_id") or not data.get("text") or not data.get("priority"):
        raise ValidationError(
            "Missing required fields: meetingId, text, and priority are required"
        )

    fields = {
        "meeting_id": InputValidator.validate_non_empty_string(data["meeting_id"], "meetingId"),
        "text": InputValidator.validate_non_empty_string(data["text"], "text"),
        "priority": _priority(data["priority"]),
        "due_date": InputValidator.parse_optional_datetime(data.get("due_date"), "dueDate"),
        "assignee": InputValidator.validate_optional_string(data.get("assignee"), "assignee"),
    }
    if data.get("status") is not None:
        fields["status"] = _status(data["status"])
    return ActionItemCreate(**fields)


def parse_action_item_update(body: dict) -> ActionItemUpdate:
    """Only keys present in *body* are set; ``dueDate: null`` clears the date."""
    data = InputValidator.normalize_keys(body)
    if not data:
        raise ValidationError("No updates provided")
    InputValidator.reject_unknown_fields(data, _UPDATABLE_FIELDS)

    fields = {}
    if "text" in data:
        fields["text"] = InputValidator.validate_non_empty_string(data["text"], "text")
    if "priority" in data:
        fields["priority"] = _priority(data["priority"])
    if "status" in data:
        fields["status"] = _status(data["status"])
    if "due_date" in data:
        fields["due_date"] = InputValidator.parse_optional_datetime(data["due_date"], "dueDate")
    if "assignee" in data:
        fields["assignee"] = InputValidator.validate_optional_string(data["assignee"], "assignee")
    return ActionItemUpdate(**fields)


@router.get("")
def list_action_items(
    priority: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    meeting_id: Optional[str] = Query(None, alias="meetingId"),
    due_date_before: Optional[str] = Query(None, alias="dueDateBefore"),
    due_date_after: Optional[str] = Query(None, alias="dueDateAfter"),
) -> JSONResponse:
    """List action items, sorted by priority then newest first."""
    try:
        filters = ActionItemFilters(
            priority=_priority(priority) if priority else None,
            status=_status(status_filter) if status_filter else None,
            meeting_id=meeting_id or None,
            due_date_before=InputValidator.parse_optional_datetime(due_date_before, "dueDateBefore"),
            due_date_after=InputValidator.parse_optional_datetime(due_date_after, "dueDateAfter"),
        )
        items = get_di_container().get_action_item_service().list(filters)
        return success_response(items, count=len(items))
    except Exception as e:
        return error_response(e, "list_action_items_error")


@router.get("/stats")
def get_action_item_stats(
    meeting_id: Optional[str] = Query(None, alias="meetingId"),
) -> JSONResponse:
    try:
        stats = get_di_container().get_action_item_service().stats(meeting_id or None)
        return success_response(stats)
    except Exception as e:
        return error_response(e, "action_item_stats_error")


@router.get("/meeting/{meeting_id}")
def list_meeting_action_items(meeting_id: str) -> JSONResponse:
    try:
        items = get_di_container().get_action_item_service().list_by_meeting(meeting_id)
        return success_response(items, count=len(items))
    except Exception as e:
        return error_response(e, "list_meeting_action_items_error")


@router.get("/{action_item_id}")
def get_action_item(action_item_id: str) -> JSONResponse:
    try:
        item = get_di_container().get_action_item_service().get(action_item_id)
        return success_response(item)
    except Exception as e:
        return error_response(e, "get_action_item_error")


@router.post("")
def create_action_item(body: dict) -> JSONResponse:
    """Attach a manual action item to an existing meeting.

    Body JSON:
        meetingId (str), text (str), priority (High | Medium | Low),
        status (Pending | Completed, optional), dueDate (ISO 8601, optional),
        assignee (optional).
    """
    try:
        data = parse_action_item_create(body)
        item = get_di_container().get_action_item_service().create(data)
        return success_response(
            item,
            status_code=status.HTTP_201_CREATED,
            message="Action item created successfully",
        )
    except Exception as e:
        return error_response(e, "create_action_item_error")


@router.patch("/{action_item_id}")
def update_action_item(action_item_id: str, body: dict) -> JSONResponse:
    try:
        changes = parse_action_item_update(body)
        item = get_di_container().get_action_item_service().update(action_item_id, changes)
        return success_response(item, message="Action item updated successfully")
    except Exception as e:
        return error_response(e, "update_action_item_error")


@router.delete("/{action_item_id}")
def delete_action_item(action_item_id: str) -> JSONResponse:
    try:
        get_di_container().get_action_item_service().delete(action_item_id)
        return success_response(message="Action item deleted successfully")
    except Exception as e:
        return error_response(e, "delete_action_item_error")
