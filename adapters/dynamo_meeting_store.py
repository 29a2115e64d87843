"""
DynamoDB-backed meeting store adapter.

Implements MeetingStorePort using boto3 for the Meetings table.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from boto3.dynamodb.conditions import Attr

from adapters.dynamo_base import DynamoTableAdapter, to_iso
from domain.models import Meeting, MeetingFilters, MeetingStats, MeetingStatus, utc_now
from shared_utils.constants import LogScope
from shared_utils.logging_utils import get_scoped_logger


logger = get_scoped_logger(LogScope.ADAPTER)


class DynamoMeetingStoreAdapter(DynamoTableAdapter):
    """Amazon DynamoDB implementation of MeetingStorePort.

    Table key: ``meeting_id`` (partition key, no sort key).
    """

    key_name = "meeting_id"

    # ------------------------------------------------------------------
    # MeetingStorePort implementation
    # ------------------------------------------------------------------

    def put_meeting(self, meeting: Meeting) -> None:
        self._put(self.to_item(meeting))
        logger.info(
            "dynamo_put_meeting",
            meeting_id=meeting.meeting_id,
            status=meeting.status.value,
        )

    def get_meeting(self, meeting_id: str) -> Optional[Meeting]:
        item = self._get(meeting_id)
        return self._to_meeting(item) if item is not None else None

    def list_meetings(self, filters: Optional[MeetingFilters] = None) -> List[Meeting]:
        """Scan with optional filters (a scan is fine at this table size)."""
        filters = filters or MeetingFilters()
        filter_expr = None

        if filters.status:
            condition = Attr("status").eq(filters.status.value)
            filter_expr = condition if filter_expr is None else filter_expr & condition

        if filters.date_from:
            condition = Attr("date").gte(to_iso(filters.date_from))
            filter_expr = condition if filter_expr is None else filter_expr & condition

        if filters.date_to:
            condition = Attr("date").lte(to_iso(filters.date_to))
            filter_expr = condition if filter_expr is None else filter_expr & condition

        scan_kwargs: Dict[str, Any] = {}
        if filter_expr is not None:
            scan_kwargs["FilterExpression"] = filter_expr

        items = self._scan(**scan_kwargs)
        logger.info("dynamo_list_meetings", results=len(items))
        return [self._to_meeting(item) for item in items]

    def find_meeting(self, field: str, value: str) -> Optional[Meeting]:
        items = self._scan(FilterExpression=Attr(field).eq(value))
        if not items:
            return None
        return self._to_meeting(items[0])

    def update_meeting(self, meeting_id: str, fields: Dict[str, Any]) -> Optional[Meeting]:
        item = self._update(meeting_id, {**fields, "updated_at": utc_now()})
        if item is None:
            logger.info("dynamo_update_meeting_missing", meeting_id=meeting_id)
            return None
        logger.info("dynamo_update_meeting", meeting_id=meeting_id, fields=sorted(fields))
        return self._to_meeting(item)

    def transition_status(
        self,
        meeting_id: str,
        to_status: MeetingStatus,
        from_statuses: Iterable[MeetingStatus],
    ) -> Optional[Meeting]:
        allowed = list(from_statuses)
        placeholders = [f":from{i}" for i in range(len(allowed))]
        condition = f"attribute_exists(#pk) AND #status IN ({', '.join(placeholders)})"
        condition_values = {p: s.value for p, s in zip(placeholders, allowed)}

        expression_fields = {
            "status": to_status,
            "error_message": None,
            "updated_at": utc_now(),
        }
        expression, names, values = self._build_update(expression_fields)
        names["#status"] = "status"
        values.update(condition_values)

        item = self._raw_update(meeting_id, expression, condition, names, values)
        if item is None:
            logger.info(
                "dynamo_status_transition_rejected",
                meeting_id=meeting_id,
                to_status=to_status.value,
            )
            return None
        logger.info(
            "dynamo_status_transition",
            meeting_id=meeting_id,
            to_status=to_status.value,
        )
        return self._to_meeting(item)

    def append_action_item_ids(self, meeting_id: str, action_item_ids: List[str]) -> None:
        if not action_item_ids:
            return
        self._raw_update(
            meeting_id,
            "SET #ids = list_append(if_not_exists(#ids, :empty), :ids), #ts = :ts",
            "attribute_exists(#pk)",
            {"#pk": self.key_name, "#ids": "action_item_ids", "#ts": "updated_at"},
            {":empty": [], ":ids": list(action_item_ids), ":ts": to_iso(utc_now())},
        )

    def remove_action_item_id(self, meeting_id: str, action_item_id: str) -> None:
        """Read-modify-write: drop the id at its index, guarded on that index
        still holding the id."""
        meeting = self.get_meeting(meeting_id)
        if meeting is None or action_item_id not in meeting.action_item_ids:
            return
        index = meeting.action_item_ids.index(action_item_id)
        self._raw_update(
            meeting_id,
            f"REMOVE #ids[{index}] SET #ts = :ts",
            f"#ids[{index}] = :id",
            {"#ids": "action_item_ids", "#ts": "updated_at"},
            {":id": action_item_id, ":ts": to_iso(utc_now())},
        )

    def delete_meeting(self, meeting_id: str) -> bool:
        deleted = self._delete(meeting_id)
        logger.info("dynamo_delete_meeting", meeting_id=meeting_id, deleted=deleted)
        return deleted

    def count_by_status(self) -> MeetingStats:
        items = self._scan(
            ProjectionExpression="#status",
            ExpressionAttributeNames={"#status": "status"},
        )
        return MeetingStats.from_statuses(
            item.get("status", MeetingStatus.PENDING.value) for item in items
        )

    def _to_meeting(self, item: Dict[str, Any]) -> Meeting:
        return Meeting.model_validate(self.from_item(item))
