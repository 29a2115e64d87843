"""
DynamoDB-backed action item store adapter.

Implements ActionItemStorePort using boto3 for the ActionItems table.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from adapters.dynamo_base import DynamoTableAdapter, to_iso
from domain.models import (
    ActionItem,
    ActionItemFilters,
    ActionItemStats,
    utc_now,
)
from shared_utils.constants import LogScope
from shared_utils.logging_utils import get_scoped_logger


logger = get_scoped_logger(LogScope.ADAPTER)


class DynamoActionItemStoreAdapter(DynamoTableAdapter):
    """Amazon DynamoDB implementation of ActionItemStorePort.

    Table key: ``action_item_id`` (partition key, no sort key).
    """

    key_name = "action_item_id"

    def put_items(self, items: List[ActionItem]) -> None:
        if not items:
            return
        try:
            with self._table.batch_writer() as batch:
                for item in items:
                    batch.put_item(Item=self.to_item(item))
        except ClientError as exc:
            raise self._fail("put action items", exc, count=len(items)) from exc
        logger.info("dynamo_put_action_items", count=len(items))

    def get_item(self, action_item_id: str) -> Optional[ActionItem]:
        item = self._get(action_item_id)
        return self._to_action_item(item) if item is not None else None

    def list_items(self, filters: Optional[ActionItemFilters] = None) -> List[ActionItem]:
        filters = filters or ActionItemFilters()
        filter_expr = None

        if filters.priority:
            condition = Attr("priority").eq(filters.priority.value)
            filter_expr = condition if filter_expr is None else filter_expr & condition

        if filters.status:
            condition = Attr("status").eq(filters.status.value)
            filter_expr = condition if filter_expr is None else filter_expr & condition

        if filters.meeting_id:
            condition = Attr("meeting_id").eq(filters.meeting_id)
            filter_expr = condition if filter_expr is None else filter_expr & condition

        if filters.due_date_before:
            condition = Attr("due_date").lte(to_iso(filters.due_date_before))
            filter_expr = condition if filter_expr is None else filter_expr & condition

        if filters.due_date_after:
            condition = Attr("due_date").gte(to_iso(filters.due_date_after))
            filter_expr = condition if filter_expr is None else filter_expr & condition

        scan_kwargs: Dict[str, Any] = {}
        if filter_expr is not None:
            scan_kwargs["FilterExpression"] = filter_expr

        items = self._scan(**scan_kwargs)
        logger.info("dynamo_list_action_items", results=len(items))
        return [self._to_action_item(item) for item in items]

    def update_item(self, action_item_id: str, fields: Dict[str, Any]) -> Optional[ActionItem]:
        item = self._update(action_item_id, {**fields, "updated_at": utc_now()})
        if item is None:
            return None
        logger.info(
            "dynamo_update_action_item",
            action_item_id=action_item_id,
            fields=sorted(fields),
        )
        return self._to_action_item(item)

    def delete_item(self, action_item_id: str) -> bool:
        return self._delete(action_item_id)

    def delete_by_meeting(self, meeting_id: str) -> int:
        keys = self._scan(
            FilterExpression=Attr("meeting_id").eq(meeting_id),
            ProjectionExpression="action_item_id",
        )
        if not keys:
            return 0
        try:
            with self._table.batch_writer() as batch:
                for key in keys:
                    batch.delete_item(Key={"action_item_id": key["action_item_id"]})
        except ClientError as exc:
            raise self._fail("delete action items", exc, meeting_id=meeting_id) from exc
        logger.info("dynamo_delete_action_items", meeting_id=meeting_id, count=len(keys))
        return len(keys)

    def count(self, meeting_id: Optional[str] = None) -> ActionItemStats:
        return ActionItemStats.from_items(
            self.list_items(ActionItemFilters(meeting_id=meeting_id))
        )

    def _to_action_item(self, item: Dict[str, Any]) -> ActionItem:
        return ActionItem.model_validate(self.from_item(item))
