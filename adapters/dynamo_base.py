"""
Shared plumbing for the DynamoDB document adapters.

Handles table wiring, paginated scans, partial ``update_item`` calls and the
conversion between pydantic documents and DynamoDB items:

* datetimes are stored as UTC ISO-8601 strings with fixed microsecond
  precision so that string comparison matches chronological order;
* floats are stored as ``Decimal`` (boto3 rejects ``float``);
* enums are stored by value and ``None`` attributes are omitted.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import boto3
from botocore.exceptions import ClientError

from shared_utils.constants import Defaults, LogScope
from shared_utils.error_handler import UpstreamError
from shared_utils.logging_utils import get_scoped_logger


logger = get_scoped_logger(LogScope.ADAPTER)

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


def to_iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def to_dynamo_value(value: Any) -> Any:
    """Convert one Python value into something boto3 can serialise."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return to_iso(value)
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, list):
        return [to_dynamo_value(v) for v in value]
    return value


def from_dynamo_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, list):
        return [from_dynamo_value(v) for v in value]
    return value


def is_conditional_failure(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") == CONDITIONAL_CHECK_FAILED


class DynamoTableAdapter:
    """Base class for single-table adapters keyed by one partition key."""

    key_name: str = "id"

    def __init__(
        self,
        table_name: str,
        region: str = Defaults.AWS_REGION,
        endpoint_url: str = "",
        dynamodb_resource: Optional[object] = None,
    ) -> None:
        self._table_name = table_name
        resource_kwargs: dict = {"region_name": region}
        if endpoint_url:
            resource_kwargs["endpoint_url"] = endpoint_url
        self._dynamo = dynamodb_resource or boto3.resource(
            "dynamodb", **resource_kwargs
        )
        self._table = self._dynamo.Table(table_name)

    # ------------------------------------------------------------------
    # Item conversion
    # ------------------------------------------------------------------

    @staticmethod
    def to_item(document: Any) -> Dict[str, Any]:
        """Convert a pydantic document into a DynamoDB item dict."""
        item: Dict[str, Any] = {}
        for name, value in document.model_dump(mode="python").items():
            if value is None:
                continue
            item[name] = to_dynamo_value(value)
        return item

    @staticmethod
    def from_item(item: Dict[str, Any]) -> Dict[str, Any]:
        return {k: from_dynamo_value(v) for k, v in item.items()}

    # ------------------------------------------------------------------
    # Table operations
    # ------------------------------------------------------------------

    def _fail(self, action: str, exc: ClientError, **context: Any) -> UpstreamError:
        logger.error(
            "dynamo_request_failed",
            table=self._table_name,
            action=action,
            error=str(exc),
            **context,
        )
        return UpstreamError("DynamoDB", f"Failed to {action}: {exc}")

    def _get(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            response = self._table.get_item(Key={self.key_name: key})
        except ClientError as exc:
            raise self._fail("get item", exc, key=key) from exc
        return response.get("Item")

    def _put(self, item: Dict[str, Any]) -> None:
        try:
            self._table.put_item(Item=item)
        except ClientError as exc:
            raise self._fail("put item", exc, key=item.get(self.key_name)) from exc

    def _scan(self, **scan_kwargs: Any) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        try:
            # Handle pagination
            while True:
                response = self._table.scan(**scan_kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if last_key is None:
                    break
                scan_kwargs["ExclusiveStartKey"] = last_key
        except ClientError as exc:
            raise self._fail("scan table", exc) from exc
        return items

    def _delete(self, key: str) -> bool:
        """Delete by key; False when the item did not exist."""
        try:
            self._table.delete_item(
                Key={self.key_name: key},
                ConditionExpression="attribute_exists(#pk)",
                ExpressionAttributeNames={"#pk": self.key_name},
            )
        except ClientError as exc:
            if is_conditional_failure(exc):
                return False
            raise self._fail("delete item", exc, key=key) from exc
        return True

    def _build_update(
        self, fields: Dict[str, Any]
    ) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
        """Build ``SET``/``REMOVE`` clauses for a partial update.

        Every attribute name goes through a placeholder since ``status`` and
        ``date`` are reserved words.
        """
        names: Dict[str, str] = {"#pk": self.key_name}
        values: Dict[str, Any] = {}
        set_parts: List[str] = []
        remove_parts: List[str] = []
        for i, (name, value) in enumerate(fields.items()):
            names[f"#f{i}"] = name
            if value is None:
                remove_parts.append(f"#f{i}")
            else:
                values[f":v{i}"] = value
                set_parts.append(f"#f{i} = :v{i}")

        expression = ""
        if set_parts:
            expression = "SET " + ", ".join(set_parts)
        if remove_parts:
            expression += " REMOVE " + ", ".join(remove_parts)
        return expression.strip(), names, values

    def _update(
        self,
        key: str,
        fields: Dict[str, Any],
        condition: str = "attribute_exists(#pk)",
        condition_values: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Run a conditional partial update and return the new item.

        Returns None when the condition fails (missing item or stale state).
        """
        expression, names, values = self._build_update(fields)
        values.update(condition_values or {})
        return self._raw_update(key, expression, condition, names, values)

    def _raw_update(
        self,
        key: str,
        expression: str,
        condition: str,
        names: Dict[str, str],
        values: Dict[str, Any],
    ) -> Optional[Dict[str, Any]]:
        kwargs: Dict[str, Any] = {
            "Key": {self.key_name: key},
            "UpdateExpression": expression,
            "ConditionExpression": condition,
            "ExpressionAttributeNames": names,
            "ReturnValues": "ALL_NEW",
        }
        if values:
            kwargs["ExpressionAttributeValues"] = {
                k: to_dynamo_value(v) for k, v in values.items()
            }
        try:
            response = self._table.update_item(**kwargs)
        except ClientError as exc:
            if is_conditional_failure(exc):
                return None
            raise self._fail("update item", exc, key=key) from exc
        return response.get("Attributes")
