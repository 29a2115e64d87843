"""
Input validation and sanitization utilities.
Provides the boundary checks applied to request bodies and query strings
before any service call.
"""

from datetime import datetime, timezone
from typing import Any, Iterable, Optional
import re

from shared_utils.error_handler import ValidationError



def _normalize_key(key: str) -> str:
    """camelCase -> snake_case so bodies may use either convention."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


class InputValidator:
    """Utility class for input validation."""

    @staticmethod
    def normalize_keys(body: dict) -> dict:
        """Return a copy of *body* with snake_case keys.

        Raises:
            ValidationError: If body is not a JSON object
        """
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        return {_normalize_key(k): v for k, v in body.items()}

    @staticmethod
    def validate_non_empty_string(value: Any, field_name: str) -> str:
        """Validate non-empty string.

        Args:
            value: String to validate
            field_name: Name of field for error messages

        Returns:
            Stripped string

        Raises:
            ValidationError: If validation fails
        """
        if not isinstance(value, str):
            raise ValidationError(f"{field_name} must be a string")

        if not value or not value.strip():
            raise ValidationError(f"{field_name} cannot be empty")

        return value.strip()

    @staticmethod
    def validate_optional_string(value: Any, field_name: str) -> Optional[str]:
        """Strings pass through, None stays None, anything else is rejected."""
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValidationError(f"{field_name} must be a string")
        return value

    @staticmethod
    def validate_positive_number(
        value: Any,
        message: str = "Value must be a positive number",
    ) -> float:
        """Validate a strictly positive int/float (bools rejected).

        Raises:
            ValidationError: If validation fails
        """
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ValidationError(message)
        return value

    @staticmethod
    def validate_choice(value: Any, choices: Iterable[str], message: str) -> str:
        """Validate that *value* is one of *choices* (exact match).

        Raises:
            ValidationError: With *message* when the value is not allowed
        """
        if not isinstance(value, str) or value not in list(choices):
            raise ValidationError(message, context={"value": value})
        return value

    @staticmethod
    def parse_datetime(value: Any, field_name: str) -> datetime:
        """Parse an ISO-8601 date or datetime into an aware UTC datetime.

        Accepts ``YYYY-MM-DD``, full ISO timestamps (``Z`` suffix allowed)
        and datetime instances. Naive values are taken as UTC.

        Raises:
            ValidationError: If the value cannot be parsed
        """
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, str) and value.strip():
            text = value.strip()
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            try:
                parsed = datetime.fromisoformat(text)
            except ValueError as exc:
                raise ValidationError(
                    f"Invalid {field_name}: expected an ISO 8601 date",
                    context={"value": value},
                ) from exc
        else:
            raise ValidationError(
                f"Invalid {field_name}: expected an ISO 8601 date",
                context={"value": value},
            )

        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    @staticmethod
    def parse_optional_datetime(value: Any, field_name: str) -> Optional[datetime]:
        if value is None or value == "":
            return None
        return InputValidator.parse_datetime(value, field_name)

    @staticmethod
    def reject_unknown_fields(body: dict, allowed: Iterable[str]) -> None:
        """Raise if *body* carries keys outside *allowed*.

        Raises:
            ValidationError: Listing the offending fields
        """
        unknown = sorted(set(body) - set(allowed))
        if unknown:
            raise ValidationError(
                f"Field(s) cannot be updated: {', '.join(unknown)}",
                context={"fields": unknown},
            )
