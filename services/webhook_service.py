"""
WebhookService: Nylas notetaker event ingestion.

Flow:  raw body → verify HMAC → parse envelope → dispatch on ``type``.

``notetaker.media`` carries the transcript for a bot session. The matching
meeting is found by session id, then by the call link (as ``meeting_url`` or
as the external meeting id derived from it), and its transcript fields are
updated in place. Unmatched and unhandled events are logged and acknowledged
so the sender does not retry.
"""

from __future__ import annotations

import hashlib
import hmac
import json
from typing import Any, Dict, Optional

from domain.models import Meeting
from ports.meeting_store import MeetingStorePort
from ports.notetaker import NotetakerPort
from services.meeting_service import extract_zoom_meeting_id
from shared_utils.constants import LogScope, NylasEvents
from shared_utils.error_handler import SignatureError, ValidationError
from shared_utils.logging_utils import ContextualLogger


logger = ContextualLogger(scope=LogScope.WEBHOOK)

_SIGNATURE_PREFIX = "sha256="


def compute_signature(secret: str, raw_body: bytes) -> str:
    """Hex HMAC-SHA256 of the raw request body."""
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


class WebhookService:
    """Verifies and applies inbound notetaker webhooks."""

    def __init__(
        self,
        *,
        meeting_store: MeetingStorePort,
        notetaker: NotetakerPort,
        webhook_secret: Optional[str] = None,
    ) -> None:
        self._meetings = meeting_store
        self._notetaker = notetaker
        self._secret = webhook_secret or None

    @property
    def verification_enabled(self) -> bool:
        return self._secret is not None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def verify_signature(self, raw_body: bytes, signature: Optional[str]) -> None:
        """Constant-time check of the signature header.

        Raises:
            SignatureError: If a secret is configured and the header is
                missing or does not match.
        """
        if not self.verification_enabled:
            return
        if not signature:
            logger.warning("webhook_signature_missing")
            raise SignatureError()

        provided = signature.strip()
        if provided.lower().startswith(_SIGNATURE_PREFIX):
            provided = provided[len(_SIGNATURE_PREFIX):]
        expected = compute_signature(self._secret, raw_body)
        if not hmac.compare_digest(provided.lower().encode("utf-8"), expected.encode("ascii")):
            logger.warning("webhook_signature_mismatch")
            raise SignatureError()

    def handle_event(self, raw_body: bytes, signature: Optional[str] = None) -> Dict[str, Any]:
        """Verify, parse and apply one webhook delivery.

        Returns:
            Acknowledgement payload (always ``{"ok": True, ...}``).

        Raises:
            SignatureError: Bad signature.
            ValidationError: Body is not a ``{type, data}`` JSON object, or a
                media event has no notetaker id.
        """
        self.verify_signature(raw_body, signature)

        try:
            payload = json.loads(raw_body or b"null")
        except ValueError as exc:
            raise ValidationError("Invalid payload") from exc
        if not isinstance(payload, dict) or not payload.get("type") or not payload.get("data"):
            raise ValidationError("Invalid payload")

        event_type = payload["type"]
        data = payload["data"]
        if not isinstance(data, dict):
            raise ValidationError("Invalid payload")

        logger.info("webhook_received", event_type=event_type)

        if event_type == NylasEvents.NOTETAKER_MEDIA:
            return self._handle_media(data)

        logger.info("webhook_ignored", event_type=event_type)
        return {"ok": True}

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _handle_media(self, data: Dict[str, Any]) -> Dict[str, Any]:
        obj = data.get("object") if isinstance(data.get("object"), dict) else {}

        notetaker_id = data.get("notetaker_id") or obj.get("notetaker_id") or obj.get("id")
        if not notetaker_id:
            logger.error("webhook_missing_notetaker_id")
            raise ValidationError("Missing notetaker ID")

        notetaker_id = self._text_field(notetaker_id)
        log = logger.bind(notetaker_id=notetaker_id)
        text = self._text_field(obj.get("text") or data.get("text"))
        summary = self._text_field(obj.get("summary") or data.get("summary"))
        transcript_url = self._transcript_url(obj) or self._transcript_url(data)
        meeting_link = self._text_field(obj.get("meeting_link") or data.get("meeting_link"))

        if not text:
            fetched = self._notetaker.fetch_transcription(notetaker_id)
            if fetched.is_empty:
                log.info("webhook_transcript_unavailable")
            text = fetched.text
            summary = summary or fetched.summary

        meeting = self._locate_meeting(notetaker_id, meeting_link)
        if meeting is None:
            log.warning("webhook_meeting_not_found", meeting_link=meeting_link)
            return {"ok": True, "matched": False}

        fields: Dict[str, Any] = {"notetaker_id": notetaker_id}
        if text:
            fields["transcript_text"] = text
        if summary:
            fields["provider_summary"] = summary
        if transcript_url:
            fields["transcript_url"] = transcript_url

        self._meetings.update_meeting(meeting.meeting_id, fields)
        log.info(
            "webhook_transcript_stored",
            meeting_id=meeting.meeting_id,
            has_text=bool(text),
            has_summary=bool(summary),
        )
        return {"ok": True, "matched": True, "meetingId": meeting.meeting_id}

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _locate_meeting(self, notetaker_id: str, meeting_link: Optional[str]) -> Optional[Meeting]:
        meeting = self._meetings.find_meeting("notetaker_id", notetaker_id)
        if meeting is not None or not meeting_link:
            return meeting

        meeting = self._meetings.find_meeting("meeting_url", meeting_link)
        if meeting is not None:
            return meeting

        external_id = extract_zoom_meeting_id(meeting_link) or meeting_link
        return self._meetings.find_meeting("external_meeting_id", external_id)

    @staticmethod
    def _text_field(value: Any) -> Optional[str]:
        """Payload strings must be strings; anything else is a malformed event."""
        if value is None or isinstance(value, str):
            return value
        logger.warning("webhook_field_invalid", value_type=type(value).__name__)
        raise ValidationError("Invalid payload")

    @staticmethod
    def _transcript_url(container: Dict[str, Any]) -> Optional[str]:
        media = container.get("media")
        if isinstance(media, dict) and isinstance(media.get("transcript"), str):
            return media["transcript"]
        url = container.get("transcript_url")
        return url if isinstance(url, str) else None
