"""
Nylas Notetaker adapter.

Implements NotetakerPort over the Nylas v3 REST API using httpx. Bot
invitations and transcript fetches are best effort: failures are logged and
reported as ``None`` / an empty result. Transcript downloads used by the
processing pipeline raise ``UpstreamError`` instead.
"""

from __future__ import annotations

import time
from datetime import datetime
from typing import Any, Callable, Dict, Optional

import httpx

from domain.models import CallProvider, TranscriptionResult
from shared_utils.constants import APIEndpoints, Defaults, LogScope, NylasEvents
from shared_utils.error_handler import UpstreamError
from shared_utils.logging_utils import get_scoped_logger


logger = get_scoped_logger(LogScope.NOTETAKER)


class NylasNotetakerAdapter:
    """Nylas implementation of NotetakerPort.

    With no API key configured every Nylas call is skipped (logged once per
    call) so local development works without credentials.
    """

    def __init__(
        self,
        api_key: Optional[str],
        api_base: str = Defaults.NYLAS_API_BASE,
        timeout: float = Defaults.REQUEST_TIMEOUT,
        display_name: str = Defaults.NOTETAKER_DISPLAY_NAME,
        http_client: Optional[httpx.Client] = None,
        max_attempts: int = Defaults.MAX_RETRIES,
        retry_delay: float = Defaults.RETRY_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._api_key = api_key
        self._api_base = api_base.rstrip("/")
        self._display_name = display_name
        self._client = http_client or httpx.Client(timeout=timeout)
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay
        self._sleep = sleep

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        response = self._client.request(
            method, f"{self._api_base}{path}", headers=self._headers(), **kwargs
        )
        response.raise_for_status()
        return response

    @staticmethod
    def _unwrap(payload: Any) -> Dict[str, Any]:
        """Nylas v3 wraps resources in ``{"request_id": ..., "data": {...}}``."""
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            return payload["data"]
        return payload if isinstance(payload, dict) else {}

    # ------------------------------------------------------------------
    # NotetakerPort implementation
    # ------------------------------------------------------------------

    def invite_bot(
        self,
        provider: CallProvider,
        meeting_url: str,
        title: Optional[str] = None,
        start_time: Optional[datetime] = None,
    ) -> Optional[str]:
        if not self.enabled:
            logger.warning("notetaker_invite_skipped", reason="no_api_key", meeting_url=meeting_url)
            return None

        body: Dict[str, Any] = {
            "meeting_link": meeting_url,
            "display_name": self._display_name,
            "send_recording_consent_message": True,
        }
        if start_time is not None:
            body["join_time"] = int(start_time.timestamp())

        try:
            data = self._unwrap(self._request("POST", "/notetakers", json=body).json())
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(
                "notetaker_invite_failed",
                provider=provider.value,
                meeting_url=meeting_url,
                error=str(exc),
            )
            return None

        notetaker_id = data.get("id") or data.get("notetaker_id")
        logger.info(
            "notetaker_invited",
            provider=provider.value,
            title=title,
            notetaker_id=notetaker_id,
        )
        return notetaker_id

    def fetch_transcription(self, notetaker_id: str) -> TranscriptionResult:
        if not self.enabled:
            logger.warning("notetaker_fetch_skipped", reason="no_api_key", notetaker_id=notetaker_id)
            return TranscriptionResult()

        try:
            response = self._request("GET", f"/notetakers/{notetaker_id}/transcription")
            data = self._unwrap(response.json())
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("notetaker_fetch_failed", notetaker_id=notetaker_id, error=str(exc))
            return TranscriptionResult()

        result = TranscriptionResult(
            text=data.get("transcription_text") or data.get("text"),
            summary=data.get("summary"),
        )
        logger.info(
            "notetaker_transcription_fetched",
            notetaker_id=notetaker_id,
            has_text=bool(result.text),
            has_summary=bool(result.summary),
        )
        return result

    def download_text(self, url: str) -> str:
        try:
            response = self._client.get(url, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("transcript_download_failed", url=url, error=str(exc))
            raise UpstreamError("Transcript download", str(exc), context={"url": url}) from exc
        logger.info("transcript_downloaded", url=url, chars=len(response.text))
        return response.text

    def setup_webhooks(self, base_url: str) -> bool:
        """Delete existing webhooks, then create ours with up to
        ``max_attempts`` tries."""
        if not self.enabled:
            logger.warning("webhook_setup_skipped", reason="no_api_key")
            return False

        webhook_url = f"{base_url.rstrip('/')}{APIEndpoints.NYLAS_WEBHOOK}"

        try:
            payload = self._request("GET", "/webhooks").json()
            existing = (payload.get("data") if isinstance(payload, dict) else None) or []
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("webhook_list_failed", error=str(exc))
            existing = []

        for webhook in existing:
            webhook_id = webhook.get("id")
            if not webhook_id:
                continue
            try:
                self._request("DELETE", f"/webhooks/{webhook_id}")
                logger.info("webhook_deleted", webhook_id=webhook_id)
            except httpx.HTTPError as exc:
                logger.warning("webhook_delete_failed", webhook_id=webhook_id, error=str(exc))

        body = {
            "trigger_types": NylasEvents.subscribed(),
            "webhook_url": webhook_url,
            "description": "Notetaker events webhook",
        }
        for attempt in range(1, self._max_attempts + 1):
            try:
                created = self._unwrap(self._request("POST", "/webhooks", json=body).json())
                logger.info(
                    "webhook_created",
                    webhook_id=created.get("id"),
                    webhook_url=webhook_url,
                    attempt=attempt,
                )
                return True
            except (httpx.HTTPError, ValueError) as exc:
                logger.error(
                    "webhook_create_failed",
                    attempt=attempt,
                    max_attempts=self._max_attempts,
                    error=str(exc),
                )
                if attempt < self._max_attempts:
                    self._sleep(self._retry_delay)

        return False
