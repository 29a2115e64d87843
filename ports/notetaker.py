"""
Port interface for the meeting notetaker bot and transcript downloads.

Implementations: NylasNotetakerAdapter (adapters/)
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from domain.models import CallProvider, TranscriptionResult


@runtime_checkable
class NotetakerPort(Protocol):
    """Abstract interface for the transcription provider."""

    def invite_bot(
        self,
        provider: CallProvider,
        meeting_url: str,
        title: Optional[str] = None,
        start_time: Optional[datetime] = None,
    ) -> Optional[str]:
        """Ask the provider to send its bot to a call.

        Returns:
            The notetaker session id, or None on any failure. Never raises.
        """
        ...

    def fetch_transcription(self, notetaker_id: str) -> TranscriptionResult:
        """Fetch transcript text and summary for a session.

        Returns:
            An empty result on any failure. Never raises.
        """
        ...

    def download_text(self, url: str) -> str:
        """Download a transcript file as text.

        Raises:
            UpstreamError: If the download fails.
        """
        ...

    def setup_webhooks(self, base_url: str) -> bool:
        """Replace the provider's webhook subscriptions with one pointing at
        ``{base_url}/webhooks/nylas``. Returns True on success."""
        ...
