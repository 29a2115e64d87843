"""
SummarizationService: meeting summaries and action item extraction.

Depends only on LLMProviderPort for text generation.

Behaviour:
    • summarize            one LLM call, structured Markdown summary.
    • extract_action_items one LLM call, strict JSON validated with pydantic.

Both raise ``UpstreamError`` on LLM failure or unusable output; the
processing pipeline turns that into a failed meeting.
"""

from __future__ import annotations

import json
import re
from typing import Callable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from domain.models import ActionItemExtraction, ExtractedActionItem
from ports.llm_provider import LLMProviderPort
from shared_utils.constants import Defaults, LogScope
from shared_utils.error_handler import UpstreamError
from shared_utils.logging_utils import ContextualLogger, log_execution


logger = ContextualLogger(scope=LogScope.SUMMARIZATION)

# ---------------------------------------------------------------------------
# Prompt templates
# ---------------------------------------------------------------------------

SUMMARY_SYSTEM_PROMPT = (
    "You are an expert meeting analyst for nonprofits and teams.\n"
    "Create concise, structured summaries with the following sections:\n\n"
    "**Goals**: Key objectives discussed\n"
    "**Decisions**: Important decisions made\n"
    "**Risks**: Potential challenges or concerns raised\n"
    "**Next Steps**: Planned actions and follow-ups\n\n"
    "Be specific, actionable, and concise. Use bullet points. "
    f"Maximum {Defaults.SUMMARY_MAX_WORDS} words."
)

SUMMARY_PROMPT = "Summarize this meeting transcript:\n\n{transcript}"

EXTRACTION_SYSTEM_PROMPT = """You are an expert at extracting actionable tasks from meeting transcripts.

Extract clear, specific action items and return them as a JSON object with this exact structure:
{
  "items": [
    {
      "text": "Clear, actionable task description",
      "priority": "High" | "Medium" | "Low",
      "dueDate": "ISO datetime string (optional)",
      "assignee": "Person assigned (optional)"
    }
  ]
}

Priority levels:
- High: Urgent, time-sensitive, or critical impact
- Medium: Important but not urgent
- Low: Nice-to-have or long-term tasks

Use short, imperative phrasing (e.g., "Email the donor list to the board").
Only include dueDate if explicitly mentioned in transcript.
Only include assignee if clearly stated.
Focus on concrete, actionable tasks. Ignore general discussion points.

Return only valid JSON, no additional text."""

EXTRACTION_PROMPT = "Extract action items from this meeting transcript:\n\n{transcript}"

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def strip_code_fence(text: str) -> str:
    """Remove a surrounding Markdown code fence, if any."""
    text = text.strip()
    match = _CODE_FENCE.match(text)
    return match.group(1) if match else text


class SummarizationService:
    """Stateless wrapper around LLMProviderPort with the meeting prompts.

    Pass either a ready ``llm_provider`` or a ``provider_factory``; the
    factory is called on first use so CRUD-only processes never build an
    LLM client.
    """

    def __init__(
        self,
        *,
        llm_provider: Optional[LLMProviderPort] = None,
        provider_factory: Optional[Callable[[], LLMProviderPort]] = None,
    ) -> None:
        if llm_provider is None and provider_factory is None:
            raise ValueError("llm_provider or provider_factory is required")
        self._llm = llm_provider
        self._provider_factory = provider_factory

    def _provider(self) -> LLMProviderPort:
        if self._llm is None:
            self._llm = self._provider_factory()
        return self._llm

    @log_execution(scope=LogScope.SUMMARIZATION)
    def summarize(self, transcript: str) -> str:
        """Return a Goals / Decisions / Risks / Next Steps summary.

        Raises:
            UpstreamError: If the LLM call fails or returns nothing.
        """
        logger.info("summary_requested", transcript_chars=len(transcript))
        try:
            summary = self._provider().generate(
                SUMMARY_PROMPT.format(transcript=transcript),
                system_prompt=SUMMARY_SYSTEM_PROMPT,
            )
        except Exception as exc:
            logger.error("summary_failed", error=str(exc))
            raise UpstreamError("LLM", f"Failed to generate meeting summary: {exc}") from exc

        summary = (summary or "").strip()
        if not summary:
            logger.error("summary_empty")
            raise UpstreamError("LLM", "Failed to generate meeting summary: empty response")

        logger.info("summary_generated", summary_chars=len(summary))
        return summary

    @log_execution(scope=LogScope.SUMMARIZATION)
    def extract_action_items(self, transcript: str) -> List[ExtractedActionItem]:
        """Return the action items the LLM finds in *transcript* (may be empty).

        Raises:
            UpstreamError: If the LLM call fails or the reply is not valid JSON
                matching ``{"items": [...]}``.
        """
        logger.info("extraction_requested", transcript_chars=len(transcript))
        try:
            raw = self._provider().generate(
                EXTRACTION_PROMPT.format(transcript=transcript),
                system_prompt=EXTRACTION_SYSTEM_PROMPT,
            )
        except Exception as exc:
            logger.error("extraction_failed", error=str(exc))
            raise UpstreamError("LLM", f"Failed to extract action items: {exc}") from exc

        try:
            extraction = ActionItemExtraction.model_validate(
                json.loads(strip_code_fence(raw or ""))
            )
        except (ValueError, PydanticValidationError) as exc:
            logger.error("extraction_unparseable", error=str(exc), raw_chars=len(raw or ""))
            raise UpstreamError(
                "LLM", f"Failed to extract action items: invalid JSON response ({exc})"
            ) from exc

        logger.info("action_items_extracted", count=len(extraction.items))
        return extraction.items
