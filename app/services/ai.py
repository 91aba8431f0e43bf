"""AI service: OpenAI-compatible model for report summaries and optimized code."""

import json
import logging
from typing import Any, Optional, Sequence

from openai import OpenAI

from code_quality_checker.issue import Assessment, Issue

from ..config import Settings

logger = logging.getLogger(__name__)


def _issues_summary(issues: Sequence[Issue]) -> str:
    if not issues:
        return "No rule-based issues found."
    parts = []
    # most severe first
    for i in sorted(issues, key=lambda i: i.severity, reverse=True):
        where = f"Line {i.line}" if i.line else "File"
        parts.append(
            f"- {where} [{i.severity.value}] {i.category.value}: {i.message}\n"
            f"  Suggestion: {i.suggestion or '-'}"
        )
    return "\n".join(parts)


def _strip_code_fence(text: str) -> str:
    if text.startswith("```"):
        lines = text.split("\n")
        if lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines)
    return text


def parse_assessment(text: str) -> Assessment:
    """Build an Assessment from the model reply.

    The model is asked for a JSON object with `summary` and `optimizedCode`;
    a reply that is not JSON is kept whole as the summary.
    """
    body = _strip_code_fence(text.strip())
    try:
        data = json.loads(body)
    except ValueError:
        return Assessment(summary=text.strip() or None)
    if not isinstance(data, dict):
        return Assessment(summary=text.strip() or None)
    summary = data.get("summary")
    optimized = data.get("optimizedCode") or data.get("optimized_code")
    return Assessment(
        summary=str(summary).strip() if summary else None,
        optimized_code=_strip_code_fence(str(optimized)) if optimized else None,
    )


class AssessmentService:
    """Summaries from an OpenAI-compatible chat model.

    `summarize` returns None when no client can be built. Transport and API
    errors propagate; the engine turns them into an enrichment status.
    """

    def __init__(self, settings: Settings, client: Optional[Any] = None):
        self.settings = settings
        self._client = client

    def _get_client(self) -> Optional[Any]:
        if self._client is None and self.settings.ai_enabled:
            self._client = OpenAI(
                api_key=self.settings.openai_api_key,
                base_url=self.settings.openai_base_url,
                timeout=self.settings.analysis_timeout_ms / 1000.0,
            )
        return self._client

    def summarize(
        self,
        code: str,
        language: str,
        issues: Sequence[Issue],
        context: Optional[str] = None,
    ) -> Optional[Assessment]:
        """Return a summary and optionally improved code. None if AI unavailable."""
        client = self._get_client()
        if client is None:
            return None
        prompt = (
            "You are a senior code reviewer. A static checker reported the issues below "
            f"for this {language} code.\n\n"
            "Issues:\n"
            f"{_issues_summary(issues)}\n\n"
        )
        if context:
            prompt += f"Context from the author:\n{context[:2000]}\n\n"
        prompt += (
            f"Source code ({language}):\n```\n{code[:8000]}\n```\n\n"
            "Reply with a JSON object with two keys: \"summary\" (a short assessment of "
            "overall quality and the most important fixes) and \"optimizedCode\" (the "
            "improved code, or null if no change is needed). Output only the JSON."
        )
        r = client.chat.completions.create(
            model=self.settings.ai_model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=2048,
        )
        if not r.choices or not r.choices[0].message.content:
            logger.info("Assessment model returned an empty reply")
            return Assessment()
        return parse_assessment(r.choices[0].message.content)
