"""Review request/result value objects shared by the orchestrator and providers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

ERROR_LABEL = "Error"
WARNING_LABEL = "Warning"


@dataclass(frozen=True)
class ReviewRequest:
    """Everything a provider needs for one review.

    ``prompt`` is the complete text sent to a language model. The formatted
    diff and perspective are carried separately for providers that build
    their own prompt or analyse the diff locally.
    """

    prompt: str
    diff_markdown: str
    review_perspective: str


@dataclass(frozen=True)
class ReviewResult:
    """Outcome of one review invocation.

    ``provider_label`` is the model or assistant that produced the text, or
    the literal "Error"/"Warning" when the review did not run normally.
    ``generated_at`` lets consumers tell a stale review from a fresh one.
    """

    provider_label: str
    review_text: str
    generated_at: datetime = field(default_factory=datetime.now)

    @property
    def is_error(self) -> bool:
        return self.provider_label == ERROR_LABEL
