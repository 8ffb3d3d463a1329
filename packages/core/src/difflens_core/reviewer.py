"""Core review orchestration: validate → build prompt → dispatch → result."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable

from difflens_core.config import ProviderKind, ReviewConfiguration
from difflens_core.models import ERROR_LABEL, ReviewRequest, ReviewResult
from difflens_core.providers.assistant import HostAssistantReviewer, HostBridge, NullHost
from difflens_core.providers.base import BaseReviewer
from difflens_core.providers.bedrock import BedrockReviewer
from difflens_core.utils.diff import format_diff_markdown

logger = logging.getLogger(__name__)

ReviewerFactory = Callable[[ReviewConfiguration], BaseReviewer]


def get_reviewer(config: ReviewConfiguration, host: HostBridge | None = None) -> BaseReviewer:
    if config.provider == ProviderKind.CLOUD:
        return BedrockReviewer(
            model_id=config.model_id,
            aws_access_key=config.aws_access_key,
            aws_secret_key=config.aws_secret_key,
            aws_region=config.aws_region,
        )
    if config.provider == ProviderKind.HOST_ASSISTANT:
        return HostAssistantReviewer(host=host or NullHost(), command=config.assistant_command)
    raise ValueError(f"Unsupported LLM provider: {config.provider!r}")


def build_review_prompt(diff_markdown: str, config: ReviewConfiguration) -> str:
    return f"""{config.system_prompt}

Review Perspective: {config.review_perspective}

Please review the following git diff (formatted in markdown for better readability):

{diff_markdown}

Please provide a detailed code review with specific suggestions for improvement."""


def render_review_markdown(result: ReviewResult) -> str:
    """Render a review as the standalone markdown document shown to the user."""
    return (
        "# Code Review Results\n"
        "\n"
        f"**Model Used:** {result.provider_label}  \n"
        f"**Generated at:** {result.generated_at:%Y-%m-%d %H:%M:%S}\n"
        "\n"
        "---\n"
        "\n"
        f"{result.review_text}"
    )


class ReviewOrchestrator:
    """Runs one review per call against whichever provider the config selects.

    Holds no per-review state, so concurrent reviews on one instance do not
    interfere (they may still race on whatever displays the results).
    """

    def __init__(self, reviewer_factory: ReviewerFactory | None = None, host: HostBridge | None = None):
        self.host = host or NullHost()
        self._reviewer_factory = reviewer_factory or self._default_factory

    def _default_factory(self, config: ReviewConfiguration) -> BaseReviewer:
        return get_reviewer(config, host=self.host)

    def validate(self, config: ReviewConfiguration) -> list[str]:
        try:
            return config.validate()
        except Exception as e:
            return [f"Invalid configuration: {e}"]

    def review(self, diff: str, config: ReviewConfiguration) -> ReviewResult:
        """Review ``diff`` and return a result; never raises.

        A rejected configuration or any provider failure comes back as a
        result labelled "Error" whose text carries the original message.
        """
        # Read the caller's configuration exactly once for this review.
        try:
            snapshot = replace(config)
        except TypeError as e:
            return ReviewResult(ERROR_LABEL, f"Code review failed: {e}")

        errors = self.validate(snapshot)
        if errors:
            logger.info("Review rejected: %s", "; ".join(errors))
            return ReviewResult(ERROR_LABEL, f"Configuration errors: {', '.join(errors)}")

        try:
            diff_markdown = format_diff_markdown(diff)
            request = ReviewRequest(
                prompt=build_review_prompt(diff_markdown, snapshot),
                diff_markdown=diff_markdown,
                review_perspective=snapshot.review_perspective,
            )
            reviewer = self._reviewer_factory(snapshot)
            logger.debug("Dispatching review to %s", reviewer.__class__.__name__)
            return reviewer.review(request)
        except Exception as e:
            logger.error("Code review failed: %s", e)
            return ReviewResult(ERROR_LABEL, f"Code review failed: {e}")

    def test_connection(self, config: ReviewConfiguration) -> bool:
        """Send a tiny probe to the configured provider; any failure is False."""
        try:
            return bool(self._reviewer_factory(replace(config)).probe())
        except Exception as e:
            logger.debug("Connection test failed: %s", e)
            return False
