"""Base reviewer implementing the Template Method pattern.

All providers share the same review algorithm:
    review() → _build_prompt() → _call_with_retry() → _call_api()
                                                      ↑ only this differs per provider

Subclasses implement two things only:
  - __init__: validate and store whatever client they talk to
  - _call_api: make one raw call and return the review text

A provider that cannot produce a review raises ProviderError; it never
returns an error string dressed up as a review.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod

from difflens_core.models import ReviewRequest, ReviewResult

logger = logging.getLogger(__name__)

_MAX_RETRIES = 3
_MAX_TOKENS = 4000
_PROBE_MAX_TOKENS = 10
_PROBE_PROMPT = "Hello"


class ProviderError(RuntimeError):
    """A provider call failed; the message keeps the underlying cause."""

    def __init__(self, provider: str, message: str):
        super().__init__(message)
        self.provider = provider


class BaseReviewer(ABC):
    MAX_RETRIES: int = _MAX_RETRIES
    MAX_TOKENS: int = _MAX_TOKENS
    ERROR_PREFIX: str = "Provider error"
    LABEL: str = "Reviewer"

    @property
    def label(self) -> str:
        """Name shown to the user as the source of the review."""
        return self.LABEL

    def review(self, request: ReviewRequest) -> ReviewResult:
        prompt = self._build_prompt(request)
        text = self._call_with_retry(prompt)
        return ReviewResult(provider_label=self.label, review_text=text)

    def probe(self) -> bool:
        """Send a minimal request to check the provider answers at all.

        A single attempt, no retries; raises on failure like _call_api.
        """
        self._call_api(_PROBE_PROMPT, _PROBE_MAX_TOKENS)
        return True

    @abstractmethod
    def _call_api(self, prompt: str, max_tokens: int) -> str:
        """Make a single call and return the review text.

        Should raise on failure. _call_with_retry handles retries and logging.
        """

    def _build_prompt(self, request: ReviewRequest) -> str:
        return request.prompt

    def _call_with_retry(self, prompt: str) -> str:
        """Retry _call_api up to MAX_RETRIES times with exponential backoff.

        Raises ProviderError carrying the last underlying message once the
        attempts are exhausted.
        """
        for attempt in range(self.MAX_RETRIES):
            try:
                return self._call_api(prompt, self.MAX_TOKENS)
            except Exception as e:
                if attempt == self.MAX_RETRIES - 1:
                    logger.error(
                        "%s failed after %d attempt(s): %s",
                        self.__class__.__name__,
                        self.MAX_RETRIES,
                        e,
                    )
                    raise ProviderError(self.label, f"{self.ERROR_PREFIX}: {e}") from e
                delay = 2**attempt
                logger.warning(
                    "%s error (attempt %d/%d): %s. Retrying in %ds...",
                    self.__class__.__name__,
                    attempt + 1,
                    self.MAX_RETRIES,
                    e,
                    delay,
                )
                time.sleep(delay)
        raise ProviderError(self.label, f"{self.ERROR_PREFIX}: no attempts made")
