"""Review via an assistant embedded in the host environment.

The host is reached through a HostBridge: something that can tell whether a
named assistant command exists and run it with a prompt. The command may
answer inline or just hand the prompt to a chat surface and return nothing.

When the command is not available the reviewer does not fail. It produces a
canned lexical report (fallback_review) and labels the result "Warning" so
the user can see that no model was involved.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
from abc import ABC, abstractmethod

from difflens_core.git.process import ProcessRunner
from difflens_core.models import WARNING_LABEL, ReviewRequest, ReviewResult
from difflens_core.providers.base import BaseReviewer

logger = logging.getLogger(__name__)

ASSISTANT_LABEL = "Host Assistant"
HANDOFF_NOTICE = (
    "The assistant was opened with your review request. "
    "Please check the assistant's chat window for the response."
)

# Above this many characters the diff is flagged as too large to review well.
_LARGE_CODE_THRESHOLD = 10_000

_REVIEW_FOCUS = (
    "Code quality and best practices",
    "Potential bugs or issues",
    "Performance considerations",
    "Security concerns",
    "Maintainability and readability",
    "Suggestions for improvement",
)


class HostBridge(ABC):
    """Access to assistant commands provided by the host environment."""

    @abstractmethod
    def is_available(self, command: str) -> bool:
        """Return True if ``command`` can be executed right now. Never raises."""

    @abstractmethod
    def execute(self, command: str, prompt: str) -> str | None:
        """Run ``command`` with ``prompt``.

        Returns the assistant's reply, or None when the prompt was handed off
        without an inline answer. Raises on failure.
        """


class NullHost(HostBridge):
    """A host with no assistant at all; every review takes the fallback path."""

    def is_available(self, command: str) -> bool:
        return False

    def execute(self, command: str, prompt: str) -> str | None:
        raise RuntimeError(f"Assistant command {command!r} is not available.")


class CommandLineHost(HostBridge):
    """Treats the assistant command as an executable on PATH.

    The command string may include arguments (``"copilot --quiet"``); the
    prompt is written to the process's stdin and stdout is the reply.
    """

    def __init__(self, working_directory: str | None = None, timeout: float = 300):
        self.working_directory = working_directory or os.getcwd()
        self.timeout = timeout

    def is_available(self, command: str) -> bool:
        try:
            argv = shlex.split(command)
        except ValueError:
            return False
        return bool(argv) and shutil.which(argv[0]) is not None

    def execute(self, command: str, prompt: str) -> str | None:
        argv = shlex.split(command)
        runner = ProcessRunner(executable=argv[0], timeout=self.timeout)
        result = runner.run(self.working_directory, argv[1:], stdin_text=prompt)
        if not result.succeeded:
            detail = result.stderr.strip() or f"exit code {result.exit_code}"
            raise RuntimeError(f"{argv[0]} failed: {detail}")
        return result.stdout.strip() or None


def build_assistant_prompt(code: str, perspective: str) -> str:
    lines = [
        "Please review the following code:",
        "",
        "```",
        code,
        "```",
        "",
        f"Review perspective: {perspective}",
        "",
        "Please provide a detailed code review focusing on:",
    ]
    lines.extend(f"- {focus}" for focus in _REVIEW_FOCUS)
    return "\n".join(lines) + "\n"


def fallback_review(code: str, perspective: str) -> str:
    """Lexical quick-look report used when no assistant is reachable.

    A pure function of its arguments: same text in, same report out.
    """
    line_count = len(code.split("\n"))
    findings = []
    if "TODO" in code or "FIXME" in code:
        findings.append("- ⚠️ Found TODO/FIXME comments - consider addressing these")
    if "catch" in code and "throw" not in code:
        findings.append("- ⚠️ Exception handling detected - ensure proper error handling")
    if "async" in code and "await" not in code:
        findings.append("- ⚠️ Async method without await - verify this is intentional")
    if len(code) > _LARGE_CODE_THRESHOLD:
        findings.append("- ⚠️ Large code block - consider breaking into smaller methods")

    lines = [
        "# Code Review (Fallback Analysis)",
        "",
        "The host assistant is not available. Here's a basic analysis:",
        "",
        "**Code Statistics:**",
        f"- Lines of code: {line_count}",
        f"- Characters: {len(code)}",
        "",
        "**Quick Analysis:**",
        *findings,
        "",
        "**Recommendations:**",
        "- Configure an assistant command or switch to the cloud provider for a detailed AI-powered review",
        "- Run your usual linters and static analysis tools",
        "- Consider peer review for complex changes",
        "",
        f"**Review Perspective Applied:** {perspective}",
    ]
    return "\n".join(lines) + "\n"


class HostAssistantReviewer(BaseReviewer):
    LABEL = ASSISTANT_LABEL
    ERROR_PREFIX = "Assistant error"
    # The command may open a chat window; retrying would open several.
    MAX_RETRIES = 1

    def __init__(self, host: HostBridge, command: str):
        self.host = host
        self.command = command

    def review(self, request: ReviewRequest) -> ReviewResult:
        if not self.host.is_available(self.command):
            logger.info("Assistant command %r unavailable; using fallback analysis.", self.command)
            return ReviewResult(
                provider_label=WARNING_LABEL,
                review_text=fallback_review(request.diff_markdown, request.review_perspective),
            )
        return super().review(request)

    def probe(self) -> bool:
        return self.host.is_available(self.command)

    def _build_prompt(self, request: ReviewRequest) -> str:
        return build_assistant_prompt(request.diff_markdown, request.review_perspective)

    def _call_api(self, prompt: str, max_tokens: int) -> str:
        reply = self.host.execute(self.command, prompt)
        return reply if reply else HANDOFF_NOTICE
