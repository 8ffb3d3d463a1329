"""The outward surface of difflens_core.

DiffLens wires the git helpers, the formatter and the review orchestrator
together once, and is then passed to whatever front end drives it (the CLI,
an editor plugin, tests). It holds no mutable state of its own.
"""

from __future__ import annotations

import logging
from datetime import datetime

from difflens_core.config import ProviderKind, ReviewConfiguration
from difflens_core.git.diff import DiffRetriever
from difflens_core.git.process import ProcessRunner
from difflens_core.git.repository import Commit, RepositoryInspector
from difflens_core.models import ERROR_LABEL, ReviewResult
from difflens_core.providers.assistant import HostBridge, NullHost
from difflens_core.reviewer import ReviewerFactory, ReviewOrchestrator
from difflens_core.utils import diff as diff_utils
from difflens_core.utils.diff import DiffStatistics
from difflens_core.utils.filters import validate_filter_syntax

logger = logging.getLogger(__name__)

NOT_A_REPOSITORY = "Current directory is not in a Git repository."


class DiffLens:
    def __init__(
        self,
        runner: ProcessRunner | None = None,
        host: HostBridge | None = None,
        reviewer_factory: ReviewerFactory | None = None,
    ):
        runner = runner or ProcessRunner()
        self.host = host or NullHost()
        self.inspector = RepositoryInspector(runner)
        self.retriever = DiffRetriever(runner)
        self.orchestrator = ReviewOrchestrator(reviewer_factory=reviewer_factory, host=self.host)

    # ------------------------------------------------------------------ #
    # Repository facts                                                     #
    # ------------------------------------------------------------------ #

    def is_repository(self, path: str) -> bool:
        return self.inspector.is_repository(path)

    def repository_root(self, path: str) -> str | None:
        return self.inspector.repository_root(path)

    def current_branch(self, path: str) -> str:
        return self.inspector.current_branch(path)

    def recent_commits(self, path: str, max_count: int = 20) -> list[Commit]:
        return self.inspector.recent_commits(path, max_count)

    # ------------------------------------------------------------------ #
    # Diffs                                                                #
    # ------------------------------------------------------------------ #

    def get_diff(
        self,
        path: str,
        from_ref: str | None = None,
        context_lines: int = 3,
        exclude_deleted: bool = True,
        path_filters: str = "",
    ) -> str:
        return self.retriever.diff(path, from_ref, context_lines, exclude_deleted, path_filters)

    def format_diff_markdown(self, diff: str) -> str:
        return diff_utils.format_diff_markdown(diff)

    def diff_statistics(self, diff: str) -> DiffStatistics:
        return diff_utils.diff_statistics(diff)

    def validate_filter_syntax(self, filters: str) -> bool:
        return validate_filter_syntax(filters)

    def preview(self, path: str, config: ReviewConfiguration, from_ref: str | None = None) -> tuple[str, str]:
        """Return ``(raw_diff, preview_markdown)`` for the configured diff options."""
        root = self.repository_root(path) or path
        diff = self.get_diff(root, from_ref, config.context_lines, config.exclude_deleted_files, config.path_filters)
        document = diff_utils.build_diff_preview(
            diff,
            from_ref,
            config.context_lines,
            config.exclude_deleted_files,
            config.path_filters,
            generated_at=datetime.now(),
        )
        return diff, document

    # ------------------------------------------------------------------ #
    # Review                                                               #
    # ------------------------------------------------------------------ #

    def validate_configuration(self, config: ReviewConfiguration) -> list[str]:
        return self.orchestrator.validate(config)

    def review(self, diff: str, config: ReviewConfiguration) -> ReviewResult:
        return self.orchestrator.review(diff, config)

    def test_connection(self, config: ReviewConfiguration) -> bool:
        return self.orchestrator.test_connection(config)

    def available_providers(self, config: ReviewConfiguration) -> list[ProviderKind]:
        """Cloud inference is always offered; the assistant only when its command exists."""
        providers = [ProviderKind.CLOUD]
        if self.host.is_available(config.assistant_command):
            providers.append(ProviderKind.HOST_ASSISTANT)
        return providers

    def review_repository(
        self,
        path: str,
        config: ReviewConfiguration,
        from_ref: str | None = None,
    ) -> ReviewResult | None:
        """Run the whole pipeline for the repository containing ``path``.

        Returns None when there is nothing to review (empty diff). Every
        other outcome, including a missing repository or a bad
        configuration, is a ReviewResult.
        """
        if not self.is_repository(path):
            return ReviewResult(ERROR_LABEL, NOT_A_REPOSITORY)

        errors = self.validate_configuration(config)
        if errors:
            return ReviewResult(ERROR_LABEL, f"Configuration errors: {', '.join(errors)}")

        root = self.repository_root(path) or path
        diff = self.get_diff(root, from_ref, config.context_lines, config.exclude_deleted_files, config.path_filters)
        if not diff.strip():
            logger.info("No changes found to review in %s", root)
            return None

        return self.review(diff, config)
