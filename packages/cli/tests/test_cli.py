"""Tests for the CLI entry point."""

import subprocess
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
import yaml
from click.testing import CliRunner

from difflens_cli.auth import AwsCredentials
from difflens_cli.cli import main
from difflens_core.config import DEFAULT_MODEL_ID, ProviderKind
from difflens_core.git.repository import Commit
from difflens_core.models import ERROR_LABEL, WARNING_LABEL, ReviewResult
from difflens_core.service import DiffLens
from difflens_core.utils.diff import DiffStatistics

RAW_DIFF = "diff --git a/app.py b/app.py\n@@ -1 +1 @@\n-x = 1\n+x = 2\n"


@pytest.fixture(autouse=True)
def _clean_aws_env(monkeypatch):
    for name in ("AWS_REGION", "AWS_DEFAULT_REGION", "AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY"):
        monkeypatch.delenv(name, raising=False)


def _patch_common(mocker, credentials=None):
    """Patch credential lookup and _build_lens for most tests."""
    creds = credentials or AwsCredentials(access_key="AKIA", secret_key="secret")
    mocker.patch("difflens_cli.settings.resolve_aws_credentials", return_value=creds)
    lens = MagicMock(spec=DiffLens)
    lens.is_repository.return_value = True
    lens.repository_root.return_value = "/work/repo"
    lens.current_branch.return_value = "main"
    lens.recent_commits.return_value = []
    lens.validate_configuration.return_value = []
    lens.available_providers.return_value = [ProviderKind.CLOUD]
    lens.test_connection.return_value = True
    lens.preview.return_value = (RAW_DIFF, "# Git Diff Preview\n\nbody")
    lens.diff_statistics.return_value = DiffStatistics(1, 1, 1)
    lens.review_repository.return_value = ReviewResult("anthropic.claude-x", "Rename x to something clearer.")
    mocker.patch("difflens_cli.cli._build_lens", return_value=lens)
    return lens


def _invoke(tmp_path, *args, **kwargs):
    config_path = str(tmp_path / ".difflens.yml")
    return CliRunner().invoke(main, ["--config", config_path, *args], **kwargs)


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------


class TestStatusCommand:
    def test_shows_branch_and_commits(self, mocker, tmp_path):
        lens = _patch_common(mocker)
        lens.recent_commits.return_value = [
            Commit(
                "0123456789abcdef0123456789abcdef01234567",
                "Fix parser",
                datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc),
                "Ada",
                "ada@example.com",
            )
        ]

        result = _invoke(tmp_path, "status", "--path", str(tmp_path))

        assert result.exit_code == 0
        assert "/work/repo" in result.output
        assert "main" in result.output
        assert "01234567" in result.output
        assert "Fix parser" in result.output
        lens.recent_commits.assert_called_once_with("/work/repo", 20)

    def test_no_commits_message(self, mocker, tmp_path):
        _patch_common(mocker)
        result = _invoke(tmp_path, "status", "--path", str(tmp_path))
        assert result.exit_code == 0
        assert "No commits found" in result.output

    def test_not_a_repository(self, mocker, tmp_path):
        lens = _patch_common(mocker)
        lens.is_repository.return_value = False
        result = _invoke(tmp_path, "status", "--path", str(tmp_path))
        assert result.exit_code == 1
        assert "not in a Git repository" in result.output


# ---------------------------------------------------------------------------
# preview
# ---------------------------------------------------------------------------


class TestPreviewCommand:
    def test_prints_preview_and_statistics(self, mocker, tmp_path):
        _patch_common(mocker)
        result = _invoke(tmp_path, "preview", "--path", str(tmp_path))
        assert result.exit_code == 0
        assert "Git Diff Preview" in result.output
        assert "1 files changed" in result.output

    def test_cli_options_override_config(self, mocker, tmp_path):
        lens = _patch_common(mocker)
        (tmp_path / ".difflens.yml").write_text("context_lines: 10\nfile_extensions: '*.md'\n")

        _invoke(tmp_path, "preview", "--path", str(tmp_path), "-U", "7", "--include-deleted", "--from", "abc123")

        path, config, from_ref = lens.preview.call_args.args
        assert config.context_lines == 7
        assert config.exclude_deleted_files is False
        assert config.path_filters == "*.md"
        assert from_ref == "abc123"

    def test_invalid_filter_rejected(self, mocker, tmp_path):
        lens = _patch_common(mocker)
        result = _invoke(tmp_path, "preview", "--path", str(tmp_path), "--filter", "bad!ext")
        assert result.exit_code == 2
        assert "invalid path filter" in result.output
        lens.preview.assert_not_called()

    def test_writes_output_file(self, mocker, tmp_path):
        _patch_common(mocker)
        out = tmp_path / "preview.md"
        result = _invoke(tmp_path, "preview", "--path", str(tmp_path), "--output", str(out))
        assert result.exit_code == 0
        assert out.read_text() == "# Git Diff Preview\n\nbody"

    def test_markdown_flag_uses_formatter(self, mocker, tmp_path):
        lens = _patch_common(mocker)
        lens.format_diff_markdown.return_value = "## app.py"
        _invoke(tmp_path, "preview", "--path", str(tmp_path), "--markdown")
        lens.format_diff_markdown.assert_called_once_with(RAW_DIFF)

    def test_not_a_repository(self, mocker, tmp_path):
        lens = _patch_common(mocker)
        lens.is_repository.return_value = False
        result = _invoke(tmp_path, "preview", "--path", str(tmp_path))
        assert result.exit_code == 2
        assert "not in a Git repository" in result.output


# ---------------------------------------------------------------------------
# review
# ---------------------------------------------------------------------------


class TestReviewCommand:
    def test_prints_review(self, mocker, tmp_path):
        _patch_common(mocker)
        result = _invoke(tmp_path, "review", "--path", str(tmp_path))
        assert result.exit_code == 0
        assert "Code Review Results" in result.output
        assert "Rename x to something clearer." in result.output

    def test_provider_and_model_overrides(self, mocker, tmp_path):
        lens = _patch_common(mocker)
        _invoke(tmp_path, "review", "--path", str(tmp_path), "--provider", "copilot", "--model", "m-1")
        config = lens.review_repository.call_args.args[1]
        assert config.provider == ProviderKind.HOST_ASSISTANT
        assert config.model_id == "m-1"

    def test_credentials_from_resolver(self, mocker, tmp_path):
        lens = _patch_common(mocker, AwsCredentials(access_key="AKIA", secret_key="s3cret", region="eu-west-1"))
        _invoke(tmp_path, "review", "--path", str(tmp_path))
        config = lens.review_repository.call_args.args[1]
        assert config.aws_access_key == "AKIA"
        assert config.aws_secret_key == "s3cret"
        assert config.aws_region == "eu-west-1"

    def test_configuration_errors_listed(self, mocker, tmp_path):
        lens = _patch_common(mocker)
        lens.validate_configuration.return_value = [
            "AWS Access Key is required for Bedrock",
            "AWS Secret Key is required for Bedrock",
        ]
        result = _invoke(tmp_path, "review", "--path", str(tmp_path))
        assert result.exit_code == 2
        assert "AWS Access Key is required for Bedrock" in result.output
        assert "AWS Secret Key is required for Bedrock" in result.output
        lens.review_repository.assert_not_called()

    def test_no_changes(self, mocker, tmp_path):
        lens = _patch_common(mocker)
        lens.review_repository.return_value = None
        result = _invoke(tmp_path, "review", "--path", str(tmp_path))
        assert result.exit_code == 0
        assert "No changes found to review." in result.output

    def test_error_result_exits_non_zero(self, mocker, tmp_path):
        lens = _patch_common(mocker)
        lens.review_repository.return_value = ReviewResult(ERROR_LABEL, "Code review failed: timeout")
        result = _invoke(tmp_path, "review", "--path", str(tmp_path))
        assert result.exit_code == 1
        assert "Code review failed: timeout" in result.output

    def test_fallback_warning_shown(self, mocker, tmp_path):
        lens = _patch_common(mocker)
        lens.review_repository.return_value = ReviewResult(WARNING_LABEL, "Basic analysis")
        result = _invoke(tmp_path, "review", "--path", str(tmp_path))
        assert result.exit_code == 0
        assert "offline analysis" in result.output
        assert "Basic analysis" in result.output

    def test_writes_review_document(self, mocker, tmp_path):
        _patch_common(mocker)
        out = tmp_path / "review.md"
        _invoke(tmp_path, "review", "--path", str(tmp_path), "-o", str(out))
        text = out.read_text()
        assert text.startswith("# Code Review Results")
        assert "**Model Used:** anthropic.claude-x" in text


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


class TestCheckCommand:
    def test_valid_configuration_and_connection(self, mocker, tmp_path):
        lens = _patch_common(mocker)
        result = _invoke(tmp_path, "check")
        assert result.exit_code == 0
        assert "AWS Bedrock" in result.output
        assert "Configuration is valid." in result.output
        assert "Connection test succeeded." in result.output
        lens.test_connection.assert_called_once()

    def test_offline_skips_probe(self, mocker, tmp_path):
        lens = _patch_common(mocker)
        result = _invoke(tmp_path, "check", "--offline")
        assert result.exit_code == 0
        lens.test_connection.assert_not_called()

    def test_connection_failure(self, mocker, tmp_path):
        lens = _patch_common(mocker)
        lens.test_connection.return_value = False
        result = _invoke(tmp_path, "check")
        assert result.exit_code == 1
        assert "Connection test failed." in result.output

    def test_validation_errors(self, mocker, tmp_path):
        lens = _patch_common(mocker)
        lens.validate_configuration.return_value = ["System Prompt is required"]
        result = _invoke(tmp_path, "check")
        assert result.exit_code == 1
        assert "System Prompt is required" in result.output
        lens.test_connection.assert_not_called()

    def test_assistant_shows_command(self, mocker, tmp_path):
        _patch_common(mocker)
        result = _invoke(tmp_path, "check", "--provider", "assistant", "--offline")
        assert result.exit_code == 0
        assert "copilot" in result.output


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


class TestInitCommand:
    def test_writes_cloud_config(self, mocker, tmp_path):
        _patch_common(mocker)

        result = _invoke(
            tmp_path,
            "init",
            # provider, region, model, context lines, exclude deleted, bad filter, good filter
            input="cloud\n\n\n10\ny\nbad!ext\n*.py\n",
        )

        assert result.exit_code == 0
        assert "Invalid filter syntax" in result.output
        config = yaml.safe_load((tmp_path / ".difflens.yml").read_text())
        assert config["provider"] == "cloud"
        assert config["aws_region"] == "us-east-1"
        assert config["model"] == DEFAULT_MODEL_ID
        assert config["context_lines"] == 10
        assert config["exclude_deleted_files"] is True
        assert config["path_filters"] == "*.py"

    def test_preserves_existing_keys(self, mocker, tmp_path):
        _patch_common(mocker)
        (tmp_path / ".difflens.yml").write_text("system_prompt: Be brief.\n")

        result = _invoke(tmp_path, "init", input="assistant\n\n\n\n\n")

        assert result.exit_code == 0
        config = yaml.safe_load((tmp_path / ".difflens.yml").read_text())
        assert config["system_prompt"] == "Be brief."
        assert config["provider"] == "assistant"
        assert config["assistant_command"] == "copilot"
        assert "path_filters" not in config


# ---------------------------------------------------------------------------
# settings.py
# ---------------------------------------------------------------------------


class TestLoadSettings:
    def test_profile_region_fills_default(self, mocker, tmp_path):
        from difflens_cli.settings import load_settings

        mocker.patch(
            "difflens_cli.settings.resolve_aws_credentials",
            return_value=AwsCredentials("AKIA", "secret", "ap-south-1"),
        )
        config = load_settings(str(tmp_path / "missing.yml"))
        assert config.aws_region == "ap-south-1"

    def test_file_region_wins_over_profile(self, mocker, tmp_path):
        from difflens_cli.settings import load_settings

        cfg = tmp_path / ".difflens.yml"
        cfg.write_text("aws_region: eu-central-1\n")
        mocker.patch(
            "difflens_cli.settings.resolve_aws_credentials",
            return_value=AwsCredentials("AKIA", "secret", "ap-south-1"),
        )
        assert load_settings(str(cfg)).aws_region == "eu-central-1"

    def test_explicit_override_beats_resolved_keys(self, mocker, tmp_path):
        from difflens_cli.settings import load_settings

        mocker.patch(
            "difflens_cli.settings.resolve_aws_credentials",
            return_value=AwsCredentials("AKIA", "secret", None),
        )
        config = load_settings(str(tmp_path / "missing.yml"), {"aws_access_key": "OTHER"})
        assert config.aws_access_key == "OTHER"
        assert config.aws_secret_key == "secret"


# ---------------------------------------------------------------------------
# auth.py
# ---------------------------------------------------------------------------


class TestResolveAwsCredentials:
    def test_returns_env_vars_when_set(self, monkeypatch):
        from difflens_cli.auth import resolve_aws_credentials

        monkeypatch.setenv("AWS_ACCESS_KEY_ID", "env-key")
        monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "env-secret")
        monkeypatch.setenv("AWS_REGION", "us-west-2")
        with patch("subprocess.run") as mock_run:
            creds = resolve_aws_credentials()
        assert creds == AwsCredentials("env-key", "env-secret", "us-west-2")
        mock_run.assert_not_called()

    def test_falls_back_to_aws_cli(self):
        from difflens_cli.auth import resolve_aws_credentials

        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="from-cli\n")
            creds = resolve_aws_credentials()
        assert creds.access_key == "from-cli"
        assert creds.region == "from-cli"
        keys = [c.args[0][-1] for c in mock_run.call_args_list]
        assert keys == ["aws_access_key_id", "aws_secret_access_key", "region"]

    def test_returns_none_when_aws_not_installed(self):
        from difflens_cli.auth import resolve_aws_credentials

        with patch("subprocess.run", side_effect=FileNotFoundError):
            assert resolve_aws_credentials() == AwsCredentials()

    def test_returns_none_when_aws_times_out(self):
        from difflens_cli.auth import resolve_aws_credentials

        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired(cmd="aws", timeout=5)):
            assert resolve_aws_credentials().secret_key is None

    def test_returns_none_when_aws_returns_error(self):
        from difflens_cli.auth import resolve_aws_credentials

        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=1, stdout="")
            assert resolve_aws_credentials().access_key is None

    def test_returns_none_when_aws_returns_empty(self):
        from difflens_cli.auth import resolve_aws_credentials

        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="   ")
            assert resolve_aws_credentials().region is None
