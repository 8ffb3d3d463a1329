"""Review configuration: defaults, YAML loading and validation.

The core only ever reads a ReviewConfiguration. It is frozen so a review can
take it as a single snapshot; the settings layer builds a new one (via
load_config or dataclasses.replace) whenever the user changes something.
"""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

from difflens_core.utils.filters import split_path_filters

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a senior software engineer conducting a code review. "
    "Please analyze the provided git diff and provide constructive feedback focusing on "
    "code quality, security, performance, and best practices."
)
DEFAULT_REVIEW_PERSPECTIVE = (
    "Focus on code quality, security vulnerabilities, performance issues, and adherence "
    "to best practices. Provide specific suggestions for improvement."
)
DEFAULT_MODEL_ID = "anthropic.claude-3-5-sonnet-20241022-v2:0"
DEFAULT_REGION = "us-east-1"


class ProviderKind(str, enum.Enum):
    CLOUD = "cloud"
    HOST_ASSISTANT = "assistant"

    @classmethod
    def parse(cls, value: str | ProviderKind) -> ProviderKind:
        if isinstance(value, ProviderKind):
            return value
        key = str(value).strip().lower()
        if key in _PROVIDER_ALIASES:
            return _PROVIDER_ALIASES[key]
        raise ValueError(f"Unknown provider: {value!r}. Choose 'cloud' (Bedrock) or 'assistant' (Copilot).")


_PROVIDER_ALIASES = {
    "cloud": ProviderKind.CLOUD,
    "bedrock": ProviderKind.CLOUD,
    "aws bedrock": ProviderKind.CLOUD,
    "assistant": ProviderKind.HOST_ASSISTANT,
    "copilot": ProviderKind.HOST_ASSISTANT,
}


@dataclass(frozen=True)
class ReviewConfiguration:
    provider: ProviderKind = ProviderKind.CLOUD
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    review_perspective: str = DEFAULT_REVIEW_PERSPECTIVE
    context_lines: int = 50
    exclude_deleted_files: bool = True
    path_filters: str = ""
    model_id: str = DEFAULT_MODEL_ID
    aws_access_key: str = ""
    aws_secret_key: str = ""
    aws_region: str = DEFAULT_REGION
    interface_language: str = "en"
    assistant_command: str = "copilot"

    @property
    def path_filter_tokens(self) -> tuple[str, ...]:
        return tuple(split_path_filters(self.path_filters))

    def validate(self) -> list[str]:
        """Return every problem with this configuration; empty when usable."""
        errors = []
        if not self.system_prompt:
            errors.append("System Prompt is required")
        if not self.review_perspective:
            errors.append("Review Perspective is required")
        if self.provider == ProviderKind.CLOUD:
            if not self.aws_access_key:
                errors.append("AWS Access Key is required for Bedrock")
            if not self.aws_secret_key:
                errors.append("AWS Secret Key is required for Bedrock")
        if not isinstance(self.context_lines, int) or self.context_lines < 0:
            errors.append("Context lines must be a non-negative integer")
        return errors

    @classmethod
    def from_dict(cls, data: dict) -> ReviewConfiguration:
        """Build a configuration from a flat settings dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))
        values = {k: v for k, v in data.items() if k in known and v is not None}
        if "provider" in values:
            values["provider"] = ProviderKind.parse(values["provider"])
        if "context_lines" in values:
            values["context_lines"] = int(values["context_lines"])
        if "path_filters" in values and isinstance(values["path_filters"], (list, tuple)):
            values["path_filters"] = " ".join(values["path_filters"])
        return cls(**values)


# Keys accepted in .difflens.yml that are spelled differently from the
# dataclass fields.
_FILE_KEY_ALIASES = {
    "model": "model_id",
    "exclude_deletes": "exclude_deleted_files",
    "file_extensions": "path_filters",
    "language": "interface_language",
}


def _normalise_keys(data: dict) -> dict:
    return {_FILE_KEY_ALIASES.get(k, k): v for k, v in data.items()}


def load_config(config_path: str = ".difflens.yml", cli_overrides: Optional[dict] = None) -> ReviewConfiguration:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. AWS environment variables (region only when the file does not set it)
      3. .difflens.yml in the current directory
      4. CLI argument overrides
    """
    config: dict = {}

    region = os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION")
    if region:
        config["aws_region"] = region

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError(f"{config_path} must contain a mapping of settings.")
        config.update(_normalise_keys(file_config))

    if cli_overrides:
        for key, value in _normalise_keys(cli_overrides).items():
            if value is not None:
                config[key] = value

    # Credentials fall back to the standard AWS environment variables.
    config["aws_access_key"] = config.get("aws_access_key") or os.environ.get("AWS_ACCESS_KEY_ID", "")
    config["aws_secret_key"] = config.get("aws_secret_key") or os.environ.get("AWS_SECRET_ACCESS_KEY", "")

    return ReviewConfiguration.from_dict(config)
