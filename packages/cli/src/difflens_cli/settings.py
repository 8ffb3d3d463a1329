"""Builds the ReviewConfiguration a command runs with.

Commands call load_settings() once at the start and pass the resulting
frozen configuration down; nothing re-reads settings mid-command.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from difflens_core.config import DEFAULT_REGION, ReviewConfiguration, load_config
from difflens_cli.auth import resolve_aws_credentials


def load_settings(config_path: str, overrides: Optional[dict] = None) -> ReviewConfiguration:
    credentials = resolve_aws_credentials()
    merged = dict(overrides or {})
    merged.setdefault("aws_access_key", credentials.access_key)
    merged.setdefault("aws_secret_key", credentials.secret_key)

    config = load_config(config_path, cli_overrides=merged)

    # The aws CLI profile region only fills in when nothing else chose one.
    if credentials.region and config.aws_region == DEFAULT_REGION and not merged.get("aws_region"):
        config = replace(config, aws_region=credentials.region)
    return config
