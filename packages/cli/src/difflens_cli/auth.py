"""AWS credential resolution with aws CLI fallback.

Resolution order for each value (stops at first success):
  1. Environment variable (AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY / AWS_REGION)
  2. `aws configure get <key>` (the developer's active aws CLI profile)

`difflens init` never writes keys to .difflens.yml; keys set there explicitly
still take precedence over both sources.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AwsCredentials:
    access_key: str | None = None
    secret_key: str | None = None
    region: str | None = None


def _aws_configure_get(key: str) -> str | None:
    try:
        result = subprocess.run(
            ["aws", "configure", "get", key],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        # aws CLI is not installed or hung, fall through to None.
        return None
    if result.returncode != 0:
        return None
    value = result.stdout.strip()
    if value:
        logger.debug("Resolved %s via aws CLI profile.", key)
    return value or None


def resolve_aws_credentials() -> AwsCredentials:
    """Return whatever AWS credentials can be found; missing values are None.

    Never raises. Validation of what is missing belongs to the review
    configuration, which reports every problem at once.
    """
    access_key = os.environ.get("AWS_ACCESS_KEY_ID") or _aws_configure_get("aws_access_key_id")
    secret_key = os.environ.get("AWS_SECRET_ACCESS_KEY") or _aws_configure_get("aws_secret_access_key")
    region = os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION") or _aws_configure_get("region")
    return AwsCredentials(access_key=access_key, secret_key=secret_key, region=region)
