from __future__ import annotations

from difflens_core.providers.base import BaseReviewer

NO_CONTENT = "No review content received."


class BedrockReviewer(BaseReviewer):
    """Claude on AWS Bedrock.

    The SDK's Bedrock client posts the Messages envelope
    ``{"anthropic_version": "bedrock-2023-05-31", "max_tokens": ..., "messages": [...]}``
    to the model's ``invoke`` endpoint and signs it with the given keys.
    """

    ERROR_PREFIX = "Bedrock API error"

    def __init__(self, model_id: str, aws_access_key: str, aws_secret_key: str, aws_region: str):
        try:
            from anthropic import AnthropicBedrock
        except ImportError:
            raise ImportError(
                "The 'anthropic[bedrock]' package is required for this provider. "
                "Install it with: pip install 'difflens[bedrock]'"
            )
        self.model_id = model_id
        # Retries are handled by BaseReviewer so backoff and logging are uniform.
        self.client = AnthropicBedrock(
            aws_access_key=aws_access_key,
            aws_secret_key=aws_secret_key,
            aws_region=aws_region,
            max_retries=0,
        )

    @property
    def label(self) -> str:
        return self.model_id

    def _call_api(self, prompt: str, max_tokens: int) -> str:
        response = self.client.messages.create(
            model=self.model_id,
            max_tokens=max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        for block in response.content:
            if getattr(block, "type", None) == "text":
                return block.text
        return NO_CONTENT
