"""
Commit message generation through an OpenAI-compatible chat endpoint.

The provider sends the staged diff and asks for a one-line commit message.
It is optional: without a complete `ai` config section the sync engine uses
the default message.

Example:
    >>> provider = provider_from_config(config.ai)
    >>> if provider is not None:
    ...     message = asyncio.run(provider.generate(diff))
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from gfv.core.config import AiConfig
from gfv.core.errors import VaultError

logger = logging.getLogger(__name__)

MAX_DIFF_CHARS = 4000
TEMPERATURE = 0.7
MAX_TOKENS = 100
DEFAULT_TIMEOUT = 30.0

SYSTEM_PROMPT = (
    "You are a helpful assistant that generates concise git commit messages. "
    "Generate a commit message for the following changes. The message should be:\n"
    "- Concise (1-2 lines max)\n"
    "- Start with a verb in present tense (e.g., 'Update', 'Add', 'Remove', 'Fix')\n"
    "- Describe WHAT changed, not HOW\n"
    "- No prefixes like 'feat:', 'fix:', etc.\n"
    "- No markdown formatting\n\n"
    "Respond with ONLY the commit message, nothing else."
)


class CommitMessageError(VaultError):
    """Raised when the endpoint does not produce a usable commit message."""


class CommitMessageProvider:
    """
    Client for an OpenAI-style `/chat/completions` endpoint.

    Attributes:
        endpoint: Full URL requests are POSTed to
        api_key: Sent as a Bearer token
        model: Model name included in each request
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        model: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._transport = transport

    def build_payload(self, diff: str) -> dict[str, Any]:
        truncated = diff[:MAX_DIFF_CHARS]
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f"Changes:\n\n{truncated}"},
            ],
            "temperature": TEMPERATURE,
            "max_tokens": MAX_TOKENS,
        }

    async def generate(self, diff: str) -> str:
        """
        Ask the endpoint for a commit message describing diff.

        Returns:
            The first line of the response, stripped

        Raises:
            CommitMessageError: On an invalid endpoint URL, transport errors,
                non-2xx responses, malformed payloads or empty content
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.endpoint, json=self.build_payload(diff), headers=headers
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise CommitMessageError(
                f"Request to {self.endpoint} failed: {e}", endpoint=self.endpoint
            ) from e

        if not response.is_success:
            raise CommitMessageError(
                f"AI endpoint returned HTTP {response.status_code}",
                endpoint=self.endpoint,
                status_code=response.status_code,
            )

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise CommitMessageError(
                "Unexpected response format from AI endpoint", endpoint=self.endpoint
            ) from e

        if not isinstance(content, str) or not content.strip():
            raise CommitMessageError("AI endpoint returned an empty message", endpoint=self.endpoint)

        message = content.strip().splitlines()[0].strip()
        logger.debug("Generated commit message: %s", message)
        return message


def provider_from_config(ai: AiConfig) -> CommitMessageProvider | None:
    """Build a provider when endpoint, api_key and model are all set."""
    if not (ai.endpoint and ai.api_key and ai.model):
        return None
    return CommitMessageProvider(ai.endpoint, ai.api_key, ai.model)
