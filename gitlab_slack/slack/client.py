"""Slack incoming-webhook delivery client.

Retries on 429 (rate limit) and 5xx with exponential backoff capped at
30s. Any other failure, or running out of retries, raises
:class:`SlackDeliveryError`.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from gitlab_slack.models import OutputMessage

logger = logging.getLogger(__name__)

_MAX_RETRIES = 3
_BACKOFF_CAP_SECONDS = 30


class SlackDeliveryError(Exception):
    """Raised when Slack rejects a message or stays unavailable."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Slack delivery failed with status {status_code}: {body}")


class SlackClient:
    """Posts formatted messages to a Slack incoming webhook."""

    def __init__(
        self,
        webhook_url: str,
        max_retries: int = _MAX_RETRIES,
        timeout: float = 30.0,
    ) -> None:
        self._webhook_url = webhook_url
        self._max_retries = max_retries
        self._timeout = timeout

    async def send(self, message: OutputMessage) -> None:
        payload = message.to_payload()

        async with httpx.AsyncClient(verify=True) as client:
            for attempt in range(self._max_retries + 1):
                resp = await client.post(
                    self._webhook_url, json=payload, timeout=self._timeout,
                )

                if resp.status_code < 400:
                    logger.debug("Message delivered to %s", message.channel or "default channel")
                    return
                if not self._should_retry(resp.status_code) or attempt == self._max_retries:
                    raise SlackDeliveryError(resp.status_code, resp.text)

                delay = min(2 ** attempt, _BACKOFF_CAP_SECONDS)
                logger.warning(
                    "Slack returned %d, retrying in %ds (attempt %d/%d)",
                    resp.status_code, delay, attempt + 1, self._max_retries,
                )
                await asyncio.sleep(delay)

    @staticmethod
    def _should_retry(status_code: int) -> bool:
        return status_code == 429 or status_code >= 500
