"""Client for the upstream bounty board feed."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from bountyhook.exceptions import FetchError

logger = logging.getLogger(__name__)


def validate_records(body: Any) -> list[dict[str, Any]]:
    """Check that a feed body is a list of bounty records.

    Every record must be an object with an integer ``id`` and a string
    ``status``. One bad record rejects the whole body.

    Raises:
        FetchError: If the body is malformed.
    """
    if not isinstance(body, list):
        raise FetchError(f"Expected a JSON array of bounties, got {type(body).__name__}")

    for index, record in enumerate(body):
        if not isinstance(record, dict):
            raise FetchError(f"Bounty #{index} is not an object")
        bounty_id = record.get("id")
        if not isinstance(bounty_id, int) or isinstance(bounty_id, bool):
            raise FetchError(f"Bounty #{index} has no integer id")
        if not isinstance(record.get("status"), str):
            raise FetchError(f"Bounty {bounty_id} has no string status")
    return body


class BountyFeedClient:
    """Fetches the bounty list from ``GET <base>/bounties``.

    Example:
        ```python
        feed = BountyFeedClient("https://bounty.owockibot.xyz")
        records = await feed.fetch_bounties()
        ```
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the feed client.

        Args:
            base_url: Bounty board API base URL.
            timeout_seconds: HTTP request timeout.
            client: Shared HTTP client; a short-lived one is opened per fetch if None.
        """
        self._url = f"{base_url.rstrip('/')}/bounties"
        self._timeout = timeout_seconds
        self._client = client

    @property
    def url(self) -> str:
        return self._url

    async def fetch_bounties(self) -> list[dict[str, Any]]:
        """Fetch and validate the current bounty list.

        Returns:
            Bounty records in upstream order.

        Raises:
            FetchError: On transport failure, non-2xx status, or malformed body.
        """
        try:
            if self._client is not None:
                response = await self._client.get(self._url)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(self._url)
        except httpx.HTTPError as e:
            raise FetchError(f"Bounty feed unreachable: {e}") from e

        if not response.is_success:
            raise FetchError(
                f"Bounty feed returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise FetchError(f"Bounty feed returned invalid JSON: {e}") from e

        records = validate_records(body)
        logger.debug("Fetched %d bounties from %s", len(records), self._url)
        return records
