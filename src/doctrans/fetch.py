"""Blob fetching: download a source file by URL."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from doctrans.errors import BlobFetchError

logger = logging.getLogger(__name__)


@dataclass
class FetchedBlob:
    """Raw bytes plus the content type the server reported."""

    data: bytes
    content_type: str | None = None


class BlobFetcher(Protocol):
    async def fetch(self, url: str) -> FetchedBlob: ...


class HttpBlobFetcher:
    """Fetch blobs over HTTP(S) with httpx."""

    def __init__(self, timeout: float = 300.0, client: httpx.AsyncClient | None = None):
        self._timeout = timeout
        self._client = client

    async def fetch(self, url: str) -> FetchedBlob:
        """
        Download ``url``.

        Raises:
            BlobFetchError: On transport errors or non-2xx responses.
        """
        try:
            if self._client is not None:
                response = await self._client.get(url, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(
                    timeout=self._timeout, follow_redirects=True
                ) as client:
                    response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise BlobFetchError(f"Failed to fetch {url}: {e}", details={"url": url}) from e

        content_type = response.headers.get("content-type")
        if content_type:
            content_type = content_type.split(";", 1)[0].strip().lower()
        logger.debug("Fetched %d bytes from %s (%s)", len(response.content), url, content_type)
        return FetchedBlob(data=response.content, content_type=content_type or None)
