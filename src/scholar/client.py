"""Fetch Scholar listing pages and turn them into results.

The pipeline is build URL -> fetch -> extract. The first failure is
raised unchanged and nothing is retried here: retry policy belongs to
whatever transport is passed in.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

import httpx

from scholar.args import ScholarArgs, build_url
from scholar.config import get_timeout
from scholar.errors import ScholarConnectionError, ScholarError
from scholar.models import ScholarResult
from scholar.parser import extract_results

logger = logging.getLogger(__name__)

Fetch = Callable[[str], str]
AsyncFetch = Callable[[str], Awaitable[str]]


def _connection_error(url: str, exc: Exception) -> ScholarConnectionError:
    return ScholarConnectionError(f"Failed to fetch {url}: {exc}")


class Client:
    """Synchronous Scholar client.

    Pass ``fetch`` to replace the HTTP transport with any callable that
    maps a URL to page text.  Otherwise an ``httpx.Client`` is used; one
    passed in by the caller is never closed by this object.
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        *,
        fetch: Optional[Fetch] = None,
        timeout: Optional[float] = None,
    ):
        self._owns_client = client is None and fetch is None
        if self._owns_client:
            client = httpx.Client(timeout=timeout if timeout is not None else get_timeout())
        self._client = client
        self._fetch = fetch

    @classmethod
    def from_httpx(cls, client: httpx.Client) -> "Client":
        return cls(client)

    def get_document(self, url: str) -> str:
        try:
            if self._fetch is not None:
                return self._fetch(url)
            resp = self._client.get(url)
            resp.raise_for_status()
            return resp.text
        except ScholarError:
            raise
        except (httpx.HTTPError, OSError) as e:
            raise _connection_error(url, e) from e

    def scrape_scholar(self, args: ScholarArgs) -> list[ScholarResult]:
        """Run one query and return its results in page order."""
        url = build_url(args)
        logger.info("Fetching %s", url)
        document = self.get_document(url)
        results = extract_results(document)
        logger.debug("Extracted %d results from %s", len(results), url)
        return results

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class AsyncClient:
    """Awaitable counterpart of :class:`Client` backed by ``httpx.AsyncClient``."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        fetch: Optional[AsyncFetch] = None,
        timeout: Optional[float] = None,
    ):
        self._owns_client = client is None and fetch is None
        if self._owns_client:
            client = httpx.AsyncClient(timeout=timeout if timeout is not None else get_timeout())
        self._client = client
        self._fetch = fetch

    @classmethod
    def from_httpx(cls, client: httpx.AsyncClient) -> "AsyncClient":
        return cls(client)

    async def get_document(self, url: str) -> str:
        try:
            if self._fetch is not None:
                return await self._fetch(url)
            resp = await self._client.get(url)
            resp.raise_for_status()
            return resp.text
        except ScholarError:
            raise
        except (httpx.HTTPError, OSError, asyncio.TimeoutError) as e:
            raise _connection_error(url, e) from e

    async def scrape_scholar(self, args: ScholarArgs) -> list[ScholarResult]:
        url = build_url(args)
        logger.info("Fetching %s", url)
        document = await self.get_document(url)
        results = extract_results(document)
        logger.debug("Extracted %d results from %s", len(results), url)
        return results

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "AsyncClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def scrape_scholar(args: ScholarArgs, *, fetch: Optional[Fetch] = None) -> list[ScholarResult]:
    """Run a single query with a short-lived client."""
    with Client(fetch=fetch) as client:
        return client.scrape_scholar(args)
