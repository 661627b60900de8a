"""Tests for scholar.client - the build, fetch and extract pipeline."""

import asyncio
from unittest.mock import MagicMock

import httpx
import pytest

from scholar.args import ScholarArgs
from scholar.client import AsyncClient, Client, scrape_scholar
from scholar.errors import (
    InvalidResponseError,
    ParseError,
    RequiredFieldError,
    ScholarConnectionError,
    ScholarError,
    TransportError,
)

PAGE = (
    "<html><body>"
    '<div class="gs_r gs_or gs_scl"><div class="gs_ri">'
    '<h3 class="gs_rt"><a href="https://arxiv.org/abs/1810.04805">BERT</a></h3>'
    '<div class="gs_a">J Devlin, MW Chang&nbsp;- 2018 - arxiv.org</div>'
    '<div class="gs_rs">We introduce BERT.</div>'
    '<div class="gs_fl gs_flb"><a href="#">Cited by 42&nbsp;</a></div>'
    "</div></div>"
    '<div class="gs_r gs_or gs_scl"><div class="gs_ri">'
    '<h3 class="gs_rt"><a href="https://example.com/t5">T5</a></h3>'
    '<div class="gs_a">C Raffel&nbsp;- Journal of Machine Learning Research, 2020 - jmlr.org</div>'
    '<div class="gs_rs">Transfer learning.</div>'
    "</div></div>"
    "</body></html>"
)

CAPTCHA = '<html><body><form id="gs_captcha_f"></form></body></html>'


def _httpx_client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestClient:
    def test_scrape_scholar(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, text=PAGE)

        client = Client.from_httpx(_httpx_client(handler))
        results = client.scrape_scholar(ScholarArgs(query="language models", limit=2))

        assert seen == ["https://scholar.google.com/scholar?q=language%20models&num=2"]
        assert [r.title for r in results] == ["BERT", "T5"]
        assert results[0].citations == 42
        assert results[1].conference == "Journal of Machine Learning Research"
        assert results[1].citations is None

    def test_injected_fetch(self):
        fetch = MagicMock(return_value=PAGE)
        results = Client(fetch=fetch).scrape_scholar(ScholarArgs(query="abcd"))

        fetch.assert_called_once_with("https://scholar.google.com/scholar?q=abcd")
        assert len(results) == 2

    def test_empty_query_never_fetches(self):
        fetch = MagicMock(return_value=PAGE)
        with pytest.raises(RequiredFieldError):
            Client(fetch=fetch).scrape_scholar(ScholarArgs(query=""))
        fetch.assert_not_called()

    def test_connect_error_mapped(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = Client.from_httpx(_httpx_client(handler))
        with pytest.raises(ScholarConnectionError) as excinfo:
            client.scrape_scholar(ScholarArgs(query="abcd"))
        assert isinstance(excinfo.value.__cause__, httpx.ConnectError)

    def test_http_status_error_mapped(self):
        client = Client.from_httpx(_httpx_client(lambda request: httpx.Response(503)))
        with pytest.raises(TransportError) as excinfo:
            client.scrape_scholar(ScholarArgs(query="abcd"))
        assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)

    def test_connection_error_is_builtin_connection_error(self):
        def fetch(url):
            raise httpx.ReadTimeout("timed out")

        with pytest.raises(ConnectionError):
            Client(fetch=fetch).scrape_scholar(ScholarArgs(query="abcd"))

    @pytest.mark.parametrize(
        "exc",
        [TimeoutError("read timed out"), ConnectionResetError("reset by peer"), OSError("network down")],
    )
    def test_stdlib_fetch_errors_mapped(self, exc):
        def fetch(url):
            raise exc

        with pytest.raises(ScholarError) as excinfo:
            Client(fetch=fetch).scrape_scholar(ScholarArgs(query="abcd"))
        assert isinstance(excinfo.value, ScholarConnectionError)
        assert excinfo.value.__cause__ is exc

    def test_scholar_error_from_fetch_unchanged(self):
        error = InvalidResponseError("blocked")

        def fetch(url):
            raise error

        with pytest.raises(InvalidResponseError) as excinfo:
            Client(fetch=fetch).scrape_scholar(ScholarArgs(query="abcd"))
        assert excinfo.value is error

    def test_captcha_page(self):
        client = Client(fetch=lambda url: CAPTCHA)
        with pytest.raises(InvalidResponseError):
            client.scrape_scholar(ScholarArgs(query="abcd"))

    def test_unparseable_document(self):
        client = Client(fetch=lambda url: None)
        with pytest.raises(ParseError):
            client.scrape_scholar(ScholarArgs(query="abcd"))

    def test_borrowed_client_not_closed(self):
        http = _httpx_client(lambda request: httpx.Response(200, text=PAGE))
        with Client.from_httpx(http) as client:
            client.scrape_scholar(ScholarArgs(query="abcd"))
        assert not http.is_closed

    def test_owned_client_closed(self, monkeypatch):
        monkeypatch.delenv("SCHOLAR_TIMEOUT", raising=False)
        client = Client()
        with client:
            pass
        assert client._client.is_closed

    def test_module_level_scrape(self):
        results = scrape_scholar(ScholarArgs(query="abcd"), fetch=lambda url: PAGE)
        assert [r.domain for r in results] == ["arxiv.org", "jmlr.org"]


class TestAsyncClient:
    def test_scrape_scholar(self):
        async def handler(request):
            return httpx.Response(200, text=PAGE)

        async def run():
            http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
            async with AsyncClient.from_httpx(http) as client:
                results = await client.scrape_scholar(ScholarArgs(query="abcd"))
            await http.aclose()
            return results

        results = asyncio.run(run())
        assert [r.title for r in results] == ["BERT", "T5"]

    def test_injected_fetch(self):
        async def fetch(url):
            assert url == "https://scholar.google.com/scholar?q=abcd&start=10"
            return PAGE

        client = AsyncClient(fetch=fetch)
        results = asyncio.run(client.scrape_scholar(ScholarArgs(query="abcd", offset=10)))
        assert len(results) == 2

    def test_transport_error_mapped(self):
        async def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        async def run():
            http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
            try:
                await AsyncClient.from_httpx(http).scrape_scholar(ScholarArgs(query="abcd"))
            finally:
                await http.aclose()

        with pytest.raises(ScholarConnectionError):
            asyncio.run(run())

    def test_empty_query(self):
        async def fetch(url):
            raise AssertionError("should not fetch")

        with pytest.raises(RequiredFieldError):
            asyncio.run(AsyncClient(fetch=fetch).scrape_scholar(ScholarArgs(query="")))

    def test_stdlib_timeout_mapped(self):
        async def fetch(url):
            raise TimeoutError("read timed out")

        with pytest.raises(ScholarConnectionError) as excinfo:
            asyncio.run(AsyncClient(fetch=fetch).scrape_scholar(ScholarArgs(query="abcd")))
        assert isinstance(excinfo.value.__cause__, TimeoutError)

    def test_asyncio_timeout_mapped(self):
        async def fetch(url):
            return await asyncio.wait_for(asyncio.sleep(1), timeout=0.01)

        with pytest.raises(ScholarError):
            asyncio.run(AsyncClient(fetch=fetch).scrape_scholar(ScholarArgs(query="abcd")))
