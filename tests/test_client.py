"""Tests for dispatching selections to the extractor service."""

import asyncio
import json

import httpx
import pytest

from pricelocator.client import ExtractorClient
from pricelocator.models import ExtractionRequest

URL = "https://extractor.test/"

ANSWER = (
    '```json\n{"price_found": true, "selectors": ['
    '{"selector": ".now", "type": "css", "confidence": "high", "Price": "39"},'
    '{"selector": ".was", "type": "css", "confidence": "medium", "Price": "49"}]}\n```'
)


def _client(handler) -> ExtractorClient:
    return ExtractorClient(URL, transport=httpx.MockTransport(handler))


class TestDispatch:
    """Tests for ExtractorClient.dispatch."""

    @pytest.mark.asyncio
    async def test_posts_json_body(self) -> None:
        """Test the outbound request shape."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["content_type"] = request.headers["content-type"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"gemini_response": ANSWER})

        outcome = await _client(handler).dispatch(ExtractionRequest(html="<div>39 €</div>"))

        assert seen == {
            "method": "POST",
            "url": URL,
            "content_type": "application/json",
            "body": {"html": "<div>39 €</div>"},
        }
        assert outcome.status_code == 200
        assert outcome.payload == {"gemini_response": ANSWER}
        assert outcome.result.lowest_price == 39
        assert outcome.seq == 1
        assert outcome.latest is True

    @pytest.mark.asyncio
    async def test_nonconforming_answer_kept_raw(self) -> None:
        """Test that a prose answer is surfaced without a parsed result."""
        def handler(request):
            return httpx.Response(200, json={"gemini_response": "No price here."})

        outcome = await _client(handler).dispatch(ExtractionRequest(html="<div/>"))

        assert outcome.payload == {"gemini_response": "No price here."}
        assert outcome.result is None

    @pytest.mark.asyncio
    async def test_non_string_answer_kept_raw(self) -> None:
        """Test that a non-text gemini_response does not escape dispatch."""
        def handler(request):
            return httpx.Response(200, json={"gemini_response": 123})

        outcome = await _client(handler).dispatch(ExtractionRequest(html="<div/>"))

        assert outcome.payload == {"gemini_response": 123}
        assert outcome.result is None

    @pytest.mark.asyncio
    async def test_error_envelope_surfaced(self) -> None:
        """Test that service errors come back as outcomes, not exceptions."""
        def handler(request):
            return httpx.Response(500, json={"error": "quota exceeded"})

        outcome = await _client(handler).dispatch(ExtractionRequest(html="<div/>"))

        assert outcome.status_code == 500
        assert outcome.payload == {"error": "quota exceeded"}
        assert outcome.result is None

    @pytest.mark.asyncio
    async def test_network_failure_returns_none(self) -> None:
        """Test that transport errors are logged and swallowed at the boundary."""
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("connection refused")

        outcome = await _client(handler).dispatch(ExtractionRequest(html="<div/>"))

        assert outcome is None
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_undecodable_response_returns_none(self) -> None:
        """Test that a non-JSON response is treated as a failure."""
        def handler(request):
            return httpx.Response(502, text="<html>Bad Gateway</html>")

        assert await _client(handler).dispatch(ExtractionRequest(html="<div/>")) is None


class TestSubmit:
    """Tests for fire-and-forget submission."""

    @pytest.mark.asyncio
    async def test_submit_does_not_wait(self) -> None:
        """Test that submit returns before the response arrives."""
        release = asyncio.Event()

        async def handler(request):
            await release.wait()
            return httpx.Response(200, json={"gemini_response": "x"})

        client = _client(handler)
        task = client.submit(ExtractionRequest(html="<div/>"))

        await asyncio.sleep(0)
        assert not task.done()

        release.set()
        await client.drain()
        assert task.done()
        assert task.result().payload == {"gemini_response": "x"}

    @pytest.mark.asyncio
    async def test_out_of_order_responses_marked(self) -> None:
        """Test that an older response finishing last is not marked latest."""
        gates = {"<div>1</div>": asyncio.Event(), "<div>2</div>": asyncio.Event()}

        async def handler(request):
            html = json.loads(request.content)["html"]
            await gates[html].wait()
            return httpx.Response(200, json={"gemini_response": html})

        client = _client(handler)
        first = client.submit(ExtractionRequest(html="<div>1</div>"))
        second = client.submit(ExtractionRequest(html="<div>2</div>"))
        await asyncio.sleep(0)

        gates["<div>2</div>"].set()
        await second
        gates["<div>1</div>"].set()
        await client.drain()

        assert second.result().seq == 2
        assert second.result().latest is True
        assert first.result().seq == 1
        assert first.result().latest is False
