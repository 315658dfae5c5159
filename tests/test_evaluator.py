from __future__ import annotations

import httpx
import pytest

from mathbot.config import EvaluatorSettings
from mathbot.domain.models import Evaluation
from mathbot.services.evaluator import FALLBACK_ERROR_MESSAGE, MathJsEvaluator


def _evaluator(handler, **settings) -> tuple[MathJsEvaluator, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return MathJsEvaluator(client, settings=EvaluatorSettings(**settings)), client


def test_build_url_percent_encodes_expression():
    evaluator = MathJsEvaluator(httpx.AsyncClient())

    assert evaluator.build_url("2+2*4") == "https://api.mathjs.org/v4/?expr=2%2B2%2A4"
    assert evaluator.build_url("10 inch to cm") == "https://api.mathjs.org/v4/?expr=10%20inch%20to%20cm"


def test_build_url_appends_to_existing_query():
    settings = EvaluatorSettings(base_url="https://calc.example.com/eval?precision=14")
    evaluator = MathJsEvaluator(httpx.AsyncClient(), settings=settings)

    assert evaluator.build_url("1/3") == "https://calc.example.com/eval?precision=14&expr=1%2F3"


@pytest.mark.asyncio
async def test_success_returns_body_verbatim():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, text="[[-2, 1], [1.5, -0.5]]")

    evaluator, client = _evaluator(handler)
    async with client:
        result = await evaluator.evaluate("inv([[1, 2], [3, 4]])")

    assert result == Evaluation.success("[[-2, 1], [1.5, -0.5]]")
    assert len(requests) == 1
    assert requests[0].method == "GET"
    assert requests[0].url.params["expr"] == "inv([[1, 2], [3, 4]])"


@pytest.mark.asyncio
async def test_error_status_uses_server_text():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, text="Error: value out of range")

    evaluator, client = _evaluator(handler)
    async with client:
        result = await evaluator.evaluate("sqrt(-1)")

    assert result.ok is False
    assert result.error == "Error: value out of range"


@pytest.mark.asyncio
async def test_error_without_body_uses_fallback():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    evaluator, client = _evaluator(handler)
    async with client:
        result = await evaluator.evaluate("1+1")

    assert result.error == FALLBACK_ERROR_MESSAGE


@pytest.mark.asyncio
async def test_error_with_binary_body_uses_fallback():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, content=b"\x89PNG", headers={"Content-Type": "image/png"})

    evaluator, client = _evaluator(handler)
    async with client:
        result = await evaluator.evaluate("1+1")

    assert result.error == FALLBACK_ERROR_MESSAGE


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc_factory",
    [
        lambda request: httpx.ConnectError("refused", request=request),
        lambda request: httpx.ReadTimeout("too slow", request=request),
    ],
)
async def test_transport_failures_use_fallback(exc_factory):
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc_factory(request)

    evaluator, client = _evaluator(handler)
    async with client:
        result = await evaluator.evaluate("1+1")

    assert result == Evaluation.failure(FALLBACK_ERROR_MESSAGE)


@pytest.mark.asyncio
async def test_identical_queries_are_not_cached():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url)
        return httpx.Response(200, text="2")

    evaluator, client = _evaluator(handler)
    async with client:
        await evaluator.evaluate("1+1")
        await evaluator.evaluate("1+1")

    assert len(calls) == 2


class RecordingClient:
    def __init__(self) -> None:
        self.calls: list[dict] = []

    async def get(self, url, timeout=None):
        self.calls.append({"url": url, "timeout": timeout})
        return httpx.Response(200, text="4")


@pytest.mark.asyncio
async def test_configured_timeout_is_applied():
    client = RecordingClient()
    evaluator = MathJsEvaluator(client, settings=EvaluatorSettings(request_timeout_seconds=20))

    await evaluator.evaluate("2*2")

    assert client.calls == [{"url": "https://api.mathjs.org/v4/?expr=2%2A2", "timeout": 20}]


def test_evaluation_requires_exactly_one_of_answer_or_error():
    with pytest.raises(ValueError):
        Evaluation(status="SUCCESS", answer="1", error="boom")
    with pytest.raises(ValueError):
        Evaluation(status="ERROR")
    assert Evaluation.success("").answer == ""
