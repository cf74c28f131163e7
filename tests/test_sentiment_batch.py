"""Sequential Gemini scoring with retries, throttling and neutral defaults."""
from __future__ import annotations

import httpx
import pytest

from core.errors import ConfigurationError, InputValidationError
from services.sentiment.batch import SYSTEM_PROMPT, validate_texts
from services.sentiment.types import ScoreStatus, parse_score
from tests.fakes.upstream import GeminiStub, make_batch_client


@pytest.mark.asyncio
async def test_scores_keep_input_order(sleeper) -> None:
    stub = GeminiStub({"great day": "1", "awful crash": "-1", "weather report": "0"})
    client = make_batch_client(stub, sleeper)

    scores = await client.score_batch(["great day", "awful crash", "weather report"])

    assert scores == [1, -1, 0]
    assert stub.calls == 3


@pytest.mark.asyncio
async def test_throttle_only_between_items(sleeper) -> None:
    stub = GeminiStub(default="1")
    client = make_batch_client(stub, sleeper)

    assert await client.score_batch(["a", "b", "c"]) == [1, 1, 1]
    assert sleeper.delays == [0.6, 0.6]


@pytest.mark.asyncio
async def test_request_carries_system_prompt_and_key(sleeper) -> None:
    stub = GeminiStub(default="0")
    client = make_batch_client(stub, sleeper)

    await client.score_batch(["hello"])

    request = stub.requests[0]
    assert request.url.params["key"] == "test-gemini-key"
    assert request.url.path.endswith(":generateContent")
    assert SYSTEM_PROMPT.encode() in request.content


@pytest.mark.asyncio
async def test_unexpected_reply_is_neutral_but_marked(sleeper) -> None:
    stub = GeminiStub({"a": "positive", "b": "2", "c": "1."})
    client = make_batch_client(stub, sleeper)

    results = await client.score_detailed(["a", "b", "c"])

    assert [item.score for item in results] == [0, 0, 1]
    assert [item.status for item in results] == [
        ScoreStatus.MALFORMED,
        ScoreStatus.MALFORMED,
        ScoreStatus.OK,
    ]
    assert results[0].raw == "positive"


@pytest.mark.asyncio
async def test_empty_candidates_is_neutral(sleeper) -> None:
    stub = GeminiStub(default=httpx.Response(200, json={"candidates": []}))
    client = make_batch_client(stub, sleeper)

    results = await client.score_detailed(["x"])

    assert results[0].score == 0
    assert results[0].status is ScoreStatus.MALFORMED


@pytest.mark.asyncio
async def test_rate_limited_item_recovers_after_two_retries(sleeper) -> None:
    stub = GeminiStub({"slow": [httpx.Response(429), httpx.Response(429), "-1"]})
    client = make_batch_client(stub, sleeper)

    assert await client.score_batch(["slow"]) == [-1]
    assert stub.calls == 3
    assert sleeper.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_rate_limit_exhaustion_defaults_item_only(sleeper) -> None:
    stub = GeminiStub({"busy": httpx.Response(429), "fine": "1"})
    client = make_batch_client(stub, sleeper)

    results = await client.score_detailed(["busy", "fine"])

    assert [item.score for item in results] == [0, 1]
    assert results[0].status is ScoreStatus.FAILED
    assert stub.calls == 4
    assert sleeper.delays == [1.0, 2.0, 0.6]


@pytest.mark.asyncio
async def test_server_error_is_not_retried(sleeper) -> None:
    stub = GeminiStub(default=httpx.Response(500, json={"error": "boom"}))
    client = make_batch_client(stub, sleeper)

    results = await client.score_detailed(["x"])

    assert results[0].score == 0
    assert results[0].status is ScoreStatus.FAILED
    assert stub.calls == 1


@pytest.mark.asyncio
async def test_missing_key_fails_whole_request(sleeper) -> None:
    stub = GeminiStub()
    client = make_batch_client(stub, sleeper, api_key=None)

    with pytest.raises(ConfigurationError):
        await client.score_batch(["x"])
    assert stub.calls == 0


@pytest.mark.asyncio
async def test_score_one(sleeper) -> None:
    client = make_batch_client(GeminiStub(default=" -1 \n"), sleeper)
    assert await client.score_one("bad") == -1
    assert sleeper.delays == []


@pytest.mark.parametrize("texts", [None, [], "text", {"a": 1}])
def test_validate_rejects_non_lists(texts) -> None:
    with pytest.raises(InputValidationError) as info:
        validate_texts(texts)
    assert info.value.message == "Missing or invalid array of texts to analyze"


def test_validate_rejects_non_string_items() -> None:
    with pytest.raises(InputValidationError):
        validate_texts(["ok", 3])


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1", 1),
        ("-1", -1),
        ("0", 0),
        (" +1", 1),
        ("1 (positive)", 1),
        ("5", None),
        ("", None),
        (None, None),
        ("\u0661", None),
        ("-\u0661", None),
    ],
)
def test_parse_score(raw, expected) -> None:
    assert parse_score(raw) == expected
