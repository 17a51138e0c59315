import json

import httpx
import pytest

from telecare.agents.advice_generator import (
    NO_RESPONSE_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    QUERY_REQUIRED_MESSAGE,
    TEMPORARILY_UNAVAILABLE_MESSAGE,
    AdviceGenerator,
    fit_to_budget,
    merge_advice,
)
from telecare.agents.prompts import NO_DATASET_GUIDANCE, OUT_OF_SCOPE_MESSAGE
from telecare.tools.gemini_client import GeminiClient
from telecare.tools.keyword_matcher import build_advice_matcher

from conftest import gemini_reply, make_client


@pytest.fixture
def fever_advice(dataset):
    return dataset.symptoms.find("Fever").advice


def generator_for(dataset, client, char_budget=1600):
    return AdviceGenerator(client, build_advice_matcher(dataset.symptoms), char_budget=char_budget)


async def test_out_of_scope_never_calls_service(dataset):
    client, handler = make_client()
    result = await generator_for(dataset, client).generate_advice("What is the capital of France?")

    assert result.success is True
    assert result.message == OUT_OF_SCOPE_MESSAGE
    assert handler.calls == 0


async def test_empty_query(dataset):
    client, handler = make_client()
    result = await generator_for(dataset, client).generate_advice("   ")

    assert result.success is False
    assert result.message == QUERY_REQUIRED_MESSAGE
    assert handler.calls == 0


async def test_live_reply_is_returned(dataset, fever_advice):
    client, handler = make_client(
        lambda request: gemini_reply("  Assessment: likely a viral fever.\n\nSelf-care: rest.  ")
    )
    result = await generator_for(dataset, client).generate_advice("I have a fever")

    assert result.success is True
    assert result.message == "Assessment: likely a viral fever.\n\nSelf-care: rest."

    request = handler.requests[0]
    assert request.url.params["key"] == "test-key"
    assert request.url.path.endswith("/models/gemini-test:generateContent")
    body = json.loads(request.content)
    prompt = body["contents"][0]["parts"][0]["text"]
    assert "I have a fever" in prompt
    assert fever_advice in prompt
    assert body["generationConfig"]["maxOutputTokens"] == 512


async def test_prompt_without_dataset_guidance(dataset):
    client, handler = make_client(lambda request: gemini_reply("Assessment: unclear."))
    await generator_for(dataset, client).generate_advice("strange tingling in my fingers")

    prompt = json.loads(handler.requests[0].content)["contents"][0]["parts"][0]["text"]
    assert NO_DATASET_GUIDANCE in prompt


async def test_not_configured_uses_dataset_advice(dataset, fever_advice):
    result = await generator_for(dataset, GeminiClient(api_key=None)).generate_advice(
        "I have a fever"
    )
    assert result.success is True
    assert result.message == fever_advice


async def test_not_configured_without_dataset_match(dataset):
    result = await generator_for(dataset, GeminiClient(api_key=None)).generate_advice("xyzzy")
    assert result.success is False
    assert result.message == NOT_CONFIGURED_MESSAGE


@pytest.mark.parametrize(
    "respond",
    [
        lambda request: httpx.Response(500, text="internal error"),
        lambda request: httpx.Response(429, json={"error": "quota"}),
        lambda request: httpx.Response(200, text="<html>not json</html>"),
        lambda request: httpx.Response(200, json=["unexpected", "shape"]),
    ],
    ids=["server-error", "rate-limited", "non-json", "non-object"],
)
async def test_service_failure_falls_back_to_dataset(dataset, fever_advice, respond):
    client, handler = make_client(respond)
    result = await generator_for(dataset, client).generate_advice("I have a fever")

    assert handler.calls == 1
    assert result.success is True
    assert result.message == fever_advice


async def test_timeout_without_dataset_match(dataset):
    def respond(request):
        raise httpx.ReadTimeout("timed out", request=request)

    client, _ = make_client(respond)
    result = await generator_for(dataset, client).generate_advice("xyzzy")

    assert result.success is False
    assert result.message == TEMPORARILY_UNAVAILABLE_MESSAGE


async def test_empty_candidates(dataset):
    client, _ = make_client(lambda request: gemini_reply(None))
    result = await generator_for(dataset, client).generate_advice("I have a fever")

    assert result.success is True
    assert result.message == NO_RESPONSE_MESSAGE


async def test_out_of_scope_reply_is_normalized(dataset):
    client, _ = make_client(
        lambda request: gemini_reply(f"Sorry. {OUT_OF_SCOPE_MESSAGE} Anything else?")
    )
    result = await generator_for(dataset, client).generate_advice("tell me about my cough")
    assert result.message == OUT_OF_SCOPE_MESSAGE


async def test_long_reply_is_trimmed(dataset):
    long_text = " ".join(["Rest and drink fluids."] * 200)
    client, _ = make_client(lambda request: gemini_reply(long_text))
    result = await generator_for(dataset, client, char_budget=300).generate_advice(
        "I have a fever"
    )

    assert result.success is True
    assert len(result.message) <= 300
    assert result.message.endswith(".")


def test_merge_advice_dedupes_and_caps():
    assert merge_advice(["a", "b", "a", "c", "d"]) == "a\n\nb\n\nc"
    assert merge_advice(["", ""]) is None


def test_fit_to_budget_keeps_short_text():
    assert fit_to_budget("Short advice.", 100) == "Short advice."
