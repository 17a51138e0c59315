import asyncio
import json

import httpx
import pytest

from telecare.config.llm_config import get_advice_config
from telecare.tools.gemini_client import (
    GeminiClient,
    GeminiHTTPError,
    GeminiNotConfiguredError,
    GeminiResponseError,
    extract_text,
)
from telecare.utils.llm_helpers import generate_with_timeout

from conftest import gemini_reply, make_client


async def test_request_shape():
    client, handler = make_client(lambda request: gemini_reply("hello"))

    assert await client.generate("prompt text", get_advice_config()) == "hello"

    request = handler.requests[0]
    assert request.method == "POST"
    assert str(request.url).startswith(
        "https://gemini.test/v1beta/models/gemini-test:generateContent"
    )
    body = json.loads(request.content)
    assert body["contents"] == [{"parts": [{"text": "prompt text"}]}]
    assert set(body["generationConfig"]) == {"temperature", "topP", "topK", "maxOutputTokens"}


async def test_not_configured():
    with pytest.raises(GeminiNotConfiguredError):
        await GeminiClient(api_key=None).generate("prompt", get_advice_config())


async def test_http_error_carries_status():
    client, _ = make_client(lambda request: httpx.Response(401, text="bad key"))
    with pytest.raises(GeminiHTTPError) as exc_info:
        await client.generate("prompt", get_advice_config())
    assert exc_info.value.status_code == 401


async def test_non_json_body():
    client, _ = make_client(lambda request: httpx.Response(200, text="oops"))
    with pytest.raises(GeminiResponseError):
        await client.generate("prompt", get_advice_config())


@pytest.mark.parametrize(
    "result",
    [{}, {"candidates": []}, {"candidates": [{"content": {"parts": []}}]}, {"candidates": [None]}],
)
def test_extract_text_tolerates_missing_parts(result):
    assert extract_text(result) is None


async def test_generate_with_timeout_raises():
    class SlowClient:
        model = "slow"
        timeout = 0.01

        async def generate(self, prompt, config):
            await asyncio.sleep(1)

    with pytest.raises(asyncio.TimeoutError):
        await generate_with_timeout(SlowClient(), "prompt", get_advice_config(), timeout=0.01)
