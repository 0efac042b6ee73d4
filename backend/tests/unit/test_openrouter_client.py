"""Unit tests for the OpenRouterClient."""

import json

import httpx
import pytest

from app.infrastructure.openrouter.openrouter_client import OpenRouterClient
from app.domain.entities import ChatMessage, ChatRequest, ContentPart, ResponseFormat
from app.domain.exceptions import ChatProviderError


# ── Helpers ──


def _mock_openrouter_response(
    content: str = "Hello!",
    model: str = "anthropic/claude-opus-4.5",
    prompt_tokens: int = 10,
    completion_tokens: int = 5,
    total_tokens: int = 15,
    tool_calls: list[dict] | None = None,
) -> dict:
    """Build a mock OpenRouter JSON response."""
    message: dict = {"role": "assistant", "content": content}
    if tool_calls:
        message["tool_calls"] = tool_calls
    return {
        "id": "gen-test123",
        "choices": [
            {
                "index": 0,
                "message": message,
                "finish_reason": "tool_calls" if tool_calls else "stop",
            }
        ],
        "model": model,
        "usage": {
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "total_tokens": total_tokens,
        },
    }


def _make_mock_transport(
    response_data: dict | None = None,
    status_code: int = 200,
    text: str | None = None,
    captured: list[httpx.Request] | None = None,
) -> httpx.MockTransport:
    """Create a mock transport that returns a fixed response."""

    def handler(request: httpx.Request) -> httpx.Response:
        if captured is not None:
            captured.append(request)
        if text is not None:
            return httpx.Response(status_code, text=text)
        return httpx.Response(status_code, json=response_data or {})

    return httpx.MockTransport(handler)


def _make_chunked_transport(
    chunks: list[bytes],
    reads: list[int] | None = None,
    status_code: int = 200,
) -> httpx.MockTransport:
    """Create a mock transport whose body arrives as the given raw chunks."""

    async def body():
        for chunk in chunks:
            if reads is not None:
                reads.append(len(chunk))
            yield chunk

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status_code,
            content=body(),
            headers={"content-type": "text/event-stream"},
        )

    return httpx.MockTransport(handler)


def _client(transport: httpx.MockTransport) -> OpenRouterClient:
    return OpenRouterClient(
        api_key="test-key",
        http_client=httpx.AsyncClient(transport=transport),
    )


def _request(**overrides) -> ChatRequest:
    defaults = {
        "model": "anthropic/claude-opus-4.5",
        "messages": (ChatMessage(role="user", content="Hi"),),
    }
    defaults.update(overrides)
    return ChatRequest(**defaults)


def _delta(text: str) -> str:
    return "data: " + json.dumps({"choices": [{"delta": {"content": text}}]}) + "\n\n"


async def _collect(client: OpenRouterClient, request: ChatRequest) -> list[str]:
    return [fragment async for fragment in client.stream(request)]


# ── Buffered ──


@pytest.mark.asyncio
async def test_complete_parses_response():
    """Non-streaming call correctly parses OpenRouter JSON response."""
    response_data = _mock_openrouter_response(content="The answer is 42.")
    client = _client(_make_mock_transport(response_data))

    result = await client.complete(_request())

    assert result.id == "gen-test123"
    assert result.content == "The answer is 42."
    assert result.model == "anthropic/claude-opus-4.5"
    assert result.finish_reason == "stop"
    assert result.usage.prompt_tokens == 10
    assert result.usage.completion_tokens == 5
    assert result.usage.total_tokens == 15
    assert result.provider == "openrouter"
    assert result.function_calls is None


@pytest.mark.asyncio
async def test_complete_passes_tool_calls_through():
    tool_calls = [
        {
            "id": "call_1",
            "type": "function",
            "function": {"name": "cari_cp", "arguments": "{\"fase\": \"E\"}"},
        }
    ]
    client = _client(_make_mock_transport(_mock_openrouter_response("", tool_calls=tool_calls)))

    result = await client.complete(_request())

    assert result.function_calls == tool_calls
    assert result.finish_reason == "tool_calls"


@pytest.mark.asyncio
async def test_complete_plain_text_error_keeps_status_and_body():
    """A 429 with a plain-text body surfaces both in the error."""
    client = _client(_make_mock_transport(status_code=429, text="rate limited"))

    with pytest.raises(ChatProviderError) as exc_info:
        await client.complete(_request())

    assert exc_info.value.status_code == 429
    assert "429" in str(exc_info.value)
    assert "rate limited" in str(exc_info.value)
    assert exc_info.value.model == "anthropic/claude-opus-4.5"


@pytest.mark.asyncio
async def test_complete_json_error_uses_upstream_message():
    error_data = {"error": {"code": 402, "message": "Insufficient credits"}}
    client = _client(_make_mock_transport(error_data, status_code=402))

    with pytest.raises(ChatProviderError) as exc_info:
        await client.complete(_request())

    assert exc_info.value.status_code == 402
    assert exc_info.value.message.startswith("Insufficient credits - ")


@pytest.mark.asyncio
async def test_complete_json_error_keeps_upstream_raw_detail():
    """A generic error.message must not hide the provider detail in metadata.raw."""
    error_data = {
        "error": {
            "code": 429,
            "message": "Provider returned error",
            "metadata": {"raw": "anthropic: rate limit 40 req/min exceeded"},
        }
    }
    client = _client(_make_mock_transport(error_data, status_code=429))

    with pytest.raises(ChatProviderError) as exc_info:
        await client.complete(_request())

    assert exc_info.value.status_code == 429
    assert "Provider returned error" in str(exc_info.value)
    assert "anthropic: rate limit 40 req/min exceeded" in str(exc_info.value)


@pytest.mark.asyncio
async def test_complete_null_error_field_is_a_normal_completion():
    response_data = _mock_openrouter_response(content="ok")
    response_data["error"] = None
    client = _client(_make_mock_transport(response_data))

    result = await client.complete(_request())

    assert result.content == "ok"
    assert result.finish_reason == "stop"


@pytest.mark.asyncio
async def test_complete_error_in_200_body_is_raised():
    error_data = {"error": {"code": 400, "message": "Model not found"}}
    client = _client(_make_mock_transport(error_data))

    with pytest.raises(ChatProviderError) as exc_info:
        await client.complete(_request())

    assert exc_info.value.status_code == 400
    assert "Model not found" in str(exc_info.value)


@pytest.mark.asyncio
async def test_payload_hoists_system_instruction_and_forwards_params():
    captured: list[httpx.Request] = []
    client = _client(_make_mock_transport(_mock_openrouter_response(), captured=captured))

    await client.complete(
        _request(
            messages=(
                ChatMessage(role="user", content="Buat RPP"),
                ChatMessage(role="assistant", content="Baik"),
                ChatMessage(role="user", content="Kelas 10"),
            ),
            system_instruction="Kamu adalah asisten guru",
            temperature=0.2,
            top_p=0.9,
            top_k=40,
            tools=({"type": "function", "function": {"name": "f"}},),
            tool_choice="auto",
            response_format=ResponseFormat(type="json_object"),
        )
    )

    request = captured[0]
    body = json.loads(request.content)
    assert request.url == "https://openrouter.ai/api/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer test-key"
    assert request.headers["X-Title"] == "RPP Generator"
    assert request.headers["HTTP-Referer"] == "http://localhost:3001"
    assert body["stream"] is False
    assert [m["role"] for m in body["messages"]] == ["system", "user", "assistant", "user"]
    assert body["messages"][0]["content"] == "Kamu adalah asisten guru"
    assert body["temperature"] == 0.2
    assert body["top_p"] == 0.9
    assert body["top_k"] == 40
    assert body["max_tokens"] == 65536
    assert body["tools"][0]["function"]["name"] == "f"
    assert body["tool_choice"] == "auto"
    assert body["response_format"] == {"type": "json_object"}


@pytest.mark.asyncio
async def test_payload_applies_defaults_when_model_missing():
    captured: list[httpx.Request] = []
    client = _client(_make_mock_transport(_mock_openrouter_response(), captured=captured))

    result = await client.complete(_request(model=None))

    body = json.loads(captured[0].content)
    assert body["model"] == "anthropic/claude-sonnet-4.5"
    assert body["temperature"] == 0.7
    assert "top_p" not in body
    assert "response_format" not in body
    assert result.model == "anthropic/claude-sonnet-4.5"


@pytest.mark.asyncio
async def test_complete_multimodal_message():
    """Multimodal messages are correctly serialized."""
    captured: list[httpx.Request] = []
    client = _client(
        _make_mock_transport(_mock_openrouter_response("I see an image."), captured=captured)
    )

    result = await client.complete(
        _request(
            messages=(
                ChatMessage(
                    role="user",
                    content=(
                        ContentPart(type="text", text="What is this?"),
                        ContentPart(
                            type="image_url",
                            image_url={"url": "https://example.com/img.jpg"},
                        ),
                    ),
                ),
            )
        )
    )

    parts = json.loads(captured[0].content)["messages"][0]["content"]
    assert parts[0] == {"type": "text", "text": "What is this?"}
    assert parts[1]["image_url"]["url"] == "https://example.com/img.jpg"
    assert result.content == "I see an image."


# ── Streaming ──


@pytest.mark.asyncio
async def test_stream_yields_content_deltas():
    chunks = [(_delta("Hello") + _delta(" world") + "data: [DONE]\n\n").encode()]
    client = _client(_make_chunked_transport(chunks))

    assert await _collect(client, _request()) == ["Hello", " world"]


@pytest.mark.asyncio
async def test_stream_reassembles_line_split_across_chunks():
    """A record cut mid-line is only parsed once its second half arrives."""
    chunks = [
        b'data: {"choices":[{"delta":{"content":"Hel',
        b'lo"}}]}\n\ndata: [DONE]\n\n',
    ]
    client = _client(_make_chunked_transport(chunks))

    assert await _collect(client, _request()) == ["Hello"]


@pytest.mark.asyncio
async def test_stream_ignores_keepalive_comments_and_empty_deltas():
    body = (
        ": OPENROUTER PROCESSING\n\n"
        + _delta("Hi")
        + 'data: {"choices":[{"delta":{"role":"assistant"}}]}\n\n'
        + _delta("")
        + ": OPENROUTER PROCESSING\n\n"
        + "data: [DONE]\n\n"
    )
    client = _client(_make_chunked_transport([body.encode()]))

    assert await _collect(client, _request()) == ["Hi"]


@pytest.mark.asyncio
async def test_stream_skips_malformed_lines():
    body = _delta("a") + "data: {not json\n\n" + _delta("b") + "data: [DONE]\n\n"
    client = _client(_make_chunked_transport([body.encode()]))

    assert await _collect(client, _request()) == ["a", "b"]


@pytest.mark.asyncio
async def test_stream_without_done_sentinel_ends_normally():
    body = _delta("one") + _delta("two")
    client = _client(_make_chunked_transport([body.encode()]))

    assert await _collect(client, _request()) == ["one", "two"]


@pytest.mark.asyncio
async def test_stream_stops_reading_after_done():
    reads: list[int] = []
    chunks = [
        (_delta("x") + "data: [DONE]\n\n").encode(),
        _delta("never").encode(),
    ]
    client = _client(_make_chunked_transport(chunks, reads=reads))

    assert await _collect(client, _request()) == ["x"]
    assert len(reads) == 1


@pytest.mark.asyncio
async def test_stream_sends_stream_true():
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, content=b"data: [DONE]\n\n")

    client = _client(httpx.MockTransport(handler))
    await _collect(client, _request(system_instruction="Sistem"))

    body = json.loads(captured[0].content)
    assert body["stream"] is True
    assert body["messages"][0] == {"role": "system", "content": "Sistem"}


@pytest.mark.asyncio
async def test_stream_non_2xx_raises_with_body():
    client = _client(_make_chunked_transport([b"upstream overloaded"], status_code=503))

    with pytest.raises(ChatProviderError) as exc_info:
        await _collect(client, _request())

    assert exc_info.value.status_code == 503
    assert "upstream overloaded" in str(exc_info.value)


@pytest.mark.asyncio
async def test_stream_non_2xx_json_error_keeps_raw_detail():
    body = json.dumps(
        {
            "error": {
                "code": 502,
                "message": "Provider returned error",
                "metadata": {"raw": "openai: upstream connect error"},
            }
        }
    ).encode()
    client = _client(_make_chunked_transport([body], status_code=502))

    with pytest.raises(ChatProviderError) as exc_info:
        await _collect(client, _request())

    assert exc_info.value.status_code == 502
    assert "openai: upstream connect error" in exc_info.value.message


@pytest.mark.asyncio
async def test_stream_error_payload_raises():
    body = _delta("partial") + 'data: {"error":{"code":500,"message":"Provider crashed"}}\n\n'
    client = _client(_make_chunked_transport([body.encode()]))

    received: list[str] = []
    with pytest.raises(ChatProviderError) as exc_info:
        async for fragment in client.stream(_request()):
            received.append(fragment)

    assert received == ["partial"]
    assert exc_info.value.status_code == 500
    assert "Provider crashed" in exc_info.value.message


@pytest.mark.asyncio
async def test_stream_closed_early_stops_upstream_reads():
    """Closing the fragment stream after the first delta reads nothing more."""
    reads: list[int] = []
    chunks = [_delta("one").encode(), _delta("two").encode(), _delta("three").encode()]
    client = _client(_make_chunked_transport(chunks, reads=reads))

    fragments = client.stream(_request())
    assert await anext(fragments) == "one"
    await fragments.aclose()

    assert len(reads) == 1


@pytest.mark.asyncio
async def test_provider_name():
    """Provider name is correctly reported."""
    client = OpenRouterClient(api_key="test-key")
    assert client.provider_name == "openrouter"
