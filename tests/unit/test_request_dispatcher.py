"""Unit tests for RequestDispatcher."""

import asyncio

import pytest
from unittest.mock import AsyncMock, Mock

from magicprompt.config import BackendConfig, default_backends
from magicprompt.models.schema_translator import SchemaTranslator
from magicprompt.schemas.error_models import MalformedResponse, TransportError
from magicprompt.schemas.message_models import MediaItem, MessageContent, MessageKind
from magicprompt.services.request_dispatcher import (
    ANTHROPIC_VERSION,
    RequestDispatcher,
    build_headers,
    summarize_body,
)


class TestBuildHeaders:
    """Test per-backend authentication headers."""

    def test_ollama_never_sends_key(self):
        assert build_headers("ollama", "secret") == {}

    def test_openai_bearer(self):
        assert build_headers("openai", "sk-1") == {"Authorization": "Bearer sk-1"}

    def test_openai_without_key(self):
        assert build_headers("openaiapi", None) == {}

    def test_anthropic(self):
        assert build_headers("anthropic", "ak") == {
            "anthropic-version": ANTHROPIC_VERSION,
            "x-api-key": "ak",
        }

    def test_openrouter_attribution(self):
        headers = build_headers("openrouter", "or")
        assert headers["Authorization"] == "Bearer or"
        assert headers["X-Title"] == "MagicPrompt"
        assert "HTTP-Referer" in headers


class TestSummarizeBody:
    """Test log summaries of request bodies."""

    def test_long_strings_elided(self):
        body = {"messages": [{"images": ["A" * 1000]}], "model": "llava"}
        summary = summarize_body(body)
        assert summary["model"] == "llava"
        assert summary["messages"][0]["images"][0].endswith("<1000 chars>")


class TestRequestDispatcher:
    """Test RequestDispatcher class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.transport = Mock()
        self.transport.post = AsyncMock(return_value={"message": {"content": "Hi!"}})
        self.backends = default_backends()
        self.backends["openai"] = BackendConfig(
            base_url="https://api.openai.com/",
            endpoints={"chat": "/v1/chat/completions"},
            api_key="sk-test"
        )
        self.dispatcher = RequestDispatcher(self.transport, self.backends)

    @pytest.mark.asyncio
    async def test_send_ollama_success(self):
        """Test full round trip for a text request."""
        content = MessageContent(text="Hello", instructions="Be concise.")
        result = await self.dispatcher.send("ollama", content, "llama3")

        assert result.success is True
        assert result.response == "Hi!"

        args, kwargs = self.transport.post.call_args
        assert args[0] == "http://localhost:11434/api/chat"
        assert args[1]["messages"][0] == {"role": "system", "content": "Be concise."}
        assert kwargs["headers"] == {}
        assert kwargs["backend"] == "ollama"

    @pytest.mark.asyncio
    async def test_send_openai_joins_url_and_auth(self):
        """Test endpoint joining and bearer header."""
        self.transport.post.return_value = {"choices": [{"message": {"content": "ok"}}]}
        result = await self.dispatcher.send("OpenAI", MessageContent(text="Hi"), "gpt-4o", seed=7)

        assert result.success is True
        args, kwargs = self.transport.post.call_args
        assert args[0] == "https://api.openai.com/v1/chat/completions"
        assert args[1]["seed"] == 7
        assert kwargs["headers"] == {"Authorization": "Bearer sk-test"}

    @pytest.mark.asyncio
    async def test_unsupported_backend(self):
        """Test unknown backends fail without a network call."""
        result = await self.dispatcher.send("mystery", MessageContent(text="Hi"), "m")

        assert result.success is False
        assert result.error == "Unsupported backend: mystery"
        self.transport.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_argument(self):
        """Test translation errors become failed results."""
        result = await self.dispatcher.send("ollama", None, "llama3")

        assert result.success is False
        assert "content" in result.error
        self.transport.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_vision_without_media(self):
        """Test vision requests without media fail."""
        result = await self.dispatcher.send("ollama", MessageContent(text="x"), "llava", MessageKind.VISION)
        assert result.success is False

    @pytest.mark.asyncio
    async def test_missing_endpoint(self):
        """Test missing configuration becomes a failed result."""
        del self.backends["grok"]
        result = await self.dispatcher.send("grok", MessageContent(text="Hi"), "grok-2")

        assert result.success is False
        assert "grok" in result.error
        self.transport.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_transport_error(self):
        """Test transport failures keep their message."""
        self.transport.post.side_effect = TransportError(
            "Authentication Error [openai]: HTTP 401 - bad key", status_code=401
        )
        result = await self.dispatcher.send("openai", MessageContent(text="Hi"), "gpt-4o")

        assert result.success is False
        assert result.error == "Authentication Error [openai]: HTTP 401 - bad key"

    @pytest.mark.asyncio
    async def test_malformed_transport_body(self):
        """Test non-JSON responses become failed results."""
        self.transport.post.side_effect = MalformedResponse()
        result = await self.dispatcher.send("ollama", MessageContent(text="Hi"), "llama3")
        assert result.error == "malformed response"

    @pytest.mark.asyncio
    async def test_unexpected_error(self):
        """Test unexpected exceptions are caught."""
        self.transport.post.side_effect = RuntimeError("kaboom")
        result = await self.dispatcher.send("ollama", MessageContent(text="Hi"), "llama3")

        assert result.success is False
        assert result.error == "Unexpected error: kaboom"

    @pytest.mark.asyncio
    async def test_malformed_response(self):
        """Test unexpected response shapes become failed results."""
        self.transport.post.return_value = {"unexpected": True}
        result = await self.dispatcher.send("ollama", MessageContent(text="Hi"), "llama3")
        assert result.error == "malformed response"

    @pytest.mark.asyncio
    async def test_non_string_anthropic_text_is_malformed(self):
        """Test a text block holding a non-string becomes a failed result."""
        self.transport.post.return_value = {"content": [{"type": "text", "text": ["a"]}]}
        result = await self.dispatcher.send("anthropic", MessageContent(text="hi"), "claude", "Text")

        assert result.success is False
        assert result.error == "malformed response"

    @pytest.mark.asyncio
    async def test_normalizer_error_is_caught(self):
        """Test errors raised while normalizing do not escape send."""
        normalizer = Mock()
        normalizer.normalize.side_effect = RuntimeError("bad shape")
        dispatcher = RequestDispatcher(self.transport, self.backends, normalizer=normalizer)

        result = await dispatcher.send("ollama", MessageContent(text="Hi"), "llama3")

        assert result.success is False
        assert result.error == "Unexpected error: bad shape"

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        """Test cancelling a pending request cancels the call."""
        started = asyncio.Event()

        async def slow_post(*args, **kwargs):
            started.set()
            await asyncio.sleep(10)

        self.transport.post.side_effect = slow_post
        task = asyncio.create_task(
            self.dispatcher.send("ollama", MessageContent(text="Hi"), "llama3")
        )
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_vision_request_uses_translator(self, png_base64):
        """Test vision requests carry compressed images."""
        translator = SchemaTranslator()
        dispatcher = RequestDispatcher(self.transport, self.backends, translator=translator)
        content = MessageContent(text="Describe", media=[MediaItem(data=png_base64, media_type="image/png")])

        result = await dispatcher.send("ollama", content, "llava", MessageKind.VISION)

        assert result.success is True
        body = self.transport.post.call_args[0][1]
        assert len(body["messages"][-1]["images"]) == 1
