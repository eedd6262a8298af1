"""Unit tests for ModelListProvider."""

import asyncio

import pytest
from unittest.mock import AsyncMock, Mock

from magicprompt.config import BackendConfig, default_backends
from magicprompt.schemas.error_models import MalformedResponse, TransportError
from magicprompt.services.model_list_provider import ModelListProvider, parse_models


class TestParseModels:
    """Test parsing of model list responses."""

    def test_ollama(self):
        raw = {"models": [{"name": "llava:latest", "model": "llava:latest"}, {"name": "gemma:2b"}]}
        models = parse_models("ollama", raw)
        assert [m.id for m in models] == ["gemma:2b", "llava:latest"]

    def test_openai_style(self):
        raw = {"data": [{"id": "gpt-4o"}, {"id": "claude-3", "display_name": "Claude 3"}, {"object": "x"}]}
        models = parse_models("anthropic", raw)
        assert [(m.id, m.name) for m in models] == [("claude-3", "Claude 3"), ("gpt-4o", "gpt-4o")]

    @pytest.mark.parametrize("backend,raw", [
        ("ollama", {"data": []}),
        ("openai", {"models": []}),
        ("openai", ["gpt-4o"]),
    ])
    def test_missing_list(self, backend, raw):
        with pytest.raises(MalformedResponse):
            parse_models(backend, raw)


class TestModelListProvider:
    """Test ModelListProvider class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.transport = Mock()
        self.transport.get = AsyncMock(return_value={"models": [{"name": "llama3"}]})
        self.backends = default_backends()
        self.backends["openrouter"] = BackendConfig(
            base_url="https://openrouter.ai",
            endpoints={"models": "/api/v1/models"},
            api_key="or-key"
        )
        self.provider = ModelListProvider(self.transport, self.backends)

    @pytest.mark.asyncio
    async def test_list_models_success(self):
        result = await self.provider.list_models("Ollama")

        assert result.success is True
        assert result.backend == "ollama"
        assert [m.id for m in result.models] == ["llama3"]
        self.transport.get.assert_awaited_once_with(
            "http://localhost:11434/api/tags", headers={}, backend="ollama"
        )

    @pytest.mark.asyncio
    async def test_auth_headers(self):
        self.transport.get.return_value = {"data": [{"id": "m"}]}
        await self.provider.list_models("openrouter")
        headers = self.transport.get.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer or-key"

    @pytest.mark.asyncio
    async def test_unknown_backend(self):
        result = await self.provider.list_models("mystery")
        assert result.success is False
        assert result.error == "Unsupported backend: mystery"
        self.transport.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_transport_error(self):
        self.transport.get.side_effect = TransportError("Connection Error [ollama]: refused")
        result = await self.provider.list_models("ollama")
        assert result.success is False
        assert result.error == "Connection Error [ollama]: refused"

    @pytest.mark.asyncio
    async def test_concurrent_requests_share_fetch(self):
        release = asyncio.Event()

        async def slow_get(*args, **kwargs):
            await release.wait()
            return {"models": [{"name": "llama3"}]}

        self.transport.get.side_effect = slow_get
        tasks = [asyncio.create_task(self.provider.list_models("ollama")) for _ in range(3)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*tasks)

        assert all(result.success for result in results)
        assert self.transport.get.await_count == 1
