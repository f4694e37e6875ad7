"""Tests for the LLM chat client wrapper."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from microhabit.core.exceptions import LLMRequestError, LLMUnavailableError
from microhabit.services.llm_client import LLMClient


def _reply(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _client_with(create: AsyncMock) -> LLMClient:
    llm = LLMClient(api_key="test-key", model="test-model", timeout=5)
    llm._client = MagicMock()
    llm._client.chat.completions.create = create
    return llm


@pytest.mark.asyncio
async def test_complete_without_key_raises_unavailable():
    """No API key means the model is never called."""
    with pytest.raises(LLMUnavailableError):
        await LLMClient(api_key="").complete("system", "user")


@pytest.mark.asyncio
async def test_complete_returns_stripped_content():
    """The first choice's content is returned."""
    create = AsyncMock(return_value=_reply("  {\"emotion\": \"happy\"}  "))
    llm = _client_with(create)

    content = await llm.complete("system", "user", temperature=0.8, max_tokens=500)

    assert content == '{"emotion": "happy"}'
    kwargs = create.await_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["temperature"] == 0.8
    assert kwargs["max_tokens"] == 500
    assert kwargs["messages"][0] == {"role": "system", "content": "system"}


@pytest.mark.asyncio
async def test_complete_wraps_transport_errors():
    """Errors from the SDK surface as LLMRequestError."""
    llm = _client_with(AsyncMock(side_effect=RuntimeError("connection reset")))
    with pytest.raises(LLMRequestError):
        await llm.complete("system", "user")


@pytest.mark.asyncio
async def test_complete_rejects_empty_reply():
    """Empty choices or blank content are errors."""
    with pytest.raises(LLMRequestError):
        await _client_with(AsyncMock(return_value=SimpleNamespace(choices=[]))).complete("s", "u")
    with pytest.raises(LLMRequestError):
        await _client_with(AsyncMock(return_value=_reply("   "))).complete("s", "u")


@pytest.mark.asyncio
async def test_complete_times_out():
    """A reply slower than the timeout raises LLMRequestError."""

    async def slow_reply(**kwargs):
        await asyncio.sleep(1)
        return _reply("too late")

    llm = _client_with(AsyncMock(side_effect=slow_reply))
    llm.timeout = 0.01

    with pytest.raises(LLMRequestError, match="timed out"):
        await llm.complete("system", "user")
