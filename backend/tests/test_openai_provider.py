import pytest
from unittest.mock import AsyncMock, MagicMock

from lacura.providers import ProviderFactory
from lacura.providers.openai_provider import OpenAIProvider


def completion(content, finish_reason="stop"):
    choice = MagicMock()
    choice.message.content = content
    choice.finish_reason = finish_reason
    response = MagicMock()
    response.choices = [choice]
    response.usage.model_dump.return_value = {"total_tokens": 42}
    return response


@pytest.fixture
def openai_client():
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=completion("Hello there"))
    return client


@pytest.mark.asyncio
async def test_generate_uses_deployment_settings(settings, openai_client):
    provider = OpenAIProvider(settings, client=openai_client)

    response = await provider.generate([
        {"role": "system", "content": "You are an Appointment Assistant"},
        {"role": "user", "content": "hi"},
        {"role": "tool", "content": "dropped"},
    ])

    assert response.content == "Hello there"
    assert response.meta_data["usage"] == {"total_tokens": 42}
    assert response.meta_data["provider"] == "azure_openai"
    kwargs = openai_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4"
    assert kwargs["temperature"] == 0.7
    assert kwargs["max_tokens"] == 600
    assert [m["role"] for m in kwargs["messages"]] == ["system", "user"]


@pytest.mark.asyncio
async def test_generate_propagates_errors(settings, openai_client):
    openai_client.chat.completions.create.side_effect = RuntimeError("rate limited")
    provider = OpenAIProvider(settings, client=openai_client)

    with pytest.raises(RuntimeError):
        await provider.generate([{"role": "user", "content": "hi"}])


@pytest.mark.asyncio
async def test_empty_completion_is_flagged(settings, openai_client):
    openai_client.chat.completions.create.return_value = completion(None)
    provider = OpenAIProvider(settings, client=openai_client)

    response = await provider.generate([{"role": "user", "content": "hi"}])

    assert response.is_empty


def test_deployment_url(settings_factory):
    settings = settings_factory(OPENAI_ENDPOINT="https://lacura.openai.azure.com/")
    assert OpenAIProvider._deployment_url(settings) == "https://lacura.openai.azure.com/openai/deployments/gpt-4"


def test_factory_returns_none_without_endpoint(settings_factory):
    assert ProviderFactory.get_provider(settings_factory(OPENAI_ENDPOINT=None)) is None
