import pytest

from lacura.core.config import Settings


def make_settings(**overrides) -> Settings:
    values = dict(
        ENVIRONMENT="test",
        AZURE_TENANT_ID="tenant",
        AZURE_CLIENT_ID="client",
        AZURE_CLIENT_SECRET="secret",
        AI_SEARCH_ENDPOINT="https://search.example.net",
        AI_SEARCH_API_KEY="search-key",
        OPENAI_ENDPOINT="https://openai.example.net",
        OPENAI_API_KEY="openai-key",
        MAIL_SENDER="hello@lacura.example",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def settings_factory():
    return make_settings
