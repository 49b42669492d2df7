from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List

class Settings(BaseSettings):
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Microsoft Graph (app-only service identity)
    AZURE_TENANT_ID: str | None = None
    AZURE_CLIENT_ID: str | None = None
    AZURE_CLIENT_SECRET: str | None = None
    CALENDAR_OWNER_EMAIL: str = "andrea@liveraltravel.com"
    BOOKING_CATEGORY: str = "La Cura Booking"
    MAIL_SENDER: str | None = None

    # Azure AI Search
    AI_SEARCH_ENDPOINT: str | None = None
    AI_SEARCH_API_KEY: str | None = None
    AI_SEARCH_INDEX: str = "content"
    AI_SEARCH_API_VERSION: str = "2023-11-01"

    # Azure OpenAI
    OPENAI_ENDPOINT: str | None = None
    OPENAI_API_KEY: str | None = None
    OPENAI_DEPLOYMENT_NAME: str = "gpt-4"
    OPENAI_API_VERSION: str = "2024-02-15-preview"
    OPENAI_TEMPERATURE: float = 0.7
    OPENAI_MAX_TOKENS: int = 600

    AVAILABILITY_TIMEOUT_SECONDS: float = 10
    LLM_TIMEOUT_SECONDS: float = 30
    CHAT_SEARCH_ENABLED: bool = True
    CHAT_SEARCH_TOP: int = 3
    AI_ASSISTANT_TONE: str = "warm, supportive, professional, concise, understanding"

    model_config = SettingsConfigDict(env_file=".env", frozen=True, extra="ignore")

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    @property
    def search_configured(self) -> bool:
        return bool(self.AI_SEARCH_ENDPOINT and self.AI_SEARCH_API_KEY)

    @property
    def openai_configured(self) -> bool:
        return bool(self.OPENAI_ENDPOINT and self.OPENAI_API_KEY)

    @property
    def graph_configured(self) -> bool:
        return bool(self.AZURE_TENANT_ID and self.AZURE_CLIENT_ID and self.AZURE_CLIENT_SECRET)

@lru_cache
def get_settings():
    return Settings()
