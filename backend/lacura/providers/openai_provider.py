from __future__ import annotations

from typing import Dict, Any, Optional, List
import time
import logging
import openai

from lacura.core.config import Settings
from .base import LLMProvider, ProviderResponse

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """Chat completions against an Azure OpenAI deployment."""

    name = "azure_openai"

    def __init__(self, settings: Settings, client: Optional[openai.AsyncOpenAI] = None):
        self.settings = settings
        self.default_model = settings.OPENAI_DEPLOYMENT_NAME
        self.client = client or openai.AsyncOpenAI(
            api_key=settings.OPENAI_API_KEY,
            base_url=self._deployment_url(settings),
            default_query={"api-version": settings.OPENAI_API_VERSION},
            default_headers={"api-key": settings.OPENAI_API_KEY},
        )

    @staticmethod
    def _deployment_url(settings: Settings) -> str:
        endpoint = (settings.OPENAI_ENDPOINT or "").rstrip("/")
        if "/openai/deployments/" in endpoint:
            return endpoint
        return f"{endpoint}/openai/deployments/{settings.OPENAI_DEPLOYMENT_NAME}"

    def _sanitize_messages(self, messages: List[Dict[str, Any]]) -> List[Dict[str, str]]:
        """Keep only role/content pairs with string content."""
        cleaned: List[Dict[str, str]] = []
        for m in messages:
            if not isinstance(m, dict):
                continue
            role = m.get("role")
            content = m.get("content")
            if role not in ("system", "user", "assistant") or not isinstance(content, str):
                continue
            cleaned.append({"role": role, "content": content})
        return cleaned

    async def generate(
        self,
        messages: List[Dict[str, Any]],
        options: Optional[Dict[str, Any]] = None
    ) -> ProviderResponse:
        options = options or {}

        model = options.get("model") or self.default_model
        req: Dict[str, Any] = {
            "model": model,
            "messages": self._sanitize_messages(messages),
            "temperature": options.get("temperature", self.settings.OPENAI_TEMPERATURE),
            "max_tokens": options.get("max_tokens", self.settings.OPENAI_MAX_TOKENS),
        }

        try:
            start = time.time()
            response = await self.client.chat.completions.create(**req)
            latency = time.time() - start

            content = ""
            if response.choices:
                content = response.choices[0].message.content or ""

            meta_data: Dict[str, Any] = {
                "provider": self.name,
                "model": model,
                "finish_reason": response.choices[0].finish_reason if response.choices else None,
                "latency": latency,
            }
            if getattr(response, "usage", None):
                meta_data["usage"] = response.usage.model_dump()

            logger.info(f"OpenAI Response (chat): model={model}, content_len={len(content)}, latency={latency:.2f}s")
            return ProviderResponse(content=content, meta_data=meta_data)

        except Exception as e:
            logger.exception(f"OpenAI Provider Error: {e}")
            raise
