from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional
from pydantic import BaseModel

class ProviderResponse(BaseModel):
    content: Optional[str] = None
    meta_data: Dict[str, Any] = {}

    @property
    def is_empty(self) -> bool:
        return not (self.content or "").strip()

class LLMProvider(ABC):
    """A hosted chat model that phrases the assistant's replies."""

    name: str = "base"

    @abstractmethod
    async def generate(self, messages: List[Dict[str, str]], options: Optional[Dict[str, Any]] = None) -> ProviderResponse:
        """
        Run one chat completion.

        Args:
            messages: System prompt first, then the conversation turns
                [{"role": "user", "content": "..."}]
            options: Per-call overrides (model, temperature, max_tokens)

        Returns:
            ProviderResponse with the reply text and usage metadata.
            Errors propagate; the caller owns timeouts and fallbacks.
        """
        pass
