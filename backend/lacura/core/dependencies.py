from typing import Optional

from fastapi import Depends

from lacura.core.config import Settings, get_settings
from lacura.providers import ProviderFactory
from lacura.providers.base import LLMProvider
from lacura.services.booking_service import BookingService
from lacura.services.chat import ConversationOrchestrator
from lacura.services.email_service import EmailService
from lacura.services.ingest_service import IngestService
from lacura.services.microsoft_graph import MicrosoftGraphClient
from lacura.services.search_gateway import SearchGateway


def get_graph_client(settings: Settings = Depends(get_settings)) -> MicrosoftGraphClient:
    return MicrosoftGraphClient(settings)


def get_search_gateway(settings: Settings = Depends(get_settings)) -> SearchGateway:
    """Raises ConfigurationError when AI Search is not configured."""
    return SearchGateway(settings)


def get_optional_search_gateway(settings: Settings = Depends(get_settings)) -> Optional[SearchGateway]:
    if not (settings.CHAT_SEARCH_ENABLED and settings.search_configured):
        return None
    return SearchGateway(settings)


def get_llm_provider(settings: Settings = Depends(get_settings)) -> Optional[LLMProvider]:
    return ProviderFactory.get_provider(settings)


def get_orchestrator(
    settings: Settings = Depends(get_settings),
    provider: Optional[LLMProvider] = Depends(get_llm_provider),
    graph: MicrosoftGraphClient = Depends(get_graph_client),
    search: Optional[SearchGateway] = Depends(get_optional_search_gateway),
) -> ConversationOrchestrator:
    # Without a service identity the orchestrator reports availability as unknown
    calendar = graph if settings.graph_configured else None
    return ConversationOrchestrator(settings, provider, calendar, search)


def get_booking_service(graph: MicrosoftGraphClient = Depends(get_graph_client)) -> BookingService:
    return BookingService(graph)


def get_email_service(
    settings: Settings = Depends(get_settings),
    graph: MicrosoftGraphClient = Depends(get_graph_client),
) -> EmailService:
    return EmailService(settings, graph)


def get_ingest_service(search: SearchGateway = Depends(get_search_gateway)) -> IngestService:
    return IngestService(search)
