import time
import httpx
from typing import Dict, Any, Optional

from lacura.core.config import Settings
from lacura.core.exceptions import ConfigurationError, UpstreamError
from lacura.utils.logger import get_logger

logger = get_logger("graph_auth")


class GraphTokenProvider:
    """App-only (client credentials) tokens for the calendar owner's mailbox."""

    MICROSOFT_AUTH_BASE = "https://login.microsoftonline.com"
    SCOPE = "https://graph.microsoft.com/.default"
    # Refresh a little before the token actually expires
    EXPIRY_MARGIN_SECONDS = 60

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport
        self._access_token: Optional[str] = None
        self._expires_at: float = 0.0

    async def get_token(self) -> str:
        if self._access_token and time.time() < self._expires_at:
            return self._access_token

        data = await self._request_token()
        self._access_token = data["access_token"]
        self._expires_at = time.time() + int(data.get("expires_in", 3600)) - self.EXPIRY_MARGIN_SECONDS
        return self._access_token

    async def _request_token(self) -> Dict[str, Any]:
        if not self.settings.graph_configured:
            raise ConfigurationError("Microsoft Graph credentials are not configured.")

        token_url = f"{self.MICROSOFT_AUTH_BASE}/{self.settings.AZURE_TENANT_ID}/oauth2/v2.0/token"
        data = {
            "client_id": self.settings.AZURE_CLIENT_ID,
            "client_secret": self.settings.AZURE_CLIENT_SECRET,
            "grant_type": "client_credentials",
            "scope": self.SCOPE,
        }

        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.post(token_url, data=data)
            if response.is_error:
                logger.error(f"Token request failed: {response.status_code} {response.text[:200]}")
                raise UpstreamError("Failed to acquire Graph access token", upstream_status=response.status_code)
            return response.json()
