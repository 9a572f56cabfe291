import logging
from typing import Optional

import httpx

from .auth import ClientCredentialsAuth, build_http_client
from .client import Client
from .config import Configuration

logger = logging.getLogger(__name__)


class ClientHandler:
    """Factory that turns a Configuration into an authenticated Client."""

    def __init__(self, *, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.transport = transport
        self.config: Optional[Configuration] = None

    @classmethod
    def new(cls, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> "ClientHandler":
        return cls(transport=transport)

    async def client_new(self, config: Configuration) -> Client:
        """Authenticate with the client-credentials flow and return a Client.

        Raises AuthError for empty credentials, network failures, non-2xx
        token responses and malformed token bodies.
        """

        http = build_http_client(config, transport=self.transport)
        try:
            token = await ClientCredentialsAuth(config).request_token(http)
        except BaseException:
            await http.aclose()
            raise

        self.config = config
        logger.debug("Created Spotify client (token expires at %s)", token.expires_at)
        return Client(config, http, token)
