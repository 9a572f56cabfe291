import base64
import logging
from typing import Any, Dict, Optional

import httpx

from .config import Configuration
from .errors import AuthError, ConfigError
from .tokens import TokenInfo

logger = logging.getLogger(__name__)


def basic_auth_header(client_id: str, client_secret: str) -> str:
    """Return the HTTP Basic value for the token endpoint."""

    raw = f"{client_id}:{client_secret}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


def check_spotify_credentials(config: Configuration) -> Dict[str, Any]:
    """Validate the credential pair and return a structured status dict."""

    client_id = (config.client_id or "").strip()
    client_secret = (config.client_secret or "").strip()

    if not client_id or not client_secret:
        missing = [name for name, value in (("client_id", client_id), ("client_secret", client_secret)) if not value]
        return {
            "ok": False,
            "client_id": client_id,
            "missing": missing,
            "message": (
                f"Missing Spotify {' and '.join(missing)}.\n"
                "Create an app at https://developer.spotify.com/dashboard and copy its Client ID and Client Secret."
            ),
        }

    return {
        "ok": True,
        "client_id": client_id,
        "missing": [],
        "message": "Spotify credentials look OK.",
    }


def build_http_client(config: Configuration, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """Create the async transport shared by auth and API calls."""

    try:
        timeout = float(config.get("spotify_timeout"))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid spotify_timeout: {config.get('spotify_timeout')!r}") from e

    kwargs: Dict[str, Any] = {
        "timeout": timeout,
        "follow_redirects": False,
    }
    if transport is not None:
        kwargs["transport"] = transport
    elif config.get("spotify_proxy"):
        kwargs["proxy"] = str(config.get("spotify_proxy"))
    return httpx.AsyncClient(**kwargs)


class ClientCredentialsAuth:
    """Spotify OAuth client-credentials exchange (app token, no user context)."""

    def __init__(self, config: Configuration):
        self.config = config

    @property
    def token_url(self) -> str:
        return f"{str(self.config.get('spotify_accounts_base_url')).rstrip('/')}/api/token"

    async def request_token(self, http: httpx.AsyncClient) -> TokenInfo:
        status = check_spotify_credentials(self.config)
        if not status["ok"]:
            raise AuthError(status["message"])

        payload = await self._post_form(
            http,
            self.token_url,
            {"grant_type": "client_credentials"},
        )
        token = TokenInfo.from_spotify_token_response(payload)
        logger.info("Authenticated with Spotify (client id %s...)", self.config.client_id[:6])
        return token

    async def _post_form(self, http: httpx.AsyncClient, url: str, form: Dict[str, Any]) -> Dict[str, Any]:
        data = {k: str(v) for k, v in (form or {}).items() if v is not None}

        try:
            resp = await http.post(
                url,
                data=data,
                headers={
                    "Authorization": basic_auth_header(self.config.client_id, self.config.client_secret),
                    "Content-Type": "application/x-www-form-urlencoded",
                },
            )
        except httpx.HTTPError as e:
            raise AuthError(f"Spotify token request failed: {e}") from e

        if resp.status_code >= 300:
            raise AuthError(
                f"Spotify token request failed (HTTP {resp.status_code}): {_error_description(resp)}",
                status=resp.status_code,
            )

        # Covers JSONDecodeError and UnicodeDecodeError from undecodable bytes.
        try:
            payload = resp.json()
        except ValueError as e:
            raise AuthError(f"Spotify token response was not JSON: {resp.text}", status=resp.status_code) from e

        if not isinstance(payload, dict):
            raise AuthError(f"Spotify token response was not an object: {payload}", status=resp.status_code)

        return payload


def _error_description(resp: httpx.Response) -> str:
    # Token endpoint errors look like {"error": "invalid_client", "error_description": "..."}
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    if isinstance(body, dict):
        desc = body.get("error_description") or body.get("error")
        if desc:
            return str(desc)
    return resp.text
