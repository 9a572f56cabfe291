import logging
import os
import subprocess
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigError

logger = logging.getLogger(__name__)

SPOTIFY_API_BASE_URL = "https://api.spotify.com/v1"
SPOTIFY_ACCOUNTS_BASE_URL = "https://accounts.spotify.com"

PASS_COMMAND = "pass"

ENV_CLIENT_ID = "SPOTIFY_CLIENT_ID"
ENV_CLIENT_SECRET = "SPOTIFY_CLIENT_SECRET"

# Transport settings understood by ClientHandler / Client.
DEFAULT_SETTINGS: Dict[str, Any] = {
    "spotify_api_base_url": SPOTIFY_API_BASE_URL,
    "spotify_accounts_base_url": SPOTIFY_ACCOUNTS_BASE_URL,
    "spotify_timeout": 30.0,
    "spotify_proxy": None,
    "spotify_language": None,
    "spotify_market": "US",
}


def read_pass_secret(key: str, *, pass_command: str = PASS_COMMAND) -> str:
    """Return the first line of `pass show <key>`."""

    key = str(key or "").strip()
    if not key:
        raise ConfigError("Empty pass key")

    try:
        result = subprocess.run(
            [pass_command, "show", key],
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as e:
        raise ConfigError(f"'{pass_command}' is not installed or not on PATH") from e
    except OSError as e:
        raise ConfigError(f"Failed to run '{pass_command} show {key}': {e}") from e

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        raise ConfigError(f"'{pass_command} show {key}' failed (exit {result.returncode}): {stderr}")

    lines = (result.stdout or "").splitlines()
    secret = lines[0].strip() if lines else ""
    if not secret:
        raise ConfigError(f"pass entry '{key}' is empty")

    return secret


@dataclass(frozen=True)
class Configuration:
    """Credential pair plus transport settings for ClientHandler.client_new()."""

    client_id: str
    client_secret: str = field(repr=False)
    settings: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        # Read-only view over a private copy.
        object.__setattr__(self, "settings", MappingProxyType(dict(self.settings or {})))

    @classmethod
    def from_pass(
        cls,
        client_id_key: str,
        client_secret_key: str,
        *,
        settings: Optional[Dict[str, Any]] = None,
        pass_command: str = PASS_COMMAND,
    ) -> "Configuration":
        client_id = read_pass_secret(client_id_key, pass_command=pass_command)
        client_secret = read_pass_secret(client_secret_key, pass_command=pass_command)
        logger.debug("Loaded Spotify credentials from pass (%s, %s)", client_id_key, client_secret_key)
        return cls(client_id=client_id, client_secret=client_secret, settings=dict(settings or {}))

    @classmethod
    def from_env(cls, *, env_file: Optional[str] = None, settings: Optional[Dict[str, Any]] = None) -> "Configuration":
        """Read SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET, loading .env first if present."""

        load_dotenv(env_file)

        client_id = (os.environ.get(ENV_CLIENT_ID) or "").strip()
        client_secret = (os.environ.get(ENV_CLIENT_SECRET) or "").strip()
        missing = [name for name, value in ((ENV_CLIENT_ID, client_id), (ENV_CLIENT_SECRET, client_secret)) if not value]
        if missing:
            raise ConfigError(f"Missing environment variable(s): {', '.join(missing)}")

        return cls(client_id=client_id, client_secret=client_secret, settings=dict(settings or {}))

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> "Configuration":
        """Build from a CLI settings dict (spotify_client_id / spotify_client_secret + transport keys)."""

        settings = dict(settings or {})
        return cls(
            client_id=str(settings.get("spotify_client_id") or "").strip(),
            client_secret=str(settings.get("spotify_client_secret") or "").strip(),
            settings={k: v for k, v in settings.items() if k in DEFAULT_SETTINGS},
        )

    def get(self, key: str, default: Any = None) -> Any:
        if key in self.settings and self.settings[key] is not None:
            return self.settings[key]
        if default is not None:
            return default
        return DEFAULT_SETTINGS.get(key)

    def has_credentials(self) -> bool:
        return bool(self.client_id.strip()) and bool(self.client_secret.strip())


_CONFIG: Optional[Configuration] = None


def set_config(config: Configuration) -> None:
    """Install the process-wide configuration. May only be called once."""

    global _CONFIG
    if _CONFIG is not None:
        raise ConfigError("Configuration is already initialized")
    _CONFIG = config


def get_config() -> Configuration:
    if _CONFIG is None:
        raise ConfigError("Configuration is not initialized; call set_config() first")
    return _CONFIG
