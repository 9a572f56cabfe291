"""Spotify Web API client (OAuth client-credentials, async httpx).

Typical use:

    config = Configuration.from_pass("spotify/client-id", "spotify/client-secret")
    client = await ClientHandler.new().client_new(config)
    track = await client.track(TrackId.from_id("6D6Pybzey0shI8U9ttRAPx"), None)
"""

from .auth import ClientCredentialsAuth
from .client import Client
from .config import Configuration, get_config, set_config
from .errors import ApiError, AuthError, ConfigError, IdError, SpotifyError
from .handler import ClientHandler
from .ids import AlbumId, ArtistId, PlaylistId, SpotifyId, TrackId
from .models import Album, Artist, Category, Image, Market, Playlist, SearchResults, Track
from .tokens import TokenInfo

__all__ = [
    "Album",
    "AlbumId",
    "ApiError",
    "Artist",
    "ArtistId",
    "AuthError",
    "Category",
    "Client",
    "ClientCredentialsAuth",
    "ClientHandler",
    "ConfigError",
    "Configuration",
    "IdError",
    "Image",
    "Market",
    "Playlist",
    "PlaylistId",
    "SearchResults",
    "SpotifyError",
    "SpotifyId",
    "TokenInfo",
    "Track",
    "TrackId",
    "get_config",
    "set_config",
]
