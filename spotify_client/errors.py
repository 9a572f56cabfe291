from typing import Optional


class SpotifyError(RuntimeError):
    """Base class for every error raised by spotify_client."""


class ConfigError(SpotifyError):
    """Credentials or settings could not be loaded."""


class AuthError(SpotifyError):
    """The client-credentials exchange failed."""

    def __init__(self, message: str, *, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ApiError(SpotifyError):
    """A Web API request failed or returned something unusable."""

    def __init__(self, message: str, *, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class IdError(ApiError):
    """A Spotify id or URI did not have the expected format."""
