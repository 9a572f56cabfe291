import re
import urllib.parse
from dataclasses import dataclass
from typing import ClassVar, Optional, Type, TypeVar

from .errors import IdError

_BASE62_RE = re.compile(r"^[0-9A-Za-z]+$")

OPEN_SPOTIFY_URL = "https://open.spotify.com"

T = TypeVar("T", bound="SpotifyId")


@dataclass(frozen=True)
class SpotifyId:
    """Validated Spotify object id.

    Subclasses set `kind` (the URI type segment) and `fixed_length` (22 for
    catalogue objects, None where Spotify allows any length).
    """

    id: str

    kind: ClassVar[str] = ""
    fixed_length: ClassVar[Optional[int]] = 22

    def __post_init__(self):
        if not self.is_valid(self.id):
            raise IdError(f"Invalid Spotify {self.kind} id: {self.id!r}")

    @classmethod
    def is_valid(cls, value: str) -> bool:
        if not isinstance(value, str) or not _BASE62_RE.match(value):
            return False
        if cls.fixed_length is not None and len(value) != cls.fixed_length:
            return False
        return True

    @classmethod
    def from_id(cls: Type[T], value: str) -> T:
        return cls(str(value or "").strip())

    @classmethod
    def from_uri(cls: Type[T], uri: str) -> T:
        """Parse `spotify:<kind>:<id>` or an open.spotify.com URL."""

        raw = str(uri or "").strip()

        if raw.startswith("spotify:"):
            parts = raw.split(":")
            if len(parts) != 3 or parts[1] != cls.kind:
                raise IdError(f"Invalid Spotify {cls.kind} URI: {raw!r}")
            return cls(parts[2])

        parsed = urllib.parse.urlparse(raw)
        if parsed.scheme in ("http", "https") and parsed.netloc == urllib.parse.urlparse(OPEN_SPOTIFY_URL).netloc:
            segments = [s for s in parsed.path.split("/") if s]
            # Localised links look like /intl-de/track/<id>
            if segments and segments[0].startswith("intl-"):
                segments = segments[1:]
            if len(segments) != 2 or segments[0] != cls.kind:
                raise IdError(f"Invalid Spotify {cls.kind} URL: {raw!r}")
            return cls(segments[1])

        raise IdError(f"Invalid Spotify {cls.kind} URI: {raw!r}")

    @classmethod
    def from_id_or_uri(cls: Type[T], value: str) -> T:
        raw = str(value or "").strip()
        if raw.startswith("spotify:") or "://" in raw:
            return cls.from_uri(raw)
        return cls.from_id(raw)

    @property
    def uri(self) -> str:
        return f"spotify:{self.kind}:{self.id}"

    @property
    def url(self) -> str:
        return f"{OPEN_SPOTIFY_URL}/{self.kind}/{self.id}"

    def __str__(self) -> str:
        return self.id


class TrackId(SpotifyId):
    kind = "track"


class AlbumId(SpotifyId):
    kind = "album"


class ArtistId(SpotifyId):
    kind = "artist"


class PlaylistId(SpotifyId):
    kind = "playlist"
    fixed_length = None
