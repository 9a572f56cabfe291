import functools
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import ApiError

FROM_TOKEN = "from_token"


@dataclass(frozen=True)
class Market:
    """A market scope: an ISO 3166-1 alpha-2 country code or `from_token`."""

    code: str

    def __post_init__(self):
        code = str(self.code or "").strip()
        if code.lower() == FROM_TOKEN:
            code = FROM_TOKEN
        elif len(code) == 2 and code.isalpha():
            code = code.upper()
        else:
            raise ValueError(f"Invalid market: {self.code!r}")
        object.__setattr__(self, "code", code)

    @classmethod
    def country(cls, code: str) -> "Market":
        return cls(code)

    def __str__(self) -> str:
        return self.code


Market.FROM_TOKEN = Market(FROM_TOKEN)


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _list_of_dicts(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]


def _list_of_str(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v]


def _require_object(payload: Any, what: str) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise ApiError(f"Spotify {what} response was not an object: {payload!r}")
    return payload


def _parses(what: str):
    """Re-raise type errors from a malformed payload as ApiError."""

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(cls, payload, *args, **kwargs):
            try:
                return fn(cls, payload, *args, **kwargs)
            except (TypeError, ValueError) as e:
                raise ApiError(f"Malformed Spotify {what} object: {e}") from e

        return wrapper

    return decorator


@dataclass(frozen=True)
class Image:
    url: str
    width: Optional[int] = None
    height: Optional[int] = None

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "Image":
        return cls(url=str(payload.get("url") or ""), width=payload.get("width"), height=payload.get("height"))


def _images(value: Any) -> List[Image]:
    return [Image.from_json(i) for i in _list_of_dicts(value) if i.get("url")]


@dataclass(frozen=True)
class Artist:
    id: Optional[str]
    name: str
    uri: Optional[str] = None
    genres: List[str] = field(default_factory=list, hash=False)
    popularity: Optional[int] = None
    followers: Optional[int] = None
    images: List[Image] = field(default_factory=list, hash=False)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    @_parses("artist")
    def from_json(cls, payload: Any) -> "Artist":
        payload = _require_object(payload, "artist")
        return cls(
            id=payload.get("id"),
            name=str(payload.get("name") or ""),
            uri=payload.get("uri"),
            genres=_list_of_str(payload.get("genres")),
            popularity=payload.get("popularity"),
            followers=_dict(payload.get("followers")).get("total"),
            images=_images(payload.get("images")),
            raw=payload,
        )


@dataclass(frozen=True)
class Album:
    id: Optional[str]
    name: str
    uri: Optional[str] = None
    album_type: Optional[str] = None
    release_date: Optional[str] = None
    total_tracks: Optional[int] = None
    artists: List[Artist] = field(default_factory=list, hash=False)
    images: List[Image] = field(default_factory=list, hash=False)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    @_parses("album")
    def from_json(cls, payload: Any) -> "Album":
        payload = _require_object(payload, "album")
        return cls(
            id=payload.get("id"),
            name=str(payload.get("name") or ""),
            uri=payload.get("uri"),
            album_type=payload.get("album_type"),
            release_date=payload.get("release_date"),
            total_tracks=payload.get("total_tracks"),
            artists=[Artist.from_json(a) for a in _list_of_dicts(payload.get("artists"))],
            images=_images(payload.get("images")),
            raw=payload,
        )

    @property
    def artist_names(self) -> str:
        return ", ".join(a.name for a in self.artists if a.name)


@dataclass(frozen=True)
class Track:
    """A track object as returned by `GET /tracks/{id}`.

    Simplified tracks (album track listings) have no `album`; the client
    attaches the parent album where it knows it.
    """

    id: Optional[str]
    name: str
    uri: Optional[str] = None
    artists: List[Artist] = field(default_factory=list, hash=False)
    album: Optional[Album] = None
    duration_ms: Optional[int] = None
    explicit: Optional[bool] = None
    popularity: Optional[int] = None
    track_number: Optional[int] = None
    disc_number: Optional[int] = None
    is_playable: Optional[bool] = None
    preview_url: Optional[str] = None
    isrc: Optional[str] = None
    external_url: Optional[str] = None
    available_markets: List[str] = field(default_factory=list, hash=False)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    @_parses("track")
    def from_json(cls, payload: Any, *, album: Optional[Album] = None) -> "Track":
        payload = _require_object(payload, "track")

        # A bare error object or an episode is not a track.
        if not payload.get("name") and not payload.get("id"):
            raise ApiError(f"Spotify track response is missing id and name: {payload!r}")
        if payload.get("type") not in (None, "track"):
            raise ApiError(f"Expected a track object, got type {payload.get('type')!r}")

        album_obj = payload.get("album")
        if album is None and isinstance(album_obj, dict):
            album = Album.from_json(album_obj)

        return cls(
            id=payload.get("id"),
            name=str(payload.get("name") or ""),
            uri=payload.get("uri"),
            artists=[Artist.from_json(a) for a in _list_of_dicts(payload.get("artists"))],
            album=album,
            duration_ms=payload.get("duration_ms"),
            explicit=payload.get("explicit"),
            popularity=payload.get("popularity"),
            track_number=payload.get("track_number"),
            disc_number=payload.get("disc_number"),
            is_playable=payload.get("is_playable"),
            preview_url=payload.get("preview_url"),
            isrc=_dict(payload.get("external_ids")).get("isrc"),
            external_url=_dict(payload.get("external_urls")).get("spotify"),
            available_markets=_list_of_str(payload.get("available_markets")),
            raw=payload,
        )

    @property
    def artist_names(self) -> str:
        # de-dupe preserving order
        seen = set()
        names = []
        for a in self.artists:
            key = a.name.casefold()
            if not a.name or key in seen:
                continue
            seen.add(key)
            names.append(a.name)
        return ", ".join(names)

    @property
    def duration_text(self) -> str:
        if not isinstance(self.duration_ms, int):
            return ""
        total = self.duration_ms // 1000
        return f"{total // 60}:{total % 60:02d}"


@dataclass(frozen=True)
class Playlist:
    id: Optional[str]
    name: str
    uri: Optional[str] = None
    owner: Optional[str] = None
    description: Optional[str] = None
    public: Optional[bool] = None
    tracks_total: Optional[int] = None
    images: List[Image] = field(default_factory=list, hash=False)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    @_parses("playlist")
    def from_json(cls, payload: Any) -> "Playlist":
        payload = _require_object(payload, "playlist")
        owner = _dict(payload.get("owner"))
        return cls(
            id=payload.get("id"),
            name=str(payload.get("name") or ""),
            uri=payload.get("uri"),
            owner=owner.get("display_name") or owner.get("id"),
            description=payload.get("description"),
            public=payload.get("public"),
            tracks_total=_dict(payload.get("tracks")).get("total"),
            images=_images(payload.get("images")),
            raw=payload,
        )


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    icons: List[Image] = field(default_factory=list, hash=False)

    @classmethod
    @_parses("category")
    def from_json(cls, payload: Any) -> "Category":
        payload = _require_object(payload, "category")
        return cls(id=str(payload.get("id") or ""), name=str(payload.get("name") or ""), icons=_images(payload.get("icons")))


@dataclass(frozen=True)
class SearchResults:
    tracks: List[Track] = field(default_factory=list, hash=False)
    artists: List[Artist] = field(default_factory=list, hash=False)
    albums: List[Album] = field(default_factory=list, hash=False)
    playlists: List[Playlist] = field(default_factory=list, hash=False)

    def is_empty(self) -> bool:
        return not (self.tracks or self.artists or self.albums or self.playlists)
