import asyncio
import json
import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

from .auth import ClientCredentialsAuth
from .config import Configuration
from .errors import ApiError, ConfigError, IdError
from .ids import AlbumId, ArtistId, PlaylistId, TrackId
from .models import Album, Artist, Category, Market, Playlist, SearchResults, Track, _list_of_dicts
from .tokens import TokenInfo

logger = logging.getLogger(__name__)

PAGE_LIMIT = 50
MAX_TRACK_IDS = 50

SEARCH_TYPES = ("track", "artist", "album", "playlist")


def process_spotify_api_response(text: str) -> str:
    # Spotify occasionally sends "images": null where an array is documented.
    return text.replace('"images":null', '"images":[]').replace('"images": null', '"images": []')


def process_artist_albums(albums: List[Album]) -> List[Album]:
    """Sort albums newest first and drop repeated names (the newest one wins)."""

    ordered = sorted(albums, key=lambda a: a.release_date or "", reverse=True)

    seen = set()
    out: List[Album] = []
    for album in ordered:
        if album.name in seen:
            continue
        seen.add(album.name)
        out.append(album)
    return out


def _market_param(market: Optional[Market]) -> Optional[str]:
    return str(market) if market is not None else None


class Client:
    """Authenticated Spotify Web API client.

    Built by ClientHandler.client_new(). Every call is a single GET; nothing
    is paged, retried or cached. Use as an async context manager or call
    aclose() when done.
    """

    def __init__(self, config: Configuration, http: httpx.AsyncClient, token: TokenInfo):
        self.config = config
        self._http = http
        self._token = token
        self._auth = ClientCredentialsAuth(config)

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def api_base_url(self) -> str:
        return str(self.config.get("spotify_api_base_url")).rstrip("/")

    # -----------------
    # Token management
    # -----------------

    @property
    def token(self) -> TokenInfo:
        return self._token

    async def access_token(self) -> TokenInfo:
        """Return the current token, exchanging credentials again if it expired."""

        if self._token.is_expired():
            logger.info("Spotify token expired; requesting a new one")
            self._token = await self._auth.request_token(self._http)
        return self._token

    # -----------------
    # HTTP helpers
    # -----------------

    async def request_json(self, method: str, path: str, *, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Make a Spotify Web API request and return the parsed JSON object."""

        token = await self.access_token()

        url = path if path.startswith("http") else f"{self.api_base_url}{path}"
        query = {k: str(v) for k, v in (params or {}).items() if v is not None}

        headers = {
            "Authorization": token.authorization_header,
            "Accept": "application/json",
        }
        if self.config.get("spotify_language"):
            headers["Accept-Language"] = str(self.config.get("spotify_language"))

        logger.debug("%s %s %s", method.upper(), url, query)

        try:
            resp = await self._http.request(method.upper(), url, params=query, headers=headers)
        except httpx.HTTPError as e:
            raise ApiError(f"Spotify API request failed: {e}") from e

        body = process_spotify_api_response(resp.text)

        if resp.status_code >= 300:
            raise ApiError(
                f"Spotify API error {resp.status_code}: {_api_error_message(body)}",
                status=resp.status_code,
            )

        if not body:
            raise ApiError(f"Spotify API returned an empty body (status {resp.status_code})", status=resp.status_code)

        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            raise ApiError(f"Spotify API response was not JSON (status {resp.status_code}): {body}", status=resp.status_code) from e

        if not isinstance(payload, dict):
            raise ApiError(f"Spotify API response was not an object: {payload!r}", status=resp.status_code)

        return payload

    async def _get(self, path: str, **params: Any) -> Dict[str, Any]:
        return await self.request_json("GET", path, params=params)

    # -----------------
    # Tracks
    # -----------------

    async def track(self, id: TrackId, market: Optional[Market] = None) -> Track:
        track_id = _ensure_id(TrackId, id)
        payload = await self._get(f"/tracks/{track_id.id}", market=_market_param(market))
        return Track.from_json(payload)

    async def tracks(self, ids: Iterable[TrackId], market: Optional[Market] = None) -> List[Track]:
        track_ids = [_ensure_id(TrackId, i).id for i in ids]
        if not track_ids:
            return []
        if len(track_ids) > MAX_TRACK_IDS:
            raise ApiError(f"At most {MAX_TRACK_IDS} track ids per request, got {len(track_ids)}")

        payload = await self._get("/tracks", ids=",".join(track_ids), market=_market_param(market))
        # Unknown ids come back as null entries.
        return [Track.from_json(t) for t in _list_of_dicts(payload.get("tracks"))]

    # -----------------
    # Albums
    # -----------------

    async def album(self, id: AlbumId, market: Optional[Market] = None) -> Album:
        album_id = _ensure_id(AlbumId, id)
        payload = await self._get(f"/albums/{album_id.id}", market=_market_param(market))
        return Album.from_json(payload)

    async def album_tracks(self, id: AlbumId, market: Optional[Market] = None) -> List[Track]:
        """First page of an album's tracks, each carrying the parent album."""

        album = await self.album(id, market)
        return [Track.from_json(t, album=album) for t in _page_items(album.raw.get("tracks"))]

    # -----------------
    # Artists
    # -----------------

    async def artist(self, id: ArtistId) -> Artist:
        artist_id = _ensure_id(ArtistId, id)
        payload = await self._get(f"/artists/{artist_id.id}")
        return Artist.from_json(payload)

    async def artist_top_tracks(self, id: ArtistId, market: Optional[Market] = None) -> List[Track]:
        artist_id = _ensure_id(ArtistId, id)
        # The endpoint requires a country; app tokens have none to resolve from_token against.
        if market is None or market == Market.FROM_TOKEN:
            try:
                market = Market(self.config.get("spotify_market"))
            except ValueError as e:
                raise ConfigError(f"Invalid spotify_market setting: {self.config.get('spotify_market')!r}") from e
        payload = await self._get(f"/artists/{artist_id.id}/top-tracks", market=_market_param(market))
        return [Track.from_json(t) for t in _list_of_dicts(payload.get("tracks"))]

    async def artist_albums(self, id: ArtistId, market: Optional[Market] = None) -> List[Album]:
        """First page of singles and albums, newest first, duplicate names removed."""

        artist_id = _ensure_id(ArtistId, id)
        singles, albums = await asyncio.gather(
            self._get(
                f"/artists/{artist_id.id}/albums",
                include_groups="single",
                market=_market_param(market),
                limit=PAGE_LIMIT,
            ),
            self._get(
                f"/artists/{artist_id.id}/albums",
                include_groups="album",
                market=_market_param(market),
                limit=PAGE_LIMIT,
            ),
        )
        items = _page_items(albums) + _page_items(singles)
        return process_artist_albums([Album.from_json(a) for a in items])

    # -----------------
    # Playlists
    # -----------------

    async def playlist(self, id: PlaylistId, market: Optional[Market] = None) -> Playlist:
        playlist_id = _ensure_id(PlaylistId, id)
        payload = await self._get(f"/playlists/{playlist_id.id}", market=_market_param(market))
        return Playlist.from_json(payload)

    # -----------------
    # Search & browse
    # -----------------

    async def search_specific_type(self, query: str, search_type: str, market: Optional[Market] = None) -> Dict[str, Any]:
        """Raw first page for a single search type ({"items": [...], "total": ...})."""

        if search_type not in SEARCH_TYPES:
            raise ApiError(f"Unsupported search type: {search_type!r}")
        query = str(query or "").strip()
        if not query:
            raise ApiError("Search query is empty")

        payload = await self._get("/search", q=query, type=search_type, market=_market_param(market), limit=PAGE_LIMIT)
        page = payload.get(f"{search_type}s")
        if not isinstance(page, dict):
            raise ApiError(f"Expected a {search_type} search result, got: {sorted(payload)}")
        return page

    async def search(self, query: str, market: Optional[Market] = None) -> SearchResults:
        track_page, artist_page, album_page, playlist_page = await asyncio.gather(
            *(self.search_specific_type(query, t, market) for t in SEARCH_TYPES)
        )
        return SearchResults(
            tracks=[Track.from_json(t) for t in _page_items(track_page)],
            artists=[Artist.from_json(a) for a in _page_items(artist_page)],
            albums=[Album.from_json(a) for a in _page_items(album_page)],
            playlists=[Playlist.from_json(p) for p in _page_items(playlist_page)],
        )

    async def browse_categories(self, locale: Optional[str] = None) -> List[Category]:
        payload = await self._get("/browse/categories", locale=locale, limit=PAGE_LIMIT)
        return [Category.from_json(c) for c in _page_items(payload.get("categories"))]

    async def browse_category_playlists(self, category_id: str) -> List[Playlist]:
        category_id = str(category_id or "").strip()
        if not category_id:
            raise ApiError("Category id is empty")
        payload = await self._get(f"/browse/categories/{category_id}/playlists", limit=PAGE_LIMIT)
        return [Playlist.from_json(p) for p in _page_items(payload.get("playlists"))]


def _ensure_id(id_type, value):
    if isinstance(value, id_type):
        return value
    if isinstance(value, str):
        return id_type.from_id_or_uri(value)
    raise IdError(f"Expected {id_type.__name__}, got {type(value).__name__}")


def _page_items(page: Any) -> List[Dict[str, Any]]:
    if not isinstance(page, dict):
        return []
    # Search pages may contain null entries for removed objects.
    return _list_of_dicts(page.get("items"))


def _api_error_message(body: str) -> str:
    # Web API errors look like {"error": {"status": 404, "message": "..."}}
    try:
        payload = json.loads(body) if body else None
    except json.JSONDecodeError:
        return body
    if isinstance(payload, dict):
        err = payload.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str):
            return payload.get("error_description") or err
    return body
