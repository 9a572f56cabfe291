import asyncio
from typing import Optional

import questionary

from spotify_client import (
    AlbumId,
    ArtistId,
    ClientHandler,
    Configuration,
    Market,
    SpotifyError,
    TrackId,
)
from spotify_client.config import DEFAULT_SETTINGS
from spotify_client.models import Album, Artist, Track
from utils.logger import log_error, log_info, log_success, log_warning

LOOKUP_CHOICES = [
    "Look up a track",
    "Look up an album",
    "Look up an artist",
    "Search",
    "Back",
]


def build_configuration(config: dict) -> Configuration:
    """Create the library Configuration from the CLI settings' credential_source."""
    settings = {k: config.get(k) for k in DEFAULT_SETTINGS if k in config}
    source = config.get("credential_source", "pass")

    if source == "pass":
        return Configuration.from_pass(
            config.get("spotify_pass_client_id_key", ""),
            config.get("spotify_pass_client_secret_key", ""),
            settings=settings,
        )

    if source == "env":
        return Configuration.from_env(env_file=config.get("spotify_env_file") or None, settings=settings)

    return Configuration.from_settings(config)


def format_track(track: Track) -> str:
    lines = [
        f"🎵 {track.name}",
        f"   Artist(s): {track.artist_names or '-'}",
    ]
    if track.album is not None:
        album_line = f"   Album: {track.album.name}"
        if track.album.release_date:
            album_line += f" ({track.album.release_date})"
        lines.append(album_line)
    if track.duration_ms is not None:
        lines.append(f"   Duration: {track.duration_text}")
    if track.popularity is not None:
        lines.append(f"   Popularity: {track.popularity}")
    if track.isrc:
        lines.append(f"   ISRC: {track.isrc}")
    if track.uri:
        lines.append(f"   URI: {track.uri}")
    return "\n".join(lines)


def format_album(album: Album, tracks: list) -> str:
    lines = [
        f"💿 {album.name}",
        f"   Artist(s): {album.artist_names or '-'}",
        f"   Released: {album.release_date or '-'} | Tracks: {album.total_tracks if album.total_tracks is not None else '-'}",
    ]
    for t in tracks:
        number = f"{t.track_number:>2}." if t.track_number is not None else " -"
        lines.append(f"   {number} {t.name} [{t.duration_text}]")
    return "\n".join(lines)


def format_artist(artist: Artist, albums: list) -> str:
    lines = [f"🎤 {artist.name}"]
    if artist.genres:
        lines.append(f"   Genres: {', '.join(artist.genres)}")
    if artist.followers is not None:
        lines.append(f"   Followers: {artist.followers:,}")
    for a in albums:
        lines.append(f"   - {a.release_date or '????'} {a.name} ({a.album_type or 'album'})")
    return "\n".join(lines)


def _parse_market(value: Optional[str]) -> Optional[Market]:
    value = (value or "").strip()
    if not value:
        return None
    return Market(value)


async def _ask_market(config: dict) -> Optional[Market]:
    answer = await questionary.text(
        "Market (2-letter country code, blank for none):",
        default=str(config.get("spotify_market") or ""),
    ).ask_async()
    try:
        return _parse_market(answer)
    except ValueError as e:
        log_warning(f"{e}; continuing without a market.")
        return None


async def _lookup_track(client, config: dict) -> None:
    raw = await questionary.text("Track id, URI or open.spotify.com link:").ask_async()
    if not (raw or "").strip():
        return
    track_id = TrackId.from_id_or_uri(raw)
    market = await _ask_market(config)
    track = await client.track(track_id, market)
    print("\n" + format_track(track) + "\n")


async def _lookup_album(client, config: dict) -> None:
    raw = await questionary.text("Album id, URI or open.spotify.com link:").ask_async()
    if not (raw or "").strip():
        return
    album_id = AlbumId.from_id_or_uri(raw)
    market = await _ask_market(config)
    tracks = await client.album_tracks(album_id, market)
    album = tracks[0].album if tracks else await client.album(album_id, market)
    print("\n" + format_album(album, tracks) + "\n")


async def _lookup_artist(client, config: dict) -> None:
    raw = await questionary.text("Artist id, URI or open.spotify.com link:").ask_async()
    if not (raw or "").strip():
        return
    artist_id = ArtistId.from_id_or_uri(raw)
    artist, albums = await asyncio.gather(client.artist(artist_id), client.artist_albums(artist_id))
    print("\n" + format_artist(artist, albums) + "\n")


async def _search(client, config: dict) -> None:
    query = await questionary.text("Search for:").ask_async()
    if not (query or "").strip():
        return
    try:
        market = _parse_market(config.get("spotify_market"))
    except ValueError:
        market = None
    results = await client.search(query, market)
    if results.is_empty():
        log_info("No results.")
        return

    print(f"\nTracks ({len(results.tracks)}):")
    for t in results.tracks[:10]:
        print(f"  {t.artist_names} - {t.name}  [{t.id}]")
    print(f"\nArtists ({len(results.artists)}):")
    for a in results.artists[:5]:
        print(f"  {a.name}  [{a.id}]")
    print(f"\nAlbums ({len(results.albums)}):")
    for a in results.albums[:5]:
        print(f"  {a.artist_names} - {a.name}  [{a.id}]")
    print(f"\nPlaylists ({len(results.playlists)}):")
    for p in results.playlists[:5]:
        print(f"  {p.name} by {p.owner or '?'}  [{p.id}]")
    print()


ACTIONS = {
    "Look up a track": _lookup_track,
    "Look up an album": _lookup_album,
    "Look up an artist": _lookup_artist,
    "Search": _search,
}


async def lookup_session(config: dict, *, handler: Optional[ClientHandler] = None) -> None:
    """Authenticate once, then loop over lookups until the user goes back."""
    try:
        configuration = build_configuration(config)
        client = await (handler or ClientHandler.new()).client_new(configuration)
    except SpotifyError as e:
        log_error(f"Could not connect to Spotify: {e}")
        return

    log_success("Connected to Spotify")

    async with client:
        while True:
            choice = await questionary.select(
                "🔎 Lookup Menu — What would you like to do?",
                choices=LOOKUP_CHOICES,
            ).ask_async()

            if choice in ("Back", None):
                break

            action = ACTIONS.get(choice)
            if action is None:
                log_error("Invalid choice.")
                continue

            try:
                await action(client, config)
            except SpotifyError as e:
                log_error(str(e))


def lookup_menu(config: dict) -> None:
    asyncio.run(lookup_session(config))
