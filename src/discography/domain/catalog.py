"""Catalog loading: document ingestion and whole-catalog validation."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, TypeVar

from ..exceptions import FormatError, IntegrityError, MissingSourceError
from ..models.config import WorkspaceConfig
from .entities import Album, Assist, Song
from .schema import check_record

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Catalog:
    """Validated, immutable content graph."""
    albums: Tuple[Album, ...]
    remixes: Tuple[Song, ...]
    assists: Tuple[Assist, ...]

    def songs(self) -> Iterator[Song]:
        """Every song: album tracks in album order, then remixes."""
        for album in self.albums:
            yield from album.songs
        yield from self.remixes

    def album_of(self, song: Song) -> Optional[Album]:
        return song.album_of(self.albums)

    def find(self, slug: str) -> Optional[Any]:
        """Look up an album, song or assist by slug."""
        for album in self.albums:
            if album.slug == slug:
                return album
        for song in self.songs():
            if song.slug == slug:
                return song
        for assist in self.assists:
            if assist.slug == slug:
                return assist
        return None

    def find_song(self, slug: str) -> Optional[Song]:
        """Look up a song by slug, including the lead song of a single."""
        for song in self.songs():
            if song.slug == slug:
                return song
        return None

    @property
    def song_count(self) -> int:
        return sum(1 for _ in self.songs())


class _SlugRegistry:
    """Tracks claimed slugs; the empty slug is reserved for the index page."""

    def __init__(self) -> None:
        self._owners: Dict[str, str] = {"": "the index page"}

    def claim(self, slug: str, owner: str) -> None:
        if slug in self._owners:
            raise IntegrityError(
                f'{owner} has slug "{slug}", already used by {self._owners[slug]}'
            )
        self._owners[slug] = owner


def _validate_remixes(remixes: Sequence[Song]) -> None:
    for remix in remixes:
        if remix.bonus:
            raise IntegrityError(f"Remix {remix.format_title()} must not be marked as a bonus track")
        if remix.artwork is not None:
            raise IntegrityError(f"Remix {remix.format_title()} must not have artwork")


def _validate_album(album: Album) -> None:
    for song in album.songs:
        if song.event:
            raise IntegrityError(f"Album track {song.format_title()} must not be marked as an event")
    if album.songs[0].bonus:
        raise IntegrityError(f"First track of {album.format_title()} must not be a bonus track")
    for current, following in zip(album.songs, album.songs[1:]):
        if current.bonus and not following.bonus:
            raise IntegrityError(
                f"Bonus track {current.format_title()} is followed by "
                f"non-bonus track {following.format_title()}"
            )
    if not album.unreleased:
        for song in album.songs:
            if song.unreleased:
                raise IntegrityError(
                    f"Album {album.format_title()} has unreleased song {song.format_title()}"
                )
    if album.single:
        lead = album.songs[0]
        if lead.title != album.title or lead.artist != album.artist:
            raise IntegrityError(
                f"Single {album.format_title()} must share title and artist with "
                f"its first song {lead.format_title()}"
            )
        for song in album.songs[2:]:
            if not song.bonus:
                raise IntegrityError(
                    f"Additional track {song.format_title()} in single "
                    f"{album.format_title()} must be marked as bonus"
                )


def _check_slugs(albums: Sequence[Album], remixes: Sequence[Song],
                 assists: Sequence[Assist]) -> None:
    registry = _SlugRegistry()
    for album in albums:
        registry.claim(album.slug, f"Album {album.format_title()}")
        # A single's lead song lives on the album's page
        songs = album.songs[1:] if album.single else album.songs
        for song in songs:
            registry.claim(song.slug, f"Song {song.format_title()}")
    for remix in remixes:
        registry.claim(remix.slug, f"Remix {remix.format_title()}")
    for assist in assists:
        registry.claim(assist.slug, f"Assist {assist.format_title()}")


def _release_ordered(items: Sequence[T], dates: List[date], label: str) -> Tuple[T, ...]:
    """Return items ascending by release date, reversing a descending list."""
    ascending = all(a <= b for a, b in zip(dates, dates[1:]))
    if ascending:
        return tuple(items)
    descending = all(a >= b for a, b in zip(dates, dates[1:]))
    if descending:
        logger.debug(f"{label} are listed newest first; reversing")
        return tuple(reversed(items))
    raise IntegrityError(f"{label} must be ordered by release date")


def _wire_parents(albums: Sequence[Album]) -> Tuple[Album, ...]:
    wired = []
    for album_index, album in enumerate(albums):
        songs = tuple(
            replace(song, album_index=album_index, position=position)
            for position, song in enumerate(album.songs)
        )
        wired.append(replace(album, songs=songs))
    return tuple(wired)


def check_source_audio(catalog: Catalog, config: WorkspaceConfig) -> None:
    """Verify that every song has its source audio on disk."""
    for song in catalog.songs():
        path = song.source_audio_path(catalog.albums, config)
        if not path.exists():
            raise MissingSourceError(f"Audio source for {song.format_title()} is missing: {path}")


def build_catalog(document: Dict[str, Any], config: WorkspaceConfig) -> Catalog:
    """Build and validate the catalog from a parsed document.

    Args:
        document: Parsed JSON document
        config: Workspace configuration

    Returns:
        Validated catalog with all lists ascending by release date

    Raises:
        SchemaError, FormatError, IntegrityError, MissingSourceError
    """
    check_record(document, "document")

    remixes = [Song.build(doc, None, config) for doc in document["remixes"]]
    albums = [Album.build(doc, config) for doc in document["albums"]]
    assists = [Assist.build(doc) for doc in document["assists"]]

    _validate_remixes(remixes)
    for album in albums:
        _validate_album(album)
    _check_slugs(albums, remixes, assists)

    ordered_albums = _release_ordered(albums, [a.released for a in albums], "Albums")
    ordered_remixes = _release_ordered(remixes, [r.released for r in remixes], "Remixes")
    ordered_assists = _release_ordered(assists, [a.released for a in assists], "Assists")

    catalog = Catalog(
        albums=_wire_parents(ordered_albums),
        remixes=ordered_remixes,
        assists=ordered_assists,
    )
    logger.info(
        f"Loaded {len(catalog.albums)} albums, {len(catalog.remixes)} remixes "
        f"and {len(catalog.assists)} assists"
    )
    return catalog


def load_catalog(path: Path, config: WorkspaceConfig, check_sources: bool = False) -> Catalog:
    """Read the discography document and build the catalog.

    Raises:
        MissingSourceError: If the document (or, with check_sources, any audio source) is missing
        FormatError: If the document is not valid JSON
    """
    logger.info(f"Parsing {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except FileNotFoundError:
        raise MissingSourceError(f"Discography document does not exist: {path}")
    except UnicodeDecodeError as e:
        raise FormatError(f"{path} is not valid UTF-8: {e}")
    except json.JSONDecodeError as e:
        raise FormatError(f"{path} is invalid JSON: {e}")

    catalog = build_catalog(document, config)
    if check_sources:
        check_source_audio(catalog, config)
    return catalog
