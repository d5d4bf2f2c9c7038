"""Domain entities for the discography content graph.

Albums, Songs and Assists are built once from schema-checked document
objects. Every inherited field is resolved at construction, so the records
are flat and frozen afterwards. Songs point at their parent album by
``(album_index, position)`` rather than by reference.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from ..exceptions import FormatError, IntegrityError, SchemaError
from ..models.config import WorkspaceConfig
from .lyrics import Lyrics, load_lyrics
from .schema import check_record
from .value_objects import (
    AudioCodec,
    Genre,
    LinkSet,
    Palette,
    compute_slug,
    format_display_date,
    format_duration,
    parse_release_date,
    public_filename,
    require_trimmed,
    slugify,
)

_ARTWORK_NAME_PATTERN = re.compile(r"[a-z0-9-]+", re.ASCII)
_ISRC_PATTERN = re.compile(r"[A-Z]{2}[A-Za-z0-9]{3}[0-9]{7}", re.ASCII)
_UPC_PATTERN = re.compile(r"[0-9]{12}", re.ASCII)


def _required_text(doc: Dict[str, Any], key: str, kind: str) -> str:
    value = require_trimmed(doc[key], f"{kind} {key}")
    if not value:
        raise FormatError(f"{kind} {key} must not be empty")
    return value


def _optional_text(doc: Dict[str, Any], key: str, kind: str) -> Optional[str]:
    if key not in doc:
        return None
    return require_trimmed(doc[key], f"{kind} {key}")


class Titlable(ABC):
    """Shared surface of everything with its own page and download."""

    title: str
    artist: str
    slug: str
    released: date
    length: int
    genre: Genre
    palette: Palette
    links: LinkSet
    unreleased: bool
    credited_to_primary: bool

    @property
    @abstractmethod
    def is_event(self) -> bool:
        """Whether this is a DJ set or live mix."""

    @property
    @abstractmethod
    def artwork_name(self) -> Optional[str]:
        """Artwork source name, or None to use the fallback artwork."""

    @abstractmethod
    def description(self, albums: Sequence[Album]) -> str:
        """One-line summary shown on pages and feeds."""

    @abstractmethod
    def download_path(self, codec: AudioCodec, config: WorkspaceConfig) -> Path:
        """Local path of the distributable artifact."""

    @property
    def dash(self) -> str:
        return "@" if self.is_event else "–"

    def format_title(self) -> str:
        return f"{self.artist} {self.dash} {self.title}"

    def short_title(self) -> str:
        if self.credited_to_primary and not self.is_event:
            return self.title
        return f"{self.artist} {self.dash} {self.title}"

    @property
    def public_filename(self) -> str:
        return public_filename(self.format_title())

    @property
    def display_date(self) -> str:
        return format_display_date(self.released)

    @property
    def duration(self) -> str:
        return format_duration(self.length)

    def download_url(self, codec: AudioCodec, config: WorkspaceConfig) -> Optional[str]:
        filename = self.download_path(codec, config).name
        return f"{config.site.audio_url.rstrip('/')}/{codec.ext}/{filename}"

    def download_size(self, codec: AudioCodec, config: WorkspaceConfig) -> Optional[int]:
        """Byte size of the built artifact, or None when it does not exist yet."""
        path = self.download_path(codec, config)
        if not path.exists():
            return None
        return path.stat().st_size

    def page_url(self, config: WorkspaceConfig) -> str:
        return config.page_url(self.slug)


@dataclass(frozen=True)
class Song(Titlable):
    """A song, either a track on an album or a standalone remix or mix."""

    title: str
    artist: str
    slug: str
    released: date
    released_as_single: bool
    length: int
    genre: Genre
    palette: Palette
    links: LinkSet
    credited_to_primary: bool
    bonus: bool = False
    event: bool = False
    unreleased: bool = False
    artwork: Optional[str] = None
    isrc: Optional[str] = None
    lyrics: Optional[Lyrics] = None
    samples: Tuple[str, ...] = ()
    about: Optional[str] = None
    album_index: Optional[int] = None
    position: Optional[int] = None

    @classmethod
    def build(cls, doc: Dict[str, Any], parent: Optional[Album],
              config: WorkspaceConfig) -> Song:
        """Build a song, resolving absent fields from the parent album.

        Raises:
            SchemaError: Bad key set, or a required field with no parent to inherit from
            FormatError: Malformed strings, dates or identifiers
            IntegrityError: An album track declaring its own genre
            MissingSourceError: Declared lyrics with no lyric source file
        """
        check_record(doc, "song")

        title = _required_text(doc, "title", "Song")
        if "artist" in doc:
            artist = _required_text(doc, "artist", "Song")
        elif parent is not None:
            artist = parent.artist
        else:
            artist = config.primary_artist
        slug = compute_slug(artist, title, config.primary_artist)

        if "released" in doc:
            released = parse_release_date(doc["released"])
        elif parent is not None:
            released = parent.released
        else:
            raise SchemaError(f'Song "{title}" has no "released" date and no parent album')

        if "color" in doc:
            palette = Palette.from_document(doc["color"])
        elif parent is not None:
            palette = parent.palette
        else:
            raise SchemaError(f'Song "{title}" has no "color" and no parent album')

        if parent is None:
            if "genre" not in doc:
                raise SchemaError(f'Song "{title}" must provide a genre for itself')
            genre = Genre.from_name(doc["genre"])
        elif "genre" in doc:
            raise IntegrityError(
                f'Song "{title}" on album "{parent.title}" must not specify its own genre'
            )
        else:
            genre = parent.genre

        artwork = doc.get("artwork")
        if artwork is None:
            artwork = parent.slug if parent is not None else None
        elif artwork is True:
            artwork = slug
        elif artwork is False:
            raise FormatError(f'Song "{title}" artwork must be a name or true')
        else:
            if not _ARTWORK_NAME_PATTERN.fullmatch(artwork):
                raise FormatError(
                    f'Invalid artwork name "{artwork}": use lowercase letters, digits and hyphens'
                )
            if artwork == slug:
                raise FormatError(
                    f'Artwork name "{artwork}" is the song\'s own slug; use true instead'
                )

        isrc = doc.get("isrc")
        if isrc is not None and not _ISRC_PATTERN.fullmatch(isrc):
            raise FormatError(f'Song "{title}" has an invalid ISRC: "{isrc}"')

        lyrics = None
        if doc.get("lyrics", False):
            lyrics = load_lyrics(config.lyrics_dir / f"{slug}.tsv", config.lyrics.max_line_length)

        samples = tuple(
            require_trimmed(sample, f'Song "{title}" sample') for sample in doc.get("samples", [])
        )

        if "unreleased" in doc:
            unreleased = doc["unreleased"]
        else:
            unreleased = parent.unreleased if parent is not None else False

        own_links = LinkSet.from_document(doc.get("url", {}), is_album=False)

        return cls(
            title=title,
            artist=artist,
            slug=slug,
            released=released,
            released_as_single="released" in doc,
            length=doc["length"],
            genre=genre,
            palette=palette,
            links=own_links.merged_with(parent.links if parent is not None else None),
            credited_to_primary=artist == config.primary_artist,
            bonus=doc.get("bonus", False),
            event=doc.get("event", False),
            unreleased=unreleased,
            artwork=artwork,
            isrc=isrc,
            lyrics=lyrics,
            samples=samples,
            about=_optional_text(doc, "about", f'Song "{title}"'),
        )

    @property
    def is_event(self) -> bool:
        return self.event

    @property
    def artwork_name(self) -> Optional[str]:
        return self.artwork

    @property
    def parent_album_indices(self) -> Optional[Tuple[int, int]]:
        if self.album_index is None:
            return None
        return self.album_index, self.position

    @property
    def track_number(self) -> Optional[int]:
        return None if self.position is None else self.position + 1

    def album_of(self, albums: Sequence[Album]) -> Optional[Album]:
        if self.album_index is None:
            return None
        return albums[self.album_index]

    def format_title(self) -> str:
        if self.album_index is None and self.credited_to_primary and not self.event:
            return self.title
        return super().format_title()

    def description(self, albums: Sequence[Album]) -> str:
        released = self.display_date
        album = self.album_of(albums)
        if album is None:
            if self.event:
                return f"DJ set for {self.title} on {released}, {self.duration}"
            return f"Remix released {released}, {self.duration}"
        if album.single:
            return f"Song released {released}, {self.duration}"
        return f"Track {self.track_number} on {album.title}, released {released}, {self.duration}"

    def download_path(self, codec: AudioCodec, config: WorkspaceConfig) -> Path:
        root = config.private_dir if self.bonus else config.public_dir
        return root / codec.ext / f"{self.slug}.{codec.ext}"

    def download_url(self, codec: AudioCodec, config: WorkspaceConfig) -> Optional[str]:
        """Public link to the artifact; bonus tracks are only shipped inside album downloads."""
        if self.bonus:
            return None
        return super().download_url(codec, config)

    def source_audio_path(self, albums: Sequence[Album], config: WorkspaceConfig) -> Path:
        album = self.album_of(albums)
        if album is None:
            return config.source_audio_dir / f"{self.slug}.flac"
        return config.source_audio_dir / album.slug / f"{self.slug}.flac"


@dataclass(frozen=True)
class Album(Titlable):
    """An ordered collection of songs released together."""

    title: str
    artist: str
    slug: str
    released: date
    length: int
    genre: Genre
    palette: Palette
    links: LinkSet
    credited_to_primary: bool
    songs: Tuple[Song, ...] = ()
    about: Optional[str] = None
    upc: Optional[str] = None
    bcid: Optional[str] = None
    single: bool = False
    compilation: bool = False
    unreleased: bool = False

    @classmethod
    def build(cls, doc: Dict[str, Any], config: WorkspaceConfig) -> Album:
        """Build an album and all of its songs.

        Raises:
            SchemaError: Bad key set on the album or any song
            FormatError: Malformed strings, dates or identifiers
            IntegrityError: An album with no songs
        """
        check_record(doc, "album")

        title = _required_text(doc, "title", "Album")
        artist = _required_text(doc, "artist", "Album") if "artist" in doc else config.primary_artist

        upc = doc.get("upc")
        if upc is not None and not _UPC_PATTERN.fullmatch(upc):
            raise FormatError(f'Album "{title}" UPC must be exactly 12 digits: "{upc}"')

        album = cls(
            title=title,
            artist=artist,
            slug=compute_slug(artist, title, config.primary_artist),
            released=parse_release_date(doc["released"]),
            length=doc["length"],
            genre=Genre.from_name(doc["genre"]),
            palette=Palette.from_document(doc["color"]),
            links=LinkSet.from_document(doc["url"], is_album=True),
            credited_to_primary=artist == config.primary_artist,
            about=_optional_text(doc, "about", f'Album "{title}"'),
            upc=upc,
            bcid=doc.get("bcid"),
            single=doc.get("single", False),
            compilation=doc.get("compilation", False),
            unreleased=doc.get("unreleased", False),
        )

        if not doc["songs"]:
            raise IntegrityError(f'Album "{title}" has no songs')
        songs = tuple(Song.build(song_doc, album, config) for song_doc in doc["songs"])
        return replace(album, songs=songs)

    @property
    def is_event(self) -> bool:
        return False

    @property
    def artwork_name(self) -> Optional[str]:
        return self.slug

    @property
    def non_bonus_song_count(self) -> int:
        return sum(1 for song in self.songs if not song.bonus)

    @property
    def bonus_song_count(self) -> int:
        return len(self.songs) - self.non_bonus_song_count

    def description(self, albums: Sequence[Album] = ()) -> str:
        return (
            f"Album released {self.display_date}, "
            f"{self.non_bonus_song_count} tracks, {self.duration}"
        )

    def download_path(self, codec: AudioCodec, config: WorkspaceConfig) -> Path:
        return config.public_dir / codec.ext / f"{self.slug}.zip"

    def copyright_message(self, config: WorkspaceConfig) -> str:
        name = self.artist
        if self.credited_to_primary and config.site.copyright_name:
            name = config.site.copyright_name
        return f"© {self.released.year} {name}"

    def readme_text(self, config: WorkspaceConfig) -> str:
        """Plain-text README bundled into the album download."""
        text = [self.format_title(), self.display_date]

        if self.about:
            text.extend(["", self.about])

        text.append("")
        for index, song in enumerate(self.songs):
            if not song.bonus:
                text.append(f"{index + 1}. {song.title}")

        if self.bonus_song_count:
            plural = "" if self.bonus_song_count == 1 else "s"
            text.extend(["", f"Bonus track{plural} included with digital download:", ""])
            for index, song in enumerate(self.songs):
                if song.bonus:
                    text.append(f"{index + 1}. {song.title}")

        text.extend(["", self.copyright_message(config)])
        if self.credited_to_primary and config.site.license:
            text.append(config.site.license)
        text.append("Thank you for downloading!")
        text.append(self.page_url(config))
        return "\n".join(text)


@dataclass(frozen=True)
class Assist:
    """A credited contribution to someone else's release."""

    titlable: str
    artwork: str
    url: str
    role: str
    released: date

    @classmethod
    def build(cls, doc: Dict[str, Any]) -> Assist:
        check_record(doc, "assist")
        titlable = _required_text(doc, "titlable", "Assist")
        artwork = require_trimmed(doc["artwork"], "Assist artwork")
        url = require_trimmed(doc["url"], "Assist url")
        role = require_trimmed(doc["role"], "Assist role")

        if not artwork.startswith("https://") or not artwork.endswith((".jpg", ".png")):
            raise FormatError(
                f'Assist artwork must start with https:// and end with .jpg or .png: "{artwork}"'
            )
        if not role:
            raise FormatError(f'Assist "{titlable}" has an empty role')
        if role[0].upper() != role[0]:
            raise FormatError(f'Assist role must start with an uppercase character: "{role}"')

        return cls(
            titlable=titlable,
            artwork=artwork,
            url=url,
            role=role,
            released=parse_release_date(doc["released"]),
        )

    @property
    def slug(self) -> str:
        return slugify(self.titlable)

    def format_title(self) -> str:
        return self.titlable

    @property
    def display_date(self) -> str:
        return format_display_date(self.released)
