"""
Domain value objects for the discography content graph.

Value objects are immutable and defined by their attributes. Every parser in
this module raises FormatError on malformed input instead of guessing.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, fields
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..exceptions import FormatError


class AudioCodec(Enum):
    """Distributable audio codecs and their transcoder profiles."""
    MP3 = "mp3"
    FLAC = "flac"

    @property
    def ext(self) -> str:
        return self.value

    def transcoder_args(self, input_path: str, output_path: str) -> List[str]:
        """Arguments for ffmpeg; source metadata is always stripped."""
        if self is AudioCodec.MP3:
            codec_args = ["-codec:a", "libmp3lame", "-b:a", "320k"]
        else:
            codec_args = ["-codec:a", "flac", "-compression_level", "8"]
        return ["-y", "-i", input_path, *codec_args, "-map_metadata", "-1", output_path]


class Genre(Enum):
    """Genres a release may be filed under."""
    ELECTRONIC = "Electronic"
    POP = "Pop"
    DOWNTEMPO = "Downtempo"
    DANCE = "Dance"
    AMBIENT = "Ambient"
    JAZZ = "Jazz"

    @classmethod
    def from_name(cls, name: str) -> Genre:
        try:
            return cls(name)
        except ValueError:
            raise FormatError(f'Unrecognized genre "{name}"')

    def __str__(self) -> str:
        return self.value


_MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
_DATE_PATTERN = re.compile(r"(\d{4})-(\d{2})-(\d{2})", re.ASCII)


def parse_release_date(text: str) -> date:
    """Parse a strict YYYY-MM-DD release date."""
    match = _DATE_PATTERN.fullmatch(text)
    if not match:
        raise FormatError(f'Date must be in YYYY-MM-DD format: "{text}"')
    year, month, day = (int(part) for part in match.groups())
    try:
        parsed = date(year, month, day)
    except ValueError:
        raise FormatError(f"Date {text} is invalid")
    if year <= 1582:
        raise FormatError(f"Date {text} possibly predates the Gregorian calendar")
    return parsed


def format_display_date(value: date) -> str:
    """Format a date like "Jan 5 2023"."""
    return f"{_MONTH_ABBREVIATIONS[value.month - 1]} {value.day} {value.year}"


def format_duration(total_seconds: int) -> str:
    """Format a duration like "3m05s" or "1h02m03s"."""
    hours = total_seconds // 3600
    minutes = (total_seconds // 60) % 60
    seconds = total_seconds % 60
    if hours > 0:
        return f"{hours}h{minutes:02d}m{seconds:02d}s"
    return f"{minutes}m{seconds:02d}s"


_SLUG_SEPARATORS = frozenset("-_/")
_HYPHEN_RUNS = re.compile(r"-+")


def slugify(text: str) -> str:
    """Derive a URL-safe slug.

    Diacritics are stripped after NFKD normalization, separators become
    hyphens, remaining punctuation and symbols are dropped, and anything left
    outside ``[a-z0-9-]`` is removed. The result is a fixed point:
    ``slugify(slugify(x)) == slugify(x)``.
    """
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c)).lower()

    kept = []
    for character in stripped:
        if character.isspace() or character in _SLUG_SEPARATORS:
            kept.append("-")
        elif unicodedata.category(character)[0] in ("P", "S"):
            continue
        else:
            kept.append(character)

    ascii_only = "".join(kept).encode("ascii", "ignore").decode("ascii")
    ascii_only = re.sub(r"[^a-z0-9-]", "", ascii_only)
    return _HYPHEN_RUNS.sub("-", ascii_only).strip("-")


def compute_slug(artist: str, title: str, primary_artist: str) -> str:
    """Slug for a record; the primary artist's name is left out."""
    if artist == primary_artist:
        return slugify(title)
    return slugify(f"{artist} {title}")


_FORBIDDEN_FILENAME_CHARACTERS = re.compile(r'[<>.:"/\\|?*\x00-\x1F]')
_WHITESPACE_RUNS = re.compile(r"\s+")
_RESERVED_FILENAMES = frozenset([
    "CON", "PRN", "AUX", "NUL",
    "COM1", "COM2", "COM3", "COM4", "COM5", "COM6", "COM7", "COM8", "COM9",
    "LPT1", "LPT2", "LPT3", "LPT4", "LPT5", "LPT6", "LPT7", "LPT8", "LPT9",
    "CONIN$", "CONOUT$",
])


def public_filename(title: str) -> str:
    """Make a display title safe to use as a filename on any platform."""
    cleaned = _FORBIDDEN_FILENAME_CHARACTERS.sub("", title)
    cleaned = _WHITESPACE_RUNS.sub(" ", cleaned)
    cleaned = cleaned.strip().rstrip(".")
    if cleaned.upper() in _RESERVED_FILENAMES:
        cleaned += "_"
    return cleaned


def require_trimmed(value: str, label: str) -> str:
    """Reject strings with leading or trailing whitespace."""
    if value.strip() != value:
        raise FormatError(f'{label} has leading/trailing whitespace: "{value}"')
    return value


class PaletteMode(Enum):
    """How page chrome is drawn on top of a palette."""
    NORMAL = "normal"
    WHITE = "white"
    BLACK = "black"


@dataclass(frozen=True, slots=True)
class Palette:
    """Color palette reference. Contrast rules live with the page renderer."""
    foreground: str
    background: str
    accent: str
    mode: PaletteMode = PaletteMode.NORMAL

    @classmethod
    def from_document(cls, obj: Dict[str, Any]) -> Palette:
        """Build from a schema-checked ``color`` object."""
        mode = PaletteMode(obj["mode"]) if "mode" in obj else PaletteMode.NORMAL
        return cls(
            foreground=obj["fg"].lower(),
            background=obj["bg"].lower(),
            accent=obj["acc"].lower(),
            mode=mode,
        )


# Document label -> LinkSet field, in display order. "YouTube" is special-cased.
LINK_LABELS: Tuple[Tuple[str, str], ...] = (
    ("Bandcamp", "bandcamp"),
    ("YouTube", "youtube_video"),
    ("YouTube", "youtube_playlist"),
    ("YouTube Full Mix", "youtube_full_mix"),
    ("Apple Music", "apple_music"),
    ("Spotify", "spotify"),
    ("Soundcloud", "soundcloud"),
    ("Amazon Music", "amazon_music"),
    ("iHeartRadio", "iheartradio"),
    ("Tencent Music", "tencent_music"),
)


@dataclass(frozen=True, slots=True)
class LinkSet:
    """External links for a release.

    A ``YouTube`` link is a playlist on albums and a video on songs.
    """
    bandcamp: Optional[str] = None
    youtube_video: Optional[str] = None
    youtube_playlist: Optional[str] = None
    youtube_full_mix: Optional[str] = None
    apple_music: Optional[str] = None
    spotify: Optional[str] = None
    soundcloud: Optional[str] = None
    amazon_music: Optional[str] = None
    iheartradio: Optional[str] = None
    tencent_music: Optional[str] = None

    @classmethod
    def from_document(cls, obj: Dict[str, str], is_album: bool) -> LinkSet:
        """Build from a schema-checked ``url`` object."""
        kwargs = {}
        for label, attribute in LINK_LABELS:
            if label == "YouTube":
                continue
            if label in obj:
                kwargs[attribute] = obj[label]
        if "YouTube" in obj:
            kwargs["youtube_playlist" if is_album else "youtube_video"] = obj["YouTube"]
        return cls(**kwargs)

    def items(self) -> List[Tuple[str, str]]:
        """(label, url) pairs in display order."""
        pairs = []
        for label, attribute in LINK_LABELS:
            url = getattr(self, attribute)
            if url is not None:
                pairs.append((label, url))
        return pairs

    def merged_with(self, parent: Optional[LinkSet]) -> LinkSet:
        """Fill gaps from a parent's links; own links win.

        An own video suppresses an inherited playlist and vice versa, so a
        release never shows two YouTube links.
        """
        if parent is None:
            return self
        kwargs = {}
        for f in fields(self):
            own = getattr(self, f.name)
            kwargs[f.name] = own if own is not None else getattr(parent, f.name)
        if self.youtube_video is None and self.youtube_playlist is not None:
            kwargs["youtube_video"] = None
        if self.youtube_playlist is None and self.youtube_video is not None:
            kwargs["youtube_playlist"] = None
        return LinkSet(**kwargs)

    def __bool__(self) -> bool:
        return bool(self.items())
