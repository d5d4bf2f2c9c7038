"""
Domain Layer - Discography

Typed records for the content graph (albums, songs, assists), the lyrics
engine, and the catalog loader that validates the whole graph.
"""

from .catalog import Catalog, build_catalog, check_source_audio, load_catalog
from .entities import Album, Assist, Song, Titlable
from .languages import Language, language_from_code
from .lyrics import LyricLine, Lyrics, TextCodec, load_lyrics
from .value_objects import (
    AudioCodec,
    Genre,
    LinkSet,
    Palette,
    PaletteMode,
    compute_slug,
    format_display_date,
    format_duration,
    parse_release_date,
    public_filename,
    slugify,
)

__all__ = [
    "Catalog",
    "build_catalog",
    "check_source_audio",
    "load_catalog",
    "Album",
    "Assist",
    "Song",
    "Titlable",
    "Language",
    "language_from_code",
    "LyricLine",
    "Lyrics",
    "TextCodec",
    "load_lyrics",
    "AudioCodec",
    "Genre",
    "LinkSet",
    "Palette",
    "PaletteMode",
    "compute_slug",
    "format_display_date",
    "format_duration",
    "parse_release_date",
    "public_filename",
    "slugify",
]
