"""Synchronized lyrics: one canonical stanza/line model, many renderings.

Source lyrics are tab-separated text, one line per row and stanzas separated
by a blank line::

    12.000000<TAB>14.250000<TAB>Hello there<TAB>language:en<TAB>vocalist:Ana

Times are seconds with exactly six fractional digits and are held internally
as integer microseconds, so millisecond conversion is exact.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from ..exceptions import FormatError, MissingSourceError
from .languages import Language, language_from_code

logger = logging.getLogger(__name__)

_TIME_PATTERN = re.compile(r"(\d+)\.(\d{6})", re.ASCII)
_DISALLOWED_CHARACTERS = frozenset("–“”‘’()（）\r\t\n")
_KNOWN_TAGS = ("language", "vocalist")


class TextCodec(Enum):
    """Lyric rendering formats."""
    TXT = "txt"
    LRC = "lrc"
    SRT = "srt"
    VTT = "vtt"
    TSV = "tsv"

    @property
    def ext(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class LyricLine:
    """A single timed lyric line with its resolved language and vocalist."""
    start_us: int
    end_us: int
    text: str
    language: Language
    vocalist: str

    @property
    def start(self) -> float:
        return self.start_us / 1_000_000

    @property
    def end(self) -> float:
        return self.end_us / 1_000_000

    @property
    def start_ms(self) -> int:
        return _to_milliseconds(self.start_us)

    @property
    def end_ms(self) -> int:
        return _to_milliseconds(self.end_us)


def _to_milliseconds(microseconds: int) -> int:
    # Round half up
    return (microseconds + 500) // 1000


def _parse_time(raw: str, line: str) -> int:
    match = _TIME_PATTERN.fullmatch(raw)
    if not match:
        raise FormatError(f'Invalid timestamp "{raw}" in lyric line "{line}"')
    whole, fraction = match.groups()
    return int(whole) * 1_000_000 + int(fraction)


def _format_seconds(microseconds: int) -> str:
    return f"{microseconds // 1_000_000}.{microseconds % 1_000_000:06d}"


def _check_text(text: str, max_line_length: int) -> None:
    if not text:
        raise FormatError("Empty lyric line")
    if text.strip() != text:
        raise FormatError(f'Lyric line "{text}" has leading/trailing whitespace')
    bad = sorted({c for c in text if c in _DISALLOWED_CHARACTERS})
    if bad:
        raise FormatError(
            f'Lyric line "{text}" contains disallowed characters: {"".join(bad)!r}'
        )
    if len(text) > max_line_length:
        raise FormatError(
            f'Lyric line "{text}" is too long ({len(text)} > {max_line_length} characters)'
        )
    for character in text:
        if character.isalpha() or character in "0123456789":
            if character.isalpha() and character.upper() != character.lower() and not character.isupper():
                raise FormatError(
                    f'Lyric line "{text}" must start with a capitalized letter or digit'
                )
            break


def _parse_tags(fields: List[str], line: str) -> Tuple[Optional[Language], Optional[str]]:
    language: Optional[Language] = None
    vocalist: Optional[str] = None
    for field in fields:
        key, sep, value = field.partition(":")
        if not sep:
            raise FormatError(f'Lyric tag "{field}" is not key:value in line "{line}"')
        if key == "language":
            new_language = language_from_code(value)
            if language == new_language:
                raise FormatError(f'Redundant language:{value} tag in line "{line}"')
            language = new_language
        elif key == "vocalist":
            if value.strip() != value or not value:
                raise FormatError(f'Vocalist "{value}" must be non-empty and trimmed')
            if value.lower() == "unknown":
                logger.warning(f'Vocalist should not be "{value}" (line "{line}")')
            if vocalist == value:
                raise FormatError(f'Redundant vocalist:{value} tag in line "{line}"')
            vocalist = value
        else:
            raise FormatError(
                f'Unknown lyric tag "{key}" in line "{line}" (expected one of {", ".join(_KNOWN_TAGS)})'
            )
    return language, vocalist


def _wrap_two_lines(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    middle = len(text) // 2
    right = text.find(" ", middle)
    left = text.rfind(" ", 0, middle)
    if right != -1 and right - middle <= 20:
        split_at = right
    elif left != -1:
        split_at = left
    elif right != -1:
        split_at = right
    else:
        split_at = middle
    return f"{text[:split_at].strip()}\n{text[split_at:].strip()}"


def _srt_timestamp(milliseconds: int, separator: str = ",") -> str:
    hours, remainder = divmod(milliseconds, 3_600_000)
    minutes, remainder = divmod(remainder, 60_000)
    seconds, millis = divmod(remainder, 1000)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}{separator}{millis:03d}"


@dataclass(frozen=True)
class Lyrics:
    """Validated lyrics: a non-empty sequence of non-empty stanzas."""
    stanzas: Tuple[Tuple[LyricLine, ...], ...]

    @classmethod
    def parse(cls, text: str, max_line_length: int = 100) -> Lyrics:
        """Parse tab-separated lyric source text.

        The first line must carry both ``language`` and ``vocalist`` tags;
        later lines inherit them until overridden.

        Raises:
            FormatError: On any malformed line, tag, or timing
        """
        if text.strip() != text:
            raise FormatError("Lyric text has leading/trailing whitespace")

        last_language: Optional[Language] = None
        last_vocalist: Optional[str] = None
        stanzas = []

        for raw_stanza in text.replace("\r", "").split("\n\n"):
            lines = []
            for line in raw_stanza.split("\n"):
                if not line:
                    continue
                parts = line.split("\t")
                if len(parts) < 3:
                    raise FormatError(f'Lyric line "{line}" needs start, end and text fields')

                start_us = _parse_time(parts[0], line)
                end_us = _parse_time(parts[1], line)
                display = parts[2]
                _check_text(display, max_line_length)

                language, vocalist = _parse_tags(parts[3:], line)
                if language is not None:
                    last_language = language
                if vocalist is not None:
                    last_vocalist = vocalist
                if last_language is None:
                    raise FormatError(f'First lyric line "{line}" has no language tag')
                if last_vocalist is None:
                    raise FormatError(f'First lyric line "{line}" has no vocalist tag')

                lines.append(LyricLine(start_us, end_us, display, last_language, last_vocalist))

            if not lines:
                raise FormatError("Lyrics contain an empty stanza")
            stanzas.append(tuple(lines))

        lyrics = cls(tuple(stanzas))
        lyrics._check_timing()
        return lyrics

    def _check_timing(self) -> None:
        previous: Optional[LyricLine] = None
        for line in self.lines():
            if line.start_us >= line.end_us:
                raise FormatError(
                    f'Lyric line "{line.text}" starts at {line.start:.6f} but ends at {line.end:.6f}'
                )
            if previous is not None and previous.end_us > line.start_us:
                raise FormatError(
                    f'Lyric line "{previous.text}" ends after "{line.text}" starts '
                    f"({previous.end:.6f} > {line.start:.6f})"
                )
            previous = line

    def lines(self) -> Iterator[LyricLine]:
        for stanza in self.stanzas:
            yield from stanza

    @property
    def stanza_count(self) -> int:
        return len(self.stanzas)

    @property
    def line_count(self) -> int:
        return sum(len(stanza) for stanza in self.stanzas)

    def render(self, codec: TextCodec, merge_gap: float = 1.0, wrap_width: int = 50) -> str:
        """Render to one of the supported text formats."""
        return "".join(self.iter_render(codec, merge_gap, wrap_width))

    def iter_render(self, codec: TextCodec, merge_gap: float = 1.0,
                    wrap_width: int = 50) -> LyricRendering:
        """Lazy rendering: an iterable of text chunks that can be iterated repeatedly."""
        return LyricRendering(self, codec, merge_gap, wrap_width)

    def synchronized_lyrics(self) -> List[Tuple[int, str]]:
        """(millisecond offset, text) pairs, with an empty marker ending each stanza."""
        pairs = []
        for stanza in self.stanzas:
            for line in stanza:
                pairs.append((line.start_ms, line.text))
            pairs.append((stanza[-1].end_ms, ""))
        return pairs

    def most_common_language(self) -> Language:
        """Language with the most UTF-8 encoded text; first seen wins ties."""
        weights: Dict[Language, int] = {}
        for line in self.lines():
            weights[line.language] = weights.get(line.language, 0) + len(line.text.encode("utf-8"))
        return max(weights, key=weights.get)

    def vocalists(self) -> List[str]:
        """Distinct vocalists in order of appearance."""
        return list(dict.fromkeys(line.vocalist for line in self.lines()))

    # Chunk generators, one per codec

    def _chunks(self, codec: TextCodec, merge_gap: float, wrap_width: int) -> Iterator[str]:
        if codec is TextCodec.TXT:
            return self._stanza_chunks(lambda line: line.text)
        if codec is TextCodec.LRC:
            return self._stanza_chunks(_lrc_line)
        if codec is TextCodec.TSV:
            return self._stanza_chunks(_tsv_line)
        if codec is TextCodec.SRT:
            return self._cue_chunks(merge_gap, wrap_width, voiced=False)
        return self._cue_chunks(merge_gap, wrap_width, voiced=True)

    def _stanza_chunks(self, format_line) -> Iterator[str]:
        for index, stanza in enumerate(self.stanzas):
            if index:
                yield "\n\n"
            yield "\n".join(format_line(line) for line in stanza)

    def _cue_chunks(self, merge_gap: float, wrap_width: int, voiced: bool) -> Iterator[str]:
        lines = list(self.lines())
        gap_us = round(merge_gap * 1_000_000)
        separator = "." if voiced else ","
        if voiced:
            yield "WEBVTT\n\n"

        for index, line in enumerate(lines):
            end_us = line.end_us
            if index + 1 < len(lines):
                following = lines[index + 1]
                if following.start_us > line.start_us and following.start_us - end_us < gap_us:
                    end_us = following.start_us

            if index:
                yield "\n"
            text = _wrap_two_lines(line.text, wrap_width)
            timing = (
                f"{_srt_timestamp(line.start_ms, separator)} --> "
                f"{_srt_timestamp(_to_milliseconds(end_us), separator)}"
            )
            if voiced:
                yield f"{timing}\n<v {line.vocalist}>{text}\n"
            else:
                yield f"{index + 1}\n{timing}\n{text}\n"


def _lrc_line(line: LyricLine) -> str:
    total_ms = line.start_ms
    minutes = total_ms // 60_000
    seconds = (total_ms % 60_000) // 1000
    hundredths = (total_ms % 1000) // 10
    return f"[{minutes:02d}:{seconds:02d}.{hundredths:02d}] {line.text}"


def _tsv_line(line: LyricLine) -> str:
    return "\t".join([
        _format_seconds(line.start_us),
        _format_seconds(line.end_us),
        line.text,
        f"language:{line.language.iso_639_1}",
        f"vocalist:{line.vocalist}",
    ])


class LyricRendering:
    """Restartable iterable of rendered text chunks."""

    def __init__(self, lyrics: Lyrics, codec: TextCodec, merge_gap: float, wrap_width: int):
        self.lyrics = lyrics
        self.codec = codec
        self.merge_gap = merge_gap
        self.wrap_width = wrap_width

    def __iter__(self) -> Iterator[str]:
        return self.lyrics._chunks(self.codec, self.merge_gap, self.wrap_width)

    def __str__(self) -> str:
        return "".join(self)


def load_lyrics(path: Path, max_line_length: int = 100) -> Lyrics:
    """Read and parse a lyric source file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        raise MissingSourceError(f"Lyrics file does not exist: {path}")
    except UnicodeDecodeError as e:
        raise FormatError(f"{path} is not valid UTF-8: {e}")
    try:
        return Lyrics.parse(text, max_line_length)
    except FormatError as e:
        raise FormatError(f"{path}: {e}") from e
