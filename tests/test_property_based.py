"""Property-based tests for discography value objects and lyrics.

Uses Hypothesis to check invariants that must hold for any input.
"""

from __future__ import annotations

import re
from datetime import date

from hypothesis import given, strategies as st

from discography.domain.lyrics import Lyrics, TextCodec
from discography.domain.value_objects import (
    LinkSet,
    format_display_date,
    format_duration,
    parse_release_date,
    public_filename,
    slugify,
)
from discography.utils.formatting import format_file_size

_SLUG = re.compile(r"[a-z0-9]+(-[a-z0-9]+)*")


# ============================================================================
# Slugs and filenames
# ============================================================================

@given(st.text())
def test_slug_is_url_safe(text: str) -> None:
    """Slugs are empty or hyphen-separated lowercase ASCII words."""
    slug = slugify(text)
    assert slug == "" or _SLUG.fullmatch(slug)


@given(st.text())
def test_slugify_is_idempotent(text: str) -> None:
    slug = slugify(text)
    assert slugify(slug) == slug


@given(st.text(min_size=1))
def test_public_filename_has_no_forbidden_characters(title: str) -> None:
    name = public_filename(title)
    assert not any(c in name for c in '<>:"/\\|?*')
    assert name == name.strip()
    assert not name.endswith(".")


# ============================================================================
# Dates and durations
# ============================================================================

@given(st.dates(min_value=date(1583, 1, 1), max_value=date(9999, 12, 31)))
def test_release_date_round_trip(released: date) -> None:
    assert parse_release_date(released.isoformat()) == released


@given(st.dates(min_value=date(1583, 1, 1)))
def test_display_date_shape(released: date) -> None:
    assert re.fullmatch(r"[A-Z][a-z]{2} [0-9]{1,2} [0-9]{4}", format_display_date(released))


@given(st.integers(min_value=0, max_value=100 * 3600))
def test_duration_reads_back(seconds: int) -> None:
    match = re.fullmatch(r"(?:([0-9]+)h)?([0-9]+)m([0-9]{2})s", format_duration(seconds))
    assert match
    hours, minutes, secs = match.groups()
    assert int(hours or 0) * 3600 + int(minutes) * 60 + int(secs) == seconds
    if hours:
        assert len(minutes) == 2


@given(st.integers(min_value=0, max_value=2**50))
def test_file_size_has_unit(size: int) -> None:
    assert re.fullmatch(r"[0-9]+\.[0-9] (B|KB|MB|GB|TB|PB)", format_file_size(size))


# ============================================================================
# Links
# ============================================================================

_URLS = st.none() | st.just("https://example.com/x")


@given(_URLS, _URLS, _URLS, _URLS)
def test_merged_links_never_mix_video_and_playlist(own_video, own_playlist,
                                                   parent_video, parent_playlist) -> None:
    own = LinkSet(youtube_video=own_video, youtube_playlist=own_playlist)
    parent = LinkSet(youtube_video=parent_video, youtube_playlist=parent_playlist)
    merged = own.merged_with(parent)
    if own_video is not None and own_playlist is None:
        assert merged.youtube_playlist is None


# ============================================================================
# Lyrics
# ============================================================================

_WORDS = st.lists(
    st.sampled_from(["Love", "night", "Fire", "sky", "42", "rain", "Home"]),
    min_size=1,
    max_size=6,
).map(" ".join).filter(lambda text: text[0].isupper() or text[0].isdigit())


@st.composite
def lyric_sources(draw):
    """Valid lyric sources with increasing, non-overlapping timestamps."""
    stanza_sizes = draw(st.lists(st.integers(min_value=1, max_value=4), min_size=1, max_size=4))
    time_us = 0
    stanzas = []
    first = True
    for size in stanza_sizes:
        lines = []
        for _ in range(size):
            time_us += draw(st.integers(min_value=0, max_value=3_000_000))
            start = time_us
            time_us += draw(st.integers(min_value=1, max_value=5_000_000))
            fields = [f"{start / 1e6:.6f}", f"{time_us / 1e6:.6f}", draw(_WORDS)]
            if first:
                fields += ["language:en", "vocalist:Ana"]
                first = False
            elif draw(st.booleans()):
                fields.append(f"language:{draw(st.sampled_from(['de', 'fr']))}")
            lines.append("\t".join(fields))
        stanzas.append("\n".join(lines))
    return "\n\n".join(stanzas)


@given(lyric_sources())
def test_tsv_export_parses_to_equal_lyrics(source: str) -> None:
    lyrics = Lyrics.parse(source)
    assert Lyrics.parse(lyrics.render(TextCodec.TSV)) == lyrics


@given(lyric_sources())
def test_parsed_lines_are_ordered(source: str) -> None:
    lines = list(Lyrics.parse(source).lines())
    assert all(line.start_us < line.end_us for line in lines)
    assert all(a.end_us <= b.start_us for a, b in zip(lines, lines[1:]))


@given(lyric_sources())
def test_srt_cue_count_never_exceeds_lines(source: str) -> None:
    lyrics = Lyrics.parse(source)
    cues = [block for block in lyrics.render(TextCodec.SRT).split("\n\n") if block]
    assert 1 <= len(cues) <= lyrics.line_count


@given(lyric_sources())
def test_txt_keeps_stanza_structure(source: str) -> None:
    lyrics = Lyrics.parse(source)
    assert lyrics.render(TextCodec.TXT).count("\n\n") == lyrics.stanza_count - 1
