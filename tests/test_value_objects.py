"""Tests for domain value objects."""

from datetime import date

import pytest

from discography.domain.languages import language_from_code
from discography.domain.value_objects import (
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
from discography.exceptions import FormatError


class TestSlugify:
    """Test slug derivation."""

    @pytest.mark.parametrize("text,expected", [
        ("Hello World", "hello-world"),
        ("Café Noir", "cafe-noir"),
        ("Rock & Roll", "rock-roll"),
        ("AC/DC", "ac-dc"),
        ("snake_case_title", "snake-case-title"),
        ("  --Spaced   Out--  ", "spaced-out"),
        ("Don't Stop (Remix)", "dont-stop-remix"),
        ("Astro – Nebula", "astro-nebula"),
        ("東京", ""),
    ])
    def test_examples(self, text, expected):
        assert slugify(text) == expected

    def test_compute_slug_omits_primary_artist(self):
        assert compute_slug("Astro", "Nebula", "Astro") == "nebula"

    def test_compute_slug_includes_other_artist(self):
        assert compute_slug("Someone Else", "Nebula", "Astro") == "someone-else-nebula"


class TestReleaseDates:
    """Test release date parsing and display."""

    def test_parse_valid(self):
        assert parse_release_date("2023-01-05") == date(2023, 1, 5)

    @pytest.mark.parametrize("text", ["2023-1-5", "2023/01/05", "20230105", " 2023-01-05", "2023-01-05x"])
    def test_rejects_bad_shape(self, text):
        with pytest.raises(FormatError, match="YYYY-MM-DD"):
            parse_release_date(text)

    def test_rejects_impossible_date(self):
        with pytest.raises(FormatError, match="invalid"):
            parse_release_date("2023-02-30")

    def test_rejects_pre_gregorian(self):
        with pytest.raises(FormatError, match="Gregorian"):
            parse_release_date("1500-01-01")

    def test_display_form(self):
        assert format_display_date(date(2023, 1, 5)) == "Jan 5 2023"
        assert format_display_date(date(1999, 12, 31)) == "Dec 31 1999"


class TestFormatDuration:
    """Test duration formatting."""

    @pytest.mark.parametrize("seconds,expected", [
        (0, "0m00s"),
        (185, "3m05s"),
        (3599, "59m59s"),
        (3723, "1h02m03s"),
    ])
    def test_examples(self, seconds, expected):
        assert format_duration(seconds) == expected


class TestPublicFilename:
    """Test filesystem-safe title cleaning."""

    def test_strips_forbidden_characters(self):
        assert public_filename('What? No: "Way" <3 / 4') == "What No Way 3 4"

    def test_trims_dots_and_whitespace(self):
        assert public_filename("  Ellipsis...  ") == "Ellipsis"

    def test_collapses_whitespace(self):
        assert public_filename("A \t  B") == "A B"

    @pytest.mark.parametrize("title", ["CON", "nul", "Com1", "LPT9"])
    def test_reserved_names_get_suffix(self, title):
        assert public_filename(title) == f"{title}_"


class TestGenre:
    """Test the genre table."""

    def test_known_genre(self):
        assert Genre.from_name("Downtempo") is Genre.DOWNTEMPO
        assert str(Genre.JAZZ) == "Jazz"

    def test_unknown_genre(self):
        with pytest.raises(FormatError, match="Polka"):
            Genre.from_name("Polka")


class TestAudioCodec:
    """Test transcoder profiles."""

    def test_mp3_profile(self):
        args = AudioCodec.MP3.transcoder_args("in.flac", "out.mp3")
        assert args == [
            "-y", "-i", "in.flac", "-codec:a", "libmp3lame", "-b:a", "320k",
            "-map_metadata", "-1", "out.mp3",
        ]

    def test_flac_profile(self):
        args = AudioCodec.FLAC.transcoder_args("in.flac", "out.flac")
        assert "-compression_level" in args
        assert args[args.index("-compression_level") + 1] == "8"
        assert args[-3:] == ["-map_metadata", "-1", "out.flac"]


class TestPalette:
    """Test palette parsing."""

    def test_from_document(self):
        palette = Palette.from_document({"fg": "#FFFFFF", "bg": "#000000", "acc": "#AbCdEf", "mode": "white"})
        assert palette.foreground == "#ffffff"
        assert palette.accent == "#abcdef"
        assert palette.mode is PaletteMode.WHITE

    def test_default_mode(self):
        palette = Palette.from_document({"fg": "#111111", "bg": "#222222", "acc": "#333333"})
        assert palette.mode is PaletteMode.NORMAL


class TestLinkSet:
    """Test external link sets."""

    def test_youtube_is_playlist_on_albums(self):
        links = LinkSet.from_document({"YouTube": "https://youtube.com/playlist"}, is_album=True)
        assert links.youtube_playlist == "https://youtube.com/playlist"
        assert links.youtube_video is None

    def test_youtube_is_video_on_songs(self):
        links = LinkSet.from_document({"YouTube": "https://youtu.be/x"}, is_album=False)
        assert links.youtube_video == "https://youtu.be/x"

    def test_items_in_display_order(self):
        links = LinkSet.from_document(
            {"Spotify": "https://s", "Bandcamp": "https://b", "YouTube Full Mix": "https://m"},
            is_album=False,
        )
        assert [label for label, _ in links.items()] == ["Bandcamp", "YouTube Full Mix", "Spotify"]

    def test_merge_prefers_own_links(self):
        parent = LinkSet(bandcamp="https://album", spotify="https://album-spotify")
        own = LinkSet(bandcamp="https://track")
        merged = own.merged_with(parent)
        assert merged.bandcamp == "https://track"
        assert merged.spotify == "https://album-spotify"

    def test_merge_never_mixes_video_with_inherited_playlist(self):
        parent = LinkSet(youtube_playlist="https://playlist")
        own = LinkSet(youtube_video="https://video")
        merged = own.merged_with(parent)
        assert merged.youtube_video == "https://video"
        assert merged.youtube_playlist is None

    def test_merge_inherits_playlist_without_own_video(self):
        parent = LinkSet(youtube_playlist="https://playlist")
        merged = LinkSet().merged_with(parent)
        assert merged.youtube_playlist == "https://playlist"

    def test_empty_is_falsy(self):
        assert not LinkSet()
        assert LinkSet(spotify="https://s")


class TestLanguages:
    """Test the language table."""

    def test_lookup_by_either_code(self):
        assert language_from_code("en") == language_from_code("eng")
        assert language_from_code("en").name == "English"

    def test_constructed_languages(self):
        assert language_from_code("tok").name == "Toki Pona"
        assert language_from_code("jbo").name == "Lojban"

    def test_unknown_code(self):
        with pytest.raises(FormatError, match="xx"):
            language_from_code("xx")
