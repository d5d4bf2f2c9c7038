"""Shared fixtures for discography tests."""

import json
from pathlib import Path

import pytest
from PIL import Image

from discography.models.config import WorkspaceConfig

PRIMARY_ARTIST = "Astro"
PALETTE = {"fg": "#ffffff", "bg": "#101010", "acc": "#ff8800"}

LYRICS_TSV = (
    "0.000000\t1.500000\tHello\tlanguage:en\tvocalist:Ana\n"
    "1.500000\t2.000000\tAgain\n"
    "\n"
    "2.500000\t3.000000\tWorld"
)


def flac_bytes(sample_rate=44_100, bit_depth=16, total_samples=44_100 * 180, channels=2):
    """A FLAC file holding only a STREAMINFO block."""
    packed = (
        (sample_rate << 44)
        | ((channels - 1) << 41)
        | ((bit_depth - 1) << 36)
        | total_samples
    )
    streaminfo = (
        (4096).to_bytes(2, "big")
        + (4096).to_bytes(2, "big")
        + (0).to_bytes(3, "big")
        + (0).to_bytes(3, "big")
        + packed.to_bytes(8, "big")
        + bytes(16)
    )
    block_header = bytes([0x80]) + len(streaminfo).to_bytes(3, "big")
    return b"fLaC" + block_header + streaminfo


@pytest.fixture
def config(tmp_path):
    """Workspace configuration rooted in a temporary directory."""
    return WorkspaceConfig(root=tmp_path, primary_artist=PRIMARY_ARTIST)


@pytest.fixture
def make_song_doc():
    def make(title, length=180, **fields):
        return {"title": title, "length": length, **fields}
    return make


@pytest.fixture
def make_album_doc():
    def make(title, songs, released="2023-01-05", **fields):
        doc = {
            "title": title,
            "released": released,
            "genre": "Electronic",
            "length": sum(song["length"] for song in songs) or 1,
            "color": dict(PALETTE),
            "url": {"Bandcamp": f"https://astro.bandcamp.com/album/{title.lower()}"},
            "songs": songs,
        }
        doc.update(fields)
        return doc
    return make


@pytest.fixture
def make_remix_doc():
    def make(title, artist="Someone Else", released="2022-03-01", length=200, **fields):
        doc = {
            "title": title,
            "artist": artist,
            "released": released,
            "length": length,
            "genre": "Dance",
            "color": dict(PALETTE),
        }
        doc.update(fields)
        return doc
    return make


@pytest.fixture
def make_assist_doc():
    def make(titlable, released="2021-06-01", **fields):
        doc = {
            "titlable": titlable,
            "artwork": "https://example.com/cover.jpg",
            "url": "https://example.com/release",
            "role": "Vocals",
            "released": released,
        }
        doc.update(fields)
        return doc
    return make


@pytest.fixture
def write_flac():
    def write(path: Path, seconds=180, sample_rate=44_100, bit_depth=16):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(flac_bytes(sample_rate, bit_depth, seconds * sample_rate))
        return path
    return write


@pytest.fixture
def write_png():
    def write(path: Path, size=(1200, 600), color="red"):
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", size, color).save(path, "PNG")
        return path
    return write


@pytest.fixture
def write_document(config):
    def write(document):
        config.document_path.write_text(json.dumps(document), encoding="utf-8")
        return config.document_path
    return write


@pytest.fixture
def workspace(config, make_song_doc, make_album_doc, make_remix_doc, make_assist_doc,
              write_flac, write_png, write_document):
    """A complete workspace: document, audio sources, artwork and lyrics."""
    album = make_album_doc("Nebula", [
        make_song_doc("Opening", lyrics=True),
        make_song_doc("Drift"),
        make_song_doc("Hidden Track", bonus=True),
    ])
    remix = make_remix_doc("Glow (Astro Remix)")
    document = {
        "albums": [album],
        "remixes": [remix],
        "assists": [make_assist_doc("Friend – Collab")],
    }
    write_document(document)

    config.lyrics_dir.mkdir(parents=True)
    (config.lyrics_dir / "opening.tsv").write_text(LYRICS_TSV, encoding="utf-8")

    for slug in ("opening", "drift", "hidden-track"):
        write_flac(config.source_audio_dir / "nebula" / f"{slug}.flac")
    write_flac(config.source_audio_dir / "someone-else-glow-astro-remix.flac", seconds=200)

    write_png(config.images_dir / "nebula.png")
    write_png(config.images_dir / "fallback.png", color="blue")
    return config
