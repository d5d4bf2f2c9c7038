"""Metadata tagging for distributable audio files using mutagen."""

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from mutagen import MutagenError
from mutagen.flac import FLAC, Picture
from mutagen.id3 import (
    APIC,
    ID3,
    SYLT,
    TALB,
    TCON,
    TCOP,
    TDRC,
    TENC,
    TFLT,
    TIT2,
    TLAN,
    TLEN,
    TPE1,
    TPE2,
    TRCK,
    TSRC,
    USLT,
    WOAF,
    WOAR,
    WOAS,
    PictureType,
)

from ..domain.entities import Album, Song
from ..domain.lyrics import TextCodec
from ..domain.value_objects import AudioCodec
from ..exceptions import IntegrityError, ValidationError
from ..models.config import WorkspaceConfig
from .probe import AudioStreamInfo

_UTF8 = 3
_SYLT_MILLISECONDS = 2
_SYLT_OTHER = 0


@dataclass
class TrackTags:
    """Everything embedded into one distributable file."""
    title: str
    artist: str
    album: str
    album_artist: str
    length_seconds: int
    duration_ms: int
    genre: str
    released: date
    artist_url: str
    source_url: str
    encoder: str
    file_type: str
    track_number: Optional[int] = None
    track_total: Optional[int] = None
    isrc: Optional[str] = None
    page_url: Optional[str] = None
    copyright: Optional[str] = None
    lyrics_text: Optional[str] = None
    lyrics_lrc: Optional[str] = None
    synchronized_lyrics: List[Tuple[int, str]] = field(default_factory=list)
    language: Optional[str] = None


def build_track_tags(song: Song, albums: Sequence[Album], codec: AudioCodec,
                     info: AudioStreamInfo, config: WorkspaceConfig) -> TrackTags:
    """Collect the tag values for a song.

    Bonus tracks have no public page of their own, so they only link to
    their album.

    Raises:
        IntegrityError: If a bonus song has no parent album
    """
    album: Optional[Album] = song.album_of(albums)
    if song.bonus and album is None:
        raise IntegrityError(f"Bonus track {song.format_title()} has no parent album")

    tags = TrackTags(
        title=song.title,
        artist=song.artist,
        album=album.title if album else song.title,
        album_artist=album.artist if album else song.artist,
        length_seconds=song.length,
        duration_ms=info.duration_ms,
        genre=str(song.genre),
        released=song.released,
        artist_url=config.site.artist_url,
        source_url=config.page_url(album.slug if album else song.slug),
        encoder=config.encoding.encoder_signature,
        file_type=codec.ext,
        isrc=song.isrc,
        page_url=None if song.bonus else config.page_url(song.slug),
    )

    if album is not None:
        tags.track_number = song.track_number
        tags.track_total = album.non_bonus_song_count
        tags.copyright = album.copyright_message(config)

    if song.lyrics is not None:
        tags.lyrics_text = song.lyrics.render(TextCodec.TXT)
        tags.lyrics_lrc = song.lyrics.render(TextCodec.LRC)
        tags.synchronized_lyrics = song.lyrics.synchronized_lyrics()
        tags.language = song.lyrics.most_common_language().iso_639_2

    return tags


class MetadataWriter:
    """Write tags and artwork into encoded files."""

    def write(self, path: Path, codec: AudioCodec, tags: TrackTags, artwork: bytes) -> None:
        try:
            if codec is AudioCodec.MP3:
                self._write_id3(path, tags, artwork)
            else:
                self._write_vorbis(path, tags, artwork)
        except MutagenError as e:
            raise ValidationError(f"Failed to write {codec.ext} metadata to {path}: {e}")

    @staticmethod
    def _write_id3(path: Path, tags: TrackTags, artwork: bytes) -> None:
        """Write ID3v2.4 frames, replacing whatever the encoder left."""
        id3 = ID3()
        id3.add(TIT2(encoding=_UTF8, text=tags.title))
        id3.add(TPE1(encoding=_UTF8, text=tags.artist))
        id3.add(TALB(encoding=_UTF8, text=tags.album))
        id3.add(TPE2(encoding=_UTF8, text=tags.album_artist))
        if tags.track_number is not None:
            id3.add(TRCK(encoding=_UTF8, text=f"{tags.track_number}/{tags.track_total}"))
        id3.add(TLEN(encoding=_UTF8, text=str(tags.duration_ms)))
        id3.add(APIC(
            encoding=_UTF8,
            mime="image/jpeg",
            type=PictureType.COVER_FRONT,
            desc="",
            data=artwork,
        ))
        id3.add(TCON(encoding=_UTF8, text=tags.genre))
        id3.add(TDRC(encoding=_UTF8, text=tags.released.isoformat()))
        if tags.isrc:
            id3.add(TSRC(encoding=_UTF8, text=tags.isrc))
        id3.add(WOAR(url=tags.artist_url))
        if tags.page_url:
            id3.add(WOAF(url=tags.page_url))
        id3.add(WOAS(url=tags.source_url))
        id3.add(TENC(encoding=_UTF8, text=tags.encoder))
        id3.add(TFLT(encoding=_UTF8, text=tags.file_type))
        if tags.copyright:
            id3.add(TCOP(encoding=_UTF8, text=tags.copyright))
        if tags.lyrics_text is not None:
            id3.add(USLT(encoding=_UTF8, lang=tags.language, desc="", text=tags.lyrics_text))
            id3.add(SYLT(
                encoding=_UTF8,
                lang=tags.language,
                format=_SYLT_MILLISECONDS,
                type=_SYLT_OTHER,
                desc="",
                text=[(text, offset) for offset, text in tags.synchronized_lyrics],
            ))
            id3.add(TLAN(encoding=_UTF8, text=tags.language))
        id3.save(path, v2_version=4)

    @staticmethod
    def _write_vorbis(path: Path, tags: TrackTags, artwork: bytes) -> None:
        """Write Vorbis comments and a front-cover picture block."""
        flac_file = FLAC(path)
        if flac_file.tags is not None:
            flac_file.tags.clear()
        flac_file.clear_pictures()

        fields = {
            "TITLE": tags.title,
            "ARTIST": tags.artist,
            "ALBUM": tags.album,
            "ALBUMARTIST": tags.album_artist,
            "LENGTH": str(tags.length_seconds),
            "DATE": tags.released.isoformat(),
            "YEAR": str(tags.released.year),
            "GENRE": tags.genre,
            "WOAR": tags.artist_url,
            "WOAS": tags.source_url,
            "ENCODER": tags.encoder,
            "FILETYPE": tags.file_type,
        }
        if tags.track_number is not None:
            fields["TRACKNUMBER"] = str(tags.track_number)
            fields["TRACKTOTAL"] = str(tags.track_total)
        if tags.isrc:
            fields["ISRC"] = tags.isrc
        if tags.page_url:
            fields["WOAF"] = tags.page_url
        if tags.copyright:
            fields["COPYRIGHT"] = tags.copyright
        if tags.lyrics_text is not None:
            fields["LYRICS"] = tags.lyrics_text
            fields["LYRICS_SYNCED"] = tags.lyrics_lrc
            fields["LANGUAGE"] = tags.language

        for key, value in fields.items():
            flac_file[key] = [value]

        picture = Picture()
        picture.type = PictureType.COVER_FRONT
        picture.mime = "image/jpeg"
        picture.desc = ""
        picture.data = artwork
        flac_file.add_picture(picture)
        flac_file.save()
