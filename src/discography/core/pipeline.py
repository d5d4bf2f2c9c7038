"""Transcode, tag and package pipeline for the whole catalog.

Each (song, codec) pair moves NotEncoded -> Encoding -> Encoded -> Tagged.
Files are built under a ``.partial`` name and renamed onto the destination
only once tagged, so an existing destination always means Tagged and is
never touched again.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..domain.catalog import Catalog
from ..domain.entities import Album, Song
from ..domain.value_objects import AudioCodec
from ..exceptions import MissingSourceError
from ..models.config import WorkspaceConfig
from .artwork import ArtworkStore
from .metadata import MetadataWriter, build_track_tags
from .packager import AlbumPackager, partial_path
from .probe import AudioProbe, validate_stream
from .transcoder import FfmpegTranscoder

logger = logging.getLogger(__name__)

ALL_CODECS: Tuple[AudioCodec, ...] = (AudioCodec.MP3, AudioCodec.FLAC)


class ArtifactState(Enum):
    """Lifecycle of one (song, codec) artifact."""
    NOT_ENCODED = "not_encoded"
    ENCODING = "encoding"
    ENCODED = "encoded"
    TAGGED = "tagged"


@dataclass
class ArtifactOutcome:
    """Result of bringing one (song, codec) artifact to Tagged."""
    slug: str
    codec: AudioCodec
    path: Path
    state: ArtifactState
    cached: bool = False


@dataclass
class PipelineReport:
    """Summary of a pipeline run."""
    artifacts: List[ArtifactOutcome] = field(default_factory=list)
    packaged: List[Path] = field(default_factory=list)
    skipped_unreleased: int = 0

    @property
    def encoded_count(self) -> int:
        return sum(1 for outcome in self.artifacts if not outcome.cached)

    @property
    def cached_count(self) -> int:
        return sum(1 for outcome in self.artifacts if outcome.cached)


class ArtifactPipeline:
    """Drive every released song and album through transcode, tag and zip."""

    def __init__(self, config: WorkspaceConfig, transcoder=None,
                 probe: Optional[AudioProbe] = None,
                 writer: Optional[MetadataWriter] = None,
                 artwork: Optional[ArtworkStore] = None,
                 packager: Optional[AlbumPackager] = None):
        self.config = config
        self.transcoder = transcoder or FfmpegTranscoder(config.encoding.ffmpeg)
        self.probe = probe or AudioProbe()
        self.writer = writer or MetadataWriter()
        self.artwork = artwork or ArtworkStore(config)
        self.packager = packager or AlbumPackager(config, self.artwork)

        self.states: Dict[Tuple[str, AudioCodec], ArtifactState] = {}
        self._locks: Dict[Path, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, destination: Path) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(destination, threading.Lock())

    def _set_state(self, song: Song, codec: AudioCodec, state: ArtifactState) -> None:
        with self._guard:
            self.states[(song.slug, codec)] = state

    def encode_song(self, song: Song, albums: Sequence[Album],
                    codec: AudioCodec) -> ArtifactOutcome:
        """Bring one song to Tagged for a codec.

        Raises:
            MissingSourceError: If the source audio or artwork is missing
            ValidationError: If the source disagrees with the declared length or quality
            ExternalToolError: If the transcoder fails
            IntegrityError: If a bonus song has no parent album
        """
        source = song.source_audio_path(albums, self.config)
        if not source.exists():
            raise MissingSourceError(f"Audio source for {song.format_title()} is missing: {source}")
        destination = song.download_path(codec, self.config)

        with self._lock_for(destination):
            if destination.exists():
                logger.debug(f"{destination} exists; skipping {song.format_title()}")
                self._set_state(song, codec, ArtifactState.TAGGED)
                return ArtifactOutcome(song.slug, codec, destination, ArtifactState.TAGGED, cached=True)

            self._set_state(song, codec, ArtifactState.NOT_ENCODED)
            info = self.probe.probe(source)
            validate_stream(
                info,
                song.length,
                song.format_title(),
                self.config.encoding.min_sample_rate,
                self.config.encoding.min_bit_depth,
            )
            tags = build_track_tags(song, albums, codec, info, self.config)
            artwork = self.artwork.jpeg_bytes(song.artwork_name)

            logger.info(f"Encoding {codec.ext} {song.format_title()}")
            self._set_state(song, codec, ArtifactState.ENCODING)
            destination.parent.mkdir(parents=True, exist_ok=True)
            partial = partial_path(destination)
            self.transcoder.transcode(source, partial, codec)
            self._set_state(song, codec, ArtifactState.ENCODED)

            self.writer.write(partial, codec, tags, artwork)
            partial.replace(destination)
            self._set_state(song, codec, ArtifactState.TAGGED)
            return ArtifactOutcome(song.slug, codec, destination, ArtifactState.TAGGED)

    def package_album(self, album: Album, codec: AudioCodec) -> Optional[Path]:
        """Zip a released album; returns the archive path if it was built."""
        if self.packager.package(album, codec):
            return album.download_path(codec, self.config)
        return None

    def run(self, catalog: Catalog, codecs: Iterable[AudioCodec] = ALL_CODECS,
            workers: Optional[int] = None) -> PipelineReport:
        """Encode every released song and package every released album.

        The first error aborts the run; pending work is cancelled.
        """
        codecs = tuple(codecs)
        workers = workers or self.config.encoding.workers
        report = PipelineReport()

        jobs: List[Tuple[Optional[Album], List[Song]]] = []
        for album in catalog.albums:
            released = [song for song in album.songs if not song.unreleased]
            report.skipped_unreleased += len(album.songs) - len(released)
            jobs.append((album, released))
        remixes = [song for song in catalog.remixes if not song.unreleased]
        report.skipped_unreleased += len(catalog.remixes) - len(remixes)
        jobs.append((None, remixes))

        if workers <= 1:
            self._run_sequential(catalog, jobs, codecs, report)
        else:
            self._run_parallel(catalog, jobs, codecs, workers, report)

        logger.info(
            f"Encoded {report.encoded_count} files ({report.cached_count} already up to date), "
            f"zipped {len(report.packaged)} albums"
        )
        return report

    def _finish_album(self, album: Optional[Album], codec: AudioCodec,
                      report: PipelineReport) -> None:
        if album is None or album.unreleased:
            return
        built = self.package_album(album, codec)
        if built is not None:
            report.packaged.append(built)

    def _run_sequential(self, catalog: Catalog, jobs, codecs, report: PipelineReport) -> None:
        for album, songs in jobs:
            for codec in codecs:
                for song in songs:
                    report.artifacts.append(self.encode_song(song, catalog.albums, codec))
                self._finish_album(album, codec, report)

    def _run_parallel(self, catalog: Catalog, jobs, codecs, workers: int,
                      report: PipelineReport) -> None:
        logger.info(f"Encoding with {workers} workers")
        executor = ThreadPoolExecutor(max_workers=workers)
        try:
            pending: List[Tuple[Optional[Album], AudioCodec, List[Future]]] = []
            for album, songs in jobs:
                for codec in codecs:
                    futures = [
                        executor.submit(self.encode_song, song, catalog.albums, codec)
                        for song in songs
                    ]
                    pending.append((album, codec, futures))

            # Each album is zipped only after all of its songs are tagged
            for album, codec, futures in pending:
                for future in futures:
                    report.artifacts.append(future.result())
                self._finish_album(album, codec, report)
        except BaseException:
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
