"""Core artifact pipeline modules."""

from .artwork import ArtworkStore
from .metadata import MetadataWriter, TrackTags, build_track_tags
from .packager import AlbumPackager
from .pipeline import ArtifactOutcome, ArtifactPipeline, ArtifactState, PipelineReport
from .probe import AudioProbe, AudioStreamInfo, validate_stream
from .transcoder import FfmpegTranscoder

__all__ = [
    'ArtworkStore',
    'MetadataWriter',
    'TrackTags',
    'build_track_tags',
    'AlbumPackager',
    'ArtifactOutcome',
    'ArtifactPipeline',
    'ArtifactState',
    'PipelineReport',
    'AudioProbe',
    'AudioStreamInfo',
    'validate_stream',
    'FfmpegTranscoder',
]
