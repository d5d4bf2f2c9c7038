"""Source audio probing and validation using mutagen."""

from dataclasses import dataclass
from pathlib import Path

from mutagen import MutagenError
from mutagen.flac import FLAC

from ..exceptions import MissingSourceError, ValidationError


@dataclass(frozen=True)
class AudioStreamInfo:
    """Stream parameters read from a FLAC STREAMINFO block."""
    sample_rate: int
    bit_depth: int
    frame_count: int

    @property
    def duration_seconds(self) -> int:
        return self.frame_count // self.sample_rate

    @property
    def duration_ms(self) -> int:
        return self.frame_count * 1000 // self.sample_rate


class AudioProbe:
    """Read stream parameters from FLAC sources."""

    def probe(self, path: Path) -> AudioStreamInfo:
        if not Path(path).exists():
            raise MissingSourceError(f"Audio source does not exist: {path}")
        try:
            info = FLAC(path).info
        except MutagenError as e:
            raise ValidationError(f"Could not read FLAC stream info from {path}: {e}")
        if not info.sample_rate:
            raise ValidationError(f"{path} reports no sample rate")
        return AudioStreamInfo(
            sample_rate=info.sample_rate,
            bit_depth=info.bits_per_sample,
            frame_count=info.total_samples,
        )


def validate_stream(info: AudioStreamInfo, declared_length: int, title: str,
                    min_sample_rate: int = 44_100, min_bit_depth: int = 16) -> None:
    """Check decoded audio against the declared metadata.

    Raises:
        ValidationError: On a length mismatch or sub-CD sample rate or bit depth
    """
    if info.duration_seconds != declared_length:
        raise ValidationError(
            f"{title} is declared as {declared_length}s long, "
            f"but its audio is {info.duration_seconds}s long"
        )
    if info.sample_rate < min_sample_rate:
        raise ValidationError(
            f"{title}: expected {min_sample_rate} Hz or higher, but audio is {info.sample_rate} Hz"
        )
    if info.bit_depth < min_bit_depth:
        raise ValidationError(
            f"{title}: expected {min_bit_depth}-bit audio or higher, but audio is {info.bit_depth}-bit"
        )
