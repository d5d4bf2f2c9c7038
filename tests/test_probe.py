"""Tests for source probing and stream validation."""

import pytest

from discography.core.probe import AudioProbe, AudioStreamInfo, validate_stream
from discography.exceptions import MissingSourceError, ValidationError


class TestAudioProbe:
    """Test reading FLAC stream parameters."""

    def test_stream_info(self, tmp_path, write_flac):
        path = write_flac(tmp_path / "song.flac", seconds=180, sample_rate=48_000, bit_depth=24)
        info = AudioProbe().probe(path)
        assert info == AudioStreamInfo(sample_rate=48_000, bit_depth=24, frame_count=48_000 * 180)
        assert info.duration_seconds == 180
        assert info.duration_ms == 180_000

    def test_missing_source(self, tmp_path):
        with pytest.raises(MissingSourceError):
            AudioProbe().probe(tmp_path / "nope.flac")

    def test_not_flac(self, tmp_path):
        path = tmp_path / "song.flac"
        path.write_bytes(b"RIFF....WAVE")
        with pytest.raises(ValidationError, match="song.flac"):
            AudioProbe().probe(path)


class TestValidateStream:
    """Test declared metadata against decoded audio."""

    def test_matching_stream(self):
        validate_stream(AudioStreamInfo(44_100, 16, 44_100 * 180 + 100), 180, "Song")

    def test_duration_truncates(self):
        info = AudioStreamInfo(44_100, 16, 44_100 * 181 - 1)
        assert info.duration_seconds == 180

    def test_length_mismatch(self):
        info = AudioStreamInfo(44_100, 16, 44_100 * 181)
        with pytest.raises(ValidationError, match="declared as 180s long, but its audio is 181s long"):
            validate_stream(info, 180, "Astro – Opening")

    def test_low_sample_rate(self):
        info = AudioStreamInfo(22_050, 16, 22_050 * 180)
        with pytest.raises(ValidationError, match="22050 Hz"):
            validate_stream(info, 180, "Song")

    def test_low_bit_depth(self):
        info = AudioStreamInfo(44_100, 8, 44_100 * 180)
        with pytest.raises(ValidationError, match="8-bit"):
            validate_stream(info, 180, "Song")

    def test_custom_minimums(self):
        info = AudioStreamInfo(44_100, 16, 44_100 * 180)
        with pytest.raises(ValidationError):
            validate_stream(info, 180, "Song", min_sample_rate=48_000)
        with pytest.raises(ValidationError):
            validate_stream(info, 180, "Song", min_bit_depth=24)
