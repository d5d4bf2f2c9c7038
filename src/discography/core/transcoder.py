"""External transcoder invocation."""

import logging
import subprocess
from pathlib import Path

from ..domain.value_objects import AudioCodec
from ..exceptions import ExternalToolError

logger = logging.getLogger(__name__)


class FfmpegTranscoder:
    """Transcode source audio with ffmpeg.

    Any object with a ``transcode(input_path, output_path, codec)`` method can
    stand in for this one.
    """

    def __init__(self, executable: str = "ffmpeg"):
        self.executable = executable

    def transcode(self, input_path: Path, output_path: Path, codec: AudioCodec) -> None:
        """Run one blocking transcode.

        Raises:
            ExternalToolError: If ffmpeg is missing or exits non-zero
        """
        args = [self.executable, *codec.transcoder_args(str(input_path), str(output_path))]
        logger.debug(f"Running {' '.join(args)}")
        try:
            result = subprocess.run(args, capture_output=True, text=True)
        except FileNotFoundError:
            raise ExternalToolError(f"Transcoder not found: {self.executable}")

        if result.returncode != 0:
            raise ExternalToolError(
                f"ffmpeg failed to encode {input_path} as {codec.ext} "
                f"(exit status {result.returncode}):\n{result.stderr}",
                returncode=result.returncode,
                stderr=result.stderr,
            )
