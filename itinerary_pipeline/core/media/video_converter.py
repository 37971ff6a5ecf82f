"""
HLS to MP4 conversion.

Remuxes an HLS stream into a single MP4 with ffmpeg (stream copy, no
re-encode). Conversion runs in a scratch directory that is always removed.

Dependencies: ffmpeg binary, subprocess (stdlib)
System role: Video acquisition for the video processing path
"""

import logging
import subprocess
import tempfile
from pathlib import Path

from itinerary_pipeline.core.exceptions import VideoConversionError

logger = logging.getLogger(__name__)


class HlsVideoConverter:
    """Converts HLS playlists to MP4 bytes."""

    def __init__(self, ffmpeg_path: str = "ffmpeg", timeout_seconds: int = 300, min_bytes: int = 1000) -> None:
        self._ffmpeg_path = ffmpeg_path
        self._timeout_seconds = timeout_seconds
        self._min_bytes = min_bytes

    def command(self, hls_url: str, output: Path) -> list[str]:
        return [
            self._ffmpeg_path,
            "-i",
            hls_url,
            "-c",
            "copy",
            "-bsf:a",
            "aac_adtstoasc",
            str(output),
            "-y",
        ]

    def convert(self, hls_url: str) -> bytes:
        """
        Convert ``hls_url`` to MP4.

        ffmpeg sometimes exits non-zero after writing a usable file; the
        output file, not the exit code, decides success.

        Raises:
            VideoConversionError: No output, output too small, or timeout
        """
        with tempfile.TemporaryDirectory(prefix="hls-") as scratch:
            output = Path(scratch) / "video.mp4"
            try:
                completed = subprocess.run(
                    self.command(hls_url, output),
                    capture_output=True,
                    text=True,
                    timeout=self._timeout_seconds,
                    check=False,
                )
            except subprocess.TimeoutExpired as e:
                raise VideoConversionError(
                    f"ffmpeg timed out after {self._timeout_seconds}s", source_ref=hls_url
                ) from e
            except OSError as e:
                raise VideoConversionError(f"ffmpeg could not start: {e}", source_ref=hls_url) from e

            if completed.returncode != 0:
                logger.warning(
                    "%s:convert - ffmpeg exited %d: %s",
                    __name__,
                    completed.returncode,
                    (completed.stderr or "")[-500:],
                )
            if not output.exists():
                raise VideoConversionError(
                    f"ffmpeg produced no output (exit {completed.returncode})",
                    source_ref=hls_url,
                    details={"stderr": (completed.stderr or "")[-500:]},
                )

            body = output.read_bytes()

        if len(body) < self._min_bytes:
            raise VideoConversionError(
                f"Converted video too small ({len(body)} bytes)", source_ref=hls_url
            )
        logger.info("%s:convert - Converted %s (%d bytes)", __name__, hls_url, len(body))
        return body
