import asyncio
import logging
from pathlib import Path
from typing import List

from traxit.config.settings import TranscodeConfig
from traxit.core.errors import TranscodeFailedError
from traxit.services.ytdlp import SubprocessExecutor

logger = logging.getLogger(__name__)


class Transcoder:
    """Convert any container ffmpeg understands to MP3 with a fixed profile"""

    def __init__(self, config: TranscodeConfig, executor=SubprocessExecutor):
        self.config = config
        self.executor = executor

    def build_command(self, input_path: Path, output_path: Path) -> List[str]:
        return [
            self.config.ffmpeg_binary,
            '-hide_banner',
            '-loglevel', 'error',
            '-i', str(input_path),
            '-vn',
            '-acodec', self.config.codec,
            '-ar', str(self.config.sample_rate),
            '-ab', self.config.bitrate,
            '-y',
            str(output_path),
        ]

    async def transcode(self, input_path: Path, output_path: Path) -> Path:
        cmd = self.build_command(input_path, output_path)
        timeout = self.config.timeout_seconds
        logger.info(f"Extracting audio: {input_path.name} -> {output_path.name}")

        try:
            result = await self.executor.run(cmd, timeout=timeout)
        except asyncio.TimeoutError as e:
            raise TranscodeFailedError(f"ffmpeg timed out after {timeout:.0f}s") from e
        except OSError as e:
            raise TranscodeFailedError(f"cannot run {cmd[0]}: {e}") from e

        if result.returncode != 0:
            raise TranscodeFailedError(
                f"ffmpeg exited with code {result.returncode}: {result.stderr_tail()}"
            )

        # A zero exit status with nothing written counts as failure too
        size = await asyncio.to_thread(_output_size, output_path)
        if not size:
            raise TranscodeFailedError("ffmpeg produced no output")

        logger.info(f"Audio file created: {output_path.name}, size: {size} bytes")
        return output_path


def _output_size(path: Path) -> int:
    return path.stat().st_size if path.is_file() else 0
