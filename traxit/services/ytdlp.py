from pathlib import Path
from typing import List, Optional, NamedTuple
import asyncio
from traxit.config.settings import ExtractorConfig

class CompletedProcess(NamedTuple):
    """Subprocess result"""
    returncode: int
    stdout: bytes
    stderr: bytes

    def stderr_tail(self, limit: int = 500) -> str:
        return self.stderr.decode(errors="replace").strip()[-limit:]

class SubprocessExecutor:
    """Execute subprocess with consistent error handling"""

    @staticmethod
    async def run(
        cmd: List[str],
        timeout: float,
        capture_stderr: bool = True
    ) -> CompletedProcess:
        """
        Run subprocess with timeout and proper cleanup.
        The child is killed on timeout and when the awaiting task is cancelled.
        """
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE if capture_stderr else asyncio.subprocess.DEVNULL,
            stdin=asyncio.subprocess.DEVNULL
        )

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=timeout
            )

            return CompletedProcess(
                returncode=process.returncode,
                stdout=stdout,
                stderr=stderr if capture_stderr else b""
            )

        except (asyncio.TimeoutError, asyncio.CancelledError):
            if process.returncode is None:
                process.kill()
                await asyncio.shield(process.wait())
            raise
        except Exception:
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

class YTDLPCommandBuilder:
    """Build yt-dlp commands for the command-line extraction strategy"""

    def __init__(self, extractor_config: ExtractorConfig, ffmpeg_location: Optional[str] = None):
        self.config = extractor_config
        self.ffmpeg_location = ffmpeg_location

    def _base(self) -> List[str]:
        cmd = [
            self.config.ytdlp_binary,
            '--no-playlist',
            '--no-warnings',
            '--no-check-certificates',
            '--socket-timeout', str(self.config.socket_timeout),
            '--retries', str(self.config.retries),
        ]
        if self.ffmpeg_location:
            cmd.extend(['--ffmpeg-location', self.ffmpeg_location])
        return cmd

    def _browser_headers(self) -> List[str]:
        return [
            '--add-header', f'Referer:{self.config.referer}',
            '--add-header', f'User-Agent:{self.config.user_agent}',
        ]

    def build_info_command(self, url: str) -> List[str]:
        """Build command for fetching a single JSON metadata document"""
        cmd = self._base()
        cmd.extend([
            '--dump-single-json',
            '--prefer-free-formats',
            '--extractor-args', 'youtube:skip=dash',
        ])
        cmd.extend(self._browser_headers())
        cmd.append(url)
        return cmd

    def build_audio_command(self, url: str, output_base: Path) -> List[str]:
        """Build command for direct audio extraction to <output_base>.<ext>"""
        cmd = self._base()
        cmd.extend([
            '-o', f'{output_base}.%(ext)s',
            '--extract-audio',
            '--audio-format', 'mp3',
            '--audio-quality', '0',
            '--prefer-free-formats',
            '--no-progress',
            '--quiet',
        ])
        cmd.extend(self._browser_headers())
        cmd.append(url)
        return cmd

    def build_best_format_command(self, url: str, output_path: Path) -> List[str]:
        """Build command for a plain best-format download to a fixed path"""
        cmd = self._base()
        cmd.extend([
            '-f', 'best',
            '-o', str(output_path),
            '--force-overwrites',
            '--prefer-free-formats',
            '--no-progress',
            '--quiet',
        ])
        cmd.extend(self._browser_headers())
        cmd.append(url)
        return cmd
