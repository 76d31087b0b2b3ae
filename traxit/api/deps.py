from functools import lru_cache

from traxit.config.settings import config
from traxit.core.state import state
from traxit.services.download import AudioDownloadOrchestrator
from traxit.services.extractor import CommandLineExtractor, LibraryExtractor
from traxit.services.info import MetadataFetcher
from traxit.services.transcode import Transcoder

# Services are built once from the loaded configuration and injected
# into the routes; tests replace them through app.dependency_overrides.

@lru_cache
def get_library_extractor() -> LibraryExtractor:
    return LibraryExtractor(config.extractor, ffmpeg_location=state.ffmpeg_path)

@lru_cache
def get_command_line_extractor() -> CommandLineExtractor:
    return CommandLineExtractor(config.extractor, ffmpeg_location=state.ffmpeg_path)

@lru_cache
def get_metadata_fetcher() -> MetadataFetcher:
    return MetadataFetcher(get_library_extractor(), get_command_line_extractor())

@lru_cache
def get_orchestrator() -> AudioDownloadOrchestrator:
    return AudioDownloadOrchestrator(
        config,
        primary=get_library_extractor(),
        secondary=get_command_line_extractor(),
        transcoder=Transcoder(config.transcode),
    )
