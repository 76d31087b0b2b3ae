from traxit.models.internal import AudioQuality, QualityKind

# Best audio-only track when the platform offers one, else the best combined track
HIGHEST_AUDIO_FORMAT = "bestaudio/best"
LOWEST_AUDIO_FORMAT = "worstaudio/worst"
LOWEST_ALIASES = {"lowest", "lowestaudio", "worst", "worstaudio"}

class FormatDecision:
    """Map the client's audio quality hint to a yt-dlp format selector"""

    @staticmethod
    def decide(quality: AudioQuality) -> str:
        if quality.kind == QualityKind.HIGHEST or not quality.value:
            return HIGHEST_AUDIO_FORMAT

        value = quality.value.strip()
        if value.lower() in LOWEST_ALIASES:
            return LOWEST_AUDIO_FORMAT

        # Unknown format ids must not fail the request, fall back to highest
        return f"{value}/{HIGHEST_AUDIO_FORMAT}"
