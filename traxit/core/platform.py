import re
from enum import Enum
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from traxit.core.errors import InvalidUrlError

CANONICAL_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

_SHORTS_RE = re.compile(r"/shorts/([^/?#&]+)")
_PATH_ID_RE = re.compile(r"^/(?:shorts|embed|live|v)/([^/?#&]+)")


class Platform(str, Enum):
    YOUTUBE = "youtube"
    # Recognized so it can be answered with 501
    INSTAGRAM = "instagram"
    UNSUPPORTED = "unsupported"


PLATFORM_HOSTS = {
    Platform.YOUTUBE: ("youtube.com", "youtu.be"),
    Platform.INSTAGRAM: ("instagram.com",),
}

IMPLEMENTED_PLATFORMS = frozenset({Platform.YOUTUBE})


def _hostname(url) -> Optional[str]:
    if not isinstance(url, str):
        return None

    candidate = url.strip()
    if not candidate:
        return None

    # Scheme-less input ("youtu.be/abc") has no netloc unless prefixed
    if "://" not in candidate:
        candidate = "//" + candidate.lstrip("/")

    try:
        return urlsplit(candidate).hostname
    except ValueError:
        return None


def _host_matches(hostname: str, domain: str) -> bool:
    return hostname == domain or hostname.endswith("." + domain)


def detect(url) -> Platform:
    """Classify a URL by hostname. Never raises."""
    hostname = _hostname(url)
    if not hostname:
        return Platform.UNSUPPORTED

    for platform, domains in PLATFORM_HOSTS.items():
        if any(_host_matches(hostname, domain) for domain in domains):
            return platform

    return Platform.UNSUPPORTED


def is_short_form(url: str) -> bool:
    return bool(url) and _SHORTS_RE.search(url) is not None


def normalize_url(url: str) -> str:
    """Rewrite a short-form URL to the canonical watch URL"""
    match = _SHORTS_RE.search(url or "")
    if not match:
        return url
    return CANONICAL_WATCH_URL.format(video_id=match.group(1))


def extract_video_id(url: str) -> Optional[str]:
    hostname = _hostname(url)
    if not hostname:
        return None

    candidate = url.strip()
    if "://" not in candidate:
        candidate = "//" + candidate.lstrip("/")
    try:
        parsed = urlsplit(candidate)
    except ValueError:
        return None

    if _host_matches(hostname, "youtu.be"):
        video_id = parsed.path.strip("/").split("/")[0]
        return video_id or None

    ids = parse_qs(parsed.query).get("v")
    if ids and ids[0]:
        return ids[0]

    match = _PATH_ID_RE.match(parsed.path)
    if match:
        return match.group(1)

    return None


def coerce_url(url: Optional[str]) -> str:
    """Trim and add a scheme when missing; raise InvalidUrlError if no host remains"""
    if not url or not url.strip():
        raise InvalidUrlError("empty url", message_key="error.url_required")

    candidate = url.strip()
    if "://" not in candidate:
        candidate = "https://" + candidate.lstrip("/")

    try:
        parsed = urlsplit(candidate)
        hostname = parsed.hostname
    except ValueError as e:
        raise InvalidUrlError(str(e)) from e

    if parsed.scheme not in ("http", "https") or not hostname:
        raise InvalidUrlError(f"not an http(s) url: {url[:100]}")

    return candidate
