from typing import List, Optional, Tuple
from urllib.parse import urlsplit

from traxit.config.settings import config
from traxit.core.platform import extract_video_id


def _weighted_languages(accept_language: str) -> List[Tuple[float, str]]:
    weighted = []
    for position, item in enumerate(accept_language.split(",")):
        tag, _, params = item.strip().partition(";")
        language = tag.split("-")[0].strip().lower()
        if not language:
            continue
        weight = 1.0
        if params.strip().startswith("q="):
            try:
                weight = float(params.strip()[2:])
            except ValueError:
                weight = 0.0
        # ties keep header order
        weighted.append((-weight, position, language))
    return [(-w, lang) for w, _, lang in sorted(weighted)]


def get_locale(accept_language: Optional[str] = None) -> str:
    """Best supported locale for an Accept-Language header"""
    if accept_language:
        for weight, language in _weighted_languages(accept_language):
            if weight > 0 and language in config.i18n.supported_locales:
                return language
    return config.i18n.default_locale


def safe_url_for_log(url: str) -> str:
    """Host, path and video id only; other query parameters are dropped"""
    try:
        parts = urlsplit(url)
    except ValueError:
        return "invalid_url"

    base = f"{parts.scheme}://{parts.netloc}{parts.path}"
    video_id = extract_video_id(url)
    if video_id and f"v={video_id}" in parts.query:
        return f"{base}?v={video_id[:32]}"
    return f"{base}?..." if parts.query else base
