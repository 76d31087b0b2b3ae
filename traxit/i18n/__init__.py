import functools
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from traxit.config.settings import config

logger = logging.getLogger(__name__)

LOCALES_DIR = Path(__file__).resolve().parent.parent / "locales"
FALLBACK_LOCALE = "en"


class I18n:
    """Message catalogs keyed by dotted paths, e.g. ``error.video_private``"""

    def __init__(self, default_locale: str = FALLBACK_LOCALE, locales_dir: Path = LOCALES_DIR):
        self.default_locale = default_locale
        self.catalogs: Dict[str, Dict[str, Any]] = {}
        self.load(locales_dir)

    def load(self, locales_dir: Path) -> None:
        if not locales_dir.is_dir():
            logger.warning(f"No locale catalogs at {locales_dir}")
            return

        for path in sorted(locales_dir.glob("*.json")):
            try:
                self.catalogs[path.stem] = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.error(f"Skipping locale {path.stem}: {e}")

    def _lookup(self, locale: str, key: str) -> Optional[str]:
        node: Any = self.catalogs.get(locale)
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node if isinstance(node, str) else None

    def get(self, key: str, locale: Optional[str] = None, **kwargs) -> str:
        """
        Translated message for ``key``; falls back to the default locale,
        then English, then the key itself.
        """
        for candidate in (locale, self.default_locale, FALLBACK_LOCALE):
            if not candidate:
                continue
            template = self._lookup(candidate, key)
            if template is not None:
                break
        else:
            return key

        try:
            return template.format(**kwargs)
        except (KeyError, IndexError):
            return template

    def translator(self, locale: Optional[str]) -> Callable[..., str]:
        return functools.partial(self.get, locale=locale)


i18n = I18n(default_locale=config.i18n.default_locale)
