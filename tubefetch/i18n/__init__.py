import functools
import json
import logging
import os
from typing import Any, Callable, Dict, Optional
from tubefetch.config.settings import config
from tubefetch.utils.locale import get_locale

logger = logging.getLogger("tubefetch.i18n")

LOCALES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "locales")


class I18n:
    """Message catalog keyed by dotted names ("error.download_failed")"""

    def __init__(self, locales_dir: str = LOCALES_DIR, default_locale: Optional[str] = None):
        self.locales_dir = locales_dir
        self.default_locale = default_locale or config.i18n.default_locale
        self.locales: Dict[str, Dict[str, Any]] = {}
        self.load_locales()

    def load_locales(self):
        if not os.path.isdir(self.locales_dir):
            logger.warning("Locales directory not found at %s", self.locales_dir)
            return

        for filename in sorted(os.listdir(self.locales_dir)):
            if not filename.endswith(".json"):
                continue
            locale_code = filename[:-5]
            try:
                with open(os.path.join(self.locales_dir, filename), "r", encoding="utf-8") as f:
                    self.locales[locale_code] = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.error("Error loading locale %s: %s", locale_code, e)

    def lookup(self, key: str, locale: str) -> Optional[str]:
        value: Any = self.locales.get(locale)
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return None
            value = value[part]
        return value if isinstance(value, str) else None

    def get(self, key: str, locale: Optional[str] = None, **kwargs) -> str:
        """
        Translated string with str.format interpolation.
        Falls back to the default locale, then English, then the key itself.
        """
        template = None
        for candidate in (locale, self.default_locale, "en"):
            if candidate:
                template = self.lookup(key, candidate)
                if template is not None:
                    break

        if template is None:
            return key

        try:
            return template.format(**kwargs)
        except (KeyError, IndexError, ValueError):
            return template

    def translator(self, accept_language: Optional[str]) -> Callable[..., str]:
        """Bind get() to the best locale for an Accept-Language header"""
        return functools.partial(self.get, locale=get_locale(accept_language))


i18n = I18n()
