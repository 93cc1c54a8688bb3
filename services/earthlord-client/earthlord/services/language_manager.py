"""
Language Manager
In-app language preference: follow the system locale, Simplified Chinese, or English
"""

import json
import locale
import logging
import os
from pathlib import Path
from typing import Optional

from shared.schemas.auth import LanguageOption
from earthlord.services.localization import translate

logger = logging.getLogger(__name__)

LANGUAGE_KEY = "app_language_preference"

DISPLAY_NAMES = {
    LanguageOption.ZH_HANS: "简体中文",
    LanguageOption.EN: "English",
}


def system_language_code() -> str:
    """Resolve the process locale to one of the supported catalogs"""
    code = None
    for env_var in ("LC_ALL", "LC_MESSAGES", "LANG"):
        value = os.environ.get(env_var)
        if value:
            code = value
            break
    if not code:
        code = locale.getlocale()[0]

    if code and code.lower().startswith("zh"):
        return LanguageOption.ZH_HANS.value
    return LanguageOption.EN.value


class LanguageManager:
    """Persists the selected language to a JSON preferences file"""

    def __init__(self, preferences_path: str, default: LanguageOption = LanguageOption.SYSTEM):
        self.preferences_path = Path(preferences_path).expanduser()
        self._selected = self._load() or default
        logger.info(f"Language preference: {self._selected.value}")

    def _load(self) -> Optional[LanguageOption]:
        if not self.preferences_path.exists():
            return None
        try:
            with open(self.preferences_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return LanguageOption(data[LANGUAGE_KEY])
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable language preference in {self.preferences_path}: {e}")
            return None

    def _save(self):
        data = {}
        if self.preferences_path.exists():
            try:
                with open(self.preferences_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, ValueError):
                data = {}
            if not isinstance(data, dict):
                data = {}
        data[LANGUAGE_KEY] = self._selected.value

        self.preferences_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.preferences_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    @property
    def selected_language(self) -> LanguageOption:
        return self._selected

    def set_language(self, language: LanguageOption):
        """Switch language and persist the choice"""
        self._selected = LanguageOption(language)
        self._save()
        logger.info(f"Language switched to: {self.display_name()}")

    @property
    def current_language_code(self) -> str:
        """Catalog code in effect, with 'system' resolved"""
        if self._selected == LanguageOption.SYSTEM:
            return system_language_code()
        return self._selected.value

    def display_name(self, option: Optional[LanguageOption] = None) -> str:
        option = option or self._selected
        if option == LanguageOption.SYSTEM:
            return translate("language_system", self.current_language_code)
        return DISPLAY_NAMES[option]
