"""
Language preference tests
"""

import json
import pytest

from shared.schemas.auth import LanguageOption
from earthlord.services.language_manager import LANGUAGE_KEY, LanguageManager, system_language_code


@pytest.fixture
def preferences_path(tmp_path):
    return tmp_path / "prefs" / "preferences.json"


class TestLanguageManager:
    def test_defaults_to_system(self, preferences_path):
        manager = LanguageManager(str(preferences_path))
        assert manager.selected_language == LanguageOption.SYSTEM
        assert not preferences_path.exists()

    def test_choice_is_persisted_and_restored(self, preferences_path):
        LanguageManager(str(preferences_path)).set_language(LanguageOption.EN)

        data = json.loads(preferences_path.read_text(encoding="utf-8"))
        assert data[LANGUAGE_KEY] == "en"

        restored = LanguageManager(str(preferences_path))
        assert restored.selected_language == LanguageOption.EN
        assert restored.current_language_code == "en"

    def test_other_preferences_survive_save(self, preferences_path):
        preferences_path.parent.mkdir(parents=True)
        preferences_path.write_text(json.dumps({"sound": "off"}), encoding="utf-8")

        LanguageManager(str(preferences_path)).set_language(LanguageOption.ZH_HANS)

        data = json.loads(preferences_path.read_text(encoding="utf-8"))
        assert data == {"sound": "off", LANGUAGE_KEY: "zh-Hans"}

    def test_corrupt_file_falls_back_to_default(self, preferences_path):
        preferences_path.parent.mkdir(parents=True)
        preferences_path.write_text("{not json", encoding="utf-8")

        manager = LanguageManager(str(preferences_path), default=LanguageOption.EN)
        assert manager.selected_language == LanguageOption.EN

    def test_display_names(self, preferences_path, monkeypatch):
        monkeypatch.setenv("LC_ALL", "zh_CN.UTF-8")
        manager = LanguageManager(str(preferences_path))
        assert manager.display_name() == "跟随系统"
        assert manager.display_name(LanguageOption.EN) == "English"
        assert manager.display_name(LanguageOption.ZH_HANS) == "简体中文"


class TestSystemLanguage:
    def test_chinese_locale(self, monkeypatch):
        monkeypatch.setenv("LC_ALL", "zh_CN.UTF-8")
        assert system_language_code() == "zh-Hans"

    def test_other_locale_is_english(self, monkeypatch):
        monkeypatch.setenv("LC_ALL", "de_DE.UTF-8")
        assert system_language_code() == "en"

    def test_system_option_resolves_through_locale(self, preferences_path, monkeypatch):
        monkeypatch.setenv("LC_ALL", "zh_TW.UTF-8")
        manager = LanguageManager(str(preferences_path))
        assert manager.current_language_code == "zh-Hans"
