"""
Unit tests for environment-driven settings.
"""

import pytest
from pydantic import ValidationError

from menu_trainer.config import DEFAULT_CUSTOMER_QUESTIONS, DEFAULT_MENU_DATA, Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("MENU_TRAINER_DATA_DIR", raising=False)
        settings = Settings(_env_file=None)

        assert settings.menu_data_path == DEFAULT_MENU_DATA
        assert settings.storage_namespace == "mastros-menu-app-storage"
        assert settings.auto_advance_delay_seconds == 2.0
        assert settings.log_level == "WARNING"

    def test_env_prefix(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MENU_TRAINER_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("MENU_TRAINER_QUESTIONS_PER_ROUND", "5")

        settings = Settings(_env_file=None)

        assert settings.questions_per_round == 5
        assert settings.state_db_path == tmp_path / "state.db"

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("MENU_TRAINER_LOG_LEVEL", "LOUD")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_bundled_dataset_exists(self):
        assert DEFAULT_MENU_DATA.exists()

    def test_bundled_customer_questions_exist(self, monkeypatch):
        monkeypatch.delenv("MENU_TRAINER_CUSTOMER_QUESTIONS_PATH", raising=False)
        settings = Settings(_env_file=None)

        assert settings.customer_questions_path == DEFAULT_CUSTOMER_QUESTIONS
        assert DEFAULT_CUSTOMER_QUESTIONS.exists()
