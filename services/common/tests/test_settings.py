"""
Tests for the environment-driven settings base class.
"""

import os
from typing import List, Optional

import pytest

from services.common.settings import (
    AliasChoices,
    BaseSettings,
    Field,
    SettingsConfigDict,
)


class ExampleSettings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=False)

    database_url: str = Field(
        ...,
        description="Database URL",
        validation_alias=AliasChoices("DB_URL_EXAMPLE", "DATABASE_URL"),
    )
    debug: bool = Field(default=False)
    port: int = Field(default=8000)
    tags: List[str] = Field(default=["a"])
    timeout: Optional[float] = Field(default=None)
    log_level: str = "INFO"


ENV_NAMES = ["DB_URL_EXAMPLE", "DATABASE_URL", "DEBUG", "PORT", "TAGS", "TIMEOUT"]


class TestBaseSettings:
    def setup_method(self):
        self._saved = {name: os.environ.pop(name, None) for name in ENV_NAMES}

    def teardown_method(self):
        for name, value in self._saved.items():
            os.environ.pop(name, None)
            if value is not None:
                os.environ[name] = value

    def test_required_field_missing(self):
        with pytest.raises(ValueError, match="database_url"):
            ExampleSettings()

    def test_keyword_arguments_win(self):
        os.environ["DB_URL_EXAMPLE"] = "sqlite:///env.db"
        settings = ExampleSettings(database_url="sqlite:///kw.db")
        assert settings.database_url == "sqlite:///kw.db"

    def test_alias_order(self):
        os.environ["DATABASE_URL"] = "sqlite:///second.db"
        assert ExampleSettings().database_url == "sqlite:///second.db"

        os.environ["DB_URL_EXAMPLE"] = "sqlite:///first.db"
        assert ExampleSettings().database_url == "sqlite:///first.db"

    def test_defaults(self):
        settings = ExampleSettings(database_url="sqlite://")
        assert settings.debug is False
        assert settings.port == 8000
        assert settings.tags == ["a"]
        assert settings.timeout is None
        assert settings.log_level == "INFO"

    def test_type_conversion(self):
        os.environ.update(
            {
                "DB_URL_EXAMPLE": "sqlite://",
                "DEBUG": "true",
                "PORT": "9001",
                "TAGS": "x, y",
                "TIMEOUT": "2.5",
            }
        )

        settings = ExampleSettings()

        assert settings.debug is True
        assert settings.port == 9001
        assert settings.tags == ["x", "y"]
        assert settings.timeout == 2.5

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text('# comment\nDB_URL_EXAMPLE="sqlite:///from-file.db"\n')

        class FileSettings(ExampleSettings):
            model_config = SettingsConfigDict(env_file=str(env_file))

        assert FileSettings().database_url == "sqlite:///from-file.db"
