import pytest
from pydantic import ValidationError

from kitchenpos.core.config import EnvironmentMode, Settings


def test_env_mode_is_case_insensitive():
    settings = Settings(env_mode="PRODUCTION", database_url="postgresql+psycopg://db/pos")

    assert settings.env_mode == EnvironmentMode.PRODUCTION
    assert settings.is_production
    assert settings.validate_production_config() == []


def test_invalid_env_mode_is_rejected():
    with pytest.raises(ValidationError):
        Settings(env_mode="qa")


def test_sqlite_outside_development_is_flagged():
    settings = Settings(env_mode="staging", database_url="sqlite+aiosqlite:///pos.db", debug=True)

    assert settings.uses_sqlite
    assert settings.validate_production_config() == ["DATABASE_URL", "DEBUG"]


def test_development_accepts_sqlite():
    settings = Settings(env_mode="development", database_url="sqlite+aiosqlite:///:memory:")

    assert settings.is_development
    assert settings.validate_production_config() == []
