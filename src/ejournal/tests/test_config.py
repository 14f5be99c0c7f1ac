from ejournal.app_logger import logging_config
from ejournal.core.config import Settings


def make(**kw) -> Settings:
    return Settings(_env_file=None, **kw)


def test_postgres_urls_get_async_driver():
    assert make(DATABASE_URL="postgres://u:p@db/x").DATABASE_URL == "postgresql+asyncpg://u:p@db/x"
    assert make(DATABASE_URL="postgresql://u:p@db/x").DATABASE_URL == "postgresql+asyncpg://u:p@db/x"
    assert make(DATABASE_URL="sqlite+aiosqlite://").is_sqlite


def test_cors_origins_from_json_csv_or_public_url():
    assert make(CORS_ORIGINS='["http://a.org/", "http://b.org"]').cors_origins == ["http://a.org", "http://b.org"]
    assert make(CORS_ORIGINS="http://a.org, http://b.org").cors_origins == ["http://a.org", "http://b.org"]
    assert make(PUBLIC_URL="http://front.org/").cors_origins == ["http://front.org"]


def test_log_level_is_upper_cased():
    assert make(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"


def test_logging_config_formatters():
    assert logging_config("INFO", json_logs=True)["handlers"]["console"]["formatter"] == "json"
    assert logging_config("INFO", json_logs=False)["handlers"]["console"]["formatter"] == "plain"
