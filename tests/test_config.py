from __future__ import annotations

import os

import pytest

from octonius import db, env
from octonius.config import Settings, StorageConfig, parse_duration

_ENV_KEYS = (
    "OCTONIUS_DATABASE_URL",
    "DATABASE_URL",
    "ENVIRONMENT",
    "NODE_ENV",
    "JWT_ACCESS_KEY",
    "JWT_REFRESH_KEY",
    "JWT_ACCESS_TIME",
    "JWT_REFRESH_TIME",
    "CORS_ORIGINS",
    "AWS_S3_BUCKET_NAME",
    "AWS_REGION",
    "CDN_BASE_URL",
    "S3_UPLOAD_URL_EXPIRY",
    "OCTONIUS_ENV_FILE",
)


@pytest.fixture()
def clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.mark.parametrize(
    ("value", "expected"),
    [("15m", 900), ("7d", 604800), ("3600", 3600), (" 2h ", 7200), ("30s", 30), (42, 42)],
)
def test_parse_duration(value, expected):
    assert parse_duration(value) == expected


@pytest.mark.parametrize("value", ["", "fast", "10w", "-5m"])
def test_parse_duration_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_duration(value)


def test_settings_from_env_defaults(clean_env):
    settings = Settings.from_env()

    assert settings.environment == "development"
    assert settings.access_token_ttl == 900
    assert settings.refresh_token_ttl == 7 * 86400
    assert settings.storage is None
    assert "http://localhost:4200" in settings.cors_origins


def test_settings_from_env_overrides(clean_env):
    clean_env.setenv("OCTONIUS_DATABASE_URL", "postgres://u:p@db/octonius")
    clean_env.setenv("JWT_ACCESS_TIME", "1h")
    clean_env.setenv("CORS_ORIGINS", "https://a.test, https://b.test ,")
    clean_env.setenv("AWS_S3_BUCKET_NAME", "uploads")
    clean_env.setenv("CDN_BASE_URL", "https://cdn.test")
    clean_env.setenv("S3_UPLOAD_URL_EXPIRY", "60")

    settings = Settings.from_env()

    assert settings.database_url == "postgres://u:p@db/octonius"
    assert settings.access_token_ttl == 3600
    assert settings.cors_origins == ("https://a.test", "https://b.test")
    assert settings.storage == StorageConfig(
        bucket_name="uploads", cdn_base_url="https://cdn.test", upload_url_expiry=60
    )


def test_production_requires_jwt_secrets(clean_env):
    clean_env.setenv("ENVIRONMENT", "production")

    with pytest.raises(ValueError, match="JWT secrets required"):
        Settings.from_env()

    clean_env.setenv("JWT_ACCESS_KEY", "a" * 32)
    clean_env.setenv("JWT_REFRESH_KEY", "r" * 32)
    assert Settings.from_env().jwt_access_key == "a" * 32


# ========================================================================
# .env 파일
# ========================================================================


@pytest.fixture()
def env_dir(clean_env, tmp_path):
    clean_env.chdir(tmp_path)
    clean_env.setattr(env, "_loaded", set())
    yield tmp_path
    for key in ("OCTONIUS_SAMPLE", "OCTONIUS_SAMPLE_BASE"):
        os.environ.pop(key, None)


def test_environment_file_takes_precedence_over_base(env_dir, clean_env):
    (env_dir / ".env").write_text("OCTONIUS_SAMPLE=base\nOCTONIUS_SAMPLE_BASE=1\n")
    (env_dir / ".env.staging").write_text("OCTONIUS_SAMPLE=staging\n")
    clean_env.setenv("ENVIRONMENT", "staging")

    loaded = env.load_env()

    assert [p.name for p in loaded] == [".env.staging", ".env"]
    assert os.environ["OCTONIUS_SAMPLE"] == "staging"
    assert os.environ["OCTONIUS_SAMPLE_BASE"] == "1"
    assert env.load_env() == []


def test_process_environment_is_not_overridden(env_dir, clean_env):
    (env_dir / ".env").write_text("OCTONIUS_SAMPLE=from-file\n")
    clean_env.setenv("OCTONIUS_SAMPLE", "from-shell")

    env.load_env()

    assert os.environ["OCTONIUS_SAMPLE"] == "from-shell"


def test_explicit_env_file(env_dir, clean_env):
    (env_dir / ".env").write_text("OCTONIUS_SAMPLE=default\n")
    custom = env_dir / "deploy.env"
    custom.write_text("OCTONIUS_SAMPLE=custom\n")
    clean_env.setenv("OCTONIUS_ENV_FILE", str(custom))

    assert env.env_files() == [custom.resolve()]
    env.load_env()
    assert os.environ["OCTONIUS_SAMPLE"] == "custom"

    clean_env.setenv("OCTONIUS_ENV_FILE", str(env_dir / "missing.env"))
    assert env.env_files() == []


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("postgres://u@h/d", "postgresql+psycopg://u@h/d"),
        ("postgresql://u@h/d", "postgresql+psycopg://u@h/d"),
        ("postgresql+psycopg://u@h/d", "postgresql+psycopg://u@h/d"),
        ("sqlite:///x.db", "sqlite:///x.db"),
    ],
)
def test_normalize_database_url(url, expected):
    assert db.normalize_database_url(url) == expected


def test_init_engine_uses_pool_for_postgres(monkeypatch):
    captured = {}

    def fake_create_engine(url, **kwargs):
        captured["url"] = url
        captured["kwargs"] = kwargs
        return object()

    monkeypatch.setattr(db, "create_engine", fake_create_engine)

    db.init_engine(Settings(database_url="postgres://u:p@db/octonius"))

    assert captured["url"] == "postgresql+psycopg://u:p@db/octonius"
    assert captured["kwargs"]["pool_size"] == 10
    assert captured["kwargs"]["pool_pre_ping"] is True


def test_init_engine_shares_sqlite_connection(monkeypatch):
    captured = {}

    def fake_create_engine(url, **kwargs):
        captured.update(kwargs)
        return object()

    monkeypatch.setattr(db, "create_engine", fake_create_engine)

    db.init_engine(Settings(database_url="sqlite:///:memory:"))

    assert captured["connect_args"] == {"check_same_thread": False}
    assert "pool_size" not in captured
