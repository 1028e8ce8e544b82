from datetime import timedelta

import pytest

from supplydesk.config import ConfigError, load_from_env

ENV_KEYS = [
    "ADMIN_PASSWORD",
    "ERP_DEFAULT_UOM",
    "SETTINGS_PASSWORD",
    "ERP_DEFAULT_TARGET_WAREHOUSE",
    "ERP_DEFAULT_SOURCE_WAREHOUSE",
    "ERP_URL",
    "ERP_API_KEY",
    "ERP_API_SECRET",
    "ERP_TIMEOUT_SECONDS",
    "WERKA_TELEGRAM_ID",
    "ADMINKA_PHONE",
    "ADMINKA_NAME",
    "WERKA_PHONE",
    "WERKA_NAME",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for key in ENV_KEYS:
        # setenv first so that teardown restores the variable to "absent"
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_load_from_env_reads_quoted_values(clean_env):
    (clean_env / ".env").write_text('ADMIN_PASSWORD="password"\nERP_DEFAULT_UOM="Kg"\n')

    cfg = load_from_env()

    assert cfg.admin_password == "password"
    assert cfg.default_uom == "Kg"


def test_defaults_without_env_file(clean_env):
    cfg = load_from_env()
    assert cfg.request_timeout == timedelta(seconds=15)
    assert cfg.werka_telegram_id == 0
    assert cfg.default_erp_url == ""


def test_existing_environment_is_not_overridden(clean_env, monkeypatch):
    (clean_env / ".env").write_text('ERP_DEFAULT_UOM="Kg"\n')
    monkeypatch.setenv("ERP_DEFAULT_UOM", "Lt")

    cfg = load_from_env()

    assert cfg.default_uom == "Lt"


def test_explicit_env_file_path(clean_env):
    env_path = clean_env / "custom.env"
    env_path.write_text("ERP_URL=http://localhost:8000\nWERKA_NAME=Werka\n")

    cfg = load_from_env(env_path)

    assert cfg.default_erp_url == "http://localhost:8000"
    assert cfg.werka_name == "Werka"


def test_timeout_seconds_parsed(clean_env, monkeypatch):
    monkeypatch.setenv("ERP_TIMEOUT_SECONDS", "30")
    cfg = load_from_env()
    assert cfg.request_timeout == timedelta(seconds=30)


@pytest.mark.parametrize("raw", ["0", "-5", "abc", "1.5", " 10"])
def test_invalid_timeout_rejected(clean_env, monkeypatch, raw):
    monkeypatch.setenv("ERP_TIMEOUT_SECONDS", raw)
    with pytest.raises(ConfigError, match="ERP_TIMEOUT_SECONDS"):
        load_from_env()


def test_werka_telegram_id_parsed(clean_env, monkeypatch):
    monkeypatch.setenv("WERKA_TELEGRAM_ID", "-100")
    cfg = load_from_env()
    assert cfg.werka_telegram_id == -100


@pytest.mark.parametrize("raw", ["abc", "12x", "99999999999999999999"])
def test_invalid_werka_telegram_id_rejected(clean_env, monkeypatch, raw):
    monkeypatch.setenv("WERKA_TELEGRAM_ID", raw)
    with pytest.raises(ConfigError, match="WERKA_TELEGRAM_ID"):
        load_from_env()