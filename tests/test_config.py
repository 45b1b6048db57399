import json

import pytest

from dsecbot.config import (
    BotConfig,
    is_placeholder_secret,
    load_bot_config,
    load_config_with_secrets,
    mask_secret,
)
from dsecbot.__main__ import check_config

BASE_CONFIG = {
    "guild_id": 1111,
    "verified_role_id": 2222,
    "supabase": {"url": "https://proj.supabase.co/", "members_table": "active_members"},
}
SECRETS = {"bot_token": "discord-token-abcdef", "supabase": {"key": "service-key-1234"}}


def _merged(**overrides):
    cfg = {
        "bot_token": SECRETS["bot_token"],
        "guild_id": BASE_CONFIG["guild_id"],
        "verified_role_id": BASE_CONFIG["verified_role_id"],
        "supabase": dict(BASE_CONFIG["supabase"], **SECRETS["supabase"]),
    }
    cfg.update(overrides)
    return cfg


def _write(tmp_path, config=None, secrets=None):
    if config is not None:
        (tmp_path / "config.json").write_text(json.dumps(config), encoding="utf-8")
    if secrets is not None:
        (tmp_path / "config.secrets.json").write_text(json.dumps(secrets), encoding="utf-8")


def test_secrets_are_deep_merged(tmp_path):
    _write(tmp_path, BASE_CONFIG, SECRETS)
    cfg, config_path, secrets_path = load_config_with_secrets(tmp_path)

    assert cfg["bot_token"] == "discord-token-abcdef"
    # nested merge keeps non-secret keys
    assert cfg["supabase"] == {
        "url": "https://proj.supabase.co/",
        "members_table": "active_members",
        "key": "service-key-1234",
    }
    assert config_path == tmp_path / "config.json"
    assert secrets_path.exists()


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config_with_secrets(tmp_path)


def test_missing_secrets_returns_config_only(tmp_path):
    _write(tmp_path, BASE_CONFIG)
    cfg, _, secrets_path = load_config_with_secrets(tmp_path)
    assert "bot_token" not in cfg
    assert not secrets_path.exists()
    with pytest.raises(RuntimeError, match="Missing server-only secrets file"):
        load_bot_config(tmp_path)


def test_secrets_must_be_object(tmp_path):
    _write(tmp_path, BASE_CONFIG, ["nope"])
    with pytest.raises(ValueError):
        load_config_with_secrets(tmp_path)


def test_bot_config_from_files(tmp_path):
    _write(tmp_path, BASE_CONFIG, SECRETS)
    config = load_bot_config(tmp_path)

    assert config.guild_id == 1111
    assert config.verified_role_id == 2222
    assert config.supabase_url == "https://proj.supabase.co"
    assert config.supabase_key == "service-key-1234"
    assert config.members_table == "active_members"
    assert config.modal_timeout_seconds == 120.0
    assert config.store_timeout_seconds == 10.0


def test_bot_config_accepts_string_snowflakes():
    cfg = _merged(guild_id="1111", verified_role_id="2222")
    config = BotConfig.from_dict(cfg)
    assert (config.guild_id, config.verified_role_id) == (1111, 2222)


def test_modal_timeout_override():
    cfg = _merged(verification={"modal_timeout_seconds": 45})
    assert BotConfig.from_dict(cfg).modal_timeout_seconds == 45.0


@pytest.mark.parametrize(
    "patch,message",
    [
        ({"bot_token": "PUT_DISCORD_BOT_TOKEN_HERE"}, "bot_token"),
        ({"guild_id": None}, "guild_id"),
        ({"verified_role_id": "abc"}, "verified_role_id"),
        ({"supabase": {"url": "https://proj.supabase.co"}}, "supabase.key"),
        ({"supabase": {"key": "k-123456"}}, "supabase.url"),
    ],
)
def test_bot_config_validation(patch, message):
    cfg = _merged(**patch)
    with pytest.raises(RuntimeError, match=message):
        BotConfig.from_dict(cfg)


def test_placeholder_and_mask():
    assert is_placeholder_secret(None)
    assert is_placeholder_secret("  ")
    assert is_placeholder_secret("PUT_SUPABASE_KEY_HERE")
    assert not is_placeholder_secret("real-secret")

    assert mask_secret(None) == "<missing>"
    assert mask_secret("abc") == "***"
    assert mask_secret("abcdefgh") == "****efgh"


def test_check_config_ok(tmp_path, capsys):
    _write(tmp_path, BASE_CONFIG, SECRETS)
    assert check_config(tmp_path) == 0
    out = capsys.readouterr().out
    assert "[ConfigCheck] OK" in out
    assert "discord-token-abcdef" not in out


def test_check_config_fails_without_secrets(tmp_path, capsys):
    _write(tmp_path, BASE_CONFIG)
    assert check_config(tmp_path) == 2
    assert "Missing secrets file" in capsys.readouterr().out


def test_weather_defaults_to_disabled():
    config = BotConfig.from_dict(_merged())
    assert config.weather_api_key is None
    assert config.weather_base_url == "https://api.weatherapi.com/v1"


@pytest.mark.parametrize("value", ["PUT_WEATHERAPI_KEY_HERE", "", "   ", None])
def test_weather_placeholder_key_disables_command(value):
    config = BotConfig.from_dict(_merged(weather={"api_key": value}))
    assert config.weather_api_key is None


def test_weather_key_and_base_url():
    cfg = _merged(weather={"api_key": " wk-5678 ", "base_url": "http://localhost:9000/v1"})
    config = BotConfig.from_dict(cfg)
    assert config.weather_api_key == "wk-5678"
    assert config.weather_base_url == "http://localhost:9000/v1"


def test_check_config_reports_weather(tmp_path, capsys):
    _write(tmp_path, BASE_CONFIG, dict(SECRETS, weather={"api_key": "wk-abcdef"}))
    assert check_config(tmp_path) == 0
    out = capsys.readouterr().out
    assert "weather.api_key: *****cdef" in out
    assert "wk-abcdef" not in out
