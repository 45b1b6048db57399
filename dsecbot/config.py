from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


DEFAULT_MEMBERS_TABLE = "active_members"
DEFAULT_MODAL_TIMEOUT_SECONDS = 120.0
DEFAULT_STORE_TIMEOUT_SECONDS = 10.0
DEFAULT_WEATHER_BASE_URL = "https://api.weatherapi.com/v1"


def _deep_merge_dict(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge overlay into base (in place) and return base.

    - Dict values are merged recursively
    - Other types overwrite
    """
    for k, v in overlay.items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge_dict(base[k], v)  # type: ignore[index]
        else:
            base[k] = v
    return base


def load_json(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_config_with_secrets(
    base_dir: Path,
    config_name: str = "config.json",
    secrets_name: str = "config.secrets.json",
) -> Tuple[Dict[str, Any], Path, Path]:
    """Load config.json and merge config.secrets.json on top.

    Returns: (merged_config, config_path, secrets_path)
    """
    base_dir = Path(base_dir)
    config_path = base_dir / config_name
    secrets_path = base_dir / secrets_name

    if not config_path.exists():
        raise FileNotFoundError(f"Missing config file: {config_path}")

    config = load_json(config_path)
    if not isinstance(config, dict):
        raise ValueError(f"Invalid config file (expected JSON object): {config_path}")

    if not secrets_path.exists():
        # Caller is expected to fail fast with a clear message.
        return config, config_path, secrets_path

    secrets = load_json(secrets_path)
    if not isinstance(secrets, dict):
        raise ValueError(f"Invalid secrets file (expected JSON object): {secrets_path}")

    _deep_merge_dict(config, secrets)
    return config, config_path, secrets_path


def is_placeholder_secret(value: Any) -> bool:
    """Return True if the provided secret looks like a template/placeholder value."""
    if value is None:
        return True
    s = str(value).strip()
    if not s:
        return True
    upper = s.upper()
    if upper.startswith("PUT_") or upper.endswith("_HERE"):
        return True
    if upper in {"CHANGEME", "REPLACE_ME", "YOUR_TOKEN_HERE"}:
        return True
    return False


def mask_secret(value: Any, show_last: int = 4) -> str:
    """Mask a secret for printing (never output full tokens)."""
    if value is None:
        return "<missing>"
    s = str(value)
    if not s:
        return "<missing>"
    if len(s) <= show_last:
        return "*" * len(s)
    return ("*" * (len(s) - show_last)) + s[-show_last:]


def _require_int(cfg: Dict[str, Any], key: str) -> int:
    raw = cfg.get(key)
    if isinstance(raw, bool):
        raise RuntimeError(f"{key} must be a Discord snowflake (int), got {raw!r}")
    try:
        val = int(str(raw).strip())
    except (TypeError, ValueError):
        raise RuntimeError(f"{key} must be a Discord snowflake (int), got {raw!r}")
    if val <= 0:
        raise RuntimeError(f"{key} must be a positive Discord snowflake, got {raw!r}")
    return val


def _positive_float(section: Dict[str, Any], key: str, default: float) -> float:
    raw = section.get(key, default)
    try:
        val = float(raw)
    except (TypeError, ValueError):
        raise RuntimeError(f"{key} must be a number, got {raw!r}")
    return val if val > 0 else default


@dataclass(frozen=True)
class BotConfig:
    """Startup settings. Read once; never mutated while the bot runs."""

    bot_token: str
    guild_id: int
    verified_role_id: int
    supabase_url: str
    supabase_key: str
    members_table: str = DEFAULT_MEMBERS_TABLE
    store_timeout_seconds: float = DEFAULT_STORE_TIMEOUT_SECONDS
    modal_timeout_seconds: float = DEFAULT_MODAL_TIMEOUT_SECONDS
    # None when weather.api_key is unset or a placeholder; /weather then says so.
    weather_api_key: Optional[str] = None
    weather_base_url: str = DEFAULT_WEATHER_BASE_URL

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "BotConfig":
        if not isinstance(cfg, dict):
            raise RuntimeError("Config must be a JSON object")

        token = str(cfg.get("bot_token") or "").strip()
        if is_placeholder_secret(token):
            raise RuntimeError("bot_token must be set in config.secrets.json")

        supabase = cfg.get("supabase") or {}
        if not isinstance(supabase, dict):
            raise RuntimeError("supabase must be an object in config.json")
        url = str(supabase.get("url") or "").strip()
        if not url:
            raise RuntimeError("supabase.url must be set in config.json")
        key = str(supabase.get("key") or "").strip()
        if is_placeholder_secret(key):
            raise RuntimeError("supabase.key must be set in config.secrets.json")

        verification = cfg.get("verification") or {}
        if not isinstance(verification, dict):
            verification = {}

        weather = cfg.get("weather") or {}
        if not isinstance(weather, dict):
            weather = {}
        weather_key = str(weather.get("api_key") or "").strip()

        return cls(
            bot_token=token,
            guild_id=_require_int(cfg, "guild_id"),
            verified_role_id=_require_int(cfg, "verified_role_id"),
            supabase_url=url.rstrip("/"),
            supabase_key=key,
            members_table=str(supabase.get("members_table") or DEFAULT_MEMBERS_TABLE).strip(),
            store_timeout_seconds=_positive_float(supabase, "timeout_seconds", DEFAULT_STORE_TIMEOUT_SECONDS),
            modal_timeout_seconds=_positive_float(
                verification, "modal_timeout_seconds", DEFAULT_MODAL_TIMEOUT_SECONDS
            ),
            weather_api_key=None if is_placeholder_secret(weather_key) else weather_key,
            weather_base_url=str(weather.get("base_url") or DEFAULT_WEATHER_BASE_URL).strip(),
        )


def load_bot_config(base_dir: Path) -> BotConfig:
    config, _, secrets_path = load_config_with_secrets(base_dir)
    if not secrets_path.exists():
        raise RuntimeError(f"Missing server-only secrets file: {secrets_path}")
    return BotConfig.from_dict(config)
