from __future__ import annotations

import argparse
import logging
from pathlib import Path

from dsecbot.config import BotConfig, load_bot_config, load_config_with_secrets, mask_secret

log = logging.getLogger("dsec-bot")

DEFAULT_CONFIG_DIR = Path.cwd()


def check_config(config_dir: Path) -> int:
    """Validate config + secrets without connecting to Discord."""
    errors = []
    try:
        cfg, config_path, secrets_path = load_config_with_secrets(config_dir)
    except (FileNotFoundError, ValueError) as e:
        print("[ConfigCheck] FAILED")
        print(f"- {e}")
        return 2

    if not secrets_path.exists():
        errors.append(f"Missing secrets file: {secrets_path}")

    parsed = None
    try:
        parsed = BotConfig.from_dict(cfg)
    except RuntimeError as e:
        errors.append(str(e))

    if errors:
        print("[ConfigCheck] FAILED")
        for e in errors:
            print(f"- {e}")
        return 2

    print("[ConfigCheck] OK")
    print(f"- config: {config_path}")
    print(f"- secrets: {secrets_path}")
    print(f"- bot_token: {mask_secret(parsed.bot_token)}")
    print(f"- supabase.key: {mask_secret(parsed.supabase_key)}")
    print(f"- guild_id: {parsed.guild_id}")
    print(f"- verified_role_id: {parsed.verified_role_id}")
    print(f"- weather.api_key: {mask_secret(parsed.weather_api_key) if parsed.weather_api_key else '<unset, /weather disabled>'}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="dsecbot", add_help=True)
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=DEFAULT_CONFIG_DIR,
        help="Folder holding config.json and config.secrets.json (default: current directory).",
    )
    parser.add_argument(
        "--check-config",
        action="store_true",
        help="Validate config + secrets and exit (no Discord connection).",
    )
    args = parser.parse_args(argv)

    if args.check_config:
        return check_config(args.config_dir)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    from dsecbot.bot import DSECBot

    config = load_bot_config(args.config_dir)
    log.info(f"[Config] Loaded (guild={config.guild_id}, token={mask_secret(config.bot_token)})")
    DSECBot(config).run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
