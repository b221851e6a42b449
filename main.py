#!/usr/bin/env python3
"""
SlotBanBot - Slot bans temporaires pilotés par le chat Twitch et un dashboard

Un seul event loop: serveur uvicorn (API + WebSocket), client IRC Twitch
et sweep des bans expirés.
"""

import argparse
import asyncio
import logging
import pathlib
import sys

import uvicorn
import yaml

from core.registry import Registry
from twitchapi.auth_manager import AuthManager, TokenInfo
from web.backend.config import get_settings
from web.backend.main import create_app

LOGGER = logging.getLogger(__name__)

TEST_SLOT_NAME = "Book of Dead"
TEST_SLOT_BANNED_BY = "TestUser"


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="SlotBanBot - Twitch slot ban list")
    parser.add_argument(
        '--config',
        type=str,
        default='config/config.yaml',
        help='Path to config file (default: config/config.yaml)'
    )
    parser.add_argument('--host', type=str, help='Override server.host')
    parser.add_argument('--port', type=int, help='Override server.port')
    parser.add_argument(
        '--no-bot',
        action='store_true',
        help='Run the API only, without connecting to Twitch chat'
    )
    parser.add_argument(
        '--seed-test-data',
        action='store_true',
        help='Add a test ban at startup (development)'
    )
    return parser.parse_args(argv)


def setup_logging(debug: bool = False):
    """Logs console + logs/slotbanbot.log"""
    logs_base = pathlib.Path("logs")
    logs_base.mkdir(exist_ok=True)
    log_file = logs_base / "slotbanbot.log"

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s %(message)s",
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ],
        force=True
    )
    return log_file


def load_config(config_path='config/config.yaml'):
    """Charge config.yaml (config vide si absent)"""
    config_file = pathlib.Path(config_path)
    if not config_file.exists():
        LOGGER.warning(f"⚠️ Config file {config_path} not found, using defaults")
        return {}
    with open(config_file, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def build_registry(config, settings, with_bot: bool = True) -> Registry:
    """Relie config + secrets → Registry"""
    token = None
    auth = None

    if with_bot:
        token = TokenInfo.from_credentials(
            settings.twitch_username,
            settings.twitch_token,
            settings.channel_list
        )
        if token and settings.twitch_client_id:
            auth = AuthManager(settings.twitch_client_id)
        elif token:
            LOGGER.error("❌ TWITCH_CLIENT_ID manquant, bot désactivé")
            token = None

    return Registry.build(config, token=token, auth=auth)


def seed_test_data(registry: Registry) -> None:
    slot = registry.ban_service.add_manual_ban(TEST_SLOT_NAME, TEST_SLOT_BANNED_BY)
    if slot:
        LOGGER.info(f"🧪 Test data added: '{slot.slot_name}'")


async def main(argv=None):
    """Main entry point: API + WebSocket + IRC + sweep"""
    args = parse_args(argv)
    settings = get_settings()
    log_file = setup_logging(settings.debug)

    config = load_config(args.config)
    server_config = config.get("server", {})
    host = args.host or settings.host or server_config.get("host", "0.0.0.0")
    port = args.port or settings.port or server_config.get("port", 5000)

    registry = build_registry(config, settings, with_bot=not args.no_bot)
    if args.seed_test_data:
        seed_test_data(registry)

    app = create_app(registry)

    LOGGER.info(f"🚀 SlotBanBot démarré | http://{host}:{port} | logs: {log_file}")

    server = uvicorn.Server(uvicorn.Config(app, host=host, port=port, log_config=None))
    await server.serve()

    LOGGER.info("Termine")


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nAu revoir !")
    except Exception as e:
        LOGGER.error(f"Erreur fatale: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    run()
