"""CLI para arrancar el bot de Discord."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from logging.handlers import RotatingFileHandler
from pathlib import Path

from diabot.bot import DiabotClient
from diabot.commands.catalog import build_registry
from diabot.config import BotConfig, load_config
from diabot.errors import ConfigError
from diabot.storage import AdminStore

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        description="Diabot: BG conversions, admin channels and Nightscout graphs."
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Archivo .env a cargar (default: busca .env hacia arriba).",
    )
    parser.add_argument("--prefix", default=None, help="Command prefix.")
    parser.add_argument("--db-path", default=None, help="SQLite database path.")
    parser.add_argument("--log-level", default=None, help="Logging level.")
    return parser.parse_args()


def setup_logging(log_dir: Path, level: str) -> None:
    """Rotating file handler (5 MB, 3 backups) plus stderr."""
    log_dir.mkdir(parents=True, exist_ok=True)
    root = logging.getLogger()
    root.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT)
    file_handler = RotatingFileHandler(
        str(log_dir / "diabot.log"),
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
    )
    file_handler.setFormatter(formatter)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root.addHandler(file_handler)
    root.addHandler(stream_handler)


def apply_overrides(config: BotConfig, ns: argparse.Namespace) -> BotConfig:
    """CLI flags win over the environment."""
    if ns.prefix:
        config = replace(config, prefix=ns.prefix)
    if ns.db_path:
        config = replace(config, db_path=Path(ns.db_path).expanduser())
    if ns.log_level:
        config = replace(config, log_level=ns.log_level.upper())
    return config


def main() -> int:
    """Run the bot.

    Returns:
        Exit code (0 on clean shutdown, 1 on configuration errors).
    """
    ns = parse_args()
    env_path = Path(ns.env_file).expanduser() if ns.env_file else None
    try:
        config = apply_overrides(load_config(env_path), ns)
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    setup_logging(config.log_dir, config.log_level)
    store = AdminStore(config.db_path)
    client = DiabotClient(
        registry=build_registry(),
        store=store,
        prefix=config.prefix,
        graph_settings=config.graph,
    )
    logger.info("Starting diabot (prefix=%r, db=%s)", config.prefix, config.db_path)
    client.run(config.token, log_handler=None)
    return 0
