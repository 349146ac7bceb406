"""Configuración del bot desde variables de entorno (.env)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeVar

from dotenv import load_dotenv

from diabot.errors import ConfigError
from diabot.graph import GraphSettings, GraphTheme, PlottingStyle

DEFAULT_HOME = Path.home() / ".diabot"

_E = TypeVar("_E", GraphTheme, PlottingStyle)


@dataclass(frozen=True)
class BotConfig:
    """Runtime configuration of the bot."""

    token: str
    prefix: str = "diabot "
    db_path: Path = DEFAULT_HOME / "diabot.sqlite3"
    log_dir: Path = DEFAULT_HOME / "logs"
    log_level: str = "INFO"
    graph: GraphSettings = field(default_factory=GraphSettings)


def load_config(env_path: Path | None = None) -> BotConfig:
    """Load configuration from the environment, after reading ``.env``.

    Raises:
        ConfigError: If the token is missing or a value is invalid.
    """
    load_dotenv(dotenv_path=str(env_path) if env_path else None)

    token = os.getenv("DISCORD_TOKEN", "").strip()
    if not token:
        raise ConfigError("DISCORD_TOKEN must be set (environment or .env)")

    theme = _parse_enum(GraphTheme, "DIABOT_THEME", "dark")
    plot_mode = _parse_enum(PlottingStyle, "DIABOT_PLOT_STYLE", "scatter")

    return BotConfig(
        token=token,
        prefix=os.getenv("DIABOT_PREFIX", "diabot "),
        db_path=Path(
            os.getenv("DIABOT_DB_PATH", str(DEFAULT_HOME / "diabot.sqlite3"))
        ).expanduser(),
        log_dir=Path(os.getenv("DIABOT_LOG_DIR", str(DEFAULT_HOME / "logs"))).expanduser(),
        log_level=os.getenv("DIABOT_LOG_LEVEL", "INFO").upper(),
        graph=GraphSettings(theme=theme, plot_mode=plot_mode),
    )


def _parse_enum(enum_cls: type[_E], var: str, default: str) -> _E:
    raw = os.getenv(var, default).strip().lower()
    try:
        return enum_cls(raw)
    except ValueError:
        choices = ", ".join(m.value for m in enum_cls)
        raise ConfigError(f"{var} must be one of: {choices}") from None
