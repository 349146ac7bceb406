"""Persistencia SQLite de los canales de administración por servidor."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS admin_channels (
    guild_id TEXT NOT NULL,
    channel_id TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (guild_id, channel_id)
);

CREATE INDEX IF NOT EXISTS idx_admin_channels_guild
ON admin_channels(guild_id);
"""


class AdminStore:
    """Repositorio SQLite de canales de administración, por guild."""

    def __init__(self, db_path: Path) -> None:
        """Create store and ensure schema exists."""
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    def add_admin_channel(self, guild_id: str, channel_id: str) -> None:
        """Marca un canal como canal de administración (idempotente)."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO admin_channels(guild_id, channel_id) VALUES(?, ?)
                ON CONFLICT(guild_id, channel_id) DO NOTHING
                """,
                (guild_id, channel_id),
            )
            conn.commit()
        logger.info("Admin channel %s added for guild %s", channel_id, guild_id)

    def remove_admin_channel(self, guild_id: str, channel_id: str) -> bool:
        """Quita un canal. Devuelve True si existía."""
        with self._connect() as conn:
            cur = conn.execute(
                "DELETE FROM admin_channels WHERE guild_id = ? AND channel_id = ?",
                (guild_id, channel_id),
            )
            conn.commit()
            removed = cur.rowcount > 0
        if removed:
            logger.info("Admin channel %s removed for guild %s", channel_id, guild_id)
        return removed

    def list_admin_channels(self, guild_id: str) -> list[str]:
        """IDs de canales de administración, en orden de alta."""
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT channel_id FROM admin_channels
                WHERE guild_id = ?
                ORDER BY rowid
                """,
                (guild_id,),
            ).fetchall()
        return [str(row["channel_id"]) for row in rows]

    def is_admin_channel(self, guild_id: str, channel_id: str) -> bool:
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT 1 FROM admin_channels
                WHERE guild_id = ? AND channel_id = ?
                """,
                (guild_id, channel_id),
            ).fetchone()
        return row is not None
