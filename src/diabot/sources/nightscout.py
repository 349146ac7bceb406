"""Lectura de lecturas SGV y ajustes desde la API de Nightscout."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlparse

import requests
from dateutil import parser as date_parser

from diabot.conversion import MGDL_PER_MMOL, round_to
from diabot.errors import ArgumentError
from diabot.model import GlucoseReading, NightscoutData
from diabot.sources.base import DataSource, SourcePaths

logger = logging.getLogger(__name__)

DEFAULT_TOP = 180
DEFAULT_BOTTOM = 70


@dataclass(frozen=True)
class NightscoutPaths(SourcePaths):
    """Base URL (and optional access token) of a Nightscout instance."""

    token: str | None = None


class NightscoutSource(DataSource):
    """Nightscout REST API reader."""

    def __init__(self, paths: NightscoutPaths, timeout: float = 10.0) -> None:
        super().__init__(paths)
        self._token = paths.token
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._paths.url.rstrip("/")

    def validate(self) -> None:
        """Validate that the URL is an http(s) URL with a host."""
        parsed = urlparse(self._paths.url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ArgumentError(f"`{self._paths.url}` is not a valid Nightscout URL")

    def load_settings(self) -> tuple[str | None, int, int]:
        """Fetch display units and target range from ``status.json``.

        Returns:
            Tuple of (units, top, bottom); thresholds in mg/dL.
        """
        payload = self._get("/api/v1/status.json")
        settings = payload.get("settings") if isinstance(payload, dict) else None
        if not isinstance(settings, dict):
            return None, DEFAULT_TOP, DEFAULT_BOTTOM

        thresholds = settings.get("thresholds") or {}
        units = settings.get("units")
        top = _as_int(thresholds.get("bgTargetTop"), DEFAULT_TOP)
        bottom = _as_int(thresholds.get("bgTargetBottom"), DEFAULT_BOTTOM)
        return (str(units) if units else None), top, bottom

    def load_entries(self, count: int) -> list[GlucoseReading]:
        """Fetch the latest ``count`` SGV entries.

        Raises:
            ArgumentError: If the response is not a JSON list.
        """
        raw = self._get("/api/v1/entries/sgv.json", {"count": count})
        if not isinstance(raw, list):
            raise ArgumentError("Nightscout entries must be a list")

        out: list[GlucoseReading] = []
        for item in raw:
            reading = _item_to_reading(item)
            if reading is not None:
                out.append(reading)
        out.sort(key=lambda r: r.timestamp)
        return out

    def load(self, count: int) -> NightscoutData:
        """Fetch settings and entries as one :class:`NightscoutData`."""
        self.validate()
        units, top, bottom = self.load_settings()
        entries = self.load_entries(count)
        logger.info(
            "Loaded %d entries from %s (units=%s)", len(entries), self.base_url, units
        )
        return NightscoutData(entries=entries, units=units, top=top, bottom=bottom)

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        query: dict[str, Any] = dict(params or {})
        if self._token:
            query["token"] = self._token
        resp = requests.get(
            f"{self.base_url}{path}",
            params=query,
            headers={"Accept": "application/json"},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        return resp.json()


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _item_to_reading(item: Any) -> GlucoseReading | None:
    """Convierte un ítem SGV en GlucoseReading; None si falta sgv o fecha."""
    if not isinstance(item, dict):
        return None
    sgv = item.get("sgv")
    if sgv is None:
        return None
    try:
        ts = _parse_timestamp(item.get("dateString"), item.get("date"))
    except ValueError:
        logger.warning("Skipping entry without timestamp: %s", item.get("_id"))
        return None
    try:
        mg_dl = int(sgv)
    except (TypeError, ValueError):
        logger.warning("Skipping entry with invalid sgv: %r", sgv)
        return None
    direction = item.get("direction")
    return GlucoseReading(
        timestamp=ts,
        mg_dl=mg_dl,
        mmol_l=round_to(mg_dl / MGDL_PER_MMOL, 1),
        direction=str(direction) if direction else None,
    )


def _parse_timestamp(date_string: Any, epoch_ms: Any) -> datetime:
    """Parses ``dateString`` (ISO 8601) or falls back to the epoch in ms."""
    if isinstance(date_string, str) and date_string.strip():
        dt = date_parser.isoparse(date_string)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt

    if epoch_ms is not None:
        return datetime.fromtimestamp(int(epoch_ms) / 1000, tz=timezone.utc)

    raise ValueError("Missing dateString and date")
