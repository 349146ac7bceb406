"""Clases base para fuentes de datos."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class SourcePaths:
    """Location of a remote data source."""

    url: str


class DataSource(ABC):
    """Abstract data source."""

    def __init__(self, paths: SourcePaths) -> None:
        """Create a data source.

        Args:
            paths: Source location configuration.
        """
        self._paths = paths

    @abstractmethod
    def validate(self) -> None:
        """Validate that the source location is usable.

        Raises:
            ArgumentError: If the location is malformed.
        """
