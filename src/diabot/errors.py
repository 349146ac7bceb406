"""Excepciones del bot; el adaptador de Discord las convierte en respuestas."""

from __future__ import annotations


class DiabotError(Exception):
    """Base error for anything the bot reports back to the user."""


class ArgumentError(DiabotError, ValueError):
    """Malformed or missing command arguments."""


class NotFoundError(ArgumentError):
    """A referenced object (channel, command) does not exist."""


class StateError(DiabotError, RuntimeError):
    """An operation is not valid for the object's current state."""


class PermissionDeniedError(DiabotError):
    """The caller is not allowed to run the command."""


class ConfigError(DiabotError):
    """Missing or invalid configuration."""
