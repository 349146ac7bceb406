"""Registro de comandos: nombre/alias -> función manejadora."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace

from diabot.errors import ArgumentError, NotFoundError
from diabot.graph import GraphSettings
from diabot.storage import AdminStore


@dataclass(frozen=True)
class Reply:
    """Text reply, optionally with an attached file."""

    text: str
    file: bytes | None = None
    filename: str | None = None


@dataclass(frozen=True)
class CommandContext:
    """Everything a handler needs from the invoking message.

    ``channel_name`` resolves a channel ID to its name, or None when the
    channel doesn't exist.
    """

    guild_id: str | None
    args: str
    store: AdminStore
    channel_name: Callable[[str], str | None]
    is_admin: bool = False
    graph_settings: GraphSettings = field(default_factory=GraphSettings)


Handler = Callable[[CommandContext], Reply]
Check = Callable[[CommandContext], None]


@dataclass(frozen=True)
class Command:
    """A registered command."""

    name: str
    help: str
    aliases: tuple[str, ...]
    handler: Handler


class CommandRegistry:
    """Maps command names and aliases to handlers.

    A registry with a ``name`` can be added to another registry as a command
    group; its ``check`` runs before any of its subcommands.
    """

    def __init__(
        self, name: str | None = None, help: str = "", check: Check | None = None
    ) -> None:
        self.name = name
        self.help = help
        self._check = check
        self._commands: dict[str, Command] = {}

    def register(
        self, name: str, help: str, aliases: Iterable[str] = ()
    ) -> Callable[[Handler], Handler]:
        """Decorator form of :meth:`add`."""

        def decorator(handler: Handler) -> Handler:
            self.add(Command(name, help, tuple(aliases), handler))
            return handler

        return decorator

    def add(self, command: Command) -> None:
        """Register ``command`` under its name and aliases.

        Raises:
            ValueError: If a name or alias is already taken.
        """
        keys = [command.name, *command.aliases]
        taken = [k for k in keys if k.lower() in self._commands]
        if taken:
            raise ValueError(f"Command name(s) already registered: {taken}")
        for key in keys:
            self._commands[key.lower()] = command

    def add_group(self, group: CommandRegistry, aliases: Iterable[str] = ()) -> None:
        """Register another registry as a subcommand group."""
        if not group.name:
            raise ValueError("Command groups need a name")
        self.add(Command(group.name, group.help, tuple(aliases), group.dispatch))

    def commands(self) -> list[Command]:
        """Registered commands, without alias duplicates."""
        seen: dict[str, Command] = {}
        for command in self._commands.values():
            seen.setdefault(command.name, command)
        return list(seen.values())

    def resolve(self, name: str) -> Command:
        """Look up a command by name or alias.

        Raises:
            NotFoundError: If nothing is registered under ``name``.
        """
        command = self._commands.get(name.lower())
        if command is None:
            raise NotFoundError(f"Unknown command `{name}`")
        return command

    def dispatch(self, ctx: CommandContext) -> Reply:
        """Run the command named by the first token of ``ctx.args``.

        The handler receives the rest of the text as its ``args``.
        """
        parts = ctx.args.strip().split(None, 1)
        if not parts:
            names = ", ".join(f"`{c.name}`" for c in self.commands())
            raise ArgumentError(f"A subcommand is required: {names}")

        if self._check is not None:
            self._check(ctx)

        command = self.resolve(parts[0])
        rest = parts[1] if len(parts) > 1 else ""
        return command.handler(replace(ctx, args=rest))
