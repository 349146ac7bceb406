"""Comandos de administración: canales de admin por servidor."""

from __future__ import annotations

import logging

from diabot.commands.registry import CommandContext, CommandRegistry, Reply
from diabot.errors import ArgumentError, NotFoundError, PermissionDeniedError

logger = logging.getLogger(__name__)


def require_admin(ctx: CommandContext) -> None:
    """Only guild administrators may manage admin channels."""
    if ctx.guild_id is None:
        raise ArgumentError("This command can only be used in a server")
    if not ctx.is_admin:
        raise PermissionDeniedError(
            "You need administrator permission to manage admin channels"
        )


def _guild_id(ctx: CommandContext) -> str:
    if ctx.guild_id is None:
        raise ArgumentError("This command can only be used in a server")
    return ctx.guild_id


def _channel_id_arg(ctx: CommandContext) -> str:
    """Exactly one numeric token."""
    args = ctx.args.split()
    if len(args) != 1:
        logger.warning("Rejected admin channel args: %r", ctx.args)
        raise ArgumentError("Channel ID is required")
    if not args[0].isdecimal():
        logger.warning("Rejected non-numeric channel ID: %r", args[0])
        raise ArgumentError("Channel ID must be numeric")
    return args[0]


def add_admin_channel(ctx: CommandContext) -> Reply:
    """Add a channel as an admin channel for the current guild.

    Raises:
        ArgumentError: If the arguments are not a single numeric channel ID.
        NotFoundError: If no channel with that ID exists.
    """
    channel_id = _channel_id_arg(ctx)
    name = ctx.channel_name(channel_id)
    if name is None:
        raise NotFoundError(f"Channel `{channel_id}` does not exist")

    ctx.store.add_admin_channel(_guild_id(ctx), channel_id)
    return Reply(f"Added admin channel {name} (`{channel_id}`)")


def delete_admin_channel(ctx: CommandContext) -> Reply:
    """Remove an admin channel; the channel itself may no longer exist."""
    channel_id = _channel_id_arg(ctx)
    if not ctx.store.remove_admin_channel(_guild_id(ctx), channel_id):
        raise NotFoundError(f"Channel `{channel_id}` is not an admin channel")
    return Reply(f"Removed admin channel `{channel_id}`")


def list_admin_channels(ctx: CommandContext) -> Reply:
    channel_ids = ctx.store.list_admin_channels(_guild_id(ctx))
    if not channel_ids:
        return Reply("There are no admin channels configured")

    lines = ["Admin channels:"]
    for channel_id in channel_ids:
        name = ctx.channel_name(channel_id) or "unknown channel"
        lines.append(f"- {name} (`{channel_id}`)")
    return Reply("\n".join(lines))


def build_admin_channels_group() -> CommandRegistry:
    """The ``adminchannels`` command group."""
    group = CommandRegistry(
        "adminchannels", help="Manage admin channels", check=require_admin
    )
    group.register("add", help="Adds a channel as an admin", aliases=("a",))(
        add_admin_channel
    )
    group.register(
        "delete",
        help="Removes a channel as an admin",
        aliases=("remove", "d", "r"),
    )(delete_admin_channel)
    group.register("list", help="Lists admin channels", aliases=("l",))(
        list_admin_channels
    )
    return group
