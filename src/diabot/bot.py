"""Adaptador de Discord: mensajes con prefijo -> registro de comandos."""

from __future__ import annotations

import asyncio
import io
import logging
from typing import Any

import discord
import requests

from diabot.commands.registry import CommandContext, CommandRegistry, Reply
from diabot.errors import DiabotError
from diabot.graph import GraphSettings
from diabot.storage import AdminStore

logger = logging.getLogger(__name__)


def run_command(registry: CommandRegistry, ctx: CommandContext) -> Reply:
    """Dispatch ``ctx`` and turn user-facing errors into replies."""
    try:
        return registry.dispatch(ctx)
    except DiabotError as exc:
        logger.warning("Command %r failed: %s", ctx.args, exc)
        return Reply(f"Error: {exc}")
    except requests.RequestException as exc:
        logger.warning("Nightscout request failed: %s", exc)
        return Reply("Could not reach Nightscout, please check the URL and try again")


class DiabotClient(discord.Client):
    """Discord client that answers prefixed chat commands."""

    def __init__(
        self,
        *,
        registry: CommandRegistry,
        store: AdminStore,
        prefix: str,
        graph_settings: GraphSettings,
        **kwargs: Any,
    ) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents, **kwargs)
        self.registry = registry
        self.store = store
        self.prefix = prefix
        self.graph_settings = graph_settings

    async def on_ready(self) -> None:
        logger.info("Logged in as %s", self.user)

    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot:
            return
        if not message.content.lower().startswith(self.prefix.lower()):
            return

        ctx = CommandContext(
            guild_id=str(message.guild.id) if message.guild else None,
            args=message.content[len(self.prefix) :],
            store=self.store,
            channel_name=self.channel_name,
            is_admin=_is_admin(message.author),
            graph_settings=self.graph_settings,
        )
        reply = await asyncio.to_thread(run_command, self.registry, ctx)

        if reply.file is not None:
            attachment = discord.File(
                io.BytesIO(reply.file), filename=reply.filename or "image.png"
            )
            await message.reply(reply.text, file=attachment)
        else:
            await message.reply(reply.text)

    def channel_name(self, channel_id: str) -> str | None:
        """Name of a text channel visible to the bot, or None."""
        channel = self.get_channel(int(channel_id))
        if isinstance(channel, discord.TextChannel):
            return channel.name
        return None


def _is_admin(author: discord.User | discord.Member) -> bool:
    return (
        isinstance(author, discord.Member) and author.guild_permissions.administrator
    )
