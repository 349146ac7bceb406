"""Construcción del registro completo de comandos del bot."""

from __future__ import annotations

from diabot.commands.admin import build_admin_channels_group
from diabot.commands.convert import convert_command
from diabot.commands.graph_cmd import nightscout_graph_command
from diabot.commands.registry import CommandContext, CommandRegistry, Reply


def build_registry() -> CommandRegistry:
    """Return the top-level registry with every command registered."""
    registry = CommandRegistry()
    registry.register(
        "convert", help="Converts BG between mmol/L and mg/dL", aliases=("c", "conv")
    )(convert_command)
    registry.register(
        "nightscoutgraph",
        help="Draws a BG chart from a Nightscout URL",
        aliases=("nsg", "graph"),
    )(nightscout_graph_command)
    registry.add_group(build_admin_channels_group(), aliases=("adminchannel",))

    @registry.register("help", help="Lists the available commands", aliases=("h",))
    def help_command(_ctx: CommandContext) -> Reply:
        lines = []
        for command in registry.commands():
            aliases = f" ({', '.join(command.aliases)})" if command.aliases else ""
            lines.append(f"`{command.name}`{aliases}: {command.help}")
        return Reply("\n".join(lines))

    return registry
