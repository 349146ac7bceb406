"""Comando que genera el gráfico de glucosa de una instancia Nightscout."""

from __future__ import annotations

from diabot.commands.registry import CommandContext, Reply
from diabot.errors import ArgumentError, NotFoundError
from diabot.graph import BgGraph
from diabot.sources.nightscout import NightscoutPaths, NightscoutSource

DEFAULT_COUNT = 36
# one day of 5-minute readings
MAX_COUNT = 288


def _count_arg(raw: str) -> int:
    if not raw.isdecimal() or int(raw) == 0:
        raise ArgumentError("Reading count must be a positive number")
    return min(int(raw), MAX_COUNT)


def nightscout_graph_command(ctx: CommandContext) -> Reply:
    """``nightscoutgraph <url> [count]``: PNG chart of the latest readings."""
    args = ctx.args.split()
    if not 1 <= len(args) <= 2:
        raise ArgumentError("Usage: nightscoutgraph <url> [count]")
    count = _count_arg(args[1]) if len(args) == 2 else DEFAULT_COUNT

    source = NightscoutSource(NightscoutPaths(url=args[0]))
    data = source.load(count)
    if not data.entries:
        raise NotFoundError("No readings found on that Nightscout instance")

    png = BgGraph(ctx.graph_settings).add_entries(data).render()
    return Reply(
        text=f"Last {len(data.entries)} readings",
        file=png,
        filename="nightscout_graph.png",
    )
