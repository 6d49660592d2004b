from __future__ import annotations

from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from plantrepo.domain.models import Plant


def print_plants(
    plants: Sequence[Plant],
    title: str = "Plants",
    console: Optional[Console] = None,
) -> None:
    """
    Render a sorted plant list as a rich table, preserving the given order.
    """
    console = console or Console()

    if not plants:
        console.print("[yellow]No plants to display.[/yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        caption=f"{len(plants)} plant(s), custom sort order first",
    )

    table.add_column("#", justify="right", style="dim")
    table.add_column("Plant", style="cyan", no_wrap=True)
    table.add_column("Id", style="magenta")
    table.add_column("Grow zone", justify="right", style="green")
    table.add_column("Watering (days)", justify="right", style="blue")

    for position, plant in enumerate(plants, start=1):
        table.add_row(
            str(position),
            plant.name,
            plant.plant_id,
            str(plant.grow_zone_number),
            str(plant.watering_interval),
        )

    console.print(table)


__all__ = ["print_plants"]
