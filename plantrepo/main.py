from __future__ import annotations

import asyncio
import sys
from contextlib import aclosing
from typing import Optional

import typer
from pydantic import ValidationError

from plantrepo.config import Settings, get_settings
from plantrepo.domain.models import NO_GROW_ZONE, GrowZone
from plantrepo.exceptions import PlantRepositoryError
from plantrepo.reporter import print_plants
from plantrepo.repository import available_strategies, open_repository
from plantrepo.utils.logging import configure_logging

app = typer.Typer(help="Plant repository CLI.")

ZONE_OPTION = typer.Option(
    None, "--zone", "-z", help="Restrict to one grow zone number (default: all plants)."
)


def _load_settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as exc:
        typer.echo(f"Error: invalid configuration\n{exc}", err=True)
        raise typer.Exit(code=1) from exc


def _setup() -> Settings:
    settings = _load_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    return settings


def _grow_zone(zone: Optional[int]) -> GrowZone:
    return NO_GROW_ZONE if zone is None else GrowZone(zone)


def _run(coro) -> None:
    try:
        asyncio.run(coro)
    except PlantRepositoryError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = _load_settings()
    typer.echo(
        f"service={settings.plants_base_url} | store={settings.store_backend} | "
        f"strategy={settings.read_strategy} sort_workers={settings.sort_workers} "
        f"refresh_max_age={settings.refresh_max_age_seconds}"
    )


@app.command()
def strategies() -> None:
    """
    List available read strategies.
    """
    typer.echo("Available strategies: " + ", ".join(available_strategies()))


@app.command()
def refresh(zone: Optional[int] = ZONE_OPTION) -> None:
    """
    Fetch plants from the network into the local store.
    """
    settings = _setup()

    async def _main() -> None:
        async with open_repository(settings) as repository:
            await repository.refresh_zone(_grow_zone(zone))

    _run(_main())
    typer.echo("Refresh complete.")


@app.command()
def show(
    zone: Optional[int] = ZONE_OPTION,
    strategy: Optional[str] = typer.Option(
        None,
        "--strategy",
        "-s",
        help="Read strategy (e.g., sequential, combined). Defaults to READ_STRATEGY.",
    ),
    fetch: bool = typer.Option(
        True, "--refresh/--no-refresh", help="Refresh from the network before reading."
    ),
    watch: bool = typer.Option(
        False, "--watch", "-w", help="Keep printing the view after every store change."
    ),
) -> None:
    """
    Print the sorted plant list.
    """
    settings = _setup()
    if strategy is not None and strategy not in available_strategies():
        raise typer.BadParameter(
            f"Unknown strategy '{strategy}'. Available: {', '.join(available_strategies())}",
            param_hint="--strategy",
        )
    title = "Plants" if zone is None else f"Plants in grow zone {zone}"

    async def _main() -> None:
        async with open_repository(settings) as repository:
            if fetch:
                await repository.refresh_zone(_grow_zone(zone))
            view = repository.observe_by_zone(_grow_zone(zone), strategy)
            async with aclosing(view) as snapshots:
                async for plants in snapshots:
                    print_plants(plants, title=title)
                    if not watch:
                        break

    _run(_main())


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
