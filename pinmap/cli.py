#!/usr/bin/env python3
"""
pinmap command line.

Usage:
    pinmap serve
    pinmap view --duration 5
    pinmap config
"""

import asyncio
from functools import partial

import click
import httpx
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pinmap.bootstrap import initialize_app
from pinmap.config import Settings, get_settings
from pinmap.maps.geocoding import GoogleGeocoder
from pinmap.maps.headless import HeadlessMapsLibrary
from pinmap.maps.loader import MapsLibraryLoader
from pinmap.scene.renderer import count_meshes
from pinmap.types import BootstrapState

console = Console()


def console_alert(message: str) -> None:
    """Blocking alert, terminal edition."""
    console.print(Panel(message, title="Alert", border_style="red"))


def _mask(value) -> str:
    if not value:
        return "[yellow]not set[/yellow]"
    return value[:4] + "…" if len(value) > 8 else "****"


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def cli(debug):
    """3D marker map viewer"""
    if debug:
        from pinmap.utils.logging import setup_logging
        setup_logging(level="DEBUG")


@cli.command()
@click.option("--host", default=None, help="Bind address (default: API_HOST)")
@click.option("--port", type=int, default=None, help="Port (default: API_PORT)")
def serve(host, port):
    """Run the credential API."""
    import uvicorn

    api = get_settings().api
    uvicorn.run(
        "api.main:app",
        host=host or api.host,
        port=port or api.port,
        reload=api.reload,
    )


@cli.command()
def config():
    """Show resolved settings."""
    settings = get_settings()
    table = Table(title="pinmap settings")
    table.add_column("Setting")
    table.add_column("Value")

    table.add_row("GOOGLE_MAPS_MAP_ID", _mask(settings.credentials.map_id))
    table.add_row("NEXT_PUBLIC_GOOGLE_MAPS_API_KEY", _mask(settings.credentials.api_key))
    table.add_row("Config URL", settings.viewer.config_url)
    table.add_row("Target address", settings.viewer.target_address)
    table.add_row("Initial center", f"{settings.viewer.initial_lat}, {settings.viewer.initial_lng}")
    table.add_row("Zoom / tilt / heading", f"{settings.viewer.zoom} / {settings.viewer.tilt} / {settings.viewer.heading}")
    table.add_row("Marker model", settings.marker.url)
    console.print(table)


async def run_session(settings: Settings, duration: float) -> dict:
    """Start a headless session, let it animate for ``duration`` seconds, tear it down."""
    viewer = settings.viewer
    async with httpx.AsyncClient(timeout=viewer.http_timeout, follow_redirects=True) as client:
        library_factory = partial(
            _headless_library,
            client=client,
            width=viewer.viewport_width,
            height=viewer.viewport_height,
            frame_interval=viewer.frame_interval,
        )
        loader = MapsLibraryLoader(
            library_factory,
            client,
            libraries=viewer.maps_libraries,
            version=viewer.maps_version,
        )
        session, bootstrapper = await initialize_app(settings, loader, console_alert, client)

        summary = {
            "state": session.state.value,
            "target": session.target,
            "frames": 0,
            "animation_frames": 0,
            "meshes": 0,
            "leaked_state_frames": 0,
        }
        if session.state is not BootstrapState.POSITIONED:
            return summary

        try:
            await asyncio.sleep(duration)

            view = session.overlay_view
            summary["frames"] = view.frames_drawn
            summary["leaked_state_frames"] = view.leaked_state_frames
            if session.animation is not None:
                summary["animation_frames"] = session.animation.frames
            if session.scene.model is not None:
                summary["meshes"] = count_meshes(session.scene.model)
        finally:
            bootstrapper.teardown()
        return summary


def _headless_library(api_key: str, client: httpx.AsyncClient, width: int, height: int, frame_interval: float):
    return HeadlessMapsLibrary(
        GoogleGeocoder(api_key, client),
        width=width,
        height=height,
        frame_interval=frame_interval,
    )


@cli.command()
@click.option("--duration", type=float, default=5.0, help="Seconds to keep the overlay running")
@click.option("--config-url", default=None, help="Override the map config endpoint")
def view(duration: float, config_url):
    """Run a headless viewing session against the credential API."""
    settings = get_settings()
    if config_url:
        settings = settings.model_copy(update={
            "viewer": settings.viewer.model_copy(update={"config_url": config_url}),
        })

    console.print(f"\n[bold blue]pinmap - headless session[/bold blue]")
    console.print(f"Address: {settings.viewer.target_address}")
    console.print(f"Config: {settings.viewer.config_url}\n")

    try:
        summary = asyncio.run(run_session(settings, duration))
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
        return

    table = Table(title="Session Summary")
    table.add_column("Metric")
    table.add_column("Value")
    state = summary["state"]
    color = "green" if state == BootstrapState.POSITIONED.value else "red"
    table.add_row("State", f"[{color}]{state}[/{color}]")
    target = summary["target"]
    table.add_row("Target", f"{target.latitude:.6f}, {target.longitude:.6f}" if target else "-")
    table.add_row("Frames drawn", str(summary["frames"]))
    table.add_row("Animation frames", str(summary["animation_frames"]))
    table.add_row("Model meshes", str(summary["meshes"]))
    table.add_row("GL state leaks", str(summary["leaked_state_frames"]))
    console.print(table)

    if state != BootstrapState.POSITIONED.value:
        logger.debug(f"Session ended in {state}")
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
