#!/usr/bin/env python3
"""Robostate CLI - Command-line interface for the robot state service.

Usage:
    robostate start                Start the server
    robostate health               Check server health
    robostate state                Summarize the current robot state
    robostate faults               List active and historical faults
    robostate metrics              List robot metrics
    robostate links                List skeleton links
    robostate link-model <link>    Fetch the mesh for a link
"""

import sys
from pathlib import Path
from typing import Any

import click
import httpx

# Default server URL
DEFAULT_URL = "http://localhost:8000"

CLIENT_NAME = "robostate-cli"

SEVERITY_COLORS = {
    "UNKNOWN": "white",
    "INFO": "blue",
    "WARN": "yellow",
    "CRITICAL": "red",
}

# Enum numbers as encoded on the wire
MOTOR_POWER_STATES = ["UNKNOWN", "OFF", "ON", "POWERING_ON", "POWERING_OFF", "ERROR"]
SHORE_POWER_STATES = ["UNKNOWN", "ON_SHORE", "OFF_SHORE"]
BATTERY_STATUSES = ["UNKNOWN", "MISSING", "CHARGING", "DISCHARGING", "BOOTING"]
ESTOP_STATUSES = ["UNKNOWN", "ESTOPPED", "NOT_ESTOPPED"]
SEVERITIES = ["UNKNOWN", "INFO", "WARN", "CRITICAL"]


def get_client(url: str) -> httpx.Client:
    """Create HTTP client."""
    return httpx.Client(base_url=url, timeout=30.0)


def enum_name(names: list[str], value: int | None) -> str:
    """Name for a wire enum number."""
    if value is None or not 0 <= value < len(names):
        return names[0]
    return names[value]


def query(url: str, path: str, body: dict[str, Any] | None = None) -> dict[str, Any]:
    """Post a request envelope and return the response envelope.

    Exits with status 1 when the server is unreachable or the response header
    carries an error.
    """
    payload: dict[str, Any] = {"header": {"client_name": CLIENT_NAME}}
    if body:
        payload.update(body)

    try:
        with get_client(url) as client:
            response = client.post(path, json=payload)
    except httpx.ConnectError:
        click.echo(f"Error: Cannot connect to server at {url}", err=True)
        sys.exit(1)

    try:
        data = response.json()
    except ValueError:
        click.echo(f"Error: Unexpected response ({response.status_code})", err=True)
        sys.exit(1)

    error = data.get("header", {}).get("error", {})
    if response.status_code != 200:
        message = error.get("message") or response.text
        click.echo(f"Error: {message}", err=True)
        sys.exit(1)

    return data


@click.group()
@click.option("--url", "-u", default=DEFAULT_URL, help="Server URL")
@click.pass_context
def cli(ctx: click.Context, url: str) -> None:
    """Robostate CLI - Robot state snapshot service."""
    ctx.ensure_object(dict)
    ctx.obj["url"] = url


@cli.command()
@click.option("--host", "-h", default="0.0.0.0", help="Bind address")
@click.option("--port", "-p", default=8000, help="Port number")
@click.option("--workers", "-w", default=1, help="Number of workers")
@click.option("--reload", is_flag=True, help="Enable auto-reload")
def start(host: str, port: int, workers: int, reload: bool) -> None:
    """Start the robostate server."""
    import uvicorn

    click.echo(f"Starting robostate server on {host}:{port}")

    uvicorn.run(
        "server.api.main:app",
        host=host,
        port=port,
        workers=workers,
        reload=reload,
        log_level="info",
    )


@cli.command()
@click.pass_context
def health(ctx: click.Context) -> None:
    """Check server health."""
    url = ctx.obj["url"]

    try:
        with get_client(url) as client:
            response = client.get("/health")
            response.raise_for_status()
            data = response.json()
    except httpx.ConnectError:
        click.echo(f"Error: Cannot connect to server at {url}", err=True)
        click.echo("Status: " + click.style("offline", fg="red"))
        sys.exit(1)
    except httpx.HTTPError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    status = data.get("status", "unknown")
    color = "green" if status == "healthy" else "red"
    snapshot = data["snapshot"]

    click.echo(f"Status: {click.style(status, fg=color)}")
    click.echo(f"Server: {data.get('server_id', 'N/A')}")
    if snapshot["published"]:
        click.echo(f"Snapshot: #{snapshot['sequence']} at {snapshot['published_at']}")
    else:
        click.echo("Snapshot: none published")
    click.echo(f"Faults: {data['faults']['active']} active, {data['faults']['historical']} historical")


@cli.command()
@click.pass_context
def state(ctx: click.Context) -> None:
    """Summarize the current robot state."""
    data = query(ctx.obj["url"], "/robot-state")
    robot_state = data["robot_state"]

    power = robot_state.get("power_state") or {}
    motor = enum_name(MOTOR_POWER_STATES, power.get("motor_power_state"))
    shore = enum_name(SHORE_POWER_STATES, power.get("shore_power_state"))
    click.echo(f"\nPower: motors {motor}, shore power {shore}")

    estops = robot_state.get("estop_states", [])
    safe = bool(estops) and all(
        enum_name(ESTOP_STATUSES, e.get("state")) == "NOT_ESTOPPED" for e in estops
    )
    click.echo(
        "Safe to command: "
        + click.style("yes" if safe else "no", fg="green" if safe else "red")
    )
    for estop in estops:
        click.echo(f"  {estop.get('name', '-'):<20} {enum_name(ESTOP_STATUSES, estop.get('state'))}")

    batteries = robot_state.get("battery_states", [])
    if batteries:
        click.echo("\nBatteries:")
        for battery in batteries:
            charge = battery.get("charge_percentage")
            charge_text = f"{charge:.1f}%" if charge is not None else "n/a"
            status = enum_name(BATTERY_STATUSES, battery.get("status"))
            click.echo(f"  {battery.get('identifier', '-'):<20} {charge_text:>7}  {status}")

    aggregated = (robot_state.get("system_fault_state") or {}).get("aggregated", {})
    if aggregated:
        click.echo("\nFault severity by attribute:")
        for attribute, value in sorted(aggregated.items()):
            severity = enum_name(SEVERITIES, value)
            click.echo(f"  {attribute:<20} {click.style(severity, fg=SEVERITY_COLORS[severity])}")


@cli.command()
@click.option("--historical/--no-historical", default=True, help="Include cleared faults")
@click.pass_context
def faults(ctx: click.Context, historical: bool) -> None:
    """List active and historical faults."""
    data = query(ctx.obj["url"], "/robot-state")
    fault_state = data["robot_state"].get("system_fault_state") or {}

    sections = [("Active", fault_state.get("faults", []))]
    if historical:
        sections.append(("Historical", fault_state.get("historical_faults", [])))

    for title, entries in sections:
        click.echo(f"\n{title} faults ({len(entries)}):\n")
        if not entries:
            continue
        click.echo(f"{'UID':<20} {'Severity':<10} {'Name':<24} {'Attributes'}")
        click.echo("-" * 72)
        for fault in entries:
            severity = enum_name(SEVERITIES, fault.get("severity"))
            click.echo(
                f"{fault['uid']:<20} "
                f"{click.style(f'{severity:<10}', fg=SEVERITY_COLORS[severity])} "
                f"{fault.get('name', '-'):<24} {', '.join(fault.get('attributes', []))}"
            )


@cli.command()
@click.pass_context
def metrics(ctx: click.Context) -> None:
    """List robot metrics."""
    data = query(ctx.obj["url"], "/robot-metrics")
    entries = data["robot_metrics"].get("metrics", [])

    if not entries:
        click.echo("No metrics reported")
        return

    for metric in entries:
        units = f" {metric['units']}" if metric.get("units") else ""
        click.echo(f"{metric['label']:<30} {metric['value']}{units}")


@cli.command()
@click.pass_context
def links(ctx: click.Context) -> None:
    """List skeleton links."""
    data = query(ctx.obj["url"], "/hardware-configuration")
    skeleton = data["hardware_configuration"]["skeleton"]

    for link in skeleton.get("links", []):
        mesh = "inline mesh" if link.get("obj_model") else "-"
        click.echo(f"{link['name']:<30} {mesh}")


@cli.command("link-model")
@click.argument("link_name")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write mesh to file")
@click.pass_context
def link_model(ctx: click.Context, link_name: str, output: Path | None) -> None:
    """Fetch the mesh for a link."""
    data = query(ctx.obj["url"], "/link-model", {"link_name": link_name})
    model = data["link_model"]

    if output is None:
        click.echo(model["file_contents"])
        return

    output.write_text(model["file_contents"], encoding="utf-8")
    click.echo(f"Wrote {model['file_name']} to {output}")


if __name__ == "__main__":
    cli()
