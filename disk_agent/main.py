"""
disk_agent.main
------------
AUTHOR: carter-vin

CLI entrypoint and the framework loop around the Disk resource:
discover -> add/retire Disk instances -> sample each -> report min ratio

Key contract:
- `disk-health-agent --help` shows a Commands section.
- `disk-health-agent oneshot` emits one report and exits.
- `disk-health-agent run` loops until Ctrl+C; failures become events.
"""

from __future__ import annotations

import asyncio
import platform
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import typer

from disk_agent import __version__
from disk_agent.config import DEFAULT_INTERVAL_S, AgentConfig, load_config
from disk_agent.logging import EventLogger, emit_event
from disk_agent.model import DiskReport, build_report, report_to_json
from disk_agent.resources import AggregateResource, ResourceRegistry, register

# Explicit multi-command CLI
app = typer.Typer(
    add_completion=False,
    help="disk-health-agent: node-local disk free-space reporting tool",
)

AGENT_VERSION = __version__


class DiscoveryFailed(RuntimeError):
    pass


# -----------------------------
# DATA CLASSES
# -----------------------------
@dataclass(frozen=True)
class EnvironmentInfo:
    """
    Snapshot of the runtime environment
    - help correlate issues across hosts and times
    """

    python_version: str
    os: str
    machine: str
    utc_now: str


def collect_environment_info() -> EnvironmentInfo:
    return EnvironmentInfo(
        python_version=sys.version.split()[0],
        os=f"{platform.system()} {platform.release()}",
        machine=platform.machine(),
        utc_now=datetime.now(timezone.utc).isoformat(),
    )


# -----------------------------
# AGENT CYCLE
# -----------------------------
async def run_cycle(
    registry: ResourceRegistry,
    group: AggregateResource,
    service: EventLogger,
    config: AgentConfig,
) -> DiskReport:
    """
    One discovery + sample pass

    Failure semantics:
    - discovery failure -> discovery_failed event, DiscoveryFailed raised
      (instances untouched)
    - per-disk sample failure -> sample_failed event, previous sample kept
    """
    disks = registry.types[group.members]

    try:
        await disks.refresh(service)
    except Exception as e:
        service.warn(
            "disk discovery failed",
            event_type="discovery_failed",
            error_type=type(e).__name__,
            error=str(e),
        )
        raise DiscoveryFailed(str(e)) from e

    for outcome in await disks.sample_all():
        if not outcome.ok:
            service.warn(
                f"disk sample failed [{outcome.name}]",
                event_type="sample_failed",
                device=outcome.name,
                error_type=outcome.error_type,
                error=outcome.error_message,
            )

    report = build_report(
        disks.instances.values(),
        node_id=config.node_id,
        agent_version=AGENT_VERSION,
        min_ratio=group.value(),
    )

    report_json = report_to_json(report)
    if config.emit_stdout:
        # Stdout emission is primarily for local debugging and demos
        print(report_json)

    service.info(
        "disk report emitted",
        event_type="disk_report_emitted",
        disks=len(report.disks),
        min_ratio=report.min_ratio,
        bytes=len(report_json),
    )
    return report


def _load_config_or_exit(**kwargs) -> AgentConfig:
    try:
        return load_config(**kwargs)
    except ValueError as e:
        typer.echo(f"invalid configuration: {e}", err=True)
        raise typer.Exit(code=2)


# -----------------------------
# ROOT COMMAND BEHAVIOR
# -----------------------------
@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """
    If no subcommand is provided, print a short hint and exit 0
    """
    if ctx.invoked_subcommand is None:
        typer.echo("No command provided. Try: disk-health-agent --help")


# -----------------------------
# CLI COMMANDS
# -----------------------------
@app.command()
def version() -> None:
    """
    Print agent version & runtime env
    """
    env = collect_environment_info()

    typer.echo(f"disk-health-agent v{AGENT_VERSION}")
    typer.echo(f"python={env.python_version}")
    typer.echo(f"os={env.os}")
    typer.echo(f"machine={env.machine}")
    typer.echo(f"utc_now={env.utc_now}")


@app.command("discover")
def discover_cmd(
    timeout: Optional[float] = typer.Option(None, help="Per OS query timeout (seconds)."),
    log_level: str = typer.Option("warn", help="trace | info | warn"),
) -> None:
    """
    Run one discovery and print known mount points, one per line
    """
    config = _load_config_or_exit(timeout_s=timeout, log_level=log_level)
    service = EventLogger(agent_version=AGENT_VERSION, level=config.log_level, mode="discover")

    registry = ResourceRegistry()
    group = register(registry, timeout=config.timeout_s)
    disks = registry.types[group.members]

    asyncio.run(disks.refresh(service))

    for dev in disks.context.devices():
        typer.echo(dev)


@app.command("oneshot")
def oneshot(
    timeout: Optional[float] = typer.Option(None, help="Per OS query timeout (seconds)."),
    log_level: str = typer.Option("info", help="trace | info | warn"),
    node_id: Optional[str] = typer.Option(None, help="Report node id (default hostname)."),
    no_stdout: bool = typer.Option(
        False,
        "--no-stdout",
        help="Disable printing the report JSON to stdout.",
    ),
) -> None:
    """
    Discover, sample all disks, emit single report and exit

    Failure semantics:
    - discovery failure exits non-zero (good for ops scripts)
    - sample failures are reported as events; exit stays 0
    """
    config = _load_config_or_exit(
        timeout_s=timeout,
        log_level=log_level,
        node_id=node_id,
        emit_stdout=not no_stdout,
    )
    service = EventLogger(agent_version=AGENT_VERSION, level=config.log_level, mode="oneshot")

    emit_event("agent_start", agent_version=AGENT_VERSION, mode="oneshot")

    registry = ResourceRegistry()
    group = register(registry, timeout=config.timeout_s)

    try:
        asyncio.run(run_cycle(registry, group, service, config))
    except DiscoveryFailed:
        raise typer.Exit(code=1)
    finally:
        emit_event("agent_shutdown", agent_version=AGENT_VERSION, mode="oneshot")


async def _run_forever(
    registry: ResourceRegistry,
    group: AggregateResource,
    service: EventLogger,
    config: AgentConfig,
) -> None:
    while True:
        start = time.monotonic()

        reports_emitted = 0
        try:
            await run_cycle(registry, group, service, config)
            reports_emitted = 1
        except DiscoveryFailed:
            # already surfaced as discovery_failed; keep running
            pass
        except Exception as e:
            service.warn(
                "agent cycle failed",
                error_type=type(e).__name__,
                error=str(e),
            )

        elapsed = time.monotonic() - start
        sleep_s = max(0.0, config.interval_s - elapsed)

        emit_event(
            "agent_tick",
            agent_version=AGENT_VERSION,
            mode="run",
            interval_s=config.interval_s,
            tick_elapsed_ms=int(elapsed * 1000),
            sleep_ms=int(sleep_s * 1000),
            overrun=elapsed > config.interval_s,
            reports_emitted=reports_emitted,
        )

        await asyncio.sleep(sleep_s)


@app.command("run")
def run(
    interval: int = typer.Option(
        DEFAULT_INTERVAL_S,
        help="Seconds between discovery/sample cycles.",
        min=1,
    ),
    timeout: Optional[float] = typer.Option(None, help="Per OS query timeout (seconds)."),
    log_level: str = typer.Option("info", help="trace | info | warn"),
    node_id: Optional[str] = typer.Option(None, help="Report node id (default hostname)."),
    no_stdout: bool = typer.Option(
        False,
        "--no-stdout",
        help="Disable printing the report JSON to stdout.",
    ),
) -> None:
    """
    Run continuous agent loop.
    """
    config = _load_config_or_exit(
        interval_s=interval,
        timeout_s=timeout,
        log_level=log_level,
        node_id=node_id,
        emit_stdout=not no_stdout,
    )
    service = EventLogger(agent_version=AGENT_VERSION, level=config.log_level, mode="run")

    emit_event(
        "agent_start",
        agent_version=AGENT_VERSION,
        mode="run",
        interval_s=config.interval_s,
    )

    registry = ResourceRegistry()
    group = register(registry, timeout=config.timeout_s)

    try:
        asyncio.run(_run_forever(registry, group, service, config))
    except KeyboardInterrupt:
        # Graceful shutdown on Ctrl+C
        pass
    finally:
        emit_event("agent_shutdown", agent_version=AGENT_VERSION, mode="run")


if __name__ == "__main__":
    app()
