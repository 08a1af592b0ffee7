"""Typer CLI for vigil threshold detection and metric aggregation."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape

from vigil.config import VigilConfig
from vigil.core.loader import load_measurements
from vigil.errors import VigilError
from vigil.logging_setup import setup_logging
from vigil.models.observation import Measurement, composite_name

app = typer.Typer(
    name="vigil",
    help="Metric aggregation and threshold symptom detection.",
    no_args_is_help=True,
)
console = Console(stderr=True)


def _config() -> VigilConfig:
    return VigilConfig.load()


def _load(path: Path) -> list[Measurement]:
    if not path.is_file():
        console.print(f"[red]Measurements file not found:[/red] {path}")
        raise typer.Exit(1)
    return load_measurements(path)


def _parse_checkpoint(raw: str | None) -> datetime:
    if raw is None:
        return datetime.now(timezone.utc)
    try:
        ts = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        console.print(f"[red]Invalid checkpoint:[/red] {raw}")
        raise typer.Exit(1) from None
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


@app.callback()
def main_callback(
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="Logging level")] = None,
) -> None:
    """Configure logging before any command runs."""
    try:
        setup_logging(_config().logging, level=log_level)
    except VigilError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from None


@app.command()
def detect(
    path: Annotated[Path, typer.Argument(help="NDJSON measurements file")],
    metric: Annotated[str, typer.Option("--metric", "-m", help="Metric to evaluate")],
    kind: Annotated[Optional[str], typer.Option("--kind", "-k", help="below or above")] = None,
    threshold: Annotated[Optional[float], typer.Option("--threshold", "-t", help="Override configured threshold")] = None,
    checkpoint: Annotated[Optional[str], typer.Option("--checkpoint", help="ISO 8601 checkpoint (default: now)")] = None,
) -> None:
    """Run one detection pass over a measurements file."""
    from vigil.core.detectors import DETECTORS, ExecutionContext, create_detector
    from vigil.core.symptoms import SymptomsTable
    from vigil.models.enums import DetectorKind

    config = _config()
    kind = kind or config.detection.default_kind
    measurements = _load(path)
    context = ExecutionContext(checkpoint_at=_parse_checkpoint(checkpoint))

    policy = config.policy
    if threshold is not None:
        try:
            prefix = DETECTORS[DetectorKind(kind)].CONF_PREFIX
        except ValueError:
            console.print(f"[red]Unknown detector kind:[/red] {kind}")
            raise typer.Exit(1) from None
        policy = policy.with_value(composite_name(prefix, metric), threshold)

    try:
        detector = create_detector(kind, policy, metric)
        detector.initialize(context)
        table = SymptomsTable.of(detector.detect(measurements))
    except VigilError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from None

    if not table.size():
        console.print(f"[dim]No symptoms for {metric} (threshold {detector.threshold}).[/dim]")
        return

    from rich.table import Table

    out = Table(title=f"Symptoms at {context.checkpoint().isoformat()}")
    out.add_column("Type", style="bold")
    out.add_column("Instance")
    out.add_column("Component")
    out.add_column("Value", justify="right")

    for s in table:
        for m in s.measurements:
            out.add_row(s.symptom_type, s.instance_id, m.component_id, f"{m.value:.2f}")
    console.print(out)
    console.print(f"{table.size()} symptom(s) across {len(table.instances())} instance(s)")


@app.command()
def aggregate(
    path: Annotated[Path, typer.Argument(help="NDJSON measurements file")],
    component: Annotated[str, typer.Option("--component", "-c", help="Component name")],
    metric: Annotated[str, typer.Option("--metric", "-m", help="Metric to aggregate")],
    limit: Annotated[Optional[float], typer.Option("--limit", "-l", help="Report instances above this value")] = None,
) -> None:
    """Aggregate one metric of a component across its instances."""
    from vigil.core.metrics import build_component_metrics

    measurements = _load(path)
    try:
        metrics = build_component_metrics(component, measurements)
    except VigilError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from None

    if not len(metrics):
        console.print(f"[dim]No measurements for component {component}.[/dim]")
        return

    from rich.table import Table

    out = Table(title=f"{component}: {metric}")
    out.add_column("Instance", style="bold")
    out.add_column("Samples", justify="right")
    out.add_column("Sum", justify="right")

    for name in metrics.instance_names():
        values = metrics.get_metric_values(name, metric) or {}
        out.add_row(name, str(len(values)), f"{sum(values.values()):.2f}")
    console.print(out)
    console.print(f"Total: {metrics.get_aggregated_metrics_value(metric):.2f}")

    if limit is not None:
        if metrics.any_instance_above_limit(metric, limit):
            console.print(f"[yellow]At least one instance above {limit}[/yellow]")
        else:
            console.print(f"[green]No instance above {limit}[/green]")


@app.command(name="config")
def show_config() -> None:
    """Show the effective configuration."""
    config = _config()

    console.print(f"[bold]Config file:[/bold] {config.config_path}")
    console.print(f"  Default detector: {config.detection.default_kind}")
    console.print(f"  Log level: {config.logging.level}")
    if not config.policy.values:
        console.print("  [dim]No policy values configured.[/dim]")
        return
    for key, value in sorted(config.policy.values.items()):
        console.print(f"  {key} = {escape(str(value))}")


def main() -> None:
    """Entry point for the vigil CLI."""
    app()


if __name__ == "__main__":
    main()
