"""Console output for the CLI.

Wraps rich so every command renders snapshots the same way.
"""

from datetime import datetime, timezone
from typing import Any

from rich.console import Console as RichConsole
from rich.table import Table

from observatory.domain.report.model.value import AggregatedResult
from observatory.domain.shared.model.record import MetricStatus, Severity

SEVERITY_STYLES: dict[Severity, str] = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "dim",
}

STATUS_STYLES: dict[MetricStatus, str] = {
    MetricStatus.CRITICAL: "bold red",
    MetricStatus.WARNING: "yellow",
    MetricStatus.NORMAL: "green",
}


def relative_time(moment: datetime, now: datetime | None = None) -> str:
    """Render a timestamp relative to ``now`` (e.g. '2 hours ago')."""
    now = now or datetime.now(timezone.utc)
    seconds = (now - moment).total_seconds()
    if seconds < 60:
        return "just now"
    elif seconds < 3600:
        mins = int(seconds // 60)
        return f"{mins} minute{'s' if mins != 1 else ''} ago"
    elif seconds < 86400:
        hours = int(seconds // 3600)
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    elif seconds < 604800:
        days = int(seconds // 86400)
        return f"{days} day{'s' if days != 1 else ''} ago"
    return moment.strftime("%Y-%m-%d %H:%M")


def _styled(value: str, style: str) -> str:
    return f"[{style}]{value}[/{style}]"


class Console:
    """CLI output manager wrapping rich."""

    def __init__(
        self,
        *,
        force_terminal: bool | None = None,
        quiet: bool = False,
    ) -> None:
        self._console = RichConsole(force_terminal=force_terminal, stderr=False)
        self._err_console = RichConsole(force_terminal=force_terminal, stderr=True)
        self._quiet = quiet

    # -------------------------------------------------------------------------
    # Status messages
    # -------------------------------------------------------------------------

    def success(self, message: str) -> None:
        self._console.print(f"[green]✓[/green] {message}")

    def error(self, message: str, *, hint: str | None = None) -> None:
        """Print an error message to stderr."""
        self._err_console.print(f"[red]✗[/red] {message}")
        if hint:
            self._err_console.print(f"  [dim]{hint}[/dim]")

    def warning(self, message: str) -> None:
        self._console.print(f"[yellow]⚠[/yellow] {message}")

    def info(self, message: str) -> None:
        """Print an info message (suppressed in quiet mode)."""
        if not self._quiet:
            self._console.print(f"[dim]{message}[/dim]")

    def print(self, *args: Any, **kwargs: Any) -> None:
        self._console.print(*args, **kwargs)

    def print_json(self, data: str) -> None:
        self._console.print_json(data)

    def table(
        self,
        rows: list[dict[str, Any]],
        columns: list[tuple[str, str]],  # (key, header)
        *,
        title: str | None = None,
    ) -> None:
        table = Table(title=title, show_header=True, header_style="bold")
        for _, header in columns:
            table.add_column(header)
        for row in rows:
            table.add_row(*[str(row.get(key, "")) for key, _ in columns])
        self._console.print(table)

    def status(self, message: str):
        """Return a spinner context manager for long operations."""
        return self._console.status(message)

    # -------------------------------------------------------------------------
    # Snapshot rendering
    # -------------------------------------------------------------------------

    def snapshot(self, result: AggregatedResult) -> None:
        """Render sources, alerts, metrics, events and clusters as tables."""
        now = result.generated_at

        self.table(
            [
                {
                    "source": source_id,
                    "outcome": _styled(status.outcome.value, "green" if status.ok else "red"),
                    "records": status.events + status.metrics,
                    "elapsed": f"{status.elapsed_ms:.0f} ms",
                    "error": status.error or "",
                }
                for source_id, status in result.sources.items()
            ],
            [("source", "Source"), ("outcome", "Outcome"), ("records", "Records"),
             ("elapsed", "Elapsed"), ("error", "Error")],
            title="Sources",
        )

        if result.alerts:
            self.table(
                [
                    {
                        "severity": _styled(a.severity.value, SEVERITY_STYLES[a.severity]),
                        "title": a.title,
                        "message": a.message,
                        "source": a.source,
                    }
                    for a in result.alerts
                ],
                [("severity", "Severity"), ("title", "Alert"), ("message", "Detail"), ("source", "Source")],
                title="Alerts",
            )

        if result.metrics:
            self.table(
                [
                    {
                        "label": m.label,
                        "value": f"{m.value:g}{' ' + m.unit if m.unit else ''}",
                        "status": _styled(m.status.value, STATUS_STYLES[m.status]),
                        "source": m.source,
                    }
                    for m in result.metrics
                ],
                [("label", "Metric"), ("value", "Value"), ("status", "Status"), ("source", "Source")],
                title="Metrics",
            )

        if result.events:
            self.table(
                [
                    {
                        "severity": _styled(e.severity.value, SEVERITY_STYLES[e.severity]),
                        "category": e.category.value,
                        "label": e.label,
                        "region": e.region or "",
                        "when": relative_time(e.timestamp, now),
                    }
                    for e in result.events
                ],
                [("severity", "Severity"), ("category", "Category"), ("label", "Event"),
                 ("region", "Region"), ("when", "When")],
                title="Events",
            )
        else:
            self.warning("No events matched")

        if result.clusters:
            self.table(
                [
                    {
                        "label": c.label + (" (approx.)" if c.approximate else ""),
                        "members": c.member_count,
                        "severity": _styled(c.severity.value, SEVERITY_STYLES[c.severity]),
                    }
                    for c in result.clusters
                ],
                [("label", "Region"), ("members", "Events"), ("severity", "Severity")],
                title="Hotspots",
            )

        if result.degraded:
            self.warning(f"Degraded sources: {', '.join(result.degraded)}")


# Module-level default instance for convenience
_default: Console | None = None


def get_console() -> Console:
    """Get the default console instance."""
    global _default
    if _default is None:
        _default = Console()
    return _default
