"""Rich output formatting helpers for the VersionTracker CLI.

Components that were not found in the project are shown dimmed with a
``-`` in place of the version; sub-component versions are listed
indented below their parent.
"""

from __future__ import annotations

from collections.abc import Iterable

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from versiontracker.registry import ComponentRegistry
from versiontracker.snapshot.models import ComponentRecord, ProjectSnapshot

console = Console()

_MISSING = Text("-", style="dim")


def _value(value: object) -> Text:
    if value is None or value == "":
        return _MISSING
    return Text(str(value))


def print_components(records: Iterable[ComponentRecord], title: str = "SDK Versions") -> None:
    """Print a table of resolved component versions.

    Args:
        records: Component records in registry order.
        title: Table title.
    """
    records = list(records)
    if not records:
        console.print("[dim]No components tracked.[/dim]")
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Component", style="bold", no_wrap=True)
    table.add_column("Version", no_wrap=True)

    for record in records:
        name_style = "bold" if record.is_present else "dim"
        table.add_row(Text(record.name, style=name_style), _value(record.version))
        for info in record.sub_versions or ():
            table.add_row(Text(f"  {info.name}", style="cyan"), _value(info.version))

    console.print(table)
    found = sum(1 for r in records if r.is_present)
    console.print(f"[dim]{found} of {len(records)} components found.[/dim]")


def print_snapshot(snapshot: ProjectSnapshot) -> None:
    """Print a BuildInfo snapshot: build facts panel, then the SDK table."""
    lines = [
        f"[bold]Platform:[/bold]          {snapshot.platform}",
        f"[bold]Host version:[/bold]      {snapshot.host_version or '-'}",
        f"[bold]Package:[/bold]           {snapshot.package_id or '-'}",
        f"[bold]Package version:[/bold]   {snapshot.package_version or '-'}",
        f"[bold]Compression:[/bold]       {snapshot.compression_method}",
        f"[bold]Graphics APIs:[/bold]     {', '.join(snapshot.graphics_apis) or '-'}",
        f"[bold]Stripping level:[/bold]   {snapshot.stripping_level or '-'}",
        f"[bold]Render pipeline:[/bold]   {snapshot.render_pipeline or '-'}",
    ]
    if snapshot.android is not None:
        android = snapshot.android
        lines.append(
            f"[bold]Android:[/bold]           versionCode {android.bundle_version_code}, "
            f"minSdk {android.min_sdk}, targetSdk {android.target_sdk}"
        )
    if snapshot.ios is not None:
        ios = snapshot.ios
        lines.append(
            f"[bold]iOS:[/bold]               build {ios.build_number}, "
            f"target {ios.target_os_version}"
        )
    console.print(Panel("\n".join(lines), title="Build Info", border_style="blue"))
    print_components(snapshot.components)


def print_registry(registry: ComponentRegistry) -> None:
    """Print the registered components and the probes backing them."""
    table = Table(title="Tracked Components", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim", no_wrap=True)
    table.add_column("Component", style="bold", no_wrap=True)
    table.add_column("Slot", style="dim", no_wrap=True)
    table.add_column("Probe", style="cyan", no_wrap=True)
    table.add_column("Source")

    for index, descriptor in enumerate(registry, start=1):
        slots = (
            ("version", descriptor.version_probe),
            ("components", descriptor.components_probe),
        )
        first = True
        for slot, probe in slots:
            if probe is None:
                continue
            table.add_row(
                str(index) if first else "",
                descriptor.name if first else "",
                slot,
                probe.kind,
                probe.target,
            )
            first = False

    console.print(table)
