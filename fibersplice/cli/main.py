"""Command-line interface for the fiber/copper splice manager."""

import logging

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.logging import RichHandler

from .. import __version__
from ..errors import SpliceEngineError

console = Console()


def _fail(message: str):
    """Print an error and exit non-zero."""
    console.print(f"[red]✗ {message}[/red]")
    raise SystemExit(1)


def _load_project(project_path):
    """Load a project file into a store, exiting on failure."""
    from ..parsers import load_project, build_store, ProjectLoadError

    try:
        project = load_project(project_path)
        store, coordinator = build_store(project)
    except (ProjectLoadError, SpliceEngineError) as e:
        _fail(str(e))
    return project, store, coordinator


def _save_project(store, proj, project_path):
    """Write the store back to the project file."""
    from ..parsers import dump_project, save_project

    save_project(dump_project(store, proj.mode), project_path)


def _find_cable(store, proj, name):
    cable = store.find_cable_by_name(name, proj.mode)
    if cable is None:
        _fail(f"Cable not found: {name}")
    return cable


def _find_circuit(store, cable, identifier):
    """Find a circuit on a cable by identifier, ignoring whitespace."""
    from ..engine import normalize_identifier, try_parse_identifier

    try:
        wanted = normalize_identifier(identifier)
    except SpliceEngineError as e:
        _fail(str(e))

    for candidate in store.list_circuits(cable.id):
        parsed = try_parse_identifier(candidate.identifier)
        if parsed is not None and str(parsed) == wanted:
            return candidate
    _fail(f"Circuit {identifier} not found on cable {cable.name}")


PROJECT_OPTION = click.option(
    "--project", "-p",
    required=True,
    type=click.Path(exists=True),
    help="Path to the project file (YAML or JSON)"
)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose):
    """Fiber/Copper Splice Manager.

    Allocate circuit strands, match splices and export splice schedules.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@cli.command()
@click.argument("circuit_list", type=click.Path(exists=True))
@click.option(
    "--mode", "-m",
    type=click.Choice(["fiber", "copper"], case_sensitive=False),
    default="fiber",
    help="Splice mode (default: fiber)"
)
@click.option(
    "--capacity", "-c",
    type=int,
    default=None,
    help="Cable capacity to check against (default: mode default)"
)
@click.option(
    "--sheet",
    default=None,
    help="Sheet name for Excel circuit lists"
)
def allocate(circuit_list, mode, capacity, sheet):
    """Allocate strands for a circuit list file."""
    from ..parsers import load_circuit_list, CircuitListParseError
    from ..engine import allocate as allocate_spans, check_capacity, describe_span, get_mode_settings
    from ..models import UNIT_NAMES, GROUP_NAMES

    settings = get_mode_settings()
    mode_spec = settings.get(mode)
    unit_name = UNIT_NAMES[mode_spec.mode]
    group_name = GROUP_NAMES[mode_spec.mode]
    if capacity is None:
        capacity = mode_spec.default_capacity

    try:
        parsed = load_circuit_list(circuit_list, sheet)
    except CircuitListParseError as e:
        _fail(str(e))

    if not parsed.is_valid:
        for error in parsed.validation_result.errors:
            console.print(f"[red]  - {error.message}[/red]")
        _fail("Circuit list could not be read")

    for warning in parsed.validation_result.warnings:
        console.print(f"[yellow]  Skipped line {warning.row}: {warning.message}[/yellow]")

    result = allocate_spans(parsed.identifiers, mode_spec.group_size)

    table = Table(title=f"Allocation ({capacity} {unit_name}s)")
    table.add_column("#", justify="right")
    table.add_column("Circuit", style="cyan")
    table.add_column("Strands", justify="center")
    table.add_column(group_name.title() + "s")

    for span in result.spans:
        table.add_row(
            str(span.index + 1),
            span.identifier,
            f"{span.strand_start}-{span.strand_end}",
            describe_span(span.strand_start, span.strand_end, mode_spec.group_size),
        )

    console.print(table)

    try:
        check_capacity(result, capacity)
    except SpliceEngineError as e:
        _fail(str(e))

    status = "[green]PASS[/green]" if result.total_strands == capacity else "[yellow]FAIL[/yellow]"
    console.print(f"Assigned {result.total_strands}/{capacity} {unit_name}s: {status}")


@cli.command()
@click.argument("dist_start", type=int)
@click.argument("dist_end", type=int)
@click.argument("feed_start", type=int)
@click.argument("feed_end", type=int)
@click.option(
    "--group-size", "-g",
    type=int,
    default=12,
    help="Strands per ribbon/binder (default: 12)"
)
@click.option(
    "--circuit-start",
    type=int,
    default=1,
    help="Logical number of the first strand (default: 1)"
)
def segment(dist_start, dist_end, feed_start, feed_end, group_size, circuit_start):
    """Split a distribution/feed strand pairing into ribbon segments."""
    from ..engine import segment_range

    result = segment_range(dist_start, dist_end, feed_start, feed_end, group_size, circuit_start)
    if not result.is_valid:
        _fail(f"Cannot segment: {result.reason}")

    table = Table(title=f"{result.row_count} segment(s)")
    table.add_column("Circuit", justify="center")
    table.add_column("Distribution", style="cyan")
    table.add_column("Feed", style="magenta")

    for seg in result.segments:
        table.add_row(
            f"{seg.circuit_sub_start}-{seg.circuit_sub_end}",
            seg.dist_label,
            seg.feed_label,
        )

    console.print(table)


@cli.command()
@click.option(
    "--project", "-p",
    required=True,
    type=click.Path(exists=True),
    help="Path to the project file (YAML or JSON)"
)
def show(project):
    """Show cables and circuits of a project."""
    from ..engine import describe_span, summarize_utilization

    proj, store, _ = _load_project(project)
    feed_names = {c.id: c.name for c in store.list_cables()}

    console.print(Panel.fit(
        f"[bold blue]{proj.mode.value.title()} project[/bold blue]: {len(proj.cables)} cables",
        border_style="blue"
    ))

    for cable in store.list_cables():
        circuits = store.list_circuits(cable.id)
        utilization = summarize_utilization(circuits, cable.capacity)
        status = "[green]PASS[/green]" if utilization.is_complete else "[yellow]FAIL[/yellow]"

        table = Table(title=f"{cable.name} ({cable.role.value}) {utilization.assigned_strands}/{cable.capacity} {status}")
        table.add_column("#", justify="right")
        table.add_column("Circuit", style="cyan")
        table.add_column("Strands", justify="center")
        table.add_column(cable.group_name.title() + "s")
        table.add_column("Splice")

        for circuit in circuits:
            splice = ""
            if circuit.is_spliced:
                splice = (f"{feed_names.get(circuit.feed_cable_id, '?')} "
                          f"{circuit.feed_strand_start}-{circuit.feed_strand_end}")
            table.add_row(
                str(circuit.order_index + 1),
                circuit.identifier,
                f"{circuit.strand_start}-{circuit.strand_end}",
                describe_span(circuit.strand_start, circuit.strand_end, cable.group_size)
                if circuit.strand_count else "",
                splice,
            )

        console.print(table)


@cli.command()
@click.option(
    "--project", "-p",
    required=True,
    type=click.Path(exists=True),
    help="Path to the project file (YAML or JSON)"
)
def check(project):
    """Validate allocations and feed ranges of a project."""
    from ..parsers import validate_cable_circuits
    from ..engine import scan_feed_conflicts

    _, store, _ = _load_project(project)
    console.print(f"Checking: [cyan]{project}[/cyan]\n")

    error_count = 0
    for cable in store.list_cables():
        result = validate_cable_circuits(cable, store.list_circuits(cable.id))
        error_count += len(result.errors)

        mark = "[green]✓[/green]" if result.is_valid else "[red]✗[/red]"
        console.print(f"{mark} {cable.name}")
        for error in result.errors:
            console.print(f"  [red]Row {error.row}: {error.message}[/red]")
        for warning in result.warnings:
            console.print(f"  [yellow]{warning.message}[/yellow]")

    conflicts = scan_feed_conflicts(store.list_spliced_circuits())
    for first, second in conflicts:
        console.print(f"[red]✗ Feed strands of {first.identifier} and {second.identifier} overlap[/red]")
    error_count += len(conflicts)

    if error_count:
        _fail(f"{error_count} error(s) found")
    console.print("\n[green]✓ No errors found[/green]")


@cli.command()
@PROJECT_OPTION
@click.option("--cable", "-c", required=True, help="Distribution cable name")
@click.option("--circuit", "-i", "identifier", required=True, help="Circuit ID (e.g., pon,3-4)")
@click.option("--off", is_flag=True, help="Remove the splice instead of adding it")
def splice(project, cable, identifier, off):
    """Splice a distribution circuit and save the project."""
    proj, store, coordinator = _load_project(project)
    circuit = _find_circuit(store, _find_cable(store, proj, cable), identifier)

    try:
        match = coordinator.set_splice(circuit.id, not off)
    except SpliceEngineError as e:
        _fail(str(e))

    _save_project(store, proj, project)

    if match is None:
        console.print(f"[green]✓ Removed splice from {circuit.identifier}[/green]")
    else:
        console.print(f"[green]✓ Spliced {circuit.identifier} to {match.feed_identifier} "
                      f"(feed strands {match.feed_strand_start}-{match.feed_strand_end})[/green]")


@cli.command("splice-schedule")
@click.option(
    "--project", "-p",
    required=True,
    type=click.Path(exists=True),
    help="Path to the project file (YAML or JSON)"
)
@click.option(
    "--output", "-o",
    required=True,
    type=click.Path(),
    help="Output Excel (.xlsx) or CSV file path"
)
@click.option("--strand-view", is_flag=True, help="One row per strand instead of per ribbon segment")
def splice_schedule(project, output, strand_view):
    """Export the splice schedule of a project."""
    from ..drawing import export_splice_schedule, build_splice_schedule

    proj, store, _ = _load_project(project)

    path = export_splice_schedule(store, output, proj.mode, ribbon_view=not strand_view)
    rows = len(build_splice_schedule(store, proj.mode, ribbon_view=not strand_view))

    console.print(f"[green]✓ Splice schedule saved to: {path}[/green]")
    console.print(f"  Total rows: {rows}")


@cli.command()
@click.option(
    "--project", "-p",
    required=True,
    type=click.Path(exists=True),
    help="Path to the project file (YAML or JSON)"
)
@click.option(
    "--output", "-o",
    required=True,
    type=click.Path(),
    help="Output PDF file path"
)
@click.option("--title", "-t", default=None, help="Report project name")
def report(project, output, title):
    """Generate a PDF splice report."""
    from ..drawing import ReportConfig, generate_splice_report

    proj, store, _ = _load_project(project)

    config = ReportConfig()
    if title:
        config.project_name = title

    generate_splice_report(store, output, proj.mode, config)
    console.print(f"[green]✓ Generated report:[/green] {output}")


# ============================================================================
# EDITING COMMANDS
# ============================================================================

@cli.group()
def circuit():
    """Add, edit, move or delete circuits and save the project."""


@circuit.command("add")
@PROJECT_OPTION
@click.option("--cable", "-c", required=True, help="Cable name")
@click.option("--circuit", "-i", "identifier", required=True, help="Circuit ID (e.g., pon,3-4)")
def circuit_add(project, cable, identifier):
    """Append a circuit to a cable."""
    proj, store, coordinator = _load_project(project)
    target = _find_cable(store, proj, cable)

    try:
        added = coordinator.add_circuit(target.id, identifier)
    except SpliceEngineError as e:
        _fail(str(e))

    _save_project(store, proj, project)
    console.print(f"[green]✓ Added {added.identifier} to {target.name} "
                  f"at strands {added.strand_start}-{added.strand_end}[/green]")


@circuit.command("edit")
@PROJECT_OPTION
@click.option("--cable", "-c", required=True, help="Cable name")
@click.option("--circuit", "-i", "identifier", required=True, help="Current circuit ID")
@click.option("--to", "new_identifier", required=True, help="New circuit ID")
def circuit_edit(project, cable, identifier, new_identifier):
    """Change a circuit ID and reallocate the cable."""
    proj, store, coordinator = _load_project(project)
    target = _find_circuit(store, _find_cable(store, proj, cable), identifier)

    try:
        edited = coordinator.edit_identifier(target.id, new_identifier)
    except SpliceEngineError as e:
        _fail(str(e))

    _save_project(store, proj, project)
    console.print(f"[green]✓ {target.identifier} is now {edited.identifier} "
                  f"at strands {edited.strand_start}-{edited.strand_end}[/green]")
    if target.is_spliced and not edited.is_spliced:
        console.print("[yellow]  Splice removed; splice the circuit again if needed[/yellow]")


@circuit.command("move")
@PROJECT_OPTION
@click.option("--cable", "-c", required=True, help="Cable name")
@click.option("--circuit", "-i", "identifier", required=True, help="Circuit ID")
@click.option(
    "--direction", "-d",
    type=click.Choice(["up", "down"], case_sensitive=False),
    required=True,
    help="Move towards strand 1 (up) or away from it (down)"
)
def circuit_move(project, cable, identifier, direction):
    """Swap a circuit with its neighbour."""
    proj, store, coordinator = _load_project(project)
    target = _find_circuit(store, _find_cable(store, proj, cable), identifier)

    if not coordinator.move_circuit(target.id, direction.lower()):
        console.print(f"[yellow]{target.identifier} cannot move {direction.lower()}[/yellow]")
        return

    _save_project(store, proj, project)
    moved = store.get_circuit(target.id)
    console.print(f"[green]✓ Moved {moved.identifier} to strands "
                  f"{moved.strand_start}-{moved.strand_end}[/green]")


@circuit.command("delete")
@PROJECT_OPTION
@click.option("--cable", "-c", required=True, help="Cable name")
@click.option("--circuit", "-i", "identifier", required=True, help="Circuit ID")
def circuit_delete(project, cable, identifier):
    """Delete a circuit and close the gap."""
    proj, store, coordinator = _load_project(project)
    target = _find_circuit(store, _find_cable(store, proj, cable), identifier)

    coordinator.delete_circuit(target.id)
    _save_project(store, proj, project)
    console.print(f"[green]✓ Deleted {target.identifier}[/green]")


@cli.group()
def cable():
    """Add or delete cables, or change their role, and save the project."""


@cable.command("add")
@PROJECT_OPTION
@click.option(
    "--role", "-r",
    type=click.Choice(["Feed", "Distribution"], case_sensitive=False),
    required=True,
    help="Cable role"
)
@click.option("--name", "-n", default=None, help="Cable name (default: next free name, e.g. f2)")
@click.option("--capacity", type=int, default=None, help="Strand/pair count (default: mode default)")
@click.option(
    "--circuit-list", "-l",
    type=click.Path(exists=True),
    default=None,
    help="Circuit list file (txt, csv or xlsx) to allocate"
)
def cable_add(project, role, name, capacity, circuit_list):
    """Create a cable, optionally with circuits."""
    from ..parsers import load_circuit_list, CircuitListParseError

    proj, store, coordinator = _load_project(project)

    identifiers = []
    if circuit_list:
        try:
            parsed = load_circuit_list(circuit_list)
        except CircuitListParseError as e:
            _fail(str(e))
        if not parsed.is_valid:
            _fail("Circuit list could not be read")
        identifiers = parsed.identifiers

    if name is None:
        existing = [c.name for c in store.list_cables(mode=proj.mode)]
        name = coordinator.settings.default_cable_name(proj.mode, role.title(), existing)

    try:
        created = coordinator.create_cable(name, role, capacity, proj.mode, identifiers)
    except SpliceEngineError as e:
        _fail(str(e))

    _save_project(store, proj, project)
    console.print(f"[green]✓ Created {created.role.value} cable {created.name} "
                  f"({created.capacity} {created.unit_name}s, {len(identifiers)} circuits)[/green]")


@cable.command("delete")
@PROJECT_OPTION
@click.option("--cable", "-c", "name", required=True, help="Cable name")
def cable_delete(project, name):
    """Delete a cable and its circuits."""
    proj, store, coordinator = _load_project(project)
    target = _find_cable(store, proj, name)

    coordinator.delete_cable(target.id)
    _save_project(store, proj, project)
    console.print(f"[green]✓ Deleted cable {target.name}[/green]")


@cable.command("role")
@PROJECT_OPTION
@click.option("--cable", "-c", "name", required=True, help="Cable name")
@click.argument("role", type=click.Choice(["Feed", "Distribution"], case_sensitive=False))
def cable_role(project, name, role):
    """Switch a cable between Feed and Distribution."""
    proj, store, coordinator = _load_project(project)
    target = _find_cable(store, proj, name)

    updated = coordinator.change_role(target.id, role)
    _save_project(store, proj, project)
    console.print(f"[green]✓ {updated.name} is now a {updated.role.value} cable[/green]")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
