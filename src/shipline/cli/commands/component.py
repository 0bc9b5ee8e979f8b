"""Component record commands."""

import json

import click


@click.group()
def component() -> None:
    """Inspect and update component records."""
    pass


@component.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def component_list(as_json: bool) -> None:
    """List stored components."""
    from shipline.cli.progress import console, print_json, print_table
    from shipline.cli.service_helpers import handle_result, services

    components = handle_result(services.component.list_components())

    if as_json:
        print_json([{"id": c.id, **c.to_dict()} for c in components])
        return

    if not components:
        console.print("[dim]No components found[/dim]")
        return

    rows = []
    for c in components:
        steps = len(c.release.steps) if c.release else "-"
        rows.append([c.id, c.name, c.local_path, ", ".join(c.module_ids), steps])
    print_table("Components", ["ID", "Name", "Path", "Modules", "Release steps"], rows)


@component.command("show")
@click.argument("component_id")
def component_show(component_id: str) -> None:
    """Show a component record as JSON."""
    from shipline.cli.progress import print_json
    from shipline.cli.service_helpers import handle_result, services

    c = handle_result(services.component.get_component(component_id))
    print_json({"id": c.id, **c.to_dict()})


@component.command("set")
@click.argument("component_id")
@click.option(
    "--json",
    "patch",
    required=True,
    help='JSON object of fields to replace, e.g. \'{"release": {"steps": [...]}}\'. Use - to read stdin.',
)
def component_set(component_id: str, patch: str) -> None:
    """Replace top-level fields of a component record."""
    from shipline.cli.progress import print_success
    from shipline.cli.service_helpers import exit_with_error, handle_result, services

    if patch == "-":
        patch = click.get_text_stream("stdin").read()
    try:
        data = json.loads(patch)
    except json.JSONDecodeError as e:
        exit_with_error(f"Invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})")
        return

    result = services.component.update_component(component_id, data)
    handle_result(result)
    print_success(result.message)
