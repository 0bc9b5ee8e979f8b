"""Module manifest commands."""

import click


@click.group()
def module() -> None:
    """Inspect installed modules and their actions."""
    pass


@module.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def module_list(as_json: bool) -> None:
    """List installed modules."""
    from shipline.cli.progress import console, print_json, print_table, print_warning
    from shipline.cli.service_helpers import handle_result, services

    result = services.module.list_modules()
    modules = handle_result(result)

    if as_json:
        print_json([m.to_dict() for m in modules])
        return

    for warning in result.warnings:
        print_warning(warning)
    if not modules:
        console.print("[dim]No modules found[/dim]")
        return

    rows = [[m.id, m.name, m.version, ", ".join(a.id for a in m.actions)] for m in modules]
    print_table("Modules", ["ID", "Name", "Version", "Actions"], rows)


@module.command("show")
@click.argument("module_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def module_show(module_id: str, as_json: bool) -> None:
    """Show a module and its actions."""
    from shipline.cli.progress import console, print_json, print_table
    from shipline.cli.service_helpers import handle_result, services

    manifest = handle_result(services.module.get_module(module_id))

    if as_json:
        print_json(manifest.to_dict())
        return

    console.print(f"\n[bold]{manifest.name}[/bold] [dim]{manifest.version}[/dim]")
    if manifest.description:
        console.print(manifest.description)
    console.print()
    rows = [[a.id, a.label, a.command] for a in manifest.actions]
    print_table("Actions", ["ID", "Label", "Command"], rows)
