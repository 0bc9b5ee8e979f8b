"""Configuration management commands."""

import click


@click.group()
def config() -> None:
    """Configuration commands."""
    pass


@config.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def config_show(as_json: bool) -> None:
    """Show current configuration."""
    from shipline.cli.progress import console, print_json, print_mapping
    from shipline.cli.service_helpers import handle_result, services

    config_obj = handle_result(services.config.get_config())

    if as_json:
        print_json(config_obj.to_dict())
        return

    console.print("\n[bold]Current Configuration[/bold]")
    if config_obj._source:
        console.print(f"[dim]Source: {config_obj._source}[/dim]\n")
    else:
        console.print("[dim]Source: defaults (no config file found)[/dim]\n")

    for section_name, section in config_obj.to_dict().items():
        if section:
            print_mapping(section_name, section)


@config.command("path")
def config_path() -> None:
    """Show config file search locations and the active file."""
    from shipline.cli.progress import console
    from shipline.cli.service_helpers import handle_result, services

    active = handle_result(services.config.find_config_file())
    locations = handle_result(services.config.get_config_locations())

    console.print("\n[bold]Config file locations[/bold] (highest priority first)\n")
    for location in locations:
        marker = "[green]*[/green]" if active and location == active else " "
        console.print(f"  {marker} {location}")
    console.print()
    if active:
        console.print(f"Active: {active}")
    else:
        console.print("[dim]No config file found, using defaults[/dim]")
