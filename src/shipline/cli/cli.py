"""
shipline CLI - release pipelines for components
"""

from typing import Optional

import click

from shipline import __version__

from .commands import component, config, module, release


@click.group()
@click.version_option(version=__version__, prog_name="shipline")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Configuration file (overrides the standard locations)",
)
@click.option("--verbose", "-v", count=True, help="Increase log verbosity (-v INFO, -vv DEBUG)")
def cli(config_path: Optional[str], verbose: int) -> None:
    """shipline - dependency-ordered release pipelines

    Use 'shipline COMMAND --help' for more information on a command.
    """
    from shipline.core.config import load_config, set_config
    from shipline.core.logger import set_level

    loaded = load_config(config_path)
    set_config(loaded)

    if verbose >= 2:
        set_level("DEBUG")
    elif verbose == 1:
        set_level("INFO")
    else:
        set_level(loaded.get("logging", "level", "WARNING"))


# Register command groups
cli.add_command(component)
cli.add_command(config)
cli.add_command(module)
cli.add_command(release)


if __name__ == "__main__":
    cli()
