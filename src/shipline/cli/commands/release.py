"""Release pipeline commands."""

import click

from shipline.core.pipeline import RunStatus


def _wants_json(flag: bool) -> bool:
    from shipline.core.config import get_config

    return flag or get_config().get("output", "format") == "json"


@click.group()
def release() -> None:
    """Plan and run component release pipelines.

    Release steps are declared in the component's "release" block:

    \b
      {"release": {"steps": [
        {"id": "build", "type": "build"},
        {"id": "bump", "type": "version", "needs": ["build"], "config": {"bump": "minor"}},
        {"id": "tag", "type": "git.tag", "needs": ["bump"]},
        {"id": "push", "type": "git.push", "needs": ["tag"], "config": {"tags": true}},
        {"id": "notify", "type": "notify", "needs": ["push"]}
      ]}}

    Built-in types: build, changes, version, git.tag, git.push. Any other
    type T runs the action 'release.T' of a module bound to the component.

    \b
    Examples:
      shipline component set storefront --json '{"release": {...}}'
      shipline release plan storefront
      shipline release run storefront --module slack
    """
    pass


@release.command("plan")
@click.argument("component_id")
@click.option("--module", "-m", "module_id", default=None, help="Extra module providing release actions")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def release_plan(component_id: str, module_id: str, as_json: bool) -> None:
    """Show the ordered release steps and whether each can run."""
    from shipline.cli.progress import print_json, print_release_plan
    from shipline.cli.service_helpers import handle_result, services

    release_plan_obj = handle_result(services.release.plan(component_id, module_id=module_id))

    if _wants_json(as_json):
        print_json(release_plan_obj.to_dict())
    else:
        print_release_plan(release_plan_obj)


@release.command("run")
@click.argument("component_id")
@click.option("--module", "-m", "module_id", default=None, help="Extra module providing release actions")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--quiet", "-q", is_flag=True, help="Do not print per-step progress")
def release_run(component_id: str, module_id: str, as_json: bool, quiet: bool) -> None:
    """Run the release pipeline. Exits 1 if any step failed."""
    from shipline.cli.progress import print_json, print_release_run, step_progress
    from shipline.cli.service_helpers import handle_result, services

    use_json = _wants_json(as_json)
    release_run_obj = handle_result(
        services.release.run(
            component_id,
            module_id=module_id,
            progress_callback=step_progress(quiet=quiet or use_json),
        )
    )

    if use_json:
        print_json(release_run_obj.to_dict())
    else:
        print_release_run(release_run_obj)

    if release_run_obj.overall == RunStatus.FAILED:
        raise SystemExit(1)
