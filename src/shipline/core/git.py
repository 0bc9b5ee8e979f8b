"""
Git Operations
==============

Tag, push and change-summary helpers run inside a component's local
working copy. Every git invocation that exits non-zero raises CommandError
with git's last stderr line.
"""

from typing import Any, Dict, List, Optional

from shipline.core.components import Component
from shipline.core.config import get_config
from shipline.core.logger import get_logger
from shipline.core.process import CommandOutput, run_command

logger = get_logger(__name__)

__all__ = [
    "git",
    "latest_tag",
    "tag",
    "push",
    "changes",
]


def git(component: Component, *args: str) -> CommandOutput:
    """Run git in the component's working copy, without checking the exit code."""
    return run_command(["git", *args], cwd=component.path)


def latest_tag(component: Component) -> Optional[str]:
    """Most recent tag reachable from HEAD, or None if there is none."""
    output = git(component, "describe", "--tags", "--abbrev=0")
    if not output.ok:
        return None
    return output.stdout.strip() or None


def tag(component: Component, name: str, message: Optional[str] = None) -> Dict[str, Any]:
    """
    Create a tag at HEAD.

    Annotated when a message is given, lightweight otherwise.
    """
    args = ["tag", "-a", name, "-m", message] if message else ["tag", name]
    output = git(component, *args).check(f"git tag {name}")
    logger.info(f"Tagged '{component.id}' as {name}")
    return {
        "component": component.id,
        "tag": name,
        "annotated": bool(message),
        "output": output.to_dict(),
    }


def push(component: Component, tags: bool = False) -> Dict[str, Any]:
    """Push the current branch (and tags when requested) to the configured remote."""
    remote = get_config().get("git", "remote") or "origin"
    args = ["push", remote]
    if tags:
        args.append("--tags")
    output = git(component, *args).check("git push")
    logger.info(f"Pushed '{component.id}' to {remote}")
    return {
        "component": component.id,
        "remote": remote,
        "tags": tags,
        "output": output.to_dict(),
    }


def changes(component: Component, include_diff: bool = False) -> Dict[str, Any]:
    """
    Summarize commits since the latest tag.

    Returns:
        Dict with latestTag (None when untagged), commits [{hash, subject}]
        and, when requested, the diff since the tag (the HEAD commit when
        untagged)
    """
    since = latest_tag(component)
    rev_range = f"{since}..HEAD" if since else "HEAD"

    log = git(component, "log", "--pretty=format:%h%x09%s", rev_range).check("git log")
    commits: List[Dict[str, str]] = []
    for line in log.stdout.splitlines():
        if not line.strip():
            continue
        commit_hash, _, subject = line.partition("\t")
        commits.append({"hash": commit_hash, "subject": subject})

    summary: Dict[str, Any] = {
        "component": component.id,
        "latestTag": since,
        "commits": commits,
    }
    if include_diff:
        diff_args = ["diff", f"{since}..HEAD"] if since else ["show", "--format=", "HEAD"]
        summary["diff"] = git(component, *diff_args).check("git diff").stdout
    return summary
