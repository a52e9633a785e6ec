"""Helpers for running one step: remote action references, script names and inputs."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any, Callable, Iterable

LOGGER = logging.getLogger("actrun")

DEFAULT_ACTION_URL = "https://github.com"

_REMOTE_ACTION = re.compile(r"^([^/@]+)/([^/@]+)(/([^@]*))?(@(.*))?$")
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")
_NON_ENV_KEY = re.compile(r"[^A-Z0-9-]")


class ActionFormatError(ValueError):
    """Raised when a ``uses:`` reference is not ``{org}/{repo}[/path]@ref``."""

    def __init__(self, uses: str) -> None:
        super().__init__(
            "Expected format {org}/{repo}[/path]@ref. "
            f"Actual '{uses}' Input string was not in a correct format."
        )
        self.uses = uses


@dataclass
class RemoteAction:
    """A reference to an action kept in a remote repository."""

    org: str
    repo: str
    path: str = ""
    ref: str = ""
    url: str = DEFAULT_ACTION_URL

    def clone_url(self) -> str:
        """Return the URL the action's repository is cloned from."""
        return f"{self.url}/{self.org}/{self.repo}"

    def is_checkout(self) -> bool:
        """Tell whether this is the standard checkout action."""
        return self.org == "actions" and self.repo == "checkout"


def new_remote_action(action: str) -> RemoteAction | None:
    """Parse ``org/repo[/path]@ref``; None when the form or the ref is missing."""
    match = _REMOTE_ACTION.match(action)
    if match is None or not match.group(6):
        return None
    return RemoteAction(
        org=match.group(1),
        repo=match.group(2),
        path=match.group(4) or "",
        ref=match.group(6),
    )


def get_script_name(step_id: str, parent_steps: Iterable[str] = ()) -> str:
    """Return the script file name for a step.

    *parent_steps* are the current steps of the enclosing composite actions,
    innermost first; each is prefixed to keep nested scripts apart.
    """
    name = step_id
    for parent in parent_steps:
        name = f"{parent}-composite-{name}"
    return f"workflow/{name}"


def get_os_safe_relative_path(path: str, prefix: str) -> str:
    """Strip *prefix* from *path* and return it with forward slashes and no leading slash."""
    name = path.removeprefix(prefix)
    if os.name == "nt":
        name = name.replace("\\", "/")
    return name.removeprefix("/")


def remove_git_ignore(directory: str) -> None:
    """Delete a ``.gitignore`` in *directory* so ignored files still get copied."""
    path = os.path.join(directory, ".gitignore")
    if os.path.exists(path):
        LOGGER.debug("Removing %s before docker cp", path)
        os.remove(path)


def input_env_key(input_id: str) -> str:
    """Return the ``INPUT_*`` variable name for an action input."""
    return "INPUT_" + _NON_ENV_KEY.sub("_", input_id.upper())


def docker_action_image(action_name: str) -> str:
    """Return the local image tag built for a Dockerfile action."""
    image = f"{_NON_ALNUM.sub('-', action_name)}-dockeraction:latest"
    return f"act-{image.lstrip('-')}".lower()


def populate_envs_from_input(
    env: MutableMapping[str, str],
    inputs: Mapping[str, Any],
    interpolate: Callable[[str], str],
) -> MutableMapping[str, str]:
    """Set ``INPUT_*`` variables from input defaults where not already set.

    *inputs* maps input names to objects with a ``default`` attribute or
    to plain default strings. *env* is changed in place and returned.
    """
    for input_id, spec in inputs.items():
        key = input_env_key(input_id)
        if key not in env:
            default = spec if isinstance(spec, str) else getattr(spec, "default", "")
            env[key] = interpolate(default or "")
    return env