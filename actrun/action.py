"""Reading action definitions, with synthetic fallbacks."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import IO, Any, Callable

import yaml

LOGGER = logging.getLogger("actrun")

ReadFile = Callable[[str], IO]
WriteFile = Callable[[str, bytes, int], None]


@dataclass
class ActionInput:
    """One input declared by an action."""

    description: str = ""
    required: bool = False
    default: str = ""


@dataclass
class ActionRuns:
    """The ``runs`` section of an action."""

    using: str = ""
    main: str = ""
    image: str = ""
    entrypoint: str = ""
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    steps: list[Any] = field(default_factory=list)


@dataclass
class Action:
    """An action definition."""

    name: str = ""
    description: str = ""
    inputs: dict[str, ActionInput] = field(default_factory=dict)
    outputs: dict[str, str] = field(default_factory=dict)
    runs: ActionRuns = field(default_factory=ActionRuns)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def parse_action(stream: Any) -> Action:
    """Parse an action definition from YAML text or a readable stream."""
    data = yaml.safe_load(stream)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("action definition must be a mapping")

    inputs = {
        str(name): ActionInput(
            description=_text((spec or {}).get("description")),
            required=bool((spec or {}).get("required", False)),
            default=_text((spec or {}).get("default")),
        )
        for name, spec in (data.get("inputs") or {}).items()
    }
    outputs = {
        str(name): _text((spec or {}).get("value"))
        for name, spec in (data.get("outputs") or {}).items()
    }
    runs = data.get("runs") or {}
    return Action(
        name=_text(data.get("name")),
        description=_text(data.get("description")),
        inputs=inputs,
        outputs=outputs,
        runs=ActionRuns(
            using=_text(runs.get("using")),
            main=_text(runs.get("main")),
            image=_text(runs.get("image")),
            entrypoint=_text(runs.get("entrypoint")),
            args=[_text(arg) for arg in runs.get("args") or []],
            env={str(k): _text(v) for k, v in (runs.get("env") or {}).items()},
            steps=list(runs.get("steps") or []),
        ),
    )


def read_action(
    step_with: dict[str, str] | None,
    action_dir: str,
    action_path: str,
    read_file: ReadFile,
    write_file: WriteFile,
    trampoline: bytes,
) -> Action:
    """Read ``action.yml`` or ``action.yaml``, or build a synthetic action.

    A bare Dockerfile becomes a docker action; a step with ``args`` becomes
    a node action running *trampoline*, written next to the action.
    """
    try:
        stream = read_file("action.yml")
    except FileNotFoundError:
        try:
            stream = read_file("action.yaml")
        except OSError as err:
            return _synthetic_action(
                err, step_with, action_dir, action_path, read_file, write_file, trampoline
            )

    with stream:
        action = parse_action(stream)
    LOGGER.debug("Read action %s from '%s'", action, "Unknown")
    return action


def _synthetic_action(
    error: OSError,
    step_with: dict[str, str] | None,
    action_dir: str,
    action_path: str,
    read_file: ReadFile,
    write_file: WriteFile,
    trampoline: bytes,
) -> Action:
    try:
        dockerfile = read_file("Dockerfile")
    except OSError:
        pass
    else:
        dockerfile.close()
        action = Action(
            name="(Synthetic)", runs=ActionRuns(using="docker", image="Dockerfile")
        )
        LOGGER.debug("Using synthetic action %s for Dockerfile", action)
        return action

    if step_with and "args" in step_with:
        location = os.path.join(action_dir, action_path)
        write_file(os.path.join(location, "trampoline.js"), trampoline, 0o400)
        action = Action(
            name="(Synthetic)",
            inputs={
                "cwd": ActionInput("(Actual working directory)", False, location),
                "command": ActionInput("(Actual program)", False, step_with["args"]),
            },
            runs=ActionRuns(using="node12", main="trampoline.js"),
        )
        LOGGER.debug("Using synthetic action %s", action)
        return action

    raise error