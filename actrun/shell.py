"""Shell selection, script wrapping and command-line splitting for ``run:`` steps."""

from __future__ import annotations

import logging
import os
import re
from typing import Callable

LOGGER = logging.getLogger("actrun")

Interpolate = Callable[[str], str]

_WS = r"[ \t\n\f\r]"
_ARGUMENT = re.compile(rf'{_WS}*(([^ \t\n\f\r"]+|"([^\\"]|\\"?)*")+)')
_PIECE = re.compile(r'([^ \t\n\f\r"]*)("(([^\\"]|\\"?)*)")?((.+|\n)*)', re.DOTALL)
_ESCAPED_QUOTE = re.compile(r'\\(")')

# Extension, text put before the script and text put after it, per shell.
_SHELL_WRAPPING: dict[str, tuple[str, str, str]] = {
    "bash": (".sh", "", ""),
    "sh": (".sh", "", ""),
    "pwsh": (
        ".ps1",
        "$ErrorActionPreference = 'stop'",
        "if ((Test-Path -LiteralPath variable:/LASTEXITCODE)) { exit $LASTEXITCODE }",
    ),
    "powershell": (
        ".ps1",
        "$ErrorActionPreference = 'stop'",
        "if ((Test-Path -LiteralPath variable:/LASTEXITCODE)) { exit $LASTEXITCODE }",
    ),
    "cmd": (".cmd", "@echo off", ""),
    "python": (".py", "", ""),
}


def _identity(text: str) -> str:
    return text


def wrap_script(shell: str, name: str, script: str) -> tuple[str, str]:
    """Return the script file name and body for *shell*.

    The name gets the shell's extension; the body gets the lines the shell
    needs before and after the user's script.
    """
    extension, prepend, append = _SHELL_WRAPPING.get(shell, ("", "", ""))
    name += extension
    body = f"{prepend}\n{script}\n{append}"
    LOGGER.debug("Wrote command \n%s\n to '%s'", body, name)
    return name, body


def split_shell_command(command: str) -> list[str]:
    """Split a command line into arguments.

    Double quotes group text into one argument and ``\\"`` inside quotes
    stands for a literal quote.
    """
    arguments: list[str] = []
    for match in _ARGUMENT.finditer(command):
        raw = match.group(1)
        final = ""
        while raw:
            piece = _PIECE.match(raw)
            if piece is None:
                raise ValueError(f"cannot split command line: {command!r}")
            rest = piece.group(5) or ""
            if len(rest) >= len(raw):
                raise ValueError(f"cannot split command line: {command!r}")
            final += piece.group(1)
            final += _ESCAPED_QUOTE.sub(r"\1", piece.group(3) or "")
            raw = rest
        arguments.append(final)
    return arguments


def resolve_shell(
    step_shell: str,
    job_shell: str = "",
    workflow_shell: str = "",
    container_image: str | None = None,
    interpolate: Interpolate = _identity,
) -> str:
    """Pick the shell for a step from the step, job and workflow defaults.

    The job's default may hold expressions and is interpolated; the
    workflow's may not. Steps in a job container fall back to ``sh``.
    """
    shell = step_shell or job_shell
    shell = interpolate(shell)
    if not shell:
        shell = workflow_shell
    if container_image and not shell:
        shell = "sh"
    return shell


def resolve_working_directory(
    step_dir: str,
    job_dir: str = "",
    workflow_dir: str = "",
    interpolate: Interpolate = _identity,
) -> str:
    """Pick the working directory for a step from the step, job and workflow."""
    directory = step_dir or job_dir
    directory = interpolate(directory)
    if not directory:
        directory = workflow_dir
    return directory


def resolve_command(shell_command: str, script_path: str) -> tuple[list[str], str]:
    """Put *script_path* in place of the first ``{0}`` and split the result.

    Returns the arguments and, on Windows, the whole resolved command line
    (whose quoting rules the arguments cannot express); elsewhere an empty
    string.
    """
    resolved = shell_command.replace("{0}", script_path, 1)
    cmdline = resolved if os.name == "nt" else ""
    return split_shell_command(resolved), cmdline