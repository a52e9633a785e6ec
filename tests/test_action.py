import io

import pytest

from actrun.action import Action, ActionInput, ActionRuns, parse_action, read_action

ACTION_YAML = """
name: 'name'
runs:
  using: 'node16'
  main: 'main.js'
"""

TRAMPOLINE = b"// trampoline"


def _reader(filename, content):
    opened = []

    def read_file(name):
        if name != filename:
            raise FileNotFoundError(name)
        stream = io.StringIO(content)
        opened.append(stream)
        return stream

    return read_file, opened


def _writer():
    calls = []

    def write_file(filename, data, mode):
        calls.append((filename, data, mode))

    return write_file, calls


@pytest.mark.parametrize(
    "filename,content,expected",
    [
        (
            "action.yml",
            ACTION_YAML,
            Action(name="name", runs=ActionRuns(using="node16", main="main.js")),
        ),
        (
            "action.yaml",
            ACTION_YAML,
            Action(name="name", runs=ActionRuns(using="node16", main="main.js")),
        ),
        (
            "Dockerfile",
            "FROM ubuntu:20.04",
            Action(name="(Synthetic)", runs=ActionRuns(using="docker", image="Dockerfile")),
        ),
    ],
)
def test_read_action_files(filename, content, expected):
    read_file, opened = _reader(filename, content)
    write_file, calls = _writer()
    action = read_action({}, "actionDir", "actionPath", read_file, write_file, TRAMPOLINE)
    assert action == expected
    assert opened and all(stream.closed for stream in opened)
    assert calls == []


def test_read_action_with_args():
    read_file, _ = _reader(None, "")
    write_file, calls = _writer()
    action = read_action(
        {"args": "cmd"}, "actionDir", "actionPath", read_file, write_file, TRAMPOLINE
    )
    assert action == Action(
        name="(Synthetic)",
        inputs={
            "cwd": ActionInput("(Actual working directory)", False, "actionDir/actionPath"),
            "command": ActionInput("(Actual program)", False, "cmd"),
        },
        runs=ActionRuns(using="node12", main="trampoline.js"),
    )
    assert calls == [("actionDir/actionPath/trampoline.js", TRAMPOLINE, 0o400)]


def test_read_action_missing_raises():
    read_file, _ = _reader(None, "")
    write_file, calls = _writer()
    with pytest.raises(FileNotFoundError):
        read_action({}, "actionDir", "actionPath", read_file, write_file, TRAMPOLINE)
    assert calls == []


def test_read_action_other_error_propagates():
    def read_file(name):
        raise PermissionError(name)

    write_file, _ = _writer()
    with pytest.raises(PermissionError):
        read_action({"args": "cmd"}, "a", "b", read_file, write_file, TRAMPOLINE)


def test_parse_action_inputs_outputs():
    action = parse_action(
        """
name: n
inputs:
  who:
    description: whom to greet
    required: true
    default: world
outputs:
  time:
    value: now
runs:
  using: docker
  image: Dockerfile
  args: [a, b]
  env:
    K: v
"""
    )
    assert action.inputs == {"who": ActionInput("whom to greet", True, "world")}
    assert action.outputs == {"time": "now"}
    assert action.runs.args == ["a", "b"]
    assert action.runs.env == {"K": "v"}
    assert action.runs.using == "docker"


def test_parse_action_rejects_non_mapping():
    with pytest.raises(ValueError):
        parse_action("- a\n- b\n")