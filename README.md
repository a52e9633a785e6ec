# actrun

Building blocks for running workflow jobs on your own machine. The package
provides the following pieces:

- rewriting and evaluating `${{ }}` expressions through an evaluator you supply
- chaining the parts of a job into one pipeline
- per-job log formatting
- reading action definitions
- the smaller rules a step needs: action references, script names, input
  variables, shell choice and command-line splitting

## Install

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Modules

### `actrun.expression`

- `rewrite_sub_expression(text, force_format)` turns text holding several
  `${{ ... }}` parts into one `format(...)` call. Text that is exactly one
  expression is returned unchanged unless `force_format` is true. An unclosed
  string or expression raises `ExpressionSyntaxError`.
- `escape_format_string(text)` doubles braces.
- Each of the following takes an `evaluate(expression, is_if)` callable that
  you provide:
  - `interpolate` gives the string result. An evaluation error is logged and
    gives `""`. A result that is not a string raises `TypeError`.
  - `evaluate_structure` walks loaded YAML data. It merges maps under a
    `${{ insert }}` key, and sequences produced by an expression are spliced
    into their parent.
  - `eval_bool` maps the result to a boolean with `to_bool`.

### `actrun.job_executor`

`new_job_executor(info)` builds a callable from a `JobInfo`. When called, it:

1. logs the matrix;
2. starts the container;
3. runs each step, giving steps without an id their index as id;
4. stops the container;
5. reports `"success"` or `"failure"` through `info.result`.

It then always interpolates outputs and closes the container.

A step that raises is logged and recorded on the `JobRun` via `set_error`. The remaining steps still run.

### `actrun.logger`

`with_job_logger(job_name, secrets, insecure_secrets, dryrun, stream)` returns a logger adapter whose records are formatted by `StepLogFormatter`:

- Each line is prefixed with `[job]`.
- Secret values are replaced by `***` unless `insecure_secrets` is set.
- Records with `raw_output` or `dryrun` get their own prefixes.
- ANSI colour is used when the stream is a terminal. `CLICOLOR_FORCE` and `CLICOLOR=0` override this.
- Each new job logger takes the next colour in turn.

`check_if_terminal(stream)` reports whether a stream is a TTY.

### `actrun.action`

`parse_action(stream)` reads an action definition into `Action`, `ActionRuns`
and `ActionInput` dataclasses.

`read_action(step_with, action_dir, action_path, read_file, write_file, trampoline)` tries `action.yml`, then `action.yaml`. If neither exists:

- a `Dockerfile` gives a synthetic docker action;
- otherwise, a step with `args` gives a synthetic `node12` action, after the `trampoline` bytes are written to `trampoline.js` with mode `0o400`.

If none of these applies, the not-found error is raised.

### `actrun.step_context`

- `new_remote_action("org/repo[/path]@ref")` returns a `RemoteAction`, with
  `clone_url()` and `is_checkout()`. It returns `None` when the form or the
  ref is missing. `ActionFormatError` is available for reporting such a
  reference.
- `get_script_name(step_id, parent_steps)` gives names like
  `workflow/1-composite-0`.
- `input_env_key`, `populate_envs_from_input`, `docker_action_image`,
  `get_os_safe_relative_path` and `remove_git_ignore` are also here.

### `actrun.shell`

- `resolve_shell` and `resolve_working_directory` pick values from the step,
  job and workflow defaults.
- `wrap_script(shell, name, script)` adds the shell's file extension and
  its prologue and epilogue.
- `resolve_command(shell_command, script_path)` substitutes the first `{0}`
  and splits the result with `split_shell_command`, which honours double
  quotes and `\"`.

## Example

```python
from actrun.expression import eval_bool, rewrite_sub_expression
from actrun.shell import resolve_command, wrap_script
from actrun.step_context import new_remote_action

print(rewrite_sub_expression("Hello ${{ 'World' }}", False))
# format('Hello {0}', 'World')

print(eval_bool(lambda expr, is_if: expr == "true", "true"))   # True

ref = new_remote_action("actions/checkout@v2")
print(ref.clone_url(), ref.is_checkout())
# https://github.com/actions/checkout True

name, body = wrap_script("bash", "workflow/0", "echo hi")
print(name)                                   # workflow/0.sh
print(resolve_command('bash -e "{0}"', "/tmp/" + name)[0])
# ['bash', '-e', '/tmp/workflow/0.sh']
```

## What it does not do

This package has no expression evaluator of its own. You pass one in.

It does not do any of the following:

- read workflow files or plan jobs from them
- handle the workflow commands that steps print, such as `::set-output`
- build GitHub environment variables
- create, start or talk to containers
- clone repositories
- offer a command-line program

Those parts are left to the program that uses these building blocks.