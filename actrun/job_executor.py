"""Runs the steps of one job in order around its container's lifetime."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

LOGGER = logging.getLogger("actrun")


@dataclass
class JobRun:
    """State shared by the executors of one job run."""

    error: BaseException | None = None
    logger: logging.Logger = field(default=LOGGER, repr=False)

    def set_error(self, error: BaseException) -> None:
        self.error = error


Executor = Callable[[JobRun], None]


class JobInfo(Protocol):
    """What a job has to offer to be run."""

    def matrix(self) -> dict[str, Any]: ...

    def steps(self) -> list[Any]: ...

    def start_container(self) -> Executor: ...

    def stop_container(self) -> Executor: ...

    def close_container(self) -> Executor: ...

    def new_step_executor(self, step: Any) -> Executor: ...

    def interpolate_outputs(self) -> Executor: ...

    def result(self, result: str) -> None: ...


def _step_runner(step_exec: Executor) -> Executor:
    def run_step(run: JobRun) -> None:
        try:
            step_exec(run)
        except Exception as err:
            run.logger.error("%s", err)
            run.set_error(err)

    return run_step


def new_job_executor(info: JobInfo) -> Callable[[JobRun | None], None]:
    """Build the executor that runs a whole job.

    Step failures are recorded on the JobRun and decide the job's result;
    outputs are interpolated and the container closed in every case.
    """

    def log_matrix(run: JobRun) -> None:
        matrix = info.matrix()
        if matrix:
            run.logger.info("\U0001F9EA  Matrix: %s", matrix)

    pipeline: list[Executor] = [log_matrix, info.start_container()]

    for index, step in enumerate(info.steps()):
        if not step.id:
            step.id = str(index)
        pipeline.append(_step_runner(info.new_step_executor(step)))

    def finish(run: JobRun) -> None:
        info.stop_container()(run)
        info.result("failure" if run.error is not None else "success")

    pipeline.append(finish)

    interpolate_outputs = info.interpolate_outputs()
    close_container = info.close_container()

    def execute(run: JobRun | None = None) -> None:
        run = run if run is not None else JobRun()
        try:
            try:
                for stage in pipeline:
                    stage(run)
            finally:
                interpolate_outputs(run)
        finally:
            close_container(run)

    return execute