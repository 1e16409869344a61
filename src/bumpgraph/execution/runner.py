"""Shell command execution with streamed capture and timeouts."""

from __future__ import annotations

import asyncio
import os
import time
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple

from bumpgraph.execution.results import ExecutionResult

if TYPE_CHECKING:
    from bumpgraph.workspace.manifest import Manifest


class CommandOutput(NamedTuple):
    """Raw outcome of :func:`run_command`."""

    exit_code: int
    stdout: str
    stderr: str
    duration_ms: int
    timed_out: bool = False


async def _read_stream(
    stream: asyncio.StreamReader,
    callback: Callable[[str], None] | None,
    buffer: list[str],
) -> None:
    """Read from stream line by line."""
    while True:
        line = await stream.readline()
        if not line:
            break
        decoded = line.decode("utf-8", errors="replace")
        buffer.append(decoded)
        if callback:
            callback(decoded.rstrip())


def _elapsed_ms(start_time: float) -> int:
    return int((time.monotonic() - start_time) * 1000)


async def run_command(
    command: str,
    cwd: Path,
    *,
    env: dict[str, str] | None = None,
    timeout: float | None = None,
    on_stdout: Callable[[str], None] | None = None,
    on_stderr: Callable[[str], None] | None = None,
) -> CommandOutput:
    """Run a shell command asynchronously.

    A command that exceeds ``timeout`` is killed and reported with exit
    code -1 and ``timed_out`` set.

    Args:
        command: Shell command to execute.
        cwd: Working directory.
        env: Environment variables (merged with current env).
        timeout: Timeout in seconds.
        on_stdout: Callback for stdout lines.
        on_stderr: Callback for stderr lines.

    Returns:
        Exit code, captured output and duration.
    """
    run_env = os.environ.copy()
    if env:
        run_env.update(env)

    start_time = time.monotonic()

    try:
        process = await asyncio.create_subprocess_shell(
            command,
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=run_env,
        )
    except OSError as e:
        return CommandOutput(-1, "", str(e), _elapsed_ms(start_time))

    if process.stdout is None or process.stderr is None:
        raise RuntimeError("Process stdout/stderr is None")

    stdout_buffer: list[str] = []
    stderr_buffer: list[str] = []

    try:
        await asyncio.wait_for(
            asyncio.gather(
                _read_stream(process.stdout, on_stdout, stdout_buffer),
                _read_stream(process.stderr, on_stderr, stderr_buffer),
                process.wait(),
            ),
            timeout=timeout,
        )
    except (asyncio.TimeoutError, TimeoutError):
        process.kill()
        await process.wait()
        return CommandOutput(
            -1,
            "".join(stdout_buffer),
            f"Command timed out after {timeout}s",
            _elapsed_ms(start_time),
            timed_out=True,
        )

    return CommandOutput(
        process.returncode or 0,
        "".join(stdout_buffer),
        "".join(stderr_buffer),
        _elapsed_ms(start_time),
    )


async def run_in_package(
    manifest: Manifest,
    command: str,
    *,
    env: dict[str, str] | None = None,
    timeout: float | None = None,
    on_stdout: Callable[[str], None] | None = None,
    on_stderr: Callable[[str], None] | None = None,
) -> ExecutionResult:
    """Run a command in a package directory.

    The package's name, location and version are exported as
    ``BUMPGRAPH_PACKAGE_NAME``, ``BUMPGRAPH_PACKAGE_PATH`` and
    ``BUMPGRAPH_PACKAGE_VERSION``.
    """
    run_env = env.copy() if env else {}
    run_env["BUMPGRAPH_PACKAGE_NAME"] = manifest.name
    run_env["BUMPGRAPH_PACKAGE_PATH"] = str(manifest.location)
    run_env["BUMPGRAPH_PACKAGE_VERSION"] = manifest.version

    output = await run_command(
        command,
        cwd=manifest.location,
        env=run_env,
        timeout=timeout,
        on_stdout=on_stdout,
        on_stderr=on_stderr,
    )

    if output.exit_code == 0 and not output.timed_out:
        return ExecutionResult.success_result(
            package_name=manifest.name,
            stdout=output.stdout,
            stderr=output.stderr,
            duration_ms=output.duration_ms,
            command=command,
        )
    return ExecutionResult.failure_result(
        package_name=manifest.name,
        exit_code=output.exit_code,
        stdout=output.stdout,
        stderr=output.stderr,
        duration_ms=output.duration_ms,
        command=command,
        timed_out=output.timed_out,
    )
