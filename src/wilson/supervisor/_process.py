"""Subprocess execution for control commands and installers.

This module provides the anyio-backed ProcessRunner used in production. It
captures output, bounds the run time and kills the child on timeout or
cancellation.
"""

import contextlib
import subprocess
from collections.abc import Mapping, Sequence
from typing import final

import anyio
import anyio.abc

from ._models import ProcessResult

# Maximum captured output size in bytes
MAX_OUTPUT_BYTES: int = 102400  # 100KB

# Seconds to keep reading output after the process exits
_DRAIN_GRACE: float = 0.5


def truncate_output(output: str, max_bytes: int = MAX_OUTPUT_BYTES) -> str:
    """Truncate output to max bytes, preserving valid UTF-8.

    Args:
        output: The string to truncate.
        max_bytes: Maximum size in bytes.

    Returns:
        Truncated string with indicator if truncated.
    """
    if not output:
        return output

    encoded = output.encode("utf-8")
    if len(encoded) <= max_bytes:
        return output

    # 'ignore' drops an incomplete multi-byte sequence at the cut
    truncated = encoded[:max_bytes].decode("utf-8", errors="ignore")
    return truncated + "\n... [output truncated]"


async def _drain(
    stream: anyio.abc.ByteReceiveStream | None,
    sink: list[bytes],
    done: anyio.Event,
) -> None:
    try:
        if stream is not None:
            async for chunk in stream:
                sink.append(chunk)
    except (anyio.ClosedResourceError, anyio.BrokenResourceError):
        # Stream closed, which is expected on process exit
        pass
    finally:
        done.set()


def _decode(chunks: list[bytes]) -> str:
    return truncate_output(b"".join(chunks).decode("utf-8", errors="replace"))


@final
class AnyioProcessRunner:
    """Runs subprocesses with anyio, killing them on timeout or cancellation."""

    __slots__ = ()

    async def run(
        self,
        command: Sequence[str],
        *,
        timeout: float,
        env: Mapping[str, str] | None = None,
    ) -> ProcessResult:
        """Run a command to completion.

        Args:
            command: Program and arguments.
            timeout: Seconds to wait before killing the process.
            env: Full environment for the child, or None to inherit.

        Returns:
            The exit code and captured output.

        Raises:
            OSError: If the process could not be spawned.
            TimeoutError: If the process was killed after ``timeout``.
        """
        process = await anyio.open_process(
            list(command),
            env=dict(env) if env is not None else None,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )

        stdout: list[bytes] = []
        stderr: list[bytes] = []
        stdout_done = anyio.Event()
        stderr_done = anyio.Event()
        exit_code: int | None = None

        try:
            with anyio.move_on_after(timeout):
                async with anyio.create_task_group() as tg:
                    tg.start_soon(_drain, process.stdout, stdout, stdout_done)
                    tg.start_soon(_drain, process.stderr, stderr, stderr_done)

                    exit_code = await process.wait()

                    # Daemonizing children may keep the pipes open forever
                    with anyio.move_on_after(_DRAIN_GRACE):
                        await stdout_done.wait()
                        await stderr_done.wait()
                    tg.cancel_scope.cancel()
        finally:
            if process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
            with anyio.CancelScope(shield=True):
                await process.aclose()

        if exit_code is None:
            msg = f"{command[0]} did not exit within {timeout}s"
            raise TimeoutError(msg)

        return ProcessResult(
            exit_code=exit_code,
            stdout=_decode(stdout),
            stderr=_decode(stderr),
        )
