from __future__ import annotations

import logging
import shlex
import subprocess
import threading
from typing import IO, Callable, List, Optional, Sequence

from patton_acceptance.core.context import ExecutionContext
from patton_acceptance.core.errors import InvocationTimeoutError, SpawnError, StdinWriteError

logger = logging.getLogger(__name__)

STDIN_MARKER = "-"
STDERR_TAIL_LINES = 20


def argument_command(ctx: ExecutionContext) -> List[str]:
    p = ctx.params
    return [ctx.binary_path, "-d", ctx.database_path, "-t", p.search_type, "-v", p.version, p.search_term]


def stdin_command(ctx: ExecutionContext) -> List[str]:
    return [ctx.binary_path, "-d", ctx.database_path, "-t", ctx.params.search_type, STDIN_MARKER]


def decode_line(raw: bytes) -> str:
    if raw.endswith(b"\n"):
        raw = raw[:-1]
    if raw.endswith(b"\r"):
        raw = raw[:-1]
    return raw.decode("utf-8", errors="replace")


def stderr_tail(ctx: ExecutionContext, limit: int = STDERR_TAIL_LINES) -> List[str]:
    return ctx.output.stderr[-limit:]


def _pump_lines(stream: IO[bytes], sink: Callable[[str], None]) -> None:
    # Binary readline grows its buffer as needed, so long lines cannot stall the pipe.
    for raw in stream:
        sink(decode_line(raw))


class _StdinWriter(threading.Thread):
    def __init__(self, stream: IO[bytes], payload: str) -> None:
        super().__init__(name="patton-stdin", daemon=True)
        self.stream = stream
        self.payload = payload.encode("utf-8")
        self.error: Optional[OSError] = None

    def run(self) -> None:
        try:
            self.stream.write(self.payload)
            self.stream.flush()
        except OSError as exc:
            self.error = exc
        finally:
            try:
                self.stream.close()
            except OSError as exc:
                if self.error is None:
                    self.error = exc


def run_patton(ctx: ExecutionContext, cmd: Sequence[str], stdin_payload: str | None = None) -> int:
    """Run Patton once and capture its output into ``ctx``.

    Stdout lines are appended in emission order while the child runs; stderr is
    drained on a side thread so a chatty child cannot block. The exit code is
    recorded but a non-zero value is not an error here: the scenario's
    assertions decide whether the output is acceptable.
    """
    ctx.begin_invocation()
    logger.info("running %s", shlex.join(cmd))
    try:
        proc = subprocess.Popen(
            list(cmd),
            stdin=subprocess.PIPE if stdin_payload is not None else subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as exc:
        raise SpawnError(cmd, exc) from exc

    assert proc.stdout is not None and proc.stderr is not None
    stderr_reader = threading.Thread(
        target=_pump_lines, args=(proc.stderr, ctx.append_stderr_line), name="patton-stderr", daemon=True
    )
    stderr_reader.start()

    writer: _StdinWriter | None = None
    if stdin_payload is not None:
        assert proc.stdin is not None
        writer = _StdinWriter(proc.stdin, stdin_payload)
        writer.start()

    timed_out = threading.Event()
    timer: threading.Timer | None = None
    if ctx.timeout is not None:

        def _expire() -> None:
            timed_out.set()
            proc.kill()

        timer = threading.Timer(ctx.timeout, _expire)
        timer.daemon = True
        timer.start()

    try:
        with proc.stdout:
            _pump_lines(proc.stdout, ctx.append_stdout_line)
        returncode = proc.wait()
    finally:
        if timer is not None:
            timer.cancel()
        if proc.poll() is None:
            proc.kill()
            proc.wait()
        if writer is not None:
            writer.join()
        stderr_reader.join()
        proc.stderr.close()

    if timed_out.is_set():
        logger.warning("patton timed out after %ss", ctx.timeout)
        raise InvocationTimeoutError(cmd, ctx.timeout or 0.0, stderr_tail(ctx))
    if writer is not None and writer.error is not None:
        logger.warning("writing search term to patton failed: %s", writer.error)
        raise StdinWriteError(cmd, writer.error)

    ctx.set_exit_code(returncode)
    logger.debug(
        "patton exited with %d (%d stdout lines, %d stderr lines)",
        returncode,
        len(ctx.output.stdout),
        len(ctx.output.stderr),
    )
    return returncode


def search_by_argument(ctx: ExecutionContext, search_type: str) -> int:
    ctx.params.search_type = search_type
    return run_patton(ctx, argument_command(ctx))


def search_from_stdin(ctx: ExecutionContext, search_type: str) -> int:
    ctx.params.search_type = search_type
    return run_patton(ctx, stdin_command(ctx), stdin_payload=ctx.params.search_term)
