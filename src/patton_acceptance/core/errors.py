from __future__ import annotations

from typing import Sequence

# Harness errors mean the scenario could not be run. Expectation errors mean it
# ran and Patton's output did not satisfy the data table. Keep them apart so a
# broken environment never reads as a regression in Patton.


class HarnessError(RuntimeError):
    error_type = "HARNESS_ERROR"


class SpawnError(HarnessError):
    error_type = "SPAWN_FAILED"

    def __init__(self, cmd: Sequence[str], cause: OSError) -> None:
        super().__init__(f"Error starting command {cmd[0]!r}: {cause}")
        self.cmd = list(cmd)
        self.cause = cause


class StdinWriteError(HarnessError):
    error_type = "STDIN_WRITE_FAILED"

    def __init__(self, cmd: Sequence[str], cause: OSError) -> None:
        super().__init__(f"Error writing search term to stdin of {cmd[0]!r}: {cause}")
        self.cmd = list(cmd)
        self.cause = cause


class InvocationTimeoutError(HarnessError):
    error_type = "TIMEOUT"

    def __init__(self, cmd: Sequence[str], timeout: float, stderr_tail: Sequence[str]) -> None:
        message = f"Command timed out after {timeout:g}s and was killed: {' '.join(cmd)}"
        if stderr_tail:
            message += "\nstderr:\n" + "\n".join(stderr_tail)
        super().__init__(message)
        self.cmd = list(cmd)
        self.timeout = timeout
        self.stderr_tail = list(stderr_tail)


class AlreadyInvokedError(HarnessError):
    error_type = "ALREADY_INVOKED"

    def __init__(self) -> None:
        super().__init__("Patton was already executed in this scenario; only one search per scenario is supported")


class TableShapeError(HarnessError):
    error_type = "INVALID_TABLE"


class ExpectationError(AssertionError):
    """Patton ran, but its output does not match the scenario's table."""


class MissingAdvisoriesError(ExpectationError):
    def __init__(self, matched: int, expected: int) -> None:
        super().__init__(f"Only {matched} matches out of {expected} expected advisories")
        self.matched = matched
        self.expected = expected


class VulnerabilityNotFoundError(ExpectationError):
    def __init__(self, package: str, advisory: str) -> None:
        super().__init__(f'Vulnerability "{advisory}" for package "{package}" not found!')
        self.package = package
        self.advisory = advisory


class FalsePositiveError(ExpectationError):
    def __init__(self, package: str, advisory: str, line: str) -> None:
        super().__init__(f'False positive "{advisory}" for package "{package}" found!\nline: {line}')
        self.package = package
        self.advisory = advisory
        self.line = line
