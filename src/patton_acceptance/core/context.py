"""Scenario-scoped state shared between step implementations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from patton_acceptance.core.config import HarnessConfig
from patton_acceptance.core.errors import AlreadyInvokedError


@dataclass
class SearchParameters:
    search_term: str = ""
    version: str = ""
    # Informational only; Patton learns the dialect from search_type.
    distro: str = ""
    search_type: str = ""


@dataclass
class CapturedOutput:
    stdout: List[str] = field(default_factory=list)
    stderr: List[str] = field(default_factory=list)
    exit_code: Optional[int] = None


@dataclass
class ExecutionContext:
    """Everything one scenario knows about its Patton run.

    Binary and database paths come from the harness configuration and never
    change; ``reset()`` only clears the search parameters and captured output.
    """

    binary_path: str
    database_path: str
    timeout: Optional[float] = None
    params: SearchParameters = field(default_factory=SearchParameters)
    output: CapturedOutput = field(default_factory=CapturedOutput)
    invoked: bool = False

    @classmethod
    def from_config(cls, config: HarnessConfig) -> "ExecutionContext":
        return cls(binary_path=config.binary_path, database_path=config.database_path, timeout=config.timeout)

    def reset(self) -> None:
        self.params = SearchParameters()
        self.output = CapturedOutput()
        self.invoked = False

    def begin_invocation(self) -> None:
        if self.invoked:
            raise AlreadyInvokedError()
        self.invoked = True

    def append_stdout_line(self, line: str) -> None:
        self.output.stdout.append(line)

    def append_stderr_line(self, line: str) -> None:
        self.output.stderr.append(line)

    def set_exit_code(self, code: int) -> None:
        self.output.exit_code = code
