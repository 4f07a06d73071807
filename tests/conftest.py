# pytest configuration hooks.
#
# Policy: No skipped tests. Skips hide real problems; a scenario that cannot run
# here should xfail with a clear reason instead.

from __future__ import annotations

import os
import stat
import sys
from pathlib import Path
from typing import Callable

import pytest

from patton_acceptance.core import config
from patton_acceptance.core.context import ExecutionContext

# Register the Patton step library as a pytest plugin so its fixtures and steps are discoverable.
pytest_plugins = ["patton_acceptance.steps"]

FIXTURES = Path(__file__).resolve().parent / "fixtures"

_SKIP_COUNT = 0


def pytest_configure() -> None:
    if "PATTON_ACCEPTANCE_CONFIG_PATH" not in os.environ:
        os.environ["PATTON_ACCEPTANCE_CONFIG_PATH"] = str(FIXTURES / "harness.toml")


def pytest_runtest_logreport(report: pytest.TestReport) -> None:
    global _SKIP_COUNT
    if report.when == "setup" and report.outcome == "skipped":
        _SKIP_COUNT += 1


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    if _SKIP_COUNT > 0:
        pytest.exit(f"Skipped tests are not allowed (skipped={_SKIP_COUNT}).", returncode=2)


def write_script(path: Path, body: str) -> Path:
    path.write_text(f"#!{sys.executable}\n{body}", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture(autouse=True)
def _fresh_config_cache():
    config.reset_config_cache()
    yield
    config.reset_config_cache()


@pytest.fixture(scope="session")
def fake_patton(tmp_path_factory: pytest.TempPathFactory) -> Path:
    bin_dir = tmp_path_factory.mktemp("bin")
    return write_script(bin_dir / "patton", (FIXTURES / "fake_patton.py").read_text(encoding="utf-8"))


@pytest.fixture(scope="session")
def harness_config(fake_patton: Path) -> config.HarnessConfig:
    # Feature files run against the fake Patton and its JSON database.
    return config.HarnessConfig(
        binary_path=str(fake_patton),
        database_path=str(FIXTURES / "patton.db.json"),
        timeout=30.0,
    )


@pytest.fixture()
def script_factory(tmp_path: Path) -> Callable[[str], Path]:
    counter = 0

    def make(body: str) -> Path:
        nonlocal counter
        counter += 1
        return write_script(tmp_path / f"tool{counter}", body)

    return make


@pytest.fixture()
def context_for(tmp_path: Path) -> Callable[..., ExecutionContext]:
    def make(binary: Path | str, timeout: float | None = 30.0) -> ExecutionContext:
        return ExecutionContext(binary_path=str(binary), database_path=str(tmp_path / "patton.db.zst"), timeout=timeout)

    return make
