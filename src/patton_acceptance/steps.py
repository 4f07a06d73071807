"""pytest-bdd step library for Patton acceptance scenarios.

Load it from a conftest with ``pytest_plugins = ["patton_acceptance.steps"]``
and collect feature files with ``pytest_bdd.scenarios(...)``. Each scenario gets
its own ``execution`` fixture; the binary and database paths come from
``PATTON_BINARY`` / ``PATTON_DATABASE`` (see ``core.config``).
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List

import pytest
from pytest_bdd import given, parsers, then, when

from patton_acceptance.core import config, matching, patterns, process
from patton_acceptance.core.context import ExecutionContext
from patton_acceptance.core.errors import ExpectationError

logger = logging.getLogger(__name__)


@pytest.fixture(scope="session")
def harness_config() -> config.HarnessConfig:
    return config.load_harness_config()


@pytest.fixture()
def execution(harness_config: config.HarnessConfig) -> ExecutionContext:
    return ExecutionContext.from_config(harness_config)


def pytest_bdd_before_scenario(request, feature, scenario) -> None:
    ctx: ExecutionContext = request.getfixturevalue("execution")
    ctx.reset()
    logger.debug("scenario %r (%s): state reset", scenario.name, feature.filename)


@contextmanager
def _patton_diagnostics(ctx: ExecutionContext) -> Iterator[None]:
    try:
        yield
    except ExpectationError as exc:
        exc.add_note(f"patton exit code: {ctx.output.exit_code}")
        tail = process.stderr_tail(ctx)
        if tail:
            exc.add_note("patton stderr (tail):\n" + "\n".join(tail))
        raise


# ---- Parameters ----
@given(parsers.re(patterns.SEARCH_TERM_AND_VERSION))
def given_search_term_and_version(execution: ExecutionContext, search_term: str, version: str) -> None:
    execution.params.search_term = search_term
    execution.params.version = version


@given(parsers.re(patterns.SEARCH_TERM))
def given_search_term(execution: ExecutionContext, search_term: str) -> None:
    execution.params.search_term = search_term


@given(parsers.re(patterns.WORDPRESS_PLUGIN))
def given_wordpress_plugin(execution: ExecutionContext) -> None:
    # Kept so feature files can state intent; the search type carries the meaning.
    pass


@given(parsers.re(patterns.PACKAGE_MANAGER_OUTPUT))
def given_package_manager_output(execution: ExecutionContext, distro: str, docstring: str) -> None:
    execution.params.distro = distro
    execution.params.search_term = docstring


@given(parsers.re(patterns.RAW_INSTALLED_PACKAGES))
def given_raw_installed_packages(execution: ExecutionContext, distro: str, docstring: str) -> None:
    execution.params.distro = distro
    execution.params.search_term = docstring


# ---- Invocation ----
@when(parsers.re(patterns.EXECUTE_WITH_SEARCH_TYPE))
def when_search_with_search_type(execution: ExecutionContext, search_type: str) -> None:
    process.search_by_argument(execution, search_type)


@when(parsers.re(patterns.EXECUTE_WITH_TYPE))
def when_search_with_type(execution: ExecutionContext, search_type: str) -> None:
    process.search_from_stdin(execution, search_type)


# ---- Assertions ----
@then(parsers.re(patterns.AT_LEAST_ONE_CVE))
def then_at_least_one_cve(execution: ExecutionContext, datatable: List[List[str]]) -> None:
    with _patton_diagnostics(execution):
        matching.assert_at_least_one_cve(execution.output.stdout, datatable)


@then(parsers.re(patterns.AT_LEAST_THESE_VULNERABILITIES))
def then_at_least_these_vulnerabilities(execution: ExecutionContext, datatable: List[List[str]]) -> None:
    with _patton_diagnostics(execution):
        matching.assert_vulnerabilities_present(execution.output.stdout, datatable)


@then(parsers.re(patterns.NO_FALSE_POSITIVES))
def then_no_false_positives(execution: ExecutionContext, datatable: List[List[str]]) -> None:
    with _patton_diagnostics(execution):
        matching.assert_no_false_positives(execution.output.stdout, datatable)
