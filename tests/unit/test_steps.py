from __future__ import annotations

import copy
from types import SimpleNamespace

import pytest

from patton_acceptance import steps
from patton_acceptance.core.context import ExecutionContext
from patton_acceptance.core.errors import HarnessError, MissingAdvisoriesError, SpawnError

DB_TABLE_HEADER = ["name", "version", "cve"]


def test_parameter_steps_overwrite_earlier_values(context_for) -> None:
    ctx = context_for("patton")
    steps.given_search_term_and_version(ctx, search_term="openssl", version="1.0.1")
    steps.given_search_term(ctx, search_term="bash")
    assert ctx.params.search_term == "bash"
    assert ctx.params.version == "1.0.1"


def test_package_listing_steps_set_distro_and_term(context_for) -> None:
    ctx = context_for("patton")
    listing = "ii  openssl  1.0.1f-1ubuntu2  amd64\nii  bash  4.3-7ubuntu1  amd64"
    steps.given_package_manager_output(ctx, distro="dpkg", docstring=listing)
    assert (ctx.params.distro, ctx.params.search_term) == ("dpkg", listing)
    steps.given_raw_installed_packages(ctx, distro="rpm", docstring="openssl-1.0.1e-15.x86_64")
    assert (ctx.params.distro, ctx.params.search_term) == ("rpm", "openssl-1.0.1e-15.x86_64")


def test_wordpress_plugin_step_changes_nothing(context_for) -> None:
    ctx = context_for("patton")
    steps.given_search_term_and_version(ctx, search_term="contact-form-7", version="5.0.0")
    before = copy.deepcopy(ctx)
    steps.given_wordpress_plugin(ctx)
    assert ctx == before


def test_before_scenario_hook_resets_the_context(context_for) -> None:
    ctx = context_for("patton")
    steps.given_search_term_and_version(ctx, search_term="openssl", version="1.0.1")
    ctx.append_stdout_line("openssl 1.0.1 CVE-2014-0160")
    request = SimpleNamespace(getfixturevalue=lambda name: {"execution": ctx}[name])
    steps.pytest_bdd_before_scenario(
        request, SimpleNamespace(filename="cpe.feature"), SimpleNamespace(name="next scenario")
    )
    assert ctx.params.search_term == ""
    assert ctx.output.stdout == []


def test_cpe_search_against_fake_patton(harness_config) -> None:
    ctx = ExecutionContext.from_config(harness_config)
    steps.given_search_term_and_version(ctx, search_term="openssl", version="1.0.1")
    steps.when_search_with_search_type(ctx, search_type="cpe")
    steps.then_at_least_one_cve(ctx, datatable=[["cve"], ["CVE-2014-0160"]])
    assert ctx.output.exit_code == 0


def test_empty_result_fails_with_match_count_and_diagnostics(harness_config) -> None:
    ctx = ExecutionContext.from_config(harness_config)
    steps.given_search_term_and_version(ctx, search_term="nonexistent-package-xyz", version="0.0.0")
    steps.when_search_with_search_type(ctx, search_type="cpe")
    assert ctx.output.exit_code == 1
    with pytest.raises(MissingAdvisoriesError, match="Only 0 matches") as excinfo:
        steps.then_at_least_one_cve(ctx, datatable=[["cve"], ["CVE-2014-0160"]])
    notes = excinfo.value.__notes__
    assert "patton exit code: 1" in notes
    assert any("1 packages checked, 0 findings" in note for note in notes)


def test_stdin_search_against_fake_patton(harness_config) -> None:
    ctx = ExecutionContext.from_config(harness_config)
    steps.given_raw_installed_packages(
        ctx,
        distro="dpkg",
        docstring="ii  openssl  1.0.1f-1ubuntu2  amd64  toolkit\nii  bash  4.3-7ubuntu1  amd64  shell",
    )
    steps.when_search_with_type(ctx, search_type="dpkg-l")
    steps.then_at_least_these_vulnerabilities(
        ctx,
        datatable=[DB_TABLE_HEADER, ["openssl", "1.0.1f-1ubuntu2", "CVE-2014-0160"], ["bash", "4.3-7ubuntu1", "CVE-2014-6271"]],
    )
    steps.then_no_false_positives(ctx, datatable=[DB_TABLE_HEADER, ["bash", "4.3-7ubuntu1", "CVE-2014-7169"]])


def test_missing_binary_fails_the_invocation_step_with_a_harness_error(context_for) -> None:
    ctx = context_for("/does/not/exist")
    steps.given_search_term_and_version(ctx, search_term="openssl", version="1.0.1")
    with pytest.raises(SpawnError) as excinfo:
        steps.when_search_with_search_type(ctx, search_type="cpe")
    assert isinstance(excinfo.value, HarnessError)
    assert not isinstance(excinfo.value, AssertionError)
    ctx.reset()
    with pytest.raises(SpawnError):
        steps.when_search_with_type(ctx, search_type="dpkg-l")
