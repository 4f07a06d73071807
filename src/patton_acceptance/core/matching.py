"""Containment checks between a scenario's data table and Patton's stdout.

Matching is plain, case-sensitive substring containment on whole output lines.
Patton's output format is opaque to the harness, so there is no tokenising:
``CVE-2020-1`` in a table also matches a line that mentions ``CVE-2020-10``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from patton_acceptance.core.errors import (
    FalsePositiveError,
    MissingAdvisoriesError,
    TableShapeError,
    VulnerabilityNotFoundError,
)

Table = Sequence[Sequence[str]]

PACKAGE_COLUMN = 0
ADVISORY_COLUMN = 2


@dataclass(frozen=True)
class AdvisoryRow:
    package: str
    advisory: str


def data_rows(table: Table) -> List[Sequence[str]]:
    if not table:
        raise TableShapeError("Data table is empty; expected a header row")
    return list(table[1:])


def cve_rows(table: Table) -> List[str]:
    rows = []
    for index, row in enumerate(data_rows(table), start=1):
        if len(row) < 1:
            raise TableShapeError(f"Row {index} has no advisory column")
        rows.append(row[0])
    return rows


def advisory_rows(table: Table) -> List[AdvisoryRow]:
    rows = []
    for index, row in enumerate(data_rows(table), start=1):
        if len(row) <= ADVISORY_COLUMN:
            raise TableShapeError(
                f"Row {index} has {len(row)} columns; expected at least 3 (package, version, advisory)"
            )
        rows.append(AdvisoryRow(package=row[PACKAGE_COLUMN], advisory=row[ADVISORY_COLUMN]))
    return rows


def first_line_mentioning(lines: Sequence[str], *needles: str) -> Optional[str]:
    for line in lines:
        if all(needle in line for needle in needles):
            return line
    return None


def count_cve_matches(lines: Sequence[str], advisories: Sequence[str]) -> int:
    return sum(1 for advisory in advisories if first_line_mentioning(lines, advisory) is not None)


def assert_at_least_one_cve(lines: Sequence[str], table: Table) -> None:
    advisories = cve_rows(table)
    matched = count_cve_matches(lines, advisories)
    if matched < len(advisories):
        raise MissingAdvisoriesError(matched, len(advisories))


def assert_vulnerabilities_present(lines: Sequence[str], table: Table) -> None:
    for row in advisory_rows(table):
        if first_line_mentioning(lines, row.package, row.advisory) is None:
            raise VulnerabilityNotFoundError(row.package, row.advisory)


def assert_no_false_positives(lines: Sequence[str], table: Table) -> None:
    for row in advisory_rows(table):
        line = first_line_mentioning(lines, row.package, row.advisory)
        if line is not None:
            raise FalsePositiveError(row.package, row.advisory, line)
