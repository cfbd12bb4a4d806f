"""Per-function coverage report.

Usage:
    report = Report()
    for package in packages:
        report.add_package(package)      # raises DuplicatePackageError
    print_report(sys.stdout, report)

Each package is printed in name order. Its functions are ranked from the
best-covered to the worst-covered; for an equal coverage ratio the function
with more statements comes first. Columns are aligned across the whole
report, not per package.

A Report holds no lock: calls on one instance must be serialised by the
caller.
"""

import io
import os
from bisect import bisect_left
from dataclasses import dataclass
from typing import TextIO

from gocov_report.models import Function, Package
from gocov_report.tabwriter import TabWriter


# --------------------------------------------------------------------------- #
# Exceptions
# --------------------------------------------------------------------------- #

class ReportError(Exception):
    """Base exception for report errors."""


class DuplicatePackageError(ReportError):
    """Raised when a package with the same name is already in the report.

    Merging results from several runs is not supported.
    """

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Package '{name}' already exists: result merging is not supported."
        )
        self.name = name


# --------------------------------------------------------------------------- #
# Aggregator
# --------------------------------------------------------------------------- #

class Report:
    """Packages of a coverage run, kept sorted and unique by name."""

    def __init__(self) -> None:
        self._packages: list[Package] = []
        self._names: list[str] = []

    @property
    def packages(self) -> tuple[Package, ...]:
        return tuple(self._packages)

    def __len__(self) -> int:
        return len(self._packages)

    def add_package(self, package: Package) -> None:
        """Insert *package* at its sorted position.

        Raises:
            DuplicatePackageError: if a package with the same name is present.
                The report is left unchanged.
        """
        i = bisect_left(self._names, package.name)
        if i < len(self._names) and self._names[i] == package.name:
            raise DuplicatePackageError(package.name)
        self._names.insert(i, package.name)
        self._packages.insert(i, package)

    def clear(self) -> None:
        self._packages = []
        self._names = []


# --------------------------------------------------------------------------- #
# Ranking
# --------------------------------------------------------------------------- #

@dataclass(frozen=True)
class ReportFunction:
    """A function together with the number of its statements that ran."""

    function: Function
    statements_reached: int

    @property
    def total_statements(self) -> int:
        return len(self.function.statements)

    @property
    def ratio(self) -> float:
        if not self.function.statements:
            return 0.0
        return self.statements_reached / len(self.function.statements)

    @property
    def percent(self) -> float:
        return coverage_percent(self.statements_reached, self.total_statements)


def coverage_percent(reached: int, total: int) -> float:
    """Return *reached* / *total* as a percentage, 0.0 when *total* is 0."""
    if total == 0:
        return 0.0
    return reached / total * 100


def _ranking_key(fn: ReportFunction) -> tuple[float, int]:
    # ascending order; the report lists functions in reverse
    return (fn.ratio, fn.total_statements)


def rank_functions(package: Package) -> list[ReportFunction]:
    """Return the functions of *package*, highest coverage ratio first.

    Functions with the same ratio are ordered by statement count, largest
    first. The sort is stable, so full ties keep their discovery order.
    """
    functions = [
        ReportFunction(fn, sum(1 for stmt in fn.statements if stmt.reached > 0))
        for fn in package.functions
    ]
    return sorted(functions, key=_ranking_key, reverse=True)


# --------------------------------------------------------------------------- #
# Rendering
# --------------------------------------------------------------------------- #

def base_name(path: str) -> str:
    """Return the last element of *path*, with Go's filepath.Base conventions.

    An empty path gives ".", and a path made only of separators gives "/".
    """
    if not path:
        return "."
    stripped = path.rstrip(os.sep)
    if not stripped:
        return os.sep
    return os.path.basename(stripped)


def format_function(package_name: str, fn: ReportFunction) -> str:
    """Return the tab-separated report line for *fn* (with newline)."""
    func = fn.function
    return (
        f"{package_name}/{base_name(func.file)}:{func.line}\t"
        f" {func.name}\t"
        f" {fn.percent:.2f}% ({fn.statements_reached}/{fn.total_statements})\n"
    )


def print_report(stream: TextIO, report: Report) -> None:
    """Write the aligned coverage report for *report* to *stream*.

    Raises:
        OSError: if writing to *stream* fails.
    """
    tw = TabWriter(stream, minwidth=0, tabwidth=8, padding=0, padchar="\t")
    for package in report.packages:
        _print_package(tw, package)
        tw.write("\n")
    tw.flush()


def render_report(report: Report) -> str:
    """Return the report as a string."""
    buf = io.StringIO()
    print_report(buf, report)
    return buf.getvalue()


def _print_package(tw: TabWriter, package: Package) -> None:
    for fn in rank_functions(package):
        tw.write(format_function(package.name, fn))
