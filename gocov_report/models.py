"""Coverage data model.

Contains the records produced by an instrumented run:
    - Statement
    - Function
    - Package

and the helpers that build them from gocov-style JSON documents::

    {"Packages": [{"Name": "pkg", "Functions": [{"Name": "f", "File": "a.go",
      "Line": 3, "Statements": [{"Line": 4, "Reached": 1}]}]}]}
"""

import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


class ModelError(Exception):
    """Raised when a coverage document is malformed."""


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Statement:
    file: str
    line: int
    reached: int = 0


@dataclass
class Function:
    name: str
    file: str
    line: int
    statements: list[Statement] = field(default_factory=list)


@dataclass
class Package:
    name: str
    functions: list[Function] = field(default_factory=list)


# ---------------------------------------------------------------------------
# JSON parsing
# ---------------------------------------------------------------------------

def packages_from_json(data: Any) -> list[Package]:
    """Build Package records from a decoded coverage document.

    Accepts either ``{"Packages": [...]}`` or the bare package list.

    Raises:
        ModelError: if a record is missing its name or carries bad numbers.
    """
    if isinstance(data, dict):
        raw_packages = data.get("Packages") or []
    elif isinstance(data, list):
        raw_packages = data
    else:
        raise ModelError("Coverage document must be a JSON object or list.")

    if not isinstance(raw_packages, list):
        raise ModelError("'Packages' must be a list.")

    return [_parse_package(raw) for raw in raw_packages]


def loads(text: str) -> list[Package]:
    """Parse a coverage document from a JSON string."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ModelError(f"Invalid JSON: {exc}") from exc
    return packages_from_json(data)


def load_packages(source: str) -> list[Package]:
    """Read a coverage document from *source*, a file path or ``-`` for stdin.

    Raises:
        ModelError: if the file is missing or the document is malformed.
    """
    if source == "-":
        label = "stdin"
    else:
        label = f"'{source}'"
        if not Path(source).exists():
            raise ModelError(f"Coverage file not found: {label}")

    try:
        text = _read_text(source)
    except UnicodeDecodeError as exc:
        raise ModelError(f"{label}: not valid UTF-8 ({exc.reason})") from exc

    try:
        return loads(text)
    except ModelError as exc:
        raise ModelError(f"{label}: {exc}") from exc


def _read_text(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _parse_package(raw: dict[str, Any]) -> Package:
    name = _require_name(raw, "package")
    functions = [
        _parse_function(f)
        for f in _list_field(raw, "Functions", f"package '{name}'")
    ]
    return Package(name=name, functions=functions)


def _parse_function(raw: dict[str, Any]) -> Function:
    name = _require_name(raw, "function")
    file = str(raw.get("File", ""))
    statements = [
        _parse_statement(s, default_file=file)
        for s in _list_field(raw, "Statements", f"function '{name}'")
    ]
    return Function(
        name=name,
        file=file,
        line=_int_field(raw, "Line", f"function '{name}'"),
        statements=statements,
    )


def _parse_statement(raw: dict[str, Any], default_file: str) -> Statement:
    if not isinstance(raw, dict):
        raise ModelError("Each statement must be a JSON object.")
    reached = _int_field(raw, "Reached", "statement")
    if reached < 0:
        raise ModelError(f"Statement reached count must be >= 0, got {reached}.")
    return Statement(
        file=str(raw.get("File") or default_file),
        line=_int_field(raw, "Line", "statement"),
        reached=reached,
    )


def _require_name(raw: Any, kind: str) -> str:
    if not isinstance(raw, dict):
        raise ModelError(f"Each {kind} must be a JSON object.")
    name = raw.get("Name")
    if not name:
        raise ModelError(f"A {kind} is missing its 'Name'.")
    return str(name)


def _list_field(raw: dict[str, Any], key: str, where: str) -> list[Any]:
    value = raw.get(key) or []
    if not isinstance(value, list):
        raise ModelError(f"'{key}' of {where} must be a list, got {value!r}.")
    return value


def _int_field(raw: dict[str, Any], key: str, where: str) -> int:
    value = raw.get(key, 0)
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ModelError(f"'{key}' of {where} must be an integer, got {value!r}.")
    return value
