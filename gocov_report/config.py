"""Report configuration.

A config file names the coverage documents a project usually reports on, so
that ``gocov-report report`` needs no arguments::

    server:
      url: "https://coverage.example.com"     # only needed for remote sources
      token: ""
    sources:
      unit:
        file: "build/unit.json"               # relative to the config file
        exclude: ["*/internal/testutil"]
      integration:
        endpoint: "/artifacts/integration/coverage.json"
        prefix: "it:"
    default: [unit, integration]

Two runs over the same code produce the same package names, and a Report
refuses duplicates. A per-source ``prefix`` keeps such runs apart in one
report; ``exclude`` drops packages (fnmatch patterns on the package name)
before they reach the report.

Usage:
    config = load("gocov-report.yaml")
    for source in config.defaults():
        packages = source.apply(load_packages(source.file))
"""

import os
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any

import yaml

from gocov_report.models import Package


DEFAULT_CONFIG_PATH = "gocov-report.yaml"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


class SourceNotFoundError(ConfigError):
    """Raised when a source name is not defined in the config."""


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass
class Source:
    """Where one coverage document lives and how its packages are admitted."""

    name: str
    file: str | None = None
    endpoint: str | None = None
    prefix: str = ""
    exclude: list[str] = field(default_factory=list)

    @property
    def is_remote(self) -> bool:
        return self.endpoint is not None

    def excludes(self, package_name: str) -> bool:
        return any(fnmatchcase(package_name, pattern) for pattern in self.exclude)

    def apply(self, packages: list[Package]) -> list[Package]:
        """Drop excluded packages and prefix the names of the others.

        Returns new Package records; the functions are shared, not copied.
        """
        return [
            Package(name=self.prefix + p.name, functions=p.functions)
            for p in packages
            if not self.excludes(p.name)
        ]


@dataclass
class Config:
    url: str = ""
    token: str = ""
    sources: dict[str, Source] = field(default_factory=dict)
    default_sources: list[str] = field(default_factory=list)

    def source(self, name: str) -> Source:
        if name in self.sources:
            return self.sources[name]
        available = ", ".join(self.sources) or "(none configured)"
        raise SourceNotFoundError(
            f"Source '{name}' not found. Available sources: {available}"
        )

    def defaults(self) -> list[Source]:
        """Return the sources reported when none are named explicitly."""
        return [self.sources[name] for name in self.default_sources]


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(config_path: str = DEFAULT_CONFIG_PATH) -> Config:
    """Load and validate configuration from a YAML file.

    Relative ``file`` entries are resolved against the config file's
    directory. GOCOV_REPORT_URL and GOCOV_REPORT_TOKEN override the
    ``server`` values.

    Raises:
        ConfigError: if the file is missing, malformed, or inconsistent.
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(
            f"Config file not found: '{config_path}'\n"
            "Run `gocov-report init` to generate a template."
        )

    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse '{config_path}': {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"'{config_path}' must be a YAML mapping at the top level.")

    server = _mapping(raw, "server")
    errors: list[str] = []
    sources = {
        str(name): _parse_source(str(name), entry, path.parent, errors)
        for name, entry in _mapping(raw, "sources").items()
    }

    default = raw.get("default") or []
    if not isinstance(default, list):
        errors.append("  - 'default' must be a list of source names")
        default = []

    config = Config(
        url=str(os.environ.get("GOCOV_REPORT_URL") or server.get("url") or "").strip(),
        token=str(os.environ.get("GOCOV_REPORT_TOKEN") or server.get("token") or "").strip(),
        sources=sources,
        default_sources=[str(name) for name in default],
    )
    _check_references(config, errors)

    if errors:
        raise ConfigError(f"Invalid configuration in '{config_path}':\n" + "\n".join(errors))
    return config


def _mapping(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping.")
    return value


def _parse_source(name: str, entry: Any, base_dir: Path, errors: list[str]) -> Source:
    if not isinstance(entry, dict):
        errors.append(f"  - source '{name}' must be a mapping with 'file' or 'endpoint'")
        return Source(name=name)

    file = entry.get("file")
    endpoint = entry.get("endpoint")
    if (file is None) == (endpoint is None):
        errors.append(f"  - source '{name}' needs exactly one of 'file' or 'endpoint'")

    exclude = entry.get("exclude") or []
    if not isinstance(exclude, list):
        errors.append(f"  - 'exclude' of source '{name}' must be a list of patterns")
        exclude = []

    if file is not None:
        file_path = Path(str(file))
        file = str(file_path if file_path.is_absolute() else base_dir / file_path)

    return Source(
        name=name,
        file=file,
        endpoint=None if endpoint is None else str(endpoint),
        prefix=str(entry.get("prefix") or ""),
        exclude=[str(p) for p in exclude],
    )


def _check_references(config: Config, errors: list[str]) -> None:
    for name in config.default_sources:
        if name not in config.sources:
            errors.append(f"  - 'default' names unknown source '{name}'")

    remote = [s.name for s in config.sources.values() if s.is_remote]
    if remote and not config.url:
        errors.append(
            f"  - 'server.url' is required by remote source(s) {', '.join(remote)}"
            " (or set the GOCOV_REPORT_URL environment variable)"
        )


# ---------------------------------------------------------------------------
# Template generator (used by `init` command)
# ---------------------------------------------------------------------------

TEMPLATE = """\
server:
  url: "https://coverage.example.com"   # Only needed for 'endpoint' sources
  token: ""                             # Optional bearer token

sources:
  unit:
    file: "coverage.json"               # Relative to this file
    exclude: ["*/internal/testutil"]
  integration:
    endpoint: "/artifacts/integration/coverage.json"
    prefix: "it:"                       # Keeps package names unique

default: [unit]
"""


def generate_template(output_path: str = DEFAULT_CONFIG_PATH) -> None:
    """Write a template gocov-report.yaml to *output_path*.

    Raises:
        ConfigError: if the file already exists (to avoid overwriting secrets).
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
