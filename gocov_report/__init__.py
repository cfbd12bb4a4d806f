"""gocov-report - per-function coverage reports from gocov-style JSON."""

__version__ = "0.1.0"
