"""Exception hierarchy for chart-versioner."""

from __future__ import annotations


class ChartVersionerError(Exception):
    """Base class for errors raised by chart-versioner."""


class InvalidFormat(ChartVersionerError):
    """A commit message does not follow the conventional-commit header grammar."""


class ConfigError(ChartVersionerError):
    """The [tool.chart-versioner] table could not be loaded."""


class HelmError(ChartVersionerError):
    """A helm invocation exited with a non-zero status."""
