"""
Exception taxonomy for graph construction, configuration, and solving.
"""
from __future__ import annotations


class TimelineCredError(Exception):
    """Base class for every error raised by this package."""


class InvalidAddressError(TimelineCredError, ValueError):
    pass


class DuplicateNodeError(TimelineCredError):
    pass


class DuplicateEdgeError(TimelineCredError):
    pass


class DanglingEdgeError(TimelineCredError):
    pass


class MalformedIntervalsError(TimelineCredError, ValueError):
    pass


class ConfigurationError(TimelineCredError, ValueError):
    pass


class NumericalAnomalyError(TimelineCredError, ArithmeticError):
    pass


class UnknownNodeError(TimelineCredError, KeyError):
    pass


class CompatError(TimelineCredError, ValueError):
    pass
