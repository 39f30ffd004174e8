"""
Time-sliced cred attribution over weighted contribution graphs.
"""
from .config import TimelineCredParameters, default_params, resolve_parameters
from .errors import (
    CompatError,
    ConfigurationError,
    DanglingEdgeError,
    DuplicateEdgeError,
    DuplicateNodeError,
    MalformedIntervalsError,
    NumericalAnomalyError,
    TimelineCredError,
    UnknownNodeError,
)
from .intervals import interval_index, partition_intervals, validate_intervals
from .markov import MarkovSolver, SolverResult
from .models import Edge, EdgeType, Interval, Node, NodeType, WeightPair
from .timeline import CredBreakdown, TimelineCred, compute_terminal_cred, compute_timeline_cred
from .transition import TransitionModel, build_transition_model
from .weighted_graph import WeightedGraph, WeightedGraphBuilder, Weights

__all__ = [
    "CompatError",
    "ConfigurationError",
    "CredBreakdown",
    "DanglingEdgeError",
    "DuplicateEdgeError",
    "DuplicateNodeError",
    "Edge",
    "EdgeType",
    "Interval",
    "MalformedIntervalsError",
    "MarkovSolver",
    "Node",
    "NodeType",
    "NumericalAnomalyError",
    "SolverResult",
    "TimelineCred",
    "TimelineCredError",
    "TimelineCredParameters",
    "TransitionModel",
    "UnknownNodeError",
    "WeightPair",
    "WeightedGraph",
    "WeightedGraphBuilder",
    "Weights",
    "build_transition_model",
    "compute_terminal_cred",
    "compute_timeline_cred",
    "default_params",
    "interval_index",
    "partition_intervals",
    "resolve_parameters",
    "validate_intervals",
]
