"""Command execution and the eligibility gate."""

from bumpgraph.execution.eligibility import (
    EligibilityReport,
    EligibilityValidator,
    GraphEligibility,
    validate_graph,
    validate_node,
)
from bumpgraph.execution.results import ExecutionResult, ExecutionStatus
from bumpgraph.execution.runner import CommandOutput, run_command, run_in_package

__all__ = [
    "CommandOutput",
    "EligibilityReport",
    "EligibilityValidator",
    "ExecutionResult",
    "ExecutionStatus",
    "GraphEligibility",
    "run_command",
    "run_in_package",
    "validate_graph",
    "validate_node",
]
