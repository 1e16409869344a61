"""Eligibility gate: clean working tree and passing tests.

A package may only be versioned when it has no uncommitted changes and
its test command succeeds. A dirty package is reported with the offending
paths and its tests are never run. Each node is validated at most once;
the report is cached on the node.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bumpgraph.errors import DirtyWorkingTreeError, EligibilityError, TestFailureError
from bumpgraph.execution.results import ExecutionResult
from bumpgraph.execution.runner import run_in_package
from bumpgraph.logging import get_logger
from bumpgraph.workspace.graph import DependencyGraph, DependencyNode, TestStatus

if TYPE_CHECKING:
    from bumpgraph.config.schema import EligibilityConfig
    from bumpgraph.workspace.manifest import Manifest

log = get_logger(__name__)

CommandRunner = Callable[..., Awaitable[ExecutionResult]]


@dataclass
class EligibilityReport:
    """Eligibility of a single package.

    Attributes:
        package: Package name.
        eligible: Whether the package may be versioned.
        test_status: Outcome of the test run.
        errors: Why the package is not eligible.
        result: The test run, when one happened.
    """

    package: str
    eligible: bool
    test_status: TestStatus = TestStatus.NOT_RUN
    errors: list[EligibilityError] = field(default_factory=list)
    result: ExecutionResult | None = None

    @property
    def reasons(self) -> list[str]:
        return [e.message for e in self.errors]


@dataclass
class GraphEligibility:
    """Eligibility of every node of a graph.

    Attributes:
        reports: Report per package name.
        simulate: Failures were reported but do not block the run.
    """

    reports: dict[str, EligibilityReport] = field(default_factory=dict)
    simulate: bool = False

    @property
    def all_eligible(self) -> bool:
        return all(r.eligible for r in self.reports.values())

    @property
    def eligible(self) -> bool:
        """Whether the run may continue to propagation."""
        return self.simulate or self.all_eligible

    @property
    def failures(self) -> list[EligibilityReport]:
        return [r for r in self.reports.values() if not r.eligible]


class EligibilityValidator:
    """Run the eligibility gate over graph nodes.

    Args:
        config: Test command fallback, timeout and missing-test policy.
        env: Extra environment variables for test runs.
        runner: Coroutine running a command in a package directory.
    """

    def __init__(
        self,
        config: EligibilityConfig | None = None,
        *,
        env: dict[str, str] | None = None,
        runner: CommandRunner | None = None,
    ) -> None:
        if config is None:
            from bumpgraph.config.schema import EligibilityConfig

            config = EligibilityConfig()
        self.config = config
        self.env = env or {}
        self.runner = runner or run_in_package

    def test_command(self, manifest: Manifest) -> str | None:
        """The package's own test script, else the configured default."""
        return manifest.test_command or self.config.test_command

    async def _run_tests(self, node: DependencyNode) -> EligibilityReport:
        command = self.test_command(node.manifest)
        if not command:
            if self.config.allow_missing_tests:
                log.warning("package has no test command", package=node.name)
                return EligibilityReport(node.name, eligible=True)
            error = TestFailureError(node.name, exit_code=-1, output="No test command defined")
            return EligibilityReport(
                node.name, eligible=False, test_status=TestStatus.FAILED, errors=[error]
            )

        log.info("testing package", package=node.name, command=command)
        result = await self.runner(
            node.manifest,
            command,
            env=self.env,
            timeout=self.config.test_timeout,
        )
        if result.success:
            return EligibilityReport(
                node.name, eligible=True, test_status=TestStatus.PASSED, result=result
            )

        log.error(
            "package failed testing",
            package=node.name,
            exit_code=result.exit_code,
            status=result.status.value,
        )
        error = TestFailureError(node.name, exit_code=result.exit_code, output=result.output)
        return EligibilityReport(
            node.name,
            eligible=False,
            test_status=TestStatus.FAILED,
            errors=[error],
            result=result,
        )

    async def validate_node(self, node: DependencyNode) -> EligibilityReport:
        """Validate one node, reusing the cached report when present."""
        if node.eligibility is not None:
            return node.eligibility

        if node.dirty:
            log.warning("working tree is dirty", package=node.name, files=node.dirty_files)
            report = EligibilityReport(
                node.name,
                eligible=False,
                errors=[DirtyWorkingTreeError(node.name, list(node.dirty_files))],
            )
        else:
            report = await self._run_tests(node)

        node.test_status = report.test_status
        node.eligibility = report
        return report

    async def validate_graph(
        self, graph: DependencyGraph, *, simulate: bool = False
    ) -> GraphEligibility:
        """Validate every node of ``graph`` in name order."""
        outcome = GraphEligibility(simulate=simulate)
        for node in graph.sorted_nodes():
            outcome.reports[node.name] = await self.validate_node(node)
        if not outcome.all_eligible:
            log.warning(
                "packages are not eligible for versioning",
                packages=[r.package for r in outcome.failures],
                simulate=simulate,
            )
        return outcome


async def validate_node(
    node: DependencyNode,
    config: EligibilityConfig | None = None,
    *,
    env: dict[str, str] | None = None,
) -> EligibilityReport:
    """Validate a single node with the default runner."""
    return await EligibilityValidator(config, env=env).validate_node(node)


async def validate_graph(
    graph: DependencyGraph,
    config: EligibilityConfig | None = None,
    *,
    env: dict[str, str] | None = None,
    simulate: bool = False,
) -> GraphEligibility:
    """Validate every node of a graph with the default runner."""
    return await EligibilityValidator(config, env=env).validate_graph(graph, simulate=simulate)
