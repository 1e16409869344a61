"""Tests for the eligibility gate."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from bumpgraph.config.schema import EligibilityConfig
from bumpgraph.errors import DirtyWorkingTreeError, TestFailureError
from bumpgraph.execution.eligibility import EligibilityValidator
from bumpgraph.execution.results import ExecutionResult
from bumpgraph.workspace.graph import NodeFactory, TestStatus, resolve_graph


def passing(manifest, command, **kwargs) -> ExecutionResult:
    return ExecutionResult.success_result(manifest.name, command=command)


def failing(manifest, command, **kwargs) -> ExecutionResult:
    return ExecutionResult.failure_result(
        manifest.name, exit_code=1, stderr="1 test failed", command=command
    )


async def load(source, name: str):
    return await NodeFactory(source).load(name)


class TestValidateNode:
    """Tests for EligibilityValidator.validate_node."""

    @pytest.mark.asyncio
    async def test_clean_and_passing(self, memory_source) -> None:
        memory_source.add("@scope/a", test_command="npm test")
        runner = AsyncMock(side_effect=passing)
        validator = EligibilityValidator(EligibilityConfig(test_timeout=5), runner=runner)
        node = await load(memory_source, "@scope/a")

        report = await validator.validate_node(node)

        assert report.eligible
        assert report.test_status is TestStatus.PASSED
        assert node.test_status is TestStatus.PASSED
        assert node.eligibility is report
        assert runner.await_args.args[1] == "npm test"
        assert runner.await_args.kwargs["timeout"] == 5

    @pytest.mark.asyncio
    async def test_dirty_node_never_runs_tests(self, memory_source) -> None:
        memory_source.add("@scope/a", dirty=[" M index.js", "?? notes.txt"])
        runner = AsyncMock(side_effect=passing)
        node = await load(memory_source, "@scope/a")

        report = await EligibilityValidator(runner=runner).validate_node(node)

        runner.assert_not_awaited()
        assert not report.eligible
        assert report.test_status is TestStatus.NOT_RUN
        error = report.errors[0]
        assert isinstance(error, DirtyWorkingTreeError)
        assert error.files == [" M index.js", "?? notes.txt"]
        assert "notes.txt" in report.reasons[0]

    @pytest.mark.asyncio
    async def test_failing_tests(self, memory_source) -> None:
        memory_source.add("@scope/a")
        node = await load(memory_source, "@scope/a")

        report = await EligibilityValidator(runner=AsyncMock(side_effect=failing)).validate_node(
            node
        )

        assert not report.eligible
        assert report.test_status is TestStatus.FAILED
        assert isinstance(report.errors[0], TestFailureError)
        assert report.errors[0].exit_code == 1
        assert report.errors[0].output == "1 test failed"
        assert report.result is not None

    @pytest.mark.asyncio
    async def test_timeout_is_a_failure(self, memory_source) -> None:
        memory_source.add("@scope/a")
        node = await load(memory_source, "@scope/a")
        runner = AsyncMock(
            return_value=ExecutionResult.failure_result("@scope/a", exit_code=-1, timed_out=True)
        )

        report = await EligibilityValidator(runner=runner).validate_node(node)

        assert report.test_status is TestStatus.FAILED
        assert report.errors[0].exit_code == -1

    @pytest.mark.asyncio
    async def test_manifest_script_wins_over_config(self, memory_source) -> None:
        memory_source.add("@scope/a", test_command="npm test")
        memory_source.add("@scope/b", test_command=None)
        runner = AsyncMock(side_effect=passing)
        validator = EligibilityValidator(EligibilityConfig(test_command="make test"), runner=runner)

        await validator.validate_node(await load(memory_source, "@scope/a"))
        await validator.validate_node(await load(memory_source, "@scope/b"))

        assert [call.args[1] for call in runner.await_args_list] == ["npm test", "make test"]

    @pytest.mark.asyncio
    async def test_missing_test_command(self, memory_source) -> None:
        memory_source.add("@scope/a", test_command=None)
        runner = AsyncMock(side_effect=passing)
        node = await load(memory_source, "@scope/a")

        report = await EligibilityValidator(runner=runner).validate_node(node)

        runner.assert_not_awaited()
        assert not report.eligible
        assert report.errors[0].output == "No test command defined"

    @pytest.mark.asyncio
    async def test_missing_tests_allowed(self, memory_source) -> None:
        memory_source.add("@scope/a", test_command=None)
        node = await load(memory_source, "@scope/a")
        validator = EligibilityValidator(EligibilityConfig(allow_missing_tests=True))

        report = await validator.validate_node(node)

        assert report.eligible
        assert report.test_status is TestStatus.NOT_RUN

    @pytest.mark.asyncio
    async def test_report_is_cached(self, memory_source) -> None:
        memory_source.add("@scope/a")
        runner = AsyncMock(side_effect=passing)
        validator = EligibilityValidator(runner=runner)
        node = await load(memory_source, "@scope/a")

        first = await validator.validate_node(node)
        second = await validator.validate_node(node)

        assert first is second
        assert runner.await_count == 1

    @pytest.mark.asyncio
    async def test_env_is_forwarded(self, memory_source) -> None:
        memory_source.add("@scope/a")
        runner = AsyncMock(side_effect=passing)
        node = await load(memory_source, "@scope/a")

        await EligibilityValidator(env={"CI": "1"}, runner=runner).validate_node(node)

        assert runner.await_args.kwargs["env"] == {"CI": "1"}


class TestValidateGraph:
    """Tests for EligibilityValidator.validate_graph."""

    @pytest.mark.asyncio
    async def test_one_failure_blocks_the_run(self, memory_source) -> None:
        memory_source.add("@scope/a", dependencies={"@scope/b": "1.0.0"})
        memory_source.add("@scope/b", dirty=[" M index.js"])
        graph = await resolve_graph(["@scope/a"], NodeFactory(memory_source))
        validator = EligibilityValidator(runner=AsyncMock(side_effect=passing))

        outcome = await validator.validate_graph(graph)

        assert sorted(outcome.reports) == ["@scope/a", "@scope/b"]
        assert not outcome.all_eligible
        assert not outcome.eligible
        assert [r.package for r in outcome.failures] == ["@scope/b"]

    @pytest.mark.asyncio
    async def test_simulation_reports_but_continues(self, memory_source) -> None:
        memory_source.add("@scope/a", dirty=["?? tmp"])
        graph = await resolve_graph(["@scope/a"], NodeFactory(memory_source))
        validator = EligibilityValidator(runner=AsyncMock(side_effect=passing))

        outcome = await validator.validate_graph(graph, simulate=True)

        assert not outcome.all_eligible
        assert outcome.eligible
        assert len(outcome.failures) == 1

    @pytest.mark.asyncio
    async def test_all_eligible(self, memory_source) -> None:
        memory_source.add("@scope/a", dependencies={"@scope/b": "1.0.0"})
        memory_source.add("@scope/b")
        graph = await resolve_graph(["@scope/a"], NodeFactory(memory_source))
        runner = AsyncMock(side_effect=passing)

        outcome = await EligibilityValidator(runner=runner).validate_graph(graph)

        assert outcome.eligible
        assert runner.await_count == 2
