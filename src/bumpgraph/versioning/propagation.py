"""Version propagation across the dependency graph.

After every node has resolved its own next version, dependents of a bumped
package must be bumped too and must declare the new version. The engine
rescans the whole graph, dependencies ahead of dependents, until a scan
changes nothing, which also settles dependency cycles.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from bumpgraph.logging import get_logger
from bumpgraph.versioning.semver import BumpType, latest, parse
from bumpgraph.workspace.manifest import declared_version, pin_constraint

if TYPE_CHECKING:
    from bumpgraph.workspace.graph import DependencyGraph, DependencyNode

log = get_logger(__name__)


class ForcedBump(str, Enum):
    """Minimum bump applied to a package whose dependency changed."""

    PATCH = "patch"
    MINOR = "minor"

    @property
    def bump_type(self) -> BumpType:
        return BumpType.MINOR if self == ForcedBump.MINOR else BumpType.PATCH


class PropagationState(Enum):
    """Engine state."""

    SCANNING = "scanning"
    STABLE = "stable"


@dataclass(frozen=True)
class Mutation:
    """One change made to a dependent during propagation.

    Attributes:
        package: The dependent that was changed.
        dependency: The dependency that caused the change.
        previous_constraint: Constraint declared before the change.
        constraint: Constraint declared after the change.
        previous_version: Next version of the dependent before the change.
        next_version: Next version of the dependent after the change.
        forced: Whether the dependent had no bump of its own before.
    """

    package: str
    dependency: str
    previous_constraint: str
    constraint: str
    previous_version: str
    next_version: str
    forced: bool


class PropagationEngine:
    """Fixpoint scanner forcing dependents of changed packages to bump.

    Example:
        engine = PropagationEngine(graph)
        mutations = engine.run()
        assert engine.state is PropagationState.STABLE
    """

    def __init__(self, graph: DependencyGraph, forced_bump: ForcedBump = ForcedBump.PATCH) -> None:
        self.graph = graph
        self.forced_bump = forced_bump
        self.state = PropagationState.SCANNING
        self.scans = 0
        self.mutations: list[Mutation] = []

    def _force(self, node: DependencyNode) -> str:
        data = node.version_data
        current_next = parse(data.next_version)
        minimum = parse(data.baseline_version).bump(self.forced_bump.bump_type)
        return str(latest(current_next, minimum.with_channel(current_next.channel)))

    def _visit(self, node: DependencyNode, dependency: str, depend: DependencyNode) -> bool:
        data = node.version_data
        target = depend.version_data.resolved_version
        constraint = node.manifest.dependencies[dependency]
        declared = declared_version(constraint)

        stale = declared is not None and declared != target
        if not (depend.version_data.bump_required and not data.bump_required) and not stale:
            return False

        forced = not data.bump_required
        previous_version = data.next_version
        data.bump_required = True
        data.next_version = self._force(node)

        new_constraint = pin_constraint(constraint, target) if stale else constraint
        node.manifest.dependencies[dependency] = new_constraint

        mutation = Mutation(
            package=node.name,
            dependency=dependency,
            previous_constraint=constraint,
            constraint=new_constraint,
            previous_version=previous_version,
            next_version=data.next_version,
            forced=forced,
        )
        self.mutations.append(mutation)
        log.info(
            "propagated dependency bump",
            package=node.name,
            dependency=dependency,
            constraint=new_constraint,
            next=data.next_version,
            forced=forced,
        )
        return True

    def step(self) -> bool:
        """Run one full scan over the graph.

        Returns:
            True if the scan changed anything.
        """
        if self.state is PropagationState.STABLE:
            return False

        self.scans += 1
        changed = False
        for node in self.graph.dependency_order():
            for dependency in list(node.manifest.dependencies):
                depend = self.graph.get(dependency)
                if depend is None or depend is node:
                    continue
                if self._visit(node, dependency, depend):
                    changed = True

        if not changed:
            self.state = PropagationState.STABLE
        return changed

    def run(self) -> list[Mutation]:
        """Scan until the graph is stable.

        Returns:
            Every mutation made, in order.
        """
        while self.step():
            pass
        log.debug("propagation stable", scans=self.scans, mutations=len(self.mutations))
        return self.mutations


def propagate(graph: DependencyGraph, forced_bump: ForcedBump = ForcedBump.PATCH) -> list[Mutation]:
    """Propagate version bumps through ``graph`` in place."""
    return PropagationEngine(graph, forced_bump).run()
