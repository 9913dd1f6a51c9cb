# devlift/step_graph.py
"""
Dependency ordering for sibling setup steps.

Steps form a DAG through ``depends_on``. Ordering uses Kahn's algorithm with
the queue seeded in declaration order, so the result is deterministic and
keeps the declared order wherever dependencies allow it.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Sequence

from .exceptions import CircularDependencyError, ConfigValidationError
from .setup_config import SetupStep

logger = logging.getLogger(__name__)


def build_step_graph(
    steps: Sequence[SetupStep],
) -> tuple[dict[str, list[str]], dict[str, int]]:
    """
    Build adjacency and in-degree maps for a sibling step list.

    Edges point from a dependency to its dependent (dependency must run first).

    Raises:
        ConfigValidationError: On duplicate names or references to unknown steps
    """
    adj: dict[str, list[str]] = {}
    indeg: dict[str, int] = {}

    for step in steps:
        if step.name in adj:
            raise ConfigValidationError(f"Duplicate step name: '{step.name}'")
        adj[step.name] = []
        indeg[step.name] = 0

    for step in steps:
        for dep in step.depends_on:
            if dep not in adj:
                known = ", ".join(adj) or "(none)"
                raise ConfigValidationError(
                    f"Step '{step.name}' depends on unknown step '{dep}'. Known steps: {known}"
                )
            adj[dep].append(step.name)
            indeg[step.name] += 1

    return adj, indeg


def topological_order(steps: Sequence[SetupStep]) -> list[SetupStep]:
    """
    Return ``steps`` in an order where every step follows its dependencies.

    Ties are broken by declaration order.

    Raises:
        CircularDependencyError: If the ``depends_on`` graph has a cycle
        ConfigValidationError: On duplicate names or unknown references
    """
    by_name = {step.name: step for step in steps}
    adj, indeg = build_step_graph(steps)
    indeg = dict(indeg)

    queue = deque(step.name for step in steps if indeg[step.name] == 0)
    ordered: list[SetupStep] = []

    while queue:
        name = queue.popleft()
        ordered.append(by_name[name])
        for child in adj[name]:
            indeg[child] -= 1
            if indeg[child] == 0:
                queue.append(child)

    if len(ordered) != len(steps):
        stuck = [step.name for step in steps if indeg[step.name] > 0]
        cycle = _find_cycle(stuck, by_name)
        logger.debug(f"Step graph has a cycle; stuck steps: {stuck}")
        raise CircularDependencyError(cycle, kind="dependency in setup steps")

    logger.debug(f"Resolved step order: {[s.name for s in ordered]}")
    return ordered


def _find_cycle(stuck: list[str], by_name: dict[str, SetupStep]) -> list[str]:
    """
    Follow ``depends_on`` links among stuck steps until a step repeats.

    Every stuck step has at least one stuck dependency, so the walk always
    closes a loop. The returned path starts and ends with the same step.
    """
    stuck_set = set(stuck)
    path: list[str] = []
    position: dict[str, int] = {}
    current = stuck[0]

    while current not in position:
        position[current] = len(path)
        path.append(current)
        current = next(d for d in by_name[current].depends_on if d in stuck_set)

    return path[position[current]:] + [current]
