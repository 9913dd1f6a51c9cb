# tests/test_step_graph.py
import pytest

from devlift.exceptions import CircularDependencyError, ConfigValidationError
from devlift.setup_config import ShellStep
from devlift.step_graph import build_step_graph, topological_order


def shell(name, *depends_on):
    return ShellStep(name=name, command=f"echo {name}", depends_on=depends_on)


def names(steps):
    return [s.name for s in steps]


def test_dependencies_run_first():
    steps = [shell("A", "B"), shell("B", "C"), shell("C")]
    assert names(topological_order(steps)) == ["C", "B", "A"]


def test_independent_steps_keep_declaration_order():
    steps = [shell("lint"), shell("build"), shell("test", "build"), shell("docs")]
    assert names(topological_order(steps)) == ["lint", "build", "docs", "test"]


def test_every_step_after_its_dependencies():
    steps = [
        shell("deploy", "test", "build"),
        shell("test", "build"),
        shell("build", "install"),
        shell("install"),
        shell("notify"),
    ]
    order = names(topological_order(steps))
    assert sorted(order) == sorted(names(steps))
    for step in steps:
        for dep in step.depends_on:
            assert order.index(dep) < order.index(step.name)


def test_three_step_cycle_is_reported():
    steps = [shell("A", "C"), shell("B", "A"), shell("C", "B")]
    with pytest.raises(CircularDependencyError) as exc:
        topological_order(steps)

    cycle = exc.value.cycle_path
    assert cycle[0] == cycle[-1]
    assert set(cycle) == {"A", "B", "C"}
    assert "A -> C -> B -> A" in str(exc.value)


def test_self_dependency_is_a_cycle():
    with pytest.raises(CircularDependencyError, match="A -> A"):
        topological_order([shell("A", "A")])


def test_cycle_ignores_steps_outside_it():
    steps = [shell("setup"), shell("x", "setup", "y"), shell("y", "x")]
    with pytest.raises(CircularDependencyError) as exc:
        topological_order(steps)
    assert "setup" not in exc.value.cycle_path


def test_unknown_dependency_is_rejected():
    with pytest.raises(ConfigValidationError, match="depends on unknown step 'ghost'"):
        build_step_graph([shell("A", "ghost")])


def test_duplicate_names_are_rejected():
    with pytest.raises(ConfigValidationError, match="Duplicate step name: 'A'"):
        build_step_graph([shell("A"), shell("A")])


def test_empty_step_list():
    assert topological_order([]) == []


def test_linear_chain_runs_in_declaration_order():
    steps = [shell("A"), shell("B", "A"), shell("C", "B")]
    assert names(topological_order(steps)) == ["A", "B", "C"]


def test_order_is_deterministic():
    steps = [shell("x"), shell("y"), shell("z", "x"), shell("w", "y")]
    first = names(topological_order(steps))
    assert all(names(topological_order(steps)) == first for _ in range(5))
    assert first == ["x", "y", "z", "w"]
