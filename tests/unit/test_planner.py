"""
Unit tests for shipline.core.pipeline.planner module.
"""

import pytest

from shipline.core.errors import (
    DependencyCycleError,
    DuplicateStepIdError,
    PipelineValidationError,
    UnknownDependencyError,
)
from shipline.core.pipeline import (
    REORDER_WARNING,
    PlanStatus,
    Step,
    classify_step,
    order_steps,
    plan,
)
from tests.mocks.fakes import FakeResolver


def ids(steps):
    return [s.id for s in steps]


class TestOrderSteps:
    """Tests for topological ordering."""

    def test_empty_list(self):
        assert order_steps([]) == ([], [])

    def test_single_step_is_not_validated(self):
        steps = [Step(id="a", type="build", needs=["ghost"])]

        ordered, warnings = order_steps(steps)

        assert ids(ordered) == ["a"]
        assert warnings == []

    def test_no_needs_keeps_input_order_without_warning(self):
        steps = [Step(id=x, type="build") for x in ["c", "a", "b"]]

        ordered, warnings = order_steps(steps)

        assert ids(ordered) == ["c", "a", "b"]
        assert warnings == []

    def test_reorders_dependencies_first(self):
        steps = [
            Step(id="tag", type="git.tag", needs=["build"]),
            Step(id="build", type="build"),
        ]

        ordered, warnings = order_steps(steps)

        assert ids(ordered) == ["build", "tag"]
        assert warnings == [REORDER_WARNING]

    def test_already_ordered_chain_still_warns(self):
        steps = [
            Step(id="a", type="build"),
            Step(id="b", type="version", needs=["a"]),
            Step(id="c", type="git.tag", needs=["b"]),
        ]

        ordered, warnings = order_steps(steps)

        assert ids(ordered) == ["a", "b", "c"]
        assert warnings == ["Steps reordered based on dependencies"]

    def test_ties_broken_by_input_order(self):
        steps = [
            Step(id="x", type="build"),
            Step(id="y", type="build"),
            Step(id="z", type="build", needs=["x"]),
            Step(id="w", type="build", needs=["x"]),
        ]

        ordered, _ = order_steps(steps)

        assert ids(ordered) == ["x", "y", "z", "w"]

    def test_diamond(self):
        steps = [
            Step(id="d", type="build", needs=["b", "c"]),
            Step(id="c", type="build", needs=["a"]),
            Step(id="b", type="build", needs=["a"]),
            Step(id="a", type="build"),
        ]

        ordered, _ = order_steps(steps)

        assert ids(ordered) == ["a", "c", "b", "d"]

    def test_every_step_after_its_needs(self):
        steps = [
            Step(id="push", type="git.push", needs=["tag"]),
            Step(id="tag", type="git.tag", needs=["bump", "build"]),
            Step(id="bump", type="version", needs=["build"]),
            Step(id="build", type="build"),
            Step(id="notes", type="changes"),
        ]

        ordered, _ = order_steps(steps)
        position = {s.id: i for i, s in enumerate(ordered)}

        assert sorted(ids(ordered)) == sorted(ids(steps))
        for step in steps:
            for need in step.needs:
                assert position[need] < position[step.id]

    def test_duplicate_id(self):
        steps = [Step(id="a", type="build"), Step(id="a", type="version")]

        with pytest.raises(DuplicateStepIdError) as exc_info:
            order_steps(steps, "release.steps")

        assert exc_info.value.field == "release.steps"
        assert "'a'" in exc_info.value.message

    def test_duplicate_reported_before_unknown_dependency(self):
        steps = [
            Step(id="a", type="build", needs=["ghost"]),
            Step(id="a", type="build"),
        ]

        with pytest.raises(DuplicateStepIdError):
            order_steps(steps)

    def test_unknown_dependency(self):
        steps = [Step(id="a", type="build"), Step(id="b", type="build", needs=["ghost"])]

        with pytest.raises(UnknownDependencyError) as exc_info:
            order_steps(steps)

        assert exc_info.value.step_id == "b"
        assert exc_info.value.need == "ghost"

    def test_two_step_cycle(self):
        steps = [
            Step(id="a", type="build", needs=["b"]),
            Step(id="b", type="build", needs=["a"]),
        ]

        with pytest.raises(DependencyCycleError) as exc_info:
            order_steps(steps)

        assert exc_info.value.details == ["a", "b"]
        assert exc_info.value.pending == ["a", "b"]

    def test_cycle_details_exclude_orderable_steps(self):
        steps = [
            Step(id="root", type="build"),
            Step(id="x", type="build", needs=["root", "z"]),
            Step(id="y", type="build", needs=["x"]),
            Step(id="z", type="build", needs=["y"]),
        ]

        with pytest.raises(DependencyCycleError) as exc_info:
            order_steps(steps)

        assert exc_info.value.details == ["x", "y", "z"]

    def test_self_dependency_is_a_cycle(self):
        steps = [Step(id="a", type="build"), Step(id="b", type="build", needs=["b"])]

        with pytest.raises(DependencyCycleError):
            order_steps(steps)

    def test_structural_errors_share_base_class(self):
        with pytest.raises(PipelineValidationError):
            order_steps([Step(id="a", type="x"), Step(id="a", type="x")])


class TestClassifyStep:
    """Tests for Ready/Missing/Disabled classification."""

    def test_ready(self):
        planned = classify_step(Step(id="a", type="build"), FakeResolver(["build"]), enabled=True)

        assert planned.status == PlanStatus.READY
        assert planned.missing == []
        assert planned.ready

    def test_missing(self):
        planned = classify_step(Step(id="n", type="custom.notify"), FakeResolver(), enabled=True)

        assert planned.status == PlanStatus.MISSING
        assert planned.missing == ["Missing action 'release.custom.notify'"]

    def test_disabled_wins_over_unsupported(self):
        planned = classify_step(Step(id="n", type="custom.notify"), FakeResolver(), enabled=False)

        assert planned.status == PlanStatus.DISABLED
        assert planned.missing == []


class TestPlan:
    """Tests for plan()."""

    def test_plan_orders_and_classifies(self):
        steps = [
            Step(id="notify", type="notify", needs=["build"]),
            Step(id="build", type="build"),
        ]

        result = plan(steps, FakeResolver(["build"]))

        assert ids(result.steps) == ["build", "notify"]
        assert [s.status for s in result.steps] == [PlanStatus.READY, PlanStatus.MISSING]
        assert result.warnings == [REORDER_WARNING]

    def test_disabled_pipeline(self):
        steps = [Step(id="a", type="build"), Step(id="b", type="custom")]

        result = plan(steps, FakeResolver(["build"]), enabled=False)

        assert all(s.status == PlanStatus.DISABLED for s in result.steps)

    def test_plan_is_deterministic(self):
        steps = [
            Step(id="c", type="git.tag", needs=["b"]),
            Step(id="b", type="version", needs=["a"]),
            Step(id="a", type="build"),
        ]
        resolver = FakeResolver(["build", "version"])

        assert plan(steps, resolver) == plan(steps, resolver)

    def test_missing_steps_do_not_fail_the_plan(self):
        result = plan([Step(id="a", type="x"), Step(id="b", type="y")], FakeResolver())

        assert len(result.steps) == 2

    def test_get_step_and_to_dict(self):
        result = plan([Step(id="a", type="build")], FakeResolver(["build"]))

        assert result.get_step("a").type == "build"
        assert result.get_step("nope") is None
        assert result.to_dict() == {
            "steps": [{"id": "a", "type": "build", "status": "ready"}],
            "warnings": [],
        }

    def test_errors_carry_field_name(self):
        with pytest.raises(UnknownDependencyError) as exc_info:
            plan(
                [Step(id="a", type="build"), Step(id="b", type="build", needs=["c"])],
                FakeResolver(),
                field_name="release.steps",
            )

        assert exc_info.value.field == "release.steps"
