"""
Unit tests for shipline.core.pipeline.step module.
"""

import pytest

from shipline.core.pipeline import Step


class TestStepSerialization:
    """Tests for Step.to_dict / Step.from_dict."""

    def test_to_dict_omits_empty_fields(self):
        assert Step(id="build", type="build").to_dict() == {"id": "build", "type": "build"}

    def test_to_dict_includes_label_needs_config(self):
        step = Step(id="tag", type="git.tag", label="Tag it", needs=["build"], config={"name": "v1"})

        assert step.to_dict() == {
            "id": "tag",
            "type": "git.tag",
            "label": "Tag it",
            "needs": ["build"],
            "config": {"name": "v1"},
        }

    def test_from_dict_defaults(self):
        step = Step.from_dict({"id": "build", "type": "build"})

        assert step.label is None
        assert step.needs == []
        assert step.config == {}

    def test_from_dict_accepts_null_needs_and_config(self):
        step = Step.from_dict({"id": "a", "type": "build", "needs": None, "config": None})

        assert step.needs == []
        assert step.config == {}

    @pytest.mark.parametrize(
        "data",
        [
            {"type": "build"},
            {"id": "", "type": "build"},
            {"id": "a"},
            {"id": "a", "type": 3},
            {"id": "a", "type": "build", "needs": "b"},
            {"id": "a", "type": "build", "needs": [1]},
            {"id": "a", "type": "build", "config": []},
            {"id": "a", "type": "build", "config": 0},
            {"id": "a", "type": "build", "needs": ""},
            {"id": "a", "type": "build", "needs": 0},
        ],
    )
    def test_from_dict_rejects_malformed(self, data):
        with pytest.raises(ValueError):
            Step.from_dict(data)

    def test_dependencies_not_validated_at_construction(self):
        step = Step.from_dict({"id": "a", "type": "build", "needs": ["nowhere"]})

        assert step.needs == ["nowhere"]
