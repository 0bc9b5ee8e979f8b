"""
Pipeline Step Model
===================

Declarative data type for a single pipeline step.

A step list is usually read from a component's release block:

```json
{
  "steps": [
    {"id": "build", "type": "build"},
    {"id": "bump", "type": "version", "needs": ["build"], "config": {"bump": "minor"}},
    {"id": "tag", "type": "git.tag", "needs": ["bump"]}
  ]
}
```

Steps carry no behaviour. Dependency references are only validated when a
plan is built.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

__all__ = [
    "Step",
]


@dataclass(frozen=True)
class Step:
    """
    A single declared unit of pipeline work.

    Attributes:
        id: Identifier, unique within one step list
        type: Step type (e.g., "build", "git.tag", "custom.notify")
        label: Optional human-readable label
        needs: Ids of steps that must succeed first
        config: Free-form configuration consumed by the step handler
    """

    id: str
    type: str
    label: Optional[str] = None
    needs: List[str] = field(default_factory=list)
    config: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        d: Dict[str, Any] = {"id": self.id, "type": self.type}
        if self.label is not None:
            d["label"] = self.label
        if self.needs:
            d["needs"] = list(self.needs)
        if self.config:
            d["config"] = dict(self.config)
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Step":
        """
        Create from dictionary.

        Raises:
            ValueError: If id or type is missing or not a string, or if
                needs/config have the wrong shape
        """
        step_id = data.get("id")
        step_type = data.get("type")
        if not step_id or not isinstance(step_id, str):
            raise ValueError("Step missing string 'id'")
        if not step_type or not isinstance(step_type, str):
            raise ValueError(f"Step '{step_id}' missing string 'type'")

        needs = data.get("needs")
        if needs is None:
            needs = []
        if not isinstance(needs, list) or not all(isinstance(n, str) for n in needs):
            raise ValueError(f"Step '{step_id}' field 'needs' must be a list of step ids")

        config = data.get("config")
        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ValueError(f"Step '{step_id}' field 'config' must be a mapping if present")

        label = data.get("label")
        return cls(
            id=step_id,
            type=step_type,
            label=str(label) if label is not None else None,
            needs=list(needs),
            config=dict(config),
        )
