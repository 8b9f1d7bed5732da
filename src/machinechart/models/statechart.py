"""Statechart document models.

The serialized shape is the document consumed by visualization tooling:

    {
      "id": "auth",
      "initial": "LoggedOut",
      "description": "...",            # optional
      "states": {
        "LoggedOut": {
          "on": {"login": {"target": "LoggingIn", "cond": "a && b", "actions": ["log"]}},
          "invoke": [{"src": "svc", "onDone": {"target": "X"}, "onError": {"target": "Y"}}]
        }
      }
    }

Optional fields that are unset are omitted, ``on`` is always present and
``invoke`` only when the state has invocations. Sequences are stored as
tuples; ``to_dict`` hands out a detached copy with plain lists.
"""

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TargetRef(BaseModel):
    """Destination of an invoke outcome."""

    target: str

    model_config = ConfigDict(frozen=True)


class TransitionNode(BaseModel):
    """One event transition under a state's ``on`` mapping."""

    target: str
    description: str | None = None
    cond: str | None = None
    actions: tuple[str, ...] | None = None

    model_config = ConfigDict(frozen=True)


class InvokeNode(BaseModel):
    """A resolved invocation descriptor."""

    src: str
    on_done: TargetRef = Field(alias="onDone")
    on_error: TargetRef = Field(alias="onError")
    description: str | None = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class StateNode(BaseModel):
    """Per-state view: event transitions plus state-entry invocations."""

    on: Mapping[str, TransitionNode] = Field(default_factory=dict)
    invoke: tuple[InvokeNode, ...] | None = None

    model_config = ConfigDict(frozen=True)


class Statechart(BaseModel):
    """The assembled statechart document."""

    id: str
    initial: str
    description: str | None = None
    states: Mapping[str, StateNode] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON-compatible document shape.

        Returns a fresh copy built from plain dicts and lists.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self, indent: int | None = None) -> str:
        """Serialize to JSON.

        Output is deterministic: the same chart always gives the same bytes.
        """
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def targets(self) -> list[tuple[str, str, str]]:
        """List every (state, label, target) edge of the chart.

        Event transitions are labeled with their event name; invoke outcomes
        with ``<src>.done`` / ``<src>.error``.
        """
        edges: list[tuple[str, str, str]] = []
        for state_name, node in self.states.items():
            for event, transition in node.on.items():
                edges.append((state_name, event, transition.target))
            for invocation in node.invoke or []:
                edges.append((state_name, f"{invocation.src}.done", invocation.on_done.target))
                edges.append((state_name, f"{invocation.src}.error", invocation.on_error.target))
        return edges
