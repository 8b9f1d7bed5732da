"""Tests for the statechart document models."""

import json

from machinechart.models import InvokeNode, StateNode, Statechart, TargetRef, TransitionNode


def _chart():
    return Statechart(
        id="fetch",
        initial="Idle",
        description="Fetch data",
        states={
            "Idle": StateNode(on={"fetch": TransitionNode(target="Loading", actions=["log"])}),
            "Loading": StateNode(
                invoke=[
                    InvokeNode(
                        src="load",
                        on_done=TargetRef(target="Idle"),
                        on_error=TargetRef(target="Failed"),
                    )
                ]
            ),
        },
    )


class TestStatechart:
    """Serialized document shape."""

    def test_to_dict_uses_document_keys(self):
        assert _chart().to_dict() == {
            "id": "fetch",
            "initial": "Idle",
            "description": "Fetch data",
            "states": {
                "Idle": {"on": {"fetch": {"target": "Loading", "actions": ["log"]}}},
                "Loading": {
                    "on": {},
                    "invoke": [
                        {"src": "load", "onDone": {"target": "Idle"}, "onError": {"target": "Failed"}}
                    ],
                },
            },
        }

    def test_description_omitted_when_unset(self):
        assert "description" not in Statechart(id="x", initial="A").to_dict()

    def test_to_json_is_stable(self):
        text = _chart().to_json(indent=2)

        assert text == _chart().to_json(indent=2)
        assert list(json.loads(text)["states"]) == ["Idle", "Loading"]

    def test_parses_document_shape(self):
        document = _chart().to_dict()

        assert Statechart.model_validate(document) == _chart()

    def test_targets(self):
        assert _chart().targets() == [
            ("Idle", "fetch", "Loading"),
            ("Loading", "load.done", "Idle"),
            ("Loading", "load.error", "Failed"),
        ]


class TestImmutability:
    """Charts do not share mutable state with their callers."""

    def test_sequences_are_tuples(self):
        chart = _chart()

        assert chart.states["Idle"].on["fetch"].actions == ("log",)
        assert isinstance(chart.states["Loading"].invoke, tuple)

    def test_to_dict_returns_detached_copy(self):
        chart = _chart()
        document = chart.to_dict()

        document["states"]["Idle"]["on"]["fetch"]["actions"].append("extra")
        document["states"]["Loading"]["invoke"].clear()
        document["states"].pop("Idle")

        assert chart.to_dict() == _chart().to_dict()
        assert chart.states["Idle"].on["fetch"].actions == ("log",)
