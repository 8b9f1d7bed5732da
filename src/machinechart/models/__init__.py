"""Statechart document models."""

from .statechart import InvokeNode, StateNode, Statechart, TargetRef, TransitionNode

__all__ = [
    "Statechart",
    "StateNode",
    "TransitionNode",
    "InvokeNode",
    "TargetRef",
]
