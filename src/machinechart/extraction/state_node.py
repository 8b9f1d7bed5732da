"""Shared shaping rule turning transition records into a StateNode.

Both graph builders funnel their per-member records through
``shape_state_node`` so that dynamic and static extraction agree:

- an ``invoke`` spec becomes an entry of the state's ``invoke`` list
- only records with a ``target`` become ``on[event]`` entries
- guards collapse into a single ``cond`` joined with ``&&``
- actions are listed by name, in order

A record carrying both ``invoke`` and ``target`` contributes to both; the
validation pass reports that combination as an advisory.
"""

from collections.abc import Iterable

from ..annotations.metadata import TransitionMeta
from ..models.statechart import InvokeNode, StateNode, TargetRef, TransitionNode


def shape_transition(meta: TransitionMeta) -> TransitionNode | None:
    """Build the ``on`` entry for a record, or None if it has no target."""
    if meta.target is None:
        return None
    return TransitionNode(
        target=meta.target,
        description=meta.description,
        cond=meta.cond,
        actions=tuple(action.name for action in meta.actions) or None,
    )


def shape_invoke(meta: TransitionMeta) -> InvokeNode | None:
    """Build the resolved invoke descriptor for a record, if it has one."""
    if meta.invoke is None:
        return None
    return InvokeNode(
        src=meta.invoke.src,
        on_done=TargetRef(target=meta.invoke.on_done),
        on_error=TargetRef(target=meta.invoke.on_error),
        description=meta.invoke.description,
    )


def shape_state_node(members: Iterable[tuple[str, TransitionMeta]]) -> StateNode:
    """Build a StateNode from (event name, record) pairs in member order."""
    on: dict[str, TransitionNode] = {}
    invocations: list[InvokeNode] = []

    for event, meta in members:
        invocation = shape_invoke(meta)
        if invocation is not None:
            invocations.append(invocation)

        transition = shape_transition(meta)
        if transition is not None:
            on[event] = transition

    return StateNode(on=on, invoke=tuple(invocations) or None)
