"""Dynamic graph builder - read transition metadata from live state objects.

Members of a state object are gathered the way attribute lookup sees them:
class attributes along the MRO (base classes first, ``object`` excluded, a
redefinition in a subclass keeps the position of the original), followed by
the instance ``__dict__``. A ``Mapping`` state (a "functional" machine built
from a dict of callables) contributes its items instead.

Non-callable members are skipped, and so are callables the ledger has never
seen: not every method is an annotated transition.
"""

from collections.abc import Iterator, Mapping
from typing import Any

from ..annotations.ledger import MetadataLedger, get_ledger
from ..annotations.metadata import TransitionMeta
from ..logging import get_logger
from ..models.statechart import StateNode
from .state_node import shape_state_node

logger = get_logger(__name__)


def collect_members(state: Any) -> dict[str, Any]:
    """Collect the named members of a state object in lookup order."""
    if isinstance(state, Mapping):
        return {str(name): value for name, value in state.items()}

    members: dict[str, Any] = {}
    owner = state if isinstance(state, type) else type(state)
    for klass in reversed(owner.__mro__):
        if klass is object:
            continue
        for name, value in vars(klass).items():
            members[name] = value

    if not isinstance(state, type):
        members.update(getattr(state, "__dict__", {}))

    return members


def iter_transitions(
    state: Any, ledger: MetadataLedger | None = None
) -> Iterator[tuple[str, TransitionMeta]]:
    """Yield (member name, record) for every annotated member of ``state``."""
    ledger = ledger if ledger is not None else get_ledger()

    for name, value in collect_members(state).items():
        if not callable(value) and not hasattr(value, "__func__"):
            continue
        meta = ledger.read(value)
        if meta is None:
            continue
        yield name, meta


def build_dynamic_state_node(state: Any, ledger: MetadataLedger | None = None) -> StateNode:
    """Build the StateNode for a live state object.

    Args:
        state: A state instance, a state class, or a mapping of callables
        ledger: Ledger to read metadata from. Defaults to the process-wide ledger.

    Returns:
        The state's StateNode
    """
    transitions = list(iter_transitions(state, ledger))
    logger.debug(
        "dynamic_state_node_built",
        state=type(state).__name__,
        transitions=len(transitions),
    )
    return shape_state_node(transitions)
