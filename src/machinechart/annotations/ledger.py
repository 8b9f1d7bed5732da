"""MetadataLedger - side table of transition metadata keyed by callable identity.

The annotation primitives write into the ledger while classes are being
defined; the dynamic graph builder reads from it afterwards. Records are
immutable ``TransitionMeta`` snapshots, so a record handed out by ``read``
never changes underneath the caller.

Identity:
    Functions, ``staticmethod`` and ``classmethod`` objects (and methods
    bound to a class) are keyed by the underlying function. A method bound to
    an instance is keyed by the (instance, function) pair: annotating
    ``self._go`` in ``__init__`` only affects that instance, and reading a
    bound method layers its own record over the function's record.

    Keys are held weakly, so a record disappears together with the
    transition (or instance) it belongs to.

Concurrency:
    The ledger does no locking. Every annotation of a callable must
    happen-before extraction reads it; if annotation and extraction can
    interleave, callers have to synchronize externally.
"""

import logging
import weakref
from typing import Any

from .metadata import TransitionMeta

logger = logging.getLogger(__name__)


def transition_identity(obj: Any) -> tuple[Any, ...]:
    """Return the objects whose identities key a transition in the ledger.

    Returns:
        ``(function,)`` for plain functions, static/class methods and methods
        bound to a class; ``(instance, function)`` for methods bound to an
        instance; ``(obj,)`` for any other callable
    """
    func = getattr(obj, "__func__", None)
    if func is None or not callable(func):
        return (obj,)
    owner = getattr(obj, "__self__", None)
    if owner is None or isinstance(owner, type):
        return (func,)
    return (owner, func)


class MetadataLedger:
    """Append/merge store holding one TransitionMeta per transition identity.

    Entries are keyed by the ``id()`` of the identity objects. Each object is
    referenced weakly where it supports weak references (and strongly
    otherwise), and the entry is dropped when any of them is collected, so
    an id is never reused while its entry exists.
    """

    def __init__(self) -> None:
        self._records: dict[tuple[int, ...], tuple[tuple[Any, ...], TransitionMeta]] = {}

    def merge(self, identity: Any, fragment: TransitionMeta) -> None:
        """Merge a metadata fragment into the record for ``identity``.

        Args:
            identity: The annotated callable (or a wrapper around it)
            fragment: Partial metadata produced by one primitive
        """
        key_objects = transition_identity(identity)
        key = tuple(id(obj) for obj in key_objects)

        existing = self._lookup(key, key_objects)
        if existing is None:
            holders = self._hold(key, key_objects)
            base = TransitionMeta()
        else:
            holders, base = existing
        self._records[key] = (holders, base.merge(fragment))

        logger.debug(f"Merged metadata into {_describe(key_objects[-1])!r}")

    def read(self, identity: Any) -> TransitionMeta | None:
        """Read the merged record for ``identity``.

        For a method bound to an instance, the instance-level record is
        merged over the record of the underlying function.

        Returns:
            The TransitionMeta, or None when the callable was never annotated
        """
        key_objects = transition_identity(identity)
        own = self._lookup(tuple(id(obj) for obj in key_objects), key_objects)
        if len(key_objects) == 1:
            return own[1] if own else None

        func = key_objects[1]
        shared = self._lookup((id(func),), (func,))
        if shared is None:
            return own[1] if own else None
        if own is None:
            return shared[1]
        return shared[1].merge(own[1])

    def clear(self) -> None:
        """Drop every record."""
        self._records.clear()

    def __contains__(self, identity: Any) -> bool:
        return self.read(identity) is not None

    def __len__(self) -> int:
        return len(self._records)

    def _lookup(
        self, key: tuple[int, ...], key_objects: tuple[Any, ...]
    ) -> tuple[tuple[Any, ...], TransitionMeta] | None:
        entry = self._records.get(key)
        if entry is None:
            return None
        holders, _ = entry
        if any(_resolve(held) is not obj for held, obj in zip(holders, key_objects, strict=True)):
            return None
        return entry

    def _hold(self, key: tuple[int, ...], key_objects: tuple[Any, ...]) -> tuple[Any, ...]:
        ledger_ref = weakref.ref(self)

        def discard(_ref: Any) -> None:
            ledger = ledger_ref()
            if ledger is not None:
                ledger._records.pop(key, None)

        holders = []
        for obj in key_objects:
            try:
                holders.append(weakref.ref(obj, discard))
            except TypeError:
                # Not weak-referenceable: keep it alive with its record
                holders.append(obj)
        return tuple(holders)


def _resolve(held: Any) -> Any:
    return held() if isinstance(held, weakref.ref) else held


def _describe(obj: Any) -> str:
    return getattr(obj, "__qualname__", None) or repr(obj)


# Process-wide ledger used by the annotation primitives by default
_default_ledger = MetadataLedger()


def get_ledger() -> MetadataLedger:
    """Get the process-wide default ledger."""
    return _default_ledger
