"""Transition metadata records and their merge algebra.

A ``TransitionMeta`` is built up one fragment at a time, each fragment
coming from one annotation primitive. Merging is:

- scalar fields (``target``, ``description``): the newer fragment wins
- list fields (``guards``, ``actions``): concatenated, newer entries first
- ``invoke``: replaced wholesale by the newer fragment

"Newer" means applied later, which is the outer wrapper call or the
decorator higher up in a decorator stack. Lists therefore read in source
order: ``guarded(g1, guarded(g2, fn))`` records ``(g1, g2)``.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

StateRef = str


@dataclass(frozen=True)
class GuardRef:
    """A named precondition gating a transition."""

    name: str
    description: str | None = None

    @classmethod
    def coerce(cls, value: Any) -> "GuardRef":
        """Build a GuardRef from a GuardRef, a name, or a mapping.

        Never fails: anything else becomes a guard named after ``str(value)``.
        """
        return _coerce_named_ref(cls, value)


@dataclass(frozen=True)
class ActionRef:
    """A named side effect fired by a transition."""

    name: str
    description: str | None = None

    @classmethod
    def coerce(cls, value: Any) -> "ActionRef":
        """Build an ActionRef from an ActionRef, a name, or a mapping."""
        return _coerce_named_ref(cls, value)


@dataclass(frozen=True)
class InvokeSpec:
    """An asynchronous service bound to a state.

    Attributes:
        src: Name of the invoked service
        on_done: State entered when the service succeeds
        on_error: State entered when the service fails
        description: Optional documentation
    """

    src: str
    on_done: StateRef
    on_error: StateRef
    description: str | None = None

    @classmethod
    def coerce(cls, value: Any, resolve: Callable[[Any], StateRef]) -> "InvokeSpec":
        """Build an InvokeSpec, resolving both destinations with ``resolve``.

        Accepts an InvokeSpec or a mapping using either ``on_done``/``on_error``
        or ``onDone``/``onError`` keys.
        """
        if isinstance(value, InvokeSpec):
            fields = {
                "src": value.src,
                "on_done": value.on_done,
                "on_error": value.on_error,
                "description": value.description,
            }
        elif isinstance(value, Mapping):
            fields = {
                "src": value.get("src"),
                "on_done": value.get("on_done", value.get("onDone")),
                "on_error": value.get("on_error", value.get("onError")),
                "description": value.get("description"),
            }
        else:
            fields = {"src": value, "on_done": None, "on_error": None, "description": None}

        return cls(
            src=_as_text(fields["src"]),
            on_done=_resolve_optional(fields["on_done"], resolve),
            on_error=_resolve_optional(fields["on_error"], resolve),
            description=_optional_text(fields["description"]),
        )


@dataclass(frozen=True)
class TransitionMeta:
    """Canonical merged metadata for one transition."""

    target: StateRef | None = None
    description: str | None = None
    guards: tuple[GuardRef, ...] = field(default_factory=tuple)
    actions: tuple[ActionRef, ...] = field(default_factory=tuple)
    invoke: InvokeSpec | None = None

    def merge(self, fragment: "TransitionMeta") -> "TransitionMeta":
        """Return a new record with ``fragment`` applied on top of this one."""
        return replace(
            self,
            target=fragment.target if fragment.target is not None else self.target,
            description=(
                fragment.description if fragment.description is not None else self.description
            ),
            guards=fragment.guards + self.guards,
            actions=fragment.actions + self.actions,
            invoke=fragment.invoke if fragment.invoke is not None else self.invoke,
        )

    @property
    def cond(self) -> str | None:
        """Guards joined by logical AND, in recorded order."""
        if not self.guards:
            return None
        return " && ".join(guard.name for guard in self.guards)


def fold_fragments(fragments: list[TransitionMeta]) -> TransitionMeta:
    """Merge fragments listed outermost first into one record.

    The innermost fragment is applied first, matching the order in which
    wrapper calls and decorators run.
    """
    meta = TransitionMeta()
    for fragment in reversed(fragments):
        meta = meta.merge(fragment)
    return meta


def _coerce_named_ref(cls: Any, value: Any) -> Any:
    if isinstance(value, cls):
        return value
    if isinstance(value, GuardRef | ActionRef):
        return cls(name=value.name, description=value.description)
    if isinstance(value, Mapping):
        return cls(
            name=_as_text(value.get("name")),
            description=_optional_text(value.get("description")),
        )
    return cls(name=_as_text(value))


def _resolve_optional(value: Any, resolve: Callable[[Any], StateRef]) -> StateRef:
    if value is None:
        return ""
    return resolve(value)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    return _as_text(value)
