"""Annotation primitives for declaring transition metadata in place.

Each primitive records one metadata fragment for a transition and returns the
transition unchanged. They work both as wrappers and as decorators:

    class LoggedOut:
        login = describe(
            "Start the login process",
            action({"name": "logLoginAttempt"}, transition_to(LoggingIn, _login)),
        )

        @guarded(GuardRef("isAdmin"))
        @transition_to("Deleted")
        def delete(self): ...

Later applications sit outside earlier ones. The outer description and target
win; guards and actions are listed outermost first, i.e. in source order.

Primitives never fail: unusable descriptors are recorded as degenerate
metadata (a stringified name) and surface later in the validation pass.
"""

import logging
from typing import Any, TypeVar

from ..identity import DynamicIdentityResolver
from .ledger import MetadataLedger, get_ledger
from .metadata import ActionRef, GuardRef, InvokeSpec, TransitionMeta

logger = logging.getLogger(__name__)

F = TypeVar("F")

# Names the static extractor recognizes as annotation calls
PRIMITIVE_NAMES = frozenset({"transition_to", "describe", "guarded", "action", "invoke"})

_resolver = DynamicIdentityResolver()


def _annotate(
    fragment: TransitionMeta, impl: F | None, ledger: MetadataLedger | None, primitive: str
) -> Any:
    """Merge ``fragment`` into the ledger for ``impl`` or return a decorator that does."""

    def decorator(func: F) -> F:
        (ledger if ledger is not None else get_ledger()).merge(func, fragment)
        logger.debug(f"@{primitive} applied to {getattr(func, '__qualname__', func)!r}")
        return func

    if impl is None:
        return decorator
    return decorator(impl)


def transition_to(
    target: Any, impl: F | None = None, *, ledger: MetadataLedger | None = None
) -> Any:
    """Declare the state a transition leads to.

    Args:
        target: The target state class, or its name as a string (useful for
               forward references to classes defined further down)
        impl: The transition implementation. When omitted a decorator is returned.
        ledger: Ledger to record into. Defaults to the process-wide ledger.

    Returns:
        ``impl`` unchanged, or a decorator when ``impl`` is omitted

    Example:
        login = transition_to(LoggedIn, lambda self, user: LoggedIn(user))
    """
    fragment = TransitionMeta(target=_resolver.resolve(target))
    return _annotate(fragment, impl, ledger, "transition_to")


def describe(text: str, impl: F | None = None, *, ledger: MetadataLedger | None = None) -> Any:
    """Attach a human-readable description to a transition.

    Args:
        text: The description
        impl: The transition to annotate. When omitted a decorator is returned.
        ledger: Ledger to record into

    Returns:
        ``impl`` unchanged, or a decorator when ``impl`` is omitted
    """
    fragment = TransitionMeta(description=text if isinstance(text, str) else str(text))
    return _annotate(fragment, impl, ledger, "describe")


def guarded(guard: Any, impl: F | None = None, *, ledger: MetadataLedger | None = None) -> Any:
    """Attach a named guard to a transition.

    Only the name and description are recorded; the check itself still has to
    live inside the transition's implementation.

    Args:
        guard: A GuardRef, a guard name, or a mapping with ``name`` and
              optional ``description``
        impl: The transition to annotate. When omitted a decorator is returned.
        ledger: Ledger to record into

    Returns:
        ``impl`` unchanged, or a decorator when ``impl`` is omitted
    """
    fragment = TransitionMeta(guards=(GuardRef.coerce(guard),))
    return _annotate(fragment, impl, ledger, "guarded")


def action(action_ref: Any, impl: F | None = None, *, ledger: MetadataLedger | None = None) -> Any:
    """Attach a named side-effect action to a transition.

    Args:
        action_ref: An ActionRef, an action name, or a mapping with ``name``
                   and optional ``description``
        impl: The transition to annotate. When omitted a decorator is returned.
        ledger: Ledger to record into

    Returns:
        ``impl`` unchanged, or a decorator when ``impl`` is omitted
    """
    fragment = TransitionMeta(actions=(ActionRef.coerce(action_ref),))
    return _annotate(fragment, impl, ledger, "action")


def invoke(spec: Any, impl: F | None = None, *, ledger: MetadataLedger | None = None) -> Any:
    """Attach an invoked asynchronous service to a transition.

    A transition carrying only an invoke spec (no target) describes
    state-entry behavior and shows up under the state's ``invoke`` list.

    Args:
        spec: An InvokeSpec, or a mapping with ``src``, ``on_done``,
             ``on_error`` and optional ``description``. Destinations may be
             state classes or names.
        impl: The service implementation. When omitted a decorator is returned.
        ledger: Ledger to record into

    Returns:
        ``impl`` unchanged, or a decorator when ``impl`` is omitted

    Example:
        authenticate = invoke(
            InvokeSpec("authenticateUser", on_done=LoggedIn, on_error=Failed),
            _authenticate,
        )
    """
    fragment = TransitionMeta(invoke=InvokeSpec.coerce(spec, _resolver.resolve))
    return _annotate(fragment, impl, ledger, "invoke")


def is_transition(obj: Any, ledger: MetadataLedger | None = None) -> bool:
    """Check if a callable carries transition metadata.

    Args:
        obj: Function, method, or other callable to check
        ledger: Ledger to look in

    Returns:
        True if any primitive has been applied to ``obj``
    """
    return callable(obj) and obj in (ledger if ledger is not None else get_ledger())


def get_transition_metadata(
    obj: Any, ledger: MetadataLedger | None = None
) -> TransitionMeta | None:
    """Get the merged transition metadata of a callable.

    Args:
        obj: The transition callable (functions, bound methods, static and
            class methods are all accepted)
        ledger: Ledger to read from

    Returns:
        TransitionMeta or None
    """
    if not callable(obj) and not hasattr(obj, "__func__"):
        return None
    return (ledger if ledger is not None else get_ledger()).read(obj)

