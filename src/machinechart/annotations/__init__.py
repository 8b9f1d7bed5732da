"""Annotations package.

Provides the primitives that record transition metadata, the ledger they
record into, and the metadata record types.
"""

from .ledger import MetadataLedger, get_ledger, transition_identity
from .metadata import (
    ActionRef,
    GuardRef,
    InvokeSpec,
    StateRef,
    TransitionMeta,
    fold_fragments,
)
from .primitives import (
    PRIMITIVE_NAMES,
    action,
    describe,
    get_transition_metadata,
    guarded,
    invoke,
    is_transition,
    transition_to,
)

__all__ = [
    # Primitives
    "transition_to",
    "describe",
    "guarded",
    "action",
    "invoke",
    "PRIMITIVE_NAMES",
    # Utility functions
    "is_transition",
    "get_transition_metadata",
    # Ledger
    "MetadataLedger",
    "get_ledger",
    "transition_identity",
    # Records
    "StateRef",
    "GuardRef",
    "ActionRef",
    "InvokeSpec",
    "TransitionMeta",
    "fold_fragments",
]
