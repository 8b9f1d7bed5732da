"""Identity resolution - map a state-producing construct to its StateRef.

Two interchangeable strategies sit behind one interface:

- ``DynamicIdentityResolver`` looks at live values (a class, or a string
  forward reference) and returns the declared ``__name__``.
- ``StaticIdentityResolver`` looks at ``ast`` expressions and returns the
  declared class name of the symbol they refer to, without importing
  anything.

Both must produce the same name for the same class: graph equivalence between
dynamic and static extraction depends on it. Names are the only identity, so
two unrelated classes sharing a name resolve to the same StateRef.
"""

from __future__ import annotations

import ast
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .extraction.source import SourceModule

# Sentinels produced when a declared shape cannot be serialized
UNKNOWN = "unknown"
UNRESOLVED_CYCLIC = "unresolved-cyclic"


class IdentityResolver(ABC):
    """Resolve a reference to a state-producing construct to a StateRef."""

    @abstractmethod
    def resolve(self, ref: Any) -> str:
        """Return the canonical symbolic name for ``ref``."""


class DynamicIdentityResolver(IdentityResolver):
    """Resolve live values by their declared name."""

    def resolve(self, ref: Any) -> str:
        if isinstance(ref, str):
            return ref
        name = getattr(ref, "__name__", None)
        if isinstance(name, str) and name:
            return name
        return str(ref)


class StaticIdentityResolver(IdentityResolver):
    """Resolve ``ast`` expressions against the bindings of one parsed module.

    Args:
        module: The parsed module whose top-level bindings give names meaning
    """

    def __init__(self, module: SourceModule) -> None:
        self.module = module

    def resolve(self, ref: Any) -> str:
        if isinstance(ref, str):
            return ref
        name = self.class_name(ref)
        if name is not None:
            return name

        # Not a class-like symbol: fall through to structural serialization
        from .extraction.walker import StructuralWalker

        value = StructuralWalker(self.module, self).serialize(ref)
        return value if isinstance(value, str) else UNKNOWN

    def class_name(self, node: ast.AST) -> str | None:
        """Return the declared class name ``node`` refers to, if it is class-like.

        Returns None when the expression is not a direct reference to a class
        (assignments are left to the structural walker, which follows them
        with cycle protection).
        """
        if isinstance(node, ast.Constant) and isinstance(node.value, str):
            return node.value

        if isinstance(node, ast.Name):
            binding = self.module.lookup(node.id)
            if binding is None:
                return None
            if binding.kind == "class":
                return binding.name
            if binding.kind == "import":
                # from pkg import Cls as Alias -> the class keeps its own name
                return binding.imported_name
            return None

        if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name):
            owner = self.module.lookup(node.value.id)
            if owner is not None and owner.kind in ("module", "import", "class"):
                return node.attr

        return None
