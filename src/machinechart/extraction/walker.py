"""Cycle-guarded structural walker over declared expressions.

Serializes an ``ast`` expression into a JSON-compatible value without
evaluating it:

- str/int/float/bool/None constants -> the literal value
- a reference to a class -> the class name (via the identity resolver)
- list/tuple/set displays -> element-wise
- dict displays -> recurse into every string key
- calls -> a property bag built from keyword arguments; positional arguments
  are mapped for the known metadata record types
- a name bound to a module-level assignment -> the walked assigned value

A name that is already being walked higher up the same walk serializes to
``"unresolved-cyclic"``; any other shape serializes to ``"unknown"``.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

from ..identity import UNKNOWN, UNRESOLVED_CYCLIC

if TYPE_CHECKING:
    from ..identity import StaticIdentityResolver
    from .source import SourceModule

# Positional parameter names of the record constructors a descriptor may use
POSITIONAL_FIELDS: dict[str, tuple[str, ...]] = {
    "GuardRef": ("name", "description"),
    "ActionRef": ("name", "description"),
    "InvokeSpec": ("src", "on_done", "on_error", "description"),
}


def callee_name(node: ast.expr) -> str | None:
    """Return the last segment of a call target (``pkg.guarded`` -> ``guarded``)."""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


class StructuralWalker:
    """Serialize declared expressions of one module into plain values."""

    def __init__(self, module: SourceModule, resolver: StaticIdentityResolver) -> None:
        self.module = module
        self.resolver = resolver

    def serialize(self, node: ast.AST) -> Any:
        """Serialize ``node``; each call tracks its own set of active names."""
        return self._walk(node, set())

    def _walk(self, node: ast.AST, active: set[str]) -> Any:
        if isinstance(node, ast.Constant):
            if node.value is None or isinstance(node.value, str | int | float | bool):
                return node.value
            return UNKNOWN

        if (
            isinstance(node, ast.UnaryOp)
            and isinstance(node.op, ast.USub)
            and isinstance(node.operand, ast.Constant)
            and isinstance(node.operand.value, int | float)
            and not isinstance(node.operand.value, bool)
        ):
            return -node.operand.value

        if isinstance(node, ast.Name | ast.Attribute):
            class_name = self.resolver.class_name(node)
            if class_name is not None:
                return class_name
            if isinstance(node, ast.Name):
                return self._walk_binding(node.id, active)
            return UNKNOWN

        if isinstance(node, ast.List | ast.Tuple | ast.Set):
            return [
                UNKNOWN if isinstance(element, ast.Starred) else self._walk(element, active)
                for element in node.elts
            ]

        if isinstance(node, ast.Dict):
            bag: dict[str, Any] = {}
            for key, value in zip(node.keys, node.values, strict=True):
                if isinstance(key, ast.Constant) and isinstance(key.value, str):
                    bag[key.value] = self._walk(value, active)
            return bag

        if isinstance(node, ast.Call):
            return self._walk_call(node, active)

        return UNKNOWN

    def _walk_binding(self, name: str, active: set[str]) -> Any:
        binding = self.module.lookup(name)
        if binding is None or binding.kind != "assign" or binding.node is None:
            return UNKNOWN
        if name in active:
            return UNRESOLVED_CYCLIC

        active.add(name)
        try:
            return self._walk(binding.node, active)
        finally:
            active.discard(name)

    def _walk_call(self, node: ast.Call, active: set[str]) -> dict[str, Any]:
        fields = POSITIONAL_FIELDS.get(callee_name(node.func) or "", ())
        bag: dict[str, Any] = {}

        for index, arg in enumerate(node.args):
            if index >= len(fields) or isinstance(arg, ast.Starred):
                continue
            bag[fields[index]] = self._walk(arg, active)

        for keyword in node.keywords:
            if keyword.arg is None:
                continue
            bag[keyword.arg] = self._walk(keyword.value, active)

        return bag
