"""Static graph builder - read transition metadata from class declarations.

Works on the ``ast`` of a source file; nothing is imported or executed. The
analyzer replays the module's definitions in execution order and, like the
metadata ledger, keeps one record per underlying definition (a function, a
lambda, an imported name), so an annotation applied through any reference
lands on the definition itself and is seen by every member that refers to it.

For a declared state class the builder then:

1. linearizes the class and its in-module base classes (C3, like Python's MRO);
2. collects members in lookup order: class-body functions and assignments,
   then ``self.<name> = ...`` assignments found in ``__init__``;
3. hands the records to the shared shaping rule.

Annotations applied inside ``__init__`` describe one instance: they are
layered over the referenced definition's record without changing it.

Base classes defined outside the analyzed file are not followed.
"""

from __future__ import annotations

import ast
from collections.abc import Iterator
from typing import Any

from ..annotations.metadata import (
    ActionRef,
    GuardRef,
    InvokeSpec,
    TransitionMeta,
)
from ..annotations.primitives import PRIMITIVE_NAMES
from ..identity import StaticIdentityResolver
from ..logging import get_logger
from ..models.statechart import StateNode
from .source import DeclaredState, SourceModule
from .state_node import shape_state_node
from .walker import StructuralWalker, callee_name

logger = get_logger(__name__)

# Parameter names of each primitive: (descriptor, implementation)
PRIMITIVE_PARAMETERS: dict[str, tuple[str, str]] = {
    "transition_to": ("target", "impl"),
    "describe": ("text", "impl"),
    "guarded": ("guard", "impl"),
    "action": ("action_ref", "impl"),
    "invoke": ("spec", "impl"),
}

# Wrappers that keep the wrapped function as the transition identity
METHOD_WRAPPERS = frozenset({"staticmethod", "classmethod"})


class StaticStateAnalyzer:
    """Derive transition records for the classes of one parsed module.

    Args:
        module: The parsed source module
    """

    def __init__(self, module: SourceModule) -> None:
        self.module = module
        self.resolver = StaticIdentityResolver(module)
        self.walker = StructuralWalker(module, self.resolver)

        # id(definition) -> (definition, merged record)
        self._records: dict[int, tuple[Any, TransitionMeta]] = {}
        # Module-level names bound so far, to their definitions
        self._scope: dict[str, Any] = {}
        # id(ClassDef) -> member name -> definition (None if not callable)
        self._class_scopes: dict[int, dict[str, Any]] = {}
        # Representative node for each unresolvable reference, by source text
        self._unresolved: dict[str, ast.expr] = {}
        self._analyzed = False

    # ------------------------------------------------------------------
    # Primitive recognition
    # ------------------------------------------------------------------

    def primitive_kind(self, node: ast.AST) -> str | None:
        """Return the primitive a call invokes, or None if it is not one.

        Handles bare names, aliased imports (``from m import guarded as g``)
        and attribute access (``mc.guarded``). A name defined locally in the
        module shadows the primitive and is not recognized.
        """
        if not isinstance(node, ast.Call):
            return None

        func = node.func
        if isinstance(func, ast.Name):
            binding = self.module.lookup(func.id)
            if binding is None:
                name = func.id
            elif binding.kind == "import":
                name = binding.imported_name or func.id
            else:
                return None
        elif isinstance(func, ast.Attribute):
            name = func.attr
        else:
            return None

        return name if name in PRIMITIVE_NAMES else None

    def _argument(self, call: ast.Call, index: int, keyword: str) -> ast.expr | None:
        if len(call.args) > index and not isinstance(call.args[index], ast.Starred):
            return call.args[index]
        for kw in call.keywords:
            if kw.arg == keyword:
                return kw.value
        return None

    def fragment(self, call: ast.Call) -> TransitionMeta:
        """Build the metadata fragment recorded by one primitive call."""
        kind = self.primitive_kind(call)
        if kind is None:
            return TransitionMeta()

        descriptor_param, _ = PRIMITIVE_PARAMETERS[kind]
        descriptor = self._argument(call, 0, descriptor_param)
        if descriptor is None:
            return TransitionMeta()

        if kind == "transition_to":
            return TransitionMeta(target=self.resolver.resolve(descriptor))

        value = self.walker.serialize(descriptor)
        if kind == "describe":
            return TransitionMeta(description=value if isinstance(value, str) else str(value))
        if kind == "guarded":
            return TransitionMeta(guards=(GuardRef.coerce(value),))
        if kind == "action":
            return TransitionMeta(actions=(ActionRef.coerce(value),))
        return TransitionMeta(invoke=InvokeSpec.coerce(value, self.resolver.resolve))

    def _applied_call(self, node: ast.Call) -> tuple[ast.Call, ast.expr] | None:
        """Split a primitive application into (primitive call, implementation).

        Covers the wrapper form ``guarded(g, impl)`` and an immediately
        applied decorator ``guarded(g)(impl)``. Returns None for anything else,
        including a primitive called without an implementation.
        """
        kind = self.primitive_kind(node)
        if kind is not None:
            _, impl_param = PRIMITIVE_PARAMETERS[kind]
            inner = self._argument(node, 1, impl_param)
            return (node, inner) if inner is not None else None

        if (
            isinstance(node.func, ast.Call)
            and self.primitive_kind(node.func) is not None
            and node.args
            and not isinstance(node.args[0], ast.Starred)
        ):
            return node.func, node.args[0]
        return None

    # ------------------------------------------------------------------
    # Definitions and their records
    # ------------------------------------------------------------------

    def record(self, definition: Any) -> TransitionMeta | None:
        """Return the merged record of a definition, if it was ever annotated."""
        if definition is None:
            return None
        self._ensure_analyzed()
        entry = self._records.get(id(definition))
        return entry[1] if entry else None

    def _apply(self, definition: Any, fragment: TransitionMeta) -> None:
        entry = self._records.get(id(definition))
        base = entry[1] if entry else TransitionMeta()
        self._records[id(definition)] = (definition, base.merge(fragment))

    def definition(self, node: ast.AST | None, scope: dict[str, Any]) -> Any | None:
        """Evaluate a value expression to the definition it refers to.

        Primitive calls on the way are applied to that definition, innermost
        first, exactly as they run when the module executes.

        Args:
            node: The value expression
            scope: Class-body names visible before module-level names

        Returns:
            The definition (a node or import binding), or None for values
            that cannot carry metadata
        """
        if node is None or isinstance(node, ast.Constant):
            return None

        if isinstance(node, ast.Call):
            applied = self._applied_call(node)
            if applied is None:
                if callee_name(node.func) in METHOD_WRAPPERS and len(node.args) == 1:
                    return self.definition(node.args[0], scope)
                # Some other call: its result is a fresh object
                return node
            call, inner = applied
            target = self.definition(inner, scope)
            if target is not None:
                self._apply(target, self.fragment(call))
            return target

        if isinstance(node, ast.Name):
            if node.id in scope:
                return scope[node.id]
            if node.id in self._scope:
                return self._scope[node.id]
            binding = self.module.lookup(node.id)
            if binding is not None and binding.kind in ("import", "module"):
                return binding
            return self._unresolved.setdefault(node.id, node)

        if isinstance(node, ast.Attribute):
            return self._unresolved.setdefault(ast.unparse(node), node)

        return node

    def _decorate(self, func: ast.FunctionDef | ast.AsyncFunctionDef) -> None:
        """Apply a function's primitive decorators, bottom one first."""
        for decorator in reversed(func.decorator_list):
            if isinstance(decorator, ast.Call) and self.primitive_kind(decorator) is not None:
                self._apply(func, self.fragment(decorator))

    def _ensure_analyzed(self) -> None:
        if self._analyzed:
            return
        self._analyzed = True

        for stmt in self.module.tree.body:
            if isinstance(stmt, ast.FunctionDef | ast.AsyncFunctionDef):
                self._decorate(stmt)
                self._scope[stmt.name] = stmt
            elif isinstance(stmt, ast.ClassDef):
                self._class_scopes[id(stmt)] = self._analyze_class(stmt)
                self._scope[stmt.name] = stmt
            elif isinstance(stmt, ast.Assign):
                definition = self.definition(stmt.value, {})
                for target in stmt.targets:
                    if isinstance(target, ast.Name):
                        self._bind(self._scope, target.id, definition)
            elif isinstance(stmt, ast.AnnAssign) and stmt.value is not None:
                if isinstance(stmt.target, ast.Name):
                    self._bind(self._scope, stmt.target.id, self.definition(stmt.value, {}))
            elif isinstance(stmt, ast.Expr) and isinstance(stmt.value, ast.Call):
                self.definition(stmt.value, {})

        logger.debug(
            "static_module_analyzed",
            source=self.module.filename,
            annotated=len(self._records),
        )

    def _analyze_class(self, class_node: ast.ClassDef) -> dict[str, Any]:
        members: dict[str, Any] = {}

        for stmt in class_node.body:
            if isinstance(stmt, ast.FunctionDef | ast.AsyncFunctionDef):
                self._decorate(stmt)
                members[stmt.name] = stmt
            elif isinstance(stmt, ast.Assign):
                definition = self.definition(stmt.value, members)
                for target in stmt.targets:
                    if isinstance(target, ast.Name):
                        members[target.id] = definition
            elif isinstance(stmt, ast.AnnAssign) and stmt.value is not None:
                if isinstance(stmt.target, ast.Name):
                    members[stmt.target.id] = self.definition(stmt.value, members)
            elif isinstance(stmt, ast.Expr) and isinstance(stmt.value, ast.Call):
                self.definition(stmt.value, members)

        return members

    @staticmethod
    def _bind(scope: dict[str, Any], name: str, definition: Any) -> None:
        if definition is None:
            scope.pop(name, None)
        else:
            scope[name] = definition

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    def class_members(self, class_node: ast.ClassDef) -> dict[str, Any]:
        """Definitions of the members declared in a class body."""
        self._ensure_analyzed()
        return dict(self._class_scopes.get(id(class_node), {}))

    def instance_members(self, class_node: ast.ClassDef) -> dict[str, ast.expr]:
        """Values of ``self.<name> = ...`` assignments in ``__init__``."""
        members: dict[str, ast.expr] = {}

        for stmt in class_node.body:
            if not (isinstance(stmt, ast.FunctionDef) and stmt.name == "__init__"):
                continue
            for inner in stmt.body:
                if not isinstance(inner, ast.Assign):
                    continue
                for target in inner.targets:
                    if (
                        isinstance(target, ast.Attribute)
                        and isinstance(target.value, ast.Name)
                        and target.value.id == "self"
                    ):
                        members[target.attr] = inner.value

        return members

    def instance_record(self, node: ast.AST, members: dict[str, Any]) -> TransitionMeta | None:
        """Record of a value assigned in ``__init__``.

        Primitive calls are layered over the record of what they wrap; the
        wrapped definition itself is left unchanged.
        """
        if isinstance(node, ast.Call):
            applied = self._applied_call(node)
            if applied is None:
                return None
            call, inner = applied
            base = self.instance_record(inner, members)
            return (base if base is not None else TransitionMeta()).merge(self.fragment(call))

        if (
            isinstance(node, ast.Attribute)
            and isinstance(node.value, ast.Name)
            and node.value.id == "self"
        ):
            return self.record(members.get(node.attr))

        if isinstance(node, ast.Name):
            self._ensure_analyzed()
            return self.record(self._scope.get(node.id))

        return None

    def linearize(self, class_node: ast.ClassDef) -> list[ast.ClassDef]:
        """C3 linearization over in-module bases, most derived first."""
        return self._linearize(class_node, set())

    def _linearize(self, class_node: ast.ClassDef, active: set[str]) -> list[ast.ClassDef]:
        active = active | {class_node.name}
        base_lines: list[list[ast.ClassDef]] = []
        bases: list[ast.ClassDef] = []

        for base in class_node.bases:
            if not isinstance(base, ast.Name) or base.id in active:
                continue
            binding = self.module.lookup(base.id)
            if binding is None or not isinstance(binding.node, ast.ClassDef):
                continue
            bases.append(binding.node)
            base_lines.append(self._linearize(binding.node, active))

        merged = _c3_merge([*base_lines, list(bases)])
        if merged is None:
            logger.warning("inconsistent_class_hierarchy", state=class_node.name)
            merged = _depth_first(base_lines)
        return [class_node, *merged]

    def iter_transitions(self, declaration: DeclaredState) -> Iterator[tuple[str, TransitionMeta]]:
        """Yield (member name, record) for every annotated member of a class."""
        hierarchy = list(reversed(self.linearize(declaration.node)))

        members: dict[str, Any] = {}
        for class_node in hierarchy:
            members.update(self.class_members(class_node))

        records = {name: self.record(definition) for name, definition in members.items()}
        for class_node in hierarchy:
            for name, value in self.instance_members(class_node).items():
                records[name] = self.instance_record(value, members)

        for name, meta in records.items():
            if meta is not None:
                yield name, meta


def build_static_state_node(declaration: DeclaredState) -> StateNode:
    """Build the StateNode for a declared state class.

    Args:
        declaration: The class declaration to analyze

    Returns:
        The state's StateNode
    """
    analyzer = StaticStateAnalyzer(declaration.module)
    transitions = list(analyzer.iter_transitions(declaration))
    logger.debug(
        "static_state_node_built",
        state=declaration.name,
        transitions=len(transitions),
    )
    return shape_state_node(transitions)


def _c3_merge(sequences: list[list[ast.ClassDef]]) -> list[ast.ClassDef] | None:
    """Merge linearizations; returns None when no consistent order exists."""
    pending = [list(seq) for seq in sequences if seq]
    result: list[ast.ClassDef] = []

    while pending:
        for seq in pending:
            head = seq[0]
            if not any(head in other[1:] for other in pending):
                break
        else:
            return None

        result.append(head)
        for seq in pending:
            if seq[0] is head:
                del seq[0]
        pending = [seq for seq in pending if seq]

    return result


def _depth_first(lines: list[list[ast.ClassDef]]) -> list[ast.ClassDef]:
    seen: list[ast.ClassDef] = []
    for line in lines:
        for class_node in line:
            if class_node not in seen:
                seen.append(class_node)
    return seen
