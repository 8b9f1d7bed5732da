"""Parsed source modules for static extraction.

A ``SourceModule`` wraps the ``ast`` tree of one Python file together with the
table of its top-level bindings (classes, imports, assignments, functions).
Nothing in the file is imported or executed.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from pathlib import Path

from ..exceptions import SourceNotFoundError, SourceParseError


@dataclass(frozen=True)
class Binding:
    """A top-level name binding in a source module.

    Attributes:
        name: The bound name
        kind: One of "class", "import", "module", "assign", "function"
        node: The defining node (ClassDef, FunctionDef, or the assigned value)
        imported_name: Original name for ``from m import x as y`` bindings
    """

    name: str
    kind: str
    node: ast.AST | None = None
    imported_name: str | None = None


@dataclass(frozen=True)
class DeclaredState:
    """A class declaration selected as the source of one state node."""

    name: str
    node: ast.ClassDef
    module: SourceModule


@dataclass
class SourceModule:
    """A parsed Python module and its top-level bindings."""

    tree: ast.Module
    filename: str = "<source>"
    bindings: dict[str, Binding] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.bindings:
            self.bindings = _collect_bindings(self.tree)

    @classmethod
    def from_text(cls, text: str, filename: str = "<source>") -> SourceModule:
        """Parse source text.

        Raises:
            SourceParseError: If the text is not valid Python
        """
        try:
            tree = ast.parse(text, filename=filename)
        except SyntaxError as e:
            raise SourceParseError(filename, str(e), lineno=e.lineno) from e
        return cls(tree=tree, filename=filename)

    @classmethod
    def from_path(cls, path: str | Path) -> SourceModule:
        """Read and parse a source file.

        Raises:
            SourceNotFoundError: If the file does not exist
            SourceParseError: If the file is not valid Python
        """
        source_path = Path(path)
        if not source_path.is_file():
            raise SourceNotFoundError(str(source_path))
        return cls.from_text(source_path.read_text(encoding="utf-8"), filename=str(source_path))

    def lookup(self, name: str) -> Binding | None:
        """Return the top-level binding for ``name``, if any."""
        return self.bindings.get(name)

    def find_class(self, name: str) -> DeclaredState | None:
        """Find a top-level class declaration by name."""
        binding = self.bindings.get(name)
        if binding is None or binding.kind != "class" or not isinstance(binding.node, ast.ClassDef):
            return None
        return DeclaredState(name=name, node=binding.node, module=self)


def load_source(source: str | Path | SourceModule) -> SourceModule:
    """Turn a path, source text, or parsed module into a SourceModule.

    A ``Path`` is always read from disk. A ``str`` is treated as a path when
    it names an existing file or ends in ``.py``, and as source text otherwise.
    """
    if isinstance(source, SourceModule):
        return source
    if isinstance(source, Path):
        return SourceModule.from_path(source)
    if source.endswith(".py") or ("\n" not in source and Path(source).is_file()):
        return SourceModule.from_path(source)
    return SourceModule.from_text(source)


def _collect_bindings(tree: ast.Module) -> dict[str, Binding]:
    """Collect top-level bindings; later bindings replace earlier ones."""
    bindings: dict[str, Binding] = {}

    for stmt in tree.body:
        if isinstance(stmt, ast.ClassDef):
            bindings[stmt.name] = Binding(stmt.name, "class", stmt)
        elif isinstance(stmt, ast.FunctionDef | ast.AsyncFunctionDef):
            bindings[stmt.name] = Binding(stmt.name, "function", stmt)
        elif isinstance(stmt, ast.Import):
            for alias in stmt.names:
                bound = alias.asname or alias.name.split(".")[0]
                bindings[bound] = Binding(bound, "module")
        elif isinstance(stmt, ast.ImportFrom):
            for alias in stmt.names:
                if alias.name == "*":
                    continue
                bound = alias.asname or alias.name
                bindings[bound] = Binding(bound, "import", imported_name=alias.name)
        elif isinstance(stmt, ast.Assign):
            for target in stmt.targets:
                if isinstance(target, ast.Name):
                    bindings[target.id] = Binding(target.id, "assign", stmt.value)
        elif isinstance(stmt, ast.AnnAssign):
            if isinstance(stmt.target, ast.Name) and stmt.value is not None:
                bindings[stmt.target.id] = Binding(stmt.target.id, "assign", stmt.value)

    return bindings
