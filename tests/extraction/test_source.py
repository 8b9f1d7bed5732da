"""Tests for parsed source modules."""

import textwrap

import pytest

from machinechart.exceptions import SourceNotFoundError, SourceParseError
from machinechart.extraction.source import SourceModule, load_source

SOURCE = textwrap.dedent(
    """
    import os.path
    import machinechart as mc
    from states import Remote, Other as Renamed
    from helpers import *

    LIMIT: int = 3
    FIRST = SECOND = "x"

    def helper():
        return None

    class Ready:
        pass

    class Ready:
        value = 1
    """
)


class TestBindings:
    """Top-level bindings by kind."""

    @pytest.fixture
    def module(self):
        return SourceModule.from_text(SOURCE)

    @pytest.mark.parametrize(
        "name,kind",
        [
            ("os", "module"),
            ("mc", "module"),
            ("Remote", "import"),
            ("Renamed", "import"),
            ("LIMIT", "assign"),
            ("FIRST", "assign"),
            ("SECOND", "assign"),
            ("helper", "function"),
            ("Ready", "class"),
        ],
    )
    def test_kinds(self, module, name, kind):
        assert module.lookup(name).kind == kind

    def test_aliased_import_keeps_original_name(self, module):
        assert module.lookup("Renamed").imported_name == "Other"

    def test_later_definition_wins(self, module):
        declaration = module.find_class("Ready")

        assert len(declaration.node.body) == 1
        assert declaration.node.body[0].targets[0].id == "value"

    def test_find_class_ignores_non_classes(self, module):
        assert module.find_class("helper") is None
        assert module.find_class("Missing") is None

    def test_unknown_name(self, module):
        assert module.lookup("nothing") is None


class TestLoadSource:
    """Paths, text and parsed modules are all accepted."""

    def test_parsed_module_passes_through(self):
        module = SourceModule.from_text("x = 1\n")

        assert load_source(module) is module

    def test_path(self, tmp_path):
        path = tmp_path / "machine.py"
        path.write_text("class A:\n    pass\n", encoding="utf-8")

        module = load_source(path)

        assert module.filename == str(path)
        assert module.find_class("A") is not None

    def test_string_path(self, tmp_path):
        path = tmp_path / "machine.py"
        path.write_text("class A:\n    pass\n", encoding="utf-8")

        assert load_source(str(path)).find_class("A") is not None

    def test_source_text(self):
        assert load_source("class A:\n    pass\n").filename == "<source>"

    def test_missing_file(self):
        with pytest.raises(SourceNotFoundError):
            load_source("does/not/exist.py")

    def test_syntax_error(self, tmp_path):
        path = tmp_path / "broken.py"
        path.write_text("def broken(:\n", encoding="utf-8")

        with pytest.raises(SourceParseError) as exc_info:
            load_source(path)

        assert exc_info.value.context["filename"] == str(path)
        assert exc_info.value.context["lineno"] == 1
