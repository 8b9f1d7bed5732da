"""Tests for the static graph builder."""

import ast
import textwrap

import pytest

from machinechart.extraction.source import SourceModule
from machinechart.extraction.static_builder import StaticStateAnalyzer, build_static_state_node


def _node(source, class_name):
    module = SourceModule.from_text(textwrap.dedent(source))
    declaration = module.find_class(class_name)
    assert declaration is not None
    return build_static_state_node(declaration)


def _dump(source, class_name):
    return _node(source, class_name).model_dump(mode="json", by_alias=True, exclude_none=True)


class TestPrimitiveRecognition:
    """Which calls count as annotation primitives."""

    @pytest.fixture
    def analyzer(self):
        source = textwrap.dedent(
            """
            import machinechart as mc
            from machinechart import guarded as requires

            def describe(text):
                return text
            """
        )
        return StaticStateAnalyzer(SourceModule.from_text(source))

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("transition_to('A')", "transition_to"),
            ("requires('g')", "guarded"),
            ("mc.action('a')", "action"),
            ("describe('shadowed')", None),
            ("print('x')", None),
            ("transition_to", None),
        ],
    )
    def test_primitive_kind(self, analyzer, text, expected):
        assert analyzer.primitive_kind(ast.parse(text, mode="eval").body) == expected


class TestDecoratorsAndWrappers:
    """Both annotation forms are understood."""

    def test_decorator_stack(self):
        source = """
            from machinechart import action, describe, guarded, transition_to

            class Editing:
                @describe("Save the draft")
                @guarded("isDirty")
                @guarded("isValid")
                @action("persist")
                @transition_to("Saved")
                def save(self):
                    return None
        """

        assert _dump(source, "Editing") == {
            "on": {
                "save": {
                    "target": "Saved",
                    "description": "Save the draft",
                    "cond": "isDirty && isValid",
                    "actions": ["persist"],
                }
            }
        }

    def test_nested_wrappers(self):
        source = """
            from machinechart import describe, guarded, transition_to

            class Ready:
                go = describe("Go", guarded("g1", guarded("g2", transition_to(Done, lambda self: None))))

            class Done:
                pass
        """

        assert _dump(source, "Ready") == {
            "on": {"go": {"target": "Done", "description": "Go", "cond": "g1 && g2"}}
        }

    def test_keyword_arguments(self):
        source = """
            from machinechart import guarded, transition_to

            class Ready:
                go = guarded(guard="g", impl=transition_to(target="Done", impl=lambda self: None))
        """

        assert _dump(source, "Ready") == {"on": {"go": {"target": "Done", "cond": "g"}}}

    def test_attribute_access(self):
        source = """
            import machinechart as mc

            class Ready:
                @mc.transition_to("Done")
                def go(self):
                    return None
        """

        assert _dump(source, "Ready") == {"on": {"go": {"target": "Done"}}}

    def test_shadowed_primitive_is_ignored(self):
        source = """
            def transition_to(target):
                return lambda fn: fn

            class Ready:
                @transition_to("Done")
                def go(self):
                    return None
        """

        assert _dump(source, "Ready") == {"on": {}}

    def test_other_decorators_are_ignored(self):
        source = """
            import functools
            from machinechart import transition_to

            class Ready:
                @functools.lru_cache(maxsize=None)
                def cached(self):
                    return None

                @staticmethod
                @transition_to("Done")
                def go():
                    return None
        """

        assert _dump(source, "Ready") == {"on": {"go": {"target": "Done"}}}


class TestReferences:
    """Values that refer to other bindings are followed."""

    def test_module_function_reference(self):
        source = """
            from machinechart import transition_to

            @transition_to("Done")
            def finish(self):
                return None

            class Ready:
                go = finish
        """

        assert _dump(source, "Ready") == {"on": {"go": {"target": "Done"}}}

    def test_earlier_member_reference(self):
        source = """
            from machinechart import transition_to

            class Ready:
                @transition_to("Done")
                def go(self):
                    return None

                proceed = go
        """

        assert list(_node(source, "Ready").on) == ["go", "proceed"]

    def test_outer_annotation_lands_on_referenced_definition(self):
        source = """
            from machinechart import describe, transition_to

            class Ready:
                @transition_to("Done")
                def _go(self):
                    return None

                go = describe("Go on", _go)
        """

        assert _dump(source, "Ready") == {
            "on": {
                "_go": {"target": "Done", "description": "Go on"},
                "go": {"target": "Done", "description": "Go on"},
            }
        }

    def test_module_function_shared_across_classes(self):
        source = """
            from machinechart import describe, transition_to

            def finish(self):
                return None

            class Ready:
                go = transition_to("Done", finish)

            class Paused:
                go = describe("Wrap up", finish)
        """

        expected = {"on": {"go": {"target": "Done", "description": "Wrap up"}}}
        assert _dump(source, "Ready") == expected
        assert _dump(source, "Paused") == expected

    def test_annotation_as_statement(self):
        source = """
            from machinechart import guarded, transition_to

            def finish(self):
                return None

            transition_to("Done", finish)
            guarded("isReady", finish)

            class Ready:
                go = staticmethod(finish)
        """

        assert _dump(source, "Ready") == {"on": {"go": {"target": "Done", "cond": "isReady"}}}

    def test_descriptor_constants(self):

        source = """
            from machinechart import ActionRef, GuardRef, action, guarded, transition_to

            CAN_GO = GuardRef("canGo", "Allowed to go")
            LOG = {"name": "log"}

            class Ready:
                go = guarded(CAN_GO, action(LOG, transition_to("Done", lambda self: None)))
        """

        assert _dump(source, "Ready") == {
            "on": {"go": {"target": "Done", "cond": "canGo", "actions": ["log"]}}
        }

    def test_cyclic_descriptor(self):
        source = """
            from machinechart import guarded, transition_to

            A = B
            B = A

            class Ready:
                go = guarded(A, transition_to("Done", lambda self: None))
        """

        assert _node(source, "Ready").on["go"].cond == "unresolved-cyclic"

    def test_unserializable_descriptor(self):
        source = """
            from machinechart import guarded, transition_to

            class Ready:
                go = guarded(flag + 1, transition_to("Done", lambda self: None))
        """

        assert _node(source, "Ready").on["go"].cond == "unknown"

    def test_aliased_target_class(self):
        source = """
            from machinechart import transition_to
            from states import Finished as Done

            class Ready:
                go = transition_to(Done, lambda self: None)
        """

        assert _node(source, "Ready").on["go"].target == "Finished"


class TestInvoke:
    """Invoke specs end up in the state's invoke list."""

    def test_invoke_spec_call(self):
        source = """
            from machinechart import InvokeSpec, invoke

            class Loading:
                @invoke(InvokeSpec("load", Ready, "Failed", description="Load data"))
                async def load(self):
                    return None

            class Ready:
                pass
        """

        assert _dump(source, "Loading") == {
            "on": {},
            "invoke": [
                {
                    "src": "load",
                    "onDone": {"target": "Ready"},
                    "onError": {"target": "Failed"},
                    "description": "Load data",
                }
            ],
        }

    def test_invoke_mapping_with_camel_case(self):
        source = """
            from machinechart import invoke

            class Loading:
                load = invoke({"src": "load", "onDone": "Ready", "onError": "Failed"}, lambda s: None)
        """

        node = _node(source, "Loading")
        assert node.invoke[0].on_done.target == "Ready"
        assert node.invoke[0].on_error.target == "Failed"


class TestHierarchy:
    """Members of in-module base classes are included."""

    def test_base_members_first(self):
        source = """
            from machinechart import transition_to

            class Base:
                @transition_to("Start")
                def reset(self):
                    return None

            class Running(Base):
                @transition_to("Stopped")
                def stop(self):
                    return None
        """

        assert list(_node(source, "Running").on) == ["reset", "stop"]

    def test_override_keeps_base_position(self):
        source = """
            from machinechart import transition_to

            class Base:
                @transition_to("Start")
                def reset(self):
                    return None

                @transition_to("Other")
                def other(self):
                    return None

            class Running(Base):
                @transition_to("Restarted")
                def reset(self):
                    return None
        """

        node = _node(source, "Running")
        assert list(node.on) == ["reset", "other"]
        assert node.on["reset"].target == "Restarted"

    def test_diamond_follows_c3(self):
        source = """
            from machinechart import transition_to

            class Root:
                @transition_to("FromRoot")
                def go(self):
                    return None

            class Left(Root):
                pass

            class Right(Root):
                @transition_to("FromRight")
                def go(self):
                    return None

            class Bottom(Left, Right):
                pass
        """

        assert _node(source, "Bottom").on["go"].target == "FromRight"

    def test_inconsistent_hierarchy_still_builds(self):
        source = """
            from machinechart import transition_to

            class A:
                @transition_to("X")
                def go(self):
                    return None

            class B(A):
                pass

            class C(A, B):
                pass
        """

        assert _node(source, "C").on["go"].target == "X"

    def test_external_bases_are_not_followed(self):
        source = """
            from machinechart import transition_to
            from elsewhere import Base

            class Running(Base):
                @transition_to("Stopped")
                def stop(self):
                    return None
        """

        assert list(_node(source, "Running").on) == ["stop"]


class TestInstanceMembers:
    """Transitions assigned to ``self`` in ``__init__``."""

    def test_self_assignment(self):
        source = """
            from machinechart import transition_to

            class Waiting:
                def __init__(self):
                    self.timeout = transition_to("Expired", lambda: None)
                    self.count = 0
        """

        assert _dump(source, "Waiting") == {"on": {"timeout": {"target": "Expired"}}}

    def test_self_method_annotated_in_init(self):
        source = """
            from machinechart import guarded, transition_to

            class Waiting:
                def __init__(self):
                    self.go = guarded("g", transition_to("Done", self._go))

                def _go(self):
                    return None
        """

        assert _dump(source, "Waiting") == {"on": {"go": {"target": "Done", "cond": "g"}}}

    def test_init_annotation_layers_over_method_record(self):
        source = """
            from machinechart import describe, guarded, transition_to

            class Waiting:
                def __init__(self):
                    self.go = describe("Go now", self._go)

                @guarded("g")
                @transition_to("Done")
                def _go(self):
                    return None
        """

        assert _dump(source, "Waiting") == {
            "on": {
                "_go": {"target": "Done", "cond": "g"},
                "go": {"target": "Done", "description": "Go now", "cond": "g"},
            }
        }



def test_fixture_state(auth_machine_path):
    module = SourceModule.from_path(auth_machine_path)
    node = build_static_state_node(module.find_class("LoggedOut"))

    assert node.model_dump(mode="json", by_alias=True, exclude_none=True) == {
        "on": {
            "reset": {"target": "LoggedOut"},
            "login": {
                "target": "LoggingIn",
                "description": "Start the login process with username and password",
                "actions": ["logLoginAttempt"],
            },
        }
    }
