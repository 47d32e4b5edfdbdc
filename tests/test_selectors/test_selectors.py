"""Tests for selector resolution and the selector JSON codec."""

import pytest

from icbincss.model.selector import (
    And,
    Attr,
    Child,
    Class,
    Descendant,
    Element,
    Id,
    Join,
    JoinType,
    Or,
    Pseudo,
    PseudoElement,
    Ref,
)
from icbincss.selectors import resolve_selector, selector_from_json, selector_to_json


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


class TestPrimitives:
    def test_element(self):
        assert resolve_selector(Element("button")) == "button"

    def test_class(self):
        assert resolve_selector(Class("card")) == ".card"

    def test_id(self):
        assert resolve_selector(Id("main")) == "#main"

    def test_pseudo(self):
        assert resolve_selector(Pseudo("hover")) == ":hover"

    def test_pseudo_element(self):
        assert resolve_selector(PseudoElement("before")) == "::before"

    def test_attr_presence(self):
        assert resolve_selector(Attr("disabled")) == "[disabled]"

    def test_attr_value_defaults_to_equals(self):
        assert resolve_selector(Attr("type", "submit")) == '[type="submit"]'

    def test_attr_operator_and_flag(self):
        assert resolve_selector(Attr("href", "https", "^=", "i")) == '[href^="https" i]'


# ---------------------------------------------------------------------------
# Combinators
# ---------------------------------------------------------------------------


class TestCombinators:
    def test_and_concatenates(self):
        assert resolve_selector(And((Element("button"), Class("primary")))) == "button.primary"

    def test_or_joins_with_comma(self):
        assert resolve_selector(Or((Class("a"), Class("b")))) == ".a, .b"

    def test_child(self):
        assert resolve_selector(Child(Class("nav"), Element("li"))) == ".nav > li"

    def test_descendant(self):
        assert resolve_selector(Descendant(Class("nav"), Element("a"))) == ".nav a"

    @pytest.mark.parametrize(
        "join_type, expected",
        [
            (JoinType.AND, ".a.b"),
            (JoinType.DESC, ".a .b"),
            (JoinType.CHILD, ".a > .b"),
            (JoinType.ADJ, ".a + .b"),
            (JoinType.SIB, ".a ~ .b"),
        ],
    )
    def test_join_separators(self, join_type, expected):
        assert resolve_selector(Join(join_type, Class("a"), Class("b"))) == expected

    def test_nested_join(self):
        inner = Join(JoinType.CHILD, Class("list"), Element("li"))
        outer = Join(JoinType.AND, inner, Pseudo("hover"))
        assert resolve_selector(outer) == ".list > li:hover"


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------


class TestReferences:
    def test_unresolved_reference_becomes_class(self):
        assert resolve_selector(Ref("card")) == ".card"

    def test_reference_is_resolved_through_lookup(self):
        table = {"btn": And((Element("button"), Class("primary")))}
        definition = And((Ref("btn"), Pseudo("hover")))
        assert resolve_selector(definition, table.get) == "button.primary:hover"

    def test_reference_cycle_terminates(self):
        table = {"a": Ref("b"), "b": Ref("a")}
        assert resolve_selector(Ref("a"), table.get) == ".a"


# ---------------------------------------------------------------------------
# JSON codec
# ---------------------------------------------------------------------------


class TestJsonCodec:
    def test_complex_definition_survives(self):
        definition = Join(
            JoinType.SIB,
            Or((Class("a"), Attr("data-x", "1", "~=", "s"))),
            Child(Ref("nav"), Descendant(Id("main"), PseudoElement("after"))),
        )
        assert selector_from_json(selector_to_json(definition)) == definition

    def test_attr_omits_missing_fields(self):
        assert selector_to_json(Attr("disabled")) == '{"kind": "Attr", "name": "disabled"}'

    def test_unknown_kind_raises(self):
        with pytest.raises(ValueError, match="Unknown selector kind"):
            selector_from_json('{"kind": "Nope"}')
