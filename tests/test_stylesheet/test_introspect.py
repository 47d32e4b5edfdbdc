"""Tests for inspect / SELECT / DESCRIBE helpers."""

from icbincss.cascade.builder import build_state
from icbincss.cascade.context import InterpreterContext
from icbincss.introspect import (
    describe_selector,
    final_properties,
    rule_summary,
    rules_for_selector,
    select_rules,
)
from icbincss.model.ast import DescribeSelector
from icbincss.parser import parse_source

SOURCE = """
CREATE SELECTOR btn AS AND(E('button'), C('primary'));
CREATE STYLE SELECTOR btn (color = red, margin = 0);
ALTER STYLE SELECTOR btn WHERE width >= 600px SET color = blue;
SET LAYER = components;
CREATE STYLE SELECTOR btn SCOPED TO card (padding = 4px);
"""


def _state():
    return build_state(parse_source(SOURCE), InterpreterContext(origin_file="styles.sql"))


class TestRulesForSelector:
    def test_named_selector(self):
        target, rules = rules_for_selector(_state(), "btn")
        assert target == "button.primary"
        assert len(rules) == 3
        assert rules[0].declarations[0].origin_file == "styles.sql"

    def test_literal_css(self):
        target, rules = rules_for_selector(_state(), "button.primary")
        assert target == "button.primary"
        assert len(rules) == 3

    def test_unknown(self):
        assert rules_for_selector(_state(), "nope") == ("nope", [])

    def test_final_properties_last_wins(self):
        _, rules = rules_for_selector(_state(), "btn")
        assert final_properties(rules) == [("color", "blue"), ("margin", "0"), ("padding", "4px")]

    def test_rule_summary(self):
        _, rules = rules_for_selector(_state(), "btn")
        assert [rule_summary(r) for r in rules] == [
            "(no condition)",
            "@media (min-width: 600px)",
            "@layer components @scope (.card) (no condition)",
        ]


class TestQueries:
    def test_select_with_where(self):
        (stmt,) = parse_source("SELECT style_props WHERE selector = btn AND width >= 600px;")
        target, rules = select_rules(_state(), stmt)
        assert target == "button.primary"
        assert [d.value for d in rules[0].declarations] == ["blue"]
        assert len(rules) == 1

    def test_select_without_where(self):
        (stmt,) = parse_source("SELECT style_props WHERE selector = btn")
        assert len(select_rules(_state(), stmt)[1]) == 3

    def test_describe(self):
        assert describe_selector(_state(), DescribeSelector("btn")) == "button.primary"
        assert describe_selector(_state(), DescribeSelector("missing")) is None
