"""Tests for input validation and dict parsing."""

import pytest

from notation_rules.models import PortDirection, Side
from notation_rules.validation import (
    CatalogError,
    ValidationError,
    parse_connection,
    parse_edge,
    parse_node,
    parse_notation,
    parse_port,
    parse_rule,
    parse_symbol,
    validate_action,
    validate_direction,
    validate_enum,
    validate_int,
    validate_list,
    validate_non_empty_string,
    validate_number,
    validate_optional_string,
    validate_role,
    validate_string_list,
    _CHECK_ACTIONS,
    _VALIDATE_ACTIONS,
)


# ===================================================================
# Unit tests for primitive validators
# ===================================================================


class TestValidateNonEmptyString:
    def test_valid(self) -> None:
        assert validate_non_empty_string("hello", "f") == "hello"

    def test_strips_whitespace(self) -> None:
        assert validate_non_empty_string("  hi  ", "f") == "hi"

    def test_empty_string(self) -> None:
        with pytest.raises(ValidationError, match="non-empty"):
            validate_non_empty_string("", "field")

    def test_not_a_string(self) -> None:
        with pytest.raises(ValidationError, match="non-empty"):
            validate_non_empty_string(123, "field")


class TestValidateOptionalString:
    def test_none_and_empty_are_absent(self) -> None:
        assert validate_optional_string(None, "f") is None
        assert validate_optional_string("", "f") is None

    def test_wrong_type(self) -> None:
        with pytest.raises(ValidationError, match="must be a string"):
            validate_optional_string(5, "f")


class TestValidateNumbers:
    def test_int_bool_rejected(self) -> None:
        with pytest.raises(ValidationError, match="integer"):
            validate_int(True, "i")

    def test_int_min_val(self) -> None:
        with pytest.raises(ValidationError, match=">="):
            validate_int(-1, "i", min_val=0)

    def test_number_range(self) -> None:
        assert validate_number(0.5, "n", min_val=0, max_val=1) == 0.5
        with pytest.raises(ValidationError, match="<="):
            validate_number(1.5, "n", max_val=1)


class TestValidateLists:
    def test_list_min_length(self) -> None:
        with pytest.raises(ValidationError, match="at least 2"):
            validate_list([1], "l", min_length=2)

    def test_string_list_none_is_empty(self) -> None:
        assert validate_string_list(None, "l") == ()

    def test_string_list_items_checked(self) -> None:
        with pytest.raises(ValidationError, match=r"l\[1\]"):
            validate_string_list(["a", ""], "l")


class TestValidateEnum:
    def test_case_insensitive_returns_allowed_spelling(self) -> None:
        assert validate_enum("north", "side", {"NORTH", "SOUTH"}) == "NORTH"

    def test_unknown(self) -> None:
        with pytest.raises(ValidationError, match="must be one of"):
            validate_enum("up", "side", {"NORTH", "SOUTH"})


class TestValidateAction:
    def test_valid(self) -> None:
        assert validate_action("connection", "validate", _VALIDATE_ACTIONS) == "connection"

    def test_case_insensitive(self) -> None:
        assert validate_action("PORT_DIRECTION", "check", _CHECK_ACTIONS) == "port_direction"

    def test_unknown_action(self) -> None:
        with pytest.raises(ValidationError, match="Unknown"):
            validate_action("bogus", "validate", _VALIDATE_ACTIONS)

    def test_empty_action(self) -> None:
        with pytest.raises(ValidationError, match="requires"):
            validate_action("", "validate", _VALIDATE_ACTIONS)


class TestValidateDirectionAndRole:
    def test_direction(self) -> None:
        assert validate_direction("INOUT", "d") is PortDirection.INOUT

    def test_bad_direction(self) -> None:
        with pytest.raises(ValidationError):
            validate_direction("sideways", "d")

    def test_role(self) -> None:
        assert validate_role("Target") == "target"
        with pytest.raises(ValidationError):
            validate_role("both")


# ===================================================================
# Snapshot parsers
# ===================================================================


class TestParseNode:
    def test_type_and_variant(self) -> None:
        node = parse_node({"id": "n1", "type": "flowchart-terminal", "variant": "start"}, 0)
        assert node.type == "flowchart-terminal"
        assert node.variant == "start"

    def test_symbol_id_alias(self) -> None:
        assert parse_node({"id": "n1", "symbol_id": "bpmn-task"}, 0).type == "bpmn-task"

    def test_variant_from_properties(self) -> None:
        node = parse_node({"id": "n1", "type": "x", "properties": {"variant": "end"}}, 0)
        assert node.variant == "end"

    def test_missing_type(self) -> None:
        with pytest.raises(ValidationError, match="'type'"):
            parse_node({"id": "n1"}, 3)

    def test_not_a_dict(self) -> None:
        with pytest.raises(ValidationError, match="index 2"):
            parse_node("n1", 2)


class TestParseEdge:
    def test_default_id(self) -> None:
        edge = parse_edge({"source": "a", "target": "b"}, 4)
        assert edge.id == "e4"
        assert edge.source_port is None

    def test_ports(self) -> None:
        edge = parse_edge({"id": "x", "source": "a", "target": "b", "source_port": "yes"}, 0)
        assert edge.id == "x"
        assert edge.source_port == "yes"

    def test_missing_target(self) -> None:
        with pytest.raises(ValidationError, match="'target'"):
            parse_edge({"source": "a"}, 0)


class TestParseConnection:
    def test_valid(self) -> None:
        info = parse_connection({"source": "a", "target": "b", "target_port": "in"})
        assert info.source_node_id == "a"
        assert info.target_port_id == "in"

    def test_none(self) -> None:
        with pytest.raises(ValidationError, match="connection"):
            parse_connection(None)


# ===================================================================
# Catalog parsers
# ===================================================================


class TestParseCatalog:
    def test_port(self) -> None:
        port = parse_port({"id": "p", "anchor": "east", "direction": "out",
                           "max_connections": 2, "position": 0.3}, "p")
        assert port.anchor is Side.EAST
        assert port.max_connections == 2

    def test_port_position_out_of_range(self) -> None:
        with pytest.raises(ValidationError, match="position"):
            parse_port({"id": "p", "anchor": "NORTH", "direction": "in", "position": 2}, "p")

    def test_port_missing_key(self) -> None:
        with pytest.raises(CatalogError, match="'direction'"):
            parse_port({"id": "p", "anchor": "NORTH"}, "p")

    def test_symbol_variants(self) -> None:
        symbol = parse_symbol({
            "id": "custom-gate",
            "shape": "diamond",
            "tags": ["branching"],
            "variants": {
                "closed": {"ports": []},
                "open": {"name": "Open"},
            },
        }, 0)
        assert symbol.name == "custom-gate"
        assert symbol.variants["closed"].ports == ()
        assert symbol.variants["open"].ports is None
        assert symbol.variants["open"].name == "Open"

    def test_rule(self) -> None:
        rule = parse_rule({"from": "a", "to": ["b", "c"], "from_variant": "v",
                           "constraints": {"max_outgoing": 1}}, "r")
        assert rule.to == ("b", "c")
        assert rule.constraints.max_outgoing == 1
        assert rule.constraints.max_incoming is None

    def test_rule_missing_from(self) -> None:
        with pytest.raises(CatalogError, match="'from'"):
            parse_rule({"to": []}, "r")

    def test_notation_keeps_rule_order(self) -> None:
        notation = parse_notation({
            "id": "mini",
            "symbols": ["a", "b"],
            "connection_rules": [
                {"from": "a", "to": ["b"]},
                {"from": "a", "to": ["a"]},
            ],
            "validation": {
                "entry_points": [{"symbol": "a", "min": 1}],
                "branching": {"tags": ["fork"], "min_outgoing": 3},
                "rules": [{"id": "r1", "symbol": "b", "min_outgoing": 1}],
            },
        }, 0)
        assert [r.to for r in notation.connection_rules] == [("b",), ("a",)]
        assert notation.validation.entry_points[0].min == 1
        assert notation.validation.branching.min_outgoing == 3
        assert notation.validation.branching.rule_id == "decision-branches"
        assert notation.validation.rules[0].symbols == ("b",)
        assert notation.validation.orphan_rule_id == "no-orphans"
