"""Tests for the core data model."""

import dataclasses

import pytest

from notation_rules.models import (
    ConnectionRule,
    ConnectionConstraints,
    ConnectionValidation,
    ConnectionValidationContext,
    EdgeCompatibility,
    EdgeCompatibilityStatus,
    EdgeRef,
    EndpointRule,
    GraphNode,
    NodeConnectionInfo,
    PortDirection,
    RejectionReason,
    Severity,
    Side,
    SymbolDefinition,
    SymbolPort,
    SymbolVariant,
    ValidationResult,
)


class TestConnectionValidation:
    def test_ok(self) -> None:
        result = ConnectionValidation.ok()
        assert result.valid and not result.has_warning
        assert result.reason is None

    def test_warn(self) -> None:
        result = ConnectionValidation.warn("careful")
        assert result.valid and result.has_warning
        assert result.message == "careful"

    def test_reject(self) -> None:
        result = ConnectionValidation.reject(RejectionReason.SELF_CONNECTION, "no")
        assert not result.valid and not result.has_warning
        assert result.reason is RejectionReason.SELF_CONNECTION

    def test_invalid_with_warning_is_impossible(self) -> None:
        with pytest.raises(ValueError):
            ConnectionValidation(valid=False, has_warning=True)

    def test_to_dict(self) -> None:
        data = ConnectionValidation.reject(RejectionReason.MAX_CONNECTIONS_EXCEEDED, "full").to_dict()
        assert data == {
            "valid": False,
            "has_warning": False,
            "reason": "max-connections-exceeded",
            "message": "full",
        }
        assert ConnectionValidation.ok().to_dict() == {"valid": True, "has_warning": False}


class TestSymbols:
    def test_port_position_range(self) -> None:
        with pytest.raises(ValueError, match="0..1"):
            SymbolPort("p", Side.NORTH, PortDirection.IN, position=1.5)

    def test_symbol_is_read_only(self) -> None:
        symbol = SymbolDefinition(
            id="s", name="S", shape="rectangle",
            tags={"a"}, ports=[SymbolPort("p", Side.NORTH, PortDirection.IN)],
            variants={"v": SymbolVariant("V")},
        )
        assert isinstance(symbol.tags, frozenset)
        assert isinstance(symbol.ports, tuple)
        with pytest.raises(TypeError):
            symbol.variants["w"] = SymbolVariant("W")  # type: ignore[index]
        with pytest.raises(dataclasses.FrozenInstanceError):
            symbol.name = "T"  # type: ignore[misc]

    def test_symbol_to_dict_variants(self) -> None:
        symbol = SymbolDefinition(
            id="s", name="S", shape="rectangle",
            variants={"a": SymbolVariant("A"), "b": SymbolVariant("B", ports=())},
        )
        data = symbol.to_dict()
        assert data["variants"]["a"] == {"name": "A"}
        assert data["variants"]["b"] == {"name": "B", "ports": []}


class TestRules:
    def test_rule_to_dict(self) -> None:
        rule = ConnectionRule(
            from_symbol="a", to=("b",), from_variant="v",
            constraints=ConnectionConstraints(max_outgoing=1, requires_label=True),
            edge_style="flow",
        )
        assert rule.to_dict() == {
            "from": "a",
            "to": ["b"],
            "from_variant": "v",
            "constraints": {"max_outgoing": 1, "requires_label": True},
            "edge_style": "flow",
        }

    def test_endpoint_matches_variant(self) -> None:
        rule = EndpointRule("term", variant="start", min=1)
        assert rule.matches("term", "start")
        assert not rule.matches("term", "end")
        assert not rule.matches("term", None)
        assert EndpointRule("term").matches("term", "end")
        assert rule.describe() == "term (start)"


class TestContext:
    def test_without_pair(self) -> None:
        ctx = ConnectionValidationContext(
            notation_id="flowchart",
            node_info={"a": NodeConnectionInfo("a", "x")},
            existing_edges=[EdgeRef("a", "b"), EdgeRef("a", "b"), EdgeRef("b", "a"), EdgeRef("a", "c")],
        )
        trimmed = ctx.without_pair("a", "b")
        assert trimmed.existing_edges == (EdgeRef("b", "a"), EdgeRef("a", "c"))
        assert len(ctx.existing_edges) == 4
        assert trimmed.node_info["a"].symbol_id == "x"

    def test_node_info_is_read_only(self) -> None:
        ctx = ConnectionValidationContext(notation_id="n")
        with pytest.raises(TypeError):
            ctx.node_info["x"] = NodeConnectionInfo("x", "y")  # type: ignore[index]


class TestResults:
    def test_edge_compatibility_to_dict(self) -> None:
        ec = EdgeCompatibility("e1", EdgeCompatibilityStatus.WARNING, ConnectionValidation.warn("hm"))
        assert ec.to_dict()["status"] == "warning"
        assert ec.to_dict()["validation"]["message"] == "hm"

    def test_validation_result_to_dict(self) -> None:
        assert ValidationResult("no-orphans", Severity.WARNING, "lonely", "n1").to_dict() == {
            "rule_id": "no-orphans",
            "severity": "warning",
            "message": "lonely",
            "node_id": "n1",
        }

    def test_graph_node_variant(self) -> None:
        assert GraphNode("n", "t", properties={"variant": "end"}).variant == "end"
        assert GraphNode("n", "t", properties={"variant": ""}).variant is None
        assert GraphNode("n", "t").variant is None
