"""Tests for the shape, symbol and notation catalogs."""

import json

import pytest

from notation_rules.catalog import (
    build_catalog,
    catalog_from_dict,
    default_catalog,
    load_catalog_file,
)
from notation_rules.libraries import BUILTIN_LIBRARIES
from notation_rules.models import (
    ConnectionRule,
    NotationDefinition,
    PortDirection,
    Side,
    SymbolDefinition,
    SymbolLibrary,
    TerminalVariant,
)
from notation_rules.notations import BUILTIN_NOTATIONS, NotationCatalog
from notation_rules.shapes import BUILTIN_SHAPES, ShapeCatalog, anchor_point
from notation_rules.symbols import SymbolCatalog
from notation_rules.validation import CatalogError, ValidationError


# ===================================================================
# Shapes
# ===================================================================


class TestShapes:
    def test_builtin_ids(self) -> None:
        shapes = ShapeCatalog(BUILTIN_SHAPES)
        assert len(shapes) == 14
        for shape_id in ("rectangle", "diamond", "stadium", "cylinder", "subroutine"):
            assert shapes.has(shape_id)
        assert shapes.get("blob") is None

    def test_anchor_point_cardinal(self) -> None:
        assert anchor_point(Side.NORTH) == (0.5, 0)
        assert anchor_point(Side.SOUTH, 0.25) == (0.25, 1)
        assert anchor_point(Side.WEST, 0.35) == (0, 0.35)
        assert anchor_point(Side.EAST) == (1, 0.5)

    def test_anchor_point_corner_ignores_position(self) -> None:
        assert anchor_point(Side.NORTH_EAST, 0.9) == (1, 0)
        assert anchor_point(Side.SOUTH_WEST) == (0, 1)

    def test_anchor_point_accepts_side_names(self) -> None:
        assert anchor_point("NORTH") == (0.5, 0)
        assert anchor_point("SOUTH_EAST") == (1, 1)
        with pytest.raises(ValueError):
            anchor_point("UP")

    def test_duplicate_shape_id(self) -> None:
        with pytest.raises(CatalogError, match="Duplicate shape id 'rectangle'"):
            ShapeCatalog(BUILTIN_SHAPES + BUILTIN_SHAPES[:1])


# ===================================================================
# Symbols
# ===================================================================


class TestSymbols:
    def test_lookup_and_tags(self) -> None:
        symbols = default_catalog().symbols
        decision = symbols.get("flowchart-decision")
        assert decision is not None
        assert decision.shape == "diamond"
        assert "decision" in symbols.tags_of("flowchart-decision")
        assert symbols.tags_of("nope") == frozenset()
        assert any(s.id == "flowchart-decision" for s in symbols.by_tag("branching"))

    def test_by_library(self) -> None:
        symbols = default_catalog().symbols
        ids = [s.id for s in symbols.by_library("erd")]
        assert ids[0] == "erd-entity"
        assert symbols.by_library("missing") == []

    def test_variant_ports_replace_base(self) -> None:
        symbols = default_catalog().symbols
        start = symbols.resolve_ports("flowchart-terminal", TerminalVariant.START.value)
        assert [p.id for p in start] == ["out"]
        end = symbols.resolve_ports("flowchart-terminal", TerminalVariant.END.value)
        assert [(p.id, p.direction) for p in end] == [("in", PortDirection.IN)]

    def test_variant_without_ports_inherits(self) -> None:
        symbols = default_catalog().symbols
        base = symbols.resolve_ports("bpmn-task")
        assert symbols.resolve_ports("bpmn-task", "user") == base
        assert symbols.resolve_ports("bpmn-task", "no-such-variant") == base

    def test_default_ports_for_unknown_or_portless(self) -> None:
        symbols = default_catalog().symbols
        for symbol_id in ("does-not-exist", "bpmn-pool"):
            ports = symbols.resolve_ports(symbol_id)
            assert [(p.id, p.direction) for p in ports] == [
                ("in", PortDirection.IN),
                ("out", PortDirection.OUT),
            ]

    def test_unknown_shape_rejected(self) -> None:
        lib = SymbolLibrary("x", "X", (SymbolDefinition("x-1", "X", shape="blob"),))
        with pytest.raises(CatalogError, match="unknown shape 'blob'"):
            SymbolCatalog([lib], ShapeCatalog(BUILTIN_SHAPES))

    def test_duplicate_symbol_rejected(self) -> None:
        symbol = SymbolDefinition("dup", "Dup", shape="rectangle")
        libs = [SymbolLibrary("a", "A", (symbol,)), SymbolLibrary("b", "B", (symbol,))]
        with pytest.raises(CatalogError, match="Duplicate symbol id 'dup'"):
            SymbolCatalog(libs, ShapeCatalog(BUILTIN_SHAPES))


# ===================================================================
# Notations
# ===================================================================


class TestNotations:
    def test_builtin_notations(self) -> None:
        notations = default_catalog().notations
        assert [n.id for n in notations.all()] == ["flowchart", "bpmn", "erd", "code", "architecture"]
        assert notations.get("uml") is None

    def test_every_default_edge_style_exists(self) -> None:
        for notation in BUILTIN_NOTATIONS:
            assert notation.default_edge_style in notation.edge_styles

    def test_flowchart_terminal_rules_are_variant_specific(self) -> None:
        flowchart = default_catalog().notations.get("flowchart")
        terminal_rules = [r for r in flowchart.connection_rules if r.from_symbol == "flowchart-terminal"]
        assert [r.from_variant for r in terminal_rules] == ["start", "end"]
        assert terminal_rules[0].constraints.max_incoming == 0
        assert terminal_rules[1].to == ()

    def test_unknown_symbol_in_rule_rejected(self) -> None:
        symbols = default_catalog().symbols
        bad = NotationDefinition(
            id="bad",
            name="Bad",
            symbols=("flowchart-process",),
            connection_rules=(ConnectionRule("flowchart-process", ("ghost",)),),
        )
        with pytest.raises(CatalogError, match="ghost"):
            NotationCatalog([bad], symbols)

    def test_unknown_default_edge_style_rejected(self) -> None:
        bad = NotationDefinition(id="bad", name="Bad", symbols=(), default_edge_style="flow")
        with pytest.raises(CatalogError, match="default edge style"):
            NotationCatalog([bad], default_catalog().symbols)

    def test_duplicate_notation_rejected(self) -> None:
        with pytest.raises(CatalogError, match="Duplicate notation"):
            build_catalog(BUILTIN_SHAPES, BUILTIN_LIBRARIES, BUILTIN_NOTATIONS + BUILTIN_NOTATIONS[:1])


# ===================================================================
# Runtime catalogs
# ===================================================================


CUSTOM = {
    "library": {"id": "ops", "name": "Ops"},
    "symbols": [
        {"id": "ops-step", "shape": "rectangle"},
        {"id": "ops-fork", "shape": "diamond", "tags": ["fork"]},
    ],
    "notations": [
        {
            "id": "ops",
            "symbols": ["ops-step", "ops-fork"],
            "connection_rules": [
                {"from": "ops-step", "to": ["ops-fork"], "constraints": {"max_outgoing": 1}},
                {"from": "ops-fork", "to": ["ops-step"]},
            ],
            "validation": {"branching": {"tags": ["fork"], "rule_id": "fork-branches"}},
        },
    ],
}


class TestCatalogFromDict:
    def test_default_catalog_is_shared(self) -> None:
        assert default_catalog() is default_catalog()

    def test_extends_builtin(self) -> None:
        catalog = catalog_from_dict(CUSTOM)
        assert catalog.symbols.has("ops-step")
        assert catalog.symbols.has("flowchart-process")
        assert catalog.notations.get("ops").validation.branching.rule_id == "fork-branches"
        assert len(catalog.notations) == 6
        assert not default_catalog().symbols.has("ops-step")

    def test_replaces_notation_with_same_id(self) -> None:
        catalog = catalog_from_dict({
            "notations": [{"id": "flowchart", "symbols": ["flowchart-process"]}],
        })
        assert len(catalog.notations) == 5
        assert catalog.notations.get("flowchart").connection_rules == ()

    def test_duplicate_builtin_symbol_rejected(self) -> None:
        with pytest.raises(CatalogError, match="Duplicate symbol id"):
            catalog_from_dict({"symbols": [{"id": "flowchart-process", "shape": "rectangle"}]})

    def test_malformed_input(self) -> None:
        with pytest.raises(ValidationError):
            catalog_from_dict({"symbols": "nope"})

    def test_load_file(self, tmp_path) -> None:
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(CUSTOM), encoding="utf-8")
        catalog = load_catalog_file(path)
        assert catalog.notations.has("ops")

    def test_load_missing_file(self, tmp_path) -> None:
        with pytest.raises(CatalogError, match="Cannot read"):
            load_catalog_file(tmp_path / "missing.json")

    def test_load_invalid_json(self, tmp_path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CatalogError, match="not valid JSON"):
            load_catalog_file(path)
