"""
Notation catalog: diagram dialects and their connection rules.

A notation lists the symbols it uses, an ordered list of connection rules
(the first rule whose targets contain a symbol wins) and the graph-wide
invariants checked by the diagram validator.
"""

from __future__ import annotations

from typing import Iterable, Optional

from notation_rules.models import (
    BranchingRule,
    ConnectionConstraints,
    ConnectionRule,
    DiagramRule,
    EdgeStyle,
    EndpointRule,
    NotationDefinition,
    NotationValidation,
    TerminalVariant,
)
from notation_rules.symbols import SymbolCatalog
from notation_rules.validation import CatalogError


# ---------------------------------------------------------------------------
# Flowchart (ISO 5807)
# ---------------------------------------------------------------------------

_FLOW_TARGETS = (
    "flowchart-process",
    "flowchart-decision",
    "flowchart-io",
    "flowchart-document",
    "flowchart-predefined",
    "flowchart-terminal",
    "flowchart-connector",
)

FLOWCHART_NOTATION = NotationDefinition(
    id="flowchart",
    name="Flowchart",
    description="Standard flowchart notation based on ISO 5807",
    symbols=(
        "flowchart-terminal",
        "flowchart-process",
        "flowchart-decision",
        "flowchart-io",
        "flowchart-document",
        "flowchart-predefined",
        "flowchart-connector",
    ),
    edge_styles={"flow": EdgeStyle(name="Flow")},
    default_edge_style="flow",
    connection_rules=(
        # Start terminal: outgoing only
        ConnectionRule(
            from_symbol="flowchart-terminal",
            from_variant=TerminalVariant.START.value,
            to=("flowchart-process", "flowchart-decision", "flowchart-io", "flowchart-predefined"),
            constraints=ConnectionConstraints(max_outgoing=1, max_incoming=0),
        ),
        # End terminal: incoming only
        ConnectionRule(
            from_symbol="flowchart-terminal",
            from_variant=TerminalVariant.END.value,
            to=(),
            constraints=ConnectionConstraints(max_outgoing=0),
        ),
        ConnectionRule(
            from_symbol="flowchart-process",
            to=_FLOW_TARGETS,
            constraints=ConnectionConstraints(max_outgoing=1),
        ),
        ConnectionRule(
            from_symbol="flowchart-decision",
            to=_FLOW_TARGETS,
            constraints=ConnectionConstraints(max_outgoing=3, requires_label=True),
        ),
        ConnectionRule(
            from_symbol="flowchart-io",
            to=_FLOW_TARGETS,
            constraints=ConnectionConstraints(max_outgoing=1),
        ),
        ConnectionRule(
            from_symbol="flowchart-document",
            to=("flowchart-process", "flowchart-decision", "flowchart-io",
                "flowchart-terminal", "flowchart-connector"),
            constraints=ConnectionConstraints(max_outgoing=1),
        ),
        ConnectionRule(
            from_symbol="flowchart-predefined",
            to=("flowchart-process", "flowchart-decision", "flowchart-io",
                "flowchart-document", "flowchart-terminal", "flowchart-connector"),
            constraints=ConnectionConstraints(max_outgoing=1),
        ),
        ConnectionRule(
            from_symbol="flowchart-connector",
            to=("flowchart-process", "flowchart-decision", "flowchart-io",
                "flowchart-predefined", "flowchart-connector"),
            constraints=ConnectionConstraints(max_outgoing=1, max_incoming=1),
        ),
    ),
    validation=NotationValidation(
        entry_points=(EndpointRule("flowchart-terminal", TerminalVariant.START.value, min=1, max=1),),
        exit_points=(EndpointRule("flowchart-terminal", TerminalVariant.END.value, min=1),),
        branching=BranchingRule(
            tags=frozenset({"decision"}),
            min_outgoing=2,
            description="Decisions must have at least 2 outgoing edges",
        ),
    ),
)


# ---------------------------------------------------------------------------
# BPMN 2.0
# ---------------------------------------------------------------------------

_BPMN_FLOW_TARGETS = (
    "bpmn-task",
    "bpmn-subprocess",
    "bpmn-end-event",
    "bpmn-intermediate-event",
    "bpmn-gateway-exclusive",
    "bpmn-gateway-parallel",
    "bpmn-gateway-inclusive",
)

BPMN_NOTATION = NotationDefinition(
    id="bpmn",
    name="BPMN",
    description="Business Process Model and Notation 2.0",
    symbols=(
        "bpmn-start-event",
        "bpmn-end-event",
        "bpmn-intermediate-event",
        "bpmn-task",
        "bpmn-subprocess",
        "bpmn-gateway-exclusive",
        "bpmn-gateway-parallel",
        "bpmn-gateway-inclusive",
        "bpmn-gateway-event",
        "bpmn-data-object",
        "bpmn-data-store",
        "bpmn-pool",
        "bpmn-lane",
    ),
    edge_styles={
        "sequence": EdgeStyle(name="Sequence Flow", stroke="#424242"),
        "message": EdgeStyle(name="Message Flow", line_style="dashed", stroke="#424242"),
        "association": EdgeStyle(name="Association", target_arrow="none", line_style="dotted",
                                 stroke="#9e9e9e", stroke_width=1),
    },
    default_edge_style="sequence",
    connection_rules=(
        ConnectionRule(
            from_symbol="bpmn-start-event",
            to=("bpmn-task", "bpmn-subprocess", "bpmn-gateway-exclusive", "bpmn-gateway-parallel",
                "bpmn-gateway-inclusive", "bpmn-gateway-event", "bpmn-intermediate-event"),
            constraints=ConnectionConstraints(max_outgoing=1, max_incoming=0),
            edge_style="sequence",
        ),
        ConnectionRule(
            from_symbol="bpmn-end-event",
            to=(),
            constraints=ConnectionConstraints(max_outgoing=0),
        ),
        ConnectionRule(
            from_symbol="bpmn-task",
            to=_BPMN_FLOW_TARGETS,
            constraints=ConnectionConstraints(max_outgoing=1),
            edge_style="sequence",
        ),
        ConnectionRule(
            from_symbol="bpmn-subprocess",
            to=_BPMN_FLOW_TARGETS,
            constraints=ConnectionConstraints(max_outgoing=1),
            edge_style="sequence",
        ),
        ConnectionRule(from_symbol="bpmn-gateway-exclusive", to=_BPMN_FLOW_TARGETS, edge_style="sequence"),
        ConnectionRule(from_symbol="bpmn-gateway-parallel", to=_BPMN_FLOW_TARGETS, edge_style="sequence"),
        ConnectionRule(from_symbol="bpmn-gateway-inclusive", to=_BPMN_FLOW_TARGETS, edge_style="sequence"),
        ConnectionRule(
            from_symbol="bpmn-gateway-event",
            to=("bpmn-intermediate-event", "bpmn-task"),
            edge_style="sequence",
        ),
        ConnectionRule(
            from_symbol="bpmn-intermediate-event",
            to=_BPMN_FLOW_TARGETS,
            constraints=ConnectionConstraints(max_outgoing=1),
            edge_style="sequence",
        ),
        # Data associations
        ConnectionRule(from_symbol="bpmn-task", to=("bpmn-data-object", "bpmn-data-store"),
                       edge_style="association"),
        ConnectionRule(from_symbol="bpmn-data-object", to=("bpmn-task",), edge_style="association"),
        ConnectionRule(from_symbol="bpmn-data-store", to=("bpmn-task",), edge_style="association"),
    ),
    validation=NotationValidation(
        entry_points=(EndpointRule("bpmn-start-event", min=1),),
        exit_points=(EndpointRule("bpmn-end-event", min=1),),
        branching=BranchingRule(
            tags=frozenset({"branching"}),
            min_outgoing=2,
            rule_id="gateway-branches",
            description="Exclusive gateways must split into at least 2 paths",
        ),
    ),
)


# ---------------------------------------------------------------------------
# ERD (Chen notation)
# ---------------------------------------------------------------------------

ERD_NOTATION = NotationDefinition(
    id="erd",
    name="Entity-Relationship Diagram",
    description="Entity-Relationship Diagram using Chen notation",
    symbols=("erd-entity", "erd-relationship", "erd-attribute", "erd-cardinality", "erd-isa"),
    edge_styles={
        "relationship": EdgeStyle(name="Relationship Line", target_arrow="none", stroke="#424242"),
        "attribute": EdgeStyle(name="Attribute Line", target_arrow="none", stroke="#90a4ae",
                               stroke_width=1),
        "inheritance": EdgeStyle(name="Inheritance Line", target_arrow="none", stroke="#c2185b"),
    },
    default_edge_style="relationship",
    connection_rules=(
        ConnectionRule(from_symbol="erd-entity", to=("erd-relationship",), edge_style="relationship"),
        ConnectionRule(from_symbol="erd-entity", to=("erd-attribute",), edge_style="attribute"),
        ConnectionRule(from_symbol="erd-relationship", to=("erd-entity",), edge_style="relationship"),
        ConnectionRule(from_symbol="erd-attribute", from_variant="composite", to=("erd-attribute",),
                       edge_style="attribute"),
        ConnectionRule(from_symbol="erd-isa", to=("erd-entity",), edge_style="inheritance"),
        ConnectionRule(
            from_symbol="erd-entity",
            to=("erd-isa",),
            constraints=ConnectionConstraints(max_outgoing=1),
            edge_style="inheritance",
        ),
    ),
    validation=NotationValidation(
        rules=(
            DiagramRule(
                id="relationship-binary",
                description="Relationships typically connect 2 entities",
                symbols=("erd-relationship",),
                min_outgoing=2,
            ),
        ),
    ),
)


# ---------------------------------------------------------------------------
# Code graph
# ---------------------------------------------------------------------------

CODE_NOTATION = NotationDefinition(
    id="code",
    name="Code Graph",
    description="Notation for visualizing code structure",
    symbols=(
        "code-function",
        "code-class",
        "code-module",
        "code-variable",
        "code-type",
        "code-namespace",
        "code-external",
    ),
    edge_styles={
        "calls": EdgeStyle(name="Function Call", stroke="#0288d1"),
        "imports": EdgeStyle(name="Import/Dependency", line_style="dashed", stroke="#388e3c"),
        "extends": EdgeStyle(name="Inheritance", target_arrow="triangle", stroke="#8e24aa",
                             stroke_width=2),
        "implements": EdgeStyle(name="Implements", target_arrow="triangle", line_style="dashed",
                                stroke="#43a047"),
        "uses": EdgeStyle(name="Uses/References", line_style="dotted", stroke="#757575",
                          stroke_width=1),
        "contains": EdgeStyle(name="Contains", target_arrow="none", stroke="#9e9e9e",
                              stroke_width=1),
    },
    default_edge_style="uses",
    connection_rules=(
        ConnectionRule(from_symbol="code-function", to=("code-function",), edge_style="calls"),
        ConnectionRule(from_symbol="code-class", to=("code-class",), edge_style="extends"),
        ConnectionRule(from_symbol="code-class", to=("code-type",), edge_style="implements"),
        ConnectionRule(from_symbol="code-module", to=("code-module", "code-external"),
                       edge_style="imports"),
        ConnectionRule(from_symbol="code-module", to=("code-function", "code-class", "code-variable"),
                       edge_style="contains"),
        ConnectionRule(from_symbol="code-class", to=("code-function", "code-variable"),
                       edge_style="contains"),
        ConnectionRule(from_symbol="code-namespace", to=("code-module", "code-class", "code-function"),
                       edge_style="contains"),
    ),
    validation=NotationValidation(
        rules=(
            DiagramRule(
                id="no-circular-inheritance",
                description="Inheritance cannot form cycles",
                symbols=("code-class",),
                acyclic=True,
            ),
        ),
    ),
)


# ---------------------------------------------------------------------------
# Architecture
# ---------------------------------------------------------------------------

ARCHITECTURE_NOTATION = NotationDefinition(
    id="architecture",
    name="Architecture Diagram",
    description="System architecture and infrastructure diagram notation",
    symbols=(
        "arch-service",
        "arch-database",
        "arch-queue",
        "arch-external-api",
        "arch-actor",
        "arch-load-balancer",
        "arch-container",
        "arch-cdn",
        "arch-storage",
        "arch-function",
    ),
    edge_styles={
        "sync": EdgeStyle(name="Synchronous Call", stroke="#424242"),
        "async": EdgeStyle(name="Asynchronous Message", line_style="dashed", stroke="#ff9800"),
        "data": EdgeStyle(name="Data Flow", stroke="#4caf50", stroke_width=2),
        "bidirectional": EdgeStyle(name="Bidirectional", source_arrow="arrow", stroke="#2196f3"),
    },
    default_edge_style="sync",
    connection_rules=(
        ConnectionRule(from_symbol="arch-actor", to=("arch-service", "arch-load-balancer", "arch-cdn"),
                       edge_style="sync"),
        ConnectionRule(from_symbol="arch-service",
                       to=("arch-service", "arch-external-api", "arch-function"), edge_style="sync"),
        ConnectionRule(from_symbol="arch-service", to=("arch-database", "arch-storage"),
                       edge_style="data"),
        ConnectionRule(from_symbol="arch-service", to=("arch-queue",), edge_style="async"),
        ConnectionRule(from_symbol="arch-queue", to=("arch-service", "arch-function"),
                       edge_style="async"),
        ConnectionRule(from_symbol="arch-load-balancer", to=("arch-service",), edge_style="sync"),
        ConnectionRule(from_symbol="arch-cdn", to=("arch-service", "arch-storage"), edge_style="sync"),
        ConnectionRule(
            from_symbol="arch-function",
            to=("arch-database", "arch-storage", "arch-queue", "arch-service"),
            edge_style="sync",
        ),
        ConnectionRule(
            from_symbol="arch-container",
            to=("arch-service", "arch-database", "arch-queue", "arch-function"),
            edge_style="data",
        ),
    ),
    validation=NotationValidation(
        rules=(
            DiagramRule(
                id="actor-entry",
                description="Actors should connect to entry points",
                symbols=("arch-actor",),
                must_connect_to=("arch-load-balancer", "arch-cdn", "arch-service"),
            ),
            DiagramRule(
                id="database-internal",
                description="Databases should not be directly exposed to actors",
                symbols=("arch-database",),
                not_directly_connected_to=("arch-actor",),
            ),
            DiagramRule(
                id="load-balancer-targets",
                description="Load balancers should have at least 2 targets",
                symbols=("arch-load-balancer",),
                min_outgoing=2,
            ),
        ),
    ),
)


BUILTIN_NOTATIONS: tuple[NotationDefinition, ...] = (
    FLOWCHART_NOTATION,
    BPMN_NOTATION,
    ERD_NOTATION,
    CODE_NOTATION,
    ARCHITECTURE_NOTATION,
)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

class NotationCatalog:
    """Read-only notation registry; every referenced symbol must exist."""

    def __init__(self, notations: Iterable[NotationDefinition], symbols: SymbolCatalog) -> None:
        self._notations: tuple[NotationDefinition, ...] = tuple(notations)
        self._by_id: dict[str, NotationDefinition] = {}
        for notation in self._notations:
            if notation.id in self._by_id:
                raise CatalogError(f"Duplicate notation id '{notation.id}'.")
            _check_symbols(notation, symbols)
            self._by_id[notation.id] = notation

    def get(self, notation_id: str) -> Optional[NotationDefinition]:
        return self._by_id.get(notation_id)

    def has(self, notation_id: str) -> bool:
        return notation_id in self._by_id

    def all(self) -> tuple[NotationDefinition, ...]:
        return self._notations

    def __len__(self) -> int:
        return len(self._notations)


def _check_symbols(notation: NotationDefinition, symbols: SymbolCatalog) -> None:
    referenced = set(notation.symbols)
    for rule in notation.connection_rules:
        referenced.add(rule.from_symbol)
        referenced.update(rule.to)
    missing = sorted(s for s in referenced if not symbols.has(s))
    if missing:
        raise CatalogError(
            f"Notation '{notation.id}' references unknown symbol(s): {', '.join(missing)}."
        )
    if notation.default_edge_style and notation.default_edge_style not in notation.edge_styles:
        raise CatalogError(
            f"Notation '{notation.id}' default edge style '{notation.default_edge_style}' is not defined."
        )
