"""
Built-in symbol libraries: flowchart, BPMN, ERD, code graph and architecture.
"""

from __future__ import annotations

from notation_rules.models import (
    PortDirection,
    Side,
    SymbolDefinition,
    SymbolLibrary,
    SymbolPort,
    SymbolVariant,
    TerminalVariant,
)

IN = PortDirection.IN
OUT = PortDirection.OUT
INOUT = PortDirection.INOUT


def _port(port_id: str, anchor: Side, direction: PortDirection, **kwargs) -> SymbolPort:
    return SymbolPort(id=port_id, anchor=anchor, direction=direction, **kwargs)


_FLOW_PORTS = (_port("in", Side.NORTH, IN), _port("out", Side.SOUTH, OUT))
_SIDE_FLOW_PORTS = (_port("in", Side.WEST, IN), _port("out", Side.EAST, OUT))
_ALL_SIDES_INOUT = (
    _port("n", Side.NORTH, INOUT),
    _port("s", Side.SOUTH, INOUT),
    _port("e", Side.EAST, INOUT),
    _port("w", Side.WEST, INOUT),
)


# ---------------------------------------------------------------------------
# Flowchart (ISO 5807)
# ---------------------------------------------------------------------------

FLOWCHART_SYMBOLS = SymbolLibrary(
    id="flowchart",
    name="Flowchart Symbols",
    description="Standard flowchart symbols based on ISO 5807",
    symbols=(
        SymbolDefinition(
            id="flowchart-terminal",
            name="Terminal",
            description="Start or end of a flow",
            shape="stadium",
            tags=frozenset({"terminal", "control-flow"}),
            ports=_FLOW_PORTS,
            variants={
                TerminalVariant.START.value: SymbolVariant(
                    name="Start", ports=(_port("out", Side.SOUTH, OUT),),
                    defaults={"fill": "#e8f5e9"},
                ),
                TerminalVariant.END.value: SymbolVariant(
                    name="End", ports=(_port("in", Side.NORTH, IN),),
                    defaults={"fill": "#ffebee"},
                ),
            },
        ),
        SymbolDefinition(
            id="flowchart-process",
            name="Process",
            description="A processing step",
            shape="rectangle",
            tags=frozenset({"process", "action"}),
            ports=_FLOW_PORTS,
        ),
        SymbolDefinition(
            id="flowchart-decision",
            name="Decision",
            description="A branch point with labeled outcomes",
            shape="diamond",
            tags=frozenset({"decision", "branching", "control-flow"}),
            ports=(
                _port("in", Side.NORTH, IN),
                _port("yes", Side.SOUTH, OUT),
                _port("no", Side.EAST, OUT),
                _port("alt", Side.WEST, OUT),
            ),
        ),
        SymbolDefinition(
            id="flowchart-io",
            name="Input/Output",
            description="Data entering or leaving the flow",
            shape="parallelogram",
            tags=frozenset({"io", "data"}),
            ports=_FLOW_PORTS,
        ),
        SymbolDefinition(
            id="flowchart-document",
            name="Document",
            description="A printed or generated document",
            shape="document",
            tags=frozenset({"document", "data"}),
            ports=_FLOW_PORTS,
        ),
        SymbolDefinition(
            id="flowchart-predefined",
            name="Predefined Process",
            description="A named subroutine defined elsewhere",
            shape="subroutine",
            tags=frozenset({"process", "subroutine"}),
            ports=_FLOW_PORTS,
        ),
        SymbolDefinition(
            id="flowchart-connector",
            name="Connector",
            description="On-page jump between flow segments",
            shape="ellipse",
            tags=frozenset({"connector", "control-flow"}),
            ports=(_port("in", Side.NORTH, IN, max_connections=1),
                   _port("out", Side.SOUTH, OUT, max_connections=1)),
            defaults={"width": 30, "height": 30},
        ),
    ),
)


# ---------------------------------------------------------------------------
# BPMN 2.0
# ---------------------------------------------------------------------------

_GATEWAY_PORTS = (
    _port("in", Side.WEST, IN),
    _port("out1", Side.EAST, OUT),
    _port("out2", Side.SOUTH, OUT),
    _port("out3", Side.NORTH, OUT),
)


def _gateway(symbol_id: str, name: str, description: str, tags: set[str],
             marker: str, stroke: str, ports: tuple[SymbolPort, ...] = _GATEWAY_PORTS
             ) -> SymbolDefinition:
    return SymbolDefinition(
        id=symbol_id,
        name=name,
        description=description,
        shape="diamond",
        tags=frozenset({"gateway"} | tags),
        ports=ports,
        defaults={"fill": "#ffffff", "stroke": stroke, "strokeWidth": 2,
                  "width": 50, "height": 50, "marker": marker},
    )


BPMN_SYMBOLS = SymbolLibrary(
    id="bpmn",
    name="BPMN Symbols",
    description="Business Process Model and Notation 2.0 symbols",
    symbols=(
        SymbolDefinition(
            id="bpmn-start-event", name="Start Event", description="Beginning of a process",
            shape="ellipse", tags=frozenset({"event", "start"}),
            ports=(_port("out", Side.EAST, OUT),),
            defaults={"fill": "#ffffff", "stroke": "#4caf50", "strokeWidth": 2, "width": 36, "height": 36},
        ),
        SymbolDefinition(
            id="bpmn-end-event", name="End Event", description="End of a process",
            shape="ellipse", tags=frozenset({"event", "end"}),
            ports=(_port("in", Side.WEST, IN),),
            defaults={"fill": "#ffffff", "stroke": "#f44336", "strokeWidth": 4, "width": 36, "height": 36},
        ),
        SymbolDefinition(
            id="bpmn-intermediate-event", name="Intermediate Event",
            description="Event occurring during process execution",
            shape="ellipse", tags=frozenset({"event", "intermediate"}),
            ports=_SIDE_FLOW_PORTS,
            variants={
                "catch": SymbolVariant(name="Catch Event", defaults={"stroke": "#ff9800"}),
                "throw": SymbolVariant(name="Throw Event", defaults={"stroke": "#9c27b0"}),
            },
        ),
        SymbolDefinition(
            id="bpmn-task", name="Task", description="A unit of work",
            shape="rectangle", tags=frozenset({"activity", "task"}),
            ports=_SIDE_FLOW_PORTS,
            variants={
                "user": SymbolVariant(name="User Task", defaults={"fill": "#e3f2fd", "icon": "user"}),
                "service": SymbolVariant(name="Service Task", defaults={"fill": "#f3e5f5", "icon": "gear"}),
                "script": SymbolVariant(name="Script Task", defaults={"fill": "#fff3e0", "icon": "code"}),
                "manual": SymbolVariant(name="Manual Task", defaults={"fill": "#e8f5e9", "icon": "hand"}),
            },
        ),
        SymbolDefinition(
            id="bpmn-subprocess", name="Sub-Process",
            description="A compound activity containing other activities",
            shape="rectangle", tags=frozenset({"activity", "subprocess", "container"}),
            ports=_SIDE_FLOW_PORTS, is_container=True,
        ),
        _gateway("bpmn-gateway-exclusive", "Exclusive Gateway", "XOR split/join - one path only",
                 {"branching", "exclusive", "xor"}, "X", "#ff9800"),
        _gateway("bpmn-gateway-parallel", "Parallel Gateway", "AND split/join - all paths",
                 {"parallel", "and"}, "+", "#4caf50"),
        _gateway("bpmn-gateway-inclusive", "Inclusive Gateway", "OR split/join - one or more paths",
                 {"inclusive", "or"}, "O", "#9c27b0"),
        _gateway("bpmn-gateway-event", "Event-Based Gateway", "Path determined by events",
                 {"event"}, "pentagon", "#2196f3", ports=_GATEWAY_PORTS[:3]),
        SymbolDefinition(
            id="bpmn-data-object", name="Data Object",
            description="Data used or produced by activities",
            shape="document", tags=frozenset({"data", "artifact"}),
            ports=(_port("ref", Side.WEST, INOUT),),
        ),
        SymbolDefinition(
            id="bpmn-data-store", name="Data Store", description="Persistent data storage",
            shape="cylinder", tags=frozenset({"data", "storage", "artifact"}),
            ports=(_port("ref", Side.NORTH, INOUT),),
        ),
        SymbolDefinition(
            id="bpmn-pool", name="Pool", description="A participant in a process",
            shape="rectangle", tags=frozenset({"container", "participant", "pool"}),
            is_container=True,
        ),
        SymbolDefinition(
            id="bpmn-lane", name="Lane", description="A subdivision of a pool",
            shape="rectangle", tags=frozenset({"container", "lane"}),
            is_container=True,
        ),
    ),
)


# ---------------------------------------------------------------------------
# ERD (Chen notation)
# ---------------------------------------------------------------------------

ERD_SYMBOLS = SymbolLibrary(
    id="erd",
    name="ERD Symbols",
    description="Entity-Relationship Diagram symbols using Chen notation",
    symbols=(
        SymbolDefinition(
            id="erd-entity", name="Entity",
            description="A table, object, or thing being modeled",
            shape="rectangle", tags=frozenset({"entity", "table", "data"}),
            ports=_ALL_SIDES_INOUT,
            variants={
                "strong": SymbolVariant(name="Strong Entity", defaults={"strokeWidth": 2}),
                "weak": SymbolVariant(name="Weak Entity",
                                      defaults={"strokeWidth": 2, "strokeDasharray": "5,3"}),
            },
        ),
        SymbolDefinition(
            id="erd-relationship", name="Relationship",
            description="Relationship between entities",
            shape="diamond", tags=frozenset({"relationship", "association"}),
            ports=_ALL_SIDES_INOUT,
            variants={
                "identifying": SymbolVariant(name="Identifying Relationship",
                                             defaults={"strokeWidth": 3}),
            },
        ),
        SymbolDefinition(
            id="erd-attribute", name="Attribute",
            description="A property or field of an entity",
            shape="ellipse", tags=frozenset({"attribute", "field", "property"}),
            ports=(_port("entity", Side.WEST, OUT), _port("sub", Side.EAST, IN)),
            variants={
                "primary-key": SymbolVariant(name="Primary Key",
                                             defaults={"textDecoration": "underline"}),
                "derived": SymbolVariant(name="Derived Attribute",
                                         defaults={"strokeDasharray": "5,3"}),
                "multivalued": SymbolVariant(name="Multivalued Attribute",
                                             defaults={"strokeWidth": 3}),
                "composite": SymbolVariant(name="Composite Attribute",
                                           defaults={"fill": "#f5f5f5"}),
            },
        ),
        SymbolDefinition(
            id="erd-cardinality", name="Cardinality",
            description="Relationship cardinality marker",
            shape="ellipse", tags=frozenset({"cardinality", "constraint"}),
            variants={
                "one": SymbolVariant(name="One"),
                "many": SymbolVariant(name="Many"),
                "zero-one": SymbolVariant(name="Zero or One"),
                "zero-many": SymbolVariant(name="Zero or Many"),
                "one-many": SymbolVariant(name="One or Many"),
            },
        ),
        SymbolDefinition(
            id="erd-isa", name="ISA (Generalization)",
            description="Inheritance/specialization relationship",
            shape="triangle", tags=frozenset({"generalization", "inheritance", "isa"}),
            ports=(
                _port("parent", Side.NORTH, OUT),
                _port("child1", Side.SOUTH, IN, position=0.25),
                _port("child2", Side.SOUTH, IN, position=0.75),
            ),
        ),
    ),
)


# ---------------------------------------------------------------------------
# Code graph
# ---------------------------------------------------------------------------

_CODE_PORTS = (_port("in", Side.WEST, IN), _port("out", Side.EAST, OUT))

CODE_SYMBOLS = SymbolLibrary(
    id="code",
    name="Code Graph Symbols",
    description="Symbols for visualizing code structure",
    symbols=(
        SymbolDefinition(
            id="code-function", name="Function", shape="rectangle",
            tags=frozenset({"code", "callable"}), ports=_CODE_PORTS,
            variants={
                "async": SymbolVariant(name="Async Function", defaults={"strokeDasharray": "4,2"}),
                "method": SymbolVariant(name="Method"),
            },
        ),
        SymbolDefinition(
            id="code-class", name="Class", shape="rectangle",
            tags=frozenset({"code", "type", "container"}), ports=_CODE_PORTS,
            variants={"abstract": SymbolVariant(name="Abstract Class")},
        ),
        SymbolDefinition(
            id="code-module", name="Module", shape="note",
            tags=frozenset({"code", "module", "container"}), ports=_CODE_PORTS,
        ),
        SymbolDefinition(
            id="code-variable", name="Variable", shape="ellipse",
            tags=frozenset({"code", "value"}), ports=(_port("in", Side.WEST, IN),),
            variants={"constant": SymbolVariant(name="Constant")},
        ),
        SymbolDefinition(
            id="code-type", name="Type / Interface", shape="hexagon",
            tags=frozenset({"code", "type"}), ports=(_port("in", Side.WEST, IN),),
        ),
        SymbolDefinition(
            id="code-namespace", name="Namespace", shape="rectangle",
            tags=frozenset({"code", "container"}), ports=(_port("out", Side.EAST, OUT),),
            is_container=True,
        ),
        SymbolDefinition(
            id="code-external", name="External Dependency", shape="cloud",
            tags=frozenset({"code", "external"}), ports=(_port("in", Side.WEST, IN),),
        ),
    ),
)


# ---------------------------------------------------------------------------
# Architecture
# ---------------------------------------------------------------------------

ARCHITECTURE_SYMBOLS = SymbolLibrary(
    id="architecture",
    name="Architecture Symbols",
    description="System architecture and infrastructure symbols",
    symbols=(
        SymbolDefinition(
            id="arch-service", name="Service", shape="rectangle",
            tags=frozenset({"service", "compute"}), ports=_ALL_SIDES_INOUT,
            variants={
                "web": SymbolVariant(name="Web Service"),
                "worker": SymbolVariant(name="Background Worker"),
            },
        ),
        SymbolDefinition(
            id="arch-database", name="Database", shape="cylinder",
            tags=frozenset({"data", "storage", "database"}), ports=_ALL_SIDES_INOUT,
        ),
        SymbolDefinition(
            id="arch-queue", name="Queue", shape="rectangle",
            tags=frozenset({"messaging", "async"}), ports=_SIDE_FLOW_PORTS,
        ),
        SymbolDefinition(
            id="arch-external-api", name="External API", shape="cloud",
            tags=frozenset({"external", "api"}), ports=(_port("in", Side.WEST, IN),),
        ),
        SymbolDefinition(
            id="arch-actor", name="Actor", shape="actor",
            tags=frozenset({"actor", "user"}), ports=(_port("out", Side.EAST, OUT),),
        ),
        SymbolDefinition(
            id="arch-load-balancer", name="Load Balancer", shape="hexagon",
            tags=frozenset({"network", "routing"}), ports=_SIDE_FLOW_PORTS,
        ),
        SymbolDefinition(
            id="arch-container", name="Container", shape="rectangle",
            tags=frozenset({"container", "boundary"}), is_container=True,
        ),
        SymbolDefinition(
            id="arch-cdn", name="CDN", shape="cloud",
            tags=frozenset({"network", "edge"}), ports=_SIDE_FLOW_PORTS,
        ),
        SymbolDefinition(
            id="arch-storage", name="Object Storage", shape="cylinder",
            tags=frozenset({"data", "storage"}), ports=_ALL_SIDES_INOUT,
        ),
        SymbolDefinition(
            id="arch-function", name="Serverless Function", shape="trapezoid",
            tags=frozenset({"compute", "serverless"}), ports=_ALL_SIDES_INOUT,
        ),
    ),
)


BUILTIN_LIBRARIES: tuple[SymbolLibrary, ...] = (
    FLOWCHART_SYMBOLS,
    BPMN_SYMBOLS,
    ERD_SYMBOLS,
    CODE_SYMBOLS,
    ARCHITECTURE_SYMBOLS,
)
