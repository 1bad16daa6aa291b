"""
Notation Rules MCP Server: check diagram connections against notation rules.

Exposes 3 tools that let an LLM agent (or an editor backend) ask whether a
connection is legal, which existing edges broke after a change, and whether
a whole diagram satisfies its notation.

Tools:
  1. validate: rule engine: connection, edges, diagram
  2. check   : primitives: port_direction, max_connections
  3. inspect : read-only catalog: notations, notation, symbols, symbol, shapes

A JSON file named by the NOTATION_RULES_CATALOG environment variable is
layered over the built-in catalog at startup.
"""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from typing import Any

from mcp.server.fastmcp import FastMCP

from notation_rules.catalog import Catalog, default_catalog, load_catalog_file
from notation_rules.compatibility import CompatibilityReport, build_context
from notation_rules.connections import (
    check_max_connections,
    check_port_direction,
    validate_connection,
)
from notation_rules.diagram import validate_diagram
from notation_rules.models import EdgeRef, GraphEdge, GraphNode, Severity
from notation_rules.shapes import anchor_point
from notation_rules.validation import (
    ValidationError,
    parse_connection,
    parse_edge,
    parse_node,
    validate_action,
    validate_direction,
    validate_list,
    validate_non_empty_string,
    validate_optional_int,
    validate_optional_string,
    validate_role,
    _CHECK_ACTIONS,
    _INSPECT_ACTIONS,
    _VALIDATE_ACTIONS,
)

# ---------------------------------------------------------------------------
# Logging: FastMCP INFO chatter is kept off stderr.
# ---------------------------------------------------------------------------
logging.getLogger("mcp.server").setLevel(logging.WARNING)
logger = logging.getLogger("notation-rules")

CATALOG_ENV = "NOTATION_RULES_CATALOG"

# ---------------------------------------------------------------------------
# MCP Server
# ---------------------------------------------------------------------------
mcp = FastMCP(
    "notation-rules",
    instructions=(
        "MCP server that validates diagram connections against notation rules\n"
        "(flowchart, bpmn, erd, code, architecture).\n\n"
        "=== ONLY 3 TOOLS: use the 'action' parameter to pick the operation ===\n\n"
        "1. validate(action, ...): connection (may this edge be added?),\n"
        "   edges (re-check every existing edge), diagram (structural invariants).\n"
        "2. check(action, ...): primitives: port_direction, max_connections.\n"
        "3. inspect(action, ...): catalog: notations, notation, symbols, symbol, shapes.\n\n"
        "=== INPUT SHAPES ===\n"
        "- nodes: [{\"id\": \"n1\", \"type\": \"flowchart-process\", \"variant\": \"start\"?}]\n"
        "- edges: [{\"id\": \"e1\"?, \"source\": \"n1\", \"target\": \"n2\",\n"
        "           \"source_port\": \"out\"?, \"target_port\": \"in\"?}]\n"
        "- connection: {\"source\": \"n1\", \"target\": \"n2\", \"source_port\"?, \"target_port\"?}\n\n"
        "=== RULES ===\n"
        "- A rejected connection has valid=false and a reason.\n"
        "- Unknown nodes and notations are allowed with a warning; unknown ports skip port checks.\n"
        "- Use inspect(action='notation') to see which symbols may connect.\n"
    ),
)


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    """Return the active catalog: built-ins plus the optional JSON overlay."""
    path = os.environ.get(CATALOG_ENV, "").strip()
    if not path:
        return default_catalog()
    logger.info("Loading catalog overlay from %s", path)
    return load_catalog_file(path)


def _parse_nodes(nodes: list[dict[str, Any]] | None) -> list[GraphNode]:
    return [parse_node(n, i) for i, n in enumerate(validate_list(nodes or [], "nodes"))]


def _parse_edges(edges: list[dict[str, Any]] | None) -> list[GraphEdge]:
    return [parse_edge(e, i) for i, e in enumerate(validate_list(edges or [], "edges"))]


# ===================================================================
# RESOURCES: catalog overview for the LLM
# ===================================================================

@mcp.resource("notation://catalog/notations")
def notation_catalog() -> str:
    """Return every notation with its symbols and connection rules."""
    try:
        catalog = get_catalog()
    except ValidationError as exc:
        return f"Error: {exc.message}"
    lines: list[str] = []
    for notation in catalog.notations.all():
        lines.append(f"{notation.id}: {notation.name}")
        lines.append(f"  symbols: {', '.join(notation.symbols)}")
        for rule in notation.connection_rules:
            source = f"{rule.from_symbol} ({rule.from_variant})" if rule.from_variant else rule.from_symbol
            targets = ", ".join(rule.to) if rule.to else "(none)"
            lines.append(f"  {source} -> {targets}")
    return "Available notations:\n" + "\n".join(lines)


# ===================================================================
# TOOL 1: validate: rule engine
# ===================================================================

@mcp.tool()
def validate(
    action: str,
    notation_id: str = "",
    nodes: list[dict[str, Any]] | None = None,
    edges: list[dict[str, Any]] | None = None,
    connection: dict[str, Any] | None = None,
) -> str:
    """Validate connections and diagrams against a notation.

    Actions:
      connection: May a new edge be added? Params: notation_id, nodes, edges
                   (existing), connection.
      edges     : Re-check every existing edge, e.g. after a node changed type.
                   Params: notation_id, nodes, edges.
      diagram   : Check entry/exit points, branching, orphans and notation
                   rules. Params: notation_id, nodes, edges.

    Args:
        action: One of: connection, edges, diagram.
        notation_id: Notation to validate against (flowchart, bpmn, erd, code,
                     architecture, or a custom one).
        nodes: [{"id", "type", "variant"?, "label"?, "properties"?}].
        edges: [{"id"?, "source", "target", "source_port"?, "target_port"?}].
        connection: {"source", "target", "source_port"?, "target_port"?}.

    Returns:
        JSON result.
    """
    try:
        action = validate_action(action, "validate", _VALIDATE_ACTIONS)
        notation_id = validate_non_empty_string(notation_id, "notation_id")
        parsed_nodes = _parse_nodes(nodes)
        parsed_edges = _parse_edges(edges)
        catalog = get_catalog()
    except ValidationError as exc:
        return f"Error: {exc.message}"

    if action == "connection":
        try:
            info = parse_connection(connection)
        except ValidationError as exc:
            return f"Error: {exc.message}"
        context = build_context(notation_id, parsed_nodes, parsed_edges)
        result = validate_connection(info, context, catalog)
        if not result.valid or result.has_warning:
            logger.debug("Connection %s -> %s: %s", info.source_node_id, info.target_node_id,
                         result.message)
        return json.dumps(result.to_dict(), indent=2)

    if action == "edges":
        context = build_context(notation_id, parsed_nodes, parsed_edges)
        report = CompatibilityReport.evaluate(parsed_edges, context, catalog)
        return json.dumps(report.to_dict(), indent=2)

    if action == "diagram":
        results = validate_diagram(notation_id, parsed_nodes, parsed_edges, catalog)
        return json.dumps({
            "valid": not any(r.severity is Severity.ERROR for r in results),
            "results": [r.to_dict() for r in results],
        }, indent=2)

    return f"Error: unknown validate action '{action}'. Use: connection, edges, diagram."


# ===================================================================
# TOOL 2: check: primitives
# ===================================================================

@mcp.tool()
def check(
    action: str,
    source_direction: str = "",
    target_direction: str = "",
    node_id: str = "",
    port_id: str = "",
    max_connections: int | None = None,
    role: str = "source",
    edges: list[dict[str, Any]] | None = None,
) -> str:
    """Run a single connection check in isolation.

    Actions:
      port_direction : Can a port of source_direction feed one of
                        target_direction? Params: source_direction, target_direction.
      max_connections: Has a node (optionally a port) reached its limit?
                        Params: node_id, port_id, max_connections, role, edges.

    Args:
        action: One of: port_direction, max_connections.
        source_direction: in, out or inout.
        target_direction: in, out or inout.
        node_id: Node whose edges are counted.
        port_id: Optional port; edges recording another port are not counted.
        max_connections: Limit (omit for unlimited).
        role: source (count outgoing) or target (count incoming).
        edges: Existing edges [{"source", "target", "source_port"?, "target_port"?}].

    Returns:
        JSON result.
    """
    try:
        action = validate_action(action, "check", _CHECK_ACTIONS)
    except ValidationError as exc:
        return f"Error: {exc.message}"

    if action == "port_direction":
        try:
            src = validate_direction(source_direction, "source_direction")
            tgt = validate_direction(target_direction, "target_direction")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        return json.dumps(check_port_direction(src, tgt).to_dict(), indent=2)

    if action == "max_connections":
        try:
            node_id = validate_non_empty_string(node_id, "node_id")
            port = validate_optional_string(port_id or None, "port_id")
            limit = validate_optional_int(max_connections, "max_connections", min_val=0)
            role = validate_role(role)
            refs = [
                EdgeRef(e.source, e.target, e.source_port, e.target_port, e.id)
                for e in _parse_edges(edges)
            ]
        except ValidationError as exc:
            return f"Error: {exc.message}"
        result = check_max_connections(node_id, port, limit, refs, role)
        return json.dumps(result.to_dict(), indent=2)

    return f"Error: unknown check action '{action}'. Use: port_direction, max_connections."


# ===================================================================
# TOOL 3: inspect: catalog
# ===================================================================

@mcp.tool()
def inspect(
    action: str,
    notation_id: str = "",
    symbol_id: str = "",
) -> str:
    """Read-only inspection of the notation catalog.

    Actions:
      notations: List notations with symbol and rule counts.
      notation : Full definition of one notation. Params: notation_id.
      symbols  : List symbols, optionally only those of notation_id.
      symbol   : Full definition of one symbol. Params: symbol_id.
      shapes   : List shapes with sizes and port anchor points.

    Args:
        action: One of: notations, notation, symbols, symbol, shapes.
        notation_id: Notation id (notation, symbols).
        symbol_id: Symbol id (symbol).

    Returns:
        JSON data.
    """
    try:
        action = validate_action(action, "inspect", _INSPECT_ACTIONS)
        catalog = get_catalog()
    except ValidationError as exc:
        return f"Error: {exc.message}"

    if action == "notations":
        return json.dumps([
            {
                "id": n.id,
                "name": n.name,
                "description": n.description,
                "symbols": len(n.symbols),
                "rules": len(n.connection_rules),
            }
            for n in catalog.notations.all()
        ], indent=2)

    if action == "notation":
        try:
            notation_id = validate_non_empty_string(notation_id, "notation_id")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        notation = catalog.notations.get(notation_id)
        if notation is None:
            return f"Error: notation '{notation_id}' not found."
        data = notation.to_dict()
        data["edge_styles"] = {key: style.name for key, style in notation.edge_styles.items()}
        v = notation.validation
        data["validation"] = {
            "entry_points": [e.describe() for e in v.entry_points],
            "exit_points": [e.describe() for e in v.exit_points],
            "rules": [r.id for r in v.rules]
            + ([v.branching.rule_id] if v.branching else [])
            + [v.orphan_rule_id],
        }
        return json.dumps(data, indent=2)

    if action == "symbols":
        if notation_id:
            notation = catalog.notations.get(notation_id)
            if notation is None:
                return f"Error: notation '{notation_id}' not found."
            symbols = [s for s in (catalog.symbols.get(i) for i in notation.symbols) if s]
        else:
            symbols = catalog.symbols.all()
        return json.dumps([
            {"id": s.id, "name": s.name, "shape": s.shape, "tags": sorted(s.tags)}
            for s in symbols
        ], indent=2)

    if action == "symbol":
        try:
            symbol_id = validate_non_empty_string(symbol_id, "symbol_id")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        symbol = catalog.symbols.get(symbol_id)
        if symbol is None:
            return f"Error: symbol '{symbol_id}' not found."
        data = symbol.to_dict()
        data["effective_ports"] = [p.to_dict() for p in catalog.symbols.resolve_ports(symbol.id)]
        return json.dumps(data, indent=2)

    if action == "shapes":
        return json.dumps([
            {
                "id": s.id,
                "name": s.name,
                "kind": s.kind,
                "default_size": [s.default_size.width, s.default_size.height],
                "anchors": [
                    {"side": a.side.value, "point": list(anchor_point(a.side, a.position))}
                    for a in s.port_anchors
                ],
            }
            for s in catalog.shapes.all()
        ], indent=2)

    return f"Error: unknown inspect action '{action}'. Use: notations, notation, symbols, symbol, shapes."


# ===================================================================
# Entry point
# ===================================================================

def main() -> None:
    """Run the MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()
