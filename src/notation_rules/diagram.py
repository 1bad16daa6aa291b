"""
Diagram validator: graph-wide invariants of a notation.

Checks, in result order:
  - entry / exit point counts
  - minimum branching of decision-like symbols
  - orphan nodes (no incident edges)
  - notation-specific rules (min outgoing, required / forbidden neighbours,
    acyclic sub-graphs)
"""

from __future__ import annotations

from collections import Counter, defaultdict
from typing import Optional, Sequence

from notation_rules.catalog import Catalog, default_catalog
from notation_rules.models import (
    DiagramRule,
    EndpointRule,
    GraphEdge,
    GraphNode,
    Severity,
    ValidationResult,
)


def _error(rule_id: str, message: str, node_id: Optional[str] = None) -> ValidationResult:
    return ValidationResult(rule_id, Severity.ERROR, message, node_id)


def _warning(rule_id: str, message: str, node_id: Optional[str] = None) -> ValidationResult:
    return ValidationResult(rule_id, Severity.WARNING, message, node_id)


def _name(node: GraphNode) -> str:
    return f"'{node.label}'" if node.label else f"Node {node.id}"


# ---------------------------------------------------------------------------
# Endpoint counts
# ---------------------------------------------------------------------------

def _check_endpoints(
    kind: str,
    rules: Sequence[EndpointRule],
    nodes: Sequence[GraphNode],
) -> list[ValidationResult]:
    results: list[ValidationResult] = []
    for rule in rules:
        count = sum(1 for n in nodes if rule.matches(n.type, n.variant))
        if rule.min is not None and count < rule.min:
            results.append(_error(
                f"{kind}-point-min",
                f"Diagram needs at least {rule.min} {kind} point(s) of type "
                f"{rule.describe()}, found {count}",
            ))
        if rule.max is not None and count > rule.max:
            results.append(_error(
                f"{kind}-point-max",
                f"Diagram allows at most {rule.max} {kind} point(s) of type "
                f"{rule.describe()}, found {count}",
            ))
    return results


# ---------------------------------------------------------------------------
# Custom rules
# ---------------------------------------------------------------------------

def _find_cycle_starts(order: list[str], adj: dict[str, list[str]]) -> list[str]:
    """Return nodes closing a cycle (targets of back-edges), in discovery order."""
    WHITE, GRAY, BLACK = 0, 1, 2
    color: dict[str, int] = {n: WHITE for n in order}
    starts: list[str] = []

    for start in order:
        if color[start] != WHITE:
            continue
        color[start] = GRAY
        stack: list[tuple[str, int]] = [(start, 0)]
        while stack:
            u, idx = stack[-1]
            neighbors = adj.get(u, [])
            if idx < len(neighbors):
                stack[-1] = (u, idx + 1)
                v = neighbors[idx]
                if v not in color:
                    continue
                if color[v] == GRAY:
                    if v not in starts:
                        starts.append(v)
                elif color[v] == WHITE:
                    color[v] = GRAY
                    stack.append((v, 0))
            else:
                color[u] = BLACK
                stack.pop()

    return starts


def _check_rule(
    rule: DiagramRule,
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    outgoing: Counter,
    connected: set[str],
) -> list[ValidationResult]:
    by_id = {n.id: n for n in nodes}
    scoped = [n for n in nodes if n.type in rule.symbols]
    results: list[ValidationResult] = []

    if rule.min_outgoing is not None:
        for node in scoped:
            if outgoing[node.id] < rule.min_outgoing:
                results.append(_error(
                    rule.id,
                    f"{_name(node)} has {outgoing[node.id]} outgoing connection(s); "
                    f"at least {rule.min_outgoing} required"
                    + (f" ({rule.description})" if rule.description else ""),
                    node.id,
                ))

    if rule.must_connect_to:
        neighbours: dict[str, set[str]] = defaultdict(set)
        for e in edges:
            if e.source in by_id and e.target in by_id:
                neighbours[e.source].add(by_id[e.target].type)
                neighbours[e.target].add(by_id[e.source].type)
        wanted = set(rule.must_connect_to)
        for node in scoped:
            if node.id in connected and not neighbours[node.id] & wanted:
                results.append(_warning(
                    rule.id,
                    f"{_name(node)} should connect to one of: {', '.join(rule.must_connect_to)}",
                    node.id,
                ))

    if rule.not_directly_connected_to:
        forbidden = set(rule.not_directly_connected_to)
        for e in edges:
            src, tgt = by_id.get(e.source), by_id.get(e.target)
            if src is None or tgt is None:
                continue
            for node, other in ((src, tgt), (tgt, src)):
                if node.type in rule.symbols and other.type in forbidden:
                    results.append(_warning(
                        rule.id,
                        f"{_name(node)} should not be directly connected to {other.type} "
                        f"({_name(other)})",
                        node.id,
                    ))

    if rule.acyclic:
        scoped_ids = [n.id for n in scoped]
        members = set(scoped_ids)
        adj: dict[str, list[str]] = defaultdict(list)
        for e in edges:
            if e.source in members and e.target in members:
                adj[e.source].append(e.target)
        for node_id in _find_cycle_starts(scoped_ids, adj):
            results.append(_error(
                rule.id,
                f"{_name(by_id[node_id])} is part of a cycle"
                + (f" ({rule.description})" if rule.description else ""),
                node_id,
            ))

    return results


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def validate_diagram(
    notation_id: str,
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    catalog: Optional[Catalog] = None,
) -> list[ValidationResult]:
    """Check a whole diagram against its notation. An empty list means valid."""
    catalog = catalog or default_catalog()
    notation = catalog.notations.get(notation_id)
    if notation is None:
        return [_error("unknown-notation", f"Unknown notation: {notation_id}")]

    validation = notation.validation
    outgoing: Counter = Counter(e.source for e in edges)
    connected = {e.source for e in edges} | {e.target for e in edges}

    results = _check_endpoints("entry", validation.entry_points, nodes)
    results += _check_endpoints("exit", validation.exit_points, nodes)

    branching = validation.branching
    if branching is not None:
        for node in nodes:
            if not catalog.symbols.tags_of(node.type) & branching.tags:
                continue
            if outgoing[node.id] < branching.min_outgoing:
                results.append(_error(
                    branching.rule_id,
                    f"{_name(node)} needs at least {branching.min_outgoing} outgoing branches, "
                    f"has {outgoing[node.id]}",
                    node.id,
                ))

    for node in nodes:
        if node.id not in connected:
            results.append(_warning(
                validation.orphan_rule_id, f"{_name(node)} is not connected", node.id
            ))

    for rule in validation.rules:
        results += _check_rule(rule, nodes, edges, outgoing, connected)

    return results
