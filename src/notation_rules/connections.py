"""
Connection validator: is a single proposed edge legal?

``validate_connection`` runs a fixed sequence of checks and stops at the
first rejection:

  1. self-connection
  2. node resolution (unknown nodes are allowed with a warning)
  3. notation resolution (unknown notations are allowed with a warning)
  4. symbol rules: allowed targets, max outgoing, target max incoming
  5. ports: direction and per-port capacity

Rejections and warnings are returned as data. Nothing here raises.
"""

from __future__ import annotations

from typing import Iterable, Optional

from notation_rules.catalog import Catalog, default_catalog
from notation_rules.models import (
    ConnectionInfo,
    ConnectionRule,
    ConnectionValidation,
    ConnectionValidationContext,
    EdgeRef,
    NodeConnectionInfo,
    NotationDefinition,
    PortDirection,
    RejectionReason,
    SymbolPort,
)
from notation_rules.symbols import SymbolCatalog


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------

def check_port_direction(
    source_direction: PortDirection,
    target_direction: PortDirection,
) -> ConnectionValidation:
    """Reject an ``in`` port used as source or an ``out`` port used as target."""
    if source_direction == PortDirection.IN:
        return ConnectionValidation.reject(
            RejectionReason.PORT_DIRECTION_MISMATCH,
            "Input port cannot be used as source; only 'out' or 'inout' ports can originate connections",
        )
    if target_direction == PortDirection.OUT:
        return ConnectionValidation.reject(
            RejectionReason.PORT_DIRECTION_MISMATCH,
            "Output port cannot be used as target; only 'in' or 'inout' ports can receive connections",
        )
    return ConnectionValidation.ok()


def check_max_connections(
    node_id: str,
    port_id: Optional[str],
    max_connections: Optional[int],
    existing_edges: Iterable[EdgeRef],
    role: str = "source",
) -> ConnectionValidation:
    """Reject when *node_id* already has *max_connections* edges in *role*.

    With a *port_id*, edges recording a different port are not counted;
    edges with no recorded port still are.
    """
    if max_connections is None:
        return ConnectionValidation.ok()

    outgoing = role == "source"
    count = 0
    for edge in existing_edges:
        node, port = (edge.source, edge.source_port) if outgoing else (edge.target, edge.target_port)
        if node != node_id:
            continue
        if port_id is not None and port is not None and port != port_id:
            continue
        count += 1

    if count >= max_connections:
        kind = "outgoing" if outgoing else "incoming"
        return ConnectionValidation.reject(
            RejectionReason.MAX_CONNECTIONS_EXCEEDED,
            f"Node has reached maximum {kind} connections ({max_connections})",
        )
    return ConnectionValidation.ok()


# ---------------------------------------------------------------------------
# Symbol rules
# ---------------------------------------------------------------------------

def find_connection_rules(
    notation: NotationDefinition,
    symbol_id: str,
    variant: Optional[str] = None,
) -> tuple[ConnectionRule, ...]:
    """Rules that apply to *symbol_id* as a source, in catalog order.

    Variant-specific rules take total precedence: when any exist for the
    node's variant, the variant-less rules are ignored.
    """
    rules = [r for r in notation.connection_rules if r.from_symbol == symbol_id]
    if variant:
        specific = tuple(r for r in rules if r.from_variant == variant)
        if specific:
            return specific
    return tuple(r for r in rules if not r.from_variant)


def find_connection_rule(
    notation: NotationDefinition,
    symbol_id: str,
    variant: Optional[str] = None,
) -> Optional[ConnectionRule]:
    rules = find_connection_rules(notation, symbol_id, variant)
    return rules[0] if rules else None


def check_symbol_connection(
    source: NodeConnectionInfo,
    target: NodeConnectionInfo,
    notation: NotationDefinition,
    context: ConnectionValidationContext,
) -> ConnectionValidation:
    rules = find_connection_rules(notation, source.symbol_id, source.variant)
    if not rules:
        return ConnectionValidation.warn(f"No connection rules defined for {source.symbol_id}")

    if not any(r.to for r in rules):
        return ConnectionValidation.reject(
            RejectionReason.SYMBOL_NOT_ALLOWED,
            f"{source.describe()} cannot have outgoing connections",
        )

    matching = next((r for r in rules if target.symbol_id in r.to), None)
    if matching is None:
        return ConnectionValidation.reject(
            RejectionReason.SYMBOL_NOT_ALLOWED,
            f"{source.symbol_id} cannot connect to {target.symbol_id}",
        )

    max_outgoing = matching.constraints.max_outgoing
    if max_outgoing is not None:
        outgoing = sum(1 for e in context.existing_edges if e.source == source.id)
        if outgoing >= max_outgoing:
            return ConnectionValidation.reject(
                RejectionReason.MAX_CONNECTIONS_EXCEEDED,
                f"{source.symbol_id} has reached maximum outgoing connections ({max_outgoing})",
            )

    target_rule = find_connection_rule(notation, target.symbol_id, target.variant)
    max_incoming = target_rule.constraints.max_incoming if target_rule else None
    if max_incoming == 0:
        return ConnectionValidation.reject(
            RejectionReason.SYMBOL_NOT_ALLOWED,
            f"{target.describe()} cannot receive incoming connections",
        )
    if max_incoming is not None:
        incoming = sum(1 for e in context.existing_edges if e.target == target.id)
        if incoming >= max_incoming:
            return ConnectionValidation.reject(
                RejectionReason.MAX_CONNECTIONS_EXCEEDED,
                f"{target.symbol_id} has reached maximum incoming connections ({max_incoming})",
            )

    return ConnectionValidation.ok()


# ---------------------------------------------------------------------------
# Ports
# ---------------------------------------------------------------------------

_SOURCE_DIRECTIONS = (PortDirection.OUT, PortDirection.INOUT)
_TARGET_DIRECTIONS = (PortDirection.IN, PortDirection.INOUT)


def _pick_port(
    ports: tuple[SymbolPort, ...],
    port_id: Optional[str],
    directions: tuple[PortDirection, ...],
) -> Optional[SymbolPort]:
    if port_id is not None:
        return next((p for p in ports if p.id == port_id), None)
    return next((p for p in ports if p.direction in directions), None)


def validate_ports(
    connection: ConnectionInfo,
    source: NodeConnectionInfo,
    target: NodeConnectionInfo,
    context: ConnectionValidationContext,
    symbols: SymbolCatalog,
) -> ConnectionValidation:
    """Check port direction and per-port capacity for both endpoints.

    Ports are taken by explicit id, else the first port able to play the
    role. Checks run only when both ends resolve to a port; an id the
    symbol does not define skips the port stage.
    """
    source_port = _pick_port(
        symbols.resolve_ports(source.symbol_id, source.variant),
        connection.source_port_id,
        _SOURCE_DIRECTIONS,
    )
    target_port = _pick_port(
        symbols.resolve_ports(target.symbol_id, target.variant),
        connection.target_port_id,
        _TARGET_DIRECTIONS,
    )

    if source_port is None or target_port is None:
        return ConnectionValidation.ok()

    direction = check_port_direction(source_port.direction, target_port.direction)
    if not direction.valid:
        return direction

    result = check_max_connections(
        source.id, source_port.id, source_port.max_connections, context.existing_edges, "source"
    )
    if not result.valid:
        return result
    return check_max_connections(
        target.id, target_port.id, target_port.max_connections, context.existing_edges, "target"
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def validate_connection(
    connection: ConnectionInfo,
    context: ConnectionValidationContext,
    catalog: Optional[Catalog] = None,
) -> ConnectionValidation:
    """Decide whether *connection* may be added to the diagram in *context*."""
    catalog = catalog or default_catalog()

    if connection.source_node_id == connection.target_node_id:
        return ConnectionValidation.reject(
            RejectionReason.SELF_CONNECTION, "A node cannot connect to itself"
        )

    source = context.node_info.get(connection.source_node_id)
    if source is None:
        return ConnectionValidation.warn(f"Unknown source node: {connection.source_node_id}")
    target = context.node_info.get(connection.target_node_id)
    if target is None:
        return ConnectionValidation.warn(f"Unknown target node: {connection.target_node_id}")

    notation = catalog.notations.get(context.notation_id)
    if notation is None:
        return ConnectionValidation.warn(
            f"Unknown notation: {context.notation_id}. Connection allowed but not validated."
        )

    symbol_result = check_symbol_connection(source, target, notation, context)
    if not symbol_result.valid:
        return symbol_result

    port_result = validate_ports(connection, source, target, context, catalog.symbols)
    if not port_result.valid:
        return port_result

    if symbol_result.has_warning or port_result.has_warning:
        return ConnectionValidation.warn(symbol_result.message or port_result.message or "")
    return ConnectionValidation.ok()
