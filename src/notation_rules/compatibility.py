"""
Batch compatibility: re-check every existing edge of a diagram.

Each edge is validated as if it were being proposed again: the snapshot
handed to the validator excludes every edge sharing its (source, target)
pair, so an edge never counts against its own capacity.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from notation_rules.catalog import Catalog
from notation_rules.connections import validate_connection
from notation_rules.models import (
    ConnectionInfo,
    ConnectionValidation,
    ConnectionValidationContext,
    EdgeCompatibility,
    EdgeCompatibilityStatus,
    EdgeRef,
    GraphEdge,
    GraphNode,
    NodeConnectionInfo,
)


def build_context(
    notation_id: str,
    nodes: Iterable[GraphNode],
    edges: Iterable[GraphEdge] = (),
) -> ConnectionValidationContext:
    """Project diagram nodes and edges into a validation snapshot.

    The node type is the symbol id; the variant is ``properties["variant"]``.
    """
    node_info = {
        n.id: NodeConnectionInfo(id=n.id, symbol_id=n.type, variant=n.variant) for n in nodes
    }
    existing = tuple(
        EdgeRef(
            source=e.source,
            target=e.target,
            source_port=e.source_port,
            target_port=e.target_port,
            id=e.id,
        )
        for e in edges
    )
    return ConnectionValidationContext(
        notation_id=notation_id, node_info=node_info, existing_edges=existing
    )


def _status(validation: ConnectionValidation) -> EdgeCompatibilityStatus:
    if not validation.valid:
        return EdgeCompatibilityStatus.INCOMPATIBLE
    if validation.has_warning:
        return EdgeCompatibilityStatus.WARNING
    return EdgeCompatibilityStatus.COMPATIBLE


def get_edge_compatibility(
    edges: Sequence[GraphEdge],
    context: ConnectionValidationContext,
    catalog: Optional[Catalog] = None,
) -> list[EdgeCompatibility]:
    """Classify each edge as compatible, warning or incompatible (input order)."""
    results: list[EdgeCompatibility] = []
    for edge in edges:
        validation = validate_connection(
            ConnectionInfo(
                source_node_id=edge.source,
                target_node_id=edge.target,
                source_port_id=edge.source_port,
                target_port_id=edge.target_port,
            ),
            context.without_pair(edge.source, edge.target),
            catalog,
        )
        results.append(EdgeCompatibility(edge.id, _status(validation), validation))
    return results


def check_connection(
    source: str,
    target: str,
    context: ConnectionValidationContext,
    source_port: Optional[str] = None,
    target_port: Optional[str] = None,
    catalog: Optional[Catalog] = None,
) -> ConnectionValidation:
    """Validate a connection being drawn; an identical existing pair is ignored."""
    return validate_connection(
        ConnectionInfo(source, target, source_port, target_port),
        context.without_pair(source, target),
        catalog,
    )


@dataclass(frozen=True)
class CompatibilityReport:
    """Batch results indexed by edge id."""
    results: tuple[EdgeCompatibility, ...]
    _by_id: dict[str, EdgeCompatibility] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "results", tuple(self.results))
        object.__setattr__(self, "_by_id", {r.edge_id: r for r in self.results})

    @classmethod
    def evaluate(
        cls,
        edges: Sequence[GraphEdge],
        context: ConnectionValidationContext,
        catalog: Optional[Catalog] = None,
    ) -> CompatibilityReport:
        return cls(tuple(get_edge_compatibility(edges, context, catalog)))

    def incompatible_edge_ids(self) -> list[str]:
        return [r.edge_id for r in self.results if r.status is EdgeCompatibilityStatus.INCOMPATIBLE]

    def warning_edge_ids(self) -> list[str]:
        return [r.edge_id for r in self.results if r.status is EdgeCompatibilityStatus.WARNING]

    def status_of(self, edge_id: str) -> Optional[EdgeCompatibilityStatus]:
        result = self._by_id.get(edge_id)
        return result.status if result else None

    def validation_of(self, edge_id: str) -> Optional[ConnectionValidation]:
        result = self._by_id.get(edge_id)
        return result.validation if result else None

    def to_dict(self) -> dict:
        return {
            "edges": [r.to_dict() for r in self.results],
            "incompatible": self.incompatible_edge_ids(),
            "warnings": self.warning_edge_ids(),
        }
