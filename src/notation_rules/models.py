"""
Core data model for notation rules.

Catalog records (shapes, symbols, notations) are frozen dataclasses built
once at startup. Snapshot and result records describe a single validation
call and are equally immutable.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class PortDirection(str, Enum):
    """Which way an edge may flow through a port."""
    IN = "in"
    OUT = "out"
    INOUT = "inout"


class Side(str, Enum):
    """Side of a shape a port is anchored on."""
    NORTH = "NORTH"
    SOUTH = "SOUTH"
    EAST = "EAST"
    WEST = "WEST"
    NORTH_EAST = "NORTH_EAST"
    NORTH_WEST = "NORTH_WEST"
    SOUTH_EAST = "SOUTH_EAST"
    SOUTH_WEST = "SOUTH_WEST"


class TerminalVariant(str, Enum):
    """Variants of the flowchart terminal symbol."""
    START = "start"
    END = "end"


class RejectionReason(str, Enum):
    SELF_CONNECTION = "self-connection"
    SYMBOL_NOT_ALLOWED = "symbol-not-allowed"
    MAX_CONNECTIONS_EXCEEDED = "max-connections-exceeded"
    PORT_DIRECTION_MISMATCH = "port-direction-mismatch"


class EdgeCompatibilityStatus(str, Enum):
    COMPATIBLE = "compatible"
    WARNING = "warning"
    INCOMPATIBLE = "incompatible"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


# ---------------------------------------------------------------------------
# Shapes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class PortAnchor:
    """A point on a shape side where ports may attach (position 0..1 along the side)."""
    side: Side
    position: float = 0.5


@dataclass(frozen=True)
class ShapeDefinition:
    """Pure geometry: default size and port anchor sides, no semantics."""
    id: str
    name: str
    kind: str = "polygon"
    default_size: Size = Size(100, 60)
    min_size: Optional[Size] = None
    port_anchors: tuple[PortAnchor, ...] = ()


# ---------------------------------------------------------------------------
# Symbols
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SymbolPort:
    """A named, directional attachment point on a symbol."""
    id: str
    anchor: Side
    direction: PortDirection
    max_connections: Optional[int] = None
    position: Optional[float] = None

    def __post_init__(self) -> None:
        if self.position is not None and not 0 <= self.position <= 1:
            raise ValueError(f"Port '{self.id}' position must be within 0..1, got {self.position}.")

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "anchor": self.anchor.value,
            "direction": self.direction.value,
        }
        if self.max_connections is not None:
            out["max_connections"] = self.max_connections
        if self.position is not None:
            out["position"] = self.position
        return out


# Used when a symbol is unknown or declares no ports at all.
DEFAULT_PORTS: tuple[SymbolPort, ...] = (
    SymbolPort(id="in", anchor=Side.NORTH, direction=PortDirection.IN),
    SymbolPort(id="out", anchor=Side.SOUTH, direction=PortDirection.OUT),
)


@dataclass(frozen=True)
class SymbolVariant:
    """Named overlay on a symbol.

    ``ports=None`` inherits the base ports; a tuple (even an empty one)
    replaces them entirely.
    """
    name: str
    ports: Optional[tuple[SymbolPort, ...]] = None
    defaults: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SymbolDefinition:
    """A semantically named node type bound to a shape."""
    id: str
    name: str
    shape: str
    tags: frozenset[str] = frozenset()
    ports: tuple[SymbolPort, ...] = ()
    variants: Mapping[str, SymbolVariant] = field(default_factory=dict)
    defaults: Mapping[str, Any] = field(default_factory=dict)
    description: str = ""
    is_container: bool = False

    def __post_init__(self) -> None:
        # Catalog records must not be mutated after construction.
        object.__setattr__(self, "variants", MappingProxyType(dict(self.variants)))
        object.__setattr__(self, "defaults", MappingProxyType(dict(self.defaults)))
        object.__setattr__(self, "tags", frozenset(self.tags))
        object.__setattr__(self, "ports", tuple(self.ports))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "shape": self.shape,
            "tags": sorted(self.tags),
            "ports": [p.to_dict() for p in self.ports],
            "variants": {
                key: {
                    "name": v.name,
                    **({"ports": [p.to_dict() for p in v.ports]} if v.ports is not None else {}),
                }
                for key, v in self.variants.items()
            },
        }


@dataclass(frozen=True)
class SymbolLibrary:
    """A named group of symbols shipped together (one per notation family)."""
    id: str
    name: str
    symbols: tuple[SymbolDefinition, ...]
    version: str = "1.0.0"
    description: str = ""


# ---------------------------------------------------------------------------
# Notations
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConnectionConstraints:
    max_outgoing: Optional[int] = None
    max_incoming: Optional[int] = None
    requires_label: bool = False


@dataclass(frozen=True)
class ConnectionRule:
    """Which target symbols a source symbol (or one of its variants) may connect to.

    An empty ``to`` means the source may not have outgoing connections.
    """
    from_symbol: str
    to: tuple[str, ...]
    from_variant: Optional[str] = None
    constraints: ConnectionConstraints = ConnectionConstraints()
    edge_style: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"from": self.from_symbol, "to": list(self.to)}
        if self.from_variant:
            out["from_variant"] = self.from_variant
        c = self.constraints
        constraints = {
            k: v for k, v in (("max_outgoing", c.max_outgoing), ("max_incoming", c.max_incoming))
            if v is not None
        }
        if c.requires_label:
            constraints["requires_label"] = True
        if constraints:
            out["constraints"] = constraints
        if self.edge_style:
            out["edge_style"] = self.edge_style
        return out


@dataclass(frozen=True)
class EdgeStyle:
    name: str
    target_arrow: str = "arrow"
    line_style: str = "solid"
    stroke: str = "#666666"
    stroke_width: float = 1.5
    source_arrow: str = "none"


@dataclass(frozen=True)
class EndpointRule:
    """Minimum/maximum count of nodes of a symbol (optionally a variant) in a diagram."""
    symbol: str
    variant: Optional[str] = None
    min: Optional[int] = None
    max: Optional[int] = None

    def matches(self, symbol_id: str, variant: Optional[str]) -> bool:
        return symbol_id == self.symbol and (not self.variant or variant == self.variant)

    def describe(self) -> str:
        return f"{self.symbol} ({self.variant})" if self.variant else self.symbol


@dataclass(frozen=True)
class BranchingRule:
    """Nodes whose symbol carries any of ``tags`` need ``min_outgoing`` edges."""
    tags: frozenset[str]
    min_outgoing: int = 2
    rule_id: str = "decision-branches"
    description: str = ""


@dataclass(frozen=True)
class DiagramRule:
    """Custom graph-wide rule scoped to a set of symbols."""
    id: str
    description: str = ""
    symbols: tuple[str, ...] = ()
    min_outgoing: Optional[int] = None
    must_connect_to: tuple[str, ...] = ()
    not_directly_connected_to: tuple[str, ...] = ()
    acyclic: bool = False


@dataclass(frozen=True)
class NotationValidation:
    entry_points: tuple[EndpointRule, ...] = ()
    exit_points: tuple[EndpointRule, ...] = ()
    branching: Optional[BranchingRule] = None
    orphan_rule_id: str = "no-orphans"
    rules: tuple[DiagramRule, ...] = ()


@dataclass(frozen=True)
class NotationDefinition:
    """One diagram dialect: its symbols, ordered connection rules and invariants.

    Rule order is significant; the first matching rule wins.
    """
    id: str
    name: str
    symbols: tuple[str, ...]
    connection_rules: tuple[ConnectionRule, ...] = ()
    edge_styles: Mapping[str, EdgeStyle] = field(default_factory=dict)
    default_edge_style: Optional[str] = None
    validation: NotationValidation = NotationValidation()
    description: str = ""
    version: str = "1.0.0"

    def __post_init__(self) -> None:
        object.__setattr__(self, "edge_styles", MappingProxyType(dict(self.edge_styles)))
        object.__setattr__(self, "symbols", tuple(self.symbols))
        object.__setattr__(self, "connection_rules", tuple(self.connection_rules))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "symbols": list(self.symbols),
            "default_edge_style": self.default_edge_style,
            "connection_rules": [r.to_dict() for r in self.connection_rules],
        }


# ---------------------------------------------------------------------------
# Validation snapshot
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NodeConnectionInfo:
    """Read-only projection of a diagram node used for validation."""
    id: str
    symbol_id: str
    variant: Optional[str] = None

    def describe(self) -> str:
        return f"{self.symbol_id} ({self.variant})" if self.variant else self.symbol_id


@dataclass(frozen=True)
class EdgeRef:
    source: str
    target: str
    source_port: Optional[str] = None
    target_port: Optional[str] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class ConnectionInfo:
    """A proposed connection between two nodes."""
    source_node_id: str
    target_node_id: str
    source_port_id: Optional[str] = None
    target_port_id: Optional[str] = None


@dataclass(frozen=True)
class ConnectionValidationContext:
    """Immutable snapshot of the diagram handed to every validation call."""
    notation_id: str
    node_info: Mapping[str, NodeConnectionInfo] = field(default_factory=dict)
    existing_edges: tuple[EdgeRef, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "node_info", MappingProxyType(dict(self.node_info)))
        object.__setattr__(self, "existing_edges", tuple(self.existing_edges))

    def without_pair(self, source: str, target: str) -> ConnectionValidationContext:
        """Return a copy whose edges exclude every ``source -> target`` edge."""
        others = tuple(
            e for e in self.existing_edges if not (e.source == source and e.target == target)
        )
        return replace(self, existing_edges=others)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConnectionValidation:
    """Verdict for one connection. Rejections never carry a warning."""
    valid: bool
    has_warning: bool = False
    reason: Optional[RejectionReason] = None
    message: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.valid and self.has_warning:
            raise ValueError("A rejected connection cannot also carry a warning.")

    @classmethod
    def ok(cls) -> ConnectionValidation:
        return cls(valid=True)

    @classmethod
    def warn(cls, message: str) -> ConnectionValidation:
        return cls(valid=True, has_warning=True, message=message)

    @classmethod
    def reject(cls, reason: RejectionReason, message: str) -> ConnectionValidation:
        return cls(valid=False, reason=reason, message=message)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"valid": self.valid, "has_warning": self.has_warning}
        if self.reason is not None:
            out["reason"] = self.reason.value
        if self.message:
            out["message"] = self.message
        return out


@dataclass(frozen=True)
class EdgeCompatibility:
    edge_id: str
    status: EdgeCompatibilityStatus
    validation: ConnectionValidation

    def to_dict(self) -> dict[str, Any]:
        return {
            "edge_id": self.edge_id,
            "status": self.status.value,
            "validation": self.validation.to_dict(),
        }


# ---------------------------------------------------------------------------
# Whole-diagram input / output
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GraphNode:
    """A diagram node as supplied by the node snapshot provider."""
    id: str
    type: str
    label: Optional[str] = None
    properties: Mapping[str, Any] = field(default_factory=dict)

    @property
    def variant(self) -> Optional[str]:
        value = self.properties.get("variant")
        return value if isinstance(value, str) and value else None


@dataclass(frozen=True)
class GraphEdge:
    id: str
    source: str
    target: str
    source_port: Optional[str] = None
    target_port: Optional[str] = None


@dataclass(frozen=True)
class ValidationResult:
    rule_id: str
    severity: Severity
    message: str
    node_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "rule_id": self.rule_id,
            "severity": self.severity.value,
            "message": self.message,
        }
        if self.node_id is not None:
            out["node_id"] = self.node_id
        return out
