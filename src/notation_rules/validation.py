"""
Input validation for notation-rules tool parameters and runtime catalogs.

Provides reusable validators that produce clear error messages, plus
parsers that turn plain dicts (tool arguments, JSON catalog files) into
the frozen model records. These raise; the rule engine itself never does.
"""

from __future__ import annotations

from typing import Any, Optional

from notation_rules.models import (
    BranchingRule,
    ConnectionConstraints,
    ConnectionInfo,
    ConnectionRule,
    DiagramRule,
    EdgeStyle,
    EndpointRule,
    GraphEdge,
    GraphNode,
    NotationDefinition,
    NotationValidation,
    PortDirection,
    Side,
    SymbolDefinition,
    SymbolPort,
    SymbolVariant,
)


# ---------------------------------------------------------------------------
# Validation result
# ---------------------------------------------------------------------------

class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class CatalogError(ValidationError):
    """Raised when catalog definitions are inconsistent (startup only)."""


# ---------------------------------------------------------------------------
# Primitive validators
# ---------------------------------------------------------------------------

def validate_non_empty_string(value: Any, field_name: str) -> str:
    """Ensure *value* is a non-empty string after stripping whitespace."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"'{field_name}' must be a non-empty string.")
    return value.strip()


def validate_optional_string(value: Any, field_name: str) -> Optional[str]:
    """Accept ``None``/empty as absent; otherwise require a string."""
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationError(f"'{field_name}' must be a string, got {type(value).__name__}.")
    return value.strip() or None


def validate_int(
    value: Any,
    field_name: str,
    *,
    min_val: int | None = None,
    max_val: int | None = None,
) -> int:
    """Validate an integer value and optional range."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(
            f"'{field_name}' must be an integer, got {type(value).__name__}."
        )
    if min_val is not None and value < min_val:
        raise ValidationError(
            f"'{field_name}' must be >= {min_val}, got {value}."
        )
    if max_val is not None and value > max_val:
        raise ValidationError(
            f"'{field_name}' must be <= {max_val}, got {value}."
        )
    return value


def validate_optional_int(value: Any, field_name: str, *, min_val: int | None = None) -> Optional[int]:
    if value is None:
        return None
    return validate_int(value, field_name, min_val=min_val)


def validate_number(value: Any, field_name: str, *, min_val: float | None = None,
                    max_val: float | None = None) -> float:
    """Validate a numeric value and optional range."""
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ValidationError(
            f"'{field_name}' must be a number, got {type(value).__name__}."
        )
    val = float(value)
    if min_val is not None and val < min_val:
        raise ValidationError(f"'{field_name}' must be >= {min_val}, got {val}.")
    if max_val is not None and val > max_val:
        raise ValidationError(f"'{field_name}' must be <= {max_val}, got {val}.")
    return val


def validate_bool(value: Any, field_name: str) -> bool:
    """Ensure *value* is a boolean."""
    if not isinstance(value, bool):
        raise ValidationError(
            f"'{field_name}' must be a boolean, got {type(value).__name__}."
        )
    return value


def validate_enum(value: Any, field_name: str, allowed: set[str]) -> str:
    """Validate that a string is one of the allowed choices (case-insensitive).

    Returns the allowed spelling.
    """
    if not isinstance(value, str):
        raise ValidationError(
            f"'{field_name}' must be a string, got {type(value).__name__}."
        )
    lookup = {a.upper(): a for a in allowed}
    normalized = value.strip().upper()
    if normalized not in lookup:
        choices = ", ".join(sorted(allowed))
        raise ValidationError(
            f"'{field_name}' must be one of [{choices}], got '{value}'."
        )
    return lookup[normalized]


def validate_list(value: Any, field_name: str, *, min_length: int = 0) -> list:
    """Ensure *value* is a list with at least *min_length* items."""
    if not isinstance(value, list):
        raise ValidationError(
            f"'{field_name}' must be a list, got {type(value).__name__}."
        )
    if len(value) < min_length:
        raise ValidationError(
            f"'{field_name}' must have at least {min_length} item(s), got {len(value)}."
        )
    return value


def validate_string_list(value: Any, field_name: str) -> tuple[str, ...]:
    """Ensure *value* is a list of non-empty strings (``None`` means empty)."""
    if value is None:
        return ()
    items = validate_list(value, field_name)
    return tuple(
        validate_non_empty_string(item, f"{field_name}[{i}]") for i, item in enumerate(items)
    )


def validate_dict(value: Any, field_name: str) -> dict:
    """Ensure *value* is a dict."""
    if not isinstance(value, dict):
        raise ValidationError(
            f"'{field_name}' must be a dict/object, got {type(value).__name__}."
        )
    return value


# ---------------------------------------------------------------------------
# Tool actions
# ---------------------------------------------------------------------------

_VALIDATE_ACTIONS = {"CONNECTION", "EDGES", "DIAGRAM"}
_CHECK_ACTIONS = {"PORT_DIRECTION", "MAX_CONNECTIONS"}
_INSPECT_ACTIONS = {"NOTATIONS", "NOTATION", "SYMBOLS", "SYMBOL", "SHAPES"}

_DIRECTIONS = {d.value for d in PortDirection}
_SIDES = {s.value for s in Side}
_ROLES = {"source", "target"}


def validate_action(value: Any, tool_name: str, allowed: set[str]) -> str:
    """Validate the action parameter for a tool."""
    if not isinstance(value, str) or not value.strip():
        choices = ", ".join(sorted(a.lower() for a in allowed))
        raise ValidationError(
            f"'{tool_name}' requires an 'action' parameter. Valid actions: {choices}."
        )
    normalized = value.strip().upper()
    if normalized not in allowed:
        choices = ", ".join(sorted(a.lower() for a in allowed))
        raise ValidationError(
            f"Unknown {tool_name} action '{value}'. Valid actions: {choices}."
        )
    return value.strip().lower()


def validate_direction(value: Any, field_name: str) -> PortDirection:
    """Validate a port direction (in, out, inout)."""
    return PortDirection(validate_enum(value, field_name, _DIRECTIONS))


def validate_role(value: Any) -> str:
    """Validate an occurrence-count role (source or target)."""
    return validate_enum(value, "role", _ROLES)


# ---------------------------------------------------------------------------
# Diagram snapshot parsers
# ---------------------------------------------------------------------------

def parse_node(n: Any, index: int) -> GraphNode:
    """Parse a node dict ``{id, type, label?, variant?, properties?}``.

    A top-level ``variant`` is folded into ``properties``.
    """
    if not isinstance(n, dict):
        raise ValidationError(f"Node at index {index} must be a dict/object.")
    if "id" not in n:
        raise ValidationError(f"Node at index {index} missing required key 'id'.")
    node_id = validate_non_empty_string(n["id"], f"nodes[{index}].id")
    symbol = n.get("type", n.get("symbol_id"))
    if symbol is None:
        raise ValidationError(f"Node at index {index} missing required key 'type'.")
    symbol = validate_non_empty_string(symbol, f"nodes[{index}].type")
    properties = dict(validate_dict(n.get("properties") or {}, f"nodes[{index}].properties"))
    variant = validate_optional_string(n.get("variant"), f"nodes[{index}].variant")
    if variant is not None:
        properties["variant"] = variant
    label = validate_optional_string(n.get("label"), f"nodes[{index}].label")
    return GraphNode(id=node_id, type=symbol, label=label, properties=properties)


def parse_edge(e: Any, index: int) -> GraphEdge:
    """Parse an edge dict ``{id?, source, target, source_port?, target_port?}``.

    Edges without an id get ``e<index>``.
    """
    if not isinstance(e, dict):
        raise ValidationError(f"Edge at index {index} must be a dict/object.")
    for key in ("source", "target"):
        if key not in e:
            raise ValidationError(f"Edge at index {index} missing required key '{key}'.")
    return GraphEdge(
        id=validate_optional_string(e.get("id"), f"edges[{index}].id") or f"e{index}",
        source=validate_non_empty_string(e["source"], f"edges[{index}].source"),
        target=validate_non_empty_string(e["target"], f"edges[{index}].target"),
        source_port=validate_optional_string(e.get("source_port"), f"edges[{index}].source_port"),
        target_port=validate_optional_string(e.get("target_port"), f"edges[{index}].target_port"),
    )


def parse_connection(c: Any) -> ConnectionInfo:
    """Parse a proposed connection ``{source, target, source_port?, target_port?}``."""
    c = validate_dict(c, "connection")
    for key in ("source", "target"):
        if key not in c:
            raise ValidationError(f"'connection' missing required key '{key}'.")
    return ConnectionInfo(
        source_node_id=validate_non_empty_string(c["source"], "connection.source"),
        target_node_id=validate_non_empty_string(c["target"], "connection.target"),
        source_port_id=validate_optional_string(c.get("source_port"), "connection.source_port"),
        target_port_id=validate_optional_string(c.get("target_port"), "connection.target_port"),
    )


# ---------------------------------------------------------------------------
# Catalog parsers (runtime-loaded symbols and notations)
# ---------------------------------------------------------------------------

def parse_port(p: Any, where: str) -> SymbolPort:
    p = validate_dict(p, where)
    for key in ("id", "anchor", "direction"):
        if key not in p:
            raise CatalogError(f"{where} missing required key '{key}'.")
    position = p.get("position")
    if position is not None:
        position = validate_number(position, f"{where}.position", min_val=0, max_val=1)
    return SymbolPort(
        id=validate_non_empty_string(p["id"], f"{where}.id"),
        anchor=Side(validate_enum(p["anchor"], f"{where}.anchor", _SIDES)),
        direction=validate_direction(p["direction"], f"{where}.direction"),
        max_connections=validate_optional_int(p.get("max_connections"), f"{where}.max_connections",
                                              min_val=0),
        position=position,
    )


def _parse_ports(value: Any, where: str) -> tuple[SymbolPort, ...]:
    items = validate_list(value, where)
    return tuple(parse_port(p, f"{where}[{i}]") for i, p in enumerate(items))


def parse_symbol(s: Any, index: int) -> SymbolDefinition:
    """Parse a symbol dict. Variants use the generic name -> overlay mapping."""
    where = f"symbols[{index}]"
    s = validate_dict(s, where)
    for key in ("id", "shape"):
        if key not in s:
            raise CatalogError(f"{where} missing required key '{key}'.")
    symbol_id = validate_non_empty_string(s["id"], f"{where}.id")
    variants: dict[str, SymbolVariant] = {}
    for key, raw in validate_dict(s.get("variants") or {}, f"{where}.variants").items():
        raw = validate_dict(raw, f"{where}.variants.{key}")
        ports = raw.get("ports")
        variants[key] = SymbolVariant(
            name=validate_optional_string(raw.get("name"), f"{where}.variants.{key}.name") or key,
            ports=None if ports is None else _parse_ports(ports, f"{where}.variants.{key}.ports"),
            defaults=validate_dict(raw.get("defaults") or {}, f"{where}.variants.{key}.defaults"),
        )
    return SymbolDefinition(
        id=symbol_id,
        name=validate_optional_string(s.get("name"), f"{where}.name") or symbol_id,
        shape=validate_non_empty_string(s["shape"], f"{where}.shape"),
        tags=frozenset(validate_string_list(s.get("tags"), f"{where}.tags")),
        ports=_parse_ports(s.get("ports") or [], f"{where}.ports"),
        variants=variants,
        defaults=validate_dict(s.get("defaults") or {}, f"{where}.defaults"),
        description=validate_optional_string(s.get("description"), f"{where}.description") or "",
        is_container=validate_bool(s.get("is_container", False), f"{where}.is_container"),
    )


def parse_rule(r: Any, where: str) -> ConnectionRule:
    r = validate_dict(r, where)
    if "from" not in r:
        raise CatalogError(f"{where} missing required key 'from'.")
    c = validate_dict(r.get("constraints") or {}, f"{where}.constraints")
    return ConnectionRule(
        from_symbol=validate_non_empty_string(r["from"], f"{where}.from"),
        to=validate_string_list(r.get("to"), f"{where}.to"),
        from_variant=validate_optional_string(r.get("from_variant"), f"{where}.from_variant"),
        constraints=ConnectionConstraints(
            max_outgoing=validate_optional_int(c.get("max_outgoing"), f"{where}.max_outgoing",
                                               min_val=0),
            max_incoming=validate_optional_int(c.get("max_incoming"), f"{where}.max_incoming",
                                               min_val=0),
            requires_label=validate_bool(c.get("requires_label", False), f"{where}.requires_label"),
        ),
        edge_style=validate_optional_string(r.get("edge_style"), f"{where}.edge_style"),
    )


def _parse_endpoint(e: Any, where: str) -> EndpointRule:
    e = validate_dict(e, where)
    if "symbol" not in e:
        raise CatalogError(f"{where} missing required key 'symbol'.")
    return EndpointRule(
        symbol=validate_non_empty_string(e["symbol"], f"{where}.symbol"),
        variant=validate_optional_string(e.get("variant"), f"{where}.variant"),
        min=validate_optional_int(e.get("min"), f"{where}.min", min_val=0),
        max=validate_optional_int(e.get("max"), f"{where}.max", min_val=0),
    )


def _parse_validation(v: Any, where: str) -> NotationValidation:
    v = validate_dict(v or {}, where)
    branching = None
    if v.get("branching") is not None:
        b = validate_dict(v["branching"], f"{where}.branching")
        branching = BranchingRule(
            tags=frozenset(validate_string_list(b.get("tags"), f"{where}.branching.tags")),
            min_outgoing=validate_int(b.get("min_outgoing", 2), f"{where}.branching.min_outgoing",
                                      min_val=0),
            rule_id=validate_optional_string(b.get("rule_id"), f"{where}.branching.rule_id")
            or "decision-branches",
            description=validate_optional_string(b.get("description"),
                                                 f"{where}.branching.description") or "",
        )
    rules = []
    for i, raw in enumerate(validate_list(v.get("rules") or [], f"{where}.rules")):
        rw = f"{where}.rules[{i}]"
        raw = validate_dict(raw, rw)
        symbols = validate_string_list(raw.get("symbols"), f"{rw}.symbols")
        if raw.get("symbol") is not None:
            symbols = (validate_non_empty_string(raw["symbol"], f"{rw}.symbol"),) + symbols
        rules.append(DiagramRule(
            id=validate_non_empty_string(raw.get("id"), f"{rw}.id"),
            description=validate_optional_string(raw.get("description"), f"{rw}.description") or "",
            symbols=symbols,
            min_outgoing=validate_optional_int(raw.get("min_outgoing"), f"{rw}.min_outgoing",
                                               min_val=0),
            must_connect_to=validate_string_list(raw.get("must_connect_to"), f"{rw}.must_connect_to"),
            not_directly_connected_to=validate_string_list(
                raw.get("not_directly_connected_to"), f"{rw}.not_directly_connected_to"),
            acyclic=validate_bool(raw.get("acyclic", False), f"{rw}.acyclic"),
        ))
    return NotationValidation(
        entry_points=tuple(
            _parse_endpoint(e, f"{where}.entry_points[{i}]")
            for i, e in enumerate(validate_list(v.get("entry_points") or [], f"{where}.entry_points"))
        ),
        exit_points=tuple(
            _parse_endpoint(e, f"{where}.exit_points[{i}]")
            for i, e in enumerate(validate_list(v.get("exit_points") or [], f"{where}.exit_points"))
        ),
        branching=branching,
        orphan_rule_id=validate_optional_string(v.get("orphan_rule_id"), f"{where}.orphan_rule_id")
        or "no-orphans",
        rules=tuple(rules),
    )


def parse_notation(n: Any, index: int) -> NotationDefinition:
    """Parse a notation dict (rules keep their list order)."""
    where = f"notations[{index}]"
    n = validate_dict(n, where)
    notation_id = validate_non_empty_string(n.get("id"), f"{where}.id")
    edge_styles = {}
    for key, raw in validate_dict(n.get("edge_styles") or {}, f"{where}.edge_styles").items():
        raw = validate_dict(raw, f"{where}.edge_styles.{key}")
        edge_styles[key] = EdgeStyle(
            name=validate_optional_string(raw.get("name"), f"{where}.edge_styles.{key}.name") or key,
            target_arrow=raw.get("target_arrow", "arrow"),
            line_style=raw.get("line_style", "solid"),
            stroke=raw.get("stroke", "#666666"),
            stroke_width=validate_number(raw.get("stroke_width", 1.5),
                                         f"{where}.edge_styles.{key}.stroke_width", min_val=0),
            source_arrow=raw.get("source_arrow", "none"),
        )
    return NotationDefinition(
        id=notation_id,
        name=validate_optional_string(n.get("name"), f"{where}.name") or notation_id,
        symbols=validate_string_list(n.get("symbols"), f"{where}.symbols"),
        connection_rules=tuple(
            parse_rule(r, f"{where}.connection_rules[{i}]")
            for i, r in enumerate(validate_list(n.get("connection_rules") or [],
                                                f"{where}.connection_rules"))
        ),
        edge_styles=edge_styles,
        default_edge_style=validate_optional_string(n.get("default_edge_style"),
                                                    f"{where}.default_edge_style"),
        validation=_parse_validation(n.get("validation"), f"{where}.validation"),
        description=validate_optional_string(n.get("description"), f"{where}.description") or "",
        version=validate_optional_string(n.get("version"), f"{where}.version") or "1.0.0",
    )
