"""
Shape catalog: the pure geometry layer symbols are built on.

Shapes carry a default size and the sides their ports may anchor to.
They have no semantic meaning; that is added by symbols.
"""

from __future__ import annotations

from typing import Iterable, Optional

from notation_rules.models import PortAnchor, ShapeDefinition, Side, Size
from notation_rules.validation import CatalogError


# ---------------------------------------------------------------------------
# Anchor positions (relative to shape 0..1)
# ---------------------------------------------------------------------------

def anchor_point(side: Side | str, position: float = 0.5) -> tuple[float, float]:
    """Return the (x, y) point of an anchor, where 0,0 = top-left and 1,1 = bottom-right.

    *position* runs left-to-right along horizontal sides and top-to-bottom
    along vertical sides. Corner sides ignore it.
    """
    side = Side(side)
    if side is Side.NORTH:
        return (position, 0)
    if side is Side.SOUTH:
        return (position, 1)
    if side is Side.WEST:
        return (0, position)
    if side is Side.EAST:
        return (1, position)
    return {
        Side.NORTH_EAST: (1, 0),
        Side.NORTH_WEST: (0, 0),
        Side.SOUTH_EAST: (1, 1),
        Side.SOUTH_WEST: (0, 1),
    }[side]


_CARDINAL = (
    PortAnchor(Side.NORTH),
    PortAnchor(Side.SOUTH),
    PortAnchor(Side.EAST),
    PortAnchor(Side.WEST),
)


# ---------------------------------------------------------------------------
# Built-in shapes
# ---------------------------------------------------------------------------

BUILTIN_SHAPES: tuple[ShapeDefinition, ...] = (
    ShapeDefinition("rectangle", "Rectangle", "polygon", Size(100, 60), Size(60, 30), _CARDINAL),
    ShapeDefinition("diamond", "Diamond", "polygon", Size(100, 100), Size(80, 80), _CARDINAL),
    ShapeDefinition("ellipse", "Ellipse", "ellipse", Size(100, 60), Size(70, 40), _CARDINAL),
    ShapeDefinition("cylinder", "Cylinder", "compound", Size(100, 80), Size(60, 50), _CARDINAL),
    ShapeDefinition("parallelogram", "Parallelogram", "polygon", Size(120, 60), Size(80, 40), _CARDINAL),
    ShapeDefinition(
        "hexagon", "Hexagon", "polygon", Size(100, 86), Size(70, 60),
        _CARDINAL + (PortAnchor(Side.NORTH_EAST), PortAnchor(Side.NORTH_WEST)),
    ),
    ShapeDefinition("document", "Document", "path", Size(100, 70), Size(60, 50), _CARDINAL),
    ShapeDefinition("stadium", "Stadium", "path", Size(120, 40), Size(80, 30), _CARDINAL),
    ShapeDefinition("trapezoid", "Trapezoid", "polygon", Size(100, 60), Size(70, 40), _CARDINAL),
    ShapeDefinition(
        "triangle", "Triangle", "polygon", Size(100, 86), Size(80, 70),
        (PortAnchor(Side.NORTH), PortAnchor(Side.SOUTH, 0.25), PortAnchor(Side.SOUTH, 0.75)),
    ),
    ShapeDefinition("cloud", "Cloud", "path", Size(120, 80), Size(80, 60), _CARDINAL),
    ShapeDefinition(
        "note", "Note", "path", Size(100, 80), Size(60, 50),
        (
            PortAnchor(Side.NORTH, 0.4),
            PortAnchor(Side.SOUTH),
            PortAnchor(Side.EAST, 0.6),
            PortAnchor(Side.WEST),
        ),
    ),
    ShapeDefinition(
        "actor", "Actor", "compound", Size(60, 100), Size(50, 80),
        (
            PortAnchor(Side.NORTH),
            PortAnchor(Side.SOUTH, 0.25),
            PortAnchor(Side.SOUTH, 0.75),
            PortAnchor(Side.EAST, 0.35),
            PortAnchor(Side.WEST, 0.35),
        ),
    ),
    ShapeDefinition("subroutine", "Subroutine", "compound", Size(100, 60), Size(70, 40), _CARDINAL),
)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

class ShapeCatalog:
    """Read-only id -> ShapeDefinition lookup."""

    def __init__(self, shapes: Iterable[ShapeDefinition]) -> None:
        self._shapes: tuple[ShapeDefinition, ...] = tuple(shapes)
        self._by_id: dict[str, ShapeDefinition] = {}
        for shape in self._shapes:
            if shape.id in self._by_id:
                raise CatalogError(f"Duplicate shape id '{shape.id}'.")
            self._by_id[shape.id] = shape

    def get(self, shape_id: str) -> Optional[ShapeDefinition]:
        return self._by_id.get(shape_id)

    def has(self, shape_id: str) -> bool:
        return shape_id in self._by_id

    def all(self) -> tuple[ShapeDefinition, ...]:
        return self._shapes

    def __len__(self) -> int:
        return len(self._shapes)
