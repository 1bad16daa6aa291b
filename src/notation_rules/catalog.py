"""
Catalog bundle: shapes, symbols and notations handed to the validators.

``default_catalog()`` is built once from the built-in libraries. Runtime
symbols and notations (e.g. from a JSON file) are layered on top of a base
catalog with ``catalog_from_dict``; a runtime notation replaces a built-in
one of the same id, while duplicate symbol ids are rejected.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Optional

from notation_rules.libraries import BUILTIN_LIBRARIES
from notation_rules.models import NotationDefinition, ShapeDefinition, SymbolLibrary
from notation_rules.notations import BUILTIN_NOTATIONS, NotationCatalog
from notation_rules.shapes import BUILTIN_SHAPES, ShapeCatalog
from notation_rules.symbols import SymbolCatalog
from notation_rules.validation import (
    CatalogError,
    parse_notation,
    parse_symbol,
    validate_dict,
    validate_list,
    validate_optional_string,
)

logger = logging.getLogger("notation-rules")


@dataclass(frozen=True)
class Catalog:
    shapes: ShapeCatalog
    symbols: SymbolCatalog
    notations: NotationCatalog


def build_catalog(
    shapes: Iterable[ShapeDefinition],
    libraries: Iterable[SymbolLibrary],
    notations: Iterable[NotationDefinition],
) -> Catalog:
    """Assemble and cross-check a catalog. Raises CatalogError on inconsistencies."""
    shape_catalog = ShapeCatalog(shapes)
    symbol_catalog = SymbolCatalog(libraries, shape_catalog)
    notation_catalog = NotationCatalog(notations, symbol_catalog)
    logger.debug(
        "Catalog built: %d shapes, %d symbols, %d notations",
        len(shape_catalog), len(symbol_catalog), len(notation_catalog),
    )
    return Catalog(shapes=shape_catalog, symbols=symbol_catalog, notations=notation_catalog)


@lru_cache(maxsize=1)
def default_catalog() -> Catalog:
    """Return the built-in catalog (built on first use, then shared)."""
    return build_catalog(BUILTIN_SHAPES, BUILTIN_LIBRARIES, BUILTIN_NOTATIONS)


def catalog_from_dict(data: Any, base: Optional[Catalog] = None) -> Catalog:
    """Extend *base* (default: the built-in catalog) with runtime definitions.

    Expected shape::

        {"library": {"id": ..., "name": ...},   # optional
         "symbols": [...],
         "notations": [...]}
    """
    data = validate_dict(data, "catalog")
    base = base or default_catalog()

    symbols = tuple(
        parse_symbol(s, i) for i, s in enumerate(validate_list(data.get("symbols") or [], "symbols"))
    )
    notations = tuple(
        parse_notation(n, i)
        for i, n in enumerate(validate_list(data.get("notations") or [], "notations"))
    )

    libraries = list(base.symbols.libraries())
    if symbols:
        lib = validate_dict(data.get("library") or {}, "library")
        lib_id = validate_optional_string(lib.get("id"), "library.id") or "custom"
        if any(existing.id == lib_id for existing in libraries):
            raise CatalogError(f"Duplicate library id '{lib_id}'.")
        libraries.append(SymbolLibrary(
            id=lib_id,
            name=validate_optional_string(lib.get("name"), "library.name") or lib_id,
            symbols=symbols,
            version=validate_optional_string(lib.get("version"), "library.version") or "1.0.0",
            description=validate_optional_string(lib.get("description"), "library.description") or "",
        ))

    replaced = {n.id for n in notations}
    merged = [n for n in base.notations.all() if n.id not in replaced]
    merged.extend(notations)
    return build_catalog(base.shapes.all(), libraries, merged)


def load_catalog_file(path: str | Path, base: Optional[Catalog] = None) -> Catalog:
    """Read a JSON catalog file and layer it over *base*."""
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except OSError as exc:
        raise CatalogError(f"Cannot read catalog file '{p}': {exc}") from exc
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Catalog file '{p}' is not valid JSON: {exc}") from exc
    return catalog_from_dict(data, base)
