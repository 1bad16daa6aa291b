"""
Symbol catalog: semantic node types built on shapes.

Symbols add ports, tags and named variants to a shape. A variant that
declares ports replaces the base port list; it never merges with it.
"""

from __future__ import annotations

from typing import Iterable, Optional

from notation_rules.models import (
    DEFAULT_PORTS,
    SymbolDefinition,
    SymbolLibrary,
    SymbolPort,
)
from notation_rules.shapes import ShapeCatalog
from notation_rules.validation import CatalogError


class SymbolCatalog:
    """Read-only symbol lookup indexed by id, tag and library."""

    def __init__(self, libraries: Iterable[SymbolLibrary], shapes: ShapeCatalog) -> None:
        self._libraries: tuple[SymbolLibrary, ...] = tuple(libraries)
        self._by_id: dict[str, SymbolDefinition] = {}
        self._by_tag: dict[str, list[SymbolDefinition]] = {}
        for lib in self._libraries:
            for symbol in lib.symbols:
                if symbol.id in self._by_id:
                    raise CatalogError(f"Duplicate symbol id '{symbol.id}' in library '{lib.id}'.")
                if not shapes.has(symbol.shape):
                    raise CatalogError(
                        f"Symbol '{symbol.id}' references unknown shape '{symbol.shape}'."
                    )
                self._by_id[symbol.id] = symbol
                for tag in symbol.tags:
                    self._by_tag.setdefault(tag, []).append(symbol)

    # -- lookup --

    def get(self, symbol_id: str) -> Optional[SymbolDefinition]:
        return self._by_id.get(symbol_id)

    def has(self, symbol_id: str) -> bool:
        return symbol_id in self._by_id

    def all(self) -> list[SymbolDefinition]:
        return list(self._by_id.values())

    def by_tag(self, tag: str) -> list[SymbolDefinition]:
        return list(self._by_tag.get(tag, ()))

    def by_library(self, library_id: str) -> list[SymbolDefinition]:
        for lib in self._libraries:
            if lib.id == library_id:
                return list(lib.symbols)
        return []

    def libraries(self) -> tuple[SymbolLibrary, ...]:
        return self._libraries

    def tags_of(self, symbol_id: str) -> frozenset[str]:
        symbol = self._by_id.get(symbol_id)
        return symbol.tags if symbol else frozenset()

    # -- ports --

    def resolve_ports(self, symbol_id: str, variant: Optional[str] = None) -> tuple[SymbolPort, ...]:
        """Return the effective ports of a symbol instance.

        Order of precedence: the variant's own port list, the symbol's ports,
        then the default ``in``/``out`` pair for unknown or port-less symbols.
        """
        symbol = self._by_id.get(symbol_id)
        if symbol is None:
            return DEFAULT_PORTS
        if variant:
            overlay = symbol.variants.get(variant)
            if overlay is not None and overlay.ports is not None:
                return overlay.ports
        if symbol.ports:
            return symbol.ports
        return DEFAULT_PORTS

    def __len__(self) -> int:
        return len(self._by_id)
