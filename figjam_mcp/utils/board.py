"""
In-memory FigJam board.

Implements the canvas host primitives (create, update, delete, query) and the
CanvasCapability interface consumed by the layout engine. Elements are stored
in creation order; page-level order is the order agents see when querying.
"""

import copy
import logging
import math
from typing import Any

from figjam_mcp.config import BOARD_NAME, ELEMENT_DEFAULTS, SHAPE_TYPES, TEXT_METRICS
from figjam_mcp.utils.colors import resolve_color
from figjam_mcp.utils.scene import Bounds, CanvasCapability, Element, ElementKind, TextContent


class ElementNotFoundError(LookupError):
    """Raised when an element id does not resolve on the board."""

    def __init__(self, element_id: str, role: str = "Element"):
        super().__init__(f"{role} not found: {element_id}")
        self.element_id = element_id


def estimate_text_size(text: str, font_size: float) -> tuple[float, float]:
    """Estimate the auto-sized box of a standalone text node."""
    lines = text.split("\n") if text else [""]
    longest = max(len(line) for line in lines)
    width = math.ceil(longest * font_size * TEXT_METRICS["char_width_ratio"])
    height = math.ceil(len(lines) * font_size * TEXT_METRICS["line_height_ratio"])
    return float(width), float(height)


class InMemoryBoard(CanvasCapability):
    """A single FigJam page held in memory.

    Features:
    - Sticky, shape, text, connector and section creation with host defaults
    - Structural section membership via ``parent_id`` (section-relative coords)
    - Connector bounds derived from the centres of their endpoints
    - Cascading delete of section children; connectors may be left dangling
    """

    def __init__(self, name: str = BOARD_NAME):
        self.name = name
        self.logger = logging.getLogger(__name__)
        self._elements: dict[str, Element] = {}
        self._next_id = 1

    # ── Capability interface ──────────────────────────────────────────

    def list_elements(self, recursive: bool = False) -> list[Element]:
        result: list[Element] = []

        def visit(element: Element) -> None:
            result.append(self._snapshot(element))
            if recursive and element.is_section:
                for child in self._children(element.id):
                    visit(child)

        for element in self._elements.values():
            if element.container_id is None:
                visit(element)
        return result

    def get_element(self, element_id: str) -> Element | None:
        element = self._elements.get(element_id)
        return self._snapshot(element) if element else None

    def get_children(self, section_id: str) -> list[Element]:
        self._require(section_id, "Section")
        return [self._snapshot(child) for child in self._children(section_id)]

    def set_position(self, element_id: str, x: float, y: float) -> None:
        element = self._require(element_id)
        if element.is_connector:
            raise ValueError(f"Connector {element_id} follows its endpoints and cannot be moved")
        element.bounds = Bounds(x, y, element.bounds.width, element.bounds.height)

    def resize_section(self, section_id: str, width: float, height: float) -> None:
        section = self._require(section_id, "Section")
        if not section.is_section:
            raise ValueError(f"Element {section_id} is not a section")
        section.bounds = Bounds(section.bounds.x, section.bounds.y, width, height)

    # ── Host primitives ───────────────────────────────────────────────

    def create_sticky(
        self,
        text: str = "",
        x: float = 0,
        y: float = 0,
        wide: bool = False,
        color: str | None = None,
        parent_id: str | None = None,
    ) -> Element:
        """Create a fixed-size sticky note (240x240, or 440x240 when wide)."""
        width, height = ELEMENT_DEFAULTS["wide_sticky_size" if wide else "sticky_size"]
        return self._add(
            ElementKind.STICKY,
            name=text[:40] or "Sticky",
            bounds=Bounds(x, y, width, height),
            text=TextContent(text, TEXT_METRICS["default_font_size"]),
            parent_id=parent_id,
            properties={
                "color": resolve_color(color or ELEMENT_DEFAULTS["sticky_color"]),
                "wide": wide,
            },
        )

    def create_shape(
        self,
        shape_type: str | None = None,
        text: str = "",
        x: float = 0,
        y: float = 0,
        width: float | None = None,
        height: float | None = None,
        color: str | None = None,
        font_size: float | None = None,
        parent_id: str | None = None,
    ) -> Element:
        """Create a shape with text, the primary diagram building block."""
        shape_type = (shape_type or ELEMENT_DEFAULTS["shape_type"]).upper()
        if shape_type not in SHAPE_TYPES:
            raise ValueError(f"Unknown shape type: {shape_type}")
        default_w, default_h = ELEMENT_DEFAULTS["shape_size"]
        return self._add(
            ElementKind.SHAPE,
            name=text[:40] or shape_type.replace("_", " ").title(),
            bounds=Bounds(x, y, width if width is not None else default_w,
                          height if height is not None else default_h),
            text=TextContent(text, font_size or TEXT_METRICS["default_font_size"]),
            parent_id=parent_id,
            properties={
                "shape_type": shape_type,
                "color": resolve_color(color or ELEMENT_DEFAULTS["shape_color"]),
            },
        )

    def create_text(
        self,
        text: str,
        x: float = 0,
        y: float = 0,
        font_size: float | None = None,
        parent_id: str | None = None,
    ) -> Element:
        """Create a standalone, auto-sized text node."""
        font_size = font_size or TEXT_METRICS["text_node_font_size"]
        width, height = estimate_text_size(text, font_size)
        return self._add(
            ElementKind.TEXT,
            name=text[:40] or "Text",
            bounds=Bounds(x, y, width, height),
            text=TextContent(text, font_size),
            parent_id=parent_id,
        )

    def create_connector(
        self,
        start_id: str,
        end_id: str,
        label: str | None = None,
        stroke_color: str | None = None,
    ) -> Element:
        """Create a connector between two existing elements."""
        self._require(start_id, "Start element")
        self._require(end_id, "End element")
        properties: dict[str, Any] = {}
        if stroke_color:
            properties["stroke_color"] = resolve_color(stroke_color)
        return self._add(
            ElementKind.CONNECTOR,
            name=label or "Connector",
            bounds=Bounds(0, 0, 0, 0),
            text=TextContent(label or "", TEXT_METRICS["default_font_size"]),
            start_id=start_id,
            end_id=end_id,
            properties=properties,
        )

    def create_section(
        self,
        name: str | None = None,
        x: float = 0,
        y: float = 0,
        width: float | None = None,
        height: float | None = None,
    ) -> Element:
        """Create a page-level grouping section."""
        default_w, default_h = ELEMENT_DEFAULTS["section_size"]
        return self._add(
            ElementKind.SECTION,
            name=name or ELEMENT_DEFAULTS["section_name"],
            bounds=Bounds(x, y, width if width is not None else default_w,
                          height if height is not None else default_h),
        )

    def update_element(
        self,
        element_id: str,
        x: float | None = None,
        y: float | None = None,
        width: float | None = None,
        height: float | None = None,
        text: str | None = None,
        color: str | None = None,
    ) -> Element:
        """Move, resize, re-text or recolour an element.

        Stickies keep their fixed size and connectors follow their endpoints,
        so geometry changes on those kinds are ignored.
        """
        element = self._require(element_id)
        bounds = element.bounds

        if element.is_connector:
            if any(v is not None for v in (x, y, width, height)):
                self.logger.warning(f"Ignoring geometry update on connector {element_id}")
        else:
            new_x = x if x is not None else bounds.x
            new_y = y if y is not None else bounds.y
            new_w, new_h = bounds.width, bounds.height
            if width is not None or height is not None:
                if element.kind is ElementKind.STICKY:
                    self.logger.warning(f"Stickies cannot be resized, ignoring size for {element_id}")
                else:
                    new_w = width if width is not None else bounds.width
                    new_h = height if height is not None else bounds.height
            element.bounds = Bounds(new_x, new_y, new_w, new_h)

        if text is not None and element.kind is not ElementKind.SECTION:
            font_size = element.text.font_size if element.text else None
            element.text = TextContent(text, font_size)
            if element.kind is ElementKind.TEXT and width is None and height is None:
                auto_w, auto_h = estimate_text_size(text, font_size or TEXT_METRICS["text_node_font_size"])
                element.bounds = Bounds(element.bounds.x, element.bounds.y, auto_w, auto_h)
            if element.is_connector:
                element.name = text or "Connector"

        if color is not None and not element.is_connector:
            element.properties["color"] = resolve_color(color)

        return self._snapshot(element)

    def delete_element(self, element_id: str) -> Element:
        """Remove an element; a section takes its children with it."""
        element = self._require(element_id)
        removed = self._snapshot(element)
        for child in list(self._children(element_id)):
            self.delete_element(child.id)
        del self._elements[element_id]
        self.logger.info(f"Deleted {element.kind.value} {element_id}")
        return removed

    def query_elements(self, kind: ElementKind | None = None, include_children: bool = False) -> list[Element]:
        elements = self.list_elements(recursive=include_children)
        if kind is not None:
            elements = [e for e in elements if e.kind is kind]
        return elements

    def clear_board(self) -> int:
        """Remove every element, returning how many page-level elements existed."""
        count = sum(1 for e in self._elements.values() if e.container_id is None)
        self._elements.clear()
        self.logger.info(f"Cleared board '{self.name}' ({count} elements)")
        return count

    def get_board_info(self) -> dict[str, Any]:
        type_counts: dict[str, int] = {}
        page_elements = self.list_elements()
        for element in page_elements:
            type_counts[element.kind.value] = type_counts.get(element.kind.value, 0) + 1
        return {
            "page_name": self.name,
            "element_count": len(page_elements),
            "total_element_count": len(self._elements),
            "type_counts": type_counts,
        }

    # ── Internals ─────────────────────────────────────────────────────

    def _add(
        self,
        kind: ElementKind,
        name: str,
        bounds: Bounds,
        text: TextContent | None = None,
        parent_id: str | None = None,
        start_id: str | None = None,
        end_id: str | None = None,
        properties: dict[str, Any] | None = None,
    ) -> Element:
        if parent_id is not None:
            parent = self._require(parent_id, "Parent section")
            if not parent.is_section:
                raise ValueError(f"Parent {parent_id} is not a section")

        element = Element(
            id=f"1:{self._next_id}",
            kind=kind,
            name=name,
            bounds=bounds,
            text=text,
            container_id=parent_id,
            start_id=start_id,
            end_id=end_id,
            properties=properties or {},
        )
        self._next_id += 1
        self._elements[element.id] = element
        self.logger.info(f"Created {kind.value} {element.id} '{name}'")
        return self._snapshot(element)

    def _require(self, element_id: str, role: str = "Element") -> Element:
        element = self._elements.get(element_id)
        if element is None:
            raise ElementNotFoundError(element_id, role)
        return element

    def _children(self, section_id: str) -> list[Element]:
        return [e for e in self._elements.values() if e.container_id == section_id]

    def _absolute_bounds(self, element: Element) -> Bounds:
        bounds = element.bounds
        parent = self._elements.get(element.container_id) if element.container_id else None
        while parent is not None:
            bounds = bounds.translated(parent.bounds.x, parent.bounds.y)
            parent = self._elements.get(parent.container_id) if parent.container_id else None
        return bounds

    def _snapshot(self, element: Element) -> Element:
        snapshot = copy.deepcopy(element)
        if element.is_connector:
            start = self._elements.get(element.start_id or "")
            end = self._elements.get(element.end_id or "")
            if start is not None and end is not None:
                sx, sy = self._absolute_bounds(start).center
                ex, ey = self._absolute_bounds(end).center
                snapshot.bounds = Bounds(min(sx, ex), min(sy, ey), abs(ex - sx), abs(ey - sy))
        return snapshot
