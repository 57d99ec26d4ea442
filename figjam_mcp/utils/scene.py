"""
Scene model for FigJam boards.

This module defines the element data model shared by the canvas host and the
layout engine, the capability interface the engine uses to read and mutate a
board, and the scene snapshot that resolves every element into the absolute
page frame.

Features:
- Axis-aligned bounds with intersection helpers
- Closed set of element kinds with a per-kind trait table
- CanvasCapability abstract interface (enumerate, resolve, move, resize)
- SceneSnapshot: single point of container-relative -> absolute translation

Coordinate frames:
    Elements whose container is a section store bounds relative to the
    section's top-left corner. Page-level elements store absolute bounds.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from figjam_mcp.utils.colors import hex_to_rgb


class ElementKind(Enum):
    """Kinds of element that can live on a board.

    Values mirror the node type names reported by the canvas host.
    """

    SHAPE = "SHAPE_WITH_TEXT"
    STICKY = "STICKY"
    TEXT = "TEXT"
    CONNECTOR = "CONNECTOR"
    SECTION = "SECTION"

    @classmethod
    def parse(cls, value: str) -> "ElementKind":
        """Parse a host type name or a lower-case alias (``shape``, ``sticky``...)."""
        normalized = value.strip().upper()
        aliases = {"SHAPE": cls.SHAPE}
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown element type: {value}") from None


@dataclass(frozen=True)
class KindTraits:
    """Which layout checks an element kind takes part in.

    Attributes:
        text_checked: Subject to the text truncation estimate.
        overlap_candidate: Compared pairwise for bounding-box overlap.
        obstructs_connectors: Can block the straight path of a connector.
        visual_bleed_candidate: Checked against sections it visually sits in.
        structural_bleed_candidate: Checked against the section that owns it.
    """

    text_checked: bool
    overlap_candidate: bool
    obstructs_connectors: bool
    visual_bleed_candidate: bool
    structural_bleed_candidate: bool


KIND_TRAITS: dict[ElementKind, KindTraits] = {
    ElementKind.SHAPE: KindTraits(True, True, True, True, True),
    ElementKind.STICKY: KindTraits(False, True, True, True, True),
    ElementKind.TEXT: KindTraits(False, True, False, True, True),
    ElementKind.CONNECTOR: KindTraits(False, False, False, False, False),
    ElementKind.SECTION: KindTraits(False, False, False, False, True),
}

_missing_kinds = set(ElementKind) - set(KIND_TRAITS)
if _missing_kinds:
    raise RuntimeError(f"KIND_TRAITS has no entry for: {sorted(k.name for k in _missing_kinds)}")


def traits_for(kind: ElementKind) -> KindTraits:
    """Return the check traits for an element kind."""
    return KIND_TRAITS[kind]


@dataclass
class Bounds:
    """Axis-aligned bounding box with a top-left origin."""

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Bounds must have non-negative size, got {self.width}x{self.height}")

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def area(self) -> float:
        return self.width * self.height

    def intersects(self, other: "Bounds") -> bool:
        """Strict overlap test; boxes that only share an edge do not intersect."""
        return (
            self.x < other.right
            and self.right > other.x
            and self.y < other.bottom
            and self.bottom > other.y
        )

    def intersection_area(self, other: "Bounds") -> float:
        """Area shared by two boxes, 0.0 when they do not intersect."""
        if not self.intersects(other):
            return 0.0
        width = min(self.right, other.right) - max(self.x, other.x)
        height = min(self.bottom, other.bottom) - max(self.y, other.y)
        return width * height

    def translated(self, dx: float, dy: float) -> "Bounds":
        return Bounds(self.x + dx, self.y + dy, self.width, self.height)

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass
class TextContent:
    """Text carried by an element, with an optional uniform font size."""

    characters: str
    font_size: float | None = None


@dataclass
class Element:
    """A single board element.

    Attributes:
        id: Stable identifier assigned by the host.
        kind: Element kind.
        name: Display label.
        bounds: Bounds in the frame of the element's container.
        text: Text content (shape/sticky/text body, connector label).
        container_id: Id of the owning section, None for page-level elements.
        start_id: Connector start element id.
        end_id: Connector end element id.
        properties: Host-specific presentation attributes (colour, shape type...).
    """

    id: str
    kind: ElementKind
    name: str
    bounds: Bounds
    text: TextContent | None = None
    container_id: str | None = None
    start_id: str | None = None
    end_id: str | None = None
    properties: dict[str, Any] = field(default_factory=dict)

    @property
    def characters(self) -> str:
        return self.text.characters if self.text else ""

    @property
    def is_section(self) -> bool:
        return self.kind is ElementKind.SECTION

    @property
    def is_connector(self) -> bool:
        return self.kind is ElementKind.CONNECTOR

    def to_dict(self) -> dict[str, Any]:
        """Serialize in the shape the host reports elements to agents."""
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.kind.value,
            **self.bounds.to_dict(),
        }
        if self.container_id:
            data["parent_id"] = self.container_id
        if self.kind is ElementKind.CONNECTOR:
            data["start_id"] = self.start_id
            data["end_id"] = self.end_id
            if self.characters:
                data["label"] = self.characters
        elif self.text is not None:
            data["text"] = self.characters
        data.update(self.properties)
        # Canvas paints take 0..1 RGB
        for key in ("color", "stroke_color"):
            if key in self.properties:
                data[f"{key}_rgb"] = hex_to_rgb(self.properties[key])
        return data


class CanvasCapability(ABC):
    """Read/enumerate/mutate interface the layout engine needs from a board.

    Implementations return value copies of elements; all mutation goes through
    the explicit write methods.
    """

    @abstractmethod
    def list_elements(self, recursive: bool = False) -> list[Element]:
        """List page-level elements, optionally followed by section children."""

    @abstractmethod
    def get_element(self, element_id: str) -> Element | None:
        """Resolve an element by id, None if it does not exist."""

    @abstractmethod
    def get_children(self, section_id: str) -> list[Element]:
        """List the direct children of a section (section-relative bounds)."""

    @abstractmethod
    def set_position(self, element_id: str, x: float, y: float) -> None:
        """Move an element, coordinates in its container's frame."""

    @abstractmethod
    def resize_section(self, section_id: str, width: float, height: float) -> None:
        """Resize a section without triggering layout constraints on its children."""


@dataclass
class SceneElement:
    """An element paired with its bounds in the absolute page frame."""

    element: Element
    absolute: Bounds

    @property
    def id(self) -> str:
        return self.element.id

    @property
    def kind(self) -> ElementKind:
        return self.element.kind

    @property
    def name(self) -> str:
        return self.element.name

    @property
    def traits(self) -> KindTraits:
        return traits_for(self.element.kind)


class SceneSnapshot:
    """Point-in-time view of a board with every element in absolute coordinates.

    Elements are ordered page-level first in host order, each section
    immediately followed by its own children (depth first).
    """

    def __init__(self, elements: list[SceneElement]):
        self.elements = elements
        self._by_id = {entry.id: entry for entry in elements}

    @classmethod
    def capture(cls, canvas: CanvasCapability) -> "SceneSnapshot":
        """Read the current board through the capability interface."""
        entries: list[SceneElement] = []

        def visit(element: Element, origin_x: float, origin_y: float) -> None:
            absolute = element.bounds.translated(origin_x, origin_y)
            entries.append(SceneElement(element, absolute))
            if element.is_section:
                for child in canvas.get_children(element.id):
                    visit(child, absolute.x, absolute.y)

        for element in canvas.list_elements(recursive=False):
            visit(element, 0.0, 0.0)
        return cls(entries)

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self):
        return iter(self.elements)

    def get(self, element_id: str | None) -> SceneElement | None:
        if element_id is None:
            return None
        return self._by_id.get(element_id)

    def sections(self) -> list[SceneElement]:
        return [entry for entry in self.elements if entry.kind is ElementKind.SECTION]

    def connectors(self) -> list[SceneElement]:
        return [entry for entry in self.elements if entry.kind is ElementKind.CONNECTOR]

    def children_of(self, section_id: str) -> list[SceneElement]:
        return [entry for entry in self.elements if entry.element.container_id == section_id]

    def container_origin(self, container_id: str | None) -> tuple[float, float]:
        """Absolute top-left of a container frame, (0, 0) for the page."""
        container = self.get(container_id)
        if container is None:
            return (0.0, 0.0)
        return (container.absolute.x, container.absolute.y)
