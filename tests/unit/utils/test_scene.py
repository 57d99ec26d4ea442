"""
Tests for the scene model: bounds, kind traits and snapshots.
"""

import pytest

from figjam_mcp.utils.scene import (
    KIND_TRAITS,
    Bounds,
    ElementKind,
    SceneSnapshot,
    traits_for,
)


class TestBounds:
    """Test cases for axis-aligned bounds."""

    def test_edges_and_center(self):
        """Right, bottom and centre are derived from origin and size."""
        bounds = Bounds(10, 20, 100, 50)

        assert bounds.right == 110
        assert bounds.bottom == 70
        assert bounds.center == (60, 45)
        assert bounds.area == 5000

    def test_negative_size_rejected(self):
        """Negative width or height is invalid."""
        with pytest.raises(ValueError):
            Bounds(0, 0, -1, 10)

    def test_shared_edge_is_not_intersection(self):
        """Boxes that only touch do not intersect."""
        a = Bounds(0, 0, 100, 100)
        b = Bounds(100, 0, 100, 100)

        assert not a.intersects(b)
        assert a.intersection_area(b) == 0.0

    def test_intersection_area_is_symmetric(self):
        """Overlap area is the same whichever box is asked."""
        a = Bounds(0, 0, 100, 100)
        b = Bounds(60, 30, 80, 120)

        assert a.intersection_area(b) == b.intersection_area(a) == 40 * 70

    def test_translated(self):
        """Translation keeps the size."""
        assert Bounds(5, 5, 10, 10).translated(100, 200) == Bounds(105, 205, 10, 10)


class TestElementKind:
    """Test cases for element kinds and traits."""

    def test_every_kind_has_traits(self):
        """The trait table covers the whole kind enum."""
        assert set(KIND_TRAITS) == set(ElementKind)

    def test_parse_aliases(self):
        """Host type names and the 'shape' alias both parse."""
        assert ElementKind.parse("shape") is ElementKind.SHAPE
        assert ElementKind.parse("SHAPE_WITH_TEXT") is ElementKind.SHAPE
        assert ElementKind.parse("sticky") is ElementKind.STICKY

    def test_parse_unknown(self):
        """Unknown type names raise ValueError."""
        with pytest.raises(ValueError, match="Unknown element type"):
            ElementKind.parse("widget")

    def test_trait_participation(self):
        """Sections and connectors stay out of overlap; text nodes do not obstruct connectors."""
        assert not traits_for(ElementKind.SECTION).overlap_candidate
        assert not traits_for(ElementKind.CONNECTOR).overlap_candidate
        assert traits_for(ElementKind.TEXT).overlap_candidate
        assert not traits_for(ElementKind.TEXT).obstructs_connectors
        assert traits_for(ElementKind.SHAPE).text_checked
        assert not traits_for(ElementKind.STICKY).text_checked


class TestSceneSnapshot:
    """Test cases for snapshot capture and coordinate translation."""

    def test_children_translated_to_page_frame(self, board):
        """Section children get absolute bounds; their own bounds stay relative."""
        section = board.create_section("S", x=500, y=300)
        child = board.create_shape(text="A", x=40, y=60, parent_id=section.id)

        snapshot = SceneSnapshot.capture(board)
        entry = snapshot.get(child.id)

        assert entry.absolute == Bounds(540, 360, 200, 100)
        assert entry.element.bounds == Bounds(40, 60, 200, 100)
        assert snapshot.container_origin(section.id) == (500, 300)
        assert snapshot.container_origin(None) == (0.0, 0.0)

    def test_depth_first_order(self, board):
        """Each section is immediately followed by its children."""
        first = board.create_shape(text="top")
        section = board.create_section("S", x=0, y=500)
        child = board.create_sticky("inside", x=50, y=50, parent_id=section.id)
        last = board.create_shape(text="after", x=900)

        ids = [entry.id for entry in SceneSnapshot.capture(board)]

        assert ids == [first.id, section.id, child.id, last.id]

    def test_queries(self, flow_board, board):
        """Sections, connectors and children are filtered by kind and container."""
        snapshot = SceneSnapshot.capture(board)

        assert [s.id for s in snapshot.sections()] == [flow_board["section"]]
        assert len(snapshot.connectors()) == 2
        assert len(snapshot.children_of(flow_board["section"])) == 3
        assert snapshot.get("missing") is None
        assert snapshot.get(None) is None
        assert len(snapshot) == 6
