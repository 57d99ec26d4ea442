"""
Tests for the in-memory FigJam board.
"""

import pytest

from figjam_mcp.utils.board import ElementNotFoundError, InMemoryBoard, estimate_text_size
from figjam_mcp.utils.scene import Bounds, ElementKind


class TestElementCreation:
    """Test cases for the host creation primitives."""

    def test_sticky_defaults(self, board):
        """Stickies are 240x240, or 440x240 when wide."""
        sticky = board.create_sticky("note")
        wide = board.create_sticky("wide note", wide=True)

        assert (sticky.bounds.width, sticky.bounds.height) == (240, 240)
        assert (wide.bounds.width, wide.bounds.height) == (440, 240)
        assert sticky.properties["color"] == "#FFECBD"

    def test_shape_defaults(self, board):
        """Shapes default to a 200x100 light blue rounded rectangle."""
        shape = board.create_shape(text="API")

        assert shape.kind is ElementKind.SHAPE
        assert shape.bounds == Bounds(0, 0, 200, 100)
        assert shape.properties == {"shape_type": "ROUNDED_RECTANGLE", "color": "#C2E5FF"}
        assert shape.text.font_size == 14

    def test_unknown_shape_type(self, board):
        """Unknown shape types are rejected."""
        with pytest.raises(ValueError, match="Unknown shape type"):
            board.create_shape("HEXAGON", "x")

    def test_ids_are_sequential_strings(self, board):
        """Ids are assigned at creation in order."""
        a = board.create_shape(text="a")
        b = board.create_shape(text="b")

        assert a.id == "1:1"
        assert b.id == "1:2"

    def test_text_auto_size(self, board):
        """Text nodes are sized by the character-width heuristic."""
        text = board.create_text("Hello")

        assert (text.bounds.width, text.bounds.height) == estimate_text_size("Hello", 16)

    def test_connector_requires_endpoints(self, board):
        """Connectors need both endpoints to exist."""
        shape = board.create_shape(text="a")

        with pytest.raises(ElementNotFoundError, match="End element not found: 9:9"):
            board.create_connector(shape.id, "9:9")

    def test_connector_bounds_follow_endpoints(self, board):
        """Connector bounds span the endpoint centres."""
        a = board.create_shape(text="a", x=0, y=0)
        b = board.create_shape(text="b", x=400, y=200)
        connector = board.create_connector(a.id, b.id, label="calls")

        assert connector.bounds == Bounds(100, 50, 400, 200)
        assert connector.to_dict()["label"] == "calls"

    def test_parent_must_be_section(self, board):
        """Only sections can contain elements."""
        shape = board.create_shape(text="a")

        with pytest.raises(ValueError, match="is not a section"):
            board.create_shape(text="b", parent_id=shape.id)

    def test_to_dict_reports_rgb_colors(self, board):
        """Colours are also serialized as 0..1 RGB for canvas paints."""
        a = board.create_shape(text="a", color="#FF0000")
        b = board.create_shape(text="b", x=400)
        connector = board.create_connector(a.id, b.id, stroke_color="WHITE")
        section = board.create_section("S", y=400)

        assert a.to_dict()["color"] == "#FF0000"
        assert a.to_dict()["color_rgb"] == {"r": 1.0, "g": 0.0, "b": 0.0}
        assert connector.to_dict()["stroke_color_rgb"] == {"r": 1.0, "g": 1.0, "b": 1.0}
        assert "color_rgb" not in section.to_dict()

    def test_to_dict_includes_parent(self, board):
        """Serialized children report their parent id."""
        section = board.create_section("S")
        child = board.create_shape(text="a", parent_id=section.id)

        data = child.to_dict()
        assert data["parent_id"] == section.id
        assert data["type"] == "SHAPE_WITH_TEXT"
        assert data["text"] == "a"


class TestElementUpdates:
    """Test cases for update, delete and query."""

    def test_update_moves_and_resizes_shape(self, board):
        """Shapes can be moved and resized."""
        shape = board.create_shape(text="a")

        updated = board.update_element(shape.id, x=10, y=20, width=300)

        assert updated.bounds == Bounds(10, 20, 300, 100)

    def test_sticky_size_is_fixed(self, board):
        """Resizing a sticky is ignored, moving it is not."""
        sticky = board.create_sticky("note")

        updated = board.update_element(sticky.id, x=50, width=500, height=500)

        assert updated.bounds == Bounds(50, 0, 240, 240)

    def test_connector_label_update(self, board):
        """Updating connector text changes its label."""
        a = board.create_shape(text="a")
        b = board.create_shape(text="b", x=400)
        connector = board.create_connector(a.id, b.id)

        updated = board.update_element(connector.id, text="reads")

        assert updated.characters == "reads"
        assert updated.name == "reads"

    def test_update_unknown_element(self, board):
        """Unknown ids raise ElementNotFoundError, a LookupError."""
        with pytest.raises(LookupError):
            board.update_element("1:99", x=0)

    def test_update_invalid_color(self, board):
        """Unknown colour names are rejected."""
        shape = board.create_shape(text="a")

        with pytest.raises(ValueError, match="Unknown color"):
            board.update_element(shape.id, color="PLAID")

    def test_delete_section_removes_children(self, board):
        """Deleting a section deletes its children."""
        section = board.create_section("S")
        child = board.create_shape(text="a", parent_id=section.id)

        board.delete_element(section.id)

        assert board.get_element(child.id) is None
        assert board.list_elements(recursive=True) == []

    def test_query_by_kind(self, board, flow_board):
        """Queries filter by kind and optionally include section children."""
        assert len(board.query_elements()) == 3  # section + 2 connectors
        shapes = board.query_elements(ElementKind.SHAPE, include_children=True)
        assert [s.id for s in shapes] == [flow_board["start"], flow_board["process"], flow_board["end"]]

    def test_board_info_and_clear(self):
        """Board info counts page-level elements; clear empties the board."""
        board = InMemoryBoard("Design")
        board.create_shape(text="a")
        board.create_sticky("b")

        info = board.get_board_info()
        assert info["page_name"] == "Design"
        assert info["element_count"] == 2
        assert info["type_counts"] == {"SHAPE_WITH_TEXT": 1, "STICKY": 1}

        assert board.clear_board() == 2
        assert board.get_board_info()["element_count"] == 0

    def test_values_are_copies(self, board):
        """Mutating a returned element does not touch the board."""
        shape = board.create_shape(text="a")
        shape.bounds = Bounds(999, 999, 1, 1)

        assert board.get_element(shape.id).bounds == Bounds(0, 0, 200, 100)


class TestCapability:
    """Test cases for the capability write methods."""

    def test_set_position_rejects_connectors(self, board):
        """Connectors cannot be positioned directly."""
        a = board.create_shape(text="a")
        b = board.create_shape(text="b", x=400)
        connector = board.create_connector(a.id, b.id)

        with pytest.raises(ValueError):
            board.set_position(connector.id, 0, 0)

    def test_resize_section_only(self, board):
        """Only sections can be resized through the capability."""
        shape = board.create_shape(text="a")
        section = board.create_section("S")

        board.resize_section(section.id, 900, 700)
        assert board.get_element(section.id).bounds.width == 900

        with pytest.raises(ValueError):
            board.resize_section(shape.id, 10, 10)

    def test_get_children_of_missing_section(self, board):
        """Listing children of an unknown section raises."""
        with pytest.raises(ElementNotFoundError, match="Section not found"):
            board.get_children("1:42")
