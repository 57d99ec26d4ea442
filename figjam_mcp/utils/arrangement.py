"""
Alignment, distribution and section auto-fit.

Geometry is read from a SceneSnapshot (absolute page frame) and written back
through the CanvasCapability in each element's own container frame. Every
write made during one operation is recorded, and the whole operation is
rolled back if any write fails.
"""

import logging
from typing import Any

from figjam_mcp.config import ELEMENT_DEFAULTS, LAYOUT_THRESHOLDS
from figjam_mcp.utils.scene import CanvasCapability, SceneElement, SceneSnapshot

logger = logging.getLogger(__name__)

ALIGNMENTS = ("left", "center", "right", "top", "middle", "bottom")
DIRECTIONS = ("horizontal", "vertical")


class ArrangementError(RuntimeError):
    """Raised when an arrangement fails part-way; the board has been restored."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class _BoundsTransaction:
    """Records positional writes so they can be undone in reverse order."""

    def __init__(self, canvas: CanvasCapability):
        self.canvas = canvas
        self._undo: list[tuple[str, str, float, float]] = []

    def set_position(self, element_id: str, x: float, y: float, old_x: float, old_y: float) -> None:
        self._undo.append(("position", element_id, old_x, old_y))
        self.canvas.set_position(element_id, x, y)

    def resize_section(self, section_id: str, width: float, height: float, old_w: float, old_h: float) -> None:
        self._undo.append(("size", section_id, old_w, old_h))
        self.canvas.resize_section(section_id, width, height)

    def rollback(self) -> None:
        for action, element_id, a, b in reversed(self._undo):
            try:
                if action == "position":
                    self.canvas.set_position(element_id, a, b)
                else:
                    self.canvas.resize_section(element_id, a, b)
            except Exception as e:
                logger.error(f"Rollback of {action} on {element_id} failed: {e}")
        self._undo.clear()


class ArrangementEngine:
    """Repositions sets of elements and keeps their sections enclosing them."""

    def __init__(self, canvas: CanvasCapability, padding: float | None = None):
        self.canvas = canvas
        self.padding = padding if padding is not None else LAYOUT_THRESHOLDS["section_header"]

    def _resolve(self, snapshot: SceneSnapshot, element_ids: list[str]) -> list[SceneElement]:
        """Resolve ids in order; unknown ids, duplicates and connectors are skipped."""
        resolved = []
        seen = set()
        for element_id in element_ids:
            entry = snapshot.get(element_id)
            if entry is None:
                logger.debug(f"Skipping unknown element {element_id}")
                continue
            if entry.element.is_connector or entry.id in seen:
                continue
            seen.add(entry.id)
            resolved.append(entry)
        return resolved

    def _run(self, operation: str, apply) -> Any:
        transaction = _BoundsTransaction(self.canvas)
        try:
            return apply(transaction)
        except Exception as e:
            logger.error(f"{operation} failed, rolling back: {e}")
            transaction.rollback()
            raise ArrangementError(f"{operation} failed: {e}", cause=e) from e

    def _move_all(
        self,
        transaction: _BoundsTransaction,
        snapshot: SceneSnapshot,
        moves: list[tuple[SceneElement, float, float]],
    ) -> list[str]:
        """Apply absolute-frame moves and fit every touched section."""
        containers: list[str] = []
        for entry, abs_x, abs_y in moves:
            origin_x, origin_y = snapshot.container_origin(entry.element.container_id)
            bounds = entry.element.bounds
            transaction.set_position(entry.id, abs_x - origin_x, abs_y - origin_y, bounds.x, bounds.y)
            container_id = entry.element.container_id
            if container_id is not None and container_id not in containers:
                containers.append(container_id)
        return self._fit_sections(transaction, containers)

    def align(self, element_ids: list[str], alignment: str) -> dict[str, Any]:
        """Snap elements to a shared edge or centre line.

        Args:
            element_ids: Elements to align; unresolved ids are skipped
            alignment: One of left, center, right, top, middle, bottom

        Returns:
            Dictionary with the alignment, element count and resized sections
        """
        if alignment not in ALIGNMENTS:
            raise ValueError(f"Unknown alignment: {alignment}. Expected one of {', '.join(ALIGNMENTS)}")

        snapshot = SceneSnapshot.capture(self.canvas)
        entries = self._resolve(snapshot, element_ids)
        if len(entries) < 2:
            return {"aligned": True, "alignment": alignment, "count": len(entries), "resized_sections": []}

        boxes = [entry.absolute for entry in entries]
        moves = []
        if alignment == "left":
            target = min(b.x for b in boxes)
            moves = [(e, target, e.absolute.y) for e in entries]
        elif alignment == "right":
            target = max(b.right for b in boxes)
            moves = [(e, target - e.absolute.width, e.absolute.y) for e in entries]
        elif alignment == "center":
            target = sum(b.center[0] for b in boxes) / len(boxes)
            moves = [(e, target - e.absolute.width / 2, e.absolute.y) for e in entries]
        elif alignment == "top":
            target = min(b.y for b in boxes)
            moves = [(e, e.absolute.x, target) for e in entries]
        elif alignment == "bottom":
            target = max(b.bottom for b in boxes)
            moves = [(e, e.absolute.x, target - e.absolute.height) for e in entries]
        else:  # middle
            target = sum(b.center[1] for b in boxes) / len(boxes)
            moves = [(e, e.absolute.x, target - e.absolute.height / 2) for e in entries]

        resized = self._run("Alignment", lambda tx: self._move_all(tx, snapshot, moves))
        logger.info(f"Aligned {len(entries)} elements ({alignment}), resized sections: {resized}")
        return {
            "aligned": True,
            "alignment": alignment,
            "count": len(entries),
            "resized_sections": resized,
        }

    def distribute(self, element_ids: list[str], direction: str, spacing: float | None = None) -> dict[str, Any]:
        """Space elements evenly along an axis, never closer than ``spacing``.

        The applied gap is the larger of the current natural gap and the
        minimum spacing. Elements are laid out from the first element's
        leading edge in order of their leading coordinate. Fewer than three
        resolved elements is a no-op and the result carries no ``spacing``.
        """
        if direction not in DIRECTIONS:
            raise ValueError(f"Unknown direction: {direction}. Expected horizontal or vertical")
        min_spacing = spacing if spacing is not None else ELEMENT_DEFAULTS["distribution_spacing"]
        if min_spacing < 0:
            raise ValueError("Spacing must be non-negative")

        snapshot = SceneSnapshot.capture(self.canvas)
        entries = self._resolve(snapshot, element_ids)
        if len(entries) < 3:
            return {
                "distributed": True,
                "direction": direction,
                "count": len(entries),
                "resized_sections": [],
            }

        horizontal = direction == "horizontal"

        def lead(entry: SceneElement) -> float:
            return entry.absolute.x if horizontal else entry.absolute.y

        def size(entry: SceneElement) -> float:
            return entry.absolute.width if horizontal else entry.absolute.height

        ordered = sorted(entries, key=lead)
        first_lead = lead(ordered[0])
        last_trail = lead(ordered[-1]) + size(ordered[-1])
        total_size = sum(size(entry) for entry in ordered)
        natural_gap = ((last_trail - first_lead) - total_size) / (len(ordered) - 1)
        gap = max(natural_gap, min_spacing)

        moves = []
        cursor = first_lead
        for entry in ordered:
            if horizontal:
                moves.append((entry, cursor, entry.absolute.y))
            else:
                moves.append((entry, entry.absolute.x, cursor))
            cursor += size(entry) + gap

        resized = self._run("Distribution", lambda tx: self._move_all(tx, snapshot, moves))
        logger.info(f"Distributed {len(ordered)} elements {direction} with gap {gap:g}")
        return {
            "distributed": True,
            "direction": direction,
            "count": len(ordered),
            "spacing": gap,
            "resized_sections": resized,
        }

    def _fit_sections(self, transaction: _BoundsTransaction, section_ids: list[str]) -> list[str]:
        """Grow each section to enclose all of its children.

        Children sitting closer than the padding to the top/left edge are
        shifted inward first, which also moves children that were not part
        of the original operation. Sections never shrink.
        """
        padding = self.padding
        resized = []
        for section_id in section_ids:
            section = self.canvas.get_element(section_id)
            if section is None or not section.is_section:
                continue
            children = self.canvas.get_children(section_id)
            if not children:
                continue

            min_x = min(c.bounds.x for c in children)
            min_y = min(c.bounds.y for c in children)
            max_x = max(c.bounds.right for c in children)
            max_y = max(c.bounds.bottom for c in children)

            shift_x = padding - min_x if min_x < padding else 0.0
            shift_y = padding - min_y if min_y < padding else 0.0
            if shift_x > 0 or shift_y > 0:
                for child in children:
                    transaction.set_position(
                        child.id,
                        child.bounds.x + shift_x,
                        child.bounds.y + shift_y,
                        child.bounds.x,
                        child.bounds.y,
                    )
                max_x += shift_x
                max_y += shift_y
                logger.debug(f"Shifted children of {section_id} by ({shift_x:g}, {shift_y:g})")

            new_w = max_x + padding
            new_h = max_y + padding
            current = section.bounds
            if new_w > current.width or new_h > current.height:
                transaction.resize_section(
                    section_id,
                    max(new_w, current.width),
                    max(new_h, current.height),
                    current.width,
                    current.height,
                )
                resized.append(section_id)
        return resized
