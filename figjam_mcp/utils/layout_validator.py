"""
Layout validation for FigJam boards.

Observational checks over a scene snapshot. Every finding is returned as a
LayoutIssue; nothing on the board is changed, so repeated validation of an
unchanged board yields the same report.

Checks:
- Text truncation: shape text that will not fit at the current size
- Overlap: significant bounding-box overlap between two elements
- Connector gap: connected elements too close for an arrow and label
- Connector path: straight connector path crossing an unrelated element
- Section bleed: elements escaping a section, checked structurally
  (section-relative children) and visually (page-frame containment)
"""

from dataclasses import dataclass, field
from enum import Enum
import logging
import math
from typing import Any

from figjam_mcp.config import DISPLAY_CONSTANTS, LAYOUT_THRESHOLDS, TEXT_METRICS
from figjam_mcp.utils.scene import Bounds, CanvasCapability, SceneElement, SceneSnapshot

logger = logging.getLogger(__name__)


class IssueKind(Enum):
    """Kinds of layout issue."""

    TEXT_TRUNCATED = "text_truncated"
    OVERLAP = "overlap"
    TIGHT_CONNECTOR = "tight_connector"
    CONNECTOR_THROUGH_SHAPE = "connector_through_shape"
    SECTION_BLEED = "section_bleed"


@dataclass
class LayoutIssue:
    """A single layout problem found on the board.

    Attributes:
        kind: Issue kind.
        element_id: Element the issue is reported against.
        element_name: Human-readable name for the reported element(s).
        details: What is wrong.
        suggestion: How an agent can fix it.
        related_ids: Other elements involved (overlap partner, endpoints, section).
        suggested_size: (width, height) that resolves a truncation.
        move_axis: "horizontal" or "vertical" for tight connectors.
        move_distance: Extra distance needed to reach the connector gap.
        overflow: Bleed overflow in pixels keyed by edge.
        check_pass: "structural" or "visual" for section bleed.
    """

    kind: IssueKind
    element_id: str
    element_name: str
    details: str
    suggestion: str
    related_ids: list[str] = field(default_factory=list)
    suggested_size: tuple[float, float] | None = None
    move_axis: str | None = None
    move_distance: float | None = None
    overflow: dict[str, float] = field(default_factory=dict)
    check_pass: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "kind": self.kind.value,
            "element_id": self.element_id,
            "element_name": self.element_name,
            "details": self.details,
            "suggestion": self.suggestion,
        }
        if self.related_ids:
            data["related_ids"] = list(self.related_ids)
        if self.suggested_size is not None:
            data["suggested_size"] = {
                "width": self.suggested_size[0],
                "height": self.suggested_size[1],
            }
        if self.move_axis is not None:
            data["move_axis"] = self.move_axis
            data["move_distance"] = self.move_distance
        if self.overflow:
            data["overflow"] = dict(self.overflow)
        if self.check_pass is not None:
            data["check_pass"] = self.check_pass
        return data


@dataclass
class ValidationReport:
    """Result of one validation run. An empty issue list means a clean layout."""

    issues: list[LayoutIssue] = field(default_factory=list)
    element_count: int = 0

    @property
    def success(self) -> bool:
        return len(self.issues) == 0

    @property
    def issue_count(self) -> int:
        return len(self.issues)

    def by_kind(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for issue in self.issues:
            counts[issue.kind.value] = counts.get(issue.kind.value, 0) + 1
        return counts

    @property
    def summary(self) -> str:
        if self.success:
            return "Layout is clean - no truncation, overlap, or spacing issues detected"
        return f"{self.issue_count} issue(s) found - fix with update_element and re-validate"

    def to_dict(self) -> dict[str, Any]:
        return {
            "issues": [issue.to_dict() for issue in self.issues],
            "issue_count": self.issue_count,
            "counts_by_kind": self.by_kind(),
            "element_count": self.element_count,
            "summary": self.summary,
        }


def _px(value: float) -> int:
    """Round half up to whole pixels for messages."""
    return int(math.floor(value + 0.5))


def _fmt(value: float) -> str:
    return f"{value:g}"


def axis_gap(a_start: float, a_end: float, b_start: float, b_end: float) -> float:
    """Gap between two intervals on one axis, or -1 when they overlap."""
    if a_end <= b_start:
        return b_start - a_end
    if b_end <= a_start:
        return a_start - b_end
    return -1.0


def segment_intersects_box(x1: float, y1: float, x2: float, y2: float, box: Bounds) -> bool:
    """Liang-Barsky test of segment (x1, y1)-(x2, y2) against an axis-aligned box.

    The parametric interval [u1, u2] starts at [0, 1] and is clipped against
    the four half-planes of the box; the segment touches the box iff the
    interval is still non-empty at the end.
    """
    dx = x2 - x1
    dy = y2 - y1
    p = (-dx, dx, -dy, dy)
    q = (x1 - box.x, box.right - x1, y1 - box.y, box.bottom - y1)
    u1, u2 = 0.0, 1.0
    for pk, qk in zip(p, q):
        if pk == 0:
            # Parallel to this edge: reject when outside it
            if qk < 0:
                return False
            continue
        t = qk / pk
        if pk < 0:
            u1 = max(u1, t)
        else:
            u2 = min(u2, t)
    return u1 <= u2


class LayoutValidator:
    """Runs the layout checks against a board.

    Thresholds default to ``LAYOUT_THRESHOLDS``/``TEXT_METRICS`` and can be
    overridden per instance for tests or stricter boards.
    """

    def __init__(
        self,
        thresholds: dict[str, float] | None = None,
        text_metrics: dict[str, float] | None = None,
    ):
        self.thresholds = {**LAYOUT_THRESHOLDS, **(thresholds or {})}
        self.text_metrics = {**TEXT_METRICS, **(text_metrics or {})}

    def validate(self, canvas: CanvasCapability) -> ValidationReport:
        """Capture a snapshot of the board and run every check."""
        return self.validate_snapshot(SceneSnapshot.capture(canvas))

    def validate_snapshot(self, snapshot: SceneSnapshot) -> ValidationReport:
        issues: list[LayoutIssue] = []
        issues.extend(self.check_text_truncation(snapshot))
        issues.extend(self.check_overlaps(snapshot))
        issues.extend(self.check_connector_gaps(snapshot))
        issues.extend(self.check_connector_paths(snapshot))
        issues.extend(self.check_section_bleed(snapshot))
        report = ValidationReport(issues=issues, element_count=len(snapshot))
        logger.info(f"Layout validation: {len(snapshot)} elements, {report.issue_count} issues")
        return report

    # ── Text truncation ───────────────────────────────────────────────

    def estimate_truncation(
        self, text: str, width: float, height: float, font_size: float | None
    ) -> tuple[float, float] | None:
        """Return a suggested (width, height) if text overflows the box, else None."""
        if not text:
            return None
        font_size = font_size or self.text_metrics["default_font_size"]
        padding = self.thresholds["truncation_padding"]
        char_width = font_size * self.text_metrics["char_width_ratio"]
        available_width = width - padding
        available_height = height - padding
        chars_per_line = max(1, math.floor(available_width / char_width))
        lines_needed = math.ceil(len(text) / chars_per_line)
        required_height = lines_needed * font_size * self.text_metrics["line_height_ratio"]

        if required_height <= available_height:
            return None

        suggested_height = float(math.ceil(required_height + padding + self.thresholds["truncation_slack"]))
        suggested_width = width
        if len(text) > chars_per_line * 2:
            suggested_width = max(width, float(math.ceil(len(text) * char_width / 2 + padding)))
        return suggested_width, max(height, suggested_height)

    def check_text_truncation(self, snapshot: SceneSnapshot) -> list[LayoutIssue]:
        issues = []
        preview = DISPLAY_CONSTANTS["text_preview_length"]
        for entry in snapshot:
            if not entry.traits.text_checked:
                continue
            element = entry.element
            text = element.characters
            font_size = element.text.font_size if element.text else None
            suggestion = self.estimate_truncation(
                text, element.bounds.width, element.bounds.height, font_size
            )
            if suggestion is None:
                continue
            quoted = text[:preview] + ("..." if len(text) > preview else "")
            width, height = suggestion
            issues.append(
                LayoutIssue(
                    kind=IssueKind.TEXT_TRUNCATED,
                    element_id=element.id,
                    element_name=element.name,
                    details=(
                        f'Text "{quoted}" likely truncated in '
                        f"{_px(element.bounds.width)}x{_px(element.bounds.height)} shape"
                    ),
                    suggestion=f"Resize to at least {_fmt(width)}x{_fmt(height)} using update_element",
                    suggested_size=suggestion,
                )
            )
        logger.debug(f"Text truncation check: {len(issues)} issues")
        return issues

    # ── Overlap ───────────────────────────────────────────────────────

    def check_overlaps(self, snapshot: SceneSnapshot) -> list[LayoutIssue]:
        issues = []
        ratio = self.thresholds["overlap_ratio"]
        candidates = [entry for entry in snapshot if entry.traits.overlap_candidate]
        for i, first in enumerate(candidates):
            for second in candidates[i + 1 :]:
                area = first.absolute.intersection_area(second.absolute)
                if area <= 0:
                    continue
                smaller_area = min(first.absolute.area, second.absolute.area)
                if area > smaller_area * ratio:
                    issues.append(
                        LayoutIssue(
                            kind=IssueKind.OVERLAP,
                            element_id=first.id,
                            element_name=f"{first.name} ↔ {second.name}",
                            details=f'"{first.name}" overlaps "{second.name}" by {_px(area)}px²',
                            suggestion=f"Move {second.id} to avoid overlap using update_element",
                            related_ids=[first.id, second.id],
                        )
                    )
        logger.debug(f"Overlap check: {len(candidates)} candidates, {len(issues)} issues")
        return issues

    # ── Connectors ────────────────────────────────────────────────────

    def _resolve_endpoints(
        self, snapshot: SceneSnapshot, connector: SceneElement
    ) -> tuple[SceneElement, SceneElement] | None:
        start = snapshot.get(connector.element.start_id)
        end = snapshot.get(connector.element.end_id)
        if start is None or end is None:
            logger.debug(f"Skipping connector {connector.id}: dangling endpoint")
            return None
        return start, end

    @staticmethod
    def _connector_label(connector: SceneElement) -> str:
        return connector.element.characters or "(unlabeled)"

    def check_connector_gaps(self, snapshot: SceneSnapshot) -> list[LayoutIssue]:
        issues = []
        min_gap = self.thresholds["min_connector_gap"]
        for connector in snapshot.connectors():
            endpoints = self._resolve_endpoints(snapshot, connector)
            if endpoints is None:
                continue
            start, end = endpoints
            a, b = start.absolute, end.absolute
            gap_h = axis_gap(a.x, a.right, b.x, b.right)
            gap_v = axis_gap(a.y, a.bottom, b.y, b.bottom)

            if gap_h >= 0 and gap_v >= 0:
                effective_gap = min(gap_h, gap_v)
            elif gap_h >= 0:
                effective_gap = gap_h
            elif gap_v >= 0:
                effective_gap = gap_v
            else:
                # Overlapping on both axes; reported by the overlap check
                continue

            if effective_gap >= min_gap:
                continue

            horizontal = gap_h >= 0 and (gap_v < 0 or gap_h <= gap_v)
            direction = "horizontally" if horizontal else "vertically"
            move_amount = min_gap - effective_gap
            issues.append(
                LayoutIssue(
                    kind=IssueKind.TIGHT_CONNECTOR,
                    element_id=connector.id,
                    element_name=f"Connector: {self._connector_label(connector)}",
                    details=(
                        f"Only {_px(effective_gap)}px gap {direction} between "
                        f'"{start.name}" and "{end.name}"; connector arrow/label compressed'
                    ),
                    suggestion=(
                        f"Move {end.id} at least {_px(move_amount)}px {direction} "
                        f"to create {_fmt(min_gap)}px gap"
                    ),
                    related_ids=[start.id, end.id],
                    move_axis="horizontal" if horizontal else "vertical",
                    move_distance=move_amount,
                )
            )
        logger.debug(f"Connector gap check: {len(issues)} issues")
        return issues

    def check_connector_paths(self, snapshot: SceneSnapshot) -> list[LayoutIssue]:
        issues = []
        for connector in snapshot.connectors():
            endpoints = self._resolve_endpoints(snapshot, connector)
            if endpoints is None:
                continue
            start, end = endpoints
            x1, y1 = start.absolute.center
            x2, y2 = end.absolute.center

            for obstacle in snapshot:
                if not obstacle.traits.obstructs_connectors:
                    continue
                if obstacle.id in (start.id, end.id):
                    continue
                if not segment_intersects_box(x1, y1, x2, y2, obstacle.absolute):
                    continue
                issues.append(
                    LayoutIssue(
                        kind=IssueKind.CONNECTOR_THROUGH_SHAPE,
                        element_id=connector.id,
                        element_name=f"Connector: {self._connector_label(connector)}",
                        details=(
                            f'Connector between "{start.name}" and "{end.name}" '
                            f'passes through "{obstacle.name}"'
                        ),
                        suggestion=(
                            f'Move "{obstacle.name}" ({obstacle.id}) out of the connector path, '
                            f'or reposition "{start.name}" or "{end.name}" so the connector '
                            f'routes around "{obstacle.name}"'
                        ),
                        related_ids=[obstacle.id, start.id, end.id],
                    )
                )
        logger.debug(f"Connector path check: {len(issues)} issues")
        return issues

    # ── Section bleed ─────────────────────────────────────────────────

    def check_section_bleed(self, snapshot: SceneSnapshot) -> list[LayoutIssue]:
        """Run both bleed passes, section by section (structural first)."""
        issues = []
        for section in snapshot.sections():
            issues.extend(self.check_structural_bleed(snapshot, section))
            issues.extend(self.check_visual_bleed(snapshot, section))
        return issues

    @staticmethod
    def _describe_overflow(overflow: dict[str, float]) -> str:
        return ", ".join(f"{edge} by {_px(amount)}px" for edge, amount in overflow.items())

    def check_structural_bleed(self, snapshot: SceneSnapshot, section: SceneElement) -> list[LayoutIssue]:
        """Children owned by the section, in section-relative coordinates."""
        issues = []
        header = self.thresholds["section_header"]
        margin = self.thresholds["bleed_suggestion_margin"]
        section_w = section.element.bounds.width
        section_h = section.element.bounds.height

        for child in snapshot.children_of(section.id):
            if not child.traits.structural_bleed_candidate:
                continue
            b = child.element.bounds
            overflow: dict[str, float] = {}
            if b.x < 0:
                overflow["left"] = -b.x
            if b.right > section_w:
                overflow["right"] = b.right - section_w
            if b.y < header:
                overflow["top"] = header - b.y
            if b.bottom > section_h:
                overflow["bottom"] = b.bottom - section_h
            if not overflow:
                continue

            target_w = math.ceil(max(b.right + margin, section_w))
            target_h = math.ceil(max(b.bottom + margin, section_h))
            issues.append(
                LayoutIssue(
                    kind=IssueKind.SECTION_BLEED,
                    element_id=child.id,
                    element_name=child.name,
                    details=(
                        f'"{child.name}" bleeds outside section "{section.name}": '
                        f"{self._describe_overflow(overflow)}"
                    ),
                    suggestion=(
                        f"Resize section {section.id} to at least {target_w}x{target_h} "
                        f"or move {child.id}"
                    ),
                    related_ids=[section.id],
                    overflow=overflow,
                    check_pass="structural",
                )
            )
        return issues

    def check_visual_bleed(self, snapshot: SceneSnapshot, section: SceneElement) -> list[LayoutIssue]:
        """Any element whose centre sits inside the section, in page coordinates."""
        issues = []
        header = self.thresholds["section_header"]
        inset = self.thresholds["section_inset"]
        s = section.absolute

        for entry in snapshot:
            if entry.id == section.id or not entry.traits.visual_bleed_candidate:
                continue
            b = entry.absolute
            cx, cy = b.center
            if not (s.x < cx < s.right and s.y < cy < s.bottom):
                continue

            overflow: dict[str, float] = {}
            if b.x < s.x + inset:
                overflow["left"] = s.x + inset - b.x
            if b.right > s.right - inset:
                overflow["right"] = b.right - s.right + inset
            if b.y < s.y + header:
                overflow["top"] = s.y + header - b.y
            if b.bottom > s.bottom - inset:
                overflow["bottom"] = b.bottom - s.bottom + inset
            if not overflow:
                continue

            issues.append(
                LayoutIssue(
                    kind=IssueKind.SECTION_BLEED,
                    element_id=entry.id,
                    element_name=entry.name,
                    details=(
                        f'"{entry.name}" bleeds outside section "{section.name}": '
                        f"{self._describe_overflow(overflow)}"
                    ),
                    suggestion=(
                        f"Resize section {section.id} to be larger or move/resize "
                        f"{entry.id} to fit within section bounds"
                    ),
                    related_ids=[section.id],
                    overflow=overflow,
                    check_pass="visual",
                )
            )
        return issues

    def generate_report_text(self, report: ValidationReport) -> str:
        """Render a report as plain text for progress logs."""
        lines = [
            "=" * 40,
            "LAYOUT VALIDATION REPORT",
            "=" * 40,
            f"Elements checked: {report.element_count}",
            f"Issues: {report.issue_count}",
        ]
        for kind, count in report.by_kind().items():
            lines.append(f"  {kind}: {count}")
        for issue in report.issues:
            lines.append(f"- [{issue.kind.value}] {issue.element_name}: {issue.details}")
        lines.append(report.summary)
        return "\n".join(lines)
