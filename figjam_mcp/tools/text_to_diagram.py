"""
Text-to-diagram conversion tools for FigJam boards.

Provides a compact YAML or plain-text syntax for describing diagrams that get
created on the board in one batch.

YAML format::

    diagram "Checkout Flow":
      sections:
        - frontend: Frontend at (0, 0) size (900, 400)
      nodes:
        - cart: rounded_rectangle "Shopping Cart" at (40, 80) in frontend
        - pay: diamond "Payment OK?" at (400, 80) size (200, 120) color LIGHT_GREEN in frontend
        - note: sticky "Retry on timeout" at (1000, 0)
      connections:
        - cart -> pay: "submit"

Simple format::

    diagram: Checkout Flow
    sections:
    frontend "Frontend" at (0, 0) size (900, 400)
    nodes:
    cart rounded_rectangle "Shopping Cart" at (40, 80) in frontend
    connections:
    cart -> pay "submit"
"""

from dataclasses import dataclass, field
import logging
import re
from typing import Any

from fastmcp import Context, FastMCP
import yaml

from figjam_mcp.config import SHAPE_TYPES
from figjam_mcp.tools.board_tools import batch_create
from figjam_mcp.tools.layout_tools import validate_layout

logger = logging.getLogger(__name__)

_QUOTED = re.compile(r'"([^"]*)"')
_POSITION = re.compile(r"\bat\s*\(\s*(-?[\d.]+)\s*,\s*(-?[\d.]+)\s*\)")
_SIZE = re.compile(r"\bsize\s*\(\s*([\d.]+)\s*,\s*([\d.]+)\s*\)")
_COLOR = re.compile(r"\bcolor\s+(#?[\w]+)")
_PARENT = re.compile(r"\bin\s+([\w-]+)")
_ARROWS = ("→", "->")


@dataclass
class DiagramSection:
    """A section in a diagram description."""

    ref: str
    name: str
    position: tuple[float, float]
    size: tuple[float, float] | None = None


@dataclass
class DiagramNode:
    """A shape, sticky or text node in a diagram description."""

    ref: str
    kind: str
    text: str
    position: tuple[float, float]
    size: tuple[float, float] | None = None
    color: str | None = None
    section: str | None = None


@dataclass
class DiagramConnection:
    """A connector between two nodes."""

    start: str
    end: str
    label: str | None = None


@dataclass
class Diagram:
    """Represents a complete diagram description."""

    name: str
    sections: list[DiagramSection] = field(default_factory=list)
    nodes: list[DiagramNode] = field(default_factory=list)
    connections: list[DiagramConnection] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_batch(self) -> list[dict[str, Any]]:
        """Convert to batch_create specs: sections, then nodes, then connectors."""
        specs: list[dict[str, Any]] = []
        for section in self.sections:
            spec: dict[str, Any] = {
                "type": "section",
                "ref_id": section.ref,
                "name": section.name,
                "x": section.position[0],
                "y": section.position[1],
            }
            if section.size:
                spec["width"], spec["height"] = section.size
            specs.append(spec)

        for node in self.nodes:
            spec = {
                "ref_id": node.ref,
                "text": node.text,
                "x": node.position[0],
                "y": node.position[1],
            }
            if node.kind in ("sticky", "wide_sticky"):
                spec["type"] = "sticky"
                spec["wide"] = node.kind == "wide_sticky"
            elif node.kind == "text":
                spec["type"] = "text"
            else:
                spec["type"] = "shape"
                spec["shape_type"] = node.kind
                if node.size:
                    spec["width"], spec["height"] = node.size
            if node.color and spec["type"] != "text":
                spec["color"] = node.color
            if node.section:
                spec["parent_id"] = node.section
            specs.append(spec)

        for connection in self.connections:
            spec = {"type": "connector", "start_id": connection.start, "end_id": connection.end}
            if connection.label:
                spec["label"] = connection.label
            specs.append(spec)
        return specs


class DiagramTextParser:
    """Parser for text-based diagram descriptions."""

    NODE_KINDS = {"sticky", "wide_sticky", "text"}

    def parse_yaml_diagram(self, yaml_text: str) -> Diagram:
        """Parse a YAML-format diagram description."""
        try:
            data = yaml.safe_load(yaml_text)

            # First key is the diagram name
            diagram_key = list(data.keys())[0]
            if diagram_key.startswith('diagram "') and diagram_key.endswith('"'):
                diagram_name = diagram_key[9:-1]
            elif diagram_key.startswith("diagram "):
                diagram_name = diagram_key[8:]
            else:
                diagram_name = diagram_key
            diagram_data = data[diagram_key] or {}

            diagram = Diagram(name=diagram_name)

            for item in diagram_data.get("sections", []) or []:
                for ref, desc in self._yaml_entries(item):
                    self._add(diagram, diagram.sections, self._parse_section(ref, desc), f"{ref}: {desc}")

            for item in diagram_data.get("nodes", []) or []:
                for ref, desc in self._yaml_entries(item):
                    self._add(diagram, diagram.nodes, self._parse_node(ref, desc), f"{ref}: {desc}")

            for item in diagram_data.get("connections", []) or []:
                if isinstance(item, dict):
                    # YAML parses "a -> b: label" as {"a -> b": "label"}
                    for conn_desc, label in item.items():
                        connection = self._parse_connection(conn_desc, label)
                        self._add(diagram, diagram.connections, connection, conn_desc)
                else:
                    self._add(diagram, diagram.connections, self._parse_connection(str(item)), str(item))

            return diagram

        except Exception as e:
            raise ValueError(f"Error parsing YAML diagram: {str(e)}") from e

    def parse_simple_text(self, text: str) -> Diagram:
        """Parse a simple text format diagram description."""
        diagram = Diagram(name="Untitled Diagram")
        current_section = None

        for line in text.strip().split("\n"):
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if line.startswith("diagram"):
                diagram.name = line.split(":", 1)[-1].strip().strip("\"'")
                continue

            if line.lower() in ["sections:", "nodes:", "connections:"]:
                current_section = line.lower().rstrip(":")
                continue

            if current_section in ("sections", "nodes"):
                parts = line.split(None, 1)
                if len(parts) < 2:
                    diagram.warnings.append(f"Could not parse: {line}")
                    continue
                ref, desc = parts
                if current_section == "sections":
                    self._add(diagram, diagram.sections, self._parse_section(ref, desc), line)
                else:
                    self._add(diagram, diagram.nodes, self._parse_node(ref, desc), line)
            elif current_section == "connections":
                label_match = _QUOTED.search(line)
                label = label_match.group(1) if label_match else None
                conn_desc = _QUOTED.sub("", line)
                self._add(diagram, diagram.connections, self._parse_connection(conn_desc, label), line)
            else:
                diagram.warnings.append(f"Line outside any block: {line}")

        return diagram

    def parse(self, description: str, format_type: str = "yaml") -> Diagram:
        format_type = format_type.lower()
        if format_type == "yaml":
            return self.parse_yaml_diagram(description)
        if format_type == "simple":
            return self.parse_simple_text(description)
        raise ValueError(f"Unknown format type: {format_type}. Use 'yaml' or 'simple'")

    @staticmethod
    def _yaml_entries(item: Any) -> list[tuple[str, str]]:
        # YAML parses "cart: shape ..." as {"cart": "shape ..."}
        if isinstance(item, dict):
            return [(str(ref), str(desc)) for ref, desc in item.items()]
        ref, _, desc = str(item).partition(":")
        return [(ref.strip(), desc.strip())]

    @staticmethod
    def _add(diagram: Diagram, target: list, parsed: Any, source: str) -> None:
        if parsed is None:
            logger.warning(f"Skipping unparseable diagram line: {source}")
            diagram.warnings.append(f"Could not parse: {source}")
        else:
            target.append(parsed)

    @staticmethod
    def _parse_pair(pattern: re.Pattern, desc: str) -> tuple[float, float] | None:
        match = pattern.search(desc)
        if not match:
            return None
        return (float(match.group(1)), float(match.group(2)))

    def _parse_section(self, ref: str, desc: str) -> DiagramSection | None:
        """Parse a section like 'Frontend at (0, 0) size (900, 400)'."""
        position_match = _POSITION.search(desc)
        if position_match is None:
            return None
        position = (float(position_match.group(1)), float(position_match.group(2)))
        name_match = _QUOTED.search(desc)
        if name_match:
            name = name_match.group(1)
        else:
            name = desc[: position_match.start()].strip() or ref
        return DiagramSection(
            ref=ref,
            name=name,
            position=position,
            size=self._parse_pair(_SIZE, desc),
        )

    def _parse_node(self, ref: str, desc: str) -> DiagramNode | None:
        """Parse a node like 'diamond "Valid?" at (10, 20) size (200, 120) color GREEN in sec'."""
        text_match = _QUOTED.search(desc)
        text = text_match.group(1) if text_match else ""
        # Keywords are matched outside the quoted text only
        rest = _QUOTED.sub(" ", desc)

        position = self._parse_pair(_POSITION, rest)
        if position is None:
            return None

        tokens = rest.split()
        if not tokens:
            return None
        kind = tokens[0].lower()
        if kind == "shape":
            kind = "ROUNDED_RECTANGLE"
        elif kind not in self.NODE_KINDS:
            kind = kind.upper()
            if kind not in SHAPE_TYPES:
                return None

        color_match = _COLOR.search(rest)
        parent_match = _PARENT.search(rest)
        return DiagramNode(
            ref=ref,
            kind=kind,
            text=text,
            position=position,
            size=self._parse_pair(_SIZE, rest),
            color=color_match.group(1) if color_match else None,
            section=parent_match.group(1) if parent_match else None,
        )

    def _parse_connection(self, conn_desc: str, label: Any = None) -> DiagramConnection | None:
        """Parse a connection like 'cart -> pay'."""
        for arrow in _ARROWS:
            if arrow in conn_desc:
                start, end = conn_desc.split(arrow, 1)
                break
        else:
            return None

        start = start.strip()
        end = end.strip()
        if not start or not end:
            return None
        return DiagramConnection(start=start, end=end, label=str(label) if label else None)


async def create_diagram_from_text(
    description: str,
    format_type: str = "yaml",
    validate: bool = True,
    ctx: Context = None,
) -> dict[str, Any]:
    """Create a diagram on the board from a text description.

    Args:
        description: Diagram description
        format_type: Format of description ("yaml" or "simple")
        validate: Run layout validation on the result
        ctx: Context for MCP communication

    Returns:
        Dictionary with the created elements, parse warnings and, when
        requested, the layout validation report
    """
    try:
        if ctx:
            await ctx.info("Parsing diagram description")
            await ctx.report_progress(10, 100)

        diagram = DiagramTextParser().parse(description, format_type)

        if ctx:
            await ctx.info(
                f"Parsed diagram '{diagram.name}': {len(diagram.sections)} sections, "
                f"{len(diagram.nodes)} nodes, {len(diagram.connections)} connections"
            )
            await ctx.report_progress(30, 100)

        batch = await batch_create(diagram.to_batch())

        result: dict[str, Any] = {
            "success": batch["success"],
            "diagram_name": diagram.name,
            "created": batch["created"],
            "count": batch["count"],
            "errors": batch.get("errors", []),
            "warnings": diagram.warnings,
        }

        if validate:
            if ctx:
                await ctx.report_progress(80, 100)
            result["validation"] = await validate_layout()

        if ctx:
            await ctx.report_progress(100, 100)
            await ctx.info(f"Diagram creation complete: {batch['count']} elements")

        return result

    except Exception as e:
        logger.error(f"Error creating diagram: {e}")
        if ctx:
            await ctx.info(f"Error creating diagram: {str(e)}")
        return {"success": False, "error": str(e)}


async def validate_diagram_description(
    description: str, format_type: str = "yaml", ctx: Context = None
) -> dict[str, Any]:
    """Parse a diagram description and check its references without creating anything.

    Args:
        description: Diagram description
        format_type: Format of description ("yaml" or "simple")
        ctx: Context for MCP communication

    Returns:
        Dictionary with element counts, parse warnings and reference errors
    """
    try:
        diagram = DiagramTextParser().parse(description, format_type)

        issues = []
        section_refs = {section.ref for section in diagram.sections}
        node_refs = {node.ref for node in diagram.nodes}
        all_refs = [s.ref for s in diagram.sections] + [n.ref for n in diagram.nodes]

        for ref in sorted({r for r in all_refs if all_refs.count(r) > 1}):
            issues.append(f"Duplicate reference: {ref}")
        for node in diagram.nodes:
            if node.section and node.section not in section_refs:
                issues.append(f"Node {node.ref} references unknown section: {node.section}")
        for connection in diagram.connections:
            for endpoint in (connection.start, connection.end):
                if endpoint not in node_refs:
                    issues.append(f"Connection {connection.start} -> {connection.end} references unknown node: {endpoint}")

        if ctx:
            await ctx.info(f"Diagram description has {len(issues)} issues")

        return {
            "success": True,
            "valid": not issues,
            "diagram_name": diagram.name,
            "section_count": len(diagram.sections),
            "node_count": len(diagram.nodes),
            "connection_count": len(diagram.connections),
            "issues": issues,
            "warnings": diagram.warnings,
        }

    except Exception as e:
        logger.error(f"Error validating diagram description: {e}")
        return {"success": False, "error": str(e)}


def register_text_to_diagram_tools(mcp: FastMCP) -> None:
    """Register text-to-diagram tools with the MCP server."""

    @mcp.tool(name="create_diagram_from_text")
    async def create_diagram_from_text_tool(
        description: str, format_type: str = "yaml", validate: bool = True, ctx: Context = None
    ) -> dict[str, Any]:
        """Create a whole diagram from a YAML or simple text description."""
        return await create_diagram_from_text(description, format_type, validate, ctx)

    @mcp.tool(name="validate_diagram_description")
    async def validate_diagram_description_tool(
        description: str, format_type: str = "yaml", ctx: Context = None
    ) -> dict[str, Any]:
        """Check a diagram description for parse errors and unknown references."""
        return await validate_diagram_description(description, format_type, ctx)
