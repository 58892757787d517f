"""Data models for board primitives, placed elements and layers."""
import math
import re
from dataclasses import dataclass, field, replace
from typing import Optional
from xml.etree.ElementTree import Element

import numpy as np

# Node types that carry drawable geometry
PRIMITIVE_TAGS = (
    "circle", "hole", "pad", "polygon", "rectangle", "smd", "text", "via", "wire",
)

_ANGLE_PATTERN = re.compile(r"[0-9.]+")
_EXTENT_PATTERN = re.compile(r"(\d+)-(\d+)")


@dataclass(frozen=True)
class AngleData:
    """Rotation decoded from an EAGLE rot string such as "MR90"."""
    angle: float = 0.0  # Radians, counterclockwise
    mirror: bool = False  # Flipped across the Y axis (bottom side)
    spin: bool = False  # Text may be upside-down

    @classmethod
    def parse(cls, rot: str | None) -> "AngleData":
        rot = rot or "R0"
        match = _ANGLE_PATTERN.search(rot)
        degrees = float(match.group()) if match else 0.0
        return cls(math.radians(degrees), "M" in rot, "S" in rot)

    @property
    def degrees(self) -> float:
        return math.degrees(self.angle)


@dataclass
class Primitive:
    """
    A drawable BRD node, detached from the XML tree.

    Placed-element children carry the element name in `parent`; the
    element itself lives in the board's element table.
    """
    tag: str  # wire, pad, via, smd, circle, rectangle, polygon, text, hole
    attrs: dict[str, str]  # Raw BRD attributes
    vertices: list[dict[str, str]] = field(default_factory=list)  # Polygon vertices
    text: str = ""
    parent: Optional[str] = None  # Placed element name

    @classmethod
    def from_node(cls, node: Element, parent: str | None = None) -> "Primitive":
        return cls(
            tag=node.tag,
            attrs=dict(node.attrib),
            vertices=[dict(v.attrib) for v in node.iter("vertex")],
            text=node.text or "",
            parent=parent,
        )

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.attrs.get(name, default)

    def has(self, name: str) -> bool:
        return name in self.attrs

    def num(self, name: str, default: float = 0.0) -> float:
        """Attribute as a float."""
        value = self.attrs.get(name)
        if value is None or value == "":
            return default
        return float(value)

    @property
    def layer(self) -> int | None:
        value = self.attrs.get("layer")
        return int(value) if value else None

    @property
    def extent(self) -> tuple[int, int] | None:
        """Inclusive layer span of a via, as (low, high)."""
        match = _EXTENT_PATTERN.search(self.attrs.get("extent", ""))
        if not match:
            return None
        a, b = int(match.group(1)), int(match.group(2))
        return min(a, b), max(a, b)

    @property
    def curve(self) -> float:
        """Wire curvature in degrees; 0 for straight wires."""
        return self.num("curve")

    @property
    def rot(self) -> AngleData:
        return AngleData.parse(self.attrs.get("rot"))

    def clone(self, **changes) -> "Primitive":
        copy = replace(
            self,
            attrs=dict(self.attrs),
            vertices=[dict(v) for v in self.vertices],
        )
        for key, value in changes.items():
            setattr(copy, key, value)
        return copy

    def reversed(self) -> "Primitive":
        """Wire running end-to-start; curvature changes sign."""
        wire = self.clone()
        wire.attrs["x1"], wire.attrs["x2"] = self.attrs["x2"], self.attrs["x1"]
        wire.attrs["y1"], wire.attrs["y2"] = self.attrs["y2"], self.attrs["y1"]
        if self.has("curve"):
            wire.attrs["curve"] = str(-self.curve)
        return wire


@dataclass
class PlacedElement:
    """A library package instance placed on the board."""
    name: str  # Reference designator (e.g., "R1")
    value: str
    library: str
    package: str
    x: float  # mm
    y: float  # mm
    rot: AngleData = field(default_factory=AngleData)
    package_node: Element | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_node(cls, node: Element, package_node: Element | None = None) -> "PlacedElement":
        return cls(
            name=node.get("name", ""),
            value=node.get("value", ""),
            library=node.get("library", ""),
            package=node.get("package", ""),
            x=float(node.get("x", 0)),
            y=float(node.get("y", 0)),
            rot=AngleData.parse(node.get("rot")),
            package_node=package_node,
        )

    @property
    def mirrored(self) -> bool:
        return self.rot.mirror


@dataclass
class Layer:
    """A physical layer of the board and the primitives drawn on it."""
    name: str
    brd_layers: tuple[int, ...]  # BRD layer numbers this layer follows
    tags: list[str]  # Copper, Isolate, Core, Prepreg, Mask, Solderpaste, Top, Bottom, Bounds
    thickness: float  # Pixels
    height: float = 0.0  # Pixels below the top surface
    visible: bool = True
    elements: list[Primitive] = field(default_factory=list, repr=False)
    buffer: np.ndarray | None = field(default=None, repr=False)  # Premultiplied RGBA

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def add(self, primitive: Primitive, **changes) -> Primitive:
        """Store a private copy of a primitive on this layer."""
        copy = primitive.clone(**changes)
        self.elements.append(copy)
        return copy

    def get_elements(self, *tags: str) -> list[Primitive]:
        return [el for el in self.elements if el.tag in tags]
