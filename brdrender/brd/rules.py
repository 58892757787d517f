"""Design rule table read from the BRD <designrules> block."""
import logging
import re

from .document import BrdDocument

logger = logging.getLogger(__name__)

# Millimetres per unit
DISTANCE_UNITS = {
    "mm": 1.0,
    "mil": 0.0254,
    "mic": 0.001,
    "inch": 25.4,
}

_DISTANCE_PATTERN = re.compile(r"([0-9.]+)(\D+)")

# Stock EAGLE values for rules a board file may omit
DEFAULT_DESIGN_RULES = {
    "layerSetup": "(1*16)",
    "mtCopper": " ".join(["0.035mm"] * 16),
    "mtIsolate": "1.5mm " + " ".join(["0.15mm", "0.2mm"] * 7),
    "mdCopperDimension": "40mil",
    "mlMinStopFrame": "4mil",
    "slThermalIsolate": "10mil",
    "psElongationLong": "100",
    "psElongationOffset": "100",
    "rvPadTop": "0.25",
    "rvPadInner": "0.25",
    "rvPadBottom": "0.25",
    "rlMinPadTop": "10mil",
    "rlMaxPadTop": "20mil",
    "rlMinPadInner": "10mil",
    "rlMaxPadInner": "20mil",
    "rlMinPadBottom": "10mil",
    "rlMaxPadBottom": "20mil",
    "rvViaOuter": "0.25",
    "rvViaInner": "0.25",
    "rlMinViaOuter": "8mil",
    "rlMaxViaOuter": "20mil",
    "rlMinViaInner": "8mil",
    "rlMaxViaInner": "20mil",
}


def parse_distance_mm(value: str | None) -> float:
    """
    Convert an EAGLE distance string such as "10mil" to millimetres.

    Unknown units and unparsable strings yield 0.0.
    """
    match = _DISTANCE_PATTERN.search(value or "")
    if not match:
        logger.warning("Could not parse distance %r", value)
        return 0.0

    try:
        number = float(match.group(1))
    except ValueError:
        logger.warning("Could not parse distance %r", value)
        return 0.0

    unit = match.group(2).strip()
    factor = DISTANCE_UNITS.get(unit)
    if factor is None:
        logger.warning("Unknown distance unit %r in %r", unit, value)
        return 0.0
    return number * factor


def rest_ring(drill_radius: float, percent: float, minimum: float, maximum: float) -> float:
    """Annular ring width: a fraction of the drill radius, clamped."""
    return min(max(drill_radius * percent, minimum), maximum)


def land_radius(declared_radius: float, drill_radius: float, ring: float) -> float:
    """Outer radius of a pad or via, never smaller than drill plus ring."""
    return max(declared_radius, ring + drill_radius)


class DesignRules:
    """Immutable name -> raw string table of design rules."""

    def __init__(self, params: dict[str, str]):
        self._params = dict(params)

    @classmethod
    def from_document(cls, document: BrdDocument) -> "DesignRules":
        node = document.require("designrules")
        params = {
            param.get("name"): param.get("value", "")
            for param in node.iter("param")
            if param.get("name")
        }
        logger.info("Parsed %d design rules", len(params))
        return cls(params)

    def __contains__(self, name: str) -> bool:
        return name in self._params

    def get(self, name: str) -> str:
        if name in self._params:
            return self._params[name]
        if name in DEFAULT_DESIGN_RULES:
            logger.debug("Design rule %s not in board; using %s", name, DEFAULT_DESIGN_RULES[name])
            return DEFAULT_DESIGN_RULES[name]
        raise KeyError(name)

    def number(self, name: str) -> float:
        return float(self.get(name))

    def distance_mm(self, name: str) -> float:
        return parse_distance_mm(self.get(name))

    def distances_mm(self, name: str) -> list[float]:
        """Whitespace-separated distance list, e.g. mtCopper."""
        return [parse_distance_mm(token) for token in self.get(name).split()]

    def pad_ring(self, tags: list[str]) -> tuple[float, float, float]:
        """(percent, min mm, max mm) for pads on a layer with these tags."""
        side = "Top" if "Top" in tags else "Bottom" if "Bottom" in tags else "Inner"
        return (
            self.number(f"rvPad{side}"),
            self.distance_mm(f"rlMinPad{side}"),
            self.distance_mm(f"rlMaxPad{side}"),
        )

    def via_ring(self, tags: list[str]) -> tuple[float, float, float]:
        """(percent, min mm, max mm) for vias on a layer with these tags."""
        side = "Outer" if "Top" in tags or "Bottom" in tags else "Inner"
        return (
            self.number(f"rvVia{side}"),
            self.distance_mm(f"rlMinVia{side}"),
            self.distance_mm(f"rlMaxVia{side}"),
        )
