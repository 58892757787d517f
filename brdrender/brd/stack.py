"""Layer stack construction from the layerSetup design rule."""
import logging
import re
from dataclasses import dataclass

from brdrender.config import MASK_THICKNESS_MM, PASTE_THICKNESS_MM

from .models import Layer
from .rules import DesignRules

logger = logging.getLogger(__name__)

# Fixed BRD layer numbers
TOP_PASTE_LAYERS = (31,)
TOP_MASK_LAYERS = (21, 25, 29)
BOTTOM_MASK_LAYERS = (22, 26, 30)
BOTTOM_PASTE_LAYERS = (32,)
BOUNDS_LAYERS = (20,)

_TOKEN_PATTERN = re.compile(r"\d+|\S")


@dataclass
class LayerStack:
    """Ordered physical layers, top to bottom, plus the board thickness."""
    layers: list[Layer]
    thickness: float  # Pixels

    def get(self, name: str) -> Layer | None:
        return next((layer for layer in self.layers if layer.name == name), None)

    def tagged(self, *tags: str) -> list[Layer]:
        """Layers carrying every one of the given tags."""
        return [layer for layer in self.layers if all(layer.has_tag(t) for t in tags)]


def clean_layer_setup(setup: str) -> str:
    """Drop blind/buried via annotations and grouping from a layerSetup string."""
    setup = re.sub(r"\[\d+:", "", setup)
    setup = re.sub(r":\d+\]", "", setup)
    return re.sub(r"[()]", "", setup)


def tokenize_layer_setup(setup: str) -> list[int | str]:
    """
    Split a layerSetup string into copper numbers and isolate symbols.

    "(1*16)" -> [1, "*", 16]; "[2:1+((2*3)+(14*15))+16:15]" ->
    [1, "+", 2, "*", 3, "+", 14, "*", 15, "+", 16].
    """
    tokens: list[int | str] = []
    for match in _TOKEN_PATTERN.finditer(clean_layer_setup(setup)):
        token = match.group()
        tokens.append(int(token) if token.isdigit() else token)
    return tokens


def _pick(values: list[float], index: int, rule: str) -> float:
    if not values:
        logger.warning("Design rule %s is empty", rule)
        return 0.0
    if index >= len(values):
        logger.warning("Design rule %s has no entry %d; using the last one", rule, index)
        return values[-1]
    return values[index]


def build_layer_stack(
    rules: DesignRules,
    coord_scale: float,
    thickness_override: float | None = None,
) -> LayerStack:
    """
    Build the physical layer stack.

    Args:
        rules: Design rules providing layerSetup, mtCopper and mtIsolate
        coord_scale: Pixels per millimetre
        thickness_override: Board thickness in mm, replacing the stack sum

    Returns:
        LayerStack of paste, mask, copper/isolate, mask, paste and Bounds
    """
    copper = rules.distances_mm("mtCopper")
    isolate = rules.distances_mm("mtIsolate")
    mask = MASK_THICKNESS_MM * coord_scale
    paste = PASTE_THICKNESS_MM * coord_scale

    layers = [
        Layer("Top Solderpaste", TOP_PASTE_LAYERS, ["Solderpaste", "Top"], paste),
        Layer("Top Mask", TOP_MASK_LAYERS, ["Mask", "Top"], mask),
    ]

    tokens = tokenize_layer_setup(rules.get("layerSetup"))
    stack: list[Layer] = []
    previous = None
    for index, token in enumerate(tokens):
        if isinstance(token, int):
            thickness = _pick(copper, index // 2, "mtCopper") * coord_scale
            stack.append(Layer(f"Layer{token}", (token,), ["Copper"], thickness))
            previous = token
        else:
            kind = "Core" if token == "*" else "Prepreg"
            thickness = _pick(isolate, index // 2, "mtIsolate") * coord_scale
            follows = (previous,) if previous is not None else ()
            stack.append(Layer(f"Layer{previous}{kind}", follows, [kind, "Isolate"], thickness))
    if stack:
        stack[0].tags.append("Top")
        stack[-1].tags.append("Bottom")
    layers.extend(stack)

    layers.append(Layer("Bottom Mask", BOTTOM_MASK_LAYERS, ["Mask", "Bottom"], mask))
    layers.append(Layer("Bottom Solderpaste", BOTTOM_PASTE_LAYERS, ["Solderpaste", "Bottom"], paste))

    height = 0.0
    for layer in layers:
        layer.height = height
        height += layer.thickness

    layers.append(Layer("Bounds", BOUNDS_LAYERS, ["Bounds"], 1.0, height=height, visible=False))

    thickness = height if thickness_override is None else thickness_override * coord_scale
    for layer in layers:
        logger.info("Layer generated: %s thickness %.3f", layer.name, layer.thickness)
    return LayerStack(layers, thickness)
