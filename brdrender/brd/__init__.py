from .document import BrdDocument
from .models import AngleData, Layer, PlacedElement, Primitive
from .rules import DesignRules, parse_distance_mm
from .stack import LayerStack, build_layer_stack, tokenize_layer_setup
from .classify import ElementClassifier, layer_accepts

__all__ = [
    "BrdDocument", "AngleData", "Layer", "PlacedElement", "Primitive",
    "DesignRules", "parse_distance_mm",
    "LayerStack", "build_layer_stack", "tokenize_layer_setup",
    "ElementClassifier", "layer_accepts",
]
