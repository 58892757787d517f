"""Distribute BRD primitives onto the physical layers that want them."""
import logging
from xml.etree.ElementTree import Element

from .document import BrdDocument
from .models import PRIMITIVE_TAGS, Layer, PlacedElement, Primitive

logger = logging.getLogger(__name__)

# Top/bottom counterparts swapped on mirrored elements: outer copper,
# tPlace/bPlace, tNames/bNames, tValues/bValues, tStop/bStop,
# tCream/bCream and tDocu/bDocu
MIRROR_SWAPS = {
    1: 16, 16: 1,
    21: 22, 22: 21,
    25: 26, 26: 25,
    27: 28, 28: 27,
    29: 30, 30: 29,
    31: 32, 32: 31,
    51: 52, 52: 51,
}


def effective_layer(primitive: Primitive, mirrored: bool) -> int | None:
    """BRD layer number of a primitive, swapped for mirrored placements."""
    number = primitive.layer
    if number is not None and mirrored:
        return MIRROR_SWAPS.get(number, number)
    return number


def layer_accepts(layer: Layer, primitive: Primitive, mirrored: bool = False) -> bool:
    """
    Decide whether a primitive belongs on a layer.

    A `layer` attribute must name one of the followed BRD layers; an
    `extent` must span at least one of them; with neither, the primitive
    goes through every layer.
    """
    number = effective_layer(primitive, mirrored)
    if number is not None:
        return number in layer.brd_layers

    extent = primitive.extent
    if extent is not None:
        low, high = extent
        return any(low <= n <= high for n in layer.brd_layers)

    return True


class ElementClassifier:
    """Walks plain, signals and elements, filling layer element lists."""

    def __init__(self, document: BrdDocument, layers: list[Layer]):
        self.document = document
        self.layers = layers
        self.elements: dict[str, PlacedElement] = {}

    def classify(self) -> dict[str, PlacedElement]:
        """
        Populate every layer.

        Returns:
            Placed elements by name, for primitives to reference
        """
        board = self.document.require("board")

        logger.info("Populating plain...")
        for plain in board.iter("plain"):
            self._parse_collection(plain)

        logger.info("Populating signals...")
        for signal in board.iter("signal"):
            self._parse_collection(signal)

        logger.info("Populating elements...")
        for elements in board.iter("elements"):
            self._parse_collection(elements)

        return self.elements

    def _parse_collection(self, collection: Element, parent: PlacedElement | None = None):
        for node in collection:
            if node.tag == "element":
                self._parse_element(node)
            elif node.tag in PRIMITIVE_TAGS:
                self._distribute(Primitive.from_node(node, parent.name if parent else None), parent)

    def _parse_element(self, node: Element):
        name = node.get("name", "")
        library = node.get("library", "")
        package_name = node.get("package", "")
        logger.debug("Preparing element %s (library %s, package %s)", name, library, package_name)

        package = self.document.package(library, package_name)
        if package is None:
            logger.warning("Skipping element %s: package %s/%s unresolved", name, library, package_name)
            return

        element = PlacedElement.from_node(node, package)
        if name in self.elements:
            logger.warning("Duplicate element name %s; later placement wins", name)
        self.elements[name] = element
        self._parse_collection(package, element)

    def _distribute(self, primitive: Primitive, parent: PlacedElement | None):
        mirrored = parent is not None and parent.mirrored
        number = effective_layer(primitive, mirrored)
        for layer in self.layers:
            if not layer_accepts(layer, primitive, mirrored):
                continue
            if number != primitive.layer:
                layer.add(primitive, attrs={**primitive.attrs, "layer": str(number)})
            else:
                layer.add(primitive)
