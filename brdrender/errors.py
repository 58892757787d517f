"""Exceptions raised while translating a board."""


class BrdError(Exception):
    """Base class for board translation failures."""


class MissingNodeError(BrdError):
    """A node the translation cannot proceed without is absent."""

    def __init__(self, tag: str):
        super().__init__(f"BRD document has no <{tag}> node")
        self.tag = tag


class DegenerateBoundsError(BrdError):
    """Board outline collapses to a line or point at the chosen resolution."""

    def __init__(self, width: int, height: int):
        super().__init__(
            f"Texture dimensions too small ({width}x{height} px): "
            "board outline not found, or too many microns per pixel"
        )
        self.width = width
        self.height = height
