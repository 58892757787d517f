"""Configuration constants and render options."""
from pydantic import BaseModel, Field

# Texture resolution
DEFAULT_PIXEL_MICRONS = 35

# Physical layers not described by the design rules (mm)
MASK_THICKNESS_MM = 0.015
PASTE_THICKNESS_MM = 0.05

DEFAULT_MASK_OPACITY = 0.8

# Tessellation
ARC_SEGMENTS = 32
DRILL_SEGMENTS = 16

# Rows of the edge bevel ramp
EDGE_BEVEL_ROWS = 8

# Decimal places used when matching wire endpoints
POINT_KEY_DIGITS = 6

# Ghost package box height (pixels)
GHOST_HEIGHT = 20

DEFAULT_COLORS = {
    "bounds": "rgb(32, 192, 32)",
    "copper": "rgb(255, 222, 164)",
    "prepreg": "rgb(238, 238, 230)",
    "silkscreen": "rgb(255, 255, 255)",
    "solderMask": "rgb(32, 64, 192)",
    "solderPaste": "rgb(192, 192, 222)",
}


class RenderOptions(BaseModel):
    """Options controlling how a board is translated."""
    pixel_microns: float = Field(DEFAULT_PIXEL_MICRONS, gt=0)
    thickness: float | None = Field(None, gt=0)  # Board thickness override (mm)
    colors: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_COLORS))
    mask_opacity: float = Field(DEFAULT_MASK_OPACITY, ge=0, le=1)
    composite: bool = True  # False builds one plate per layer instead
    view_connectors: bool = False
    view_ghosts: bool = False
    supersample: int = Field(2, ge=1, le=8)  # Antialiasing factor per axis
    font_path: str | None = None  # TrueType font for text; Pillow's default otherwise

    @property
    def coord_scale(self) -> float:
        """Pixels per millimetre."""
        return 1000.0 / self.pixel_microns

    def color(self, material: str) -> str:
        """Colour for a material class, falling back to the stock palette."""
        return self.colors.get(material, DEFAULT_COLORS[material])
