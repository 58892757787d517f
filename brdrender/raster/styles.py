"""Styling constants for layer textures."""

# Silkscreen sources per side: tPlace, tNames, tValues, tDocu
SILKSCREEN_TOP = (21, 25, 27, 51)
SILKSCREEN_BOTTOM = (22, 26, 28, 52)

# Solder stop mask shapes per side: tStop / bStop
STOP_TOP = 29
STOP_BOTTOM = 30

# Pillow anchors for EAGLE text alignment
ANCHOR_X = {"left": "l", "center": "m", "right": "r"}
ANCHOR_Y = {"top": "a", "center": "m", "bottom": "d"}

DEFAULT_ALIGN = "bottom-left"
