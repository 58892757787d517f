from .chord import ChordData, arc_points, cardinal_points
from .bounds import BoardBounds, PixelGrid, resolve_bounds, scan_bounds
from .wires import WireLoop, build_loops, dedupe_wires, sort_wires, split_loops

__all__ = [
    "ChordData", "arc_points", "cardinal_points",
    "BoardBounds", "PixelGrid", "resolve_bounds", "scan_bounds",
    "WireLoop", "build_loops", "dedupe_wires", "sort_wires", "split_loops",
]
