"""Geometry and selection engine.

Pure functions over bands and controls: every operation returns new
values and leaves its inputs untouched. Invalid geometry is clamped.
"""

from banddesigner.geometry.alignment import (
    align_objects,
    distribute_objects,
    line_length,
    same_size,
)
from banddesigner.geometry.boundary import (
    BandBoundaryDragger,
    apply_boundary_drag,
    layout_bands,
)
from banddesigner.geometry.normalize import (
    Box,
    DisplayBox,
    border_width,
    bounding_box,
    display_box,
    normalize_band,
    normalize_object,
    translate,
)
from banddesigner.geometry.objects import (
    ClipboardEntry,
    add_object,
    copy_objects,
    delete_objects,
    move_objects,
    move_to_band,
    next_z_index,
    nudge_objects,
    paste_objects,
    resize_objects,
    update_objects,
)
from banddesigner.geometry.selection import (
    MarqueeSelection,
    hit_test,
    marquee_select,
    normalize_rect,
    selection_bounds,
    toggle_selection,
)
from banddesigner.geometry.zorder import (
    bring_to_front,
    move_down,
    move_up,
    reorder_z,
    send_to_back,
)

__all__ = [
    "BandBoundaryDragger",
    "Box",
    "ClipboardEntry",
    "DisplayBox",
    "MarqueeSelection",
    "add_object",
    "align_objects",
    "apply_boundary_drag",
    "border_width",
    "bounding_box",
    "bring_to_front",
    "copy_objects",
    "delete_objects",
    "display_box",
    "distribute_objects",
    "hit_test",
    "layout_bands",
    "line_length",
    "marquee_select",
    "move_down",
    "move_objects",
    "move_to_band",
    "move_up",
    "next_z_index",
    "normalize_band",
    "normalize_object",
    "normalize_rect",
    "nudge_objects",
    "paste_objects",
    "reorder_z",
    "resize_objects",
    "same_size",
    "selection_bounds",
    "send_to_back",
    "toggle_selection",
    "translate",
    "update_objects",
]
