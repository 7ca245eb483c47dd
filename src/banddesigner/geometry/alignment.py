"""Multi-selection alignment, distribution and same-size.

The first selected control is the reference. All math works on display
boxes so controls with different borders line up visually.
"""

import math
from collections.abc import Sequence
from typing import Literal

from banddesigner.geometry.normalize import DisplayBox, display_box, find_object, translate
from banddesigner.geometry.objects import map_objects
from banddesigner.models.band import Band
from banddesigner.models.controls import ControlObject, LineControl

AlignMode = Literal["left", "right", "top", "bottom", "horizontal-center", "vertical-center"]
DistributeAxis = Literal["horizontal", "vertical"]
SizeDimension = Literal["width", "height", "both"]


def selected_objects(bands: Sequence[Band], selection: Sequence[str]) -> list[ControlObject]:
    """Controls in selection order; IDs that no longer exist are skipped."""
    found = (find_object(bands, object_id) for object_id in selection)
    return [obj for obj in found if obj is not None]


def _alignment_delta(mode: AlignMode, ref: DisplayBox, box: DisplayBox) -> tuple[float, float]:
    if mode == "left":
        return ref.x - box.x, 0
    if mode == "right":
        return ref.right - box.right, 0
    if mode == "top":
        return 0, ref.y - box.y
    if mode == "bottom":
        return 0, ref.bottom - box.bottom
    if mode == "horizontal-center":
        return ref.center_x - box.center_x, 0
    if mode == "vertical-center":
        return 0, ref.center_y - box.center_y
    raise ValueError(f"Unknown alignment mode: {mode}")


def align_objects(bands: Sequence[Band], selection: Sequence[str], mode: AlignMode) -> tuple[Band, ...]:
    """
    Shift every selected control so its display box lines up with the first one's.

    Controls are moved, never resized. Fewer than two selected controls is
    a no-op.
    """
    objects = selected_objects(bands, selection)
    if len(objects) < 2:
        return tuple(bands)

    reference = display_box(objects[0])
    deltas = {obj.id: _alignment_delta(mode, reference, display_box(obj)) for obj in objects[1:]}
    return map_objects(bands, deltas, lambda obj: translate(obj, *deltas[obj.id]))


def distribute_objects(
    bands: Sequence[Band],
    selection: Sequence[str],
    axis: DistributeAxis,
) -> tuple[Band, ...]:
    """
    Space three or more controls evenly along an axis.

    Controls are ordered by display position; the first and last stay put
    and each middle control is placed one gap after the previous one's
    trailing edge.
    """
    objects = selected_objects(bands, selection)
    if len(objects) < 3:
        return tuple(bands)

    horizontal = axis == "horizontal"
    boxes = {obj.id: display_box(obj) for obj in objects}

    def start(obj: ControlObject) -> float:
        return boxes[obj.id].x if horizontal else boxes[obj.id].y

    def size(obj: ControlObject) -> float:
        return boxes[obj.id].width if horizontal else boxes[obj.id].height

    ordered = sorted(objects, key=start)
    first, last = ordered[0], ordered[-1]
    total_space = start(last) + size(last) - start(first)
    gap = (total_space - sum(size(obj) for obj in ordered)) / (len(ordered) - 1)

    deltas: dict[str, tuple[float, float]] = {}
    position = start(first) + size(first)
    for obj in ordered[1:-1]:
        target = position + gap
        shift = target - start(obj)
        deltas[obj.id] = (shift, 0) if horizontal else (0, shift)
        position = target + size(obj)
    return map_objects(bands, deltas, lambda obj: translate(obj, *deltas[obj.id]))


def line_length(line: LineControl) -> float:
    """Length along the line's own orientation."""
    if line.is_vertical:
        return abs(line.y2 - line.y1)
    if line.is_horizontal:
        return abs(line.x2 - line.x1)
    return math.hypot(line.x2 - line.x1, line.y2 - line.y1)


def _stretch_line(line: LineControl, dimension: SizeDimension, target: float | None, reference: DisplayBox) -> LineControl:
    """Lengthen a vertical or horizontal line by moving its second endpoint."""
    if line.is_vertical and dimension in ("height", "both"):
        length = reference.height if target is None else target
        delta = length - abs(line.y2 - line.y1)
        y2 = line.y2 + delta if line.y2 >= line.y1 else line.y2 - delta
        return line.model_copy(update={"y2": y2})
    if line.is_horizontal and dimension in ("width", "both"):
        length = reference.width if target is None else target
        delta = length - abs(line.x2 - line.x1)
        x2 = line.x2 + delta if line.x2 >= line.x1 else line.x2 - delta
        return line.model_copy(update={"x2": x2})
    return line


def same_size(bands: Sequence[Band], selection: Sequence[str], dimension: SizeDimension) -> tuple[Band, ...]:
    """
    Give every selected control the first one's visual size.

    Boxed controls get ``reference display size - 2 * (border + padding)``.
    Lines only change when their orientation matches the dimension; a line
    reference contributes its length.
    """
    objects = selected_objects(bands, selection)
    if len(objects) < 2:
        return tuple(bands)

    reference = objects[0]
    ref_box = display_box(reference)
    ref_length = line_length(reference) if isinstance(reference, LineControl) else None

    def resize(obj: ControlObject) -> ControlObject:
        if isinstance(obj, LineControl):
            return _stretch_line(obj, dimension, ref_length, ref_box)
        extra = display_box(obj).extra
        changes = {}
        if dimension in ("width", "both"):
            changes["width"] = ref_box.width - extra * 2
        if dimension in ("height", "both"):
            changes["height"] = ref_box.height - extra * 2
        return obj.model_copy(update=changes)

    return map_objects(bands, [obj.id for obj in objects[1:]], resize)
