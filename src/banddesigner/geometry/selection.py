"""Marquee (rubber-band) selection and selection helpers.

A selection is an ordered tuple of control IDs. Order matters: the first
ID is the reference for alignment and same-size.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from banddesigner.geometry.normalize import Box, bounding_box, display_box, find_object
from banddesigner.models.band import Band
from banddesigner.models.controls import ControlObject, LineControl


def normalize_rect(x: float, y: float, width: float, height: float) -> Box:
    """Rectangle with non-negative size from a drag that may go up or left."""
    return Box(min(x, x + width), min(y, y + height), abs(width), abs(height))


def hit_box(obj: ControlObject) -> Box:
    """Lines use their min/max span; other controls their display box."""
    if isinstance(obj, LineControl):
        return bounding_box(obj)
    return display_box(obj)


def hit_test(
    bands: Sequence[Band],
    rect: Box,
    offset: tuple[float, float] = (0, 0),
) -> list[str]:
    """
    IDs of controls whose box touches ``rect``, in band then object order.

    Args:
        bands: Bands to search
        rect: Normalised selection rectangle
        offset: Added to every control box, e.g. the page margins when the
            rectangle is in page coordinates
    """
    dx, dy = offset
    return [
        obj.id
        for band in bands
        for obj in band.objects
        if hit_box(obj).offset(dx, dy).intersects(rect)
    ]


def marquee_select(
    bands: Sequence[Band],
    rect: Box,
    existing: Sequence[str] = (),
    additive: bool = False,
    offset: tuple[float, float] = (0, 0),
) -> tuple[str, ...]:
    """
    Selection after a marquee drag.

    A plain drag replaces the selection; Shift/Ctrl (``additive``) keeps the
    existing selection first and appends newly hit controls.
    """
    rect = normalize_rect(rect.x, rect.y, rect.width, rect.height)
    hits = hit_test(bands, rect, offset)
    if not additive:
        return tuple(hits)
    result = list(dict.fromkeys(existing))
    result.extend(object_id for object_id in hits if object_id not in result)
    return tuple(result)


def toggle_selection(selection: Sequence[str], object_id: str, multi: bool = False) -> tuple[str, ...]:
    """Click selection: replace, or toggle membership when ``multi``."""
    if not multi:
        return (object_id,)
    if object_id in selection:
        return tuple(i for i in selection if i != object_id)
    return tuple(selection) + (object_id,)


def selection_bounds(bands: Sequence[Band], selection: Sequence[str]) -> Box | None:
    """Smallest box around every selected control."""
    boxes = [bounding_box(obj) for obj in (find_object(bands, i) for i in selection) if obj is not None]
    if not boxes:
        return None
    left = min(box.x for box in boxes)
    top = min(box.y for box in boxes)
    right = max(box.right for box in boxes)
    bottom = max(box.bottom for box in boxes)
    return Box(left, top, right - left, bottom - top)


@dataclass
class MarqueeSelection:
    """
    Marquee gesture state: begin on pointer-down, update on move, finish on up.
    """

    existing: tuple[str, ...] = ()
    additive: bool = False
    offset: tuple[float, float] = (0, 0)
    start: tuple[float, float] | None = None
    selection: tuple[str, ...] = ()

    @property
    def active(self) -> bool:
        return self.start is not None

    def begin(self, x: float, y: float, additive: bool = False) -> tuple[str, ...]:
        self.start = (x, y)
        self.additive = additive
        self.selection = self.existing if additive else ()
        return self.selection

    def update(self, bands: Sequence[Band], x: float, y: float) -> tuple[str, ...]:
        if self.start is None:
            return self.selection
        sx, sy = self.start
        rect = normalize_rect(sx, sy, x - sx, y - sy)
        self.selection = marquee_select(bands, rect, self.existing, self.additive, self.offset)
        return self.selection

    def finish(self) -> tuple[str, ...]:
        self.start = None
        self.existing = self.selection
        return self.selection
