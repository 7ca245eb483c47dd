"""Boxes, translation and normalisation of bands and controls.

Every geometry operation ends by passing what it changed through
``normalize_object`` / ``normalize_band`` so size and z-index floors are
enforced in one place.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from banddesigner.core.config import get_settings
from banddesigner.models.band import Band
from banddesigner.models.controls import ControlObject, LineControl

# Controls drawn with a 1px border when none is configured
DEFAULT_BORDERED_TYPES = frozenset({"field", "rectangle"})


@dataclass(frozen=True)
class Box:
    """Axis-aligned rectangle."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    def offset(self, dx: float, dy: float) -> "Box":
        return Box(self.x + dx, self.y + dy, self.width, self.height)

    def intersects(self, other: "Box") -> bool:
        """Inclusive overlap test: touching edges count."""
        return (
            self.x <= other.right
            and other.x <= self.right
            and self.y <= other.bottom
            and other.y <= self.bottom
        )

    @classmethod
    def from_points(cls, x1: float, y1: float, x2: float, y2: float) -> "Box":
        """Box spanning two corners given in any order."""
        return cls(min(x1, x2), min(y1, y2), abs(x2 - x1), abs(y2 - y1))


@dataclass(frozen=True)
class DisplayBox(Box):
    """Box as drawn: content plus border and padding on every side."""

    extra: float = 0


def border_width(obj: ControlObject) -> float:
    """Border width as drawn; field and rectangle controls default to 1px."""
    if isinstance(obj, LineControl):
        return 0
    border = obj.border
    if border is None:
        return 1 if obj.type in DEFAULT_BORDERED_TYPES else 0
    if border.style != "none" and border.width:
        return border.width
    return 0


def bounding_box(obj: ControlObject) -> Box:
    """Raw box: a line's min/max span, a control's own rectangle."""
    if isinstance(obj, LineControl):
        return Box.from_points(obj.x1, obj.y1, obj.x2, obj.y2)
    return Box(obj.x, obj.y, obj.width, obj.height)


def display_box(obj: ControlObject, padding: float | None = None) -> DisplayBox:
    """
    Box used by alignment, distribution and same-size math.

    Lines span their endpoints with no padding; a degenerate extent counts
    as 1px. Boxed controls grow by ``border + padding`` on each side while
    keeping their top-left corner.
    """
    if isinstance(obj, LineControl):
        box = bounding_box(obj)
        return DisplayBox(box.x, box.y, box.width or 1, box.height or 1, extra=0)
    if padding is None:
        padding = get_settings().display_padding
    extra = border_width(obj) + padding
    return DisplayBox(obj.x, obj.y, obj.width + extra * 2, obj.height + extra * 2, extra=extra)


def translate(obj: ControlObject, dx: float, dy: float) -> ControlObject:
    """Move a control; lines move both endpoints."""
    if dx == 0 and dy == 0:
        return obj
    if isinstance(obj, LineControl):
        return obj.model_copy(
            update={"x1": obj.x1 + dx, "y1": obj.y1 + dy, "x2": obj.x2 + dx, "y2": obj.y2 + dy}
        )
    return obj.model_copy(update={"x": obj.x + dx, "y": obj.y + dy})


def normalize_object(
    obj: ControlObject,
    min_size: float | None = None,
    min_z_index: int | None = None,
) -> ControlObject:
    """Clamp a control to the minimum size and z-index floor."""
    settings = get_settings()
    min_size = settings.min_object_size if min_size is None else min_size
    min_z_index = settings.min_z_index if min_z_index is None else min_z_index

    changes: dict[str, float | int] = {}
    if obj.z_index < min_z_index:
        changes["z_index"] = min_z_index
    if not isinstance(obj, LineControl):
        if obj.width < min_size:
            changes["width"] = min_size
        if obj.height < min_size:
            changes["height"] = min_size
    return obj.model_copy(update=changes) if changes else obj


def normalize_band(band: Band) -> Band:
    """Keep ``top <= actual_bottom == bottom`` and normalise every control."""
    actual_bottom = max(band.actual_bottom, band.top)
    objects = tuple(normalize_object(obj) for obj in band.objects)
    changes: dict = {}
    if actual_bottom != band.actual_bottom or band.bottom != actual_bottom:
        changes["actual_bottom"] = actual_bottom
        changes["bottom"] = actual_bottom
    if any(new is not old for new, old in zip(objects, band.objects)):
        changes["objects"] = objects
    return band.model_copy(update=changes) if changes else band


def shift_band(band: Band, dy: float) -> Band:
    """Move a band and all of its controls vertically."""
    if dy == 0:
        return band
    return band.model_copy(
        update={
            "top": band.top + dy,
            "actual_bottom": band.actual_bottom + dy,
            "bottom": band.actual_bottom + dy,
            "objects": tuple(translate(obj, 0, dy) for obj in band.objects),
        }
    )


def locate(bands: Iterable[Band], object_id: str) -> tuple[int, int] | None:
    """Return ``(band_index, object_index)`` of a control, or None."""
    for band_index, band in enumerate(bands):
        for object_index, obj in enumerate(band.objects):
            if obj.id == object_id:
                return band_index, object_index
    return None


def find_object(bands: Iterable[Band], object_id: str) -> ControlObject | None:
    for band in bands:
        found = band.find_object(object_id)
        if found is not None:
            return found
    return None
