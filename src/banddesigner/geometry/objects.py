"""Adding, removing, moving and resizing controls.

All functions take bands and return new bands; controls and bands that do
not change are returned as the same objects.
"""

import uuid
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from banddesigner.core.config import get_settings
from banddesigner.core.exceptions import BandNotFoundError
from banddesigner.geometry.normalize import locate, normalize_band, normalize_object, translate
from banddesigner.models.band import Band
from banddesigner.models.controls import ControlObject, LineControl

Direction = Literal["up", "down", "left", "right"]

_DIRECTION_VECTORS = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}


def new_object_id() -> str:
    return f"obj_{uuid.uuid4().hex[:12]}"


def map_objects(
    bands: Sequence[Band],
    object_ids: Iterable[str],
    transform: Callable[[ControlObject], ControlObject],
) -> tuple[Band, ...]:
    """Apply ``transform`` to the listed controls and normalise what changed."""
    targets = set(object_ids)
    result = []
    for band in bands:
        objects = tuple(
            normalize_object(transform(obj)) if obj.id in targets else obj for obj in band.objects
        )
        if any(new is not old for new, old in zip(objects, band.objects)):
            band = normalize_band(band.model_copy(update={"objects": objects}))
        result.append(band)
    return tuple(result)


def _band_index(bands: Sequence[Band], band_id: str) -> int:
    for index, band in enumerate(bands):
        if band.id == band_id:
            return index
    raise BandNotFoundError(band_id)


def _resize(obj: ControlObject, delta_width: float, delta_height: float) -> ControlObject:
    """Grow a control; lines move their second endpoint."""
    if isinstance(obj, LineControl):
        return obj.model_copy(update={"x2": obj.x2 + delta_width, "y2": obj.y2 + delta_height})
    return obj.model_copy(update={"width": obj.width + delta_width, "height": obj.height + delta_height})


def move_objects(bands: Sequence[Band], object_ids: Iterable[str], dx: float, dy: float) -> tuple[Band, ...]:
    return map_objects(bands, object_ids, lambda obj: translate(obj, dx, dy))


def resize_objects(
    bands: Sequence[Band],
    object_ids: Iterable[str],
    delta_width: float,
    delta_height: float,
) -> tuple[Band, ...]:
    return map_objects(bands, object_ids, lambda obj: _resize(obj, delta_width, delta_height))


def _field_name(model: type, key: str) -> str:
    """Map a camelCase alias to its field name; other keys pass through."""
    if key in model.model_fields:
        return key
    for name, info in model.model_fields.items():
        if info.alias == key:
            return name
    return key


def apply_changes(obj: ControlObject, changes: Mapping[str, Any]) -> ControlObject:
    """Validate ``changes`` (snake_case or camelCase keys) against the control's model."""
    if not changes:
        return obj
    model = type(obj)
    data = obj.model_dump()
    data.update({_field_name(model, key): value for key, value in changes.items()})
    return model.model_validate(data)


def update_objects(
    bands: Sequence[Band],
    changes: Mapping[str, Mapping[str, Any]],
) -> tuple[Band, ...]:
    """
    Apply a batch of change sets.

    Args:
        bands: Current bands
        changes: Object ID to field changes; unknown IDs are ignored

    Returns:
        New bands
    """
    return map_objects(bands, changes.keys(), lambda obj: apply_changes(obj, changes[obj.id]))


def nudge_objects(
    bands: Sequence[Band],
    object_ids: Iterable[str],
    direction: Direction,
    shift: bool = False,
    alt: bool = False,
) -> tuple[Band, ...]:
    """
    Arrow-key movement.

    Args:
        direction: Arrow pressed
        shift: Use the large step
        alt: Resize instead of move (right/down grow, left/up shrink)
    """
    settings = get_settings()
    step = settings.nudge_step_large if shift else settings.nudge_step
    ux, uy = _DIRECTION_VECTORS[direction]
    if alt:
        return resize_objects(bands, object_ids, ux * step, uy * step)
    return move_objects(bands, object_ids, ux * step, uy * step)


def next_z_index(band: Band) -> int:
    """z-index that puts a new control on top."""
    return max((obj.z_index for obj in band.objects), default=0) + 1


def add_object(bands: Sequence[Band], band_id: str, obj: ControlObject) -> tuple[Band, ...]:
    """Append a control on top of a band's stack."""
    index = _band_index(bands, band_id)
    band = bands[index]
    placed = normalize_object(obj.model_copy(update={"z_index": next_z_index(band)}))
    updated = normalize_band(band.model_copy(update={"objects": band.objects + (placed,)}))
    return tuple(bands[:index]) + (updated,) + tuple(bands[index + 1 :])


def delete_objects(bands: Sequence[Band], object_ids: Iterable[str]) -> tuple[Band, ...]:
    targets = set(object_ids)
    result = []
    for band in bands:
        kept = tuple(obj for obj in band.objects if obj.id not in targets)
        if len(kept) != len(band.objects):
            band = band.model_copy(update={"objects": kept})
        result.append(band)
    return tuple(result)


def move_to_band(
    bands: Sequence[Band],
    object_id: str,
    target_band_id: str,
) -> tuple[Band, ...]:
    """Move a control into another band, keeping its ID."""
    position = locate(bands, object_id)
    target = _band_index(bands, target_band_id)
    if position is None or position[0] == target:
        return tuple(bands)
    obj = bands[position[0]].objects[position[1]]
    return add_object(delete_objects(bands, [object_id]), target_band_id, obj)


# =============================================================================
# Clipboard
# =============================================================================


@dataclass(frozen=True)
class ClipboardEntry:
    band_id: str
    object: ControlObject


def copy_objects(bands: Sequence[Band], object_ids: Iterable[str]) -> tuple[ClipboardEntry, ...]:
    """Capture the listed controls in selection order."""
    entries = []
    for object_id in object_ids:
        position = locate(bands, object_id)
        if position is not None:
            band = bands[position[0]]
            entries.append(ClipboardEntry(band.id, band.objects[position[1]]))
    return tuple(entries)


def paste_objects(
    bands: Sequence[Band],
    clipboard: Sequence[ClipboardEntry],
    target_band_id: str | None = None,
) -> tuple[tuple[Band, ...], tuple[str, ...]]:
    """
    Paste copies with fresh IDs, offset right and down.

    Pasting into another band moves each copy to that band's top plus the
    offset.

    Returns:
        Tuple of (new bands, IDs of the pasted controls)
    """
    offset = get_settings().paste_offset
    result = tuple(bands)
    pasted: list[str] = []
    for entry in clipboard:
        band_id = target_band_id or entry.band_id
        index = _band_index(result, band_id)
        dy = offset
        if target_band_id is not None and target_band_id != entry.band_id:
            dy = result[index].top + offset - entry.object.y
        copy = translate(entry.object, offset, dy).model_copy(update={"id": new_object_id()})
        result = add_object(result, band_id, copy)
        pasted.append(copy.id)
    return result, tuple(pasted)
