"""Z-order operations within one band.

The layer list shows controls by descending z-index. Reordering works on
that sorted list and then reassigns z-indexes ``count..1`` so no two
controls share a value.
"""

from collections.abc import Iterable

from banddesigner.core.config import get_settings
from banddesigner.geometry.normalize import normalize_band
from banddesigner.models.band import Band
from banddesigner.models.controls import ControlObject


def stacking_order(band: Band) -> list[ControlObject]:
    """Controls from top to bottom; ties keep insertion order."""
    return sorted(band.objects, key=lambda obj: -obj.z_index)


def _assign_dense(band: Band, ordered: list[ControlObject]) -> Band:
    count = len(ordered)
    z_by_id = {obj.id: count - index for index, obj in enumerate(ordered)}
    objects = tuple(
        obj if obj.z_index == z_by_id[obj.id] else obj.model_copy(update={"z_index": z_by_id[obj.id]})
        for obj in band.objects
    )
    return normalize_band(band.model_copy(update={"objects": objects}))


def reorder_z(band: Band, moved_id: str, target_id: str) -> Band:
    """
    Drop ``moved_id`` onto the layer-list slot of ``target_id``.

    Returns:
        Band whose z-indexes are exactly 1..count
    """
    ordered = stacking_order(band)
    ids = [obj.id for obj in ordered]
    if moved_id not in ids or target_id not in ids:
        return band
    moved = ordered.pop(ids.index(moved_id))
    ordered.insert(ids.index(target_id), moved)
    return _assign_dense(band, ordered)


def bring_to_front(band: Band, object_ids: Iterable[str]) -> Band:
    """Put the listed controls above all others, keeping their relative order."""
    targets = set(object_ids)
    ordered = stacking_order(band)
    raised = [obj for obj in ordered if obj.id in targets]
    if not raised:
        return band
    return _assign_dense(band, raised + [obj for obj in ordered if obj.id not in targets])


def send_to_back(band: Band, object_ids: Iterable[str]) -> Band:
    """Put the listed controls below all others, keeping their relative order."""
    targets = set(object_ids)
    ordered = stacking_order(band)
    lowered = [obj for obj in ordered if obj.id in targets]
    if not lowered:
        return band
    return _assign_dense(band, [obj for obj in ordered if obj.id not in targets] + lowered)


def _step(band: Band, object_ids: Iterable[str], step: int) -> Band:
    targets = set(object_ids)
    floor = get_settings().min_z_index
    objects = tuple(
        obj.model_copy(update={"z_index": max(floor, obj.z_index + step)}) if obj.id in targets else obj
        for obj in band.objects
    )
    return normalize_band(band.model_copy(update={"objects": objects}))


def move_up(band: Band, object_ids: Iterable[str]) -> Band:
    return _step(band, object_ids, 1)


def move_down(band: Band, object_ids: Iterable[str]) -> Band:
    return _step(band, object_ids, -1)
