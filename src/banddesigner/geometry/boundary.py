"""Band boundary dragging and band stacking."""

from collections.abc import Sequence
from dataclasses import dataclass

from banddesigner.core.config import get_settings
from banddesigner.core.logging import get_logger
from banddesigner.geometry.normalize import normalize_band, shift_band
from banddesigner.models.band import Band

logger = get_logger(__name__)


def apply_boundary_drag(
    snapshot: Sequence[Band],
    band_index: int,
    delta: float,
    spacing: float | None = None,
) -> tuple[Band, ...]:
    """
    Move the bottom boundary of one band.

    The new bottom is clamped to at least the band's top and, for any band
    after the first, to at least the previous band's bottom plus spacing.
    Every later band, with all of its controls, shifts by the resulting
    height change. Controls in the dragged band stay where they are.

    Args:
        snapshot: Bands as they were when the drag began
        band_index: Index of the band whose boundary is dragged
        delta: Total pointer movement since the drag began
        spacing: Minimum gap between bands, defaults to settings

    Returns:
        New bands; ``snapshot`` is not modified
    """
    bands = tuple(snapshot)
    if not 0 <= band_index < len(bands):
        return bands
    if spacing is None:
        spacing = get_settings().band_spacing

    band = bands[band_index]
    new_bottom = max(band.actual_bottom + delta, band.top)
    if band_index > 0:
        new_bottom = max(new_bottom, bands[band_index - 1].actual_bottom + spacing)
    height_change = new_bottom - band.actual_bottom

    dragged = normalize_band(
        band.model_copy(update={"actual_bottom": new_bottom, "bottom": new_bottom})
    )
    later = tuple(normalize_band(shift_band(b, height_change)) for b in bands[band_index + 1 :])
    return bands[:band_index] + (dragged,) + later


@dataclass(frozen=True)
class DragState:
    band_index: int
    start_y: float
    snapshot: tuple[Band, ...]


class BandBoundaryDragger:
    """
    Pointer-driven boundary drag: Idle -> Dragging -> Idle.

    Every move recomputes from the snapshot taken at ``begin`` with the
    total delta, so intermediate clamping never accumulates.
    """

    def __init__(self, spacing: float | None = None):
        self.spacing = get_settings().band_spacing if spacing is None else spacing
        self._state: DragState | None = None

    @property
    def dragging(self) -> bool:
        return self._state is not None

    @property
    def state(self) -> DragState | None:
        return self._state

    def begin(self, bands: Sequence[Band], band_index: int, start_y: float) -> None:
        """Start dragging the bottom boundary of ``bands[band_index]``."""
        if not 0 <= band_index < len(bands):
            logger.debug("Ignoring boundary drag on missing band", extra={"band_index": band_index})
            return
        self._state = DragState(band_index, start_y, tuple(bands))

    def move(self, current_y: float) -> tuple[Band, ...] | None:
        """Bands for the current pointer position, or None when idle."""
        if self._state is None:
            return None
        return apply_boundary_drag(
            self._state.snapshot,
            self._state.band_index,
            current_y - self._state.start_y,
            self.spacing,
        )

    def end(self, current_y: float | None = None) -> tuple[Band, ...] | None:
        """Finish the drag, returning the final bands when a position is given."""
        result = self.move(current_y) if current_y is not None else None
        self._state = None
        return result

    def cancel(self) -> tuple[Band, ...] | None:
        """Abort the drag and return the untouched snapshot."""
        snapshot = self._state.snapshot if self._state is not None else None
        self._state = None
        return snapshot


def layout_bands(
    bands: Sequence[Band],
    spacing: float | None = None,
    height: float | None = None,
) -> tuple[Band, ...]:
    """
    Restack bands top to bottom with ``spacing`` between them.

    Args:
        bands: Bands in display order
        spacing: Gap between bands, defaults to settings
        height: Height given to every band; each band keeps its own when None

    Returns:
        New bands; controls move with their band
    """
    if spacing is None:
        spacing = get_settings().band_spacing

    result: list[Band] = []
    top = bands[0].top if bands else 0
    for band in bands:
        band_height = max(band.height if height is None else height, 0)
        moved = shift_band(band, top - band.top)
        moved = moved.model_copy(
            update={"actual_bottom": top + band_height, "bottom": top + band_height}
        )
        result.append(normalize_band(moved))
        top += band_height + spacing
    return tuple(result)
