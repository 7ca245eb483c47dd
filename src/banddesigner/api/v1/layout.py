"""
Layout endpoints.

Stateless geometry operations: the client sends its bands and gets the
new bands back.
"""

from collections.abc import Sequence

from fastapi import APIRouter

from banddesigner.core.exceptions import BandNotFoundError, ControlNotFoundError
from banddesigner.geometry.alignment import align_objects, distribute_objects, same_size
from banddesigner.geometry.boundary import apply_boundary_drag
from banddesigner.geometry.normalize import Box, find_object
from banddesigner.geometry.selection import marquee_select
from banddesigner.geometry.zorder import reorder_z
from banddesigner.models.band import Band
from banddesigner.schemas.layout import (
    AlignRequest,
    BoundaryDragRequest,
    DistributeRequest,
    LayoutResponse,
    MarqueeRequest,
    MarqueeResponse,
    ReorderRequest,
    SameSizeRequest,
)

router = APIRouter()


# =============================================================================
# Helpers
# =============================================================================


def _band_index(bands: Sequence[Band], band_id: str) -> int:
    for index, band in enumerate(bands):
        if band.id == band_id:
            return index
    raise BandNotFoundError(band_id)


def _require_objects(bands: Sequence[Band], object_ids: Sequence[str]) -> None:
    for object_id in object_ids:
        if find_object(bands, object_id) is None:
            raise ControlNotFoundError(object_id)


# =============================================================================
# Band Endpoints
# =============================================================================


@router.post(
    "/boundary-drag",
    response_model=LayoutResponse,
    summary="Drag a band boundary",
)
def boundary_drag(request: BoundaryDragRequest) -> LayoutResponse:
    """
    Move the bottom boundary of a band by ``delta``.

    Later bands and their controls shift by the height change.
    """
    index = _band_index(request.bands, request.band_id)
    bands = apply_boundary_drag(request.bands, index, request.delta, request.spacing)
    return LayoutResponse(bands=list(bands))


@router.post(
    "/reorder",
    response_model=LayoutResponse,
    summary="Reorder a control in the layer list",
)
def reorder(request: ReorderRequest) -> LayoutResponse:
    """Drop one control onto another's layer slot; z-indexes become 1..N."""
    index = _band_index(request.bands, request.band_id)
    band = request.bands[index]
    for object_id in (request.moved_id, request.target_id):
        if band.find_object(object_id) is None:
            raise ControlNotFoundError(object_id)
    bands = list(request.bands)
    bands[index] = reorder_z(band, request.moved_id, request.target_id)
    return LayoutResponse(bands=bands)


# =============================================================================
# Selection Endpoints
# =============================================================================


@router.post(
    "/align",
    response_model=LayoutResponse,
    summary="Align selected controls",
)
def align(request: AlignRequest) -> LayoutResponse:
    """Align selected controls to the first one's display box."""
    _require_objects(request.bands, request.selection)
    return LayoutResponse(bands=list(align_objects(request.bands, request.selection, request.mode)))


@router.post(
    "/distribute",
    response_model=LayoutResponse,
    summary="Distribute selected controls",
)
def distribute(request: DistributeRequest) -> LayoutResponse:
    """Space three or more controls evenly along an axis."""
    _require_objects(request.bands, request.selection)
    return LayoutResponse(
        bands=list(distribute_objects(request.bands, request.selection, request.axis))
    )


@router.post(
    "/same-size",
    response_model=LayoutResponse,
    summary="Give selected controls the same size",
)
def make_same_size(request: SameSizeRequest) -> LayoutResponse:
    """Give selected controls the first one's width, height or both."""
    _require_objects(request.bands, request.selection)
    return LayoutResponse(
        bands=list(same_size(request.bands, request.selection, request.dimension))
    )


@router.post(
    "/marquee",
    response_model=MarqueeResponse,
    summary="Select controls with a marquee",
)
def marquee(request: MarqueeRequest) -> MarqueeResponse:
    """Controls whose box touches the dragged rectangle."""
    selection = marquee_select(
        request.bands,
        Box(request.x, request.y, request.width, request.height),
        existing=request.existing,
        additive=request.additive,
        offset=(request.offset_x, request.offset_y),
    )
    return MarqueeResponse(selection=list(selection))
