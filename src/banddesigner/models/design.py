"""Design document: the saved shape of a design."""

from datetime import datetime, timezone

import orjson
from pydantic import Field

from banddesigner.models.band import Band, default_bands
from banddesigner.models.base import DesignModel


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DesignDocument(DesignModel):
    """``{bands, version, createdAt}`` as exchanged with save/load collaborators."""

    bands: tuple[Band, ...] = Field(default_factory=default_bands)
    version: str = "1.0"
    created_at: datetime = Field(default_factory=_utc_now)

    def to_json(self) -> bytes:
        return orjson.dumps(self.model_dump(mode="json", by_alias=True))

    @classmethod
    def from_json(cls, data: bytes | str) -> "DesignDocument":
        return cls.model_validate(orjson.loads(data))

    def find_band(self, band_id: str) -> Band | None:
        return next((band for band in self.bands if band.id == band_id), None)
