"""Page settings."""

from pydantic import Field

from banddesigner.core.config import get_settings
from banddesigner.models.base import DesignModel


class PageSettings(DesignModel):
    """Printable page in px."""

    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    margin_top: float = Field(default=0, ge=0)
    margin_bottom: float = Field(default=0, ge=0)
    margin_left: float = Field(default=0, ge=0)
    margin_right: float = Field(default=0, ge=0)

    @property
    def usable_height(self) -> float:
        return max(self.height - self.margin_top - self.margin_bottom, 0)

    @property
    def usable_width(self) -> float:
        return max(self.width - self.margin_left - self.margin_right, 0)

    @classmethod
    def default(cls) -> "PageSettings":
        """A4 portrait with uniform margins from settings."""
        settings = get_settings()
        return cls(
            width=settings.page_width,
            height=settings.page_height,
            margin_top=settings.page_margin,
            margin_bottom=settings.page_margin,
            margin_left=settings.page_margin,
            margin_right=settings.page_margin,
        )
