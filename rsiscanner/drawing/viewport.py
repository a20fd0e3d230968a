"""Mapping between pixel coordinates and normalized chart coordinates."""

from pydantic import BaseModel, Field

from rsiscanner.models import Point


class Viewport(BaseModel):
    """Pixel size of the chart area annotations are drawn on."""

    width: float = Field(..., gt=0, description="Width in pixels")
    height: float = Field(..., gt=0, description="Height in pixels")

    model_config = {"frozen": True}

    def normalize(self, x: float, y: float) -> Point:
        """Convert a pixel position to a normalized point.

        Positions outside the viewport are clamped to its edge.
        """
        return Point(
            x=min(1.0, max(0.0, x / self.width)),
            y=min(1.0, max(0.0, y / self.height)),
        )

    def project(self, point: Point) -> tuple[float, float]:
        """Convert a normalized point back to pixel space."""
        return (point.x * self.width, point.y * self.height)
