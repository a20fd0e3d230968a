"""Chart annotation models.

Coordinates are stored normalized to the chart viewport, with (0, 0) at the
top-left and (1, 1) at the bottom-right, so a drawing keeps its shape when
the chart is resized.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class Point(BaseModel):
    """A normalized viewport coordinate."""

    x: float = Field(..., ge=0, le=1, description="Horizontal position (0-1)")
    y: float = Field(..., ge=0, le=1, description="Vertical position (0-1)")

    model_config = {"frozen": True}


class FreehandStroke(BaseModel):
    """A brush stroke made of ordered sample points."""

    tool: Literal["brush"] = "brush"
    points: tuple[Point, ...] = Field(..., min_length=1, description="Sampled points")
    color: str = Field(..., min_length=1, description="Stroke color")

    model_config = {"frozen": True}


class Trendline(BaseModel):
    """A straight segment between two points."""

    tool: Literal["trendline"] = "trendline"
    start: Point = Field(..., description="Segment start")
    end: Point = Field(..., description="Segment end")
    color: str = Field(..., min_length=1, description="Line color")

    model_config = {"frozen": True}


Annotation = Annotated[Union[FreehandStroke, Trendline], Field(discriminator="tool")]
