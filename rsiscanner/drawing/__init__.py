"""Chart annotation layer."""

from rsiscanner.drawing.layer import (
    DEFAULT_COLORS,
    MIN_STROKE_POINTS,
    TOOLS,
    AnnotationLayer,
    GestureState,
)
from rsiscanner.drawing.render import project, render_svg
from rsiscanner.drawing.viewport import Viewport

__all__ = [
    "AnnotationLayer",
    "DEFAULT_COLORS",
    "GestureState",
    "MIN_STROKE_POINTS",
    "TOOLS",
    "Viewport",
    "project",
    "render_svg",
]
