"""Projection of stored annotations to pixel space and SVG output."""

from typing import Iterable, Optional, Union
from xml.sax.saxutils import quoteattr

from rsiscanner.drawing.viewport import Viewport
from rsiscanner.models import FreehandStroke, Trendline


def project(
    annotation: Union[FreehandStroke, Trendline], viewport: Viewport
) -> list[tuple[float, float]]:
    """Pixel coordinates of an annotation for the given viewport.

    Stored coordinates are left untouched; calling this again after a
    resize projects from the same normalized values.
    """
    if isinstance(annotation, FreehandStroke):
        return [viewport.project(p) for p in annotation.points]
    return [viewport.project(annotation.start), viewport.project(annotation.end)]


def render_svg(
    annotations: Iterable[Union[FreehandStroke, Trendline]],
    viewport: Viewport,
    preview: Optional[Union[FreehandStroke, Trendline]] = None,
    stroke_width: float = 2.0,
) -> str:
    """Render annotations as an SVG overlay sized to the viewport.

    Args:
        annotations: Committed annotations, drawn in order.
        viewport: Target pixel size.
        preview: Optional in-progress shape, drawn last and dashed.
        stroke_width: Line width in pixels.

    Returns:
        SVG document text.
    """
    shapes = [_shape(a, viewport, stroke_width) for a in annotations]
    if preview is not None:
        shapes.append(_shape(preview, viewport, stroke_width, dashed=True))

    header = (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{_fmt(viewport.width)}" '
        f'height="{_fmt(viewport.height)}" viewBox="0 0 {_fmt(viewport.width)} {_fmt(viewport.height)}">'
    )
    return "\n".join([header, *shapes, "</svg>"])


def _shape(
    annotation: Union[FreehandStroke, Trendline],
    viewport: Viewport,
    stroke_width: float,
    dashed: bool = False,
) -> str:
    coords = project(annotation, viewport)
    style = (
        f'fill="none" stroke={quoteattr(annotation.color)} stroke-width="{_fmt(stroke_width)}" '
        'stroke-linecap="round" stroke-linejoin="round"'
    )
    if dashed:
        style += ' stroke-dasharray="4 4"'

    if isinstance(annotation, FreehandStroke):
        points = " ".join(f"{_fmt(x)},{_fmt(y)}" for x, y in coords)
        return f'  <polyline points="{points}" {style}/>'

    (x1, y1), (x2, y2) = coords
    return f'  <line x1="{_fmt(x1)}" y1="{_fmt(y1)}" x2="{_fmt(x2)}" y2="{_fmt(y2)}" {style}/>'


def _fmt(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")
