"""Per-symbol annotation editing: brush strokes and trendlines."""

import logging
from enum import Enum
from typing import Literal, Optional, Union

from rsiscanner.drawing.viewport import Viewport
from rsiscanner.models import FreehandStroke, Point, Trendline

logger = logging.getLogger(__name__)

Tool = Literal["brush", "trendline"]
TOOLS: tuple[Tool, ...] = ("brush", "trendline")

# The first entry stands in for the chart's text color
DEFAULT_COLORS = ("#E5E7EB", "#A855F7", "#EAB308", "#F97316")

MIN_STROKE_POINTS = 2


class GestureState(str, Enum):
    """Pointer gesture state shared by both tools."""

    IDLE = "idle"
    DRAWING = "drawing"
    COMMITTING = "committing"


class AnnotationLayer:
    """Annotation sets keyed by symbol, edited through pointer events.

    Pointer events arrive in pixel coordinates together with the viewport
    they were measured in, and are stored normalized. Annotations are only
    ever appended or cleared; committed shapes are never edited.

    A gesture moves ``IDLE -> DRAWING`` on pointer down and
    ``DRAWING -> COMMITTING -> IDLE`` on pointer up. Leaving the canvas,
    switching tool or switching symbol mid-gesture cancels straight back to
    ``IDLE`` without committing anything.
    """

    def __init__(
        self,
        min_stroke_points: int = MIN_STROKE_POINTS,
        color: str = DEFAULT_COLORS[0],
        tool: Tool = "brush",
    ):
        """Initialize the layer.

        Args:
            min_stroke_points: Brush strokes with fewer points are dropped on release.
            color: Initial drawing color.
            tool: Initial tool.
        """
        if min_stroke_points < 1:
            raise ValueError(f"min_stroke_points must be at least 1, got {min_stroke_points}")
        if tool not in TOOLS:
            raise ValueError(f"Invalid tool: {tool}. Must be one of {list(TOOLS)}")

        self.min_stroke_points = min_stroke_points
        self.color = color
        self._tool: Tool = tool
        self._sets: dict[str, list[Union[FreehandStroke, Trendline]]] = {}
        self._active_symbol: Optional[str] = None
        self._state = GestureState.IDLE
        self._points: list[Point] = []
        self._start: Optional[Point] = None
        self._end: Optional[Point] = None

    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def tool(self) -> Tool:
        return self._tool

    @tool.setter
    def tool(self, tool: Tool) -> None:
        if tool not in TOOLS:
            raise ValueError(f"Invalid tool: {tool}. Must be one of {list(TOOLS)}")
        self.cancel()
        self._tool = tool

    @property
    def active_symbol(self) -> Optional[str]:
        return self._active_symbol

    def set_active_symbol(self, symbol: Optional[str]) -> None:
        """Switch the visible annotation set. No symbol's data is deleted."""
        self.cancel()
        self._active_symbol = symbol

    def set_color(self, color: str) -> None:
        """Set the color for annotations committed from now on."""
        if not color:
            raise ValueError("Color must not be empty")
        self.color = color

    # ==================== Pointer events ====================

    def pointer_down(self, x: float, y: float, viewport: Viewport) -> bool:
        """Start a gesture.

        Returns:
            True if a gesture started. Ignored without an active symbol or
            while a gesture is already in progress.
        """
        if self._active_symbol is None or self._state is not GestureState.IDLE:
            return False

        point = viewport.normalize(x, y)
        if self._tool == "brush":
            self._points = [point]
        else:
            self._start = point
            self._end = point
        self._state = GestureState.DRAWING
        return True

    def pointer_move(self, x: float, y: float, viewport: Viewport) -> None:
        """Sample a brush point or move the trendline preview end."""
        if self._state is not GestureState.DRAWING:
            return

        point = viewport.normalize(x, y)
        if self._tool == "brush":
            self._points.append(point)
        else:
            self._end = point

    def pointer_up(
        self, x: float, y: float, viewport: Viewport
    ) -> Optional[Union[FreehandStroke, Trendline]]:
        """Finish the gesture and commit its annotation.

        For the brush the release position is not sampled; the stroke is
        whatever was collected by down and move events. For the trendline
        the release position is the end point.

        Returns:
            The committed annotation, or None if nothing was committed.
        """
        if self._state is not GestureState.DRAWING:
            return None

        self._state = GestureState.COMMITTING
        if self._tool == "trendline":
            self._end = viewport.normalize(x, y)

        annotation = self._build()
        if annotation is not None:
            self._sets.setdefault(self._active_symbol, []).append(annotation)
        else:
            logger.debug("Discarded %d-point stroke", len(self._points))

        self._reset_gesture()
        return annotation

    def pointer_leave(self) -> bool:
        """Cancel an in-progress gesture when the pointer leaves the canvas."""
        return self.cancel()

    def cancel(self) -> bool:
        """Drop any in-progress gesture.

        Returns:
            True if a gesture was cancelled.
        """
        if self._state is GestureState.IDLE:
            return False
        self._reset_gesture()
        return True

    def preview(self) -> Optional[Union[FreehandStroke, Trendline]]:
        """The uncommitted shape of the current gesture, if any."""
        if self._state is not GestureState.DRAWING:
            return None
        if self._tool == "brush":
            return FreehandStroke(points=tuple(self._points), color=self.color)
        return Trendline(start=self._start, end=self._end, color=self.color)

    # ==================== Annotation sets ====================

    def annotations(self, symbol: Optional[str] = None) -> tuple[Union[FreehandStroke, Trendline], ...]:
        """Committed annotations for a symbol (default: the active one)."""
        key = symbol if symbol is not None else self._active_symbol
        return tuple(self._sets.get(key, ()))

    def symbols(self) -> list[str]:
        """Symbols that have an annotation set."""
        return list(self._sets)

    def clear(self, symbol: Optional[str] = None) -> int:
        """Remove every annotation of one symbol (default: the active one).

        Returns:
            Number of annotations removed.
        """
        key = symbol if symbol is not None else self._active_symbol
        if key == self._active_symbol:
            self.cancel()
        removed = self._sets.pop(key, [])
        return len(removed)

    def _build(self) -> Optional[Union[FreehandStroke, Trendline]]:
        if self._tool == "brush":
            if len(self._points) < self.min_stroke_points:
                return None
            return FreehandStroke(points=tuple(self._points), color=self.color)
        return Trendline(start=self._start, end=self._end, color=self.color)

    def _reset_gesture(self) -> None:
        self._points = []
        self._start = None
        self._end = None
        self._state = GestureState.IDLE
