"""Geometry for picking and editing bounding boxes on a possibly scaled image view."""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass

from .boundingbox import (
    BoundingBox,
    Point,
    Rect,
    SelectedCorner,
    SelectedEdge,
    rect_from_points,
)

DEFAULT_THRESHOLD = 5
DEFAULT_PADDING = 5


def _half(value: int) -> int:
    """Integer division by two, truncating toward zero."""
    return int(value / 2)


@dataclass
class ViewGeometry:
    """Size of a view and of the (centred) scaled image drawn inside it."""

    width: int
    height: int
    scaled_width: int
    scaled_height: int
    scale_factor: float = 1.0

    @property
    def x_padding(self) -> int:
        return _half(self.width - self.scaled_width)

    @property
    def y_padding(self) -> int:
        return _half(self.height - self.scaled_height)

    def image_location(self, location: Point) -> Point:
        """Map a point in view coordinates to image coordinates."""
        x, y = location
        if self.scale_factor == 1.0:
            return (x, y)
        x -= self.x_padding
        y -= self.y_padding
        return (int(x / self.scale_factor), int(y / self.scale_factor))

    def clip(self, rect: Rect) -> Rect:
        """Return ``rect`` limited to the area the image occupies in the view."""
        xpad = self.x_padding
        ypad = self.y_padding
        return Rect(
            left=max(xpad, rect.left),
            top=max(ypad, rect.top),
            right=min(self.width - xpad, rect.right),
            bottom=min(self.height - ypad, rect.bottom),
        )


def point_distance(p1: Point, p2: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


def padded_rect(location: Point, pad: int) -> Rect:
    """A square of side ``2 * pad`` whose top-left is ``pad`` above and left of ``location``."""
    return Rect.from_xywh(location[0] - pad, location[1] - pad, 2 * pad, 2 * pad)


def is_selected(box: BoundingBox, location: Point, padding: int = DEFAULT_PADDING) -> bool:
    """Whether ``location`` falls in the box shrunk by ``padding`` on every side."""
    left, top = box.rect.top_left
    right, bottom = box.rect.bottom_right
    inner = rect_from_points((left + padding, top + padding), (right - padding, bottom - padding))
    return inner.contains(location)


def selected_edge(
    box: BoundingBox, location: Point, threshold: int = DEFAULT_THRESHOLD
) -> SelectedEdge:
    """Return the edge of ``box`` that ``location`` is within ``threshold`` of, if any."""
    rect = box.rect
    t = threshold
    hitboxes = (
        (
            SelectedEdge.LEFT,
            rect_from_points(
                (rect.top_left[0] - t, rect.top_left[1] + t),
                (rect.bottom_left[0] + t, rect.bottom_left[1] - t),
            ),
        ),
        (
            SelectedEdge.RIGHT,
            rect_from_points(
                (rect.top_right[0] - t, rect.top_right[1] + t),
                (rect.bottom_right[0] + t, rect.bottom_right[1] - t),
            ),
        ),
        (
            SelectedEdge.TOP,
            rect_from_points(
                (rect.top_left[0] + t, rect.top_left[1] - t),
                (rect.top_right[0] - t, rect.top_right[1] + t),
            ),
        ),
        (
            SelectedEdge.BOTTOM,
            rect_from_points(
                (rect.bottom_left[0] + t, rect.bottom_left[1] - t),
                (rect.bottom_right[0] - t, rect.bottom_right[1] + t),
            ),
        ),
    )
    for edge, hitbox in hitboxes:
        if hitbox.contains(location, proper=True):
            return edge
    return SelectedEdge.NONE


def selected_corner(
    box: BoundingBox, location: Point, threshold: int = DEFAULT_THRESHOLD
) -> SelectedCorner:
    """Return the corner of ``box`` closer than ``threshold`` to ``location``, if any."""
    rect = box.rect
    corners = (
        (SelectedCorner.TOP_LEFT, rect.top_left),
        (SelectedCorner.TOP_RIGHT, rect.top_right),
        (SelectedCorner.BOTTOM_LEFT, rect.bottom_left),
        (SelectedCorner.BOTTOM_RIGHT, rect.bottom_right),
    )
    for corner, point in corners:
        if point_distance(point, location) < threshold:
            return corner
    return SelectedCorner.NONE


def edit_box_coords(
    box: BoundingBox,
    location: Point,
    previous_location: Point,
    geometry: ViewGeometry | None = None,
) -> BoundingBox:
    """Return a copy of ``box`` dragged to ``location`` (view coordinates).

    A selected edge or corner follows the cursor; a selected box moves by the
    cursor's displacement since ``previous_location``. The result is normalised.
    """
    view = geometry if geometry is not None else ViewGeometry(0, 0, 0, 0, 1.0)
    edited = copy.deepcopy(box)
    rect = edited.rect
    x, y = view.image_location(location)

    if edited.selected_edge == SelectedEdge.TOP:
        rect.top = y
    elif edited.selected_edge == SelectedEdge.BOTTOM:
        rect.bottom = y
    elif edited.selected_edge == SelectedEdge.LEFT:
        rect.left = x
    elif edited.selected_edge == SelectedEdge.RIGHT:
        rect.right = x

    if edited.selected_corner == SelectedCorner.BOTTOM_LEFT:
        rect.bottom_left = (x, y)
    elif edited.selected_corner == SelectedCorner.BOTTOM_RIGHT:
        rect.bottom_right = (x, y)
    elif edited.selected_corner == SelectedCorner.TOP_LEFT:
        rect.top_left = (x, y)
    elif edited.selected_corner == SelectedCorner.TOP_RIGHT:
        rect.top_right = (x, y)

    if edited.is_selected:
        px, py = view.image_location(previous_location)
        rect = rect.translated(x - px, y - py)

    edited.rect = rect.normalized()
    return edited