"""Integer rectangles and labelled bounding boxes."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import IntEnum

Point = tuple[int, int]


def _half(value: int) -> int:
    """Integer division by two, truncating toward zero."""
    return int(value / 2) if value < 0 else value // 2


@dataclass
class Rect:
    """An integer rectangle whose right and bottom edges are inclusive."""

    left: int = 0
    top: int = 0
    right: int = -1
    bottom: int = -1

    @classmethod
    def from_xywh(cls, x: int, y: int, width: int, height: int) -> Rect:
        return cls(x, y, x + width - 1, y + height - 1)

    @property
    def x(self) -> int:
        return self.left

    @property
    def y(self) -> int:
        return self.top

    @property
    def width(self) -> int:
        return self.right - self.left + 1

    @width.setter
    def width(self, value: int) -> None:
        self.right = self.left + value - 1

    @property
    def height(self) -> int:
        return self.bottom - self.top + 1

    @height.setter
    def height(self, value: int) -> None:
        self.bottom = self.top + value - 1

    @property
    def top_left(self) -> Point:
        return (self.left, self.top)

    @top_left.setter
    def top_left(self, point: Point) -> None:
        self.left, self.top = point

    @property
    def top_right(self) -> Point:
        return (self.right, self.top)

    @top_right.setter
    def top_right(self, point: Point) -> None:
        self.right, self.top = point

    @property
    def bottom_left(self) -> Point:
        return (self.left, self.bottom)

    @bottom_left.setter
    def bottom_left(self, point: Point) -> None:
        self.left, self.bottom = point

    @property
    def bottom_right(self) -> Point:
        return (self.right, self.bottom)

    @bottom_right.setter
    def bottom_right(self, point: Point) -> None:
        self.right, self.bottom = point

    @property
    def center(self) -> Point:
        return (_half(self.left + self.right), _half(self.top + self.bottom))

    def is_empty(self) -> bool:
        return self.left > self.right or self.top > self.bottom

    def normalized(self) -> Rect:
        """Return a copy with non-negative width and height."""
        left, right = self.left, self.right
        if right < left - 1:
            left, right = right, left
        top, bottom = self.top, self.bottom
        if bottom < top - 1:
            top, bottom = bottom, top
        return Rect(left, top, right, bottom)

    def contains(self, point: Point, proper: bool = False) -> bool:
        """Whether ``point`` lies inside; with ``proper`` the edges do not count."""
        px, py = point
        lo_x, hi_x = (self.right, self.left) if self.right < self.left - 1 else (self.left, self.right)
        lo_y, hi_y = (self.bottom, self.top) if self.bottom < self.top - 1 else (self.top, self.bottom)
        if proper:
            return lo_x < px < hi_x and lo_y < py < hi_y
        return lo_x <= px <= hi_x and lo_y <= py <= hi_y

    def translated(self, dx: int, dy: int) -> Rect:
        return replace(
            self,
            left=self.left + dx,
            top=self.top + dy,
            right=self.right + dx,
            bottom=self.bottom + dy,
        )


def rect_from_points(top_left: Point, bottom_right: Point) -> Rect:
    """Build a rectangle from its top-left and (inclusive) bottom-right corners."""
    return Rect(top_left[0], top_left[1], bottom_right[0], bottom_right[1])


class SelectedEdge(IntEnum):
    LEFT = 0
    TOP = 1
    RIGHT = 2
    BOTTOM = 3
    NONE = 4


class SelectedCorner(IntEnum):
    TOP_LEFT = 0
    TOP_RIGHT = 1
    BOTTOM_LEFT = 2
    BOTTOM_RIGHT = 3
    NONE = 4


@dataclass
class BoundingBox:
    """A labelled rectangle in image coordinates."""

    rect: Rect = field(default_factory=Rect)
    classname: str = ""
    occluded: int = 0
    truncated: bool = False
    classid: int = 0
    confidence: float = 0.0
    is_selected: bool = False
    selected_edge: SelectedEdge = SelectedEdge.NONE
    selected_corner: SelectedCorner = SelectedCorner.NONE
    label_id: int = -1


def format_bounding_box(box: BoundingBox) -> str:
    """Return a short human-readable description of ``box``."""
    rect = box.rect
    return f"{box.classname}, xy({rect.left}, {rect.top}) w: {rect.width} h: {rect.height}"