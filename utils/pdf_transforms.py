"""PDF geometry and transformation utilities for page building."""

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

@dataclass(frozen=True)
class PdfPoint:
    """A point in PDF user space (y grows upwards)."""
    x: float
    y: float

    def translate(self, dx: float, dy: float) -> 'PdfPoint':
        return PdfPoint(self.x + dx, self.y + dy)

@dataclass(frozen=True)
class PdfRectangle:
    """A possibly rotated rectangle described by its four corners.

    Width and height are measured along the rectangle's own edges, so they
    survive rotation; left/bottom/right/top give the axis-aligned bounds.
    """
    top_left: PdfPoint
    top_right: PdfPoint
    bottom_left: PdfPoint
    bottom_right: PdfPoint

    @classmethod
    def from_coordinates(cls, x1: float, y1: float, x2: float, y2: float) -> 'PdfRectangle':
        """Build an axis-aligned rectangle from two opposite corners."""
        left, right = min(x1, x2), max(x1, x2)
        bottom, top = min(y1, y2), max(y1, y2)
        return cls(
            top_left=PdfPoint(left, top),
            top_right=PdfPoint(right, top),
            bottom_left=PdfPoint(left, bottom),
            bottom_right=PdfPoint(right, bottom),
        )

    @classmethod
    def from_points(cls, bottom_left: PdfPoint, top_right: PdfPoint) -> 'PdfRectangle':
        return cls.from_coordinates(bottom_left.x, bottom_left.y, top_right.x, top_right.y)

    @property
    def width(self) -> float:
        return math.hypot(self.bottom_right.x - self.bottom_left.x,
                          self.bottom_right.y - self.bottom_left.y)

    @property
    def height(self) -> float:
        return math.hypot(self.top_left.x - self.bottom_left.x,
                          self.top_left.y - self.bottom_left.y)

    @property
    def left(self) -> float:
        return min(p.x for p in self.corners)

    @property
    def right(self) -> float:
        return max(p.x for p in self.corners)

    @property
    def bottom(self) -> float:
        return min(p.y for p in self.corners)

    @property
    def top(self) -> float:
        return max(p.y for p in self.corners)

    @property
    def corners(self) -> Tuple[PdfPoint, PdfPoint, PdfPoint, PdfPoint]:
        return (self.top_left, self.top_right, self.bottom_left, self.bottom_right)

    @property
    def area(self) -> float:
        return self.width * self.height

@dataclass(frozen=True)
class TransformationMatrix:
    """Affine PDF matrix [a b 0; c d 0; e f 1] in row-vector convention.

    A point is transformed as [x y 1] x M, so ``m1.multiply(m2)`` is the
    matrix that applies ``m1`` first and ``m2`` second.
    """
    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    @classmethod
    def from_values(cls, a: float, b: float, c: float, d: float, e: float, f: float) -> 'TransformationMatrix':
        return cls(float(a), float(b), float(c), float(d), float(e), float(f))

    @classmethod
    def from_array(cls, values: Sequence[float]) -> 'TransformationMatrix':
        """Create from a 6-element [a, b, c, d, e, f] sequence."""
        if len(values) != 6:
            raise ValueError(f"Transformation matrix needs 6 values, got {len(values)}")
        return cls.from_values(*values)

    @classmethod
    def identity(cls) -> 'TransformationMatrix':
        return cls()

    @classmethod
    def translation(cls, x: float, y: float) -> 'TransformationMatrix':
        return cls.from_values(1, 0, 0, 1, x, y)

    @classmethod
    def scaling(cls, sx: float, sy: float) -> 'TransformationMatrix':
        return cls.from_values(sx, 0, 0, sy, 0, 0)

    @classmethod
    def _from_numpy(cls, matrix: np.ndarray) -> 'TransformationMatrix':
        return cls.from_values(matrix[0, 0], matrix[0, 1],
                               matrix[1, 0], matrix[1, 1],
                               matrix[2, 0], matrix[2, 1])

    def to_numpy(self) -> np.ndarray:
        return np.array([
            [self.a, self.b, 0.0],
            [self.c, self.d, 0.0],
            [self.e, self.f, 1.0],
        ])

    def to_list(self) -> List[float]:
        return [self.a, self.b, self.c, self.d, self.e, self.f]

    def multiply(self, other: 'TransformationMatrix') -> 'TransformationMatrix':
        """Compose: the result applies ``self`` first and then ``other``."""
        return self._from_numpy(np.dot(self.to_numpy(), other.to_numpy()))

    def transform_point(self, point: PdfPoint) -> PdfPoint:
        x, y = apply_matrix_transform(point.x, point.y, self.to_list())
        return PdfPoint(x, y)

    def transform_rectangle(self, rectangle: PdfRectangle) -> PdfRectangle:
        """Transform all four corners; the result may be rotated or skewed."""
        return PdfRectangle(
            top_left=self.transform_point(rectangle.top_left),
            top_right=self.transform_point(rectangle.top_right),
            bottom_left=self.transform_point(rectangle.bottom_left),
            bottom_right=self.transform_point(rectangle.bottom_right),
        )

# --- Core Transformation Functions ---
def apply_matrix_transform(x: float, y: float, ctm: List[float]) -> Tuple[float, float]:
    """Apply CTM transformation to a point.

    Args:
        x, y: Point coordinates
        ctm: 6-element CTM matrix [a, b, c, d, e, f]

    Returns:
        Transformed (x, y) coordinates
    """
    a, b, c, d, e, f = ctm
    tx = a * x + c * y + e
    ty = b * x + d * y + f
    return tx, ty

def image_placement_matrix(rectangle: PdfRectangle) -> List[float]:
    """Matrix mapping the image unit square onto an axis-aligned placement rectangle."""
    return [rectangle.width, 0.0, 0.0, rectangle.height, rectangle.bottom_left.x, rectangle.bottom_left.y]
