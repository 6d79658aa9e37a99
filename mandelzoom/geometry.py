"""
Points, vectors and rectangles in the complex plane and on screen.

- Complex: (re, im) pair of Real (or plain numbers), componentwise arithmetic
- Pixel: (x, y) pair of ints for screen coordinates
- ComplexRect / PixelRect: (left, top, width, height)

Rectangles may have negative extents while a box zoom is being dragged;
call normalized() before using one as a drawable region.
"""

from collections import namedtuple


class Complex:
    """
    A point in the complex plane, or a 2D vector.

    Components are whatever numeric type they were built from, so the
    same class serves both Real backends. Multiplication and division
    are by a scalar only.
    """

    __slots__ = ("re", "im")

    def __init__(self, re, im):
        self.re = re
        self.im = im

    def __add__(self, other):
        return Complex(self.re + other.re, self.im + other.im)

    def __sub__(self, other):
        return Complex(self.re - other.re, self.im - other.im)

    def __mul__(self, scalar):
        return Complex(self.re * scalar, self.im * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar):
        return Complex(self.re / scalar, self.im / scalar)

    def __neg__(self):
        return Complex(-self.re, -self.im)

    def __eq__(self, other):
        if not isinstance(other, Complex):
            return NotImplemented
        return self.re == other.re and self.im == other.im

    def __hash__(self):
        return hash((self.re, self.im))

    def __iter__(self):
        yield self.re
        yield self.im

    def __repr__(self):
        return f"Complex({self.re!r}, {self.im!r})"


class Pixel(namedtuple("Pixel", "x y")):
    """Integer screen coordinate; (0, 0) is the top-left corner."""

    __slots__ = ()

    def __add__(self, other):
        return Pixel(self.x + other[0], self.y + other[1])

    def __sub__(self, other):
        return Pixel(self.x - other[0], self.y - other[1])

    def __mul__(self, k):
        return Pixel(self.x * k, self.y * k)

    __rmul__ = __mul__

    def halved(self):
        """Divide both coordinates by two, truncating toward zero."""
        return Pixel(int(self.x / 2), int(self.y / 2))


class ComplexRect(namedtuple("ComplexRect", "left top width height")):
    """Rectangle in the complex plane."""

    __slots__ = ()

    def position(self):
        return Complex(self.left, self.top)

    def size(self):
        return Complex(self.width, self.height)

    def normalized(self):
        """Same region with non-negative width and height."""
        left, width = _normalize(self.left, self.width)
        top, height = _normalize(self.top, self.height)
        return ComplexRect(left, top, width, height)


class PixelRect(namedtuple("PixelRect", "left top width height")):
    """Rectangle in screen pixels."""

    __slots__ = ()

    def normalized(self):
        """Same region with non-negative width and height."""
        left, width = _normalize(self.left, self.width)
        top, height = _normalize(self.top, self.height)
        return PixelRect(left, top, width, height)


def _normalize(start, extent):
    if extent < 0:
        return start + extent, abs(extent)
    return start, extent
