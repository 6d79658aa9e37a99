"""
Mandelbrot iteration and per-row rendering.

This module contains the per-pixel work of a render pass:
- Iteration budget for a zoom level
- Divergence ratio of a point (JIT-compiled for doubles, and a generic
  version written against the Real interface for arbitrary precision)
- Row kernels that colour one scanline segment of an RGBA buffer

The JIT functions release the GIL, so render workers running them on
separate threads compute in parallel.

The divergence ratio of z0 is found by iterating z <- z^2 + z0 starting
from z = z0. The point escapes at step n (counting from 0) once
|z|^2 > 16 and the ratio is n / max_iter; a point that never escapes
has ratio 1.0.
"""

import math

import numpy as np
from numba import jit

from .colormaps import ratio_to_rgba


ESCAPE_THRESHOLD = 16.0     # Escape once |z|^2 exceeds this
BASE_ITERATIONS = 120       # Iteration budget at zoom 0
ITERATIONS_PER_ZOOM = 10    # Extra iterations per level of zoom depth


def max_iterations(zoom):
    """
    Iteration budget for a zoom level.

    The budget grows as the view gets deeper (zoom decreases) to keep
    detail visible. It never drops below one iteration for very wide views.

    Args:
        zoom: View zoom (log2 of the scale), any Real or number

    Returns:
        Maximum iteration count
    """
    return max(1, BASE_ITERATIONS - ITERATIONS_PER_ZOOM * math.floor(float(zoom)))


@jit(nopython=True, nogil=True, cache=True)
def divergence(x0, y0, max_iter):
    """
    Divergence ratio of the point x0 + y0*i in double precision.

    Args:
        x0, y0: Real and imaginary parts of the point
        max_iter: Iteration budget

    Returns:
        Ratio in [0, 1]; 1.0 means the point did not escape
    """
    zr = x0
    zi = y0
    for n in range(max_iter):
        zr, zi = zr * zr - zi * zi + x0, 2.0 * zr * zi + y0
        if zr * zr + zi * zi > ESCAPE_THRESHOLD:
            return n / max_iter
    return 1.0


def divergence_generic(z0, max_iter):
    """
    Divergence ratio of a point using its own number type.

    Same iteration as divergence(), for Complex points whose components
    are any Real backend (used for arbitrary precision views).

    Args:
        z0: Complex point
        max_iter: Iteration budget

    Returns:
        Ratio in [0, 1] as a float; 1.0 means the point did not escape
    """
    x0, y0 = z0.re, z0.im
    zr, zi = x0, y0
    for n in range(max_iter):
        zr, zi = zr * zr - zi * zi + x0, 2 * zr * zi + y0
        if zr * zr + zi * zi > ESCAPE_THRESHOLD:
            return n / max_iter
    return 1.0


@jit(nopython=True, nogil=True, cache=True)
def render_row(row, y, centre_re, centre_im, scale, width, height, max_iter,
               x_start, x_stop):
    """
    Colour the pixels x_start..x_stop-1 of scanline y.

    Uses the same pixel -> complex mapping as View.complex_at_pixel.

    Args:
        row: uint8 array of length 4 * width for scanline y (modified in place)
        y: Scanline index
        centre_re, centre_im: View centre as doubles
        scale: View scale as a double
        width, height: Screen size in pixels
        max_iter: Iteration budget
        x_start, x_stop: Pixel range to colour
    """
    k = scale / height
    y0 = centre_im + k * (2 * y - height)
    for x in range(x_start, x_stop):
        x0 = centre_re + k * (2 * x - width)
        r, g, b, a = ratio_to_rgba(divergence(x0, y0, max_iter))
        i = 4 * x
        row[i] = np.uint8(r)
        row[i + 1] = np.uint8(g)
        row[i + 2] = np.uint8(b)
        row[i + 3] = np.uint8(a)


def render_row_generic(row, y, view, max_iter, x_start, x_stop):
    """
    Colour part of scanline y using the view's own number type.

    Slow but exact at any precision; used when the view is not backed
    by native doubles.

    Args:
        row: uint8 array of length 4 * width for scanline y (modified in place)
        y: Scanline index
        view: View (snapshot) providing complex_at_pixel
        max_iter: Iteration budget
        x_start, x_stop: Pixel range to colour
    """
    for x in range(x_start, x_stop):
        ratio = divergence_generic(view.complex_at_pixel(x, y), max_iter)
        i = 4 * x
        row[i:i + 4] = ratio_to_rgba(ratio)


def warmup_jit():
    """
    Compile the JIT kernels on a tiny row.

    Call this once at startup so the first real render does not stall
    on compilation.
    """
    row = np.zeros(4 * 4, dtype=np.uint8)
    render_row(row, 0, -0.5, 0.0, 2.0, 4, 4, 8, 0, 4)
