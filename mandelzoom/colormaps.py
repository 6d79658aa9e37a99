"""
Colour mapping for divergence ratios.

A divergence ratio of 1.0 (the point never escaped) is drawn opaque
black. Anything below 1.0 is drawn as a hue of 360 * ratio degrees at
full saturation and brightness, sweeping red -> yellow -> green -> cyan
-> blue -> magenta -> red in six 60 degree linear segments.

The functions are JIT-compiled so the render kernels in compute.py can
call them per pixel; they are also plain callables from Python.
"""

from numba import jit


OPAQUE = 255
BLACK = (0, 0, 0, OPAQUE)  # Colour of points inside the set


@jit(nopython=True, nogil=True, cache=True)
def hue_to_rgb(h):
    """
    Convert a hue at full saturation and value to RGB.

    Args:
        h: Hue in degrees; wraps around every 360

    Returns:
        (r, g, b) tuple of ints in 0..255
    """
    h = h % 360.0
    x = int(255 * (1.0 - abs((h / 60.0) % 2.0 - 1.0)))

    segment = int(h) // 60
    if segment == 0:
        return 255, x, 0
    elif segment == 1:
        return x, 255, 0
    elif segment == 2:
        return 0, 255, x
    elif segment == 3:
        return 0, x, 255
    elif segment == 4:
        return x, 0, 255
    # Also catches h == 360.0 after rounding in the modulo
    return 255, 0, x


@jit(nopython=True, nogil=True, cache=True)
def ratio_to_rgba(ratio):
    """
    Colour for a divergence ratio.

    Args:
        ratio: Fraction of the iteration budget used before escaping,
            1.0 for points that never escaped

    Returns:
        (r, g, b, a) tuple of ints, always opaque
    """
    if ratio >= 1.0:
        return 0, 0, 0, OPAQUE
    r, g, b = hue_to_rgb(360.0 * ratio)
    return r, g, b, OPAQUE
