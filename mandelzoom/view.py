"""
The visible window onto the complex plane.

A View owns the mapping between screen pixels and complex numbers:
- centre: complex number at the middle of the screen
- scale: half the view height in complex units (scale = 2^zoom)
- zoom: log2(scale); smaller zoom means deeper
- viewport: cached rectangle centre +/- (scale * aspect ratio, scale)

Every mutator marks the view dirty and refreshes the viewport before
returning, so readers never see a viewport that disagrees with the
centre and scale. The view also tracks the interactive box zoom gesture.

The input thread is the only writer. Render passes work on a snapshot()
rather than on the live view.
"""

import copy
import logging
import math

from .geometry import Complex, ComplexRect, Pixel, PixelRect
from .numeric import DEFAULT_PRECISION, NATIVE_PRECISION, NativeReal


logger = logging.getLogger(__name__)


PRECISION_GUARD_BITS = 16  # Spare mantissa bits on top of the zoom depth


def precision_for_zoom(zoom, screen_height):
    """
    Estimate the mantissa size needed to tell neighbouring pixels apart.

    Each step of zoom below 0 halves the pixel spacing and costs one bit;
    the screen height adds log2(height) bits for the pixel offsets.

    Args:
        zoom: View zoom (log2 of the scale)
        screen_height: Screen height in pixels

    Returns:
        Recommended precision in bits
    """
    depth = max(0, math.ceil(-float(zoom)))
    pixels = math.ceil(math.log2(max(int(screen_height), 1)))
    bits = NATIVE_PRECISION + depth + pixels + PRECISION_GUARD_BITS
    return max(bits, DEFAULT_PRECISION)


class View:
    """
    Pan / zoom state and pixel <-> complex mapping.

    Usage:
        view = View(-0.5, 0.0, 1.0, 800, 600)
        view.zoom_by(-1)             # twice as deep
        z = view.complex_at_pixel(400, 300)
        if view.is_dirty():
            view.is_dirty(False)
            ...

    Attributes:
        real: The Real class coordinates are stored in
    """

    def __init__(self, x=0.0, y=0.0, zoom=1.0, screen_width=1, screen_height=1,
                 real=NativeReal, precision=DEFAULT_PRECISION):
        """
        Initialize the view.

        Args:
            x, y: Centre of the view in the complex plane
            zoom: Initial zoom level (scale = 2^zoom)
            screen_width, screen_height: Screen size in pixels
            real: Real backend class (NativeReal or ArbitraryReal)
            precision: Initial working precision in bits (arbitrary backend)
        """
        self.real = real
        self._precision = precision
        self._dirty = True

        # Screen size first: the aspect ratio is needed for the viewport
        self._screen_size = Pixel(int(screen_width), int(screen_height))
        self._aspect_ratio = self._to_real(screen_width) / screen_height

        self._zoom = self._to_real(zoom)
        self._scale = self._zoom.exp2()
        self._centre = Complex(self._to_real(x), self._to_real(y))
        self._rect = None

        self._zoom_box_is_shown = False
        self._zoom_box_start = Pixel(0, 0)
        self._zoom_box_end = Pixel(0, 0)

        self.move_to(x, y)
        self.zoom_to(zoom)

    def _to_real(self, value):
        precision = max(self._precision, getattr(value, "precision", 0))
        return self.real(value, precision=precision)

    # -- dirty flag ----------------------------------------------------------

    def is_dirty(self, dirty=None):
        """
        Get or set the dirty flag.

        The view is dirty whenever it changed since the last render was
        launched. Called with no argument it returns the flag; called with
        a bool it sets it.
        """
        if dirty is None:
            return self._dirty
        self._dirty = bool(dirty)
        return self._dirty

    # -- scale and zoom ------------------------------------------------------

    def get_scale(self):
        return self._scale

    @property
    def scale(self):
        return self._scale

    def set_scale(self, scale):
        """Set the scale; zoom follows as log2(scale)."""
        scale = self._to_real(scale)
        self._zoom = scale.log2()
        self._escalate_precision()
        self._scale = self._to_real(scale)
        self._changed()

    def get_zoom(self):
        return self._zoom

    @property
    def zoom(self):
        return self._zoom

    def zoom_to(self, zoom):
        """Set the zoom; scale follows as 2^zoom."""
        self._zoom = self._to_real(zoom)
        self._escalate_precision()
        self._scale = self._zoom.exp2()
        self._changed()

    def zoom_by(self, dz):
        """Change the zoom by dz; negative values zoom in."""
        self.zoom_to(self._zoom + dz)

    @property
    def precision(self):
        """Working precision in bits of the view's coordinates."""
        if self.real.native:
            return NATIVE_PRECISION
        return self._precision

    def _escalate_precision(self):
        # Native doubles cannot grow; deep native views simply pixelate
        if self.real.native:
            return
        needed = precision_for_zoom(self._zoom, self._screen_size.y)
        if needed <= self._precision:
            return
        logger.debug(f"Raising working precision: {self._precision} -> {needed} bits")
        self._precision = needed
        self._zoom = self._zoom.with_precision(needed)
        self._centre = Complex(
            self._centre.re.with_precision(needed),
            self._centre.im.with_precision(needed),
        )

    # -- screen ---------------------------------------------------------------

    def get_screen_size(self):
        return self._screen_size

    @property
    def screen_size(self):
        return self._screen_size

    def get_aspect_ratio(self):
        return self._aspect_ratio

    def resize_screen(self, screen_width, screen_height):
        """
        Change the screen size.

        The scale follows the screen height, so the complex size of one
        pixel stays the same across a vertical resize.

        Args:
            screen_width, screen_height: New screen size in pixels

        Raises:
            ValueError if either dimension is not positive
        """
        if screen_width <= 0 or screen_height <= 0:
            raise ValueError(f"Invalid screen size: {screen_width}x{screen_height}")

        self._scale = self._scale * screen_height / self._screen_size.y
        self._zoom = self._scale.log2()
        self._screen_size = Pixel(int(screen_width), int(screen_height))
        self._aspect_ratio = self._to_real(screen_width) / screen_height
        self._escalate_precision()
        self._changed()

    # -- centre and viewport --------------------------------------------------

    def get_centre(self):
        return self._centre

    @property
    def centre(self):
        return self._centre

    def move_to(self, x, y=None):
        """
        Centre the view on a point.

        Args:
            x: Complex point, or its real part when y is given
            y: Imaginary part
        """
        if y is None:
            x, y = x.re, x.im
        self._centre = Complex(self._to_real(x), self._to_real(y))
        self._changed()

    def move_by(self, dx, dy=None):
        """
        Move the view by a displacement measured in units of scale.

        Panning by the same amount therefore moves the same fraction of
        the screen at every zoom level.

        Args:
            dx: Complex displacement, or its real part when dy is given
            dy: Imaginary part of the displacement
        """
        if dy is None:
            dx, dy = dx.re, dx.im
        self._centre = Complex(
            self._centre.re + dx * self._scale,
            self._centre.im + dy * self._scale,
        )
        self._changed()

    def get_viewport(self):
        return self._rect

    @property
    def viewport(self):
        return self._rect

    def get_viewport_position(self):
        """Top-left corner of the viewport in the complex plane."""
        return self._rect.position()

    def get_viewport_size(self):
        """Diagonal of the viewport in the complex plane."""
        return self._rect.size()

    def set_viewport(self, rect):
        """
        Show the given complex rectangle.

        The scale follows the rectangle height and the centre its middle.
        The viewport is then rebuilt at the screen's aspect ratio, so a
        rectangle of another shape is cropped or widened horizontally.
        """
        left, top, width, height = (self._to_real(v) for v in rect)
        self._scale = height * 0.5
        self._zoom = self._scale.log2()
        self._centre = Complex(left + width * 0.5, top + height * 0.5)
        self._escalate_precision()
        self._changed()

    def _changed(self):
        self._dirty = True
        self._update_viewport()

    def _update_viewport(self):
        half_width = self._scale * self._aspect_ratio
        half_height = self._scale
        self._rect = ComplexRect(
            self._centre.re - half_width,
            self._centre.im - half_height,
            half_width * 2,
            half_height * 2,
        )

    # -- pixel <-> complex ---------------------------------------------------

    def complex_at_pixel(self, x, y=None):
        """
        Convert a screen pixel to the complex number shown there.

        Maps x from 0:W to centre.re +/- scale * aspect ratio and y from
        0:H to centre.im +/- scale.

        Args:
            x: Pixel (or (x, y) pair), or the x coordinate when y is given
            y: Pixel y coordinate

        Returns:
            Complex number at that pixel
        """
        if y is None:
            x, y = x
        width, height = self._screen_size
        k = self._scale / height
        return Complex(
            self._centre.re + k * (2 * x - width),
            self._centre.im + k * (2 * y - height),
        )

    def pixel_at_complex(self, x, y=None):
        """
        Convert a complex number to the pixel it is shown at.

        The exact inverse of complex_at_pixel, truncated to integers.
        Points outside the view map to pixels off screen.

        Args:
            x: Complex number, or its real part when y is given
            y: Imaginary part

        Returns:
            Pixel coordinate
        """
        if y is None:
            x, y = x.re, x.im
        width, height = self._screen_size
        k = height / self._scale
        return Pixel(
            int(0.5 * ((x - self._centre.re) * k + width)),
            int(0.5 * ((y - self._centre.im) * k + height)),
        )

    # -- box zoom --------------------------------------------------------------

    def zoom_box_begin(self, x, y):
        """Start a box zoom at the pointer position."""
        self._zoom_box_is_shown = True
        self._zoom_box_start = Pixel(int(x), int(y))
        self._zoom_box_end = self._zoom_box_start

    def zoom_box_continue(self, x, y):
        """
        Drag the box zoom to the pointer position.

        The box is grown along its shorter side so it always has the
        screen's aspect ratio. Does nothing unless a box zoom is active.
        """
        if not self._zoom_box_is_shown:
            return

        aspect_ratio = float(self._aspect_ratio)
        w = float(x - self._zoom_box_start.x)
        h = float(y - self._zoom_box_start.y)

        if aspect_ratio * abs(h) > abs(w):
            w = math.copysign(abs(h) * aspect_ratio, w)
        else:
            h = math.copysign(abs(w) / aspect_ratio, h)

        self._zoom_box_end = self._zoom_box_start + (int(w), int(h))

    def zoom_box_end(self, x, y):
        """
        Finish the box zoom and show the selected region.

        The view is centred on the middle of the box and scaled to its
        height. A box with no height is ignored. The gesture ends either way.
        """
        if not self._zoom_box_is_shown:
            return

        self.zoom_box_continue(x, y)

        # A zero scale cannot be divided by later
        h = abs(self._zoom_box_end.y - self._zoom_box_start.y)
        if h > 0:
            self.move_to(self.complex_at_pixel((self._zoom_box_start + self._zoom_box_end).halved()))
            self.set_scale(self._scale * h / self._screen_size.y)

        self._zoom_box_is_shown = False
        self._zoom_box_end = self._zoom_box_start

    def zoom_box_cancel(self):
        """Abandon the box zoom without changing the view."""
        self._zoom_box_is_shown = False

    def zoom_box_is_shown(self):
        return self._zoom_box_is_shown

    def get_zoom_box_rect(self):
        """Outline of the box zoom in screen pixels, with positive extents."""
        start, end = self._zoom_box_start, self._zoom_box_end
        return PixelRect(start.x, start.y, end.x - start.x, end.y - start.y).normalized()

    # -- copies and diagnostics ----------------------------------------------

    def snapshot(self):
        """
        Get an independent copy of the view for a render pass.

        The copy shares no values with this view, so later input cannot
        change what a running render sees.
        """
        view = copy.deepcopy(self)
        view._zoom_box_is_shown = False
        return view

    def describe(self):
        """
        One-line summary: centre, zoom and viewport rectangle.

        Format: ( re, im ) @ zoom -> [ left, top, width, height ]
        """
        rect = self._rect
        return "( %+e, %+e ) @ %+e -> [ %+e, %+e, %e, %e ]" % (
            float(self._centre.re), float(self._centre.im), float(self._zoom),
            float(rect.left), float(rect.top), float(rect.width), float(rect.height),
        )

    def __str__(self):
        return self.describe()

    def __repr__(self):
        return f"<View {self.describe()} {self.real.__name__}>"
