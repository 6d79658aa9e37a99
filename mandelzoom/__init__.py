"""
Mandelbrot Set Explorer Package

An interactive Mandelbrot set explorer that keeps the screen responsive
while background threads fill in the image progressively. Pygame is
used for display, Numba for JIT-compiled computation and gmpy2 for
arbitrary precision coordinates at deep zoom.

Quick Start:
    from mandelzoom import run
    run()

Or from command line:
    python -m mandelzoom

Package Structure:
    - numeric.py: Real number backends (native doubles, gmpy2 mpfr)
    - geometry.py: Complex numbers, pixels and rectangles
    - view.py: Pixel <-> complex mapping, pan / zoom, box zoom
    - compute.py: JIT-compiled Mandelbrot iteration and row kernels
    - colormaps.py: Divergence ratio to hue colouring
    - renderer.py: Cancellable multi-threaded render passes
    - display.py: Display loop compositing rough and detailed frames
    - canvas.py: Drawing surface contract and pygame implementation
    - settings.py, log.py: Configuration and console logging
    - app.py: Main application and event loop

Controls:
    - Drag (left button): Box zoom, right button cancels
    - Scroll: Zoom in/out around the centre
    - Arrows / WASD: Pan
    - R: Reset to default view
    - ESC: Quit
"""

from .app import run, MandelbrotApp
from .numeric import NativeReal, ArbitraryReal, get_backend, list_backend_names
from .geometry import Complex, ComplexRect, Pixel, PixelRect
from .view import View
from .renderer import MandelbrotRenderer, RenderState, RenderError
from .display import DisplayLoop
from .canvas import Canvas
from .log import set_log_handlers

__version__ = "1.0.0"
__all__ = [
    "run",
    "MandelbrotApp",
    "NativeReal",
    "ArbitraryReal",
    "get_backend",
    "list_backend_names",
    "Complex",
    "ComplexRect",
    "Pixel",
    "PixelRect",
    "View",
    "MandelbrotRenderer",
    "RenderState",
    "RenderError",
    "DisplayLoop",
    "Canvas",
    "set_log_handlers",
]
