"""
Display loop: restarts renders when the view changes and composites frames.

The DisplayLoop runs on its own thread and is the only code that touches
the two pixel buffers or launches and cancels render passes:
- rendering buffer: filled in by the current render pass
- completed buffer: copy of the last pass that finished

Every frame it draws a rough version of the completed buffer, moved and
scaled from the view it was rendered for into the current view, then the
rendering buffer on top (its unrendered pixels are transparent), then
the box zoom outline. The screen therefore follows pans and zooms
immediately while the sharp image catches up.
"""

import logging
import threading
import time

import numpy as np

from .geometry import Pixel
from .renderer import MandelbrotRenderer, RenderState


logger = logging.getLogger(__name__)


class DisplayLoop:
    """
    Owns the pixel buffers and drives the render state machine.

    Usage:
        loop = DisplayLoop(view, canvas, MandelbrotRenderer())
        loop.start()            # runs tick() on a display thread
        ...                     # input handlers mutate view
        loop.resize(1024, 768)  # from the input thread
        loop.close()

    Attributes:
        view: The live view, written by the input thread
        canvas: Canvas the frames are drawn on
        renderer: MandelbrotRenderer running the passes
        rendering_view: Snapshot the current pass renders
        completed_view: Snapshot the completed buffer was rendered for
        error: Exception that stopped the display thread, if any
    """

    DEFAULT_FPS = 60

    def __init__(self, view, canvas, renderer=None, fps=None):
        """
        Initialize the display loop and allocate its buffers.

        Args:
            view: Live View shared with the input thread
            canvas: Canvas to draw on
            renderer: MandelbrotRenderer (default: one worker per CPU)
            fps: Frame rate limit of the display thread
        """
        self.view = view
        self.canvas = canvas
        self.renderer = renderer or MandelbrotRenderer()
        self.fps = fps or self.DEFAULT_FPS

        self.width = 0
        self.height = 0
        self.rendering_pixels = None
        self.completed_pixels = None
        self.rendering_view = None
        self.completed_view = None

        self.error = None
        self._thread = None
        self._stop = threading.Event()

        self._allocate()

    def _allocate(self):
        """Create both buffers at the view's screen size."""
        self.width, self.height = self.view.get_screen_size()
        size = 4 * self.width * self.height
        self.rendering_pixels = np.zeros(size, dtype=np.uint8)
        self.completed_pixels = np.zeros(size, dtype=np.uint8)
        self.rendering_view = self.view.snapshot()
        self.completed_view = self.rendering_view

    @property
    def state(self):
        return self.renderer.state

    # -- one frame -------------------------------------------------------------

    def tick(self):
        """
        Run one iteration of the display loop.

        Returns:
            True if a frame was presented
        """
        self.renderer.check()
        view = self.view

        if view.is_dirty():
            # Clear first so a relaunch happens once per change
            view.is_dirty(False)
            logger.info(view.describe())

            # No point finishing a render for an outdated view
            self.renderer.cancel()

            # Rough draw twice: the canvas is double buffered
            for _ in range(2):
                self._rough_draw()
                self.canvas.present()

            # Transparent until the workers colour each pixel
            self.rendering_pixels.fill(0)

            self.rendering_view = view.snapshot()
            self.renderer.launch(self.rendering_view, self.rendering_pixels)

        state = self.renderer.state
        should_display = False

        # The rough frame shows through a partial render or under the zoom box
        if state is RenderState.RENDERING or view.zoom_box_is_shown():
            self._rough_draw()
            should_display = True

        # Skip the detailed draw once a completed render has been shown
        if state is not RenderState.DISPLAYED:
            self._detailed_draw()
            should_display = True

        if state is RenderState.COMPLETED:
            np.copyto(self.completed_pixels, self.rendering_pixels)
            self.completed_view = self.rendering_view
            self.renderer.mark_displayed()

        if view.zoom_box_is_shown():
            self.canvas.draw_outline(view.get_zoom_box_rect())
            should_display = True

        if should_display:
            self.canvas.present()
        return should_display

    def rough_transform(self):
        """
        Where the completed image goes in the current view.

        Returns:
            (position, scale): pixel of the completed viewport's top-left
            corner in the current view, and the completed scale relative
            to the current scale
        """
        viewport = self.completed_view.get_viewport()
        position = self.view.pixel_at_complex(viewport.left, viewport.top)
        scale = float(self.completed_view.get_scale() / self.view.get_scale())
        return position, scale

    def _rough_draw(self):
        position, scale = self.rough_transform()
        self.canvas.clear()
        self.canvas.draw_pixels(self.completed_pixels, self.width, self.height, position, scale)

    def _detailed_draw(self):
        self.canvas.draw_pixels(self.rendering_pixels, self.width, self.height, Pixel(0, 0), 1.0)

    # -- display thread ---------------------------------------------------------

    def start(self):
        """Run the display loop on its own thread."""
        if self.is_running():
            return
        self.error = None
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="display")
        self._thread.daemon = True
        self._thread.start()

    def _run(self):
        period = 1.0 / self.fps
        try:
            while not self._stop.is_set():
                began = time.perf_counter()
                self.tick()
                remaining = period - (time.perf_counter() - began)
                if remaining > 0:
                    self._stop.wait(remaining)
        except Exception as exc:
            logger.exception("Display loop stopped")
            self.error = exc
        finally:
            # Workers must be gone before anyone reallocates the buffers
            self.renderer.cancel()

    def is_running(self):
        return self._thread is not None and self._thread.is_alive()

    def stop(self):
        """Stop the display thread and any render in flight, and wait for both."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        self.renderer.cancel()

    def resize(self, width, height):
        """
        Follow a window resize.

        Stops the display thread and the render in flight before the
        buffers are reallocated, then restarts if it was running.

        Args:
            width, height: New screen size in pixels
        """
        was_running = self.is_running()
        self.stop()

        self.view.resize_screen(width, height)
        self.canvas.resize(width, height)
        self._allocate()
        logger.debug(f"Reallocated pixel buffers for {width}x{height}")

        if was_running:
            self.start()

    def close(self):
        """Stop everything and release the buffers."""
        self.stop()
        self.rendering_pixels = None
        self.completed_pixels = None
