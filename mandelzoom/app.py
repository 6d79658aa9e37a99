"""
Main application module for the Mandelbrot explorer.

Contains the MandelbrotApp class which handles:
- Window setup and the input loop on the main thread
- User input (pan keys, box zoom, wheel zoom, reset, resize)
- Wiring the view, renderer and display loop together

The main thread only mutates the View. Drawing happens on the display
loop's thread, which notices the change and restarts the render.
"""

import logging

import pygame

from .canvas import PygameCanvas
from .compute import warmup_jit
from .display import DisplayLoop
from .log import set_log_handlers
from .numeric import get_backend
from .renderer import MandelbrotRenderer
from .settings import load_settings, validate_settings
from .view import View


logger = logging.getLogger(__name__)


class MandelbrotApp:
    """
    Main application class for the Mandelbrot explorer.

    Handles the pygame window and event loop, and forwards input to the
    view shared with the display loop.
    """

    CAPTION = "Mandelbrot - drag to box zoom, scroll to zoom, arrows to pan, R to reset"

    # Pan keys: key -> (dx, dy) in units of pan_step
    PAN_KEYS = {
        pygame.K_LEFT: (-1, 0),
        pygame.K_a: (-1, 0),
        pygame.K_RIGHT: (1, 0),
        pygame.K_d: (1, 0),
        pygame.K_UP: (0, -1),
        pygame.K_w: (0, -1),
        pygame.K_DOWN: (0, 1),
        pygame.K_s: (0, 1),
    }

    def __init__(self, settings=None):
        """
        Initialize the application.

        Args:
            settings: Settings dict (default: load_settings())
        """
        self.settings = validate_settings(settings or load_settings())
        self.width = int(self.settings["width"])
        self.height = int(self.settings["height"])
        self.pan_step = self.settings["pan_step"]
        self.wheel_zoom_step = self.settings["wheel_zoom_step"]

        # Pygame state (initialized in run())
        self.screen = None
        self.clock = None

        # Components
        self.view = None
        self.renderer = None
        self.display = None

        self.running = False

    def run(self):
        """Run the application main loop."""
        self._init_pygame()
        self._init_components()

        self.display.start()
        self.running = True
        try:
            while self.running:
                self._handle_events()

                if self.display.error is not None:
                    raise self.display.error

                self.clock.tick(self.settings["fps"])
        finally:
            self.display.close()
            pygame.quit()

    def _init_pygame(self):
        """Initialize pygame and create window."""
        pygame.init()
        self.screen = pygame.display.set_mode(
            (self.width, self.height),
            pygame.RESIZABLE
        )
        pygame.display.set_caption(self.CAPTION)
        self.clock = pygame.time.Clock()

    def _init_components(self):
        """Create the view, renderer and display loop."""
        real = get_backend(self.settings["backend"])
        x, y = self.settings["centre"]
        self.view = View(
            x, y, self.settings["zoom"], self.width, self.height,
            real=real, precision=int(self.settings["precision"]),
        )

        if real.native:
            pygame.display.set_caption("Compiling (first run only)...")
            warmup_jit()
            pygame.display.set_caption(self.CAPTION)

        self.renderer = MandelbrotRenderer(
            workers=int(self.settings["workers"]),
            partition=self.settings["partition"],
        )
        self.display = DisplayLoop(
            self.view,
            PygameCanvas(self.screen),
            self.renderer,
            fps=self.settings["fps"],
        )

    def _handle_events(self):
        """Process all pending pygame events."""
        for event in pygame.event.get():
            self._handle_event(event)

    def _handle_event(self, event):
        """Dispatch one pygame event."""
        if event.type == pygame.QUIT:
            self.running = False
        elif event.type == pygame.KEYDOWN:
            self._handle_key(event)
        elif event.type == pygame.MOUSEBUTTONDOWN:
            self._handle_mouse_down(event)
        elif event.type == pygame.MOUSEBUTTONUP:
            self._handle_mouse_up(event)
        elif event.type == pygame.MOUSEMOTION:
            self.view.zoom_box_continue(*event.pos)
        elif event.type == pygame.MOUSEWHEEL:
            self.view.zoom_by(event.y * self.wheel_zoom_step)
        elif event.type == pygame.VIDEORESIZE:
            self._handle_resize(event.w, event.h)

    def _handle_key(self, event):
        """Handle keyboard input."""
        if event.key in self.PAN_KEYS:
            dx, dy = self.PAN_KEYS[event.key]
            self.view.move_by(dx * self.pan_step, dy * self.pan_step)
        elif event.key == pygame.K_r:
            self.reset()
        elif event.key == pygame.K_ESCAPE:
            self.running = False

    def _handle_mouse_down(self, event):
        """Left button starts a box zoom, right button cancels it."""
        # Buttons 4 and 5 are the legacy wheel events, MOUSEWHEEL covers them
        if event.button == 1:
            self.view.zoom_box_begin(*event.pos)
        elif event.button == 3:
            self.view.zoom_box_cancel()

    def _handle_mouse_up(self, event):
        if event.button == 1:
            self.view.zoom_box_end(*event.pos)

    def _handle_resize(self, width, height):
        if width <= 0 or height <= 0:
            return
        self.width, self.height = width, height
        self.display.resize(width, height)

    def reset(self):
        """Go back to the initial centre and zoom."""
        x, y = self.settings["centre"]
        self.view.zoom_box_cancel()
        self.view.move_to(x, y)
        self.view.zoom_to(self.settings["zoom"])


def run(settings=None):
    """
    Run the Mandelbrot explorer.

    Args:
        settings: Settings dict (default: load_settings())
    """
    settings = settings or load_settings()
    set_log_handlers(settings["verbosity"])
    app = MandelbrotApp(settings)
    try:
        app.run()
    except KeyboardInterrupt:
        logger.info("Interrupted")
