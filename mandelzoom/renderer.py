"""
Progressive, cancellable multi-threaded Mandelbrot renderer.

The MandelbrotRenderer class handles:
- Background render passes so the display loop never blocks on computation
- Splitting a pass across worker threads, by interleaved rows or by a
  fixed grid of tiles
- Cooperative cancellation: workers check a cancellation token once per
  row and stop early, never leaving a pixel half written
- Render state tracking (rendering -> completed -> displayed)

Pixels are written straight into the caller's RGBA buffer, so a display
loop can show a pass while it is still filling in. Untouched pixels keep
whatever the caller put there (a cleared buffer is fully transparent).
"""

import enum
import logging
import os
import threading

from .compute import max_iterations, render_row, render_row_generic


logger = logging.getLogger(__name__)


class RenderState(enum.Enum):
    """Progress of the latest render pass."""
    IDLE = "idle"               # Nothing launched yet
    RENDERING = "rendering"     # Workers are filling the buffer
    COMPLETED = "completed"     # Every pixel written, not yet shown
    DISPLAYED = "displayed"     # Completed and copied for display


class RenderError(RuntimeError):
    """Raised when a render worker failed."""


PARTITIONS = ("rows", "tiles")


def partition_rows(width, height, workers):
    """
    Split the screen into interleaved rows, one job per worker.

    Worker k gets rows k, k + workers, k + 2 * workers, ... so every part
    of the image fills in at the same pace.

    Returns:
        List of jobs; each job is a list of (y, x_start, x_stop) segments
    """
    workers = max(1, min(workers, height))
    return [[(y, 0, width) for y in range(k, height, workers)]
            for k in range(workers)]


def partition_tiles(width, height, workers, division=4):
    """
    Split the screen into a division x division grid of tiles.

    Tiles are dealt out to the workers in turn; each worker renders its
    tiles one scanline segment at a time.

    Returns:
        List of jobs; each job is a list of (y, x_start, x_stop) segments
    """
    xs = [width * i // division for i in range(division + 1)]
    ys = [height * j // division for j in range(division + 1)]
    tiles = [(xs[i], ys[j], xs[i + 1], ys[j + 1])
             for j in range(division) for i in range(division)]

    workers = max(1, min(workers, len(tiles)))
    jobs = [[] for _ in range(workers)]
    for n, (left, top, right, bottom) in enumerate(tiles):
        jobs[n % workers].extend((y, left, right) for y in range(top, bottom))
    return jobs


class MandelbrotRenderer:
    """
    Runs render passes on background threads.

    Usage:
        renderer = MandelbrotRenderer(workers=8)
        pixels = np.zeros(4 * width * height, dtype=np.uint8)
        renderer.launch(view.snapshot(), pixels)

        # Later, from the same thread:
        if renderer.state is RenderState.COMPLETED:
            show(pixels)
        renderer.cancel()   # before relaunching or reallocating pixels

    Attributes:
        workers: Number of worker threads per pass
        partition: "rows" or "tiles"
        state: RenderState of the latest pass
    """

    TILE_DIVISION = 4  # Tiles per side in "tiles" partition mode

    def __init__(self, workers=None, partition="rows"):
        """
        Initialize the renderer.

        Args:
            workers: Worker threads per pass (default: one per CPU)
            partition: "rows" (interleaved scanlines) or "tiles" (grid)
        """
        if partition not in PARTITIONS:
            raise ValueError(f"Unknown partition {partition!r}, expected one of {PARTITIONS}")
        self.workers = workers or os.cpu_count() or 1
        self.partition = partition

        self.state = RenderState.IDLE
        self.lock = threading.Lock()

        self._thread = None
        self._cancel = threading.Event()
        self._error = None

    def launch(self, view, pixels):
        """
        Start a render pass.

        The pass reads only the given view, which should be a snapshot
        that nothing else mutates. Any previous pass must have been
        cancelled or finished.

        Args:
            view: View to render
            pixels: Flat uint8 buffer of length 4 * width * height
        """
        width, height = view.get_screen_size()
        if pixels.size != 4 * width * height:
            raise ValueError(
                f"Pixel buffer holds {pixels.size} bytes, "
                f"expected {4 * width * height} for {width}x{height}"
            )

        with self.lock:
            if self.is_running():
                raise RuntimeError("A render pass is already running")
            self._cancel = threading.Event()
            self._error = None
            self.state = RenderState.RENDERING
            self._thread = threading.Thread(
                target=self._render_thread,
                args=(view, pixels, self._cancel),
                name="render",
            )
            self._thread.daemon = True
            self._thread.start()

    def _render_thread(self, view, pixels, cancel):
        """Background thread coordinating the workers of one pass."""
        width, height = view.get_screen_size()
        image = pixels.reshape(height, 4 * width)
        max_iter = max_iterations(view.get_zoom())

        if self.partition == "tiles":
            jobs = partition_tiles(width, height, self.workers, self.TILE_DIVISION)
        else:
            jobs = partition_rows(width, height, self.workers)

        threads = [
            threading.Thread(
                target=self._work,
                args=(segments, view, image, max_iter, cancel),
                name=f"render-worker-{n}",
                daemon=True,
            )
            for n, segments in enumerate(jobs)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        with self.lock:
            if not cancel.is_set() and self._error is None:
                self.state = RenderState.COMPLETED

    def _work(self, segments, view, image, max_iter, cancel):
        """Render a list of (y, x_start, x_stop) segments."""
        try:
            if view.real.native:
                width, height = view.get_screen_size()
                centre = view.get_centre()
                centre_re = float(centre.re)
                centre_im = float(centre.im)
                scale = float(view.get_scale())
                for y, x_start, x_stop in segments:
                    if cancel.is_set():
                        return
                    render_row(image[y], y, centre_re, centre_im, scale,
                               width, height, max_iter, x_start, x_stop)
            else:
                for y, x_start, x_stop in segments:
                    if cancel.is_set():
                        return
                    render_row_generic(image[y], y, view, max_iter, x_start, x_stop)
        except Exception as exc:
            logger.exception("Render worker failed")
            with self.lock:
                if self._error is None:
                    self._error = exc
            # No point finishing a pass that cannot complete
            cancel.set()

    def is_running(self):
        """Whether a pass is still in flight."""
        return self._thread is not None and self._thread.is_alive()

    def wait(self, timeout=None):
        """
        Block until the current pass has exited.

        Args:
            timeout: Seconds to wait, None to wait forever

        Returns:
            True if no pass is running any more
        """
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
        return not self.is_running()

    def cancel(self):
        """
        Ask the current pass to stop and wait for its workers to exit.

        After this returns no worker touches the pixel buffer, so it is
        safe to clear, relaunch or reallocate it.
        """
        self._cancel.set()
        self.wait()

    def mark_displayed(self):
        """Record that a completed pass has been copied for display."""
        with self.lock:
            if self.state is RenderState.COMPLETED:
                self.state = RenderState.DISPLAYED

    def check(self):
        """
        Raise the error of a failed pass, if any.

        Raises:
            RenderError chained to the worker's exception
        """
        with self.lock:
            error = self._error
            self._error = None
        if error is not None:
            raise RenderError(f"Render pass failed: {error}") from error
