"""
Drawing surfaces for the display loop.

Canvas is the small contract the display loop draws through: clear,
blit an RGBA pixel buffer at a position and scale, outline a rectangle,
present the frame. PygameCanvas implements it on a pygame display.
"""

import math

import numpy as np
import pygame

from .colormaps import BLACK


class Canvas:
    """Interface for what the display loop draws on."""

    def clear(self):
        """Fill the frame with black."""
        raise NotImplementedError

    def draw_pixels(self, pixels, width, height, position, scale):
        """
        Draw an RGBA pixel buffer.

        Transparent pixels leave what is underneath visible.

        Args:
            pixels: Flat uint8 buffer of length 4 * width * height
            width, height: Image size in pixels
            position: Pixel where the image's top-left corner goes
            scale: Magnification applied to the image
        """
        raise NotImplementedError

    def draw_outline(self, rect):
        """Draw the one pixel outline of a PixelRect."""
        raise NotImplementedError

    def present(self):
        """Show the frame drawn so far."""
        raise NotImplementedError

    def resize(self, width, height):
        """Match a new screen size."""
        raise NotImplementedError


class PygameCanvas(Canvas):
    """
    Canvas backed by the pygame display surface.

    A scaled image is resampled (nearest pixel) over the part of the
    screen it covers, so no intermediate surface is larger than the
    screen however deep the rough zoom.
    """

    OUTLINE_COLOR = (0x80, 0x80, 0x80)

    def __init__(self, screen):
        self.screen = screen

    def clear(self):
        self.screen.fill(BLACK[:3])

    def draw_pixels(self, pixels, width, height, position, scale):
        if scale == 1.0:
            image = pygame.image.frombuffer(pixels, (width, height), "RGBA")
            self.screen.blit(image, position)
            return

        screen_w, screen_h = self.screen.get_size()
        x, y = position

        # Screen area covered by the scaled image
        left = max(0, math.floor(x))
        top = max(0, math.floor(y))
        right = min(screen_w, math.ceil(x + width * scale))
        bottom = min(screen_h, math.ceil(y + height * scale))
        if right <= left or bottom <= top:
            return

        # Nearest image pixel for the centre of each covered screen pixel
        cols = ((np.arange(left, right) + 0.5 - x) / scale).astype(np.intp)
        rows = ((np.arange(top, bottom) + 0.5 - y) / scale).astype(np.intp)
        np.clip(cols, 0, width - 1, out=cols)
        np.clip(rows, 0, height - 1, out=rows)

        image = pixels.reshape(height, width, 4)
        sampled = np.ascontiguousarray(image[rows[:, None], cols])
        surface = pygame.image.frombuffer(sampled, (right - left, bottom - top), "RGBA")
        self.screen.blit(surface, (left, top))

    def draw_outline(self, rect):
        pygame.draw.rect(
            self.screen,
            self.OUTLINE_COLOR,
            pygame.Rect(rect.left, rect.top, rect.width, rect.height),
            1,
        )

    def present(self):
        pygame.display.flip()

    def resize(self, width, height):
        self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)
