"""
Failure signals raised by the color services.

All of them subclass ValueError so callers that only care about "bad input"
can catch that.
"""


class ImageUnreadableError(ValueError):
    """Image bytes could not be decoded into pixel data."""


class CoordinateOutOfBoundsError(ValueError):
    """A pixel coordinate falls outside the image."""

    def __init__(self, x: int, y: int, width: int, height: int):
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        super().__init__(
            f"Coordinate ({x}, {y}) outside image bounds {width}x{height}"
        )
