"""Mapping of clicks on a rendered page preview into native page coordinates."""

from typing import NamedTuple

from ..errors import InvalidGeometry


class ScreenClick(NamedTuple):
    """A click relative to the top-left corner of the rendered page container."""
    x: float
    y: float
    container_width: float
    container_height: float


class NativePageSize(NamedTuple):
    """Page width and height in the page's own units."""
    width: float
    height: float


class NativeCoordinate(NamedTuple):
    """Point in page space, origin at the bottom-left corner."""
    x: float
    y: float


def to_native_coordinate(click: ScreenClick, native_size: NativePageSize) -> NativeCoordinate:
    """
    Convert a click on a scaled page preview into native page coordinates.

    Screen y grows downward from the top edge while page y grows upward from
    the bottom edge, so the vertical axis is flipped. Each axis is scaled by
    its own factor; when the preview keeps the page's aspect ratio both
    factors are equal.

    Raises:
        InvalidGeometry: The container has a non-positive width or height
    """
    if click.container_width <= 0 or click.container_height <= 0:
        raise InvalidGeometry(
            f"Rendered page size must be positive, got "
            f"{click.container_width}x{click.container_height}"
        )

    scale_x = native_size.width / click.container_width
    scale_y = native_size.height / click.container_height

    return NativeCoordinate(
        x=click.x * scale_x,
        y=native_size.height - (click.y * scale_y),
    )
