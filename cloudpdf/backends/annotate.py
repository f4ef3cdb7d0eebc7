"""Add-text backend: places text where the user clicked on a page preview."""

import logging
import math
from typing import Dict, Any, List, Tuple

from .base import Backend
from ..config import get_config
from ..documents.pdf_document import PdfDocument
from ..errors import InvalidPage
from ..utils.colors import parse_hex_color
from ..utils.page_filter import resolve_page_range
from ..utils.placement import ScreenClick, to_native_coordinate

logger = logging.getLogger(__name__)


def _float_option(options: Dict[str, str], name: str) -> float:
    value = options.get(name)
    if value is None or str(value).strip() == "":
        raise ValueError(f"Missing required option '{name}'")
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = math.nan
    if not math.isfinite(number):
        raise ValueError(f"Option '{name}' must be a number, got {value!r}")
    return number


class AddTextBackend(Backend):
    """Backend for drawing text onto a PDF page using PyMuPDF."""

    SUPPORTED_OPERATIONS = ["add_text"]

    def process(
        self,
        documents: List[bytes],
        operation: str,
        options: Dict[str, str]
    ) -> Tuple[bytes, str, Dict[str, Any]]:
        self._require_supported(operation)
        if len(documents) != 1:
            raise ValueError("Adding text requires exactly one PDF file")

        text = options.get("text", "")
        if not text.strip():
            raise ValueError("Text to add must not be empty")

        config = get_config()
        color_hex = options.get("color") or config.page_tools.default_text_color
        color = parse_hex_color(color_hex)
        font_size = config.page_tools.default_font_size
        if options.get("font_size"):
            font_size = _float_option(options, "font_size")
            if font_size <= 0:
                raise ValueError(f"Font size must be positive, got {font_size}")

        click = ScreenClick(
            x=_float_option(options, "x"),
            y=_float_option(options, "y"),
            container_width=_float_option(options, "container_width"),
            container_height=_float_option(options, "container_height"),
        )

        with PdfDocument.open(documents[0]) as doc:
            total_pages = doc.page_count()
            page_number = str(options.get("page", "1")).strip()
            # A single page only, never a range or list
            if not page_number or "-" in page_number or "," in page_number:
                raise InvalidPage(page_number, total_pages)
            page_index = resolve_page_range(page_number, total_pages)[0]

            native_size = doc.page_size(page_index)
            coordinate = to_native_coordinate(click, native_size)

            logger.info(
                f"Drawing text on page {page_index + 1} at "
                f"({coordinate.x:.2f}, {coordinate.y:.2f}) with color {color_hex}"
            )

            doc.draw_text(page_index, text, coordinate, font_size, color)
            output_data = doc.save()

        metadata = {
            "page": str(page_index + 1),
            "x": f"{coordinate.x:.2f}",
            "y": f"{coordinate.y:.2f}",
            "font_size": str(font_size),
        }

        return output_data, "pdf", metadata
