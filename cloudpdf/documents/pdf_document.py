"""Editable PDF document backed by PyMuPDF."""

import logging
from typing import List, Sequence, Tuple

import pymupdf

from ..errors import DocumentError
from ..utils.placement import NativeCoordinate, NativePageSize

logger = logging.getLogger(__name__)

# Base-14 Helvetica
DEFAULT_FONT = "helv"


class PdfDocument:
    """An open, editable multi-page PDF."""

    def __init__(self, doc: "pymupdf.Document"):
        self._doc = doc

    @classmethod
    def open(cls, data: bytes) -> "PdfDocument":
        try:
            doc = pymupdf.open(stream=data, filetype="pdf")
        except Exception:
            raise DocumentError("Invalid or corrupted PDF file")
        if len(doc) == 0:
            doc.close()
            raise DocumentError("PDF is empty.")
        return cls(doc)

    @classmethod
    def create(cls) -> "PdfDocument":
        return cls(pymupdf.open())

    def __enter__(self) -> "PdfDocument":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def page_count(self) -> int:
        return len(self._doc)

    def page_size(self, index: int) -> NativePageSize:
        rect = self._page(index).rect
        return NativePageSize(width=rect.width, height=rect.height)

    def copy_pages(self, source: "PdfDocument", indices: Sequence[int]) -> List[int]:
        """
        Append pages of another document in the given order.

        Args:
            source: Document to copy from
            indices: Zero-based page indices in ``source``

        Returns:
            Zero-based indices of the appended pages in this document
        """
        added = []
        for index in indices:
            source._page(index)
            self._doc.insert_pdf(source._doc, from_page=index, to_page=index)
            added.append(len(self._doc) - 1)
        return added

    def draw_text(
        self,
        page_index: int,
        text: str,
        coordinate: NativeCoordinate,
        font_size: float,
        color: Tuple[float, float, float],
    ) -> None:
        """
        Draw a line of text with its baseline starting at ``coordinate``.

        The coordinate uses the page's native space (origin bottom-left) and is
        converted to PyMuPDF's top-left space with the page transformation.
        """
        page = self._page(page_index)
        point = pymupdf.Point(coordinate.x, coordinate.y) * page.transformation_matrix
        logger.debug(
            f"Drawing text on page {page_index} at native "
            f"({coordinate.x:.2f}, {coordinate.y:.2f}) -> ({point.x:.2f}, {point.y:.2f})"
        )
        page.insert_text(
            point,
            text,
            fontsize=font_size,
            fontname=DEFAULT_FONT,
            color=color,
        )

    def save(self) -> bytes:
        if len(self._doc) == 0:
            raise DocumentError("No pages were selected or copied.")
        return self._doc.tobytes(garbage=3, deflate=True)

    def close(self) -> None:
        self._doc.close()

    def _page(self, index: int) -> "pymupdf.Page":
        if index < 0 or index >= len(self._doc):
            raise DocumentError(
                f"Invalid page number: {index + 1}. Document has {len(self._doc)} pages."
            )
        return self._doc[index]
