"""Split backend: extracts a page selection into a new PDF."""

import logging
from typing import Dict, Any, List, Tuple

from .base import Backend
from ..documents.pdf_document import PdfDocument
from ..utils.page_filter import full_range, resolve_page_range

logger = logging.getLogger(__name__)


class SplitBackend(Backend):
    """Backend for extracting selected pages of a PDF using PyMuPDF."""

    SUPPORTED_OPERATIONS = ["split"]

    def process(
        self,
        documents: List[bytes],
        operation: str,
        options: Dict[str, str]
    ) -> Tuple[bytes, str, Dict[str, Any]]:
        self._require_supported(operation)
        if len(documents) != 1:
            raise ValueError("Split requires exactly one PDF file")

        with PdfDocument.open(documents[0]) as source:
            total_pages = source.page_count()
            page_range = options.get("pages") or full_range(total_pages)

            # Raises a PageRangeError before any page is copied
            page_indices = resolve_page_range(page_range, total_pages)

            with PdfDocument.create() as split_doc:
                split_doc.copy_pages(source, page_indices)
                output_data = split_doc.save()

        logger.info(
            f"Split {len(page_indices)} of {total_pages} pages using range '{page_range}'"
        )

        metadata = {
            "total_pages": str(total_pages),
            "pages_selected": str(len(page_indices)),
            "page_indices": ",".join(str(i) for i in page_indices),
            "page_range": page_range,
        }

        return output_data, "pdf", metadata
