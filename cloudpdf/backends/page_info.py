"""Page info backend using PyMuPDF."""

import json
import logging
from typing import Dict, Any, List, Tuple

from .base import Backend
from ..documents.pdf_document import PdfDocument

logger = logging.getLogger(__name__)


class PageInfoBackend(Backend):
    """Backend reporting page count and native page sizes for pagination."""

    SUPPORTED_OPERATIONS = ["page_info"]

    def process(
        self,
        documents: List[bytes],
        operation: str,
        options: Dict[str, str]
    ) -> Tuple[bytes, str, Dict[str, Any]]:
        self._require_supported(operation)
        if len(documents) != 1:
            raise ValueError("Page info requires exactly one PDF file")

        with PdfDocument.open(documents[0]) as doc:
            pages = []
            for page_index in range(doc.page_count()):
                size = doc.page_size(page_index)
                pages.append({
                    "page": page_index + 1,
                    "width": size.width,
                    "height": size.height,
                })

        result = {
            "total_pages": len(pages),
            "pages": pages,
        }

        output_data = json.dumps(result, indent=2).encode("utf-8")
        metadata = {
            "total_pages": str(len(pages)),
        }

        return output_data, "json", metadata
