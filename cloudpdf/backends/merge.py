"""Merge backend: concatenates several PDFs in upload order."""

import logging
from typing import Dict, Any, List, Tuple

from .base import Backend
from ..documents.pdf_document import PdfDocument

logger = logging.getLogger(__name__)


class MergeBackend(Backend):
    """Backend for merging whole PDFs using PyMuPDF."""

    SUPPORTED_OPERATIONS = ["merge"]

    def process(
        self,
        documents: List[bytes],
        operation: str,
        options: Dict[str, str]
    ) -> Tuple[bytes, str, Dict[str, Any]]:
        self._require_supported(operation)
        if len(documents) < 2:
            raise ValueError("Please select at least two PDF files to merge.")

        with PdfDocument.create() as merged:
            for position, data in enumerate(documents, start=1):
                try:
                    source = PdfDocument.open(data)
                except ValueError as e:
                    raise ValueError(f"File {position}: {e}") from e
                with source:
                    merged.copy_pages(source, range(source.page_count()))

            total_pages = merged.page_count()
            output_data = merged.save()

        logger.info(f"Merged {len(documents)} documents into {total_pages} pages")

        metadata = {
            "documents_merged": str(len(documents)),
            "total_pages": str(total_pages),
        }

        return output_data, "pdf", metadata
