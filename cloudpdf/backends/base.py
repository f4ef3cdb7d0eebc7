"""Base backend interface for PDF page operations."""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Tuple


class Backend(ABC):
    """Abstract base class for PDF page operation backends."""

    SUPPORTED_OPERATIONS: List[str] = []

    def supports(self, operation: str, format: str = "") -> bool:
        """
        Check if this backend can handle the specified operation.

        Args:
            operation: The operation name (e.g., "split", "add_text")
            format: Optional format hint (e.g., "pdf")

        Returns:
            True if this backend supports the operation, False otherwise
        """
        return operation in self.SUPPORTED_OPERATIONS

    @abstractmethod
    def process(
        self,
        documents: List[bytes],
        operation: str,
        options: Dict[str, str]
    ) -> Tuple[bytes, str, Dict[str, Any]]:
        """
        Run the operation over the supplied PDF documents.

        Args:
            documents: Raw PDF bytes, one entry per input document
            operation: Operation to perform
            options: Operation-specific options

        Returns:
            Tuple of (output_data, format, metadata)
            - output_data: Processed output bytes
            - format: Output format (e.g., "pdf", "json")
            - metadata: Additional information about the processing

        Raises:
            ValueError: If operation is not supported or invalid options
            RuntimeError: If processing fails
        """
        pass

    def _require_supported(self, operation: str) -> None:
        if not self.supports(operation):
            raise ValueError(f"Operation '{operation}' not supported")
