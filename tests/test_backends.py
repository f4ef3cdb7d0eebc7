"""Tests for PDF page operation backends."""

import json
import pytest
import pymupdf

from cloudpdf.backends.annotate import AddTextBackend
from cloudpdf.backends.merge import MergeBackend
from cloudpdf.backends.page_info import PageInfoBackend
from cloudpdf.backends.split import SplitBackend
from cloudpdf.errors import (
    DocumentError,
    EmptyPageRange,
    InvalidColor,
    InvalidGeometry,
    InvalidPage,
    InvalidRange,
    PageRangeError,
)
from cloudpdf.utils.page_filter import full_range, resolve_page_range


def create_test_pdf(num_pages=3, label="Page", width=612, height=792):
    """Create a PDF whose pages read "<label> 1", "<label> 2", ..."""
    doc = pymupdf.open()
    for i in range(num_pages):
        page = doc.new_page(width=width, height=height)
        page.insert_text(pymupdf.Point(72, 72), f"{label} {i + 1}", fontsize=12, fontname="helv")
    pdf_bytes = doc.tobytes()
    doc.close()
    return pdf_bytes


def page_texts(pdf_bytes):
    doc = pymupdf.open(stream=pdf_bytes, filetype="pdf")
    try:
        return [page.get_text("text").strip() for page in doc]
    finally:
        doc.close()


# --- Page Filter Tests ---

class TestPageFilter:
    """Tests for page range resolution."""

    def test_resolve_range(self):
        assert resolve_page_range("1-3", 5) == [0, 1, 2]

    def test_resolve_single_pages(self):
        assert resolve_page_range("2,4", 5) == [1, 3]

    def test_resolve_mixed_format_with_spaces(self):
        assert resolve_page_range(" 1-3, 5 , 8-10", 10) == [0, 1, 2, 4, 7, 8, 9]

    def test_overlapping_ranges_collapse(self):
        assert resolve_page_range("1-3,2-4", 10) == [0, 1, 2, 3]

    def test_output_is_sorted_regardless_of_input_order(self):
        assert resolve_page_range("5,1,3-4,1", 5) == [0, 2, 3, 4]

    def test_range_bounds_inclusive(self):
        assert resolve_page_range("1-5", 5) == [0, 1, 2, 3, 4]
        assert resolve_page_range("3-3", 5) == [2]

    def test_descending_range_is_rejected(self):
        with pytest.raises(InvalidRange) as exc_info:
            resolve_page_range("5-3", 10)
        assert exc_info.value.token == "5-3"
        assert exc_info.value.code == "INVALID_RANGE"

    def test_range_past_end_is_rejected(self):
        with pytest.raises(InvalidRange):
            resolve_page_range("4-6", 5)

    def test_range_starting_at_zero_is_rejected(self):
        with pytest.raises(InvalidRange):
            resolve_page_range("0-2", 5)

    def test_malformed_range_is_rejected(self):
        for token in ["1-", "-2", "a-b", "1-2-3"]:
            with pytest.raises(InvalidRange) as exc_info:
                resolve_page_range(token, 5)
            assert exc_info.value.token == token

    def test_page_zero_is_rejected(self):
        with pytest.raises(InvalidPage) as exc_info:
            resolve_page_range("0", 5)
        assert exc_info.value.token == "0"

    def test_page_past_end_is_rejected(self):
        with pytest.raises(InvalidPage) as exc_info:
            resolve_page_range("6", 5)
        assert exc_info.value.token == "6"
        assert "between 1 and 5" in str(exc_info.value)

    def test_non_numeric_page_is_rejected(self):
        for token in ["abc", "2.5", "+3"]:
            with pytest.raises(InvalidPage):
                resolve_page_range(token, 5)

    def test_empty_token_is_rejected(self):
        with pytest.raises(InvalidPage) as exc_info:
            resolve_page_range("1,,2", 5)
        assert exc_info.value.token == ""

    def test_empty_expression(self):
        with pytest.raises(EmptyPageRange) as exc_info:
            resolve_page_range("", 5)
        assert exc_info.value.code == "EMPTY"
        with pytest.raises(EmptyPageRange):
            resolve_page_range("   ", 5)

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            resolve_page_range("9", 5)
        assert issubclass(PageRangeError, ValueError)

    def test_indices_within_bounds(self):
        total = 7
        for expression in ["1-7", "7", "2-3,6-7", "1,1,1"]:
            indices = resolve_page_range(expression, total)
            assert all(0 <= i < total for i in indices)
            assert indices == sorted(set(indices))

    def test_repeated_resolution_is_identical(self):
        assert resolve_page_range("3,1-2", 4) == resolve_page_range("3,1-2", 4)

    def test_full_range(self):
        assert full_range(12) == "1-12"
        assert resolve_page_range(full_range(3), 3) == [0, 1, 2]


# --- Backend Support Tests ---

class TestBackendSupport:
    """Tests for backend operation support."""

    def test_split_supports_split(self):
        backend = SplitBackend()
        assert backend.supports("split")
        assert not backend.supports("merge")

    def test_page_info_supports_page_info(self):
        backend = PageInfoBackend()
        assert backend.supports("page_info")
        assert not backend.supports("split")

    def test_unsupported_operation_raises(self):
        with pytest.raises(ValueError):
            MergeBackend().process([create_test_pdf(), create_test_pdf()], "split", {})


# --- Split Tests ---

class TestSplitBackend:
    """Tests for SplitBackend with real PDFs."""

    def setup_method(self):
        self.backend = SplitBackend()

    def test_split_selected_pages(self):
        pdf = create_test_pdf(5)
        output, fmt, metadata = self.backend.process([pdf], "split", {"pages": "4, 1-2"})

        assert fmt == "pdf"
        assert page_texts(output) == ["Page 1", "Page 2", "Page 4"]
        assert metadata["total_pages"] == "5"
        assert metadata["pages_selected"] == "3"
        assert metadata["page_indices"] == "0,1,3"

    def test_split_defaults_to_all_pages(self):
        pdf = create_test_pdf(3)
        output, _, metadata = self.backend.process([pdf], "split", {})

        assert len(page_texts(output)) == 3
        assert metadata["page_range"] == "1-3"

    def test_split_invalid_range(self):
        pdf = create_test_pdf(3)
        with pytest.raises(InvalidRange):
            self.backend.process([pdf], "split", {"pages": "2-5"})

    def test_split_invalid_pdf(self):
        with pytest.raises(DocumentError):
            self.backend.process([b"not a pdf"], "split", {"pages": "1"})

    def test_split_requires_one_document(self):
        with pytest.raises(ValueError):
            self.backend.process([], "split", {"pages": "1"})


# --- Merge Tests ---

class TestMergeBackend:
    """Tests for MergeBackend."""

    def setup_method(self):
        self.backend = MergeBackend()

    def test_merge_in_upload_order(self):
        first = create_test_pdf(2, label="First")
        second = create_test_pdf(1, label="Second")
        output, fmt, metadata = self.backend.process([first, second], "merge", {})

        assert fmt == "pdf"
        assert page_texts(output) == ["First 1", "First 2", "Second 1"]
        assert metadata["documents_merged"] == "2"
        assert metadata["total_pages"] == "3"

    def test_merge_requires_two_documents(self):
        with pytest.raises(ValueError, match="at least two"):
            self.backend.process([create_test_pdf(1)], "merge", {})

    def test_merge_reports_bad_file_position(self):
        with pytest.raises(ValueError, match="File 2"):
            self.backend.process([create_test_pdf(1), b"garbage"], "merge", {})


# --- Add Text Tests ---

class TestAddTextBackend:
    """Tests for AddTextBackend."""

    def setup_method(self):
        self.backend = AddTextBackend()
        self.options = {
            "text": "Hello",
            "page": "2",
            "x": "100",
            "y": "50",
            "container_width": "306",
            "container_height": "396",
        }

    def test_text_lands_at_mapped_position(self):
        pdf = create_test_pdf(2)
        output, fmt, metadata = self.backend.process([pdf], "add_text", self.options)

        assert fmt == "pdf"
        assert metadata["page"] == "2"
        assert metadata["x"] == "200.00"
        assert metadata["y"] == "692.00"

        doc = pymupdf.open(stream=output, filetype="pdf")
        try:
            hits = doc[1].search_for("Hello")
            assert len(hits) == 1
            rect = hits[0]
            # Native y=692 from the bottom is y=100 from the top (baseline)
            assert abs(rect.x0 - 200) < 1
            assert rect.y0 < 100 < rect.y1 + 1
            assert doc[0].search_for("Hello") == []
        finally:
            doc.close()

    def test_blank_text_rejected(self):
        options = dict(self.options, text="   ")
        with pytest.raises(ValueError):
            self.backend.process([create_test_pdf(2)], "add_text", options)

    def test_page_out_of_bounds(self):
        options = dict(self.options, page="3")
        with pytest.raises(InvalidPage):
            self.backend.process([create_test_pdf(2)], "add_text", options)

    def test_page_range_not_accepted(self):
        options = dict(self.options, page="1-2")
        with pytest.raises(InvalidPage):
            self.backend.process([create_test_pdf(2)], "add_text", options)

    def test_blank_page_rejected(self):
        options = dict(self.options, page=" ")
        with pytest.raises(InvalidPage) as exc_info:
            self.backend.process([create_test_pdf(2)], "add_text", options)
        assert exc_info.value.code == "INVALID_PAGE"

    def test_zero_width_container(self):
        options = dict(self.options, container_width="0")
        with pytest.raises(InvalidGeometry):
            self.backend.process([create_test_pdf(2)], "add_text", options)

    def test_invalid_color(self):
        options = dict(self.options, color="blue")
        with pytest.raises(InvalidColor):
            self.backend.process([create_test_pdf(2)], "add_text", options)

    def test_missing_coordinate(self):
        options = dict(self.options)
        del options["x"]
        with pytest.raises(ValueError, match="'x'"):
            self.backend.process([create_test_pdf(2)], "add_text", options)


# --- Page Info Tests ---

class TestPageInfoBackend:
    """Tests for PageInfoBackend."""

    def test_page_sizes(self):
        doc = pymupdf.open()
        doc.new_page(width=612, height=792)
        doc.new_page(width=842, height=595)
        pdf = doc.tobytes()
        doc.close()

        output, fmt, metadata = PageInfoBackend().process([pdf], "page_info", {})
        result = json.loads(output)

        assert fmt == "json"
        assert result["total_pages"] == 2
        assert result["pages"][0] == {"page": 1, "width": 612.0, "height": 792.0}
        assert result["pages"][1]["width"] == 842.0
        assert metadata["total_pages"] == "2"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
