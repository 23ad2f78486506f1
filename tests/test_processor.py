"""Unit tests for the processor module."""

import pytest
from pathlib import Path

from sheetsane.config import ProcessingLimits, Settings
from sheetsane.core.db import InMemoryResultStore
from sheetsane.core.processor import DocumentProcessor, compute_file_id
from sheetsane.errors import (
    EmptyFileError,
    FileTooLargeError,
    InvalidFileTypeError,
    ParseError,
)


@pytest.fixture
def processor():
    """Create a DocumentProcessor with an in-memory store."""
    return DocumentProcessor(InMemoryResultStore())


class TestComputeFileId:
    """Test cases for compute_file_id."""

    def test_sha256(self):
        """Test the digest of known content."""
        assert compute_file_id(b"") == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )

    def test_content_sensitive(self):
        """Test that different bytes give different identifiers."""
        assert compute_file_id(b"a") != compute_file_id(b"b")


class TestValidateUpload:
    """Test cases for upload validation."""

    def test_empty_file(self, processor):
        """Test that empty content is rejected first."""
        with pytest.raises(EmptyFileError) as exc_info:
            processor.validate_upload("book.xlsx", b"")

        assert exc_info.value.code == "EMPTY_FILE"

    @pytest.mark.parametrize("name", ["data.csv", "report.pdf", "noextension"])
    def test_invalid_extension(self, processor, name):
        """Test that non-spreadsheet extensions are rejected."""
        with pytest.raises(InvalidFileTypeError):
            processor.validate_upload(name, b"content")

    @pytest.mark.parametrize("name", ["book.xlsx", "BOOK.XLS", "macro.xlsm"])
    def test_valid_extension(self, processor, name):
        """Test accepted spreadsheet extensions."""
        processor.validate_upload(name, b"content")

    def test_too_large(self):
        """Test that oversized files are rejected with the limit in the message."""
        settings = Settings(limits=ProcessingLimits(max_file_bytes=2 * 1024 * 1024))
        processor = DocumentProcessor(settings=settings)

        with pytest.raises(FileTooLargeError, match="Maximum size is 2MB"):
            processor.validate_upload("book.xlsx", b"x" * (2 * 1024 * 1024 + 1))


class TestAnalyze:
    """Test cases for analysis with caching."""

    def test_analyze_bytes_stores_result(self, processor, orders_xlsx):
        """Test that a result is stored under the content hash."""
        result = processor.analyze_bytes(orders_xlsx, "orders.xlsx")

        assert result.file_id == compute_file_id(orders_xlsx)
        assert processor.store.get(result.file_id) is result

    def test_cached_result_reused(self, processor, orders_xlsx):
        """Test that a second call returns the cached result."""
        first = processor.analyze_bytes(orders_xlsx, "orders.xlsx", file_id="fixed")
        second = processor.analyze_bytes(orders_xlsx, "orders.xlsx", file_id="fixed")

        assert second is first

    def test_force_reprocess(self, orders_xlsx):
        """Test that force mode re-runs the analysis."""
        processor = DocumentProcessor(InMemoryResultStore(), force_reprocess=True)

        first = processor.analyze_bytes(orders_xlsx, "orders.xlsx", file_id="fixed")
        second = processor.analyze_bytes(orders_xlsx, "orders.xlsx", file_id="fixed")

        assert second is not first
        assert second.score == first.score

    def test_should_process_reasons(self, processor, orders_xlsx):
        """Test the reasons reported for processing decisions."""
        assert processor.should_process("abc") == (True, "No cached result")

        processor.analyze_bytes(orders_xlsx, "orders.xlsx", file_id="abcdef1234")
        should_process, reason = processor.should_process("abcdef1234")

        assert should_process is False
        assert reason == "File abcdef12... already analyzed"

    def test_limits_from_settings(self, make_xlsx):
        """Test that configured limits reach the analysis."""
        data = make_xlsx({f"S{i}": [["a"], [1]] for i in range(3)})
        settings = Settings(limits=ProcessingLimits(max_sheets=2))
        processor = DocumentProcessor(settings=settings)

        result = processor.analyze_bytes(data, "book.xlsx")

        assert result.findings[0].category == "Processing Limits"
        assert "Skipped sheets: S2" in result.findings[0].description

    def test_parse_error(self, processor):
        """Test that unreadable content raises ParseError."""
        with pytest.raises(ParseError):
            processor.analyze_bytes(b"garbage", "book.xlsx")

    def test_analyze_file_not_found(self, processor):
        """Test analyzing a missing file."""
        with pytest.raises(FileNotFoundError):
            processor.analyze_file(Path("/nonexistent/book.xlsx"))

    def test_preview_file(self, processor, sample_excel_file):
        """Test previewing a file from disk."""
        preview = processor.preview_file(sample_excel_file)

        assert preview.file_name == "orders.xlsx"
        assert preview.file_size == sample_excel_file.stat().st_size
        assert len(preview.potential_key_columns) == 2


class TestProcessDocuments:
    """Test cases for batch processing."""

    def test_batch_with_failures(self, processor, sample_excel_file, tmp_path):
        """Test that failing files are counted and skipped."""
        broken = tmp_path / "broken.xlsx"
        broken.write_bytes(b"not a workbook")
        text_file = tmp_path / "notes.txt"
        text_file.write_text("hello")

        summary = processor.process_documents(
            [sample_excel_file, broken, text_file, tmp_path / "missing.xlsx"]
        )

        assert summary["files_processed"] == 1
        assert summary["files_failed"] == 3
        assert summary["failed_files"] == ["broken.xlsx", "notes.txt", "missing.xlsx"]
        assert summary["average_score"] == 87

    def test_empty_batch(self, processor):
        """Test processing an empty list."""
        summary = processor.process_documents([])

        assert summary["files_processed"] == 0
        assert summary["average_score"] is None

    def test_cached_files_are_skipped(self, processor, sample_excel_file):
        """Test that a second batch over the same file counts it as skipped."""
        first = processor.process_documents([sample_excel_file])
        second = processor.process_documents([sample_excel_file])

        assert first["files_processed"] == 1
        assert first["files_skipped"] == 0
        assert second["files_processed"] == 0
        assert second["files_skipped"] == 1
        assert second["skipped_files"] == ["orders.xlsx"]
        assert second["average_score"] is None
