"""Upload validation and analysis orchestration with result caching."""

import hashlib
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import logging

from sheetsane.config import ALLOWED_EXTENSIONS, Settings
from sheetsane.core.analyzer import build_preview, run_analysis
from sheetsane.core.db import InMemoryResultStore, ResultStore
from sheetsane.core.models import AnalysisPreview, AnalysisResult, KeyColumnSelection
from sheetsane.core.reader import ExcelReader
from sheetsane.errors import (
    EmptyFileError,
    FileTooLargeError,
    InvalidFileTypeError,
    SheetSaneError,
)

logger = logging.getLogger(__name__)


def compute_file_id(data: bytes) -> str:
    """Compute the SHA-256 hex digest used as the default file identifier."""
    return hashlib.sha256(data).hexdigest()


def _read_file(file_path: Path) -> bytes:
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    return file_path.read_bytes()


class DocumentProcessor:
    """Validates uploads, runs analyses and caches their results."""

    def __init__(
        self,
        store: Optional[ResultStore] = None,
        settings: Optional[Settings] = None,
        force_reprocess: bool = False,
    ):
        """Initialize the document processor.

        Args:
            store: Result store; defaults to an in-memory store
            settings: Runtime settings; defaults to built-in limits
            force_reprocess: If True, re-run analyses even if a result is cached
        """
        self.settings = settings or Settings()
        self.store = store or InMemoryResultStore(ttl_seconds=self.settings.result_ttl_seconds)
        self.reader = ExcelReader(self.settings.limits)
        self.force_reprocess = force_reprocess

    @property
    def limits(self):
        return self.settings.limits

    def validate_upload(self, file_name: str, data: bytes) -> None:
        """Validate an uploaded file before any parsing.

        Args:
            file_name: Original file name
            data: File contents

        Raises:
            EmptyFileError: If the file has no content
            InvalidFileTypeError: If the extension is not a spreadsheet extension
            FileTooLargeError: If the file exceeds the size limit
        """
        if not data:
            raise EmptyFileError()

        if Path(file_name).suffix.lower() not in ALLOWED_EXTENSIONS:
            raise InvalidFileTypeError()

        if len(data) > self.limits.max_file_bytes:
            raise FileTooLargeError(self.limits.max_file_bytes)

    def should_process(self, file_id: str) -> Tuple[bool, str]:
        """Determine if a file needs a fresh analysis.

        Args:
            file_id: File identifier

        Returns:
            Tuple of (should_process, reason)
        """
        if self.force_reprocess:
            return True, "Force reprocess mode enabled"

        if self.store.get(file_id) is not None:
            return False, f"File {file_id[:8]}... already analyzed"

        return True, "No cached result"

    def preview_bytes(
        self, data: bytes, file_name: str, file_id: Optional[str] = None
    ) -> AnalysisPreview:
        """Validate and preview uploaded bytes.

        Raises:
            SheetSaneError: If validation or parsing fails
        """
        self.validate_upload(file_name, data)
        file_id = file_id or compute_file_id(data)
        workbook = self.reader.parse(data)
        preview = build_preview(workbook, file_id, file_name, len(data))
        logger.info(
            f"Preview for {file_name}: {len(preview.sheets)} sheet(s), "
            f"{len(preview.potential_key_columns)} key column candidate(s)"
        )
        return preview

    def preview_file(self, file_path: Path) -> AnalysisPreview:
        file_path = Path(file_path)
        return self.preview_bytes(_read_file(file_path), file_path.name)

    def analyze_bytes(
        self,
        data: bytes,
        file_name: str,
        key_column: Optional[KeyColumnSelection] = None,
        file_id: Optional[str] = None,
    ) -> AnalysisResult:
        """Validate, analyze and store uploaded bytes.

        A cached result for the same file identifier is returned unless
        force_reprocess is set.

        Args:
            data: File contents
            file_name: Original file name
            key_column: Optional duplicate-key column selection
            file_id: Optional identifier; defaults to the SHA-256 of the bytes

        Returns:
            AnalysisResult

        Raises:
            SheetSaneError: If validation or parsing fails
        """
        self.validate_upload(file_name, data)
        file_id = file_id or compute_file_id(data)

        should_process, reason = self.should_process(file_id)
        if not should_process:
            cached = self.store.get(file_id)
            if cached is not None:
                logger.info(f"Using cached result for {file_name}: {reason}")
                return cached

        logger.info(f"Analyzing {file_name} ({len(data):,} bytes)")
        workbook = self.reader.parse(data)
        result = run_analysis(workbook, file_id, file_name, key_column, self.limits)
        self.store.save(result)
        return result

    def analyze_file(
        self, file_path: Path, key_column: Optional[KeyColumnSelection] = None
    ) -> AnalysisResult:
        file_path = Path(file_path)
        return self.analyze_bytes(_read_file(file_path), file_path.name, key_column)

    def process_documents(self, file_paths: List[Path]) -> Dict[str, Any]:
        """Analyze multiple files, skipping cached and failing ones.

        Args:
            file_paths: Workbook files to analyze

        Returns:
            Dictionary with processed/skipped/failed counts, the average score
            of the processed files and their results
        """
        results = []
        skipped = []
        failed = []

        logger.info(f"Starting batch processing of {len(file_paths)} documents")

        for file_path in file_paths:
            file_path = Path(file_path)
            try:
                data = _read_file(file_path)
                file_id = compute_file_id(data)

                should_process, reason = self.should_process(file_id)
                if not should_process:
                    logger.info(f"Skipping {file_path.name}: {reason}")
                    skipped.append(file_path.name)
                    continue

                results.append(self.analyze_bytes(data, file_path.name, file_id=file_id))
            except (SheetSaneError, FileNotFoundError) as e:
                logger.error(f"Failed to process {file_path.name}: {e}")
                failed.append(file_path.name)

        average = sum(r.score for r in results) / len(results) if results else None

        logger.info(
            f"Batch processing complete: {len(results)} processed, "
            f"{len(skipped)} skipped, {len(failed)} failed"
        )
        return {
            "files_processed": len(results),
            "files_skipped": len(skipped),
            "files_failed": len(failed),
            "skipped_files": skipped,
            "failed_files": failed,
            "average_score": average,
            "results": results,
        }
