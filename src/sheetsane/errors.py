"""Exception types raised by SheetSane.

Every exception carries a stable ``code`` so callers (an upload endpoint,
the CLI) can map it to a user-facing response without string matching.
"""

from typing import Optional


class SheetSaneError(Exception):
    """Base class for all SheetSane errors."""

    code = "INTERNAL"
    default_message = "An internal error occurred"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ParseError(SheetSaneError):
    """Raised when bytes are not a readable spreadsheet.

    Covers corrupt containers, unknown formats and password-protected
    workbooks. Fatal to the analysis call.
    """

    code = "PARSE_ERROR"
    default_message = (
        "Could not read file. The file may be corrupted or password-protected."
    )


class EmptyFileError(SheetSaneError):
    code = "EMPTY_FILE"
    default_message = "File is empty or cannot be read"


class InvalidFileTypeError(SheetSaneError):
    code = "INVALID_FILE_TYPE"
    default_message = "Invalid file type. Please upload an Excel file (.xlsx or .xls)"


class FileTooLargeError(SheetSaneError):
    code = "FILE_TOO_LARGE"

    def __init__(self, max_bytes: int):
        self.max_bytes = max_bytes
        max_mb = max_bytes / (1024 * 1024)
        super().__init__(f"File too large. Maximum size is {max_mb:g}MB")
