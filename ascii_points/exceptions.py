"""
Custom exception hierarchy for ascii-points.

Every error carries a negative integer ``status`` so callers plugging the
reader into a status-code based file-reader framework can translate an
exception into the conventional ``< 0 on failure`` return value without
a lookup table of their own.

Errors tied to a specific input line (token conversion, field count)
also carry ``line_number`` (1-based, counted from the read offset).
"""


class AsciiPointsError(Exception):
    """Base exception for all ascii-points errors."""

    status: int = -1

    def __init__(self, message: str = "", *, line_number: int | None = None) -> None:
        super().__init__(message)
        self.line_number = line_number

    def __str__(self) -> str:
        message = super().__str__()
        if self.line_number is not None:
            return f"line {self.line_number}: {message}"
        return message


class PointFileNotFoundError(AsciiPointsError, FileNotFoundError):
    """Raised when the input path does not exist."""

    status = -1


class FileUnreadableError(AsciiPointsError, OSError):
    """Raised when the input path exists but cannot be opened or decoded.

    For example a directory, a permission error, or bytes that are not
    valid text in the configured encoding.
    """

    status = -2


class ExtensionMismatchError(AsciiPointsError):
    """Raised when a required file extension is configured and the path
    does not carry it."""

    status = -3


class EmptySchemaError(AsciiPointsError):
    """Raised when a read is attempted before any input fields are set."""

    status = -4


class UnknownDatatypeError(AsciiPointsError, ValueError):
    """Raised for a datatype tag outside the fixed enumeration."""

    status = -5


class TokenParseError(AsciiPointsError, ValueError):
    """Raised when a token is not a valid literal for its field's datatype."""

    status = -6


class TokenOverflowError(AsciiPointsError, OverflowError):
    """Raised when a literal is outside the datatype's representable range."""

    status = -7


class FieldCountMismatchError(AsciiPointsError):
    """Raised when a line's token count differs from the schema's
    expected scalar count."""

    status = -8


class RowCountMismatchError(AsciiPointsError):
    """Raised when the fill pass parses a different number of rows than
    the header scan counted (the file changed between the two passes)."""

    status = -9


class SchemaError(AsciiPointsError, ValueError):
    """Raised when field descriptors do not form a valid row layout.

    This can happen if:
    - Two fields share a name or an offset.
    - Offsets are not contiguous given the preceding field sizes.
    - A field has a non-positive count.
    """

    status = -10


class ConfigValidationError(AsciiPointsError):
    """Raised when a reader config or record-type file fails validation."""

    status = -11


class ExportError(AsciiPointsError):
    """Raised when the exporter fails to write output files."""

    status = -12


class ReaderBusyError(AsciiPointsError, RuntimeError):
    """Raised when reader configuration is changed while a read is running."""

    status = -13
