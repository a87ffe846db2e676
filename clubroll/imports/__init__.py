"""DONMAN member import.

This module validates and imports member exports from the legacy DONMAN
system:
- Delimiter detection and quoted-field tokenizing
- Enum and date normalization with per-row error collection
- Australian address decomposition
- Duplicate DONMAN # detection against the database and within the file
- Batched persistence with streamed progress events
"""

from clubroll.imports.addresses import AustralianAddress, parse_australian_address
from clubroll.imports.duplicates import DuplicateResolver
from clubroll.imports.parsers import (
    DONMAN_LAYOUT,
    ColumnLayout,
    ParsedRow,
    detect_delimiter,
    parse_line,
    parse_row,
)
from clubroll.imports.schemas import (
    ImportComplete,
    ImportFailure,
    ImportProgress,
    ImportRowError,
    ImportSkipped,
    ImportValidationResult,
)
from clubroll.imports.service import (
    ImportEvent,
    ImportFileError,
    ImportService,
    format_sse,
    read_lines,
)

__all__ = [
    # Addresses
    "AustralianAddress",
    "parse_australian_address",
    # Parsing
    "DONMAN_LAYOUT",
    "ColumnLayout",
    "ParsedRow",
    "detect_delimiter",
    "parse_line",
    "parse_row",
    # Duplicates
    "DuplicateResolver",
    # Schemas
    "ImportComplete",
    "ImportFailure",
    "ImportProgress",
    "ImportRowError",
    "ImportSkipped",
    "ImportValidationResult",
    # Service
    "ImportEvent",
    "ImportFileError",
    "ImportService",
    "format_sse",
    "read_lines",
]
