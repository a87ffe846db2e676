"""Pydantic schemas for the DONMAN import."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys for the web client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ImportRowError(CamelModel):
    """A single field-level problem found in an import row.

    Attributes:
        row: 1-based data row number (header excluded).
        donman_id: Raw DONMAN # of the row, if it could be read.
        name: Display name of the row, if it could be read.
        field: Which field failed (e.g. "PayType", "ColumnCount").
        value: The offending raw value.
        message: Human-readable description.
    """

    row: int
    donman_id: Optional[str] = None
    name: Optional[str] = None
    field: str
    value: str = ""
    message: str


class ImportSkipped(CamelModel):
    """A valid row that was not imported because its DONMAN # is taken.

    Attributes:
        donman_id: DONMAN # of the skipped row.
        name: Display name of the skipped row.
        reason: Why it was skipped.
    """

    donman_id: int
    name: str = ""
    reason: str


class ImportValidationResult(CamelModel):
    """Report returned by the validate endpoint.

    Attributes:
        total_rows: Non-blank data rows in the file.
        valid_count: Rows that would be imported.
        error_count: Distinct rows with at least one error.
        skipped_count: Valid rows skipped as duplicates.
        skipped: Details of the skipped rows.
        errors: Every error found, in row order.
    """

    total_rows: int = 0
    valid_count: int = 0
    error_count: int = 0
    skipped_count: int = 0
    skipped: list[ImportSkipped] = Field(default_factory=list)
    errors: list[ImportRowError] = Field(default_factory=list)


class ImportProgress(CamelModel):
    """Progress event payload: rows persisted so far out of rows to persist."""

    processed: int
    total: int


class ImportComplete(CamelModel):
    """Completion event payload."""

    imported: int = 0
    skipped: list[ImportSkipped] = Field(default_factory=list)


class ImportFailure(CamelModel):
    """Error event payload."""

    message: str
