"""Import service: validate and execute DONMAN member imports."""

import json
import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field


from clubroll.imports.duplicates import DuplicateResolver
from clubroll.imports.parsers import (
    DONMAN_LAYOUT,
    ColumnLayout,
    ParsedRow,
    detect_delimiter,
    parse_row,
)
from clubroll.imports.schemas import (
    CamelModel,
    ImportComplete,
    ImportFailure,
    ImportProgress,
    ImportRowError,
    ImportSkipped,
    ImportValidationResult,
)
from clubroll.members.repository import MemberRepository

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 50

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class ImportFileError(Exception):
    """The uploaded file cannot be processed at all."""


def read_lines(content: bytes) -> list[str]:
    """Decode an uploaded file into lines.

    Args:
        content: Raw file bytes.

    Returns:
        list[str]: Lines without terminators, header first.

    Raises:
        ImportFileError: If the file is empty, not UTF-8, or has no data row.
    """
    if not content:
        raise ImportFileError("No file uploaded or file is empty.")

    try:
        text = content.decode("utf-8-sig")  # Handle BOM
    except UnicodeDecodeError as e:
        raise ImportFileError("File must be UTF-8 encoded text.") from e

    lines = _LINE_BREAK.split(text)
    if lines and lines[-1] == "":
        lines.pop()

    if len(lines) < 2:
        raise ImportFileError("File must contain a header row and at least one data row.")
    return lines


@dataclass(frozen=True)
class ImportEvent:
    """One event of the execute stream.

    Attributes:
        event: "error", "progress" or "complete".
        data: Event payload.
    """

    event: str
    data: CamelModel

    @property
    def is_terminal(self) -> bool:
        """Whether this event ends the stream."""
        return self.event in ("error", "complete")


def format_sse(event: ImportEvent) -> str:
    """Render an event as a server-sent events record."""
    payload = json.dumps(event.data.model_dump(mode="json", by_alias=True))
    return f"event: {event.event}\ndata: {payload}\n\n"


@dataclass
class _Scan:
    """Result of parsing and duplicate-checking a whole file."""

    total_rows: int = 0
    accepted: list[ParsedRow] = field(default_factory=list)
    skipped: list[ImportSkipped] = field(default_factory=list)
    errors: list[ImportRowError] = field(default_factory=list)

    @property
    def error_rows(self) -> int:
        return len({error.row for error in self.errors})


class ImportService:
    """Service class for DONMAN imports."""

    def __init__(
        self,
        repository: MemberRepository,
        batch_size: int = DEFAULT_BATCH_SIZE,
        layout: ColumnLayout = DONMAN_LAYOUT,
    ):
        """Initialize import service.

        Args:
            repository: Member repository.
            batch_size: Rows persisted per transaction.
            layout: Column positions of the export format.

        Raises:
            ValueError: If batch_size is not positive.
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.repository = repository
        self.batch_size = batch_size
        self.layout = layout

    def _scan(self, lines: list[str]) -> _Scan:
        """Parse every data line and sort rows into accepted, skipped and errors.

        Args:
            lines: File lines, header first.

        Returns:
            _Scan: Rows in file order.
        """
        scan = _Scan()
        delimiter = detect_delimiter(lines[0])
        resolver = DuplicateResolver(self.repository.existing_donman_ids())

        for row_number, line in enumerate(lines[1:], start=1):
            if not line.strip():
                continue

            scan.total_rows += 1
            parsed = parse_row(line, delimiter, row_number, self.layout)

            if not parsed.is_valid:
                scan.errors.extend(parsed.errors)
                continue

            reason = resolver.check(parsed.donman_id)
            if reason:
                scan.skipped.append(
                    ImportSkipped(donman_id=parsed.donman_id, name=parsed.name or "", reason=reason)
                )
                continue

            resolver.accept(parsed.donman_id)
            scan.accepted.append(parsed)

        return scan

    def validate(self, lines: list[str]) -> ImportValidationResult:
        """Validate a file without persisting anything.

        Args:
            lines: File lines, header first.

        Returns:
            ImportValidationResult: Full validation report.
        """
        scan = self._scan(lines)
        logger.info(
            f"Validated import: {scan.total_rows} rows, {len(scan.accepted)} valid, "
            f"{scan.error_rows} with errors, {len(scan.skipped)} skipped"
        )
        return ImportValidationResult(
            total_rows=scan.total_rows,
            valid_count=len(scan.accepted),
            error_count=scan.error_rows,
            skipped_count=len(scan.skipped),
            skipped=scan.skipped,
            errors=scan.errors,
        )

    def execute(self, lines: list[str]) -> Iterator[ImportEvent]:
        """Validate and import a file, yielding progress events.

        The file is validated from scratch first; a single invalid row aborts
        the import before anything is written. Accepted rows are then saved
        in batches, each batch in its own transaction: members first, then
        memberships, then the links between them.

        Args:
            lines: File lines, header first.

        Yields:
            ImportEvent: Zero or more progress events followed by exactly one
                complete or error event.
        """
        scan = self._scan(lines)

        if scan.errors:
            logger.warning(
                f"Import aborted: {scan.error_rows} of {scan.total_rows} rows failed validation"
            )
            yield ImportEvent(
                "error",
                ImportFailure(
                    message=(
                        f"Validation failed: {scan.error_rows} row(s) contain errors. "
                        "No members were imported."
                    )
                ),
            )
            return

        total = len(scan.accepted)
        processed = 0

        for start in range(0, total, self.batch_size):
            batch = scan.accepted[start : start + self.batch_size]
            try:
                self.repository.add_members([row.member for row in batch])
                self.repository.add_memberships([row.membership for row in batch])
                self.repository.link((row.member, row.membership) for row in batch)
                self.repository.commit()
            except Exception:
                # Includes driver errors SQLAlchemy does not wrap, e.g. OverflowError
                self.repository.rollback()
                logger.exception(
                    f"Import failed saving rows {batch[0].row_number}-{batch[-1].row_number}"
                )
                yield ImportEvent(
                    "error",
                    ImportFailure(
                        message=(
                            f"Failed to save rows {batch[0].row_number}-{batch[-1].row_number}. "
                            f"{processed} of {total} members were imported before the failure."
                        )
                    ),
                )
                return

            processed += len(batch)
            yield ImportEvent("progress", ImportProgress(processed=processed, total=total))

        logger.info(f"Imported {processed} members, skipped {len(scan.skipped)} duplicates")
        yield ImportEvent("complete", ImportComplete(imported=processed, skipped=scan.skipped))
