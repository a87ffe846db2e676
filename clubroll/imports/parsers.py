"""Parsing utilities for DONMAN member exports.

A DONMAN export is comma- or tab-delimited text with a header row and a
fixed column order. Each data row becomes a ParsedRow holding either a
Member/Membership pair ready to persist or the full list of errors found.
"""

import csv
import io
import re
from dataclasses import dataclass, field

from clubroll.db.models import Member, Membership, utc_now
from clubroll.imports.addresses import parse_australian_address
from clubroll.imports.normalizers import (
    RowContext,
    parse_date,
    parse_member_category,
    parse_member_rights,
    parse_membership_status,
    parse_membership_type,
    parse_pay_type,
    parse_renewal_status,
)
from clubroll.imports.schemas import ImportRowError


@dataclass(frozen=True)
class ColumnLayout:
    """Column positions (0-based) of an export format.

    Attributes:
        donman_id: "DONMAN #".
        first_name: "First Name".
        mailchimp_name: "Mailchimp name".
        surname: "Surname".
        pay_type: "Pay type".
        status: "Status".
        type: "Type".
        rights: "Rights".
        connected_name: "Connected Name" (not imported).
        category: "Type2".
        renewal_status: "Renewal Status".
        date_last_paid: "Date Last Paid".
        month_last_paid: "Month Last Paid" (not imported).
        notes: "Notes".
        update_epas: "Update EPAS".
        org_foundation: "Org/Foundation".
        title: "TITLE".
        email: "MAIL".
        address: "ADDRESS".
        mobile: "MOBILE".
        min_columns: Rows with fewer fields are rejected.
    """

    donman_id: int = 0
    first_name: int = 1
    mailchimp_name: int = 2
    surname: int = 3
    pay_type: int = 4
    status: int = 5
    type: int = 6
    rights: int = 7
    connected_name: int = 8
    category: int = 9
    renewal_status: int = 10
    date_last_paid: int = 11
    month_last_paid: int = 12
    notes: int = 13
    update_epas: int = 14
    org_foundation: int = 15
    title: int = 16
    email: int = 17
    address: int = 18
    mobile: int = 19
    min_columns: int = 20


DONMAN_LAYOUT = ColumnLayout()

WHOLE_NUMBER = re.compile(r"^[+-]?[0-9]+$")

# DONMAN numbers are stored in a 32-bit INT column
DONMAN_ID_MIN = -(2**31)
DONMAN_ID_MAX = 2**31 - 1


@dataclass
class ParsedRow:
    """Outcome of parsing one data row.

    Attributes:
        row_number: 1-based data row number (header excluded).
        raw_donman_id: DONMAN # as written in the file.
        donman_id: Parsed DONMAN #, 0 until the identifier is valid.
        name: "First Surname" display name.
        is_valid: True when no errors were found.
        errors: Every error found in the row.
        member: Member to persist, only set when valid.
        membership: Membership to persist, only set when valid.
    """

    row_number: int
    raw_donman_id: str | None = None
    donman_id: int = 0
    name: str | None = None
    is_valid: bool = False
    errors: list[ImportRowError] = field(default_factory=list)
    member: Member | None = None
    membership: Membership | None = None


def detect_delimiter(header_line: str) -> str:
    """Detect the delimiter by counting tabs vs commas in the header row.

    Args:
        header_line: First line of the file.

    Returns:
        str: Tab when tabs are at least as frequent as commas, otherwise comma.
    """
    return "\t" if header_line.count("\t") >= header_line.count(",") else ","


def parse_line(line: str, delimiter: str) -> list[str]:
    """Split one line into fields, honouring double quotes.

    Quotes are not copied into the field. Inside quotes a doubled quote is a
    literal quote and the delimiter is ordinary text. An unterminated quote
    keeps the rest of the line quoted.

    Args:
        line: Line of text without its line terminator.
        delimiter: Field delimiter.

    Returns:
        list[str]: Field values; always at least one.
    """
    fields = []
    current: list[str] = []
    in_quotes = False
    i = 0

    while i < len(line):
        char = line[i]
        if in_quotes:
            if char == '"':
                if i + 1 < len(line) and line[i + 1] == '"':
                    current.append('"')
                    i += 1
                else:
                    in_quotes = False
            else:
                current.append(char)
        elif char == '"':
            in_quotes = True
        elif char == delimiter:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    fields.append("".join(current))
    return fields


def is_donman_number(value: str) -> bool:
    """Check whether a value is a whole number that fits the DONMAN # column."""
    if not WHOLE_NUMBER.match(value) or len(value.lstrip("+-").lstrip("0")) > 10:
        return False
    return DONMAN_ID_MIN <= int(value) <= DONMAN_ID_MAX


def null_if_empty(value: str) -> str | None:
    """Return None for empty or whitespace-only strings."""
    return value if value and value.strip() else None


def parse_row(
    line: str,
    delimiter: str,
    row_number: int,
    layout: ColumnLayout = DONMAN_LAYOUT,
) -> ParsedRow:
    """Parse and validate one data row.

    A short row or a missing/non-numeric DONMAN # stops parsing immediately.
    Once the row has an identifier every field is checked, so the returned
    row carries all of its errors at once.

    Args:
        line: Raw data line.
        delimiter: Field delimiter detected from the header.
        row_number: 1-based data row number.
        layout: Column positions.

    Returns:
        ParsedRow: Parsed row, with Member/Membership attached when valid.
    """
    parsed = ParsedRow(row_number=row_number)
    fields = parse_line(line, delimiter)

    if len(fields) < layout.min_columns:
        parsed.errors.append(
            ImportRowError(
                row=row_number,
                field="ColumnCount",
                value=str(len(fields)),
                message=(
                    f"Expected at least {layout.min_columns} columns but found {len(fields)}."
                ),
            )
        )
        return parsed

    def col(index: int) -> str:
        return fields[index].strip()

    raw_id = col(layout.donman_id)
    parsed.raw_donman_id = raw_id

    if not raw_id:
        parsed.errors.append(
            ImportRowError(
                row=row_number,
                field="DonmanId",
                value=raw_id,
                message="DONMAN # is empty.",
            )
        )
        return parsed

    if not is_donman_number(raw_id):
        parsed.errors.append(
            ImportRowError(
                row=row_number,
                field="DonmanId",
                value=raw_id,
                message=f"Invalid DONMAN # value: '{raw_id}'. Expected a whole number.",
            )
        )
        return parsed

    donman_id = int(raw_id)
    parsed.donman_id = donman_id

    first_name = col(layout.first_name)
    surname = col(layout.surname)
    parsed.name = f"{first_name} {surname}".strip()

    ctx = RowContext(row=row_number, donman_id=raw_id, name=parsed.name)
    errors = parsed.errors

    pay_type = parse_pay_type(col(layout.pay_type), ctx, errors)
    status = parse_membership_status(col(layout.status), ctx, errors)
    membership_type = parse_membership_type(col(layout.type), ctx, errors)
    rights = parse_member_rights(col(layout.rights), ctx, errors)
    category = parse_member_category(col(layout.category), ctx, errors)
    renewal_status = parse_renewal_status(col(layout.renewal_status), ctx, errors)
    date_last_paid = parse_date(col(layout.date_last_paid), "DateLastPaid", ctx, errors)

    address = parse_australian_address(col(layout.address))

    if errors:
        return parsed

    now = utc_now()
    parsed.member = Member(
        donman_id=donman_id,
        first_name=first_name,
        surname=surname,
        title=null_if_empty(col(layout.title)),
        email=null_if_empty(col(layout.email)),
        mobile=null_if_empty(col(layout.mobile)),
        mailchimp_name=null_if_empty(col(layout.mailchimp_name)),
        address_street=null_if_empty(address.street),
        address_suburb=null_if_empty(address.suburb),
        address_state=null_if_empty(address.state),
        address_postcode=null_if_empty(address.postcode),
        notes=null_if_empty(col(layout.notes)),
        update_epas=null_if_empty(col(layout.update_epas)),
        org_foundation=null_if_empty(col(layout.org_foundation)),
        created_at=now,
        updated_at=now,
    )
    parsed.membership = Membership(
        type=membership_type,
        pay_type=pay_type,
        status=status,
        rights=rights,
        category=category,
        renewal_status=renewal_status,
        start_date=now,
        date_last_paid=date_last_paid,
        created_at=now,
        updated_at=now,
    )
    parsed.is_valid = True
    return parsed


DONMAN_HEADERS = [
    "DONMAN #",
    "First Name",
    "Mailchimp name",
    "Surname",
    "Pay type",
    "Status",
    "Type",
    "Rights",
    "Connected Name",
    "Type2",
    "Renewal Status",
    "Date Last Paid",
    "Month Last Paid",
    "Notes",
    "Update EPAS",
    "Org/Foundation",
    "TITLE",
    "MAIL",
    "ADDRESS",
    "MOBILE",
]


def generate_csv_template() -> str:
    """Generate a DONMAN-format CSV template with one example row.

    Returns:
        str: CSV template content.
    """
    example_row = [
        "1001",
        "Jane",
        "Jane",
        "Citizen",
        "Annual",
        "Active",
        "Single",
        "Voting Rights",
        "",
        "Community",
        "Renewed",
        "15/03/2025",
        "March",
        "",
        "",
        "",
        "Ms",
        "jane.citizen@example.com",
        "5 Smith St Mornington VIC 3931",
        "0400 000 000",
    ]

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(DONMAN_HEADERS)
    writer.writerow(example_row)
    return output.getvalue()
