"""Field normalizers for DONMAN import rows.

Normalizers never raise on bad input. They return a default value and append
an ImportRowError to the caller's list, so one row can report every problem
it has in a single pass.
"""

import enum
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone

from clubroll.db.models import (
    MemberCategory,
    MemberRights,
    MembershipStatus,
    MembershipType,
    PayType,
    RenewalStatus,
)
from clubroll.imports.schemas import ImportRowError


@dataclass(frozen=True)
class RowContext:
    """Row identity attached to every error raised for that row.

    Attributes:
        row: 1-based data row number.
        donman_id: Raw DONMAN # text.
        name: Display name built from the name columns.
    """

    row: int
    donman_id: str | None = None
    name: str | None = None

    def error(self, field_name: str, value: str, message: str) -> ImportRowError:
        """Build an error for this row."""
        return ImportRowError(
            row=self.row,
            donman_id=self.donman_id,
            name=self.name,
            field=field_name,
            value=value,
            message=message,
        )


@dataclass(frozen=True)
class EnumField:
    """How one DONMAN column maps onto a classification enum.

    Attributes:
        field: Field name reported in errors.
        label: Label used in "Invalid <label>" messages.
        empty_label: Label used in "<label> is empty" messages.
        enum_cls: Target enum; member values are the canonical names.
        aliases: Extra spellings (lowercase, spaces removed) seen in DONMAN exports.
    """

    field: str
    label: str
    empty_label: str
    enum_cls: type[enum.Enum]
    aliases: dict[str, enum.Enum] = field(default_factory=dict)

    @property
    def allowed(self) -> str:
        """Comma-separated canonical names."""
        return ", ".join(member.value for member in self.enum_cls)

    @property
    def default(self) -> enum.Enum:
        """Value returned when the input cannot be mapped."""
        return next(iter(self.enum_cls))


PAY_TYPE_FIELD = EnumField(
    field="PayType",
    label="Pay type",
    empty_label="Pay type",
    enum_cls=PayType,
    aliases={
        "annual": PayType.ANNUAL,
        "auto": PayType.AUTO,
        "notapplicable": PayType.NOT_APPLICABLE,
    },
)

STATUS_FIELD = EnumField(
    field="Status",
    label="Status",
    empty_label="Status",
    enum_cls=MembershipStatus,
    aliases={
        "active": MembershipStatus.ACTIVE,
        "nonactive": MembershipStatus.NON_ACTIVE,
    },
)

TYPE_FIELD = EnumField(
    field="Type",
    label="membership Type",
    empty_label="Membership type",
    enum_cls=MembershipType,
)

RIGHTS_FIELD = EnumField(
    field="Rights",
    label="Rights",
    empty_label="Rights",
    enum_cls=MemberRights,
    aliases={"votingrights": MemberRights.VOTING_RIGHTS},
)

CATEGORY_FIELD = EnumField(
    field="Category",
    label="Category (Type2)",
    empty_label="Category (Type2)",
    enum_cls=MemberCategory,
    aliases={"exboard": MemberCategory.EX_BOARD},
)

RENEWAL_STATUS_FIELD = EnumField(
    field="RenewalStatus",
    label="Renewal Status",
    empty_label="Renewal status",
    enum_cls=RenewalStatus,
    aliases={
        "torenew": RenewalStatus.TO_RENEW,
        "notrenewing": RenewalStatus.NOT_RENEWING,
    },
)


def normalize_enum(
    value: str,
    mapping: EnumField,
    ctx: RowContext,
    errors: list[ImportRowError],
) -> enum.Enum:
    """Map a raw DONMAN value onto an enum member.

    Spaces are removed first, then the field's aliases and finally the
    canonical names are compared case-insensitively.

    Args:
        value: Trimmed raw value.
        mapping: Field mapping.
        ctx: Row context for error reporting.
        errors: Error list to append to.

    Returns:
        enum.Enum: Matched member, or the field default on failure.
    """
    if not value or not value.strip():
        errors.append(
            ctx.error(
                mapping.field,
                value,
                f"{mapping.empty_label} is empty. Expected one of: {mapping.allowed}.",
            )
        )
        return mapping.default

    key = value.replace(" ", "").lower()

    if key in mapping.aliases:
        return mapping.aliases[key]

    for member in mapping.enum_cls:
        if member.value.lower() == key:
            return member

    errors.append(
        ctx.error(
            mapping.field,
            value,
            f"Invalid {mapping.label}: '{value}'. Expected one of: {mapping.allowed}.",
        )
    )
    return mapping.default


def parse_pay_type(value: str, ctx: RowContext, errors: list[ImportRowError]) -> PayType:
    """Parse the "Pay type" column (Auto, Annual, NotApplicable)."""
    return normalize_enum(value, PAY_TYPE_FIELD, ctx, errors)


def parse_membership_status(
    value: str, ctx: RowContext, errors: list[ImportRowError]
) -> MembershipStatus:
    """Parse the "Status" column (Active, NonActive)."""
    return normalize_enum(value, STATUS_FIELD, ctx, errors)


def parse_membership_type(
    value: str, ctx: RowContext, errors: list[ImportRowError]
) -> MembershipType:
    """Parse the "Type" column (Single, Couple, Family)."""
    return normalize_enum(value, TYPE_FIELD, ctx, errors)


def parse_member_rights(value: str, ctx: RowContext, errors: list[ImportRowError]) -> MemberRights:
    """Parse the "Rights" column (Paid, Associate, VotingRights)."""
    return normalize_enum(value, RIGHTS_FIELD, ctx, errors)


def parse_member_category(
    value: str, ctx: RowContext, errors: list[ImportRowError]
) -> MemberCategory:
    """Parse the "Type2" column into a member category."""
    return normalize_enum(value, CATEGORY_FIELD, ctx, errors)


def parse_renewal_status(
    value: str, ctx: RowContext, errors: list[ImportRowError]
) -> RenewalStatus:
    """Parse the "Renewal Status" column."""
    return normalize_enum(value, RENEWAL_STATUS_FIELD, ctx, errors)


# --- Dates ---


# Tried in order; the first exact match wins
DATE_FORMATS = [
    "dd/MM/yyyy",
    "d/MM/yyyy",
    "d/M/yyyy",
    "dd-MM-yyyy",
    "d-MM-yyyy",
    "d-M-yyyy",
    "yyyy-MM-dd",
    "dd/MM/yy",
    "d/MM/yy",
    "d/M/yy",
    "dd.MM.yyyy",
    "d.MM.yyyy",
]

_DATE_TOKENS = {
    "yyyy": r"(?P<year>[0-9]{4})",
    "yy": r"(?P<year>[0-9]{2})",
    "dd": r"(?P<day>[0-9]{2})",
    "d": r"(?P<day>[0-9]{1,2})",
    "MM": r"(?P<month>[0-9]{2})",
    "M": r"(?P<month>[0-9]{1,2})",
}

# Two-digit years up to this value belong to the 2000s
TWO_DIGIT_YEAR_PIVOT = 49


def _compile_date_format(fmt: str) -> re.Pattern:
    """Turn a "dd/MM/yyyy" style pattern into an anchored regex."""
    pattern = re.sub(
        r"yyyy|yy|dd|d|MM|M|.",
        lambda m: _DATE_TOKENS.get(m.group(0), re.escape(m.group(0))),
        fmt,
    )
    return re.compile(rf"^{pattern}$")


_COMPILED_DATE_FORMATS = [(fmt, _compile_date_format(fmt)) for fmt in DATE_FORMATS]


def _match_date(value: str, pattern: re.Pattern) -> datetime | None:
    match = pattern.match(value)
    if not match:
        return None

    year_text = match.group("year")
    year = int(year_text)
    if len(year_text) == 2:
        year += 2000 if year <= TWO_DIGIT_YEAR_PIVOT else 1900

    try:
        return datetime(
            year, int(match.group("month")), int(match.group("day")), tzinfo=timezone.utc
        )
    except ValueError:
        # Out of range day or month, e.g. 31/02/2024
        return None


def parse_date(
    value: str,
    field_name: str,
    ctx: RowContext,
    errors: list[ImportRowError],
) -> datetime | None:
    """Parse a date using the DONMAN date formats.

    Args:
        value: Trimmed raw value.
        field_name: Field name reported in errors.
        ctx: Row context for error reporting.
        errors: Error list to append to.

    Returns:
        datetime | None: UTC midnight of the parsed date, or None when the
            value is empty or unparseable.
    """
    if not value or not value.strip():
        return None

    for _, pattern in _COMPILED_DATE_FORMATS:
        parsed = _match_date(value, pattern)
        if parsed is not None:
            return parsed

    errors.append(
        ctx.error(
            field_name,
            value,
            f"Invalid date format for {field_name}: '{value}'. "
            f"Expected formats: {', '.join(DATE_FORMATS)}.",
        )
    )
    return None
