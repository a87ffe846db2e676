"""CSV export of members with their current membership."""

import csv
import io
from datetime import datetime

from clubroll.db.models import Member, Membership, utc_now
from clubroll.members.repository import MemberFilters, MemberRepository

EXPORT_HEADERS = [
    "DonmanId",
    "FirstName",
    "Surname",
    "Title",
    "Email",
    "Mobile",
    "AddressStreet",
    "AddressSuburb",
    "AddressState",
    "AddressPostcode",
    "Notes",
    "UpdateEpas",
    "Status",
    "Type",
    "PayType",
    "Rights",
    "Category",
    "RenewalStatus",
    "DateLastPaid",
]

EXPORT_DATE_FORMAT = "%d/%m/%Y"


def _enum_text(value) -> str:
    return value.value if value is not None else ""


def export_row(member: Member, membership: Membership | None) -> list[str]:
    """Build one export row.

    Args:
        member: Member to export.
        membership: The member's most recent membership, if any.

    Returns:
        list[str]: Values in EXPORT_HEADERS order; missing values are empty.
    """
    row = [
        str(member.donman_id) if member.donman_id is not None else "",
        member.first_name,
        member.surname,
        member.title or "",
        member.email or "",
        member.mobile or "",
        member.address_street or "",
        member.address_suburb or "",
        member.address_state or "",
        member.address_postcode or "",
        member.notes or "",
        member.update_epas or "",
    ]

    if membership is None:
        return row + [""] * 7

    date_last_paid = (
        membership.date_last_paid.strftime(EXPORT_DATE_FORMAT) if membership.date_last_paid else ""
    )
    return row + [
        _enum_text(membership.status),
        _enum_text(membership.type),
        _enum_text(membership.pay_type),
        _enum_text(membership.rights),
        _enum_text(membership.category),
        _enum_text(membership.renewal_status),
        date_last_paid,
    ]


def export_members_csv(repository: MemberRepository, filters: MemberFilters | None = None) -> str:
    """Render members as CSV.

    Args:
        repository: Member repository.
        filters: Optional listing filters.

    Returns:
        str: CSV content with a header row.
    """
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(EXPORT_HEADERS)
    for member, membership in repository.list_with_latest_membership(filters):
        writer.writerow(export_row(member, membership))
    return output.getvalue()


def export_filename(now: datetime | None = None) -> str:
    """Download filename, e.g. members-export-20260218-093000.csv."""
    now = now or utc_now()
    return f"members-export-{now:%Y%m%d-%H%M%S}.csv"
