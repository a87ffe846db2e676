"""Export API routes."""

from typing import Annotated

from fastapi import APIRouter, Query
from fastapi.responses import Response

from clubroll.db.models import MemberCategory, MembershipStatus, RenewalStatus
from clubroll.dependencies import DbSession
from clubroll.exports.service import export_filename, export_members_csv
from clubroll.members.repository import MemberFilters, MemberRepository

router = APIRouter()


@router.get("/export/csv")
async def export_csv(
    db: DbSession,
    search: str | None = None,
    status: MembershipStatus | None = None,
    category: MemberCategory | None = None,
    renewal_status: Annotated[RenewalStatus | None, Query(alias="renewalStatus")] = None,
):
    """Download members as CSV.

    Filters on status, category and renewal status apply to each member's
    most recent membership.

    Args:
        db: Database session.
        search: Substring of first name, surname or email.
        status: Membership status filter.
        category: Member category filter.
        renewal_status: Renewal status filter.

    Returns:
        Response: CSV file download.
    """
    filters = MemberFilters(
        search=search,
        status=status,
        category=category,
        renewal_status=renewal_status,
    )
    content = export_members_csv(MemberRepository(db), filters)

    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )
