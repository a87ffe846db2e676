"""Member persistence used by the import and export flows."""

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from clubroll.db.models import (
    Member,
    MemberCategory,
    Membership,
    MembershipMember,
    MembershipRole,
    MembershipStatus,
    RenewalStatus,
)


@dataclass
class MemberFilters:
    """Filters for member listings.

    Attributes:
        search: Case-insensitive substring of first name, surname or email.
        status: Status of the member's most recent membership.
        category: Category of the member's most recent membership.
        renewal_status: Renewal status of the member's most recent membership.
    """

    search: str | None = None
    status: MembershipStatus | None = None
    category: MemberCategory | None = None
    renewal_status: RenewalStatus | None = None


def latest_membership(member: Member) -> Membership | None:
    """Most recent membership of a member: the linked one with the latest start date."""
    memberships = [link.membership for link in member.membership_links]
    if not memberships:
        return None
    return max(memberships, key=lambda m: m.start_date)


class MemberRepository:
    """Repository for members, memberships and their links."""

    def __init__(self, db: Session):
        """Initialize repository.

        Args:
            db: Database session.
        """
        self.db = db

    def existing_donman_ids(self) -> set[int]:
        """Get every DONMAN # currently used by a member.

        Returns:
            set[int]: Persisted DONMAN numbers.
        """
        rows = self.db.query(Member.donman_id).filter(Member.donman_id.isnot(None)).all()
        return {row.donman_id for row in rows}

    def add_members(self, members: list[Member]) -> None:
        """Stage members and flush so they get storage ids."""
        self.db.add_all(members)
        self.db.flush()

    def add_memberships(self, memberships: list[Membership]) -> None:
        """Stage memberships and flush so they get storage ids."""
        self.db.add_all(memberships)
        self.db.flush()

    def link(
        self,
        pairs: Iterable[tuple[Member, Membership]],
        role: MembershipRole = MembershipRole.PRIMARY,
    ) -> None:
        """Link flushed members to flushed memberships.

        Args:
            pairs: (member, membership) pairs; both must already have ids.
            role: Role of the member within the membership.
        """
        links = [
            MembershipMember(membership_id=membership.id, member_id=member.id, role=role)
            for member, membership in pairs
        ]
        self.db.add_all(links)
        self.db.flush()

    def commit(self) -> None:
        """Commit the current transaction."""
        self.db.commit()

    def rollback(self) -> None:
        """Roll back the current transaction."""
        self.db.rollback()

    def list_with_latest_membership(
        self, filters: MemberFilters | None = None
    ) -> list[tuple[Member, Membership | None]]:
        """List members with their most recent membership.

        Membership filters apply to the most recent membership only, so a
        member whose current membership is NonActive does not match
        status=Active because of an older one.

        Args:
            filters: Optional listing filters.

        Returns:
            list: (member, latest membership or None), ordered by surname then first name.
        """
        filters = filters or MemberFilters()

        query = self.db.query(Member).options(
            selectinload(Member.membership_links).selectinload(MembershipMember.membership)
        )

        if filters.search and filters.search.strip():
            # Wildcards typed by the user match literally
            escaped = (
                filters.search.strip()
                .replace("/", "//")
                .replace("%", "/%")
                .replace("_", "/_")
            )
            search_term = f"%{escaped}%"
            query = query.filter(
                or_(
                    Member.first_name.ilike(search_term, escape="/"),
                    Member.surname.ilike(search_term, escape="/"),
                    Member.email.ilike(search_term, escape="/"),
                )
            )

        members = query.order_by(Member.surname, Member.first_name).all()

        results = []
        for member in members:
            membership = latest_membership(member)
            if filters.status and (membership is None or membership.status != filters.status):
                continue
            if filters.category and (
                membership is None or membership.category != filters.category
            ):
                continue
            if filters.renewal_status and (
                membership is None or membership.renewal_status != filters.renewal_status
            ):
                continue
            results.append((member, membership))

        return results
