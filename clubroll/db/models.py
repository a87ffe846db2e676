"""SQLAlchemy database models."""

import enum
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def utc_now() -> datetime:
    """Current time in UTC.

    Returns:
        datetime: Timezone-aware UTC timestamp.
    """
    return datetime.now(timezone.utc)


def _enum_column(enum_cls: type[enum.Enum]) -> Enum:
    """Enum column persisted by canonical name, independent of member order."""
    return Enum(
        enum_cls,
        values_callable=lambda x: [e.value for e in x],
        native_enum=False,
        length=20,
    )


class PayType(str, enum.Enum):
    """How a membership is paid."""

    AUTO = "Auto"
    ANNUAL = "Annual"
    NOT_APPLICABLE = "NotApplicable"


class MembershipStatus(str, enum.Enum):
    """Membership status enumeration."""

    ACTIVE = "Active"
    NON_ACTIVE = "NonActive"


class MembershipType(str, enum.Enum):
    """Who a membership covers."""

    SINGLE = "Single"
    COUPLE = "Couple"
    FAMILY = "Family"


class MemberRights(str, enum.Enum):
    """Rights granted by a membership."""

    PAID = "Paid"
    ASSOCIATE = "Associate"
    VOTING_RIGHTS = "VotingRights"


class MemberCategory(str, enum.Enum):
    """Member category (the "Type2" column of the DONMAN export)."""

    COMMUNITY = "Community"
    LIFE = "Life"
    VOLUNTEER = "Volunteer"
    EX_BOARD = "ExBoard"
    BOARD = "Board"
    DOCTOR = "Doctor"
    FAMILY = "Family"
    STAFF = "Staff"


class RenewalStatus(str, enum.Enum):
    """Whether a membership needs renewal action."""

    NEW = "New"
    RENEWED = "Renewed"
    TO_RENEW = "ToRenew"
    OVERDUE = "Overdue"
    NOT_RENEWING = "NotRenewing"


class MembershipRole(str, enum.Enum):
    """Role of a member within a membership."""

    PRIMARY = "Primary"
    SECONDARY = "Secondary"
    DEPENDENT = "Dependent"


class Member(Base):
    """Club member.

    Attributes:
        id: Primary key.
        donman_id: External DONMAN number, unique when present.
        first_name: Given name.
        surname: Family name.
        title: Salutation (Mr, Dr, ...).
        email: Email address.
        mobile: Mobile phone number.
        mailchimp_name: Name used for mailing lists.
        address_street: Street part of the postal address.
        address_suburb: Suburb.
        address_state: Australian state or territory abbreviation.
        address_postcode: Four digit postcode.
        notes: Free text notes.
        update_epas: "Update EPAS" flag carried over from DONMAN.
        org_foundation: Organisation or foundation the member belongs to.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "members"
    __table_args__ = (
        Index("ix_members_surname", "surname"),
        Index("ix_members_email", "email"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    donman_id: Mapped[int | None] = mapped_column(Integer, unique=True, nullable=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    surname: Mapped[str] = mapped_column(String(100), nullable=False)
    title: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    mobile: Mapped[str | None] = mapped_column(String(50), nullable=True)
    mailchimp_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Address
    address_street: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address_suburb: Mapped[str | None] = mapped_column(String(100), nullable=True)
    address_state: Mapped[str | None] = mapped_column(String(10), nullable=True)
    address_postcode: Mapped[str | None] = mapped_column(String(10), nullable=True)

    # Metadata
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    update_epas: Mapped[str | None] = mapped_column(String(50), nullable=True)
    org_foundation: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, onupdate=utc_now)

    # Relationships
    membership_links: Mapped[list["MembershipMember"]] = relationship(
        "MembershipMember", back_populates="member", cascade="all, delete-orphan"
    )


class Membership(Base):
    """Membership record shared by one or more members.

    Attributes:
        id: Primary key.
        type: Single, couple or family membership.
        pay_type: Payment arrangement.
        status: Active or not.
        rights: Rights granted.
        category: Member category.
        renewal_status: Renewal state.
        start_date: When the membership started.
        end_date: When it ended, if it has.
        date_last_paid: Last payment date.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "memberships"
    __table_args__ = (
        Index("ix_memberships_status", "status"),
        Index("ix_memberships_start_date", "start_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[MembershipType] = mapped_column(_enum_column(MembershipType), nullable=False)
    pay_type: Mapped[PayType] = mapped_column(_enum_column(PayType), nullable=False)
    status: Mapped[MembershipStatus] = mapped_column(
        _enum_column(MembershipStatus), nullable=False
    )
    rights: Mapped[MemberRights] = mapped_column(_enum_column(MemberRights), nullable=False)
    category: Mapped[MemberCategory] = mapped_column(_enum_column(MemberCategory), nullable=False)
    renewal_status: Mapped[RenewalStatus] = mapped_column(
        _enum_column(RenewalStatus), nullable=False
    )
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    date_last_paid: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, onupdate=utc_now)

    # Relationships
    member_links: Mapped[list["MembershipMember"]] = relationship(
        "MembershipMember", back_populates="membership", cascade="all, delete-orphan"
    )


class MembershipMember(Base):
    """Association between a membership and its members."""

    __tablename__ = "membership_members"

    membership_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("memberships.id", ondelete="CASCADE"),
        primary_key=True,
    )
    member_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("members.id", ondelete="CASCADE"),
        primary_key=True,
    )
    role: Mapped[MembershipRole] = mapped_column(
        _enum_column(MembershipRole), default=MembershipRole.PRIMARY
    )

    membership: Mapped["Membership"] = relationship("Membership", back_populates="member_links")
    member: Mapped["Member"] = relationship("Member", back_populates="membership_links")
