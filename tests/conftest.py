"""Pytest configuration and fixtures."""

import os
from collections.abc import Callable, Generator
from datetime import datetime

# Set test environment before importing app
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["DEBUG"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from clubroll.db.models import (
    Base,
    Member,
    MemberCategory,
    MemberRights,
    Membership,
    MembershipMember,
    MembershipStatus,
    MembershipType,
    PayType,
    RenewalStatus,
)
from clubroll.imports.parsers import DONMAN_HEADERS

# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Column values of a valid DONMAN row, in export order
DEFAULT_ROW = {
    "donman_id": "1001",
    "first_name": "Jane",
    "mailchimp_name": "Jane",
    "surname": "Citizen",
    "pay_type": "Annual",
    "status": "Active",
    "type": "Single",
    "rights": "Voting Rights",
    "connected_name": "",
    "category": "Community",
    "renewal_status": "Renewed",
    "date_last_paid": "15/03/2025",
    "month_last_paid": "March",
    "notes": "",
    "update_epas": "",
    "org_foundation": "",
    "title": "Ms",
    "email": "jane.citizen@example.com",
    "address": "5 Smith St Mornington VIC 3931",
    "mobile": "0400 000 000",
}


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""
    # Import here to ensure env vars are set
    from clubroll.dependencies import get_db
    from clubroll.main import app

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def donman_header() -> str:
    """Comma-delimited DONMAN header row."""
    return ",".join(DONMAN_HEADERS)


@pytest.fixture
def make_row() -> Callable[..., str]:
    """Factory for DONMAN data lines.

    Keyword arguments override columns of a valid row; values containing
    the delimiter are quoted.
    """

    def _make_row(delimiter: str = ",", **overrides: str) -> str:
        values = {**DEFAULT_ROW, **overrides}
        fields = []
        for value in values.values():
            if delimiter in value or '"' in value:
                value = '"' + value.replace('"', '""') + '"'
            fields.append(value)
        return delimiter.join(fields)

    return _make_row


@pytest.fixture
def make_member(db: Session) -> Callable[..., Member]:
    """Factory for persisted members with one primary membership."""

    def _make_member(
        donman_id: int | None,
        first_name: str,
        surname: str,
        email: str | None = None,
        status: MembershipStatus = MembershipStatus.ACTIVE,
        category: MemberCategory = MemberCategory.COMMUNITY,
        renewal_status: RenewalStatus = RenewalStatus.RENEWED,
        start_date: datetime = datetime(2024, 1, 1),
        date_last_paid: datetime | None = None,
    ) -> Member:
        member = Member(
            donman_id=donman_id,
            first_name=first_name,
            surname=surname,
            email=email,
        )
        membership = Membership(
            type=MembershipType.SINGLE,
            pay_type=PayType.ANNUAL,
            status=status,
            rights=MemberRights.PAID,
            category=category,
            renewal_status=renewal_status,
            start_date=start_date,
            date_last_paid=date_last_paid,
        )
        db.add_all([member, membership])
        db.flush()
        db.add(MembershipMember(membership_id=membership.id, member_id=member.id))
        db.commit()
        db.refresh(member)
        return member

    return _make_member
