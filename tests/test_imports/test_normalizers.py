"""Tests for enum and date normalization."""

from datetime import datetime, timezone

import pytest

from clubroll.db.models import (
    MemberCategory,
    MemberRights,
    MembershipStatus,
    MembershipType,
    PayType,
    RenewalStatus,
)
from clubroll.imports.normalizers import (
    DATE_FORMATS,
    RowContext,
    parse_date,
    parse_member_category,
    parse_member_rights,
    parse_membership_status,
    parse_membership_type,
    parse_pay_type,
    parse_renewal_status,
)


@pytest.fixture
def ctx() -> RowContext:
    """Row context used for error reporting."""
    return RowContext(row=3, donman_id="1001", name="Jane Citizen")


class TestEnumNormalization:
    """Tests for DONMAN enum spellings."""

    @pytest.mark.parametrize(
        "value", ["NonActive", "Non Active", "non active", "NONACTIVE", "nonactive"]
    )
    def test_non_active_variants(self, ctx, value):
        """Test spacing and case variants of NonActive."""
        errors = []
        assert parse_membership_status(value, ctx, errors) == MembershipStatus.NON_ACTIVE
        assert errors == []

    def test_active(self, ctx):
        """Test Active in any case."""
        errors = []
        assert parse_membership_status("ACTIVE", ctx, errors) == MembershipStatus.ACTIVE
        assert errors == []

    def test_pay_types(self, ctx):
        """Test pay type spellings."""
        errors = []
        assert parse_pay_type("Annual", ctx, errors) == PayType.ANNUAL
        assert parse_pay_type("auto", ctx, errors) == PayType.AUTO
        assert parse_pay_type("Not Applicable", ctx, errors) == PayType.NOT_APPLICABLE
        assert errors == []

    def test_membership_types(self, ctx):
        """Test membership type spellings."""
        errors = []
        assert parse_membership_type("single", ctx, errors) == MembershipType.SINGLE
        assert parse_membership_type("Couple", ctx, errors) == MembershipType.COUPLE
        assert parse_membership_type("FAMILY", ctx, errors) == MembershipType.FAMILY
        assert errors == []

    def test_rights(self, ctx):
        """Test rights spellings."""
        errors = []
        assert parse_member_rights("Voting Rights", ctx, errors) == MemberRights.VOTING_RIGHTS
        assert parse_member_rights("VotingRights", ctx, errors) == MemberRights.VOTING_RIGHTS
        assert parse_member_rights("paid", ctx, errors) == MemberRights.PAID
        assert parse_member_rights("Associate", ctx, errors) == MemberRights.ASSOCIATE
        assert errors == []

    def test_categories(self, ctx):
        """Test category spellings."""
        errors = []
        assert parse_member_category("Ex Board", ctx, errors) == MemberCategory.EX_BOARD
        assert parse_member_category("exboard", ctx, errors) == MemberCategory.EX_BOARD
        assert parse_member_category("Life", ctx, errors) == MemberCategory.LIFE
        assert parse_member_category("staff", ctx, errors) == MemberCategory.STAFF
        assert errors == []

    def test_renewal_statuses(self, ctx):
        """Test renewal status spellings."""
        errors = []
        assert parse_renewal_status("To Renew", ctx, errors) == RenewalStatus.TO_RENEW
        assert parse_renewal_status("not renewing", ctx, errors) == RenewalStatus.NOT_RENEWING
        assert parse_renewal_status("OVERDUE", ctx, errors) == RenewalStatus.OVERDUE
        assert parse_renewal_status("New", ctx, errors) == RenewalStatus.NEW
        assert errors == []

    def test_invalid_value_single_error(self, ctx):
        """Test an unknown value adds exactly one error and returns the default."""
        errors = []

        result = parse_pay_type("Bimonthly", ctx, errors)

        assert result == PayType.AUTO
        assert len(errors) == 1
        error = errors[0]
        assert error.row == 3
        assert error.donman_id == "1001"
        assert error.name == "Jane Citizen"
        assert error.field == "PayType"
        assert error.value == "Bimonthly"
        assert error.message == (
            "Invalid Pay type: 'Bimonthly'. Expected one of: Auto, Annual, NotApplicable."
        )

    def test_invalid_membership_type_message(self, ctx):
        """Test the membership type error wording."""
        errors = []

        parse_membership_type("Triple", ctx, errors)

        assert errors[0].field == "Type"
        assert errors[0].message == (
            "Invalid membership Type: 'Triple'. Expected one of: Single, Couple, Family."
        )

    def test_invalid_category_message(self, ctx):
        """Test the category error names the Type2 column."""
        errors = []

        parse_member_category("Sponsor", ctx, errors)

        assert errors[0].field == "Category"
        assert errors[0].message.startswith("Invalid Category (Type2): 'Sponsor'.")

    def test_empty_value(self, ctx):
        """Test an empty value is reported as empty."""
        errors = []

        result = parse_membership_type("", ctx, errors)

        assert result == MembershipType.SINGLE
        assert errors[0].message == (
            "Membership type is empty. Expected one of: Single, Couple, Family."
        )

    def test_empty_renewal_status(self, ctx):
        """Test the renewal status empty wording."""
        errors = []

        parse_renewal_status("  ", ctx, errors)

        assert errors[0].field == "RenewalStatus"
        assert errors[0].message == (
            "Renewal status is empty. "
            "Expected one of: New, Renewed, ToRenew, Overdue, NotRenewing."
        )


class TestParseDate:
    """Tests for DONMAN date parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("15/03/2025", datetime(2025, 3, 15)),
            ("5/03/2025", datetime(2025, 3, 5)),
            ("5/3/2025", datetime(2025, 3, 5)),
            ("15-03-2025", datetime(2025, 3, 15)),
            ("5-3-2025", datetime(2025, 3, 5)),
            ("2025-03-15", datetime(2025, 3, 15)),
            ("15/03/25", datetime(2025, 3, 15)),
            ("5/3/99", datetime(1999, 3, 5)),
            ("15.03.2025", datetime(2025, 3, 15)),
            ("5.03.2025", datetime(2025, 3, 5)),
        ],
    )
    def test_accepted_formats(self, ctx, value, expected):
        """Test each accepted format yields UTC midnight."""
        errors = []

        result = parse_date(value, "DateLastPaid", ctx, errors)

        assert result == expected.replace(tzinfo=timezone.utc)
        assert result.tzinfo == timezone.utc
        assert errors == []

    def test_two_digit_year_pivot(self, ctx):
        """Test two-digit years 00-49 are 2000s and 50-99 are 1900s."""
        errors = []
        assert parse_date("01/01/49", "DateLastPaid", ctx, errors).year == 2049
        assert parse_date("01/01/50", "DateLastPaid", ctx, errors).year == 1950
        assert parse_date("01/01/00", "DateLastPaid", ctx, errors).year == 2000

    def test_empty_is_none_without_error(self, ctx):
        """Test an empty date is allowed."""
        errors = []
        assert parse_date("", "DateLastPaid", ctx, errors) is None
        assert errors == []

    @pytest.mark.parametrize("value", ["yesterday", "2025/03/15", "5.3.2025", "31/02/2024"])
    def test_invalid_dates(self, ctx, value):
        """Test unparseable or impossible dates add an error."""
        errors = []

        result = parse_date(value, "DateLastPaid", ctx, errors)

        assert result is None
        assert len(errors) == 1
        assert errors[0].field == "DateLastPaid"
        assert errors[0].value == value
        assert errors[0].message.startswith(
            f"Invalid date format for DateLastPaid: '{value}'. Expected formats: "
        )
        assert ", ".join(DATE_FORMATS) in errors[0].message
