"""
Unit tests for the membership state machine
"""

import pytest
from datetime import date
import uuid

from gymkeeper.models.member import Gender, Member, MemberStatus


def build_member(**overrides) -> Member:
    values = dict(
        id=uuid.uuid4(),
        tenant_id=uuid.uuid4(),
        name="Ravi Kumar",
        phone="9876543210",
        gender=Gender.MALE,
        plan="Monthly",
        join_date=date(2024, 1, 1),
        renewal_date=date(2024, 1, 1),
        expiry_date=date(2024, 2, 1),
        status=MemberStatus.ACTIVE,
    )
    values.update(overrides)
    return Member(**values)


class TestMembershipValidity:
    """Status is derived from expiry_date, valid through the expiry day"""

    def test_active_on_expiry_day(self):
        member = build_member()
        assert member.is_expired(date(2024, 2, 1)) is False
        assert member.expected_status(date(2024, 2, 1)) == MemberStatus.ACTIVE

    def test_inactive_day_after_expiry(self):
        member = build_member()
        assert member.is_expired(date(2024, 2, 2)) is True
        assert member.expected_status(date(2024, 2, 2)) == MemberStatus.INACTIVE

    def test_needs_reconciliation_when_stale(self):
        member = build_member()
        assert member.needs_reconciliation(date(2024, 2, 1)) is False
        assert member.needs_reconciliation(date(2024, 2, 2)) is True

    def test_inactive_member_with_future_expiry_needs_reconciliation(self):
        member = build_member(status=MemberStatus.INACTIVE)
        assert member.needs_reconciliation(date(2024, 1, 20)) is True


class TestStartMembership:

    def test_expiry_is_join_plus_duration(self):
        member = build_member()
        member.start_membership("Quarterly", 3, date(2024, 1, 31), today=date(2024, 1, 31))

        assert member.renewal_date == date(2024, 1, 31)
        assert member.expiry_date == date(2024, 4, 30)
        assert member.status == MemberStatus.ACTIVE

    def test_backdated_join_that_already_lapsed(self):
        member = build_member()
        member.start_membership("Monthly", 1, date(2023, 1, 1), today=date(2024, 1, 1))
        assert member.status == MemberStatus.INACTIVE

    def test_rejects_non_positive_duration(self):
        member = build_member()
        with pytest.raises(ValueError):
            member.start_membership("Broken", 0, date(2024, 1, 1), today=date(2024, 1, 1))


class TestApplyRenewal:

    @pytest.mark.parametrize("prior", [MemberStatus.ACTIVE, MemberStatus.INACTIVE])
    def test_renewal_restarts_from_today(self, prior):
        member = build_member(status=prior, expiry_date=date(2023, 6, 1))
        member.apply_renewal("Half-Yearly", 6, today=date(2024, 3, 15))

        assert member.plan == "Half-Yearly"
        assert member.renewal_date == date(2024, 3, 15)
        assert member.expiry_date == date(2024, 9, 15)
        assert member.status == MemberStatus.ACTIVE
        assert member.updated_at is not None

    def test_early_renewal_does_not_stack(self):
        member = build_member(expiry_date=date(2024, 4, 10))
        member.apply_renewal("Monthly", 1, today=date(2024, 3, 15))
        assert member.expiry_date == date(2024, 4, 15)

    def test_rejects_non_positive_duration(self):
        member = build_member()
        with pytest.raises(ValueError):
            member.apply_renewal("Broken", -1, today=date(2024, 3, 15))
