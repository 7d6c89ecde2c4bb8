"""
Tests for the aggregation engine: revenue rollups, attendance statistics,
expiring-soon lists and orphan tolerance
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
import uuid

from gymkeeper.models.attendance import Attendance, MarkedBy
from gymkeeper.models.member import MemberStatus
from gymkeeper.models.payment import Payment, PaymentMethod
from gymkeeper.services import aggregation
from gymkeeper.services.aggregation import (
    attendance_rate, attendance_trend, member_attendance_report, percentage, resolve_members, rollup_revenue
)


def payment(amount, paid_at):
    return Payment(
        tenant_id=uuid.uuid4(),
        member_id=uuid.uuid4(),
        amount=Decimal(amount),
        method=PaymentMethod.CASH,
        plan="Monthly",
        paid_at=paid_at,
    )


def add_visit(db, tenant_id, member_id, day):
    db.add(Attendance(
        tenant_id=tenant_id,
        member_id=member_id,
        attended_on=day,
        check_in_time="07:00:00",
        marked_by=MarkedBy.MANUAL,
    ))
    db.commit()


class TestRevenueRollup:

    def test_scenario_three_march_payments(self):
        payments = [
            payment("500", datetime(2024, 3, 1, 9, 0)),
            payment("700", datetime(2024, 3, 14, 18, 30)),
            payment("300", datetime(2024, 3, 31, 23, 59)),
        ]
        rollup = rollup_revenue(payments, today=date(2024, 3, 31))

        assert rollup.monthly == [{"year": 2024, "month": 3, "total": Decimal("1500"), "count": 3}]
        assert rollup.total.total == Decimal("1500")
        assert rollup.total.count == 3
        assert rollup.current_month == Decimal("1500")

    def test_months_are_one_based_and_sorted(self):
        payments = [
            payment("100", datetime(2024, 12, 31, 12, 0)),
            payment("200", datetime(2024, 1, 1, 0, 0)),
            payment("300", datetime(2023, 12, 5, 8, 0)),
        ]
        rollup = rollup_revenue(payments, today=date(2025, 1, 10))

        assert [(m["year"], m["month"]) for m in rollup.monthly] == [(2023, 12), (2024, 1), (2024, 12)]
        assert rollup.annual == [
            {"year": 2023, "total": Decimal("300"), "count": 1},
            {"year": 2024, "total": Decimal("300"), "count": 2},
        ]
        assert rollup.current_month == Decimal("0")

    def test_monthly_buckets_partition_the_total(self):
        amounts = ["1000", "2700.50", "5100", "9600", "0.01", "450.49", "1", "1000"]
        moments = [datetime(2023 + i % 2, 1 + (i * 5) % 12, 1 + i * 3, 10, 0) for i in range(len(amounts))]
        rollup = rollup_revenue([payment(a, m) for a, m in zip(amounts, moments)], today=date(2024, 6, 1))

        assert sum(m["total"] for m in rollup.monthly) == rollup.total.total
        assert sum(m["count"] for m in rollup.monthly) == rollup.total.count == len(amounts)
        assert sum(a["total"] for a in rollup.annual) == rollup.total.total

    def test_empty_ledger(self):
        rollup = rollup_revenue([], today=date(2024, 3, 15))
        assert rollup.monthly == []
        assert rollup.annual == []
        assert rollup.total.total == Decimal("0")
        assert rollup.total.count == 0

    def test_revenue_includes_orphaned_payments(self, db, tenant, make_member):
        """Money received stays in revenue even if the member record is gone"""
        make_member(tenant, join_date=date(2024, 3, 1))
        db.add(Payment(
            tenant_id=tenant.id, member_id=uuid.uuid4(), amount=Decimal("250"),
            method=PaymentMethod.UPI, plan="Monthly", paid_at=datetime(2024, 3, 5, 9, 0),
        ))
        db.commit()

        rollup = aggregation.revenue_for_tenant(db, tenant.id, date(2024, 3, 15))
        assert rollup.total.count == 2
        assert rollup.total.total == Decimal("1250")

    def test_revenue_is_tenant_scoped(self, db, tenant, other_tenant, make_member):
        make_member(tenant, join_date=date(2024, 3, 1))
        make_member(other_tenant, plan="Yearly", join_date=date(2024, 3, 1))

        rollup = aggregation.revenue_for_tenant(db, tenant.id, date(2024, 3, 15))
        assert rollup.total.total == Decimal("1000")


class TestAttendanceTrend:

    @pytest.mark.parametrize("year,month,length", [(2024, 2, 29), (2023, 2, 28), (2024, 4, 30), (2024, 1, 31)])
    def test_dense_series(self, year, month, length):
        trend = attendance_trend([], year, month)
        assert len(trend) == length
        assert [point["day"] for point in trend] == list(range(1, length + 1))
        assert all(point["present"] == 0 for point in trend)

    def test_counts_distinct_members(self):
        a, b = uuid.uuid4(), uuid.uuid4()
        visits = [(a, date(2024, 3, 2)), (b, date(2024, 3, 2)), (a, date(2024, 3, 2)), (a, date(2024, 3, 9))]
        trend = attendance_trend(visits, 2024, 3)

        assert trend[1] == {"day": 2, "present": 2}
        assert trend[8] == {"day": 9, "present": 1}
        assert sum(point["present"] for point in trend) == 3

    def test_ignores_visits_outside_month(self):
        trend = attendance_trend([(uuid.uuid4(), date(2024, 4, 1))], 2024, 3)
        assert sum(point["present"] for point in trend) == 0


class TestAttendanceRate:

    def test_zero_active_members_is_zero(self):
        assert attendance_rate(10, 0, 2024, 3, date(2024, 3, 15)) == 0

    def test_future_month_is_zero(self):
        assert attendance_rate(0, 10, 2024, 4, date(2024, 3, 15)) == 0

    def test_current_month_uses_days_elapsed(self):
        # 15 days elapsed x 4 active members = 60 possible check-ins
        assert attendance_rate(30, 4, 2024, 3, date(2024, 3, 15)) == 50

    def test_past_month_uses_full_length(self):
        # 29 x 2 = 58 possible; 29 / 58 = 50%
        assert attendance_rate(29, 2, 2024, 2, date(2024, 3, 15)) == 50

    def test_rounds_half_up(self):
        # 1 / 8 = 12.5%
        assert attendance_rate(1, 8, 2024, 3, date(2024, 3, 1)) == 13

    def test_clamped_to_100(self):
        # Members who lapsed mid-month still have check-ins on record
        assert attendance_rate(50, 1, 2024, 3, date(2024, 3, 15)) == 100

    @pytest.mark.parametrize("present,active", [(0, 0), (0, 5), (7, 3), (1000, 1)])
    def test_always_in_range(self, present, active):
        assert 0 <= attendance_rate(present, active, 2024, 2, date(2024, 3, 1)) <= 100


def test_percentage_rounding():
    assert percentage(1, 3, 2) == 33.33
    assert percentage(2, 3, 1) == 66.7
    assert percentage(1, 8, 1) == 12.5
    assert percentage(5, 0, 1) == 0.0


class TestOrphanTolerance:

    def test_resolve_members_skips_unresolved(self):
        record = Attendance(
            id=uuid.uuid4(), tenant_id=uuid.uuid4(), member_id=uuid.uuid4(),
            attended_on=date(2024, 3, 1), check_in_time="07:00:00",
        )
        member = object()
        resolved = resolve_members([(record, member), (record, None)], report="test")
        assert resolved == [(record, member)]

    def test_scenario_orphan_attendance_excluded(self, db, tenant, make_member):
        member = make_member(tenant, join_date=date(2024, 3, 1))
        add_visit(db, tenant.id, member.id, date(2024, 3, 4))
        add_visit(db, tenant.id, uuid.uuid4(), date(2024, 3, 4))

        stats = aggregation.attendance_stats_for_tenant(db, tenant.id, 2024, 3, date(2024, 3, 15))

        assert stats.present_records == 1
        assert stats.trend[3] == {"day": 4, "present": 1}

    def test_orphan_excluded_from_member_report(self, db, tenant, make_member):
        member = make_member(tenant, join_date=date(2024, 3, 1))
        add_visit(db, tenant.id, member.id, date(2024, 3, 4))
        add_visit(db, tenant.id, uuid.uuid4(), date(2024, 3, 5))

        report = aggregation.member_attendance_report_for_tenant(db, tenant.id, 2024, 3)
        assert report["summary"]["total_records"] == 1
        assert report["data"][0]["present_count"] == 1


class TestAttendanceStats:

    def test_stats_for_current_month(self, db, tenant, make_member):
        alice = make_member(tenant, name="Alice", join_date=date(2024, 3, 1))
        bob = make_member(tenant, name="Bob", join_date=date(2024, 3, 1))
        make_member(tenant, name="Lapsed", join_date=date(2023, 1, 1))
        for day in range(1, 16):
            add_visit(db, tenant.id, alice.id, date(2024, 3, day))
        add_visit(db, tenant.id, bob.id, date(2024, 3, 15))

        stats = aggregation.attendance_stats_for_tenant(db, tenant.id, 2024, 3, date(2024, 3, 15))

        assert len(stats.trend) == 31
        assert stats.active_members == 2
        assert stats.days_elapsed == 15
        assert stats.present_records == 16
        # 16 / (15 x 2) = 53.3%
        assert stats.rate == 53
        assert stats.trend[14] == {"day": 15, "present": 2}
        assert stats.trend[20] == {"day": 21, "present": 0}


class TestMemberAttendanceReport:

    def test_every_member_listed(self):
        class Row:
            def __init__(self, name):
                self.id = uuid.uuid4()
                self.name = name
                self.email = None

        regular, absent = Row("Regular"), Row("Absent")
        visits = [(regular.id, date(2024, 2, d)) for d in (1, 2, 3)]
        report = member_attendance_report([regular, absent], visits, 2024, 2)

        rows = {row["name"]: row for row in report["data"]}
        assert rows["Regular"]["present_count"] == 3
        assert rows["Regular"]["total_days"] == 29
        assert rows["Regular"]["percentage"] == 10.3
        assert rows["Absent"]["present_count"] == 0
        assert rows["Absent"]["percentage"] == 0.0
        assert report["summary"] == {"total_records": 2, "avg_attendance": 1.5}

    def test_empty_tenant(self):
        report = member_attendance_report([], [], 2024, 2)
        assert report == {"data": [], "summary": {"total_records": 0, "avg_attendance": 0.0}}


class TestExpiringSoon:

    def test_window_is_inclusive_and_ordered(self, db, tenant, make_member):
        # Monthly expiries: 2024-03-22 (today + 7), 2024-03-15 (today), 2024-03-23 (outside)
        make_member(tenant, name="EdgeOfWindow", join_date=date(2024, 2, 22))
        make_member(tenant, name="Today", join_date=date(2024, 2, 15))
        make_member(tenant, name="TooLate", join_date=date(2024, 2, 23))
        make_member(tenant, name="AlreadyExpired", join_date=date(2024, 2, 10))

        members = aggregation.expiring_soon(db, tenant.id, date(2024, 3, 15), 7)
        assert [m.name for m in members] == ["Today", "EdgeOfWindow"]

    def test_only_active_members(self, db, tenant, make_member):
        member = make_member(tenant, join_date=date(2024, 2, 20))
        member.status = MemberStatus.INACTIVE
        db.add(member)
        db.commit()
        assert aggregation.expiring_soon(db, tenant.id, date(2024, 3, 15), 7) == []

    def test_tenant_scoped(self, db, tenant, other_tenant, make_member):
        make_member(other_tenant, join_date=date(2024, 2, 20))
        assert aggregation.expiring_soon(db, tenant.id, date(2024, 3, 15), 7) == []


class TestDashboardAndReports:

    def test_dashboard_stats(self, db, tenant, make_member):
        present = make_member(tenant, name="Present", join_date=date(2024, 3, 1))
        make_member(tenant, name="Away", plan="Quarterly", join_date=date(2024, 3, 10))
        make_member(tenant, name="Lapsed", join_date=date(2023, 1, 1))
        add_visit(db, tenant.id, present.id, date(2024, 3, 15))

        stats = aggregation.dashboard_stats(db, tenant.id, date(2024, 3, 15))

        assert stats["total_members"] == 3
        assert stats["active_members"] == 2
        assert stats["inactive_members"] == 1
        assert stats["present_today"] == 1
        assert stats["current_month_revenue"] == Decimal("3700")

    def test_recent_members_newest_first(self, db, tenant, make_member):
        for hour, name in enumerate(("First", "Second", "Third")):
            member = make_member(tenant, name=name)
            member.created_at = datetime(2024, 3, 15, 8 + hour, 0)
            db.add(member)
        db.commit()
        recent = aggregation.recent_members(db, tenant.id, limit=2)
        assert [m.name for m in recent] == ["Third", "Second"]

    def test_member_report_filters(self, db, tenant, make_member):
        make_member(tenant, name="Jan", join_date=date(2024, 1, 10))
        make_member(tenant, name="Mar", plan="Yearly", join_date=date(2024, 3, 1))
        make_member(tenant, name="Old", join_date=date(2023, 6, 1))

        everyone = aggregation.member_report(db, tenant.id)
        assert everyone["summary"] == {"count": 3, "active": 1}

        yearly = aggregation.member_report(db, tenant.id, plan="Yearly")
        assert [m.name for m in yearly["data"]] == ["Mar"]

        in_2024 = aggregation.member_report(db, tenant.id, join_start=date(2024, 1, 1), join_end=date(2024, 12, 31))
        assert [m.name for m in in_2024["data"]] == ["Mar", "Jan"]

        inactive = aggregation.member_report(db, tenant.id, status="Inactive")
        assert inactive["summary"] == {"count": 2, "active": 0}
