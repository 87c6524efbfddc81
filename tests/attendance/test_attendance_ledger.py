from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import pytest

from school_records.attendance.service import MarkAttendance, StudentStatus, attendance_percentage
from school_records.core.enums import AttendanceStatus, Role
from school_records.core.exceptions import NotFoundError


@pytest.fixture
def people(store):
    teacher = store.add_user("Tina Teacher", Role.TEACHER)
    students = [store.add_user(name, Role.STUDENT) for name in ("Amy Student", "Ben Student", "Cal Student")]
    class_5a = store.add_class("5A")
    return teacher, students, class_5a


def test_remark_same_day_updates_the_single_record(container, store, people, school_day):
    teacher, (sam, *_), class_5a = people
    ledger = container.attendance_service

    first = ledger.mark(
        MarkAttendance(sam.user_id, class_5a.class_id, school_day, AttendanceStatus.PRESENT),
        marked_by=teacher.user_id,
    )
    stats = ledger.stats_for_student(sam.user_id)
    assert (stats.total_days, stats.present_days) == (1, 1)
    assert stats.attendance_percentage == Decimal("100.00")

    second = ledger.mark(
        MarkAttendance(sam.user_id, class_5a.class_id, school_day, AttendanceStatus.ABSENT, notes="sick"),
        marked_by=teacher.user_id,
    )

    assert len(store.attendance.rows) == 1
    assert second.record.attendance_id == first.record.attendance_id
    assert second.record.status == AttendanceStatus.ABSENT
    assert second.record.notes == "sick"

    stats = ledger.stats_for_student(sam.user_id)
    assert (stats.total_days, stats.absent_days, stats.present_days) == (1, 1, 0)
    assert stats.attendance_percentage == Decimal("0.00")


def test_remark_records_the_latest_marker(container, store, people, school_day):
    teacher, (sam, *_), class_5a = people
    admin = store.add_user("Ada Admin", Role.ADMIN)
    ledger = container.attendance_service
    request = MarkAttendance(sam.user_id, class_5a.class_id, school_day, AttendanceStatus.LATE)

    ledger.mark(request, marked_by=teacher.user_id)
    view = ledger.mark(request, marked_by=admin.user_id)

    assert view.marked_by.user_id == admin.user_id


def test_stats_buckets_sum_to_total_and_late_counts_as_present(container, people, school_day):
    teacher, (sam, *_), class_5a = people
    ledger = container.attendance_service
    statuses = [
        AttendanceStatus.PRESENT,
        AttendanceStatus.PRESENT,
        AttendanceStatus.LATE,
        AttendanceStatus.ABSENT,
        AttendanceStatus.EXCUSED,
    ]
    for offset, status in enumerate(statuses):
        ledger.mark(
            MarkAttendance(sam.user_id, class_5a.class_id, school_day + timedelta(days=offset), status),
            marked_by=teacher.user_id,
        )

    stats = ledger.stats_for_student(sam.user_id)

    assert stats.present_days + stats.absent_days + stats.late_days + stats.excused_days == stats.total_days == 5
    assert stats.late_days == 1
    assert stats.attendance_percentage == Decimal("60.00")


def test_stats_for_student_without_records_is_zero(container, people):
    _, (sam, *_), _ = people

    stats = container.attendance_service.stats_for_student(sam.user_id)

    assert stats.total_days == 0
    assert stats.attendance_percentage == Decimal("0")


@pytest.mark.parametrize(
    "present, late, total, expected",
    [
        (1, 0, 3, Decimal("33.33")),
        (1, 1, 3, Decimal("66.67")),
        (0, 1, 8, Decimal("12.50")),
        (3, 0, 3, Decimal("100.00")),
        (0, 0, 0, Decimal("0.00")),
    ],
)
def test_attendance_percentage_rounding(present, late, total, expected):
    assert attendance_percentage(present=present, late=late, total=total) == expected


def test_mark_unknown_student_or_class(container, people, school_day):
    teacher, (sam, *_), class_5a = people
    ledger = container.attendance_service

    with pytest.raises(NotFoundError, match="Student not found"):
        ledger.mark(MarkAttendance("ghost", class_5a.class_id, school_day, AttendanceStatus.PRESENT), marked_by=teacher.user_id)
    with pytest.raises(NotFoundError, match="Class not found"):
        ledger.mark(MarkAttendance(sam.user_id, "ghost", school_day, AttendanceStatus.PRESENT), marked_by=teacher.user_id)


def test_class_roll_call_with_unknown_student_writes_nothing(container, store, people, school_day):
    teacher, students, class_5a = people
    entries = [StudentStatus(s.user_id, AttendanceStatus.PRESENT) for s in students[:2]]
    entries.append(StudentStatus("ghost", AttendanceStatus.PRESENT))

    with pytest.raises(NotFoundError, match="Student not found: ghost"):
        container.attendance_service.mark_class(
            class_id=class_5a.class_id,
            attendance_date=school_day,
            entries=entries,
            marked_by=teacher.user_id,
        )

    assert store.attendance.rows == {}


def test_class_roll_call_checks_class_first(container, people, school_day):
    teacher, students, _ = people

    with pytest.raises(NotFoundError, match="Class not found"):
        container.attendance_service.mark_class(
            class_id="ghost",
            attendance_date=school_day,
            entries=[StudentStatus(students[0].user_id, AttendanceStatus.PRESENT)],
            marked_by=teacher.user_id,
        )


def test_class_roll_call_returns_one_view_per_entry_in_order(container, store, people, school_day):
    teacher, students, class_5a = people
    entries = [
        StudentStatus(students[2].user_id, AttendanceStatus.LATE),
        StudentStatus(students[0].user_id, AttendanceStatus.PRESENT),
        StudentStatus(students[1].user_id, AttendanceStatus.ABSENT, notes="flu"),
    ]

    views = container.attendance_service.mark_class(
        class_id=class_5a.class_id,
        attendance_date=school_day,
        entries=entries,
        marked_by=teacher.user_id,
    )

    assert [v.student.user_id for v in views] == [e.student_id for e in entries]
    assert [v.record.status for v in views] == [e.status for e in entries]
    assert len(container.attendance_service.class_on_date(class_5a.class_id, school_day)) == 3
    assert container.attendance_service.class_on_date(class_5a.class_id, date(2024, 9, 2)) == []


def test_list_bulk_failure_rolls_back_earlier_updates(container, store, people, school_day):
    teacher, (sam, ben, _), class_5a = people
    ledger = container.attendance_service
    ledger.mark(MarkAttendance(sam.user_id, class_5a.class_id, school_day, AttendanceStatus.PRESENT), marked_by=teacher.user_id)

    batch = [
        MarkAttendance(sam.user_id, class_5a.class_id, school_day, AttendanceStatus.ABSENT),
        MarkAttendance(ben.user_id, class_5a.class_id, school_day, AttendanceStatus.PRESENT),
        MarkAttendance("ghost", class_5a.class_id, school_day, AttendanceStatus.PRESENT),
    ]
    with pytest.raises(NotFoundError):
        ledger.mark_bulk(batch, marked_by=teacher.user_id)

    (only,) = store.attendance.rows.values()
    assert only.student_id == sam.user_id
    assert only.status == AttendanceStatus.PRESENT


def test_list_bulk_upserts_each_item(container, store, people, school_day):
    teacher, (sam, ben, _), class_5a = people
    batch = [
        MarkAttendance(sam.user_id, class_5a.class_id, school_day, AttendanceStatus.PRESENT),
        MarkAttendance(ben.user_id, class_5a.class_id, school_day, AttendanceStatus.PRESENT),
        MarkAttendance(sam.user_id, class_5a.class_id, school_day, AttendanceStatus.LATE),
    ]

    views = container.attendance_service.mark_bulk(batch, marked_by=teacher.user_id)

    assert len(views) == 3
    assert len(store.attendance.rows) == 2
    assert views[0].record.attendance_id == views[2].record.attendance_id
    assert views[2].record.status == AttendanceStatus.LATE


def test_insert_race_is_recovered_as_update(container, store, people, school_day, monkeypatch):
    teacher, (sam, *_), class_5a = people
    other_id = store.attendance.create_record(
        student_id=sam.user_id,
        class_id=class_5a.class_id,
        attendance_date=school_day,
        status=AttendanceStatus.PRESENT,
        notes=None,
        marked_by=teacher.user_id,
    )

    real_lookup = store.attendance.get_for_key
    calls = []

    def lookup_missing_first(**kwargs):
        calls.append(kwargs)
        return None if len(calls) == 1 else real_lookup(**kwargs)

    monkeypatch.setattr(store.attendance, "get_for_key", lookup_missing_first)

    view = container.attendance_service.mark(
        MarkAttendance(sam.user_id, class_5a.class_id, school_day, AttendanceStatus.ABSENT),
        marked_by=teacher.user_id,
    )

    assert view.record.attendance_id == other_id
    assert view.record.status == AttendanceStatus.ABSENT
    assert len(store.attendance.rows) == 1


def test_blocked_first_insert_locks_only_the_committed_row(container, store, people, school_day, monkeypatch):
    teacher, (sam, *_), class_5a = people
    real_lookup = store.attendance.get_for_key
    real_create = store.attendance.create_record
    locking = []
    winner = {}

    def lookup(**kwargs):
        locking.append(kwargs.get("for_update", False))
        return real_lookup(**kwargs)

    def create_after_competitor_commits(**kwargs):
        # The competing mark's insert commits while ours waits on its row.
        winner["id"] = real_create(**{**kwargs, "status": AttendanceStatus.PRESENT, "marked_by": teacher.user_id})
        return real_create(**kwargs)

    monkeypatch.setattr(store.attendance, "get_for_key", lookup)
    monkeypatch.setattr(store.attendance, "create_record", create_after_competitor_commits)

    view = container.attendance_service.mark(
        MarkAttendance(sam.user_id, class_5a.class_id, school_day, AttendanceStatus.LATE, notes="bus"),
        marked_by=teacher.user_id,
    )

    assert locking == [False, True]
    assert view.record.attendance_id == winner["id"]
    assert view.record.status == AttendanceStatus.LATE
    assert view.record.notes == "bus"
    assert len(store.attendance.rows) == 1


def test_delete_and_history(container, store, people, school_day):
    teacher, (sam, *_), class_5a = people
    ledger = container.attendance_service
    for offset in range(3):
        ledger.mark(
            MarkAttendance(sam.user_id, class_5a.class_id, school_day + timedelta(days=offset), AttendanceStatus.PRESENT),
            marked_by=teacher.user_id,
        )

    history = ledger.history_for_student(sam.user_id)
    assert [v.record.attendance_date for v in history] == [
        school_day + timedelta(days=2),
        school_day + timedelta(days=1),
        school_day,
    ]

    ledger.delete(history[0].record.attendance_id)
    assert len(store.attendance.rows) == 2
    with pytest.raises(NotFoundError, match="Attendance record not found"):
        ledger.delete(history[0].record.attendance_id)
