from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from school_records.core.enums import Role
from school_records.core.exceptions import NotFoundError, ValidationError
from school_records.marks.service import MarkChanges, NewMark


@pytest.fixture
def setup(store):
    teacher = store.add_user("Tina Teacher", Role.TEACHER)
    student = store.add_user("Sam Student", Role.STUDENT)
    class_5a = store.add_class("5A")
    math = store.add_subject("Math", "MATH")
    return teacher, student, class_5a, math


def _new(student, school_class, subject, score, max_score=None, **kwargs):
    return NewMark(
        student_id=student.user_id,
        class_id=school_class.class_id,
        subject_id=subject.subject_id,
        exam_type=kwargs.pop("exam_type", "Quiz"),
        score=Decimal(score),
        max_score=Decimal(max_score) if max_score is not None else None,
        **kwargs,
    )


def test_add_mark_derives_percentage_and_grade(container, setup, fixed_now):
    teacher, student, class_5a, math = setup

    view = container.mark_service.add(_new(student, class_5a, math, "42", "50"), graded_by=teacher.user_id)

    assert view.mark.percentage == Decimal("84.00")
    assert view.mark.grade == "A-"
    assert view.subject.name == "Math"
    assert view.graded_by.user_id == teacher.user_id


def test_add_mark_defaults_max_score_and_exam_date(container, setup, fixed_now):
    teacher, student, class_5a, math = setup

    view = container.mark_service.add(_new(student, class_5a, math, "90"), graded_by=teacher.user_id)

    assert view.mark.max_score == Decimal("100")
    assert view.mark.exam_date == fixed_now.date()
    assert view.mark.grade == "A+"


def test_add_same_exam_twice_keeps_both_rows(container, store, setup, fixed_now):
    teacher, student, class_5a, math = setup
    new = _new(student, class_5a, math, "70", exam_type="Midterm", exam_date=date(2024, 10, 1))

    container.mark_service.add(new, graded_by=teacher.user_id)
    container.mark_service.add(new, graded_by=teacher.user_id)

    assert len(store.marks.rows) == 2


def test_add_mark_requires_existing_references(container, store, setup):
    teacher, student, class_5a, math = setup
    svc = container.mark_service

    with pytest.raises(NotFoundError, match="Student not found"):
        svc.add(NewMark("ghost", class_5a.class_id, math.subject_id, "Quiz", Decimal("1")), graded_by=teacher.user_id)
    with pytest.raises(NotFoundError, match="Class not found"):
        svc.add(NewMark(student.user_id, "ghost", math.subject_id, "Quiz", Decimal("1")), graded_by=teacher.user_id)
    with pytest.raises(NotFoundError, match="Subject not found"):
        svc.add(NewMark(student.user_id, class_5a.class_id, "ghost", "Quiz", Decimal("1")), graded_by=teacher.user_id)
    with pytest.raises(ValidationError, match="Exam type"):
        svc.add(NewMark(student.user_id, class_5a.class_id, math.subject_id, " ", Decimal("1")), graded_by=teacher.user_id)

    assert store.marks.rows == {}


def test_bulk_add_keeps_items_before_the_failing_one(container, store, setup, fixed_now):
    teacher, student, class_5a, math = setup
    items = [
        _new(student, class_5a, math, "80"),
        NewMark(student.user_id, class_5a.class_id, "ghost", "Quiz", Decimal("50")),
        _new(student, class_5a, math, "60"),
    ]

    with pytest.raises(NotFoundError):
        container.mark_service.add_bulk(items, graded_by=teacher.user_id)

    (kept,) = store.marks.rows.values()
    assert kept.score == Decimal("80")


def test_update_overwrites_required_fields_and_keeps_omitted_ones(container, store, setup, fixed_now):
    teacher, student, class_5a, math = setup
    admin = store.add_user("Ada Admin", Role.ADMIN)
    created = container.mark_service.add(
        _new(student, class_5a, math, "40", "50", exam_date=date(2024, 9, 20), notes="first try"),
        graded_by=teacher.user_id,
    )

    view = container.mark_service.update(
        created.mark.mark_id,
        MarkChanges(exam_type="Final", score=Decimal("45")),
        graded_by=admin.user_id,
    )

    assert view.mark.exam_type == "Final"
    assert view.mark.score == Decimal("45")
    assert view.mark.max_score == Decimal("50")
    assert view.mark.exam_date == date(2024, 9, 20)
    assert view.mark.notes == "first try"
    assert view.mark.graded_by == admin.user_id
    assert view.mark.percentage == Decimal("90.00")


def test_update_applies_optional_fields_when_given(container, setup, fixed_now):
    teacher, student, class_5a, math = setup
    created = container.mark_service.add(_new(student, class_5a, math, "40", "50"), graded_by=teacher.user_id)

    view = container.mark_service.update(
        created.mark.mark_id,
        MarkChanges(
            exam_type="Quiz",
            score=Decimal("40"),
            max_score=Decimal("80"),
            exam_date=date(2024, 9, 30),
            notes="regraded",
        ),
        graded_by=teacher.user_id,
    )

    assert view.mark.max_score == Decimal("80")
    assert view.mark.exam_date == date(2024, 9, 30)
    assert view.mark.notes == "regraded"
    assert view.mark.grade == "C-"


def test_update_and_delete_unknown_mark(container, setup):
    teacher, *_ = setup

    with pytest.raises(NotFoundError, match="Mark not found"):
        container.mark_service.update("ghost", MarkChanges(exam_type="Quiz", score=Decimal("1")), graded_by=teacher.user_id)
    with pytest.raises(NotFoundError, match="Mark not found"):
        container.mark_service.delete("ghost")


def test_averages_are_none_without_marks(container, setup):
    _, student, class_5a, math = setup

    assert container.mark_service.student_average(student.user_id) is None
    assert container.mark_service.class_subject_average(class_5a.class_id, math.subject_id) is None


def test_averages_use_unrounded_percentages(container, store, setup, fixed_now):
    teacher, student, class_5a, math = setup
    physics = store.add_subject("Physics", "PHY")
    svc = container.mark_service
    svc.add(_new(student, class_5a, math, "1", "3"), graded_by=teacher.user_id)
    svc.add(_new(student, class_5a, math, "2", "3"), graded_by=teacher.user_id)
    svc.add(_new(student, class_5a, physics, "42", "50"), graded_by=teacher.user_id)

    assert svc.class_subject_average(class_5a.class_id, math.subject_id) == Decimal("50.00")
    # (33.33.. + 66.66.. + 84) / 3
    assert svc.student_average(student.user_id) == Decimal("61.33")


def test_student_marks_listing_is_newest_exam_first(container, setup):
    teacher, student, class_5a, math = setup
    svc = container.mark_service
    for day in (5, 20, 12):
        svc.add(_new(student, class_5a, math, "50", exam_date=date(2024, 9, day)), graded_by=teacher.user_id)

    dates = [v.mark.exam_date.day for v in svc.marks_for_student(student.user_id)]

    assert dates == [20, 12, 5]
    assert len(svc.marks_for_class_subject(class_5a.class_id, math.subject_id)) == 3
