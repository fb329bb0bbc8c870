from datetime import date, datetime, time, timedelta

from backend.models.booking import Booking
from backend.models.time_slot import SLOT_AVAILABLE, SLOT_BLOCKED, SLOT_BOOKED, TimeSlot
from backend.scheduling.bookings import IdentifiedStudent, book_slot, transition_booking
from backend.scheduling.queries import (
    available_counts,
    list_counselor_bookings,
    list_slots,
    list_student_bookings,
    summarize_counselor_bookings,
)


def _add_slot(db, counselor_id: int, slot_date: date, start: time, status: str = SLOT_AVAILABLE) -> TimeSlot:
    slot = TimeSlot(
        counselor_id=counselor_id,
        date=slot_date,
        start_time=start,
        end_time=time(start.hour + 1, start.minute),
        status=status,
    )
    db.add(slot)
    db.commit()
    db.refresh(slot)
    return slot


def test_list_slots_orders_by_date_then_start(db, make_counselor) -> None:
    counselor = make_counselor()
    day = date(2026, 5, 4)
    _add_slot(db, counselor.id, day + timedelta(days=1), time(9, 0))
    _add_slot(db, counselor.id, day, time(14, 0))
    _add_slot(db, counselor.id, day, time(9, 0))
    _add_slot(db, counselor.id, day + timedelta(days=5), time(9, 0))

    slots = list_slots(db, counselor.id, day, day + timedelta(days=1))

    assert [(slot.date, slot.start_time) for slot in slots] == [
        (day, time(9, 0)),
        (day, time(14, 0)),
        (day + timedelta(days=1), time(9, 0)),
    ]


def test_available_counts_only_counts_future_available_slots(db, make_counselor) -> None:
    counselor = make_counselor()
    today = date(2026, 5, 4)
    _add_slot(db, counselor.id, today - timedelta(days=1), time(9, 0))
    _add_slot(db, counselor.id, today, time(9, 0))
    _add_slot(db, counselor.id, today, time(11, 0))
    _add_slot(db, counselor.id, today, time(13, 0), status=SLOT_BOOKED)
    _add_slot(db, counselor.id, today + timedelta(days=2), time(9, 0), status=SLOT_BLOCKED)
    _add_slot(db, counselor.id, today + timedelta(days=3), time(9, 0))

    counts = available_counts(db, counselor.id, today=today)

    assert counts == {today: 2, today + timedelta(days=3): 1}


def test_booking_listings_are_scoped(db, make_profile, monday_slot) -> None:
    counselor, slot = monday_slot
    student = make_profile('student@campus.edu')
    other_student = make_profile('other@campus.edu')
    booking = book_slot(db, slot.id, IdentifiedStudent(student_id=student.id))

    assert [item.id for item in list_counselor_bookings(db, counselor.id)] == [booking.id]
    assert [item.id for item in list_student_bookings(db, student.id)] == [booking.id]
    assert list_student_bookings(db, other_student.id) == []


def test_summarize_counselor_bookings(db, make_counselor, make_profile) -> None:
    counselor = make_counselor()
    student = make_profile('student@campus.edu')
    today = date(2026, 5, 4)
    statuses = [
        (today, time(9, 0), 'pending'),
        (today, time(11, 0), 'completed'),
        (today + timedelta(days=1), time(9, 0), 'pending'),
        (today + timedelta(days=2), time(9, 0), 'cancelled'),
    ]
    for slot_date, start, status in statuses:
        slot = _add_slot(db, counselor.id, slot_date, start, status=SLOT_BOOKED)
        db.add(Booking(
            student_id=student.id,
            counselor_id=counselor.id,
            time_slot_id=slot.id,
            appointment_at=datetime.combine(slot_date, start),
            status=status,
            communication_mode='video',
        ))
    db.commit()

    summary = summarize_counselor_bookings(db, counselor.id, today=today)

    assert summary.total == 4
    assert summary.today == 2
    assert summary.pending == 2
    assert summary.completed == 1


def test_summary_reflects_transitions(db, make_profile, monday_slot, next_monday) -> None:
    counselor, slot = monday_slot
    student = make_profile('student@campus.edu')
    booking = book_slot(db, slot.id, IdentifiedStudent(student_id=student.id))
    transition_booking(db, booking.id, 'confirmed', counselor.id)

    summary = summarize_counselor_bookings(db, counselor.id, today=next_monday)

    assert (summary.total, summary.today, summary.pending, summary.completed) == (1, 1, 0, 0)
