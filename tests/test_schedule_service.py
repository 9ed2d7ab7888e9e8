from datetime import datetime

import pytest

from app.services.schedule_service import ScheduleService
from app.utils.errors import ValidationFailed

FULL_WEEK = {day: {'isScheduled': True, 'duration': 1} for day in ('monday', 'wednesday', 'friday')}


@pytest.fixture
def schedule_service(ctx):
    return ScheduleService(ctx)


def test_teacher_without_bookings_has_empty_schedule(schedule_service, teacher_id):
    assert schedule_service.project(str(teacher_id), 'week', 0) == []
    assert schedule_service.project(str(teacher_id), 'month', 0) == []


def test_week_earnings_count_completed_and_advance_paid(schedule_service, booking_service, make_booking, teacher_id):
    booking = make_booking(schedule=FULL_WEEK)
    booking_service.update_session_status(str(booking._id), {'monday': 'C', 'wednesday': 'A', 'friday': 'T'})

    rows = schedule_service.project(str(teacher_id), 'week', 0)

    assert len(rows) == 1
    row = rows[0]
    assert row['week_start'] == datetime(2025, 12, 1)
    assert row['week_earnings'] == 200
    assert row['company_earnings'] == 50
    assert [day['status'] for day in row['days']] == ['C', 'A', 'T']
    assert [day['earnings'] for day in row['days']] == [100, 100, 0]
    assert row['days'][0]['rate'] == 125


def test_pending_week_earns_nothing(schedule_service, make_booking, teacher_id):
    make_booking(schedule=FULL_WEEK)
    row = schedule_service.project(str(teacher_id))[0]
    assert row['week_earnings'] == 0
    assert all(not day['is_paid'] for day in row['days'])


def test_advance_absences_follow_policy(ctx, schedule_service, booking_service, make_booking, teacher_id):
    booking = make_booking()
    booking_service.update_session_status(str(booking._id), {'monday': 'AT', 'wednesday': 'AS'})

    assert schedule_service.project(str(teacher_id))[0]['week_earnings'] == 0

    ctx.count_advance_absences_as_paid = True
    assert schedule_service.project(str(teacher_id))[0]['week_earnings'] == 200


def test_sessions_are_placed_by_recorded_date(db, schedule_service, make_booking, teacher_id):
    booking = make_booking()
    # monday's session moved to the Tuesday, wednesday's recorded in the previous week
    db.bookings.update_one({'_id': booking._id}, {'$set': {
        'session_status.monday.date': datetime(2025, 12, 2),
        'session_status.monday.status': 'C',
        'session_status.wednesday.date': datetime(2025, 11, 26),
        'session_status.wednesday.status': 'C',
    }})

    rows = schedule_service.project(str(teacher_id), 'week', 0)
    assert len(rows) == 1
    assert len(rows[0]['days']) == 1
    day = rows[0]['days'][0]
    assert day['day'] == 'tuesday'
    assert day['scheduled_day'] == 'monday'
    assert rows[0]['week_earnings'] == 100

    previous = schedule_service.project(str(teacher_id), 'week', -1)
    assert len(previous) == 1
    assert previous[0]['days'][0]['day'] == 'wednesday'
    assert previous[0]['week_start'] == datetime(2025, 11, 24)


def test_week_offsets(schedule_service, make_booking, teacher_id):
    make_booking(week_start='2025-12-08')

    assert schedule_service.project(str(teacher_id), 'week', 0) == []
    rows = schedule_service.project(str(teacher_id), 'week', 1)
    assert len(rows) == 1
    assert rows[0]['week_start'] == datetime(2025, 12, 8)
    assert rows[0]['week_end'] == datetime(2025, 12, 14, 23, 59, 59, 999000)


def test_unscheduled_days_never_projected(db, schedule_service, make_booking, teacher_id):
    booking = make_booking()
    # stray status left on a day outside the weekly schedule
    db.bookings.update_one({'_id': booking._id}, {'$set': {
        'session_status.thursday': {'status': 'C', 'date': datetime(2025, 12, 4),
                                     'week_start': datetime(2025, 12, 1), 'week_end': None},
    }})

    days = schedule_service.project(str(teacher_id))[0]['days']
    assert [day['scheduled_day'] for day in days] == ['monday', 'wednesday']


def test_month_rows_sorted_by_week(schedule_service, make_booking, teacher_id):
    make_booking(week_start='2025-12-15')
    make_booking(week_start='2025-12-01')
    make_booking(week_start='2025-12-29')
    make_booking(week_start='2026-01-05')

    rows = schedule_service.project(str(teacher_id), 'month', 0)

    assert [row['week_start'] for row in rows] == [
        datetime(2025, 12, 1), datetime(2025, 12, 15), datetime(2025, 12, 29)
    ]
    # the week crossing into January is kept whole
    assert rows[-1]['week_end'] == datetime(2026, 1, 4, 23, 59, 59, 999000)


def test_month_skips_weeks_with_nothing_recorded(schedule_service, booking_service, make_booking, teacher_id):
    cleared = make_booking(week_start='2025-12-01')
    booking_service.update_session_status(str(cleared._id), {'monday': 'N', 'wednesday': 'N'})
    make_booking(week_start='2025-12-08')

    rows = schedule_service.project(str(teacher_id), 'month', 0)
    assert [row['week_start'] for row in rows] == [datetime(2025, 12, 8)]


def test_previous_month(schedule_service, make_booking, teacher_id):
    make_booking(week_start='2025-11-10')
    make_booking(week_start='2025-12-01')

    rows = schedule_service.project(str(teacher_id), 'month', -1)
    assert [row['week_start'] for row in rows] == [datetime(2025, 11, 10)]


def test_deleted_bookings_are_hidden(schedule_service, booking_service, make_booking, teacher_id):
    booking = make_booking()
    booking_service.delete_booking(str(booking._id))
    assert schedule_service.project(str(teacher_id)) == []


def test_bookings_of_other_teachers_are_hidden(schedule_service, make_booking, make_teacher, teacher_id):
    make_booking(teacher=make_teacher(name='Mr. Lim'))
    assert schedule_service.project(str(teacher_id)) == []


def test_unknown_mode_rejected(schedule_service, teacher_id):
    with pytest.raises(ValidationFailed):
        schedule_service.project(str(teacher_id), 'year', 0)


def test_summarize(schedule_service, booking_service, make_booking, teacher_id):
    first = make_booking(schedule=FULL_WEEK)
    booking_service.update_session_status(str(first._id), {'monday': 'C', 'wednesday': 'S'})
    second = make_booking(student_name='Carlo', schedule={'tuesday': {'isScheduled': True, 'duration': 1.5}})
    booking_service.set_day_status(str(second._id), 'tuesday', 'A')

    summary = schedule_service.summarize(schedule_service.project(str(teacher_id)))

    assert summary['teacher_earnings'] == 100 + 150
    assert summary['company_earnings'] == 25 + 38
    assert summary['total_revenue'] == 125 + 188
    assert summary['sessions_by_status'] == {'C': 1, 'S': 1, 'P': 1, 'A': 1}
    assert summary['paid_sessions'] == 2
    assert summary['rows'] == 2
