from datetime import date

from hrpayroll.domains.payroll.workdays import is_open_month, month_bounds, working_dates, working_days_in_month

FRI_SAT = (4, 5)


def test_month_bounds_handles_leap_year():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))


def test_working_days_exclude_weekend():
    assert working_days_in_month(2024, 3, FRI_SAT) == 21
    assert working_days_in_month(2024, 2, FRI_SAT) == 21
    assert all(day.weekday() not in FRI_SAT for day in working_dates(2024, 3, FRI_SAT))


def test_working_days_up_to_day():
    assert working_dates(2024, 3, FRI_SAT, up_to_day=10) == [
        date(2024, 3, 3),
        date(2024, 3, 4),
        date(2024, 3, 5),
        date(2024, 3, 6),
        date(2024, 3, 7),
        date(2024, 3, 10),
    ]


def test_no_weekend_counts_every_day():
    assert working_days_in_month(2024, 4, ()) == 30


def test_is_open_month():
    assert is_open_month(2024, 3, date(2024, 3, 15))
    assert not is_open_month(2024, 3, date(2024, 4, 1))
