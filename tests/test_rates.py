import pytest

from app.utils.errors import InvalidDuration, ValidationFailed
from app.utils.rates import RATE_TABLE, SessionRate, calculate_rate, check_published_rates, get_rate, parse_duration


@pytest.mark.parametrize('duration, total, teacher, company', [
    (0.5, 63, 50, 13),
    (1, 125, 100, 25),
    (1.5, 188, 150, 38),
    (2, 250, 200, 50),
])
def test_rate_table(duration, total, teacher, company):
    rate = get_rate(duration)
    assert (rate.total_rate, rate.teacher_share, rate.company_share) == (total, teacher, company)
    assert rate.total_rate == rate.teacher_share + rate.company_share


def test_formula_matches_table_for_canonical_durations():
    for duration, rate in RATE_TABLE.items():
        assert calculate_rate(duration) == rate


def test_drifted_rate_table_fails_loudly():
    check_published_rates(RATE_TABLE)

    drifted = dict(RATE_TABLE)
    drifted[1.0] = SessionRate(1.0, 130, 100, 30)
    with pytest.raises(RuntimeError):
        check_published_rates(drifted)

    missing = {d: r for d, r in RATE_TABLE.items() if d != 2.0}
    with pytest.raises(RuntimeError):
        check_published_rates(missing)


def test_formula_handles_longer_sessions():
    rate = calculate_rate(2.75)
    assert rate.total_rate == 2 * 125 + 63
    assert rate.teacher_share == 2 * 100 + 50
    assert rate.company_share == 63

    short = calculate_rate(0.25)
    assert short.total_rate == 0
    assert short.teacher_share == 0


@pytest.mark.parametrize('label, hours', [
    ('30 minutes', 0.5),
    ('1 hour', 1.0),
    ('1.5 hours', 1.5),
    ('2 Hours', 2.0),
    ('1.5', 1.5),
    (2, 2.0),
])
def test_parse_duration_accepts_numbers_and_labels(label, hours):
    assert parse_duration(label) == hours


@pytest.mark.parametrize('value', [0.75, 3, 0, 'abc', None, True, -1])
def test_unknown_durations_are_rejected(value):
    with pytest.raises(InvalidDuration) as exc:
        get_rate(value)
    assert isinstance(exc.value, ValidationFailed)
    assert 'duration' in exc.value.details


def test_negative_duration_rejected_by_formula():
    with pytest.raises(InvalidDuration):
        calculate_rate(-0.5)
