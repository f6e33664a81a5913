from datetime import UTC, datetime, timedelta

import pytest

from core.sm2 import MIN_EASE, schedule_review
from errors import ValidationFailed

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def test_perfect_recall_third_repetition():
    s = schedule_review(5, ease_factor=2.5, interval=6, repetitions=2, now=NOW)
    assert s.ease_factor == pytest.approx(2.6)
    assert s.repetitions == 3
    assert s.interval == 16  # round(6 * 2.6)
    assert s.next_review_date == NOW + timedelta(days=16)


def test_failed_recall_resets_schedule():
    s = schedule_review(2, ease_factor=2.5, interval=6, repetitions=2, now=NOW)
    assert s.ease_factor == pytest.approx(2.18)
    assert s.repetitions == 0
    assert s.interval == 0
    # due again right away
    assert s.next_review_date == NOW


def test_first_review_of_fresh_card():
    s = schedule_review(4, now=NOW)
    assert s.repetitions == 1
    assert s.interval == 1
    assert s.ease_factor == pytest.approx(2.5)


def test_success_sequence_from_fresh_card():
    s1 = schedule_review(4, now=NOW)
    s2 = schedule_review(4, s1.ease_factor, s1.interval, s1.repetitions, now=NOW)
    s3 = schedule_review(5, s2.ease_factor, s2.interval, s2.repetitions, now=NOW)
    assert (s1.interval, s2.interval) == (1, 6)
    assert s3.repetitions == 3
    assert s3.interval == round(6 * s3.ease_factor)


def test_interval_rounds_half_up():
    # 5 * 2.5 = 12.5 -> 13 (half-up), not 12 (banker's)
    s = schedule_review(4, ease_factor=2.5, interval=5, repetitions=2, now=NOW)
    assert s.ease_factor == pytest.approx(2.5)
    assert s.interval == 13


@pytest.mark.parametrize("quality", range(6))
@pytest.mark.parametrize("ease", [1.3, 1.31, 1.5, 2.5, 3.0])
def test_ease_never_below_floor(quality, ease):
    s = schedule_review(quality, ease_factor=ease, interval=10, repetitions=4, now=NOW)
    assert s.ease_factor >= MIN_EASE


@pytest.mark.parametrize("quality", [0, 1, 2])
def test_low_quality_always_resets(quality):
    s = schedule_review(quality, ease_factor=2.8, interval=40, repetitions=7, now=NOW)
    assert s.repetitions == 0
    assert s.interval == 0


@pytest.mark.parametrize("bad", [-1, 6, 2.5, "3", None, True])
def test_rejects_out_of_range_quality(bad):
    with pytest.raises(ValidationFailed):
        schedule_review(bad, now=NOW)
