"""Tests for chronotype classification and sleep metrics."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from sleep_tracker.errors import NotFoundError
from sleep_tracker.models import SleepSession
from sleep_tracker.schemas.insights import Chronotype
from sleep_tracker.services.chronotype import (
    ChronotypeService,
    classify,
    median,
    minutes_to_time_string,
)
from sleep_tracker.services.metrics import MetricsService, compute_stats, round_half_up

NOW = datetime(2024, 2, 1, 12, 0, tzinfo=timezone.utc)


def add_session(db, user_id, start, end, quality=7, sleep_type="CORE", zone="UTC"):
    session = SleepSession(
        user_id=user_id,
        start_at=start,
        end_at=end,
        quality=quality,
        type=sleep_type,
        local_timezone=zone,
    )
    db.add(session)
    db.commit()
    return session


def add_nights(db, user_id, count, hour, minute=0, length=timedelta(hours=8), zone="UTC"):
    """One session per night ending before NOW, starting at hour:minute UTC."""
    for days_back in range(1, count + 1):
        day = (NOW - timedelta(days=days_back)).replace(hour=0, minute=0)
        start = day + timedelta(hours=hour, minutes=minute) - timedelta(days=1)
        add_session(db, user_id, start, start + length, zone=zone)


class TestChronotypeHelpers:
    """Tests for the pure chronotype helpers."""

    def test_median_odd(self):
        assert median([300, 60, 120]) == 120

    def test_median_even_truncates(self):
        assert median([60, 121]) == 90
        assert median([100, 200, 300, 400]) == 250

    def test_median_empty(self):
        assert median([]) == 0

    @pytest.mark.parametrize(
        "minutes, expected",
        [
            (0, Chronotype.EARLY_BIRD),
            (149, Chronotype.EARLY_BIRD),
            (150, Chronotype.INTERMEDIATE),
            (269, Chronotype.INTERMEDIATE),
            (270, Chronotype.NIGHT_OWL),
            (600, Chronotype.NIGHT_OWL),
        ],
    )
    def test_classify_thresholds(self, minutes, expected):
        assert classify(minutes) == expected

    def test_minutes_to_time_string(self):
        assert minutes_to_time_string(0) == "00:00"
        assert minutes_to_time_string(185) == "03:05"
        assert minutes_to_time_string(1439) == "23:59"


class TestChronotypeService:
    """Tests for ChronotypeService.compute."""

    def test_unknown_with_too_few_sleeps(self, db_session, make_user):
        user = make_user()
        add_nights(db_session, user.id, 3, hour=23)

        result = ChronotypeService(db_session).compute(user.id, min_sleeps=7, now=NOW)

        assert result.chronotype == Chronotype.UNKNOWN
        assert result.sleeps_used == 3
        assert result.mid_sleep_local_time == ""

    def test_intermediate_sleeper(self, db_session, make_user):
        """23:00 to 07:00 UTC puts mid-sleep at 03:00."""
        user = make_user()
        add_nights(db_session, user.id, 7, hour=23)

        result = ChronotypeService(db_session).compute(user.id, now=NOW)

        assert result.chronotype == Chronotype.INTERMEDIATE
        assert result.mid_sleep_local_time == "03:00"
        assert result.mid_sleep_minutes_after_midnight == 180
        assert result.sleeps_used == 7
        assert result.window_days == 30

    def test_early_bird(self, db_session, make_user):
        user = make_user()
        add_nights(db_session, user.id, 5, hour=21)

        result = ChronotypeService(db_session).compute(user.id, min_sleeps=5, now=NOW)

        assert result.chronotype == Chronotype.EARLY_BIRD
        assert result.mid_sleep_local_time == "01:00"

    def test_mid_sleep_uses_session_zone(self, db_session, make_user):
        """The same UTC night is a night owl's sleep in New York."""
        user = make_user()
        add_nights(db_session, user.id, 5, hour=23, zone="America/New_York")

        result = ChronotypeService(db_session).compute(user.id, min_sleeps=5, now=NOW)

        assert result.mid_sleep_local_time == "22:00"
        assert result.chronotype == Chronotype.NIGHT_OWL

    def test_short_sleeps_are_ignored(self, db_session, make_user):
        user = make_user()
        add_nights(db_session, user.id, 5, hour=23)
        add_nights(db_session, user.id, 5, hour=13, length=timedelta(minutes=45))

        result = ChronotypeService(db_session).compute(user.id, min_sleeps=5, now=NOW)

        assert result.sleeps_used == 5

    def test_window_excludes_old_sessions(self, db_session, make_user):
        user = make_user()
        add_nights(db_session, user.id, 10, hour=23)

        result = ChronotypeService(db_session).compute(
            user.id, window_days=4, min_sleeps=1, now=NOW
        )

        # The fourth night ended before the window opened
        assert result.sleeps_used == 3

    def test_unknown_user(self, db_session):
        with pytest.raises(NotFoundError):
            ChronotypeService(db_session).compute(uuid.uuid4(), now=NOW)


def test_round_half_up():
    assert round_half_up(0.125, 2) == 0.13
    assert round_half_up(66.66666, 1) == 66.7
    assert round_half_up(0.25, 1) == 0.3


def test_compute_stats():
    stats = compute_stats([6.0, 7.0, 8.0])
    assert (stats.avg, stats.std, stats.min, stats.max) == (7.0, 1.0, 6.0, 8.0)


def test_compute_stats_single_value_has_zero_std():
    stats = compute_stats([7.5])
    assert stats.std == 0.0
    assert stats.avg == 7.5


class TestMetricsService:
    """Tests for MetricsService windows."""

    @pytest.fixture
    def sleeper(self, db_session, make_user):
        user = make_user()
        utc = lambda *args: datetime(*args, tzinfo=timezone.utc)  # noqa: E731
        add_session(db_session, user.id, utc(2024, 1, 1, 23), utc(2024, 1, 2, 7), quality=8)
        add_session(db_session, user.id, utc(2024, 1, 2, 23), utc(2024, 1, 3, 6), quality=6)
        add_session(db_session, user.id, utc(2024, 1, 3, 22), utc(2024, 1, 4, 4), quality=7)
        add_session(
            db_session, user.id, utc(2024, 1, 4, 13), utc(2024, 1, 4, 13, 30), 5, "NAP"
        )
        return user

    def window(self, db_session, user):
        return MetricsService(db_session).compute_window(
            user.id,
            datetime(2024, 1, 1, tzinfo=timezone.utc),
            datetime(2024, 1, 5, tzinfo=timezone.utc),
        )

    def test_per_sleep_excludes_short_naps(self, db_session, sleeper):
        metrics = self.window(db_session, sleeper).per_sleep

        assert metrics.sleep_count == 3
        assert (metrics.duration.avg, metrics.duration.std) == (7.0, 1.0)
        assert (metrics.duration.min, metrics.duration.max) == (6.0, 8.0)
        assert metrics.quality.avg == 7.0
        assert metrics.bedtime.avg == 1360.0
        assert metrics.bedtime.std == 34.64

    def test_daily_totals_include_naps(self, db_session, sleeper):
        daily = self.window(db_session, sleeper).daily_overall

        assert daily.days_count == 3
        assert daily.target_hours == 7.0
        assert daily.days_meeting_target == 2
        assert daily.daily_sufficiency_score == 66.7
        assert daily.total_daily_hours.min == 6.5
        assert daily.total_daily_hours.max == 8.0
        assert daily.total_daily_hours.avg == 7.17

    def test_scores(self, db_session, sleeper):
        scores = self.window(db_session, sleeper).scores

        assert scores.consistency_score == 71.1
        assert scores.sufficiency_score == 50.0
        assert scores.overall_sleep_score == pytest.approx(63.45, abs=0.06)

    def test_empty_window(self, db_session, make_user):
        user = make_user()
        window = MetricsService(db_session).compute_window(
            user.id, NOW - timedelta(days=7), NOW
        )

        assert window.per_sleep.sleep_count == 0
        assert window.daily_overall.days_count == 0
        assert window.daily_overall.target_hours == 7.0
        assert window.scores.overall_sleep_score == 0.0

    def test_daily_totals_use_local_end_date(self, db_session, make_user):
        """Two sessions on different UTC dates can share one local day."""
        user = make_user()
        utc = lambda *args: datetime(*args, tzinfo=timezone.utc)  # noqa: E731
        add_session(
            db_session, user.id, utc(2024, 1, 1, 18), utc(2024, 1, 1, 23, 30), zone="Asia/Tokyo"
        )
        add_session(
            db_session, user.id, utc(2024, 1, 2, 4), utc(2024, 1, 2, 6), zone="Asia/Tokyo"
        )

        window = MetricsService(db_session).compute_window(
            user.id, utc(2024, 1, 1), utc(2024, 1, 3)
        )

        assert window.daily_overall.days_count == 1
        assert window.daily_overall.total_daily_hours.avg == 7.5

    def test_compute_uses_trailing_window(self, db_session, sleeper):
        result = MetricsService(db_session).compute(
            sleeper.id, window_days=30, now=datetime(2024, 1, 10, tzinfo=timezone.utc)
        )

        assert result.per_sleep.sleep_count == 3
        assert result.window.to == datetime(2024, 1, 10, tzinfo=timezone.utc)
        assert result.window.from_ == datetime(2023, 12, 11, tzinfo=timezone.utc)
