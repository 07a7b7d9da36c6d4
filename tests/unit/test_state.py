"""
Unit tests for per-rider rating state.
"""

import statistics

import pytest

from mxelo.elo.state import EloPoint, RatingState, round_rating


@pytest.fixture
def rider():
    return RatingState.debut(
        rider_id="rickycarmichael", name="Ricky Carmichael", seed=1500,
        date="2002-01-05", year="2002", tier="PREMIER",
    )


def _apply(state, delta, date="2002-02-01", tier="PREMIER"):
    return state.apply_delta(delta, date=date, year=date[:4], race_name="Round", tier=tier)


class TestRoundRating:

    @pytest.mark.parametrize("value,expected", [
        (1500.4, 1500),
        (1500.5, 1501),
        (1501.5, 1502),
        (-2.5, -2),
        (-2.6, -3),
        (1499.9999, 1500),
    ])
    def test_half_up(self, value, expected):
        assert round_rating(value) == expected


class TestDebut:

    def test_debut_point(self, rider):
        assert rider.history == [EloPoint("2002-01-05", 1500, "Debut")]
        assert rider.rating == 1500
        assert rider.peak_rating == 1500
        assert rider.peak_year == "2002"
        assert rider.last_race_date == "Never"
        assert rider.race_count == 1

    def test_counters_start_at_zero(self, rider):
        assert rider.tier_counts == {"PREMIER": 0, "LITES": 0, "OPEN": 0}
        assert rider.elite_races == 0
        assert rider.volatility == 0.0


class TestRecordFinish:

    @pytest.mark.parametrize("position,wins,top3,top5,top10", [
        (1, 1, 1, 1, 1),
        (3, 0, 1, 1, 1),
        (5, 0, 0, 1, 1),
        (10, 0, 0, 0, 1),
        (11, 0, 0, 0, 0),
    ])
    def test_buckets(self, rider, position, wins, top3, top5, top10):
        rider.record_finish("LITES", position)

        assert rider.tier_counts["LITES"] == 1
        assert rider.tier_wins["LITES"] == wins
        assert rider.tier_top3s["LITES"] == top3
        assert rider.tier_top5s["LITES"] == top5
        assert rider.tier_top10s["LITES"] == top10
        assert rider.tier_counts["PREMIER"] == 0

    def test_counters_never_decrease(self, rider):
        for position in (1, 12, 4, 1, 30):
            before = dict(rider.tier_counts)
            rider.record_finish("PREMIER", position)
            assert rider.tier_counts["PREMIER"] == before["PREMIER"] + 1
        assert rider.tier_wins["PREMIER"] == 2


class TestApplyDelta:

    def test_rounds_and_appends_history(self, rider):
        assert _apply(rider, 12.5) == 1513
        assert rider.rating == 1513
        assert rider.history[-1] == EloPoint("2002-02-01", 1513, "Round")
        assert rider.last_race_date == "2002-02-01"

    def test_volatility_needs_two_deltas(self, rider):
        _apply(rider, 20.0)
        assert rider.volatility == 0.0

    def test_volatility_is_population_sd(self, rider):
        for delta in (20.0, -10.0, 30.0):
            _apply(rider, delta)

        assert rider.volatility == pytest.approx(statistics.pstdev([20.0, -10.0, 30.0]))
        assert rider.volatility == pytest.approx(16.9967, abs=1e-4)
        assert rider.volatility != pytest.approx(statistics.stdev([20.0, -10.0, 30.0]))

    def test_volatility_window_keeps_last_ten(self, rider):
        deltas = [float(d) for d in range(12)]
        for delta in deltas:
            _apply(rider, delta)

        assert list(rider.recent_deltas) == deltas[-10:]
        assert rider.volatility == pytest.approx(statistics.pstdev(deltas[-10:]))

    def test_raw_deltas_are_kept(self, rider):
        _apply(rider, 3.25)
        assert list(rider.recent_deltas) == [3.25]

    def test_peak_only_moves_up(self, rider):
        _apply(rider, 40.0, date="2002-02-01")
        _apply(rider, -60.0, date="2003-02-01")
        assert rider.peak_rating == 1540
        assert rider.peak_year == "2002"
        assert rider.peak_date == "2002-02-01"

        _apply(rider, 100.0, date="2004-02-01")
        assert rider.peak_rating == 1580
        assert rider.peak_year == "2004"

    def test_peak_is_max_of_history(self, rider):
        for delta in (15.0, -30.0, 45.0, -5.0, 2.0):
            _apply(rider, delta)
        assert rider.peak_rating == max(p.value for p in rider.history)

    def test_sets_current_tier(self, rider):
        _apply(rider, 1.0, tier="OPEN")
        assert rider.tier == "OPEN"


def test_record_elite_race(rider):
    rider.record_elite_race("LITES")
    rider.record_elite_race("PREMIER")
    assert rider.elite_races == 2
    assert rider.tier_elite_races == {"PREMIER": 1, "LITES": 1, "OPEN": 0}


def test_to_dict_layout(rider):
    _apply(rider, 10.0)
    data = rider.to_dict()

    assert data["id"] == "rickycarmichael"
    assert data["elo"] == 1510
    assert data["peakElo"] == 1510
    assert data["history"][0] == {"date": "2002-01-05", "value": 1500, "raceName": "Debut"}
    assert data["recentDeltas"] == [10.0]
    assert data["lastRaceDate"] == "2002-02-01"
