"""
Unit tests for seeding new riders (baseline bootstrapping).
"""

from mxelo.elo.baseline import SeedBands, estimate_seed_bands
from mxelo.elo.pipeline import EloParams, EloPipeline
from mxelo.elo.state import RatingState
from mxelo.events import RaceResult


def _established(names_and_ratings):
    table = {}
    for name, rating in names_and_ratings:
        rider_id = name.lower().replace(" ", "")
        table[rider_id] = RatingState.debut(
            rider_id=rider_id, name=name, seed=rating,
            date="2019-01-01", year="2019", tier="PREMIER",
        )
    return table


def _results(*names):
    return [RaceResult(position=i + 1, rider_name=name) for i, name in enumerate(names)]


class TestSeedBands:

    def test_bootstrap_off_always_base(self):
        bands = SeedBands(front=1700, mid=1550, base=1500)
        assert bands.seed_for(1, bootstrap=False) == 1500
        assert bands.seed_for(8, bootstrap=False) == 1500

    def test_positions(self):
        bands = SeedBands(front=1700, mid=1550, base=1500)
        assert bands.seed_for(1, bootstrap=True) == 1700
        assert bands.seed_for(2, bootstrap=True) == 1700
        assert bands.seed_for(3, bootstrap=True) == 1550
        assert bands.seed_for(10, bootstrap=True) == 1550
        assert bands.seed_for(11, bootstrap=True) == 1500


class TestEstimateSeedBands:

    def test_new_winner_among_equal_field(self):
        """A debut winner among five riders all at 1600 is seeded at 1600."""
        ratings = _established([(f"Vet {i}", 1600) for i in range(1, 6)])
        results = _results("Rookie", *[f"Vet {i}" for i in range(1, 6)])

        bands = estimate_seed_bands(results, ratings, base_rating=1500)

        assert bands.front == 1600
        assert bands.seed_for(1, bootstrap=True) == 1600

    def test_front_band_uses_positions_1_to_5(self):
        ratings = _established([("A", 1700), ("B", 1600), ("C", 1500), ("D", 1400)])
        # Rookie 1st; only established riders A-D count toward the band
        results = _results("Rookie", "A", "B", "C", "D")

        bands = estimate_seed_bands(results, ratings, base_rating=1500)
        assert bands.front == 1550

    def test_mid_band_uses_positions_7_to_12(self):
        names = [f"R{i}" for i in range(1, 13)]
        ratings = _established([(name, 1400 + 10 * i) for i, name in enumerate(names)])
        results = _results(*names)

        bands = estimate_seed_bands(results, ratings, base_rating=1500)
        # Positions 7-12 -> ratings 1460..1510
        assert bands.mid == 1485

    def test_empty_bands_fall_back_to_base(self):
        bands = estimate_seed_bands(_results("New A", "New B"), {}, base_rating=1500)
        assert bands.front == 1500
        assert bands.mid == 1500

    def test_average_is_rounded(self):
        ratings = _established([("A", 1601), ("B", 1600)])
        bands = estimate_seed_bands(_results("A", "B"), ratings, base_rating=1500)
        # 1600.5 rounds half up
        assert bands.front == 1601


class TestBootstrapInPipeline:

    def test_rookie_seeded_from_riders_beaten(self, make_race):
        races = [
            make_race("2020-01-01", ["A", "B", "C"]),
            make_race("2020-01-08", ["Rookie", "A", "B"]),
        ]
        run = EloPipeline(EloParams(bootstrap_new_entrants=True)).run(races)

        # After race 1: A=1540, B=1500. Rookie seeds at their mean.
        rookie = run.ratings["rookie"]
        assert rookie.history[0].value == 1520
        assert rookie.history[0].race_name == "Debut"

    def test_bootstrap_off_seeds_at_base(self, make_race):
        races = [
            make_race("2020-01-01", ["A", "B", "C"]),
            make_race("2020-01-08", ["Rookie", "A", "B"]),
        ]
        run = EloPipeline(EloParams(bootstrap_new_entrants=False)).run(races)
        assert run.ratings["rookie"].history[0].value == 1500
