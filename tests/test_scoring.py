"""Tests for the confidence score and unit status."""
import itertools
from datetime import datetime, timedelta

import pytest

from models.entities import CompanyType, GeocoderSource, PrecisionTier, Unit, UnitStatus
from services.scoring import (
    ScoreStatus,
    compute_score,
    derive_unit_status,
    score_status,
    score_unit,
)


def make_unit(**overrides):
    fields = dict(
        id="u1", cnpj="11222333000181", legal_name="PLUMA CONFORTO LTDA",
        street="Rua XV de Novembro", number="100", district="Centro",
        municipality="Curitiba", uf="PR", cep="80020-310",
        lat=-25.43, lng=-49.27, geocoder_used=GeocoderSource.GOOGLE, company=CompanyType.PLUMA,
        location_type=PrecisionTier.ROOFTOP, partial_match=False, inside_region=True,
        municipality_match=True, cep_match=True,
    )
    fields.update(overrides)
    return Unit(**fields)


def test_perfect_score():
    assert compute_score(PrecisionTier.ROOFTOP, municipality_match=True, cep_match=True,
                         partial_match=False, inside_region=True) == 100


def test_interpolated_with_municipality_is_acceptable():
    score = compute_score(PrecisionTier.RANGE_INTERPOLATED, municipality_match=True,
                          partial_match=False, inside_region=True)
    assert score == 60
    assert score_status(score) == ScoreStatus.ACCEPTABLE


def test_outside_region_always_scores_zero():
    assert compute_score(PrecisionTier.ROOFTOP, municipality_match=True, cep_match=True,
                         partial_match=False, inside_region=False) == 0


def test_municipality_mismatch_is_clamped_at_zero():
    assert compute_score(PrecisionTier.GEOMETRIC_CENTER, municipality_match=False, partial_match=False) == 0


def test_unknown_flags_add_nothing():
    """None means "not evaluated": no bonus, no penalty (except the full-match bonus)."""
    assert compute_score() == 10
    assert compute_score(PrecisionTier.APPROXIMATE, partial_match=True) == 10


@pytest.mark.parametrize("tier,expected", [
    (PrecisionTier.ROOFTOP, 70),
    (PrecisionTier.RANGE_INTERPOLATED, 40),
    (PrecisionTier.GEOMETRIC_CENTER, 20),
    (PrecisionTier.APPROXIMATE, 20),
])
def test_precision_tier_points(tier, expected):
    assert compute_score(tier, partial_match=False) == expected


# Each factor's values ordered from worst to best evidence
SCORE_FACTORS = {
    "location_type": [None, PrecisionTier.APPROXIMATE, PrecisionTier.GEOMETRIC_CENTER,
                      PrecisionTier.RANGE_INTERPOLATED, PrecisionTier.ROOFTOP],
    "municipality_match": [False, None, True],
    "cep_match": [False, None, True],
    "partial_match": [True, None, False],
    "inside_region": [False, None, True],
}


@pytest.mark.parametrize("factor", list(SCORE_FACTORS))
def test_score_is_bounded_and_monotonic(factor):
    """Better evidence in one factor never lowers the score, whatever the others are."""
    others = [name for name in SCORE_FACTORS if name != factor]
    for combination in itertools.product(*(SCORE_FACTORS[name] for name in others)):
        fixed = dict(zip(others, combination))
        scores = [compute_score(**fixed, **{factor: value}) for value in SCORE_FACTORS[factor]]
        assert all(0 <= score <= 100 for score in scores)
        assert scores == sorted(scores), (fixed, scores)


@pytest.mark.parametrize("score,status", [
    (100, ScoreStatus.EXCELLENT),
    (80, ScoreStatus.EXCELLENT),
    (79, ScoreStatus.ACCEPTABLE),
    (60, ScoreStatus.ACCEPTABLE),
    (59, ScoreStatus.NEEDS_REVIEW),
    (0, ScoreStatus.NEEDS_REVIEW),
])
def test_score_bands(score, status):
    assert score_status(score) == status


def test_band_labels():
    assert ScoreStatus.EXCELLENT.label == "Excelente"
    assert ScoreStatus.ACCEPTABLE.css_class == "status-warning"
    assert ScoreStatus.NEEDS_REVIEW.css_class == "status-error"


class TestUnitStatus:
    def setup_method(self):
        self.now = datetime(2024, 5, 10, 12, 0)

    def _status(self, **overrides):
        unit = make_unit(source_fetched_at=self.now, **overrides)
        unit.score = score_unit(unit)
        return derive_unit_status(unit, now=self.now, days_until_outdated=7)

    def test_good_unit_is_ok(self):
        assert self._status() == UnitStatus.OK

    def test_outside_region_wins(self):
        assert self._status(inside_region=False, municipality_match=False) == UnitStatus.FORA_PR

    def test_municipality_divergence(self):
        assert self._status(municipality_match=False) == UnitStatus.DIVERGENCIA_MUNICIPIO

    def test_low_score_needs_review(self):
        assert self._status(location_type=PrecisionTier.APPROXIMATE, cep_match=False) == UnitStatus.REVISAR

    def test_outdated(self):
        unit = make_unit(source_fetched_at=self.now - timedelta(days=8))
        unit.score = score_unit(unit)
        assert derive_unit_status(unit, now=self.now, days_until_outdated=7) == UnitStatus.DESATUALIZADO
        assert derive_unit_status(unit, now=self.now, days_until_outdated=30) == UnitStatus.OK
