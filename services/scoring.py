"""Geocoding confidence score (0-100) and status banding for units."""
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from configurations.config import Config
from models.entities import PrecisionTier, Unit, UnitStatus

# Weights are the scoring contract; changing them moves units across the 60/80 bands.
_TIER_POINTS = {
    PrecisionTier.ROOFTOP: 60,
    PrecisionTier.RANGE_INTERPOLATED: 30,
    PrecisionTier.GEOMETRIC_CENTER: 10,
    PrecisionTier.APPROXIMATE: 10,
}
MUNICIPALITY_MATCH_POINTS = 20
MUNICIPALITY_MISMATCH_POINTS = -40
CEP_MATCH_POINTS = 10
FULL_MATCH_POINTS = 10

EXCELLENT_THRESHOLD = 80
ACCEPTABLE_THRESHOLD = 60


class ScoreStatus(str, Enum):
    EXCELLENT = "excellent"
    ACCEPTABLE = "acceptable"
    NEEDS_REVIEW = "needs_review"

    @property
    def label(self) -> str:
        return {
            ScoreStatus.EXCELLENT: "Excelente",
            ScoreStatus.ACCEPTABLE: "Aceitável",
            ScoreStatus.NEEDS_REVIEW: "Revisar",
        }[self]

    @property
    def css_class(self) -> str:
        return {
            ScoreStatus.EXCELLENT: "status-ok",
            ScoreStatus.ACCEPTABLE: "status-warning",
            ScoreStatus.NEEDS_REVIEW: "status-error",
        }[self]


def compute_score(location_type: Optional[PrecisionTier] = None,
                  municipality_match: Optional[bool] = None,
                  cep_match: Optional[bool] = None,
                  partial_match: Optional[bool] = None,
                  inside_region: Optional[bool] = None) -> int:
    """
    Additive confidence score, clamped to [0, 100].

    A point known to be outside the region always scores 0.
    """
    score = _TIER_POINTS.get(location_type, 0) if location_type is not None else 0

    if municipality_match is True:
        score += MUNICIPALITY_MATCH_POINTS
    elif municipality_match is False:
        score += MUNICIPALITY_MISMATCH_POINTS

    if cep_match:
        score += CEP_MATCH_POINTS

    if not partial_match:
        score += FULL_MATCH_POINTS

    if inside_region is False:
        score = 0

    return max(0, min(100, score))


def score_unit(unit: Unit) -> int:
    return compute_score(
        location_type=unit.location_type,
        municipality_match=unit.municipality_match,
        cep_match=unit.cep_match,
        partial_match=unit.partial_match,
        inside_region=unit.inside_region,
    )


def score_status(score: int) -> ScoreStatus:
    if score >= EXCELLENT_THRESHOLD:
        return ScoreStatus.EXCELLENT
    if score >= ACCEPTABLE_THRESHOLD:
        return ScoreStatus.ACCEPTABLE
    return ScoreStatus.NEEDS_REVIEW


def derive_unit_status(unit: Unit, now: Optional[datetime] = None,
                       days_until_outdated: int = Config.DAYS_UNTIL_OUTDATED) -> UnitStatus:
    """Review status shown on the validation panel; first matching rule wins."""
    now = now or datetime.now()
    if unit.inside_region is False:
        return UnitStatus.FORA_PR
    if unit.municipality_match is False:
        return UnitStatus.DIVERGENCIA_MUNICIPIO
    if now - unit.source_fetched_at > timedelta(days=days_until_outdated):
        return UnitStatus.DESATUALIZADO
    if unit.score < ACCEPTABLE_THRESHOLD:
        return UnitStatus.REVISAR
    return UnitStatus.OK
