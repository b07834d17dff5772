"""Summary statistics for the stats and validation panels."""
from typing import Dict, List

import pandas as pd

from models.entities import Unit
from services.scoring import score_status


def units_to_dataframe(units: List[Unit]) -> pd.DataFrame:
    rows = [
        {
            'id': unit.id,
            'company': unit.company.value,
            'status': unit.status.value,
            'score': unit.score,
            'score_band': score_status(unit.score).value,
            'municipality': unit.municipality,
        }
        for unit in units
    ]
    return pd.DataFrame(rows, columns=['id', 'company', 'status', 'score', 'score_band', 'municipality'])


def summarize_units(units: List[Unit]) -> Dict:
    df = units_to_dataframe(units)
    band_counts = df['score_band'].value_counts()
    return {
        'total': int(len(df)),
        'score_bands': {
            'excellent': int(band_counts.get('excellent', 0)),
            'acceptable': int(band_counts.get('acceptable', 0)),
            'needs_review': int(band_counts.get('needs_review', 0)),
        },
        'by_company': {k: int(v) for k, v in df['company'].value_counts().items()},
        'by_status': {k: int(v) for k, v in df['status'].value_counts().items()},
        'by_municipality': {k: int(v) for k, v in df['municipality'].value_counts().items()},
        'average_score': round(float(df['score'].mean()), 1) if len(df) else 0.0,
    }


def review_queue(units: List[Unit]) -> List[Unit]:
    """Units ordered worst score first."""
    return sorted(units, key=lambda unit: unit.score)
