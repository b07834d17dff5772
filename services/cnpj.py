"""CNPJ normalisation, formatting and check-digit validation."""
import re
from typing import List

_NON_DIGITS_RE = re.compile(r"\D")
_FIRST_DIGIT_WEIGHTS = [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]
_SECOND_DIGIT_WEIGHTS = [6] + _FIRST_DIGIT_WEIGHTS


def normalize_cnpj(cnpj: str) -> str:
    return _NON_DIGITS_RE.sub("", cnpj)


def format_cnpj(cnpj: str) -> str:
    """'12345678000195' -> '12.345.678/0001-95'; anything else is returned as is."""
    digits = normalize_cnpj(cnpj)
    if len(digits) != 14:
        return cnpj
    return f"{digits[:2]}.{digits[2:5]}.{digits[5:8]}/{digits[8:12]}-{digits[12:]}"


def _check_digit(digits: str, weights: List[int]) -> int:
    remainder = sum(int(d) * w for d, w in zip(digits, weights)) % 11
    return 0 if remainder < 2 else 11 - remainder


def validate_cnpj(cnpj: str) -> bool:
    digits = normalize_cnpj(cnpj)
    if len(digits) != 14 or len(set(digits)) == 1:
        return False
    if _check_digit(digits[:12], _FIRST_DIGIT_WEIGHTS) != int(digits[12]):
        return False
    return _check_digit(digits[:13], _SECOND_DIGIT_WEIGHTS) == int(digits[13])


def parse_cnpj_list(text: str) -> List[str]:
    """One CNPJ per line, as pasted into the import box; blank lines are dropped."""
    return [line.strip() for line in text.splitlines() if line.strip()]
