"""Address admission, normalisation and the municipality gazetteer."""
import re
import unicodedata
from typing import List

from configurations.config import Config

_REGION_COUNTRY_TOKENS = ("paraná", "parana", "brasil", "brazil")
_STREET_KEYWORD_RE = re.compile(
    r"\b(rua|avenida|av|alameda|travessa|praça|estrada|rodovia|br|pr)\b"
)
_UNSAFE_CHARS_RE = re.compile(r"[^\w\s,.-]")
_REGION_PRESENT_RE = re.compile(r"paraná|parana|\bpr\b")
_MIN_STREET_ADDRESS_LENGTH = 20

# Partial gazetteer: the larger municipalities of Paraná (69 of 399), used for
# bare place-name admission and suggestions. Any other municipality is admitted
# once the input names the state or country, e.g. "Tibagi, Paraná".
PR_MUNICIPALITIES: List[str] = [
    "Almirante Tamandaré", "Ampére", "Apucarana", "Arapongas", "Arapoti",
    "Araucária", "Assis Chateaubriand", "Astorga", "Bandeirantes", "Campina Grande do Sul",
    "Campo Largo", "Campo Mourão", "Cambé", "Cascavel", "Castro",
    "Céu Azul", "Cianorte", "Colombo", "Cornélio Procópio", "Curitiba",
    "Dois Vizinhos", "Fazenda Rio Grande", "Foz do Iguaçu", "Francisco Beltrão", "Goioerê",
    "Guaíra", "Guarapuava", "Guaratuba", "Ibaiti", "Ibiporã",
    "Irati", "Ivaiporã", "Jacarezinho", "Jaguariaíva", "Lapa",
    "Laranjeiras do Sul", "Loanda", "Londrina", "Mandaguari", "Marechal Cândido Rondon",
    "Maringá", "Matinhos", "Medianeira", "Palmas", "Palotina",
    "Paranaguá", "Paranavaí", "Pato Branco", "Pinhais", "Pinhão",
    "Piraquara", "Ponta Grossa", "Pontal do Paraná", "Prudentópolis", "Quatro Barras",
    "Realeza", "Rio Branco do Sul", "Rio Negro", "Rolândia", "Santa Helena",
    "Santo Antônio da Platina", "São José dos Pinhais", "São Mateus do Sul", "Sarandi", "Telêmaco Borba",
    "Toledo", "Umuarama", "União da Vitória", "Wenceslau Braz",
]


def fold(text: str) -> str:
    """Lower-case and strip accents, for accent-insensitive comparisons."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


_MUNICIPALITY_INDEX = {fold(name): name for name in PR_MUNICIPALITIES}


def is_known_municipality(name: str) -> bool:
    return fold(name.strip()) in _MUNICIPALITY_INDEX


def suggest_municipalities(prefix: str, limit: int = 10) -> List[str]:
    """Municipality names starting with (or, failing that, containing) *prefix*."""
    needle = fold(prefix.strip())
    if not needle:
        return []
    starts = [name for key, name in _MUNICIPALITY_INDEX.items() if key.startswith(needle)]
    contains = [
        name for key, name in _MUNICIPALITY_INDEX.items()
        if needle in key and not key.startswith(needle)
    ]
    return (sorted(starts) + sorted(contains))[:limit]


def is_admissible(raw: str) -> bool:
    """
    Cheap pre-filter run before spending provider quota.

    Admits bare place names (input mentioning the region/country, or naming a
    known municipality) and street addresses that carry a street-type keyword
    and are long enough to also hold a municipality.
    """
    text = raw.strip()
    lowered = text.lower()
    if any(token in lowered for token in _REGION_COUNTRY_TOKENS):
        return len(text) >= 3
    if is_known_municipality(text):
        return True

    words = re.sub(r"[^\w\s]", " ", lowered)
    has_street = bool(_STREET_KEYWORD_RE.search(words))
    return has_street and len(words) > _MIN_STREET_ADDRESS_LENGTH


def clean(raw: str) -> str:
    """Strip characters outside the safe set and collapse whitespace."""
    return " ".join(_UNSAFE_CHARS_RE.sub("", raw).split())


def normalise_for_region(raw: str) -> str:
    """Primary-provider query: cleaned address pinned to the region and country."""
    address = clean(raw)
    lowered = address.lower()
    if not _REGION_PRESENT_RE.search(lowered):
        address += f", {Config.REGION_NAME}, {Config.COUNTRY_NAME}"
    elif "brasil" not in lowered:
        address += f", {Config.COUNTRY_NAME}"
    return address


def normalise_for_country(raw: str) -> str:
    """Fallback-provider query: address plus country, no region augmentation."""
    return f"{raw.strip()}, Brazil"
