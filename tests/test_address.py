"""Tests for address admission and normalisation."""
import pytest

from geocoding.address import (
    clean,
    is_admissible,
    is_known_municipality,
    normalise_for_country,
    normalise_for_region,
    suggest_municipalities,
)


@pytest.mark.parametrize("text", [
    "Curitiba",
    "maringa",
    "Paraná",
    "Ponta Grossa, PR, Brasil",
    "Rua XV de Novembro, 100, Centro, Curitiba",
    "Avenida Brasil, 500, Cascavel",
])
def test_admissible_inputs(text):
    assert is_admissible(text)


@pytest.mark.parametrize("text", ["xyz", "", "   ", "Rua A", "casa do joão"])
def test_rejected_inputs(text):
    assert not is_admissible(text)


def test_known_municipality_ignores_accents_and_case():
    assert is_known_municipality("FOZ DO IGUACU")
    assert is_known_municipality(" São José dos Pinhais ")
    assert not is_known_municipality("Florianópolis")


def test_municipality_outside_gazetteer_needs_the_state():
    assert not is_known_municipality("Tibagi")
    assert not is_admissible("Tibagi")
    assert is_admissible("Tibagi, Paraná")
    assert is_admissible("Tibagi, Brasil")


def test_suggestions_prefer_prefix_matches():
    suggestions = suggest_municipalities("cam")
    assert suggestions[:4] == ["Cambé", "Campina Grande do Sul", "Campo Largo", "Campo Mourão"]


def test_suggestions_fall_back_to_substring():
    assert "Foz do Iguaçu" in suggest_municipalities("iguacu")
    assert suggest_municipalities("") == []
    assert len(suggest_municipalities("a", limit=3)) == 3


def test_clean_strips_unsafe_characters():
    assert clean("Rua  @#Marechal!  Deodoro, 10") == "Rua Marechal Deodoro, 10"
    # accented letters survive
    assert clean("Maringá") == "Maringá"


def test_region_normalisation_appends_region_and_country():
    assert normalise_for_region("Curitiba") == "Curitiba, Paraná, Brasil"
    assert normalise_for_region("Curitiba - PR") == "Curitiba - PR, Brasil"
    assert normalise_for_region("Londrina, Paraná, Brasil") == "Londrina, Paraná, Brasil"


def test_country_normalisation():
    assert normalise_for_country("  Curitiba ") == "Curitiba, Brazil"
