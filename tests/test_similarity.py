"""
Similarity scoring and the same-product decision:
- component scores (string, words, specs)
- composite score properties: self-similarity, symmetry, range
- hard vetoes: exact-model construction brands, dimensions
"""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import itertools

import pytest

from matcher import (
    Specs,
    calculate_string_similarity,
    calculate_title_similarity,
    calculate_word_similarity,
    compare_specifications,
    extract_dimensions,
    is_similar_title,
    score_breakdown,
)

TITLES = [
    "Samsung Galaxy S21 128GB Black",
    "Samsung Galaxy S21 Ultra 256GB",
    "Apple iPhone 13 128GB",
    'LG OLED55C1PUB 55" 4K televizors',
    "Knauf Rotband 30kg",
    "Knauf Sheetrock Finish 30kg",
    "Rockwool Rockmin 50x600x1200mm",
    "Rockwool Rockmin 100x600x1200mm",
    "Akmens vate Rockwool Rockmin Plus 100x600x1200mm",
    "Paroc eXtra 50x565x1170",
    "Bosch GSB 18V-55 Professional",
    "lowercase only title",
]


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------

def test_string_similarity():
    assert calculate_string_similarity("OLED55C1", "OLED55C1") == 1.0
    assert calculate_string_similarity("", "") == 1.0
    assert calculate_string_similarity("OLED55C1", "") == 0.0
    assert calculate_string_similarity("OLED55C1", "OLED55C2") == pytest.approx(7 / 8)


def test_word_similarity_is_jaccard():
    assert calculate_word_similarity(frozenset({"a", "b", "c"}), frozenset({"b", "c", "d"})) == 0.5
    assert calculate_word_similarity(frozenset(), frozenset({"a"})) == 0.0


def test_specs_nothing_comparable():
    assert compare_specifications(Specs(weight_kg=25.0), Specs(storage_gb=128.0)) == 0.0
    assert compare_specifications(Specs(), Specs()) == 0.0


def test_specs_value_within_tolerance():
    assert compare_specifications(Specs(weight_kg=25.0), Specs(weight_kg=25.5)) == 1.0


def test_specs_value_outside_tolerance():
    assert compare_specifications(Specs(weight_kg=25.0), Specs(weight_kg=30.0)) == pytest.approx(1 - 5 / 30)


def test_specs_weighted_over_present_kinds():
    dims = extract_dimensions("100x200mm")
    far = extract_dimensions("100x400mm")
    specs1 = Specs(dimensions=dims, weight_kg=10.0)
    specs2 = Specs(dimensions=far, weight_kg=10.0)
    # dims score 0.5 (one axis out of tolerance) weighted 0.4, weight score 1 weighted 0.2
    assert compare_specifications(specs1, specs2) == pytest.approx((0.5 * 0.4 + 1.0 * 0.2) / 0.6)


# ---------------------------------------------------------------------------
# Composite score properties
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("title", TITLES)
def test_self_similarity(title):
    assert calculate_title_similarity(title, title) == 1.0
    assert calculate_string_similarity(title, title) == 1.0


def test_identical_titles_ignore_case_and_whitespace():
    assert calculate_title_similarity("Knauf  Rotband 30kg", "knauf rotband 30KG") == 1.0


def test_empty_titles_are_not_identical():
    assert calculate_title_similarity("", "") == 0.0


def test_whitespace_only_titles_are_identical():
    assert calculate_title_similarity("  ", "  ") == 1.0
    assert calculate_title_similarity(" ", "\t") == 1.0


@pytest.mark.parametrize("title1, title2", list(itertools.combinations(TITLES, 2)))
def test_symmetry_and_range(title1, title2):
    forward = calculate_title_similarity(title1, title2)
    backward = calculate_title_similarity(title2, title1)
    assert forward == pytest.approx(backward)
    assert 0.0 <= forward <= 1.0
    assert is_similar_title(title1, title2) == is_similar_title(title2, title1)


def test_bonuses_are_clamped():
    breakdown = score_breakdown("Samsung Galaxy S21 128GB", "Samsung Galaxy S21 128GB Black")
    assert breakdown['bonuses'] == ['model', 'brand', 'specs']
    assert breakdown['score'] == 1.0


def test_breakdown_components():
    breakdown = score_breakdown("LG OLED55C1PUB", "LG OLED55C2")
    assert breakdown['model'] == pytest.approx(7 / 8)
    assert breakdown['brand'] == 1.0
    assert breakdown['specs'] == 0.0
    assert breakdown['veto'] == ''
    assert not breakdown['identical']


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------

def test_exact_duplicate_samsung():
    title = "Samsung Galaxy S21 128GB Black"
    assert is_similar_title(title, title)
    assert calculate_title_similarity(title, title) == 1


def test_construction_brand_veto():
    assert not is_similar_title("Knauf Rotband 30kg", "Knauf Sheetrock Finish 30kg")
    breakdown = score_breakdown("Knauf Rotband 30kg", "Knauf Sheetrock Finish 30kg")
    assert breakdown['veto'] == 'exact_model'
    assert breakdown['score'] == 0.0


def test_construction_brand_same_model():
    assert is_similar_title("Knauf Rotband 30kg", "Knauf Rotband Plus 30kg")


def test_insulation_thickness_veto():
    assert not is_similar_title("Rockwool Rockmin 50x600x1200mm", "Rockwool Rockmin 100x600x1200mm")


def test_insulation_same_board():
    assert is_similar_title("ROCKWOOL ROCKMIN 100x600x1200mm", "Rockwool Rockmin Plus 100X600X1200 MM")


def test_insulation_specs_score_uses_generic_dimensions():
    title1, title2 = "Akmens vate 50x600x1200mm", "Akmens vate 51x600x1200mm"
    breakdown = score_breakdown(title1, title2)
    assert breakdown['specs'] == pytest.approx((1 - (1 / 51) / 0.05 + 1 + 1) / 3)
    dims1, dims2 = extract_dimensions(title1), extract_dimensions(title2)
    assert compare_specifications(Specs(dimensions=dims1), Specs(dimensions=dims2), is_insulation=True) == 1.0


def test_dimension_count_mismatch_vetoes_high_score():
    title1, title2 = "Paroc eXtra 50x565", "Paroc eXtra 50x565x1170"
    assert calculate_title_similarity(title1, title2) >= 0.65
    assert not is_similar_title(title1, title2)


@pytest.mark.parametrize("title1, title2", [
    ("Samsung Galaxy S21 128GB Black", "Knauf Rotband 30kg"),
    ('LG OLED55C1PUB 55" 4K televizors', "Bosch GSB 18V-55 Professional"),
    ("Samsung Galaxy S21 128GB Black", "Rockwool Rockmin 100x600x1200mm"),
])
def test_unrelated_products(title1, title2):
    assert not is_similar_title(title1, title2)
