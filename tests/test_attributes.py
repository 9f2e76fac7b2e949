"""
Attribute extraction:
- extract_brand (known literals, aliases, generic fallback)
- extract_model / extract_model_rule (ordered rule list, per-rule normalizers)
- extract_significant_words, classify_category
- normalize_model_number
"""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import pytest

from matcher import (
    ProductCategory,
    extract_attributes,
    extract_brand,
    extract_model,
    extract_model_rule,
    extract_significant_words,
    normalize_model_number,
)
from product_rules import MODEL_RULES

# (title, expected brand)
BRAND_CASES = [
    ("Apple iPhone 13 128GB", "APPLE"),
    ("iPhone 13 Pro", "APPLE"),                       # alias
    ("Weber.Vetonit LR+ 20kg", "WEBER"),              # dotted literal + alias
    ("Knauf Insulation TP 115 50mm", "KNAUF"),         # longest literal wins
    ("Akmens vate Rockwool Rockmin 50x600x1200mm", "ROCKWOOL"),
    ("Sony PS5 Digital Edition", "SONY"),             # leftmost known brand
    ("Tefal vafeļu panna", "TEFAL"),                  # capitalized-word fallback
    ("lowercase only title", None),
    ("", None),
]

# (title, expected model)
MODEL_CASES = [
    ("Sony PlayStation 5 Digital Edition", "PS5DIGITALEDITION"),
    ("Xbox Series X 1TB", "XBOXSERIESX"),
    ('LG OLED55C1PUB 55" 4K televizors', "OLED55C1"),
    ("Samsung S24D590 monitors", "S24D590"),
    ("Knauf Rotband Plus 30kg", "ROTBAND"),
    ("Knauf MP-75 30kg", "MP75"),
    ("Knauf Insulation TP 115 50mm", "TP115"),
    ("Rockwool Rockmin Plus 100x600x1200mm", "ROCKMIN"),
    ("Weber.Vetonit Bindo 20 25kg", "BINDO20"),
    ("Weber.Vetonit Linio 15 25kg", "LINIO15"),
    ("Ceresit CT 127 Plaza Grey", "PLAZA"),
    ("Samsung Galaxy S21 5G 128GB Black", "S21"),
    ("Samsung Galaxy S21 Ultra 256GB", "S21ULTRA"),
    ("Bosch WAV28K00 veļas mašīna", "WAV28K00"),
    ("Bosch GSB 18V-55 Professional", "GSB18V55"),
    ("Kasetne 12A7O", "12A70"),                       # O read as zero
    ("Programmatūra v2.1", "V2.1"),
    ("Knauf Sheetrock Finish 30kg", None),
    ("lowercase description only", None),
]

# (title, rule name)
RULE_CASES = [
    ("Sony PlayStation 5 Digital Edition", "console"),
    ('LG OLED55C1PUB 55"', "tv"),
    ("Samsung S24D590 monitors", "monitor"),
    ("Knauf Rotband 30kg", "construction"),
    ("Samsung Galaxy S21 128GB", "phone"),
    ("Bosch WAV28K00 veļas mašīna", "appliance"),
    ("Bosch GSB 18V-55 Professional", "power_tool"),
    ("Kasetne 12A7O", "generic_code"),
    ("Programmatūra v2.1", "version"),
    ("lowercase description only", None),
]


@pytest.mark.parametrize("title, expected", BRAND_CASES)
def test_extract_brand(title, expected):
    assert extract_brand(title) == expected


@pytest.mark.parametrize("title, expected", MODEL_CASES)
def test_extract_model(title, expected):
    assert extract_model(title) == expected


@pytest.mark.parametrize("title, expected", RULE_CASES)
def test_extract_model_rule(title, expected):
    assert extract_model_rule(title) == expected


def test_every_model_rule_is_covered():
    covered = {rule for _, rule in RULE_CASES if rule}
    assert covered == {rule.name for rule in MODEL_RULES}


def test_construction_codes_need_construction_context():
    # "Ultra" is a construction product line only next to a construction brand/keyword
    assert extract_model("Samsung Galaxy S23 Ultra 256GB") == "S23ULTRA"
    assert extract_model_rule("Paroc Ultra 50x565x1170") == "construction"


def test_significant_words():
    words = extract_significant_words("Rockwool Rockmin Plus 100X600X1200 MM")
    assert words == frozenset({"rockwool", "rockmin", "100x600x1200"})


def test_significant_words_drop_stopwords_digits_and_short_tokens():
    assert extract_significant_words("The new Samsung TV, 55 inch!") == frozenset({"samsung"})
    assert extract_significant_words(None) == frozenset()


# (title, expected category)
CATEGORY_CASES = [
    ("Knauf Rotband 30kg", ProductCategory.CONSTRUCTION),
    ("Akmens vate 50x600x1200mm", ProductCategory.CONSTRUCTION),
    ("Ģipškartona plāksne 12.5mm", ProductCategory.CONSTRUCTION),
    ("Cementa java M400 25kg", ProductCategory.CONSTRUCTION),
    ("Samsung Galaxy S21 128GB", ProductCategory.ELECTRONICS),
    ("Bosch GSB 18V-55 Professional", ProductCategory.ELECTRONICS),
]


@pytest.mark.parametrize("title, expected", CATEGORY_CASES)
def test_category(title, expected):
    assert extract_attributes(title).category is expected


def test_exact_model_brand_family():
    assert extract_attributes("Weber.Vetonit Bindo 20 25kg").exact_model_required
    assert extract_attributes("Knauf Rotband 30kg").exact_model_required
    assert not extract_attributes("Rockwool Rockmin 50x600x1200mm").exact_model_required


@pytest.mark.parametrize("title", [
    "Samsung Galaxy S21 128GB Black",
    "Akmens vate Rockwool Rockmin Plus 100x600x1200mm",
    "Knauf Rotband 30kg",
    "",
    "???",
])
def test_extraction_is_deterministic(title):
    uncached = extract_attributes.__wrapped__
    assert uncached(title) == uncached(title)
    assert extract_attributes(title) == uncached(title)


def test_completeness_counts_present_fields():
    # brand + model + dimensions
    assert extract_attributes("Rockwool Rockmin 100x600x1200mm").completeness == 3
    # brand + model + storage
    assert extract_attributes("Samsung Galaxy S21 128GB").completeness == 3
    assert extract_attributes("lowercase only").completeness == 0


# ---------------------------------------------------------------------------
# normalize_model_number
# ---------------------------------------------------------------------------

# (model, expected)
MODEL_NUMBER_CASES = [
    ("Paroc eXtra-50", "extra50"),
    ("ROCKWOOL-Rockmin", "rockmin"),
    ("knaufparoc 12", "12"),
    ("TP 115", "tp115"),
    ("", ""),
]


@pytest.mark.parametrize("model, expected", MODEL_NUMBER_CASES)
def test_normalize_model_number(model, expected):
    assert normalize_model_number(model) == expected


@pytest.mark.parametrize("model", [m for m, _ in MODEL_NUMBER_CASES] + ["Isover KL-37", "gyprocgyproc A13"])
def test_normalize_model_number_is_idempotent(model):
    once = normalize_model_number(model)
    assert normalize_model_number(once) == once
