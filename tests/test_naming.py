"""
Canonical group names:
- base listing selection (completeness, then longer title, then earliest)
- construction names (insulation prefix, brand, model, suffix, dimensions, weight)
- electronics names (brand, cleaned model, spec list)
"""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import pytest

from grouping import Listing
from naming import (
    format_number,
    get_standardized_group_name,
    select_base_attributes,
)

ROCKWOOL_GROUP = [
    "ROCKWOOL ROCKMIN 100x600x1200mm",
    "Rockwool Rockmin Plus 100X600X1200 MM",
]

# (group titles, expected name)
NAME_CASES = [
    (ROCKWOOL_GROUP, "AKMENS VATE ROCKWOOL ROCKMIN PLUS (100x600x1200mm)"),
    (["Knauf Rotband 30kg"], "KNAUF ROTBAND (30kg)"),
    (["Weber.Vetonit Bindo 20 25kg"], "WEBER BINDO 20 (25kg)"),
    (["Paroc eXtra 50x565x1170"], "PAROC EXTRA (50x565x1170mm)"),
    (["Knauf ģipškartons 120x260 cm"], "KNAUF (120x260cm)"),
    (["Samsung Galaxy S21 5G 128GB"], "SAMSUNG S21 (128GB, 5G)"),
    (["Samsung Galaxy S21 25GB"], "SAMSUNG S21 (25GB)"),
    (['LG OLED55C1PUB 55" 4K televizors'], "LG OLED55C1"),
    (["Bosch GSB 18V-55 Professional"], "BOSCH GSB18V55 (18V)"),
    (["WD Elements 2TB ārējais disks"], "WD ELEMENTS (2TB)"),
    ([], ""),
]


@pytest.mark.parametrize("titles, expected", NAME_CASES)
def test_group_name(titles, expected):
    assert get_standardized_group_name(titles) == expected


def test_rockwool_name_order_and_no_duplicates():
    name = get_standardized_group_name(ROCKWOOL_GROUP)
    positions = [name.index(token) for token in ("AKMENS VATE", "ROCKWOOL", "ROCKMIN", "PLUS", "(100x600x1200mm)")]
    assert positions == sorted(positions)
    words = name.split()
    assert len(words) == len(set(words))


def test_group_name_is_order_independent_for_distinct_completeness():
    titles = ["Samsung Galaxy S21", "Samsung Galaxy S21 5G 128GB"]
    assert get_standardized_group_name(titles) == get_standardized_group_name(titles[::-1])


def test_group_name_accepts_listings():
    group = [Listing(title="Knauf Rotband 30kg", price=7.99, store="DEPO")]
    assert get_standardized_group_name(group) == "KNAUF ROTBAND (30kg)"


def test_base_prefers_most_complete_listing():
    base = select_base_attributes(["Samsung Galaxy S21", "Samsung Galaxy S21 128GB"])
    assert base.title == "Samsung Galaxy S21 128GB"


def test_base_prefers_longer_title_on_tie():
    base = select_base_attributes(ROCKWOOL_GROUP)
    assert base.title == "Rockwool Rockmin Plus 100X600X1200 MM"


def test_base_prefers_earliest_on_full_tie():
    base = select_base_attributes(["Knauf Rotband 25kg", "Knauf Rotband 30kg"])
    assert base.title == "Knauf Rotband 25kg"


def test_base_of_empty_group():
    assert select_base_attributes([]) is None


@pytest.mark.parametrize("value, expected", [
    (100.0, "100"),
    (1.25, "1.25"),
    (0.4536, "0.45"),
    (2.5, "2.5"),
])
def test_format_number(value, expected):
    assert format_number(value) == expected
