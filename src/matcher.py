"""
Core identity-resolution engine for scraped store listings.

Matching Approach:
    - Every listing title is reduced to an attribute bundle: brand, model code,
      numeric specs (dimensions, weight, volume, power, storage) and a set of
      significant words
    - Pairs are scored attribute by attribute and combined into one weighted score:
        model 0.45 · brand 0.25 · specs 0.20 · words 0.10
    - Exact model / exact brand / matching spec multiply the score
      (×1.5, ×1.3, ×1.2) and the result is clamped to 1
    - Model codes are compared with rapidfuzz Levenshtein similarity so that
      "OLED55C1" vs "OLED55C2" still scores high but below an exact match

Hard vetoes (score forced to "no match" regardless of the weighted score):
    - Construction brands sold in many package sizes (KNAUF, SAKRET, WEBER)
      must agree on the canonical model
    - When both titles carry dimensions they must agree within tolerance;
      insulation thickness must agree within 1mm

Decision thresholds:
    - 0.60 for insulation pairs (titles vary a lot, dimensions carry the signal)
    - 0.65 for everything else

Every function here is a pure function of its inputs. Nothing raises on
malformed titles: missing attributes come back as None and contribute zero
weight to the comparison.
"""

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Dict, FrozenSet, List, Optional, Tuple

from rapidfuzz.distance import Levenshtein

from product_rules import (
    BRAND_ALIASES,
    CONSTRUCTION_BRANDS,
    CONSTRUCTION_KEYWORD_PATTERN,
    EXACT_MODEL_BRANDS,
    GENERIC_BRAND_PATTERN,
    INSULATION_CUE_PATTERN,
    KNOWN_BRAND_PATTERN,
    MODEL_BRAND_PREFIXES,
    MODEL_NOISE_PATTERN,
    MODEL_RULES,
    STOPWORDS,
    in_brand_family,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
SIMILARITY_THRESHOLD = 0.65             # Default "same product" threshold
INSULATION_SIMILARITY_THRESHOLD = 0.60  # Insulation titles are noisier

WEIGHTS = {
    'model': 0.45,
    'brand': 0.25,
    'specs': 0.20,
    'words': 0.10,
}

SPEC_WEIGHTS = {
    'dimensions': 0.40,
    'weight_kg': 0.20,
    'volume_l': 0.15,
    'power_w': 0.15,
    'storage_gb': 0.10,
}
NUMERIC_SPEC_KEYS = ('weight_kg', 'volume_l', 'power_w', 'storage_gb')

MODEL_MATCH_BONUS = 1.5
BRAND_MATCH_BONUS = 1.3
SPEC_MATCH_BONUS = 1.2

SPEC_TOLERANCE = 0.05                # Relative difference counted as "same value"
DIMENSION_TOLERANCE = 0.05
LARGE_DIMENSION_TOLERANCE = 0.10     # Applies above LARGE_DIMENSION_MM
LARGE_DIMENSION_MM = 1000
INSULATION_THICKNESS_TOLERANCE_MM = 1.0

# ---------------------------------------------------------------------------
# Attribute types
# ---------------------------------------------------------------------------

class ProductCategory(Enum):
    CONSTRUCTION = "construction"
    ELECTRONICS = "electronics"


UNIT_TO_MM = {'mm': 1.0, 'cm': 10.0, 'm': 1000.0}


@dataclass(frozen=True)
class Dimensions:
    """
    Dimensions as written in the title.

    raw/sorted (and thickness/width/length) are kept in the title's own unit;
    use in_millimeters() before comparing two listings.
    """
    raw: Tuple[float, ...]
    sorted: Tuple[float, ...]
    unit: str = 'mm'
    thickness: Optional[float] = None
    width: Optional[float] = None
    length: Optional[float] = None

    def in_millimeters(self) -> 'Dimensions':
        factor = UNIT_TO_MM.get(self.unit, 1.0)

        def scale(value):
            return None if value is None else value * factor

        return Dimensions(
            raw=tuple(v * factor for v in self.raw),
            sorted=tuple(v * factor for v in self.sorted),
            unit='mm',
            thickness=scale(self.thickness),
            width=scale(self.width),
            length=scale(self.length),
        )


@dataclass(frozen=True)
class Specs:
    dimensions: Optional[Dimensions] = None
    weight_kg: Optional[float] = None
    volume_l: Optional[float] = None
    power_w: Optional[float] = None
    storage_gb: Optional[float] = None

    def present_count(self) -> int:
        values = [self.dimensions] + [getattr(self, key) for key in NUMERIC_SPEC_KEYS]
        return sum(1 for v in values if v)


@dataclass(frozen=True)
class ExtractedAttributes:
    title: str
    brand: Optional[str]
    model: Optional[str]
    specs: Specs
    words: FrozenSet[str]
    category: ProductCategory
    exact_model_required: bool

    @property
    def completeness(self) -> int:
        """Number of non-absent fields (brand + model + each spec)."""
        return (1 if self.brand else 0) + (1 if self.model else 0) + self.specs.present_count()


# ---------------------------------------------------------------------------
# Unit conversion
# ---------------------------------------------------------------------------

_NUMBER = r'\d+(?:[.,]\d+)?'

# "5G" right after a digit is a network generation, not five grams
WEIGHT_PATTERN = re.compile(r'(?!(?-i:[2-5]G)\b)(' + _NUMBER + r')\s*(kg|кг|gr|g|t|lb|oz)\b', re.IGNORECASE)
VOLUME_PATTERN = re.compile(r'(' + _NUMBER + r')\s*(ml|мл|cl|m³|m3|l|л)\b', re.IGNORECASE)
POWER_PATTERN = re.compile(r'(' + _NUMBER + r')\s*(kw|mw|hp|watts|w|volts|volt|v)\b', re.IGNORECASE)
STORAGE_PATTERN = re.compile(r'(' + _NUMBER + r')\s*(gb|tb|mb|pb|гб|тб|мб)\b', re.IGNORECASE)

WEIGHT_TO_KG = {
    'kg': 1.0, 'кг': 1.0, 'g': 0.001, 'gr': 0.001,
    't': 1000.0, 'lb': 0.45359237, 'oz': 0.028349523125,
}
# ml and cl both divide by 100 (kept for compatibility with existing group names)
VOLUME_TO_L = {'l': 1.0, 'л': 1.0, 'ml': 0.01, 'мл': 0.01, 'cl': 0.01, 'm³': 1000.0, 'm3': 1000.0}
# Voltage is not power: a leading "18V" makes the power reading absent
POWER_TO_W = {
    'w': 1.0, 'watts': 1.0, 'kw': 1000.0, 'mw': 1000000.0, 'hp': 745.7,
    'v': None, 'volt': None, 'volts': None,
}
STORAGE_TO_GB = {
    'gb': 1.0, 'гб': 1.0, 'tb': 1024.0, 'тб': 1024.0,
    'mb': 1 / 1024, 'мб': 1 / 1024, 'pb': 1024.0 * 1024.0,
}


def parse_number(text) -> Optional[float]:
    """Parse '1,5' or '1.5' → 1.5. Returns None instead of raising."""
    if text is None:
        return None
    try:
        return float(str(text).strip().replace(',', '.'))
    except ValueError:
        return None


def _extract_quantity(title: str, pattern, factors: Dict[str, Optional[float]]) -> Optional[float]:
    if not isinstance(title, str):
        return None
    match = pattern.search(title)
    if not match:
        return None
    value = parse_number(match.group(1))
    factor = factors.get(match.group(2).lower())
    if value is None or factor is None:
        return None
    return value * factor


def extract_weight(title: str) -> Optional[float]:
    """First weight in the title, in kg ('25kg' → 25.0, '500 g' → 0.5)."""
    return _extract_quantity(title, WEIGHT_PATTERN, WEIGHT_TO_KG)


def extract_volume(title: str) -> Optional[float]:
    """First volume in the title, in liters."""
    return _extract_quantity(title, VOLUME_PATTERN, VOLUME_TO_L)


def extract_power(title: str) -> Optional[float]:
    """First power/voltage reading in the title, in watts (None for volts)."""
    return _extract_quantity(title, POWER_PATTERN, POWER_TO_W)


def extract_storage(title: str) -> Optional[float]:
    """First storage size in the title, in GB ('1TB' → 1024.0)."""
    return _extract_quantity(title, STORAGE_PATTERN, STORAGE_TO_GB)


# ---------------------------------------------------------------------------
# Dimensions
# ---------------------------------------------------------------------------

DIMENSIONS_PATTERN = re.compile(
    r'(' + _NUMBER + r')(?:\s*(?:x|х|×|\*|by|-)\s*' + _NUMBER + r'){1,2}'
    r'(?:\s*(mm|cm|m|мм|см|м)\b)?',
    re.IGNORECASE,
)
_DIMENSION_UNITS = {'mm': 'mm', 'мм': 'mm', 'cm': 'cm', 'см': 'cm', 'm': 'm', 'м': 'm'}


def is_insulation_title(title: str) -> bool:
    """Insulation cue words: vate / wool / insulation / izolācija / вата."""
    return isinstance(title, str) and bool(INSULATION_CUE_PATTERN.search(title))


def extract_dimensions(title: str) -> Optional[Dimensions]:
    """
    Extract "AxB" / "AxBxC" dimensions from a title.

    Examples:
        'Rockwool Rockmin 50x600x1200mm' → raw (50, 600, 1200), unit 'mm',
            thickness 50 / width 600 / length 1200 (insulation title)
        'Galds 80 x 120 cm'              → raw (80, 120), unit 'cm'

    For insulation titles with exactly three numbers the smallest is the
    thickness and the other two are width/length in ascending order.
    """
    if not isinstance(title, str):
        return None
    match = DIMENSIONS_PATTERN.search(title)
    if not match:
        return None

    numbers = [parse_number(n) for n in re.findall(_NUMBER, match.group(0))]
    numbers = [n for n in numbers if n is not None]
    if len(numbers) < 2:
        return None

    unit = _DIMENSION_UNITS.get((match.group(2) or 'mm').lower(), 'mm')
    ordered = tuple(sorted(numbers))

    if is_insulation_title(title) and len(numbers) == 3:
        return Dimensions(
            raw=tuple(numbers), sorted=ordered, unit=unit,
            thickness=ordered[0], width=ordered[1], length=ordered[2],
        )
    return Dimensions(raw=tuple(numbers), sorted=ordered, unit=unit)


def _relative_difference(a: float, b: float) -> float:
    bigger = max(a, b)
    if bigger <= 0:
        return 0.0
    return abs(a - b) / bigger


def compare_dimensions(
    dims1: Optional[Dimensions],
    dims2: Optional[Dimensions],
    is_insulation: bool = False,
) -> float:
    """
    Score two dimension sets in [0, 1]; 0 means "cannot be the same product".

    Insulation (both sides labelled): thickness within 1mm, width and length
    within 5% → 1 - (width_diff + length_diff) / 4, else 0.
    Otherwise: mean over axes of 1 - diff / tolerance, where tolerance is 5%
    (10% above 1000mm) and an axis outside tolerance scores 0.
    """
    if dims1 is None or dims2 is None:
        return 0.0
    if not dims1.sorted or len(dims1.sorted) != len(dims2.sorted):
        return 0.0

    d1 = dims1.in_millimeters()
    d2 = dims2.in_millimeters()

    if is_insulation and d1.thickness is not None and d2.thickness is not None:
        if abs(d1.thickness - d2.thickness) > INSULATION_THICKNESS_TOLERANCE_MM:
            return 0.0
        width_diff = _relative_difference(d1.width, d2.width)
        length_diff = _relative_difference(d1.length, d2.length)
        if width_diff <= DIMENSION_TOLERANCE and length_diff <= DIMENSION_TOLERANCE:
            return 1 - (width_diff + length_diff) / 4
        return 0.0

    axis_scores = []
    for a, b in zip(d1.sorted, d2.sorted):
        diff = _relative_difference(a, b)
        tolerance = LARGE_DIMENSION_TOLERANCE if max(a, b) > LARGE_DIMENSION_MM else DIMENSION_TOLERANCE
        axis_scores.append(1 - diff / tolerance if diff <= tolerance else 0.0)
    return sum(axis_scores) / len(axis_scores)


# ---------------------------------------------------------------------------
# Brand / model / words
# ---------------------------------------------------------------------------

def extract_brand(title: str) -> Optional[str]:
    """
    Canonical brand of a title.

    Known brand literals win (leftmost one); otherwise the first run of
    Capitalized words is taken. Result is upper-cased and alias-resolved:
        'Apple iPhone 13 128GB'       → 'APPLE'
        'Weber.Vetonit LR+ 20kg'      → 'WEBER'
        'Sony PS5 Digital Edition'    → 'SONY'
        'lowercase only title'        → None
    """
    if not isinstance(title, str) or not title.strip():
        return None
    match = KNOWN_BRAND_PATTERN.search(title) or GENERIC_BRAND_PATTERN.search(title)
    if not match:
        return None
    brand = re.sub(r'\s+', ' ', match.group(0).upper()).strip()
    return BRAND_ALIASES.get(brand, brand)


def _strip_specifications(title: str) -> str:
    """Remove the first dimensions/weight/volume/power/storage match and noise words."""
    s = DIMENSIONS_PATTERN.sub(' ', title, count=1)
    s = WEIGHT_PATTERN.sub(' ', s, count=1)
    s = VOLUME_PATTERN.sub(' ', s, count=1)
    # Voltage stays: "GSB 18V-55" is a model code, not a power reading
    power = POWER_PATTERN.search(s)
    if power and POWER_TO_W.get(power.group(2).lower()) is not None:
        s = s[:power.start()] + ' ' + s[power.end():]
    s = STORAGE_PATTERN.sub(' ', s, count=1)
    s = MODEL_NOISE_PATTERN.sub(' ', s)
    return re.sub(r'\s+', ' ', s).strip()


def _first_model_match(title: str):
    if not isinstance(title, str) or not title.strip():
        return None, None
    clean = _strip_specifications(title)
    for rule in MODEL_RULES:
        if rule.context is not None and not rule.context.search(title):
            continue
        match = rule.pattern.search(clean)
        if match:
            return rule, match
    return None, None


def extract_model(title: str) -> Optional[str]:
    """
    Canonical model code of a title.

    Specs and noise words are removed first, then MODEL_RULES are tried in
    order and the first rule that matches wins:
        'Sony PlayStation 5 Digital Edition' → 'PS5DIGITALEDITION'
        'LG OLED55C1PUB 55"'                 → 'OLED55C1'
        'Knauf Rotband Plus 30kg'            → 'ROTBAND'
        'Samsung Galaxy S21 Ultra 256GB'     → 'S21ULTRA'
    """
    rule, match = _first_model_match(title)
    if rule is None:
        return None
    return rule.normalize(match.group(0)) or None


def extract_model_rule(title: str) -> Optional[str]:
    """Name of the MODEL_RULES entry behind extract_model(title), for diagnostics."""
    rule, _ = _first_model_match(title)
    return rule.name if rule is not None else None


_PUNCTUATION = re.compile(r'[^\w\s]|_')


def extract_significant_words(title: str) -> FrozenSet[str]:
    """Lowercased title tokens longer than 2 chars that are not stopwords or plain numbers."""
    if not isinstance(title, str):
        return frozenset()
    tokens = _PUNCTUATION.sub(' ', title.lower()).split()
    return frozenset(
        t for t in tokens
        if len(t) > 2 and t not in STOPWORDS and not t.isdigit()
    )


def extract_specifications(title: str) -> Specs:
    return Specs(
        dimensions=extract_dimensions(title),
        weight_kg=extract_weight(title),
        volume_l=extract_volume(title),
        power_w=extract_power(title),
        storage_gb=extract_storage(title),
    )


def classify_category(title: str, brand: Optional[str]) -> ProductCategory:
    """CONSTRUCTION for insulation/cement/plaster brands or keywords, else ELECTRONICS."""
    if in_brand_family(brand, CONSTRUCTION_BRANDS):
        return ProductCategory.CONSTRUCTION
    if isinstance(title, str) and CONSTRUCTION_KEYWORD_PATTERN.search(title):
        return ProductCategory.CONSTRUCTION
    return ProductCategory.ELECTRONICS


@lru_cache(maxsize=50000)
def extract_attributes(title: str) -> ExtractedAttributes:
    """
    Full attribute bundle for one listing title.

    Cached: the same title always yields the same (immutable) bundle, and
    pairwise scoring calls this N times per listing.
    """
    if not isinstance(title, str):
        title = ''
    brand = extract_brand(title)
    return ExtractedAttributes(
        title=title,
        brand=brand,
        model=extract_model(title),
        specs=extract_specifications(title),
        words=extract_significant_words(title),
        category=classify_category(title, brand),
        exact_model_required=in_brand_family(brand, EXACT_MODEL_BRANDS),
    )


# ---------------------------------------------------------------------------
# Similarity scoring
# ---------------------------------------------------------------------------

def calculate_string_similarity(str1: str, str2: str) -> float:
    """1 - Levenshtein distance / longer length (1.0 for equal strings)."""
    if str1 == str2:
        return 1.0
    if not str1 or not str2:
        return 0.0
    return Levenshtein.normalized_similarity(str1, str2)


def calculate_word_similarity(words1: FrozenSet[str], words2: FrozenSet[str]) -> float:
    """Jaccard index of two word sets; 0 if either is empty."""
    if not words1 or not words2:
        return 0.0
    return len(words1 & words2) / len(words1 | words2)


def _compare_values(value1: Optional[float], value2: Optional[float]) -> float:
    if not value1 or not value2:
        return 0.0
    diff = _relative_difference(value1, value2)
    return 1.0 if diff <= SPEC_TOLERANCE else 1 - diff


def compare_specifications(specs1: Specs, specs2: Specs, is_insulation: bool = False) -> float:
    """Weighted spec agreement over the kinds present on both sides (0 if none)."""
    total = 0.0
    weight_used = 0.0

    if specs1.dimensions is not None and specs2.dimensions is not None:
        total += compare_dimensions(specs1.dimensions, specs2.dimensions, is_insulation) * SPEC_WEIGHTS['dimensions']
        weight_used += SPEC_WEIGHTS['dimensions']

    for key in NUMERIC_SPEC_KEYS:
        value1, value2 = getattr(specs1, key), getattr(specs2, key)
        if value1 and value2:
            total += _compare_values(value1, value2) * SPEC_WEIGHTS[key]
            weight_used += SPEC_WEIGHTS[key]

    return total / weight_used if weight_used > 0 else 0.0


def _has_matching_spec(specs1: Specs, specs2: Specs) -> bool:
    for key in NUMERIC_SPEC_KEYS:
        value1, value2 = getattr(specs1, key), getattr(specs2, key)
        if value1 and value2 and _relative_difference(value1, value2) <= SPEC_TOLERANCE:
            return True
    return False


def _same_title(title1: str, title2: str) -> bool:
    """Both titles non-empty and equal ignoring case and whitespace (whitespace-only titles included)."""
    if not isinstance(title1, str) or not isinstance(title2, str) or not title1 or not title2:
        return False
    return ' '.join(title1.lower().split()) == ' '.join(title2.lower().split())


def score_breakdown(title1: str, title2: str) -> dict:
    """
    Per-factor breakdown of calculate_title_similarity().

    Returns a dict with:
        model, brand, specs, words : component scores in [0, 1]
        weighted                   : weighted sum before bonuses
        bonuses                    : names of the multiplicative bonuses applied
        veto                       : 'exact_model' if the construction veto fired, else ''
        identical                  : titles equal ignoring case/whitespace
        score                      : final similarity in [0, 1]
    """
    attrs1 = extract_attributes(title1)
    attrs2 = extract_attributes(title2)

    if attrs1.model and attrs2.model:
        model_score = 1.0 if attrs1.model == attrs2.model else calculate_string_similarity(attrs1.model, attrs2.model)
    else:
        model_score = 0.0
    brand_score = 1.0 if attrs1.brand and attrs1.brand == attrs2.brand else 0.0
    # Generic dimension path here; the insulation path only drives the veto in is_similar_title()
    specs_score = compare_specifications(attrs1.specs, attrs2.specs)
    word_score = calculate_word_similarity(attrs1.words, attrs2.words)

    weighted = (
        model_score * WEIGHTS['model']
        + brand_score * WEIGHTS['brand']
        + specs_score * WEIGHTS['specs']
        + word_score * WEIGHTS['words']
    )

    score = weighted
    bonuses: List[str] = []
    if attrs1.model and attrs1.model == attrs2.model:
        score *= MODEL_MATCH_BONUS
        bonuses.append('model')
    if attrs1.brand and attrs1.brand == attrs2.brand:
        score *= BRAND_MATCH_BONUS
        bonuses.append('brand')
    if _has_matching_spec(attrs1.specs, attrs2.specs):
        score *= SPEC_MATCH_BONUS
        bonuses.append('specs')
    score = min(1.0, score)

    veto = ''
    identical = _same_title(title1, title2)
    if identical:
        score = 1.0
    elif (attrs1.exact_model_required or attrs2.exact_model_required) and attrs1.model != attrs2.model:
        veto = 'exact_model'
        score = 0.0

    return {
        'model': model_score,
        'brand': brand_score,
        'specs': specs_score,
        'words': word_score,
        'weighted': weighted,
        'bonuses': bonuses,
        'veto': veto,
        'identical': identical,
        'score': score,
    }


def calculate_title_similarity(title1: str, title2: str) -> float:
    """Symmetric similarity of two listing titles in [0, 1]."""
    return score_breakdown(title1, title2)['score']


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def is_similar_title(title1: str, title2: str) -> bool:
    """
    Decide whether two listing titles are the same physical product.

    Score must reach the threshold (0.60 insulation / 0.65 otherwise) AND,
    when both titles carry dimensions, the dimensions must be compatible.
    """
    similarity = calculate_title_similarity(title1, title2)
    is_insulation = is_insulation_title(title1) or is_insulation_title(title2)
    threshold = INSULATION_SIMILARITY_THRESHOLD if is_insulation else SIMILARITY_THRESHOLD

    dims1 = extract_attributes(title1).specs.dimensions
    dims2 = extract_attributes(title2).specs.dimensions
    if dims1 is not None and dims2 is not None:
        if compare_dimensions(dims1, dims2, is_insulation) == 0:
            return False

    return similarity >= threshold


_MODEL_PREFIX_PATTERN = re.compile(r'^(?:' + '|'.join(MODEL_BRAND_PREFIXES) + r')+')


def normalize_model_number(model: str) -> str:
    """
    Loose model key: lowercase, no dashes/spaces, leading brand prefixes removed.

    'Paroc eXtra-50' → 'extra50'; applying it twice changes nothing.
    """
    if not isinstance(model, str):
        return ''
    s = re.sub(r'[-\s]', '', model.lower())
    return _MODEL_PREFIX_PATTERN.sub('', s)
