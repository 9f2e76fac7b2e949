"""
Static lookup tables for listing matching.

Everything here is read-only configuration data, built once at import time:
    - Known brand literals and the brand alias map
    - Brand families (construction brands, exact-model brands, power tools)
    - Insulation / construction cue words (English, Latvian, Russian)
    - Stopwords for significant-word extraction
    - The ORDERED model-detection rules (first match wins)

Bump RULES_VERSION whenever a table changes so cached results and benchmark
reports can be tied back to the rule set that produced them.
"""

import re
from types import MappingProxyType
from typing import Callable, NamedTuple, Optional, Pattern

RULES_VERSION = "2024.06"

# ---------------------------------------------------------------------------
# Brands
# ---------------------------------------------------------------------------

# Curated brand literals (consumer electronics, appliances, tools, construction).
# Multi-word literals are listed so the alias map can resolve them.
KNOWN_BRANDS = (
    'Samsung', 'Apple', 'iPhone', 'LG', 'Sony', 'PlayStation', 'PS5', 'PS4',
    'Xbox', 'Microsoft', 'Philips', 'Panasonic', 'Dell', 'HP', 'Lenovo',
    'Asus', 'Acer', 'Xiaomi', 'Huawei',
    'Bosch', 'Siemens', 'Electrolux', 'Whirlpool', 'AEG', 'Zanussi', 'Miele',
    'Makita', 'DeWalt', 'Milwaukee', 'Hilti', 'Metabo',
    'Knauf', 'Knauf Insulation', 'Paroc', 'Isover', 'Saint-Gobain',
    'Saint Gobain', 'Rockwool', 'Weber', 'Weber.Vetonit', 'Vetonit', 'Sakret',
    'Sadolin', 'Kerama Marazzi', 'Ceresit', 'Baumit', 'Caparol', 'Gyproc',
)

BRAND_ALIASES = MappingProxyType({
    'IPHONE': 'APPLE',
    'WEBER.VETONIT': 'WEBER',
    'VETONIT': 'WEBER',
    'KNAUF INSULATION': 'KNAUF',
    'SAINT GOBAIN': 'ISOVER',
    'SAINT-GOBAIN': 'ISOVER',
    'ISOVER SAINT-GOBAIN': 'ISOVER',
    'PS5': 'PLAYSTATION',
    'PS4': 'PLAYSTATION',
    'PLAYSTATION 5': 'PLAYSTATION',
    'PLAYSTATION 4': 'PLAYSTATION',
    'XBOX SERIES': 'XBOX',
    'PAROC OWENS CORNING': 'PAROC',
    'ROCKWOOL ROCKMIN': 'ROCKWOOL',
})


def _literal_alternation(literals) -> str:
    # Longest first so "Knauf Insulation" wins over "Knauf" at the same position
    ordered = sorted(literals, key=len, reverse=True)
    return '|'.join(r'\s+'.join(re.escape(part) for part in lit.split()) for lit in ordered)


KNOWN_BRAND_PATTERN = re.compile(
    r'\b(?:' + _literal_alternation(KNOWN_BRANDS) + r')\b',
    re.IGNORECASE,
)

# Fallback: first run of Capitalized words (case-sensitive on purpose)
GENERIC_BRAND_PATTERN = re.compile(r'\b[A-Z][a-zA-Z]*(?:\s+[A-Z][a-zA-Z]+)*\b')

# Insulation / cement / plaster brands: drives ProductCategory.CONSTRUCTION
CONSTRUCTION_BRANDS = frozenset({
    'ROCKWOOL', 'PAROC', 'KNAUF', 'ISOVER', 'WEBER', 'CERESIT', 'BAUMIT',
    'SAKRET', 'GYPROC',
})

# Sold in many near-identical package sizes: models must match exactly
EXACT_MODEL_BRANDS = frozenset({'KNAUF', 'SAKRET', 'WEBER'})

PHONE_BRANDS = frozenset({'APPLE', 'SAMSUNG'})
POWER_TOOL_BRANDS = frozenset({'DEWALT', 'MAKITA', 'BOSCH'})
# Weight is not a useful display attribute for these (usually a "5G" or packaging artefact)
NO_WEIGHT_BRANDS = frozenset({'APPLE', 'SAMSUNG', 'LENOVO', 'ASUS', 'LG'})

# Stripped from the start of model strings by normalize_model_number()
MODEL_BRAND_PREFIXES = ('paroc', 'knauf', 'kronospan', 'cemex', 'rockwool', 'isover', 'gyproc')


def in_brand_family(brand: Optional[str], family) -> bool:
    """True if any word of a canonical brand belongs to the given family."""
    if not brand:
        return False
    return any(word in family for word in brand.split())


# ---------------------------------------------------------------------------
# Category cues
# ---------------------------------------------------------------------------

INSULATION_CUE_PATTERN = re.compile(r'vate|wool|insulation|izolācija|вата', re.IGNORECASE)

CONSTRUCTION_KEYWORD_PATTERN = re.compile(
    r'vate|wool|insulation|izolācija|вата|ģipškarton|plasterboard|plaster|'
    r'apmetums|\bjava\b|cement',
    re.IGNORECASE,
)

# Title context in which construction product codes are trusted
CONSTRUCTION_CONTEXT_PATTERN = re.compile(
    r'\b(?:' + _literal_alternation(CONSTRUCTION_BRANDS | {'VETONIT'}) + r')\b|'
    + CONSTRUCTION_KEYWORD_PATTERN.pattern,
    re.IGNORECASE,
)

# Insulation material prefixes for canonical names (checked in order)
INSULATION_PREFIXES = (
    (re.compile(r'AKMENS|STONE|ROCK'), 'AKMENS VATE'),
    (re.compile(r'STIKLA|GLASS'), 'STIKLA VATE'),
    (re.compile(r'EKOVATE|ECO'), 'EKOVATE'),
)

PRODUCT_LINE_SUFFIXES = ('PREMIUM', 'PLUS', 'EXTRA', 'PRO')

# Latvian packaging words that leak into construction names
CONSTRUCTION_NAME_NOISE = ('LOKSN', 'PLAKSN', 'IEPAK', 'M2')

# Appliance model-number shapes where a storage-looking value is not storage
APPLIANCE_MODEL_PATTERN = re.compile(r'(?:WAV|KGN|WM|DCD)\d+', re.IGNORECASE)

# ---------------------------------------------------------------------------
# Significant words
# ---------------------------------------------------------------------------

STOPWORDS = frozenset({
    # English function words
    'the', 'with', 'and', 'or', 'in', 'at', 'on', 'for', 'to', 'of', 'by', 'up',
    'new', 'from', 'set', 'pcs', 'gab',
    # Units and measurements
    'mm', 'cm', 'm', 'kg', 'g', 't', 'lb', 'oz', 'l', 'ml', 'w', 'kw', 'v', 'gb',
    'tb', 'mb', 'inch', 'inches', 'ft', 'feet', 'watts', 'volt', 'volts', 'size',
    'weight', 'length',
    # Colors
    'black', 'white', 'red', 'blue', 'green', 'silver', 'gold', 'grey', 'gray',
    'yellow', 'melns', 'balts', 'sarkans', 'zils', 'zaļš', 'pelēks',
    # Marketing descriptors
    'original', 'genuine', 'premium', 'professional', 'basic', 'standard', 'plus',
    'pro', 'max', 'mini', 'ultra', 'super', 'extra', 'lite', 'light', 'heavy', 'duty',
    # Latvian function words and construction descriptors
    'ar', 'no', 'un', 'par', 'priekš', 'uz', 'pie', 'līdz', 'jauns', 'oriģināls',
    'akmens', 'vate', 'siltumizolācija', 'izolācija', 'minerālvate',
    'java', 'masa', 'apmetums', 'ģipša', 'dekoratīvais', 'iekšdarbu', 'ārdarbiem',
    'grīdas', 'sienas', 'āra', 'pašizlīdzinošā', 'izlīdzināšanas',
})

# ---------------------------------------------------------------------------
# Model detection rules (ORDERED, first match wins)
# ---------------------------------------------------------------------------

class ModelRule(NamedTuple):
    """One category rule: where to look, and how to canonicalize what was found."""
    name: str
    pattern: Pattern
    normalize: Callable[[str], str]
    context: Optional[Pattern] = None  # must also match the full title


def _strip_separators(code: str) -> str:
    return re.sub(r'[\s-]+', '', code).upper()


def _normalize_console(code: str) -> str:
    return re.sub(r'\s+', '', re.sub(r'PlayStation\s*5', 'PS5', code, flags=re.IGNORECASE)).upper()


def _normalize_tv(code: str) -> str:
    return re.sub(r'(?:PUB|AUA)$', '', re.sub(r'\s+', '', code), flags=re.IGNORECASE).upper()


COLLAPSED_CONSTRUCTION_FAMILIES = ('ROTBAND', 'ROCKMIN', 'PLAZA')
NUMBERED_CONSTRUCTION_FAMILY = re.compile(r'(?:BINDO|LINIO)\s*\d+', re.IGNORECASE)


def _normalize_construction(code: str) -> str:
    upper = code.upper()
    for family in COLLAPSED_CONSTRUCTION_FAMILIES:
        if family in upper:
            return family
    numbered = NUMBERED_CONSTRUCTION_FAMILY.search(code)
    if numbered:
        return re.sub(r'\s+', '', numbered.group(0)).upper()
    return _strip_separators(code)


def _normalize_phone(code: str) -> str:
    s = re.sub(r'\s+', '', code).upper()
    # "GALAXY S21" and "S21" must collapse to the same token
    s = re.sub(r'GALAXY(?=[A-Z])', '', s)
    return s.replace('GALAXY', 'S')


def _normalize_generic(code: str) -> str:
    s = re.sub(r'[\s-]+', '', code)
    s = re.sub(r'[OО]', '0', s)
    s = re.sub(r'[Il]', '1', s)
    return s.upper()


MODEL_RULES = (
    ModelRule(
        'console',
        re.compile(r'\b(?:PlayStation\s*5|PS5|Xbox\s*Series\s*[XS])(?:\s*Digital\s*Edition)?\b', re.IGNORECASE),
        _normalize_console,
    ),
    ModelRule(
        'tv',
        re.compile(r'\b(?:OLED|QLED|QN|UN)\s*\d{2,3}[A-Z]\d[A-Z]*\b', re.IGNORECASE),
        _normalize_tv,
    ),
    ModelRule(
        'monitor',
        re.compile(r'\b(?:[A-Z]?\d{2}[A-Z]+\d{3,4}(?:-[A-Z])?|[A-Z]{2,3}\d{2}[A-Z]+\d{3})\b', re.IGNORECASE),
        _strip_separators,
    ),
    ModelRule(
        'construction',
        re.compile(
            r'\b(?:TP\s*115|KL-?37|(?:EXTRA|ULTRA|SUPER|PREMIUM|STANDARD|BASIC)(?:\s*(?:PLUS|ROCK))?|'
            r'ROTBAND(?:\s*PLUS)?|ROCKMIN(?:\s*PLUS)?|MP-?75|OAD|CC|(?:PRIM\s*)?801|VH|3000|'
            r'BINDO\s*\d+|LINIO\s*\d+|PLAZA\s*(?:GREY|GRAY))\b',
            re.IGNORECASE,
        ),
        _normalize_construction,
        context=CONSTRUCTION_CONTEXT_PATTERN,
    ),
    ModelRule(
        'phone',
        re.compile(
            r'\b(?:(?:GALAXY|IPHONE)\s*(?:[A-Z]\d+|\d+)|S\d{1,2})\b(?:\s*(?:ULTRA|PLUS|PRO|MAX)\b){0,2}',
            re.IGNORECASE,
        ),
        _normalize_phone,
    ),
    ModelRule('appliance', re.compile(r'\b[A-Z]{2,}\d+[A-Z0-9]*\b'), _strip_separators),
    ModelRule('power_tool', re.compile(r'\b[A-Z]{2,3}[-\s]?\d+(?:V|W)?(?:-\d+)?\b'), _strip_separators),
    ModelRule(
        'generic_code',
        re.compile(r'\b(?=[A-Z0-9-]*\d)(?:[A-Z]+-)?[A-Z0-9]{3,}(?:-[A-Z0-9]+)*\b'),
        _normalize_generic,
    ),
    ModelRule(
        'version',
        re.compile(r'\b(?:v\d+(?:\.\d+)*|\d+\.\d+(?:\.\d+)*)\b', re.IGNORECASE),
        lambda code: code.upper(),
    ),
)

# Words removed from a title before model detection
MODEL_NOISE_PATTERN = re.compile(r'\b(?:new|original|genuine)\b', re.IGNORECASE)
