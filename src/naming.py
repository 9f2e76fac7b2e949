"""
Canonical display names for groups of matched listings.

The most information-complete listing of a group is used as the base and a
name is synthesized from its extracted attributes:

    Construction:  AKMENS VATE ROCKWOOL ROCKMIN PLUS (100x600x1200mm)
                   KNAUF ROTBAND (30kg)
    Electronics:   SAMSUNG S21 (128GB, 5G)
                   BOSCH GSB18V55 (18V)
"""

import re
from typing import Iterable, Optional

from matcher import (
    ExtractedAttributes,
    ProductCategory,
    extract_attributes,
    parse_number,
)
from product_rules import (
    APPLIANCE_MODEL_PATTERN,
    CONSTRUCTION_NAME_NOISE,
    INSULATION_CUE_PATTERN,
    INSULATION_PREFIXES,
    NO_WEIGHT_BRANDS,
    PHONE_BRANDS,
    POWER_TOOL_BRANDS,
    PRODUCT_LINE_SUFFIXES,
    in_brand_family,
)

_SUFFIX_ALTERNATION = '|'.join(PRODUCT_LINE_SUFFIXES)
_TRAILING_SUFFIX = re.compile(r'(?:' + _SUFFIX_ALTERNATION + r')\s*$', re.IGNORECASE)
_SUFFIX_WORD = re.compile(r'\b(' + _SUFFIX_ALTERNATION + r')\b')
_KG_PATTERN = re.compile(r'(\d+(?:[.,]\d+)?)\s*(?:kg|кг)\b', re.IGNORECASE)
_VOLTAGE_PATTERN = re.compile(r'(\d+)\s*V\b', re.IGNORECASE)
_NETWORK_5G_PATTERN = re.compile(r'\b5G\b', re.IGNORECASE)
_NOISE_PATTERN = re.compile(r'\b(?:' + '|'.join(CONSTRUCTION_NAME_NOISE) + r')\b')

# Tool weights above this are almost always packaging weights
MAX_TOOL_WEIGHT_KG = 20


def format_number(value: float) -> str:
    """100.0 → '100', 1.25 → '1.25', 0.4536 → '0.45'."""
    return f"{value:.2f}".rstrip('0').rstrip('.')


def _title_of(item) -> str:
    if isinstance(item, str):
        return item
    title = getattr(item, 'title', '')
    return title if isinstance(title, str) else ''


def _contains_phrase(parts, phrase: str) -> bool:
    return f" {phrase} " in f" {' '.join(parts)} "


def _tidy(name: str) -> str:
    s = re.sub(r'\s+', ' ', name)
    s = re.sub(r'\b(\w+)(?:\s+\1\b)+', r'\1', s)  # "VATE VATE" → "VATE"
    s = re.sub(r'\(\s+', '(', s)
    s = re.sub(r'\s+\)', ')', s)
    return s.strip()


def select_base_attributes(group: Iterable) -> Optional[ExtractedAttributes]:
    """
    Attributes of the most information-complete listing in a group.

    Completeness = brand + model + each spec present. Ties go to the longer
    title (it usually carries the product-line suffix), then to the earlier one.
    """
    best = None
    best_key = None
    for item in group:
        attrs = extract_attributes(_title_of(item))
        key = (attrs.completeness, len(attrs.title))
        if best is None or key > best_key:
            best, best_key = attrs, key
    return best


def get_construction_material_name(attrs: ExtractedAttributes) -> str:
    """
    Name for insulation, plaster, cement and similar materials.

    Order: insulation type, brand, model as "PREFIX NUM", product-line suffix,
    (dimensions), (weight).
    """
    parts = []
    normalized_title = re.sub(r'\s+', ' ', attrs.title.upper().replace(',', ' ')).strip()

    if INSULATION_CUE_PATTERN.search(normalized_title):
        for pattern, prefix in INSULATION_PREFIXES:
            if pattern.search(normalized_title):
                parts.append(prefix)
                break

    if attrs.brand and attrs.brand not in ' '.join(parts):
        parts.append(attrs.brand)

    if attrs.model:
        clean_model = _TRAILING_SUFFIX.sub('', attrs.model)
        if attrs.brand:
            clean_model = clean_model.replace(attrs.brand, '')
        clean_model = re.sub(r'\s+', ' ', clean_model).strip()

        model_number = re.search(r'\d+', clean_model)
        if model_number:
            model_prefix = re.sub(r'\d.*$', '', clean_model).strip()
            formatted = f"{model_prefix} {model_number.group(0)}" if model_prefix else model_number.group(0)
        else:
            formatted = clean_model
        if formatted and not _contains_phrase(parts, formatted):
            parts.append(formatted)

    suffix = _SUFFIX_WORD.search(normalized_title)
    if suffix and not _contains_phrase(parts, suffix.group(1)):
        parts.append(suffix.group(1))

    dims = attrs.specs.dimensions
    if dims is not None:
        parts.append(f"({'x'.join(format_number(v) for v in dims.sorted)}{dims.unit})")

    weight = _KG_PATTERN.search(attrs.title)
    if weight:
        kg = parse_number(weight.group(1))
        if kg is not None:
            parts.append(f"({format_number(kg)}kg)")

    name = _NOISE_PATTERN.sub('', _tidy(' '.join(parts)))
    return re.sub(r'\s+', ' ', name).strip()


def _format_storage(size_gb: float) -> str:
    if size_gb >= 1024:
        return f"{size_gb / 1024:.0f}TB"
    return f"{format_number(size_gb)}GB"


def _format_weight(weight_kg: float) -> str:
    if weight_kg < 0.1:
        return f"{weight_kg * 1000:.0f}g"
    if weight_kg >= 1000:
        return f"{weight_kg / 1000:.1f}t"
    return f"{format_number(weight_kg)}kg"


def _format_power(power_w: float) -> str:
    if power_w >= 1000:
        return f"{power_w / 1000:.1f}kW"
    return f"{format_number(power_w)}W"


def _clean_electronics_model(brand: str, model: str) -> str:
    if in_brand_family(brand, PHONE_BRANDS) and re.search(r'IPHONE|GALAXY|S\d+', model, re.IGNORECASE):
        return re.sub(r'GALAXY|IPHONE', '', model, flags=re.IGNORECASE).strip()
    if brand == 'LG' and re.search(r'OLED\d+', model, re.IGNORECASE):
        return re.sub(r'(?:PUB|AUA)$', '', model, flags=re.IGNORECASE)
    if in_brand_family(brand, POWER_TOOL_BRANDS):
        return re.sub(r'(?:-[A-Z0-9]+)+$', '', model, flags=re.IGNORECASE)
    return model


def get_electronics_name(attrs: ExtractedAttributes) -> str:
    """Name for electronics and appliances: BRAND MODEL (storage, weight, power, voltage, 5G)."""
    parts = []
    brand = attrs.brand or ''
    model = attrs.model or ''
    is_tool = in_brand_family(brand, POWER_TOOL_BRANDS)

    if brand:
        parts.append(brand)
    if model and model.upper() != brand.upper():
        cleaned = _clean_electronics_model(brand, model)
        if cleaned:
            parts.append(cleaned)

    spec_parts = []
    specs = attrs.specs

    if specs.storage_gb and not APPLIANCE_MODEL_PATTERN.search(model):
        spec_parts.append(_format_storage(specs.storage_gb))

    if specs.weight_kg and not in_brand_family(brand, NO_WEIGHT_BRANDS):
        if is_tool:
            if 0 < specs.weight_kg < MAX_TOOL_WEIGHT_KG:
                spec_parts.append(f"{format_number(specs.weight_kg)}kg")
        else:
            spec_parts.append(_format_weight(specs.weight_kg))

    if specs.power_w:
        spec_parts.append(_format_power(specs.power_w))

    if is_tool:
        voltage = _VOLTAGE_PATTERN.search(attrs.title)
        if voltage:
            spec_parts.append(f"{voltage.group(1)}V")

    if in_brand_family(brand, PHONE_BRANDS) and _NETWORK_5G_PATTERN.search(attrs.title):
        spec_parts.append('5G')

    if spec_parts:
        parts.append(f"({', '.join(spec_parts)})")

    return ' '.join(parts)


def get_standardized_group_name(group: Iterable) -> str:
    """
    Canonical name for a group of listings judged to be the same product.

    `group` holds listings (anything with a .title) or raw title strings.
    Returns '' for an empty group.
    """
    base = select_base_attributes(group or [])
    if base is None:
        return ''
    if base.category is ProductCategory.CONSTRUCTION:
        return get_construction_material_name(base)
    return get_electronics_name(base)
