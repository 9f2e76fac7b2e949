"""
Batch layer: turn a flat list of store listings into named product groups.

Grouping is greedy: listings are visited in input order and each one joins
the first group whose seed (first member) it matches, otherwise it starts a
new group. Groups are then named with get_standardized_group_name() and
ordered by cheapest price.

The pairwise similarity matrix is exposed separately for diagnostics. Rows
are independent, so they are fanned out over a thread pool
(LISTING_MATCHER_WORKERS, default 4).
"""

import logging
import os
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from matcher import calculate_title_similarity, is_similar_title
from naming import get_standardized_group_name

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = int(os.getenv("LISTING_MATCHER_WORKERS", "4") or "4")


@dataclass(frozen=True)
class Listing:
    """One scraped product record. Only `title` is used for matching."""
    title: str
    price: Optional[float] = None
    url: str = ''
    image: str = ''
    store: str = ''


@dataclass(frozen=True)
class ProductGroup:
    name: str
    listings: Tuple[Listing, ...]

    @property
    def cheapest(self) -> Optional[Listing]:
        priced = [l for l in self.listings if l.price is not None]
        return min(priced, key=lambda l: l.price) if priced else None

    @property
    def min_price(self) -> Optional[float]:
        cheapest = self.cheapest
        return cheapest.price if cheapest else None

    @property
    def stores(self) -> List[str]:
        return sorted({l.store for l in self.listings if l.store})


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------

def group_listings(
    listings: Iterable[Listing],
    is_match: Callable[[str, str], bool] = is_similar_title,
    progress_callback: Optional[Callable] = None,
) -> List[ProductGroup]:
    """
    Cluster listings into ProductGroups.

    Args:
        listings: listings in the order they were collected
        is_match: pairwise decision, is_similar_title by default
        progress_callback: optional callable(current, total) for UI progress

    Returns:
        Named groups ordered by cheapest price (groups without any price last).
    """
    listings = list(listings)
    total = len(listings)
    clusters: List[List[Listing]] = []

    for i, listing in enumerate(listings, 1):
        for members in clusters:
            if is_match(members[0].title, listing.title):
                members.append(listing)
                logger.debug("'%s' joined group seeded by '%s'", listing.title, members[0].title)
                break
        else:
            clusters.append([listing])

        if progress_callback and (i % 50 == 0 or i == total):
            progress_callback(i, total)

    groups = [
        ProductGroup(name=get_standardized_group_name(members), listings=tuple(members))
        for members in clusters
    ]
    groups.sort(key=lambda g: (g.min_price is None, g.min_price or 0.0))

    logger.info("Grouped %d listings into %d product groups", total, len(groups))
    return groups


def similarity_matrix(listings: Sequence[Listing], max_workers: Optional[int] = None) -> pd.DataFrame:
    """
    Symmetric N×N DataFrame of calculate_title_similarity() scores.

    Only the upper triangle is computed; each row is an independent task.
    """
    titles = [l.title for l in listings]
    n = len(titles)
    scores = [[0.0] * n for _ in range(n)]

    def score_row(i: int) -> Tuple[int, List[float]]:
        return i, [calculate_title_similarity(titles[i], titles[j]) for j in range(i, n)]

    with ThreadPoolExecutor(max_workers=max_workers or DEFAULT_WORKERS) as executor:
        for i, row in executor.map(score_row, range(n)):
            for offset, score in enumerate(row):
                j = i + offset
                scores[i][j] = score
                scores[j][i] = score

    logger.debug("Computed %d pairwise similarities", n * (n - 1) // 2)
    return pd.DataFrame(scores, index=titles, columns=titles)


# ---------------------------------------------------------------------------
# DataFrame conversion
# ---------------------------------------------------------------------------

_PRICE_PATTERN = re.compile(r'\d[\d\s.,]*')
# Last separator followed by 1-2 digits is the decimal point
_DECIMAL_PART = re.compile(r'[.,](\d{1,2})$')


def parse_price(value) -> Optional[float]:
    """
    Parse a scraped price: 12.5 → 12.5, '1 299,99 €' → 1299.99,
    '1.299,99' / '1,299.99' → 1299.99, 'n/a' → None.
    """
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return None if pd.isna(value) else float(value)
    text = str(value).replace('\xa0', ' ').strip()
    match = _PRICE_PATTERN.search(text)
    if not match:
        return None
    number = re.sub(r'\s+', '', match.group(0)).rstrip('.,')
    decimal = _DECIMAL_PART.search(number)
    if decimal:
        number = re.sub(r'[.,]', '', number[:decimal.start()]) + '.' + decimal.group(1)
    else:
        number = re.sub(r'[.,]', '', number)
    try:
        return float(number)
    except ValueError:
        return None


# Column role detection keywords (English + Latvian store exports)
TITLE_KEYWORDS = ['title', 'name', 'product', 'nosaukums', 'prece', 'description']
PRICE_KEYWORDS = ['price', 'cena', 'cost']
URL_KEYWORDS = ['url', 'link', 'href', 'saite']
IMAGE_KEYWORDS = ['image', 'img', 'picture', 'photo', 'attēls']
STORE_KEYWORDS = ['store', 'shop', 'source', 'seller', 'veikals']


def _detect_column(columns: List[str], keywords: List[str], taken: Iterable[str] = ()) -> Optional[str]:
    taken = set(taken)
    for keyword in keywords:
        for col in columns:
            if col not in taken and keyword in col.lower().strip():
                return col
    return None


def detect_listing_columns(columns: List[str]) -> Dict[str, Optional[str]]:
    """
    Map listing fields to DataFrame columns by keyword.

    URL and image columns are resolved first so that "Product URL" is not
    mistaken for the title column.
    """
    columns = [str(c) for c in columns]
    roles: Dict[str, Optional[str]] = {}
    roles['url'] = _detect_column(columns, URL_KEYWORDS)
    roles['image'] = _detect_column(columns, IMAGE_KEYWORDS, [roles['url']])
    taken = [c for c in roles.values() if c]
    roles['price'] = _detect_column(columns, PRICE_KEYWORDS, taken)
    taken = [c for c in roles.values() if c]
    roles['store'] = _detect_column(columns, STORE_KEYWORDS, taken)
    taken = [c for c in roles.values() if c]
    roles['title'] = _detect_column(columns, TITLE_KEYWORDS, taken)
    return roles


def listings_from_dataframe(df: pd.DataFrame) -> List[Listing]:
    """
    Build listings from an uploaded sheet. Rows with an empty title are skipped.

    Raises:
        ValueError: no title column could be detected
    """
    roles = detect_listing_columns(list(df.columns))
    if not roles['title']:
        raise ValueError(
            f"No title column found. Expected a column named like one of: {', '.join(TITLE_KEYWORDS)}"
        )

    def text(row, role: str) -> str:
        col = roles[role]
        if not col:
            return ''
        value = row.get(col, '')
        return '' if pd.isna(value) else str(value).strip()

    listings = []
    for _, row in df.iterrows():
        title = text(row, 'title')
        if not title:
            continue
        listings.append(Listing(
            title=title,
            price=parse_price(row.get(roles['price'])) if roles['price'] else None,
            url=text(row, 'url'),
            image=text(row, 'image'),
            store=text(row, 'store'),
        ))

    logger.info("Loaded %d listings (columns: %s)", len(listings), roles)
    return listings


def groups_to_dataframe(groups: Sequence[ProductGroup]) -> pd.DataFrame:
    """One row per listing, tagged with its group id and canonical name."""
    rows = []
    for group_id, group in enumerate(groups, 1):
        for listing in group.listings:
            rows.append({
                'group_id': group_id,
                'group_name': group.name,
                'store': listing.store,
                'title': listing.title,
                'price': listing.price,
                'url': listing.url,
                'image': listing.image,
            })
    return pd.DataFrame(
        rows, columns=['group_id', 'group_name', 'store', 'title', 'price', 'url', 'image'],
    )


def summarize_groups(groups: Sequence[ProductGroup]) -> pd.DataFrame:
    """One row per group: size, stores, price range and cheapest store."""
    rows = []
    for group_id, group in enumerate(groups, 1):
        prices = [l.price for l in group.listings if l.price is not None]
        cheapest = group.cheapest
        rows.append({
            'group_id': group_id,
            'group_name': group.name,
            'listings': len(group.listings),
            'stores': ', '.join(group.stores),
            'min_price': min(prices) if prices else None,
            'max_price': max(prices) if prices else None,
            'cheapest_store': cheapest.store if cheapest else '',
        })
    return pd.DataFrame(
        rows,
        columns=['group_id', 'group_name', 'listings', 'stores', 'min_price', 'max_price', 'cheapest_store'],
    )
