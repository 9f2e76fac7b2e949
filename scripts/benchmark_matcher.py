"""
Micro-benchmark for the listing matcher.

Tests:
1. extract_attributes() on a fixed set of titles (cold and cached)
2. calculate_title_similarity() pairwise scoring
3. group_listings() end-to-end on a synthetic 1k listing batch
4. similarity_matrix() with the thread pool

Usage:
    python scripts/benchmark_matcher.py
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))
import time
import numpy as np
from matcher import extract_attributes, calculate_title_similarity
from grouping import Listing, group_listings, similarity_matrix

STORES = ['1a.lv', 'Ksenukai', 'Dateks', 'Euronics', 'DEPO', 'Kruza', 'Bau24']


def generate_synthetic_listings(n_rows: int = 1000, seed: int = 42) -> list:
    """Generate synthetic listings: phones, TVs and insulation boards from several stores."""
    rng = np.random.default_rng(seed)
    phone_models = ['S21', 'S22', 'S23', 'S24']
    phone_variants = ['', ' Ultra', ' Plus']
    storage = ['128GB', '256GB', '512GB']
    tv_models = ['OLED55C1PUB', 'OLED65C1PUB', 'OLED55C2', 'OLED48C3']
    insulation_brands = ['Rockwool', 'Paroc', 'Knauf Insulation', 'Isover']
    thicknesses = [50, 100, 150, 200]

    listings = []
    for _ in range(n_rows):
        kind = rng.integers(0, 3)
        if kind == 0:
            title = (f"Samsung Galaxy {rng.choice(phone_models)}{rng.choice(phone_variants)} "
                     f"5G {rng.choice(storage)}")
        elif kind == 1:
            title = f"LG {rng.choice(tv_models)} 55\" 4K televizors"
        else:
            title = (f"Akmens vate {rng.choice(insulation_brands)} "
                     f"{rng.choice(thicknesses)}x600x1200mm")
        price = round(float(rng.uniform(10, 1500)), 2)
        listings.append(Listing(title=title, price=price, store=str(rng.choice(STORES))))
    return listings


def benchmark_function(func, *args, **kwargs):
    """Benchmark a function and return (result, elapsed_ms)."""
    start = time.perf_counter()
    result = func(*args, **kwargs)
    end = time.perf_counter()
    elapsed_ms = (end - start) * 1000
    return result, elapsed_ms


def benchmark_extract_attributes(n_iterations: int = 1000):
    """Benchmark extract_attributes() - first call vs. cached calls."""
    print("\n" + "="*70)
    print("BENCHMARK: extract_attributes() - Attribute Extraction")
    print("="*70)

    test_titles = [
        "Samsung Galaxy S23 Ultra 512GB 5G Dual SIM",
        "LG OLED55C1PUB 55\" 4K Smart TV",
        "Akmens vate Rockwool Rockmin Plus 100x600x1200mm",
        "Knauf Rotband 30kg",
        "Bosch GSB 18V-55 Professional",
    ]

    for title in test_titles:
        extract_attributes.cache_clear()
        _, cold_ms = benchmark_function(extract_attributes, title)

        start = time.perf_counter()
        for _ in range(n_iterations):
            _ = extract_attributes(title)
        elapsed_ms = (time.perf_counter() - start) * 1000

        print(f"\nInput: {title}")
        print(f"  Cold call: {cold_ms * 1000:.2f}μs")
        print(f"  Cached per call: {elapsed_ms * 1000 / n_iterations:.2f}μs")


def benchmark_pair_scoring(n_pairs: int = 5000):
    """Benchmark calculate_title_similarity() on random pairs."""
    print("\n" + "="*70)
    print(f"BENCHMARK: calculate_title_similarity() - {n_pairs:,} pairs")
    print("="*70)

    listings = generate_synthetic_listings(500)
    rng = np.random.default_rng(7)
    pairs = rng.integers(0, len(listings), size=(n_pairs, 2))

    start = time.perf_counter()
    scores = [calculate_title_similarity(listings[i].title, listings[j].title) for i, j in pairs]
    elapsed_ms = (time.perf_counter() - start) * 1000

    print(f"  Total: {elapsed_ms:.2f}ms")
    print(f"  Per pair: {elapsed_ms * 1000 / n_pairs:.2f}μs")
    print(f"  Mean score: {np.mean(scores):.3f}")


def benchmark_group_listings():
    """Benchmark group_listings() end-to-end on 1k listings."""
    print("\n" + "="*70)
    print("BENCHMARK: group_listings() - 1k Listings")
    print("="*70)

    listings = generate_synthetic_listings(1000)
    extract_attributes.cache_clear()

    groups, elapsed = benchmark_function(group_listings, listings)
    sizes = np.array([len(g.listings) for g in groups])

    print(f"  Grouping time: {elapsed:.2f}ms")
    print(f"  Throughput: {len(listings) / (elapsed / 1000):.0f} listings/sec")
    print(f"\nGroup Stats:")
    print(f"  Groups: {len(groups)}")
    print(f"  Largest group: {sizes.max()}")
    print(f"  Mean group size: {sizes.mean():.1f}")
    for group in groups[:5]:
        print(f"  - {group.name} ({len(group.listings)} listings, from {group.min_price})")


def benchmark_similarity_matrix(n_rows: int = 200):
    """Benchmark similarity_matrix() with 1 worker vs. the default pool."""
    print("\n" + "="*70)
    print(f"BENCHMARK: similarity_matrix() - {n_rows} listings")
    print("="*70)

    listings = generate_synthetic_listings(n_rows)
    for workers in (1, None):
        extract_attributes.cache_clear()
        matrix, elapsed = benchmark_function(similarity_matrix, listings, max_workers=workers)
        label = workers or 'default'
        print(f"  Workers={label}: {elapsed:.2f}ms")

    values = matrix.to_numpy()
    print(f"  Symmetric: {np.allclose(values, values.T)}")


def main():
    """Run all benchmarks."""
    print("="*70)
    print("LISTING MATCHER PERFORMANCE BENCHMARK")
    print("="*70)

    benchmark_extract_attributes()
    benchmark_pair_scoring()
    benchmark_group_listings()
    benchmark_similarity_matrix()

    print("\n" + "="*70)
    print("BENCHMARK COMPLETE")
    print("="*70)


if __name__ == '__main__':
    main()
