"""
Multi-N performance comparison for neighbor search backends.

Runs full simulation ticks at 250, 500, 1000, 2000 organisms with the
uniform grid and with the O(n) linear scan, and reports median/p90.
Linear scan is log-only above 1000 organisms.
"""

import numpy as np
import time
import gc

from ecosim.data_types import SimulationConfig, PopulationCaps
from ecosim.simulation import EcosystemSimulation


def build_population(organism_count: int, use_grid: bool, seed: int = 42) -> EcosystemSimulation:
    """Build a simulation with a fixed kind mix and births/spawns disabled."""
    config = SimulationConfig(
        width=1600.0,
        height=1200.0,
        max_entities=organism_count,
        use_grid=use_grid,
        reproduce_chance=0.0,
        plant_spawn_chance=0.0,
        caps=PopulationCaps(plant=organism_count, herbivore=organism_count,
                            carnivore=organism_count, omnivore=organism_count),
        initial_population={},
        seed=seed
    )
    sim = EcosystemSimulation(config=config, populate=False)

    # 60% plants, 25% herbivores, 10% omnivores, 5% carnivores
    sim.add_organisms('plant', int(organism_count * 0.60))
    sim.add_organisms('herbivore', int(organism_count * 0.25))
    sim.add_organisms('omnivore', int(organism_count * 0.10))
    sim.add_organisms('carnivore', organism_count - len(sim.organisms))
    return sim


def run_tick_perf_test(organism_count: int, use_grid: bool, runs: int = 7) -> dict:
    """
    Run tick performance test at given organism count.

    Args:
        organism_count: Number of organisms to test
        use_grid: Grid backend (True) or linear scan (False)
        runs: Number of measured ticks (default 7 for stable median)

    Returns:
        Dict with p50, p90, min, max, meals
    """
    sim = build_population(organism_count, use_grid)

    # Warmup
    sim.tick()

    # Measure (GC disabled for stable timing)
    gc.collect()
    gc.disable()

    times_ns = []
    meals = 0
    try:
        for _ in range(runs):
            start = time.perf_counter_ns()
            sim.tick()
            elapsed_ns = time.perf_counter_ns() - start
            times_ns.append(elapsed_ns)
            meals += sim.telemetry['meals_this_tick']
    finally:
        gc.enable()

    times_ms = np.array(times_ns) / 1_000_000

    return {
        'organism_count': organism_count,
        'backend': 'grid' if use_grid else 'linear',
        'runs': runs,
        'p50_ms': np.percentile(times_ms, 50),
        'p90_ms': np.percentile(times_ms, 90),
        'min_ms': np.min(times_ms),
        'max_ms': np.max(times_ms),
        'meals': meals
    }


def main():
    """Run multi-N neighbor search comparison."""
    print("=" * 80)
    print("Neighbor Search Multi-N Performance Comparison")
    print("=" * 80)
    print()

    test_sizes = [250, 500, 1000, 2000]
    results = []

    for organism_count in test_sizes:
        print(f"[N = {organism_count}]")

        for use_grid in (True, False):
            if not use_grid and organism_count > 1000:
                print("  linear: (skipped, log-only above 1000)")
                continue

            result = run_tick_perf_test(organism_count, use_grid)
            print(f"  {result['backend']:6s} p50: {result['p50_ms']:.3f}ms  p90: {result['p90_ms']:.3f}ms  "
                  f"min: {result['min_ms']:.3f}ms  max: {result['max_ms']:.3f}ms  meals: {result['meals']}")
            results.append(result)

        print()

    print("=" * 80)
    print("Summary Table")
    print("=" * 80)
    print()
    print("| Organisms | Backend | p50 (ms) | p90 (ms) | Meals |")
    print("|-----------|---------|----------|----------|-------|")
    for r in results:
        print(f"| {r['organism_count']:9d} | {r['backend']:7s} | {r['p50_ms']:8.3f} | {r['p90_ms']:8.3f} | {r['meals']:5d} |")

    print()
    print("=" * 80)


if __name__ == '__main__':
    main()
