"""
Test the simulation step end to end.

Verifies:
- Growth, metabolism and movement accounting per tick
- Boundary bounce inside a tick
- Digestion lockout
- Reproduction accounting and cap-limited births
- Death pass, stats throttling, pause, reset
- Invariants over long seeded runs
"""

import numpy as np
import pytest

from ecosim.data_types import Kind, UnknownKindError, PopulationCaps, SimulationConfig
from ecosim.simulation import EcosystemSimulation, SimulationError
from ecosim.tests.sim_harness import make_sim, place, free_energy

STEP = 1.0 / 30.0  # One logic step: 2 frames at 60 Hz scale


def test_plant_growth_and_base_cost():
    sim = make_sim()
    plant = place(sim, 'plant', 100, 100, energy=50.0)

    sim.tick(STEP)

    # +0.1 * 2 growth, -0.05 * 2 base cost
    assert plant.energy == pytest.approx(50.1)
    assert np.allclose(plant.position, [100.0, 100.0])


def test_mover_pays_move_and_base_cost():
    sim = make_sim()
    herbivore = place(sim, 'herbivore', 400, 300, energy=50.0, velocity=(0.5, -0.25))

    sim.tick(STEP)

    assert herbivore.energy == pytest.approx(49.7)
    assert np.allclose(herbivore.position, [401.0, 299.5])


def test_bounce_inside_tick():
    sim = make_sim(energy=free_energy())
    herbivore = place(sim, 'herbivore', 784.5, 300, velocity=(0.5, 0.0))

    sim.tick(STEP)

    assert herbivore.x == 785.0
    assert herbivore.velocity[0] == -0.5
    sim.check_invariants()


def test_digestion_blocks_feeding():
    sim = make_sim(energy=free_energy())
    herbivore = place(sim, 'herbivore', 100, 100, energy=40.0)
    herbivore.digesting = 5.0
    plant = place(sim, 'plant', 103, 100, energy=50.0)

    sim.tick(STEP)

    assert herbivore.digesting == pytest.approx(3.0)
    assert herbivore.energy == 40.0
    assert plant.energy == 50.0

    sim.tick(STEP)
    sim.tick(STEP)  # digesting reaches -1 before the feeding pass

    assert herbivore.energy == pytest.approx(55.0)
    assert plant not in sim.organisms


def test_eating_timer_counts_down_to_zero():
    sim = make_sim(energy=free_energy())
    herbivore = place(sim, 'herbivore', 100, 100, energy=90.0)
    herbivore.eating_timer = 3.0

    sim.tick(STEP)
    assert herbivore.eating_timer == pytest.approx(1.0)

    sim.tick(STEP)
    assert herbivore.eating_timer == 0.0


def test_reproduction_accounting():
    energy = dict(free_energy(), reproduce_cost=30.0)
    sim = make_sim(energy=energy, reproduce_chance=1.0)
    parent = place(sim, 'herbivore', 400, 300, energy=50.0)

    sim.tick(STEP)

    assert len(sim.organisms) == 2
    offspring = sim.organisms[1]
    assert parent.energy == pytest.approx(20.0)
    assert offspring.energy == pytest.approx(30.0)
    assert offspring.born_cycle == 1
    assert sim.telemetry['births_this_tick'] == 1

    # Parent is now too poor, offspring has exactly the cost (not more)
    sim.tick(STEP)
    assert len(sim.organisms) == 2


def test_births_limited_by_cap():
    sim = make_sim(energy=free_energy(), caps={'herbivore': 13}, reproduce_chance=1.0)
    sim.add_organisms('herbivore', 10)

    sim.tick(STEP)

    assert sim.store.count(Kind.HERBIVORE) == 13
    assert sim.telemetry['births_this_tick'] == 3
    charged = [o for o in sim.organisms if o.energy == pytest.approx(20.0)]
    assert len(charged) == 3
    print(f"[OK] Births stopped at cap: {sim.store.count(Kind.HERBIVORE)} herbivores")


def test_births_limited_by_global_cap():
    sim = make_sim(energy=free_energy(), reproduce_chance=1.0, max_entities=6)
    sim.add_organisms('plant', 4)
    sim.add_organisms('herbivore', 1)

    sim.tick(STEP)

    assert len(sim.organisms) == 6


def test_plant_spawn():
    sim = make_sim(energy=free_energy(), plant_spawn_chance=1.0)

    sim.tick(STEP)
    assert sim.store.count(Kind.PLANT) == 1
    assert sim.telemetry['plants_sprouted_this_tick'] == 1

    sim.caps.set(Kind.PLANT, 1)
    sim.tick(STEP)
    assert sim.store.count(Kind.PLANT) == 1
    assert sim.telemetry['plants_sprouted_this_tick'] == 0


def test_starved_organisms_removed():
    sim = make_sim()
    doomed = place(sim, 'herbivore', 100, 100, energy=0.2)
    survivor = place(sim, 'herbivore', 300, 300, energy=50.0)

    sim.tick(STEP)

    assert doomed not in sim.organisms
    assert survivor in sim.organisms
    assert sim.telemetry['deaths_this_tick'] == 1
    assert sim.store.count(Kind.HERBIVORE) == 1


def test_stats_refresh_is_throttled():
    sim = make_sim(energy=free_energy())
    sim.add_organisms('plant', 3)
    assert sim.get_stats().plant_count == 3

    sim.organisms[0].energy = -1.0
    sim.tick(STEP)

    assert sim.compute_stats().plant_count == 2
    assert sim.get_stats().plant_count == 3

    for _ in range(9):
        sim.tick(STEP)

    stats = sim.get_stats()
    assert stats.cycle_count == 10
    assert stats.plant_count == 2
    assert stats.total_count == 2


def test_toggle_pause():
    sim = make_sim()

    assert sim.toggle_pause() is True
    assert sim.paused
    assert sim.toggle_pause() is False
    assert not sim.paused


def test_reset_simulation():
    sim = make_sim()
    sim.add_organisms('plant', 50)
    sim.add_organisms('herbivore', 20)
    for _ in range(3):
        sim.tick()

    sim.reset_simulation()

    assert len(sim.organisms) == 0
    assert sim.cycle == 0
    stats = sim.get_stats()
    assert stats.total_count == 0 and stats.cycle_count == 0


def test_reentrant_calls_rejected():
    sim = make_sim()
    sim._in_tick = True

    with pytest.raises(SimulationError):
        sim.tick()
    with pytest.raises(SimulationError):
        sim.reset_simulation()


def test_unknown_kind_rejected():
    sim = make_sim()

    with pytest.raises(UnknownKindError):
        sim.add_organisms('fungus', 5)
    assert len(sim.organisms) == 0


def test_initial_population_one_tick():
    """Seeded 50/20/5/5 start, no births or sprouts: one tick cannot grow it"""
    config = SimulationConfig(seed=99, reproduce_chance=0.0, plant_spawn_chance=0.0)
    sim = EcosystemSimulation(config=config)

    assert sim.get_stats().to_dict()['total_count'] == 80

    sim.tick()

    stats = sim.compute_stats()
    assert 0 <= stats.total_count <= 80
    assert stats.cycle_count == 1


def test_invariants_hold_over_long_run():
    config = SimulationConfig(
        seed=2024,
        reproduce_chance=0.05,
        caps=PopulationCaps(plant=120, herbivore=60, carnivore=20, omnivore=20)
    )
    sim = EcosystemSimulation(config=config)

    for i in range(400):
        sim.tick()
        sim.check_invariants()

        if (i + 1) % 100 == 0:
            sim.print_tick_summary()
            sim.print_population_summary()

    for kind in Kind:
        assert sim.store.count(kind) <= sim.caps.for_kind(kind)


def test_same_seed_same_run():
    def run(seed):
        sim = EcosystemSimulation(config=SimulationConfig(seed=seed))
        for _ in range(60):
            sim.tick()
        return [(o.kind, o.x, o.y, o.energy) for o in sim.organisms]

    assert run(5) == run(5)


def test_link_pairs_use_last_build():
    sim = make_sim(energy=free_energy())
    a = place(sim, 'plant', 100, 100)
    b = place(sim, 'plant', 150, 100)
    place(sim, 'plant', 600, 500)

    sim.tick(STEP)
    pairs = sim.link_pairs()

    assert len(pairs) == 1
    assert pairs[0][0] is a and pairs[0][1] is b


def test_snapshot():
    sim = make_sim()
    place(sim, 'herbivore', 10, 20)
    sim.tick()

    snapshot = sim.get_snapshot()

    assert snapshot['tick_count'] == 1
    assert snapshot['organism_count'] == 1
    assert snapshot['organisms'][0]['kind'] == 'herbivore'
    assert snapshot['stats']['herbivore_count'] == 1
    assert snapshot['timing']['tick_count'] == 1
    assert snapshot['paused'] is False


def test_add_organisms_clamps_non_finite_counts():
    sim = make_sim(caps={'herbivore': 4})

    assert sim.add_organisms('herbivore', float('nan')) == 0
    assert sim.add_organisms('herbivore', float('inf')) == 4
    assert sim.get_stats().herbivore_count == 4


def test_get_stats_returns_copy():
    sim = make_sim()
    sim.add_organisms('plant', 2)

    stats = sim.get_stats()
    stats.plant_count = 99
    stats.total_count = 99

    assert sim.get_stats().plant_count == 2
    assert sim.get_stats().total_count == 2
