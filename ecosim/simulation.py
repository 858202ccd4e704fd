"""
Ecosystem simulation kernel.

Main simulation class that owns the organism store, the spatial index, the
cycle counter and the pause flag, and runs the per-tick pipeline.
"""

import numpy as np
import os
import time
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional, Union

from .organism import Organism
from .data_types import Kind, EcosimError, SimulationConfig, PopulationStats
from .store import OrganismStore
from .spatial import bounce_within_bounds
from .spatial_queries import SpatialIndexAdapter
from .feeding import apply_feeding, FeedingEvent
from .rng import make_rng, random_velocity, chance
from .loader import load_config
from .constants import TICK_TIME_WINDOW, LINK_DISTANCE


class SimulationError(EcosimError):
    """Raised when the simulation is driven incorrectly (e.g. reentrant tick)"""
    pass


PHASES = ('build', 'growth', 'movement', 'feeding', 'reproduction', 'plant_spawn', 'death')


class EcosystemSimulation:
    """
    Main simulation class for the ecosystem.

    Owns all mutable simulation state. Renderers read `organisms` and
    `get_stats()`; UIs issue add_organisms / reset_simulation / toggle_pause.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        populate: bool = True
    ):
        """
        Initialize simulation.

        Args:
            config: Simulation configuration (defaults from constants.py)
            populate: If True, seed config.initial_population
        """
        self.config: SimulationConfig = config if config is not None else SimulationConfig()
        self.rng: np.random.Generator = make_rng(self.config.seed)

        # Simulation state
        self.store = OrganismStore(self.config, self.rng)
        self.cycle: int = 0
        self._paused: bool = False
        self._in_tick: bool = False
        self._stats = PopulationStats()

        # Spatial indexing (rebuilt every tick)
        self.spatial = SpatialIndexAdapter(
            cell_size=self.config.grid_size,
            use_grid=self.config.use_grid
        )

        # Performance metrics
        self._tick_times: List[float] = []
        self._tick_time_sum: float = 0.0
        self._tick_time_window: int = TICK_TIME_WINDOW  # Rolling average window
        self._phase_times: Dict[str, List[float]] = {phase: [] for phase in PHASES}

        # Population telemetry
        self._telemetry: Dict = {
            'births_this_tick': 0,
            'deaths_this_tick': 0,
            'meals_this_tick': 0,
            'plants_sprouted_this_tick': 0,
            'total_births': 0,
            'total_deaths': 0,
            'total_meals': 0,
        }
        self.last_meals: List[FeedingEvent] = []

        if populate:
            for kind_name, count in self.config.initial_population.items():
                self.store.add(kind_name, count)

        self.refresh_stats()

        print(f"[OK] Simulation initialized: {len(self.store)} organisms, "
              f"field={self.config.width:g}x{self.config.height:g}, seed={self.config.seed}")

    @classmethod
    def from_config_file(
        cls,
        config_path: Path,
        schema_path: Optional[Path] = None,
        populate: bool = True
    ) -> 'EcosystemSimulation':
        """
        Build a simulation from a YAML config file.

        Args:
            config_path: YAML config file
            schema_path: Optional JSON schema (defaults to the bundled one)
            populate: If True, seed the configured initial population
        """
        return cls(config=load_config(config_path, schema_path), populate=populate)

    # ========================================================================
    # Public operations
    # ========================================================================

    @property
    def organisms(self) -> List[Organism]:
        """Live population for rendering (do not mutate)"""
        return self.store.organisms

    @property
    def caps(self):
        return self.config.caps

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def telemetry(self) -> dict:
        return dict(self._telemetry)

    def add_organisms(self, kind: Union[Kind, str], count: int) -> int:
        """
        Add up to count organisms of kind, truncated by caps.

        Args:
            kind: Organism kind (enum member or name)
            count: Requested number (non-positive creates none)

        Returns:
            Number actually created

        Raises:
            UnknownKindError: kind names no organism kind
        """
        created = self.store.add(kind, count, born_cycle=self.cycle)
        self.refresh_stats()
        return created

    def reset_simulation(self):
        """Remove every organism and zero the cycle counter"""
        if self._in_tick:
            raise SimulationError("reset_simulation() called during tick()")

        self.store.reset()
        self.cycle = 0
        self._telemetry.update({key: 0 for key in self._telemetry})
        self.last_meals = []
        self.refresh_stats()

    def toggle_pause(self) -> bool:
        """
        Flip the pause flag.

        Returns:
            New paused state
        """
        self._paused = not self._paused
        return self._paused

    def compute_stats(self) -> PopulationStats:
        """Recompute stats from the live population"""
        counts = self.store.counts()
        total = len(self.store)
        mean_energy = float(np.mean(self.store.energies())) if total > 0 else 0.0

        return PopulationStats(
            plant_count=counts[Kind.PLANT],
            herbivore_count=counts[Kind.HERBIVORE],
            carnivore_count=counts[Kind.CARNIVORE],
            omnivore_count=counts[Kind.OMNIVORE],
            cycle_count=self.cycle,
            total_count=total,
            mean_energy=mean_energy
        )

    def refresh_stats(self) -> PopulationStats:
        self._stats = self.compute_stats()
        return replace(self._stats)

    def get_stats(self) -> PopulationStats:
        """
        Last refreshed stats.

        Refreshed every stats_interval ticks and after add/reset; use
        compute_stats() for a live view. Returns a copy, so callers
        cannot alter the cached values.
        """
        return replace(self._stats)

    def link_pairs(self, radius: float = LINK_DISTANCE):
        """Organism pairs closer than radius (from the last index build)"""
        return self.spatial.link_pairs(radius)

    # ========================================================================
    # Tick pipeline
    # ========================================================================

    def tick(self, dt: Optional[float] = None) -> int:
        """
        Advance simulation by one logic step.

        Pipeline (strict order):
        1. Growth: plants gain plant_gain * frames
        2. Movement & base cost: heading changes, move, bounce, metabolism,
           digestion countdown
        3. Feeding: herbivores, then carnivores, then omnivores
        4. Reproduction
        5. Opportunistic plant growth
        6. Death pass: remove energy <= 0
        7. Stats refresh every stats_interval ticks

        The spatial index is rebuilt from tick-start positions before step 1.
        Prey killed in step 3 stays listed until step 6.

        Runs regardless of the pause flag; schedulers check pause.

        Args:
            dt: Simulated seconds (default: one logic interval)

        Returns:
            Cycle count after the step

        Raises:
            SimulationError: tick() re-entered
        """
        if self._in_tick:
            raise SimulationError("tick() is not reentrant")

        if dt is None:
            dt = 1.0 / self.config.logic_rate
        frames = dt * self.config.frame_rate_scale

        self._in_tick = True
        start_time = time.perf_counter()
        try:
            self.cycle += 1

            self._timed('build', self.spatial.build, self.store.organisms)
            self._timed('growth', self._apply_growth, frames)
            self._timed('movement', self._apply_movement, frames)
            self._timed('feeding', self._apply_feeding)
            self._timed('reproduction', self._apply_reproduction)
            self._timed('plant_spawn', self._apply_plant_spawn, frames)
            self._timed('death', self._process_deaths)

            if self.cycle % self.config.stats_interval == 0:
                self.refresh_stats()
        finally:
            self._in_tick = False

        self._record_tick_time(time.perf_counter() - start_time)

        # Debug invariant check (zero perf impact when env var not set)
        if os.getenv('SIM_DEBUG_INVARIANTS') == '1':
            self.check_invariants()

        return self.cycle

    def _timed(self, phase: str, fn, *args):
        phase_start = time.perf_counter()
        result = fn(*args)
        times = self._phase_times[phase]
        times.append(time.perf_counter() - phase_start)
        if len(times) > self._tick_time_window:
            times.pop(0)
        return result

    def _apply_growth(self, frames: float):
        """Plants gain energy proportional to elapsed time"""
        gain = self.config.energy.plant_gain * frames
        for organism in self.store:
            if organism.kind is Kind.PLANT:
                organism.energy += gain

    def _apply_movement(self, frames: float):
        """
        Move mobile organisms and charge metabolism.

        Movers may pick a new random heading, advance, and bounce off the
        field edges. Everyone pays base_cost; movers also pay move_cost.
        Digestion and eating countdowns tick down.
        """
        energy = self.config.energy
        bounds = self.config.bounds
        turn_chance = self.config.direction_change_chance * frames
        base_cost = energy.base_cost * frames
        move_cost = energy.move_cost * frames

        for organism in self.store:
            if organism.kind is not Kind.PLANT:
                if chance(self.rng, turn_chance):
                    organism.velocity = random_velocity(self.rng, organism.speed)

                organism.update_position(frames)
                bounce_within_bounds(organism.position, organism.velocity, bounds, organism.size)

                organism.energy -= move_cost

            organism.energy -= base_cost

            if organism.digesting > 0.0:
                organism.digesting -= frames
            if organism.eating_timer > 0.0:
                organism.eating_timer = max(0.0, organism.eating_timer - frames)

    def _apply_feeding(self):
        self.last_meals = apply_feeding(self.store.organisms, self.spatial, self.config)
        self._telemetry['meals_this_tick'] = len(self.last_meals)
        self._telemetry['total_meals'] += len(self.last_meals)

    def _apply_reproduction(self):
        """
        Each pre-existing organism may reproduce once.

        Offspring are appended as they are born, so caps count them
        immediately, but they do not reproduce in the tick they are born.
        """
        cost = self.config.energy.reproduce_cost
        births = 0

        for organism in list(self.store.organisms):
            if organism.energy <= cost:
                continue
            if not chance(self.rng, self.config.reproduce_chance):
                continue
            if self.store.room_for(organism.kind) <= 0:
                continue

            organism.energy -= cost
            self.store.add_offspring(organism, born_cycle=self.cycle)
            births += 1

        self._telemetry['births_this_tick'] = births
        self._telemetry['total_births'] += births

    def _apply_plant_spawn(self, frames: float):
        """Occasionally sprout one extra plant if caps allow"""
        sprouted = 0
        if chance(self.rng, self.config.plant_spawn_chance * frames):
            sprouted = self.store.add(Kind.PLANT, 1, born_cycle=self.cycle)
        self._telemetry['plants_sprouted_this_tick'] = sprouted

    def _process_deaths(self) -> int:
        """
        Remove organisms with energy <= 0.

        Returns:
            Number of organisms that died this tick
        """
        deaths = self.store.remove_dead()
        self._telemetry['deaths_this_tick'] = deaths
        self._telemetry['total_deaths'] += deaths
        return deaths

    def check_invariants(self):
        """
        Assert post-tick invariants.

        Per-kind caps are checked against the current caps; lowering a cap
        below the population at runtime makes this fail until deaths catch up.

        Raises:
            AssertionError: an invariant is violated
        """
        for organism in self.store:
            assert organism.energy > 0.0, f"Organism {organism.organism_id} stored with energy {organism.energy}"
            limit_x = max(0.0, self.config.width - organism.size)
            limit_y = max(0.0, self.config.height - organism.size)
            assert 0.0 <= organism.position[0] <= limit_x and 0.0 <= organism.position[1] <= limit_y, \
                f"Organism {organism.organism_id} out of bounds at {organism.position.tolist()}"

        for kind, count in self.store.counts().items():
            cap = self.config.caps.for_kind(kind)
            assert count <= cap, f"{kind.value} count {count} exceeds cap {cap}"
        assert len(self.store) <= self.config.max_entities, \
            f"Population {len(self.store)} exceeds global cap {self.config.max_entities}"

    # ========================================================================
    # Timing and reporting
    # ========================================================================

    def get_tick_stats(self) -> dict:
        """
        Get current tick timing statistics.

        Returns:
            Dict with tick_count, avg_tick_time_ms, last_tick_time_ms
        """
        if not self._tick_times:
            return {
                'tick_count': self.cycle,
                'avg_tick_time_ms': 0.0,
                'last_tick_time_ms': 0.0
            }

        avg_time = self._tick_time_sum / len(self._tick_times)
        last_time = self._tick_times[-1]

        return {
            'tick_count': self.cycle,
            'avg_tick_time_ms': avg_time * 1000.0,
            'last_tick_time_ms': last_time * 1000.0
        }

    def _record_tick_time(self, elapsed: float):
        """
        Record tick timing for rolling average.

        Args:
            elapsed: Tick time in seconds
        """
        self._tick_times.append(elapsed)
        self._tick_time_sum += elapsed

        # Maintain rolling window
        if len(self._tick_times) > self._tick_time_window:
            removed = self._tick_times.pop(0)
            self._tick_time_sum -= removed

    def get_snapshot(self) -> dict:
        """
        Get complete simulation state snapshot.

        Returns:
            Dict with tick_count, organisms, stats, timing
        """
        return {
            'tick_count': self.cycle,
            'paused': self._paused,
            'organism_count': len(self.store),
            'organisms': [o.to_dict() for o in self.store],
            'stats': self.compute_stats().to_dict(),
            'timing': self.get_tick_stats()
        }

    def print_tick_summary(self):
        """Print tick summary to console (lightweight monitoring)"""
        stats = self.get_tick_stats()
        print(f"Tick {stats['tick_count']:5d} | "
              f"Avg: {stats['avg_tick_time_ms']:6.3f} ms | "
              f"Last: {stats['last_tick_time_ms']:6.3f} ms | "
              f"Organisms: {len(self.store)}")

    def print_population_summary(self):
        """Print per-kind counts and energy on one line"""
        stats = self.compute_stats()
        print(f"  [Population] plants={stats.plant_count} herbivores={stats.herbivore_count} "
              f"carnivores={stats.carnivore_count} omnivores={stats.omnivore_count} | "
              f"total={stats.total_count} energy_mean={stats.mean_energy:.1f} | "
              f"births={self._telemetry['total_births']} deaths={self._telemetry['total_deaths']}")

    def print_perf_breakdown(self, every: int = 200):
        """
        Print per-phase timing breakdown on interval.

        Args:
            every: Print interval in ticks (default 200)
        """
        if self.cycle % every != 0 or not self._tick_times:
            return

        print(f"\n[Perf Breakdown] Tick {self.cycle} ({len(self.store)} organisms, "
              f"{self.spatial.cell_count} cells)")
        for phase in PHASES:
            times = self._phase_times[phase]
            avg_ms = sum(times) / len(times) * 1000.0 if times else 0.0
            print(f"  {phase.replace('_', ' ').capitalize() + ':':14s}{avg_ms:6.3f} ms")

        avg_total = self._tick_time_sum / len(self._tick_times) * 1000.0
        print(f"  {'Total:':14s}{avg_total:6.3f} ms")
