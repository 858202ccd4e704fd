"""
Headless command-line runner.

Drives the simulation with a scheduler and prints periodic console
summaries. Runs on a simulated clock by default; --realtime paces frames
against the wall clock.

Usage:
    python -m ecosim --seconds 60 --seed 7
    python -m ecosim --config my.yaml --mode lockstep --add carnivore=10
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .data_types import EcosimError, Kind, SimulationConfig
from .loader import load_config, ConfigLoadError
from .simulation import EcosystemSimulation
from .scheduler import FixedStepScheduler, LockstepScheduler
from .constants import TICK_SUMMARY_INTERVAL


def parse_add(value: str) -> Tuple[Kind, int]:
    """Parse KIND=COUNT for --add"""
    name, sep, count = value.partition('=')
    if not sep:
        raise argparse.ArgumentTypeError(f"expected KIND=COUNT, got {value!r}")
    try:
        return Kind.parse(name), int(count)
    except (EcosimError, ValueError) as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='ecosim', description='Headless ecosystem simulation')
    parser.add_argument('--config', type=Path, help='YAML config file (default: built-in defaults)')
    parser.add_argument('--seconds', type=float, default=30.0, help='Seconds to simulate (default 30)')
    parser.add_argument('--fps', type=float, default=60.0, help='Display frames per second (default 60)')
    parser.add_argument('--seed', type=int, help='RNG seed (default: unseeded)')
    parser.add_argument('--mode', choices=['fixed', 'lockstep'], default='fixed',
                        help='fixed: decoupled logic timestep, lockstep: one step per frame')
    parser.add_argument('--realtime', action='store_true', help='Pace frames against the wall clock')
    parser.add_argument('--add', type=parse_add, action='append', default=[], metavar='KIND=COUNT',
                        help='Add organisms before running (repeatable)')
    parser.add_argument('--empty', action='store_true', help='Start without the initial population')
    parser.add_argument('--summary-every', type=int, default=TICK_SUMMARY_INTERVAL,
                        help='Print a summary every N ticks (0 = never)')
    parser.add_argument('--perf', action='store_true', help='Also print per-phase timing breakdowns')
    parser.add_argument('--json', action='store_true', help='Print final stats as JSON')
    return parser


def make_summary_hook(every: int, perf: bool):
    """Render hook that prints once per `every` ticks"""
    last_printed = {'cycle': -1}

    def render(simulation: EcosystemSimulation):
        if every <= 0 or simulation.cycle == last_printed['cycle']:
            return
        if simulation.cycle > 0 and simulation.cycle % every == 0:
            last_printed['cycle'] = simulation.cycle
            simulation.print_tick_summary()
            simulation.print_population_summary()
            if perf:
                simulation.print_perf_breakdown(every=every)

    return render


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config) if args.config else SimulationConfig()
    except ConfigLoadError as e:
        print(f"[FAIL] {e}", file=sys.stderr)
        return 2

    if args.seed is not None:
        config.seed = args.seed

    sim = EcosystemSimulation(config=config, populate=not args.empty)
    for kind, count in args.add:
        created = sim.add_organisms(kind, count)
        if created < count:
            print(f"[WARN] Requested {count} {kind.value}, created {created} (population caps)")

    scheduler_cls = LockstepScheduler if args.mode == 'lockstep' else FixedStepScheduler
    scheduler = scheduler_cls(sim, render=make_summary_hook(args.summary_every, args.perf))

    frame_interval = 1.0 / args.fps
    try:
        if args.realtime:
            steps = scheduler.run_realtime(duration=args.seconds, frame_interval=frame_interval)
        else:
            steps = scheduler.run_for(args.seconds, frame_interval=frame_interval)
    except KeyboardInterrupt:
        print("\n[WARN] Interrupted")
        steps = sim.cycle

    stats = sim.refresh_stats()
    if args.json:
        print(json.dumps(stats.to_dict(), indent=2))
    else:
        print(f"[OK] Ran {steps} ticks ({args.mode}) | total={stats.total_count} "
              f"mean_energy={stats.mean_energy:.1f}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
