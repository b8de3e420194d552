"""CLI main entry point."""

import argparse
import sys
from dataclasses import replace

import numpy as np

from solar_nbody.errors import NBodyError
from solar_nbody.physics.integrators import Method
from solar_nbody.physics.simulator import Simulator
from solar_nbody.presets import PRESETS, TwoBodyCircular, populate
from solar_nbody.utils.config import SimulationConfig, load_config


def get_preset(name: str, G: float):
    """Get preset by name."""
    preset_class = PRESETS.get(name.lower())
    if preset_class is None:
        raise ValueError(f"Unknown preset: {name}. Available: {list(PRESETS.keys())}")
    if preset_class is TwoBodyCircular:
        # Sun and Earth at 1 AU when running in the default units
        return TwoBodyCircular(central_mass=1.989e30, orbiting_mass=5.972e24, radius=1.0, G=G)
    return preset_class(G=G)


def build_config(args) -> SimulationConfig:
    """Merge the optional config file with command line overrides."""
    config = load_config(args.config) if args.config else SimulationConfig()
    overrides = {}
    if args.method is not None:
        overrides['method'] = args.method
    if args.dt is not None:
        overrides['dt'] = args.dt
    if args.G is not None:
        overrides['G'] = args.G
    if args.epsilon is not None:
        overrides['epsilon'] = args.epsilon
    if args.force_method is not None:
        overrides['force_method'] = args.force_method
    if args.verbose:
        overrides['verbose'] = True
    return replace(config, **overrides).validate()


def print_positions(sim: Simulator):
    ids = sim.store.live_ids
    for body_id in ids:
        x, y, z = sim.get_position(int(body_id))
        print(f"  body {int(body_id):3d}: x={x: .6e} y={y: .6e} z={z: .6e}")


def run_simulation(args):
    """Run a simulation."""
    config = build_config(args)
    sim = Simulator(config)
    preset = get_preset(args.preset, config.G)
    n = populate(sim, preset)

    print(f"Preset: {preset.name} ({n} bodies)")
    print(f"Method: {sim.method.name.lower()}, dt={sim.dt}, steps={args.steps}")

    E0 = sim.get_energy()
    P0 = sim.get_momentum()
    if args.energy:
        print(f"Initial energy: {E0:.9e}")

    for step in range(1, args.steps + 1):
        sim.step()
        if args.print_every and step % args.print_every == 0:
            print(f"Step {step}: t={sim.time:.4f}")
            print_positions(sim)

    print(f"Final state after {sim.step_count} steps (t={sim.time:.4f}):")
    print_positions(sim)
    if args.energy:
        E = sim.get_energy()
        drift = abs(E - E0) / abs(E0) if E0 != 0 else float('nan')
        dP = float(np.linalg.norm(sim.get_momentum() - P0))
        print(f"Final energy: {E:.9e} (relative drift {drift:.3e}), |dP|={dP:.3e}")

    sim.release_all()
    return sim


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description='Newtonian N-body integrator (AU, days, kg by default)'
    )
    parser.add_argument('--preset', type=str, default='solar_system',
                        choices=list(PRESETS.keys()),
                        help='Initial conditions')
    parser.add_argument('--method', type=str, default=None,
                        choices=[m.name.lower() for m in Method],
                        help='Integrator (default: from config, rk4)')
    parser.add_argument('--dt', type=float, default=None,
                        help='Time step in days (negative runs backward)')
    parser.add_argument('--steps', type=int, default=730,
                        help='Number of steps')
    parser.add_argument('--config', type=str, default=None,
                        help='JSON or YAML configuration file')
    parser.add_argument('--G', type=float, default=None,
                        help='Override the gravitational constant')
    parser.add_argument('--epsilon', type=float, default=None,
                        help='Override the softening length')
    parser.add_argument('--force-method', type=str, default=None,
                        choices=['vectorized', 'direct'],
                        help='Force evaluation strategy')
    parser.add_argument('--print-every', type=int, default=0,
                        help='Print positions every N steps (0: only at the end)')
    parser.add_argument('--energy', action='store_true',
                        help='Report energy drift and momentum change')
    parser.add_argument('--verbose', action='store_true',
                        help='Print periodic diagnostics from the simulator')

    args = parser.parse_args(argv)

    if args.steps < 0:
        parser.error('--steps must be non-negative')

    try:
        run_simulation(args)
    except (NBodyError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
