"""Basic example of using the N-body core."""

from solar_nbody import Method, Simulator
from solar_nbody.presets import SolarSystem, populate


def main():
    """Integrate the Sun and planets for one year with RK4."""
    sim = Simulator()

    # Bodies are loaded one at a time through init_body
    preset = SolarSystem(seed=42)
    populate(sim, preset)

    print("Running simulation...")
    print(f"Initial energy: {sim.get_energy():.6e}")

    for step in range(730):
        sim.simulate_step(Method.RK4, 0.5)
        if step % 146 == 0:
            x, y, z = sim.get_position(3)
            print(f"Step {step}: t={sim.time:.1f} d, Earth=({x:.4f}, {y:.4f}, {z:.4f}) AU")

    print(f"Final energy: {sim.get_energy():.6e}")
    sim.release_all()
    print("Simulation complete!")


if __name__ == "__main__":
    main()
