#!/usr/bin/env python3
"""
Basic Usage Example for the Keplerian Orrery Engine

This example builds the solar system from its built-in catalog, runs the
simulation clock at an accelerated rate, walks the focus across bodies and
exports positions and orbit paths.
"""

import sys
from pathlib import Path

# Add the src directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from orrery.main import OrreryModel
from orrery.orbital import OrbitalElements, KeplerSolver, position
import logging
import numpy as np

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    """Main example function"""
    print("=" * 60)
    print("Keplerian Orrery - Basic Usage Example")
    print("=" * 60)

    # Single body, no catalog
    print("\n1. Computing Earth's position directly...")
    earth = OrbitalElements(
        semi_major_axis=149598319,
        eccentricity=0.0167086,
        inclination=0.00005,
        longitude_of_ascending_node=-11.26064,
        argument_of_periapsis=114.20783,
        mean_anomaly_at_epoch=357.51716,
        orbital_period=365.256,
    )
    solution = KeplerSolver().solve(np.radians(earth.mean_anomaly_at_epoch), earth.eccentricity,
                                    earth.semi_major_axis)
    print(f"   Eccentric anomaly at epoch: {solution.eccentric_anomaly:.6f} rad "
          f"({solution.iterations} iterations)")
    print(f"   Distance at epoch: {solution.radius:,.0f} km")
    print(f"   Position after 100 days: {np.round(position(earth, 100.0))}")

    # Create model instance
    print("\n2. Creating orrery model...")
    model = OrreryModel()

    # Show available templates
    print("\n3. Available catalog templates:")
    for template in model.list_available_templates():
        print(f"   - {template}")

    # Create system from template
    print("\n4. Building the inner solar system...")
    success = model.create_system_from_template(
        "inner_planets",
        description="Example orrery run",
        sampling={"base_segments": 1000},
    )

    if not success:
        print("Failed to create system")
        return

    info = model.get_configuration_info()
    print(f"   Bodies: {info['body_count']} ({info['orbiting_bodies']} orbiting)")
    print(f"   Satellites: {info['satellites']}")

    # Accelerate time and run frames
    print("\n5. Running 10 seconds of frames at 60 fps...")
    print(f"   Time rate: {model.set_rate_slider(5)}")
    days = model.run_frames(600, fps=60.0)
    print(f"   Simulation day: {days:.3f}")

    summary = model.get_summary()
    for body_id, body in summary['bodies'].items():
        print(f"   {body_id:>8}: {body['distance_km']:>16,.0f} km")

    # Focus navigation
    print("\n6. Cycling focus...")
    focus = model.simulation.focus
    for _ in range(3):
        body = focus.next()
        print(f"   Focused: {body.name}")

    # Export results
    print("\n7. Exporting results...")
    exported = model.export_results("example_results", include_paths=True)
    for kind, path in exported.items():
        print(f"   {kind}: {path}")

    print("\n" + "=" * 60)
    print("Example completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    main()
