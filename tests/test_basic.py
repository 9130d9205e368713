#!/usr/bin/env python3
"""
Basic Tests
===========

Simple integration tests to verify the orrery engine is working correctly.

Usage:
    python -m pytest tests/test_basic.py -v
"""

import json
import math
import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

SMALL_SAMPLING = {
    "sampling": {
        "base_segments": 200,
        "segment_overrides": {"pluto": 500, "neptune": 500, "uranus": 500, "phobos": 500},
    }
}


def test_catalog_templates():
    """Test built-in catalog templates"""
    from orrery.config.catalog_config import CatalogConfig

    catalog = CatalogConfig()
    templates = catalog.list_templates()

    assert "solar_system" in templates
    assert "inner_planets" in templates

    config = catalog.create_from_template("solar_system")
    ids = [body.id for body in config.bodies]
    assert ids[0] == "sun"
    assert {"mercury", "venus", "earth", "moon", "mars", "phobos", "jupiter",
            "saturn", "uranus", "neptune", "pluto"} <= set(ids)
    assert config.body("sun").orbital_elements is None
    assert config.body("moon").parent == "earth"
    assert config.sampling.segment_overrides["pluto"] == 1000000


def test_earth_end_to_end():
    """Earth at epoch and after one full period"""
    from orrery.orbital.elements import OrbitalElements
    from orrery.orbital.kepler import solve_kepler
    from orrery.orbital.state_calculator import position
    import numpy as np

    earth = OrbitalElements(
        semi_major_axis=149598319,
        eccentricity=0.0167086,
        inclination=0.00005,
        longitude_of_ascending_node=-11.26064,
        argument_of_periapsis=114.20783,
        mean_anomaly_at_epoch=357.51716,
        orbital_period=365.256,
    )

    start = position(earth, 0.0)

    # Distance at epoch follows from the mean anomaly at epoch
    E = solve_kepler(math.radians(357.51716), 0.0167086)
    expected_r = 149598319 * (1 - 0.0167086 * math.cos(E))
    assert np.linalg.norm(start) == pytest.approx(expected_r, rel=1e-12)

    # Nearly ecliptic orbit lies close to the display-frame XZ plane
    assert abs(start[1]) < 1e3

    after_one_period = position(earth, 365.256)
    np.testing.assert_allclose(after_one_period, start, rtol=1e-9, atol=1e-3)


def test_simulation_from_template():
    """Build a simulation and advance it"""
    from orrery.main import OrreryModel
    import numpy as np

    model = OrreryModel()
    assert model.create_system_from_template("inner_planets", **SMALL_SAMPLING)

    simulation = model.simulation
    earth = simulation.bodies.get("earth")
    start = earth.world_position.copy()

    model.advance_to(365.256)
    np.testing.assert_allclose(earth.world_position, start, rtol=1e-9, atol=1e-3)

    summary = model.get_summary()
    assert summary['clock']['elapsed_days'] == pytest.approx(365.256)
    assert summary['bodies']['sun']['stationary'] is True
    assert summary['bodies']['sun']['distance_km'] == 0.0


def test_solar_system_segment_overrides():
    """Per-body segment floors are applied by body id"""
    from orrery.main import OrreryModel

    model = OrreryModel()
    assert model.create_system_from_template("solar_system")

    bodies = model.simulation.bodies
    assert bodies.get("pluto").orbit_path.segments == 1000000
    assert bodies.get("neptune").orbit_path.segments == 50000
    assert bodies.get("phobos").orbit_path.segments == 50000
    assert bodies.get("earth").orbit_path.segments == int(10000 * (1 + 0.0167086 * 5))
    assert bodies.get("sun").orbit_path is None


def test_data_export(tmp_path):
    """Test data export functionality"""
    from orrery.main import OrreryModel
    import pandas as pd

    model = OrreryModel()
    assert model.create_system_from_template("inner_planets", **SMALL_SAMPLING)
    model.advance_to(10.0)

    exported = model.export_results(str(tmp_path), include_paths=True)

    positions = pd.read_csv(exported['positions_csv'])
    assert len(positions) == len(model.simulation.bodies)
    assert set(positions['Body_ID']) == {"sun", "mercury", "venus", "earth", "moon", "mars"}
    assert (positions['Elapsed_days'] == 10.0).all()

    with open(exported['simulation_json']) as f:
        data = json.load(f)
    assert data['metadata']['elapsed_days'] == 10.0
    assert data['configuration']['system_name'] == "Inner_Planets"
    assert "earth" in data['orbit_paths']
    assert "sun" not in data['orbit_paths']

    earth_path = pd.read_csv(exported['orbit_earth'])
    assert len(earth_path) == len(model.simulation.bodies.get("earth").orbit_path)


def test_command_line(tmp_path, capsys):
    """Test the command line interface"""
    from orrery.main import main

    assert main(["--list-templates"]) == 0
    assert "solar_system" in capsys.readouterr().out

    assert main(["--template", "inner_planets", "--rate", "3", "--frames", "10",
                 "--output", str(tmp_path)]) == 0
    out = capsys.readouterr().out
    assert "1000x faster" in out
    assert (tmp_path / "positions.csv").exists()

    assert main([str(tmp_path / "missing.yaml")]) == 1


def test_import_dependencies():
    """Test that all required modules can be imported"""
    try:
        # Core modules
        import numpy as np
        import pandas as pd
        import pydantic
        import yaml

        # Project modules
        from orrery.config.catalog_config import CatalogConfig
        from orrery.orbital.kepler import KeplerSolver
        from orrery.orbital.state_calculator import OrbitalStateCalculator
        from orrery.orbital.path_sampler import OrbitPathSampler
        from orrery.simulation.clock import SimulationClock
        from orrery.simulation.rotation import RotationIntegrator
        from orrery.simulation.engine import OrrerySimulation

        assert True

    except ImportError as e:
        pytest.fail(f"Failed to import required module: {e}")


if __name__ == "__main__":
    # Run tests directly
    pytest.main([__file__, "-v"])
