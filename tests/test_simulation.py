"""
Simulation driver and catalog configuration tests.
"""

import copy
import logging
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from orrery.config.catalog_config import CatalogConfig
from orrery.exceptions import ConvergenceError, InvalidElements
from orrery.orbital.elements import OrbitalElements
from orrery.orbital.kepler import KeplerSolver
from orrery.orbital.state_calculator import OrbitalStateCalculator
from orrery.simulation.bodies import Body, BodyCollection, FocusState
from orrery.simulation.engine import OrrerySimulation
from orrery.visualization.data_export import DataExporter


def small_system(**simulation_settings):
    """Star, one planet with a moon, and a planet with broken elements"""
    data = {
        "system_name": "Test_System",
        "bodies": [
            {"id": "star", "kind": "star", "rotation_period": 25.0},
            {
                "id": "planet",
                "orbital_elements": {
                    "semi_major_axis": 1.0e8, "eccentricity": 0.05,
                    "inclination": 2.0, "longitude_of_ascending_node": 10.0,
                    "argument_of_periapsis": 20.0, "mean_anomaly_at_epoch": 30.0,
                    "orbital_period": 200.0,
                },
                "axial_tilt": 20.0, "rotation_period": 24.0, "rotation_period_unit": "hours",
                "orbit_color": "#00ff00",
            },
            {
                "id": "moon", "kind": "satellite", "parent": "planet",
                "orbital_elements": {
                    "semi_major_axis": 4.0e5, "eccentricity": 0.0,
                    "orbital_period": 20.0,
                },
            },
            {
                "id": "rogue",
                "orbital_elements": {
                    "semi_major_axis": 2.0e8, "eccentricity": 1.5,
                    "orbital_period": 500.0,
                },
            },
        ],
        "sampling": {"base_segments": 100},
        "display": {"distance_scale": 1.0e6},
        "simulation": simulation_settings,
    }
    return CatalogConfig().validate_config(data)


class TestCatalogConfig:
    """Test catalog loading and validation"""

    def test_body_defaults(self):
        config = small_system()
        star = config.body("star")
        assert star.name == "Star"
        assert star.orbital_elements is None
        assert config.body("planet").color_value == 0x00FF00

    def test_duplicate_ids(self):
        data = small_system().model_dump(mode="json")
        data["bodies"].append(copy.deepcopy(data["bodies"][1]))
        with pytest.raises(ValueError, match="Duplicate"):
            CatalogConfig().validate_config(data)

    def test_missing_parent(self):
        data = small_system().model_dump(mode="json")
        data["bodies"][2]["parent"] = "nowhere"
        with pytest.raises(ValueError, match="nowhere"):
            CatalogConfig().validate_config(data)

    def test_bad_color(self):
        data = small_system().model_dump(mode="json")
        data["bodies"][1]["orbit_color"] = "green"
        with pytest.raises(ValueError):
            CatalogConfig().validate_config(data)

    def test_extra_fields_forbidden(self):
        data = small_system().model_dump(mode="json")
        data["renderer"] = "webgl"
        with pytest.raises(ValueError):
            CatalogConfig().validate_config(data)

    @pytest.mark.parametrize("suffix,fmt", [(".json", "json"), (".yaml", "yaml")])
    def test_save_and_load(self, tmp_path, suffix, fmt):
        catalog = CatalogConfig()
        config = catalog.create_from_template("inner_planets")
        path = tmp_path / f"system{suffix}"
        catalog.save_config(config, path, format=fmt)

        loaded = catalog.load_config(path)
        assert loaded == config

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CatalogConfig().load_config(tmp_path / "absent.yaml")

    def test_load_malformed_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("bodies: [unclosed\n")
        with pytest.raises(ValueError):
            CatalogConfig().load_config(path)

    def test_template_overrides(self):
        catalog = CatalogConfig()
        config = catalog.create_from_template("solar_system",
                                              description="Custom",
                                              sampling={"base_segments": 500})
        assert config.description == "Custom"
        assert config.sampling.base_segments == 500
        assert config.sampling.segment_overrides["pluto"] == 1000000
        # Templates are not modified by overrides
        assert catalog.templates["solar_system"]["sampling"]["base_segments"] == 10000

    def test_unknown_template(self):
        with pytest.raises(ValueError):
            CatalogConfig().create_from_template("andromeda")

    def test_summary(self):
        summary = CatalogConfig().generate_config_summary(small_system())
        assert summary["body_count"] == 4
        assert summary["orbiting_bodies"] == 3
        assert summary["stationary_bodies"] == ["star"]
        assert summary["satellites"] == {"moon": "planet"}


class TestBodyCollection:
    """Test hierarchy ordering and focus navigation"""

    def test_parents_update_first(self):
        bodies = BodyCollection([
            Body(body_id="moon", name="Moon", parent_id="planet"),
            Body(body_id="planet", name="Planet", parent_id="star"),
            Body(body_id="star", name="Star"),
        ])
        order = [body.body_id for body in bodies.update_order]
        assert order == ["star", "planet", "moon"]
        assert [body.body_id for body in bodies] == ["moon", "planet", "star"]

    def test_duplicate_body(self):
        bodies = BodyCollection([Body(body_id="a", name="A")])
        with pytest.raises(ValueError):
            bodies.add(Body(body_id="a", name="Again"))

    def test_unknown_body(self):
        with pytest.raises(KeyError):
            BodyCollection().get("ghost")

    def test_focus_navigation(self):
        bodies = BodyCollection([Body(body_id=name, name=name) for name in ["a", "b", "c"]])
        focus = FocusState(bodies)
        assert focus.focused is None

        assert focus.next().body_id == "a"
        assert focus.next().body_id == "b"
        assert focus.previous().body_id == "a"
        assert focus.previous().body_id == "c"
        assert focus.next().body_id == "a"

        focus.focus(99)
        assert focus.focused.body_id == "a"
        assert focus.focus_on("c").body_id == "c"
        focus.clear()
        assert focus.previous().body_id == "c"

    def test_rejected_cycle_leaves_collection_unchanged(self):
        bodies = BodyCollection([Body(body_id="a", name="A", parent_id="b")])
        order = bodies.update_order
        with pytest.raises(ValueError, match="cycle"):
            bodies.add(Body(body_id="b", name="B", parent_id="a"))

        assert len(bodies) == 1
        assert "b" not in bodies
        assert bodies.update_order == order
        bodies.add(Body(body_id="b", name="B"))
        assert [body.body_id for body in bodies.update_order] == ["b", "a"]

    def test_bodies_compare_by_identity(self):
        first = Body(body_id="a", name="A")
        twin = Body(body_id="a", name="A")
        assert first == first
        assert first != twin


class TestOrrerySimulation:
    """Test the per-frame driver"""

    def test_build(self):
        simulation = OrrerySimulation.from_config(small_system())

        star = simulation.bodies.get("star")
        assert star.is_stationary
        assert star.orbit_path is None
        np.testing.assert_array_equal(star.world_position, np.zeros(3))

        planet = simulation.bodies.get("planet")
        assert planet.orbit_path is not None
        assert planet.orbit_path.color == 0x00FF00
        assert planet.orbit_path.closure_gap <= 0.001

    def test_invalid_body_kept_stationary(self):
        simulation = OrrerySimulation.from_config(small_system())
        rogue = simulation.bodies.get("rogue")
        assert rogue.is_stationary
        assert isinstance(rogue.error, InvalidElements)
        assert rogue.orbit_path is None
        np.testing.assert_array_equal(rogue.world_position, np.zeros(3))
        assert set(simulation.failed_bodies()) == {"rogue"}

    def test_invalid_body_raises(self):
        with pytest.raises(InvalidElements):
            OrrerySimulation.from_config(small_system(invalid_elements="raise"))

    def test_satellite_follows_parent(self):
        simulation = OrrerySimulation.from_config(small_system())
        simulation.advance_to(37.5)

        planet = simulation.bodies.get("planet")
        moon = simulation.bodies.get("moon")
        np.testing.assert_allclose(moon.world_position, planet.world_position + moon.state.position)
        assert np.linalg.norm(moon.world_position - planet.world_position) == pytest.approx(4.0e5)

        expected = simulation.calculator.position(planet.elements, 37.5)
        np.testing.assert_array_equal(planet.world_position, expected)

    def test_update_advances_clock_and_spin(self):
        simulation = OrrerySimulation.from_config(small_system(rate_slider=4))
        planet = simulation.bodies.get("planet")
        start = planet.world_position.copy()

        frame = simulation.update(1.0)
        assert frame.delta_days == pytest.approx(1e4 / 86400)
        assert frame.accumulated_days == pytest.approx(1e4 / 86400)
        assert not frame.errors
        assert not np.allclose(planet.world_position, start)
        assert not np.allclose(planet.orientation, [1, 0, 0, 0])
        assert np.linalg.norm(planet.orientation) == pytest.approx(1.0)

    def test_paused_update(self):
        simulation = OrrerySimulation.from_config(small_system(paused=True))
        planet = simulation.bodies.get("planet")
        start = planet.world_position.copy()
        orientation = planet.orientation.copy()

        frame = simulation.update(10.0)
        assert frame.delta_days == 0.0
        assert simulation.clock.accumulated_days == 0.0
        np.testing.assert_array_equal(planet.world_position, start)
        np.testing.assert_array_equal(planet.orientation, orientation)

        assert simulation.toggle_pause() is False
        assert simulation.update(10.0).delta_days > 0

    def test_advance_to_rejects_rewind(self):
        simulation = OrrerySimulation.from_config(small_system())
        simulation.advance_to(5.0)
        with pytest.raises(ValueError):
            simulation.advance_to(1.0)

    def test_convergence_failure_keeps_position(self, caplog):
        simulation = OrrerySimulation.from_config(small_system())
        simulation.calculator = OrbitalStateCalculator(solver=KeplerSolver(max_iterations=1))
        planet = simulation.bodies.get("planet")
        moon = simulation.bodies.get("moon")
        start = planet.world_position.copy()

        with caplog.at_level(logging.WARNING):
            frame = simulation.update(3600.0)

        assert set(frame.errors) == {"planet"}
        assert isinstance(planet.error, ConvergenceError)
        assert isinstance(frame.errors["planet"], ConvergenceError)
        np.testing.assert_array_equal(planet.world_position, start)
        assert "planet" in caplog.text
        # Circular moon converges on the first step and still follows its parent
        assert moon.error is None
        np.testing.assert_allclose(moon.world_position, start + moon.state.position)
        assert "planet" in simulation.failed_bodies()

    def test_path_sampling_failure(self, caplog):
        simulation = OrrerySimulation.from_config(small_system())
        simulation.sampler.solver = KeplerSolver(max_iterations=1)

        with caplog.at_level(logging.ERROR):
            planet = simulation.rebuild_path("planet")

        assert planet.orbit_path is None
        assert isinstance(planet.error, ConvergenceError)
        assert "planet" in caplog.text

    def test_set_elements_rebuilds_path(self):
        simulation = OrrerySimulation.from_config(small_system())
        old_path = simulation.bodies.get("planet").orbit_path

        new_elements = OrbitalElements(
            semi_major_axis=3.0e8, eccentricity=0.3, inclination=0.0,
            longitude_of_ascending_node=0.0, argument_of_periapsis=0.0,
            mean_anomaly_at_epoch=0.0, orbital_period=900.0,
        )
        planet = simulation.set_elements("planet", new_elements)
        assert planet.orbit_path is not old_path
        assert planet.orbit_path.segments == int(100 * (1 + 0.3 * 5)) * 2
        assert np.linalg.norm(planet.world_position) == pytest.approx(3.0e8 * 0.7)

    def test_snapshot_scene_units(self):
        simulation = OrrerySimulation.from_config(small_system())
        snapshot = {snap.body_id: snap for snap in simulation.snapshot()}
        planet = snapshot["planet"]
        np.testing.assert_allclose(planet.position_scene, planet.position_km / 1.0e6)
        assert snapshot["star"].stationary

    def test_export(self, tmp_path):
        import pandas as pd

        simulation = OrrerySimulation.from_config(small_system())
        exporter = DataExporter(tmp_path / "out")
        times, positions = simulation.calculator.create_time_series(
            simulation.bodies.get("planet").elements, 0.0, 200.0, 10.0)

        path = exporter.export_ephemeris_csv("planet", times, positions, filename="planet.csv")
        df = pd.read_csv(path)
        assert len(df) == 21
        np.testing.assert_allclose(df['Distance_km'], np.linalg.norm(positions, axis=1))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
