"""
Keplerian Orrery - Main Interface

This module provides the main interface for the orrery engine. It ties the
catalog configuration, the simulation driver and data export together and
exposes a high-level API and a command line interface.

Usage:
    from orrery.main import OrreryModel

    model = OrreryModel()
    model.create_system_from_template('solar_system')
    model.run_frames(600, fps=60.0)
    model.export_results('results/')
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Any

import numpy as np

from .config.catalog_config import CatalogConfig, SystemConfig
from .exceptions import OrreryError
from .simulation.clock import rate_label
from .simulation.engine import OrrerySimulation, BodySnapshot
from .visualization.data_export import DataExporter


# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class OrreryModel:
    """
    Main interface for the orrery engine.

    Features:
    - Catalog loading from files or templates
    - Frame-by-frame or direct-to-date simulation
    - Position and orbit path export
    - Configuration summaries
    """

    def __init__(self, config: Optional[SystemConfig] = None,
                 log_level: str = "INFO"):
        """
        Initialize orrery model

        Args:
            config: System configuration
            log_level: Logging level
        """
        logging.getLogger("orrery").setLevel(getattr(logging, log_level.upper()))

        self.config = config
        self.catalog = CatalogConfig()
        self.simulation: Optional[OrrerySimulation] = None
        self.is_initialized = False

        if config:
            self._build_simulation()

    def load_system(self, filepath: str) -> bool:
        """
        Load a body catalog from file

        Args:
            filepath: Path to configuration file

        Returns:
            True if successful
        """
        try:
            logger.info(f"Loading catalog from {filepath}")
            self.config = self.catalog.load_config(filepath)
            self._build_simulation()
            logger.info("Catalog loaded successfully")
            return True

        except (OSError, ValueError, OrreryError) as e:
            logger.error(f"Failed to load catalog: {e}")
            return False

    def create_system_from_template(self, template_name: str, **kwargs) -> bool:
        """
        Create a system from a built-in template

        Args:
            template_name: Name of template
            **kwargs: Configuration overrides

        Returns:
            True if successful
        """
        try:
            logger.info(f"Creating system from template: {template_name}")
            self.config = self.catalog.create_from_template(template_name, **kwargs)
            self._build_simulation()
            logger.info("System created successfully")
            return True

        except (ValueError, OrreryError) as e:
            logger.error(f"Failed to create system: {e}")
            return False

    def _build_simulation(self):
        """Build the simulation from the current configuration"""
        if not self.config:
            raise ValueError("No configuration loaded")

        self.simulation = OrrerySimulation.from_config(self.config)
        self.is_initialized = True

        for body_id, error in self.simulation.failed_bodies().items():
            logger.warning(f"Body '{body_id}' is stationary: {error}")

    def _require_simulation(self) -> OrrerySimulation:
        if self.simulation is None:
            raise ValueError("No system loaded. Load a catalog or template first.")
        return self.simulation

    def run_frames(self, frames: int, fps: float = 60.0) -> float:
        """
        Run a number of frames at a fixed frame rate

        Args:
            frames: Number of frames
            fps: Frames per real second

        Returns:
            Accumulated simulation days
        """
        simulation = self._require_simulation()
        if fps <= 0:
            raise ValueError(f"Frame rate must be positive, got {fps}")

        frame_delta = 1.0 / fps
        for _ in range(frames):
            update = simulation.update(frame_delta)
            for body_id, error in update.errors.items():
                logger.error(f"Frame at day {update.accumulated_days:.4f}: {body_id}: {error}")

        logger.info(f"Ran {frames} frames; simulation at day {simulation.clock.accumulated_days:.6f}")
        return simulation.clock.accumulated_days

    def advance_to(self, elapsed_days: float) -> float:
        """Jump the simulation straight to elapsed_days"""
        simulation = self._require_simulation()
        simulation.advance_to(elapsed_days)
        return simulation.clock.accumulated_days

    def set_rate_slider(self, value: float) -> str:
        """Set the time-rate slider; returns the rate label"""
        rate = self._require_simulation().set_rate_slider(value)
        return rate_label(rate)

    def positions(self) -> List[BodySnapshot]:
        return self._require_simulation().snapshot()

    def get_summary(self) -> Dict[str, Any]:
        """
        Summarize the current simulation state

        Returns:
            Dictionary with clock state and per-body distances
        """
        simulation = self._require_simulation()
        clock = simulation.clock
        return {
            'clock': {
                'elapsed_days': clock.accumulated_days,
                'rate_multiplier': clock.rate_multiplier,
                'rate_label': rate_label(clock.rate_multiplier),
                'paused': clock.paused,
            },
            'bodies': {
                snap.body_id: {
                    'distance_km': float(np.linalg.norm(snap.position_km)),
                    'stationary': snap.stationary,
                }
                for snap in simulation.snapshot()
            },
            'failed_bodies': {body_id: str(e) for body_id, e in simulation.failed_bodies().items()},
        }

    def export_results(self, output_dir: str = "results",
                       include_paths: bool = False) -> Dict[str, str]:
        """
        Export positions (and optionally orbit paths) to files

        Args:
            output_dir: Output directory
            include_paths: Also write one CSV per orbit path

        Returns:
            Exported file paths by kind
        """
        simulation = self._require_simulation()
        exporter = DataExporter(output_dir)
        days = simulation.clock.accumulated_days
        snapshot = simulation.snapshot()
        paths = {body.body_id: body.orbit_path for body in simulation.bodies
                 if body.orbit_path is not None}

        exported = {
            'positions_csv': exporter.export_snapshot_csv(snapshot, days, filename="positions.csv"),
            'simulation_json': exporter.export_json(
                snapshot, days,
                summary=self.catalog.generate_config_summary(self.config),
                paths=paths,
                filename="simulation.json"),
        }
        if include_paths:
            for body_id, path in paths.items():
                exported[f'orbit_{body_id}'] = exporter.export_orbit_path_csv(
                    path, filename=f"orbit_{body_id}.csv")

        logger.info(f"Exported {len(exported)} files to {Path(output_dir)}")
        return exported

    def list_available_templates(self) -> List[str]:
        return self.catalog.list_templates()

    def get_configuration_info(self) -> Dict[str, Any]:
        if not self.config:
            return {"status": "No configuration loaded"}
        return self.catalog.generate_config_summary(self.config)


def main(argv: Optional[List[str]] = None):
    """Command line interface for the orrery engine"""
    import argparse

    parser = argparse.ArgumentParser(description="Keplerian Orrery Engine")
    parser.add_argument("config", nargs="?", help="Catalog file path (.json/.yaml)")
    parser.add_argument("--template", help="Create system from template")
    parser.add_argument("--list-templates", action="store_true", help="List available templates")
    parser.add_argument("--frames", type=int, default=0, help="Number of frames to run")
    parser.add_argument("--fps", type=float, default=60.0, help="Frames per real second")
    parser.add_argument("--rate", type=float, default=None, help="Logarithmic time-rate slider value")
    parser.add_argument("--days", type=float, default=None, help="Jump to this many simulation days")
    parser.add_argument("--output", "-o", help="Export results to this directory")
    parser.add_argument("--paths", action="store_true", help="Also export orbit paths")
    parser.add_argument("--log-level", default="INFO", help="Logging level")

    args = parser.parse_args(argv)

    model = OrreryModel(log_level=args.log_level)

    # List templates
    if args.list_templates:
        print("Available templates:")
        for template in model.list_available_templates():
            print(f"  - {template}")
        return 0

    # Create from template or load configuration
    if args.template:
        success = model.create_system_from_template(args.template)
    elif args.config:
        success = model.load_system(args.config)
    else:
        parser.error("a catalog file or --template is required")

    if not success:
        print("Failed to load configuration")
        return 1

    if args.rate is not None:
        print(f"Time rate: {model.set_rate_slider(args.rate)}")

    if args.days is not None:
        model.advance_to(args.days)
    if args.frames:
        model.run_frames(args.frames, fps=args.fps)

    summary = model.get_summary()
    print("\nSimulation Summary:")
    print(f"  Elapsed: {summary['clock']['elapsed_days']:.6f} days ({summary['clock']['rate_label']})")
    for body_id, info in summary['bodies'].items():
        state = "stationary" if info['stationary'] else f"{info['distance_km']:.1f} km"
        print(f"  {body_id:>10}: {state}")
    for body_id, error in summary['failed_bodies'].items():
        print(f"  ! {body_id}: {error}")

    if args.output:
        print("Exporting results...")
        exported = model.export_results(args.output, include_paths=args.paths)
        for kind, path in exported.items():
            print(f"  {kind}: {path}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
