"""
Data Export
===========

Handles data export for simulation output in CSV and JSON formats.

Exports body position snapshots, ephemeris time series and sampled orbit
paths so they can be inspected or plotted outside the host application.

Classes:
    DataExporter: Main data export class
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Any, Union

import numpy as np
import pandas as pd

from ..orbital.path_sampler import OrbitPath


class DataExporter:
    """Main data export class"""

    def __init__(self, export_dir: Union[str, Path] = "exports"):
        """
        Initialize data exporter

        Args:
            export_dir: Directory receiving exported files (created if missing)
        """
        self.export_dir = Path(export_dir)
        self.export_dir.mkdir(parents=True, exist_ok=True)

    def _filepath(self, filename: Optional[str], prefix: str, suffix: str) -> Path:
        if filename is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"{prefix}_{timestamp}{suffix}"
        return self.export_dir / filename

    @staticmethod
    def snapshot_frame(snapshot: List[Any]) -> pd.DataFrame:
        """
        Tabulate body snapshots

        Args:
            snapshot: BodySnapshot list from OrrerySimulation.snapshot()

        Returns:
            One row per body
        """
        rows = []
        for body in snapshot:
            rows.append({
                'Body_ID': body.body_id,
                'Name': body.name,
                'Parent': body.parent_id,
                'X_km': body.position_km[0],
                'Y_km': body.position_km[1],
                'Z_km': body.position_km[2],
                'Distance_km': float(np.linalg.norm(body.position_km)),
                'X_scene': body.position_scene[0],
                'Y_scene': body.position_scene[1],
                'Z_scene': body.position_scene[2],
                'Q_w': body.orientation[0],
                'Q_x': body.orientation[1],
                'Q_y': body.orientation[2],
                'Q_z': body.orientation[3],
                'Stationary': body.stationary,
            })
        return pd.DataFrame(rows)

    def export_snapshot_csv(self, snapshot: List[Any], elapsed_days: float,
                            filename: str = None) -> str:
        """
        Export body positions to CSV

        Args:
            snapshot: BodySnapshot list
            elapsed_days: Simulation time of the snapshot
            filename: Optional custom filename

        Returns:
            Path to exported file
        """
        filepath = self._filepath(filename, "positions", ".csv")
        df = self.snapshot_frame(snapshot)
        df.insert(0, 'Elapsed_days', elapsed_days)
        df.to_csv(filepath, index=False)
        return str(filepath)

    def export_ephemeris_csv(self, body_id: str, times: np.ndarray, positions: np.ndarray,
                             filename: str = None) -> str:
        """
        Export a position time series to CSV

        Args:
            body_id: Body identifier
            times: Elapsed days per sample
            positions: (N, 3) positions in km
            filename: Optional custom filename

        Returns:
            Path to exported file
        """
        filepath = self._filepath(filename, f"ephemeris_{body_id}", ".csv")
        positions = np.asarray(positions).reshape(-1, 3)
        df = pd.DataFrame({
            'Elapsed_days': np.asarray(times),
            'X_km': positions[:, 0],
            'Y_km': positions[:, 1],
            'Z_km': positions[:, 2],
            'Distance_km': np.linalg.norm(positions, axis=1),
        })
        df.to_csv(filepath, index=False)
        return str(filepath)

    def export_orbit_path_csv(self, path: OrbitPath, filename: str = None) -> str:
        """
        Export orbit path points to CSV

        Args:
            path: Sampled orbit path
            filename: Optional custom filename

        Returns:
            Path to exported file
        """
        filepath = self._filepath(filename, f"orbit_{path.body_id or 'path'}", ".csv")
        df = pd.DataFrame(path.points, columns=['X_scene', 'Y_scene', 'Z_scene'])
        df.index.name = 'Point'
        df.to_csv(filepath)
        return str(filepath)

    def export_json(self, snapshot: List[Any], elapsed_days: float,
                    summary: Optional[Dict[str, Any]] = None,
                    paths: Optional[Dict[str, OrbitPath]] = None,
                    filename: str = None) -> str:
        """
        Export a snapshot (and optional orbit path metadata) to JSON

        Args:
            snapshot: BodySnapshot list
            elapsed_days: Simulation time of the snapshot
            summary: Optional configuration summary
            paths: Optional orbit paths by body id
            filename: Optional custom filename

        Returns:
            Path to exported file
        """
        filepath = self._filepath(filename, "simulation", ".json")

        export_data = {
            'metadata': {
                'export_timestamp': datetime.now().isoformat(),
                'elapsed_days': elapsed_days,
                'data_format_version': '1.0',
            },
            'bodies': self.snapshot_frame(snapshot).to_dict(orient='records'),
        }
        if summary is not None:
            export_data['configuration'] = summary
        if paths:
            export_data['orbit_paths'] = {
                body_id: {
                    'segments': path.segments,
                    'points': len(path),
                    'color': f"#{path.color:06x}",
                    'closure_gap': path.closure_gap,
                }
                for body_id, path in paths.items()
            }

        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(export_data, f, indent=2, default=str)

        return str(filepath)
