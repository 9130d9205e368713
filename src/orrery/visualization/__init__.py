"""
Visualization Module

This module provides data export of positions, ephemerides and orbit paths
for external plotting and inspection.
"""

from .data_export import DataExporter

__all__ = ["DataExporter"]
