"""
Configuration Module

This module provides tools for loading, validating and templating body
catalogs.
"""

from .catalog_config import CatalogConfig, SystemConfig, BodyConfig

__all__ = ["CatalogConfig", "SystemConfig", "BodyConfig"]
