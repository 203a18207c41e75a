# position_seed/sphere.py

"""
================================================================================
SPHERICAL PROJECTION
================================================================================
Maps latitude/longitude in degrees onto the unit sphere so that a full planet
can be sampled with 3-D noise without a seam.

    theta = lat * pi / 180, phi = lon * pi / 180
    x = cos(theta) cos(phi), y = cos(theta) sin(phi), z = sin(theta)

Data Contract:
---------------
- lat must be finite and within [-90, 90]; lon must be finite (any value).
- Longitude is wrapped to [-180, 180) before the trigonometry, so lon = 180
  and lon = -180 give bit-identical points.
- Outputs have unit norm to within floating-point rounding.
- Side Effects: None.
================================================================================
"""

import math

import numpy as np

from .errors import InvalidCoordinate


def normalize_longitude(lon_deg: float) -> float:
    """Wraps a longitude into [-180, 180)."""
    return ((lon_deg + 180.0) % 360.0) - 180.0


def _check_lat_lon(lat_deg, lon_deg) -> None:
    if not (math.isfinite(lat_deg) and math.isfinite(lon_deg)):
        raise InvalidCoordinate(f"Latitude/longitude must be finite, got ({lat_deg}, {lon_deg})")
    if not -90.0 <= lat_deg <= 90.0:
        raise InvalidCoordinate(f"Latitude must be within [-90, 90], got {lat_deg}")


def to_unit_sphere(lat_deg: float, lon_deg: float) -> tuple:
    """Unit-sphere (x, y, z) for a latitude/longitude in degrees."""
    lat_deg = float(lat_deg)
    lon_deg = float(lon_deg)
    _check_lat_lon(lat_deg, lon_deg)

    theta = math.radians(lat_deg)
    phi = math.radians(normalize_longitude(lon_deg))
    cos_theta = math.cos(theta)
    return (cos_theta * math.cos(phi), cos_theta * math.sin(phi), math.sin(theta))


def lat_lon_grid(lat_resolution: int, lon_resolution: int) -> tuple:
    """
    Latitude/longitude grids covering the whole sphere.

    Rows run from +90 (north pole) to -90, columns from -180 to 180 inclusive
    so the seam column is present on both edges.
    """
    lats = np.linspace(90.0, -90.0, lat_resolution)
    lons = np.linspace(-180.0, 180.0, lon_resolution)
    return np.meshgrid(lats, lons, indexing='ij')


def lat_lon_grid_to_sphere(lat_grid: np.ndarray, lon_grid: np.ndarray) -> np.ndarray:
    """Vectorized to_unit_sphere; returns an array of shape lat_grid.shape + (3,)."""
    lat = np.asarray(lat_grid, dtype=np.float64)
    lon = np.asarray(lon_grid, dtype=np.float64)
    if lat.shape != lon.shape:
        raise InvalidCoordinate(f"Latitude and longitude grids differ in shape: {lat.shape} vs {lon.shape}")
    if not (np.isfinite(lat).all() and np.isfinite(lon).all()):
        raise InvalidCoordinate("Latitude/longitude grids contain non-finite values")
    if (np.abs(lat) > 90.0).any():
        raise InvalidCoordinate("Latitude grid has values outside [-90, 90]")

    theta = np.radians(lat)
    phi = np.radians(((lon + 180.0) % 360.0) - 180.0)
    cos_theta = np.cos(theta)
    return np.stack([cos_theta * np.cos(phi), cos_theta * np.sin(phi), np.sin(theta)], axis=-1)
