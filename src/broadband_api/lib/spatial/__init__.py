"""Spatial indexing library — maps coordinates to fixed-resolution H3 cells.

Public API:
    - H3_RESOLUTION: The system-wide cell resolution
    - cell_for: Convert (lat, lng) to an H3 cell id
    - validate_coordinates: Range-check a latitude/longitude pair
"""

from broadband_api.lib.spatial.indexer import H3_RESOLUTION, cell_for, validate_coordinates

__all__ = [
    "H3_RESOLUTION",
    "cell_for",
    "validate_coordinates",
]
